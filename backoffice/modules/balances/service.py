"""
Servicios de Saldos

El saldo del vendedor se calcula leyendo siempre las notas y los pagos; no
hay un saldo guardado que se pueda desincronizar.

- historic_debt: suma de total_price de las notas delivered/received
- total_payments: suma de las notas de pago aprobadas del vendedor
- current_debt: historic_debt - total_payments (puede ser negativo)
"""

from decimal import Decimal
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Iterable, List, Optional
from uuid import UUID
import logging

from backoffice.core.clock import Clock, system_clock
from backoffice.core.exceptions import SellerNotFound
from backoffice.modules.balances.schemas import SellerBalance, SellerBalanceRow, Statement
from backoffice.modules.exit_notes.crud import NoteStore
from backoffice.modules.exit_notes.models import DEBT_STATUSES, ExitNote, ExitNoteStatus
from backoffice.modules.exit_notes.schemas import ExitNoteOut
from backoffice.modules.payments.crud import PaymentRecordStore
from backoffice.modules.payments.models import PaymentRecord, PaymentStatus
from backoffice.modules.payments.schemas import PaymentRecordOut
from backoffice.modules.sellers.crud import SellerDirectory
from backoffice.modules.sellers.schemas import SellerOut

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def summarize(seller_id: UUID, notes: Iterable[ExitNote], payments: Iterable[PaymentRecord]) -> SellerBalance:
    historic_debt = sum((n.total_price for n in notes if n.is_debt), ZERO)
    total_payments = sum(
        (p.amount for p in payments if p.status == PaymentStatus.APPROVED and p.seller_id == seller_id),
        ZERO
    )
    return SellerBalance(
        seller_id=seller_id,
        historic_debt=historic_debt,
        total_payments=total_payments,
        current_debt=historic_debt - total_payments
    )


class BalanceCalculator:
    """Calculadora de saldos de vendedores"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notes = NoteStore(db)
        self.payments = PaymentRecordStore(db)
        self.sellers = SellerDirectory(db)

    async def compute_balance(self, seller_id: UUID) -> SellerBalance:
        """
        Saldo de un vendedor.

        Un id desconocido devuelve saldo en cero: las notas y pagos se
        buscan por filtro y simplemente no hay resultados.
        """
        notes = await self.notes.get_by_seller(seller_id)
        payments = await self.payments.get_by_seller(seller_id)
        return summarize(seller_id, notes, payments)

    async def _debt_by_seller(self) -> Dict[UUID, Decimal]:
        result = await self.db.execute(
            select(ExitNote.seller_id, func.sum(ExitNote.total_price))
            .where(ExitNote.status.in_(DEBT_STATUSES))
            .group_by(ExitNote.seller_id)
        )
        return {seller_id: Decimal(str(total or 0)) for seller_id, total in result.all()}

    async def _payments_by_seller(self) -> Dict[UUID, Decimal]:
        result = await self.db.execute(
            select(PaymentRecord.seller_id, func.sum(PaymentRecord.amount))
            .where(PaymentRecord.status == PaymentStatus.APPROVED, PaymentRecord.seller_id.is_not(None))
            .group_by(PaymentRecord.seller_id)
        )
        return {seller_id: Decimal(str(total or 0)) for seller_id, total in result.all()}

    async def list_balances(self, search: Optional[str] = None) -> List[SellerBalanceRow]:
        """Saldo de todos los vendedores, con búsqueda opcional por nombre o email"""
        sellers = await self.sellers.get_all()
        if search:
            term = search.strip().lower()
            sellers = [s for s in sellers if term in s.name.lower() or term in (s.email or "").lower()]

        debts = await self._debt_by_seller()
        paid = await self._payments_by_seller()

        rows = []
        for seller in sorted(sellers, key=lambda s: s.name.lower()):
            historic_debt = debts.get(seller.id, ZERO)
            total_payments = paid.get(seller.id, ZERO)
            rows.append(SellerBalanceRow(
                seller_id=seller.id,
                name=seller.name,
                email=seller.email,
                slug=seller.slug,
                historic_debt=historic_debt,
                total_payments=total_payments,
                current_debt=historic_debt - total_payments
            ))
        return rows


class StatementService:
    """Estado de cuenta del vendedor"""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.notes = NoteStore(db)
        self.payments = PaymentRecordStore(db)
        self.sellers = SellerDirectory(db)

    async def build_statement(self, seller_id: UUID) -> Statement:
        seller = await self.sellers.get_by_id(seller_id)
        if not seller:
            raise SellerNotFound(seller_id)

        notes = await self.notes.get_by_seller(seller_id)
        payments = await self.payments.get_by_seller(seller_id)
        approved = [p for p in payments if p.status == PaymentStatus.APPROVED]

        received = [n for n in notes if n.is_debt]
        sent = [n for n in notes if not n.is_debt and n.status != ExitNoteStatus.CANCELLED]

        logger.debug(f"Statement for {seller.name}: {len(received)} received, {len(sent)} sent, {len(approved)} payments")
        return Statement(
            seller=SellerOut.model_validate(seller),
            received_notes=[ExitNoteOut.model_validate(n) for n in received],
            sent_notes=[ExitNoteOut.model_validate(n) for n in sent],
            payments=[PaymentRecordOut.model_validate(p) for p in approved],
            balance=summarize(seller.id, notes, approved),
            generated_at=self.clock.now()
        )

"""
Servicios de Pagos

PaymentAllocator aplica pagos a las notas de salida:
- pay_note: pago a una nota concreta (sin tope contra lo pendiente)
- pay_global: pago global repartido de la nota más antigua a la más nueva

La mutación de las notas es la fuente autoritativa de la deuda y se confirma
en una sola transacción con las filas bloqueadas. La nota de pago (auditoría)
se escribe después en otra transacción; si falla se registra en el log y no
se propaga.

PaymentRecordService administra las notas de pago manuales (pendientes de
aprobación) de vendedores y clientes de mostrador.
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Sequence
from uuid import UUID
import logging

from backoffice.core.clock import Clock, system_clock
from backoffice.core.config import settings
from backoffice.core.exceptions import (
    InvalidStatusTransition, NoteNotFound, PaymentRecordNotFound,
    PaymentRecordWriteFailure, SellerNotFound, StoreWriteFailure
)
from backoffice.modules.exit_notes.crud import NoteStore
from backoffice.modules.exit_notes.models import ExitNote
from backoffice.modules.payments.calculator import (
    AllocationPlan, derive_payment_status, is_outstanding, plan_allocation, to_amount
)
from backoffice.modules.payments.crud import PaymentRecordStore
from backoffice.modules.payments.models import (
    PaymentKind, PaymentMethod, PaymentRecord, PaymentSourceType, PaymentStatus
)
from backoffice.modules.payments.schemas import PaymentRecordCreate
from backoffice.modules.sellers.crud import SellerDirectory

logger = logging.getLogger(__name__)


class PaymentAllocator:
    """Asignador de pagos a notas de salida"""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock, epsilon: Optional[Decimal] = None):
        self.db = db
        self.clock = clock
        self.epsilon = settings.PAYMENT_EPSILON if epsilon is None else epsilon
        self.notes = NoteStore(db)
        self.payments = PaymentRecordStore(db)
        self.sellers = SellerDirectory(db)

    def _apply(self, note: ExitNote, to_pay: Decimal) -> None:
        note.amount_paid = (note.amount_paid or Decimal("0")) + to_pay
        note.payment_status = derive_payment_status(note.amount_paid, note.total_price, self.epsilon)

    async def _commit_notes(self, operation: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error saving {operation}: {e}", exc_info=True)
            raise StoreWriteFailure(operation, e)

    @staticmethod
    def _record_notes(summary: str, notes: Optional[str]) -> str:
        return f"{summary}. {notes}" if notes else summary

    async def _record(self, reload: Sequence[ExitNote] = (), **fields) -> Optional[PaymentRecord]:
        """
        Escribe la nota de pago de auditoría; nunca propaga errores.

        El rollback expira las notas ya confirmadas; `reload` indica cuáles
        volver a leer para que el llamador pueda seguir usándolas.
        """
        try:
            try:
                record = await self.payments.create(**fields)
                await self.db.commit()
                return record
            except SQLAlchemyError as e:
                await self.db.rollback()
                for note in reload:
                    await self.db.refresh(note)
                raise PaymentRecordWriteFailure(e)
        except PaymentRecordWriteFailure as failure:
            logger.warning(
                f"Payment record not saved (seller={fields.get('seller_id')}, "
                f"amount={fields.get('amount')}): {failure.error}"
            )
            return None

    async def pay_note(
        self,
        note_id: UUID,
        amount,
        method: PaymentMethod = PaymentMethod.CASH,
        reference: Optional[str] = None,
        approved_by: Optional[str] = None,
        notes: Optional[str] = None
    ) -> tuple[ExitNote, Optional[PaymentRecord]]:
        """
        Registrar un pago a una nota de salida.

        No hay tope: se puede pagar más o menos que lo pendiente.

        Returns:
            (nota actualizada, nota de pago o None si no se pudo registrar)
        """
        amount = to_amount(amount)

        note = await self.notes.lock(note_id)
        if not note:
            raise NoteNotFound(note_id)

        self._apply(note, amount)
        await self._commit_notes("pago de nota")
        logger.info(
            f"Payment of {amount} applied to note {note.number}: "
            f"paid={note.amount_paid}/{note.total_price} ({note.payment_status.value})"
        )

        record = await self._record(
            reload=[note],
            source_type=PaymentSourceType.SELLER,
            kind=PaymentKind.NOTE,
            seller_id=note.seller_id,
            seller_name=note.seller_name,
            exit_note_id=note.id,
            exit_note_number=note.number,
            amount=amount,
            method=method,
            status=PaymentStatus.APPROVED,
            approved_at=self.clock.now(),
            approved_by=approved_by,
            reference=reference,
            notes=self._record_notes(f"Pago a nota de salida {note.number}", notes)
        )
        return note, record

    async def pay_global(
        self,
        seller_id: UUID,
        amount,
        method: PaymentMethod = PaymentMethod.CASH,
        reference: Optional[str] = None,
        approved_by: Optional[str] = None,
        notes: Optional[str] = None
    ) -> tuple[AllocationPlan, Optional[PaymentRecord]]:
        """
        Repartir un pago global entre las notas pendientes del vendedor.

        Las notas se bloquean y se recorren de la más antigua a la más nueva.
        Todas las asignaciones se confirman juntas. Se escribe una sola nota
        de pago por el monto completo, aunque no haya notas pendientes.

        Returns:
            (plan con notes_paid_count y remainder, nota de pago o None)
        """
        amount = to_amount(amount)

        seller = await self.sellers.get_by_id(seller_id)
        if not seller:
            raise SellerNotFound(seller_id)

        outstanding = [n for n in await self.notes.get_by_seller(seller_id, for_update=True) if is_outstanding(n)]
        plan = plan_allocation(outstanding, amount, self.epsilon)

        for note, to_pay in plan.allocations:
            self._apply(note, to_pay)
            logger.debug(f"Global payment: {to_pay} to note {note.number} ({note.payment_status.value})")

        # Sin asignaciones el commit solo libera los bloqueos
        await self._commit_notes("pago global")

        logger.info(
            f"Global payment of {amount} for {seller.name}: "
            f"{plan.notes_paid_count} notes paid, remainder={plan.remainder}"
        )

        record = await self._record(
            source_type=PaymentSourceType.SELLER,
            kind=PaymentKind.GLOBAL,
            seller_id=seller.id,
            seller_name=seller.name,
            amount=amount,
            method=method,
            status=PaymentStatus.APPROVED,
            approved_at=self.clock.now(),
            approved_by=approved_by,
            reference=reference,
            notes=self._record_notes(f"Pago global aplicado a {plan.notes_paid_count} notas", notes)
        )
        return plan, record


class PaymentRecordService:
    """Administración de notas de pago"""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.payments = PaymentRecordStore(db)
        self.sellers = SellerDirectory(db)

    @asynccontextmanager
    async def _writing(self, operation: str):
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error saving {operation}: {e}", exc_info=True)
            raise StoreWriteFailure(operation, e)

    async def create_manual(self, payment_data: PaymentRecordCreate) -> PaymentRecord:
        """Registrar una nota de pago manual, pendiente de aprobación"""
        amount = to_amount(payment_data.amount)

        source_type = PaymentSourceType(payment_data.source_type.value)
        fields = {}
        if source_type == PaymentSourceType.SELLER:
            seller = await self.sellers.get_by_id(payment_data.seller_id)
            if not seller:
                raise SellerNotFound(payment_data.seller_id)
            fields.update(seller_id=seller.id, seller_name=seller.name)
        else:
            fields.update(customer_id=payment_data.customer_id, customer_name=payment_data.customer_name)

        async with self._writing("nota de pago"):
            record = await self.payments.create(
                source_type=source_type,
                kind=PaymentKind.MANUAL,
                amount=amount,
                method=PaymentMethod(payment_data.method.value),
                status=PaymentStatus.PENDING,
                reference=payment_data.reference,
                notes=payment_data.notes,
                **fields
            )

        logger.info(f"Manual payment record {record.number} created: amount={amount}")
        return record

    async def get_payment(self, payment_id: UUID) -> PaymentRecord:
        record = await self.payments.get_by_id(payment_id)
        if not record:
            raise PaymentRecordNotFound(payment_id)
        return record

    async def list_payments(self, status: Optional[PaymentStatus] = None) -> List[PaymentRecord]:
        return await self.payments.get_all(status)

    async def list_pending(self) -> List[PaymentRecord]:
        return await self.payments.get_pending()

    async def list_by_seller(self, seller_id: UUID) -> List[PaymentRecord]:
        return await self.payments.get_by_seller(seller_id)

    async def _review(self, payment_id: UUID, status: PaymentStatus,
                      reviewed_by: Optional[str], notes: Optional[str]) -> PaymentRecord:
        record = await self.get_payment(payment_id)
        if record.status != PaymentStatus.PENDING:
            raise InvalidStatusTransition(record.status.value, status.value)

        fields = {"approved_at": self.clock.now(), "approved_by": reviewed_by}
        if notes:
            fields["notes"] = f"{record.notes}. {notes}" if record.notes else notes
        async with self._writing("estado de la nota de pago"):
            await self.payments.update_status(record, status, **fields)

        logger.info(f"Payment record {record.number} {status.value} by {reviewed_by}")
        return record

    async def approve(self, payment_id: UUID, reviewed_by: Optional[str] = None,
                      notes: Optional[str] = None) -> PaymentRecord:
        return await self._review(payment_id, PaymentStatus.APPROVED, reviewed_by, notes)

    async def reject(self, payment_id: UUID, reviewed_by: Optional[str] = None,
                     notes: Optional[str] = None) -> PaymentRecord:
        return await self._review(payment_id, PaymentStatus.REJECTED, reviewed_by, notes)

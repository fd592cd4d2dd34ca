"""
Servicios de negocio para Notas de Salida

- Creación con líneas, número secuencial y costo de envío opcional
- Ciclo de entrega: pending -> in-transit -> delivered -> received
- Costo de envío fijo para notas que no lo tienen
- Reversión (eliminación) sin dejar notas de pago huérfanas

El pago de las notas no se maneja aquí: amount_paid y payment_status solo
los modifica el asignador de pagos (modules/payments/service.py).
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
from uuid import UUID
import logging

from backoffice.common.sequences import next_number
from backoffice.core.clock import Clock, system_clock
from backoffice.core.config import settings
from backoffice.core.exceptions import (
    InvalidStatusTransition, NoteNotFound, SellerNotFound, StoreWriteFailure
)
from backoffice.modules.exit_notes.crud import NoteStore
from backoffice.modules.exit_notes.models import ExitNote, ExitNoteItem, ExitNoteStatus
from backoffice.modules.exit_notes.schemas import ExitNoteCreate, ExitNoteItemCreate
from backoffice.modules.payments.calculator import derive_payment_status
from backoffice.modules.payments.crud import PaymentRecordStore
from backoffice.modules.sellers.crud import SellerDirectory

logger = logging.getLogger(__name__)

# Orden del ciclo de entrega; solo se permite avanzar
_STATUS_RANK = {
    ExitNoteStatus.PENDING: 0,
    ExitNoteStatus.IN_TRANSIT: 1,
    ExitNoteStatus.DELIVERED: 2,
    ExitNoteStatus.RECEIVED: 3,
}
_CANCELLABLE = (ExitNoteStatus.PENDING, ExitNoteStatus.IN_TRANSIT)


def can_transition(current: ExitNoteStatus, requested: ExitNoteStatus) -> bool:
    if current == ExitNoteStatus.CANCELLED:
        return False
    if requested == ExitNoteStatus.CANCELLED:
        return current in _CANCELLABLE
    return _STATUS_RANK[requested] > _STATUS_RANK[current]


def is_ecuador_note(number: Optional[str]) -> bool:
    return settings.ECUADOR_NOTE_MARKER.lower() in (number or "").lower()


def build_item(item: ExitNoteItemCreate, position: int) -> ExitNoteItem:
    return ExitNoteItem(
        position=position,
        product_id=item.product_id,
        product_name=item.product_name,
        sku=item.sku,
        size=item.size,
        weight=item.weight,
        quantity=item.quantity,
        unit_price=item.unit_price,
        total_price=item.unit_price * item.quantity
    )


def shipping_item(position: int) -> ExitNoteItem:
    """Línea de costo de envío fijo"""
    return ExitNoteItem(
        position=position,
        product_id=settings.SHIPPING_FEE_PRODUCT_ID,
        product_name="Costo de Envío",
        sku="SHIPPING",
        weight=Decimal("0"),
        quantity=1,
        unit_price=settings.SHIPPING_FEE,
        total_price=settings.SHIPPING_FEE
    )


def has_shipping(note: ExitNote) -> bool:
    return any(
        item.product_id == settings.SHIPPING_FEE_PRODUCT_ID or item.product_name == "Costo de Envío"
        for item in note.items
    )


class ExitNoteService:
    """Servicio para gestión de notas de salida"""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.notes = NoteStore(db)
        self.sellers = SellerDirectory(db)
        self.payments = PaymentRecordStore(db)

    @asynccontextmanager
    async def _writing(self, operation: str):
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error saving {operation}: {e}", exc_info=True)
            raise StoreWriteFailure(operation, e)

    async def create_note(self, note_data: ExitNoteCreate, from_ecuador: bool = False) -> ExitNote:
        """
        Registrar un envío a un vendedor

        El total es la suma de las líneas más el envío fijo si se pide
        (las notas de Bodega Ecuador nunca llevan envío).
        """
        seller = await self.sellers.get_by_id(note_data.seller_id)
        if not seller:
            raise SellerNotFound(note_data.seller_id)

        items = [build_item(item, position) for position, item in enumerate(note_data.items)]
        if note_data.include_shipping and not from_ecuador:
            items.append(shipping_item(len(items)))
        total = sum((item.total_price for item in items), Decimal("0"))

        prefix = settings.EXIT_NOTE_PREFIX
        if from_ecuador:
            prefix = f"{prefix}{settings.ECUADOR_NOTE_MARKER}-"

        async with self._writing("nota de salida"):
            number = await next_number(self.db, prefix)
            note = await self.notes.create(
                items=items,
                number=number,
                seller_id=seller.id,
                seller_name=seller.name,
                customer=note_data.customer,
                date=note_data.date or self.clock.now(),
                status=ExitNoteStatus.PENDING,
                total_price=total,
                amount_paid=Decimal("0"),
                payment_status=derive_payment_status(Decimal("0"), total, settings.PAYMENT_EPSILON),
                notes=note_data.notes,
                created_by=note_data.created_by
            )

        logger.info(f"Exit note {note.number} created for {seller.name}: total={total}")
        return note

    async def get_note(self, note_id: UUID) -> ExitNote:
        note = await self.notes.get_by_id(note_id)
        if not note:
            raise NoteNotFound(note_id)
        return note

    async def list_notes(self, status: Optional[ExitNoteStatus] = None, limit: int = 100, offset: int = 0):
        return await self.notes.get_all(status=status, limit=limit, offset=offset)

    async def list_by_seller(self, seller_id: UUID) -> List[ExitNote]:
        return await self.notes.get_by_seller(seller_id)

    async def change_status(self, note_id: UUID, new_status: ExitNoteStatus) -> ExitNote:
        """Avanzar el ciclo de entrega de la nota"""
        note = await self.get_note(note_id)
        if note.status == new_status:
            return note
        if not can_transition(note.status, new_status):
            raise InvalidStatusTransition(note.status.value, new_status.value)

        now = self.clock.now()
        fields = {"status": new_status}
        if new_status == ExitNoteStatus.RECEIVED:
            fields["received_at"] = now

        old_status = note.status
        async with self._writing("estado de la nota"):
            await self.notes.update(note, **fields)
            if new_status in (ExitNoteStatus.DELIVERED, ExitNoteStatus.RECEIVED):
                seller = await self.sellers.get_by_id(note.seller_id)
                if seller:
                    await self.sellers.update(seller, last_delivery_date=now)

        logger.info(f"Exit note {note.number} status changed from {old_status.value} to {new_status.value}")
        return note

    async def add_shipping_fee(self, seller_id: UUID) -> int:
        """
        Agrega el costo de envío fijo a las notas del vendedor que no lo tienen.

        Las notas de Bodega Ecuador se omiten. El estado de pago se recalcula
        porque el total cambia; amount_paid no se toca.

        Returns:
            Cantidad de notas actualizadas
        """
        seller = await self.sellers.get_by_id(seller_id)
        if not seller:
            raise SellerNotFound(seller_id)

        updated = 0
        async with self._writing("costo de envío"):
            for note in await self.notes.get_by_seller(seller_id):
                if is_ecuador_note(note.number):
                    logger.debug(f"Skipping Ecuador warehouse note {note.number}")
                    continue
                if has_shipping(note):
                    continue

                await self.notes.add_item(note, shipping_item(len(note.items)))
                total = note.total_price + settings.SHIPPING_FEE
                await self.notes.update(
                    note,
                    total_price=total,
                    payment_status=derive_payment_status(note.amount_paid, total, settings.PAYMENT_EPSILON)
                )
                updated += 1

        logger.info(f"Shipping fee added to {updated} notes of {seller.name}")
        return updated

    async def delete_note(self, note_id: UUID) -> int:
        """
        Revertir (eliminar) una nota de salida.

        Las notas de pago ligadas no se borran: se desligan y su monto sigue
        contando como pago del vendedor.

        Returns:
            Cantidad de notas de pago desligadas
        """
        note = await self.get_note(note_id)
        number = note.number

        async with self._writing("reversión de nota"):
            detached = await self.payments.detach_note(
                note.id, f"Nota de salida {number} revertida"
            )
            await self.notes.delete(note)

        logger.info(f"Exit note {number} deleted; {detached} payment records detached")
        return detached

"""
Almacén de notas de pago (acceso a datos)
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from uuid import UUID

from backoffice.common.sequences import next_number
from backoffice.core.config import settings
from backoffice.modules.payments.models import PaymentRecord, PaymentStatus


class PaymentRecordStore:
    """Consultas y escrituras de notas de pago. Hace flush, nunca commit."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, payment_id: UUID) -> Optional[PaymentRecord]:
        return await self.db.get(PaymentRecord, payment_id)

    async def get_by_seller(self, seller_id: UUID) -> List[PaymentRecord]:
        result = await self.db.execute(
            select(PaymentRecord)
            .where(PaymentRecord.seller_id == seller_id)
            .order_by(PaymentRecord.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_by_note(self, note_id: UUID) -> List[PaymentRecord]:
        result = await self.db.execute(
            select(PaymentRecord)
            .where(PaymentRecord.exit_note_id == note_id)
            .order_by(PaymentRecord.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_all(self, status: Optional[PaymentStatus] = None) -> List[PaymentRecord]:
        query = select(PaymentRecord)
        if status is not None:
            query = query.where(PaymentRecord.status == status)
        result = await self.db.execute(query.order_by(PaymentRecord.created_at.desc()))
        return list(result.scalars().all())

    async def get_pending(self) -> List[PaymentRecord]:
        return await self.get_all(PaymentStatus.PENDING)

    async def next_number(self) -> str:
        return await next_number(self.db, settings.PAYMENT_NOTE_PREFIX)

    async def create(self, **fields) -> PaymentRecord:
        if not fields.get("number"):
            fields["number"] = await self.next_number()
        record = PaymentRecord(**fields)
        self.db.add(record)
        await self.db.flush()
        return record

    async def update_status(self, record: PaymentRecord, status: PaymentStatus, **fields) -> PaymentRecord:
        record.status = status
        for field, value in fields.items():
            setattr(record, field, value)
        await self.db.flush()
        return record

    async def detach_note(self, note_id: UUID, remark: str) -> int:
        """Desliga las notas de pago de una nota de salida que se va a eliminar"""
        records = await self.get_by_note(note_id)
        for record in records:
            record.exit_note_id = None
            record.notes = f"{record.notes}. {remark}" if record.notes else remark
        await self.db.flush()
        return len(records)

"""
Almacén de notas de salida (acceso a datos)
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional, Sequence
from uuid import UUID

from backoffice.common.sequences import next_number
from backoffice.core.config import settings
from backoffice.modules.exit_notes.models import ExitNote, ExitNoteItem


class NoteStore:
    """Consultas y escrituras de notas de salida. Hace flush, nunca commit."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, note_id: UUID) -> Optional[ExitNote]:
        return await self.db.get(ExitNote, note_id)

    async def lock(self, note_id: UUID) -> Optional[ExitNote]:
        """Lee la nota con bloqueo de fila (SELECT ... FOR UPDATE)"""
        result = await self.db.execute(
            select(ExitNote)
            .where(ExitNote.id == note_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_seller(self, seller_id: UUID, for_update: bool = False) -> List[ExitNote]:
        """Notas del vendedor ordenadas de la más antigua a la más nueva"""
        query = (
            select(ExitNote)
            .where(ExitNote.seller_id == seller_id)
            .order_by(ExitNote.date.asc(), ExitNote.created_at.asc())
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_all(self, status=None, limit: int = 100, offset: int = 0) -> tuple[List[ExitNote], int]:
        count_query = select(func.count(ExitNote.id))
        query = select(ExitNote)
        if status is not None:
            count_query = count_query.where(ExitNote.status == status)
            query = query.where(ExitNote.status == status)

        total = (await self.db.execute(count_query)).scalar()
        result = await self.db.execute(
            query.order_by(ExitNote.date.desc()).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def count_by_seller(self, seller_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(ExitNote.id)).where(ExitNote.seller_id == seller_id)
        )
        return result.scalar() or 0

    async def next_number(self) -> str:
        return await next_number(self.db, settings.EXIT_NOTE_PREFIX)

    async def create(self, items: Sequence[ExitNoteItem] = (), **fields) -> ExitNote:
        note = ExitNote(**fields)
        note.items = list(items)
        self.db.add(note)
        await self.db.flush()
        return note

    async def add_item(self, note: ExitNote, item: ExitNoteItem) -> ExitNote:
        item.position = len(note.items)
        note.items.append(item)
        await self.db.flush()
        return note

    async def update(self, note: ExitNote, **fields) -> ExitNote:
        for field, value in fields.items():
            setattr(note, field, value)
        await self.db.flush()
        return note

    async def delete(self, note: ExitNote) -> None:
        await self.db.delete(note)
        await self.db.flush()

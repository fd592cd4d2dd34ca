"""
Numeración secuencial legible (NS-000001, NP-000001)
"""
from sqlalchemy import Column, Integer, String, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database.database import Base


class NoteSequence(Base):
    """Tabla para manejar secuencias de numeración por prefijo"""
    __tablename__ = "note_sequences"

    prefix = Column(String(20), primary_key=True)  # Ej: "NS-", "NP-"
    current_number = Column(Integer, nullable=False, default=0)


async def next_number(db: AsyncSession, prefix: str) -> str:
    """Incrementa la secuencia del prefijo y devuelve el número formateado"""
    result = await db.execute(
        select(NoteSequence).where(NoteSequence.prefix == prefix).with_for_update()
    )
    sequence = result.scalar_one_or_none()

    if not sequence:
        sequence = NoteSequence(prefix=prefix, current_number=0)
        db.add(sequence)

    sequence.current_number += 1
    await db.flush()

    return f"{prefix}{sequence.current_number:06d}"

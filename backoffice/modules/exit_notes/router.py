"""
Routers FastAPI para Notas de Salida
"""

from fastapi import APIRouter, Query, status
from typing import Optional
from uuid import UUID

from backoffice.core.config import settings
from backoffice.dependencies.dbDependencies import async_db_dependency, clock_dependency
from backoffice.modules.exit_notes.models import ExitNoteStatus as ExitNoteStatusModel
from backoffice.modules.exit_notes.schemas import (
    ExitNoteCreate, ExitNoteList, ExitNoteOut, ExitNoteStatus, ExitNoteStatusUpdate, ShippingFeeResult
)
from backoffice.modules.exit_notes.service import ExitNoteService

exit_notes_router = APIRouter(prefix="/exit-notes", tags=["Exit Notes"])
seller_notes_router = APIRouter(prefix="/sellers", tags=["Exit Notes"])


@exit_notes_router.post("/", response_model=ExitNoteOut, status_code=status.HTTP_201_CREATED)
async def create_exit_note(
    note_data: ExitNoteCreate,
    db: async_db_dependency,
    clock: clock_dependency,
    from_ecuador: bool = Query(False, description="Nota de Bodega Ecuador (sin costo de envío)")
):
    """
    Registrar una nota de salida

    El total se calcula con las líneas; `include_shipping` agrega el costo
    de envío fijo.
    """
    return await ExitNoteService(db, clock).create_note(note_data, from_ecuador=from_ecuador)


@exit_notes_router.get("/", response_model=ExitNoteList)
async def list_exit_notes(
    db: async_db_dependency,
    status: Optional[ExitNoteStatus] = Query(None, description="Filtrar por estado"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
):
    notes, total = await ExitNoteService(db).list_notes(
        status=ExitNoteStatusModel(status.value) if status else None,
        limit=limit,
        offset=offset
    )
    return ExitNoteList(items=[ExitNoteOut.model_validate(n) for n in notes], total=total)


@exit_notes_router.get("/{note_id}", response_model=ExitNoteOut)
async def get_exit_note(note_id: UUID, db: async_db_dependency):
    return await ExitNoteService(db).get_note(note_id)


@exit_notes_router.patch("/{note_id}/status", response_model=ExitNoteOut)
async def change_exit_note_status(
    note_id: UUID,
    status_data: ExitNoteStatusUpdate,
    db: async_db_dependency,
    clock: clock_dependency
):
    """
    Cambiar el estado de entrega

    Solo se avanza (pending -> in-transit -> delivered -> received); se puede
    anular desde pending o in-transit.
    """
    return await ExitNoteService(db, clock).change_status(
        note_id, ExitNoteStatusModel(status_data.status.value)
    )


@exit_notes_router.delete("/{note_id}")
async def delete_exit_note(note_id: UUID, db: async_db_dependency):
    """
    Revertir una nota de salida

    Las notas de pago ligadas se conservan desligadas.
    """
    detached = await ExitNoteService(db).delete_note(note_id)
    return {"message": "Nota de salida eliminada", "detached_payments": detached}


@seller_notes_router.get("/{seller_id}/exit-notes", response_model=ExitNoteList)
async def list_seller_exit_notes(seller_id: UUID, db: async_db_dependency):
    notes = await ExitNoteService(db).list_by_seller(seller_id)
    return ExitNoteList(items=[ExitNoteOut.model_validate(n) for n in notes], total=len(notes))


@seller_notes_router.post("/{seller_id}/shipping-fee", response_model=ShippingFeeResult)
async def add_shipping_fee(seller_id: UUID, db: async_db_dependency):
    """Agregar el costo de envío fijo a las notas del vendedor que no lo tienen"""
    updated = await ExitNoteService(db).add_shipping_fee(seller_id)
    return ShippingFeeResult(seller_id=seller_id, updated_notes=updated)

"""
Routers FastAPI para Pagos

- Pago a una nota de salida: POST /exit-notes/{note_id}/payments
- Pago global de un vendedor: POST /sellers/{seller_id}/payments
- Administración de notas de pago: /payments
"""

from fastapi import APIRouter, Query, status
from typing import Optional
from uuid import UUID

from backoffice.dependencies.dbDependencies import async_db_dependency, clock_dependency
from backoffice.modules.payments.calculator import to_amount
from backoffice.modules.payments.models import PaymentMethod as PaymentMethodModel
from backoffice.modules.payments.models import PaymentStatus as PaymentStatusModel
from backoffice.modules.payments.schemas import (
    GlobalPaymentRequest, GlobalPaymentResult, PaymentRecordCreate, PaymentRecordList,
    PaymentRecordOut, PaymentRecordReview, PaymentStatus, PayNoteRequest, PayNoteResult
)
from backoffice.modules.payments.service import PaymentAllocator, PaymentRecordService

payments_router = APIRouter(prefix="/payments", tags=["Payments"])
note_payments_router = APIRouter(prefix="/exit-notes", tags=["Payments"])
seller_payments_router = APIRouter(prefix="/sellers", tags=["Payments"])


def _record_out(record) -> Optional[PaymentRecordOut]:
    return PaymentRecordOut.model_validate(record) if record is not None else None


@note_payments_router.post("/{note_id}/payments", response_model=PayNoteResult)
async def pay_note(
    note_id: UUID,
    payment: PayNoteRequest,
    db: async_db_dependency,
    clock: clock_dependency
):
    """
    Registrar un pago a una nota de salida

    Se puede pagar más o menos que lo pendiente. Si la nota de pago de
    auditoría no se puede guardar, el pago igual queda aplicado y
    `payment_record` viene vacío.
    """
    allocator = PaymentAllocator(db, clock)
    note, record = await allocator.pay_note(
        note_id,
        payment.amount,
        method=PaymentMethodModel(payment.method.value),
        reference=payment.reference,
        approved_by=payment.approved_by,
        notes=payment.notes
    )
    return PayNoteResult(
        note_id=note.id,
        number=note.number,
        amount=to_amount(payment.amount),
        amount_paid=note.amount_paid,
        pending_amount=note.pending_amount,
        payment_status=note.payment_status.value,
        payment_record=_record_out(record)
    )


@seller_payments_router.post("/{seller_id}/payments", response_model=GlobalPaymentResult)
async def pay_global(
    seller_id: UUID,
    payment: GlobalPaymentRequest,
    db: async_db_dependency,
    clock: clock_dependency
):
    """
    Registrar un pago global del vendedor

    El monto se reparte entre las notas pendientes, de la más antigua a la
    más nueva. `remainder` es lo que sobra (crédito a favor del vendedor).
    """
    allocator = PaymentAllocator(db, clock)
    plan, record = await allocator.pay_global(
        seller_id,
        payment.amount,
        method=PaymentMethodModel(payment.method.value),
        reference=payment.reference,
        approved_by=payment.approved_by,
        notes=payment.notes
    )
    return GlobalPaymentResult(
        seller_id=seller_id,
        amount=plan.amount,
        notes_paid_count=plan.notes_paid_count,
        remainder=plan.remainder,
        payment_record=_record_out(record)
    )


# ===== NOTAS DE PAGO =====

@payments_router.post("/", response_model=PaymentRecordOut, status_code=status.HTTP_201_CREATED)
async def create_payment_record(payment_data: PaymentRecordCreate, db: async_db_dependency, clock: clock_dependency):
    """Registrar una nota de pago manual (queda pendiente de aprobación)"""
    return await PaymentRecordService(db, clock).create_manual(payment_data)


@payments_router.get("/", response_model=PaymentRecordList)
async def list_payment_records(
    db: async_db_dependency,
    status: Optional[PaymentStatus] = Query(None, description="Filtrar por estado"),
    seller_id: Optional[UUID] = Query(None, description="Filtrar por vendedor")
):
    service = PaymentRecordService(db)
    if seller_id:
        records = await service.list_by_seller(seller_id)
        if status:
            records = [r for r in records if r.status.value == status.value]
    else:
        records = await service.list_payments(PaymentStatusModel(status.value) if status else None)
    return PaymentRecordList(payments=[PaymentRecordOut.model_validate(r) for r in records], total=len(records))


@payments_router.get("/pending", response_model=PaymentRecordList)
async def list_pending_payment_records(db: async_db_dependency):
    records = await PaymentRecordService(db).list_pending()
    return PaymentRecordList(payments=[PaymentRecordOut.model_validate(r) for r in records], total=len(records))


@payments_router.get("/{payment_id}", response_model=PaymentRecordOut)
async def get_payment_record(payment_id: UUID, db: async_db_dependency):
    return await PaymentRecordService(db).get_payment(payment_id)


@payments_router.post("/{payment_id}/approve", response_model=PaymentRecordOut)
async def approve_payment_record(
    payment_id: UUID,
    review: PaymentRecordReview,
    db: async_db_dependency,
    clock: clock_dependency
):
    """Aprobar una nota de pago pendiente; desde ahora cuenta en el saldo"""
    return await PaymentRecordService(db, clock).approve(payment_id, review.reviewed_by, review.notes)


@payments_router.post("/{payment_id}/reject", response_model=PaymentRecordOut)
async def reject_payment_record(
    payment_id: UUID,
    review: PaymentRecordReview,
    db: async_db_dependency,
    clock: clock_dependency
):
    return await PaymentRecordService(db, clock).reject(payment_id, review.reviewed_by, review.notes)

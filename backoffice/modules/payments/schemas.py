"""
Esquemas Pydantic para Pagos y Notas de Pago

Los montos de entrada no se restringen aquí (gt=0): el servicio los valida
y responde InvalidAmount, igual para la API que para llamadas internas.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from enum import Enum


# ===== ENUMS =====

class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK = "bank"


class PaymentSourceType(str, Enum):
    SELLER = "seller"
    CUSTOMER = "customer"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ===== PAGOS =====

class PaymentRequestBase(BaseModel):
    amount: Decimal = Field(..., description="Monto recibido")
    method: PaymentMethod = Field(PaymentMethod.CASH, description="Método de pago")
    reference: Optional[str] = Field(None, max_length=100, description="Referencia bancaria")
    notes: Optional[str] = Field(None, description="Observaciones, se agregan a la nota de pago")
    approved_by: Optional[str] = Field(None, max_length=100)


class PayNoteRequest(PaymentRequestBase):
    """Pago a una nota de salida concreta"""
    pass


class GlobalPaymentRequest(PaymentRequestBase):
    """Pago global repartido entre las notas del vendedor"""
    pass


class PaymentRecordCreate(BaseModel):
    """Nota de pago manual (queda pendiente de aprobación)"""
    source_type: PaymentSourceType = PaymentSourceType.SELLER
    seller_id: Optional[UUID] = None
    customer_id: Optional[str] = Field(None, max_length=100)
    customer_name: Optional[str] = Field(None, max_length=200)
    amount: Decimal
    method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @model_validator(mode='after')
    def validate_source(self):
        if self.source_type == PaymentSourceType.SELLER:
            if not self.seller_id:
                raise ValueError('seller_id es requerido para pagos de vendedor')
            if self.customer_id:
                raise ValueError('Un pago de vendedor no puede tener customer_id')
        else:
            if not self.customer_id:
                raise ValueError('customer_id es requerido para pagos de cliente')
            if self.seller_id:
                raise ValueError('Un pago de cliente no puede tener seller_id')
        return self


class PaymentRecordReview(BaseModel):
    """Aprobación o rechazo de una nota de pago pendiente"""
    reviewed_by: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentRecordOut(BaseModel):
    id: UUID
    number: str
    source_type: PaymentSourceType
    kind: str
    seller_id: Optional[UUID] = None
    seller_name: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    exit_note_id: Optional[UUID] = None
    exit_note_number: Optional[str] = None
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator('source_type', 'kind', 'method', 'status', mode='before')
    @classmethod
    def enum_value(cls, v):
        return getattr(v, "value", v)


class PaymentRecordList(BaseModel):
    payments: List[PaymentRecordOut]
    total: int


# ===== RESULTADOS =====

class PayNoteResult(BaseModel):
    note_id: UUID
    number: str
    amount: Decimal
    amount_paid: Decimal
    pending_amount: Decimal
    payment_status: str
    payment_record: Optional[PaymentRecordOut] = None


class GlobalPaymentResult(BaseModel):
    seller_id: UUID
    amount: Decimal
    notes_paid_count: int
    remainder: Decimal
    payment_record: Optional[PaymentRecordOut] = None

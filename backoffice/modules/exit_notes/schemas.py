"""
Esquemas Pydantic para Notas de Salida
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from enum import Enum


# ===== ENUMS =====

class ExitNoteStatus(str, Enum):
    PENDING = "pending"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class NotePaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


# ===== ITEMS =====

class ExitNoteItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=100, description="ID del producto")
    product_name: str = Field(..., min_length=1, max_length=200, description="Nombre del producto")
    sku: Optional[str] = Field(None, max_length=100)
    size: Optional[str] = Field(None, max_length=20, description="Talla")
    weight: Optional[Decimal] = Field(None, ge=0, description="Peso en gramos")
    quantity: int = Field(..., gt=0, description="Cantidad")
    unit_price: Decimal = Field(..., ge=0, description="Precio unitario")

    @field_validator('unit_price')
    @classmethod
    def validate_decimals(cls, v: Decimal) -> Decimal:
        return v.quantize(Decimal('0.01'))


class ExitNoteItemOut(BaseModel):
    id: UUID
    product_id: str
    product_name: str
    sku: Optional[str] = None
    size: Optional[str] = None
    weight: Optional[Decimal] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    model_config = {"from_attributes": True}


# ===== NOTES =====

class ExitNoteCreate(BaseModel):
    seller_id: UUID = Field(..., description="Vendedor que recibe la mercadería")
    date: Optional[datetime] = Field(None, description="Fecha de la nota (por defecto ahora)")
    customer: Optional[str] = Field(None, max_length=200)
    items: List[ExitNoteItemCreate] = Field(..., min_length=1)
    include_shipping: bool = Field(False, description="Agregar costo de envío fijo")
    notes: Optional[str] = None
    created_by: Optional[str] = Field(None, max_length=100)


class ExitNoteStatusUpdate(BaseModel):
    status: ExitNoteStatus


class ExitNoteOut(BaseModel):
    id: UUID
    number: str
    seller_id: UUID
    seller_name: str
    customer: Optional[str] = None
    date: datetime
    status: ExitNoteStatus
    received_at: Optional[datetime] = None
    total_price: Decimal
    amount_paid: Decimal
    payment_status: NotePaymentStatus
    pending_amount: Decimal
    notes: Optional[str] = None
    items: List[ExitNoteItemOut] = []
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator('status', 'payment_status', mode='before')
    @classmethod
    def enum_value(cls, v):
        return getattr(v, "value", v)


class ExitNoteList(BaseModel):
    items: List[ExitNoteOut]
    total: int


class ShippingFeeResult(BaseModel):
    seller_id: UUID
    updated_notes: int

"""
Esquemas Pydantic para Vendedores
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from enum import Enum


class PriceType(str, Enum):
    PRICE1 = "price1"
    PRICE2 = "price2"


def _check_email(v: Optional[str]) -> Optional[str]:
    if v:
        # Validación básica de email
        if '@' not in v or '.' not in v:
            raise ValueError('Email inválido')
    return v


class SellerCreate(BaseModel):
    """Esquema para crear vendedor"""
    name: str = Field(..., min_length=1, max_length=200, description="Nombre del vendedor")
    email: Optional[str] = Field(None, max_length=100, description="Email del vendedor")
    phone: Optional[str] = Field(None, max_length=50, description="Teléfono del vendedor")
    city: Optional[str] = Field(None, max_length=100, description="Ciudad")
    address: Optional[str] = Field(None, description="Dirección")
    commission: Decimal = Field(Decimal("0"), ge=0, le=100, description="Comisión (%)")
    price_type: PriceType = Field(PriceType.PRICE1, description="Lista de precios que aplica")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('El nombre no puede estar vacío')
        return cleaned

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class SellerUpdate(BaseModel):
    """Esquema para actualizar vendedor"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    commission: Optional[Decimal] = Field(None, ge=0, le=100)
    price_type: Optional[PriceType] = None
    is_active: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class SellerOut(BaseModel):
    """Esquema de salida para vendedor"""
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    commission: Decimal
    price_type: str
    is_active: bool
    slug: Optional[str] = None
    last_delivery_date: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SellerList(BaseModel):
    """Esquema para lista de vendedores"""
    sellers: List[SellerOut]
    total: int

"""
Esquemas Pydantic para Saldos y Estados de Cuenta
"""

from pydantic import BaseModel
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from backoffice.modules.exit_notes.schemas import ExitNoteOut
from backoffice.modules.payments.schemas import PaymentRecordOut
from backoffice.modules.sellers.schemas import SellerOut


class SellerBalance(BaseModel):
    """
    Saldo del vendedor (no se guarda, se calcula siempre)

    current_debt puede ser negativo: crédito a favor del vendedor.
    """
    seller_id: UUID
    historic_debt: Decimal
    total_payments: Decimal
    current_debt: Decimal


class SellerBalanceRow(SellerBalance):
    name: str
    email: Optional[str] = None
    slug: Optional[str] = None


class BalanceList(BaseModel):
    balances: List[SellerBalanceRow]
    total: int


class Statement(BaseModel):
    """Estado de cuenta del vendedor"""
    seller: SellerOut
    received_notes: List[ExitNoteOut]
    sent_notes: List[ExitNoteOut]
    payments: List[PaymentRecordOut]
    balance: SellerBalance
    generated_at: datetime

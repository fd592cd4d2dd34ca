"""
Modelos SQLAlchemy para Notas de Pago (PaymentRecord)

Una nota de pago registra dinero recibido de un vendedor (o de un cliente
de mostrador). Solo las notas aprobadas cuentan en el saldo del vendedor.
Pueden estar ligadas a una nota de salida concreta o ser globales.
"""

from backoffice.database.database import Base
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Enum, Text, Uuid, CheckConstraint
from backoffice.common.mixins import BaseMixin
import enum


# ===== ENUMS =====

class PaymentSourceType(enum.Enum):
    """Quién paga: vendedor en consignación o cliente de mostrador"""
    SELLER = "seller"
    CUSTOMER = "customer"


class PaymentMethod(enum.Enum):
    CASH = "cash"       # Efectivo
    BANK = "bank"       # Transferencia / depósito


class PaymentStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentKind(enum.Enum):
    """Origen del registro"""
    NOTE = "note"       # Pago a una nota de salida
    GLOBAL = "global"   # Pago global repartido entre notas
    MANUAL = "manual"   # Registrado a mano, pendiente de aprobación


# ===== MODELOS =====

class PaymentRecord(Base, BaseMixin):
    """Nota de pago"""
    __tablename__ = "payment_records"

    number = Column(String(50), nullable=False, unique=True, index=True)  # NP-000001
    source_type = Column(Enum(PaymentSourceType), nullable=False, default=PaymentSourceType.SELLER)
    kind = Column(Enum(PaymentKind), nullable=False, default=PaymentKind.MANUAL)

    seller_id = Column(Uuid(as_uuid=True), ForeignKey("sellers.id"), nullable=True, index=True)
    seller_name = Column(String(200), nullable=True)
    customer_id = Column(String(100), nullable=True, index=True)
    customer_name = Column(String(200), nullable=True)

    # Nota de salida pagada (solo pagos por nota); se desliga si la nota se revierte
    exit_note_id = Column(Uuid(as_uuid=True), ForeignKey("exit_notes.id", ondelete="SET NULL"), nullable=True, index=True)
    exit_note_number = Column(String(50), nullable=True)

    amount = Column(Numeric(15, 2), nullable=False)  # Debe ser > 0
    method = Column(Enum(PaymentMethod), nullable=False, default=PaymentMethod.CASH)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING, index=True)

    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(100), nullable=True)
    reference = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(seller_id IS NOT NULL AND customer_id IS NULL) OR (seller_id IS NULL AND customer_id IS NOT NULL)",
            name="ck_payment_records_single_source"
        ),
        CheckConstraint("amount > 0", name="ck_payment_records_amount_positive"),
    )

    def __repr__(self):
        return f"<PaymentRecord(number={self.number}, amount={self.amount}, status={self.status})>"

"""
Modelos SQLAlchemy para Notas de Salida (envíos en consignación)

Una nota de salida registra la mercadería enviada a un vendedor. Cuando se
entrega (delivered/received) su total pasa a formar parte de la deuda
histórica del vendedor. El pago se controla por nota con `amount_paid` y
`payment_status`, que solo modifica el asignador de pagos.
"""

from backoffice.database.database import Base
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Enum, Integer, Text, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from backoffice.common.mixins import BaseMixin, TimestampMixin
import enum


# ===== ENUMS =====

class ExitNoteStatus(enum.Enum):
    """Ciclo de entrega de la nota (independiente del pago)"""
    PENDING = "pending"         # Registrada en bodega
    IN_TRANSIT = "in-transit"   # En camino USA -> Ecuador
    DELIVERED = "delivered"     # Entregada al vendedor
    RECEIVED = "received"       # Recepción confirmada por el vendedor
    CANCELLED = "cancelled"     # Anulada antes de la entrega


class NotePaymentStatus(enum.Enum):
    """Estado de pago derivado de amount_paid vs total_price"""
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


# Estados que generan deuda
DEBT_STATUSES = (ExitNoteStatus.DELIVERED, ExitNoteStatus.RECEIVED)


# ===== MODELOS =====

class ExitNote(Base, BaseMixin):
    """Nota de salida hacia un vendedor"""
    __tablename__ = "exit_notes"

    number = Column(String(50), nullable=False, unique=True, index=True)  # NS-000001
    seller_id = Column(Uuid(as_uuid=True), ForeignKey("sellers.id"), nullable=False, index=True)
    seller_name = Column(String(200), nullable=False)  # Snapshot del nombre
    customer = Column(String(200), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)

    status = Column(Enum(ExitNoteStatus), nullable=False, default=ExitNoteStatus.PENDING, index=True)
    received_at = Column(DateTime(timezone=True), nullable=True)

    total_price = Column(Numeric(15, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(15, 2), nullable=False, default=0)  # Acumulado, nunca disminuye
    payment_status = Column(Enum(NotePaymentStatus), nullable=False, default=NotePaymentStatus.UNPAID, index=True)

    notes = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)

    # Relationships
    seller = relationship("Seller", back_populates="exit_notes")
    items = relationship(
        "ExitNoteItem",
        back_populates="exit_note",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ExitNoteItem.position"
    )

    @property
    def pending_amount(self):
        return self.total_price - self.amount_paid

    @property
    def is_debt(self) -> bool:
        return self.status in DEBT_STATUSES

    def __repr__(self):
        return f"<ExitNote(number={self.number}, total={self.total_price}, paid={self.amount_paid})>"


class ExitNoteItem(Base, TimestampMixin):
    """Línea de una nota de salida (snapshot del producto)"""
    __tablename__ = "exit_note_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    exit_note_id = Column(Uuid(as_uuid=True), ForeignKey("exit_notes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    product_id = Column(String(100), nullable=False)
    product_name = Column(String(200), nullable=False)
    sku = Column(String(100), nullable=True)
    size = Column(String(20), nullable=True)
    weight = Column(Numeric(10, 2), nullable=True)  # Gramos
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    total_price = Column(Numeric(15, 2), nullable=False)

    # Relationships
    exit_note = relationship("ExitNote", back_populates="items")


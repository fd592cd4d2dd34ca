"""
Modelo SQLAlchemy de Vendedores (Sellers)

Un vendedor recibe mercadería en consignación mediante notas de salida y
la paga con notas de pago. El slug identifica su tienda pública.
"""

from backoffice.database.database import Base
from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Text
from sqlalchemy.orm import relationship
from backoffice.common.mixins import BaseMixin


class Seller(Base, BaseMixin):
    """Vendedores en consignación"""
    __tablename__ = "sellers"

    name = Column(String(200), nullable=False, index=True)
    email = Column(String(100), nullable=True, unique=True)
    phone = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    commission = Column(Numeric(5, 2), nullable=False, default=0)  # Porcentaje
    price_type = Column(String(10), nullable=False, default="price1")  # price1 | price2
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    slug = Column(String(100), nullable=True, unique=True, index=True)
    last_delivery_date = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    exit_notes = relationship("ExitNote", back_populates="seller", passive_deletes=True)

    def __repr__(self):
        return f"<Seller(id={self.id}, name={self.name}, slug={self.slug})>"

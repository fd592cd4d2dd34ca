"""
Fixtures compartidos para los tests de todos los módulos

Cada test usa su propia base SQLite en memoria creada desde Base.metadata y
un reloj congelado. Las variables de entorno se fijan antes de importar la
aplicación para que la configuración no apunte a PostgreSQL.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.main import app
from backoffice.common.sequences import next_number
from backoffice.core.clock import FrozenClock, get_clock
from backoffice.database.database import Base, get_async_db
from backoffice.modules.exit_notes.models import ExitNote, ExitNoteItem, ExitNoteStatus
from backoffice.modules.payments.calculator import derive_payment_status
from backoffice.modules.payments.models import (
    PaymentKind, PaymentMethod, PaymentRecord, PaymentSourceType, PaymentStatus
)
from backoffice.modules.sellers.models import Seller
from backoffice.modules.sellers.utils import base_slug


# ===== BASE DE DATOS =====

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    """Reloj congelado en 2025-03-01 12:00 UTC"""
    return FrozenClock(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
async def client(session_factory, clock):
    """Cliente HTTP contra la app con la base de pruebas y el reloj congelado"""

    async def override_get_async_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = override_get_async_db
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ===== DATOS DE PRUEBA =====

@pytest.fixture
def make_seller(db_session):
    """Crea un vendedor directamente en la base"""

    async def _make(name: str = "Ana Pérez", email: str = None, slug: str = None, **fields) -> Seller:
        seller = Seller(
            name=name,
            email=email,
            slug=slug if slug is not None else base_slug(name),
            **fields
        )
        db_session.add(seller)
        await db_session.commit()
        return seller

    return _make


@pytest.fixture
def make_note(db_session):
    """
    Crea una nota de salida con una sola línea por el total indicado.

    Por defecto la nota está entregada (cuenta como deuda) y sin pagos.
    """

    async def _make(
        seller: Seller,
        total,
        date: datetime,
        status: ExitNoteStatus = ExitNoteStatus.DELIVERED,
        amount_paid="0",
        number: str = None
    ) -> ExitNote:
        total = Decimal(str(total))
        amount_paid = Decimal(str(amount_paid))
        note = ExitNote(
            number=number or await next_number(db_session, "NS-"),
            seller_id=seller.id,
            seller_name=seller.name,
            date=date,
            status=status,
            total_price=total,
            amount_paid=amount_paid,
            payment_status=derive_payment_status(amount_paid, total, Decimal("0.01"))
        )
        note.items = [ExitNoteItem(
            position=0,
            product_id="prod-1",
            product_name="Aretes de plata",
            quantity=1,
            unit_price=total,
            total_price=total
        )]
        db_session.add(note)
        await db_session.commit()
        return note

    return _make


@pytest.fixture
def make_payment(db_session):
    """Crea una nota de pago de vendedor (aprobada por defecto)"""

    async def _make(seller: Seller, amount, status: PaymentStatus = PaymentStatus.APPROVED,
                    kind: PaymentKind = PaymentKind.GLOBAL, **fields) -> PaymentRecord:
        record = PaymentRecord(
            number=await next_number(db_session, "NP-"),
            source_type=PaymentSourceType.SELLER,
            kind=kind,
            seller_id=seller.id,
            seller_name=seller.name,
            amount=Decimal(str(amount)),
            method=PaymentMethod.CASH,
            status=status,
            **fields
        )
        db_session.add(record)
        await db_session.commit()
        return record

    return _make

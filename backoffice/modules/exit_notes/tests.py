"""
Tests para el módulo de Notas de Salida
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from backoffice.core.exceptions import InvalidStatusTransition, NoteNotFound, SellerNotFound
from backoffice.modules.exit_notes.crud import NoteStore
from backoffice.modules.exit_notes.models import ExitNote, ExitNoteStatus, NotePaymentStatus
from backoffice.modules.exit_notes.schemas import ExitNoteCreate, ExitNoteItemCreate
from backoffice.modules.exit_notes.service import ExitNoteService, can_transition, is_ecuador_note
from backoffice.modules.payments.crud import PaymentRecordStore
from backoffice.modules.payments.service import PaymentAllocator
from backoffice.modules.balances.service import BalanceCalculator


JAN_1 = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def note_data():
    def _build(seller_id, include_shipping=False):
        return ExitNoteCreate(
            seller_id=seller_id,
            customer="Tienda Centro",
            include_shipping=include_shipping,
            items=[
                ExitNoteItemCreate(product_id="p-1", product_name="Collar", quantity=2, unit_price=Decimal("15.50")),
                ExitNoteItemCreate(product_id="p-2", product_name="Anillo", size="7", quantity=1, unit_price=Decimal("40")),
            ]
        )
    return _build


class TestStatusRules:

    @pytest.mark.parametrize("current, requested, allowed", [
        (ExitNoteStatus.PENDING, ExitNoteStatus.IN_TRANSIT, True),
        (ExitNoteStatus.PENDING, ExitNoteStatus.DELIVERED, True),
        (ExitNoteStatus.IN_TRANSIT, ExitNoteStatus.RECEIVED, True),
        (ExitNoteStatus.DELIVERED, ExitNoteStatus.RECEIVED, True),
        (ExitNoteStatus.DELIVERED, ExitNoteStatus.IN_TRANSIT, False),
        (ExitNoteStatus.RECEIVED, ExitNoteStatus.DELIVERED, False),
        (ExitNoteStatus.PENDING, ExitNoteStatus.CANCELLED, True),
        (ExitNoteStatus.IN_TRANSIT, ExitNoteStatus.CANCELLED, True),
        (ExitNoteStatus.DELIVERED, ExitNoteStatus.CANCELLED, False),
        (ExitNoteStatus.CANCELLED, ExitNoteStatus.PENDING, False),
    ])
    def test_can_transition(self, current, requested, allowed):
        assert can_transition(current, requested) is allowed

    def test_ecuador_note(self):
        assert is_ecuador_note("NS-ECU-000004")
        assert is_ecuador_note("ns-ecu-000004")
        assert not is_ecuador_note("NS-000004")
        assert not is_ecuador_note(None)

    @pytest.mark.parametrize("status, is_debt", [
        (ExitNoteStatus.PENDING, False),
        (ExitNoteStatus.IN_TRANSIT, False),
        (ExitNoteStatus.DELIVERED, True),
        (ExitNoteStatus.RECEIVED, True),
        (ExitNoteStatus.CANCELLED, False),
    ])
    def test_is_debt(self, status, is_debt):
        assert ExitNote(status=status).is_debt is is_debt


class TestExitNoteService:

    async def test_create_note(self, db_session, clock, make_seller, note_data):
        seller = await make_seller()

        note = await ExitNoteService(db_session, clock).create_note(note_data(seller.id))

        assert note.number == "NS-000001"
        assert note.total_price == Decimal("71.00")
        assert note.amount_paid == Decimal("0")
        assert note.payment_status == NotePaymentStatus.UNPAID
        assert note.status == ExitNoteStatus.PENDING
        assert note.date == clock.now()
        assert note.seller_name == seller.name
        assert [i.position for i in note.items] == [0, 1]

    async def test_sequential_numbers(self, db_session, clock, make_seller, note_data):
        seller = await make_seller()
        service = ExitNoteService(db_session, clock)

        first = await service.create_note(note_data(seller.id))
        second = await service.create_note(note_data(seller.id))
        ecuador = await service.create_note(note_data(seller.id), from_ecuador=True)

        assert (first.number, second.number) == ("NS-000001", "NS-000002")
        assert ecuador.number == "NS-ECU-000001"

    async def test_create_with_shipping(self, db_session, clock, make_seller, note_data):
        seller = await make_seller()

        note = await ExitNoteService(db_session, clock).create_note(note_data(seller.id, include_shipping=True))

        assert note.total_price == Decimal("99.00")
        assert note.items[-1].product_name == "Costo de Envío"

    async def test_ecuador_note_never_gets_shipping(self, db_session, clock, make_seller, note_data):
        seller = await make_seller()

        note = await ExitNoteService(db_session, clock).create_note(
            note_data(seller.id, include_shipping=True), from_ecuador=True
        )

        assert note.total_price == Decimal("71.00")

    async def test_create_unknown_seller(self, db_session, clock, note_data):
        with pytest.raises(SellerNotFound):
            await ExitNoteService(db_session, clock).create_note(note_data(uuid4()))

    async def test_status_lifecycle(self, db_session, clock, make_seller, note_data):
        seller = await make_seller()
        service = ExitNoteService(db_session, clock)
        note = await service.create_note(note_data(seller.id))

        await service.change_status(note.id, ExitNoteStatus.IN_TRANSIT)
        await service.change_status(note.id, ExitNoteStatus.DELIVERED)
        clock.advance(timedelta(days=2))
        note = await service.change_status(note.id, ExitNoteStatus.RECEIVED)

        assert note.status == ExitNoteStatus.RECEIVED
        assert note.received_at == clock.now()
        assert seller.last_delivery_date == clock.now()

        with pytest.raises(InvalidStatusTransition):
            await service.change_status(note.id, ExitNoteStatus.IN_TRANSIT)

    async def test_delivery_creates_debt(self, db_session, clock, make_seller, note_data):
        seller = await make_seller()
        service = ExitNoteService(db_session, clock)
        note = await service.create_note(note_data(seller.id))
        calculator = BalanceCalculator(db_session)

        assert (await calculator.compute_balance(seller.id)).historic_debt == Decimal("0")

        await service.change_status(note.id, ExitNoteStatus.DELIVERED)

        assert (await calculator.compute_balance(seller.id)).historic_debt == Decimal("71")

    async def test_change_status_unknown_note(self, db_session, clock):
        with pytest.raises(NoteNotFound):
            await ExitNoteService(db_session, clock).change_status(uuid4(), ExitNoteStatus.DELIVERED)

    async def test_add_shipping_fee(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        plain = await make_note(seller, 100, JAN_1, amount_paid=100)
        ecuador = await make_note(seller, 50, JAN_1, number="NS-ECU-000001")
        service = ExitNoteService(db_session, clock)

        updated = await service.add_shipping_fee(seller.id)

        assert updated == 1
        assert plain.total_price == Decimal("128")
        # Ya no cubre el total nuevo
        assert plain.payment_status == NotePaymentStatus.PARTIAL
        assert plain.amount_paid == Decimal("100")
        assert ecuador.total_price == Decimal("50")

        # Segunda pasada: nada que agregar
        assert await service.add_shipping_fee(seller.id) == 0

    async def test_delete_detaches_payment_records(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)
        _, record = await PaymentAllocator(db_session, clock).pay_note(note.id, 40)
        number = note.number

        detached = await ExitNoteService(db_session, clock).delete_note(note.id)

        assert detached == 1
        assert await NoteStore(db_session).get_by_id(note.id) is None
        record = await PaymentRecordStore(db_session).get_by_id(record.id)
        assert record.exit_note_id is None
        assert f"Nota de salida {number} revertida" in record.notes

        # El dinero recibido sigue contando como pago del vendedor
        balance = await BalanceCalculator(db_session).compute_balance(seller.id)
        assert balance.total_payments == Decimal("40")
        assert balance.current_debt == Decimal("-40")

    async def test_delete_unknown_note(self, db_session, clock):
        with pytest.raises(NoteNotFound):
            await ExitNoteService(db_session, clock).delete_note(uuid4())


class TestExitNotesAPI:

    async def test_create_and_list(self, client, make_seller):
        seller = await make_seller()
        payload = {
            "seller_id": str(seller.id),
            "items": [{"product_id": "p-1", "product_name": "Pulsera", "quantity": 3, "unit_price": "10"}],
            "include_shipping": True
        }

        created = await client.post("/exit-notes/", json=payload)
        assert created.status_code == 201
        data = created.json()
        assert Decimal(data["total_price"]) == Decimal("58")
        assert data["status"] == "pending"
        assert data["payment_status"] == "unpaid"

        listed = await client.get("/exit-notes/", params={"status": "pending"})
        assert listed.json()["total"] == 1

        by_seller = await client.get(f"/sellers/{seller.id}/exit-notes")
        assert by_seller.json()["total"] == 1

    async def test_empty_items_rejected(self, client, make_seller):
        seller = await make_seller()
        response = await client.post("/exit-notes/", json={"seller_id": str(seller.id), "items": []})
        assert response.status_code == 422

    async def test_status_regression_is_400(self, client, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 20, JAN_1, status=ExitNoteStatus.RECEIVED)

        response = await client.patch(f"/exit-notes/{note.id}/status", json={"status": "in-transit"})

        assert response.status_code == 400

    async def test_shipping_fee_endpoint(self, client, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 20, JAN_1)

        response = await client.post(f"/sellers/{seller.id}/shipping-fee")

        assert response.status_code == 200
        assert response.json()["updated_notes"] == 1

    async def test_delete_endpoint(self, client, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 20, JAN_1)

        response = await client.delete(f"/exit-notes/{note.id}")

        assert response.status_code == 200
        assert response.json()["detached_payments"] == 0
        assert (await client.get(f"/exit-notes/{note.id}")).status_code == 404

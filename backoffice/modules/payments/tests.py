"""
Tests para el módulo de Pagos

Cubren:
- Validación de montos y estado de pago derivado
- Reparto de pagos globales (la nota más antigua primero)
- Pago a nota y pago global contra la base
- Conservación del saldo con secuencias aleatorias de pagos
- Falla de la nota de pago de auditoría (no se propaga) y falla de la
  escritura autoritativa (StoreWriteFailure)
- Notas de pago manuales con aprobación/rechazo
- Endpoints
"""

import random
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.exc import OperationalError
from uuid import uuid4

from backoffice.core.exceptions import (
    InvalidAmount, InvalidStatusTransition, NoteNotFound, SellerNotFound, StoreWriteFailure
)
from backoffice.modules.balances.service import BalanceCalculator
from backoffice.modules.exit_notes.crud import NoteStore
from backoffice.modules.exit_notes.models import ExitNote, NotePaymentStatus
from backoffice.modules.payments.calculator import (
    derive_payment_status, plan_allocation, to_amount
)
from backoffice.modules.payments.crud import PaymentRecordStore
from backoffice.modules.payments.models import PaymentKind, PaymentSourceType, PaymentStatus
from backoffice.modules.payments.schemas import PaymentRecordCreate
from backoffice.modules.payments.service import PaymentAllocator, PaymentRecordService


EPS = Decimal("0.01")
JAN_1 = datetime(2025, 1, 1, tzinfo=timezone.utc)
FEB_1 = datetime(2025, 2, 1, tzinfo=timezone.utc)
MAR_1 = datetime(2025, 3, 1, tzinfo=timezone.utc)


def _note(total, paid="0"):
    return ExitNote(total_price=Decimal(str(total)), amount_paid=Decimal(str(paid)))


def _db_error():
    return OperationalError("INSERT INTO payment_records", {}, Exception("database is locked"))


# ===== CALCULOS =====

class TestToAmount:
    """Validación de montos de entrada"""

    @pytest.mark.parametrize("value", [
        0, -5, "0", "-0.01", None, "abc", "", True, float("nan"), float("inf"), "0.001", "0.004", "1e30"
    ])
    def test_rejects_invalid_amounts(self, value):
        with pytest.raises(InvalidAmount) as exc:
            to_amount(value)
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("value, expected", [
        (10, Decimal("10")),
        ("12.50", Decimal("12.50")),
        (Decimal("0.01"), Decimal("0.01")),
        ("0.005", Decimal("0.01")),
        ("10.005", Decimal("10.01")),
        (99.994, Decimal("99.99")),
        (99.995, Decimal("100.00")),
    ])
    def test_accepts_positive_amounts_rounded_to_cents(self, value, expected):
        assert to_amount(value) == expected


class TestDerivePaymentStatus:

    def test_paid_within_epsilon(self):
        assert derive_payment_status(Decimal("99.995"), Decimal("100"), EPS) == NotePaymentStatus.PAID
        assert derive_payment_status(Decimal("99.99"), Decimal("100"), EPS) == NotePaymentStatus.PAID

    def test_partial_below_epsilon(self):
        assert derive_payment_status(Decimal("99"), Decimal("100"), EPS) == NotePaymentStatus.PARTIAL

    def test_unpaid(self):
        assert derive_payment_status(Decimal("0"), Decimal("100"), EPS) == NotePaymentStatus.UNPAID

    def test_overpaid_is_paid(self):
        assert derive_payment_status(Decimal("150"), Decimal("100"), EPS) == NotePaymentStatus.PAID


class TestPlanAllocation:
    """Reparto de un pago global"""

    def test_oldest_first(self):
        notes = [_note(30), _note(20), _note(50)]
        plan = plan_allocation(notes, Decimal("35"), EPS)

        assert [to_pay for _, to_pay in plan.allocations] == [Decimal("30"), Decimal("5")]
        assert plan.notes_paid_count == 2
        assert plan.remainder == Decimal("0")
        assert plan.applied == Decimal("35")

    def test_overpayment_leaves_remainder(self):
        plan = plan_allocation([_note(25), _note(15)], Decimal("100"), EPS)
        assert plan.notes_paid_count == 2
        assert plan.remainder == Decimal("60")

    def test_stops_when_remaining_within_epsilon(self):
        plan = plan_allocation([_note(10), _note(10)], Decimal("10.005"), EPS)
        assert plan.notes_paid_count == 1
        assert plan.remainder == Decimal("0.005")

    def test_partially_paid_note_only_takes_pending(self):
        plan = plan_allocation([_note(100, paid=80), _note(50)], Decimal("30"), EPS)
        assert [to_pay for _, to_pay in plan.allocations] == [Decimal("20"), Decimal("10")]

    def test_no_notes(self):
        plan = plan_allocation([], Decimal("40"), EPS)
        assert plan.notes_paid_count == 0
        assert plan.remainder == Decimal("40")

    def test_plan_does_not_mutate_notes(self):
        note = _note(30)
        plan_allocation([note], Decimal("10"), EPS)
        assert note.amount_paid == Decimal("0")


# ===== ASIGNADOR =====

class TestPayNote:

    async def test_partial_then_partial(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)
        allocator = PaymentAllocator(db_session, clock)

        await allocator.pay_note(note.id, 50)
        note, _ = await allocator.pay_note(note.id, 49)

        assert note.amount_paid == Decimal("99")
        assert note.payment_status == NotePaymentStatus.PARTIAL

    async def test_paid_within_epsilon(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        note, _ = await PaymentAllocator(db_session, clock).pay_note(note.id, Decimal("99.99"))

        assert note.payment_status == NotePaymentStatus.PAID

    async def test_overpaying_a_note_is_allowed(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        note, _ = await PaymentAllocator(db_session, clock).pay_note(note.id, 130)

        assert note.amount_paid == Decimal("130")
        assert note.payment_status == NotePaymentStatus.PAID

    async def test_writes_approved_record_linked_to_note(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        _, record = await PaymentAllocator(db_session, clock).pay_note(note.id, 40, approved_by="admin")

        assert record.status == PaymentStatus.APPROVED
        assert record.kind == PaymentKind.NOTE
        assert record.exit_note_id == note.id
        assert record.amount == Decimal("40")
        assert record.seller_id == seller.id
        assert note.number in record.notes
        assert record.approved_at == clock.now()
        assert record.number.startswith("NP-")

    @pytest.mark.parametrize("amount", [0, -10, "abc", None])
    async def test_invalid_amount_writes_nothing(self, db_session, clock, make_seller, make_note, amount):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        with pytest.raises(InvalidAmount):
            await PaymentAllocator(db_session, clock).pay_note(note.id, amount)

        await db_session.refresh(note)
        assert note.amount_paid == Decimal("0")
        assert await PaymentRecordStore(db_session).get_by_note(note.id) == []

    async def test_unknown_note(self, db_session, clock):
        with pytest.raises(NoteNotFound):
            await PaymentAllocator(db_session, clock).pay_note(uuid4(), 10)

    async def test_sub_cent_amount_is_rejected(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        with pytest.raises(InvalidAmount):
            await PaymentAllocator(db_session, clock).pay_note(note.id, "0.001")

        await db_session.refresh(note)
        assert (note.amount_paid, note.payment_status) == (Decimal("0"), NotePaymentStatus.UNPAID)
        assert await PaymentRecordStore(db_session).get_by_note(note.id) == []

    async def test_amount_rounded_to_cents_before_saving(self, db_session, session_factory, clock,
                                                         make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        note, record = await PaymentAllocator(db_session, clock).pay_note(note.id, "10.005")

        assert note.amount_paid == Decimal("10.01")
        assert record.amount == Decimal("10.01")

        # Lo guardado coincide con lo calculado en memoria
        async with session_factory() as fresh:
            stored = await NoteStore(fresh).get_by_id(note.id)
            assert stored.amount_paid == Decimal("10.01")
            assert stored.payment_status == NotePaymentStatus.PARTIAL
            records = await PaymentRecordStore(fresh).get_by_note(note.id)
            assert [r.amount for r in records] == [Decimal("10.01")]

    async def test_request_notes_are_appended_to_record(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        _, record = await PaymentAllocator(db_session, clock).pay_note(note.id, 40, notes="Depósito Pichincha")

        assert record.notes == f"Pago a nota de salida {note.number}. Depósito Pichincha"


class TestPayGlobal:

    async def test_oldest_first_allocation(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        n1 = await make_note(seller, 30, JAN_1)
        n2 = await make_note(seller, 20, FEB_1)
        n3 = await make_note(seller, 50, MAR_1)

        plan, record = await PaymentAllocator(db_session, clock).pay_global(seller.id, 35)

        assert plan.notes_paid_count == 2
        assert plan.remainder == Decimal("0")
        assert (n1.amount_paid, n1.payment_status) == (Decimal("30"), NotePaymentStatus.PAID)
        assert (n2.amount_paid, n2.payment_status) == (Decimal("5"), NotePaymentStatus.PARTIAL)
        assert (n3.amount_paid, n3.payment_status) == (Decimal("0"), NotePaymentStatus.UNPAID)

    async def test_notes_are_ordered_by_date_not_creation(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        newer = await make_note(seller, 50, MAR_1)
        older = await make_note(seller, 50, JAN_1)

        await PaymentAllocator(db_session, clock).pay_global(seller.id, 50)

        assert older.payment_status == NotePaymentStatus.PAID
        assert newer.amount_paid == Decimal("0")

    async def test_overpayment_remainder(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        notes = [await make_note(seller, 25, JAN_1), await make_note(seller, 15, FEB_1)]

        plan, _ = await PaymentAllocator(db_session, clock).pay_global(seller.id, 100)

        assert all(n.payment_status == NotePaymentStatus.PAID for n in notes)
        assert plan.remainder == Decimal("60")

    async def test_empty_state(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        paid_note = await make_note(seller, 40, JAN_1, amount_paid=40)

        plan, record = await PaymentAllocator(db_session, clock).pay_global(seller.id, 75)

        assert plan.notes_paid_count == 0
        assert plan.remainder == Decimal("75")
        await db_session.refresh(paid_note)
        assert paid_note.amount_paid == Decimal("40")
        # Se registra igual, como crédito sin notas aplicadas
        assert record.amount == Decimal("75")
        assert record.notes == "Pago global aplicado a 0 notas"

    async def test_single_record_with_full_amount(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 30, JAN_1)
        await make_note(seller, 30, FEB_1)

        _, record = await PaymentAllocator(db_session, clock).pay_global(seller.id, 100)

        records = await PaymentRecordStore(db_session).get_by_seller(seller.id)
        assert len(records) == 1
        assert record.kind == PaymentKind.GLOBAL
        assert record.amount == Decimal("100")
        assert record.exit_note_id is None
        assert record.notes == "Pago global aplicado a 2 notas"

    async def test_unknown_seller(self, db_session, clock):
        with pytest.raises(SellerNotFound):
            await PaymentAllocator(db_session, clock).pay_global(uuid4(), 10)

    async def test_sub_cent_amounts(self, db_session, clock, make_seller, make_note):
        seller = await make_seller()
        first = await make_note(seller, 10, JAN_1)
        second = await make_note(seller, 10, FEB_1)
        allocator = PaymentAllocator(db_session, clock)

        with pytest.raises(InvalidAmount):
            await allocator.pay_global(seller.id, "0.001")

        plan, record = await allocator.pay_global(seller.id, "10.005")

        assert plan.amount == Decimal("10.01")
        assert record.amount == Decimal("10.01")
        assert (first.amount_paid, first.payment_status) == (Decimal("10"), NotePaymentStatus.PAID)
        # El centavo restante queda dentro de epsilon y no se aplica
        assert (second.amount_paid, second.payment_status) == (Decimal("0"), NotePaymentStatus.UNPAID)
        assert plan.remainder == Decimal("0.01")

    async def test_request_notes_are_appended_to_record(self, db_session, clock, make_seller):
        seller = await make_seller()

        _, record = await PaymentAllocator(db_session, clock).pay_global(seller.id, 20, notes="Transferencia 4411")

        assert record.notes == "Pago global aplicado a 0 notas. Transferencia 4411"

    async def test_invalid_amount(self, db_session, clock, make_seller):
        seller = await make_seller()
        with pytest.raises(InvalidAmount):
            await PaymentAllocator(db_session, clock).pay_global(seller.id, -1)
        assert await PaymentRecordStore(db_session).get_by_seller(seller.id) == []

    async def test_ana_scenario(self, db_session, clock, make_seller, make_note, make_payment):
        ana = await make_seller("Ana")
        n1 = await make_note(ana, 120, JAN_1)
        n2 = await make_note(ana, 80, FEB_1)
        await make_payment(ana, 50)
        calculator = BalanceCalculator(db_session)

        before = await calculator.compute_balance(ana.id)
        assert (before.historic_debt, before.total_payments, before.current_debt) == (
            Decimal("200"), Decimal("50"), Decimal("150")
        )

        plan, _ = await PaymentAllocator(db_session, clock).pay_global(ana.id, 150)

        assert plan.remainder == Decimal("0")
        assert (n1.amount_paid, n1.payment_status) == (Decimal("120"), NotePaymentStatus.PAID)
        assert (n2.amount_paid, n2.payment_status) == (Decimal("30"), NotePaymentStatus.PARTIAL)

        after = await calculator.compute_balance(ana.id)
        assert (after.historic_debt, after.total_payments, after.current_debt) == (
            Decimal("200"), Decimal("200"), Decimal("0")
        )


class TestConservation:
    """
    Tras cualquier secuencia de pagos:
    - total_payments crece exactamente en cada monto recibido
    - lo pagado en las notas crece exactamente en lo aplicado
    - la deuda histórica no cambia
    """

    @staticmethod
    async def _paid(store, notes):
        return {n.id: (await store.get_by_id(n.id)).amount_paid for n in notes}

    @pytest.mark.parametrize("seed", range(8))
    async def test_random_payment_sequences(self, db_session, clock, make_seller, make_note, seed):
        rng = random.Random(seed)
        seller = await make_seller(f"Vendedor {seed}")
        notes = [
            await make_note(seller, Decimal(rng.randint(100, 50000)) / 100, JAN_1 + timedelta(days=i))
            for i in range(rng.randint(1, 5))
        ]
        historic = sum((n.total_price for n in notes), Decimal("0"))
        allocator = PaymentAllocator(db_session, clock)
        calculator = BalanceCalculator(db_session)
        store = NoteStore(db_session)
        received = Decimal("0")

        for _ in range(rng.randint(1, 10)):
            before = await self._paid(store, notes)
            amount = Decimal(rng.randint(1, 30000)) / 100
            if rng.random() < 0.5:
                await allocator.pay_note(rng.choice(notes).id, amount)
                applied = amount
            else:
                plan, _ = await allocator.pay_global(seller.id, amount)
                applied = amount - plan.remainder
            received += amount
            after = await self._paid(store, notes)

            assert sum(after.values()) - sum(before.values()) == applied
            # Ningún pago reduce lo pagado de una nota
            assert all(after[note_id] >= before[note_id] for note_id in before)

            balance = await calculator.compute_balance(seller.id)
            assert balance.historic_debt == historic
            assert balance.total_payments == received
            assert balance.current_debt == historic - received


class TestWriteFailures:

    async def test_record_failure_is_swallowed(self, db_session, clock, make_seller, make_note, monkeypatch, caplog):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        async def failing_create(self, **fields):
            raise _db_error()

        monkeypatch.setattr(PaymentRecordStore, "create", failing_create)

        note, record = await PaymentAllocator(db_session, clock).pay_note(note.id, 60)

        assert record is None
        assert note.amount_paid == Decimal("60")
        assert note.payment_status == NotePaymentStatus.PARTIAL
        assert "Payment record not saved" in caplog.text

        stored = await NoteStore(db_session).get_by_id(note.id)
        assert stored.amount_paid == Decimal("60")

    async def test_global_record_failure_keeps_allocation(self, db_session, clock, make_seller, make_note, monkeypatch):
        seller = await make_seller()
        await make_note(seller, 30, JAN_1)
        await make_note(seller, 30, FEB_1)

        async def failing_create(self, **fields):
            raise _db_error()

        monkeypatch.setattr(PaymentRecordStore, "create", failing_create)

        plan, record = await PaymentAllocator(db_session, clock).pay_global(seller.id, 45)

        assert record is None
        assert plan.notes_paid_count == 2
        notes = await NoteStore(db_session).get_by_seller(seller.id)
        assert [n.amount_paid for n in notes] == [Decimal("30"), Decimal("15")]

    async def test_note_write_failure_propagates(self, db_session, clock, make_seller, make_note, monkeypatch):
        seller = await make_seller()
        seller_id = seller.id
        await make_note(seller, 30, JAN_1)
        await make_note(seller, 30, FEB_1)

        original_commit = db_session.commit

        async def failing_commit():
            raise _db_error()

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(StoreWriteFailure) as exc:
            await PaymentAllocator(db_session, clock).pay_global(seller_id, 45)
        assert exc.value.status_code == 500

        # El rollback expira los objetos cargados; se consulta por id
        monkeypatch.setattr(db_session, "commit", original_commit)
        notes = await NoteStore(db_session).get_by_seller(seller_id)
        # Ninguna asignación quedó guardada
        assert [n.amount_paid for n in notes] == [Decimal("0"), Decimal("0")]
        assert await PaymentRecordStore(db_session).get_by_seller(seller_id) == []


# ===== NOTAS DE PAGO MANUALES =====

class TestPaymentRecordService:

    async def test_manual_seller_payment_is_pending(self, db_session, clock, make_seller):
        seller = await make_seller()
        service = PaymentRecordService(db_session, clock)

        record = await service.create_manual(PaymentRecordCreate(seller_id=seller.id, amount=Decimal("25")))

        assert record.status == PaymentStatus.PENDING
        assert record.kind == PaymentKind.MANUAL
        assert record.seller_name == seller.name
        assert [r.id for r in await service.list_pending()] == [record.id]

        balance = await BalanceCalculator(db_session).compute_balance(seller.id)
        assert balance.total_payments == Decimal("0")

    async def test_approve_counts_toward_balance(self, db_session, clock, make_seller):
        seller = await make_seller()
        service = PaymentRecordService(db_session, clock)
        record = await service.create_manual(PaymentRecordCreate(seller_id=seller.id, amount=Decimal("25")))

        approved = await service.approve(record.id, "admin")

        assert approved.status == PaymentStatus.APPROVED
        assert approved.approved_by == "admin"
        assert approved.approved_at == clock.now()
        balance = await BalanceCalculator(db_session).compute_balance(seller.id)
        assert balance.total_payments == Decimal("25")
        assert balance.current_debt == Decimal("-25")

    async def test_rejected_never_counts(self, db_session, clock, make_seller):
        seller = await make_seller()
        service = PaymentRecordService(db_session, clock)
        record = await service.create_manual(PaymentRecordCreate(seller_id=seller.id, amount=Decimal("25")))

        await service.reject(record.id, "admin", "Depósito no encontrado")

        balance = await BalanceCalculator(db_session).compute_balance(seller.id)
        assert balance.total_payments == Decimal("0")

    async def test_review_only_from_pending(self, db_session, clock, make_seller):
        seller = await make_seller()
        service = PaymentRecordService(db_session, clock)
        record = await service.create_manual(PaymentRecordCreate(seller_id=seller.id, amount=Decimal("25")))
        await service.reject(record.id)

        with pytest.raises(InvalidStatusTransition):
            await service.approve(record.id)

    async def test_customer_payment(self, db_session, clock):
        service = PaymentRecordService(db_session, clock)

        record = await service.create_manual(PaymentRecordCreate(
            source_type="customer", customer_id="cli-77", customer_name="Cliente mostrador", amount=Decimal("12")
        ))

        assert record.source_type == PaymentSourceType.CUSTOMER
        assert record.seller_id is None
        assert record.customer_id == "cli-77"

    async def test_invalid_amount(self, db_session, clock, make_seller):
        seller = await make_seller()
        with pytest.raises(InvalidAmount):
            await PaymentRecordService(db_session, clock).create_manual(
                PaymentRecordCreate(seller_id=seller.id, amount=Decimal("0"))
            )

    def test_source_must_match(self):
        with pytest.raises(ValueError):
            PaymentRecordCreate(source_type="seller", customer_id="cli-1", amount=Decimal("5"))
        with pytest.raises(ValueError):
            PaymentRecordCreate(source_type="customer", seller_id=uuid4(), amount=Decimal("5"))


# ===== API =====

class TestPaymentsAPI:

    async def test_pay_note_endpoint(self, client, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        response = await client.post(f"/exit-notes/{note.id}/payments", json={"amount": "40", "method": "bank"})

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["amount_paid"]) == Decimal("40")
        assert Decimal(data["pending_amount"]) == Decimal("60")
        assert data["payment_status"] == "partial"
        assert data["payment_record"]["method"] == "bank"
        assert data["payment_record"]["status"] == "approved"

    async def test_pay_global_endpoint(self, client, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 30, JAN_1)

        response = await client.post(f"/sellers/{seller.id}/payments", json={"amount": 50})

        assert response.status_code == 200
        data = response.json()
        assert data["notes_paid_count"] == 1
        assert Decimal(data["remainder"]) == Decimal("20")
        assert Decimal(data["payment_record"]["amount"]) == Decimal("50")

    async def test_request_notes_reach_the_record(self, client, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 30, JAN_1)

        response = await client.post(
            f"/sellers/{seller.id}/payments", json={"amount": "30", "notes": "Transferencia 4411"}
        )

        assert response.status_code == 200
        assert response.json()["payment_record"]["notes"] == "Pago global aplicado a 1 notas. Transferencia 4411"

    async def test_pay_note_reports_rounded_amount(self, client, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        response = await client.post(f"/exit-notes/{note.id}/payments", json={"amount": "10.005"})

        data = response.json()
        assert Decimal(data["amount"]) == Decimal("10.01")
        assert Decimal(data["amount_paid"]) == Decimal("10.01")

    async def test_sub_cent_amount_is_400(self, client, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        response = await client.post(f"/exit-notes/{note.id}/payments", json={"amount": "0.001"})

        assert response.status_code == 400

    async def test_invalid_amount_is_400(self, client, make_seller, make_note):
        seller = await make_seller()
        note = await make_note(seller, 100, JAN_1)

        response = await client.post(f"/exit-notes/{note.id}/payments", json={"amount": "-5"})

        assert response.status_code == 400

    async def test_unknown_note_is_404(self, client):
        response = await client.post(f"/exit-notes/{uuid4()}/payments", json={"amount": "5"})
        assert response.status_code == 404

    async def test_manual_record_flow(self, client, make_seller):
        seller = await make_seller()

        created = await client.post("/payments/", json={"seller_id": str(seller.id), "amount": "15"})
        assert created.status_code == 201
        payment_id = created.json()["id"]

        pending = await client.get("/payments/pending")
        assert pending.json()["total"] == 1

        approved = await client.post(f"/payments/{payment_id}/approve", json={"reviewed_by": "admin"})
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"

        again = await client.post(f"/payments/{payment_id}/reject", json={})
        assert again.status_code == 400

        listed = await client.get("/payments/", params={"seller_id": str(seller.id), "status": "approved"})
        assert listed.json()["total"] == 1

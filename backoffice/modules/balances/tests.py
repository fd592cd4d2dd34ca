"""
Tests para el módulo de Saldos
"""

import csv
import io
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from backoffice.core.exceptions import SellerNotFound
from backoffice.modules.balances.service import BalanceCalculator, StatementService
from backoffice.modules.balances.utils import statement_movements
from backoffice.modules.exit_notes.models import ExitNoteStatus
from backoffice.modules.payments.models import PaymentSourceType, PaymentStatus
from backoffice.modules.payments.schemas import PaymentRecordCreate
from backoffice.modules.payments.service import PaymentRecordService


JAN_1 = datetime(2025, 1, 1, tzinfo=timezone.utc)
JAN_15 = datetime(2025, 1, 15, tzinfo=timezone.utc)
FEB_1 = datetime(2025, 2, 1, tzinfo=timezone.utc)


class TestBalanceCalculator:

    async def test_only_delivered_and_received_notes_are_debt(self, db_session, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 100, JAN_1, status=ExitNoteStatus.DELIVERED)
        await make_note(seller, 50, JAN_1, status=ExitNoteStatus.RECEIVED)
        await make_note(seller, 70, JAN_1, status=ExitNoteStatus.IN_TRANSIT)
        await make_note(seller, 30, JAN_1, status=ExitNoteStatus.PENDING)
        await make_note(seller, 20, JAN_1, status=ExitNoteStatus.CANCELLED)

        balance = await BalanceCalculator(db_session).compute_balance(seller.id)

        assert balance.historic_debt == Decimal("150")

    async def test_only_approved_payments_count(self, db_session, make_seller, make_payment):
        seller = await make_seller()
        await make_payment(seller, 40)
        await make_payment(seller, 25, status=PaymentStatus.PENDING)
        await make_payment(seller, 10, status=PaymentStatus.REJECTED)

        balance = await BalanceCalculator(db_session).compute_balance(seller.id)

        assert balance.total_payments == Decimal("40")

    async def test_customer_payments_never_count(self, db_session, clock, make_seller):
        seller = await make_seller()
        service = PaymentRecordService(db_session, clock)
        record = await service.create_manual(PaymentRecordCreate(
            source_type=PaymentSourceType.CUSTOMER.value, customer_id="cli-1", amount=Decimal("99")
        ))
        await service.approve(record.id)

        balance = await BalanceCalculator(db_session).compute_balance(seller.id)

        assert balance.total_payments == Decimal("0")

    async def test_credit_balance_is_negative(self, db_session, make_seller, make_note, make_payment):
        seller = await make_seller()
        await make_note(seller, 60, JAN_1)
        await make_payment(seller, 100)

        balance = await BalanceCalculator(db_session).compute_balance(seller.id)

        assert balance.current_debt == Decimal("-40")

    async def test_unknown_seller_has_zero_balance(self, db_session):
        balance = await BalanceCalculator(db_session).compute_balance(uuid4())

        assert (balance.historic_debt, balance.total_payments, balance.current_debt) == (0, 0, 0)

    async def test_list_balances(self, db_session, make_seller, make_note, make_payment):
        ana = await make_seller("Ana Pérez", email="ana@example.com")
        bruno = await make_seller("Bruno Díaz", email="bruno@example.com")
        await make_note(ana, 120, JAN_1)
        await make_note(bruno, 80, JAN_1)
        await make_note(bruno, 30, JAN_1, status=ExitNoteStatus.PENDING)
        await make_payment(bruno, 50)
        calculator = BalanceCalculator(db_session)

        rows = await calculator.list_balances()

        assert [r.name for r in rows] == ["Ana Pérez", "Bruno Díaz"]
        assert rows[0].current_debt == Decimal("120")
        assert (rows[1].historic_debt, rows[1].total_payments, rows[1].current_debt) == (
            Decimal("80"), Decimal("50"), Decimal("30")
        )
        # Coincide con el saldo individual
        for row in rows:
            single = await calculator.compute_balance(row.seller_id)
            assert single.current_debt == row.current_debt

        found = await calculator.list_balances(search="BRUNO@")
        assert [r.slug for r in found] == ["bruno"]


class TestStatement:

    async def test_build_statement(self, db_session, clock, make_seller, make_note, make_payment):
        seller = await make_seller()
        await make_note(seller, 100, JAN_1)
        await make_note(seller, 40, FEB_1, status=ExitNoteStatus.IN_TRANSIT)
        await make_note(seller, 10, FEB_1, status=ExitNoteStatus.CANCELLED)
        await make_payment(seller, 30, approved_at=JAN_15)
        await make_payment(seller, 99, status=PaymentStatus.PENDING)

        statement = await StatementService(db_session, clock).build_statement(seller.id)

        assert len(statement.received_notes) == 1
        assert len(statement.sent_notes) == 1
        assert len(statement.payments) == 1
        assert statement.balance.current_debt == Decimal("70")
        assert statement.generated_at == clock.now()

    async def test_movements_running_balance(self, db_session, clock, make_seller, make_note, make_payment):
        seller = await make_seller()
        await make_note(seller, 100, JAN_1)
        await make_note(seller, 50, FEB_1)
        await make_payment(seller, 30, approved_at=JAN_15)

        statement = await StatementService(db_session, clock).build_statement(seller.id)
        rows = statement_movements(statement)

        assert [r["type"] for r in rows] == ["Nota de salida", "Pago", "Nota de salida"]
        assert [r["balance"] for r in rows] == [Decimal("100"), Decimal("70"), Decimal("120")]
        assert rows[-1]["balance"] == statement.balance.current_debt

    async def test_unknown_seller(self, db_session, clock):
        with pytest.raises(SellerNotFound):
            await StatementService(db_session, clock).build_statement(uuid4())


class TestBalancesAPI:

    async def test_balance_endpoint(self, client, make_seller, make_note, make_payment):
        seller = await make_seller()
        await make_note(seller, 90, JAN_1)
        await make_payment(seller, 100)

        response = await client.get(f"/sellers/{seller.id}/balance")

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["historic_debt"]) == Decimal("90")
        assert Decimal(data["current_debt"]) == Decimal("-10")

    async def test_balance_reflects_payment(self, client, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 90, JAN_1)

        await client.post(f"/sellers/{seller.id}/payments", json={"amount": "90"})
        data = (await client.get(f"/sellers/{seller.id}/balance")).json()

        assert Decimal(data["total_payments"]) == Decimal("90")
        assert Decimal(data["current_debt"]) == Decimal("0")

    async def test_list_balances_endpoint(self, client, make_seller):
        await make_seller("Ana Pérez")
        await make_seller("Bruno Díaz")

        response = await client.get("/balances/", params={"search": "ana"})

        assert response.status_code == 200
        assert response.json()["total"] == 1

    async def test_statement_csv(self, client, make_seller, make_note, make_payment):
        seller = await make_seller("Ana Pérez")
        await make_note(seller, 100, JAN_1)
        await make_payment(seller, 30, approved_at=JAN_15)

        response = await client.get(f"/sellers/{seller.id}/statement", params={"export": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "estado_cuenta_ana_2025-03-01.csv" in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["Fecha", "Tipo", "Número", "Descripción", "Cargo", "Abono", "Saldo"]
        assert [Decimal(r[6]) for r in rows[1:]] == [Decimal("100"), Decimal("70")]

    async def test_statement_json(self, client, make_seller, make_note):
        seller = await make_seller()
        await make_note(seller, 100, JAN_1)

        response = await client.get(f"/sellers/{seller.id}/statement")

        assert response.status_code == 200
        assert response.json()["seller"]["id"] == str(seller.id)
        assert len(response.json()["received_notes"]) == 1

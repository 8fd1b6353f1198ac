"""
Ledger API Tests.

End-to-end flows over HTTP: account holders, recording, statements,
CSV export and supplier ledgers.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest

from bakery_ledger.app.services.summary_cache import get_redis
from bakery_ledger.app.main import app
from bakery_ledger.tests.support import BrokenRedis


def today(offset_days=0):
    return (date.today() - timedelta(days=offset_days)).isoformat()


async def create_holder(client, entity_type, name, **fields):
    response = await client.post(f"/v1/entities/{entity_type}", json={"name": name, **fields})
    assert response.status_code == 201, response.text
    return response.json()


async def post_transaction(client, entity_type, entity_id, transaction_type, amount, **fields):
    body = {
        "entity_type": entity_type,
        "entity_id": entity_id,
        "transaction_date": today(),
        "description": "Counter sale",
        "transaction_type": transaction_type,
        "amount": amount,
    }
    body.update(fields)
    return await client.post("/v1/ledger", json=body)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["summary_cache"] == "ok"
    assert "X-Correlation-ID" in response.headers


@pytest.mark.asyncio
async def test_create_and_fetch_customer(client):
    created = await create_holder(client, "customer", "Sunrise Cafe", opening_balance="25.5", phone="555-0101")
    assert Decimal(created["current_balance"]) == Decimal("25.50")
    assert created["balance_status"] == "Due"

    response = await client.get(f"/v1/entities/customer/{created['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Sunrise Cafe"


@pytest.mark.asyncio
async def test_unknown_entity_is_404(client):
    response = await client.get("/v1/entities/party/4242")
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"

    response = await post_transaction(client, "customer", 4242, "sale", "10")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_and_read_customer_ledger(client):
    holder = await create_holder(client, "customer", "Sunrise Cafe")

    response = await post_transaction(client, "customer", holder["id"], "sale", "100")
    assert response.status_code == 201, response.text
    assert Decimal(response.json()["current_balance"]) == Decimal("100.00")

    response = await post_transaction(
        client, "customer", holder["id"], "payment_received", 60,
        description="Cash received", payment_method="cash",
    )
    summary = response.json()
    assert Decimal(summary["current_balance"]) == Decimal("40.00")
    assert summary["balance_side"] == "Dr."
    assert summary["transaction_count"] == 2

    response = await client.get(f"/v1/ledger/customer/{holder['id']}")
    assert response.status_code == 200
    ledger = response.json()
    assert [Decimal(t["running_balance"]) for t in ledger["transactions"]] == [Decimal("100"), Decimal("40")]
    assert ledger["transactions"][1]["payment_method"] == "cash"
    assert Decimal(ledger["total_credit"]) == Decimal("60")

    response = await client.get(f"/v1/ledger/customer/{holder['id']}/summary")
    assert Decimal(response.json()["current_balance"]) == Decimal("40.00")

    response = await client.get(f"/v1/entities/customer/{holder['id']}")
    assert Decimal(response.json()["current_balance"]) == Decimal("40.00")


@pytest.mark.asyncio
async def test_invalid_submission_returns_field_errors(client):
    holder = await create_holder(client, "customer", "Sunrise Cafe")

    response = await post_transaction(
        client, "customer", holder["id"], "sale", "0",
        description="Hi", transaction_date=today(400),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "ERR_LEDGER_VALIDATION"
    assert set(body["details"]["errors"]) == {"amount", "description", "transaction_date"}

    ledger = (await client.get(f"/v1/ledger/customer/{holder['id']}")).json()
    assert ledger["transactions"] == []


@pytest.mark.asyncio
async def test_client_cannot_set_debit_or_credit(client):
    holder = await create_holder(client, "customer", "Sunrise Cafe")

    response = await post_transaction(client, "customer", holder["id"], "sale", "10", debit_amount="10")

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_export_ledger_csv(client):
    holder = await create_holder(client, "customer", "Café Lumière")
    await post_transaction(client, "customer", holder["id"], "sale", "12.5", description='Tart, "lemon"')

    response = await client.get(f"/v1/ledger/customer/{holder['id']}/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment;")
    assert "filename*=UTF-8''Caf%C3%A9%20Lumi%C3%A8re_ledger.csv" in disposition
    lines = response.content.decode("utf-8").splitlines()
    assert lines[0] == "Date,Description,Reference,Debit,Credit,Running Balance"
    assert lines[1].endswith(',"Tart, ""lemon""",,12.50,0.00,12.50')


@pytest.mark.asyncio
async def test_opening_balance_change_and_rebuild(client):
    holder = await create_holder(client, "party", "Golden Mills", party_type="supplier")
    await post_transaction(client, "party", holder["id"], "purchase", "300", description="Flour delivery")

    response = await client.put(
        f"/v1/entities/party/{holder['id']}/opening-balance", json={"opening_balance": "-100"}
    )
    assert response.status_code == 200
    assert Decimal(response.json()["current_balance"]) == Decimal("200.00")

    response = await client.post(f"/v1/ledger/party/{holder['id']}/rebuild")
    assert response.status_code == 200
    assert Decimal(response.json()["current_balance"]) == Decimal("200.00")


@pytest.mark.asyncio
async def test_supplier_purchase_flow(client):
    supplier = await create_holder(client, "party", "Golden Mills", party_type="supplier")
    await create_holder(client, "party", "City Bank", party_type="creditor")

    response = await client.post(
        f"/v1/parties/{supplier['id']}/purchases",
        json={
            "transaction_date": today(3),
            "description": "Flour 50kg",
            "amount": "1000",
            "reference_number": "INV-1",
        },
    )
    assert response.status_code == 201, response.text

    response = await client.post(
        f"/v1/parties/{supplier['id']}/purchases",
        json={
            "transaction_date": today(1),
            "description": "Butter 10kg",
            "amount": "200",
            "reference_number": "INV-2",
            "payment_method": "cash",
            "paid_in_full": True,
        },
    )
    assert Decimal(response.json()["current_balance"]) == Decimal("1000.00")

    response = await client.get("/v1/supplier-ledgers")
    assert response.status_code == 200
    ledgers = response.json()
    assert [ledger["supplier_name"] for ledger in ledgers] == ["Golden Mills"]

    response = await client.get(f"/v1/supplier-ledgers/{supplier['id']}")
    ledger = response.json()
    assert [row["payment_status"] for row in ledger["transactions"]] == ["Due", "Paid"]
    assert Decimal(ledger["total_outstanding"]) == Decimal("1000.00")

    response = await client.get(f"/v1/supplier-ledgers/{supplier['id']}/export")
    assert response.status_code == 200
    assert response.content.decode("utf-8").splitlines()[0] == (
        "Date,Invoice#,Items,Total Amount,Amount Paid,Outstanding,Running Balance,Status"
    )


@pytest.mark.asyncio
async def test_purchase_rejected_for_customer_only_types(client):
    supplier = await create_holder(client, "party", "Golden Mills")
    response = await post_transaction(client, "party", supplier["id"], "sale", "10")

    assert response.status_code == 422
    assert "transaction_type" in response.json()["details"]["errors"]


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.INFO)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def ledger_log():
    ledger_logger = logging.getLogger("bakery_ledger.ledger")
    handler = RecordingHandler()
    previous_level = ledger_logger.level
    ledger_logger.setLevel(logging.INFO)
    ledger_logger.addHandler(handler)
    yield handler.records
    ledger_logger.removeHandler(handler)
    ledger_logger.setLevel(previous_level)


@pytest.mark.asyncio
async def test_health_reports_unreachable_summary_cache(client):
    async def broken_redis():
        return BrokenRedis()

    app.dependency_overrides[get_redis] = broken_redis
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["summary_cache"] == "unavailable"


@pytest.mark.asyncio
async def test_recorded_transaction_log_carries_request_correlation_id(client, ledger_log):
    holder = await create_holder(client, "customer", "Sunrise Cafe")

    response = await client.post(
        "/v1/ledger",
        json={
            "entity_type": "customer",
            "entity_id": holder["id"],
            "transaction_date": today(),
            "description": "Counter sale",
            "transaction_type": "sale",
            "amount": "18",
        },
        headers={"X-Correlation-ID": "till-7-0042"},
    )

    assert response.status_code == 201
    assert response.headers["X-Correlation-ID"] == "till-7-0042"
    recorded = [r for r in ledger_log if r.getMessage() == "Ledger transaction recorded"]
    assert len(recorded) == 1
    assert recorded[0].correlation_id == "till-7-0042"
    assert recorded[0].entity == f"customer:{holder['id']}"


@pytest.mark.asyncio
async def test_generated_correlation_id_is_returned(client):
    response = await client.get("/health")
    assert len(response.headers["X-Correlation-ID"]) == 32

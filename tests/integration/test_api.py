"""Integration tests for API endpoints"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration

RECIPIENT = {"name": "Sarah Jenkins", "account_number": "8829145678", "bank_name": "Maybank"}


def transfer_body(amount, **overrides):
    body = {"amount": amount, "recipient": RECIPIENT, "note": "Lunch"}
    body.update(overrides)
    return body


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "transfer_outcome_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_accounts_and_limits(client: TestClient):
    accounts = client.get("/v1/accounts").json()
    limits = client.get("/v1/limits").json()

    default = next(a for a in accounts if a["is_default"])
    assert default["id"] == "acc-001"
    assert Decimal(default["balance"]) == Decimal("4500")
    assert Decimal(limits["daily"]["remaining"]) == Decimal("7500")
    assert Decimal(limits["per_transaction"]) == Decimal("5000")


def test_validate_zero_amount_has_nothing_to_report(client: TestClient):
    response = client.post("/v1/transfers/validate", json=transfer_body(0))

    assert response.status_code == 200
    assert response.json() == {"is_valid": False, "errors": [], "warnings": []}


def test_validate_reports_every_failing_check(client: TestClient):
    response = client.post("/v1/transfers/validate", json=transfer_body(8000))

    data = response.json()
    assert data["is_valid"] is False
    assert [e["kind"] for e in data["errors"]] == [
        "INSUFFICIENT_FUNDS",
        "PER_TRANSACTION_LIMIT_EXCEEDED",
        "DAILY_LIMIT_EXCEEDED",
    ]


def test_validate_stays_quiet_below_warning_threshold(client: TestClient):
    """Seed daily usage is 2500 of 10000; 4000 more projects to 65%"""
    quiet = client.post("/v1/transfers/validate", json=transfer_body(4000)).json()
    assert quiet["is_valid"] is True
    assert quiet["warnings"] == []


def test_validate_unknown_account(client: TestClient):
    response = client.post("/v1/transfers/validate", json=transfer_body(100, from_account_id="acc-404"))
    assert response.status_code == 404


def test_execute_transfer_commits(client: TestClient):
    response = client.post("/v1/transfers", json=transfer_body(100))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "completed"
    assert Decimal(data["amount"]) == Decimal("100")
    assert data["recipient"]["name"] == "Sarah Jenkins"
    assert data["recipient"]["id"].startswith("rec-")
    assert data["reference"].startswith("ODS-")

    balance = next(a for a in client.get("/v1/accounts").json() if a["id"] == "acc-001")["balance"]
    assert Decimal(balance) == Decimal("4400")
    limits = client.get("/v1/limits").json()
    assert Decimal(limits["daily"]["used"]) == Decimal("2600")
    assert Decimal(limits["monthly"]["remaining"]) == Decimal("34900")


def test_execute_transfer_failure_carries_code(client: TestClient):
    response = client.post("/v1/transfers", json=transfer_body(6000))

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "INSUFFICIENT_FUNDS"
    assert "4,500.00" in detail["message"]


def test_execute_transfer_unknown_account(client: TestClient):
    response = client.post("/v1/transfers", json=transfer_body(100, from_account_id="acc-404"))

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "INVALID_ACCOUNT"


def test_execute_from_secondary_account(client: TestClient):
    response = client.post("/v1/transfers", json=transfer_body(5000, from_account_id="acc-002"))

    assert response.status_code == 201
    assert response.json()["sender_account_id"] == "acc-002"


def test_transaction_history(client: TestClient):
    first = client.post("/v1/transfers", json=transfer_body(10)).json()
    second = client.post("/v1/transfers", json=transfer_body(20)).json()

    history = client.get("/v1/transactions", params={"limit": 1}).json()
    assert history["total"] == 2
    assert history["has_more"] is True
    assert history["items"][0]["id"] == second["id"]

    fetched = client.get(f"/v1/transactions/{first['id']}")
    assert fetched.status_code == 200
    assert Decimal(fetched.json()["amount"]) == Decimal("10")


def test_missing_transaction_returns_404(client: TestClient):
    assert client.get("/v1/transactions/txn-missing").status_code == 404


def test_non_numeric_amount_is_rejected_by_schema(client: TestClient):
    response = client.post("/v1/transfers", json=transfer_body("lots"))
    assert response.status_code == 422


def test_list_banks(client: TestClient):
    banks = client.get("/v1/banks", params={"popular_only": True}).json()
    assert [b["short_name"] for b in banks] == ["MBB", "CIMB", "PBB", "RHB", "HLB"]


def test_recipients_and_favorites(client: TestClient):
    recipients = client.get("/v1/recipients", params={"limit": 2}).json()
    assert [r["id"] for r in recipients] == ["rec-001", "rec-002"]

    toggled = client.post("/v1/recipients/rec-003/favorite")
    assert toggled.status_code == 200
    assert toggled.json()["is_favorite"] is True

    favorites = client.get("/v1/recipients", params={"favorites_only": True}).json()
    assert "rec-003" in [r["id"] for r in favorites]

    assert client.post("/v1/recipients/rec-missing/favorite").status_code == 404


def test_recipient_lookup(client: TestClient):
    found = client.get("/v1/recipients/lookup", params={"account_number": "8829145678"})
    assert found.status_code == 200
    assert found.json()["name"] == "Sarah Jenkins"

    missing = client.get("/v1/recipients/lookup", params={"phone_number": "+60100000000"})
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "RECIPIENT_NOT_FOUND"

    assert client.get("/v1/recipients/lookup").status_code == 422


def test_save_recipient(client: TestClient):
    response = client.post("/v1/recipients", json={"name": "Aiman", "phone_number": "+60123456789"})

    assert response.status_code == 201
    saved = response.json()
    assert saved["id"].startswith("rec-")
    assert saved["id"] in [r["id"] for r in client.get("/v1/recipients").json()]


def test_transfer_to_saved_recipient_moves_it_to_the_top(client: TestClient):
    body = transfer_body(10, recipient={"id": "rec-006", "name": "David Lee", "account_number": "3345678901"})
    assert client.post("/v1/transfers", json=body).status_code == 201

    recipients = client.get("/v1/recipients").json()
    assert recipients[0]["id"] == "rec-006"

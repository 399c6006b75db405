import uuid
from decimal import Decimal

import pytest

from walletbook.errors import StoreError
from walletbook.ledger import SqlRecordStore


@pytest.fixture
def wallet(client, auth_headers):
    return client.post("/api/v1/wallets/", json={"name": "Cash", "balance": 100000}, headers=auth_headers).json()


@pytest.fixture
def base(wallet):
    return f"/api/v1/wallets/{wallet['id']}"


@pytest.fixture
def theme(client, auth_headers, base):
    return client.post(f"{base}/themes/", json={"name": "Food", "max_budget": 50000}, headers=auth_headers).json()


def wallet_balance(client, headers, base):
    return Decimal(client.get(base, headers=headers).json()["balance"])


def theme_spent(client, headers, base, theme_id):
    themes = client.get(f"{base}/themes/", headers=headers).json()
    return next(Decimal(t["current_spent"]) for t in themes if t["id"] == theme_id)


def test_full_flow_matches_running_totals(client, auth_headers, base, theme):
    r = client.post(
        f"{base}/transactions/",
        json={"description": "Groceries", "amount": 20000, "type": "expense", "theme_id": theme["id"]},
        headers=auth_headers,
    )
    assert r.status_code == 201
    a = r.json()["transaction"]
    assert r.json()["steps"][0] == "insert transaction"

    b = client.post(
        f"{base}/transactions/",
        json={"description": "Salary", "amount": 50000, "type": "income"},
        headers=auth_headers,
    ).json()["transaction"]
    assert wallet_balance(client, auth_headers, base) == Decimal("130000")

    r = client.patch(f"{base}/transactions/{a['id']}", json={"amount": 30000}, headers=auth_headers)
    assert r.status_code == 200
    assert Decimal(r.json()["transaction"]["amount"]) == Decimal("30000")
    assert theme_spent(client, auth_headers, base, theme["id"]) == Decimal("30000")
    assert wallet_balance(client, auth_headers, base) == Decimal("120000")

    r = client.delete(f"{base}/transactions/{b['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["transaction"] is None

    assert wallet_balance(client, auth_headers, base) == Decimal("70000")
    assert theme_spent(client, auth_headers, base, theme["id"]) == Decimal("30000")
    assert [t["id"] for t in client.get(f"{base}/transactions/", headers=auth_headers).json()] == [a["id"]]


def test_list_filters_by_theme(client, auth_headers, base, theme):
    client.post(
        f"{base}/transactions/",
        json={"description": "Bread", "amount": 5, "type": "expense", "theme_id": theme["id"]},
        headers=auth_headers,
    )
    client.post(f"{base}/transactions/", json={"description": "Tip", "amount": 7, "type": "income"}, headers=auth_headers)
    txs = client.get(f"{base}/transactions/", params={"theme_id": theme["id"]}, headers=auth_headers).json()
    assert [t["description"] for t in txs] == ["Bread"]


def test_switch_expense_to_income(client, auth_headers, base, theme):
    tx = client.post(
        f"{base}/transactions/",
        json={"description": "Refund?", "amount": 50000, "type": "expense", "theme_id": theme["id"]},
        headers=auth_headers,
    ).json()["transaction"]
    r = client.patch(f"{base}/transactions/{tx['id']}", json={"type": "income"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["transaction"]["theme_id"] is None
    assert theme_spent(client, auth_headers, base, theme["id"]) == Decimal("0")
    assert wallet_balance(client, auth_headers, base) == Decimal("150000")


@pytest.mark.parametrize(
    "payload,fragment",
    [
        ({"amount": 10, "type": "income"}, "description"),
        ({"description": "x", "type": "income"}, "amount"),
        ({"description": "x", "amount": 0, "type": "income"}, "greater than zero"),
        ({"description": "x", "amount": -5, "type": "income"}, "greater than zero"),
        ({"description": "x", "amount": "1e30", "type": "income"}, "too large"),
        ({"description": "x", "amount": 5, "type": "expense"}, "theme_id"),
        ({"description": "x", "amount": 5, "type": "loan"}, "type"),
    ],
)
def test_missing_fields_rejected_without_side_effects(client, auth_headers, base, payload, fragment):
    r = client.post(f"{base}/transactions/", json=payload, headers=auth_headers)
    assert r.status_code == 422
    assert fragment in r.json()["detail"]
    assert client.get(f"{base}/transactions/", headers=auth_headers).json() == []
    assert wallet_balance(client, auth_headers, base) == Decimal("100000")


def test_theme_from_another_wallet_rejected(client, auth_headers, base):
    other = client.post("/api/v1/wallets/", json={"name": "Bank"}, headers=auth_headers).json()
    foreign = client.post(f"/api/v1/wallets/{other['id']}/themes/", json={"name": "Rent"}, headers=auth_headers).json()
    r = client.post(
        f"{base}/transactions/",
        json={"description": "Rent", "amount": 5, "type": "expense", "theme_id": foreign["id"]},
        headers=auth_headers,
    )
    assert r.status_code == 400


def test_unknown_transaction_is_404(client, auth_headers, base):
    assert client.delete(f"{base}/transactions/{uuid.uuid4()}", headers=auth_headers).status_code == 404
    assert client.patch(f"{base}/transactions/{uuid.uuid4()}", json={"amount": 1}, headers=auth_headers).status_code == 404


def test_partial_failure_is_reported(client, auth_headers, base, theme, monkeypatch):
    def boom(self, theme_id, delta, clamp_at_zero=True):
        raise StoreError("update theme spent failed: connection lost")

    monkeypatch.setattr(SqlRecordStore, "increment_theme_spent", boom)
    r = client.post(
        f"{base}/transactions/",
        json={"description": "Fuel", "amount": 300, "type": "expense", "theme_id": theme["id"]},
        headers=auth_headers,
    )
    assert r.status_code == 500
    body = r.json()
    assert body["operation"] == "create"
    assert body["committed"][0] == "insert transaction"
    assert body["committed"][1].startswith("wallet ")
    assert body["failed"].startswith(f"theme {theme['id']}")
    assert body["pending"] == []
    # wallet was charged, theme was not
    assert wallet_balance(client, auth_headers, base) == Decimal("99700")
    monkeypatch.undo()
    assert theme_spent(client, auth_headers, base, theme["id"]) == Decimal("0")


def test_store_failure_on_first_step_is_503(client, auth_headers, base, monkeypatch):
    def boom(self, record):
        raise StoreError("insert transaction failed: permission denied")

    monkeypatch.setattr(SqlRecordStore, "insert_transaction", boom)
    r = client.post(
        f"{base}/transactions/",
        json={"description": "Salary", "amount": 10, "type": "income"},
        headers=auth_headers,
    )
    assert r.status_code == 503
    assert wallet_balance(client, auth_headers, base) == Decimal("100000")

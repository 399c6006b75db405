import uuid
from decimal import Decimal


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_requires_user_header(client):
    assert client.get("/api/v1/wallets/").status_code == 401
    assert client.get("/api/v1/wallets/", headers={"X-User-Id": "nope"}).status_code == 401


def test_create_list_patch_wallet(client, auth_headers):
    r = client.post("/api/v1/wallets/", json={"name": "Cash", "balance": 100000}, headers=auth_headers)
    assert r.status_code == 201
    wallet = r.json()
    assert Decimal(wallet["balance"]) == Decimal("100000")

    r = client.get("/api/v1/wallets/", headers=auth_headers)
    assert [w["id"] for w in r.json()] == [wallet["id"]]

    r = client.patch(f"/api/v1/wallets/{wallet['id']}", json={"name": "Pocket"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Pocket"
    assert Decimal(r.json()["balance"]) == Decimal("100000")


def test_wallets_are_scoped_to_owner(client, auth_headers):
    wallet = client.post("/api/v1/wallets/", json={"name": "Cash"}, headers=auth_headers).json()
    other = {"X-User-Id": str(uuid.uuid4())}
    assert client.get("/api/v1/wallets/", headers=other).json() == []
    assert client.get(f"/api/v1/wallets/{wallet['id']}", headers=other).status_code == 404
    assert client.delete(f"/api/v1/wallets/{wallet['id']}", headers=other).status_code == 404


def test_delete_wallet_removes_themes_and_transactions(client, auth_headers, db):
    from walletbook.models import Theme, Transaction

    wallet = client.post("/api/v1/wallets/", json={"name": "Cash", "balance": 50}, headers=auth_headers).json()
    base = f"/api/v1/wallets/{wallet['id']}"
    theme = client.post(f"{base}/themes/", json={"name": "Food", "max_budget": 100}, headers=auth_headers).json()
    client.post(
        f"{base}/transactions/",
        json={"description": "Rice", "amount": 10, "type": "expense", "theme_id": theme["id"]},
        headers=auth_headers,
    )

    assert client.delete(base, headers=auth_headers).status_code == 204
    assert client.get(base, headers=auth_headers).status_code == 404
    assert db.query(Theme).count() == 0
    assert db.query(Transaction).count() == 0

import os

os.environ.setdefault("POSTGRES_URL", "sqlite+pysqlite:///:memory:")

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from walletbook.db import get_db
from walletbook.ledger import ReconciliationEngine, SqlRecordStore
from walletbook.main import app
from walletbook.models import Base, Theme, Wallet


@pytest.fixture
def sa_engine():
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(eng, "connect")
    def _enable_fks(dbapi_conn, _record):
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(sa_engine):
    return sessionmaker(bind=sa_engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def store(db):
    return SqlRecordStore(db)


@pytest.fixture
def engine(store):
    return ReconciliationEngine(store)


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def make_wallet(db, user_id):
    def _make(balance="0", owner_id=None, name="Cash"):
        w = Wallet(owner_id=owner_id or user_id, name=name, balance=Decimal(balance))
        db.add(w)
        db.commit()
        return w.id

    return _make


@pytest.fixture
def make_theme(db):
    def _make(wallet_id, spent="0", max_budget="1000000", name="Food"):
        t = Theme(wallet_id=wallet_id, name=name, max_budget=Decimal(max_budget), current_spent=Decimal(spent))
        db.add(t)
        db.commit()
        return t.id

    return _make


@pytest.fixture
def client(session_factory):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user_id):
    return {"X-User-Id": str(user_id)}

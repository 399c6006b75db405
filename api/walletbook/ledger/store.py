"""Record store used by the reconciliation engine.

Every call is its own unit of work: it commits on success and rolls back on
failure, so a multi-step reconciliation can end up partially applied. Balance
and spend writes are single ``UPDATE ... SET x = x + :delta`` statements so
that two requests touching the same wallet or theme never lose an update.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from walletbook.errors import NotFoundError, StoreError
from walletbook.models.theme import Theme
from walletbook.models.transaction import Transaction
from walletbook.models.wallet import Wallet


logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def insert_transaction(self, record: dict) -> Transaction: ...

    def update_transaction(self, tx_id: UUID, patch: dict) -> Transaction: ...

    def delete_transaction(self, tx_id: UUID) -> None: ...

    def get_wallet_balance(self, wallet_id: UUID) -> Decimal: ...

    def increment_wallet_balance(self, wallet_id: UUID, delta: Decimal) -> None: ...

    def get_theme_spent(self, theme_id: UUID) -> Decimal: ...

    def increment_theme_spent(self, theme_id: UUID, delta: Decimal, clamp_at_zero: bool = True) -> None: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqlRecordStore:
    """``RecordStore`` over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.warning("store %s failed: %s", action, exc)
        return StoreError(f"{action} failed: {exc}")

    def insert_transaction(self, record: dict) -> Transaction:
        now = _now()
        t = Transaction(**record, created_at=now, updated_at=now)
        try:
            self.db.add(t)
            self.db.commit()
            self.db.refresh(t)
        except SQLAlchemyError as exc:
            raise self._fail("insert transaction", exc) from exc
        return t

    def update_transaction(self, tx_id: UUID, patch: dict) -> Transaction:
        try:
            t = self.db.get(Transaction, tx_id)
            if t is None:
                raise NotFoundError(f"Transaction {tx_id} not found")
            for key, value in patch.items():
                setattr(t, key, value)
            t.updated_at = _now()
            self.db.commit()
            self.db.refresh(t)
        except SQLAlchemyError as exc:
            raise self._fail("update transaction", exc) from exc
        return t

    def delete_transaction(self, tx_id: UUID) -> None:
        try:
            res = self.db.execute(sa.delete(Transaction).where(Transaction.id == tx_id))
            if res.rowcount == 0:
                self.db.rollback()
                raise NotFoundError(f"Transaction {tx_id} not found")
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete transaction", exc) from exc

    def get_wallet_balance(self, wallet_id: UUID) -> Decimal:
        try:
            value = self.db.execute(sa.select(Wallet.balance).where(Wallet.id == wallet_id)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._fail("read wallet balance", exc) from exc
        if value is None:
            raise NotFoundError(f"Wallet {wallet_id} not found")
        return Decimal(value)

    def increment_wallet_balance(self, wallet_id: UUID, delta: Decimal) -> None:
        stmt = (
            sa.update(Wallet)
            .where(Wallet.id == wallet_id)
            .values(balance=Wallet.balance + delta, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        self._increment(stmt, f"Wallet {wallet_id} not found", "update wallet balance")

    def get_theme_spent(self, theme_id: UUID) -> Decimal:
        try:
            value = self.db.execute(sa.select(Theme.current_spent).where(Theme.id == theme_id)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._fail("read theme spent", exc) from exc
        if value is None:
            raise NotFoundError(f"Theme {theme_id} not found")
        return Decimal(value)

    def increment_theme_spent(self, theme_id: UUID, delta: Decimal, clamp_at_zero: bool = True) -> None:
        new_value = Theme.current_spent + delta
        if clamp_at_zero:
            new_value = sa.case((new_value < 0, 0), else_=new_value)
        stmt = (
            sa.update(Theme)
            .where(Theme.id == theme_id)
            .values(current_spent=new_value, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        self._increment(stmt, f"Theme {theme_id} not found", "update theme spent")

    def _increment(self, stmt, missing: str, action: str) -> None:
        try:
            res = self.db.execute(stmt)
            if res.rowcount == 0:
                self.db.rollback()
                raise NotFoundError(missing)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail(action, exc) from exc

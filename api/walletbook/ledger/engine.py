"""Reconciliation engine: keeps wallet balances and theme spend in step with
transactions as they are created, edited and deleted.

Each operation is a short list of steps run against a ``RecordStore``. The
store commits every step on its own; nothing is rolled back automatically.
A failure before anything committed is re-raised unchanged, a failure after
that is wrapped in ``PartialReconciliationError``.
"""
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable
from uuid import UUID

from walletbook.errors import PartialReconciliationError, ValidationError, WalletbookError
from walletbook.models.transaction import EXPENSE, INCOME, TX_TYPES, Transaction
from .adjustments import THEME, Adjustment, TxFacts, effect_of, reversal_of, update_plan
from .store import RecordStore


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# NUMERIC(14, 2) holds at most 12 integer digits
MAX_AMOUNT = Decimal("1e12")


@dataclass
class NewTransaction:
    wallet_id: UUID
    description: str | None
    amount: Any
    type: str | None
    theme_id: UUID | None = None


@dataclass
class TransactionEdits:
    """Partial edit of a transaction; ``None`` keeps the old value.

    A theme can't be cleared on an expense, and switching to income drops it,
    so ``theme_id=None`` is never needed to mean "remove the theme".
    """

    description: str | None = None
    amount: Any = None
    type: str | None = None
    theme_id: UUID | None = None
    wallet_id: UUID | None = None


@dataclass
class Applied:
    transaction: Transaction | None
    steps: list[str] = field(default_factory=list)


def _clean_amount(raw) -> Decimal:
    if raw is None or raw == "":
        raise ValidationError("amount is required")
    if isinstance(raw, bool):
        raise ValidationError("amount must be a number")
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise ValidationError("amount must be a number")
    if not value.is_finite():
        raise ValidationError("amount must be a number")
    if value <= 0:
        raise ValidationError("amount must be greater than zero")
    try:
        value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("amount is too large")
    if value >= MAX_AMOUNT:
        raise ValidationError("amount is too large")
    return value


def _validated(wallet_id, description, amount, type_, theme_id) -> dict:
    if wallet_id is None:
        raise ValidationError("wallet_id is required")
    if description is None or not description.strip():
        raise ValidationError("description is required")
    if type_ not in TX_TYPES:
        raise ValidationError(f"type must be one of {', '.join(TX_TYPES)}")
    amount = _clean_amount(amount)
    if type_ == EXPENSE and theme_id is None:
        raise ValidationError("theme_id is required for an expense")
    if type_ == INCOME:
        theme_id = None
    return {
        "wallet_id": wallet_id,
        "description": description.strip(),
        "amount": amount,
        "type": type_,
        "theme_id": theme_id,
    }


class ReconciliationEngine:
    def __init__(self, store: RecordStore):
        self.store = store

    def apply_create(self, tx: NewTransaction) -> Applied:
        """Persist a new transaction, then apply its balance and spend deltas."""
        record = _validated(tx.wallet_id, tx.description, tx.amount, tx.type, tx.theme_id)
        facts = TxFacts(record["wallet_id"], record["theme_id"], record["amount"], record["type"])
        self._require_targets(effect_of(facts))
        logger.info("create %s %s in wallet %s", facts.type, facts.amount, facts.wallet_id)

        created: dict[str, Transaction] = {}

        def insert():
            created["tx"] = self.store.insert_transaction(record)

        steps = [("insert transaction", insert)]
        steps += [self._adjust_step(a) for a in effect_of(facts)]
        done = self._run("create", steps)
        return Applied(created["tx"], done)

    def apply_update(self, old: Transaction, edits: TransactionEdits) -> Applied:
        """Reverse ``old``'s effect, persist the edit, apply the new effect."""
        before_facts = TxFacts.of(old)
        tx_id = old.id
        old_description = old.description
        new_type = edits.type if edits.type is not None else old.type
        theme_id = edits.theme_id if edits.theme_id is not None else before_facts.theme_id
        record = _validated(
            edits.wallet_id if edits.wallet_id is not None else old.wallet_id,
            edits.description if edits.description is not None else old_description,
            edits.amount if edits.amount is not None else before_facts.amount,
            new_type,
            theme_id,
        )
        after_facts = TxFacts(record["wallet_id"], record["theme_id"], record["amount"], record["type"])
        before, after = update_plan(before_facts, after_facts)
        self._require_targets(before + after)
        logger.info("update transaction %s: %s -> %s", tx_id, before_facts, after_facts)

        updated: dict[str, Transaction] = {}

        def persist():
            updated["tx"] = self.store.update_transaction(tx_id, record)

        steps = [self._adjust_step(a) for a in before]
        steps.append((f"update transaction {tx_id}", persist))
        steps += [self._adjust_step(a) for a in after]
        done = self._run("update", steps)
        return Applied(updated["tx"], done)

    def apply_delete(self, tx: Transaction) -> Applied:
        """Reverse a transaction's effect, then delete its record."""
        facts = TxFacts.of(tx)
        tx_id = tx.id
        self._require_targets(reversal_of(facts))
        logger.info("delete transaction %s (%s %s)", tx_id, facts.type, facts.amount)

        steps = [self._adjust_step(a) for a in reversal_of(facts)]
        steps.append((f"delete transaction {tx_id}", lambda: self.store.delete_transaction(tx_id)))
        done = self._run("delete", steps)
        return Applied(None, done)

    def _require_targets(self, adjustments: list[Adjustment]) -> None:
        # Reads only; raises NotFoundError before anything is written
        for adj in adjustments:
            if adj.target == THEME:
                self.store.get_theme_spent(adj.entity_id)
            else:
                self.store.get_wallet_balance(adj.entity_id)

    def _adjust_step(self, adj: Adjustment) -> tuple[str, Callable[[], None]]:
        if adj.target == THEME:
            return adj.describe(), lambda: self.store.increment_theme_spent(adj.entity_id, adj.delta, clamp_at_zero=True)
        return adj.describe(), lambda: self.store.increment_wallet_balance(adj.entity_id, adj.delta)

    def _run(self, operation: str, steps: list[tuple[str, Callable[[], None]]]) -> list[str]:
        committed: list[str] = []
        for i, (name, fn) in enumerate(steps):
            logger.debug("%s: %s", operation, name)
            try:
                fn()
            except WalletbookError as exc:
                if not committed:
                    raise
                pending = [n for n, _ in steps[i + 1:]]
                logger.error(
                    "%s left inconsistent state: committed=%s failed=%r pending=%s",
                    operation, committed, name, pending,
                )
                raise PartialReconciliationError(operation, committed, name, pending, exc) from exc
            committed.append(name)
        return committed

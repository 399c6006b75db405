"""Pure balance and spend deltas for income/expense transactions.

A transaction moves its wallet's balance by ``+amount`` (income) or
``-amount`` (expense). An expense that references a theme also moves that
theme's ``current_spent`` by ``+amount``. Reversing a transaction applies the
negated deltas. Nothing here touches the store.
"""
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from walletbook.models.transaction import INCOME, EXPENSE

WALLET = "wallet"
THEME = "theme"

ZERO = Decimal("0")


@dataclass(frozen=True)
class TxFacts:
    """Snapshot of the fields of a transaction that affect balances."""

    wallet_id: UUID
    theme_id: UUID | None
    amount: Decimal
    type: str

    @classmethod
    def of(cls, tx) -> "TxFacts":
        # Copy values out so later writes to an ORM row cannot change the snapshot
        theme_id = tx.theme_id if tx.type == EXPENSE else None
        return cls(wallet_id=tx.wallet_id, theme_id=theme_id, amount=Decimal(tx.amount), type=tx.type)


@dataclass(frozen=True)
class Adjustment:
    target: str  # WALLET | THEME
    entity_id: UUID
    delta: Decimal

    def negated(self) -> "Adjustment":
        return Adjustment(self.target, self.entity_id, -self.delta)

    def describe(self) -> str:
        field = "balance" if self.target == WALLET else "current_spent"
        sign = "+" if self.delta >= 0 else "-"
        return f"{self.target} {self.entity_id} {field} {sign}{abs(self.delta)}"


def wallet_delta(facts: TxFacts) -> Decimal:
    if facts.type == INCOME:
        return facts.amount
    return -facts.amount


def effect_of(facts: TxFacts) -> list[Adjustment]:
    """Adjustments caused by a transaction existing."""
    out = [Adjustment(WALLET, facts.wallet_id, wallet_delta(facts))]
    if facts.type == EXPENSE and facts.theme_id is not None:
        out.append(Adjustment(THEME, facts.theme_id, facts.amount))
    return out


def reversal_of(facts: TxFacts) -> list[Adjustment]:
    """Adjustments that undo ``effect_of(facts)``."""
    return [a.negated() for a in effect_of(facts)]


def update_plan(old: TxFacts, new: TxFacts) -> tuple[list[Adjustment], list[Adjustment]]:
    """Adjustments to run before and after an edited record is persisted.

    Equivalent to reversing ``old`` and then applying ``new``. Theme deltas
    are kept as separate reverse and apply steps because each one clamps at
    zero. Wallet deltas do not clamp, so when both sides use the same wallet
    they collapse into one net adjustment, dropped when it is zero.
    """
    before = [a for a in reversal_of(old) if a.target == THEME]
    after = []
    if old.wallet_id == new.wallet_id:
        net = wallet_delta(new) - wallet_delta(old)
        if net != ZERO:
            after.append(Adjustment(WALLET, new.wallet_id, net))
    else:
        before.append(Adjustment(WALLET, old.wallet_id, -wallet_delta(old)))
        after.append(Adjustment(WALLET, new.wallet_id, wallet_delta(new)))
    after.extend(a for a in effect_of(new) if a.target == THEME)
    return before, after

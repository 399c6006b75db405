from datetime import date
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel


class ThemeSpend(BaseModel):
    theme_id: UUID
    name: str
    amount: Decimal


class ThemeUsage(BaseModel):
    theme_id: UUID
    wallet_id: UUID
    name: str
    max_budget: Decimal
    current_spent: Decimal
    remaining: Decimal
    over_budget: bool


class SummaryOut(BaseModel):
    month: date
    wallet_id: UUID | None = None
    total_balance: Decimal
    income: Decimal
    expense: Decimal
    net: Decimal
    expense_by_theme: list[ThemeSpend]
    themes: list[ThemeUsage]

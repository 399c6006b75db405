from datetime import datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, constr, computed_field


class ThemeCreate(BaseModel):
    name: constr(min_length=1, max_length=200)
    max_budget: Decimal = Field(Decimal("0"), ge=0)


class ThemePatch(BaseModel):
    name: constr(min_length=1, max_length=200) | None = None
    max_budget: Decimal | None = Field(None, ge=0)


class ThemeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    wallet_id: UUID
    name: str
    max_budget: Decimal
    current_spent: Decimal
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def remaining(self) -> Decimal:
        return self.max_budget - self.current_spent

    @computed_field
    @property
    def over_budget(self) -> bool:
        return self.current_spent > self.max_budget


class RecountOut(BaseModel):
    theme_id: UUID
    previous_spent: Decimal
    current_spent: Decimal
    drift: Decimal

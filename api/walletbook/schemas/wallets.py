from datetime import datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, constr


class WalletCreate(BaseModel):
    name: constr(min_length=1, max_length=200)
    balance: Decimal = Decimal("0")


class WalletPatch(BaseModel):
    name: constr(min_length=1, max_length=200) | None = None
    balance: Decimal | None = None


class WalletOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
    balance: Decimal
    created_at: datetime
    updated_at: datetime

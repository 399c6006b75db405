from datetime import datetime
from decimal import Decimal
from uuid import UUID
from typing import Optional
from pydantic import BaseModel, ConfigDict


# Required fields are checked by the reconciliation engine, not here
class TxIn(BaseModel):
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    type: Optional[str] = "expense"
    theme_id: Optional[UUID] = None


class TxPatch(BaseModel):
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    type: Optional[str] = None
    theme_id: Optional[UUID] = None


class TxOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    wallet_id: UUID
    theme_id: Optional[UUID] = None
    description: str
    amount: Decimal
    type: str  # 'income'|'expense'
    created_at: datetime
    updated_at: datetime


class TxApplied(BaseModel):
    transaction: Optional[TxOut] = None
    steps: list[str]

import uuid
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, Numeric, DateTime, ForeignKey, Text, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


INCOME = "income"
EXPENSE = "expense"
TX_TYPES = (INCOME, EXPENSE)


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_pos"),
        CheckConstraint("type IN ('income', 'expense')", name="ck_transactions_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("e_wallets.id", ondelete="CASCADE"), nullable=False, index=True)
    # Only expenses reference a theme
    theme_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("themes.id", ondelete="SET NULL"), nullable=True, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

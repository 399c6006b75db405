"""wallets, themes and transactions

Revision ID: 0001_walletbook_schema
Revises:
Create Date: 2026-10-17 10:00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql as pg

# revision identifiers, used by Alembic.
revision = "0001_walletbook_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # e_wallets
    op.create_table(
        "e_wallets",
        sa.Column("id", pg.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("owner_id", pg.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("balance", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_e_wallets_owner_id", "e_wallets", ["owner_id"])

    # themes
    op.create_table(
        "themes",
        sa.Column("id", pg.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("wallet_id", pg.UUID(as_uuid=True), sa.ForeignKey("e_wallets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("max_budget", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("current_spent", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("current_spent >= 0", name="ck_themes_current_spent_nonneg"),
    )
    op.create_index("ix_themes_wallet_id", "themes", ["wallet_id"])

    # transactions
    op.create_table(
        "transactions",
        sa.Column("id", pg.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("wallet_id", pg.UUID(as_uuid=True), sa.ForeignKey("e_wallets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("theme_id", pg.UUID(as_uuid=True), sa.ForeignKey("themes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("amount > 0", name="ck_transactions_amount_pos"),
        sa.CheckConstraint("type IN ('income', 'expense')", name="ck_transactions_type"),
    )
    op.create_index("ix_transactions_wallet_id", "transactions", ["wallet_id"])
    op.create_index("ix_transactions_theme_id", "transactions", ["theme_id"])
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_theme_id", table_name="transactions")
    op.drop_index("ix_transactions_wallet_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_themes_wallet_id", table_name="themes")
    op.drop_table("themes")
    op.drop_index("ix_e_wallets_owner_id", table_name="e_wallets")
    op.drop_table("e_wallets")

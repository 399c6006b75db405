import datetime as _dt
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends
import sqlalchemy as sa
from sqlalchemy.orm import Session

from walletbook.auth import AuthContext, get_auth_context
from walletbook.db import get_db
from walletbook.models.theme import Theme
from walletbook.models.transaction import EXPENSE, INCOME, Transaction
from walletbook.models.wallet import Wallet
from walletbook.routers.wallets import get_owned_wallet
from walletbook.schemas.summary import SummaryOut, ThemeSpend, ThemeUsage


router = APIRouter(prefix="/api/v1/summary", tags=["summary"])


def _month_window(d: _dt.date) -> tuple[_dt.datetime, _dt.datetime]:
    start = d.replace(day=1)
    if start.month == 12:
        end = _dt.date(start.year + 1, 1, 1)
    else:
        end = _dt.date(start.year, start.month + 1, 1)
    utc = _dt.timezone.utc
    return (
        _dt.datetime.combine(start, _dt.time.min, tzinfo=utc),
        _dt.datetime.combine(end, _dt.time.min, tzinfo=utc),
    )


def _dec(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


@router.get("/", response_model=SummaryOut)
def get_summary(
    month: _dt.date,
    wallet_id: UUID | None = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    if wallet_id is not None:
        wallet_ids = [get_owned_wallet(db, auth, wallet_id).id]
    else:
        wallet_ids = [w for (w,) in db.query(Wallet.id).filter(Wallet.owner_id == auth.user_id)]

    start, end = _month_window(month)
    total_balance = _dec(
        db.query(sa.func.sum(Wallet.balance)).filter(Wallet.id.in_(wallet_ids)).scalar() if wallet_ids else 0
    )

    totals = {INCOME: Decimal("0.00"), EXPENSE: Decimal("0.00")}
    by_theme: list[ThemeSpend] = []
    usage: list[ThemeUsage] = []
    if wallet_ids:
        in_month = (
            Transaction.wallet_id.in_(wallet_ids),
            Transaction.created_at >= start,
            Transaction.created_at < end,
        )
        q = db.query(Transaction.type, sa.func.sum(Transaction.amount)).filter(*in_month).group_by(Transaction.type)
        for type_, total in q:
            totals[type_] = _dec(total)

        q = (
            db.query(Theme.id, Theme.name, sa.func.sum(Transaction.amount))
            .join(Transaction, Transaction.theme_id == Theme.id)
            .filter(*in_month, Transaction.type == EXPENSE)
            .group_by(Theme.id, Theme.name)
            .order_by(sa.func.sum(Transaction.amount).desc())
        )
        by_theme = [ThemeSpend(theme_id=tid, name=name, amount=_dec(total)) for tid, name, total in q]

        themes = db.query(Theme).filter(Theme.wallet_id.in_(wallet_ids)).order_by(Theme.name).all()
        for t in themes:
            spent = _dec(t.current_spent)
            cap = _dec(t.max_budget)
            usage.append(
                ThemeUsage(
                    theme_id=t.id,
                    wallet_id=t.wallet_id,
                    name=t.name,
                    max_budget=cap,
                    current_spent=spent,
                    remaining=cap - spent,
                    over_budget=spent > cap,
                )
            )

    return SummaryOut(
        month=month.replace(day=1),
        wallet_id=wallet_id,
        total_balance=total_balance,
        income=totals[INCOME],
        expense=totals[EXPENSE],
        net=totals[INCOME] - totals[EXPENSE],
        expense_by_theme=by_theme,
        themes=usage,
    )

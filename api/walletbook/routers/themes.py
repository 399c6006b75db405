from decimal import Decimal
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
import sqlalchemy as sa
from sqlalchemy.orm import Session

from walletbook.auth import AuthContext, get_auth_context
from walletbook.db import get_db
from walletbook.models.base import utcnow
from walletbook.models.theme import Theme
from walletbook.models.transaction import EXPENSE, Transaction
from walletbook.routers.wallets import get_owned_wallet
from walletbook.schemas.themes import ThemeCreate, ThemePatch, ThemeOut, RecountOut


router = APIRouter(prefix="/api/v1/wallets/{wallet_id}/themes", tags=["themes"])


def _get_theme(db: Session, wallet_id: UUID, theme_id: UUID) -> Theme:
    t = db.get(Theme, theme_id)
    if not t or t.wallet_id != wallet_id:
        raise HTTPException(404, "Theme not found")
    return t


@router.get("/", response_model=list[ThemeOut])
def list_themes(wallet_id: UUID, db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    get_owned_wallet(db, auth, wallet_id)
    return db.query(Theme).filter_by(wallet_id=wallet_id).order_by(Theme.created_at.desc(), Theme.name).all()


@router.post("/", response_model=ThemeOut, status_code=201)
def create_theme(
    wallet_id: UUID,
    payload: ThemeCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    get_owned_wallet(db, auth, wallet_id)
    now = utcnow()
    t = Theme(
        wallet_id=wallet_id,
        name=payload.name,
        max_budget=payload.max_budget,
        current_spent=Decimal("0"),
        created_at=now,
        updated_at=now,
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@router.patch("/{theme_id}", response_model=ThemeOut)
def update_theme(
    wallet_id: UUID,
    theme_id: UUID,
    payload: ThemePatch,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    get_owned_wallet(db, auth, wallet_id)
    t = _get_theme(db, wallet_id, theme_id)
    if payload.name is not None:
        t.name = payload.name
    if payload.max_budget is not None:
        t.max_budget = payload.max_budget
    t.updated_at = utcnow()
    db.commit()
    db.refresh(t)
    return t


@router.delete("/{theme_id}", status_code=204)
def delete_theme(
    wallet_id: UUID,
    theme_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    get_owned_wallet(db, auth, wallet_id)
    t = _get_theme(db, wallet_id, theme_id)
    # Expenses keep their wallet effect; theme_id is nulled by ON DELETE SET NULL
    db.delete(t)
    db.commit()
    return


@router.post("/{theme_id}/recount", response_model=RecountOut)
def recount_theme(
    wallet_id: UUID,
    theme_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    """Recompute current_spent from the expenses that reference the theme."""
    get_owned_wallet(db, auth, wallet_id)
    t = _get_theme(db, wallet_id, theme_id)
    total = (
        db.query(sa.func.coalesce(sa.func.sum(Transaction.amount), 0))
        .filter(Transaction.theme_id == theme_id, Transaction.type == EXPENSE)
        .scalar()
    )
    previous = Decimal(t.current_spent)
    current = Decimal(str(total)).quantize(Decimal("0.01"))
    t.current_spent = current
    t.updated_at = utcnow()
    db.commit()
    return RecountOut(theme_id=theme_id, previous_spent=previous, current_spent=current, drift=previous - current)

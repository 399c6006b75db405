from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from walletbook.auth import AuthContext, get_auth_context
from walletbook.db import get_db
from walletbook.models.base import utcnow
from walletbook.models.wallet import Wallet
from walletbook.schemas.wallets import WalletCreate, WalletPatch, WalletOut


router = APIRouter(prefix="/api/v1/wallets", tags=["wallets"])


def get_owned_wallet(db: Session, auth: AuthContext, wallet_id: UUID) -> Wallet:
    w = db.get(Wallet, wallet_id)
    # Someone else's wallet is reported exactly like a missing one
    if not w or w.owner_id != auth.user_id:
        raise HTTPException(404, "Wallet not found")
    return w


@router.get("/", response_model=list[WalletOut])
def list_wallets(db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    return (
        db.query(Wallet)
        .filter_by(owner_id=auth.user_id)
        .order_by(Wallet.created_at.desc(), Wallet.name)
        .all()
    )


@router.post("/", response_model=WalletOut, status_code=201)
def create_wallet(payload: WalletCreate, db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    now = utcnow()
    w = Wallet(owner_id=auth.user_id, name=payload.name, balance=payload.balance, created_at=now, updated_at=now)
    db.add(w)
    db.commit()
    db.refresh(w)
    return w


@router.get("/{wallet_id}", response_model=WalletOut)
def get_wallet(wallet_id: UUID, db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    return get_owned_wallet(db, auth, wallet_id)


@router.patch("/{wallet_id}", response_model=WalletOut)
def update_wallet(
    wallet_id: UUID,
    payload: WalletPatch,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    w = get_owned_wallet(db, auth, wallet_id)
    if payload.name is not None:
        w.name = payload.name
    # Setting the balance by hand bypasses reconciliation
    if payload.balance is not None:
        w.balance = payload.balance
    w.updated_at = utcnow()
    db.commit()
    db.refresh(w)
    return w


@router.delete("/{wallet_id}", status_code=204)
def delete_wallet(wallet_id: UUID, db: Session = Depends(get_db), auth: AuthContext = Depends(get_auth_context)):
    w = get_owned_wallet(db, auth, wallet_id)
    # Themes and transactions go with it (ON DELETE CASCADE)
    db.delete(w)
    db.commit()
    return

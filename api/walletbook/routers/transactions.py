from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from walletbook.auth import AuthContext, get_auth_context
from walletbook.db import get_db
from walletbook.ledger import NewTransaction, ReconciliationEngine, SqlRecordStore, TransactionEdits
from walletbook.models.theme import Theme
from walletbook.models.transaction import Transaction
from walletbook.routers.wallets import get_owned_wallet
from walletbook.schemas.transactions import TxApplied, TxIn, TxOut, TxPatch


router = APIRouter(prefix="/api/v1/wallets/{wallet_id}/transactions", tags=["transactions"])


def get_engine(db: Session = Depends(get_db)) -> ReconciliationEngine:
    return ReconciliationEngine(SqlRecordStore(db))


def _check_theme(db: Session, wallet_id: UUID, theme_id: UUID | None) -> None:
    if theme_id is None:
        return
    t = db.get(Theme, theme_id)
    if not t or t.wallet_id != wallet_id:
        raise HTTPException(400, "Invalid theme")


def _get_tx(db: Session, wallet_id: UUID, tx_id: UUID) -> Transaction:
    t = db.get(Transaction, tx_id)
    if not t or t.wallet_id != wallet_id:
        raise HTTPException(404, "Transaction not found")
    return t


@router.get("/", response_model=list[TxOut])
def list_transactions(
    wallet_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    theme_id: UUID | None = None,
):
    get_owned_wallet(db, auth, wallet_id)
    q = db.query(Transaction).filter(Transaction.wallet_id == wallet_id)
    if theme_id:
        q = q.filter(Transaction.theme_id == theme_id)
    q = q.order_by(Transaction.created_at.desc(), Transaction.id.desc())
    return q.limit(500).all()


@router.post("/", response_model=TxApplied, status_code=201)
def create_transaction(
    wallet_id: UUID,
    payload: TxIn,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    engine: ReconciliationEngine = Depends(get_engine),
):
    get_owned_wallet(db, auth, wallet_id)
    if payload.type == "expense":
        _check_theme(db, wallet_id, payload.theme_id)
    applied = engine.apply_create(
        NewTransaction(
            wallet_id=wallet_id,
            description=payload.description,
            amount=payload.amount,
            type=payload.type,
            theme_id=payload.theme_id,
        )
    )
    return TxApplied(transaction=TxOut.model_validate(applied.transaction), steps=applied.steps)


@router.patch("/{tx_id}", response_model=TxApplied)
def patch_transaction(
    wallet_id: UUID,
    tx_id: UUID,
    payload: TxPatch,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    engine: ReconciliationEngine = Depends(get_engine),
):
    get_owned_wallet(db, auth, wallet_id)
    t = _get_tx(db, wallet_id, tx_id)
    if payload.type != "income":
        _check_theme(db, wallet_id, payload.theme_id)
    applied = engine.apply_update(
        t,
        TransactionEdits(
            description=payload.description,
            amount=payload.amount,
            type=payload.type,
            theme_id=payload.theme_id,
        ),
    )
    return TxApplied(transaction=TxOut.model_validate(applied.transaction), steps=applied.steps)


@router.delete("/{tx_id}", response_model=TxApplied)
def delete_transaction(
    wallet_id: UUID,
    tx_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    engine: ReconciliationEngine = Depends(get_engine),
):
    get_owned_wallet(db, auth, wallet_id)
    t = _get_tx(db, wallet_id, tx_id)
    applied = engine.apply_delete(t)
    return TxApplied(transaction=None, steps=applied.steps)

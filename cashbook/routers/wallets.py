from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from cashbook.core.errors import BackendError, NotFoundError
from cashbook.db.dal import Database
from cashbook.models.wallet import (
    LedgerEntryOut,
    TransactionType,
    WalletIn,
    WalletOut,
    WalletSummaryOut,
    WalletTransactionIn,
    WalletTransactionOut,
    WalletTransactionUpdateIn,
    WalletUpdateIn,
)
from cashbook.routers.deps import (
    get_current_user_id,
    get_db,
    get_query_cache,
    partial_fields,
)
from cashbook.services import aggregator
from cashbook.services.ledger import fetch_wallet_transactions, fetch_wallets
from cashbook.services.money import round2
from cashbook.services.query_cache import QueryCache

router = APIRouter(prefix="/wallets", tags=["wallets"])

TRANSACTION_REQUIRED_FIELDS = ("amount", "transaction_date")


# Wallets ----------------------------------------------------------
@router.get("", response_model=List[WalletOut], summary="List wallets")
async def list_wallets(
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    return [WalletOut.model_validate(w) for w in fetch_wallets(db, cache, user_id)]


@router.post("", response_model=WalletOut, status_code=201, summary="Add a wallet")
async def create_wallet(
    payload: WalletIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    wallet_id = db.insert_wallet(user_id, payload)
    cache.invalidate_for("wallet.add", user_id)
    return WalletOut.model_validate(db.get_wallet(user_id, wallet_id))


@router.get(
    "/summary", response_model=WalletSummaryOut, summary="Balances and deposit/withdraw totals"
)
async def wallet_summary(
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    wallets = fetch_wallets(db, cache, user_id)
    txns = fetch_wallet_transactions(db, cache, user_id)
    totals = aggregator.wallet_totals(wallets, txns)
    return WalletSummaryOut(
        balances={k: round2(v) for k, v in aggregator.wallet_balances(wallets, txns).items()},
        total_deposit=round2(totals.total_deposit),
        total_withdraw=round2(totals.total_withdraw),
        total_balance=round2(totals.total_balance),
    )


# Transactions -----------------------------------------------------
@router.get(
    "/transactions",
    response_model=List[WalletTransactionOut],
    summary="List wallet transactions",
)
async def list_transactions(
    wallet_id: Optional[str] = Query(None, description="Only this wallet"),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    rows = fetch_wallet_transactions(db, cache, user_id, wallet_id=wallet_id)
    return [WalletTransactionOut.model_validate(r) for r in rows]


@router.post(
    "/transactions",
    response_model=WalletTransactionOut,
    status_code=201,
    summary="Record a deposit or withdrawal",
)
async def create_transaction(
    payload: WalletTransactionIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    txn_id = db.insert_wallet_transaction(user_id, payload)
    cache.invalidate_for("transaction.add", user_id)
    return WalletTransactionOut.model_validate(db.get_wallet_transaction(user_id, txn_id))


@router.patch(
    "/transactions/{txn_id}",
    response_model=WalletTransactionOut,
    summary="Edit a wallet transaction",
)
async def patch_transaction(
    txn_id: str,
    payload: WalletTransactionUpdateIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    if not db.get_wallet_transaction(user_id, txn_id):
        raise NotFoundError("transaction not found")
    db.update_wallet_transaction(
        user_id, txn_id, partial_fields(payload, TRANSACTION_REQUIRED_FIELDS)
    )
    cache.invalidate_for("transaction.update", user_id)
    return WalletTransactionOut.model_validate(db.get_wallet_transaction(user_id, txn_id))


@router.delete("/transactions/{txn_id}", status_code=204, summary="Delete a wallet transaction")
async def delete_transaction(
    txn_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    db.delete_wallet_transaction(user_id, txn_id)
    cache.invalidate_for("transaction.delete", user_id)
    return None


@router.get(
    "/ledger",
    response_model=List[LedgerEntryOut],
    summary="Transactions with initial balances, filtered",
)
async def ledger(
    wallet_id: Optional[str] = Query(None),
    transaction_type: Optional[TransactionType] = Query(None),
    start_date: Optional[date] = Query(None, description="Inclusive"),
    end_date: Optional[date] = Query(None, description="Inclusive"),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    if start_date and end_date and start_date > end_date:
        raise BackendError("start_date cannot be after end_date")
    entries = aggregator.ledger_entries(
        fetch_wallets(db, cache, user_id),
        fetch_wallet_transactions(db, cache, user_id),
        wallet_id=wallet_id,
        transaction_type=transaction_type,
        start_date=start_date,
        end_date=end_date,
    )
    return [LedgerEntryOut(**asdict(e)) for e in entries]


# Single wallet ----------------------------------------------------
@router.patch("/{wallet_id}", response_model=WalletOut, summary="Rename or rebalance a wallet")
async def patch_wallet(
    wallet_id: str,
    payload: WalletUpdateIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    db.update_wallet(user_id, wallet_id, payload.model_dump(exclude_none=True))
    cache.invalidate_for("wallet.update", user_id)
    return WalletOut.model_validate(db.get_wallet(user_id, wallet_id))


@router.delete(
    "/{wallet_id}", status_code=204, summary="Delete a wallet and its transactions"
)
async def delete_wallet(
    wallet_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    db.delete_wallet(user_id, wallet_id)
    cache.invalidate_for("wallet.delete", user_id)
    return None

"""Balance, deposit, withdraw, send-money and transaction history endpoints"""

import time
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Header, Request

from demo_bank.api.dependencies import get_current_account_id, get_ledger, get_request_id
from demo_bank.api.schemas import (
    AmountRequest,
    BalanceResponse,
    LedgerResponse,
    SendMoneyRequest,
    TransactionItem,
)
from demo_bank.domain.money import to_cents
from demo_bank.infrastructure.observability.logging import log_ledger_operation
from demo_bank.services.ledger import LedgerEngine
from demo_bank.utils.date_utils import as_utc

router = APIRouter()


def _log_success(request: Request, account_id: int, operation: str, amount: Any, start_time: float) -> None:
    duration_ms = (time.time() - start_time) * 1000
    log_ledger_operation(get_request_id(request), account_id, operation, to_cents(amount), "success", duration_ms)


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    account_id: int = Depends(get_current_account_id),
    ledger: LedgerEngine = Depends(get_ledger),
):
    return BalanceResponse(balance=float(ledger.balance(account_id)))


@router.post("/deposit", response_model=LedgerResponse)
def deposit(
    body: AmountRequest,
    request: Request,
    account_id: int = Depends(get_current_account_id),
    ledger: LedgerEngine = Depends(get_ledger),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    start_time = time.time()
    balance = ledger.deposit(account_id, body.amount, idempotency_key)
    _log_success(request, account_id, "deposit", body.amount, start_time)
    return LedgerResponse(message="Deposit successful", balance=float(balance))


@router.post("/withdraw", response_model=LedgerResponse)
def withdraw(
    body: AmountRequest,
    request: Request,
    account_id: int = Depends(get_current_account_id),
    ledger: LedgerEngine = Depends(get_ledger),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    start_time = time.time()
    balance = ledger.withdraw(account_id, body.amount, idempotency_key)
    _log_success(request, account_id, "withdraw", body.amount, start_time)
    return LedgerResponse(message="Withdrawal successful", balance=float(balance))


@router.post("/send-money", response_model=LedgerResponse)
def send_money(
    body: SendMoneyRequest,
    request: Request,
    account_id: int = Depends(get_current_account_id),
    ledger: LedgerEngine = Depends(get_ledger),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    """Transfer funds to another registered account by email"""
    start_time = time.time()
    balance = ledger.transfer(account_id, body.to_email, body.amount, idempotency_key)
    _log_success(request, account_id, "transfer", body.amount, start_time)
    return LedgerResponse(message="Transfer successful", balance=float(balance))


@router.get("/transactions", response_model=List[TransactionItem])
def get_transactions(
    account_id: int = Depends(get_current_account_id),
    ledger: LedgerEngine = Depends(get_ledger),
):
    """
    Retrieve the caller's most recent ledger entries.

    Returns:
        Up to 50 entries, newest first
    """
    return [
        TransactionItem(
            type=entry.kind.value,
            amount=float(entry.amount),
            other_party=entry.counterparty,
            created_at=as_utc(entry.created_at).isoformat(),
        )
        for entry in ledger.history(account_id)
    ]

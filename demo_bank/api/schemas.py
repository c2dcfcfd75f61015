"""Pydantic schemas for API request/response validation"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request body for POST /api/register"""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, alias="fullName")


class LoginRequest(BaseModel):
    """Request body for POST /api/login"""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AccountResponse(BaseModel):
    """Account profile, as returned by register, login and /api/me"""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    email: str
    full_name: str = Field(..., alias="fullName")
    message: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class AmountRequest(BaseModel):
    """Request body for POST /api/deposit and /api/withdraw"""

    # Validated by the ledger engine so every bad amount reports the same way
    amount: Any = None


class SendMoneyRequest(BaseModel):
    """Request body for POST /api/send-money"""

    model_config = ConfigDict(populate_by_name=True)

    to_email: str = Field(..., min_length=1, alias="toEmail")
    amount: Any = None


class BalanceResponse(BaseModel):
    balance: float


class LedgerResponse(BaseModel):
    """Response for deposit, withdraw and send-money"""

    message: str
    balance: float


class TransactionItem(BaseModel):
    """Single ledger entry in /api/transactions"""

    type: str
    amount: float
    other_party: Optional[str] = None
    created_at: str


class ChatRequest(BaseModel):
    """Request body for POST /api/chat"""

    messages: List[Dict[str, Any]]


class ErrorResponse(BaseModel):
    error: str
    kind: str

"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from demo_bank.config import settings
from demo_bank.domain.exceptions import AuthError, InvalidSession
from demo_bank.infrastructure.clients.chat import ChatClient
from demo_bank.infrastructure.database.session import get_db
from demo_bank.services.accounts import AccountService
from demo_bank.services.ledger import LedgerEngine
from demo_bank.services.sessions import SessionAuthenticator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_chat_client() -> ChatClient:
    """Provide chat completion client instance"""
    return ChatClient()


def get_authenticator(db: Session = Depends(get_db)) -> SessionAuthenticator:
    return SessionAuthenticator(db)


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_ledger(db: Session = Depends(get_db)) -> LedgerEngine:
    return LedgerEngine(db)


def get_session_token(request: Request) -> str | None:
    """Session token from the cookie, falling back to an Authorization bearer header"""
    token = request.cookies.get(settings.cookie_name)
    if token:
        return token

    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None


def get_current_account_id(
    request: Request,
    authenticator: SessionAuthenticator = Depends(get_authenticator),
) -> int:
    """Resolve the caller's account id or fail with 401"""
    token = get_session_token(request)
    if not token:
        raise AuthError()

    account_id = authenticator.verify(token)
    if account_id is None:
        raise InvalidSession()
    return account_id

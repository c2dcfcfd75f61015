"""Registration, login/logout and profile endpoints"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from demo_bank.api.dependencies import (
    get_account_service,
    get_authenticator,
    get_current_account_id,
    get_request_id,
    get_session_token,
)
from demo_bank.api.schemas import AccountResponse, LoginRequest, MessageResponse, RegisterRequest
from demo_bank.config import settings
from demo_bank.services.accounts import AccountService
from demo_bank.services.sessions import SessionAuthenticator

router = APIRouter()


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, accounts: AccountService = Depends(get_account_service)):
    """Create an account with the starting balance"""
    profile = accounts.register(body.email, body.password, body.full_name)
    return AccountResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        message="Registration successful",
    )


@router.post("/login", response_model=AccountResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
    authenticator: SessionAuthenticator = Depends(get_authenticator),
):
    """
    Check credentials and open a session.

    The session token is returned only as an HTTP-only cookie.
    """
    profile = accounts.authenticate(body.email, body.password)
    token = authenticator.issue(profile.id)

    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=int(authenticator.ttl.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    logging.info("Login succeeded", extra={"request_id": get_request_id(request), "account_id": profile.id})

    return AccountResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        message="Login successful",
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    authenticator: SessionAuthenticator = Depends(get_authenticator),
):
    """Revoke the presented session, if any, and clear the cookie"""
    token = get_session_token(request)
    if token:
        authenticator.revoke(token)
    response.delete_cookie(settings.cookie_name, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=AccountResponse, response_model_exclude_none=True)
def me(
    account_id: int = Depends(get_current_account_id),
    accounts: AccountService = Depends(get_account_service),
):
    profile = accounts.get_profile(account_id)
    return AccountResponse(id=profile.id, email=profile.email, full_name=profile.full_name)

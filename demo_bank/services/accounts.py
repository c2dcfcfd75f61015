"""Account registration and credential checks"""

import logging

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from demo_bank.config import settings
from demo_bank.domain.exceptions import (
    AccountNotFound,
    DuplicateEmail,
    InvalidCredentials,
    ValidationError,
)
from demo_bank.domain.models import AccountProfile, EntryKind
from demo_bank.infrastructure.database.models import Account
from demo_bank.infrastructure.database.repositories import AccountRepository, LedgerEntryRepository

pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _profile(account: Account) -> AccountProfile:
    return AccountProfile(id=account.id, email=account.email, full_name=account.full_name)


class AccountService:
    """Creates accounts and checks passwords"""

    def __init__(self, db: Session, seed_balance_cents: int | None = None):
        self.db = db
        self.accounts = AccountRepository(db)
        self.entries = LedgerEntryRepository(db)
        self.seed_balance_cents = (
            settings.seed_balance_cents if seed_balance_cents is None else seed_balance_cents
        )

    def register(self, email: str, password: str, full_name: str) -> AccountProfile:
        """
        Create an account holding the seed balance.

        The seed is recorded as an opening ``deposit`` entry so the ledger
        alone always reproduces the stored balance.

        Raises:
            ValidationError: A field is blank
            DuplicateEmail: The email is already registered
        """
        email = normalize_email(email or "")
        full_name = (full_name or "").strip()
        if not email or not password or not full_name:
            raise ValidationError("Email, password and full name required")

        if self.accounts.get_by_email(email) is not None:
            raise DuplicateEmail()

        try:
            account = self.accounts.create_account(
                email=email,
                password_hash=pwd.hash(password),
                full_name=full_name,
                balance_cents=self.seed_balance_cents,
            )
            if self.seed_balance_cents > 0:
                self.entries.add(account.id, EntryKind.DEPOSIT, self.seed_balance_cents)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            raise DuplicateEmail()

        logging.info("Account registered", extra={"account_id": account.id})
        return _profile(account)

    def authenticate(self, email: str, password: str) -> AccountProfile:
        """
        Check a password. Unknown email and wrong password are indistinguishable.

        Raises:
            InvalidCredentials: On any mismatch
        """
        account = self.accounts.get_by_email(normalize_email(email or ""))
        if account is None:
            pwd.dummy_verify()
            raise InvalidCredentials()

        if not pwd.verify(password or "", account.password_hash):
            raise InvalidCredentials()

        return _profile(account)

    def get_profile(self, account_id: int) -> AccountProfile:
        account = self.accounts.get_by_id(account_id)
        if account is None:
            raise AccountNotFound()
        return _profile(account)

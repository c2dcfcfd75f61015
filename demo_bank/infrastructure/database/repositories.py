"""Data access layer for accounts, session tokens and ledger entries"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from demo_bank.domain.models import EntryKind
from demo_bank.infrastructure.database.models import Account, LedgerEntry, SessionToken


class AccountRepository:
    """Repository for accounts and their balances"""

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, email: str, password_hash: str, full_name: str, balance_cents: int) -> Account:
        """Persist a new account"""
        account = Account(
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            balance_cents=balance_cents,
        )
        self.db.add(account)
        self.db.flush()  # Get ID without committing
        return account

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self.db.get(Account, account_id)

    def get_by_email(self, email: str) -> Optional[Account]:
        return self.db.execute(select(Account).where(Account.email == email)).scalar_one_or_none()

    def get_balance_cents(self, account_id: int) -> Optional[int]:
        """Read the stored balance straight from the database, bypassing the identity map"""
        return self.db.execute(
            select(Account.balance_cents).where(Account.id == account_id)
        ).scalar_one_or_none()

    def credit(self, account_id: int, amount_cents: int) -> bool:
        """Atomically add to a balance. Returns False if the account does not exist."""
        result = self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(balance_cents=Account.balance_cents + amount_cents)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def debit(self, account_id: int, amount_cents: int) -> bool:
        """
        Atomically subtract from a balance only if it covers the amount.

        The check and the write happen in one statement, so two concurrent
        debits cannot both pass against the same balance.

        Returns:
            False if the account is missing or the balance is insufficient
        """
        result = self.db.execute(
            update(Account)
            .where(Account.id == account_id, Account.balance_cents >= amount_cents)
            .values(balance_cents=Account.balance_cents - amount_cents)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class SessionTokenRepository:
    """Repository for persisted session records"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, account_id: int, token: str, expires_at: datetime) -> SessionToken:
        record = SessionToken(account_id=account_id, token=token, expires_at=expires_at)
        self.db.add(record)
        self.db.flush()
        return record

    def get_owner(self, token: str) -> Optional[int]:
        """Account id the token was issued to, or None if it is unknown or revoked"""
        return self.db.execute(
            select(SessionToken.account_id).where(SessionToken.token == token)
        ).scalar_one_or_none()

    def delete(self, token: str) -> int:
        result = self.db.execute(
            delete(SessionToken)
            .where(SessionToken.token == token)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_expired(self, now: datetime) -> int:
        result = self.db.execute(
            delete(SessionToken)
            .where(SessionToken.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def count_for_account(self, account_id: int) -> int:
        return self.db.execute(
            select(func.count()).select_from(SessionToken).where(SessionToken.account_id == account_id)
        ).scalar_one()


class LedgerEntryRepository:
    """Repository for the append-only ledger"""

    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        account_id: int,
        kind: EntryKind,
        amount_cents: int,
        counterparty: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            account_id=account_id,
            kind=kind.value,
            amount_cents=amount_cents,
            counterparty=counterparty,
            idempotency_key=idempotency_key,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def find_by_idempotency_key(self, account_id: int, idempotency_key: str) -> Optional[LedgerEntry]:
        return self.db.execute(
            select(LedgerEntry).where(
                LedgerEntry.account_id == account_id,
                LedgerEntry.idempotency_key == idempotency_key,
            )
        ).scalar_one_or_none()

    def get_recent(self, account_id: int, limit: int) -> List[LedgerEntry]:
        """Fetch the newest entries for an account, newest first"""
        return list(
            self.db.execute(
                select(LedgerEntry)
                .where(LedgerEntry.account_id == account_id)
                .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
                .limit(limit)
            ).scalars()
        )

    def totals_by_kind(self, account_id: int) -> Dict[EntryKind, int]:
        """Sum of entry amounts per kind, zero for kinds with no entries"""
        rows = self.db.execute(
            select(LedgerEntry.kind, func.coalesce(func.sum(LedgerEntry.amount_cents), 0))
            .where(LedgerEntry.account_id == account_id)
            .group_by(LedgerEntry.kind)
        ).all()
        totals = {kind: 0 for kind in EntryKind}
        for kind, total in rows:
            totals[EntryKind(kind)] = int(total)
        return totals

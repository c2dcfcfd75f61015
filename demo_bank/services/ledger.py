"""Ledger engine - atomic balance mutations with an audit entry per mutation

Each mutating operation runs as one database transaction covering the balance
update(s) and the ledger insert(s). Any failure rolls the whole unit back.

Balances are never changed with read/compare/write. Debits go through a
conditional ``UPDATE ... WHERE balance_cents >= :amount`` so the funds check
and the write are a single statement. Transfers apply their two legs in
ascending account id order, which keeps concurrent transfers over the same
pair of accounts from deadlocking.
"""

import logging
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from demo_bank.config import settings
from demo_bank.domain.exceptions import (
    AccountNotFound,
    DomainException,
    IdempotencyKeyReused,
    InsufficientFunds,
    InternalError,
    RecipientNotFound,
    SelfTransfer,
    ValidationError,
)
from demo_bank.domain.models import EntryKind, EntryView
from demo_bank.domain.money import AmountLike, from_cents, to_cents
from demo_bank.infrastructure.database.repositories import AccountRepository, LedgerEntryRepository
from demo_bank.infrastructure.observability.metrics import record_ledger_operation
from demo_bank.services.accounts import normalize_email


class LedgerEngine:
    """Executes deposits, withdrawals and transfers against the store"""

    def __init__(self, db: Session, history_limit: int | None = None):
        self.db = db
        self.accounts = AccountRepository(db)
        self.entries = LedgerEntryRepository(db)
        self.history_limit = history_limit or settings.history_limit

    def deposit(self, account_id: int, amount: AmountLike, idempotency_key: Optional[str] = None) -> Decimal:
        """
        Add funds to an account.

        Returns:
            The new balance

        Raises:
            InvalidAmount: amount is not a positive number of cents
            AccountNotFound: the account does not exist
        """
        amount_cents = self._parse_amount("deposit", amount)

        def apply() -> None:
            if not self.accounts.credit(account_id, amount_cents):
                raise AccountNotFound()
            self.entries.add(account_id, EntryKind.DEPOSIT, amount_cents, idempotency_key=idempotency_key)

        return self._run("deposit", account_id, amount_cents, apply, idempotency_key, EntryKind.DEPOSIT)

    def withdraw(self, account_id: int, amount: AmountLike, idempotency_key: Optional[str] = None) -> Decimal:
        """
        Remove funds from an account if the balance covers them.

        Returns:
            The new balance

        Raises:
            InvalidAmount: amount is not a positive number of cents
            InsufficientFunds: balance is lower than amount
            AccountNotFound: the account does not exist
        """
        amount_cents = self._parse_amount("withdraw", amount)

        def apply() -> None:
            if not self.accounts.debit(account_id, amount_cents):
                if self.accounts.get_balance_cents(account_id) is None:
                    raise AccountNotFound()
                raise InsufficientFunds()
            self.entries.add(account_id, EntryKind.WITHDRAW, amount_cents, idempotency_key=idempotency_key)

        return self._run("withdraw", account_id, amount_cents, apply, idempotency_key, EntryKind.WITHDRAW)

    def transfer(
        self,
        sender_id: int,
        recipient_email: str,
        amount: AmountLike,
        idempotency_key: Optional[str] = None,
    ) -> Decimal:
        """
        Move funds from the sender to the account registered under recipient_email.

        Both balance updates and both entries (``sent`` for the sender,
        ``received`` for the recipient) commit together or not at all, so the
        pair's total balance is conserved.

        Returns:
            The sender's new balance

        Raises:
            InvalidAmount, ValidationError, AccountNotFound, RecipientNotFound,
            SelfTransfer, InsufficientFunds
        """
        amount_cents = self._parse_amount("transfer", amount)

        email = normalize_email(recipient_email or "")
        if not email:
            record_ledger_operation("transfer", ValidationError.kind.value)
            raise ValidationError("Valid toEmail and positive amount required")

        sender = self.accounts.get_by_id(sender_id)
        recipient = self.accounts.get_by_email(email)
        try:
            if sender is None:
                raise AccountNotFound()
            if recipient is None:
                raise RecipientNotFound()
            if recipient.id == sender.id:
                raise SelfTransfer()
        except DomainException as e:
            record_ledger_operation("transfer", e.kind.value)
            raise

        sender_email = sender.email
        recipient_id = recipient.id

        def apply() -> None:
            legs = sorted([(sender_id, "debit"), (recipient_id, "credit")])
            for account_id, leg in legs:
                if leg == "debit":
                    if not self.accounts.debit(account_id, amount_cents):
                        raise InsufficientFunds()
                elif not self.accounts.credit(account_id, amount_cents):
                    raise RecipientNotFound()

            self.entries.add(
                sender_id,
                EntryKind.SENT,
                amount_cents,
                counterparty=email,
                idempotency_key=idempotency_key,
            )
            self.entries.add(recipient_id, EntryKind.RECEIVED, amount_cents, counterparty=sender_email)

        return self._run(
            "transfer", sender_id, amount_cents, apply, idempotency_key, EntryKind.SENT, counterparty=email
        )

    def balance(self, account_id: int) -> Decimal:
        balance_cents = self.accounts.get_balance_cents(account_id)
        if balance_cents is None:
            raise AccountNotFound()
        return from_cents(balance_cents)

    def history(self, account_id: int, limit: int | None = None) -> List[EntryView]:
        """Most recent entries for the account, newest first"""
        if limit is None:
            limit = self.history_limit
        elif limit <= 0:
            return []
        else:
            limit = min(limit, self.history_limit)

        return [
            EntryView(
                kind=EntryKind(entry.kind),
                amount=from_cents(entry.amount_cents),
                counterparty=entry.counterparty,
                created_at=entry.created_at,
            )
            for entry in self.entries.get_recent(account_id, limit)
        ]

    def reconcile(self, account_id: int) -> bool:
        """Check that the entry log reproduces the stored balance"""
        balance_cents = self.accounts.get_balance_cents(account_id)
        if balance_cents is None:
            raise AccountNotFound()

        totals = self.entries.totals_by_kind(account_id)
        derived = sum(total if kind.is_credit else -total for kind, total in totals.items())
        if derived != balance_cents:
            logging.error(
                "Ledger out of balance",
                extra={"account_id": account_id, "stored_cents": balance_cents, "derived_cents": derived},
            )
        return derived == balance_cents

    def _parse_amount(self, operation: str, amount: AmountLike) -> int:
        try:
            return to_cents(amount)
        except DomainException as e:
            record_ledger_operation(operation, e.kind.value)
            raise

    def _run(
        self,
        operation: str,
        account_id: int,
        amount_cents: int,
        apply: Callable[[], None],
        idempotency_key: Optional[str],
        entry_kind: EntryKind,
        counterparty: Optional[str] = None,
    ) -> Decimal:
        """Run apply as one transaction and return the account's balance afterwards"""
        if idempotency_key and self._is_replay(
            operation, account_id, idempotency_key, entry_kind, amount_cents, counterparty
        ):
            return self._replay(operation, account_id, idempotency_key)

        try:
            apply()
            balance_cents = self.accounts.get_balance_cents(account_id)
            self.db.commit()
        except DomainException as e:
            self.db.rollback()
            record_ledger_operation(operation, e.kind.value)
            raise
        except IntegrityError as e:
            self.db.rollback()
            if idempotency_key and self._is_replay(
                operation, account_id, idempotency_key, entry_kind, amount_cents, counterparty
            ):
                return self._replay(operation, account_id, idempotency_key)
            record_ledger_operation(operation, InternalError.kind.value)
            logging.error(f"Ledger {operation} violated a constraint: {e}", extra={"account_id": account_id})
            raise InternalError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            record_ledger_operation(operation, InternalError.kind.value)
            logging.error(f"Ledger {operation} failed: {e}", extra={"account_id": account_id})
            raise InternalError() from e

        record_ledger_operation(operation, "success", amount_cents)
        return from_cents(balance_cents)

    def _is_replay(
        self,
        operation: str,
        account_id: int,
        idempotency_key: str,
        entry_kind: EntryKind,
        amount_cents: int,
        counterparty: Optional[str],
    ) -> bool:
        """
        True if the key was already used for this exact request.

        Raises:
            IdempotencyKeyReused: the key was used for a different operation,
                amount or recipient
        """
        entry = self.entries.find_by_idempotency_key(account_id, idempotency_key)
        if entry is None:
            return False

        if (entry.kind, entry.amount_cents, entry.counterparty) != (entry_kind.value, amount_cents, counterparty):
            self.db.rollback()
            record_ledger_operation(operation, IdempotencyKeyReused.kind.value)
            logging.warning(
                f"Idempotency key reused for a different {operation}",
                extra={"account_id": account_id, "idempotency_key": idempotency_key},
            )
            raise IdempotencyKeyReused()
        return True

    def _replay(self, operation: str, account_id: int, idempotency_key: str) -> Decimal:
        record_ledger_operation(operation, "replay")
        logging.info(
            f"Idempotent replay of {operation}",
            extra={"account_id": account_id, "idempotency_key": idempotency_key},
        )
        return self.balance(account_id)

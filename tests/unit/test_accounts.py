"""Unit tests for registration and credential checks"""

import pytest

from demo_bank.domain.exceptions import (
    AccountNotFound,
    ConflictError,
    DuplicateEmail,
    InvalidCredentials,
    ValidationError,
)
from demo_bank.domain.models import EntryKind
from demo_bank.infrastructure.database.repositories import AccountRepository
from demo_bank.services.accounts import AccountService


def test_register_normalizes_and_seeds(accounts, ledger):
    profile = accounts.register("  Carol@Example.COM ", "pw", "  Carol King ")

    assert profile.email == "carol@example.com"
    assert profile.full_name == "Carol King"
    assert ledger.balance(profile.id) == 1000

    opening = ledger.history(profile.id)
    assert len(opening) == 1
    assert opening[0].kind == EntryKind.DEPOSIT
    assert ledger.reconcile(profile.id)


def test_register_without_seed_writes_no_entry(db, ledger):
    profile = AccountService(db, seed_balance_cents=0).register("zero@example.com", "pw", "Zero")

    assert ledger.balance(profile.id) == 0
    assert ledger.history(profile.id) == []


def test_password_is_stored_hashed(db, alice):
    stored = AccountRepository(db).get_by_id(alice.id)
    assert stored.password_hash != "alice-password"
    assert stored.password_hash.startswith("$pbkdf2-sha256$")


def test_duplicate_email_rejected(accounts, alice):
    with pytest.raises(DuplicateEmail) as exc_info:
        accounts.register("ALICE@example.com", "other", "Another Alice")

    assert isinstance(exc_info.value, ConflictError)
    assert exc_info.value.http_status == 409


@pytest.mark.parametrize(
    "email, password, full_name",
    [("", "pw", "Name"), ("a@example.com", "", "Name"), ("a@example.com", "pw", "   "), (None, "pw", "Name")],
)
def test_register_requires_all_fields(accounts, email, password, full_name):
    with pytest.raises(ValidationError):
        accounts.register(email, password, full_name)


def test_authenticate_returns_profile(accounts, alice):
    profile = accounts.authenticate("Alice@Example.com", "alice-password")
    assert profile == alice


def test_wrong_password_and_unknown_email_look_identical(accounts, alice):
    with pytest.raises(InvalidCredentials) as wrong_password:
        accounts.authenticate(alice.email, "not-the-password")
    with pytest.raises(InvalidCredentials) as unknown_email:
        accounts.authenticate("ghost@example.com", "alice-password")

    assert wrong_password.value.to_dict() == unknown_email.value.to_dict()
    assert wrong_password.value.http_status == unknown_email.value.http_status == 401


def test_get_profile(accounts, alice):
    assert accounts.get_profile(alice.id) == alice

    with pytest.raises(AccountNotFound):
        accounts.get_profile(alice.id + 100)

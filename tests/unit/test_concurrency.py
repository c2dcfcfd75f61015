"""Concurrent ledger mutations against a shared file-backed database"""

import threading
from decimal import Decimal
from typing import Callable, List

import pytest
from sqlalchemy.orm import sessionmaker

from demo_bank.domain.exceptions import InsufficientFunds
from demo_bank.infrastructure.database.session import build_engine, init_db
from demo_bank.services.accounts import AccountService
from demo_bank.services.ledger import LedgerEngine


@pytest.fixture
def file_sessions(tmp_path):
    """Separate sessions (and connections) per thread, like concurrent requests"""
    engine = build_engine(f"sqlite:///{tmp_path / 'bank.db'}")
    init_db(engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


def run_concurrently(session_factory: sessionmaker, operations: List[Callable[[LedgerEngine], object]]) -> list:
    """Start every operation at the same moment, each with its own session"""
    barrier = threading.Barrier(len(operations))
    results: list = [None] * len(operations)

    def worker(index: int, operation: Callable[[LedgerEngine], object]) -> None:
        db = session_factory()
        try:
            barrier.wait()
            results[index] = operation(LedgerEngine(db))
        except Exception as e:  # collected for assertions
            results[index] = e
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i, op)) for i, op in enumerate(operations)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return results


def test_concurrent_withdrawals_cannot_double_spend(file_sessions):
    db = file_sessions()
    account = AccountService(db, seed_balance_cents=5000).register("spender@example.com", "pw", "Spender")
    db.close()

    results = run_concurrently(
        file_sessions,
        [lambda ledger: ledger.withdraw(account.id, 50), lambda ledger: ledger.withdraw(account.id, 50)],
    )

    successes = [r for r in results if isinstance(r, Decimal)]
    failures = [r for r in results if isinstance(r, InsufficientFunds)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert successes[0] == Decimal("0.00")

    db = file_sessions()
    ledger = LedgerEngine(db)
    assert ledger.balance(account.id) == Decimal("0.00")
    assert ledger.reconcile(account.id)
    db.close()


def test_crossing_transfers_conserve_total(file_sessions):
    db = file_sessions()
    service = AccountService(db, seed_balance_cents=10_000)
    alice = service.register("alice@example.com", "pw", "Alice")
    bob = service.register("bob@example.com", "pw", "Bob")
    db.close()

    operations = []
    for _ in range(5):
        operations.append(lambda ledger: ledger.transfer(alice.id, bob.email, 3))
        operations.append(lambda ledger: ledger.transfer(bob.id, alice.email, 2))

    results = run_concurrently(file_sessions, operations)

    assert all(isinstance(r, Decimal) for r in results), results

    db = file_sessions()
    ledger = LedgerEngine(db)
    assert ledger.balance(alice.id) == Decimal("95.00")
    assert ledger.balance(bob.id) == Decimal("105.00")
    assert ledger.reconcile(alice.id)
    assert ledger.reconcile(bob.id)
    db.close()

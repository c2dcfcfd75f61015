"""SQLAlchemy ORM models for accounts, session tokens and the ledger"""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from demo_bank.utils.date_utils import utcnow

Base = declarative_base()


class Account(Base):
    """Bank customer with a redundantly stored balance"""

    __tablename__ = "accounts"
    __table_args__ = (CheckConstraint("balance_cents >= 0", name="ck_accounts_balance_non_negative"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    sessions = relationship("SessionToken", back_populates="account", cascade="all, delete-orphan")
    entries = relationship("LedgerEntry", back_populates="account", cascade="all, delete-orphan")


class SessionToken(Base):
    """Persisted record of an issued session token; deleting it revokes the session"""

    __tablename__ = "session_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(1024), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    account = relationship("Account", back_populates="sessions")


class LedgerEntry(Base):
    """Immutable audit row for one balance mutation"""

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_ledger_entries_amount_positive"),
        CheckConstraint(
            "kind IN ('deposit', 'withdraw', 'sent', 'received')",
            name="ck_ledger_entries_kind",
        ),
        UniqueConstraint("account_id", "idempotency_key", name="uq_ledger_entries_idempotency"),
        Index("ix_ledger_entries_account_created", "account_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String(16), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    counterparty = Column(String(320), nullable=True)  # email, transfers only
    idempotency_key = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    account = relationship("Account", back_populates="entries")

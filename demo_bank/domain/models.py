"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class EntryKind(str, Enum):
    """Kind of balance-affecting event recorded in the ledger"""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    SENT = "sent"
    RECEIVED = "received"

    @property
    def is_credit(self) -> bool:
        return self in (EntryKind.DEPOSIT, EntryKind.RECEIVED)


@dataclass(frozen=True)
class AccountProfile:
    """Public view of an account"""

    id: int
    email: str
    full_name: str


@dataclass(frozen=True)
class SessionClaims:
    """Claims carried by a verified session token"""

    account_id: int
    issued_at: datetime
    expires_at: datetime
    nonce: str


@dataclass(frozen=True)
class EntryView:
    """Ledger entry as reported to the account owner"""

    kind: EntryKind
    amount: Decimal
    counterparty: str | None
    created_at: datetime

"""Session authenticator: signed bearer tokens backed by persisted revocation records

A token is accepted only when two independent checks pass, in order:

1. ``decode`` - the JWT signature is valid and the token has not expired.
   This is local and cheap.
2. ``is_recognized`` - a persisted record for that exact token exists and
   belongs to the account named in the token. Deleting the record (logout)
   revokes the session even though the signature stays valid until expiry.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from demo_bank.config import settings
from demo_bank.domain.models import SessionClaims
from demo_bank.infrastructure.database.repositories import SessionTokenRepository
from demo_bank.infrastructure.observability.metrics import session_event_counter
from demo_bank.utils.date_utils import utcnow


class SessionAuthenticator:
    """Issues, verifies and revokes session tokens"""

    def __init__(
        self,
        db: Session,
        secret: str | None = None,
        ttl: timedelta | None = None,
        algorithm: str | None = None,
    ):
        self.db = db
        self.tokens = SessionTokenRepository(db)
        self.secret = secret or settings.jwt_secret
        self.ttl = ttl or timedelta(days=settings.session_ttl_days)
        self.algorithm = algorithm or settings.jwt_algorithm

    def issue(self, account_id: int, now: datetime | None = None) -> str:
        """Sign a new token for the account and persist its record"""
        issued_at = now or utcnow()
        expires_at = issued_at + self.ttl
        claims = {
            "sub": str(account_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "nonce": secrets.token_urlsafe(12),
        }
        token = jwt.encode(claims, self.secret, algorithm=self.algorithm)

        self.tokens.add(account_id, token, expires_at)
        self.db.commit()

        session_event_counter.labels(event="issued").inc()
        logging.info("Session issued", extra={"account_id": account_id})
        return token

    def decode(self, token: str) -> Optional[SessionClaims]:
        """Signature and expiry check. Returns None for any bad token."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            return SessionClaims(
                account_id=int(payload["sub"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                nonce=payload.get("nonce", ""),
            )
        except (JWTError, KeyError, TypeError, ValueError, OverflowError):
            return None

    def is_recognized(self, token: str, account_id: int) -> bool:
        """Persisted-record check: token is known, not revoked, and owned by account_id"""
        return self.tokens.get_owner(token) == account_id

    def verify(self, token: str | None) -> Optional[int]:
        """Return the account id for a live session, or None"""
        if not token:
            return None

        claims = self.decode(token)
        if claims is None:
            session_event_counter.labels(event="rejected").inc()
            return None

        if not self.is_recognized(token, claims.account_id):
            session_event_counter.labels(event="rejected").inc()
            logging.info("Session token not recognized", extra={"account_id": claims.account_id})
            return None

        return claims.account_id

    def revoke(self, token: str) -> bool:
        """Delete the persisted record. Returns True if a live record existed."""
        removed = self.tokens.delete(token)
        self.db.commit()
        if removed:
            session_event_counter.labels(event="revoked").inc()
        return removed > 0

    def purge_expired(self, now: datetime | None = None) -> int:
        """Delete records of tokens that have expired"""
        removed = self.tokens.delete_expired(now or utcnow())
        self.db.commit()
        if removed:
            session_event_counter.labels(event="purged").inc(removed)
            logging.info(f"Purged {removed} expired sessions")
        return removed

"""Domain-specific exceptions

Every error the service reports belongs to one ``ErrorKind``. The kind fixes
the HTTP status and the machine-readable reason string sent to the caller.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error categories with their HTTP status"""

    VALIDATION = ("validation", 400)
    AUTH = ("auth", 401)
    NOT_FOUND = ("not_found", 404)
    CONFLICT = ("conflict", 409)
    BUSINESS_RULE = ("business_rule", 400)
    UPSTREAM = ("upstream", 500)
    INTERNAL = ("internal", 500)

    def __new__(cls, value: str, http_status: int):
        member = str.__new__(cls, value)
        member._value_ = value
        member.http_status = http_status
        return member


class DomainException(Exception):
    """Base exception for domain layer"""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        return self.kind.http_status

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind.value}


class ValidationError(DomainException):
    """Bad or missing input"""

    kind = ErrorKind.VALIDATION
    default_message = "Invalid request"


class AuthError(DomainException):
    """Missing, invalid, expired or revoked session"""

    kind = ErrorKind.AUTH
    default_message = "Not authenticated"


class NotFoundError(DomainException):
    """Referenced account does not exist"""

    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ConflictError(DomainException):
    """Request conflicts with existing state"""

    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class BusinessRuleError(DomainException):
    """Request is well formed but violates a ledger rule"""

    kind = ErrorKind.BUSINESS_RULE
    default_message = "Operation not allowed"


class UpstreamError(DomainException):
    """External AI service failed or is unavailable"""

    kind = ErrorKind.UPSTREAM
    default_message = "Failed to connect to AI service"


class InternalError(DomainException):
    """Unexpected store failure"""

    kind = ErrorKind.INTERNAL


class InvalidAmount(ValidationError):
    default_message = "Positive amount required"


class InvalidCredentials(AuthError):
    default_message = "Invalid email or password"


class InvalidSession(AuthError):
    default_message = "Invalid or expired session"


class AccountNotFound(NotFoundError):
    default_message = "User not found"


class RecipientNotFound(NotFoundError):
    default_message = "Recipient not found"


class DuplicateEmail(ConflictError):
    default_message = "Email already registered"


class InsufficientFunds(BusinessRuleError):
    default_message = "Insufficient balance"


class SelfTransfer(BusinessRuleError):
    default_message = "Cannot send to yourself"


class ChatNotConfigured(UpstreamError):
    default_message = "AI service not configured"


class IdempotencyKeyReused(ConflictError):
    default_message = "Idempotency key already used for a different request"

"""Domain-specific exceptions and the closed set of transfer failure kinds"""

from enum import Enum


class FailureKind(str, Enum):
    """Every non-success transfer path resolves to exactly one of these"""

    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    NETWORK_ERROR = "NETWORK_ERROR"
    DAILY_LIMIT_EXCEEDED = "DAILY_LIMIT_EXCEEDED"
    MONTHLY_LIMIT_EXCEEDED = "MONTHLY_LIMIT_EXCEEDED"
    PER_TRANSACTION_LIMIT_EXCEEDED = "PER_TRANSACTION_LIMIT_EXCEEDED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ACCOUNT = "INVALID_ACCOUNT"

    @classmethod
    def from_code(cls, code: str) -> "FailureKind | None":
        """Look up a reason string from the transfer endpoint, None if unrecognised"""
        try:
            return cls(code)
        except ValueError:
            return None


# Order used when several validation errors are present at once
VALIDATION_PRIORITY = (
    FailureKind.INSUFFICIENT_FUNDS,
    FailureKind.DAILY_LIMIT_EXCEEDED,
    FailureKind.MONTHLY_LIMIT_EXCEEDED,
    FailureKind.PER_TRANSACTION_LIMIT_EXCEEDED,
    FailureKind.INVALID_AMOUNT,
)


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException):
    """Amount is not a finite, non-negative number"""

    pass


class LimitInvariantError(DomainException):
    """Limits snapshot is malformed (remaining != limit - used, negative usage)"""

    pass


class InsufficientBalanceError(DomainException):
    """Debit would leave the account balance negative"""

    pass


class StaleSnapshotError(DomainException):
    """Commit was computed against a snapshot that is no longer current"""

    pass


class TransactionNotFoundError(DomainException):
    """No transaction with the given id in history"""

    pass


class AccountNotFoundError(DomainException):
    """No account with the given id in the store"""

    pass


class TransferCancelled(DomainException):
    """Transfer attempt was abandoned before it could commit"""

    pass


class TransferAPIError(DomainException):
    """Remote transfer endpoint rejected or failed the request"""

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or code)
        self.code = code

    @property
    def kind(self) -> FailureKind | None:
        return FailureKind.from_code(self.code)


class InvalidStatusTransitionError(DomainException):
    """Transaction status change not allowed (only completed -> failed)"""

    pass


class RecipientNotFoundError(DomainException):
    """No recipient matches the given account or phone number"""

    pass

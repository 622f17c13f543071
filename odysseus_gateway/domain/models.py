"""Domain models - pure Python dataclasses representing business entities"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from odysseus_gateway.domain.exceptions import (
    VALIDATION_PRIORITY,
    AccountNotFoundError,
    FailureKind,
    InvalidStatusTransitionError,
    LimitInvariantError,
)
from odysseus_gateway.utils.currency import to_money


def _invariant_violation(message: str, band=None, **fields) -> LimitInvariantError:
    """Log a malformed limits snapshot at ERROR and build the error to raise"""
    if band is not None:
        fields.update(limit=str(band.limit), used=str(band.used), remaining=str(band.remaining))
    logging.error(f"Limit invariant violated: {message}", extra={"step": "limit_invariant", **fields})
    return LimitInvariantError(message)


@dataclass(frozen=True)
class LimitBand:
    """Accumulating limit (daily or monthly): remaining == limit - used"""

    limit: Decimal
    used: Decimal
    remaining: Decimal

    def __post_init__(self) -> None:
        for name in ("limit", "used", "remaining"):
            object.__setattr__(self, name, to_money(getattr(self, name)))

        if self.limit < 0:
            raise _invariant_violation(f"limit must be >= 0, got {self.limit}", band=self)
        if self.used < 0:
            raise _invariant_violation(f"used must be >= 0, got {self.used}", band=self)
        # remaining may go negative when a band is already exceeded
        if self.remaining != self.limit - self.used:
            raise _invariant_violation(
                f"remaining {self.remaining} != limit {self.limit} - used {self.used}", band=self
            )

    @classmethod
    def create(cls, limit, used=0) -> "LimitBand":
        limit, used = to_money(limit), to_money(used)
        return cls(limit=limit, used=used, remaining=limit - used)

    @property
    def capacity(self) -> Decimal:
        """Spendable headroom; an exceeded band has none"""
        return max(self.remaining, Decimal("0"))


@dataclass(frozen=True)
class TransferLimits:
    """Daily and monthly bands plus the stateless per-transaction ceiling"""

    daily: LimitBand
    monthly: LimitBand
    per_transaction: Decimal

    def __post_init__(self) -> None:
        per_transaction = to_money(self.per_transaction)
        if per_transaction < 0:
            raise _invariant_violation(
                f"per_transaction must be >= 0, got {per_transaction}",
                per_transaction=str(per_transaction),
            )
        object.__setattr__(self, "per_transaction", per_transaction)

    @classmethod
    def create(
        cls,
        daily_limit,
        daily_used,
        monthly_limit,
        monthly_used,
        per_transaction,
    ) -> "TransferLimits":
        return cls(
            daily=LimitBand.create(daily_limit, daily_used),
            monthly=LimitBand.create(monthly_limit, monthly_used),
            per_transaction=per_transaction,
        )


@dataclass(frozen=True)
class ValidationError:
    """Single failed check; kind is the structured category, message is display copy"""

    field: str
    message: str
    kind: FailureKind


@dataclass(frozen=True)
class ValidationWarning:
    """Approaching-limit notice: type is daily_limit_warning or monthly_limit_warning"""

    type: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of validate_transfer; warnings only ever accompany a valid result"""

    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def first_error_message(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None

    @property
    def failure_kind(self) -> Optional[FailureKind]:
        """
        Highest-priority failure for the result.

        An invalid result with no errors (zero or unusable amount) maps to
        INVALID_AMOUNT; a valid result has no failure kind.
        """
        if self.is_valid:
            return None
        kinds = {error.kind for error in self.errors}
        for kind in VALIDATION_PRIORITY:
            if kind in kinds:
                return kind
        return FailureKind.INVALID_AMOUNT


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


# Committed transfers may only be marked failed afterwards
ALLOWED_STATUS_TRANSITIONS = {
    TransactionStatus.COMPLETED: {TransactionStatus.FAILED},
    TransactionStatus.FAILED: set(),
}


@dataclass(frozen=True)
class Account:
    """Customer account; the default account is the source of outgoing transfers"""

    id: str
    name: str
    account_number: str
    account_type: str
    balance: Decimal
    currency: str = "RM"
    is_default: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "balance", to_money(self.balance))


@dataclass(frozen=True)
class Recipient:
    """Who receives the money; either account or phone number identifies them"""

    id: str
    name: str
    account_number: Optional[str] = None
    phone_number: Optional[str] = None
    bank_name: Optional[str] = None
    bank_id: Optional[str] = None
    is_favorite: bool = False
    last_transfer_date: Optional[datetime] = None

    def matches(self, account_number: Optional[str] = None, phone_number: Optional[str] = None) -> bool:
        if account_number and self.account_number == account_number:
            return True
        return bool(phone_number) and self.phone_number == phone_number


@dataclass(frozen=True)
class Bank:
    """Destination bank offered when entering a new recipient"""

    id: str
    name: str
    short_name: str
    is_popular: bool = False


@dataclass(frozen=True)
class TransferRequest:
    """Transfer as submitted by the presentation layer (amount not yet validated)"""

    amount: object
    from_account_id: str
    recipient: Recipient
    note: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Committed transfer record; only status may change, via with_status()"""

    id: str
    status: TransactionStatus
    amount: Decimal
    currency: str
    recipient: Recipient
    sender_account_id: str
    reference: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    note: Optional[str] = None
    type: str = "transfer"

    def with_status(self, status: TransactionStatus) -> "Transaction":
        """
        Return a copy with the new status.

        Raises:
            InvalidStatusTransitionError: If the record may not move to status
        """
        status = TransactionStatus(status)
        if status == self.status:
            return self
        if status not in ALLOWED_STATUS_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(
                f"Transaction {self.id} cannot move from {self.status.value} to {status.value}"
            )
        return replace(self, status=status)


@dataclass(frozen=True)
class TransactionPage:
    """One page of transaction history, newest first"""

    items: List[Transaction]
    total: int
    page: int
    page_size: int
    has_more: bool


@dataclass(frozen=True)
class AccountSnapshot:
    """Consistent view of balances and limits at a given store version"""

    version: int
    accounts: Tuple[Account, ...]
    default_account_id: str
    limits: TransferLimits

    def account(self, account_id: str) -> Account:
        for account in self.accounts:
            if account.id == account_id:
                return account
        raise AccountNotFoundError(f"Account {account_id} not found")

    @property
    def default_account(self) -> Account:
        return self.account(self.default_account_id)

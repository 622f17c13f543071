"""Transfer validation - single source of truth for client-side and authoritative checks"""

from decimal import Decimal

from odysseus_gateway.config import settings
from odysseus_gateway.domain.exceptions import FailureKind, InvalidAmountError
from odysseus_gateway.domain.models import (
    TransferLimits,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from odysseus_gateway.utils.currency import format_currency, to_money

DAILY_LIMIT_WARNING = "daily_limit_warning"
MONTHLY_LIMIT_WARNING = "monthly_limit_warning"


def _threshold(value) -> Decimal:
    if value is None:
        return settings.limit_warning_threshold
    return value if isinstance(value, Decimal) else Decimal(str(value))


def exceeds_limit(amount, remaining) -> bool:
    """Amount goes over what is left; exactly equal still fits"""
    return to_money(amount) > to_money(remaining)


def should_warn_for_limit(amount, used, limit, threshold=None) -> bool:
    """Projected usage after this amount reaches the warning threshold of the limit"""
    projected = to_money(used) + to_money(amount)
    return projected >= to_money(limit) * _threshold(threshold)


def limit_warning_level(amount, limit, remaining=None, used=None) -> str:
    """
    Display level for an "approaching limit" banner.

    Uses the same helpers as validate_transfer so the banner and the
    validator never disagree. Without remaining the whole limit is
    available; without used it is inferred from limit - remaining.

    Returns: "error" | "warning" | "info"
    """
    effective_remaining = to_money(limit if remaining is None else remaining)
    effective_used = to_money(limit) - effective_remaining if used is None else to_money(used)

    if exceeds_limit(amount, effective_remaining):
        return "error"
    if should_warn_for_limit(amount, effective_used, limit):
        return "warning"
    return "info"


def validate_transfer(
    amount,
    balance,
    limits: TransferLimits,
    warning_threshold=None,
) -> ValidationResult:
    """
    Decide whether a transfer amount is admissible. Pure, never raises.

    Rules:
    - Zero, negative or unusable amounts are not a validation attempt:
      invalid with no errors and no warnings
    - Balance, per-transaction, daily and monthly checks all run; every
      failing check contributes its own error
    - Equality with a ceiling passes
    - Warnings are computed only when there are no errors, from projected
      usage (used + amount) against limit * warning_threshold
    """
    try:
        amount = to_money(amount)
    except InvalidAmountError:
        return ValidationResult(is_valid=False)
    if amount <= 0:
        return ValidationResult(is_valid=False)

    balance = to_money(balance)
    errors = []
    warnings = []

    if amount > balance:
        errors.append(
            ValidationError(
                field="amount",
                message=f"Insufficient funds. Available: {format_currency(balance)}",
                kind=FailureKind.INSUFFICIENT_FUNDS,
            )
        )

    if exceeds_limit(amount, limits.per_transaction):
        errors.append(
            ValidationError(
                field="amount",
                message=f"Exceeds per-transaction limit of {format_currency(limits.per_transaction)}",
                kind=FailureKind.PER_TRANSACTION_LIMIT_EXCEEDED,
            )
        )

    if exceeds_limit(amount, limits.daily.remaining):
        errors.append(
            ValidationError(
                field="amount",
                message=f"Exceeds daily limit. Remaining: {format_currency(limits.daily.capacity)}",
                kind=FailureKind.DAILY_LIMIT_EXCEEDED,
            )
        )

    if exceeds_limit(amount, limits.monthly.remaining):
        errors.append(
            ValidationError(
                field="amount",
                message=f"Exceeds monthly limit. Remaining: {format_currency(limits.monthly.capacity)}",
                kind=FailureKind.MONTHLY_LIMIT_EXCEEDED,
            )
        )

    if not errors:
        threshold = _threshold(warning_threshold)

        if should_warn_for_limit(amount, limits.daily.used, limits.daily.limit, threshold):
            warnings.append(
                ValidationWarning(
                    type=DAILY_LIMIT_WARNING,
                    message="You're approaching your daily transfer limit.",
                )
            )

        # Independent of the daily warning; both may surface together
        if should_warn_for_limit(amount, limits.monthly.used, limits.monthly.limit, threshold):
            warnings.append(
                ValidationWarning(
                    type=MONTHLY_LIMIT_WARNING,
                    message="You're approaching your monthly transfer limit.",
                )
            )

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

"""Unit tests for transfer validation"""

from decimal import Decimal

import pytest

from odysseus_gateway.domain.exceptions import FailureKind
from odysseus_gateway.domain.models import LimitBand, TransferLimits
from odysseus_gateway.domain.validation import (
    DAILY_LIMIT_WARNING,
    MONTHLY_LIMIT_WARNING,
    exceeds_limit,
    limit_warning_level,
    should_warn_for_limit,
    validate_transfer,
)
from tests.factories import make_limits


def kinds(result):
    return [error.kind for error in result.errors]


def test_valid_amount_within_all_limits(limits):
    """Small transfer passes every check with no warnings"""
    result = validate_transfer(1000, 10000, limits)

    assert result.is_valid is True
    assert result.errors == []
    assert result.warnings == []


@pytest.mark.parametrize("amount", [0, -1, Decimal("-0.01"), "NaN", float("nan"), "abc", None, True])
def test_non_positive_or_unusable_amount_is_not_a_validation_attempt(amount, limits):
    """Zero, negative and unusable amounts: invalid with nothing to report"""
    result = validate_transfer(amount, 10000, limits)

    assert result.is_valid is False
    assert result.errors == []
    assert result.warnings == []


def test_zero_amount_ignores_exhausted_limits():
    """Zero short-circuits even when every limit is already used up"""
    exhausted = make_limits(daily_used=10000, monthly_used=50000, per_transaction=0)
    result = validate_transfer(0, 0, exhausted)

    assert (result.is_valid, result.errors, result.warnings) == (False, [], [])


def test_per_transaction_limit_exceeded():
    """balance 10000, per-transaction 5000: 5001 is rejected"""
    result = validate_transfer(5001, 10000, make_limits())

    assert result.is_valid is False
    assert kinds(result) == [FailureKind.PER_TRANSACTION_LIMIT_EXCEEDED]
    assert "per-transaction limit" in result.errors[0].message
    assert result.errors[0].field == "amount"


def test_insufficient_funds_message_states_available_balance(limits):
    """balance 500, amount 1000: message carries the balance to 2 decimals"""
    result = validate_transfer(1000, 500, limits)

    assert result.is_valid is False
    assert kinds(result) == [FailureKind.INSUFFICIENT_FUNDS]
    assert "Insufficient funds" in result.errors[0].message
    assert "500.00" in result.errors[0].message


def test_balance_exactly_equal_passes(limits):
    assert validate_transfer(1000, 1000, limits).is_valid is True


def test_boundary_equality_passes_each_dimension():
    """Amount equal to per-transaction, daily remaining and monthly remaining passes"""
    limits = make_limits(
        daily_limit=10000,
        daily_used=7000,  # remaining 3000
        monthly_limit=20000,
        monthly_used=17000,  # remaining 3000
        per_transaction=3000,
    )
    result = validate_transfer(3000, 3000, limits, warning_threshold=1)

    assert result.is_valid is True
    assert result.errors == []


@pytest.mark.parametrize(
    "limits, expected",
    [
        (make_limits(per_transaction=3000), FailureKind.PER_TRANSACTION_LIMIT_EXCEEDED),
        (make_limits(daily_used=7000), FailureKind.DAILY_LIMIT_EXCEEDED),
        (make_limits(monthly_limit=20000, monthly_used=17000), FailureKind.MONTHLY_LIMIT_EXCEEDED),
    ],
)
def test_crossing_one_boundary_flips_only_that_check(limits, expected):
    """At 3000 the dimension passes; at 3000.01 only that dimension errors"""
    at_boundary = validate_transfer(3000, 100000, limits)
    past_boundary = validate_transfer(Decimal("3000.01"), 100000, limits)

    assert at_boundary.errors == []
    assert kinds(past_boundary) == [expected]


def test_crossing_balance_boundary_flips_only_balance(limits):
    assert validate_transfer(3000, 3000, limits).errors == []
    assert kinds(validate_transfer(Decimal("3000.01"), 3000, limits)) == [FailureKind.INSUFFICIENT_FUNDS]


def test_all_violations_accumulate():
    """No early return: four independent errors"""
    limits = make_limits(
        daily_limit=10000,
        daily_used=9000,
        monthly_limit=20000,
        monthly_used=18000,
        per_transaction=500,
    )
    result = validate_transfer(5000, 100, limits)

    assert result.is_valid is False
    assert kinds(result) == [
        FailureKind.INSUFFICIENT_FUNDS,
        FailureKind.PER_TRANSACTION_LIMIT_EXCEEDED,
        FailureKind.DAILY_LIMIT_EXCEEDED,
        FailureKind.MONTHLY_LIMIT_EXCEEDED,
    ]
    assert result.warnings == []


def test_failure_kind_priority_prefers_balance_then_daily_then_monthly():
    limits = make_limits(daily_used=9000, monthly_limit=20000, monthly_used=18000, per_transaction=500)

    assert validate_transfer(5000, 100, limits).failure_kind == FailureKind.INSUFFICIENT_FUNDS
    assert validate_transfer(5000, 100000, limits).failure_kind == FailureKind.DAILY_LIMIT_EXCEEDED

    monthly_and_per_tx = make_limits(monthly_limit=20000, monthly_used=18000, per_transaction=500)
    assert (
        validate_transfer(5000, 100000, monthly_and_per_tx).failure_kind
        == FailureKind.MONTHLY_LIMIT_EXCEEDED
    )


def test_failure_kind_for_zero_amount_is_invalid_amount(limits):
    assert validate_transfer(0, 10000, limits).failure_kind == FailureKind.INVALID_AMOUNT
    assert validate_transfer(100, 10000, limits).failure_kind is None


def test_daily_warning_at_threshold():
    """daily 10000 unused, threshold 0.8, amount 8500: valid with a daily warning"""
    limits = make_limits(per_transaction=10000)
    result = validate_transfer(8500, 50000, limits, warning_threshold=0.8)

    assert result.is_valid is True
    assert [w.type for w in result.warnings] == [DAILY_LIMIT_WARNING]


def test_warning_uses_configured_threshold_by_default():
    limits = make_limits(per_transaction=10000)

    assert [w.type for w in validate_transfer(8000, 50000, limits).warnings] == [DAILY_LIMIT_WARNING]
    assert validate_transfer(Decimal("7999.99"), 50000, limits).warnings == []


def test_daily_and_monthly_warnings_surface_together():
    limits = make_limits(daily_used=7000, monthly_limit=20000, monthly_used=15000)
    result = validate_transfer(1500, 50000, limits)

    assert result.is_valid is True
    assert [w.type for w in result.warnings] == [DAILY_LIMIT_WARNING, MONTHLY_LIMIT_WARNING]


def test_no_warnings_when_transfer_is_invalid():
    """Errors and warnings never appear together"""
    limits = make_limits(daily_used=9000)
    result = validate_transfer(2000, 50000, limits)

    assert result.errors
    assert result.warnings == []


def test_exceeded_band_is_treated_as_zero_capacity():
    """A band built already over its limit rejects any positive amount"""
    limits = TransferLimits(
        daily=LimitBand(limit=100, used=150, remaining=-50),
        monthly=LimitBand.create(50000),
        per_transaction=5000,
    )
    result = validate_transfer(1, 10000, limits)

    assert kinds(result) == [FailureKind.DAILY_LIMIT_EXCEEDED]
    assert "RM 0.00" in result.errors[0].message


def test_shared_limit_helpers():
    assert exceeds_limit(101, 100) is True
    assert exceeds_limit(100, 100) is False
    assert should_warn_for_limit(amount=3000, used=5000, limit=10000) is True
    assert should_warn_for_limit(amount=2999, used=5000, limit=10000) is False
    assert should_warn_for_limit(amount=100, used=0, limit=200, threshold=0.5) is True


def test_limit_warning_level():
    """Banner levels agree with the validator"""
    assert limit_warning_level(amount=1000, limit=10000, remaining=500) == "error"
    assert limit_warning_level(amount=1000, limit=10000, remaining=2000) == "warning"
    assert limit_warning_level(amount=1000, limit=10000) == "info"
    assert limit_warning_level(amount=8000, limit=10000) == "warning"


def test_first_error_message(limits):
    failing = validate_transfer(1000, 500, limits)
    passing = validate_transfer(100, 500, limits)

    assert failing.first_error_message == failing.errors[0].message
    assert passing.first_error_message is None

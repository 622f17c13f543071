"""Limits ledger - computes the effect of a transfer on balances and limit usage"""

from dataclasses import dataclass, replace
from decimal import Decimal

from odysseus_gateway.domain.exceptions import InsufficientBalanceError, InvalidAmountError
from odysseus_gateway.domain.models import Account, AccountSnapshot, LimitBand, TransferLimits
from odysseus_gateway.utils.currency import to_money


@dataclass(frozen=True)
class LedgerPlan:
    """New state computed from a snapshot, not yet committed"""

    base_version: int
    amount: Decimal
    account: Account
    limits: TransferLimits


def _non_negative(amount) -> Decimal:
    amount = to_money(amount)
    if amount < 0:
        raise InvalidAmountError(f"Ledger amount must be >= 0, got {amount}")
    return amount


def _consume(band: LimitBand, amount: Decimal) -> LimitBand:
    return LimitBand.create(band.limit, band.used + amount)


def apply_limits_usage(limits: TransferLimits, amount) -> TransferLimits:
    """
    Add a transfer amount to daily and monthly usage.

    Returns a new snapshot; the input is left untouched. The per-transaction
    ceiling is stateless and carried over unchanged.
    """
    amount = _non_negative(amount)
    return replace(
        limits,
        daily=_consume(limits.daily, amount),
        monthly=_consume(limits.monthly, amount),
    )


def debit_balance(account: Account, amount) -> Account:
    """
    Take amount out of the account balance.

    Raises:
        InsufficientBalanceError: If the balance would go negative
    """
    amount = _non_negative(amount)
    new_balance = account.balance - amount
    if new_balance < 0:
        raise InsufficientBalanceError(
            f"Debit of {amount} would overdraw account {account.id} (balance {account.balance})"
        )
    return replace(account, balance=new_balance)


def plan_transfer(snapshot: AccountSnapshot, account_id: str, amount) -> LedgerPlan:
    """
    Compute balance and limits after a transfer without committing anything.

    The plan remembers the snapshot version it was computed from so the
    store can refuse it if another commit landed in between.
    """
    amount = _non_negative(amount)
    return LedgerPlan(
        base_version=snapshot.version,
        amount=amount,
        account=debit_balance(snapshot.account(account_id), amount),
        limits=apply_limits_usage(snapshot.limits, amount),
    )

"""Builders for domain objects used across tests"""

from datetime import datetime, timezone
from decimal import Decimal

from odysseus_gateway.domain.models import (
    Account,
    AccountSnapshot,
    Recipient,
    Transaction,
    TransactionStatus,
    TransferLimits,
    TransferRequest,
)


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays instead of waiting"""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def make_limits(
    daily_limit=10000,
    daily_used=0,
    monthly_limit=50000,
    monthly_used=0,
    per_transaction=5000,
) -> TransferLimits:
    return TransferLimits.create(
        daily_limit=daily_limit,
        daily_used=daily_used,
        monthly_limit=monthly_limit,
        monthly_used=monthly_used,
        per_transaction=per_transaction,
    )


def make_snapshot(balance=10000, limits: TransferLimits | None = None) -> AccountSnapshot:
    account = Account(
        id="acc-001",
        name="Savings",
        account_number="1234567890",
        account_type="savings",
        balance=balance,
        is_default=True,
    )
    return AccountSnapshot(
        version=0,
        accounts=(account,),
        default_account_id="acc-001",
        limits=limits or make_limits(),
    )


def make_request(amount, from_account_id="acc-001", note=None) -> TransferRequest:
    return TransferRequest(
        amount=amount,
        from_account_id=from_account_id,
        recipient=Recipient(id="rec-001", name="Sarah Jenkins", account_number="8829145678"),
        note=note,
    )


def make_transaction(transaction_id="txn-1", amount=100, recipient: Recipient | None = None) -> Transaction:
    now = datetime.now(timezone.utc)
    return Transaction(
        id=transaction_id,
        status=TransactionStatus.COMPLETED,
        amount=Decimal(amount),
        currency="RM",
        recipient=recipient or Recipient(id="rec-001", name="Sarah Jenkins"),
        sender_account_id="acc-001",
        reference="ODS-12345",
        created_at=now,
        completed_at=now,
    )

"""Account and limits store - the single writer of balances, limits and history"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from odysseus_gateway.config import settings
from odysseus_gateway.domain.exceptions import (
    RecipientNotFoundError,
    StaleSnapshotError,
    TransactionNotFoundError,
    TransferCancelled,
)
from odysseus_gateway.domain.ledger import LedgerPlan
from odysseus_gateway.domain.models import (
    Account,
    AccountSnapshot,
    Recipient,
    Transaction,
    TransactionPage,
    TransactionStatus,
    TransferLimits,
)


def build_seed_snapshot() -> AccountSnapshot:
    """Demo accounts and limits from settings"""
    accounts = (
        Account(
            id="acc-001",
            name="Savings",
            account_number="1234567890",
            account_type="savings",
            balance=settings.seed_savings_balance,
            currency=settings.currency_symbol,
            is_default=True,
        ),
        Account(
            id="acc-002",
            name="Current",
            account_number="0987654321",
            account_type="current",
            balance=settings.seed_current_balance,
            currency=settings.currency_symbol,
            is_default=False,
        ),
    )
    limits = TransferLimits.create(
        daily_limit=settings.seed_daily_limit,
        daily_used=settings.seed_daily_used,
        monthly_limit=settings.seed_monthly_limit,
        monthly_used=settings.seed_monthly_used,
        per_transaction=settings.seed_per_transaction_limit,
    )
    return AccountSnapshot(version=0, accounts=accounts, default_account_id="acc-001", limits=limits)


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


SEED_RECIPIENTS = (
    Recipient(
        id="rec-001",
        name="Sarah Jenkins",
        account_number="8829145678",
        bank_id="bank-001",
        bank_name="Maybank",
        is_favorite=True,
        last_transfer_date=_utc(2026, 1, 28, 10, 30),
    ),
    Recipient(
        id="rec-002",
        name="John Doe",
        account_number="4492789012",
        bank_id="bank-002",
        bank_name="CIMB Bank",
        is_favorite=True,
        last_transfer_date=_utc(2026, 1, 25, 14, 20),
    ),
    Recipient(
        id="rec-003",
        name="Lisa Wong",
        phone_number="+60198765432",
        bank_id="bank-001",
        bank_name="Maybank",
        last_transfer_date=_utc(2026, 1, 20, 9, 15),
    ),
    Recipient(
        id="rec-004",
        name="Michael Tan",
        account_number="5567123456",
        bank_id="bank-003",
        bank_name="Public Bank",
        last_transfer_date=_utc(2026, 1, 15, 16, 45),
    ),
    Recipient(
        id="rec-005",
        name="Nur Aisyah",
        phone_number="+60176543210",
        bank_id="bank-004",
        bank_name="RHB Bank",
        last_transfer_date=_utc(2026, 1, 10, 11, 0),
    ),
    Recipient(
        id="rec-006",
        name="David Lee",
        account_number="3345678901",
        bank_id="bank-005",
        bank_name="Hong Leong Bank",
        is_favorite=True,
        last_transfer_date=_utc(2026, 1, 5, 8, 30),
    ),
)


class AccountStateStore(ABC):
    """
    Owner of balance, limits and transaction history.

    Readers get immutable snapshots. The only way to change balance and
    limits together is commit(), which applies a LedgerPlan computed from
    the current version or refuses it.
    """

    @abstractmethod
    async def snapshot(self) -> AccountSnapshot: ...

    @abstractmethod
    async def commit(
        self,
        plan: LedgerPlan,
        transaction: Transaction,
        should_abort: Optional[Callable[[], bool]] = None,
    ) -> AccountSnapshot: ...

    @abstractmethod
    async def set_transfer_limits(self, limits: TransferLimits) -> AccountSnapshot: ...

    @abstractmethod
    async def set_default_account(self, account_id: str) -> AccountSnapshot: ...

    @abstractmethod
    async def list_transactions(self, limit: int = 20, page: int = 1) -> TransactionPage: ...

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Transaction: ...

    @abstractmethod
    async def update_transaction_status(
        self, transaction_id: str, status: TransactionStatus
    ) -> Transaction: ...

    @abstractmethod
    async def list_recipients(self, favorites_only: bool = False) -> List[Recipient]: ...

    @abstractmethod
    async def add_recipient(self, recipient: Recipient) -> Recipient: ...

    @abstractmethod
    async def toggle_favorite(self, recipient_id: str) -> Recipient: ...

    @abstractmethod
    async def reset(self) -> None: ...


@dataclass(frozen=True)
class _State:
    snapshot: AccountSnapshot
    transactions: Tuple[Transaction, ...]
    recipients: Tuple[Recipient, ...] = ()


def _touch_recipient(recipients: Tuple[Recipient, ...], transaction: Transaction) -> Tuple[Recipient, ...]:
    """Stamp the saved recipient of a committed transfer with its transfer time"""
    return tuple(
        replace(r, last_transfer_date=transaction.created_at) if r.id == transaction.recipient.id else r
        for r in recipients
    )


class InMemoryAccountStore(AccountStateStore):
    """Process-local store; state is one immutable object swapped under a lock"""

    def __init__(
        self,
        snapshot: AccountSnapshot | None = None,
        transactions: Tuple[Transaction, ...] = (),
        recipients: Tuple[Recipient, ...] = SEED_RECIPIENTS,
    ):
        self._initial = _State(snapshot or build_seed_snapshot(), tuple(transactions), tuple(recipients))
        self._state = self._initial
        self._lock = asyncio.Lock()

    async def snapshot(self) -> AccountSnapshot:
        return self._state.snapshot

    async def commit(
        self,
        plan: LedgerPlan,
        transaction: Transaction,
        should_abort: Optional[Callable[[], bool]] = None,
    ) -> AccountSnapshot:
        """
        Apply a ledger plan and record its transaction as one step.

        Raises:
            StaleSnapshotError: If another commit landed after the plan's snapshot
            TransferCancelled: If should_abort() is true; nothing is applied
        """
        async with self._lock:
            current = self._state.snapshot
            if should_abort is not None and should_abort():
                raise TransferCancelled(f"Transfer {transaction.id} cancelled before commit")
            if plan.base_version != current.version:
                raise StaleSnapshotError(
                    f"Plan based on version {plan.base_version}, store is at {current.version}"
                )

            accounts = tuple(
                plan.account if account.id == plan.account.id else account
                for account in current.accounts
            )
            snapshot = replace(
                current,
                version=current.version + 1,
                accounts=accounts,
                limits=plan.limits,
            )
            self._state = _State(
                snapshot,
                (transaction,) + self._state.transactions,
                _touch_recipient(self._state.recipients, transaction),
            )
            return snapshot

    async def set_transfer_limits(self, limits: TransferLimits) -> AccountSnapshot:
        async with self._lock:
            current = self._state.snapshot
            snapshot = replace(current, version=current.version + 1, limits=limits)
            self._state = replace(self._state, snapshot=snapshot)
            return snapshot

    async def set_default_account(self, account_id: str) -> AccountSnapshot:
        """Make account_id the source of outgoing transfers (exactly one default)"""
        async with self._lock:
            current = self._state.snapshot
            current.account(account_id)  # raises AccountNotFoundError
            accounts = tuple(
                replace(account, is_default=account.id == account_id)
                for account in current.accounts
            )
            snapshot = replace(
                current,
                version=current.version + 1,
                accounts=accounts,
                default_account_id=account_id,
            )
            self._state = replace(self._state, snapshot=snapshot)
            return snapshot

    async def list_transactions(self, limit: int = 20, page: int = 1) -> TransactionPage:
        """Page through history, newest first (pages start at 1)"""
        limit = max(limit, 1)
        page = max(page, 1)
        transactions = self._state.transactions
        start = (page - 1) * limit
        end = start + limit
        return TransactionPage(
            items=list(transactions[start:end]),
            total=len(transactions),
            page=page,
            page_size=limit,
            has_more=end < len(transactions),
        )

    async def get_transaction(self, transaction_id: str) -> Transaction:
        for transaction in self._state.transactions:
            if transaction.id == transaction_id:
                return transaction
        raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

    async def update_transaction_status(
        self, transaction_id: str, status: TransactionStatus
    ) -> Transaction:
        async with self._lock:
            updated = None
            transactions = []
            for transaction in self._state.transactions:
                if transaction.id == transaction_id:
                    transaction = updated = transaction.with_status(status)
                transactions.append(transaction)
            if updated is None:
                raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
            self._state = replace(self._state, transactions=tuple(transactions))
            return updated

    async def list_recipients(self, favorites_only: bool = False) -> List[Recipient]:
        """Saved recipients, most recently paid first; never-paid ones last"""
        recipients = [r for r in self._state.recipients if r.is_favorite or not favorites_only]
        return sorted(
            recipients,
            key=lambda r: r.last_transfer_date or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )

    async def add_recipient(self, recipient: Recipient) -> Recipient:
        """Save a recipient; saving an existing id replaces it"""
        async with self._lock:
            others = tuple(r for r in self._state.recipients if r.id != recipient.id)
            self._state = replace(self._state, recipients=(recipient,) + others)
            return recipient

    async def toggle_favorite(self, recipient_id: str) -> Recipient:
        async with self._lock:
            updated = None
            recipients = []
            for recipient in self._state.recipients:
                if recipient.id == recipient_id:
                    recipient = updated = replace(recipient, is_favorite=not recipient.is_favorite)
                recipients.append(recipient)
            if updated is None:
                raise RecipientNotFoundError(f"Recipient {recipient_id} not found")
            self._state = replace(self._state, recipients=tuple(recipients))
            return updated

    async def reset(self) -> None:
        async with self._lock:
            self._state = self._initial

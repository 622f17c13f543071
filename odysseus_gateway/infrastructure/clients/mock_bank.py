"""In-process mock of the remote bank transfer API"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from odysseus_gateway.config import settings
from odysseus_gateway.domain.exceptions import (
    AccountNotFoundError,
    FailureKind,
    RecipientNotFoundError,
    StaleSnapshotError,
    TransferAPIError,
)
from odysseus_gateway.domain.ledger import plan_transfer
from odysseus_gateway.domain.models import (
    Account,
    Bank,
    Recipient,
    Transaction,
    TransactionPage,
    TransactionStatus,
    TransferLimits,
    TransferRequest,
    ValidationResult,
)
from odysseus_gateway.domain.validation import validate_transfer
from odysseus_gateway.infrastructure.store import AccountStateStore
from odysseus_gateway.utils.identifiers import (
    generate_recipient_id,
    generate_reference_id,
    generate_transaction_id,
)

BANKS = (
    Bank("bank-001", "Maybank", "MBB", is_popular=True),
    Bank("bank-002", "CIMB Bank", "CIMB", is_popular=True),
    Bank("bank-003", "Public Bank", "PBB", is_popular=True),
    Bank("bank-004", "RHB Bank", "RHB", is_popular=True),
    Bank("bank-005", "Hong Leong Bank", "HLB", is_popular=True),
    Bank("bank-006", "AmBank", "AMB"),
    Bank("bank-007", "Bank Islam", "BIMB"),
    Bank("bank-008", "Bank Rakyat", "BKRM"),
    Bank("bank-009", "OCBC Bank", "OCBC"),
    Bank("bank-010", "UOB Malaysia", "UOB"),
    Bank("bank-011", "Standard Chartered", "SCB"),
    Bank("bank-012", "HSBC Malaysia", "HSBC"),
    Bank("bank-013", "Affin Bank", "AFIN"),
    Bank("bank-014", "Alliance Bank", "ABM"),
    Bank("bank-015", "Bank Muamalat", "BMM"),
)


class MockBankAPI:
    """
    Authoritative side of a transfer.

    Every execute_transfer re-validates against the store's latest snapshot,
    whatever the client checked earlier, and commits through the store's
    compare-and-swap. Failures surface as TransferAPIError carrying one of
    the FailureKind codes.
    """

    def __init__(
        self,
        store: AccountStateStore,
        failure_rate: float | None = None,
        transfer_delay: float | None = None,
        failure_injector: Optional[Callable[[], bool]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
        max_commit_conflicts: int = 3,
    ):
        self.store = store
        self.failure_rate = settings.network_failure_rate if failure_rate is None else failure_rate
        self.transfer_delay = (
            settings.transfer_delay_seconds if transfer_delay is None else transfer_delay
        )
        self.failure_injector = failure_injector
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.max_commit_conflicts = max_commit_conflicts

    def _network_fails(self) -> bool:
        if self.failure_injector is not None:
            return self.failure_injector()
        return self.rng.random() < self.failure_rate

    async def get_accounts(self) -> List[Account]:
        snapshot = await self.store.snapshot()
        return list(snapshot.accounts)

    async def get_limits(self) -> TransferLimits:
        snapshot = await self.store.snapshot()
        return snapshot.limits

    async def validate_transfer(self, request: TransferRequest) -> ValidationResult:
        """
        Authoritative validation without committing.

        Raises:
            TransferAPIError: INVALID_ACCOUNT when the source account is unknown
        """
        snapshot = await self.store.snapshot()
        try:
            account = snapshot.account(request.from_account_id)
        except AccountNotFoundError as e:
            raise TransferAPIError(FailureKind.INVALID_ACCOUNT.value, str(e)) from e
        return validate_transfer(request.amount, account.balance, snapshot.limits)

    async def execute_transfer(
        self,
        request: TransferRequest,
        should_abort: Optional[Callable[[], bool]] = None,
    ) -> Transaction:
        """
        Execute a transfer and return the committed transaction.

        Raises:
            TransferAPIError: NETWORK_ERROR for simulated transport failures,
                otherwise the validation failure kind or INVALID_ACCOUNT
            TransferCancelled: If should_abort() turns true before commit
        """
        if self.transfer_delay > 0:
            await self.sleep(self.transfer_delay)

        if self._network_fails():
            raise TransferAPIError(FailureKind.NETWORK_ERROR.value, "Simulated network failure")

        for _ in range(self.max_commit_conflicts):
            snapshot = await self.store.snapshot()
            try:
                account = snapshot.account(request.from_account_id)
            except AccountNotFoundError as e:
                raise TransferAPIError(FailureKind.INVALID_ACCOUNT.value, str(e)) from e

            result = validate_transfer(request.amount, account.balance, snapshot.limits)
            if not result.is_valid:
                raise TransferAPIError(
                    result.failure_kind.value,
                    result.first_error_message or "Transfer amount must be greater than zero",
                )

            plan = plan_transfer(snapshot, account.id, request.amount)
            now = datetime.now(timezone.utc)
            transaction = Transaction(
                id=generate_transaction_id(),
                status=TransactionStatus.COMPLETED,
                amount=plan.amount,
                currency=account.currency,
                recipient=request.recipient,
                sender_account_id=account.id,
                reference=generate_reference_id(self.rng),
                created_at=now,
                completed_at=now,
                note=request.note,
            )

            try:
                await self.store.commit(plan, transaction, should_abort=should_abort)
            except StaleSnapshotError as e:
                logging.info(f"Snapshot moved during transfer, re-validating: {e}")
                continue
            return transaction

        # Contention this persistent is transient from the caller's point of view
        raise TransferAPIError(
            FailureKind.NETWORK_ERROR.value,
            f"Account state kept changing after {self.max_commit_conflicts} commit attempts",
        )

    async def get_transactions(self, limit: int = 20, page: int = 1) -> TransactionPage:
        return await self.store.list_transactions(limit=limit, page=page)

    async def get_transaction(self, transaction_id: str) -> Transaction:
        return await self.store.get_transaction(transaction_id)

    async def get_banks(self, popular_only: bool = False) -> List[Bank]:
        return [bank for bank in BANKS if bank.is_popular or not popular_only]

    async def get_recipients(self, favorites_only: bool = False) -> List[Recipient]:
        return await self.store.list_recipients(favorites_only=favorites_only)

    async def lookup_recipient(
        self,
        account_number: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Recipient:
        """
        Resolve an account or phone number to a recipient.

        Saved recipients are returned as stored; any other number resolves
        to a new, unsaved recipient.

        Raises:
            ValueError: If neither number is given
            RecipientNotFoundError: If the number belongs to nobody
        """
        if not account_number and not phone_number:
            raise ValueError("account_number or phone_number is required")
        if (
            account_number == settings.unknown_recipient_account_number
            or phone_number == settings.unknown_recipient_phone_number
        ):
            raise RecipientNotFoundError(f"No recipient for {account_number or phone_number}")

        for recipient in await self.store.list_recipients():
            if recipient.matches(account_number, phone_number):
                return recipient

        return Recipient(
            id=generate_recipient_id(),
            name="New Recipient",
            account_number=account_number,
            phone_number=phone_number,
            bank_name=settings.lookup_bank_name,
        )

    async def save_recipient(self, recipient: Recipient) -> Recipient:
        return await self.store.add_recipient(recipient)

    async def toggle_favorite(self, recipient_id: str) -> Recipient:
        return await self.store.toggle_favorite(recipient_id)

    async def reset(self) -> None:
        await self.store.reset()

"""Transfer execution - client pre-check, authoritative call with retry, commit"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from odysseus_gateway.config import settings
from odysseus_gateway.domain.exceptions import (
    AccountNotFoundError,
    DomainException,
    FailureKind,
    TransferAPIError,
    TransferCancelled,
)
from odysseus_gateway.domain.models import Transaction, TransferRequest, ValidationResult
from odysseus_gateway.domain.validation import validate_transfer
from odysseus_gateway.infrastructure.clients.mock_bank import MockBankAPI
from odysseus_gateway.infrastructure.observability.logging import (
    log_transfer_outcome,
    log_transfer_retry,
)
from odysseus_gateway.infrastructure.observability.metrics import (
    limit_warning_counter,
    record_transfer_outcome,
    transfer_execution_histogram,
    transfer_retry_counter,
)
from odysseus_gateway.infrastructure.store import AccountStateStore
from odysseus_gateway.utils.retry import retry_async

NETWORK_ERROR_MESSAGE = "Unable to reach the bank. Please check your connection and try again."


class TransferState(str, Enum):
    IDLE = "idle"
    CLIENT_VALIDATING = "client_validating"
    REJECTED = "rejected"
    AUTHORITATIVE_CHECK = "authoritative_check"
    COMMITTED = "committed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class TransferOutcome:
    """Terminal result of one transfer attempt"""

    state: TransferState
    transaction: Optional[Transaction] = None
    failure_kind: Optional[FailureKind] = None
    validation: Optional[ValidationResult] = None
    message: Optional[str] = None
    attempts: int = 0
    states: List[TransferState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == TransferState.COMMITTED


def _is_transient(exc: Exception) -> bool:
    return isinstance(exc, TransferAPIError) and exc.kind == FailureKind.NETWORK_ERROR


class TransferOrchestrator:
    """
    Runs a transfer through Idle -> ClientValidating -> (Rejected |
    AuthoritativeCheck) -> (Committed | Failed).

    The client-side check uses the locally known snapshot and never touches
    the network. The bank re-validates against its own latest state before
    committing, so a transfer that passed locally can still fail with a
    specific limit or balance kind.
    """

    def __init__(
        self,
        store: AccountStateStore,
        bank: MockBankAPI,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.bank = bank
        self.max_attempts = max_attempts or settings.transfer_max_attempts
        self.base_delay = settings.transfer_retry_base_delay if base_delay is None else base_delay
        self.max_delay = settings.transfer_retry_max_delay if max_delay is None else max_delay
        self.sleep = sleep

    async def check(self, request: TransferRequest) -> ValidationResult:
        """Instant client-side validation against the local snapshot"""
        snapshot = await self.store.snapshot()
        account = snapshot.account(request.from_account_id)
        return validate_transfer(request.amount, account.balance, snapshot.limits)

    async def _pause(self, delay: float, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await self.sleep(delay)
            return
        # Backoff races the cancel event; whichever finishes first wakes us
        sleeper = asyncio.ensure_future(self.sleep(delay))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            sleeper.cancel()
            waiter.cancel()

    def _on_retry(self, attempt: int, delay_seconds: float, exception: Exception) -> None:
        transfer_retry_counter.inc()
        log_transfer_retry(attempt, delay_seconds, getattr(exception, "code", type(exception).__name__))

    async def execute(
        self,
        request: TransferRequest,
        cancel_event: Optional[asyncio.Event] = None,
        request_id: Optional[str] = None,
    ) -> TransferOutcome:
        """
        Execute a transfer.

        Flow:
        1. Validate against the local snapshot; reject without a network call
        2. Call the bank, retrying NETWORK_ERROR with exponential backoff
        3. The bank re-validates and commits balance + limits together
        4. Return the committed transaction or exactly one FailureKind

        Setting cancel_event stops retries and prevents a late commit. Task
        cancellation propagates asyncio.CancelledError without mutating state.
        """
        start_time = time.time()
        outcome = TransferOutcome(state=TransferState.IDLE, states=[TransferState.IDLE])

        def transition(state: TransferState) -> None:
            outcome.state = state
            outcome.states.append(state)

        def cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        def finish() -> TransferOutcome:
            kind = outcome.failure_kind.value if outcome.failure_kind else None
            record_transfer_outcome(outcome.state.value, kind)
            log_transfer_outcome(
                request.from_account_id,
                request.amount,
                outcome.state.value,
                kind,
                outcome.attempts,
                (time.time() - start_time) * 1000,
                request_id=request_id,
            )
            return outcome

        # 1. Client-side pre-check
        transition(TransferState.CLIENT_VALIDATING)
        try:
            validation = await self.check(request)
        except AccountNotFoundError as e:
            outcome.failure_kind = FailureKind.INVALID_ACCOUNT
            outcome.message = str(e)
            transition(TransferState.REJECTED)
            return finish()

        outcome.validation = validation
        if not validation.is_valid:
            outcome.failure_kind = validation.failure_kind
            outcome.message = validation.first_error_message
            transition(TransferState.REJECTED)
            return finish()

        for warning in validation.warnings:
            limit_warning_counter.labels(type=warning.type).inc()

        # 2-3. Authoritative call
        transition(TransferState.AUTHORITATIVE_CHECK)

        async def call_bank() -> Transaction:
            if cancelled():
                raise TransferCancelled("Transfer cancelled before bank call")
            outcome.attempts += 1
            return await self.bank.execute_transfer(request, should_abort=cancelled)

        try:
            with transfer_execution_histogram.time():
                transaction = await retry_async(
                    call_bank,
                    is_retryable=_is_transient,
                    max_attempts=self.max_attempts,
                    base_delay=self.base_delay,
                    max_delay=self.max_delay,
                    on_retry=self._on_retry,
                    sleep=lambda delay: self._pause(delay, cancel_event),
                )

        except asyncio.CancelledError:
            transition(TransferState.CANCELLED)
            finish()
            raise

        except TransferCancelled as e:
            outcome.message = str(e)
            transition(TransferState.CANCELLED)
            return finish()

        except TransferAPIError as e:
            kind = e.kind
            if kind is None:
                logging.error(f"Unrecognised transfer failure code: {e.code}", extra={"request_id": request_id})
                kind = FailureKind.NETWORK_ERROR
            outcome.failure_kind = kind
            if kind == FailureKind.NETWORK_ERROR:
                logging.warning(f"Transfer gave up on transport failure: {e}", extra={"request_id": request_id})
                outcome.message = NETWORK_ERROR_MESSAGE
            else:
                outcome.message = str(e)
            transition(TransferState.FAILED)
            return finish()

        except DomainException:
            # Contract violations (malformed limits and the like) are not transfer outcomes
            raise

        except Exception as e:
            logging.error(f"Transport error during transfer: {e!r}", extra={"request_id": request_id})
            outcome.failure_kind = FailureKind.NETWORK_ERROR
            outcome.message = NETWORK_ERROR_MESSAGE
            transition(TransferState.FAILED)
            return finish()

        # 4. Committed
        outcome.transaction = transaction
        transition(TransferState.COMMITTED)
        return finish()

"""POST /v1/transfers - validate and execute money transfers"""

from fastapi import APIRouter, Depends, HTTPException, Request

from odysseus_gateway.api.dependencies import get_account_store, get_orchestrator, get_request_id
from odysseus_gateway.api.v1.schemas import (
    TransactionSchema,
    TransferFailureDetail,
    TransferRequestBody,
    ValidationResultSchema,
)
from odysseus_gateway.domain.exceptions import AccountNotFoundError, FailureKind
from odysseus_gateway.infrastructure.store import AccountStateStore
from odysseus_gateway.services.transfers import TransferOrchestrator

router = APIRouter()

FAILURE_STATUS = {
    FailureKind.INSUFFICIENT_FUNDS: 422,
    FailureKind.DAILY_LIMIT_EXCEEDED: 422,
    FailureKind.MONTHLY_LIMIT_EXCEEDED: 422,
    FailureKind.PER_TRANSACTION_LIMIT_EXCEEDED: 422,
    FailureKind.INVALID_AMOUNT: 422,
    FailureKind.INVALID_ACCOUNT: 404,
    FailureKind.NETWORK_ERROR: 503,
}


async def _source_account_id(body: TransferRequestBody, store: AccountStateStore) -> str:
    if body.from_account_id:
        return body.from_account_id
    snapshot = await store.snapshot()
    return snapshot.default_account_id


@router.post("/transfers/validate", response_model=ValidationResultSchema)
async def validate_transfer(
    body: TransferRequestBody,
    store: AccountStateStore = Depends(get_account_store),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    """
    Instant validation for per-keystroke feedback.

    An invalid result with no errors means there is nothing to validate yet
    (zero amount), not a failure to show the user.
    """
    transfer_request = body.to_domain(await _source_account_id(body, store))
    try:
        result = await orchestrator.check(transfer_request)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ValidationResultSchema.model_validate(result)


@router.post("/transfers", response_model=TransactionSchema, status_code=201)
async def create_transfer(
    body: TransferRequestBody,
    request: Request,
    store: AccountStateStore = Depends(get_account_store),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    """
    Execute a transfer.

    Returns the committed transaction. Any other outcome is reported with a
    FailureKind code so the client can pick its recovery action.
    """
    transfer_request = body.to_domain(await _source_account_id(body, store))
    outcome = await orchestrator.execute(transfer_request, request_id=get_request_id(request))

    if outcome.succeeded:
        return TransactionSchema.model_validate(outcome.transaction)

    kind = outcome.failure_kind or FailureKind.NETWORK_ERROR
    detail = TransferFailureDetail(code=kind, message=outcome.message)
    raise HTTPException(status_code=FAILURE_STATUS[kind], detail=detail.model_dump(mode="json"))

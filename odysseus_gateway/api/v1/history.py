"""GET /v1/transactions - transaction history, newest first"""

from fastapi import APIRouter, Depends, HTTPException, Query

from odysseus_gateway.api.dependencies import get_bank_api
from odysseus_gateway.api.v1.schemas import TransactionPageSchema, TransactionSchema
from odysseus_gateway.domain.exceptions import TransactionNotFoundError
from odysseus_gateway.infrastructure.clients.mock_bank import MockBankAPI

router = APIRouter()


@router.get("/transactions", response_model=TransactionPageSchema)
async def list_transactions(
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    bank: MockBankAPI = Depends(get_bank_api),
):
    page_result = await bank.get_transactions(limit=limit, page=page)
    return TransactionPageSchema.model_validate(page_result)


@router.get("/transactions/{transaction_id}", response_model=TransactionSchema)
async def get_transaction(transaction_id: str, bank: MockBankAPI = Depends(get_bank_api)):
    try:
        transaction = await bank.get_transaction(transaction_id)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TransactionSchema.model_validate(transaction)

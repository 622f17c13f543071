"""GET /v1/accounts and /v1/limits - current balances and limit usage"""

from typing import List

from fastapi import APIRouter, Depends

from odysseus_gateway.api.dependencies import get_bank_api
from odysseus_gateway.api.v1.schemas import AccountSchema, TransferLimitsSchema
from odysseus_gateway.infrastructure.clients.mock_bank import MockBankAPI

router = APIRouter()


@router.get("/accounts", response_model=List[AccountSchema])
async def list_accounts(bank: MockBankAPI = Depends(get_bank_api)):
    accounts = await bank.get_accounts()
    return [AccountSchema.model_validate(account) for account in accounts]


@router.get("/limits", response_model=TransferLimitsSchema)
async def get_limits(bank: MockBankAPI = Depends(get_bank_api)):
    """Daily and monthly usage with remaining headroom, plus the per-transaction ceiling"""
    limits = await bank.get_limits()
    return TransferLimitsSchema.model_validate(limits)

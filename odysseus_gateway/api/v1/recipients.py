"""GET /v1/recipients and /v1/banks - saved payees, payee lookup and bank directory"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from odysseus_gateway.api.dependencies import get_bank_api
from odysseus_gateway.api.v1.schemas import BankSchema, RecipientSchema, SavedRecipientSchema
from odysseus_gateway.domain.exceptions import RecipientNotFoundError
from odysseus_gateway.infrastructure.clients.mock_bank import MockBankAPI

router = APIRouter()


@router.get("/recipients", response_model=List[SavedRecipientSchema])
async def list_recipients(
    favorites_only: bool = Query(False),
    limit: Optional[int] = Query(None, ge=1, le=100),
    bank: MockBankAPI = Depends(get_bank_api),
):
    """Saved recipients, most recently paid first"""
    recipients = await bank.get_recipients(favorites_only=favorites_only)
    if limit is not None:
        recipients = recipients[:limit]
    return [SavedRecipientSchema.model_validate(recipient) for recipient in recipients]


@router.get("/recipients/lookup", response_model=SavedRecipientSchema)
async def lookup_recipient(
    account_number: Optional[str] = Query(None, min_length=1),
    phone_number: Optional[str] = Query(None, min_length=1),
    bank: MockBankAPI = Depends(get_bank_api),
):
    if not account_number and not phone_number:
        raise HTTPException(status_code=422, detail="account_number or phone_number is required")
    try:
        recipient = await bank.lookup_recipient(account_number=account_number, phone_number=phone_number)
    except RecipientNotFoundError as e:
        raise HTTPException(status_code=404, detail={"code": "RECIPIENT_NOT_FOUND", "message": str(e)})
    return SavedRecipientSchema.model_validate(recipient)


@router.post("/recipients", response_model=SavedRecipientSchema, status_code=201)
async def save_recipient(body: RecipientSchema, bank: MockBankAPI = Depends(get_bank_api)):
    recipient = await bank.save_recipient(body.to_domain())
    return SavedRecipientSchema.model_validate(recipient)


@router.post("/recipients/{recipient_id}/favorite", response_model=SavedRecipientSchema)
async def toggle_favorite(recipient_id: str, bank: MockBankAPI = Depends(get_bank_api)):
    try:
        recipient = await bank.toggle_favorite(recipient_id)
    except RecipientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return SavedRecipientSchema.model_validate(recipient)


@router.get("/banks", response_model=List[BankSchema])
async def list_banks(popular_only: bool = Query(False), bank: MockBankAPI = Depends(get_bank_api)):
    banks = await bank.get_banks(popular_only=popular_only)
    return [BankSchema.model_validate(b) for b in banks]

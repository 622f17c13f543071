"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from odysseus_gateway.domain.exceptions import FailureKind
from odysseus_gateway.domain.models import Recipient, TransactionStatus, TransferRequest
from odysseus_gateway.utils.identifiers import generate_recipient_id


class RecipientSchema(BaseModel):
    """Transfer recipient; account_number or phone_number identifies them"""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    account_number: Optional[str] = None
    phone_number: Optional[str] = None
    bank_name: Optional[str] = None
    bank_id: Optional[str] = None

    def to_domain(self) -> Recipient:
        return Recipient(
            id=self.id or generate_recipient_id(),
            name=self.name,
            account_number=self.account_number,
            phone_number=self.phone_number,
            bank_name=self.bank_name,
            bank_id=self.bank_id,
        )


class SavedRecipientSchema(RecipientSchema):
    """Recipient from the saved list, with favourite flag and last transfer time"""

    is_favorite: bool = False
    last_transfer_date: Optional[datetime] = None


class BankSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    short_name: str
    is_popular: bool


class TransferRequestBody(BaseModel):
    """Request body for POST /v1/transfers and /v1/transfers/validate"""

    amount: Decimal = Field(..., description="Transfer amount; zero or less is never valid")
    from_account_id: Optional[str] = Field(None, description="Defaults to the default account")
    recipient: RecipientSchema
    note: Optional[str] = Field(None, max_length=140)

    def to_domain(self, from_account_id: str) -> TransferRequest:
        return TransferRequest(
            amount=self.amount,
            from_account_id=from_account_id,
            recipient=self.recipient.to_domain(),
            note=self.note,
        )


class ValidationErrorSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    field: str
    message: str
    kind: FailureKind


class ValidationWarningSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    message: str


class ValidationResultSchema(BaseModel):
    """Response for POST /v1/transfers/validate"""

    model_config = ConfigDict(from_attributes=True)

    is_valid: bool
    errors: List[ValidationErrorSchema]
    warnings: List[ValidationWarningSchema]


class TransactionSchema(BaseModel):
    """Committed transfer"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    status: TransactionStatus
    amount: Decimal
    currency: str
    recipient: RecipientSchema
    sender_account_id: str
    reference: str
    note: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class TransactionPageSchema(BaseModel):
    """Response for GET /v1/transactions"""

    model_config = ConfigDict(from_attributes=True)

    items: List[TransactionSchema]
    total: int
    page: int
    page_size: int
    has_more: bool


class AccountSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    account_number: str
    account_type: str
    balance: Decimal
    currency: str
    is_default: bool


class LimitBandSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    limit: Decimal
    used: Decimal
    remaining: Decimal


class TransferLimitsSchema(BaseModel):
    """Response for GET /v1/limits"""

    model_config = ConfigDict(from_attributes=True)

    daily: LimitBandSchema
    monthly: LimitBandSchema
    per_transaction: Decimal


class TransferFailureDetail(BaseModel):
    """Error detail for a transfer that did not commit"""

    code: FailureKind
    message: Optional[str] = None

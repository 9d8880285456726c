"""Contract signature models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class SignatureStep(str, Enum):
    """Contract dialog step."""

    REVIEW = "review"
    SIGN = "sign"
    COMPLETE = "complete"


class CampaignDetails(BaseModel):
    """Campaign summary shown in the agreement."""

    campaign: str
    date: str
    time: str
    slots: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)


class ContractCustomer(BaseModel):
    name: str
    email: str
    company: str | None = None


class ContractData(BaseModel):
    terms: str
    campaign_details: CampaignDetails
    customer_info: ContractCustomer
    signed_at: datetime

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class ContractSubmission(BaseModel):
    """Body of POST /api/customer/bookings/{id}/contract."""

    contract_signed: bool = True
    signature_data: str = Field(..., min_length=1)
    signer_name: str = Field(..., min_length=1)
    signer_date: str
    contract_data: ContractData

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

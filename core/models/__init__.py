"""Core domain models."""

from core.models.cart import CartItem, BookingPhase
from core.models.pricing import PricingBreakdown
from core.models.campaign import Campaign, Availability
from core.models.customer import CustomerInfo
from core.models.upload import FileStatus, SelectedFile, UploadedFile
from core.models.contract import (
    SignatureStep,
    CampaignDetails,
    ContractCustomer,
    ContractData,
    ContractSubmission,
)

__all__ = [
    # Cart
    "CartItem", "BookingPhase",
    # Pricing
    "PricingBreakdown",
    # Campaign
    "Campaign", "Availability",
    # Customer
    "CustomerInfo",
    # Upload
    "FileStatus", "SelectedFile", "UploadedFile",
    # Contract
    "SignatureStep", "CampaignDetails", "ContractCustomer", "ContractData", "ContractSubmission",
]

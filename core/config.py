"""Booking core configuration.

Business constants (discount tiers, VAT, upload limits) are injected through
these objects rather than hard-coded in the logic that uses them.
"""

import logging
import os
from decimal import Decimal
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

MB = 1024 * 1024

DEFAULT_DISCOUNT_TIERS = {
    2: Decimal("0.10"),  # BULK_2_PLUS
    4: Decimal("0.15"),  # BULK_4_PLUS
    6: Decimal("0.20"),  # BULK_6_PLUS
}

DEFAULT_ACCEPTED_TYPES = {
    "image/*": [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"],
    "video/*": [".mp4", ".avi", ".mov", ".wmv", ".flv", ".mkv"],
    "application/pdf": [".pdf"],
    "application/msword": [".doc"],
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": [".docx"],
    "text/plain": [".txt"],
    "application/zip": [".zip"],
    "application/x-rar-compressed": [".rar"],
}

CREATIVE_ACCEPTED_TYPES = {
    "image/jpeg": [".jpg", ".jpeg"],
    "image/png": [".png"],
    "image/gif": [".gif"],
    "video/mp4": [".mp4"],
    "video/mov": [".mov"],
    "application/pdf": [".pdf"],
    "application/zip": [".zip"],
    "application/x-zip-compressed": [".zip"],
}


class PricingConfig(BaseModel):
    """
    Pricing constants.

    Discount tiers map a minimum number of distinct campaigns in the cart
    to the discount rate applied at that size.
    """

    vat_rate: Decimal = Field(
        default=Decimal("0.20"),
        description="UK VAT rate applied after discount",
        ge=0,
        le=1,
    )
    discount_tiers: dict[int, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_DISCOUNT_TIERS),
        description="Minimum item count -> discount rate",
    )
    currency: str = Field(default="GBP", min_length=3, max_length=3)

    @field_validator("discount_tiers")
    @classmethod
    def validate_tiers(cls, tiers: dict[int, Decimal]) -> dict[int, Decimal]:
        for minimum, rate in tiers.items():
            if minimum < 1:
                raise ValueError(f"Discount tier minimum must be >= 1, got {minimum}")
            if not Decimal(0) <= rate <= Decimal(1):
                raise ValueError(f"Discount rate must be between 0 and 1, got {rate}")
        return tiers


class UploadConfig(BaseModel):
    """File upload limits and transport mode."""

    max_file_size: int = Field(default=50 * MB, description="Per-file limit in bytes", ge=1)
    max_files: int = Field(default=10, description="Files allowed in the collection", ge=1)
    accepted_file_types: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_ACCEPTED_TYPES.items()},
        description="MIME pattern -> extensions; subtype may be '*'",
    )
    allow_preview: bool = True
    upload_mode: Literal["simulate", "api"] = "simulate"
    api_endpoint: str = ""
    additional_data: dict[str, str] = Field(default_factory=dict)
    simulate_tick_seconds: float = Field(
        default=0.2,
        description="Interval between simulated progress increments",
        ge=0,
    )

    @classmethod
    def for_creative(cls, booking_id: int, campaign_name: str) -> "UploadConfig":
        """Preset used for creative asset uploads against a booking."""
        return cls(
            max_file_size=50 * MB,
            max_files=5,
            accepted_file_types={k: list(v) for k, v in CREATIVE_ACCEPTED_TYPES.items()},
            upload_mode="api",
            api_endpoint=f"/api/customer/bookings/{booking_id}/files",
            additional_data={
                "bookingId": str(booking_id),
                "campaignName": campaign_name,
            },
        )


class BookingConfig(BaseModel):
    """Which post-checkout stages a booking has to pass through."""

    require_contract: bool = True
    require_creative: bool = True
    contract_confirmation_delay_seconds: float = Field(default=3.0, ge=0)
    recent_orders_limit: int = Field(default=5, ge=0)


class AppConfig(BaseModel):
    """Top-level configuration."""

    api_base_url: str = Field(default="http://localhost:5000")
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    booking: BookingConfig = Field(default_factory=BookingConfig)


def parse_discount_tiers(raw: str) -> dict[int, Decimal]:
    """
    Parse "2:0.10,4:0.15,6:0.20" into a tier mapping.

    Raises:
        ValueError: On malformed entries
    """
    tiers: dict[int, Decimal] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        try:
            minimum, rate = entry.split(":")
            tiers[int(minimum)] = Decimal(rate.strip())
        except (ValueError, ArithmeticError):
            raise ValueError(f"Malformed discount tier '{entry}', expected MIN:RATE")
    return tiers


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(env_file: str | None = None) -> AppConfig:
    """
    Build AppConfig from environment variables.

    A .env file (if present) is loaded first; real environment variables win.
    """
    load_dotenv(env_file, override=False)

    pricing_kwargs = {}
    if os.getenv("VAT_RATE"):
        pricing_kwargs["vat_rate"] = Decimal(os.environ["VAT_RATE"])
    if os.getenv("DISCOUNT_TIERS"):
        pricing_kwargs["discount_tiers"] = parse_discount_tiers(os.environ["DISCOUNT_TIERS"])

    upload_kwargs = {}
    if os.getenv("UPLOAD_MAX_FILE_SIZE_MB"):
        upload_kwargs["max_file_size"] = int(os.environ["UPLOAD_MAX_FILE_SIZE_MB"]) * MB
    if os.getenv("UPLOAD_MAX_FILES"):
        upload_kwargs["max_files"] = int(os.environ["UPLOAD_MAX_FILES"])

    config = AppConfig(
        api_base_url=os.getenv("BOOKING_API_BASE_URL", "http://localhost:5000"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        pricing=PricingConfig(**pricing_kwargs),
        upload=UploadConfig(**upload_kwargs),
        booking=BookingConfig(
            require_contract=_env_bool("REQUIRE_CONTRACT", True),
            require_creative=_env_bool("REQUIRE_CREATIVE", True),
        ),
    )
    logger.info(f"Configuration loaded: api_base_url={config.api_base_url}")
    return config

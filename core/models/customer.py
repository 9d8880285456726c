"""Customer details collected at the customer-info step."""

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CustomerInfo(BaseModel):
    """Contact details for the person booking."""

    customer_name: str = Field(..., min_length=2, max_length=100)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=10, max_length=20, pattern=r"^[+]?[\d\s\-()]+$")
    company: str | None = Field(None, max_length=100)
    requirements: str | None = Field(None, max_length=1000)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("customer_email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

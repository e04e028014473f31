"""
Data Transfer Objects for plan upgrade payments.
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class VerifyPaymentRequest(BaseModel):
    """Request model sent by the checkout widget after a successful payment."""
    payment_id: str = Field(..., description="Payment identifier from the gateway")
    user_id: str = Field(..., description="User the payment upgrades")
    order_id: Optional[str] = Field(default=None, description="Gateway order identifier")
    signature: Optional[str] = Field(default=None, description="HMAC signature of order_id|payment_id")
    
    @field_validator('payment_id', 'user_id')
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or v.strip() == "":
            raise ValueError("Field cannot be empty")
        return v.strip()


class VerifyPaymentResponse(BaseModel):
    """Response model for a verified payment."""
    success: bool
    message: str
    plan_type: str
    storage_limit: int

"""
Payment API routes.
"""
from fastapi import APIRouter, Depends
from src.core.auth_dependencies import verify_token
from src.core.dependencies import get_payment_service
from src.models.dto.payment_dto import VerifyPaymentRequest, VerifyPaymentResponse
from src.services.payment_service import PaymentService

router = APIRouter(prefix="/v1/api/payments", tags=["Payments"])


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    payment_service: PaymentService = Depends(get_payment_service),
    user_id: str = Depends(verify_token)
):
    """
    Verify a checkout payment and upgrade the caller to the premium plan.
    
    - **payment_id**: Payment identifier from the gateway
    - **user_id**: Must match the authenticated user
    """
    return payment_service.verify_payment(user_id, request)

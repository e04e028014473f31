"""
Payment Service for plan upgrades.
Verifies a checkout payment and moves the user to the premium plan.
"""
import hashlib
import hmac
import logging
from src.core import config
from src.core.exceptions import PaymentVerificationException
from src.models.dto.payment_dto import VerifyPaymentRequest, VerifyPaymentResponse
from src.models.user_profile import PLAN_PREMIUM
from src.repositories.user_profile_repository import UserProfileRepository

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for payment verification operations."""

    def __init__(self, user_profile_repository: UserProfileRepository = None):
        self.user_profile_repository = user_profile_repository or UserProfileRepository()

    def verify_payment(self, token_user_id: str, request: VerifyPaymentRequest) -> VerifyPaymentResponse:
        """
        Verify a payment and upgrade the user to premium.

        When the gateway returned an order id and signature, the signature
        must be the hex HMAC-SHA256 of "order_id|payment_id" under the
        payment secret.

        Args:
            token_user_id: User id from the access token
            request: Payment details from the checkout

        Returns:
            VerifyPaymentResponse with the new plan

        Raises:
            PaymentVerificationException: If the payment cannot be verified
            DynamoDBException: If the profile cannot be updated
        """
        if token_user_id != request.user_id:
            raise PaymentVerificationException("User ID mismatch")

        secret = config.settings.payment_secret
        if not secret:
            raise PaymentVerificationException("Payment secret not configured")

        if request.order_id or request.signature:
            if not (request.order_id and request.signature):
                raise PaymentVerificationException("Both order_id and signature are required for signature verification")
            if not self._signature_matches(secret, request.order_id, request.payment_id, request.signature):
                logger.warning("Invalid payment signature for payment %s of user %s", request.payment_id, request.user_id)
                raise PaymentVerificationException("Invalid payment signature")

        premium_limit = config.settings.premium_storage_limit_bytes
        self.user_profile_repository.get_or_create(request.user_id)
        self.user_profile_repository.update_plan(request.user_id, PLAN_PREMIUM, premium_limit)
        logger.info("Payment %s verified, user %s upgraded to %s", request.payment_id, request.user_id, PLAN_PREMIUM)

        return VerifyPaymentResponse(
            success=True,
            message="Payment verified and account upgraded",
            plan_type=PLAN_PREMIUM,
            storage_limit=premium_limit
        )

    @staticmethod
    def _signature_matches(secret: str, order_id: str, payment_id: str, signature: str) -> bool:
        expected = hmac.new(
            secret.encode('utf-8'),
            f"{order_id}|{payment_id}".encode('utf-8'),
            hashlib.sha256
        ).hexdigest()
        return hmac.compare_digest(expected, signature)

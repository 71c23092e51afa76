# zythorix/api/payments.py
"""
Payment endpoints: Razorpay order creation and verification, purchases.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from zythorix.core.dependencies import ensure_same_user, get_payment_gateway
from zythorix.core.logging import get_logger
from zythorix.core.security import AuthenticatedUser, get_current_user
from zythorix.db.session import get_db
from zythorix.schemas.payment import CreateOrderRequest, VerifyPaymentRequest
from zythorix.services.payment_service import PaymentService
from zythorix.services.razorpay_service import RazorpayService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/create-order")
async def create_order(
    data: CreateOrderRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    gateway: RazorpayService = Depends(get_payment_gateway),
    db: Session = Depends(get_db)
):
    """
    Create a Razorpay order for a material or plan
    """
    ensure_same_user(current_user, data.user_id)
    return await PaymentService.create_order(db, current_user, data, gateway)


@router.post("/verify")
async def verify_payment(
    data: VerifyPaymentRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    gateway: RazorpayService = Depends(get_payment_gateway),
    db: Session = Depends(get_db)
):
    """
    Verify the checkout signature and grant the purchase
    """
    # Identity is checked before any signature work
    ensure_same_user(current_user, data.user_id)
    return await PaymentService.verify_payment(db, current_user, data, gateway)


@router.get("/my-purchases")
async def get_my_purchases(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return await PaymentService.get_purchases(db, current_user)


@router.get("/check-purchase/{material_id}")
async def check_purchase(
    material_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return await PaymentService.check_purchase(db, current_user, material_id)

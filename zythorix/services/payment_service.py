"""
Payment service for the Zythorix360 API.
Opens Razorpay orders for paid materials and grants the purchase once the
checkout signature has been verified.
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from zythorix.core.config import settings
from zythorix.core.logging import get_logger, get_context_logger
from zythorix.core.security import AuthenticatedUser
from zythorix.models.material import Material
from zythorix.models.payment import Payment, Purchase, PAYMENT_PENDING, PAYMENT_COMPLETED, PURCHASE_COMPLETED
from zythorix.schemas.payment import CreateOrderRequest, VerifyPaymentRequest
from zythorix.services.razorpay_service import RazorpayService, RazorpayError
from zythorix.utils.error_handling import handle_exception
from zythorix.utils.validators import parse_uuid

logger = get_logger(__name__)


def round_rupees(value) -> int:
    """Half-up rounding to whole rupees"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _purchase_to_dict(purchase: Purchase) -> Dict[str, Any]:
    return {
        "id": str(purchase.id),
        "materialId": str(purchase.material_id),
        "paymentId": str(purchase.payment_id),
        "amount": float(purchase.amount),
        "status": purchase.status,
        "createdAt": purchase.created_at,
        "materials": purchase.material.to_summary() if purchase.material else None,
    }


class PaymentService:
    """Service for gateway orders, verification and purchases"""

    @staticmethod
    def _get_material_or_404(db: Session, material_id: Optional[str]) -> Material:
        parsed = parse_uuid(material_id)
        material = db.query(Material).filter(Material.id == parsed).first() if parsed else None
        if not material:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Material not found")
        return material

    @staticmethod
    def _completed_purchase(db: Session, user_id, material_id) -> Optional[Purchase]:
        return db.query(Purchase).filter(
            Purchase.user_id == user_id,
            Purchase.material_id == material_id,
            Purchase.status == PURCHASE_COMPLETED
        ).first()

    @staticmethod
    async def create_order(
        db: Session,
        user: AuthenticatedUser,
        data: CreateOrderRequest,
        gateway: RazorpayService
    ) -> Dict[str, Any]:
        """
        Open a gateway order and record it as a pending payment

        Args:
            db: Database session
            user: Caller, already matched against the body's userId
            data: Order request
            gateway: Razorpay client

        Returns:
            Checkout parameters for the client widget
        """
        amount = data.amount
        material = None

        if data.material_id:
            material = PaymentService._get_material_or_404(db, data.material_id)

            if material.is_free:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Material is free")

            if PaymentService._completed_purchase(db, user.id, material.id):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail={"error": "You have already purchased this material", "alreadyPurchased": True}
                )

            if amount is None:
                amount = material.price
            elif round_rupees(amount) < round_rupees(material.price):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Payment amount does not match material price"
                )

        if amount is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amount is required")

        original_amount = round_rupees(amount)
        discount_amount = round_rupees(data.discount_amount or 0)
        final_amount = original_amount - discount_amount

        if final_amount <= 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid amount")

        coupon_code = data.coupon_code.strip().upper() if data.coupon_code else None
        currency = settings.PAYMENT_CURRENCY
        receipt = gateway.build_receipt()

        notes = {"userId": str(user.id)}
        if user.email:
            notes["userEmail"] = user.email
        if material:
            notes["materialId"] = str(material.id)
            notes["materialTitle"] = material.title
        if data.subscription_plan:
            notes["subscriptionPlan"] = data.subscription_plan
        if coupon_code:
            notes["couponCode"] = coupon_code

        try:
            order = await gateway.create_order(final_amount * 100, currency, receipt, notes)
        except RazorpayError as e:
            raise handle_exception(e, "Error creating Razorpay order", detail="Failed to create payment order")

        log = get_context_logger(__name__, {"order_id": order["id"], "user_id": str(user.id)})

        try:
            payment = Payment(
                user_id=user.id,
                material_id=material.id if material else None,
                subscription_plan=data.subscription_plan,
                amount=Decimal(final_amount),
                original_amount=Decimal(original_amount),
                discount_amount=Decimal(discount_amount),
                coupon_code=coupon_code,
                currency=currency,
                payment_method="razorpay",
                gateway_order_id=order["id"],
                status=PAYMENT_PENDING,
            )
            db.add(payment)
            db.commit()
            db.refresh(payment)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, f"Error recording payment for order {order['id']}", detail="Failed to record payment")

        log.info(f"💰 Payment order created: {final_amount} {currency} (original {original_amount}, discount {discount_amount})")

        return {
            "orderId": order["id"],
            "amount": order.get("amount", final_amount * 100),
            "currency": order.get("currency", currency),
            "keyId": gateway.key_id,
            "paymentId": str(payment.id),
            "originalAmount": original_amount,
            "discountAmount": discount_amount,
            "finalAmount": final_amount,
        }

    @staticmethod
    def _already_verified(db: Session, user: AuthenticatedUser, gateway_payment_id: str) -> Optional[Dict[str, Any]]:
        payment = db.query(Payment).filter(
            Payment.gateway_payment_id == gateway_payment_id,
            Payment.status == PAYMENT_COMPLETED
        ).first()
        if not payment:
            return None

        if payment.user_id != user.id:
            logger.warning(f"Gateway payment {gateway_payment_id} replayed by another user {user.id}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment already used")

        purchase = db.query(Purchase).filter(Purchase.payment_id == payment.id).first()
        return {
            "success": True,
            "message": "Payment already verified",
            "paymentId": str(payment.id),
            "purchaseId": str(purchase.id) if purchase else None,
            "alreadyVerified": True,
        }

    @staticmethod
    def _check_order_matches(payment: Payment, user: AuthenticatedUser, material: Material) -> None:
        """
        A signed order only unlocks the material it was opened for, at its full price

        Raises:
            HTTPException: 400 when the recorded order belongs to another user,
                is no longer pending, was opened for another material or for
                less than the material price
        """
        if payment.user_id != user.id or payment.status != PAYMENT_PENDING:
            logger.warning(f"Order {payment.gateway_order_id} presented by {user.id} is not a pending order of that user")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment order does not match")

        if payment.material_id != material.id:
            logger.warning(
                f"Order {payment.gateway_order_id} was opened for material {payment.material_id}, "
                f"presented for {material.id}"
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment does not match material")

        if payment.original_amount is None or round_rupees(payment.original_amount) < round_rupees(material.price):
            logger.warning(
                f"Order {payment.gateway_order_id} opened for {payment.original_amount}, material price {material.price}"
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment amount does not match material price")

    @staticmethod
    async def verify_payment(
        db: Session,
        user: AuthenticatedUser,
        data: VerifyPaymentRequest,
        gateway: RazorpayService
    ) -> Dict[str, Any]:
        """
        Verify the checkout signature, complete the payment and grant the purchase.
        Payment and purchase are committed in a single transaction; repeating
        the call for the same gateway payment returns the existing records.
        """
        order_id = data.razorpay_order_id
        gateway_payment_id = data.razorpay_payment_id

        if not order_id or not gateway_payment_id or not data.razorpay_signature or not data.material_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing payment details")

        if not gateway.verify_payment_signature(order_id, gateway_payment_id, data.razorpay_signature):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment signature")

        log = get_context_logger(__name__, {"order_id": order_id, "payment_id": gateway_payment_id})

        material = PaymentService._get_material_or_404(db, data.material_id)

        existing = PaymentService._already_verified(db, user, gateway_payment_id)
        if existing:
            log.info("Payment already verified, returning existing purchase")
            return existing

        try:
            payment = db.query(Payment).filter(Payment.gateway_order_id == order_id).first()
            if payment:
                PaymentService._check_order_matches(payment, user, material)

            now = datetime.now(timezone.utc)
            if payment:
                payment.status = PAYMENT_COMPLETED
                payment.gateway_payment_id = gateway_payment_id
                payment.completed_at = now
            else:
                log.warning("No pending payment for order, recording at material price")
                payment = Payment(
                    user_id=user.id,
                    material_id=material.id,
                    amount=material.price,
                    original_amount=material.price,
                    discount_amount=Decimal("0"),
                    currency=settings.PAYMENT_CURRENCY,
                    payment_method="razorpay",
                    gateway_order_id=order_id,
                    gateway_payment_id=gateway_payment_id,
                    status=PAYMENT_COMPLETED,
                    completed_at=now,
                )
                db.add(payment)

            # Assigns payment.id before the purchase references it
            db.flush()

            purchase = Purchase(
                user_id=user.id,
                material_id=material.id,
                payment_id=payment.id,
                amount=payment.amount,
                status=PURCHASE_COMPLETED,
            )
            db.add(purchase)
            db.commit()

        except IntegrityError:
            db.rollback()
            existing = PaymentService._already_verified(db, user, gateway_payment_id)
            if existing:
                log.info("Concurrent verification won, returning its purchase")
                return existing
            log.error("Integrity error verifying payment without a completed record")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to record purchase"
            )
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, f"Error recording purchase for order {order_id}", detail="Failed to record purchase")

        log.info(f"✅ Payment verified, purchase {purchase.id} granted for material {material.id}")

        return {
            "success": True,
            "message": "Payment verified successfully",
            "paymentId": str(payment.id),
            "purchaseId": str(purchase.id),
        }

    @staticmethod
    async def get_purchases(db: Session, user: AuthenticatedUser) -> List[Dict[str, Any]]:
        """Completed purchases of the user, newest first, with material details"""
        try:
            purchases = (
                db.query(Purchase)
                .options(joinedload(Purchase.material))
                .filter(Purchase.user_id == user.id, Purchase.status == PURCHASE_COMPLETED)
                .order_by(Purchase.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error fetching purchases", detail="Failed to fetch purchases")

        return [_purchase_to_dict(p) for p in purchases]

    @staticmethod
    async def check_purchase(db: Session, user: AuthenticatedUser, material_id: str) -> Dict[str, Any]:
        parsed = parse_uuid(material_id)
        if not parsed:
            return {"purchased": False, "purchase": None}

        try:
            purchase = PaymentService._completed_purchase(db, user.id, parsed)
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error checking purchase", detail="Failed to check purchase")

        return {
            "purchased": purchase is not None,
            "purchase": _purchase_to_dict(purchase) if purchase else None,
        }

"""
Influencer referral program service for the Zythorix360 API.
Covers account management by admins, influencer login and dashboard stats,
coupon verification at checkout and commission tracking on completed sales.
"""

import csv
import io
import secrets
import string
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from zythorix.core.config import settings
from zythorix.core.logging import get_logger
from zythorix.core.security import create_influencer_token, hash_password, verify_password
from zythorix.models.influencer import Influencer, InfluencerOrder
from zythorix.models.material import Material
from zythorix.schemas.influencer import (
    InfluencerCreateRequest,
    InfluencerLoginRequest,
    TrackOrderRequest,
)
from zythorix.utils.error_handling import handle_exception
from zythorix.utils.validators import validate_email, parse_uuid

logger = get_logger(__name__)

TEMP_PASSWORD_LENGTH = 8
TEMP_PASSWORD_ALPHABET = string.ascii_lowercase + string.digits

CSV_HEADER = [
    "Name",
    "Email",
    "Coupon Code",
    "Commission Rate",
    "Total Orders",
    "Total Sales (₹)",
    "Total Commission (₹)",
    "Status",
    "Created At",
]


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_paise(value) -> Decimal:
    """Half-up rounding to the 2 decimals an order amount is stored with"""
    return _to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _format_rate(rate) -> str:
    """10.00 -> "10%", 12.50 -> "12.5%" """
    return f"{float(rate):g}%"


class InfluencerService:
    """Service for the influencer referral program"""

    @staticmethod
    def generate_coupon_code(name: str) -> str:
        """
        Uppercase ASCII letters of the name, cut to 6, plus a suffix 0-99
        """
        letters = "".join(ch for ch in name.upper() if "A" <= ch <= "Z")[:6]
        return f"{letters}{secrets.randbelow(100)}"

    @staticmethod
    def generate_temp_password() -> str:
        return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(TEMP_PASSWORD_LENGTH))

    @staticmethod
    def _email_taken(db: Session, email: str) -> bool:
        return db.query(Influencer.id).filter(func.lower(Influencer.email) == email).first() is not None

    @staticmethod
    async def create_influencer(db: Session, data: InfluencerCreateRequest) -> Dict[str, Any]:
        """
        Create an influencer with a fresh coupon code and temporary password

        Returns:
            Public profile plus the plaintext temporary password, shown once
        """
        name = (data.name or "").strip()
        email = (data.email or "").strip().lower()

        if not name or not email:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name and email are required")

        is_valid, error = validate_email(email)
        if not is_valid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

        commission_rate = data.commission_rate
        if commission_rate is None:
            commission_rate = settings.DEFAULT_COMMISSION_RATE

        try:
            if InfluencerService._email_taken(db, email):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Influencer with this email already exists"
                )

            temp_password = InfluencerService.generate_temp_password()
            password_hash = hash_password(temp_password)

            for attempt in range(1, settings.COUPON_CODE_ATTEMPTS + 1):
                coupon_code = InfluencerService.generate_coupon_code(name)

                if db.query(Influencer.id).filter(Influencer.coupon_code == coupon_code).first():
                    logger.debug(f"Coupon code {coupon_code} taken (attempt {attempt})")
                    continue

                influencer = Influencer(
                    name=name,
                    email=email,
                    coupon_code=coupon_code,
                    password_hash=password_hash,
                    commission_rate=_to_decimal(commission_rate),
                    is_active=True,
                )
                db.add(influencer)
                try:
                    db.commit()
                except IntegrityError:
                    # Lost a race on the email or the coupon code
                    db.rollback()
                    if InfluencerService._email_taken(db, email):
                        raise HTTPException(
                            status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Influencer with this email already exists"
                        )
                    logger.warning(f"Coupon code {coupon_code} inserted concurrently, retrying")
                    continue

                db.refresh(influencer)
                logger.info(f"✅ Influencer created: {email} with coupon {coupon_code}")

                return {
                    "success": True,
                    "influencer": influencer.to_public_dict(),
                    "tempPassword": temp_password,
                }

        except HTTPException:
            raise
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error creating influencer")

        logger.error(f"❌ No free coupon code for '{name}' after {settings.COUPON_CODE_ATTEMPTS} attempts")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate unique coupon code"
        )

    @staticmethod
    def _influencers_with_totals(db: Session) -> List[tuple]:
        """(influencer, order count, total sales, total commission), newest first"""
        return (
            db.query(
                Influencer,
                func.count(InfluencerOrder.id),
                func.coalesce(func.sum(InfluencerOrder.order_amount), 0),
                func.coalesce(func.sum(InfluencerOrder.commission_amount), 0),
            )
            .outerjoin(InfluencerOrder, InfluencerOrder.influencer_id == Influencer.id)
            .group_by(Influencer.id)
            .order_by(Influencer.created_at.desc())
            .all()
        )

    @staticmethod
    async def list_influencers(db: Session) -> Dict[str, Any]:
        """All influencers with their sales totals; password hashes excluded"""
        try:
            rows = InfluencerService._influencers_with_totals(db)
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error fetching influencers")

        influencers = []
        for influencer, total_orders, total_sales, total_commission in rows:
            item = influencer.to_dict()
            item.pop("password_hash", None)
            item.update({
                "couponCode": influencer.coupon_code,
                "commissionRate": float(influencer.commission_rate),
                "isActive": influencer.is_active,
                "totalOrders": int(total_orders),
                "totalSales": float(_to_decimal(total_sales)),
                "totalCommission": float(_to_decimal(total_commission)),
            })
            influencers.append(item)

        return {"influencers": influencers}

    @staticmethod
    def _get_or_404(db: Session, influencer_id: Optional[str]) -> Influencer:
        parsed = parse_uuid(influencer_id)
        influencer = db.query(Influencer).filter(Influencer.id == parsed).first() if parsed else None
        if not influencer:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Influencer not found")
        return influencer

    @staticmethod
    async def set_active(db: Session, influencer_id: str, is_active: bool) -> Dict[str, Any]:
        influencer = InfluencerService._get_or_404(db, influencer_id)
        try:
            influencer.is_active = is_active
            db.commit()
            db.refresh(influencer)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error updating influencer")

        logger.info(f"Influencer {influencer.coupon_code} {'activated' if is_active else 'deactivated'}")

        result = influencer.to_public_dict()
        result["isActive"] = influencer.is_active
        return {"success": True, "influencer": result}

    @staticmethod
    async def delete_influencer(db: Session, influencer_id: Optional[str]) -> Dict[str, Any]:
        """Remove an influencer together with its tracked orders"""
        if not influencer_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Influencer ID required")

        influencer = InfluencerService._get_or_404(db, influencer_id)
        try:
            db.delete(influencer)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error deleting influencer")

        logger.info(f"Influencer {influencer_id} deleted")
        return {"success": True}

    @staticmethod
    async def login(db: Session, data: InfluencerLoginRequest) -> Dict[str, Any]:
        """
        Authenticate with coupon code and password

        Returns:
            Session token and public profile
        """
        if not data.coupon_code or not data.password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Coupon code and password are required"
            )

        coupon_code = data.coupon_code.strip().upper()

        influencer = db.query(Influencer).filter(
            Influencer.coupon_code == coupon_code,
            Influencer.is_active == True
        ).first()

        if not influencer or not verify_password(data.password, influencer.password_hash):
            logger.warning(f"Failed influencer login for coupon {coupon_code}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        token = create_influencer_token(influencer.id, influencer.coupon_code, influencer.name)
        logger.info(f"Influencer logged in: {coupon_code}")

        return {
            "success": True,
            "token": token,
            "influencer": influencer.to_public_dict(),
        }

    @staticmethod
    async def get_stats(db: Session, claims: Dict[str, Any]) -> Dict[str, Any]:
        """Dashboard data for the influencer identified by the session token"""
        influencer = InfluencerService._get_or_404(db, claims.get("influencerId"))

        try:
            orders = (
                db.query(InfluencerOrder)
                .filter(InfluencerOrder.influencer_id == influencer.id)
                .order_by(InfluencerOrder.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error fetching influencer orders")

        total_sales = sum((_to_decimal(o.order_amount) for o in orders), Decimal("0"))
        total_commission = sum((_to_decimal(o.commission_amount) for o in orders), Decimal("0"))

        return {
            "influencer": influencer.to_public_dict(),
            "stats": {
                "totalSales": float(total_sales),
                "totalCommission": float(total_commission),
                "totalOrders": len(orders),
            },
            "orders": [o.to_dict() for o in orders],
        }

    @staticmethod
    async def verify_coupon(db: Session, coupon_code: Optional[str]) -> Dict[str, Any]:
        """
        Check a coupon at checkout

        Raises:
            HTTPException: 400 with {valid: false, error} when no code is given
        """
        if not coupon_code or not coupon_code.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"valid": False, "error": "Coupon code is required"}
            )

        code = coupon_code.strip().upper()
        influencer = db.query(Influencer).filter(
            Influencer.coupon_code == code,
            Influencer.is_active == True
        ).first()

        if not influencer:
            return {"valid": False, "error": "Invalid or expired coupon code"}

        discount = settings.COUPON_DISCOUNT_PERCENT
        return {
            "valid": True,
            "couponCode": influencer.coupon_code,
            "discountPercent": discount,
            "influencerId": str(influencer.id),
            "message": f"Coupon applied! You get {discount}% off",
        }

    @staticmethod
    def calculate_commission(order_amount, commission_rate) -> Decimal:
        """order_amount * rate / 100, exact"""
        return _to_decimal(order_amount) * _to_decimal(commission_rate) / Decimal("100")

    @staticmethod
    async def track_order(db: Session, data: TrackOrderRequest) -> Dict[str, Any]:
        """
        Record a completed sale against a coupon and compute the commission
        """
        if not data.coupon_code or data.order_amount is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Coupon code and order amount are required"
            )

        code = data.coupon_code.strip().upper()
        influencer = db.query(Influencer).filter(
            Influencer.coupon_code == code,
            Influencer.is_active == True
        ).first()

        if not influencer:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid coupon code")

        # The commission is computed on the stored amount, not the raw float
        order_amount = round_paise(data.order_amount)
        commission = InfluencerService.calculate_commission(order_amount, influencer.commission_rate)

        material_id = parse_uuid(data.material_id)
        if material_id and not db.query(Material.id).filter(Material.id == material_id).first():
            logger.warning(f"Tracked order references unknown material {data.material_id}")
            material_id = None

        try:
            order = InfluencerOrder(
                influencer_id=influencer.id,
                order_amount=order_amount,
                discount_amount=round_paise(data.discount_amount or 0),
                commission_amount=commission,
                coupon_used=influencer.coupon_code,
                customer_email=data.customer_email,
                material_id=material_id,
                payment_id=data.payment_id,
                status="completed",
            )
            db.add(order)
            db.commit()
            db.refresh(order)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_exception(e, "Error tracking influencer order")

        logger.info(f"✅ Order tracked for {influencer.coupon_code}: {order_amount}₹, commission {commission}₹")

        return {
            "success": True,
            "orderId": str(order.id),
            "commissionAmount": float(commission),
        }

    @staticmethod
    async def export_csv(db: Session) -> str:
        """
        CSV report of all influencers and their totals, newest first
        """
        try:
            rows = InfluencerService._influencers_with_totals(db)
        except SQLAlchemyError as e:
            raise handle_exception(e, "Error exporting influencers")

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)

        for influencer, total_orders, total_sales, total_commission in rows:
            created_at = influencer.created_at.strftime("%Y-%m-%d") if influencer.created_at else ""
            writer.writerow([
                influencer.name,
                influencer.email,
                influencer.coupon_code,
                _format_rate(influencer.commission_rate),
                int(total_orders),
                f"{_to_decimal(total_sales):.2f}",
                f"{_to_decimal(total_commission):.2f}",
                "Active" if influencer.is_active else "Inactive",
                created_at,
            ])

        return buffer.getvalue()

    @staticmethod
    def export_filename(today: Optional[datetime] = None) -> str:
        today = today or datetime.now(timezone.utc)
        return f"influencers-{today.strftime('%Y-%m-%d')}.csv"

"""
Shared pytest fixtures for the Zythorix360 API tests.
The environment is set before the application is imported: settings are
validated at import time.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_TO_FILE"] = "false"
os.environ["SUPABASE_JWT_SECRET"] = "test-supabase-jwt-secret-0123456789abcdef"
os.environ["INFLUENCER_JWT_SECRET"] = "test-influencer-jwt-secret-0123456789abcdef"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret_value"
os.environ["ADMIN_EMAILS"] = "admin@zythorix360.com"

import hashlib
import hmac
import json
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import app
from zythorix.core.config import settings
from zythorix.core.dependencies import get_payment_gateway
from zythorix.core.security import hash_password
from zythorix.db.session import get_db
from zythorix.models import Base, Influencer, InfluencerOrder, Material, Payment, Purchase
from zythorix.models.payment import PAYMENT_COMPLETED, PURCHASE_COMPLETED
from zythorix.services.razorpay_service import RazorpayService

ADMIN_EMAIL = "admin@zythorix360.com"


def make_user_token(user_id, email="student@example.com", expires_in=timedelta(hours=1), **overrides):
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "aud": settings.SUPABASE_JWT_AUDIENCE,
        "iat": now,
        "exp": now + expires_in,
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET.get_secret_value(), algorithm="HS256")


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def sign(order_id, payment_id):
    secret = settings.RAZORPAY_KEY_SECRET.get_secret_value().encode("utf-8")
    return hmac.new(secret, f"{order_id}|{payment_id}".encode("utf-8"), hashlib.sha256).hexdigest()


class GatewayRecorder:
    """Answers Razorpay order calls and keeps the requests it received"""

    def __init__(self):
        self.requests = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": {"description": "gateway unavailable"}})
        body = json.loads(request.content)
        return httpx.Response(200, json={
            "id": f"order_test{len(self.requests)}",
            "entity": "order",
            "amount": body["amount"],
            "currency": body["currency"],
            "receipt": body["receipt"],
            "status": "created",
        })

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return GatewayRecorder()


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_gateway():
        return RazorpayService(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET.get_secret_value(),
            transport=httpx.MockTransport(gateway.handler),
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = override_gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def user_headers(user_id):
    return bearer(make_user_token(user_id))


@pytest.fixture
def admin_headers():
    return bearer(make_user_token(uuid.uuid4(), email=ADMIN_EMAIL))


@pytest.fixture
def make_material(db):
    def _make(title="Physics Formula Sheet", is_free=False, price="499.00", subject="Physics", downloads=0, created_at=None):
        material = Material(
            title=title,
            description=f"{title} for NEET/JEE",
            subject=subject,
            class_name="12",
            price=Decimal(price),
            is_free=is_free,
            downloads=downloads,
            pdf_url=f"https://cdn.example.com/{uuid.uuid4()}.pdf",
        )
        if created_at:
            material.created_at = created_at
        db.add(material)
        db.commit()
        db.refresh(material)
        return material
    return _make


@pytest.fixture
def make_influencer(db):
    def _make(name="Rahul", email=None, coupon_code="RAHUL10", commission_rate="10.00",
              password="secret123", is_active=True, created_at=None):
        influencer = Influencer(
            name=name,
            email=email or f"{coupon_code.lower()}@example.com",
            coupon_code=coupon_code,
            password_hash=hash_password(password),
            commission_rate=Decimal(commission_rate),
            is_active=is_active,
        )
        if created_at:
            influencer.created_at = created_at
        db.add(influencer)
        db.commit()
        db.refresh(influencer)
        return influencer
    return _make


@pytest.fixture
def make_order(db):
    def _make(influencer, order_amount, created_at=None):
        amount = Decimal(order_amount)
        order = InfluencerOrder(
            influencer_id=influencer.id,
            order_amount=amount,
            discount_amount=Decimal("0"),
            commission_amount=amount * influencer.commission_rate / Decimal("100"),
            coupon_used=influencer.coupon_code,
            status="completed",
        )
        if created_at:
            order.created_at = created_at
        db.add(order)
        db.commit()
        return order
    return _make


@pytest.fixture
def make_purchase(db):
    def _make(user_id, material):
        payment = Payment(
            user_id=user_id,
            material_id=material.id,
            amount=material.price,
            original_amount=material.price,
            currency="INR",
            gateway_order_id=f"order_{uuid.uuid4().hex[:12]}",
            gateway_payment_id=f"pay_{uuid.uuid4().hex[:12]}",
            status=PAYMENT_COMPLETED,
            completed_at=datetime.now(timezone.utc),
        )
        db.add(payment)
        db.flush()
        purchase = Purchase(
            user_id=user_id,
            material_id=material.id,
            payment_id=payment.id,
            amount=material.price,
            status=PURCHASE_COMPLETED,
        )
        db.add(purchase)
        db.commit()
        db.refresh(purchase)
        return purchase
    return _make

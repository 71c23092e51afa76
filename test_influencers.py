"""
Influencer program tests: admin management, login, stats, coupon
verification, order tracking and the CSV export.
"""

import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import jwt
import pytest

from conftest import bearer, make_user_token
from zythorix.core.config import settings
from zythorix.core.security import create_influencer_token, verify_password
from zythorix.models import Influencer, InfluencerOrder
from zythorix.services.influencer_service import InfluencerService

COUPON_PATTERN = re.compile(r"^[A-Z]{0,6}[0-9]{1,2}$")


@pytest.mark.parametrize("name", ["Rahul Sharma", "priya", "Ab-1 Cd!", "12345", "Ünïcode Näme", ""])
def test_generate_coupon_code_format(name):
    for _ in range(50):
        code = InfluencerService.generate_coupon_code(name)
        assert COUPON_PATTERN.match(code), code


def test_generate_coupon_code_uses_first_six_letters():
    code = InfluencerService.generate_coupon_code("Rahul Sharma")
    assert code.startswith("RAHULS")
    assert 0 <= int(code[6:]) <= 99


def test_temp_password_shape():
    password = InfluencerService.generate_temp_password()
    assert re.match(r"^[a-z0-9]{8}$", password)


# Admin: create

def test_create_influencer_requires_token(client):
    response = client.post("/api/influencer/admin/create", json={"name": "Rahul", "email": "r@example.com"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_create_influencer_requires_admin(client, user_headers):
    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Rahul", "email": "r@example.com"},
        headers=user_headers,
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Admin access required"}


def test_admin_email_match_is_case_insensitive(client):
    headers = bearer(make_user_token(uuid.uuid4(), email="Admin@Zythorix360.com"))
    response = client.get("/api/influencer/admin", headers=headers)
    assert response.status_code == 200


def test_create_influencer(client, admin_headers, db):
    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Rahul Sharma", "email": "rahul@example.com", "commissionRate": 12.5},
        headers=admin_headers,
    )
    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    assert re.match(r"^[a-z0-9]{8}$", body["tempPassword"])
    influencer = body["influencer"]
    assert influencer["name"] == "Rahul Sharma"
    assert influencer["email"] == "rahul@example.com"
    assert influencer["commissionRate"] == 12.5
    assert influencer["couponCode"].startswith("RAHULS")
    assert COUPON_PATTERN.match(influencer["couponCode"])

    row = db.query(Influencer).filter(Influencer.email == "rahul@example.com").one()
    assert row.password_hash != body["tempPassword"]
    assert verify_password(body["tempPassword"], row.password_hash)
    assert row.is_active is True


def test_create_influencer_default_commission(client, admin_headers):
    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Priya", "email": "priya@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["influencer"]["commissionRate"] == 10.0


@pytest.mark.parametrize("payload", [
    {"email": "rahul@example.com"},
    {"name": "Rahul"},
    {"name": "  ", "email": "rahul@example.com"},
])
def test_create_influencer_missing_fields(client, admin_headers, payload):
    response = client.post("/api/influencer/admin/create", json=payload, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Name and email are required"}


def test_create_influencer_invalid_email(client, admin_headers):
    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Rahul", "email": "not-an-email"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid email format"}


def test_create_influencer_commission_out_of_range(client, admin_headers):
    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Rahul", "email": "rahul@example.com", "commissionRate": 150},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


def test_create_influencer_duplicate_email(client, admin_headers, make_influencer, db):
    make_influencer(name="Rahul", email="rahul@example.com", coupon_code="RAHUL10")

    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Rahul Again", "email": "Rahul@Example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Influencer with this email already exists"}
    assert db.query(Influencer).count() == 1


def test_create_influencer_skips_taken_coupon(client, admin_headers, make_influencer, monkeypatch):
    make_influencer(name="Taken", email="taken@example.com", coupon_code="PRIYA7")
    codes = iter(["PRIYA7", "PRIYA42"])
    monkeypatch.setattr(InfluencerService, "generate_coupon_code", staticmethod(lambda name: next(codes)))

    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Priya", "email": "priya@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["influencer"]["couponCode"] == "PRIYA42"


def test_create_influencer_fails_when_codes_exhausted(client, admin_headers, make_influencer, monkeypatch, db):
    make_influencer(name="Taken", email="taken@example.com", coupon_code="PRIYA7")
    calls = []

    def always_taken(name):
        calls.append(name)
        return "PRIYA7"

    monkeypatch.setattr(InfluencerService, "generate_coupon_code", staticmethod(always_taken))

    response = client.post(
        "/api/influencer/admin/create",
        json={"name": "Priya", "email": "priya@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate unique coupon code"}
    assert len(calls) == settings.COUPON_CODE_ATTEMPTS
    assert db.query(Influencer).count() == 1


# Admin: list, status, delete

def test_list_influencers_with_totals(client, admin_headers, make_influencer, make_order):
    rahul = make_influencer(name="Rahul", coupon_code="RAHUL10", commission_rate="12.50")
    make_influencer(name="Priya", coupon_code="PRIYA5")
    make_order(rahul, "1000.00")
    make_order(rahul, "500.00")

    response = client.get("/api/influencer/admin", headers=admin_headers)
    assert response.status_code == 200
    influencers = {i["couponCode"]: i for i in response.json()["influencers"]}

    assert influencers["RAHUL10"]["totalOrders"] == 2
    assert influencers["RAHUL10"]["totalSales"] == 1500.0
    assert influencers["RAHUL10"]["totalCommission"] == 187.5
    assert influencers["PRIYA5"]["totalOrders"] == 0
    assert influencers["PRIYA5"]["totalSales"] == 0
    for item in influencers.values():
        assert "password_hash" not in item


def test_deactivate_influencer(client, admin_headers, make_influencer, db):
    influencer = make_influencer()

    response = client.patch(
        f"/api/influencer/admin/{influencer.id}",
        json={"isActive": False},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["influencer"]["isActive"] is False

    db.expire_all()
    assert db.get(Influencer, influencer.id).is_active is False


def test_update_unknown_influencer(client, admin_headers):
    response = client.patch(f"/api/influencer/admin/{uuid.uuid4()}", json={"isActive": False}, headers=admin_headers)
    assert response.status_code == 404


def test_delete_influencer_removes_orders(client, admin_headers, make_influencer, make_order, db):
    influencer = make_influencer()
    make_order(influencer, "200.00")

    response = client.delete(f"/api/influencer/admin?id={influencer.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    db.expire_all()
    assert db.query(Influencer).count() == 0
    assert db.query(InfluencerOrder).count() == 0


def test_delete_influencer_requires_id(client, admin_headers):
    response = client.delete("/api/influencer/admin", headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Influencer ID required"}


def test_delete_unknown_influencer(client, admin_headers):
    response = client.delete(f"/api/influencer/admin?id={uuid.uuid4()}", headers=admin_headers)
    assert response.status_code == 404


# Login and stats

def test_login(client, make_influencer):
    influencer = make_influencer(name="Rahul", coupon_code="RAHUL10", password="p4ssw0rd")

    response = client.post("/api/influencer/login", json={"couponCode": "rahul10", "password": "p4ssw0rd"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["influencer"]["couponCode"] == "RAHUL10"

    claims = jwt.decode(body["token"], settings.INFLUENCER_JWT_SECRET.get_secret_value(), algorithms=["HS256"])
    assert claims["influencerId"] == str(influencer.id)
    assert claims["couponCode"] == "RAHUL10"
    assert claims["type"] == "influencer"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_login_wrong_password(client, make_influencer):
    make_influencer(coupon_code="RAHUL10", password="p4ssw0rd")
    response = client.post("/api/influencer/login", json={"couponCode": "RAHUL10", "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_login_inactive_influencer(client, make_influencer):
    make_influencer(coupon_code="RAHUL10", password="p4ssw0rd", is_active=False)
    response = client.post("/api/influencer/login", json={"couponCode": "RAHUL10", "password": "p4ssw0rd"})
    assert response.status_code == 401


def test_login_missing_fields(client):
    response = client.post("/api/influencer/login", json={"couponCode": "RAHUL10"})
    assert response.status_code == 400


def test_stats(client, make_influencer, make_order):
    influencer = make_influencer(coupon_code="RAHUL10", commission_rate="10.00")
    make_order(influencer, "1000.00", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    make_order(influencer, "250.00", created_at=datetime(2025, 2, 1, tzinfo=timezone.utc))
    token = create_influencer_token(influencer.id, influencer.coupon_code, influencer.name)

    response = client.get("/api/influencer/stats", headers=bearer(token))
    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {"totalSales": 1250.0, "totalCommission": 125.0, "totalOrders": 2}
    assert body["influencer"]["couponCode"] == "RAHUL10"
    assert [float(o["order_amount"]) for o in body["orders"]] == [250.0, 1000.0]


def test_stats_rejects_user_token(client, user_headers):
    response = client.get("/api/influencer/stats", headers=user_headers)
    assert response.status_code == 401


def test_stats_for_deleted_influencer(client):
    token = create_influencer_token(uuid.uuid4(), "GONE1", "Gone")
    response = client.get("/api/influencer/stats", headers=bearer(token))
    assert response.status_code == 404


# Coupon verification

def test_verify_coupon_missing_code(client):
    response = client.post("/api/influencer/verify-coupon", json={})
    assert response.status_code == 400
    assert response.json() == {"valid": False, "error": "Coupon code is required"}


def test_verify_coupon_unknown_code(client):
    response = client.post("/api/influencer/verify-coupon", json={"couponCode": "NOPE1"})
    assert response.status_code == 200
    assert response.json()["valid"] is False


def test_verify_coupon_inactive(client, make_influencer):
    make_influencer(coupon_code="RAHUL10", is_active=False)
    response = client.post("/api/influencer/verify-coupon", json={"couponCode": "RAHUL10"})
    assert response.status_code == 200
    assert response.json()["valid"] is False


def test_verify_coupon_active(client, make_influencer):
    influencer = make_influencer(coupon_code="RAHUL10")
    response = client.post("/api/influencer/verify-coupon", json={"couponCode": " rahul10 "})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["couponCode"] == "RAHUL10"
    assert body["discountPercent"] == 10
    assert body["influencerId"] == str(influencer.id)
    assert body["message"]


# Order tracking

def test_track_order_commission(client, make_influencer, db):
    influencer = make_influencer(coupon_code="RAHUL10", commission_rate="12.50")

    response = client.post("/api/influencer/track-order", json={
        "couponCode": "RAHUL10",
        "orderAmount": 1000,
        "discountAmount": 100,
        "customerEmail": "buyer@example.com",
        "paymentId": "pay_123",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["commissionAmount"] == 125.0

    order = db.query(InfluencerOrder).filter(InfluencerOrder.id == uuid.UUID(body["orderId"])).one()
    assert order.influencer_id == influencer.id
    assert order.commission_amount == Decimal("125")
    assert order.coupon_used == "RAHUL10"
    assert order.status == "completed"


def test_track_order_keeps_commission_unrounded(client, make_influencer, db):
    make_influencer(coupon_code="RAHUL10", commission_rate="10.00")

    response = client.post("/api/influencer/track-order", json={"couponCode": "RAHUL10", "orderAmount": 999.99})
    assert response.status_code == 200
    assert response.json()["commissionAmount"] == pytest.approx(99.999)

    order = db.query(InfluencerOrder).one()
    assert float(order.commission_amount) == pytest.approx(99.999)


def test_track_order_stores_returned_commission(client, make_influencer, db):
    make_influencer(coupon_code="RAHUL10", commission_rate="12.50")

    response = client.post("/api/influencer/track-order", json={"couponCode": "RAHUL10", "orderAmount": 999.99})
    assert response.status_code == 200
    assert response.json()["commissionAmount"] == 124.99875

    order = db.query(InfluencerOrder).one()
    assert order.commission_amount == Decimal("124.99875")


def test_track_order_commission_on_stored_amount(client, make_influencer, db):
    make_influencer(coupon_code="RAHUL10", commission_rate="12.50")

    response = client.post("/api/influencer/track-order", json={"couponCode": "RAHUL10", "orderAmount": 999.999})
    assert response.status_code == 200
    assert response.json()["commissionAmount"] == 125.0

    order = db.query(InfluencerOrder).one()
    assert order.order_amount == Decimal("1000.00")
    assert order.commission_amount == Decimal("125")


@pytest.mark.parametrize("amount", ["Infinity", "NaN"])
def test_track_order_rejects_non_finite_amount(client, make_influencer, db, amount):
    make_influencer(coupon_code="RAHUL10")
    response = client.post("/api/influencer/track-order", json={"couponCode": "RAHUL10", "orderAmount": amount})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"
    assert db.query(InfluencerOrder).count() == 0


def test_calculate_commission_is_exact():
    assert InfluencerService.calculate_commission(Decimal("999.99"), Decimal("12.50")) == Decimal("124.99875")


def test_track_order_unknown_coupon(client, db):
    response = client.post("/api/influencer/track-order", json={"couponCode": "NOPE1", "orderAmount": 100})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid coupon code"}
    assert db.query(InfluencerOrder).count() == 0


def test_track_order_missing_amount(client, make_influencer):
    make_influencer(coupon_code="RAHUL10")
    response = client.post("/api/influencer/track-order", json={"couponCode": "RAHUL10"})
    assert response.status_code == 400


# CSV export

def test_export_csv(client, admin_headers, make_influencer, make_order):
    rahul = make_influencer(
        name="Sharma, Rahul", email="rahul@example.com", coupon_code="RAHUL10",
        commission_rate="12.50", created_at=datetime(2025, 2, 1, 10, 30, tzinfo=timezone.utc),
    )
    make_influencer(
        name="Priya", email="priya@example.com", coupon_code="PRIYA5",
        is_active=False, created_at=datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc),
    )
    make_order(rahul, "1000.00")
    make_order(rahul, "500.00")

    response = client.get("/api/influencer/admin/export", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    assert response.headers["content-disposition"] == f'attachment; filename="influencers-{today}.csv"'

    assert response.text.splitlines() == [
        "Name,Email,Coupon Code,Commission Rate,Total Orders,Total Sales (₹),Total Commission (₹),Status,Created At",
        '"Sharma, Rahul",rahul@example.com,RAHUL10,12.5%,2,1500.00,187.50,Active,2025-02-01',
        "Priya,priya@example.com,PRIYA5,10%,0,0.00,0.00,Inactive,2025-01-15",
    ]


def test_export_requires_admin(client, user_headers):
    response = client.get("/api/influencer/admin/export", headers=user_headers)
    assert response.status_code == 403


def test_influencer_lifecycle_end_to_end(client, admin_headers):
    created = client.post(
        "/api/influencer/admin/create",
        json={"name": "Asha Rao", "email": "asha@example.com"},
        headers=admin_headers,
    ).json()
    code = created["influencer"]["couponCode"]
    assert re.match(r"^ASHARA[0-9]{1,2}$", code)

    verified = client.post("/api/influencer/verify-coupon", json={"couponCode": code}).json()
    assert verified["valid"] is True
    assert verified["discountPercent"] == 10

    tracked = client.post("/api/influencer/track-order", json={"couponCode": code, "orderAmount": 1000}).json()
    assert tracked["commissionAmount"] == 100.0

    login = client.post("/api/influencer/login", json={"couponCode": code, "password": created["tempPassword"]})
    assert login.status_code == 200

    rows = client.get("/api/influencer/admin/export", headers=admin_headers).text.splitlines()
    assert len(rows) == 2
    assert re.match(
        rf"^Asha Rao,asha@example\.com,{code},10%,1,1000\.00,100\.00,Active,\d{{4}}-\d{{2}}-\d{{2}}$",
        rows[1],
    )

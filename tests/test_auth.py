"""
Tests for registration, login and token refresh
"""

from datetime import timedelta

import pytest
from flask_jwt_extended import create_refresh_token, decode_token

from app.extensions import db
from app.models.subscription import Subscription
from app.models.team_member import TeamMember
from app.models.tenant import Tenant
from app.models.user import User
from app.services.auth_service import generate_slug
from tests.conftest import auth_headers, create_member, login, register


@pytest.mark.parametrize("name, expected", [
    ("Acme Inc", "acme-inc"),
    ("Acme Inc!!", "acme-inc"),
    ("  Hello   World  ", "hello-world"),
    ("Foo -- Bar", "foo-bar"),
    ("Ünïcode Café", "ncode-caf"),
    ("x" * 80, "x" * 50),
])
def test_generate_slug(name, expected):
    assert generate_slug(name) == expected


def test_register_creates_tenant_admin_membership_and_subscription(client):
    response = register(client)

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    data = body["data"]
    assert data["user"]["role"] == "admin"
    assert "password_hash" not in data["user"]
    assert data["tenant"]["slug"] == "acme-inc"
    assert data["tenant"]["plan"] == "free"
    assert data["tenant"]["settings"] == {"ai_credits_limit": 100, "api_rate_limit": 10}

    tenant_id = data["tenant"]["tenant_id"]
    user_id = data["user"]["user_id"]

    member = TeamMember.query.filter_by(tenant_id=tenant_id).one()
    assert member.user_id == user_id
    assert member.invited_by == user_id
    assert member.role == "admin"

    subscription = Subscription.query.filter_by(tenant_id=tenant_id).one()
    assert subscription.plan == "free"
    assert subscription.status == "active"
    assert (subscription.current_period_end - subscription.current_period_start).days == 30


def test_register_access_token_carries_identity_claims(client):
    data = register(client).get_json()["data"]

    access = decode_token(data["access_token"])
    assert access["sub"] == data["user"]["user_id"]
    assert access["tenant_id"] == data["tenant"]["tenant_id"]
    assert access["email"] == "jane@acme.com"
    assert access["role"] == "admin"
    assert access["type"] == "access"
    assert access["exp"] - access["iat"] == 24 * 60 * 60

    refresh = decode_token(data["refresh_token"])
    assert refresh["sub"] == data["user"]["user_id"]
    assert refresh["type"] == "refresh"
    assert "tenant_id" not in refresh


def test_register_duplicate_email_conflicts(client, registered):
    response = register(client, tenant_name="Another Org")

    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "CONFLICT"
    assert Tenant.query.count() == 1


def test_register_equivalent_tenant_name_conflicts_on_slug(client, registered):
    response = register(client, email="other@example.com", tenant_name="Acme Inc!!")

    assert response.status_code == 409
    assert response.get_json()["error"]["message"] == "Organization name is already taken"
    assert User.query.filter_by(email="other@example.com").first() is None


@pytest.mark.parametrize("payload, field", [
    ({"email": "not-an-email", "password": "secret123", "name": "Jane", "tenant_name": "Acme"}, "email"),
    ({"email": "a@b.com", "password": "12345", "name": "Jane", "tenant_name": "Acme"}, "password"),
    ({"email": "a@b.com", "password": "secret123", "name": "J", "tenant_name": "Acme"}, "name"),
    ({"email": "a@b.com", "password": "secret123", "name": "Jane", "tenant_name": "A" * 101}, "tenant_name"),
    ({"email": "a@b.com", "password": "secret123", "name": "Jane"}, "tenant_name"),
])
def test_register_validation_errors(client, payload, field):
    response = client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert field in error["details"]


def test_login_returns_tokens(client, registered):
    response = login(client, "jane@acme.com")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["user"]["email"] == "jane@acme.com"
    assert data["tenant"]["tenant_id"] == registered["tenant"]["tenant_id"]
    assert data["access_token"]
    assert data["refresh_token"]


@pytest.mark.parametrize("email, password", [
    ("jane@acme.com", "wrong-password"),
    ("nobody@acme.com", "secret123"),
])
def test_login_invalid_credentials_are_indistinguishable(client, registered, email, password):
    response = login(client, email, password)

    assert response.status_code == 401
    assert response.get_json()["error"] == {"code": "UNAUTHORIZED", "message": "Invalid credentials"}


def test_login_deactivated_user(client, registered):
    create_member(registered["tenant"]["tenant_id"], "gone@acme.com", is_active=False)

    response = login(client, "gone@acme.com")

    assert response.status_code == 401
    assert response.get_json()["error"]["message"] == "Account is deactivated"


def test_login_deactivated_tenant(client, registered):
    tenant = db.session.get(Tenant, registered["tenant"]["tenant_id"])
    tenant.is_active = False
    db.session.commit()

    response = login(client, "jane@acme.com")

    assert response.status_code == 401
    assert response.get_json()["error"]["message"] == "Tenant is deactivated"


def test_refresh_issues_new_access_token(client, registered):
    response = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["refresh_token"]})

    assert response.status_code == 200
    token = response.get_json()["data"]["access_token"]
    claims = decode_token(token)
    assert claims["sub"] == registered["user"]["user_id"]
    assert claims["tenant_id"] == registered["tenant"]["tenant_id"]


def test_refresh_rejects_access_token(client, registered):
    response = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["access_token"]})

    assert response.status_code == 401


def test_refresh_rejects_garbage(client):
    response = client.post("/api/v1/auth/refresh", json={"refresh_token": "not.a.jwt"})

    assert response.status_code == 401
    assert response.get_json()["error"]["code"] == "UNAUTHORIZED"


def test_refresh_rejects_expired_token(client, registered):
    expired = create_refresh_token(identity=registered["user"]["user_id"], expires_delta=timedelta(seconds=-10))

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": expired})

    assert response.status_code == 401
    assert response.get_json()["error"]["message"] == "Invalid refresh token"


def test_refresh_rejects_tampered_signature(client, registered):
    header, payload, signature = registered["refresh_token"].split(".")
    altered = ("B" if signature[0] == "A" else "A") + signature[1:]

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": f"{header}.{payload}.{altered}"})

    assert response.status_code == 401


def test_refresh_rejects_deactivated_user(client, registered, member):
    tokens = login(client, "bob@acme.com").get_json()["data"]
    db.session.get(User, member["user_id"]).is_active = False
    db.session.commit()

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 401
    assert response.get_json()["error"]["message"] == "Account is deactivated"


def test_refresh_rejects_token_of_deleted_user(client, registered):
    TeamMember.query.delete()
    Subscription.query.delete()
    User.query.filter_by(user_id=registered["user"]["user_id"]).delete()
    db.session.commit()

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": registered["refresh_token"]})

    assert response.status_code == 401


def test_me_returns_current_user(client, registered, admin_headers):
    response = client.get("/api/v1/auth/me", headers=admin_headers)

    assert response.status_code == 200
    assert response.get_json()["data"]["user_id"] == registered["user"]["user_id"]


def test_protected_route_without_token(client):
    response = client.get("/api/v1/users/me")

    assert response.status_code == 401
    body = response.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"


def test_protected_route_with_tampered_token(client, registered):
    response = client.get("/api/v1/users/me", headers=auth_headers(registered["access_token"] + "x"))

    assert response.status_code == 401


def test_access_token_of_deactivated_user_is_rejected(client, member):
    db.session.get(User, member["user_id"]).is_active = False
    db.session.commit()

    response = client.get("/api/v1/users/me", headers=member["headers"])

    assert response.status_code == 401
    assert response.get_json()["error"] == {"code": "UNAUTHORIZED", "message": "Token is no longer valid"}


def test_access_token_of_deactivated_tenant_is_rejected(client, registered, admin_headers):
    db.session.get(Tenant, registered["tenant"]["tenant_id"]).is_active = False
    db.session.commit()

    response = client.get("/api/v1/users/me", headers=admin_headers)

    assert response.status_code == 401


def test_demoted_admin_loses_admin_routes(client, registered, admin_headers):
    db.session.get(User, registered["user"]["user_id"]).role = "user"
    db.session.commit()

    assert client.get("/api/v1/users/stats", headers=admin_headers).status_code == 401

    fresh = login(client, "jane@acme.com").get_json()["data"]
    response = client.get("/api/v1/users/stats", headers=auth_headers(fresh["access_token"]))
    assert response.status_code == 403


def test_login_is_rate_limited(app, client, registered):
    limit = int(app.config["RATE_LIMIT_LOGIN"].split()[0])

    for _ in range(limit):
        assert login(client, "jane@acme.com", "wrong-password").status_code == 401

    response = login(client, "jane@acme.com")

    assert response.status_code == 429
    body = response.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == "TOO_MANY_REQUESTS"


def test_register_is_rate_limited(app, client):
    limit = int(app.config["RATE_LIMIT_REGISTER"].split()[0])

    for i in range(limit):
        register(client, email=f"owner{i}@example.com", tenant_name=f"Org {i}")

    response = register(client, email="late@example.com", tenant_name="Late Org")

    assert response.status_code == 429
    assert User.query.filter_by(email="late@example.com").first() is None

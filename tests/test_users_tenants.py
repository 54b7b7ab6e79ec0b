"""
Tests for tenant-scoped user management and tenant settings
"""

import pytest
from werkzeug.security import check_password_hash

from app.errors import Conflict, Forbidden, NotFound
from app.extensions import db
from app.models.tenant import Tenant
from app.models.user import User
from app.services import tenant_service, user_service
from app.tasks.email_tasks import render_invitation
from tests.conftest import auth_headers, create_member, register


@pytest.fixture
def other_tenant(client, registered):
    """A second, unrelated tenant with its own admin."""
    data = register(client, email="max@globex.com", tenant_name="Globex").get_json()["data"]
    return {"tenant_id": data["tenant"]["tenant_id"], "user_id": data["user"]["user_id"], "data": data}


def test_list_users_is_tenant_scoped(client, admin_headers, member, other_tenant):
    response = client.get("/api/v1/users?sort_by=name&sort_order=asc", headers=admin_headers)

    body = response.get_json()
    assert response.status_code == 200
    assert [u["email"] for u in body["data"]["users"]] == ["bob@acme.com", "jane@acme.com"]
    assert body["data"]["total"] == 2


def test_list_users_pagination_metadata(client, registered, admin_headers):
    for i in range(4):
        create_member(registered["tenant"]["tenant_id"], f"user{i}@acme.com")

    response = client.get("/api/v1/users?page=2&limit=2", headers=admin_headers)

    body = response.get_json()
    assert len(body["data"]["users"]) == 2
    assert body["metadata"] == {"page": 2, "limit": 2, "total": 5, "has_next": True, "has_previous": True}


@pytest.mark.parametrize("query", ["page=0", "limit=101", "sort_by=password_hash", "sort_order=up"])
def test_list_users_rejects_bad_query(client, admin_headers, query):
    response = client.get(f"/api/v1/users?{query}", headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_user_stats(client, registered, admin_headers, member):
    create_member(registered["tenant"]["tenant_id"], "old@acme.com", is_active=False)

    response = client.get("/api/v1/users/stats", headers=admin_headers)

    assert response.get_json()["data"] == {
        "total_users": 3,
        "active_users": 2,
        "admin_users": 1,
        "regular_users": 2,
    }


def test_user_stats_requires_admin(client, member):
    response = client.get("/api/v1/users/stats", headers=member["headers"])

    assert response.status_code == 403
    assert response.get_json()["error"]["code"] == "FORBIDDEN"


def test_member_updates_own_profile(client, member):
    response = client.put(f"/api/v1/users/{member['user_id']}", headers=member["headers"], json={
        "name": "Robert",
        "avatar": "https://cdn.example.com/bob.png",
    })

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["name"] == "Robert"
    assert data["avatar"] == "https://cdn.example.com/bob.png"
    assert data["role"] == "user"


def test_update_ignores_password(client, member):
    client.put(f"/api/v1/users/{member['user_id']}", headers=member["headers"], json={
        "name": "Robert",
        "password": "hijacked",
    })

    user = db.session.get(User, member["user_id"])
    assert check_password_hash(user.password_hash, "secret123")
    assert not check_password_hash(user.password_hash, "hijacked")


def test_member_cannot_change_roles(member):
    with pytest.raises(Forbidden) as exc_info:
        user_service.update_user(member["ctx"], member["user_id"], {"role": "admin"})

    assert exc_info.value.message == "Only admins can change user roles"
    assert db.session.get(User, member["user_id"]).role == "user"


def test_admin_promotes_member(admin_ctx, member):
    user = user_service.update_user(admin_ctx, member["user_id"], {"role": "admin"})

    assert user.role == "admin"


def test_cannot_update_user_of_another_tenant(client, admin_headers, other_tenant):
    response = client.put(f"/api/v1/users/{other_tenant['user_id']}", headers=admin_headers, json={
        "name": "Hacked",
    })

    assert response.status_code == 403
    assert response.get_json()["error"]["message"] == "Cannot update user from different tenant"
    assert db.session.get(User, other_tenant["user_id"]).name == "Jane Admin"


def test_update_unknown_user(admin_ctx):
    with pytest.raises(NotFound):
        user_service.update_user(admin_ctx, "does-not-exist", {"name": "Nobody"})


def test_deactivate_user_blocks_login(client, admin_headers, member):
    response = client.delete(f"/api/v1/users/{member['user_id']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.get_json()["data"]["is_active"] is False

    login = client.post("/api/v1/auth/login", json={"email": "bob@acme.com", "password": "secret123"})
    assert login.status_code == 401
    assert login.get_json()["error"]["message"] == "Account is deactivated"


def test_deactivate_requires_admin(client, registered, member):
    response = client.delete(f"/api/v1/users/{registered['user']['user_id']}", headers=member["headers"])

    assert response.status_code == 403
    assert db.session.get(User, registered["user"]["user_id"]).is_active is True


def test_deactivate_user_of_another_tenant(admin_ctx, other_tenant):
    with pytest.raises(Forbidden):
        user_service.deactivate_user(admin_ctx, other_tenant["user_id"])


def test_invite_sends_email(client, admin_headers, sent_emails):
    response = client.put("/api/v1/users/invite", headers=admin_headers, json={
        "email": "new@acme.com",
        "role": "user",
    })

    assert response.status_code == 200
    assert response.get_json()["data"] == {"message": "Invitation sent to new@acme.com"}

    assert len(sent_emails) == 1
    email = sent_emails[0]
    assert email["to"] == "new@acme.com"
    assert email["subject"] == "You've been invited to join Acme Inc"
    assert "Jane Admin has invited you to join Acme Inc as a team member." in email["body"]
    assert "/register?email=new%40acme.com" in email["body"]

    # The account only exists once the invitee registers
    assert User.query.filter_by(email="new@acme.com").first() is None


def test_invite_existing_email_conflicts(admin_ctx, member, sent_emails):
    with pytest.raises(Conflict):
        user_service.invite_user(admin_ctx, "bob@acme.com", "user")

    assert sent_emails == []


def test_invite_requires_admin(client, member, sent_emails):
    response = client.put("/api/v1/users/invite", headers=member["headers"], json={
        "email": "new@acme.com",
        "role": "admin",
    })

    assert response.status_code == 403
    assert sent_emails == []


def test_invite_validates_role(client, admin_headers, sent_emails):
    response = client.put("/api/v1/users/invite", headers=admin_headers, json={
        "email": "new@acme.com",
        "role": "owner",
    })

    assert response.status_code == 400
    assert "role" in response.get_json()["error"]["details"]


def test_get_current_tenant(client, registered, member):
    response = client.get("/api/v1/tenants/current", headers=member["headers"])

    assert response.status_code == 200
    assert response.get_json()["data"]["tenant_id"] == registered["tenant"]["tenant_id"]


def test_admin_updates_tenant_name_and_slug(client, admin_headers):
    response = client.put("/api/v1/tenants/current", headers=admin_headers, json={
        "name": "Acme Labs",
        "slug": "Acme Labs",
    })

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["name"] == "Acme Labs"
    assert data["slug"] == "acme-labs"


def test_tenant_slug_conflict(client, admin_headers, other_tenant):
    response = client.put("/api/v1/tenants/current", headers=admin_headers, json={"slug": "globex"})

    assert response.status_code == 409
    assert response.get_json()["error"]["message"] == "Slug is already taken"


def test_tenant_update_requires_a_field(client, admin_headers):
    response = client.put("/api/v1/tenants/current", headers=admin_headers, json={})

    assert response.status_code == 400


def test_tenant_update_requires_admin(client, member):
    response = client.put("/api/v1/tenants/current", headers=member["headers"], json={"name": "Mine Now"})

    assert response.status_code == 403


def test_settings_are_merged(client, registered, admin_headers):
    response = client.put("/api/v1/tenants/settings", headers=admin_headers, json={
        "custom_branding": {"logo": "https://cdn.example.com/logo.png", "primary_color": "#ff0000"},
    })

    assert response.status_code == 200
    settings = db.session.get(Tenant, registered["tenant"]["tenant_id"]).settings
    assert settings == {
        "ai_credits_limit": 100,
        "api_rate_limit": 10,
        "custom_branding": {"logo": "https://cdn.example.com/logo.png", "primary_color": "#ff0000"},
    }

    client.put("/api/v1/tenants/settings", headers=admin_headers, json={"ai_credits_limit": 500})

    settings = db.session.get(Tenant, registered["tenant"]["tenant_id"]).settings
    assert settings["ai_credits_limit"] == 500
    assert settings["custom_branding"]["primary_color"] == "#ff0000"


def test_settings_require_admin(client, member):
    response = client.put("/api/v1/tenants/settings", headers=member["headers"], json={"ai_credits_limit": 9999})

    assert response.status_code == 403


def test_usage_endpoint(client, registered, admin_headers):
    tenant_id = registered["tenant"]["tenant_id"]
    tenant_service.increment_usage(tenant_id, ai_credits=5, api_requests=1)
    tenant_service.increment_usage(tenant_id, ai_credits=3, api_requests=1)

    response = client.get("/api/v1/tenants/usage", headers=admin_headers)

    assert response.get_json()["data"] == {
        "current_month": tenant_service.current_month(),
        "ai_credits_used": 8,
        "api_requests_count": 2,
        "ai_credits_limit": 100,
        "api_rate_limit": 10,
    }


def test_usage_without_row_is_zero(admin_ctx):
    usage = tenant_service.get_tenant_usage(admin_ctx.tenant_id)

    assert usage["ai_credits_used"] == 0
    assert usage["api_requests_count"] == 0


def test_zero_credit_limit_is_respected(admin_ctx):
    tenant_service.update_settings(admin_ctx.tenant_id, {"ai_credits_limit": 0})

    assert tenant_service.get_tenant_usage(admin_ctx.tenant_id)["ai_credits_limit"] == 0


def test_usage_is_isolated_per_tenant(client, admin_ctx, other_tenant):
    tenant_service.increment_usage(admin_ctx.tenant_id, ai_credits=7)

    other_usage = client.get(
        "/api/v1/tenants/usage",
        headers=auth_headers(other_tenant["data"]["access_token"]),
    ).get_json()["data"]
    assert other_usage["ai_credits_used"] == 0


def test_invitation_link_encodes_email():
    _, body = render_invitation("ann+team@acme.com", "Acme Inc", "admin", "Jane Admin")

    assert "/register?email=ann%2Bteam%40acme.com" in body
    assert "as an admin." in body

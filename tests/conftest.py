"""
Test configuration for pytest
"""

import os

import pytest

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["REDIS_URL"] = "redis://localhost:6379/0"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-long-enough-for-hs256"

from werkzeug.security import generate_password_hash  # noqa: E402

from app import create_app  # noqa: E402
from app.config import Config  # noqa: E402
from app.extensions import db, limiter  # noqa: E402
from app.models.user import User  # noqa: E402
from app.security import AuthContext  # noqa: E402
from app.tasks.celery_app import celery_app  # noqa: E402

LONG_TEXT = (
    "Acme Inc was founded in 1999 in Springfield. The company builds rockets for coyotes. "
    "Its flagship product is the Giant Rubber Band! Sales doubled last year?"
)
DEFAULT_PASSWORD = "secret123"


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-long-enough-for-hs256"
    CLAUDE_API_KEY = None
    STRIPE_SECRET_KEY = "sk_test_123"
    STRIPE_WEBHOOK_SECRET = "whsec_test_secret"
    SES_SENDER_EMAIL = "noreply@example.com"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="function")
def app():
    """Fresh app and empty in-memory database for each test"""
    app = create_app(TestConfig)
    celery_app.conf.task_always_eager = True
    limiter.reset()

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing SES e-mails instead of calling AWS."""
    sent = []

    def fake_send(recipient_email, subject, body, sender_email=None):
        sent.append({"to": recipient_email, "subject": subject, "body": body})
        return {"success": True, "message_id": f"msg-{len(sent)}"}

    monkeypatch.setattr("app.tasks.email_tasks.send_email_via_ses", fake_send)
    return sent


def register(client, email="jane@acme.com", tenant_name="Acme Inc", name="Jane Admin", password=DEFAULT_PASSWORD):
    return client.post("/api/v1/auth/register", json={
        "email": email,
        "password": password,
        "name": name,
        "tenant_name": tenant_name,
    })


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def registered(client):
    """An admin and tenant created through the public register endpoint."""
    response = register(client)
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def admin_headers(registered):
    return auth_headers(registered["access_token"])


@pytest.fixture
def admin_ctx(registered):
    user = registered["user"]
    return AuthContext(
        user_id=user["user_id"],
        tenant_id=user["tenant_id"],
        role=user["role"],
        email=user["email"],
    )


def create_member(tenant_id, email, role="user", password=DEFAULT_PASSWORD, is_active=True):
    user = User(
        tenant_id=tenant_id,
        email=email,
        password_hash=generate_password_hash(password),
        name=email.split("@")[0].title(),
        role=role,
        is_active=is_active,
    )
    db.session.add(user)
    db.session.commit()
    return user


def login(client, email, password=DEFAULT_PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


@pytest.fixture
def member(client, registered):
    """A regular (non-admin) user in the registered tenant, logged in."""
    user = create_member(registered["tenant"]["tenant_id"], "bob@acme.com")
    tokens = login(client, "bob@acme.com").get_json()["data"]
    return {
        "user_id": user.user_id,
        "headers": auth_headers(tokens["access_token"]),
        "ctx": AuthContext(
            user_id=user.user_id,
            tenant_id=user.tenant_id,
            role="user",
            email=user.email,
        ),
    }


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace the model call; records every prompt it receives."""
    calls = []

    class FakeLlm:
        reply = "This is a concise summary of the text."
        error = None

        def __call__(self, system_prompt, user_prompt, max_tokens, temperature):
            calls.append({
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
            })
            if self.error:
                raise self.error
            return self.reply

    fake = FakeLlm()
    fake.calls = calls
    monkeypatch.setattr("app.services.ai_service.generate_completion", fake)
    return fake

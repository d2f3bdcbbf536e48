import itertools
import json
from typing import Any, Dict, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tasklink.core.database import Base, get_db
from tasklink.core.security import compute_signature, create_access_token
from tasklink.main import app
from tasklink.models import Organization, OrganizationMembership, Service, Sprint, User
from tasklink.schemas.webhook import WebhookProvider
from tasklink.services.webhook_factory import WebhookHandlerFactory
from tasklink.services.webhook_handlers.github import GitHubWebhookHandler

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
WEBHOOK_SECRET = "test_secret"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False, "timeout": 30}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_emails = itertools.count(1)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db):
    """Independent sessions on the test database, e.g. for worker threads"""
    return TestingSessionLocal


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    del app.dependency_overrides[get_db]


@pytest.fixture(autouse=True)
def github_handler_secret(monkeypatch):
    """Route webhook deliveries through a handler using the test secret"""
    monkeypatch.setattr(
        WebhookHandlerFactory,
        "_handlers",
        {WebhookProvider.GITHUB: GitHubWebhookHandler(WEBHOOK_SECRET)},
    )


@pytest.fixture
def webhook_signature():
    """Fixture to generate webhook signatures for testing"""
    def _generate_signature(
        webhook_secret: str, payload: Dict[str, Any], event: str = "push"
    ) -> Tuple[Dict[str, str], bytes]:
        payload_bytes = json.dumps(payload).encode()
        headers = {
            "X-Hub-Signature-256": compute_signature(webhook_secret, payload_bytes),
            "X-GitHub-Event": event,
            "Content-Type": "application/json",
        }
        return headers, payload_bytes

    return _generate_signature


@pytest.fixture
def organization(db):
    org = Organization(name="Creatia", subdomain="creatia", task_prefix="SHOP")
    db.add(org)
    db.commit()
    return org


@pytest.fixture
def other_organization(db):
    org = Organization(name="Elsewhere", subdomain="elsewhere")
    db.add(org)
    db.commit()
    return org


@pytest.fixture
def add_member(db):
    def _add_member(organization: Organization, role: str = "member", active: bool = True) -> User:
        n = next(_emails)
        user = User(email=f"user{n}@example.com", name=f"User {n}", username=f"user{n}")
        db.add(user)
        db.flush()
        db.add(
            OrganizationMembership(
                user_id=user.id,
                organization_id=organization.id,
                role=role,
                active=active,
            )
        )
        db.commit()
        db.refresh(user)
        return user

    return _add_member


@pytest.fixture
def user(add_member, organization):
    return add_member(organization, role="member")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def service(db, organization):
    svc = Service(
        organization_id=organization.id,
        name="Shop",
        task_prefix="CART",
        github_repository="creatia/creatia-app",
        github_enabled=True,
    )
    db.add(svc)
    db.commit()
    return svc


@pytest.fixture
def sprint(db, organization):
    sp = Sprint(organization_id=organization.id, name="Sprint 1")
    db.add(sp)
    db.commit()
    return sp


@pytest.fixture
def github_push_payload():
    return {
        "ref": "refs/heads/SHOP-142-shopping-cart",
        "before": "6113728f27ae82c7b1a177c8d03f9e96e0adf246",
        "after": "0000000000000000000000000000000000000000",
        "repository": {
            "name": "creatia-app",
            "full_name": "creatia/creatia-app",
        },
        "pusher": {"name": "John Doe", "email": "john@example.com"},
        "sender": {"login": "johndoe"},
        "created": False,
        "deleted": False,
        "forced": False,
        "commits": [
            {
                "id": "7fd1a60b01f91b314f59955a4e4d4e80d8edf11d",
                "message": "[SHOP-142] Add shopping cart model",
                "author": {"name": "John Doe", "username": "johndoe", "email": "john@example.com"},
            }
        ],
        "head_commit": {
            "id": "7fd1a60b01f91b314f59955a4e4d4e80d8edf11d",
            "message": "[SHOP-142] Add shopping cart model",
        },
    }

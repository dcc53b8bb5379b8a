"""Shared test fixtures for the affiliate registration test suite."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.auth import create_jwt_token
from core.hooks import HookRegistry
from main import create_app
from models.affiliate import InMemoryAffiliateStore
from models.affiliate_meta import InMemoryAffiliateMetaStore
from payment_account import PaymentAccountExtension, register_payment_account_extension


@pytest.fixture
def meta_store() -> InMemoryAffiliateMetaStore:
    """In-memory affiliate metadata store."""
    return InMemoryAffiliateMetaStore()


@pytest.fixture
def affiliate_store() -> InMemoryAffiliateStore:
    """In-memory affiliate store."""
    return InMemoryAffiliateStore()


@pytest.fixture
def registry() -> HookRegistry:
    """Empty hook registry."""
    return HookRegistry()


@pytest.fixture
def extension(registry: HookRegistry, meta_store: InMemoryAffiliateMetaStore) -> PaymentAccountExtension:
    """Payout account extension registered on the registry fixture."""
    return register_payment_account_extension(registry, meta_store)


@pytest.fixture
def app(affiliate_store: InMemoryAffiliateStore, meta_store: InMemoryAffiliateMetaStore) -> FastAPI:
    """App wired to in-memory stores."""
    return create_app(affiliate_store=affiliate_store, meta_store=meta_store)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client that does not follow redirects."""
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Authorization header for an admin session."""
    token = create_jwt_token({"sub": "admin", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}

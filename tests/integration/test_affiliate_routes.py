"""Integration tests for the registration, dashboard and admin surfaces."""

import asyncio
import re
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from core.auth import create_jwt_token, create_nonce
from models.affiliate import AffiliateStatus, InMemoryAffiliateStore
from models.affiliate_meta import InMemoryAffiliateMetaStore

PLACEHOLDER_RE = re.compile(r"^affiliate_\d+@noemail\.local$")
NONCE_RE = re.compile(r'name="payment_account_token" value="([^"]+)"')
ADMIN_NONCE_RE = re.compile(r'name="affiliate_update_token" value="([^"]+)"')
MISSING = "Please enter your payout account information."
SUCCESS = "Your payout account information has been updated."


def _stored(meta_store: InMemoryAffiliateMetaStore, affiliate_id: int) -> Optional[str]:
    return asyncio.run(meta_store.get_meta(affiliate_id, "payment_account_info"))


def _register(client: TestClient, **overrides: str):
    data = {
        "user_login": "partner",
        "user_email": "",
        "password": "s3cret",
        "website": "",
        "promotional_method": "",
        "payment_account_info": "MOMO-0909123456",
    }
    data.update(overrides)
    return client.post("/affiliates/register", data=data)


def _admin_nonce(client: TestClient, headers: Dict[str, str], affiliate_id: int) -> str:
    page = client.get(f"/admin/affiliates/{affiliate_id}", headers=headers)
    return ADMIN_NONCE_RE.search(page.text).group(1)


class TestRegistrationForm:
    def test_form_includes_payout_field(self, client: TestClient) -> None:
        response = client.get("/affiliates/register")

        assert response.status_code == 200
        assert 'name="payment_account_info"' in response.text
        assert "Payout account information" in response.text

    def test_promotion_fields_not_marked_required(self, client: TestClient) -> None:
        html = client.get("/affiliates/register").text

        website_label = re.search(r'<label for="affiliate-website">(.*?)</label>', html, re.DOTALL).group(1)
        login_label = re.search(r'<label for="affiliate-user_login">(.*?)</label>', html, re.DOTALL).group(1)

        assert "affiliate-field-required" not in website_label
        assert "affiliate-field-required" in login_label


class TestRegistration:
    def test_register_without_email(
        self,
        client: TestClient,
        affiliate_store: InMemoryAffiliateStore,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        response = _register(client)

        assert response.status_code == 303
        assert response.headers["location"] == "/affiliates/account"

        affiliate = asyncio.run(affiliate_store.get_by_login("partner"))
        assert affiliate is not None
        assert PLACEHOLDER_RE.match(affiliate.user_email)
        assert affiliate.status == AffiliateStatus.PENDING
        assert _stored(meta_store, affiliate.id) == "MOMO-0909123456"

    def test_register_with_email_keeps_it(
        self, client: TestClient, affiliate_store: InMemoryAffiliateStore
    ) -> None:
        assert _register(client, user_email="partner@example.com").status_code == 303

        affiliate = asyncio.run(affiliate_store.get_by_login("partner"))
        assert affiliate.user_email == "partner@example.com"

    def test_missing_payout_rejected_and_input_preserved(
        self,
        client: TestClient,
        affiliate_store: InMemoryAffiliateStore,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        response = _register(client, payment_account_info="", website="https://partner.example")

        assert response.status_code == 200
        assert response.text.count(MISSING) == 1
        assert 'value="partner"' in response.text
        assert 'value="https://partner.example"' in response.text
        assert asyncio.run(affiliate_store.get_by_login("partner")) is None
        assert meta_store.writes == 0

    def test_invalid_email_rejected(self, client: TestClient) -> None:
        response = _register(client, user_email="not-an-email")

        assert response.status_code == 200
        assert "Please enter a valid email address." in response.text

    def test_whitespace_only_required_field_rejected(
        self, client: TestClient, affiliate_store: InMemoryAffiliateStore
    ) -> None:
        response = _register(client, user_login="   ")

        assert response.status_code == 200
        assert "This field is required: Username" in response.text
        assert asyncio.run(affiliate_store.list(limit=10, skip=0)) == []

    def test_duplicate_login_rejected(self, client: TestClient) -> None:
        assert _register(client).status_code == 303

        response = _register(client)

        assert response.status_code == 200
        assert "This username is already registered." in response.text


class TestLogin:
    def test_login_returns_token(self, client: TestClient) -> None:
        _register(client)

        response = client.post("/api/affiliates/login", json={"user_login": "partner", "password": "s3cret"})

        assert response.status_code == 200
        assert response.json()["affiliate"]["user_login"] == "partner"
        assert response.json()["token"]

    def test_wrong_password(self, client: TestClient) -> None:
        _register(client)

        response = client.post("/api/affiliates/login", json={"user_login": "partner", "password": "nope"})

        assert response.status_code == 401


class TestAccountDashboard:
    def test_requires_session(self, client: TestClient, meta_store: InMemoryAffiliateMetaStore) -> None:
        response = client.get("/affiliates/account")

        assert response.status_code == 401
        assert 'name="payment_account_info"' not in response.text
        assert meta_store.reads == 0

    def test_shows_registered_value(self, client: TestClient) -> None:
        _register(client)

        response = client.get("/affiliates/account")

        assert response.status_code == 200
        assert 'value="MOMO-0909123456"' in response.text
        assert NONCE_RE.search(response.text)

    def test_update_with_valid_nonce(
        self,
        client: TestClient,
        affiliate_store: InMemoryAffiliateStore,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        _register(client)
        nonce = NONCE_RE.search(client.get("/affiliates/account").text).group(1)

        response = client.post("/affiliates/account", data={
            "payment_account_token": nonce,
            "payment_account_info": "NEWBANK-111",
            "update_payment_account": "1",
        })

        affiliate = asyncio.run(affiliate_store.get_by_login("partner"))
        assert response.status_code == 200
        assert _stored(meta_store, affiliate.id) == "NEWBANK-111"
        assert 'value="NEWBANK-111"' in response.text
        assert SUCCESS in response.text

    def test_update_with_bad_nonce_ignored(
        self,
        client: TestClient,
        affiliate_store: InMemoryAffiliateStore,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        _register(client)

        response = client.post("/affiliates/account", data={
            "payment_account_token": "forged",
            "payment_account_info": "NEWBANK-111",
            "update_payment_account": "1",
        })

        affiliate = asyncio.run(affiliate_store.get_by_login("partner"))
        assert response.status_code == 200
        assert _stored(meta_store, affiliate.id) == "MOMO-0909123456"
        assert SUCCESS not in response.text


class TestAdmin:
    @pytest.fixture
    def registered(self, client: TestClient, affiliate_store: InMemoryAffiliateStore) -> None:
        _register(client)
        # Second affiliate without a payout value
        asyncio.run(affiliate_store.insert({"user_login": "second", "user_email": "second@example.com"}))

    def test_requires_admin(self, client: TestClient) -> None:
        assert client.get("/admin/affiliates").status_code == 401

    def test_affiliate_token_is_not_admin(self, client: TestClient) -> None:
        _register(client)
        assert client.get("/admin/affiliates").status_code == 403

    def test_list_shows_payout_column(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        registered: None,
    ) -> None:
        response = client.get("/admin/affiliates", headers=admin_headers)

        assert response.status_code == 200
        assert '<th class="column-payment_account">Payout account</th>' in response.text
        assert '<td class="column-payment_account">MOMO-0909123456</td>' in response.text
        assert '<td class="column-payment_account">-</td>' in response.text
        assert '<td class="column-user_login">partner</td>' in response.text

    def test_detail_shows_input(
        self, client: TestClient, admin_headers: dict[str, str], registered: None
    ) -> None:
        response = client.get("/admin/affiliates/1", headers=admin_headers)

        assert response.status_code == 200
        assert 'id="affiliate-payment-account-admin"' in response.text
        assert 'value="MOMO-0909123456"' in response.text

    def test_detail_unknown_affiliate(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        assert client.get("/admin/affiliates/999", headers=admin_headers).status_code == 404

    def test_update_writes_and_can_clear(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        affiliate_store: InMemoryAffiliateStore,
        meta_store: InMemoryAffiliateMetaStore,
        registered: None,
    ) -> None:
        nonce = _admin_nonce(client, admin_headers, 1)

        response = client.post(
            "/admin/affiliates/1",
            headers=admin_headers,
            data={"affiliate_update_token": nonce, "status": "active", "payment_account_info": "ACB-777"},
        )

        assert response.status_code == 303
        assert _stored(meta_store, 1) == "ACB-777"
        assert asyncio.run(affiliate_store.get(1)).status == AffiliateStatus.ACTIVE

        client.post(
            "/admin/affiliates/1",
            headers=admin_headers,
            data={"affiliate_update_token": nonce, "payment_account_info": ""},
        )

        assert _stored(meta_store, 1) == ""

    def test_update_rejects_unknown_status(
        self, client: TestClient, admin_headers: dict[str, str], registered: None
    ) -> None:
        nonce = _admin_nonce(client, admin_headers, 1)

        response = client.post(
            "/admin/affiliates/1",
            headers=admin_headers,
            data={"affiliate_update_token": nonce, "status": "bogus"},
        )
        assert response.status_code == 400


class TestAdminUpdateToken:
    @pytest.fixture
    def admin_cookie_client(self, client: TestClient, registered_partner: None) -> TestClient:
        """Client whose only credential is an admin session cookie."""
        client.cookies.clear()
        client.cookies.set("affiliate_token", create_jwt_token({"sub": "admin", "role": "admin"}))
        return client

    @pytest.fixture
    def registered_partner(self, client: TestClient) -> None:
        _register(client)

    def test_cross_site_post_without_token_writes_nothing(
        self,
        admin_cookie_client: TestClient,
        affiliate_store: InMemoryAffiliateStore,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        response = admin_cookie_client.post(
            "/admin/affiliates/1",
            data={"status": "rejected", "payment_account_info": "ATTACKER-999"},
        )

        assert response.status_code == 403
        assert _stored(meta_store, 1) == "MOMO-0909123456"
        assert asyncio.run(affiliate_store.get(1)).status == AffiliateStatus.PENDING

    def test_token_for_another_affiliate_rejected(
        self,
        admin_cookie_client: TestClient,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        response = admin_cookie_client.post(
            "/admin/affiliates/1",
            data={
                "affiliate_update_token": create_nonce("update_affiliate", 2),
                "payment_account_info": "ATTACKER-999",
            },
        )

        assert response.status_code == 403
        assert _stored(meta_store, 1) == "MOMO-0909123456"

    def test_dashboard_token_not_accepted(
        self,
        admin_cookie_client: TestClient,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        response = admin_cookie_client.post(
            "/admin/affiliates/1",
            data={
                "affiliate_update_token": create_nonce("update_payment_account", 1),
                "payment_account_info": "ATTACKER-999",
            },
        )

        assert response.status_code == 403
        assert _stored(meta_store, 1) == "MOMO-0909123456"

    def test_detail_form_token_accepted(
        self,
        admin_cookie_client: TestClient,
        meta_store: InMemoryAffiliateMetaStore,
    ) -> None:
        page = admin_cookie_client.get("/admin/affiliates/1")
        nonce = ADMIN_NONCE_RE.search(page.text).group(1)

        response = admin_cookie_client.post(
            "/admin/affiliates/1",
            data={"affiliate_update_token": nonce, "payment_account_info": "ACB-777"},
        )

        assert response.status_code == 303
        assert _stored(meta_store, 1) == "ACB-777"

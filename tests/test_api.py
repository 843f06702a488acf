# -*- coding: utf-8 -*-
"""HTTP-level tests: auth, variant preview/commit, TPOS error mapping."""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.core.config import Settings, get_settings
from app.core.tpos_client import get_tpos_client
from app.database import get_session
from app.main import app

API = get_settings().API_V1_STR


def _token(role: str | None = None) -> str:
    claims = {"sub": "user-1", "app_metadata": {"role": role} if role else {}}
    settings = get_settings()
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.SUPABASE_JWT_ALG)


@pytest.fixture
def client(session, tpos):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_tpos_client] = lambda: tpos
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {_token()}"}


VARIANT_BODY = {
    "product_code": "M800",
    "product_name": "Áo Thun",
    "size_texts": ["M", "L"],
    "colors": ["Cam"],
    "size_numbers": [],
}


class TestAuth:
    def test_health_is_public(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_missing_token(self, client):
        response = client.post(f"{API}/variants/preview", json=VARIANT_BODY)
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.post(
            f"{API}/variants/preview",
            json=VARIANT_BODY,
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_delete_requires_admin(self, client, auth_headers, make_product):
        product = make_product("M800")

        forbidden = client.delete(f"{API}/products/{product.id}", headers=auth_headers)
        assert forbidden.status_code == 403

        admin = {"Authorization": f"Bearer {_token('admin')}"}
        assert client.delete(f"{API}/products/{product.id}", headers=admin).status_code == 204


class TestVariantEndpoints:
    def test_preview(self, client, auth_headers):
        response = client.post(f"{API}/variants/preview", json=VARIANT_BODY, headers=auth_headers)

        assert response.status_code == 200
        first = response.json()[0]
        assert first == {
            "variant_text": "M, Cam",
            "variant_code": "MC",
            "full_code": "M800MC",
            "product_name": "Áo Thun size M Cam",
            "has_collision": False,
        }

    def test_commit_then_duplicate(self, client, auth_headers):
        body = {**VARIANT_BODY, "selling_price": 150000}

        created = client.post(f"{API}/variants", json=body, headers=auth_headers)
        assert created.status_code == 201
        data = created.json()
        assert data["base_action"] == "created"
        assert [v["product_code"] for v in data["variants"]] == ["M800MC", "M800LC"]

        again = client.post(f"{API}/variants", json=body, headers=auth_headers)
        assert again.status_code == 409
        assert again.json()["detail"]["codes"] == ["M800LC", "M800MC"]

    def test_list_variants_by_code(self, client, auth_headers):
        client.post(f"{API}/variants", json=VARIANT_BODY, headers=auth_headers)

        response = client.get(f"{API}/products/code/M800/variants", headers=auth_headers)

        assert response.status_code == 200
        assert [p["product_code"] for p in response.json()] == ["M800LC", "M800MC"]


class TestTposEndpoints:
    def test_unlinked_product_is_409(self, client, auth_headers, tpos, make_product):
        make_product("M800MC")
        tpos.add_order("o1")

        response = client.post(
            f"{API}/tpos/orders/o1/lines",
            json={"product_code": "M800MC", "quantity": 1},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert tpos.calls == []

    def test_sync_failure_is_502(self, client, auth_headers, tpos, make_product):
        make_product("M800MC")
        tpos.fail_lookup = True

        response = client.post(f"{API}/tpos/products/M800MC/link", headers=auth_headers)

        assert response.status_code == 502

    def test_link(self, client, auth_headers, tpos, make_product):
        make_product("M800MC")
        tpos.add_product("M800MC", 10)

        response = client.post(f"{API}/tpos/products/M800MC/link", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["tpos_product_id"] == 10
        assert response.json()["tpos_sync_status"] == "linked"

    def test_upload_variants(self, client, auth_headers, tpos, make_product):
        make_product("M800", variant="M, Cam")
        make_product("M800MC", variant="M, Cam", base_product_code="M800")
        tpos.add_product("M800", 5, template_id=50)
        tpos.add_template(50, "Áo Thun")
        tpos.add_attribute_values(1, ["M"])
        tpos.add_attribute_values(3, ["Cam"])

        response = client.post(
            f"{API}/tpos/products/M800/upload-variants", headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["succeeded"] == 1
        assert body["items"][0]["key"] == "M800MC"


class TestSettings:
    def test_only_service_role_key_is_read(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_KEY", "anon-key")
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

        settings = Settings(_env_file=None)

        assert "SUPABASE_KEY" not in Settings.model_fields
        assert not hasattr(settings, "SUPABASE_KEY")
        assert settings.SUPABASE_SERVICE_ROLE_KEY is None

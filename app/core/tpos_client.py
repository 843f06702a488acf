# app/core/tpos_client.py
"""
HTTP client for the TPOS OData API.

Only the calls the back office needs:
  - product lookup by exact code
  - read / write of a SaleOnline order (whole-object PUT)
  - read / update of a product template (variant upload)
  - attribute value lookup (sizes, colors)

Every transport error, non-2xx response or unreadable body becomes
ExternalSyncFailure.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable

import httpx

from app.core.config import get_settings
from app.core.exceptions import ExternalSyncFailure
from app.core.supabase_client import fetch_active_tpos_token

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]

PRODUCT_LOOKUP_PATH = "/odata/Product/OdataService.GetViewV2"
ORDER_EXPAND = "Details,Partner,User,CRMTeam"
TEMPLATE_UPDATE_PATH = "/odata/ProductTemplate/ODataService.UpdateV2"
ATTRIBUTE_VALUE_PATH = "/odata/ProductAttributeValue"
TEMPLATE_EXPAND = (
    "UOM,UOMCateg,Categ,UOMPO,POSCateg,Taxes,SupplierTaxes,Product_Teams,Images,"
    "UOMView,Distributor,Importer,Producer,OriginCountry,"
    "ProductVariants($expand=UOM,Categ,UOMPO,POSCateg,AttributeValues)"
)

# Body excerpt kept in error messages
_ERROR_BODY_LIMIT = 300


@dataclass(frozen=True)
class TPOSProductRef:
    id: int
    code: str
    name: str
    name_get: str
    price: float
    template_id: int | None = None


def _order_path(order_id: str) -> str:
    return f"/odata/SaleOnline_Order({order_id})"


def _template_path(template_id: int) -> str:
    return f"/odata/ProductTemplate({template_id})"


class TPOSClient:
    """
    Thin synchronous wrapper around httpx.Client.

    Args:
        base_url: e.g. "https://tomato.tpos.vn"
        token_provider: returns the current bearer token (or None)
        app_version: value of the `tposappversion` header
        timeout: per-request timeout in seconds
        transport: optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        app_version: str = "5.9.10.1",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._token_provider = token_provider
        self._app_version = app_version
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TPOSClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ----- Internals -----

    def _headers(self) -> dict[str, str]:
        token = self._token_provider()
        if not token:
            raise ExternalSyncFailure("TPOS bearer token is not configured")
        return {
            "accept": "application/json, text/plain, */*",
            "authorization": f"Bearer {token}",
            "content-type": "application/json;charset=UTF-8",
            "tposappversion": self._app_version,
            "x-request-id": str(uuid.uuid4()),
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        headers = self._headers()
        try:
            response = self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("TPOS %s %s failed: %s", method, path, e)
            raise ExternalSyncFailure(f"TPOS request failed: {e}") from e

        if response.is_error:
            body = response.text[:_ERROR_BODY_LIMIT]
            logger.error(
                "TPOS %s %s returned %s: %s",
                method,
                path,
                response.status_code,
                body,
            )
            raise ExternalSyncFailure(
                f"TPOS {method} {path} failed ({response.status_code}): {body}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        # TPOS answers 200 with an HTML login page when the token expired
        try:
            return response.json()
        except ValueError as e:
            body = response.text[:_ERROR_BODY_LIMIT]
            logger.error("TPOS %s returned a non-JSON body: %s", response.url.path, body)
            raise ExternalSyncFailure(
                f"TPOS {response.url.path} returned an unreadable body: {body}",
                status_code=response.status_code,
            ) from e

    # ----- Products -----

    def find_product_by_code(self, product_code: str) -> TPOSProductRef | None:
        """
        Look up a TPOS product by its code.

        TPOS searches by name/code substring; only a row whose DefaultCode
        equals `product_code` exactly is accepted.
        """
        params = {
            "Active": "true",
            "Name": product_code,
            "$top": 50,
            "$orderby": "DateCreated desc",
            "$count": "true",
        }
        data = self._json(self._request("GET", PRODUCT_LOOKUP_PATH, params=params))

        for row in _value_rows(data, PRODUCT_LOOKUP_PATH):
            if row.get("DefaultCode") != product_code:
                continue
            try:
                price = row.get("PriceVariant") or row.get("ListPrice") or 0
                template_id = row.get("ProductTmplId")
                return TPOSProductRef(
                    id=int(row["Id"]),
                    code=product_code,
                    name=row.get("Name") or "",
                    name_get=row.get("NameGet") or f"[{product_code}] {row.get('Name') or ''}",
                    price=float(price),
                    template_id=int(template_id) if template_id is not None else None,
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ExternalSyncFailure(
                    f"TPOS product row for {product_code} is malformed: {e!r}"
                ) from e
        return None

    def get_product_template(self, template_id: int) -> dict[str, Any]:
        """Product template with its variants and their attribute values."""
        response = self._request(
            "GET",
            _template_path(template_id),
            params={"$expand": TEMPLATE_EXPAND},
        )
        return _expect_object(self._json(response), _template_path(template_id))

    def update_product_template(self, payload: dict[str, Any]) -> None:
        """
        Save a whole product template (attribute lines + variants).
        """
        self._request("POST", TEMPLATE_UPDATE_PATH, json=payload)

    def list_attribute_values(self, attribute_id: int) -> list[dict[str, Any]]:
        """Every value of one attribute (e.g. all text sizes)."""
        params = {"$filter": f"AttributeId eq {attribute_id}", "$top": 500}
        data = self._json(self._request("GET", ATTRIBUTE_VALUE_PATH, params=params))
        return _value_rows(data, ATTRIBUTE_VALUE_PATH)

    # ----- Orders -----

    def get_order(self, order_id: str) -> dict[str, Any]:
        """Full SaleOnline order including its Details lines."""
        response = self._request(
            "GET",
            _order_path(order_id),
            params={"$expand": ORDER_EXPAND},
        )
        return _expect_object(self._json(response), _order_path(order_id))

    def put_order(self, order_id: str, payload: dict[str, Any]) -> None:
        """
        Replace the whole order. TPOS answers 204 No Content on success.
        """
        self._request("PUT", _order_path(order_id), json=payload)


def _expect_object(data: Any, path: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ExternalSyncFailure(f"TPOS {path} returned {type(data).__name__}, expected an object")
    return data


def _value_rows(data: Any, path: str) -> list[dict[str, Any]]:
    """The OData `value` array, or ExternalSyncFailure if it is not one."""
    rows = _expect_object(data, path).get("value") or []
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise ExternalSyncFailure(f"TPOS {path} returned a malformed value list")
    return rows


def _settings_token_provider() -> str | None:
    settings = get_settings()
    if settings.TPOS_BEARER_TOKEN:
        return settings.TPOS_BEARER_TOKEN
    return fetch_active_tpos_token(settings.TPOS_TOKEN_TABLE)


@lru_cache
def get_tpos_client() -> TPOSClient:
    """
    Process-wide TPOS client (FastAPI dependency).
    """
    settings = get_settings()
    return TPOSClient(
        base_url=settings.TPOS_BASE_URL,
        token_provider=_settings_token_provider,
        app_version=settings.TPOS_APP_VERSION,
        timeout=settings.TPOS_TIMEOUT_SECONDS,
    )

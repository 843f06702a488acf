# -*- coding: utf-8 -*-
"""Shared fixtures: settings env, in-memory database, fake TPOS client."""

import copy
import os

# Settings are read at import time by app.core.* modules.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("TPOS_BEARER_TOKEN", "test-tpos-token")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.exceptions import ExternalSyncFailure
from app.core.order_locks import OrderLockRegistry
from app.core.tpos_client import TPOSProductRef
from app.models import live as _live_models  # noqa: F401
from app.models import product as _product_models  # noqa: F401
from app.models.product import Product


class FakeTPOSClient:
    """In-memory stand-in for TPOSClient that records every call."""

    def __init__(self):
        self.products: dict[str, TPOSProductRef] = {}
        self.orders: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_lookup = False
        self.fail_lookup_codes: set[str] = set()
        self.fail_get_orders: set[str] = set()
        self.fail_put_orders: set[str] = set()
        self.templates: dict[int, dict] = {}
        self.attribute_values: dict[int, list[dict]] = {}
        self.updated_templates: list[dict] = []
        self.fail_update = False
        self.skip_created_codes: set[str] = set()
        self._next_variant_id = 1000

    def add_product(
        self,
        code: str,
        tpos_id: int,
        price: float = 150000.0,
        name: str | None = None,
        template_id: int | None = None,
    ):
        name = name or f"Product {code}"
        self.products[code] = TPOSProductRef(
            id=tpos_id,
            code=code,
            name=name,
            name_get=f"[{code}] {name}",
            price=price,
            template_id=template_id,
        )

    def add_template(self, template_id: int, name: str, variants: list[dict] | None = None):
        self.templates[template_id] = {
            "@odata.context": "http://tomato.tpos.vn/odata/$metadata#ProductTemplate/$entity",
            "Id": template_id,
            "Name": name,
            "NameNoSign": name,
            "ListPrice": 150000,
            "UOM": {"Id": 1, "Name": "Cái"},
            "ProductVariants": variants or [],
        }

    def add_attribute_values(self, attribute_id: int, names: list[str]):
        self.attribute_values[attribute_id] = [
            {"Id": attribute_id * 100 + i, "Name": name, "Code": name}
            for i, name in enumerate(names, start=1)
        ]

    def add_order(self, order_id: str, details: list[dict] | None = None):
        self.orders[order_id] = {
            "@odata.context": "http://tomato.tpos.vn/odata/$metadata#SaleOnline_Order/$entity",
            "Id": order_id,
            "Code": f"SO-{order_id}",
            "PrintCount": 0,
            "TotalAmount": 0,
            "TotalQuantity": 0,
            "Details": details or [],
        }

    def find_product_by_code(self, product_code: str):
        self.calls.append(("lookup", product_code))
        if self.fail_lookup or product_code in self.fail_lookup_codes:
            raise ExternalSyncFailure("TPOS request failed: lookup unavailable")
        return self.products.get(product_code)

    def get_order(self, order_id: str) -> dict:
        self.calls.append(("get", order_id))
        if order_id in self.fail_get_orders or order_id not in self.orders:
            raise ExternalSyncFailure(
                f"TPOS GET order {order_id} failed (500)", status_code=500
            )
        return copy.deepcopy(self.orders[order_id])

    def put_order(self, order_id: str, payload: dict) -> None:
        self.calls.append(("put", order_id))
        if order_id in self.fail_put_orders:
            raise ExternalSyncFailure(
                f"TPOS PUT order {order_id} failed (500)", status_code=500
            )
        self.orders[order_id] = copy.deepcopy(payload)

    def get_product_template(self, template_id: int) -> dict:
        self.calls.append(("template", str(template_id)))
        if template_id not in self.templates:
            raise ExternalSyncFailure(
                f"TPOS GET template {template_id} failed (404)", status_code=404
            )
        return copy.deepcopy(self.templates[template_id])

    def list_attribute_values(self, attribute_id: int) -> list[dict]:
        self.calls.append(("attributes", str(attribute_id)))
        return copy.deepcopy(self.attribute_values.get(attribute_id, []))

    def update_product_template(self, payload: dict) -> None:
        """Store the template and register new active variants as products."""
        self.calls.append(("update", str(payload.get("Id"))))
        if self.fail_update:
            raise ExternalSyncFailure("TPOS POST UpdateV2 failed (400)", status_code=400)
        self.updated_templates.append(copy.deepcopy(payload))
        self.templates[payload["Id"]] = copy.deepcopy(payload)
        for variant in payload.get("ProductVariants") or []:
            code = variant.get("DefaultCode")
            if variant.get("Id") or not variant.get("Active") or not code:
                continue
            if code in self.skip_created_codes:
                continue
            self._next_variant_id += 1
            self.add_product(code, self._next_variant_id, template_id=payload["Id"])


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def tpos():
    return FakeTPOSClient()


@pytest.fixture
def locks():
    return OrderLockRegistry()


@pytest.fixture
def make_product(session):
    """Insert a catalog product and return it."""

    def _make(product_code: str, product_name: str | None = None, **fields) -> Product:
        product = Product(
            product_code=product_code,
            product_name=product_name or f"Sản phẩm {product_code}",
            **fields,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make

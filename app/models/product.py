# app/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry: either a base product or one of its variants.

    Variants carry `base_product_code` and a human `variant` label
    ("M, Cam"). `tpos_product_id` links the row to the TPOS catalog once
    the product has been uploaded there.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_code: str = Field(
        max_length=100,
        unique=True,
        index=True,
        description="Unique product code, e.g. N126 or M800MC",
    )

    product_name: str = Field(
        max_length=255,
        index=True,
        description="Display name including variant suffix",
    )

    variant: str | None = Field(
        default=None,
        description="Human variant label, e.g. 'M, Cam'",
    )

    base_product_code: str | None = Field(
        default=None,
        index=True,
        description="Code of the base product this variant was split from",
    )

    purchase_price: float = Field(
        default=0,
        ge=0,
        description="Cost price (VND)",
    )

    selling_price: float = Field(
        default=0,
        ge=0,
        description="Selling price (VND)",
    )

    stock_quantity: int = Field(
        default=0,
        ge=0,
        description="Units currently in stock",
    )

    unit: str = Field(
        default="Cái",
        max_length=20,
    )

    supplier_name: str | None = Field(default=None)

    # unlinked | uploading | linked | failed
    tpos_sync_status: str = Field(
        default="unlinked",
        index=True,
        description="Link state against the TPOS catalog",
    )

    tpos_product_id: int | None = Field(
        default=None,
        index=True,
        description="TPOS numeric product id (set when linked)",
    )

    tpos_sync_error: str | None = Field(
        default=None,
        description="Last link failure message",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )

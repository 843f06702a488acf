# app/schemas/product.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

TposSyncStatus = Literal["unlinked", "uploading", "linked", "failed"]


class ProductCreate(SQLModel):
    """
    Payload for creating a catalog product.

    - product_code is optional: if omitted, the next N/P code is allocated
      from the product name.
    """

    model_config = ConfigDict(extra="forbid")

    product_code: str | None = Field(default=None, max_length=100)
    product_name: str = Field(max_length=255)
    variant: str | None = None
    purchase_price: float = Field(default=0, ge=0)
    selling_price: float = Field(default=0, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    unit: str = Field(default="Cái", max_length=20)
    supplier_name: str | None = None

    @field_validator("product_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_name cannot be empty")
        return v

    @field_validator("product_code")
    @classmethod
    def normalize_code(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().upper()
        if not v:
            raise ValueError("product_code cannot be empty if provided")
        return v


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    product_code: str
    product_name: str
    variant: str | None
    base_product_code: str | None
    purchase_price: float
    selling_price: float
    stock_quantity: int
    unit: str
    supplier_name: str | None
    tpos_sync_status: TposSyncStatus
    tpos_product_id: int | None
    tpos_sync_error: str | None
    created_at: datetime
    updated_at: datetime


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional; the product code itself is immutable.
    """

    model_config = ConfigDict(extra="forbid")

    product_name: str | None = Field(default=None, max_length=255)
    variant: str | None = None
    purchase_price: float | None = Field(default=None, ge=0)
    selling_price: float | None = Field(default=None, ge=0)
    stock_quantity: int | None = Field(default=None, ge=0)
    unit: str | None = Field(default=None, max_length=20)
    supplier_name: str | None = None

    @field_validator("product_name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("product_name cannot be empty")
        return v


class NextProductCodeRead(SQLModel):
    category: Literal["N", "P"]
    product_code: str

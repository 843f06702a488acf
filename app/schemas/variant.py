# app/schemas/variant.py
from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.product import ProductRead


def _clean_values(values: list[str]) -> list[str]:
    """Strip entries, drop blanks and exact duplicates (first one wins)."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for raw in values:
        value = raw.strip()
        if not value or value in seen:
            continue
        seen.add(value)
        cleaned.append(value)
    return cleaned


class VariantExpandRequest(SQLModel):
    """
    Base product + selected values on each axis.

    Any axis may be empty; all three empty yields no combinations.
    """

    model_config = ConfigDict(extra="forbid")

    product_code: str = Field(max_length=100)
    product_name: str = Field(max_length=255)
    size_texts: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    size_numbers: list[str] = Field(default_factory=list)

    @field_validator("product_code", "product_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("size_texts", "colors", "size_numbers")
    @classmethod
    def clean_values(cls, v: list[str]) -> list[str]:
        return _clean_values(v)


class VariantCombinationRead(SQLModel):
    variant_text: str
    variant_code: str
    full_code: str
    product_name: str
    has_collision: bool


class VariantProductsCreate(VariantExpandRequest):
    """
    Commit payload: expansion input plus the values copied onto the
    base product and every generated variant.
    """

    purchase_price: float = Field(default=0, ge=0)
    selling_price: float = Field(default=0, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    supplier_name: str | None = None


class VariantProductsCreated(SQLModel):
    base_action: str  # created | updated
    base_product: ProductRead
    variants: list[ProductRead]

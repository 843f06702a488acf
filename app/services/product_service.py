# app/services/product_service.py
import re
import uuid
from datetime import datetime, timezone
from typing import Iterable, Literal

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.text import remove_whitespace, to_upper_ascii
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductUpdate

ProductCategory = Literal["N", "P"]

# Clothing keywords are checked first; accessories second; default N.
CATEGORY_N_KEYWORDS: tuple[str, ...] = ("QUAN", "AO", "DAM", "SET", "JUM", "AOKHOAC")
CATEGORY_P_KEYWORDS: tuple[str, ...] = ("TUI", "MATKINH", "MYPHAM", "BANGDO", "GIAYDEP", "PHUKIEN")

NULLABLE_UPDATE_FIELDS = frozenset({"variant", "supplier_name"})

_CATEGORY_CODE_RE = re.compile(r"^([NP])(\d+)$")
_TRAILING_NUMBER_RE = re.compile(r"(\d+)$")


def detect_product_category(product_name: str) -> ProductCategory:
    """
    'N' for clothing, 'P' for accessories, based on keywords in the
    diacritic-free uppercased name ("Túi xách" -> "TUIXACH" -> 'P').
    """
    normalized = remove_whitespace(to_upper_ascii(product_name))
    if any(keyword in normalized for keyword in CATEGORY_N_KEYWORDS):
        return "N"
    if any(keyword in normalized for keyword in CATEGORY_P_KEYWORDS):
        return "P"
    return "N"


def max_code_number(codes: Iterable[str]) -> int:
    """Largest trailing number among `codes` (0 if none)."""
    max_number = 0
    for code in codes:
        match = _TRAILING_NUMBER_RE.search(code)
        if match:
            max_number = max(max_number, int(match.group(1)))
    return max_number


def increment_product_code(product_code: str, existing_codes: Iterable[str] = ()) -> str | None:
    """
    'N123' -> 'N124', skipping codes already in `existing_codes`.

    Returns None for codes that are not of the form N<digits> / P<digits>.
    """
    match = _CATEGORY_CODE_RE.match(product_code.strip())
    if not match:
        return None

    prefix, number = match.group(1), int(match.group(2))
    taken = set(existing_codes)
    while True:
        number += 1
        candidate = f"{prefix}{number}"
        if candidate not in taken:
            return candidate


class ProductService:
    """
    Business logic for catalog products.

    Responsibilities:
      - product code allocation (N/P category + next number)
      - code uniqueness on create
      - partial updates with updated_at bookkeeping
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Codes -----

    def next_product_code(self, session: Session, category: ProductCategory) -> str:
        """
        category + (max number among existing codes of that category + 1).
        """
        codes = self.repo.list_codes_with_prefix(session, category)
        category_codes = [c for c in codes if _CATEGORY_CODE_RE.match(c)]
        return f"{category}{max_code_number(category_codes) + 1}"

    def generate_product_code(self, session: Session, product_name: str) -> tuple[ProductCategory, str]:
        if not product_name.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product name cannot be empty",
            )
        category = detect_product_category(product_name)
        return category, self.next_product_code(session, category)

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        search: str | None = None,
    ) -> list[Product]:
        return self.repo.list_products(session, skip=skip, limit=limit, search=search)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def get_by_code(self, session: Session, product_code: str) -> Product:
        product = self.repo.get_by_code(session, product_code)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product {product_code} not found",
            )
        return product

    def list_variants(self, session: Session, base_code: str) -> list[Product]:
        base_code = base_code.strip()
        if not base_code:
            return []
        return self.repo.list_variants(session, base_code)

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
    ) -> Product:
        """
        Create a new product.

        - If product_code is provided => must not exist yet (409).
        - Else => allocate the next code for the name's category.
        """
        if payload.product_code:
            code = payload.product_code
            if self.repo.get_by_code(session, code) is not None:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Product code {code} already exists",
                )
        else:
            _, code = self.generate_product_code(session, payload.product_name)

        product = Product(
            product_code=code,
            product_name=payload.product_name,
            variant=payload.variant,
            purchase_price=payload.purchase_price,
            selling_price=payload.selling_price,
            stock_quantity=payload.stock_quantity,
            unit=payload.unit,
            supplier_name=payload.supplier_name,
        )
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product (only fields present in the payload).
        """
        product = self.get_product(session, product_id)

        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            # Only variant / supplier_name may be cleared with null.
            if value is None and field not in NULLABLE_UPDATE_FIELDS:
                continue
            setattr(product, field, value)

        product.updated_at = datetime.now(timezone.utc)
        return self.repo.update(session, product)

    def delete_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> None:
        """
        Delete a product row.

        Live orders keep the product code as plain text, so historical
        orders still render after the row is gone.
        """
        product = self.get_product(session, product_id)
        self.repo.delete(session, product)

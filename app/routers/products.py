# app/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin, require_auth
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    NextProductCodeRead,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from app.services.product_service import ProductService

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(require_auth)],
)

repo = ProductRepository()
service = ProductService(repo)


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    search: str | None = None,
):
    """
    List catalog products, newest first.

    - `search` matches product code or name (case-insensitive).
    """
    return service.list_products(session, skip=skip, limit=limit, search=search)


@router.get("/next-code", response_model=NextProductCodeRead)
def next_product_code(
    name: str = Query(..., min_length=1),
    session: Session = Depends(get_session),
):
    """
    Suggest the next product code for a product name (N = clothing,
    P = accessories).
    """
    category, code = service.generate_product_code(session, name)
    return NextProductCodeRead(category=category, product_code=code)


@router.get("/code/{product_code}", response_model=ProductRead)
def get_product_by_code(
    product_code: str,
    session: Session = Depends(get_session),
):
    return service.get_by_code(session, product_code)


@router.get("/code/{product_code}/variants", response_model=list[ProductRead])
def list_product_variants(
    product_code: str,
    session: Session = Depends(get_session),
):
    """
    Variants of a base product (codes starting with the base code).
    """
    return service.list_variants(session, product_code)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a catalog product. Omit `product_code` to allocate one.
    """
    return service.create_product(session, payload)


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product row (admin only).
    """
    service.delete_product(session, product_id)
    return None

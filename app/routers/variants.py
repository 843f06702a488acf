# app/routers/variants.py
from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductRead
from app.schemas.variant import (
    VariantCombinationRead,
    VariantExpandRequest,
    VariantProductsCreate,
    VariantProductsCreated,
)
from app.services.variant_service import VariantService

router = APIRouter(
    prefix="/variants",
    tags=["Variants"],
    dependencies=[Depends(require_auth)],
)

repo = ProductRepository()
service = VariantService(repo)


@router.post("/preview", response_model=list[VariantCombinationRead])
def preview_variants(payload: VariantExpandRequest):
    """
    Expand a base product into its variant combinations without saving.

    Order: size-text -> color -> size-number.
    """
    return [VariantCombinationRead(**asdict(c)) for c in service.preview(payload)]


@router.post(
    "",
    response_model=VariantProductsCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_variant_products(
    payload: VariantProductsCreate,
    session: Session = Depends(get_session),
):
    """
    Save the base product and all its variant combinations.

    - 409 if any generated code already exists; nothing is written.
    """
    action, base, variants = service.create_variant_products(session, payload)
    return VariantProductsCreated(
        base_action=action,
        base_product=ProductRead.model_validate(base),
        variants=[ProductRead.model_validate(v) for v in variants],
    )

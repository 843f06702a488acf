# app/routers/tpos.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth
from app.core.tpos_client import TPOSClient, get_tpos_client
from app.database import get_session
from app.repositories.live_repo import LiveRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductRead
from app.schemas.tpos import (
    BatchResult,
    OrderLineAdd,
    OrderLineQuantityUpdate,
    TposOrderMutationRead,
)
from app.services.tpos_sync_service import TposSyncService

router = APIRouter(
    prefix="/tpos",
    tags=["TPOS"],
    dependencies=[Depends(require_auth)],
)

service = TposSyncService(ProductRepository(), LiveRepository())


@router.post("/products/{product_code}/link", response_model=ProductRead)
def link_product(
    product_code: str,
    session: Session = Depends(get_session),
    client: TPOSClient = Depends(get_tpos_client),
):
    """
    Look the product code up on TPOS and store its product id.

    - 404 if the code does not exist on TPOS (product marked failed).
    - Already linked products are returned unchanged.
    """
    return service.link_product(session, client, product_code)


@router.post("/products/{base_code}/link-variants", response_model=BatchResult)
def link_variants(
    base_code: str,
    session: Session = Depends(get_session),
    client: TPOSClient = Depends(get_tpos_client),
):
    """
    Link every variant of a base product; stops at the first TPOS failure.
    """
    return service.link_variants(session, client, base_code)


@router.post("/products/{base_code}/upload-variants", response_model=BatchResult)
def upload_variants(
    base_code: str,
    session: Session = Depends(get_session),
    client: TPOSClient = Depends(get_tpos_client),
):
    """
    Create the unlinked variants of a base product on its TPOS template,
    then link them by code.

    - 404 if the base product is not on TPOS.
    """
    return service.upload_variants(session, client, base_code)


@router.post(
    "/orders/{tpos_order_id}/lines",
    response_model=TposOrderMutationRead,
)
def add_order_line(
    tpos_order_id: str,
    payload: OrderLineAdd,
    session: Session = Depends(get_session),
    client: TPOSClient = Depends(get_tpos_client),
):
    """
    Add a product to a TPOS sale order (quantity is added if present).

    - 409 if the product is not linked to TPOS (no TPOS call is made).
    """
    return service.add_order_line(
        session,
        client,
        tpos_order_id,
        payload.product_code,
        payload.quantity,
    )


@router.patch(
    "/orders/{tpos_order_id}/lines/{product_code}",
    response_model=TposOrderMutationRead,
)
def update_order_line(
    tpos_order_id: str,
    product_code: str,
    payload: OrderLineQuantityUpdate,
    session: Session = Depends(get_session),
    client: TPOSClient = Depends(get_tpos_client),
):
    """
    Set the quantity of a product on a TPOS sale order (0 removes it).
    """
    return service.set_order_line_quantity(
        session,
        client,
        tpos_order_id,
        product_code,
        payload.quantity,
    )

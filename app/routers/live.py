# app/routers/live.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.core.tpos_client import TPOSClient, get_tpos_client
from app.database import get_session
from app.repositories.live_repo import LiveRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.live import (
    LiveOrderCreate,
    LiveOrderRead,
    LiveProductCreate,
    LiveProductRead,
    LiveSessionCreate,
    LiveSessionRead,
    TposOrderLink,
)
from app.schemas.tpos import BatchResult, BatchUploadRequest
from app.services.live_service import LiveService
from app.services.tpos_sync_service import TposSyncService

router = APIRouter(
    prefix="/live",
    tags=["Live sessions"],
    dependencies=[Depends(require_auth)],
)

live_repo = LiveRepository()
product_repo = ProductRepository()
service = LiveService(live_repo, product_repo)
sync_service = TposSyncService(product_repo, live_repo)


# -------- Sessions --------


@router.post(
    "/sessions",
    response_model=LiveSessionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    payload: LiveSessionCreate,
    session: Session = Depends(get_session),
):
    return service.create_session(session, payload)


@router.get("/sessions", response_model=list[LiveSessionRead])
def list_sessions(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    return service.list_sessions(session, skip, limit)


@router.get("/sessions/{live_session_id}", response_model=LiveSessionRead)
def get_session_detail(
    live_session_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_session(session, live_session_id)


# -------- Products --------


@router.post(
    "/sessions/{live_session_id}/products",
    response_model=LiveProductRead,
    status_code=status.HTTP_201_CREATED,
)
def add_product(
    live_session_id: uuid.UUID,
    payload: LiveProductCreate,
    session: Session = Depends(get_session),
):
    """
    Offer a product during a session. Name/variant default to the catalog.
    """
    return service.add_product(session, live_session_id, payload)


@router.get(
    "/sessions/{live_session_id}/products",
    response_model=list[LiveProductRead],
)
def list_products(
    live_session_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.list_products(session, live_session_id)


# -------- Orders --------


@router.post(
    "/orders",
    response_model=LiveOrderRead,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: LiveOrderCreate,
    session: Session = Depends(get_session),
):
    """
    Capture an order during the stream.

    - `is_oversell` is true when sold quantity exceeds prepared quantity.
    """
    return service.create_order(session, payload)


@router.get(
    "/sessions/{live_session_id}/orders",
    response_model=list[LiveOrderRead],
)
def list_orders(
    live_session_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.list_orders(session, live_session_id)


@router.put(
    "/orders/{order_code}/tpos-order",
    response_model=list[LiveOrderRead],
)
def link_tpos_order(
    order_code: str,
    payload: TposOrderLink,
    session: Session = Depends(get_session),
):
    """
    Attach a TPOS sale order id to every live order with this code.
    """
    return service.set_tpos_order_id(session, order_code, payload.tpos_order_id)


@router.post(
    "/sessions/{live_session_id}/upload",
    response_model=BatchResult,
)
def upload_orders(
    live_session_id: uuid.UUID,
    payload: BatchUploadRequest,
    session: Session = Depends(get_session),
    client: TPOSClient = Depends(get_tpos_client),
):
    """
    Push live orders to TPOS, one order code at a time.

    Stops at the first TPOS request failure; the response lists what
    succeeded, failed and was not attempted.
    """
    return sync_service.upload_session_orders(
        session,
        client,
        live_session_id,
        payload.order_codes,
    )

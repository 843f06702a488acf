# app/services/live_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.live import LiveOrder, LiveProduct, LiveSession
from app.repositories.live_repo import LiveRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.live import LiveOrderCreate, LiveProductCreate, LiveSessionCreate


class LiveService:
    """
    Business logic for live selling sessions.

    Responsibilities:
      - sessions and the products offered in them
      - order capture during the stream (sold quantity + oversell flag)
      - linking captured order codes to TPOS sale orders
    """

    def __init__(self, live_repo: LiveRepository, product_repo: ProductRepository):
        self.live_repo = live_repo
        self.product_repo = product_repo

    # -------- Sessions --------

    def create_session(self, session: Session, payload: LiveSessionCreate) -> LiveSession:
        live_session = LiveSession(
            session_name=payload.session_name,
            session_date=payload.session_date,
        )
        return self.live_repo.create_session(session, live_session)

    def list_sessions(self, session: Session, skip: int = 0, limit: int = 50) -> list[LiveSession]:
        return self.live_repo.list_sessions(session, skip, limit)

    def get_session(self, session: Session, live_session_id: uuid.UUID) -> LiveSession:
        live_session = self.live_repo.get_session_by_id(session, live_session_id)
        if not live_session:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Live session not found",
            )
        return live_session

    # -------- Products --------

    def add_product(
        self,
        session: Session,
        live_session_id: uuid.UUID,
        payload: LiveProductCreate,
    ) -> LiveProduct:
        """
        Offer a product in a session.

        Name and variant default to the catalog row with the same code.
        """
        self.get_session(session, live_session_id)

        product_name = payload.product_name
        variant = payload.variant
        if product_name is None or variant is None:
            catalog = self.product_repo.get_by_code(session, payload.product_code)
            if catalog is None and product_name is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Product {payload.product_code} not found",
                )
            if catalog is not None:
                product_name = product_name or catalog.product_name
                variant = variant if variant is not None else catalog.variant

        live_product = LiveProduct(
            live_session_id=live_session_id,
            product_code=payload.product_code,
            product_name=product_name,
            variant=variant,
            prepared_quantity=payload.prepared_quantity,
        )
        return self.live_repo.create_product(session, live_product)

    def list_products(self, session: Session, live_session_id: uuid.UUID) -> list[LiveProduct]:
        self.get_session(session, live_session_id)
        return self.live_repo.list_products(session, live_session_id)

    # -------- Orders --------

    def create_order(self, session: Session, payload: LiveOrderCreate) -> LiveOrder:
        """
        Capture an order during the stream.

        Steps:
          1. Load the live product; it must belong to the session.
          2. Increase sold_quantity by the ordered quantity.
          3. Flag oversell when sold exceeds prepared.
          4. Insert the order and commit both rows together.
        """
        self.get_session(session, payload.live_session_id)

        live_product = self.live_repo.get_product_by_id(session, payload.live_product_id)
        if not live_product or live_product.live_session_id != payload.live_session_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Live product not found in this session",
            )

        new_sold = live_product.sold_quantity + payload.quantity
        is_oversell = new_sold > live_product.prepared_quantity

        live_product.sold_quantity = new_sold
        session.add(live_product)

        order = LiveOrder(
            order_code=payload.order_code,
            live_session_id=payload.live_session_id,
            live_product_id=live_product.id,
            quantity=payload.quantity,
            is_oversell=is_oversell,
        )
        self.live_repo.add_order(session, order)

        session.commit()
        session.refresh(order)
        return order

    def list_orders(self, session: Session, live_session_id: uuid.UUID) -> list[LiveOrder]:
        self.get_session(session, live_session_id)
        return self.live_repo.list_orders(session, live_session_id)

    def set_tpos_order_id(
        self,
        session: Session,
        order_code: str,
        tpos_order_id: str,
    ) -> list[LiveOrder]:
        """
        Link every live order with `order_code` to a TPOS sale order.
        """
        orders = self.live_repo.list_orders_by_code(session, order_code.strip())
        if not orders:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No live orders with code {order_code}",
            )
        for order in orders:
            order.tpos_order_id = tpos_order_id
        return self.live_repo.save_orders(session, orders)

# app/repositories/live_repo.py
import uuid

from sqlmodel import Session, col, select

from app.models.live import LiveOrder, LiveProduct, LiveSession


class LiveRepository:
    """
    Data access layer for live sessions, their products and orders.

    NOTE:
      - Order capture touches two tables; the service commits.
    """

    # ---- Sessions ----

    def get_session_by_id(
        self,
        session: Session,
        live_session_id: uuid.UUID,
    ) -> LiveSession | None:
        return session.get(LiveSession, live_session_id)

    def list_sessions(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[LiveSession]:
        stmt = (
            select(LiveSession)
            .order_by(col(LiveSession.session_date).desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def create_session(self, session: Session, live_session: LiveSession) -> LiveSession:
        session.add(live_session)
        session.commit()
        session.refresh(live_session)
        return live_session

    # ---- Products ----

    def get_product_by_id(
        self,
        session: Session,
        live_product_id: uuid.UUID,
    ) -> LiveProduct | None:
        return session.get(LiveProduct, live_product_id)

    def list_products(
        self,
        session: Session,
        live_session_id: uuid.UUID,
    ) -> list[LiveProduct]:
        stmt = (
            select(LiveProduct)
            .where(LiveProduct.live_session_id == live_session_id)
            .order_by(LiveProduct.product_code)
        )
        return session.exec(stmt).all()

    def create_product(self, session: Session, product: LiveProduct) -> LiveProduct:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    # ---- Orders ----

    def list_orders(
        self,
        session: Session,
        live_session_id: uuid.UUID,
    ) -> list[LiveOrder]:
        stmt = (
            select(LiveOrder)
            .where(LiveOrder.live_session_id == live_session_id)
            .order_by(LiveOrder.created_at, LiveOrder.order_code)
        )
        return session.exec(stmt).all()

    def list_orders_by_code(
        self,
        session: Session,
        order_code: str,
        live_session_id: uuid.UUID | None = None,
    ) -> list[LiveOrder]:
        stmt = select(LiveOrder).where(LiveOrder.order_code == order_code)
        if live_session_id is not None:
            stmt = stmt.where(LiveOrder.live_session_id == live_session_id)
        stmt = stmt.order_by(LiveOrder.created_at)
        return session.exec(stmt).all()

    def add_order(self, session: Session, order: LiveOrder) -> LiveOrder:
        session.add(order)
        session.flush()
        return order

    def save_orders(self, session: Session, orders: list[LiveOrder]) -> list[LiveOrder]:
        session.add_all(orders)
        session.commit()
        for order in orders:
            session.refresh(order)
        return orders

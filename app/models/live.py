# app/models/live.py
import uuid
from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class LiveSession(SQLModel, table=True):
    """
    One livestream selling session.
    """

    __tablename__ = "live_sessions"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    session_name: str = Field(max_length=255)

    session_date: date = Field(
        description="Day the stream takes place",
    )

    # active | completed
    status: str = Field(
        default="active",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class LiveProduct(SQLModel, table=True):
    """
    Product offered during a live session, with the quantity prepared
    for the stream and the quantity sold so far.
    """

    __tablename__ = "live_products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    live_session_id: uuid.UUID = Field(
        foreign_key="live_sessions.id",
        index=True,
    )

    product_code: str = Field(
        index=True,
        description="Catalog product code",
    )

    product_name: str

    variant: str | None = None

    prepared_quantity: int = Field(default=0, ge=0)

    sold_quantity: int = Field(default=0, ge=0)


class LiveOrder(SQLModel, table=True):
    """
    Order line captured during a stream.

    Several rows share one `order_code` (one customer, several products).
    `tpos_order_id` links the group to a TPOS sale order; the id is opaque
    and the remote order is always re-fetched before it is modified.
    """

    __tablename__ = "live_orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_code: str = Field(
        index=True,
        description="Customer order code typed during the stream",
    )

    live_session_id: uuid.UUID = Field(
        foreign_key="live_sessions.id",
        index=True,
    )

    live_product_id: uuid.UUID = Field(
        foreign_key="live_products.id",
        index=True,
    )

    quantity: int = Field(
        default=1,
        gt=0,
    )

    is_oversell: bool = Field(
        default=False,
        description="Sold beyond prepared_quantity when captured",
    )

    tpos_order_id: str | None = Field(
        default=None,
        index=True,
    )

    # pending | uploaded | failed
    upload_status: str = Field(
        default="pending",
        index=True,
    )

    upload_error: str | None = None

    uploaded_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

# app/schemas/live.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

LiveSessionStatus = Literal["active", "completed"]
UploadStatus = Literal["pending", "uploaded", "failed"]


class LiveSessionCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    session_name: str = Field(max_length=255)
    session_date: date

    @field_validator("session_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("session_name cannot be empty")
        return v


class LiveSessionRead(SQLModel):
    id: uuid.UUID
    session_name: str
    session_date: date
    status: LiveSessionStatus
    created_at: datetime


class LiveProductCreate(SQLModel):
    """
    Add a product to a session.

    If product_name is omitted, the catalog row for product_code is used.
    """

    model_config = ConfigDict(extra="forbid")

    product_code: str = Field(max_length=100)
    product_name: str | None = None
    variant: str | None = None
    prepared_quantity: int = Field(default=0, ge=0)

    @field_validator("product_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_code cannot be empty")
        return v


class LiveProductRead(SQLModel):
    id: uuid.UUID
    live_session_id: uuid.UUID
    product_code: str
    product_name: str
    variant: str | None
    prepared_quantity: int
    sold_quantity: int


class LiveOrderCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    live_session_id: uuid.UUID
    live_product_id: uuid.UUID
    order_code: str
    quantity: int = Field(default=1, gt=0)

    @field_validator("order_code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("order_code cannot be empty")
        return v


class LiveOrderRead(SQLModel):
    id: uuid.UUID
    order_code: str
    live_session_id: uuid.UUID
    live_product_id: uuid.UUID
    quantity: int
    is_oversell: bool
    tpos_order_id: str | None
    upload_status: UploadStatus
    upload_error: str | None
    uploaded_at: datetime | None
    created_at: datetime


class TposOrderLink(SQLModel):
    """
    Payload linking every live order with this order_code to a TPOS order.
    """

    model_config = ConfigDict(extra="forbid")

    tpos_order_id: str

    @field_validator("tpos_order_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tpos_order_id cannot be empty")
        return v

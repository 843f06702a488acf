# app/schemas/tpos.py
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

BatchItemStatus = Literal["succeeded", "failed", "not_attempted"]


class OrderLineAdd(SQLModel):
    """
    Append a catalog product to a TPOS sale order.

    If the product is already on the order, its quantity is increased.
    """

    model_config = ConfigDict(extra="forbid")

    product_code: str
    quantity: int = Field(default=1, gt=0)

    @field_validator("product_code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_code cannot be empty")
        return v


class OrderLineQuantityUpdate(SQLModel):
    """
    Set the quantity of a product line on a TPOS sale order.
    Quantity 0 removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=0)


class TposOrderMutationRead(SQLModel):
    tpos_order_id: str
    product_code: str
    tpos_product_id: int
    quantity: int
    total_quantity: float
    total_amount: float


class BatchItemResult(SQLModel):
    """
    Outcome for one item of a batch (an order code or a product code).
    """

    key: str
    status: BatchItemStatus
    external_id: str | None = None
    error: str | None = None


class BatchUploadRequest(SQLModel):
    """
    Order codes to push to TPOS, processed in the given order.
    Empty means every order code of the session not uploaded yet.
    """

    model_config = ConfigDict(extra="forbid")

    order_codes: list[str] = Field(default_factory=list)


class BatchResult(SQLModel):
    total: int
    succeeded: int
    failed: int
    not_attempted: int
    first_error: str | None
    items: list[BatchItemResult]

    @classmethod
    def from_items(cls, items: list[BatchItemResult]) -> "BatchResult":
        first_error = next((i.error for i in items if i.status == "failed"), None)
        return cls(
            total=len(items),
            succeeded=sum(1 for i in items if i.status == "succeeded"),
            failed=sum(1 for i in items if i.status == "failed"),
            not_attempted=sum(1 for i in items if i.status == "not_attempted"),
            first_error=first_error,
            items=items,
        )

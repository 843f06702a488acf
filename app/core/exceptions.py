# app/core/exceptions.py
from fastapi import HTTPException, status


class DuplicateProductCode(HTTPException):
    """
    Raised when committing generated variants would reuse a product code
    that already exists (in the catalog or twice in the same batch).

    The whole batch is rejected; nothing is written.
    """

    def __init__(self, codes: list[str]):
        self.codes = sorted(set(codes))
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Product code already exists",
                "codes": self.codes,
            },
        )


class UnlinkedExternalProduct(HTTPException):
    """
    Raised when an external order mutation references a product that has
    no stored TPOS product id. No network call is made.
    """

    def __init__(self, product_code: str):
        self.product_code = product_code
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Product {product_code} is not linked to TPOS",
        )


class ExternalSyncFailure(HTTPException):
    """
    Network / HTTP failure while reading from or writing to TPOS.

    Batch loops must stop at the first one of these.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.upstream_status = status_code
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=message,
        )

# app/services/tpos_sync_service.py
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.exceptions import ExternalSyncFailure, UnlinkedExternalProduct
from app.core.order_locks import OrderLockRegistry, order_locks
from app.core.tpos_client import TPOSClient, TPOSProductRef
from app.core.variant_attributes import AxisKind, classify_variant, normalize_label
from app.models.live import LiveOrder
from app.models.product import Product
from app.repositories.live_repo import LiveRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.tpos import BatchItemResult, BatchResult, TposOrderMutationRead

logger = logging.getLogger(__name__)

LineMode = Literal["add", "set"]

# TPOS sale-order line defaults (one piece, unit "Cái")
DEFAULT_UOM_ID = 1
DEFAULT_UOM_NAME = "Cái"


def build_order_line(ref: TPOSProductRef, quantity: int) -> dict[str, Any]:
    return {
        "ProductId": ref.id,
        "ProductName": ref.name,
        "ProductNameGet": ref.name_get,
        "UOMId": DEFAULT_UOM_ID,
        "UOMName": DEFAULT_UOM_NAME,
        "Quantity": quantity,
        "Price": ref.price,
        "Factor": 1,
        "ProductWeight": 0,
    }


def splice_order_line(
    order: dict[str, Any],
    line: dict[str, Any],
    mode: LineMode,
) -> dict[str, Any]:
    """
    Return a copy of a TPOS order with `line` merged into `Details`.

    - mode="add": append the line, or increase the quantity of the line
      with the same ProductId.
    - mode="set": replace the quantity of that line (append if absent);
      quantity 0 removes it.

    TotalQuantity / TotalAmount are recomputed from the resulting lines and
    the OData `@odata.context` annotation is dropped (TPOS rejects it on PUT).
    """
    payload = copy.deepcopy(order)
    payload.pop("@odata.context", None)

    details: list[dict[str, Any]] = list(payload.get("Details") or [])
    index = next(
        (i for i, d in enumerate(details) if d.get("ProductId") == line["ProductId"]),
        None,
    )

    if index is None:
        if line["Quantity"] > 0:
            details.append(dict(line))
    else:
        existing = dict(details[index])
        if mode == "add":
            existing["Quantity"] = (existing.get("Quantity") or 0) + line["Quantity"]
        else:
            existing["Quantity"] = line["Quantity"]
        existing["Price"] = line["Price"]
        if existing["Quantity"] > 0:
            details[index] = existing
        else:
            del details[index]

    payload["Details"] = details
    payload["TotalQuantity"] = sum(d.get("Quantity") or 0 for d in details)
    payload["TotalAmount"] = sum(
        (d.get("Quantity") or 0) * (d.get("Price") or 0) for d in details
    )
    return payload


# -------- Variant upload payloads --------

# TPOS attributes in the order TPOS lists attribute lines
TPOS_ATTRIBUTES: dict[AxisKind, dict[str, Any]] = {
    AxisKind.TEXT_SIZE: {"Id": 1, "Name": "Size Chữ", "Code": "SZCh", "Sequence": 1},
    AxisKind.NUMBER_SIZE: {"Id": 4, "Name": "Size Số", "Code": "SZS", "Sequence": 2},
    AxisKind.COLOR: {"Id": 3, "Name": "Màu", "Code": "mau", "Sequence": 3},
}

# Nested objects TPOS rejects inside ProductVariants on UpdateV2
_VARIANT_NESTED_KEYS = ("UOM", "Categ", "UOMPO", "POSCateg")


def split_variant_label(label: str | None) -> list[tuple[AxisKind, str]]:
    """
    "M, Xanh Đen" -> [(TEXT_SIZE, "M"), (COLOR, "Xanh Đen")]
    """
    parts = [normalize_label(p) for p in (label or "").split(",")]
    return [(classify_variant(p), p) for p in parts if p]


def tpos_attribute_value(row: dict[str, Any], kind: AxisKind) -> dict[str, Any]:
    """AttributeValue entry for one TPOS value row on the axis `kind`."""
    attribute = TPOS_ATTRIBUTES[kind]
    return {
        "Id": row["Id"],
        "Name": row["Name"],
        "Code": row.get("Code"),
        "Sequence": row.get("Sequence"),
        "AttributeId": attribute["Id"],
        "AttributeName": attribute["Name"],
        "PriceExtra": None,
        "NameGet": f"{attribute['Name']}: {row['Name']}",
        "DateCreated": None,
    }


def build_attribute_lines(values: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Group attribute values into TPOS AttributeLines (sizes first, then
    color). Values are deduplicated by Id, first occurrence wins.
    """
    lines: list[dict[str, Any]] = []
    for attribute in TPOS_ATTRIBUTES.values():
        seen: set[int] = set()
        line_values: list[dict[str, Any]] = []
        for value in values:
            if value.get("AttributeId") != attribute["Id"] or value["Id"] in seen:
                continue
            seen.add(value["Id"])
            line_values.append(value)
        if not line_values:
            continue
        lines.append(
            {
                "Attribute": {**attribute, "CreateVariant": True},
                "Values": line_values,
                "AttributeId": attribute["Id"],
            }
        )
    return lines


def build_template_variant(
    template: dict[str, Any],
    product: Product,
    values: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    New ProductVariants entry for a local variant product.

    DefaultCode is the local product code, so the variant can be found by
    exact code lookup after the template is saved.
    """
    names = ", ".join(v["Name"] for v in values)
    name = f"{template.get('Name')} ({names})"
    return {
        "Id": 0,
        "DefaultCode": product.product_code,
        "NameTemplate": template.get("Name"),
        "NameTemplateNoSign": template.get("NameNoSign"),
        "ProductTmplId": template.get("Id"),
        "Name": name,
        "NameGet": name,
        "UOMId": 0,
        "CategId": 0,
        "PriceVariant": product.selling_price or template.get("ListPrice") or 0,
        "LstPrice": 0,
        "ListPrice": 0,
        "StandardPrice": 0,
        "QtyAvailable": 0,
        "VirtualAvailable": 0,
        "Weight": 0,
        "SaleOK": True,
        "PurchaseOK": True,
        "Active": True,
        "AvailableInPOS": True,
        "IsDiscount": False,
        "Type": "product",
        "InvoicePolicy": "order",
        "PurchaseMethod": "receive",
        "SaleDelay": 0,
        "Version": 0,
        "InitInventory": 0,
        "Thumbnails": [],
        "TaxesIds": [],
        "NameCombos": [],
        "AttributeValues": [{**v, "Code": None} for v in values],
    }


def build_template_payload(
    template: dict[str, Any],
    new_variants: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    UpdateV2 body: the fetched template with `new_variants` merged in.

    Existing variants stay as they are (minus nested objects). A new
    variant whose DefaultCode already exists on the template reuses that
    variant's Id instead of creating a duplicate. AttributeLines cover
    the values of every active variant.
    """
    payload = copy.deepcopy(template)
    payload.pop("@odata.context", None)

    existing: list[dict[str, Any]] = []
    existing_ids: dict[str, int] = {}
    for variant in payload.get("ProductVariants") or []:
        kept = {k: v for k, v in variant.items() if k not in _VARIANT_NESTED_KEYS}
        existing.append(kept)
        if kept.get("DefaultCode") and kept.get("Id"):
            existing_ids[kept["DefaultCode"]] = kept["Id"]

    variants: list[dict[str, Any]] = []
    replaced: set[int] = set()
    for variant in new_variants:
        variant_id = existing_ids.get(variant["DefaultCode"])
        if variant_id:
            variant = {**variant, "Id": variant_id}
            replaced.add(variant_id)
        variants.append(variant)
    variants.extend(v for v in existing if v.get("Id") not in replaced)

    values = [
        value
        for variant in variants
        if variant.get("Active", True)
        for value in variant.get("AttributeValues") or []
    ]

    payload["Version"] = 0
    payload["AttributeLines"] = build_attribute_lines(values)
    payload["ProductVariants"] = variants
    payload["Items"] = []
    uom = payload.get("UOM") or {}
    payload["UOMLines"] = [
        {
            "Id": payload.get("Id"),
            "ProductTmplId": payload.get("Id"),
            "ProductTmplListPrice": None,
            "UOMId": uom.get("Id") or DEFAULT_UOM_ID,
            "TemplateUOMFactor": 0,
            "ListPrice": payload.get("ListPrice"),
            "Barcode": "",
            "Price": None,
            "ProductId": 0,
            "UOMName": None,
            "NameGet": None,
            "Factor": 0,
            "UOM": payload.get("UOM"),
        }
    ]
    payload["ComboProducts"] = []
    payload["ProductSupplierInfos"] = []
    return payload


class TposSyncService:
    """
    Keeps local products and live orders consistent with TPOS.

    Responsibilities:
      - link local products to TPOS product ids (exact code match)
      - create variant products on their TPOS product template
      - add / update lines on TPOS sale orders
      - push captured live orders to TPOS in a sequential batch

    Every order mutation is fetch -> splice -> PUT of the whole order,
    serialized per TPOS order id through `locks`.
    """

    def __init__(
        self,
        product_repo: ProductRepository,
        live_repo: LiveRepository,
        locks: OrderLockRegistry = order_locks,
    ):
        self.product_repo = product_repo
        self.live_repo = live_repo
        self.locks = locks

    # -------- Helpers --------

    def _get_product(self, session: Session, product_code: str) -> Product:
        product = self.product_repo.get_by_code(session, product_code)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product {product_code} not found",
            )
        return product

    @staticmethod
    def _require_linked(product: Product) -> int:
        if product.tpos_product_id is None:
            raise UnlinkedExternalProduct(product.product_code)
        return product.tpos_product_id

    @staticmethod
    def _revalidate(client: TPOSClient, product_code: str, tpos_product_id: int) -> TPOSProductRef:
        """
        Confirm the stored TPOS id still belongs to this code on TPOS.
        """
        ref = client.find_product_by_code(product_code)
        if ref is None:
            raise ExternalSyncFailure(f"Product {product_code} no longer exists on TPOS")
        if ref.id != tpos_product_id:
            raise ExternalSyncFailure(
                f"TPOS id for {product_code} changed "
                f"(stored {tpos_product_id}, TPOS has {ref.id})"
            )
        return ref

    # -------- Product linking --------

    def link_product(
        self,
        session: Session,
        client: TPOSClient,
        product_code: str,
    ) -> Product:
        """
        Store the TPOS product id for a local product.

        unlinked / failed -> uploading -> linked   (id stored)
                                       -> failed   (error stored, id stays empty)

        A linked product is returned unchanged.

        Raises:
            HTTPException(404): product missing locally or on TPOS.
            ExternalSyncFailure: TPOS request failed.
        """
        product = self._get_product(session, product_code)
        if product.tpos_sync_status == "linked" and product.tpos_product_id is not None:
            return product

        product.tpos_sync_status = "uploading"
        product.tpos_sync_error = None
        product = self.product_repo.update(session, product)

        try:
            ref = client.find_product_by_code(product.product_code)
        except ExternalSyncFailure as e:
            self._mark_link_failed(session, product, e.message)
            raise

        if ref is None:
            message = f"Product {product.product_code} not found on TPOS"
            self._mark_link_failed(session, product, message)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=message,
            )

        product.tpos_product_id = ref.id
        product.tpos_sync_status = "linked"
        product.updated_at = datetime.now(timezone.utc)
        logger.info("Linked %s to TPOS product %s", product.product_code, ref.id)
        return self.product_repo.update(session, product)

    def _mark_link_failed(self, session: Session, product: Product, message: str) -> None:
        product.tpos_product_id = None
        product.tpos_sync_status = "failed"
        product.tpos_sync_error = message
        product.updated_at = datetime.now(timezone.utc)
        self.product_repo.update(session, product)
        logger.warning("Linking %s failed: %s", product.product_code, message)

    def link_variants(
        self,
        session: Session,
        client: TPOSClient,
        base_code: str,
    ) -> BatchResult:
        """
        Link every variant of a base product, in code order.

        A variant missing on TPOS fails alone; a TPOS request failure
        stops the batch and the rest is reported as not attempted.
        """
        variants = self.product_repo.list_by_base_code(session, base_code)
        items: list[BatchItemResult] = []
        halted = False

        for variant in variants:
            code = variant.product_code
            if halted:
                items.append(BatchItemResult(key=code, status="not_attempted"))
                continue
            try:
                linked = self.link_product(session, client, code)
            except ExternalSyncFailure as e:
                items.append(BatchItemResult(key=code, status="failed", error=e.message))
                halted = True
                logger.warning("Variant linking for %s halted at %s", base_code, code)
                continue
            except HTTPException as e:
                items.append(BatchItemResult(key=code, status="failed", error=str(e.detail)))
                continue
            items.append(
                BatchItemResult(
                    key=code,
                    status="succeeded",
                    external_id=str(linked.tpos_product_id),
                )
            )

        return BatchResult.from_items(items)

    def upload_variants(
        self,
        session: Session,
        client: TPOSClient,
        base_code: str,
    ) -> BatchResult:
        """
        Create the variants of a base product on its TPOS product template.

        Steps:
          1. Find the base product's TPOS template by exact code.
          2. Map every unlinked variant's label to TPOS attribute values;
             a variant that cannot be mapped fails alone.
          3. Mark the mapped variants `uploading`, fetch the template,
             merge the new variants in and save it (UpdateV2).
          4. Look every uploaded variant up by code and link it.

        An ExternalSyncFailure while saving marks every uploading variant
        failed. One during step 4 fails that variant; the rest are marked
        failed as unverified and reported not attempted. No variant is left
        `uploading`.

        Raises:
            HTTPException(404): base product missing locally or on TPOS.
            ExternalSyncFailure: TPOS request failed before any change.
        """
        base = self._get_product(session, base_code)
        variants = self.product_repo.list_by_base_code(session, base.product_code)

        results: dict[str, BatchItemResult] = {}
        pending: list[Product] = []
        for variant in variants:
            if variant.tpos_sync_status == "linked" and variant.tpos_product_id is not None:
                results[variant.product_code] = BatchItemResult(
                    key=variant.product_code,
                    status="succeeded",
                    external_id=str(variant.tpos_product_id),
                )
            else:
                pending.append(variant)

        if pending:
            self._upload_pending_variants(session, client, base, pending, results)

        return BatchResult.from_items([results[v.product_code] for v in variants])

    def _upload_pending_variants(
        self,
        session: Session,
        client: TPOSClient,
        base: Product,
        pending: list[Product],
        results: dict[str, BatchItemResult],
    ) -> None:
        base_ref = client.find_product_by_code(base.product_code)
        if base_ref is None or base_ref.template_id is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Base product {base.product_code} not found on TPOS",
            )

        value_index: dict[AxisKind, dict[str, dict[str, Any]]] = {}
        mapped: list[tuple[Product, list[dict[str, Any]]]] = []
        for variant in pending:
            values, error = self._resolve_attribute_values(client, variant, value_index)
            if error:
                self._mark_link_failed(session, variant, error)
                results[variant.product_code] = BatchItemResult(
                    key=variant.product_code, status="failed", error=error
                )
            else:
                mapped.append((variant, values))

        if not mapped:
            return

        for variant, _ in mapped:
            variant.tpos_sync_status = "uploading"
            variant.tpos_sync_error = None
            session.add(variant)
        session.commit()

        try:
            template = client.get_product_template(base_ref.template_id)
            payload = build_template_payload(
                template,
                [build_template_variant(template, v, values) for v, values in mapped],
            )
            client.update_product_template(payload)
        except ExternalSyncFailure as e:
            for variant, _ in mapped:
                self._mark_link_failed(session, variant, e.message)
                results[variant.product_code] = BatchItemResult(
                    key=variant.product_code, status="failed", error=e.message
                )
            logger.warning("Variant upload for %s failed: %s", base.product_code, e.message)
            return

        logger.info(
            "Uploaded %d variants of %s to TPOS template %s",
            len(mapped),
            base.product_code,
            base_ref.template_id,
        )

        halted_by: str | None = None
        for variant, _ in mapped:
            code = variant.product_code
            if halted_by:
                self._mark_link_failed(
                    session, variant, f"Upload not verified: {halted_by}"
                )
                results[code] = BatchItemResult(key=code, status="not_attempted")
                continue
            try:
                ref = client.find_product_by_code(code)
            except ExternalSyncFailure as e:
                self._mark_link_failed(session, variant, e.message)
                results[code] = BatchItemResult(key=code, status="failed", error=e.message)
                halted_by = e.message
                continue
            if ref is None:
                message = f"Product {code} not found on TPOS after upload"
                self._mark_link_failed(session, variant, message)
                results[code] = BatchItemResult(key=code, status="failed", error=message)
                continue

            variant.tpos_product_id = ref.id
            variant.tpos_sync_status = "linked"
            variant.tpos_sync_error = None
            variant.updated_at = datetime.now(timezone.utc)
            self.product_repo.update(session, variant)
            results[code] = BatchItemResult(
                key=code, status="succeeded", external_id=str(ref.id)
            )

    @staticmethod
    def _resolve_attribute_values(
        client: TPOSClient,
        variant: Product,
        value_index: dict[AxisKind, dict[str, dict[str, Any]]],
    ) -> tuple[list[dict[str, Any]], str | None]:
        """
        TPOS attribute values for a variant's label, or an error message.

        `value_index` caches TPOS values per axis by normalized name.
        """
        parts = split_variant_label(variant.variant)
        if not parts:
            return [], f"Variant {variant.product_code} has no variant label"

        values: list[dict[str, Any]] = []
        for kind, label in parts:
            if kind not in TPOS_ATTRIBUTES:
                return [], f"'{label}' is not a known size or color"
            if kind not in value_index:
                rows = client.list_attribute_values(TPOS_ATTRIBUTES[kind]["Id"])
                value_index[kind] = {
                    normalize_label(str(row["Name"])): row
                    for row in rows
                    if row.get("Id") is not None and row.get("Name")
                }
            row = value_index[kind].get(label)
            if row is None:
                return [], f"'{label}' does not exist on TPOS"
            values.append(tpos_attribute_value(row, kind))
        return values, None

    # -------- Order mutations --------

    def add_order_line(
        self,
        session: Session,
        client: TPOSClient,
        tpos_order_id: str,
        product_code: str,
        quantity: int,
    ) -> TposOrderMutationRead:
        """Append a product to a TPOS order (or increase its quantity)."""
        return self._mutate_order_line(
            session, client, tpos_order_id, product_code, quantity, "add"
        )

    def set_order_line_quantity(
        self,
        session: Session,
        client: TPOSClient,
        tpos_order_id: str,
        product_code: str,
        quantity: int,
    ) -> TposOrderMutationRead:
        """Set the quantity of a product line on a TPOS order (0 removes it)."""
        return self._mutate_order_line(
            session, client, tpos_order_id, product_code, quantity, "set"
        )

    def _mutate_order_line(
        self,
        session: Session,
        client: TPOSClient,
        tpos_order_id: str,
        product_code: str,
        quantity: int,
        mode: LineMode,
    ) -> TposOrderMutationRead:
        product = self._get_product(session, product_code)
        tpos_product_id = self._require_linked(product)

        with self.locks.hold(tpos_order_id):
            ref = self._revalidate(client, product.product_code, tpos_product_id)
            order = client.get_order(tpos_order_id)
            payload = splice_order_line(order, build_order_line(ref, quantity), mode)
            client.put_order(tpos_order_id, payload)

        logger.info(
            "TPOS order %s: %s %s x%s",
            tpos_order_id,
            mode,
            product.product_code,
            quantity,
        )
        return TposOrderMutationRead(
            tpos_order_id=tpos_order_id,
            product_code=product.product_code,
            tpos_product_id=tpos_product_id,
            quantity=quantity,
            total_quantity=payload["TotalQuantity"],
            total_amount=payload["TotalAmount"],
        )

    # -------- Live order batch upload --------

    def upload_session_orders(
        self,
        session: Session,
        client: TPOSClient,
        live_session_id: uuid.UUID,
        order_codes: list[str] | None = None,
    ) -> BatchResult:
        """
        Push captured live orders to their TPOS sale orders.

        Order codes are processed one after another in the given order
        (default: every code of the session not uploaded yet, in capture
        order). Per order code:
          1. All its lines must reference linked products.
          2. The TPOS order is fetched, each line's quantity is set, and
             the whole order is PUT back.
          3. Local rows are marked uploaded.

        A failed item (unlinked product, missing TPOS order id) does not
        stop the batch. An ExternalSyncFailure does: later codes are
        reported as not attempted. Nothing is rolled back.
        """
        if self.live_repo.get_session_by_id(session, live_session_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Live session not found",
            )

        if not order_codes:
            order_codes = self._pending_order_codes(session, live_session_id)

        items: list[BatchItemResult] = []
        halted = False

        for order_code in order_codes:
            if halted:
                items.append(BatchItemResult(key=order_code, status="not_attempted"))
                continue

            orders = self.live_repo.list_orders_by_code(session, order_code, live_session_id)
            tpos_order_id = next((o.tpos_order_id for o in orders if o.tpos_order_id), None)

            try:
                self._upload_order_group(session, client, order_code, orders, tpos_order_id)
            except ExternalSyncFailure as e:
                self._mark_orders(session, orders, "failed", e.message)
                items.append(
                    BatchItemResult(
                        key=order_code,
                        status="failed",
                        external_id=tpos_order_id,
                        error=e.message,
                    )
                )
                halted = True
                logger.warning("Live order upload halted at %s: %s", order_code, e.message)
                continue
            except HTTPException as e:
                self._mark_orders(session, orders, "failed", str(e.detail))
                items.append(
                    BatchItemResult(
                        key=order_code,
                        status="failed",
                        external_id=tpos_order_id,
                        error=str(e.detail),
                    )
                )
                continue

            self._mark_orders(session, orders, "uploaded", None)
            items.append(
                BatchItemResult(key=order_code, status="succeeded", external_id=tpos_order_id)
            )

        result = BatchResult.from_items(items)
        logger.info(
            "Live order upload for session %s: %s ok, %s failed, %s not attempted",
            live_session_id,
            result.succeeded,
            result.failed,
            result.not_attempted,
        )
        return result

    def _pending_order_codes(self, session: Session, live_session_id: uuid.UUID) -> list[str]:
        codes: list[str] = []
        for order in self.live_repo.list_orders(session, live_session_id):
            if order.upload_status != "uploaded" and order.order_code not in codes:
                codes.append(order.order_code)
        return codes

    def _upload_order_group(
        self,
        session: Session,
        client: TPOSClient,
        order_code: str,
        orders: list[LiveOrder],
        tpos_order_id: str | None,
    ) -> None:
        if not orders:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No live orders with code {order_code}",
            )
        if not tpos_order_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Order {order_code} has no TPOS order id",
            )

        # Quantity per product code, first-seen order
        quantities: dict[str, int] = {}
        for order in orders:
            live_product = self.live_repo.get_product_by_id(session, order.live_product_id)
            if live_product is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Live product for order {order_code} not found",
                )
            code = live_product.product_code
            quantities[code] = quantities.get(code, 0) + order.quantity

        linked: list[tuple[str, int]] = []
        for code in quantities:
            linked.append((code, self._require_linked(self._get_product(session, code))))

        with self.locks.hold(tpos_order_id):
            refs = [self._revalidate(client, code, tpos_id) for code, tpos_id in linked]
            payload = client.get_order(tpos_order_id)
            for ref in refs:
                payload = splice_order_line(
                    payload,
                    build_order_line(ref, quantities[ref.code]),
                    "set",
                )
            client.put_order(tpos_order_id, payload)

    def _mark_orders(
        self,
        session: Session,
        orders: list[LiveOrder],
        upload_status: str,
        error: str | None,
    ) -> None:
        if not orders:
            return
        now = datetime.now(timezone.utc)
        for order in orders:
            order.upload_status = upload_status
            order.upload_error = error
            if upload_status == "uploaded":
                order.uploaded_at = now
        self.live_repo.save_orders(session, orders)

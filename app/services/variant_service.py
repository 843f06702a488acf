# app/services/variant_service.py
import logging
from dataclasses import dataclass
from itertools import product as cartesian

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.exceptions import DuplicateProductCode
from app.core.variant_attributes import (
    AxisKind,
    GeneratedVariantCode,
    classify_variant,
    generate_code,
    normalize_label,
)
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.variant import VariantExpandRequest, VariantProductsCreate

logger = logging.getLogger(__name__)

# Fixed axis order for text, codes and names.
AXIS_ORDER: tuple[AxisKind, ...] = (
    AxisKind.TEXT_SIZE,
    AxisKind.COLOR,
    AxisKind.NUMBER_SIZE,
)


@dataclass(frozen=True)
class VariantCombination:
    variant_text: str
    variant_code: str
    full_code: str
    product_name: str
    has_collision: bool


def _axis_kind_for(label: str, axis: AxisKind) -> AxisKind:
    """
    Code kind for a value picked on `axis`.

    Color picks always use initials. A size pick that is not in the size
    tables uses the generic fallback code.
    """
    if axis is AxisKind.COLOR:
        return AxisKind.COLOR
    if classify_variant(label) is axis:
        return axis
    return AxisKind.UNKNOWN


def _name_suffix(code: GeneratedVariantCode, axis: AxisKind) -> str:
    if axis is AxisKind.COLOR:
        return f" {code.label}"
    return f" size {code.label}"


def _unique_labels(values: list[str]) -> list[str]:
    seen: set[str] = set()
    labels: list[str] = []
    for raw in values:
        label = normalize_label(raw)
        if label and label not in seen:
            seen.add(label)
            labels.append(label)
    return labels


def expand_combinations(
    product_code: str,
    product_name: str,
    size_texts: list[str],
    colors: list[str],
    size_numbers: list[str],
    used_codes: set[str] | None = None,
) -> list[VariantCombination]:
    """
    Cartesian product of the selected axis values.

    Iteration order is size-text -> color -> size-number (nested loops), so
    identical input with a fresh `used_codes` gives an identical list.
    Empty axes are omitted; all axes empty gives [].

    `variant_text` joins the picked labels with ", " ("M, Đỏ", not "M Đỏ"),
    the same separator the base product's merged `variant` label uses.

        >>> [c.full_code for c in expand_combinations("M800", "Áo", ["M", "L"], ["Cam"], [])]
        ['M800MC', 'M800LC']
    """
    if used_codes is None:
        used_codes = set()

    # Each distinct value gets one code per run, in axis order.
    axes: list[tuple[AxisKind, list[GeneratedVariantCode]]] = []
    for axis, values in zip(AXIS_ORDER, (size_texts, colors, size_numbers)):
        labels = _unique_labels(values)
        if not labels:
            continue
        codes = [generate_code(_axis_kind_for(label, axis), label, used_codes) for label in labels]
        axes.append((axis, codes))

    if not axes:
        return []

    kinds = [axis for axis, _ in axes]
    combinations: list[VariantCombination] = []
    for picks in cartesian(*(codes for _, codes in axes)):
        variant_code = "".join(pick.code for pick in picks)
        name = product_name + "".join(
            _name_suffix(pick, axis) for pick, axis in zip(picks, kinds)
        )
        combinations.append(
            VariantCombination(
                variant_text=", ".join(pick.label for pick in picks),
                variant_code=variant_code,
                full_code=f"{product_code}{variant_code}",
                product_name=name,
                has_collision=any(pick.has_collision for pick in picks),
            )
        )
    return combinations


def merge_variant_labels(old: str | None, new: str | None) -> str | None:
    """
    Union of two comma-separated variant labels, deduplicated and sorted.

        >>> merge_variant_labels("M, Đỏ", "L, M")
        'L, M, Đỏ'
    """
    if not new:
        return old
    if not old:
        return new
    parts = {p.strip() for p in f"{old},{new}".split(",") if p.strip()}
    return ", ".join(sorted(parts))


class VariantService:
    """
    Preview and commit of variant products.

    Responsibilities:
      - expand a base product into variant combinations
      - reject any batch whose codes already exist (all-or-nothing)
      - insert or update the base product, then insert the variants in
        one transaction
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def preview(self, payload: VariantExpandRequest) -> list[VariantCombination]:
        return expand_combinations(
            payload.product_code,
            payload.product_name,
            payload.size_texts,
            payload.colors,
            payload.size_numbers,
        )

    def create_variant_products(
        self,
        session: Session,
        payload: VariantProductsCreate,
    ) -> tuple[str, Product, list[Product]]:
        """
        Commit the combinations of `payload` to the catalog.

        Steps:
          1. Expand combinations.
          2. Reject duplicate full codes inside the batch.
          3. Reject full codes already in the catalog.
          4. Insert the base product, or merge the new labels into it.
          5. Insert every variant; commit once.

        Returns:
            ("created" | "updated", base product, variant products)

        Raises:
            DuplicateProductCode: nothing is written.
        """
        combinations = self.preview(payload)

        seen: set[str] = set()
        in_batch: list[str] = []
        for combo in combinations:
            if combo.full_code in seen:
                in_batch.append(combo.full_code)
            seen.add(combo.full_code)
        if in_batch:
            raise DuplicateProductCode(in_batch)

        existing = self.repo.find_existing_codes(session, [c.full_code for c in combinations])
        if existing:
            raise DuplicateProductCode(list(existing))

        picked = payload.size_texts + payload.colors + payload.size_numbers
        variant_label = ", ".join(picked) if picked else None

        base = self.repo.get_by_code(session, payload.product_code)
        if base is None:
            action = "created"
            base = Product(
                product_code=payload.product_code,
                product_name=payload.product_name,
                variant=variant_label,
                purchase_price=payload.purchase_price,
                selling_price=payload.selling_price,
                stock_quantity=payload.stock_quantity,
                supplier_name=payload.supplier_name,
            )
        else:
            action = "updated"
            base.variant = merge_variant_labels(base.variant, variant_label)
        session.add(base)

        variants = [
            Product(
                product_code=combo.full_code,
                product_name=combo.product_name,
                variant=combo.variant_text,
                base_product_code=payload.product_code,
                purchase_price=payload.purchase_price,
                selling_price=payload.selling_price,
                stock_quantity=payload.stock_quantity,
                supplier_name=payload.supplier_name,
            )
            for combo in combinations
        ]

        try:
            self.repo.add_all(session, variants)
            session.commit()
        except IntegrityError:
            session.rollback()
            raise DuplicateProductCode([c.full_code for c in combinations])

        session.refresh(base)
        for variant in variants:
            session.refresh(variant)

        logger.info(
            "Variant batch committed for %s (%s base, %d variants)",
            payload.product_code,
            action,
            len(variants),
        )
        return action, base, variants

# -*- coding: utf-8 -*-
"""Tests for combination expansion and variant commit."""

import pytest

from app.core.exceptions import DuplicateProductCode
from app.repositories.product_repo import ProductRepository
from app.schemas.variant import VariantExpandRequest, VariantProductsCreate
from app.services.variant_service import (
    VariantService,
    expand_combinations,
    merge_variant_labels,
)


class TestExpandCombinations:
    """Cartesian product in size-text -> color -> size-number order."""

    def test_tshirt_scenario(self):
        result = expand_combinations("M800", "Áo Thun", ["M", "L"], ["Cam"], [])

        assert len(result) == 2
        first = result[0]
        assert "M" in first.variant_text and "Cam" in first.variant_text
        assert first.variant_text == "M, Cam"
        assert first.variant_code == "MC"
        assert first.full_code == "M800MC"
        assert first.product_name == "Áo Thun size M Cam"
        assert not first.has_collision
        assert result[1].full_code == "M800LC"
        assert result[1].product_name == "Áo Thun size L Cam"

    def test_color_code_reused_across_sizes(self):
        result = expand_combinations("N1", "Đầm", ["M", "L"], ["Đỏ"], [])
        assert [c.variant_code for c in result] == ["MD", "LD"]

    def test_cardinality_skips_empty_axes(self):
        result = expand_combinations("N1", "Đầm", ["S", "M"], ["Đỏ", "Trắng", "Đen"], ["36", "38"])
        assert len(result) == 12

        only_colors = expand_combinations("N1", "Đầm", [], ["Đỏ", "Trắng"], [])
        assert [c.variant_code for c in only_colors] == ["D", "T"]

    def test_iteration_order(self):
        result = expand_combinations("P9", "Giày", ["S", "M"], ["Đen"], ["38", "39"])
        assert [c.variant_code for c in result] == [
            "SDA38",
            "SDA39",
            "MDA38",
            "MDA39",
        ]
        assert result[0].variant_text == "S, Đen, 38"
        assert result[0].product_name == "Giày size S Đen size 38"

    def test_all_axes_empty(self):
        assert expand_combinations("M800", "Áo Thun", [], [], []) == []

    def test_full_code_is_plain_concatenation(self):
        result = expand_combinations("M800", "Áo", ["S", "XL"], ["Xanh Đen", "Hồng"], ["40"])
        for combo in result:
            assert combo.full_code == "M800" + combo.variant_code

    def test_idempotent(self):
        args = ("M800", "Áo", ["S", "M"], ["Đen", "Đỏ", "Xanh Đậu"], ["40"])
        assert expand_combinations(*args) == expand_combinations(*args)

    def test_colliding_colors_are_flagged(self):
        result = expand_combinations("M800", "Áo", [], ["Đen", "Đỏ"], [])

        assert [c.variant_code for c in result] == ["D", "D1"]
        assert [c.has_collision for c in result] == [False, True]

    def test_accent_only_difference_is_a_collision(self):
        result = expand_combinations("M800", "Áo", [], ["Đen", "Den"], [])
        assert [c.variant_code for c in result] == ["D", "D1"]

    def test_duplicate_and_blank_values_dropped(self):
        result = expand_combinations("M800", "Áo", ["M", " M ", ""], ["Cam"], [])
        assert [c.full_code for c in result] == ["M800MC"]

    def test_off_table_size_uses_fallback_code(self):
        result = expand_combinations("M800", "Áo", ["Free size"], [], [])
        assert result[0].variant_code == "FREESIZE"
        assert result[0].product_name == "Áo size Free size"

    def test_fallback_code_does_not_push_color_suffix(self):
        result = expand_combinations("P1", "Ao", ["D"], ["Đỏ"], [])
        assert [(c.variant_code, c.has_collision) for c in result] == [("DD", False)]


class TestMergeVariantLabels:
    def test_merge_dedupes_and_sorts(self):
        assert merge_variant_labels("M, Đỏ", "L, M") == "L, M, Đỏ"

    def test_missing_sides(self):
        assert merge_variant_labels(None, "M") == "M"
        assert merge_variant_labels("M", None) == "M"


@pytest.fixture
def service():
    return VariantService(ProductRepository())


def _payload(**overrides) -> VariantProductsCreate:
    data = {
        "product_code": "M800",
        "product_name": "Áo Thun",
        "size_texts": ["M", "L"],
        "colors": ["Cam"],
        "size_numbers": [],
        "purchase_price": 80000,
        "selling_price": 150000,
        "stock_quantity": 2,
        "supplier_name": "Xưởng A",
    }
    data.update(overrides)
    return VariantProductsCreate(**data)


class TestPreview:
    def test_preview_uses_request_values(self, service):
        request = VariantExpandRequest(
            product_code=" M800 ",
            product_name="Áo Thun",
            size_texts=["M", "M"],
            colors=["Cam"],
        )
        assert [c.full_code for c in service.preview(request)] == ["M800MC"]


class TestCreateVariantProducts:
    def test_creates_base_and_variants(self, service, session):
        action, base, variants = service.create_variant_products(session, _payload())

        assert action == "created"
        assert base.product_code == "M800"
        assert base.variant == "M, L, Cam"
        assert [v.product_code for v in variants] == ["M800MC", "M800LC"]
        assert variants[0].product_name == "Áo Thun size M Cam"
        assert variants[0].variant == "M, Cam"
        assert all(v.base_product_code == "M800" for v in variants)
        assert all(v.selling_price == 150000 for v in variants)
        assert all(v.tpos_sync_status == "unlinked" for v in variants)
        assert all(v.tpos_product_id is None for v in variants)

    def test_same_full_code_twice_in_batch(self, service, session):
        # "S" + "Xanh Đen" and "SX" + "Đỏ" both give SXD
        with pytest.raises(DuplicateProductCode) as exc:
            service.create_variant_products(
                session,
                _payload(size_texts=["S", "SX"], colors=["Xanh Đen", "Đỏ"]),
            )

        assert exc.value.status_code == 409
        assert exc.value.codes == ["M800SXD"]
        repo = ProductRepository()
        assert repo.get_by_code(session, "M800") is None
        assert repo.get_by_code(session, "M800SD") is None

    def test_existing_base_is_merged(self, service, session, make_product):
        make_product("M800", "Áo Thun", variant="S")

        action, base, variants = service.create_variant_products(session, _payload())

        assert action == "updated"
        assert base.variant == "Cam, L, M, S"
        assert len(variants) == 2

    def test_existing_variant_code_rejects_whole_batch(self, service, session, make_product):
        make_product("M800LC", "Áo Thun size L Cam")

        with pytest.raises(DuplicateProductCode) as exc:
            service.create_variant_products(session, _payload())

        assert exc.value.status_code == 409
        assert exc.value.codes == ["M800LC"]
        repo = ProductRepository()
        assert repo.get_by_code(session, "M800MC") is None
        assert repo.get_by_code(session, "M800") is None

    def test_nothing_selected_only_touches_base(self, service, session):
        action, base, variants = service.create_variant_products(
            session,
            _payload(size_texts=[], colors=[]),
        )
        assert action == "created"
        assert base.variant is None
        assert variants == []

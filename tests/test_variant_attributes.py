# -*- coding: utf-8 -*-
"""Tests for variant label classification and code generation."""

import unicodedata

import pytest

from app.core.variant_attributes import (
    COLORS,
    NUMBER_SIZES,
    TEXT_SIZES,
    AxisKind,
    classify_variant,
    generate_code,
    generate_variant_code,
    product_name_with_variant,
)


class TestClassifyVariant:
    """Every label maps to exactly one axis."""

    def test_reference_tables_are_disjoint(self):
        colors, texts, numbers = set(COLORS), set(TEXT_SIZES), set(NUMBER_SIZES)
        assert not colors & texts
        assert not colors & numbers
        assert not texts & numbers

    @pytest.mark.parametrize(
        "labels, kind",
        [
            (COLORS, AxisKind.COLOR),
            (TEXT_SIZES, AxisKind.TEXT_SIZE),
            (NUMBER_SIZES, AxisKind.NUMBER_SIZE),
        ],
    )
    def test_reference_labels_are_stable(self, labels, kind):
        for label in labels:
            assert classify_variant(label) is kind
            assert classify_variant(label) is classify_variant(label)

    def test_unknown_label(self):
        assert classify_variant("Hoa nhí") is AxisKind.UNKNOWN
        assert classify_variant("") is AxisKind.UNKNOWN
        assert classify_variant("xl") is AxisKind.UNKNOWN

    def test_whitespace_and_decomposed_input(self):
        assert classify_variant("  M ") is AxisKind.TEXT_SIZE
        assert classify_variant(unicodedata.normalize("NFD", "Xanh Đậu")) is AxisKind.COLOR

    def test_custom_reference_sets(self):
        assert classify_variant("Lam", colors={"Lam"}) is AxisKind.COLOR
        assert classify_variant("Đỏ", colors=set()) is AxisKind.UNKNOWN


class TestGenerateCode:
    """Short code per axis."""

    def test_text_size_passthrough(self):
        assert generate_variant_code("M").code == "M"
        assert generate_variant_code("XXL").code == "XXL"

    def test_number_size_prefixed(self):
        assert generate_variant_code("40").code == "A40"
        assert generate_code(AxisKind.NUMBER_SIZE, "3").code == "A3"

    def test_color_single_word(self):
        assert generate_variant_code("Đỏ").code == "D"
        assert generate_variant_code("Cam").code == "C"
        assert generate_variant_code("Hồng").code == "H"

    def test_color_multi_word(self):
        assert generate_variant_code("Xanh Đen").code == "XD"
        assert generate_variant_code("Đỏ Đỏ").code == "DD"
        assert generate_variant_code("Xanh lá đậm").code == "XLD"

    def test_unknown_fallback(self):
        assert generate_variant_code("Hoa nhí").code == "HOANHI"
        assert generate_variant_code("đốm").code == "DOM"

    def test_deterministic_with_fresh_set(self):
        first = generate_variant_code("Xanh Đen", set())
        second = generate_variant_code("Xanh Đen", set())
        assert first == second
        assert not first.has_collision


class TestCodeCollisions:
    """Suffixing inside one generation run."""

    def test_second_color_with_same_initial_gets_suffix(self):
        used: set[str] = set()
        black = generate_variant_code("Đen", used)
        red = generate_variant_code("Đỏ", used)

        assert black.code == "D"
        assert red.code == "D1"
        assert not black.has_collision
        assert red.has_collision
        assert used == {"D", "D1"}

    def test_suffix_keeps_counting(self):
        used: set[str] = set()
        codes = [generate_variant_code(c, used).code for c in ("Đen", "Đỏ", "Den")]
        assert codes == ["D", "D1", "D2"]

    def test_sizes_do_not_touch_used_set(self):
        used: set[str] = set()
        generate_variant_code("M", used)
        generate_variant_code("40", used)
        assert used == set()

    def test_fallback_codes_do_not_touch_used_set(self):
        used: set[str] = set()
        first = generate_variant_code("Hoa nhí", used)
        second = generate_variant_code("Hoa nhí", used)
        assert (first.code, second.code) == ("HOANHI", "HOANHI")
        assert not second.has_collision
        assert used == set()

    def test_runs_are_independent(self):
        assert generate_variant_code("Đỏ", {"D"}).code == "D1"
        assert generate_variant_code("Đỏ", set()).code == "D"


class TestProductNameWithVariant:
    def test_color_appends_label(self):
        assert product_name_with_variant("Áo Thun", "Đỏ") == "Áo Thun Đỏ"

    def test_sizes_use_size_prefix(self):
        assert product_name_with_variant("Áo Thun", "M") == "Áo Thun size M"
        assert product_name_with_variant("Quần Jean", "30") == "Quần Jean size 30"

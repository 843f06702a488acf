# app/core/variant_attributes.py
"""
Variant attribute reference tables and short-code generation.

A variant label ("Đỏ", "XL", "38") belongs to exactly one axis:

  - color        -> initials of each word, diacritic-free ("Xanh Đen" -> "XD")
  - text-size    -> the label itself ("M" -> "M")
  - number-size  -> "A" + the label ("40" -> "A40")
  - unknown      -> uppercased label without diacritics or whitespace

Codes are unique inside one generation run only. The caller owns the
`used_codes` set for that run; it is never module state.
"""
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet

from app.core.text import remove_whitespace, split_words, to_upper_ascii


class AxisKind(str, Enum):
    COLOR = "color"
    TEXT_SIZE = "text-size"
    NUMBER_SIZE = "number-size"
    UNKNOWN = "unknown"


COLORS: tuple[str, ...] = (
    "Trắng", "Trắng Hồng", "Trắng Kem", "Trắng Sáng",
    "Đen", "Den", "Đen Bạc", "Đen Vàng",
    "Xám", "Xám đậm", "Xám nhạt", "Xám Chuột", "Xám Đen", "Xám Khói", "Xám Trắng",
    "Ghi",
    "Đỏ", "Đỏ đậm", "Đỏ tươi", "Đỏ Đỏ", "Đỏ bordo", "Đỏ burgundy",
    "Cam", "Cam đậm", "Cam Đào", "Cam Lanh", "Cam Sữa", "Cam coral", "Cam đất",
    "Vàng", "Vàng nhạt", "Vàng chanh", "Vàng gold", "Vàng Đồng", "Vàng pastel",
    "Xanh lá", "Xanh lá đậm", "Xanh lá nhạt", "Xanh lá cây",
    "Xanh dương", "Xanh dương đậm", "Xanh dương nhạt",
    "Xanh navy", "Xanh da trời", "Xanh biển", "Xanh ngọc", "Xanh rêu",
    "Xanh olive", "Xanh mint", "Xanh pastel", "Xanh baby", "Xanh petrol",
    "Xanh teal", "Xanh coban", "Xanh indigo", "Xanh Bơ", "Xanh Đậu",
    "Xanh Đen", "Xanh Ma",
    "Tím", "Tím đậm", "Tím nhạt", "Tím pastel", "Tím Môn",
    "Hồng", "Hồng đậm", "Hồng nhạt", "Hồng phấn", "Hồng pastel", "Hồng baby",
    "Hồng Đào", "Hồng Đất", "Hồng Dâu", "Hồng Rước",
    "Nâu", "Nâu đậm", "Nâu nhạt", "Nâu đỏ", "Nâu cafe", "Nâu chocolate",
    "Be", "Kem", "Bạc", "Bò", "Cà Phê", "Caro", "Cỏ Vít", "Đậm", "Nhạt", "Nude",
    "Sọc Đen", "Sọc Hồng", "Sọc Trắng", "Sọc Xám", "Sọc Xanh",
    "Jean Trắng", "Jean Xanh", "Muối Tiêu", "Trong", "Nhiều màu",
)

TEXT_SIZES: tuple[str, ...] = ("XS", "S", "M", "L", "XL", "XXL", "XXXL")

NUMBER_SIZES: tuple[str, ...] = (
    "1", "2", "3", "4", "5",
    "28", "29", "30", "31", "32", "33", "34", "35", "36", "37", "38",
    "39", "40", "41", "42", "43", "44", "45", "46", "47", "48",
)


def normalize_label(label: str) -> str:
    """NFC form without surrounding whitespace (input may arrive as NFD)."""
    return unicodedata.normalize("NFC", label).strip()


COLOR_SET: frozenset[str] = frozenset(normalize_label(c) for c in COLORS)
TEXT_SIZE_SET: frozenset[str] = frozenset(TEXT_SIZES)
NUMBER_SIZE_SET: frozenset[str] = frozenset(NUMBER_SIZES)


def classify_variant(
    label: str,
    colors: AbstractSet[str] = COLOR_SET,
    text_sizes: AbstractSet[str] = TEXT_SIZE_SET,
    number_sizes: AbstractSet[str] = NUMBER_SIZE_SET,
) -> AxisKind:
    """
    Classify a variant label into one axis.

    Total function: labels outside every table are `AxisKind.UNKNOWN`.
    """
    value = normalize_label(label)
    if value in colors:
        return AxisKind.COLOR
    if value in text_sizes:
        return AxisKind.TEXT_SIZE
    if value in number_sizes:
        return AxisKind.NUMBER_SIZE
    return AxisKind.UNKNOWN


@dataclass(frozen=True)
class GeneratedVariantCode:
    label: str
    kind: AxisKind
    base_code: str
    code: str

    @property
    def has_collision(self) -> bool:
        return self.code != self.base_code


def color_base_code(label: str) -> str:
    """
    Initials of a color label.

    Single word -> first letter; several words -> first letter of each.
    """
    words = split_words(normalize_label(label))
    return to_upper_ascii("".join(word[0] for word in words))


def fallback_code(label: str) -> str:
    return remove_whitespace(to_upper_ascii(normalize_label(label)))


def _claim_code(base_code: str, used_codes: set[str]) -> str:
    # D, D1, D2, ...
    code = base_code
    counter = 1
    while code in used_codes:
        code = f"{base_code}{counter}"
        counter += 1
    used_codes.add(code)
    return code


def generate_code(
    kind: AxisKind,
    label: str,
    used_codes: set[str] | None = None,
) -> GeneratedVariantCode:
    """
    Derive the short code for `label` on the given axis.

    `used_codes` is the run-scoped set of color codes already handed out.
    Only color codes are suffixed (1, 2, ...) when taken and registered in
    the set. Size and fallback codes are returned as-is and never touch it.
    """
    if used_codes is None:
        used_codes = set()

    value = normalize_label(label)

    if kind is AxisKind.TEXT_SIZE:
        return GeneratedVariantCode(value, kind, value, value)

    if kind is AxisKind.NUMBER_SIZE:
        code = f"A{value}"
        return GeneratedVariantCode(value, kind, code, code)

    if kind is AxisKind.COLOR:
        base_code = color_base_code(value)
        return GeneratedVariantCode(value, kind, base_code, _claim_code(base_code, used_codes))

    code = fallback_code(value)
    return GeneratedVariantCode(value, kind, code, code)


def generate_variant_code(
    label: str,
    used_codes: set[str] | None = None,
) -> GeneratedVariantCode:
    """Classify `label`, then generate its code."""
    return generate_code(classify_variant(label), label, used_codes)


def product_name_with_variant(product_name: str, label: str) -> str:
    """
    "Áo Thun" + "Đỏ" -> "Áo Thun Đỏ"
    "Áo Thun" + "M"  -> "Áo Thun size M"
    """
    value = normalize_label(label)
    if classify_variant(value) is AxisKind.COLOR:
        return f"{product_name} {value}"
    return f"{product_name} size {value}"

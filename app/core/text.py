# app/core/text.py
import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")


def strip_diacritics(value: str) -> str:
    """
    Remove Vietnamese (and other combining) diacritics.

    "Đ"/"đ" are separate letters, not combining marks, so they are mapped
    to "D"/"d" explicitly.

        >>> strip_diacritics("Xanh Đen")
        'Xanh Den'
    """
    decomposed = unicodedata.normalize("NFD", value)
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return without_marks.replace("Đ", "D").replace("đ", "d")


def to_upper_ascii(value: str) -> str:
    """Uppercase, diacritic-free form of a label."""
    return strip_diacritics(value).upper()


def remove_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


def split_words(value: str) -> list[str]:
    return [w for w in _WHITESPACE_RE.split(value.strip()) if w]

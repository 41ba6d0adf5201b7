"""Shared utility functions."""

import re

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")

_FILENAME_SPECIAL_CHARS = set("?[]/\\=<>:;,'\"&$#*()|~`!{}%+’«»”“\x00")
_FILENAME_DASHES_RE = re.compile(r"[\r\n\t -]+")


def sanitize_text_field(value: str) -> str:
    """Reduce a value to a single line of plain text.

    Removes script/style blocks and all remaining tags, percent-encoded
    octets, and line breaks, tabs and runs of whitespace.
    """
    value = _SCRIPT_STYLE_RE.sub("", value)
    value = _TAG_RE.sub("", value)
    value = _OCTET_RE.sub("", value)
    value = _WHITESPACE_RE.sub(" ", value)
    return value.strip()


def sanitize_file_name(name: str) -> str:
    """Make a filename safe to store and compare.

    ``"My Products (2024).csv"`` becomes ``"My-Products-2024.csv"``.
    """
    name = "".join(ch for ch in name if ch not in _FILENAME_SPECIAL_CHARS)
    name = _FILENAME_DASHES_RE.sub("-", name)
    return name.strip(".-_")

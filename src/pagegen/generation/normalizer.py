"""CSV normalizer: parse a delimited file into uniform, cleaned rows.

Encoding is judged per field: the file is decoded as UTF-8 with
``surrogateescape`` so that invalid byte sequences survive parsing, and each
field is then re-encoded to its original bytes and decoded either as UTF-8 or,
failing that, as Latin-1.
"""

from __future__ import annotations

import csv
import io
import re
from pathlib import Path
from typing import BinaryIO, TextIO

import structlog

from pagegen.common.errors import InvalidInput

logger = structlog.get_logger()

Row = dict[str, str]

# ASCII whitespace and NUL only; Unicode spaces survive the trim.
TRIM_CHARS = " \t\n\r\0\x0b"
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")

SMART_CHARACTERS = {
    "\u2018": "'",  # left single quote
    "\u2019": "'",  # right single quote / apostrophe
    "\u201c": '"',  # left double quote
    "\u201d": '"',  # right double quote
    "\u2013": "-",  # en dash
    "\u2014": "-",  # em dash
    "\u2026": "...",  # ellipsis
    "\u00a0": " ",  # non-breaking space
}
_SMART_TABLE = str.maketrans(SMART_CHARACTERS)

CsvSource = str | Path | bytes | BinaryIO | TextIO


def _repair_encoding(value: str) -> str:
    raw = value.encode("utf-8", "surrogateescape")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def normalize_value(value: str) -> str:
    """Clean a single CSV field.

    Trims ASCII whitespace, repairs non-UTF-8 input as Latin-1, strips ASCII
    control characters and replaces typographic punctuation with plain ASCII.
    """
    value = value.strip(TRIM_CHARS)
    value = _repair_encoding(value)
    value = _CONTROL_CHARS_RE.sub("", value)
    return value.translate(_SMART_TABLE)


def _read_text(source: CsvSource) -> str:
    if isinstance(source, (str, Path)):
        try:
            data: bytes | str = Path(source).read_bytes()
        except OSError as e:
            raise InvalidInput(f"Unable to open CSV file: {source}") from e
    elif isinstance(source, bytes):
        data = source
    else:
        try:
            data = source.read()
        except (OSError, ValueError) as e:
            raise InvalidInput("Unable to read CSV file.") from e

    if isinstance(data, bytes):
        data = data.decode("utf-8", "surrogateescape")
    return data.removeprefix("\ufeff")


def parse_csv(source: CsvSource, delimiter: str = ",") -> list[Row]:
    """Parse a CSV file into rows keyed by its (trimmed) header line.

    Records whose field count differs from the header count are dropped.
    Raises InvalidInput if the file cannot be opened or has no header line.
    """
    text = _read_text(source)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    try:
        header_record = next(reader, None)
        if not header_record:
            raise InvalidInput("Error reading CSV headers.")
        headers = [_repair_encoding(h.strip(TRIM_CHARS)) for h in header_record]

        rows: list[Row] = []
        dropped = 0
        for record in reader:
            if len(record) != len(headers):
                if record:
                    dropped += 1
                    logger.debug("csv_row_dropped", line=reader.line_num, fields=len(record), headers=len(headers))
                continue
            rows.append(dict(zip(headers, (normalize_value(v) for v in record))))
    except csv.Error as e:
        raise InvalidInput(f"Malformed CSV: {e}") from e

    logger.info("csv_parsed", headers=len(headers), rows=len(rows), dropped=dropped)
    return rows

"""CSV column normalization — handles BOM, trailing spaces, encoding quirks."""

from __future__ import annotations

import re

from aisql.domain.value_objects.file_ref import FileRef


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Removes BOM characters (\\ufeff) and surrounding whitespace
    - Collapses spaces and non-breaking spaces into one underscore
    - Lowercases and drops anything that is not a word character
    """
    name = name.replace("\ufeff", "").strip()
    name = re.sub(r"[\s\u00a0]+", "_", name)
    return re.sub(r"[^\w]", "", name.lower(), flags=re.UNICODE)


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def parse_tags(raw: str | None) -> list[str]:
    """Split 'billing; refund, account' into ['billing', 'refund', 'account']."""
    if not raw:
        return []
    parts = re.split(r"[,;|]+", raw.strip())
    return [p.strip().lower() for p in parts if p.strip()]


def parse_file_ref(raw: str | None) -> FileRef | None:
    """Parse a staged file reference such as '@IMAGES/receipts/r1.png'."""
    raw = clean_string(raw)
    if raw is None:
        return None
    return FileRef.parse(raw)

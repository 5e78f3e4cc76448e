"""CSV loader — reads source tables (emails, articles, staged files) into Records."""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path

from aisql.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    parse_file_ref,
    parse_tags,
)
from aisql.domain.entities.record import Record

logger = logging.getLogger(__name__)

DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%m/%d/%Y",
)


def _sniff_dialect(sample: str) -> type[csv.Dialect]:
    """Pick the delimiter (comma, semicolon or tab) most used in the header line."""
    if not sample:
        return csv.excel

    first_line = sample.splitlines()[0]
    counts = {d: first_line.count(d) for d in (",", ";", "\t")}
    best_delim = max(counts, key=counts.get)
    if counts[best_delim] == 0:
        return csv.excel

    class DynamicDialect(csv.excel):
        delimiter = best_delim

    return DynamicDialect


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization.

    Returns:
        List of dicts keyed by normalized column names.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = [
            {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            for raw_row in reader
        ]

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def load_records(
    file_path: Path,
    key_column: str = "ticket_id",
    content_column: str | None = "content",
    file_column: str | None = None,
    source: str | None = None,
) -> list[Record]:
    """Load a CSV file as Records.

    Rows without a key are dropped. A row may carry text, a staged file
    reference ('@STAGE/path'), or both; a bad file reference leaves the
    record without a file and is logged.
    """
    source = source or file_path.stem
    records = []
    for i, row in enumerate(_read_csv(file_path), start=2):
        key = row.get(key_column)
        if not key:
            logger.warning("%s line %d: missing '%s', skipping", file_path.name, i, key_column)
            continue

        file_ref = None
        if file_column:
            try:
                file_ref = parse_file_ref(row.get(file_column))
            except ValueError as e:
                logger.warning("%s line %d: %s", file_path.name, i, e)

        records.append(
            Record(
                key=key,
                content=row.get(content_column) if content_column else None,
                file=file_ref,
                user_id=_parse_int(row.get("user_id")),
                created_at=_parse_datetime(row.get("created_at")),
                source=source,
            )
        )
    logger.info("Parsed %d %s records", len(records), source)
    return records


def load_emails(file_path: Path) -> list[Record]:
    """Load the emails table: ticket_id, user_id, content, created_at."""
    return load_records(file_path, key_column="ticket_id", content_column="content", source="emails")


def load_articles(file_path: Path) -> list[Record]:
    """Load solution_center_articles: article_id, title, solution, tags.

    The record content is the title and solution joined, with tags appended,
    which is what the article gets embedded or summarized from.
    """
    records = []
    for row in _read_csv(file_path):
        key = row.get("article_id")
        if not key:
            continue
        parts = [row.get("title"), row.get("solution")]
        tags = parse_tags(row.get("tags"))
        if tags:
            parts.append("Tags: " + ", ".join(tags))
        records.append(
            Record(
                key=key,
                content="\n".join(p for p in parts if p) or None,
                source="solution_center_articles",
            )
        )
    logger.info("Parsed %d articles", len(records))
    return records


def load_source(
    file_path: Path,
    source: str = "records",
    key_column: str = "ticket_id",
    content_column: str | None = "content",
    file_column: str | None = None,
) -> list[Record]:
    """Load *file_path* as the named source table.

    ``articles`` reads the solution center layout; ``emails`` the emails
    table; anything else is a keyed table with the given columns.
    """
    if source == "articles":
        return load_articles(file_path)
    if source == "emails":
        return load_emails(file_path)
    return load_records(
        file_path, key_column=key_column, content_column=content_column, file_column=file_column
    )


def _parse_int(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(float(value.replace(",", ".")))
    except ValueError:
        return None


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    logger.warning("Could not parse date: %s", value)
    return None

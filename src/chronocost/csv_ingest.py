"""
Historical-projects CSV ingestion.

Provides thin helpers to:
- Reject uploads that are not declared as text/csv
- Decode uploaded bytes
- Parse CSV text into HistoricalRow dicts (header -> cell)

The format is deliberately naive: rows are split on newlines and cells on
commas. Quoted fields are not supported, so a comma or newline inside a
value shifts the remaining cells.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import structlog

from .errors import InvalidFileType
from .schema import HistoricalRow

logger = structlog.get_logger(__name__)

CSV_CONTENT_TYPE = "text/csv"


def ensure_csv_content_type(content_type: Optional[str]) -> None:
    """
    Raise InvalidFileType unless the declared MIME type is text/csv.

    Parameters such as "; charset=utf-8" are ignored.
    """
    base_type = (content_type or "").split(";", 1)[0].strip().lower()
    if base_type != CSV_CONTENT_TYPE:
        logger.info("Rejected historical data upload", content_type=content_type)
        raise InvalidFileType(content_type)


def decode_csv_bytes(data: bytes) -> str:
    """
    Decode uploaded CSV bytes as UTF-8.

    A leading BOM is dropped so the first header is not polluted, and bytes
    that are not valid UTF-8 become U+FFFD instead of failing the upload.
    """
    return data.decode("utf-8-sig", errors="replace")


def parse_historical_csv(text: str) -> List[HistoricalRow]:
    """
    Parse CSV text into rows keyed by the (trimmed) header names.

    - Cells are trimmed.
    - A row shorter than the header maps the missing columns to None.
    - Extra cells past the header are dropped.
    - Blank lines are not skipped; they become rows with empty values.
    """
    lines = [line.split(",") for line in text.split("\n")]
    headers = [h.strip() for h in lines[0]]

    rows: List[HistoricalRow] = []
    for cells in lines[1:]:
        row: HistoricalRow = {}
        for i, header in enumerate(headers):
            row[header] = cells[i].strip() if i < len(cells) else None
        rows.append(row)

    logger.debug("Parsed historical CSV", columns=headers, rows=len(rows))
    return rows


def load_historical_csv(path: Union[str, Path]) -> List[HistoricalRow]:
    """Read and parse a historical-projects CSV from disk."""
    data = Path(path).read_bytes()
    return parse_historical_csv(decode_csv_bytes(data))

"""
Tests for historical CSV ingestion.
"""

import pytest

from chronocost.csv_ingest import (
    decode_csv_bytes,
    ensure_csv_content_type,
    load_historical_csv,
    parse_historical_csv,
)
from chronocost.errors import InvalidFileType


def test_parse_keeps_file_order_and_trims(history_csv):
    rows = parse_historical_csv(history_csv)

    assert [r["projectName"] for r in rows] == ["Ring Road", "Metro Depot"]
    assert rows[0] == {
        "projectName": "Ring Road",
        "duration": "10",
        "cost": "1000",
        "delayed": "true",
        "actualCost": "1200",
        "estimatedCost": "1000",
    }


def test_headers_and_cells_are_trimmed():
    rows = parse_historical_csv(" duration , cost \n 12 ,  300 ")
    assert rows == [{"duration": "12", "cost": "300"}]


def test_keys_follow_header_order():
    rows = parse_historical_csv("b,a,c\n1,2,3")
    assert list(rows[0].keys()) == ["b", "a", "c"]


def test_short_row_maps_missing_columns_to_none():
    rows = parse_historical_csv("duration,cost,delayed\n5")
    assert rows == [{"duration": "5", "cost": None, "delayed": None}]


def test_extra_cells_are_dropped():
    rows = parse_historical_csv("duration\n5,6,7")
    assert rows == [{"duration": "5"}]


def test_crlf_line_endings_are_trimmed():
    rows = parse_historical_csv("duration,cost\r\n4,40\r\n")
    assert rows[0] == {"duration": "4", "cost": "40"}


def test_trailing_newline_yields_empty_row():
    rows = parse_historical_csv("duration,cost\n4,40\n")
    assert len(rows) == 2
    assert rows[1] == {"duration": "", "cost": None}


def test_quoted_commas_are_not_supported():
    rows = parse_historical_csv('projectName,cost\n"Smith, Jones",10')
    assert rows[0] == {"projectName": '"Smith', "cost": 'Jones"'}


def test_header_only_file_has_no_rows():
    assert parse_historical_csv("duration,cost") == []
    assert parse_historical_csv("") == []


@pytest.mark.parametrize(
    "content_type",
    ["text/csv", "text/csv; charset=utf-8", "TEXT/CSV"],
)
def test_csv_content_types_are_accepted(content_type):
    ensure_csv_content_type(content_type)


@pytest.mark.parametrize(
    "content_type",
    ["application/pdf", "application/vnd.ms-excel", "text/plain", "", None],
)
def test_other_content_types_are_rejected(content_type):
    with pytest.raises(InvalidFileType) as exc_info:
        ensure_csv_content_type(content_type)
    assert str(exc_info.value) == "Please upload a CSV file"
    assert exc_info.value.content_type == content_type


def test_decode_strips_bom():
    assert decode_csv_bytes("\ufeffduration\n1".encode("utf-8")) == "duration\n1"


def test_load_historical_csv_from_disk(tmp_path, history_csv):
    path = tmp_path / "history.csv"
    path.write_text(history_csv, encoding="utf-8")

    rows = load_historical_csv(path)

    assert len(rows) == 2
    assert rows[1]["delayed"] == "false"


def test_decode_replaces_invalid_bytes():
    assert decode_csv_bytes(b"delayed\ntrue\xff") == "delayed\ntrue\ufffd"

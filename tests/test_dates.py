"""
Date, week and paging helper tests.
"""

from datetime import date, datetime

import pytest

from okr_backend.core.exceptions import ValidationError
from okr_backend.utils.dates import (
    chunk,
    clamp_page,
    parse_date_only,
    parse_optional_year,
    parse_year,
    round_half_up,
    round_to,
    unique,
    week_key,
    week_keys,
    week_start_monday,
)


def test_week_starts_on_monday():
    assert week_start_monday(date(2025, 3, 16)) == datetime(2025, 3, 10)
    assert week_start_monday(datetime(2025, 3, 10, 23, 59)) == datetime(2025, 3, 10)
    assert week_key(date(2025, 3, 12)) == "2025-03-10"


def test_week_keys_oldest_first():
    assert week_keys(datetime(2025, 3, 10), 3) == ["2025-02-24", "2025-03-03", "2025-03-10"]


@pytest.mark.parametrize("raw, expected", [
    ("2025-03-12", date(2025, 3, 12)),
    ("2025-03-12T08:00:00Z", date(2025, 3, 12)),
    (datetime(2025, 3, 12, 8), date(2025, 3, 12)),
    (date(2025, 3, 12), date(2025, 3, 12)),
    ("", None),
    (None, None),
    ("12/03/2025", None),
])
def test_parse_date_only(raw, expected):
    assert parse_date_only(raw) == expected


@pytest.mark.parametrize("raw, expected", [("2025", 2025), (2025, 2025), ("2025.0", 2025)])
def test_parse_year(raw, expected):
    assert parse_year(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "0", "2025.5", "inf"])
def test_parse_year_rejects(raw):
    with pytest.raises(ValidationError) as exc_info:
        parse_year(raw)
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == 'Query param "year" is required (number)'


def test_parse_optional_year():
    assert parse_optional_year(None) is None
    assert parse_optional_year("") is None
    assert parse_optional_year("2024") == 2024
    with pytest.raises(ValidationError):
        parse_optional_year("nope")


@pytest.mark.parametrize("limit, offset, expected", [
    (None, None, (20, 0)),
    (0, 5, (20, 5)),
    (500, 0, (100, 0)),
    (-3, -1, (1, 0)),
    (10, 30, (10, 30)),
])
def test_clamp_page(limit, offset, expected):
    assert clamp_page(limit, offset, 20, 100) == expected


def test_chunk_and_unique():
    assert list(chunk([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]
    assert unique([3, None, 1, 3, 2, 1]) == [3, 1, 2]
    with pytest.raises(ValueError):
        list(chunk([1], 0))


def test_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_to(0.66666, 4) == 0.6667

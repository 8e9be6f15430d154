from datetime import date, datetime, timezone

import pytest

from licence_admin.services.formatting import format_date, format_date_for_input, format_id


@pytest.mark.parametrize(
    "value,expected",
    [(42, "#00042"), ("7", "#00007"), (123456, "#123456"), (None, "N/A"), (0, "N/A"), ("", "N/A")],
)
def test_format_id(value, expected):
    assert format_id(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2025-10-01", "2025-10-01"),
        ("2025-10-01T12:00:00.000Z", "2025-10-01"),
        (date(2024, 2, 29), "2024-02-29"),
        (datetime(2025, 1, 2, 3, 4, tzinfo=timezone.utc), "2025-01-02"),
        (None, "N/A"),
        ("", "N/A"),
        ("yesterday", "N/A"),
    ],
)
def test_format_date(value, expected):
    assert format_date(value) == expected


def test_format_date_for_input_blank_on_bad_input():
    assert format_date_for_input("1990-04-02") == "1990-04-02"
    assert format_date_for_input("not a date") == ""
    assert format_date_for_input(None) == ""

from datetime import datetime

import pytest

from statement_ingest.utils import cell_text, normalize_date


@pytest.mark.parametrize("raw,expected", [
    ("31/12/23", "2023-12-31"),
    ("31/12/2023", "2023-12-31"),
    ("31-12-2023", "2023-12-31"),
    ("2024-01-15", "2024-01-15"),
    ("15 Jan 2024", "2024-01-15"),
])
def test_normalize_date_common_formats(raw, expected):
    assert normalize_date(raw) == expected


def test_second_component_over_twelve_is_the_day():
    assert normalize_date("12/31/2023") == "2023-12-31"


def test_ambiguous_components_are_read_day_first():
    assert normalize_date("05/06/2024") == "2024-06-05"


def test_two_digit_year_pivot():
    assert normalize_date("01/01/49") == "2049-01-01"
    assert normalize_date("01/01/50") == "1950-01-01"


def test_spreadsheet_serial_numbers():
    assert normalize_date(45292) == "2024-01-01"
    assert normalize_date("45292") == "2024-01-01"
    assert normalize_date(45292.0) == "2024-01-01"


def test_numbers_outside_serial_range_are_rejected():
    assert normalize_date("12345") == ""
    assert normalize_date("99999") == ""


def test_datetime_values_from_workbooks():
    assert normalize_date(datetime(2024, 3, 5, 10, 30)) == "2024-03-05"


@pytest.mark.parametrize("raw", ["", None, "not a date", "32/13/2024", "31/02/2024", "Opening Balance"])
def test_unparseable_dates_return_empty(raw):
    assert normalize_date(raw) == ""


def test_cell_text_renders_missing_and_whole_numbers():
    assert cell_text(None) == ""
    assert cell_text(float("nan")) == ""
    assert cell_text(50000.0) == "50000"
    assert cell_text("  padded  ") == "padded"


@pytest.mark.parametrize("raw", ["Dec 2023", "15 Jan", "March", "2023 Q4"])
def test_partial_dates_are_rejected(raw):
    assert normalize_date(raw) == ""


def test_full_text_dates_do_not_depend_on_today():
    assert normalize_date("1 Feb 2024") == "2024-02-01"
    assert normalize_date("Feb 29, 2024") == "2024-02-29"

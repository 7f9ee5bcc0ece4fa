import pytest

from statement_ingest.utils import amount_is_negative, normalize_amount


@pytest.mark.parametrize("raw,expected", [
    ("₹12,345.00", 12345.0),
    ("$1,000.50", 1000.5),
    ("Rs. 1,200", 1200.0),
    ("INR 99.99", 99.99),
    ("(500)", 500.0),
    ("-500", 500.0),
    ("500-", 500.0),
    ("1,000.50 Cr", 1000.5),
    ("250.00 Dr", 250.0),
    (750, 750.0),
])
def test_normalize_amount(raw, expected):
    assert normalize_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", None, "abc", "-", "N/A", float("nan")])
def test_unparseable_amounts_are_zero(raw):
    assert normalize_amount(raw) == 0.0


@pytest.mark.parametrize("raw,negative", [
    ("(500)", True),
    ("-500", True),
    ("500-", True),
    ("₹ -1,200.00", True),
    ("500", False),
    ("500 Cr", False),
    ("", False),
])
def test_amount_is_negative(raw, negative):
    assert amount_is_negative(raw) is negative

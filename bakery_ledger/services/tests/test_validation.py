import pytest

from bakery_ledger.exceptions import ValidationError
from bakery_ledger.services.formatting import format_currency, product_summary
from bakery_ledger.services.validation import (
    clean_optional, parse_amount, parse_count, parse_discount, require_name,
)


@pytest.mark.parametrize("raw,expected", [("12,5", 12.5), (" 7.25 ", 7.25), (3, 3.0), ("0", 0.0)])
def test_parse_amount_accepts_comma_decimal(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "1.2.3", "nan", "inf", True])
def test_parse_amount_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_amount(raw)


def test_parse_count():
    assert parse_count("4") == 4
    assert parse_count(3.0) == 3
    for bad in ("-1", 2.5, "x", -3):
        with pytest.raises(ValidationError):
            parse_count(bad)


def test_require_name_trims():
    assert require_name("  Ali Market ", "Customer") == "Ali Market"
    with pytest.raises(ValidationError, match="Customer name is required"):
        require_name("   ", "Customer")


def test_clean_optional():
    assert clean_optional("  ") is None
    assert clean_optional(None) is None
    assert clean_optional(" 0555 ") == "0555"


def test_parse_discount():
    assert parse_discount("none", "15") == ("none", 0.0)
    assert parse_discount(None, None) == ("none", 0.0)
    assert parse_discount("percentage", "12,5") == ("percentage", 12.5)
    assert parse_discount("fixed", "") == ("fixed", 0.0)
    with pytest.raises(ValidationError):
        parse_discount("percentage", 150)
    with pytest.raises(ValidationError):
        parse_discount("fixed", -1)
    with pytest.raises(ValidationError):
        parse_discount("bogus", 1)


def test_format_currency():
    assert format_currency(1234.5) == "₺1,234.50"
    assert format_currency(-40) == "-₺40.00"


def test_product_summary():
    assert product_summary([("Lavash", 3), ("Pide", 2)], 5) == "3x Lavash, 2x Pide"
    assert product_summary([], 12) == "12 pcs"

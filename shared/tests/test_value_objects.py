"""Money arithmetic and rounding."""

import pytest

from shared.domain.value_objects import Money


def test_percent_rounds_half_up_to_whole_cent():
    assert Money(150).percent(5) == Money(8)
    assert Money(149).percent(5) == Money(7)


def test_add_and_subtract_same_currency():
    assert Money(1000) + Money(250) == Money(1250)
    assert Money(1000) - Money(250) == Money(750)


def test_currency_mismatch_is_rejected():
    with pytest.raises(ValueError):
        Money(100, "usd") + Money(100, "eur")


def test_negative_result_is_rejected():
    with pytest.raises(ValueError):
        Money(100) - Money(101)


def test_only_whole_cents_and_known_currencies():
    with pytest.raises(TypeError):
        Money(10.5)
    with pytest.raises(ValueError):
        Money(100, "btc")


def test_str_formats_major_units():
    assert str(Money(123456)) == "1,234.56 USD"
    assert Money.zero("eur").is_zero

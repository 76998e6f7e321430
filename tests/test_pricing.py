from decimal import Decimal

import pytest

from documents.services.pricing import line_haul, to_money, total_amount


def test_total_is_line_haul_plus_fees():
    charges = {"dump_fee": "75", "fuel_surcharge": "40.10", "tolls": "0"}
    assert line_haul("12.345", "10") == Decimal("123.45")
    assert total_amount("12.345", "10", charges) == Decimal("238.55")


def test_blank_inputs_count_as_zero():
    assert total_amount(None, "", {}) == Decimal("0.00")
    assert to_money("") == Decimal("0.00")


def test_rounds_half_up_to_cents():
    assert to_money("2.005") == Decimal("2.01")


def test_unknown_charge_rejected():
    with pytest.raises(ValueError):
        total_amount("10", "1", {"lumper": "30"})

from decimal import Decimal

import pytest

from services.pay import compute_amount_due, format_money


def test_amount_due_half_hour():
    assert compute_amount_due(30, Decimal("25")) == Decimal("12.50")


def test_amount_due_rounds_half_up_to_cents():
    # 7 min at $25/h = 2.91666...
    assert compute_amount_due(7, Decimal("25")) == Decimal("2.92")
    # 1 min at $0.30/h = 0.005
    assert compute_amount_due(1, Decimal("0.30")) == Decimal("0.01")


def test_amount_due_without_rate():
    assert compute_amount_due(45, None) is None


def test_amount_due_rejects_negatives():
    with pytest.raises(ValueError):
        compute_amount_due(-1, Decimal("20"))
    with pytest.raises(ValueError):
        compute_amount_due(10, Decimal("-5"))


def test_format_money():
    assert format_money(Decimal("12.5")) == "$12.50"
    assert format_money(None) == "$0.00"

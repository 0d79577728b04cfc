from decimal import Decimal

import pytest

from utils.math_utils import UINT256_MAX, market_price, to_fixed_point


class TestToFixedPoint:

    @pytest.mark.parametrize("value,decimals,expected", [
        (0.1, 6, 100000),
        (1850.5, 6, 1850500000),
        ("1.23456789", 6, 1234567),
        (0, 6, 0),
        (7, 0, 7),
        (Decimal("2.5"), 2, 250),
        (0.29, 2, 29),
    ])
    def test_floor_scaling(self, value, decimals, expected):
        assert to_fixed_point(value, decimals) == expected

    def test_never_rounds_up(self):
        assert to_fixed_point("0.9999999", 6) == 999999

    def test_large_values_fit_uint256(self):
        value = to_fixed_point("1" + "0" * 60, 6)
        assert value == 10 ** 66
        assert value < UINT256_MAX

    @pytest.mark.parametrize("value", [-1, "-0.000001", "abc", float("nan"), float("inf")])
    def test_rejected_values(self, value):
        with pytest.raises(ValueError):
            to_fixed_point(value)

    def test_negative_decimals_rejected(self):
        with pytest.raises(ValueError):
            to_fixed_point(1, -1)


def test_market_price():
    assert market_price(True) == 2 ** 256 - 1
    assert market_price(False) == 0

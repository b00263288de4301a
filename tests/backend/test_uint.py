"""Tests for bounded unsigned arithmetic.

Proves:
  1. Results beyond Uint128 raise ArithmeticOverflow instead of growing
  2. Subtraction below zero raises (default kind or the caller's kind)
  3. Division truncates and rejects zero divisors
  4. multiply_ratio multiplies before dividing
"""

import pytest

from errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivideByZero,
    FeeUnderflow,
)
from services.uint import (
    UINT64_MAX,
    UINT128_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    multiply_ratio,
    uint64,
    uint128,
)


class TestRangeChecks:
    def test_uint128_bounds(self):
        assert uint128(0) == 0
        assert uint128(UINT128_MAX) == UINT128_MAX
        with pytest.raises(ArithmeticOverflow):
            uint128(UINT128_MAX + 1)
        with pytest.raises(ArithmeticUnderflow):
            uint128(-1)

    def test_uint64_bounds(self):
        assert uint64(UINT64_MAX) == UINT64_MAX
        with pytest.raises(ArithmeticOverflow):
            uint64(UINT64_MAX + 1)

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            uint128(1.5)
        with pytest.raises(TypeError):
            uint128(True)


class TestCheckedOps:
    def test_add_overflow(self):
        assert checked_add(UINT128_MAX - 1, 1) == UINT128_MAX
        with pytest.raises(ArithmeticOverflow):
            checked_add(UINT128_MAX, 1)

    def test_sub_underflow_default_kind(self):
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticUnderflow):
            checked_sub(4, 5)

    def test_sub_underflow_custom_kind(self):
        with pytest.raises(FeeUnderflow):
            checked_sub(0, 1, error=FeeUnderflow)

    def test_mul_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            checked_mul(1 << 64, 1 << 64)
        assert checked_mul(1 << 63, 1 << 64) == 1 << 127

    def test_div_truncates(self):
        assert checked_div(9_999, 10_000) == 0
        assert checked_div(19_999, 10_000) == 1

    def test_div_by_zero(self):
        with pytest.raises(DivideByZero):
            checked_div(1, 0)

    def test_multiply_ratio_multiplies_first(self):
        # (3 / 10_000) * 5_000 would be 0; 3 * 5_000 / 10_000 is 1
        assert multiply_ratio(3, 5_000, 10_000) == 1

    def test_multiply_ratio_intermediate_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            multiply_ratio(UINT128_MAX, 2, 2)

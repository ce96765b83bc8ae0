# tests/test_money.py
from fractions import Fraction

import pytest

from money import Fixed, ZERO, exact, round_half_up

M = Fixed.parse


def test_round_half_up_goes_away_from_zero():
    assert round_half_up(Fraction(5, 1000), 2) == 1
    assert round_half_up(Fraction(-5, 1000), 2) == -1
    assert round_half_up(Fraction(4, 1000), 2) == 0
    assert round_half_up(Fraction(26265, 100000), 2) == 26


def test_parse_and_str():
    assert M("2.99") == Fixed(299, 2)
    assert str(M("2.99")) == "2.99"
    assert str(Fixed(-5, 2)) == "-0.05"
    assert str(M("1.25", 3)) == "1.250"
    assert str(Fixed(3, 0)) == "3"


def test_parse_rejects_extra_places_and_floats():
    with pytest.raises(ValueError):
        M("2.999")
    with pytest.raises(TypeError):
        M(2.99)


def test_mixed_places_arithmetic_and_equality():
    total = M("1.5") + M("0.125", 3)
    assert total == M("1.625", 3)
    assert total.places == 3
    assert Fixed(100, 2) == Fixed(1000, 3)
    assert hash(Fixed(100, 2)) == hash(Fixed(1000, 3))
    assert M("5.00") - M("1.65") == M("3.35")
    assert -M("0.47") == Fixed(-47, 2)


def test_ordering_is_exact():
    assert M("0.10") < M("0.2")
    assert M("1.00") > 0
    assert M("0.001", 3) > ZERO
    assert max(M("5.00"), M("3.99")) == M("5.00")


def test_times_rounds_half_up():
    assert M("3.09").times(Fraction(85, 1000)) == M("0.26")
    assert M("7.99").times(Fraction(9, 10)) == M("7.19")
    assert M("2.49").times(M("1.235", 3)) == M("3.08")


def test_rescaled():
    assert M("0.125", 3).rescaled(2) == M("0.13")
    assert M("4.00").rescaled(3).places == 3


def test_divmod_splits_into_whole_units():
    q, r = divmod(M("1.00"), 3)
    assert q == M("0.33")
    assert r == M("0.01")


def test_sum_and_exact():
    assert sum([M("0.25"), M("0.22")]) == M("0.47")
    assert exact(M("0.60")) == Fraction(3, 5)
    with pytest.raises(TypeError):
        exact(0.6)

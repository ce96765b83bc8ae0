"""
Fixed-point money and quantity values for the totals engine
"""
from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from functools import total_ordering
from typing import Tuple, Union

MONEY_PLACES = 2  # cents
WORK_PLACES = 3  # taxable bases, weights, unit prices


def round_half_up(value: Fraction, places: int) -> int:
    """
    Round an exact value to `places` decimals and return the scaled integer.
    Halves round away from zero.
    """
    scaled = Fraction(value) * 10 ** places
    q, r = divmod(abs(scaled.numerator), scaled.denominator)
    if 2 * r >= scaled.denominator:
        q += 1
    return -q if scaled < 0 else q


def exact(value: Union["Fixed", Fraction, int]) -> Fraction:
    """Exact rational value of a Fixed, Fraction or int"""
    if isinstance(value, Fixed):
        return Fraction(value.units, 10 ** value.places)
    if isinstance(value, (Fraction, int)) and not isinstance(value, bool):
        return Fraction(value)
    raise TypeError(f"expected Fixed, Fraction or int, got {type(value).__name__}")


@total_ordering
@dataclass(frozen=True, eq=False)
class Fixed:
    """Integer `units` scaled by 10**places, e.g. Fixed(299, 2) == 2.99"""
    units: int
    places: int = MONEY_PLACES

    @classmethod
    def parse(cls, text: Union[str, int, "Fixed"], places: int = MONEY_PLACES) -> "Fixed":
        """Parse a decimal string. Refuses values that need more than `places` decimals."""
        if isinstance(text, Fixed):
            text = str(text)
        if isinstance(text, float):
            raise TypeError("floats are not accepted, pass a decimal string")
        value = Fraction(str(text).strip()) * 10 ** places
        if value.denominator != 1:
            raise ValueError(f"{text!r} has more than {places} decimal places")
        return cls(int(value), places)

    @classmethod
    def from_fraction(cls, value: Fraction, places: int = MONEY_PLACES) -> "Fixed":
        return cls(round_half_up(value, places), places)

    def exact(self) -> Fraction:
        return Fraction(self.units, 10 ** self.places)

    def rescaled(self, places: int) -> "Fixed":
        """Same value at a different precision, rounding half up when narrowing"""
        return Fixed.from_fraction(self.exact(), places)

    def times(self, factor: Union["Fixed", Fraction, int], places: int = MONEY_PLACES) -> "Fixed":
        """Multiply by an exact factor and round half up to `places`"""
        return Fixed.from_fraction(self.exact() * exact(factor), places)

    def is_zero(self) -> bool:
        return self.units == 0

    def _aligned(self, other) -> Tuple[int, int, int]:
        other = other if isinstance(other, Fixed) else Fixed(_int(other), 0)
        places = max(self.places, other.places)
        return (self.units * 10 ** (places - self.places),
                other.units * 10 ** (places - other.places),
                places)

    def __add__(self, other) -> "Fixed":
        a, b, places = self._aligned(other)
        return Fixed(a + b, places)

    __radd__ = __add__

    def __sub__(self, other) -> "Fixed":
        a, b, places = self._aligned(other)
        return Fixed(a - b, places)

    def __rsub__(self, other) -> "Fixed":
        a, b, places = self._aligned(other)
        return Fixed(b - a, places)

    def __neg__(self) -> "Fixed":
        return Fixed(-self.units, self.places)

    def __divmod__(self, divisor: int) -> Tuple["Fixed", "Fixed"]:
        """Split into `divisor` equal parts in whole units, plus what is left over"""
        q, r = divmod(self.units, _int(divisor))
        return Fixed(q, self.places), Fixed(r, self.places)

    def __eq__(self, other) -> bool:
        if isinstance(other, Fraction):
            return self.exact() == other
        if not isinstance(other, (Fixed, int)) or isinstance(other, bool):
            return NotImplemented
        a, b, _ = self._aligned(other)
        return a == b

    def __lt__(self, other) -> bool:
        if isinstance(other, Fraction):
            return self.exact() < other
        if not isinstance(other, (Fixed, int)) or isinstance(other, bool):
            return NotImplemented
        a, b, _ = self._aligned(other)
        return a < b

    def __hash__(self) -> int:
        return hash(self.exact())

    def __str__(self) -> str:
        sign = "-" if self.units < 0 else ""
        if self.places == 0:
            return f"{sign}{abs(self.units)}"
        whole, frac = divmod(abs(self.units), 10 ** self.places)
        return f"{sign}{whole}.{frac:0{self.places}d}"

    def __repr__(self) -> str:
        return f"Fixed('{self}')"


def _int(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected Fixed or int, got {type(value).__name__}")
    return value


ZERO = Fixed(0)

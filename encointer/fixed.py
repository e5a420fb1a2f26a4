"""Signed fixed-point numbers with 64 integer and 64 fractional bits."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from fractions import Fraction
from typing import Optional, Union

FRAC_BITS = 64
MIN_BITS = -(1 << 127)
MAX_BITS = (1 << 127) - 1

_ONE_BITS = 1 << FRAC_BITS
_EXP_OVERFLOW_BOUND = 44
_EXP_UNDERFLOW_BOUND = -50

Number = Union["Fixed", int, float, Fraction, Decimal]


def _fits(bits: int) -> bool:
    return MIN_BITS <= bits <= MAX_BITS


def _clamp(bits: int) -> int:
    return max(MIN_BITS, min(MAX_BITS, bits))


def _as_fraction(value: object) -> Optional[Fraction]:
    if isinstance(value, Fixed):
        return Fraction(value.bits, _ONE_BITS)
    if isinstance(value, (int, float, Fraction, Decimal)):
        return Fraction(value)
    return None


@dataclass(frozen=True, eq=False)
class Fixed:
    """A binary fixed-point number stored as a 128-bit signed integer of bits."""

    bits: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.bits, int):
            raise TypeError(f"bits must be an int, not {type(self.bits).__name__}")
        if not _fits(self.bits):
            raise OverflowError(f"{self.bits} does not fit in 128 bits")

    @classmethod
    def from_num(cls, value: Number) -> Fixed:
        """Convert a number, rounding to the nearest representable value."""
        if isinstance(value, Fixed):
            return value
        return cls(round(Fraction(value) * _ONE_BITS))

    @classmethod
    def from_bits(cls, bits: int) -> Fixed:
        return cls(bits)

    @staticmethod
    def _coerce(value: Number) -> Fixed:
        return Fixed.from_num(value)

    @staticmethod
    def _checked(bits: int) -> Optional[Fixed]:
        return Fixed(bits) if _fits(bits) else None

    def checked_add(self, other: Number) -> Optional[Fixed]:
        return self._checked(self.bits + self._coerce(other).bits)

    def checked_sub(self, other: Number) -> Optional[Fixed]:
        return self._checked(self.bits - self._coerce(other).bits)

    def checked_mul(self, other: Number) -> Optional[Fixed]:
        return self._checked((self.bits * self._coerce(other).bits) >> FRAC_BITS)

    def saturating_add(self, other: Number) -> Fixed:
        return Fixed(_clamp(self.bits + self._coerce(other).bits))

    def saturating_sub(self, other: Number) -> Fixed:
        return Fixed(_clamp(self.bits - self._coerce(other).bits))

    @staticmethod
    def _strict(result: Optional[Fixed], operation: str) -> Fixed:
        if result is None:
            raise OverflowError(f"fixed-point {operation} overflowed")
        return result

    def __add__(self, other: Number) -> Fixed:
        return self._strict(self.checked_add(other), "addition")

    __radd__ = __add__

    def __sub__(self, other: Number) -> Fixed:
        return self._strict(self.checked_sub(other), "subtraction")

    def __rsub__(self, other: Number) -> Fixed:
        return self._coerce(other) - self

    def __mul__(self, other: Number) -> Fixed:
        return self._strict(self.checked_mul(other), "multiplication")

    __rmul__ = __mul__

    def __neg__(self) -> Fixed:
        return self._strict(self._checked(-self.bits), "negation")

    def __abs__(self) -> Fixed:
        return -self if self.bits < 0 else self

    def _compare(self, other: object) -> Optional[tuple[Fraction, Fraction]]:
        other_fraction = _as_fraction(other)
        if other_fraction is None:
            return None
        return Fraction(self.bits, _ONE_BITS), other_fraction

    def __eq__(self, other: object) -> bool:
        pair = self._compare(other)
        return NotImplemented if pair is None else pair[0] == pair[1]

    def __lt__(self, other: object) -> bool:
        pair = self._compare(other)
        return NotImplemented if pair is None else pair[0] < pair[1]

    def __le__(self, other: object) -> bool:
        pair = self._compare(other)
        return NotImplemented if pair is None else pair[0] <= pair[1]

    def __gt__(self, other: object) -> bool:
        pair = self._compare(other)
        return NotImplemented if pair is None else pair[0] > pair[1]

    def __ge__(self, other: object) -> bool:
        pair = self._compare(other)
        return NotImplemented if pair is None else pair[0] >= pair[1]

    def __hash__(self) -> int:
        return hash(Fraction(self.bits, _ONE_BITS))

    def __float__(self) -> float:
        return self.bits / _ONE_BITS

    def __bool__(self) -> bool:
        return self.bits != 0

    def to_fraction(self) -> Fraction:
        return Fraction(self.bits, _ONE_BITS)

    def __repr__(self) -> str:
        return f"Fixed({float(self)!r})"

    def __str__(self) -> str:
        return str(float(self))


def exp(x: Number) -> Fixed:
    """Natural exponential of ``x``; raises ``OverflowError`` if it does not fit."""
    x = Fixed.from_num(x)
    if x.bits == 0:
        return Fixed(_ONE_BITS)
    if x > _EXP_OVERFLOW_BOUND:
        raise OverflowError("exponential overflowed")
    if x < _EXP_UNDERFLOW_BOUND:
        return Fixed(0)
    with localcontext() as ctx:
        ctx.prec = 80
        scale = Decimal(_ONE_BITS)
        value = (Decimal(x.bits) / scale).exp() * scale
        bits = int(value.to_integral_value(rounding=ROUND_HALF_EVEN))
    if not _fits(bits):
        raise OverflowError("exponential overflowed")
    return Fixed(bits)
"""Integer helpers used for meetup assignment.

The checked helpers follow fixed-width integer semantics: they return
``None`` where the operation would overflow or divide by zero.
"""

from __future__ import annotations

from math import gcd
from random import Random
from typing import Optional

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


class _Overflow(ArithmeticError):
    """Raised internally when a fixed-width result does not fit."""


def _i64(value: int) -> int:
    if not I64_MIN <= value <= I64_MAX:
        raise _Overflow(value)
    return value


def _trunc_div(dividend: int, divisor: int) -> int:
    quotient = abs(dividend) // abs(divisor)
    return quotient if (dividend < 0) == (divisor < 0) else -quotient


def _trunc_rem(dividend: int, divisor: int) -> int:
    return dividend - divisor * _trunc_div(dividend, divisor)


def checked_modulo(dividend: int, divisor: int) -> Optional[int]:
    """Remainder truncated toward zero, or ``None`` for a zero divisor."""
    if divisor == 0:
        return None
    return _trunc_rem(dividend, divisor)


def checked_ceil_division(dividend: int, divisor: int) -> Optional[int]:
    """Ceiling of ``dividend / divisor`` for unsigned 64-bit values."""
    total = dividend + divisor
    if total > U64_MAX or total < 1 or divisor == 0:
        return None
    return (total - 1) // divisor


def is_coprime(a: int, b: int) -> bool:
    return get_greatest_common_denominator(a, b) == 1


def is_prime(n: int) -> bool:
    if n <= 3:
        return n > 1
    if n % 2 == 0 or n % 3 == 0:
        return False
    if n < 25:
        return True
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def get_greatest_common_denominator(a: int, b: int) -> int:
    """Greatest common divisor; 0 if either argument is 0."""
    if a == 0 or b == 0:
        return 0
    return gcd(a, b)


def find_prime_below(n: int) -> int:
    """Largest prime not above ``n``; 2 for ``n <= 2``."""
    if n <= 2:
        return 2
    if n % 2 == 0:
        n -= 1
    while n > 0:
        if is_prime(n):
            return n
        if n < 2:
            break
        n -= 2
    return 2


def find_random_coprime_below(upper_bound: int, rng: Random) -> int:
    """Pick a random number in ``[1, upper_bound)`` coprime to ``upper_bound``."""
    if upper_bound <= 1:
        return 0
    if upper_bound == 2:
        return 1
    candidates = list(range(1, upper_bound))
    rng.shuffle(candidates)
    return next((c for c in candidates if is_coprime(upper_bound, c)), 1)


def checked_mod_inv(a: int, module: int) -> Optional[int]:
    """Modular inverse of ``a`` modulo ``module`` using 64-bit signed arithmetic."""
    prev_r, r = module, a
    x, y = 0, 1
    try:
        while r != 0:
            if prev_r == I64_MIN and r == -1:
                return None
            quotient = _trunc_div(prev_r, r)
            x, y = y, _i64(x - _i64(quotient * y))
            prev_r, r = r, _trunc_rem(prev_r, r)
        while x < 0:
            if module <= 0:
                return None
            x = _i64(x + module)
    except _Overflow:
        return None
    return x
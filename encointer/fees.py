"""Conversion of native-token transaction fees into community currency."""

from __future__ import annotations

U128_MAX = 2**128 - 1

ONE_MICRO_KSM = 1_000_000
"""1 micro KSM with 12 decimals."""

ONE_KSM = 1_000_000 * ONE_MICRO_KSM
"""1 KSM with 12 decimals."""

ONE_KILO_KSM = 1_000 * ONE_KSM
"""1 Kilo-KSM with 12 decimals."""


def _saturating_mul(a: int, b: int) -> int:
    return min(a * b, U128_MAX)


def apply_fee_conversion_factor(balance: int, reward: int, fee_conversion_factor: int) -> int:
    """Community currency = KSM * fee conversion factor * reward.

    ``balance`` is in pKSM while the factor is in 1/KKSM, hence the division
    by one Kilo-KSM.
    """
    product = _saturating_mul(_saturating_mul(balance, reward), fee_conversion_factor)
    return product // ONE_KILO_KSM
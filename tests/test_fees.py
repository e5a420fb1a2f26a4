import pytest

from encointer.fees import (
    ONE_KILO_KSM,
    ONE_MICRO_KSM,
    U128_MAX,
    apply_fee_conversion_factor,
)

ONE_CC = 1 << 64


@pytest.mark.parametrize(
    "ksm_balance, ceremony_reward, conversion_factor, expected",
    [
        (5 * ONE_MICRO_KSM, 20 * ONE_CC, 100_000, ONE_CC // 100),
        (10 * ONE_MICRO_KSM, 20 * ONE_CC, 100_000, ONE_CC // 50),
        (5 * ONE_MICRO_KSM, 10 * ONE_CC, 100_000, ONE_CC // 200),
        (5_000 * ONE_MICRO_KSM, 20 * ONE_CC, 100_000, ONE_CC * 10),
        (5 * ONE_MICRO_KSM, 20_000_000 * ONE_CC, 100_000, ONE_CC * 10_000),
        (5 * ONE_MICRO_KSM, 20_000_000 * ONE_CC, 50_000, ONE_CC * 5_000),
    ],
)
def test_balance_to_community_balance_works(
    ksm_balance, ceremony_reward, conversion_factor, expected
):
    assert apply_fee_conversion_factor(ksm_balance, ceremony_reward, conversion_factor) == expected


def test_saturates_instead_of_overflowing():
    assert apply_fee_conversion_factor(U128_MAX, U128_MAX, 2) == U128_MAX // ONE_KILO_KSM


def test_zero_factor_gives_zero():
    assert apply_fee_conversion_factor(5 * ONE_MICRO_KSM, 20 * ONE_CC, 0) == 0
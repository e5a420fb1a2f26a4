"""Assignment of participants to meetups and meetups to locations."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from math import trunc
from typing import Optional, Sequence

from encointer.math import checked_ceil_division, checked_mod_inv, checked_modulo

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class _Overflow(ArithmeticError):
    """Raised internally when a fixed-width result does not fit."""


def _i64(value: int) -> int:
    if not _I64_MIN <= value <= _I64_MAX:
        raise _Overflow(value)
    return value


def _as_i64(value: int) -> int:
    """Reinterpret an unsigned 64-bit value as signed."""
    return ((value + 2**63) % 2**64) - 2**63


def _rem_euclid(value: int, divisor: int) -> int:
    if divisor == 0 or (value == _I64_MIN and divisor == -1):
        raise _Overflow(value)
    return value % abs(divisor)


@dataclass(frozen=True)
class AssignmentParams:
    """Parameters of the affine assignment function ``(i * s1 + s2) % m``."""

    m: int
    s1: int
    s2: int


@dataclass(frozen=True)
class Location:
    """A geographic location in degrees."""

    lat: float
    lon: float


def assignment_fn(
    participant_index: int, assignment_params: AssignmentParams, assignment_count: int
) -> Optional[int]:
    """Assign a participant to a meetup index, or ``None`` on overflow or zero modulus."""
    product = participant_index * assignment_params.s1
    if product > _U64_MAX:
        return None
    total = product + assignment_params.s2
    if total > _U64_MAX:
        return None
    reduced = checked_modulo(total, assignment_params.m)
    if reduced is None:
        return None
    return checked_modulo(reduced, assignment_count)


def validate_equal_mapping(
    num_participants: int, assignment_params: AssignmentParams, meetup_count: int
) -> bool:
    """Check that participants beyond ``m`` spread evenly over the meetups."""
    if num_participants < 2:
        return True
    remaining = max(num_participants - assignment_params.m, 0)
    max_per_meetup = checked_ceil_division(remaining, meetup_count) or 0

    counts: Counter[int] = Counter()
    for i in range(assignment_params.m, num_participants):
        index = assignment_fn(i, assignment_params, meetup_count)
        if index is None:
            return False
        counts[index] += 1
        if counts[index] > max_per_meetup:
            return False
    return True


def _t3(n: int, current_index: int, meetup_index: int, params: AssignmentParams, t2: int) -> Optional[int]:
    m = _as_i64(params.m)
    try:
        value = _i64(_as_i64(n) * _as_i64(current_index))
        value = _i64(value + _as_i64(meetup_index))
        value = _i64(value - _as_i64(params.s2))
        value = _rem_euclid(value, m)
        value = _i64(value * t2)
        value = _rem_euclid(value, m)
    except _Overflow:
        return None
    return value


def assignment_fn_inverse(
    meetup_index: int,
    assignment_params: AssignmentParams,
    assignment_count: int,
    participant_count: int,
) -> Optional[list[int]]:
    """Return all participant indices assigned to ``meetup_index``."""
    if assignment_count <= 0:
        return []

    m = assignment_params.m
    max_index = max(m - meetup_index, 0) // assignment_count
    if (m - meetup_index) % assignment_count != 0:
        max_index += 1

    result: list[int] = []
    for i in range(max_index):
        t2 = checked_mod_inv(_as_i64(assignment_params.s1), _as_i64(m))
        if t2 is None:
            return None
        t3 = _t3(assignment_count, i, meetup_index, assignment_params, t2)
        if t3 is None or t3 >= participant_count:
            continue
        result.append(t3)
        shifted = t3 + m
        if shifted <= _U64_MAX and shifted < participant_count:
            result.append(shifted)
    return result


def meetup_index(
    participant_index: int, params: AssignmentParams, meetup_count: int
) -> Optional[int]:
    """One-based meetup index of a participant."""
    index = assignment_fn(participant_index, params, meetup_count)
    return None if index is None else index + 1


def get_meetup_location_index(
    meetup_index: int,
    locations: Sequence[Location],
    location_assignment_params: AssignmentParams,
) -> Optional[int]:
    return assignment_fn(meetup_index, location_assignment_params, len(locations))


def meetup_location(
    meetup_index: int,
    locations: Sequence[Location],
    location_assignment_params: AssignmentParams,
) -> Optional[Location]:
    """Location assigned to a meetup, or ``None`` if there is none."""
    index = get_meetup_location_index(meetup_index, locations, location_assignment_params)
    if index is None or index >= len(locations):
        return None
    return locations[index]


def meetup_time(location: Location, attesting_start: int, one_day: int, offset: int) -> int:
    """Meetup time at high sun for ``location``, shifted by ``offset``.

    Meetups start at longitude 180 and travel westwards over one day, so the
    range 180..-180 maps to 0..360 degrees, truncated to whole degrees.
    """
    per_degree = min(max(one_day, 0), _U64_MAX) // 360
    lon = abs(trunc(location.lon) - 180)
    start = min(max(attesting_start, 0), _U64_MAX)
    total = _as_i64(start) + lon * per_degree + offset
    return total & _U64_MAX
"""Decide which meetup participants are rewarded, from their votes and attestations.

Participants are identified by their index. ``participant_votes[i]`` holds the
vote of participant ``i`` and ``participant_attestations[i]`` the participants
that ``i`` attested.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence, TypeVar

_T = TypeVar("_T")

ParticipantGroup = tuple[int, list[int]]
"""A number of attestations and the participants that have exactly that many."""


class MeetupValidationError(Exception):
    """Base class for errors raised while judging a meetup."""


class BallotEmpty(MeetupValidationError):
    """No votes were cast."""


class NoDependableVote(MeetupValidationError):
    """No vote count was chosen by at least three participants."""


class IndexOutOfBounds(MeetupValidationError):
    """A participant index does not refer to an existing entry."""


class ExclusionReason(Enum):
    NO_VOTE = "noVote"
    WRONG_VOTE = "wrongVote"
    TOO_FEW_INCOMING_ATTESTATIONS = "tooFewIncomingAttestations"
    TOO_FEW_OUTGOING_ATTESTATIONS = "tooFewOutgoingAttestations"


@dataclass(frozen=True)
class ExcludedParticipant:
    index: int
    reason: ExclusionReason


@dataclass
class ParticipantJudgements:
    legit: list[int] = field(default_factory=list)
    excluded: list[ExcludedParticipant] = field(default_factory=list)

    def exclude_participants(self, excluded: Sequence[tuple[int, ExclusionReason]]) -> None:
        """Move the given participants from ``legit`` to ``excluded``."""
        excluded_indices = {index for index, _ in excluded}
        self.legit = [i for i in self.legit if i not in excluded_indices]
        self.excluded.extend(ExcludedParticipant(index, reason) for index, reason in excluded)


def _get(items: Sequence[_T], index: int) -> _T:
    if not 0 <= index < len(items):
        raise IndexOutOfBounds(index)
    return items[index]


def get_participant_judgements(
    participants: Sequence[int],
    participant_votes: Sequence[int],
    participant_attestations: Sequence[Sequence[int]],
    attestation_threshold_fn: Callable[[int], int],
) -> ParticipantJudgements:
    """Judge every participant of a meetup."""
    judgements = ParticipantJudgements(legit=list(participants))
    judgements.exclude_participants(
        get_excluded_participants_no_vote(judgements.legit, participant_votes)
    )

    n_confirmed, _ = find_majority_vote(judgements.legit, participant_votes)

    judgements.exclude_participants(
        get_excluded_participants_wrong_vote(judgements.legit, participant_votes, n_confirmed)
    )
    judgements.exclude_participants(
        get_excluded_participants_num_attestations(
            judgements.legit, participant_attestations, attestation_threshold_fn
        )
    )
    return judgements


def get_excluded_participants_no_vote(
    participants: Sequence[int], participant_votes: Sequence[int]
) -> list[tuple[int, ExclusionReason]]:
    """Participants whose vote is 0, i.e. who did not vote at all.

    This must run before the majority vote is computed, otherwise absentees
    could produce a majority vote of 0.
    """
    return [
        (i, ExclusionReason.NO_VOTE) for i in participants if not _get(participant_votes, i) > 0
    ]


def get_excluded_participants_wrong_vote(
    participants: Sequence[int], participant_votes: Sequence[int], n_confirmed: int
) -> list[tuple[int, ExclusionReason]]:
    """Participants whose vote differs from the confirmed one."""
    return [
        (i, ExclusionReason.WRONG_VOTE)
        for i in participants
        if _get(participant_votes, i) != n_confirmed
    ]


def get_excluded_participants_num_attestations(
    participants: Sequence[int],
    participant_attestations: Sequence[Sequence[int]],
    threshold_fn: Callable[[int], int],
) -> list[tuple[int, ExclusionReason]]:
    """Repeatedly exclude the participants with the fewest attestations.

    In each round the group with the fewest incoming or outgoing attestations
    is excluded if that number is below ``threshold_fn`` of the number of
    remaining participants; the process stops once nobody is below it.
    """
    relevant = filter_attestations(participants, participant_attestations)
    excluded: list[tuple[int, ExclusionReason]] = []
    remaining = list(participants)

    for _ in range(len(remaining)):
        if not remaining:
            return excluded

        by_outgoing = group_participants_by_num_outgoing_attestations(remaining, relevant)
        by_incoming = group_participants_by_num_incoming_attestations(remaining, relevant)
        min_outgoing, outgoing_group = _get(by_outgoing, 0)
        min_incoming, incoming_group = _get(by_incoming, 0)
        threshold = threshold_fn(len(remaining))

        to_exclude: list[int] | None = None
        if min_incoming < min_outgoing:
            if min_incoming < threshold:
                to_exclude = incoming_group
                reason = ExclusionReason.TOO_FEW_INCOMING_ATTESTATIONS
        elif min_outgoing < threshold:
            to_exclude = outgoing_group
            reason = ExclusionReason.TOO_FEW_OUTGOING_ATTESTATIONS

        if to_exclude is None:
            break

        excluded.extend((p, reason) for p in to_exclude)
        remaining = [p for p in remaining if p not in to_exclude]
        relevant = filter_attestations(remaining, relevant)
    return excluded


def find_majority_vote(
    participants: Sequence[int], participant_votes: Sequence[int]
) -> tuple[int, int]:
    """Return the most common vote and how many participants cast it."""
    candidates: list[list[int]] = []
    for i in participants:
        vote = _get(participant_votes, i)
        for candidate in candidates:
            if candidate[0] == vote:
                candidate[1] += 1
                break
        else:
            candidates.insert(0, [vote, 1])

    if not candidates:
        raise BallotEmpty()
    candidates.sort(key=lambda candidate: candidate[1], reverse=True)
    n_confirmed, vote_count = candidates[0]
    if vote_count < 3:
        raise NoDependableVote()
    return n_confirmed, vote_count


def filter_attestations(
    participants: Sequence[int], participant_attestations: Sequence[Sequence[int]]
) -> list[list[int]]:
    """Drop attestations of anyone no longer among ``participants``."""
    kept = set(participants)
    return [[j for j in attestations if j in kept] for attestations in participant_attestations]


def group_participants_by_num_incoming_attestations(
    participants: Sequence[int], participant_attestations: Sequence[Sequence[int]]
) -> list[ParticipantGroup]:
    num_incoming = [
        sum(
            1
            for idx, attestations in enumerate(participant_attestations)
            if idx != p and p in attestations
        )
        for p in range(len(participant_attestations))
    ]
    return group_indices_by_value(participants, num_incoming)


def group_participants_by_num_outgoing_attestations(
    participants: Sequence[int], participant_attestations: Sequence[Sequence[int]]
) -> list[ParticipantGroup]:
    num_outgoing = [len(attestations) for attestations in participant_attestations]
    return group_indices_by_value(participants, num_outgoing)


def group_indices_by_value(
    indices: Sequence[int], values: Sequence[int]
) -> list[ParticipantGroup]:
    """Group indices by their value, in ascending order of value."""
    if indices and max(indices) >= len(values):
        raise IndexOutOfBounds(max(indices))

    groups: list[ParticipantGroup] = []
    for p in sorted(indices, key=lambda i: _get(values, i)):
        value = _get(values, p)
        if groups and groups[-1][0] == value:
            groups[-1][1].append(p)
        else:
            groups.append((value, [p]))
    return groups
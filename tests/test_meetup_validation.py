import pytest

from encointer.meetup_validation import (
    BallotEmpty,
    ExcludedParticipant,
    ExclusionReason,
    IndexOutOfBounds,
    MeetupValidationError,
    NoDependableVote,
    ParticipantJudgements,
    filter_attestations,
    find_majority_vote,
    get_excluded_participants_no_vote,
    get_excluded_participants_num_attestations,
    get_excluded_participants_wrong_vote,
    get_participant_judgements,
    group_indices_by_value,
    group_participants_by_num_incoming_attestations,
    group_participants_by_num_outgoing_attestations,
)


def threshold(n):
    return n - 1


def test_group_indices_by_value():
    assert group_indices_by_value([0, 1, 2, 3, 4], [2, 0, 3, 2, 0]) == [
        (0, [1, 4]),
        (2, [0, 3]),
        (3, [2]),
    ]


def test_group_indices_by_value_out_of_bounds():
    with pytest.raises(IndexOutOfBounds):
        group_indices_by_value([0, 5], [1, 2])


def test_group_participants_by_num_outgoing_attestations():
    attestations = [[1, 2, 3], [3], [0, 1, 3], [1, 2], [0, 1, 2]]
    assert group_participants_by_num_outgoing_attestations([0, 1, 2, 3, 4], attestations) == [
        (1, [1]),
        (2, [3]),
        (3, [0, 2, 4]),
    ]


def test_group_participants_by_num_incoming_attestations():
    attestations = [[1, 2, 3], [3], [0, 1, 3], [1, 2], [0, 1, 2]]
    assert group_participants_by_num_incoming_attestations([0, 1, 2, 3, 4], attestations) == [
        (0, [4]),
        (2, [0]),
        (3, [2, 3]),
        (4, [1]),
    ]


def test_filter_attestations():
    attestations = [[2, 3], [3, 4], [0, 1], [2, 1, 3], [0, 2, 3]]
    assert filter_attestations([0, 2, 4], attestations) == [[2], [4], [0], [2], [0, 2]]


def test_filter_attestations_leaves_input_untouched():
    attestations = [[2, 3], [3, 4]]
    filter_attestations([2], attestations)
    assert attestations == [[2, 3], [3, 4]]


def test_get_excluded_participants_no_vote():
    excluded = get_excluded_participants_no_vote([0, 1, 2, 3, 4], [0, 1, 2, 2, 0])
    assert [p for p, _ in excluded] == [0, 4]
    assert all(reason is ExclusionReason.NO_VOTE for _, reason in excluded)


def test_get_excluded_participants_no_vote_out_of_bounds():
    with pytest.raises(IndexOutOfBounds):
        get_excluded_participants_no_vote([0, 3], [1, 1])


def test_get_excluded_participants_wrong_vote():
    excluded = get_excluded_participants_wrong_vote([0, 1, 2, 3, 4], [3, 1, 2, 2, 5], 2)
    assert [p for p, _ in excluded] == [0, 1, 4]
    assert all(reason is ExclusionReason.WRONG_VOTE for _, reason in excluded)


def test_get_excluded_participants_num_attestations():
    attestations = [[1, 2, 4], [1], [0, 1, 4], [0, 1, 2, 4], [0, 1, 2]]
    assert get_excluded_participants_num_attestations(
        [0, 1, 2, 3, 4], attestations, threshold
    ) == [
        (3, ExclusionReason.TOO_FEW_INCOMING_ATTESTATIONS),
        (1, ExclusionReason.TOO_FEW_OUTGOING_ATTESTATIONS),
    ]


def test_find_majority_vote():
    assert find_majority_vote([0, 1, 2, 3, 4], [1, 1, 2, 3, 1]) == (1, 3)


def test_find_majority_vote_empty_ballot():
    with pytest.raises(BallotEmpty):
        find_majority_vote([], [1, 2])


def test_find_majority_vote_no_dependable_vote():
    with pytest.raises(NoDependableVote):
        find_majority_vote([0, 1, 2, 3], [1, 1, 2, 2])


def test_errors_share_base_class():
    with pytest.raises(MeetupValidationError):
        find_majority_vote([], [])


def test_exclude_participants():
    judgements = ParticipantJudgements(legit=[0, 1, 2])
    judgements.exclude_participants([(1, ExclusionReason.WRONG_VOTE)])
    assert judgements == ParticipantJudgements(
        legit=[0, 2],
        excluded=[ExcludedParticipant(1, ExclusionReason.WRONG_VOTE)],
    )


def test_exclusion_reason_names():
    attestations = [[1, 2, 4], [1], [0, 1, 4], [0, 1, 2, 4], [0, 1, 2]]
    excluded = get_excluded_participants_num_attestations(
        [0, 1, 2, 3, 4], attestations, threshold
    )
    assert [reason.value for _, reason in excluded] == [
        "tooFewIncomingAttestations",
        "tooFewOutgoingAttestations",
    ]


@pytest.mark.parametrize(
    "participants, votes, attestations, expected",
    [
        # everyone attests everyone
        (
            [0, 1, 2],
            [3, 3, 3],
            [[1, 2], [0, 2], [0, 1]],
            ParticipantJudgements(legit=[0, 1, 2], excluded=[]),
        ),
        # one participant received no attestations and has a vote of 0
        (
            [0, 1, 2, 3],
            [0, 3, 3, 3],
            [[1, 2, 3], [2, 3], [1, 3], [1, 2]],
            ParticipantJudgements(
                legit=[1, 2, 3],
                excluded=[ExcludedParticipant(0, ExclusionReason.NO_VOTE)],
            ),
        ),
        # one participant did not vote like the majority
        (
            [0, 1, 2, 3],
            [1, 3, 3, 3],
            [[1, 2, 3], [0, 2, 3], [0, 1, 3], [0, 1, 2]],
            ParticipantJudgements(
                legit=[1, 2, 3],
                excluded=[ExcludedParticipant(0, ExclusionReason.WRONG_VOTE)],
            ),
        ),
        # 0 has a broken phone: attested by 1 and 2 only, attests nobody
        (
            [0, 1, 2, 3, 4],
            [5, 5, 5, 5, 5],
            [[], [0, 2, 3, 4], [0, 1, 3, 4], [1, 2, 4], [1, 2, 3]],
            ParticipantJudgements(
                legit=[1, 2, 3, 4],
                excluded=[ExcludedParticipant(0, ExclusionReason.TOO_FEW_OUTGOING_ATTESTATIONS)],
            ),
        ),
        # 0 has a broken screen: attested by 1 and 2 only, attests everybody
        (
            [0, 1, 2, 3, 4],
            [5, 5, 5, 5, 5],
            [[1, 2, 3, 4], [0, 2, 3, 4], [0, 1, 3, 4], [1, 2, 4], [1, 2, 3]],
            ParticipantJudgements(
                legit=[1, 2, 3, 4],
                excluded=[ExcludedParticipant(0, ExclusionReason.TOO_FEW_INCOMING_ATTESTATIONS)],
            ),
        ),
    ],
)
def test_get_participant_judgements(participants, votes, attestations, expected):
    assert get_participant_judgements(participants, votes, attestations, threshold) == expected


_CASES_A = [
    (16, 16, 1), (16, 16, 5), (16, 16, 9), (16, 9, 0), (16, 9, 1), (16, 9, 5),
    (16, 3, 0), (16, 3, 1), (12, 7, 0), (12, 7, 3), (12, 5, 1), (12, 5, 2),
    (8, 8, 0), (8, 8, 1), (8, 8, 3), (8, 8, 5), (8, 6, 0), (8, 7, 1), (8, 5, 3),
    (3, 3, 0), (3, 3, 1), (3, 3, 2),
]


@pytest.mark.parametrize("meetup_size, num_attendees, n", _CASES_A)
def test_n_attendees_do_not_attest_anyone(meetup_size, num_attendees, n):
    participants = list(range(meetup_size))
    votes = [num_attendees] * num_attendees + [0] * (meetup_size - num_attendees)
    attestations = [
        [j for j in range(num_attendees) if j != i] for i in range(num_attendees - n)
    ]
    attestations += [[] for _ in range(meetup_size - num_attendees + n)]
    result = get_participant_judgements(participants, votes, attestations, threshold)
    assert result.legit == list(range(num_attendees - n))


@pytest.mark.parametrize("meetup_size, num_attendees, n", _CASES_A)
def test_attendee_is_not_attested_by_n_others(meetup_size, num_attendees, n):
    participants = list(range(meetup_size))
    votes = [num_attendees] * num_attendees + [0] * (meetup_size - num_attendees)
    attestations = []
    for i in range(num_attendees):
        first_index = 1 if i <= n else 0
        attestations.append([j for j in range(first_index, num_attendees) if j != i])
    attestations += [[] for _ in range(meetup_size - num_attendees)]

    if n == 0:
        expected = list(range(num_attendees))
    elif n == 1:
        expected = [0] + list(range(2, num_attendees))
    else:
        expected = list(range(1, num_attendees))
    result = get_participant_judgements(participants, votes, attestations, threshold)
    assert result.legit == expected


@pytest.mark.parametrize(
    "meetup_size, num_attendees, n",
    [
        (16, 16, 0), (16, 16, 1), (16, 16, 5), (16, 16, 9), (16, 9, 0), (16, 9, 1),
        (16, 9, 5), (16, 3, 0), (12, 7, 0), (12, 7, 3), (12, 5, 1), (12, 5, 2),
        (8, 8, 0), (8, 8, 1), (8, 8, 3), (8, 8, 5), (8, 6, 0), (8, 7, 1), (8, 5, 3),
        (3, 3, 0),
        # exact half
        (12, 12, 6), (16, 16, 8), (16, 10, 5),
    ],
)
def test_adversary_holds_n_assignee_keys_and_self_attests(meetup_size, num_attendees, n):
    participants = list(range(meetup_size))
    num_attackers = n
    num_honest = num_attendees - n
    votes = [num_attackers] * num_attackers + [num_honest] * num_honest
    votes += [0] * (meetup_size - num_attendees)

    attestations = [
        [j for j in range(num_attackers) if j != i] for i in range(num_attackers)
    ]
    attestations += [
        [j for j in range(num_attackers, num_attendees) if j != i]
        for i in range(num_attackers, num_attendees)
    ]
    attestations += [[] for _ in range(num_attendees, meetup_size)]

    if num_attackers > num_attendees / 2:
        expected = list(range(num_attackers))
    elif num_attackers == num_attendees / 2:
        expected = []
    else:
        expected = list(range(num_attackers, num_attendees))
    result = get_participant_judgements(participants, votes, attestations, threshold)
    assert result.legit == expected


@pytest.mark.parametrize(
    "meetup_size, num_attendees, n",
    [
        (16, 16, 1), (16, 16, 5), (16, 16, 9), (16, 9, 0), (16, 9, 1), (16, 9, 5),
        (16, 4, 0), (12, 7, 0), (12, 7, 3), (12, 5, 1), (8, 8, 0), (8, 8, 1),
        (8, 8, 3), (8, 8, 5), (8, 6, 0), (8, 7, 1), (8, 5, 3), (4, 4, 0),
    ],
)
def test_n_attendees_vote_plus_one_and_attest_absent_assignee(meetup_size, num_attendees, n):
    participants = list(range(meetup_size))
    num_attackers = n
    num_honest = num_attendees - n - 1
    votes = [num_attackers + 1] * num_attackers + [num_honest] * num_honest
    votes += [0] * (meetup_size - num_attendees + 1)

    attestations = []
    for i in range(num_attackers):
        attested = [j for j in range(num_attackers) if j != i]
        attested.append(num_attendees - 1)
        attestations.append(attested)
    for i in range(num_attackers, num_attendees - 1):
        attestations.append([j for j in range(num_attackers, num_attendees - 1) if j != i])
    attestations += [[] for _ in range(num_attendees - 1, meetup_size)]

    if num_attackers > num_attendees / 2:
        expected = list(range(num_attackers))
    elif num_attackers == num_attendees / 2:
        expected = []
    else:
        expected = list(range(num_attackers, num_attendees - 1))
    result = get_participant_judgements(participants, votes, attestations, threshold)
    assert result.legit == expected
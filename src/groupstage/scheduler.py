"""
Round-robin fixture generation for groups of three or four players.
"""
from typing import Dict, List, Sequence

from .exceptions import InvalidScheduleError
from .models import Match, Round, STATUS_PENDING, PHASE_GROUPS


# Pairings by round number, as indices into the members sorted by draw order
# (0 is the seed). Every pair meets exactly once.
ROUND_ROBIN_PAIRINGS = {
    4: {
        1: [(0, 1), (2, 3)],
        2: [(0, 2), (1, 3)],
        3: [(0, 3), (1, 2)],
    },
    # Groups of three only play two rounds.
    3: {
        1: [(0, 1)],
        2: [(0, 2), (1, 2)],
    },
}

PLACEHOLDER_SETS = 3


def _create_fixture(member_a, member_b, group_id, round_id) -> Match:
    return Match(
        registration_a_id=member_a.registration_id,
        registration_b_id=member_b.registration_id,
        score_a=[0] * PLACEHOLDER_SETS,
        score_b=[0] * PLACEHOLDER_SETS,
        status=STATUS_PENDING,
        group_id=group_id,
        round_id=round_id,
        phase=PHASE_GROUPS,
    )


def generate_fixtures(members: Sequence, group_id, rounds: Sequence[Round]) -> List[Match]:
    """
    Generate the group-stage fixtures for one group.

    members are GroupMember-like objects carrying registration_id and
    draw_order. A round whose number is missing from rounds is skipped,
    which is how "rounds not created yet" is represented.

    Raises InvalidScheduleError for any group size other than 3 or 4.
    """
    sorted_members = sorted(members, key=lambda m: m.draw_order)
    pairings = ROUND_ROBIN_PAIRINGS.get(len(sorted_members))
    if pairings is None:
        raise InvalidScheduleError(
            f"Cannot schedule a group of {len(sorted_members)} players; "
            f"groups must have 3 or 4 players"
        )

    round_ids = {}
    for round_ in rounds:
        round_ids.setdefault(round_.round_number, round_.id)

    fixtures = []
    for round_number in sorted(pairings):
        round_id = round_ids.get(round_number)
        if round_id is None:
            continue
        for index_a, index_b in pairings[round_number]:
            fixtures.append(_create_fixture(sorted_members[index_a], sorted_members[index_b],
                                            group_id, round_id))
    return fixtures


def schedule_table(fixtures: Sequence[Match], rounds: Sequence[Round]) -> Dict[int, List[Match]]:
    """Group fixtures by round number, dropping fixtures whose round is unknown."""
    numbers_by_id = {r.id: r.round_number for r in rounds}
    table = {}
    for fixture in fixtures:
        round_number = numbers_by_id.get(fixture.round_id)
        if round_number is None:
            continue
        table.setdefault(round_number, []).append(fixture)
    return dict(sorted(table.items()))

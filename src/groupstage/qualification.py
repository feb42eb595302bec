"""
Early detection of players who can no longer miss a top-2 finish.
"""
from typing import Dict, List, Optional, Sequence

from .models import Group, Match, Registration, Standing
from .scoring import resolve_scoring
from .standings import standings_for_group

QUALIFYING_POSITIONS = (1, 2)


def matches_remaining(standing: Standing, group_size: int) -> int:
    """Matches left for this player; everyone meets everyone else once."""
    return max((group_size - 1) - standing.matches_played, 0)


def is_mathematically_qualified(standing: Standing, group_size: int,
                                standings: Sequence[Standing], position: int,
                                scoring=None) -> bool:
    """
    Check whether the holder of a top-2 position is already safe.

    The 3rd-placed player's ceiling is their points plus a full victory
    for each match they still have to play. Set and game bonuses are not
    part of the ceiling, so large per-set or per-game values can make this
    optimistic for the holder.

    A player who has not played yet is never qualified.
    """
    if position not in QUALIFYING_POSITIONS:
        raise ValueError(f"Qualification is only defined for positions 1 and 2, got {position}")

    if standing.matches_played <= 0:
        return False

    scoring = resolve_scoring(scoring)
    chaser = standings[2] if len(standings) > 2 else None
    if chaser is None:
        ceiling = 0
    else:
        ceiling = chaser.points + matches_remaining(chaser, group_size) * scoring.pts_victory

    return standing.points > ceiling or matches_remaining(standing, group_size) == 0


class Qualifier:
    """A provisional top-2 finisher of a group."""

    def __init__(self, registration_id, name, group_name, position, is_mathematical,
                 standing=None):
        self.registration_id = registration_id
        self.name = name
        self.group_name = group_name
        self.position = position
        self.is_mathematical = is_mathematical
        self.standing = standing

    def to_dict(self) -> Dict:
        return {
            'registration_id': self.registration_id,
            'name': self.name,
            'group_name': self.group_name,
            'position': self.position,
            'is_mathematical': self.is_mathematical,
        }

    def __repr__(self):
        return (f"Qualifier({self.position}{self.group_name}={self.registration_id}, "
                f"clinched={self.is_mathematical})")


def qualifiers_from_standings(standings: Sequence[Standing], group_size: int, group_name,
                              registrations: Sequence[Registration],
                              scoring=None) -> List[Qualifier]:
    """Top-2 qualifiers for an already computed, sorted standings table."""
    scoring = resolve_scoring(scoring)
    names = {r.id: r.display_name for r in registrations}
    qualifiers = []
    for index, standing in enumerate(standings[:len(QUALIFYING_POSITIONS)]):
        position = index + 1
        qualifiers.append(Qualifier(
            registration_id=standing.registration_id,
            name=names.get(standing.registration_id),
            group_name=group_name,
            position=position,
            is_mathematical=is_mathematically_qualified(
                standing, group_size, standings, position, scoring),
            standing=standing,
        ))
    return qualifiers


def group_qualifiers(group: Group, registrations: Sequence[Registration],
                     matches: Sequence[Match], scoring=None) -> List[Qualifier]:
    """Compute standings for a group and return its top-2 qualifiers."""
    scoring = resolve_scoring(scoring)
    standings = standings_for_group(group, registrations, matches, scoring)
    return qualifiers_from_standings(standings, len(standings), group.name, registrations, scoring)


def qualification_flags(standings: Sequence[Standing], group_size: int,
                        scoring=None) -> Dict[str, Optional[bool]]:
    """
    Map every registration in a table to its clinched flag.

    Positions below 2nd map to None since the flag is not defined for them.
    """
    scoring = resolve_scoring(scoring)
    flags = {}
    for index, standing in enumerate(standings):
        position = index + 1
        if position in QUALIFYING_POSITIONS:
            flags[standing.registration_id] = is_mathematically_qualified(
                standing, group_size, standings, position, scoring)
        else:
            flags[standing.registration_id] = None
    return flags

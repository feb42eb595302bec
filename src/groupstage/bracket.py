"""
Semifinal and final pairings derived from two groups' placements.

Semifinals are crossed: 1st of A plays 2nd of B and 1st of B plays 2nd of
A. The winners meet in the final.

Knockout match rows are created by the host application, sometimes by
hand, so binding a bracket slot to a row is best effort:

- resolve_by_expected_pair looks for the row holding exactly the expected
  pair of players.
- resolve_by_fallback_order takes the first semifinal row the other slot
  has not claimed.

Unresolved slots are reported as undetermined, never as errors.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Group, Match, Registration, Round, SEMIFINAL_PHASES, FINAL_PHASES
from .qualification import Qualifier, group_qualifiers
from .scoring import resolve_scoring
from .standings import winner_of

logger = logging.getLogger(__name__)

SOURCE_MATCH = 'match'
SOURCE_QUALIFIER = 'qualifier'
SOURCE_UNDETERMINED = 'undetermined'

RESOLVED_BY_EXPECTED_PAIR = 'expected_pair'
RESOLVED_BY_FALLBACK_ORDER = 'fallback_order'
RESOLVED_BY_FINISHED_FINAL = 'finished_final'
RESOLVED_BY_FIRST_FINAL = 'first_final'

AWAITING_DEFINITION = 'Awaiting definition'

# Knockout rounds are tagged with these phases when the rows themselves carry none.
ROUND_PHASE_SEMIFINAL = 'mata-mata-semifinal'
ROUND_PHASE_FINAL = 'mata-mata-final'

# (slot label, (group name, position)) for each semifinal side.
SEMIFINAL_CROSSING = {
    'semifinal1': (('A', 1), ('B', 2)),
    'semifinal2': (('B', 1), ('A', 2)),
}


def _ordinal(position: int) -> str:
    return {1: '1st', 2: '2nd'}.get(position, f'{position}th')


def qualifier_label(group_name, position) -> str:
    return f"{_ordinal(position)} Group {group_name}"


class BracketSlot:
    """One side of a bracket pairing."""

    def __init__(self, label, registration_id=None, name=None, source=SOURCE_UNDETERMINED):
        self.label = label
        self.registration_id = registration_id
        self.name = name
        self.source = source

    @property
    def is_determined(self) -> bool:
        return self.source != SOURCE_UNDETERMINED

    @property
    def display_name(self) -> str:
        if not self.is_determined:
            return AWAITING_DEFINITION
        return self.name or self.registration_id

    def to_dict(self) -> Dict:
        return {
            'label': self.label,
            'registration_id': self.registration_id,
            'name': self.name,
            'source': self.source,
            'display_name': self.display_name,
        }

    def __repr__(self):
        return f"BracketSlot({self.label}: {self.display_name}, source={self.source})"


class BracketPairing:
    def __init__(self, name, slot_a, slot_b, match=None, resolved_by=None):
        self.name = name
        self.slot_a = slot_a
        self.slot_b = slot_b
        self.match = match
        self.resolved_by = resolved_by

    @property
    def match_id(self):
        return self.match.id if self.match is not None else None

    @property
    def winner_registration_id(self) -> Optional[str]:
        if self.match is None:
            return None
        return winner_of(self.match)

    @property
    def is_undetermined(self) -> bool:
        return not (self.slot_a.is_determined and self.slot_b.is_determined)

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'match_id': self.match_id,
            'resolved_by': self.resolved_by,
            'slot_a': self.slot_a.to_dict(),
            'slot_b': self.slot_b.to_dict(),
            'winner_registration_id': self.winner_registration_id,
        }

    def __repr__(self):
        return f"BracketPairing({self.name}: {self.slot_a.display_name} vs {self.slot_b.display_name})"


class Bracket:
    def __init__(self, category, semifinal1, semifinal2, final, qualifiers=None):
        self.category = category
        self.semifinal1 = semifinal1
        self.semifinal2 = semifinal2
        self.final = final
        self.qualifiers = qualifiers or {}

    @property
    def champion_registration_id(self) -> Optional[str]:
        return self.final.winner_registration_id

    def to_dict(self) -> Dict:
        return {
            'category': self.category,
            'semifinal1': self.semifinal1.to_dict(),
            'semifinal2': self.semifinal2.to_dict(),
            'final': self.final.to_dict(),
            'champion_registration_id': self.champion_registration_id,
            'qualifiers': [q.to_dict() for _, q in sorted(self.qualifiers.items())],
        }


def resolve_by_expected_pair(expected: Tuple[Optional[str], Optional[str]],
                             candidates: Sequence[Match], claimed: set) -> Optional[int]:
    """Index of the first unclaimed candidate played between exactly the expected pair."""
    id_a, id_b = expected
    if not id_a or not id_b:
        return None
    for index, match in enumerate(candidates):
        if index in claimed:
            continue
        if match.is_between(id_a, id_b):
            return index
    return None


def resolve_by_fallback_order(candidates: Sequence[Match], claimed: set) -> Optional[int]:
    """Index of the first candidate, in encounter order, not claimed by another slot."""
    for index in range(len(candidates)):
        if index not in claimed:
            return index
    return None


def _qualifier_slot(label, qualifier: Optional[Qualifier]) -> BracketSlot:
    # A provisional leader is only named once the place is mathematically safe.
    if qualifier is None or not qualifier.is_mathematical:
        return BracketSlot(label)
    return BracketSlot(label, qualifier.registration_id, qualifier.name, SOURCE_QUALIFIER)


def _participant_slot(label, registration_id, names: Dict[str, str],
                      fallback: Optional[BracketSlot] = None) -> BracketSlot:
    if registration_id:
        return BracketSlot(label, registration_id, names.get(registration_id), SOURCE_MATCH)
    if fallback is not None:
        return fallback
    return BracketSlot(label)


def _semifinal_pairing(name, qualifier_a, qualifier_b, label_a, label_b, match, resolved_by,
                       names) -> BracketPairing:
    fallback_a = _qualifier_slot(label_a, qualifier_a)
    fallback_b = _qualifier_slot(label_b, qualifier_b)
    if match is None:
        return BracketPairing(name, fallback_a, fallback_b)

    first_id, second_id = match.registration_a_id, match.registration_b_id
    # Keep the crossing orientation when the row lists the players the other way round.
    if qualifier_a is not None and second_id == qualifier_a.registration_id:
        first_id, second_id = second_id, first_id
    elif qualifier_b is not None and first_id == qualifier_b.registration_id:
        first_id, second_id = second_id, first_id

    return BracketPairing(
        name,
        _participant_slot(label_a, first_id, names, fallback_a),
        _participant_slot(label_b, second_id, names, fallback_b),
        match=match,
        resolved_by=resolved_by,
    )


def _pick_final(final_matches: Sequence[Match]) -> Tuple[Optional[Match], Optional[str]]:
    for match in final_matches:
        if match.is_finished:
            return match, RESOLVED_BY_FINISHED_FINAL
    if final_matches:
        return final_matches[0], RESOLVED_BY_FIRST_FINAL
    return None, None


def _semifinal_winner_slot(label, semifinal: BracketPairing, names) -> BracketSlot:
    winner = semifinal.winner_registration_id
    if winner:
        return BracketSlot(label, winner, names.get(winner), SOURCE_MATCH)
    return BracketSlot(label)


def knockout_phase_of(match: Match, round_phases: Dict[str, str]) -> Optional[str]:
    """
    Phase of a knockout row: its own phase, else the phase of its round.

    Round phases are mapped onto the row phases 'semifinal' and 'final'.
    """
    if match.phase:
        return match.phase
    round_phase = round_phases.get(match.round_id)
    if round_phase == ROUND_PHASE_SEMIFINAL:
        return 'semifinal'
    if round_phase == ROUND_PHASE_FINAL:
        return 'final'
    return None


def collect_qualifiers(category, groups: Sequence[Group], registrations: Sequence[Registration],
                       matches: Sequence[Match], scoring=None) -> Dict[Tuple[str, int], Qualifier]:
    """Top-2 qualifiers of every group in the category, keyed by (group name, position)."""
    scoring = resolve_scoring(scoring)
    qualifiers = {}
    for group in groups:
        if group.category != category:
            continue
        for qualifier in group_qualifiers(group, registrations, matches, scoring):
            qualifiers[(group.name, qualifier.position)] = qualifier
    return qualifiers


def resolve_bracket(category, groups: Sequence[Group], registrations: Sequence[Registration],
                    knockout_matches: Sequence[Match], group_matches: Sequence[Match] = None,
                    scoring=None, rounds: Sequence[Round] = None) -> Bracket:
    """
    Resolve both semifinals and the final for a category.

    group_matches feeds the group standings; when omitted, knockout_matches
    is used for both purposes (standings only look at rows of each group).
    rounds lets rows without a phase be placed by their round's phase.
    """
    scoring = resolve_scoring(scoring)
    if group_matches is None:
        group_matches = knockout_matches

    qualifiers = collect_qualifiers(category, groups, registrations, group_matches, scoring)
    names = {r.id: r.display_name for r in registrations}

    round_phases = {r.id: r.phase for r in rounds or []}
    semifinal_matches = [m for m in knockout_matches
                         if knockout_phase_of(m, round_phases) in SEMIFINAL_PHASES]
    final_matches = [m for m in knockout_matches
                     if knockout_phase_of(m, round_phases) in FINAL_PHASES]

    claimed = set()
    bound = {}
    for slot_name, (key_a, key_b) in SEMIFINAL_CROSSING.items():
        expected = tuple(
            qualifiers[key].registration_id if key in qualifiers else None
            for key in (key_a, key_b)
        )
        index = resolve_by_expected_pair(expected, semifinal_matches, claimed)
        if index is not None:
            claimed.add(index)
            bound[slot_name] = (index, RESOLVED_BY_EXPECTED_PAIR)

    for slot_name in SEMIFINAL_CROSSING:
        if slot_name in bound:
            continue
        index = resolve_by_fallback_order(semifinal_matches, claimed)
        if index is not None:
            logger.debug("Category %s: %s bound to match %s by encounter order",
                         category, slot_name, semifinal_matches[index].id)
            claimed.add(index)
            bound[slot_name] = (index, RESOLVED_BY_FALLBACK_ORDER)

    semifinals = {}
    for slot_name, (key_a, key_b) in SEMIFINAL_CROSSING.items():
        match, resolved_by = None, None
        if slot_name in bound:
            index, resolved_by = bound[slot_name]
            match = semifinal_matches[index]
        semifinals[slot_name] = _semifinal_pairing(
            slot_name,
            qualifiers.get(key_a),
            qualifiers.get(key_b),
            qualifier_label(*key_a),
            qualifier_label(*key_b),
            match,
            resolved_by,
            names,
        )

    final_match, final_resolved_by = _pick_final(final_matches)
    fallback_a = _semifinal_winner_slot('Winner semifinal 1', semifinals['semifinal1'], names)
    fallback_b = _semifinal_winner_slot('Winner semifinal 2', semifinals['semifinal2'], names)
    if final_match is None:
        final = BracketPairing('final', fallback_a, fallback_b)
    else:
        final = BracketPairing(
            'final',
            _participant_slot(fallback_a.label, final_match.registration_a_id, names, fallback_a),
            _participant_slot(fallback_b.label, final_match.registration_b_id, names, fallback_b),
            match=final_match,
            resolved_by=final_resolved_by,
        )

    return Bracket(category, semifinals['semifinal1'], semifinals['semifinal2'], final, qualifiers)


def bracket_summary(bracket: Bracket) -> List[str]:
    """Human-readable lines for a resolved bracket."""
    lines = []
    for pairing in (bracket.semifinal1, bracket.semifinal2, bracket.final):
        line = f"{pairing.name}: {pairing.slot_a.display_name} vs {pairing.slot_b.display_name}"
        if pairing.winner_registration_id:
            winner_slot = (pairing.slot_a if pairing.slot_a.registration_id == pairing.winner_registration_id
                           else pairing.slot_b)
            line += f" (winner: {winner_slot.display_name})"
        lines.append(line)
    return lines

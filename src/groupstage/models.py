"""
Data shapes shared by the scheduler, standings, qualification and bracket code.

Every competitor is identified by its registration id. Guests have no
account, so account ids never appear as keys anywhere in this package.
"""
import copy
from typing import Dict, List, Optional


STATUS_PENDING = 'pending'
STATUS_FINISHED = 'finished'
STATUS_WAITING_OPPONENTS = 'waiting_opponents'
MATCH_STATUSES = (STATUS_PENDING, STATUS_FINISHED, STATUS_WAITING_OPPONENTS)

RESULT_PLAYED = 'played'
RESULT_WALKOVER = 'walkover'
RESULT_TECHNICAL_DRAW = 'technical_draw'
RESULT_TYPES = (RESULT_PLAYED, RESULT_WALKOVER, RESULT_TECHNICAL_DRAW)

PHASE_GROUPS = 'groups'
SEMIFINAL_PHASES = frozenset(['Semi', 'semifinal'])
FINAL_PHASES = frozenset(['Final', 'final'])
KNOCKOUT_PHASES = frozenset([
    'Oitavas', 'Quartas', 'Semi', 'Final',
    'round_of_16', 'quarterfinal', 'semifinal', 'final',
])

PARTICIPANT_MEMBER = 'member'
PARTICIPANT_GUEST = 'guest'


class Registration:
    """One competitor entered in one category."""

    def __init__(self, id, category, participant_type=PARTICIPANT_MEMBER,
                 user_id=None, user_name=None, guest_name=None):
        self.id = id
        self.category = category
        self.participant_type = participant_type
        self.user_id = user_id
        self.user_name = user_name
        self.guest_name = guest_name

    @property
    def is_guest(self) -> bool:
        return self.participant_type == PARTICIPANT_GUEST

    @property
    def display_name(self) -> str:
        if self.is_guest:
            return self.guest_name or 'Guest'
        return self.user_name or 'Member'

    @classmethod
    def from_dict(cls, data: Dict) -> 'Registration':
        participant_type = data.get('participant_type', PARTICIPANT_MEMBER)
        # Older exports used the Portuguese label for club members.
        if participant_type == 'socio':
            participant_type = PARTICIPANT_MEMBER
        return cls(
            id=data['id'],
            category=data.get('category', data.get('class')),
            participant_type=participant_type,
            user_id=data.get('user_id'),
            user_name=data.get('user_name'),
            guest_name=data.get('guest_name'),
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'category': self.category,
            'participant_type': self.participant_type,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'guest_name': self.guest_name,
            'display_name': self.display_name,
        }

    def __repr__(self):
        return f"Registration(id={self.id}, category={self.category}, name={self.display_name})"


class GroupMember:
    def __init__(self, registration_id, draw_order):
        self.registration_id = registration_id
        self.draw_order = draw_order

    @classmethod
    def from_dict(cls, data: Dict) -> 'GroupMember':
        return cls(registration_id=data['registration_id'], draw_order=data.get('draw_order', 0))

    def to_dict(self) -> Dict:
        return {'registration_id': self.registration_id, 'draw_order': self.draw_order}

    def __repr__(self):
        return f"GroupMember(registration_id={self.registration_id}, draw_order={self.draw_order})"


class Group:
    """A round-robin subdivision of a category ("A" or "B")."""

    def __init__(self, id, name, category, members=None):
        self.id = id
        self.name = name
        self.category = category
        self.members = sorted(members or [], key=lambda m: m.draw_order)

    @property
    def seed(self) -> Optional[GroupMember]:
        for member in self.members:
            if member.draw_order == 0:
                return member
        return None

    @property
    def member_ids(self) -> List[str]:
        return [m.registration_id for m in self.members]

    @property
    def size(self) -> int:
        return len(self.members)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Group':
        members = [GroupMember.from_dict(m) for m in data.get('members', [])]
        return cls(id=data['id'], name=data['name'], category=data.get('category'), members=members)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'members': [m.to_dict() for m in self.members],
        }

    def __repr__(self):
        return f"Group(id={self.id}, name={self.name}, category={self.category}, size={self.size})"


class Round:
    def __init__(self, id, round_number, phase=None):
        self.id = id
        self.round_number = round_number
        self.phase = phase

    @classmethod
    def from_dict(cls, data: Dict) -> 'Round':
        return cls(id=data['id'], round_number=data['round_number'], phase=data.get('phase'))

    def to_dict(self) -> Dict:
        return {'id': self.id, 'round_number': self.round_number, 'phase': self.phase}

    def __repr__(self):
        return f"Round(id={self.id}, round_number={self.round_number}, phase={self.phase})"


class Match:
    """
    A contest between two registrations.

    score_a and score_b hold one entry per set. Only the result fields
    (scores, status, result type, winners, set-by/at) change over the life
    of a match, and only through the functions in transitions.py.
    """

    def __init__(self, id=None, registration_a_id=None, registration_b_id=None,
                 score_a=None, score_b=None, status=STATUS_PENDING, result_type=None,
                 winner_registration_id=None, walkover_winner_registration_id=None,
                 group_id=None, round_id=None, phase=None,
                 result_set_by=None, result_set_at=None):
        self.id = id
        self.registration_a_id = registration_a_id
        self.registration_b_id = registration_b_id
        self.score_a = list(score_a) if score_a is not None else [0, 0]
        self.score_b = list(score_b) if score_b is not None else [0, 0]
        self.status = status
        self.result_type = result_type
        self.winner_registration_id = winner_registration_id
        self.walkover_winner_registration_id = walkover_winner_registration_id
        self.group_id = group_id
        self.round_id = round_id
        self.phase = phase
        self.result_set_by = result_set_by
        self.result_set_at = result_set_at

    @property
    def is_finished(self) -> bool:
        return self.status == STATUS_FINISHED

    @property
    def has_both_participants(self) -> bool:
        return bool(self.registration_a_id and self.registration_b_id)

    def is_between(self, registration_x, registration_y) -> bool:
        """True when the match is between exactly these two registrations, in either order."""
        return ({self.registration_a_id, self.registration_b_id} == {registration_x, registration_y}
                and registration_x != registration_y)

    def copy(self) -> 'Match':
        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(
            id=data.get('id'),
            registration_a_id=data.get('registration_a_id'),
            registration_b_id=data.get('registration_b_id'),
            score_a=data.get('score_a'),
            score_b=data.get('score_b'),
            status=data.get('status', STATUS_PENDING),
            result_type=data.get('result_type'),
            winner_registration_id=data.get('winner_registration_id'),
            walkover_winner_registration_id=data.get('walkover_winner_registration_id'),
            group_id=data.get('group_id'),
            round_id=data.get('round_id'),
            phase=data.get('phase'),
            result_set_by=data.get('result_set_by'),
            result_set_at=data.get('result_set_at'),
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'registration_a_id': self.registration_a_id,
            'registration_b_id': self.registration_b_id,
            'score_a': list(self.score_a),
            'score_b': list(self.score_b),
            'status': self.status,
            'result_type': self.result_type,
            'winner_registration_id': self.winner_registration_id,
            'walkover_winner_registration_id': self.walkover_winner_registration_id,
            'group_id': self.group_id,
            'round_id': self.round_id,
            'phase': self.phase,
            'result_set_by': self.result_set_by,
            'result_set_at': self.result_set_at,
        }

    def __repr__(self):
        return (f"Match(id={self.id}, {self.registration_a_id} vs {self.registration_b_id}, "
                f"status={self.status}, result_type={self.result_type}, "
                f"score={self.score_a}/{self.score_b})")


class Standing:
    """Derived ranking row for one registration inside one group."""

    def __init__(self, registration_id, group_name=None):
        self.registration_id = registration_id
        self.group_name = group_name
        self.points = 0
        self.matches_played = 0
        self.wins = 0
        self.losses = 0
        self.sets_won = 0
        self.sets_lost = 0
        self.games_won = 0
        self.games_lost = 0

    @property
    def set_diff(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def game_diff(self) -> int:
        return self.games_won - self.games_lost

    def to_dict(self) -> Dict:
        return {
            'registration_id': self.registration_id,
            'group_name': self.group_name,
            'points': self.points,
            'matches_played': self.matches_played,
            'wins': self.wins,
            'losses': self.losses,
            'sets_won': self.sets_won,
            'sets_lost': self.sets_lost,
            'set_diff': self.set_diff,
            'games_won': self.games_won,
            'games_lost': self.games_lost,
            'game_diff': self.game_diff,
        }

    def __eq__(self, other):
        if not isinstance(other, Standing):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Standing(registration_id={self.registration_id}, points={self.points}, "
                f"played={self.matches_played}, W-L={self.wins}-{self.losses}, "
                f"sets={self.sets_won}-{self.sets_lost}, games={self.games_won}-{self.games_lost})")

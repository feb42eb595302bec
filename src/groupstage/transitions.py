"""
Match result state machine.

    waiting_opponents --(both players known)--> pending
    pending --(played | walkover | technical_draw)--> finished
    finished --(reopen)--> pending

Every transition returns a new Match; the match passed in is left as is.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from .exceptions import InvalidScoreError, InvalidTransitionError, TechnicalDrawNotAllowedError
from .models import (
    Match, KNOCKOUT_PHASES,
    STATUS_PENDING, STATUS_FINISHED, STATUS_WAITING_OPPONENTS,
    RESULT_PLAYED, RESULT_WALKOVER, RESULT_TECHNICAL_DRAW,
)

logger = logging.getLogger(__name__)

MIN_GAMES = 0
MAX_GAMES = 20
MAX_SETS = 3
SUPER_TIEBREAK_SET_INDEX = 2
SUPER_TIEBREAK_MIN_POINTS = 10

WALKOVER_WINNER_SCORE = [6, 6]
WALKOVER_LOSER_SCORE = [0, 0]
TECHNICAL_DRAW_SCORE = [0, 0]
REOPENED_SCORE = [0, 0]

SIDE_A = 'A'
SIDE_B = 'B'


def is_technical_draw_allowed(round_phase: Optional[str] = None,
                              match_phase: Optional[str] = None) -> bool:
    """Technical draws are only allowed outside knockout phases."""
    if (round_phase or '').startswith('mata-mata'):
        return False
    if not match_phase:
        return True
    return match_phase not in KNOCKOUT_PHASES


def is_valid_set(games_a: int, games_b: int, super_tiebreak: bool = False) -> bool:
    """
    Check a single set score.

    Regular sets: 6-0 to 6-4, 7-5 or 7-6. Super tiebreak: the winner has
    at least 10 points and leads by 2.
    """
    winner = max(games_a, games_b)
    loser = min(games_a, games_b)
    if super_tiebreak:
        return winner >= SUPER_TIEBREAK_MIN_POINTS and winner - loser >= 2
    if winner == 6 and loser <= 4:
        return True
    if winner == 7 and loser in (5, 6):
        return True
    return False


def set_winner(games_a: int, games_b: int, super_tiebreak: bool = False) -> Optional[str]:
    if not is_valid_set(games_a, games_b, super_tiebreak):
        return None
    if games_a > games_b:
        return SIDE_A
    if games_b > games_a:
        return SIDE_B
    return None


def _is_super_tiebreak(index, games_a, games_b) -> bool:
    return index == SUPER_TIEBREAK_SET_INDEX and (
        games_a >= SUPER_TIEBREAK_MIN_POINTS or games_b >= SUPER_TIEBREAK_MIN_POINTS)


def match_winner(score_a: Sequence[int], score_b: Sequence[int]) -> Optional[str]:
    """Winner side of a best-of-three score, or None when undecided."""
    sets_a = 0
    sets_b = 0
    sets_played = min(len(score_a), len(score_b))
    for index in range(sets_played):
        winner = set_winner(score_a[index], score_b[index],
                            _is_super_tiebreak(index, score_a[index], score_b[index]))
        if winner == SIDE_A:
            sets_a += 1
        elif winner == SIDE_B:
            sets_b += 1

    if sets_a >= 2:
        return SIDE_A
    if sets_b >= 2:
        return SIDE_B
    return None


def validate_score_shape(score_a, score_b) -> None:
    """Raise InvalidScoreError unless both sides list the same 1-3 sets of 0-20 games."""
    if not isinstance(score_a, (list, tuple)) or not isinstance(score_b, (list, tuple)):
        raise InvalidScoreError("Scores must be lists of games per set")
    if len(score_a) != len(score_b):
        raise InvalidScoreError(
            f"Both players need a score for every set ({len(score_a)} vs {len(score_b)} sets)")
    if not 1 <= len(score_a) <= MAX_SETS:
        raise InvalidScoreError(f"A match has between 1 and {MAX_SETS} sets, got {len(score_a)}")
    for value in list(score_a) + list(score_b):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidScoreError(f"Set scores must be whole numbers, got {value!r}")
        if not MIN_GAMES <= value <= MAX_GAMES:
            raise InvalidScoreError(f"Set scores must be between {MIN_GAMES} and {MAX_GAMES}, got {value}")


def validate_sets(score_a: Sequence[int], score_b: Sequence[int]) -> None:
    """
    Raise InvalidScoreError unless every set is a valid set score.

    A third set is only played when the first two were split.
    """
    winners = []
    for index, (games_a, games_b) in enumerate(zip(score_a, score_b)):
        winner = set_winner(games_a, games_b, _is_super_tiebreak(index, games_a, games_b))
        if winner is None:
            raise InvalidScoreError(f"Set {index + 1} score {games_a}-{games_b} is not a valid set")
        winners.append(winner)

    if len(winners) > SUPER_TIEBREAK_SET_INDEX and winners[0] == winners[1]:
        raise InvalidScoreError("A third set is only played when the first two sets are split")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_pending(match: Match, action: str) -> None:
    if match.status == STATUS_WAITING_OPPONENTS:
        raise InvalidTransitionError(f"Cannot record a {action} before both players are known")
    if match.status == STATUS_FINISHED:
        raise InvalidTransitionError(
            f"Match {match.id} already has a result; reopen it before recording a {action}")
    if not match.has_both_participants:
        raise InvalidTransitionError(f"Cannot record a {action} before both players are known")


def _side_registration(match: Match, side: str) -> str:
    if side == SIDE_A:
        return match.registration_a_id
    if side == SIDE_B:
        return match.registration_b_id
    raise InvalidTransitionError(f"Winner side must be 'A' or 'B', got {side!r}")


def record_played(match: Match, score_a, score_b, set_by=None, set_at=None) -> Match:
    """Finish a pending match with a played score."""
    _require_pending(match, 'result')
    validate_score_shape(score_a, score_b)
    validate_sets(score_a, score_b)
    winner = match_winner(score_a, score_b)
    if winner is None:
        raise InvalidScoreError(
            f"Score {list(score_a)} / {list(score_b)} does not decide a winner")

    updated = match.copy()
    updated.score_a = list(score_a)
    updated.score_b = list(score_b)
    updated.status = STATUS_FINISHED
    updated.result_type = RESULT_PLAYED
    updated.winner_registration_id = _side_registration(match, winner)
    updated.walkover_winner_registration_id = None
    updated.result_set_by = set_by
    updated.result_set_at = set_at or _now()
    logger.info("Match %s finished: %s wins %s / %s",
                match.id, updated.winner_registration_id, updated.score_a, updated.score_b)
    return updated


def record_walkover(match: Match, winner_side: str, set_by=None, set_at=None) -> Match:
    """Finish a pending match as a walkover for winner_side ('A' or 'B')."""
    _require_pending(match, 'walkover')
    winner_id = _side_registration(match, winner_side)

    updated = match.copy()
    # Display-only score; standings never read it.
    if winner_side == SIDE_A:
        updated.score_a, updated.score_b = list(WALKOVER_WINNER_SCORE), list(WALKOVER_LOSER_SCORE)
    else:
        updated.score_a, updated.score_b = list(WALKOVER_LOSER_SCORE), list(WALKOVER_WINNER_SCORE)
    updated.status = STATUS_FINISHED
    updated.result_type = RESULT_WALKOVER
    updated.winner_registration_id = winner_id
    updated.walkover_winner_registration_id = winner_id
    updated.result_set_by = set_by
    updated.result_set_at = set_at or _now()
    logger.info("Match %s finished by walkover for %s", match.id, winner_id)
    return updated


def record_technical_draw(match: Match, set_by=None, set_at=None, round_phase=None) -> Match:
    """Finish a pending group match with no winner."""
    if not is_technical_draw_allowed(round_phase, match.phase):
        raise TechnicalDrawNotAllowedError(
            f"Knockout match {match.id} ({match.phase or round_phase}) needs a winner; "
            f"record a walkover instead of a technical draw")
    _require_pending(match, 'technical draw')

    updated = match.copy()
    updated.score_a = list(TECHNICAL_DRAW_SCORE)
    updated.score_b = list(TECHNICAL_DRAW_SCORE)
    updated.status = STATUS_FINISHED
    updated.result_type = RESULT_TECHNICAL_DRAW
    updated.winner_registration_id = None
    updated.walkover_winner_registration_id = None
    updated.result_set_by = set_by
    updated.result_set_at = set_at or _now()
    logger.info("Match %s finished as a technical draw", match.id)
    return updated


def reopen(match: Match) -> Match:
    """Clear the result of a finished match and put it back to pending."""
    if match.status != STATUS_FINISHED:
        raise InvalidTransitionError(f"Only finished matches can be reopened (match {match.id} is {match.status})")

    updated = match.copy()
    updated.score_a = list(REOPENED_SCORE)
    updated.score_b = list(REOPENED_SCORE)
    updated.status = STATUS_PENDING
    updated.result_type = None
    updated.winner_registration_id = None
    updated.walkover_winner_registration_id = None
    updated.result_set_by = None
    updated.result_set_at = None
    logger.info("Match %s reopened", match.id)
    return updated


def assign_opponent(match: Match, registration_id) -> Match:
    """
    Put a player into the first empty slot of a knockout match.

    The match moves from waiting_opponents to pending once both slots are filled.
    """
    if match.status != STATUS_WAITING_OPPONENTS:
        raise InvalidTransitionError(
            f"Players can only be assigned to a match waiting for opponents (match {match.id} is {match.status})")
    if not registration_id:
        raise InvalidTransitionError("A registration id is required")
    if registration_id in (match.registration_a_id, match.registration_b_id):
        raise InvalidTransitionError(f"{registration_id} is already in match {match.id}")

    updated = match.copy()
    if not updated.registration_a_id:
        updated.registration_a_id = registration_id
    elif not updated.registration_b_id:
        updated.registration_b_id = registration_id
    else:
        raise InvalidTransitionError(f"Match {match.id} already has both players")

    if updated.has_both_participants:
        updated.status = STATUS_PENDING
    return updated


def apply_transition(match: Match, action: str, **kwargs) -> Match:
    """Dispatch a transition by name: played, walkover, technical_draw, reopen or assign."""
    if action == 'played':
        return record_played(match, kwargs.get('score_a'), kwargs.get('score_b'),
                             kwargs.get('set_by'), kwargs.get('set_at'))
    if action == 'walkover':
        return record_walkover(match, kwargs.get('winner_side'), kwargs.get('set_by'), kwargs.get('set_at'))
    if action == 'technical_draw':
        return record_technical_draw(match, kwargs.get('set_by'), kwargs.get('set_at'),
                                     kwargs.get('round_phase'))
    if action == 'reopen':
        return reopen(match)
    if action == 'assign':
        return assign_opponent(match, kwargs.get('registration_id'))
    raise InvalidTransitionError(f"Unknown match action: {action}")

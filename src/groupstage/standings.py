"""
Group standings computed from a snapshot of finished matches.

Standings are never stored or updated incrementally: every call folds the
full match list again, so the table cannot drift from the matches it was
built from.
"""
import functools
import logging
from typing import List, Optional, Sequence, Tuple

from .models import (
    Match, Registration, Standing,
    RESULT_PLAYED, RESULT_WALKOVER, RESULT_TECHNICAL_DRAW,
)
from .scoring import resolve_scoring

logger = logging.getLogger(__name__)


def count_set_wins(score_a: Sequence[int], score_b: Sequence[int]) -> Tuple[int, int]:
    """
    Count sets won by each side, slot by slot.

    Missing slots read as 0 and equal values count for neither side.
    """
    score_a = score_a or []
    score_b = score_b or []
    sets_a = 0
    sets_b = 0
    for index in range(max(len(score_a), len(score_b))):
        a = score_a[index] if index < len(score_a) else 0
        b = score_b[index] if index < len(score_b) else 0
        a = a or 0
        b = b or 0
        if a > b:
            sets_a += 1
        elif b > a:
            sets_b += 1
    return sets_a, sets_b


def _sum_games(score) -> int:
    return sum(value or 0 for value in (score or []))


def result_type_of(match: Match) -> str:
    """
    Result kind of a finished match.

    Older rows have no result_type: a declared walkover winner makes it a
    walkover, no winner and no score make it a technical draw.
    """
    if match.result_type:
        return match.result_type
    if match.walkover_winner_registration_id:
        return RESULT_WALKOVER
    has_winner = bool(match.winner_registration_id)
    has_score = _sum_games(match.score_a) + _sum_games(match.score_b) > 0
    if not has_winner and not has_score:
        return RESULT_TECHNICAL_DRAW
    return RESULT_PLAYED


def winner_of(match: Match) -> Optional[str]:
    """
    Registration id that won a finished match, or None.

    Walkovers use the declared winner. Played matches are decided by sets
    won, since the score is the source of truth. Technical draws have no
    winner.
    """
    if not match.is_finished:
        return None
    result_type = result_type_of(match)
    if result_type == RESULT_TECHNICAL_DRAW:
        return None
    if result_type == RESULT_WALKOVER:
        return match.walkover_winner_registration_id or match.winner_registration_id
    sets_a, sets_b = count_set_wins(match.score_a, match.score_b)
    if sets_a > sets_b:
        return match.registration_a_id
    if sets_b > sets_a:
        return match.registration_b_id
    return None


def head_to_head_wins(registration_id, opponent_id, matches: Sequence[Match]) -> int:
    """Number of finished matches between exactly this pair won by registration_id."""
    wins = 0
    for match in matches:
        if not match.is_finished or not match.is_between(registration_id, opponent_id):
            continue
        if winner_of(match) == registration_id:
            wins += 1
    return wins


def _apply_match(stat_a: Standing, stat_b: Standing, match: Match, scoring) -> None:
    stat_a.matches_played += 1
    stat_b.matches_played += 1

    result_type = result_type_of(match)

    if result_type == RESULT_TECHNICAL_DRAW:
        stat_a.points += scoring.pts_technical_draw
        stat_b.points += scoring.pts_technical_draw
        return

    if result_type == RESULT_WALKOVER:
        # The recorded walkover score is a placeholder: no sets or games.
        winner = match.walkover_winner_registration_id or match.winner_registration_id
        if winner == stat_a.registration_id:
            stat_a.points += scoring.pts_wo_victory
            stat_a.wins += 1
            stat_b.losses += 1
        elif winner == stat_b.registration_id:
            stat_b.points += scoring.pts_wo_victory
            stat_b.wins += 1
            stat_a.losses += 1
        return

    sets_a, sets_b = count_set_wins(match.score_a, match.score_b)
    games_a = _sum_games(match.score_a)
    games_b = _sum_games(match.score_b)

    stat_a.sets_won += sets_a
    stat_a.sets_lost += sets_b
    stat_a.games_won += games_a
    stat_a.games_lost += games_b

    stat_b.sets_won += sets_b
    stat_b.sets_lost += sets_a
    stat_b.games_won += games_b
    stat_b.games_lost += games_a

    stat_a.points += sets_a * scoring.pts_set + games_a * scoring.pts_game
    stat_b.points += sets_b * scoring.pts_set + games_b * scoring.pts_game

    if sets_a > sets_b:
        stat_a.points += scoring.pts_victory
        stat_b.points += scoring.pts_defeat
        stat_a.wins += 1
        stat_b.losses += 1
    elif sets_b > sets_a:
        stat_b.points += scoring.pts_victory
        stat_a.points += scoring.pts_defeat
        stat_b.wins += 1
        stat_a.losses += 1
    else:
        logger.debug("Match %s has no set winner; awarding set/game points only", match.id)


def _compare(standing_a: Standing, standing_b: Standing, matches: Sequence[Match]) -> int:
    if standing_a.points != standing_b.points:
        return -1 if standing_a.points > standing_b.points else 1

    h2h_a = head_to_head_wins(standing_a.registration_id, standing_b.registration_id, matches)
    h2h_b = head_to_head_wins(standing_b.registration_id, standing_a.registration_id, matches)
    if h2h_a != h2h_b:
        return -1 if h2h_a > h2h_b else 1

    if standing_a.set_diff != standing_b.set_diff:
        return -1 if standing_a.set_diff > standing_b.set_diff else 1

    if standing_a.game_diff != standing_b.game_diff:
        return -1 if standing_a.game_diff > standing_b.game_diff else 1

    if standing_a.registration_id != standing_b.registration_id:
        return -1 if standing_a.registration_id < standing_b.registration_id else 1
    return 0


def compute_standings(registrations: Sequence[Registration], matches: Sequence[Match],
                      scoring=None, group_name=None) -> List[Standing]:
    """
    Calculate the sorted standings for one group.

    Only finished matches count, and a match whose two registrations are
    not both in registrations is skipped.

    Ranking: points -> head-to-head wins -> set differential ->
    game differential -> registration id.

    scoring may be a ScoringRules, a partial mapping, or None for defaults.
    The inputs are never modified.
    """
    scoring = resolve_scoring(scoring)

    standings = {}
    for registration in registrations:
        standings[registration.id] = Standing(
            registration.id,
            group_name=group_name if group_name is not None else registration.category,
        )

    for match in matches:
        if not match.is_finished:
            continue
        stat_a = standings.get(match.registration_a_id)
        stat_b = standings.get(match.registration_b_id)
        if stat_a is None or stat_b is None or stat_a is stat_b:
            logger.debug("Skipping match %s: participants not in this group", match.id)
            continue
        _apply_match(stat_a, stat_b, match, scoring)

    return sorted(standings.values(),
                  key=functools.cmp_to_key(lambda a, b: _compare(a, b, matches)))


def standings_for_group(group, registrations: Sequence[Registration], matches: Sequence[Match],
                        scoring=None) -> List[Standing]:
    """Standings for one Group, filtering registrations and matches to that group."""
    member_ids = set(group.member_ids)
    group_registrations = [r for r in registrations if r.id in member_ids]
    group_matches = [m for m in matches if m.group_id == group.id]
    return compute_standings(group_registrations, group_matches, scoring, group_name=group.name)

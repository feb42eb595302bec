"""
Point values used to turn match results into standings.
"""
import math
from typing import Dict, Mapping, Optional


DEFAULT_SCORING = {
    'pts_victory': 3,
    'pts_defeat': 0,
    'pts_wo_victory': 3,
    'pts_set': 0,
    'pts_game': 0,
    'pts_technical_draw': 0,
}

# Configuration written by the admin screens uses camelCase names.
_CAMEL_CASE_KEYS = {
    'ptsVictory': 'pts_victory',
    'ptsDefeat': 'pts_defeat',
    'ptsWoVictory': 'pts_wo_victory',
    'ptsSet': 'pts_set',
    'ptsGame': 'pts_game',
    'ptsTechnicalDraw': 'pts_technical_draw',
}


class ScoringRules:
    def __init__(self, pts_victory=3, pts_defeat=0, pts_wo_victory=3,
                 pts_set=0, pts_game=0, pts_technical_draw=0):
        self.pts_victory = pts_victory
        self.pts_defeat = pts_defeat
        self.pts_wo_victory = pts_wo_victory
        self.pts_set = pts_set
        self.pts_game = pts_game
        self.pts_technical_draw = pts_technical_draw

    def to_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in DEFAULT_SCORING}

    def __eq__(self, other):
        if not isinstance(other, ScoringRules):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"ScoringRules(victory={self.pts_victory}, defeat={self.pts_defeat}, "
                f"wo_victory={self.pts_wo_victory}, set={self.pts_set}, "
                f"game={self.pts_game}, technical_draw={self.pts_technical_draw})")


def _pick_number(value, fallback):
    """Return value when it is a finite number, otherwise the fallback."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    if not math.isfinite(value):
        return fallback
    return value


def merge_scoring(config: Optional[Mapping] = None) -> ScoringRules:
    """
    Merge a partial scoring configuration over the defaults.

    Accepts snake_case keys (pts_victory) as well as the camelCase keys
    (ptsVictory) stored by the administration screens. Missing, null,
    non-numeric and non-finite values keep the default.
    """
    values = dict(DEFAULT_SCORING)
    if not config:
        return ScoringRules(**values)

    normalized = {}
    for key, value in config.items():
        key = _CAMEL_CASE_KEYS.get(key, key)
        if key in DEFAULT_SCORING:
            normalized[key] = value

    for key, default in DEFAULT_SCORING.items():
        values[key] = _pick_number(normalized.get(key), default)
    return ScoringRules(**values)


def resolve_scoring(scoring=None) -> ScoringRules:
    """Accept a ScoringRules, a partial mapping, or None."""
    if isinstance(scoring, ScoringRules):
        return scoring
    return merge_scoring(scoring)

"""
Load a tournament snapshot from YAML.

A snapshot file looks like:

    scoring:
      pts_victory: 3
      pts_set: 1
    registrations:
      - {id: reg-a, category: 1st Class, participant_type: member, user_name: Alice}
    groups:
      - {id: g-a, name: A, category: 1st Class,
         members: [{registration_id: reg-a, draw_order: 0}, ...]}
    rounds:
      - {id: r1, round_number: 1, phase: classificatoria}
    matches:
      - {id: m1, registration_a_id: reg-a, registration_b_id: reg-b, ...}

The file is read under a FileLock so that a snapshot is never taken in the
middle of a write from the host application.
"""
import logging
import os

import yaml
from filelock import FileLock

from groupstage.models import Group, Match, Registration, Round
from groupstage.scoring import merge_scoring

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
SNAPSHOT_FILENAME = 'tournament.yaml'
LOCK_TIMEOUT_SECONDS = 10


class Snapshot:
    """Registrations, groups, rounds and matches taken at one point in time."""

    def __init__(self, registrations=None, groups=None, rounds=None, matches=None, scoring=None):
        self.registrations = registrations or []
        self.groups = groups or []
        self.rounds = rounds or []
        self.matches = matches or []
        self.scoring = scoring if scoring is not None else merge_scoring()

    @property
    def categories(self):
        return sorted({g.category for g in self.groups if g.category})

    def groups_for(self, category):
        return [g for g in self.groups if g.category == category]

    def knockout_matches(self):
        return [m for m in self.matches if not m.group_id]

    def group_matches(self):
        return [m for m in self.matches if m.group_id]

    def __repr__(self):
        return (f"Snapshot(registrations={len(self.registrations)}, groups={len(self.groups)}, "
                f"rounds={len(self.rounds)}, matches={len(self.matches)})")


def _load_section(data, key, factory):
    items = data.get(key) or []
    if not isinstance(items, list):
        logger.warning("Ignoring snapshot section %r: expected a list, got %s", key, type(items).__name__)
        return []
    return [factory(item) for item in items]


def snapshot_from_dict(data) -> Snapshot:
    """Build a Snapshot from already-parsed YAML or JSON data."""
    data = data or {}
    return Snapshot(
        registrations=_load_section(data, 'registrations', Registration.from_dict),
        groups=_load_section(data, 'groups', Group.from_dict),
        rounds=_load_section(data, 'rounds', Round.from_dict),
        matches=_load_section(data, 'matches', Match.from_dict),
        scoring=merge_scoring(data.get('scoring')),
    )


def snapshot_path(data_dir: str = None) -> str:
    return os.path.join(data_dir or DATA_DIR, SNAPSHOT_FILENAME)


def load_snapshot(path: str = None) -> Snapshot:
    """
    Load a snapshot file.

    path defaults to tournament.yaml in TOURNAMENT_DATA_DIR. Raises
    FileNotFoundError when the file does not exist.
    """
    path = path or snapshot_path()
    if not os.path.exists(path):
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    lock = FileLock(os.path.join(os.path.dirname(os.path.abspath(path)), '.lock'),
                    timeout=LOCK_TIMEOUT_SECONDS)
    with lock:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

    snapshot = snapshot_from_dict(data)
    logger.info("Loaded %r from %s", snapshot, path)
    return snapshot


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    return {
        'scoring': snapshot.scoring.to_dict(),
        'registrations': [r.to_dict() for r in snapshot.registrations],
        'groups': [g.to_dict() for g in snapshot.groups],
        'rounds': [r.to_dict() for r in snapshot.rounds],
        'matches': [m.to_dict() for m in snapshot.matches],
    }


def save_snapshot(snapshot: Snapshot, path: str = None) -> None:
    """Write a snapshot back to YAML under the same lock used for reading."""
    path = path or snapshot_path()
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    lock = FileLock(os.path.join(os.path.dirname(os.path.abspath(path)), '.lock'),
                    timeout=LOCK_TIMEOUT_SECONDS)
    with lock:
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(snapshot_to_dict(snapshot), f, default_flow_style=False, sort_keys=False)

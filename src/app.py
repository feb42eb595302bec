"""
Flask JSON API over the group-stage core.

POST routes compute from a snapshot sent in the request body. GET routes
compute from the snapshot file in TOURNAMENT_DATA_DIR. Nothing is stored:
every response is recomputed from the snapshot it was given.
"""
import os

from flask import Flask, request, jsonify, abort

import snapshot as snapshot_module
from snapshot import load_snapshot, snapshot_from_dict
from groupstage.bracket import resolve_bracket
from groupstage.exceptions import GroupStageError
from groupstage.models import GroupMember, Match, Round
from groupstage.qualification import qualification_flags
from groupstage.scheduler import generate_fixtures
from groupstage.standings import standings_for_group
from groupstage.transitions import apply_transition

app = Flask(__name__)


@app.errorhandler(GroupStageError)
def handle_group_stage_error(error):
    app.logger.info(f'Rejected request: {error}')
    return jsonify({'error': str(error)}), 400


def _current_snapshot():
    path = snapshot_module.snapshot_path(snapshot_module.DATA_DIR)
    if not os.path.exists(path):
        app.logger.warning(f'No snapshot at {path}')
        abort(404)
    return load_snapshot(path)


MALFORMED_INPUT = (KeyError, TypeError, ValueError, AttributeError)


def _parse_snapshot(data):
    """Snapshot from a request body, or None when the body cannot be read as one."""
    try:
        return snapshot_from_dict(data)
    except MALFORMED_INPUT as e:
        app.logger.warning(f'Malformed snapshot in request: {e!r}')
        return None


def calculate_category_standings(snapshot, category=None):
    """
    Standings for every group, with the clinched flag for the top two.

    Returns: {group_name: [{...standing fields, 'position': n,
                           'name': display name, 'is_mathematical': bool|None}, ...]}
    """
    names = {r.id: r.display_name for r in snapshot.registrations}
    result = {}
    for group in snapshot.groups:
        if category is not None and group.category != category:
            continue
        standings = standings_for_group(group, snapshot.registrations, snapshot.matches, snapshot.scoring)
        flags = qualification_flags(standings, len(standings), snapshot.scoring)
        rows = []
        for index, standing in enumerate(standings):
            row = standing.to_dict()
            row['position'] = index + 1
            row['name'] = names.get(standing.registration_id)
            row['is_mathematical'] = flags[standing.registration_id]
            rows.append(row)
        result[group.name] = rows
    return result


def calculate_category_bracket(snapshot, category):
    bracket = resolve_bracket(
        category,
        snapshot.groups,
        snapshot.registrations,
        snapshot.knockout_matches(),
        group_matches=snapshot.group_matches(),
        scoring=snapshot.scoring,
        rounds=snapshot.rounds,
    )
    return bracket.to_dict()


@app.route('/api/fixtures', methods=['POST'])
def api_fixtures():
    """Generate group-stage fixtures for one group."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get('group_id'):
        return jsonify({'error': 'Missing group_id'}), 400

    try:
        members = [GroupMember.from_dict(m) for m in data.get('members') or []]
        rounds = [Round.from_dict(r) for r in data.get('rounds') or []]
    except MALFORMED_INPUT as e:
        app.logger.warning(f'Malformed fixtures request: {e!r}')
        return jsonify({'error': 'Invalid members or rounds'}), 400
    fixtures = generate_fixtures(members, data['group_id'], rounds)
    return jsonify({'fixtures': [f.to_dict() for f in fixtures]})


@app.route('/api/standings', methods=['POST'])
def api_standings():
    """Standings for a posted snapshot, optionally limited to one category."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Missing snapshot'}), 400
    snapshot = _parse_snapshot(data)
    if snapshot is None:
        return jsonify({'error': 'Invalid snapshot'}), 400
    return jsonify({'standings': calculate_category_standings(snapshot, data.get('category'))})


@app.route('/api/bracket', methods=['POST'])
def api_bracket():
    """Bracket for one category of a posted snapshot."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get('category'):
        return jsonify({'error': 'Missing category'}), 400
    snapshot = _parse_snapshot(data)
    if snapshot is None:
        return jsonify({'error': 'Invalid snapshot'}), 400
    return jsonify({'bracket': calculate_category_bracket(snapshot, data['category'])})


@app.route('/api/matches/<action>', methods=['POST'])
def api_match_transition(action):
    """Apply a result transition to a posted match and return the updated match."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get('match'), dict):
        return jsonify({'error': 'Missing match'}), 400

    match = Match.from_dict(data['match'])
    updated = apply_transition(
        match,
        action,
        score_a=data.get('score_a'),
        score_b=data.get('score_b'),
        winner_side=data.get('winner_side'),
        set_by=data.get('set_by'),
        set_at=data.get('set_at'),
        round_phase=data.get('round_phase'),
        registration_id=data.get('registration_id'),
    )
    return jsonify({'success': True, 'match': updated.to_dict()})


@app.route('/api/categories/<category>/standings')
def api_category_standings(category):
    """Standings for one category of the stored snapshot."""
    snapshot = _current_snapshot()
    if category not in snapshot.categories:
        abort(404)
    return jsonify({'category': category, 'standings': calculate_category_standings(snapshot, category)})


@app.route('/api/categories/<category>/bracket')
def api_category_bracket(category):
    """Bracket for one category of the stored snapshot."""
    snapshot = _current_snapshot()
    if category not in snapshot.categories:
        abort(404)
    return jsonify({'bracket': calculate_category_bracket(snapshot, category)})


if __name__ == '__main__':
    app.run(debug=True)

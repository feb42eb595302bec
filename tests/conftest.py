"""
Shared pytest fixtures for the group-stage tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
import yaml

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from groupstage.models import Group, GroupMember, Match, Registration, Round, STATUS_FINISHED


CATEGORY = '1st Class'


def played(match_id, reg_a, reg_b, score_a, score_b, group_id='g-a', phase='groups'):
    """Finished, played match between two registrations."""
    return Match(
        id=match_id,
        registration_a_id=reg_a,
        registration_b_id=reg_b,
        score_a=score_a,
        score_b=score_b,
        status=STATUS_FINISHED,
        result_type='played',
        group_id=group_id,
        phase=phase,
    )


def walkover(match_id, reg_a, reg_b, winner, group_id='g-a', phase='groups'):
    score_a, score_b = ([6, 6], [0, 0]) if winner == reg_a else ([0, 0], [6, 6])
    return Match(
        id=match_id,
        registration_a_id=reg_a,
        registration_b_id=reg_b,
        score_a=score_a,
        score_b=score_b,
        status=STATUS_FINISHED,
        result_type='walkover',
        winner_registration_id=winner,
        walkover_winner_registration_id=winner,
        group_id=group_id,
        phase=phase,
    )


@pytest.fixture
def two_registrations():
    """The two-player setup used by the scoring examples."""
    return [
        Registration('reg-a', CATEGORY, 'member', user_id='user-a', user_name='Alice'),
        Registration('reg-b', CATEGORY, 'member', user_id='user-b', user_name='Bob'),
    ]


@pytest.fixture
def group_a_registrations():
    return [
        Registration('a1', CATEGORY, 'member', user_id='u1', user_name='Ana'),
        Registration('a2', CATEGORY, 'member', user_id='u2', user_name='Bruno'),
        Registration('a3', CATEGORY, 'guest', guest_name='Carla'),
        Registration('a4', CATEGORY, 'member', user_id='u4', user_name='Diego'),
    ]


@pytest.fixture
def group_b_registrations():
    return [
        Registration('b1', CATEGORY, 'member', user_id='u5', user_name='Elisa'),
        Registration('b2', CATEGORY, 'member', user_id='u6', user_name='Fabio'),
        Registration('b3', CATEGORY, 'guest', guest_name='Gabi'),
        Registration('b4', CATEGORY, 'member', user_id='u8', user_name='Hugo'),
    ]


@pytest.fixture
def all_registrations(group_a_registrations, group_b_registrations):
    return group_a_registrations + group_b_registrations


@pytest.fixture
def group_a():
    return Group('g-a', 'A', CATEGORY, [GroupMember(f'a{i + 1}', i) for i in range(4)])


@pytest.fixture
def group_b():
    return Group('g-b', 'B', CATEGORY, [GroupMember(f'b{i + 1}', i) for i in range(4)])


@pytest.fixture
def group_rounds():
    return [
        Round('r1', 1, 'classificatoria'),
        Round('r2', 2, 'classificatoria'),
        Round('r3', 3, 'classificatoria'),
    ]


@pytest.fixture
def finished_group_a_matches():
    """
    Complete group A: a1 wins all, a2 beats a3 and a4, a3 beats a4.
    Final order a1, a2, a3, a4.
    """
    return [
        played('ga-1', 'a1', 'a2', [6, 6], [3, 4], group_id='g-a'),
        played('ga-2', 'a3', 'a4', [6, 6], [2, 2], group_id='g-a'),
        played('ga-3', 'a1', 'a3', [6, 6], [1, 1], group_id='g-a'),
        played('ga-4', 'a2', 'a4', [6, 6], [0, 0], group_id='g-a'),
        played('ga-5', 'a1', 'a4', [6, 6], [0, 0], group_id='g-a'),
        played('ga-6', 'a2', 'a3', [6, 6], [4, 4], group_id='g-a'),
    ]


@pytest.fixture
def finished_group_b_matches():
    """Complete group B: order b1, b2, b3, b4."""
    return [
        played('gb-1', 'b1', 'b2', [6, 6], [4, 4], group_id='g-b'),
        played('gb-2', 'b3', 'b4', [6, 6], [3, 3], group_id='g-b'),
        played('gb-3', 'b1', 'b3', [6, 6], [2, 2], group_id='g-b'),
        played('gb-4', 'b2', 'b4', [6, 6], [1, 1], group_id='g-b'),
        played('gb-5', 'b1', 'b4', [6, 6], [0, 0], group_id='g-b'),
        played('gb-6', 'b2', 'b3', [6, 6], [4, 4], group_id='g-b'),
    ]


@pytest.fixture
def snapshot_data(all_registrations, group_a, group_b, group_rounds,
                  finished_group_a_matches, finished_group_b_matches):
    """A complete two-group snapshot as plain data, the way it is stored in YAML."""
    return {
        'scoring': {'pts_victory': 3, 'pts_defeat': 0},
        'registrations': [r.to_dict() for r in all_registrations],
        'groups': [group_a.to_dict(), group_b.to_dict()],
        'rounds': [r.to_dict() for r in group_rounds],
        'matches': [m.to_dict() for m in finished_group_a_matches + finished_group_b_matches],
    }


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch, snapshot_data):
    """Temporary data directory holding tournament.yaml."""
    import snapshot as snapshot_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "tournament.yaml").write_text(yaml.dump(snapshot_data, default_flow_style=False))
    monkeypatch.setattr(snapshot_module, 'DATA_DIR', str(data_dir))
    return str(data_dir)


@pytest.fixture
def client():
    """Flask test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client

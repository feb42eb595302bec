"""
Unit tests for loading and saving tournament snapshots.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from snapshot import Snapshot, load_snapshot, save_snapshot, snapshot_from_dict, snapshot_path
from groupstage.models import Match


class TestSnapshotFromDict:
    def test_full_snapshot(self, snapshot_data):
        snapshot = snapshot_from_dict(snapshot_data)

        assert len(snapshot.registrations) == 8
        assert [g.name for g in snapshot.groups] == ['A', 'B']
        assert len(snapshot.rounds) == 3
        assert len(snapshot.matches) == 12
        assert snapshot.categories == ['1st Class']

    def test_empty(self):
        snapshot = snapshot_from_dict(None)
        assert snapshot.matches == []
        assert snapshot.scoring.pts_victory == 3

    def test_scoring_merged(self):
        snapshot = snapshot_from_dict({'scoring': {'ptsSet': 1}})
        assert snapshot.scoring.pts_set == 1
        assert snapshot.scoring.pts_victory == 3

    def test_non_list_section_ignored(self):
        snapshot = snapshot_from_dict({'matches': {'id': 'm1'}})
        assert snapshot.matches == []

    def test_group_and_knockout_matches(self):
        snapshot = Snapshot(matches=[Match('g1', 'a', 'b', group_id='g-a'),
                                     Match('sf1', 'a', 'c', phase='Semi')])
        assert [m.id for m in snapshot.group_matches()] == ['g1']
        assert [m.id for m in snapshot.knockout_matches()] == ['sf1']


class TestLoadAndSave:
    def test_load(self, temp_data_dir):
        snapshot = load_snapshot(os.path.join(temp_data_dir, 'tournament.yaml'))
        assert len(snapshot.groups_for('1st Class')) == 2

    def test_default_path_uses_data_dir(self, temp_data_dir):
        assert snapshot_path(temp_data_dir) == os.path.join(temp_data_dir, 'tournament.yaml')
        snapshot = load_snapshot(snapshot_path(temp_data_dir))
        assert len(snapshot.matches) == 12

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(str(tmp_path / 'nope.yaml'))

    def test_save_round_trip(self, tmp_path, snapshot_data):
        path = str(tmp_path / 'out' / 'tournament.yaml')
        save_snapshot(snapshot_from_dict(snapshot_data), path)

        with open(path) as f:
            saved = yaml.safe_load(f)
        assert len(saved['matches']) == 12
        assert saved['scoring']['pts_victory'] == 3

        reloaded = load_snapshot(path)
        assert [m.to_dict() for m in reloaded.matches] == [
            m.to_dict() for m in snapshot_from_dict(snapshot_data).matches]

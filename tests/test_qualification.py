"""
Unit tests for mathematical qualification.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from groupstage.models import Standing
from groupstage.qualification import (
    group_qualifiers,
    is_mathematically_qualified,
    matches_remaining,
    qualification_flags,
)
from conftest import played


def make_standing(registration_id, points, matches_played):
    standing = Standing(registration_id, group_name='A')
    standing.points = points
    standing.matches_played = matches_played
    return standing


class TestMatchesRemaining:
    def test_remaining(self):
        assert matches_remaining(make_standing('x', 0, 1), 4) == 2

    def test_never_negative(self):
        assert matches_remaining(make_standing('x', 0, 5), 4) == 0


class TestQualificationRule:
    """Tests for the clinch rule."""

    def test_out_of_reach_of_third_place(self):
        """7 points against a 3rd place with 3 points and one match left (ceiling 6)."""
        table = [make_standing('h', 7, 2), make_standing('s', 4, 2), make_standing('c', 3, 2),
                 make_standing('d', 0, 2)]

        assert is_mathematically_qualified(table[0], 4, table, 1)

    def test_equal_to_ceiling_is_not_enough(self):
        table = [make_standing('h', 6, 2), make_standing('s', 4, 2), make_standing('c', 3, 2),
                 make_standing('d', 0, 2)]

        assert not is_mathematically_qualified(table[0], 4, table, 1)

    def test_ceiling_uses_chaser_remaining_matches(self):
        """A chaser with two matches left can still reach 9."""
        table = [make_standing('h', 7, 2), make_standing('s', 4, 2), make_standing('c', 3, 1),
                 make_standing('d', 0, 1)]

        assert not is_mathematically_qualified(table[0], 4, table, 1)

    def test_all_matches_played(self):
        """Holder with every match played is qualified even when not ahead of the ceiling."""
        table = [make_standing('h', 6, 3), make_standing('s', 3, 3), make_standing('c', 3, 2),
                 make_standing('d', 3, 2)]

        assert is_mathematically_qualified(table[1], 4, table, 2)

    def test_no_matches_played_never_qualified(self):
        """A player who has not played is never qualified, whatever the points."""
        table = [make_standing('h', 10, 0), make_standing('s', 0, 0), make_standing('c', 0, 0)]

        assert not is_mathematically_qualified(table[0], 3, table, 1)

    def test_no_third_place(self):
        """Without a 3rd place the ceiling is 0: one played match is enough."""
        table = [make_standing('h', 3, 1), make_standing('s', 0, 1)]

        assert is_mathematically_qualified(table[0], 2, table, 1)
        assert is_mathematically_qualified(table[1], 2, table, 2)

    def test_no_third_place_without_matches(self):
        table = [make_standing('h', 0, 0), make_standing('s', 0, 0)]

        assert not is_mathematically_qualified(table[0], 2, table, 1)

    def test_victory_points_from_scoring(self):
        """With 2 points per win the chaser ceiling drops to 5."""
        table = [make_standing('h', 6, 2), make_standing('s', 4, 2), make_standing('c', 3, 2),
                 make_standing('d', 0, 2)]

        assert is_mathematically_qualified(table[0], 4, table, 1, {'pts_victory': 2})

    def test_set_bonus_not_in_ceiling(self):
        """Set and game bonuses are left out of the chaser ceiling."""
        table = [make_standing('h', 7, 2), make_standing('s', 4, 2), make_standing('c', 3, 2),
                 make_standing('d', 0, 2)]

        assert is_mathematically_qualified(table[0], 4, table, 1, {'pts_set': 5, 'pts_game': 1})

    @pytest.mark.parametrize('position', [0, 3, 4])
    def test_only_top_two_positions(self, position):
        table = [make_standing('h', 3, 1), make_standing('s', 0, 1), make_standing('c', 0, 0)]
        with pytest.raises(ValueError):
            is_mathematically_qualified(table[0], 3, table, position)


class TestGroupQualifiers:
    """Tests built on computed standings."""

    def test_finished_group(self, group_a, group_a_registrations, finished_group_a_matches):
        qualifiers = group_qualifiers(group_a, group_a_registrations, finished_group_a_matches)

        assert [(q.registration_id, q.position) for q in qualifiers] == [('a1', 1), ('a2', 2)]
        assert [q.name for q in qualifiers] == ['Ana', 'Bruno']
        assert all(q.group_name == 'A' for q in qualifiers)
        assert all(q.is_mathematical for q in qualifiers)

    def test_after_first_round(self, group_a, group_a_registrations):
        """One round in, nobody is safe yet."""
        matches = [
            played('ga-1', 'a1', 'a2', [6, 6], [3, 4], group_id='g-a'),
            played('ga-2', 'a3', 'a4', [6, 6], [2, 2], group_id='g-a'),
        ]
        qualifiers = group_qualifiers(group_a, group_a_registrations, matches)

        assert {q.registration_id for q in qualifiers} == {'a1', 'a3'}
        assert not any(q.is_mathematical for q in qualifiers)

    def test_no_matches(self, group_a, group_a_registrations):
        qualifiers = group_qualifiers(group_a, group_a_registrations, [])

        assert len(qualifiers) == 2
        assert not any(q.is_mathematical for q in qualifiers)

    def test_flags_for_whole_table(self, group_a, group_a_registrations, finished_group_a_matches):
        from groupstage.standings import standings_for_group
        standings = standings_for_group(group_a, group_a_registrations, finished_group_a_matches)

        flags = qualification_flags(standings, 4)

        assert flags == {'a1': True, 'a2': True, 'a3': None, 'a4': None}

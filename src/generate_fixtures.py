import argparse
import logging
import os
import sys

from snapshot import load_snapshot, save_snapshot
from groupstage.bracket import resolve_bracket, bracket_summary
from groupstage.exceptions import GroupStageError
from groupstage.qualification import qualification_flags
from groupstage.scheduler import generate_fixtures, schedule_table
from groupstage.standings import standings_for_group


def fixtures_for_snapshot(snapshot):
    """
    Fixtures for every group that has no group matches yet.

    Returns {group: [Match, ...]}. Groups with an unsupported size are
    reported on stderr and skipped.
    """
    scheduled_groups = {m.group_id for m in snapshot.group_matches()}
    fixtures_by_group = {}
    for group in snapshot.groups:
        if group.id in scheduled_groups:
            continue
        try:
            fixtures_by_group[group] = generate_fixtures(group.members, group.id, snapshot.rounds)
        except GroupStageError as e:
            print(f"Warning: Group {group.name} ({group.category}): {e}", file=sys.stderr)
    return fixtures_by_group


def format_standings(snapshot, group):
    names = {r.id: r.display_name for r in snapshot.registrations}
    standings = standings_for_group(group, snapshot.registrations, snapshot.matches, snapshot.scoring)
    flags = qualification_flags(standings, len(standings), snapshot.scoring)
    lines = [f"{'#':>2}  {'Player':<24}{'Pts':>5}{'P':>3}{'W':>3}{'L':>3}{'Sets':>7}{'Games':>8}"]
    for index, standing in enumerate(standings):
        marker = ' *' if flags[standing.registration_id] else ''
        name = names.get(standing.registration_id, standing.registration_id)
        lines.append(
            f"{index + 1:>2}  {name:<24}{standing.points:>5}{standing.matches_played:>3}"
            f"{standing.wins:>3}{standing.losses:>3}"
            f"{standing.sets_won:>4}-{standing.sets_lost:<2}{standing.games_won:>4}-{standing.games_lost:<3}{marker}"
        )
    return lines


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Group-stage fixtures, standings and bracket report')
    parser.add_argument('snapshot', nargs='?', default=os.path.join(base_dir, 'data', 'tournament.yaml'),
                        help='Tournament snapshot YAML file')
    parser.add_argument('--write', action='store_true',
                        help='Add the generated fixtures to the snapshot file')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        snapshot = load_snapshot(args.snapshot)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    names = {r.id: r.display_name for r in snapshot.registrations}
    fixtures_by_group = fixtures_for_snapshot(snapshot)

    for category in snapshot.categories:
        print(f"# {category}")
        for group in snapshot.groups_for(category):
            print(f"\n## Group {group.name}")
            fixtures = fixtures_by_group.get(group)
            if fixtures:
                for round_number, round_fixtures in schedule_table(fixtures, snapshot.rounds).items():
                    print(f"Round {round_number}:")
                    for fixture in round_fixtures:
                        print(f"  {names.get(fixture.registration_a_id, fixture.registration_a_id)} vs "
                              f"{names.get(fixture.registration_b_id, fixture.registration_b_id)}")
            print()
            for line in format_standings(snapshot, group):
                print(line)

        bracket = resolve_bracket(category, snapshot.groups, snapshot.registrations,
                                  snapshot.knockout_matches(), group_matches=snapshot.group_matches(),
                                  scoring=snapshot.scoring, rounds=snapshot.rounds)
        print("\n## Bracket")
        for line in bracket_summary(bracket):
            print(f"  {line}")
        print()

    if args.write and fixtures_by_group:
        for group, fixtures in fixtures_by_group.items():
            for index, fixture in enumerate(fixtures):
                fixture.id = f"{group.id}-{fixture.round_id}-{index + 1}"
                snapshot.matches.append(fixture)
        save_snapshot(snapshot, args.snapshot)
        print(f"Wrote {sum(len(f) for f in fixtures_by_group.values())} fixtures to {args.snapshot}")

    return 0


if __name__ == '__main__':
    sys.exit(main())

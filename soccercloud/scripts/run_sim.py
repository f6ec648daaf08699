"""
Main simulation script for running football simulations.

Provides CLI interface: quick single matches, team listing, CSV export and
a playback loop that reveals simulations at a chosen speed.
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from ..config import LOOP_INTERVAL_SECONDS, ServiceConfig, Speed
from ..engine.rng import Rng, derive_seed
from ..engine.team import TEAMS, display_name
from ..engine.tournament import SimulationType, SingleOutcome, run_simulation
from ..errors import SoccerCloudError
from ..logger.csv_export import write_csv
from ..playback.selection import resolve_named, resolve_quick_single
from ..playback.service import SimulationService


def quick_mode(home: Optional[str], away: Optional[str], base_seed: int) -> None:
    """Simulate one match and print the result and full narrative."""
    seed = derive_seed(base_seed, 1)
    teams = resolve_quick_single(home, away, seed)
    prepared = run_simulation(SimulationType.SINGLE, teams, Rng(seed))

    print(f"seed={seed}")
    if isinstance(prepared.outcome, SingleOutcome):
        m = prepared.outcome.result
        print(f"{m.home} {m.home_goals}-{m.away_goals} {m.away}")
        print(f"xG {m.stats.home.xg:.2f} - {m.stats.away.xg:.2f}")

    print("-- log --")
    for frame in prepared.frames:
        for line in frame.logs:
            print(line)


def list_mode() -> None:
    for team in TEAMS:
        print(display_name(team))


def export_mode(mode: str, out: str, teams: List[str], base_seed: int) -> None:
    """Run a simulation to completion and write its CSV projection."""
    sim_type = SimulationType.parse(mode)
    seed = derive_seed(base_seed, 1)
    teams = resolve_named(sim_type, teams, auto_fill=False, seed=seed)
    prepared = run_simulation(sim_type, teams, Rng(seed))
    write_csv(prepared, out)
    print(f"Wrote {out}")


def play_mode(modes: List[str], teams: List[str], base_seed: int, speed: Speed,
              interval: float = LOOP_INTERVAL_SECONDS) -> SimulationService:
    """
    Single-consumer playback loop.

    Creates one instance per mode, starts them all, then ticks every running
    instance on a fixed cadence until all are complete.
    """
    service = SimulationService(ServiceConfig(base_seed=base_seed, speed=speed))
    ids = [service.create(mode, teams or None, auto_fill=True) for mode in modes]
    for instance_id in ids:
        service.start(instance_id)

    last_boards = {}
    while not service.all_completed():
        service.tick()
        for summary in service.summaries():
            if last_boards.get(summary["id"]) != summary["scoreboard"]:
                last_boards[summary["id"]] = summary["scoreboard"]
                print(f"[sim-{summary['id']}] {summary['progress']:<16} {summary['scoreboard']}")
        time.sleep(interval)

    print("\n=== RESULTS ===")
    for summary in service.summaries():
        print(f"sim-{summary['id']} {summary['title']}: {summary['outcome']}")
    return service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='SoccerCloud Football Simulation')
    parser.add_argument('--seed', type=int, default=None, help='Base random seed for reproducibility')
    parser.add_argument('--speed', type=Speed.parse, default=Speed.X1,
                        help='Playback speed: 1x, 2x, 4x or instant')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    sub = parser.add_subparsers(dest='command')

    quick = sub.add_parser('quick', help='Simulate a single match and print its log')
    quick.add_argument('--home', type=str, default=None)
    quick.add_argument('--away', type=str, default=None)

    sub.add_parser('list', help='List available teams')

    export = sub.add_parser('export', help='Simulate and write a CSV export')
    export.add_argument('--mode', choices=[t.value for t in SimulationType], required=True)
    export.add_argument('--out', type=str, required=True)
    export.add_argument('--team', dest='teams', action='append', required=True)

    play = sub.add_parser('play', help='Play simulations back at the chosen speed')
    play.add_argument('--mode', dest='modes', action='append',
                      choices=[t.value for t in SimulationType])
    play.add_argument('--team', dest='teams', action='append', default=[])

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    base_seed = args.seed if args.seed is not None else Rng.from_time().next_u64()

    try:
        if args.command == 'quick':
            quick_mode(args.home, args.away, base_seed)
        elif args.command == 'list':
            list_mode()
        elif args.command == 'export':
            export_mode(args.mode, args.out, args.teams, base_seed)
        else:
            modes = getattr(args, 'modes', None) or [SimulationType.SINGLE.value]
            teams = getattr(args, 'teams', None) or []
            play_mode(modes, teams, base_seed, args.speed)
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        return 1
    except SoccerCloudError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

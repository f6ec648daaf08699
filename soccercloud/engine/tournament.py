"""
Tournament orchestration built on the match engine.

Composes matches into a single fixture, a 4-team round-robin league or a
4-team knockout, recording frames, a history log and the final outcome.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .match import MatchResult, match_stats_lines, simulate_match
from .rng import Rng
from .team import display_name
from ..errors import ValidationError
from ..logger.frame_logger import FrameLogger, SimFrame

_log = logging.getLogger("soccercloud.tournament")

PENALTY_CONVERSION = 0.76
PENALTY_ROUNDS = 5
SUDDEN_DEATH_ROUNDS = 20

LEAGUE_FIXTURES: Tuple[Tuple[int, int], ...] = ((0, 1), (2, 3), (0, 2), (1, 3), (0, 3), (1, 2))
KNOCKOUT_SEMIS: Tuple[Tuple[int, int], ...] = ((0, 3), (1, 2))


class SimulationType(Enum):
    """Tournament format of a simulation."""
    SINGLE = "single"
    LEAGUE4 = "league4"
    KNOCKOUT4 = "knockout4"

    @property
    def required_teams(self) -> int:
        return 2 if self is SimulationType.SINGLE else 4

    @property
    def label(self) -> str:
        return {
            SimulationType.SINGLE: "Single Match",
            SimulationType.LEAGUE4: "4-Team League",
            SimulationType.KNOCKOUT4: "4-Team Knockout",
        }[self]

    @classmethod
    def parse(cls, mode: str) -> 'SimulationType':
        try:
            return cls(mode)
        except ValueError:
            raise ValidationError(f"Unsupported mode: {mode}") from None


@dataclass
class StandingsRow:
    """One team's league record."""
    team: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0

    def record_result(self, scored: int, conceded: int) -> None:
        """Apply one match result. Goal difference is recomputed, never drifted."""
        self.played += 1
        self.goals_for += scored
        self.goals_against += conceded
        self.goal_difference = self.goals_for - self.goals_against
        if scored > conceded:
            self.won += 1
            self.points += 3
        elif scored == conceded:
            self.drawn += 1
            self.points += 1
        else:
            self.lost += 1


def standings_sort_key(row: StandingsRow) -> Tuple[int, int, int, str]:
    """Points, goal difference and goals scored descending, then name ascending."""
    return (-row.points, -row.goal_difference, -row.goals_for, row.team)


def sort_standings(rows: Sequence[StandingsRow]) -> List[StandingsRow]:
    return sorted(rows, key=standings_sort_key)


@dataclass(frozen=True)
class SingleOutcome:
    result: MatchResult


@dataclass(frozen=True)
class LeagueOutcome:
    champion: str
    final_table: Tuple[StandingsRow, ...]


@dataclass(frozen=True)
class KnockoutOutcome:
    champion: str


SimOutcome = Union[SingleOutcome, LeagueOutcome, KnockoutOutcome]


@dataclass(frozen=True)
class PreparedSimulation:
    """Complete output of one simulation run; only read during playback."""
    frames: Tuple[SimFrame, ...]
    outcome: SimOutcome
    history_lines: Tuple[str, ...] = field(default_factory=tuple)


def penalties(rng: Rng) -> Tuple[int, int, bool]:
    """
    Penalty shootout: five kicks each, then sudden death.

    Sudden death runs for at most 20 rounds. If the sides are somehow still
    level after that, a fair coin from the same stream decides the winner and
    the returned scores stay level.

    Returns:
        Tuple of (home score, away score, home won)
    """
    home = away = 0
    for _ in range(PENALTY_ROUNDS):
        if rng.chance(PENALTY_CONVERSION):
            home += 1
        if rng.chance(PENALTY_CONVERSION):
            away += 1

    rounds = 0
    while home == away and rounds < SUDDEN_DEATH_ROUNDS:
        if rng.chance(PENALTY_CONVERSION):
            home += 1
        if rng.chance(PENALTY_CONVERSION):
            away += 1
        rounds += 1

    if home == away:
        _log.warning("Shootout still level at %d-%d after sudden death; tossing a coin", home, away)
        return home, away, rng.chance(0.5)
    return home, away, home > away


def league_table_lines(rows: Sequence[StandingsRow]) -> List[str]:
    lines = [
        "TEAM                         P  W  D  L  GF GA GD PTS",
        "--------------------------------------------------------",
    ]
    for r in rows:
        lines.append(
            f"{r.team:<28} {r.played:>2} {r.won:>2} {r.drawn:>2} {r.lost:>2} "
            f"{r.goals_for:>3} {r.goals_against:>2} {r.goal_difference:>3} {r.points:>3}"
        )
    return lines


def knockout_bracket_lines(semi1: Optional[str] = None,
                           semi2: Optional[str] = None,
                           final_line: Optional[str] = None,
                           champion: Optional[str] = None) -> List[str]:
    return [
        "Knockout Bracket",
        f"Semi 1: {semi1 or 'TBD'}",
        "            \\",
        f"            +-- Final: {final_line or 'TBD'}",
        "            /",
        f"Semi 2: {semi2 or 'TBD'}",
        f"Champion: {champion or 'TBD'}",
    ]


def _check_teams(sim_type: SimulationType, teams: Sequence[str]) -> None:
    if len(teams) != sim_type.required_teams:
        raise ValidationError(
            f"mode {sim_type.value} requires exactly {sim_type.required_teams} teams, got {len(teams)}"
        )
    if len(set(teams)) != len(teams):
        raise ValidationError(f"mode {sim_type.value} requires distinct teams")


def run_single(teams: Sequence[str], rng: Rng) -> PreparedSimulation:
    """One match plus a full-time frame carrying the stats panel."""
    _check_teams(SimulationType.SINGLE, teams)
    home, away = teams[0], teams[1]
    result, match_frames = simulate_match(home, away, rng)

    frame_logger = FrameLogger()
    frame_logger.extend(match_frames)
    frame_logger.log_frame(
        f"{display_name(result.home)} {result.home_goals}-{result.away_goals} "
        f"{display_name(result.away)} | FT",
        stats_lines=match_stats_lines(result),
    )
    return PreparedSimulation(
        frames=tuple(frame_logger.frames),
        outcome=SingleOutcome(result),
        history_lines=(),
    )


def run_league4(teams: Sequence[str], rng: Rng) -> PreparedSimulation:
    """
    Single round-robin between four teams.

    Frames: a table-created frame, then per fixture an announcement frame,
    the match frames and a table-updated frame; finally a league-complete
    frame naming the champion.
    """
    _check_teams(SimulationType.LEAGUE4, teams)
    fixtures = [(teams[h], teams[a]) for h, a in LEAGUE_FIXTURES]
    table: Dict[str, StandingsRow] = {team: StandingsRow(team) for team in teams}
    frame_logger = FrameLogger()
    history: List[str] = []
    last_stats: List[str] = []

    frame_logger.log_frame(
        "League created - waiting for Matchday 1",
        ["League table initialized"],
        competition_lines=league_table_lines(sort_standings(list(table.values()))),
    )

    for idx, (home, away) in enumerate(fixtures, start=1):
        frame_logger.log_frame(
            f"Running League Match {idx}/{len(fixtures)}",
            [f"League fixture {idx}/{len(fixtures)}: {display_name(home)} vs {display_name(away)}"],
        )

        result, match_frames = simulate_match(home, away, rng)
        frame_logger.extend(match_frames)
        last_stats = match_stats_lines(result)

        table[home].record_result(result.home_goals, result.away_goals)
        table[away].record_result(result.away_goals, result.home_goals)

        line = result.score_line()
        history.append(line)
        frame_logger.log_frame(
            f"League table updated after Match {idx}",
            ["Standings updated"],
            stats_lines=last_stats,
            competition_lines=league_table_lines(sort_standings(list(table.values()))),
            history_append=[line],
        )

    final_table = sort_standings(list(table.values()))
    champion = final_table[0].team
    champion_line = f"Champion: {display_name(champion)} with {final_table[0].points} pts"
    history.append(champion_line)
    _log.debug("League complete, champion %s", champion)

    frame_logger.log_frame(
        f"League complete - Champion {display_name(champion)}",
        ["League finished"],
        stats_lines=last_stats,
        competition_lines=league_table_lines(final_table),
        history_append=[champion_line],
    )

    return PreparedSimulation(
        frames=tuple(frame_logger.frames),
        outcome=LeagueOutcome(champion=champion, final_table=tuple(final_table)),
        history_lines=tuple(history),
    )


def _decide_tie(result: MatchResult, rng: Rng, label: str) -> Tuple[str, str]:
    """
    Resolve a knockout tie, going to penalties when level.

    Returns:
        Tuple of (winner, result line)
    """
    line = f"{label}: {result.score_line()}"
    if result.is_draw:
        pens_home, pens_away, home_won = penalties(rng)
        line += f" (pens {pens_home}-{pens_away})"
        return (result.home if home_won else result.away), line
    if result.home_goals > result.away_goals:
        return result.home, line
    return result.away, line


def run_knockout4(teams: Sequence[str], rng: Rng) -> PreparedSimulation:
    """
    Four-team knockout: seed 1 v 4 and 2 v 3, winners meet in the final.

    Level ties after 90 minutes are decided by one penalty shootout.
    """
    _check_teams(SimulationType.KNOCKOUT4, teams)
    semis = [(teams[h], teams[a]) for h, a in KNOCKOUT_SEMIS]
    frame_logger = FrameLogger()
    history: List[str] = []
    winners: List[str] = []
    semi_lines: List[str] = []

    frame_logger.log_frame(
        "Knockout bracket initialized",
        ["Semi-finals ready"],
        competition_lines=knockout_bracket_lines(),
    )

    for idx, (home, away) in enumerate(semis, start=1):
        frame_logger.log_frame(
            f"Running Semi-final {idx}/2",
            [f"Semi {idx}: {display_name(home)} vs {display_name(away)}"],
        )
        result, match_frames = simulate_match(home, away, rng)
        frame_logger.extend(match_frames)

        winner, line = _decide_tie(result, rng, f"Semi {idx}")
        history.append(line)
        semi_lines.append(line)
        winners.append(winner)

        frame_logger.log_frame(
            f"Semi-final {idx} complete",
            ["Bracket updated"],
            stats_lines=match_stats_lines(result),
            competition_lines=knockout_bracket_lines(*semi_lines),
            history_append=[line],
        )

    frame_logger.log_frame(
        "Running Final",
        [f"Final: {display_name(winners[0])} vs {display_name(winners[1])}"],
    )
    final_result, match_frames = simulate_match(winners[0], winners[1], rng)
    frame_logger.extend(match_frames)

    champion, final_line = _decide_tie(final_result, rng, "Final")
    history.append(final_line)
    champion_line = f"Champion: {display_name(champion)} 🏆"
    history.append(champion_line)
    _log.debug("Knockout complete, champion %s", champion)

    frame_logger.log_frame(
        f"Knockout complete - {display_name(champion)}",
        ["Final complete"],
        stats_lines=match_stats_lines(final_result),
        competition_lines=knockout_bracket_lines(semi_lines[0], semi_lines[1], final_line, champion_line),
        history_append=[final_line, champion_line],
    )

    return PreparedSimulation(
        frames=tuple(frame_logger.frames),
        outcome=KnockoutOutcome(champion=champion),
        history_lines=tuple(history),
    )


_RUNNERS = {
    SimulationType.SINGLE: run_single,
    SimulationType.LEAGUE4: run_league4,
    SimulationType.KNOCKOUT4: run_knockout4,
}


def run_simulation(sim_type: SimulationType, teams: Sequence[str], rng: Rng) -> PreparedSimulation:
    """Run a whole simulation of the given format to completion."""
    return _RUNNERS[sim_type](teams, rng)


def outcome_summary(outcome: SimOutcome) -> str:
    """One-line description of an outcome."""
    if isinstance(outcome, SingleOutcome):
        m = outcome.result
        return f"{m.home} {m.home_goals}-{m.away_goals} {m.away}"
    if isinstance(outcome, (LeagueOutcome, KnockoutOutcome)):
        return f"Champion: {outcome.champion}"
    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")

"""
CSV projection of a finished simulation.

Rows depend on the outcome kind: a stat comparison for a single match, the
final table for a league, and the tagged history for a knockout. Every cell
is guarded against spreadsheet formula injection.
"""

import logging
from typing import List, Sequence, Tuple

import pandas as pd

from ..engine.tournament import (
    KnockoutOutcome,
    LeagueOutcome,
    PreparedSimulation,
    SingleOutcome,
)
from ..errors import ExportError

_log = logging.getLogger("soccercloud.csv_export")

CSV_INJECTION_PREFIX = "'"
FORMULA_TRIGGERS = ("=", "+", "-", "@")

Rows = Tuple[List[str], List[List[str]]]


def sanitize_cell(raw: str) -> str:
    """Prefix a quote when the (trimmed) value would start a formula."""
    if raw.strip().startswith(FORMULA_TRIGGERS):
        return CSV_INJECTION_PREFIX + raw
    return raw


def knockout_stage(line: str) -> str:
    """Stage label for a knockout history line."""
    for stage in ("Semi 1", "Semi 2", "Final", "Champion"):
        if line.startswith(stage):
            return stage
    return "Info"


def _single_rows(outcome: SingleOutcome) -> Rows:
    m = outcome.result
    home, away = m.stats.home, m.stats.away
    body = [
        ["Team", m.home, m.away],
        ["Goals", m.home_goals, m.away_goals],
        ["Shots", home.shots, away.shots],
        ["Shots on Target", home.shots_on_target, away.shots_on_target],
        ["xG", f"{home.xg:.2f}", f"{away.xg:.2f}"],
        ["Possession", f"{m.home_possession}%", f"{m.away_possession}%"],
        ["Corners", home.corners, away.corners],
        ["Fouls", home.fouls, away.fouls],
        ["Yellow Cards", home.yellows, away.yellows],
        ["Saves", home.saves, away.saves],
    ]
    return ["Category", "Home Team", "Away Team"], [[str(c) for c in row] for row in body]


def _league_rows(outcome: LeagueOutcome) -> Rows:
    body = [
        [str(v) for v in (r.team, r.played, r.won, r.drawn, r.lost,
                          r.goals_for, r.goals_against, r.goal_difference, r.points)]
        for r in outcome.final_table
    ]
    return ["Team", "P", "W", "D", "L", "GF", "GA", "GD", "Pts"], body


def _knockout_rows(history_lines: Sequence[str]) -> Rows:
    return ["Stage", "Match Result"], [[knockout_stage(line), line] for line in history_lines]


def simulation_rows(sim: PreparedSimulation) -> Rows:
    """Header and body rows for a prepared simulation, before escaping."""
    outcome = sim.outcome
    if isinstance(outcome, SingleOutcome):
        return _single_rows(outcome)
    if isinstance(outcome, LeagueOutcome):
        return _league_rows(outcome)
    if isinstance(outcome, KnockoutOutcome):
        return _knockout_rows(sim.history_lines)
    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")


def simulation_to_csv_bytes(sim: PreparedSimulation) -> bytes:
    """
    Serialize a prepared simulation to UTF-8 CSV.

    Fields containing a comma, double quote or newline are quoted with inner
    quotes doubled (pandas' minimal quoting).

    Args:
        sim: Finished simulation

    Returns:
        bytes: CSV content, one row per line
    """
    header, body = simulation_rows(sim)
    df = pd.DataFrame(
        [[sanitize_cell(cell) for cell in row] for row in body],
        columns=[sanitize_cell(cell) for cell in header],
        dtype=object,
    )
    return df.to_csv(index=False, lineterminator="\n").encode("utf-8")


def write_csv(sim: PreparedSimulation, filepath: str) -> None:
    """
    Export a prepared simulation to a CSV file.

    Args:
        sim: Finished simulation
        filepath: Output file path

    Raises:
        ExportError: When the file cannot be written
    """
    data = simulation_to_csv_bytes(sim)
    try:
        with open(filepath, "wb") as fh:
            fh.write(data)
    except OSError as e:
        raise ExportError(f"Export failed: {e}") from e
    _log.info("Exported %d bytes to %s", len(data), filepath)

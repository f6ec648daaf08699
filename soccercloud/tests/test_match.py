"""
Test the minute-stepped match engine.

Validates frame structure, reproducibility, statistics consistency with the
narrative, foul attribution and the possession split.
"""

import re

import pytest

from soccercloud.engine.match import (
    MatchEngine,
    match_stats_lines,
    possession_split,
    simulate_match,
)
from soccercloud.engine.rng import Rng
from soccercloud.engine.team import (
    TEAMS,
    TeamProfile,
    TeamStats,
    display_name,
    profile_for,
    tactic_by_key,
)
from soccercloud.engine.xg import ExpectedGoalsModel


class ScriptedRng(Rng):
    """Stream that replays fixed floats, for pinning a single minute."""

    def __init__(self, values):
        super().__init__(1)
        self.values = list(values)

    def next_f64(self) -> float:
        return self.values.pop(0)


@pytest.fixture
def classic():
    return simulate_match("Arsenal", "Real Madrid", Rng(42))


def test_match_produces_91_frames(classic):
    """Test that a match is a kickoff frame plus one frame per minute."""
    _, frames = classic
    assert len(frames) == 91
    assert frames[0].scoreboard.endswith("| 00'")
    assert frames[45].scoreboard.endswith("| 45'")
    assert frames[-1].scoreboard.endswith("| 90'")


def test_kickoff_line(classic):
    """Test the kickoff narrative names formations and tactics."""
    _, frames = classic
    assert frames[0].logs == (
        f"Kickoff! {display_name('Arsenal')} (4-3-3, Possession) vs "
        f"{display_name('Real Madrid')} (4-3-3, Counter)",
    )


def test_halftime_and_fulltime_lines(classic):
    """Test that halftime and full time are logged on minutes 45 and 90."""
    result, frames = classic
    assert any(line.startswith("Halftime - ") for line in frames[45].logs)
    assert frames[-1].logs[-1] == f"Full time - {result.score_line()}"


def test_match_is_deterministic():
    """Test that the same seed reproduces the same match exactly."""
    first_result, first_frames = simulate_match("Arsenal", "Real Madrid", Rng(42))
    second_result, second_frames = simulate_match("Arsenal", "Real Madrid", Rng(42))
    assert first_frames == second_frames
    assert first_result.score_line() == second_result.score_line()
    assert first_result.stats == second_result.stats


@pytest.mark.parametrize("seed", range(10))
def test_goals_match_narrative(seed):
    """Test that every goal and save is narrated for the right side."""
    result, frames = simulate_match("Liverpool", "Inter", Rng(seed))
    lines = [line for frame in frames for line in frame.logs]

    home_goals = sum(1 for line in lines if f"GOOOOAL - {display_name('Liverpool')}" in line)
    away_goals = sum(1 for line in lines if f"GOOOOAL - {display_name('Inter')}" in line)
    assert (home_goals, away_goals) == (result.home_goals, result.away_goals)

    home_saves = sum(1 for line in lines if f"Big save by {display_name('Liverpool')}'s keeper" in line)
    assert home_saves == result.stats.home.saves


@pytest.mark.parametrize("seed", range(10))
def test_stat_invariants(seed):
    """Test counter relationships that every match must satisfy."""
    result, _ = simulate_match("Bayern Munich", "Juventus", Rng(seed))
    home, away = result.stats.home, result.stats.away

    for side in (home, away):
        assert side.shots_on_target <= side.shots
        assert side.yellows <= side.fouls
        assert side.shots <= side.attacks
        assert side.xg >= 0.0

    # every shot on target is either scored or saved
    assert home.shots_on_target == result.home_goals + away.saves
    assert away.shots_on_target == result.away_goals + home.saves
    assert result.home_possession + result.away_possession == 100


def test_foul_goes_to_defending_side():
    """Test that a foul forced by the attacking side is charged to the defenders."""
    engine = MatchEngine("Liverpool", "Inter", Rng(1))
    engine.match_state.minute = 30
    # home wins the coin, no attack, foul, yellow
    engine.rng = ScriptedRng([0.0, 0.99, 0.0, 0.0])
    logs = engine._simulate_minute()

    assert engine.stats.away.fouls == 1
    assert engine.stats.away.yellows == 1
    assert engine.stats.home.fouls == 0
    assert logs == [f"30' Yellow card to {display_name('Inter')}."]


def test_pressure_window():
    """Test that opening and closing minutes play at boosted intensity."""
    engine = MatchEngine("Arsenal", "Ajax", Rng(1))
    for minute, expected in ((1, 1.2), (14, 1.2), (15, 1.0), (75, 1.0), (76, 1.2), (90, 1.2)):
        engine.match_state.minute = minute
        assert engine._pressure() == expected


def test_possession_even_without_attacks():
    """Test that a match with no attacks splits possession 50/50."""
    counter = TeamProfile("4-4-2", "counter")
    assert possession_split(0, 0, counter, counter) == (50, 50)


def test_possession_boost_for_possession_tactic():
    """Test that possession sides get their attack count boosted by 15%."""
    counter = TeamProfile("4-4-2", "counter")
    possession = TeamProfile("4-3-3", "possession")
    assert possession_split(10, 10, counter, counter) == (50, 50)
    assert possession_split(10, 10, possession, counter) == (53, 47)
    assert possession_split(10, 30, counter, counter) == (25, 75)


def test_possession_rounds_half_up():
    """Test that exact halves round away from zero."""
    counter = TeamProfile("4-4-2", "counter")
    assert possession_split(1, 7, counter, counter) == (13, 87)


def test_match_stats_lines(classic):
    """Test the eight-line stats panel."""
    result, _ = classic
    lines = match_stats_lines(result)
    assert len(lines) == 8
    assert lines[0].startswith("Tactics: ")
    assert lines[2] == f"xG: {result.stats.home.xg:.2f} vs {result.stats.away.xg:.2f}"
    assert lines[-1] == f"Possession: {result.home_possession}% vs {result.away_possession}%"


def test_scoreboard_format(classic):
    """Test the scoreboard layout including formations and zero-padded minute."""
    _, frames = classic
    pattern = re.compile(r".+ \(4-3-3\) \d+ - \d+ .+ \(4-3-3\) \| \d{2}'$")
    assert all(pattern.match(frame.scoreboard) for frame in frames)


def test_every_team_has_a_profile():
    """Test that the catalog resolves a real tactic for every team."""
    for team in TEAMS:
        profile = profile_for(team)
        assert tactic_by_key(profile.tactic).key == profile.tactic


def test_unknown_stat_event_rejected():
    """Test that an unknown event type is not silently ignored."""
    with pytest.raises(ValueError):
        TeamStats().update_stats("throw_in")


def test_expected_goal_ranges():
    """Test xG draws at the edges of both chance types."""
    model = ExpectedGoalsModel()
    neutral = tactic_by_key("counter")
    block = tactic_by_key("low_block")

    fast = model.expected_goal(ScriptedRng([0.0]), True, neutral, neutral)
    assert fast == pytest.approx(0.20 * neutral.goal_mult / neutral.block_mult)

    open_play = model.expected_goal(ScriptedRng([0.0]), False, neutral, block)
    assert open_play == pytest.approx(0.05 * neutral.goal_mult / block.block_mult)


def test_seed_42_reference_match(classic):
    """Test the reference match for seed 42 against known values."""
    result, frames = classic
    assert (result.home_goals, result.away_goals) == (0, 2)
    assert result.stats.home.xg == pytest.approx(0.665698, abs=1e-6)
    assert result.stats.away.xg == pytest.approx(1.131168, abs=1e-6)

    goals = [line for frame in frames for line in frame.logs if "GOOOOAL" in line]
    assert len(goals) == 2
    assert goals[0] == f"13' GOOOOAL - {display_name('Real Madrid')} (cut-back finish, xG 0.23)"
    assert goals[1].startswith(f"84' GOOOOAL - {display_name('Real Madrid')} (")
    assert goals[1].endswith(", xG 0.28)")

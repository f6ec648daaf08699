"""
Main match engine for football simulation.

Simulates a 90-minute match minute by minute from a seeded random stream
and records the narrative as playback frames.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Tuple

from .rng import Rng
from .team import Tactic, TeamProfile, TeamStats, display_name, profile_for, tactic_by_key
from .xg import ExpectedGoalsModel
from ..logger.frame_logger import FrameLogger, SimFrame

_log = logging.getLogger("soccercloud.match")


@dataclass
class MatchStats:
    """Home and away counters for one match."""
    home: TeamStats = field(default_factory=TeamStats)
    away: TeamStats = field(default_factory=TeamStats)


@dataclass(frozen=True)
class MatchResult:
    """Final result of a simulated match. Created once at full time."""
    home: str
    away: str
    home_goals: int
    away_goals: int
    home_profile: TeamProfile
    away_profile: TeamProfile
    stats: MatchStats
    home_possession: int
    away_possession: int

    @property
    def is_draw(self) -> bool:
        return self.home_goals == self.away_goals

    def score_line(self) -> str:
        return f"{display_name(self.home)} {self.home_goals}-{self.away_goals} {display_name(self.away)}"


@dataclass
class MatchState:
    """Current state of the football match."""
    minute: int = 0
    home_score: int = 0
    away_score: int = 0


def pad2(minute: int) -> str:
    return f"{minute:02d}"


def possession_split(home_attacks: int,
                     away_attacks: int,
                     home_profile: TeamProfile,
                     away_profile: TeamProfile) -> Tuple[int, int]:
    """
    Possession percentages from attacking-possession counts.

    A possession-tactic side gets its count boosted by 15%. With no attacks
    at all the split is 50/50.
    """
    home_base = home_attacks * (1.15 if home_profile.tactic == "possession" else 1.0)
    away_base = away_attacks * (1.15 if away_profile.tactic == "possession" else 1.0)
    total = home_base + away_base
    if total <= 0:
        return 50, 50
    # round half away from zero
    home_pct = int(math.floor(home_base / total * 100.0 + 0.5))
    return home_pct, 100 - home_pct


class MatchEngine:
    """
    Minute-stepped football match simulation engine.

    Implements:
    - 90 one-minute steps with early/late pressure
    - Tactic-weighted possession per minute
    - Attack -> shot -> on target -> goal event chains
    - Corners, offsides, fouls and yellow cards
    - One playback frame per minute plus a kickoff frame

    The engine consumes the stream it is given; subsequent users of the same
    Rng continue where the match left off.
    """

    MATCH_MINUTES = 90
    HALF_TIME_MINUTE = 45
    PRESSURE_BOOST = 1.2

    ATTACK_PROB = 0.24
    FAST_BREAK_SHOT_PROB = 0.75
    OPEN_PLAY_SHOT_PROB = 0.55
    ON_TARGET_PROB = 0.52
    NEAR_MISS_LOG_PROB = 0.25
    CORNER_PROB = 0.05
    OFFSIDE_BASE_PROB = 0.035
    OFFSIDE_FAST_BREAK_PROB = 0.02
    FOUL_PROB = 0.07
    YELLOW_PROB = 0.22

    def __init__(self, home: str, away: str, rng: Rng):
        """
        Initialize match engine with two teams.

        Args:
            home: Home team name
            away: Away team name
            rng: Random stream owned by the calling simulation
        """
        self.home = home
        self.away = away
        self.rng = rng

        self.home_profile = profile_for(home)
        self.away_profile = profile_for(away)
        self.home_tactic = tactic_by_key(self.home_profile.tactic)
        self.away_tactic = tactic_by_key(self.away_profile.tactic)

        self.match_state = MatchState()
        self.stats = MatchStats()
        self.xg_model = ExpectedGoalsModel()
        self.frame_logger = FrameLogger()

    def simulate_match(self) -> Tuple[MatchResult, List[SimFrame]]:
        """
        Simulate the complete match.

        Returns:
            Tuple of the final MatchResult and the 91 minute frames
        """
        self._kickoff()

        while self.match_state.minute < self.MATCH_MINUTES:
            self.match_state.minute += 1
            logs = self._simulate_minute()
            self.frame_logger.log_frame(self._scoreboard(), logs)

        result = self._build_result()
        _log.debug("Full time: %s (xG %.2f - %.2f)", result.score_line(),
                   result.stats.home.xg, result.stats.away.xg)
        return result, list(self.frame_logger.frames)

    def _kickoff(self) -> None:
        kickoff = (
            f"Kickoff! {display_name(self.home)} ({self.home_profile.formation}, {self.home_tactic.label})"
            f" vs {display_name(self.away)} ({self.away_profile.formation}, {self.away_tactic.label})"
        )
        self.frame_logger.log_frame(self._scoreboard(), [kickoff])

    def _scoreboard(self) -> str:
        state = self.match_state
        return (
            f"{display_name(self.home)} ({self.home_profile.formation}) "
            f"{state.home_score} - {state.away_score} "
            f"{display_name(self.away)} ({self.away_profile.formation}) | {pad2(state.minute)}'"
        )

    def _pressure(self) -> float:
        """Early and late minutes are played at higher intensity."""
        minute = self.match_state.minute
        if minute < 15 or minute > 75:
            return self.PRESSURE_BOOST
        return 1.0

    def _simulate_minute(self) -> List[str]:
        """Simulate one minute and return its narrative lines."""
        rng = self.rng
        minute = pad2(self.match_state.minute)
        pressure = self._pressure()
        logs: List[str] = []

        home_bias = self.home_tactic.attack_bias
        away_bias = self.away_tactic.attack_bias
        home_attacks = rng.next_f64() * (home_bias + away_bias) < home_bias

        if home_attacks:
            atk_team, def_team = self.home, self.away
            atk_tactic, def_tactic = self.home_tactic, self.away_tactic
            atk_stats, def_stats = self.stats.home, self.stats.away
        else:
            atk_team, def_team = self.away, self.home
            atk_tactic, def_tactic = self.away_tactic, self.home_tactic
            atk_stats, def_stats = self.stats.away, self.stats.home

        if rng.chance(self.ATTACK_PROB * pressure):
            self._attacking_possession(
                logs, minute, pressure, home_attacks,
                atk_team, def_team, atk_tactic, def_tactic, atk_stats, def_stats,
            )

        # Pressing sides force fouls out of the team trying to play out;
        # the foul and any card go against the defending side.
        if rng.chance(self.FOUL_PROB * atk_tactic.press_mult * atk_tactic.foul_mult):
            def_stats.update_stats("foul")
            if rng.chance(self.YELLOW_PROB * atk_tactic.press_mult):
                def_stats.update_stats("yellow_card")
                logs.append(f"{minute}' Yellow card to {display_name(def_team)}.")

        if self.match_state.minute == self.HALF_TIME_MINUTE:
            logs.append(f"Halftime - {self._score_text()}")
        if self.match_state.minute == self.MATCH_MINUTES:
            logs.append(f"Full time - {self._score_text()}")

        return logs

    def _attacking_possession(self,
                              logs: List[str],
                              minute: str,
                              pressure: float,
                              home_attacks: bool,
                              atk_team: str,
                              def_team: str,
                              atk_tactic: Tactic,
                              def_tactic: Tactic,
                              atk_stats: TeamStats,
                              def_stats: TeamStats) -> None:
        """Execute an attacking possession: shot chain, corner and offside."""
        rng = self.rng
        atk_stats.update_stats("attack")
        fast_break = rng.chance(atk_tactic.fast_break)
        shot_prob = self.FAST_BREAK_SHOT_PROB if fast_break else self.OPEN_PLAY_SHOT_PROB

        if rng.chance(shot_prob * pressure):
            atk_stats.update_stats("shot")
            xg = self.xg_model.expected_goal(rng, fast_break, atk_tactic, def_tactic)

            on_target = rng.chance(self.ON_TARGET_PROB)
            if on_target:
                atk_stats.update_stats("shot_on_target")

            if on_target and rng.chance(xg):
                self._score_goal(home_attacks)
                finish = self.xg_model.finish_label(fast_break)
                logs.append(f"{minute}' GOOOOAL - {display_name(atk_team)} ({finish}, xG {xg:.2f})")
            elif on_target:
                def_stats.update_stats("save")
                logs.append(f"{minute}' Big save by {display_name(def_team)}'s keeper!")
            elif rng.chance(self.NEAR_MISS_LOG_PROB):
                logs.append(f"{minute}' {display_name(atk_team)} fire it just wide.")
            atk_stats.xg += xg

        if rng.chance(self.CORNER_PROB * atk_tactic.attack_bias):
            atk_stats.update_stats("corner")
            logs.append(f"{minute}' Corner to {display_name(atk_team)}.")

        if rng.chance(self.OFFSIDE_BASE_PROB + self.OFFSIDE_FAST_BREAK_PROB * atk_tactic.fast_break):
            atk_stats.update_stats("offside")
            logs.append(f"{minute}' Flag up - {display_name(atk_team)} caught offside.")

    def _score_goal(self, home_scored: bool) -> None:
        if home_scored:
            self.match_state.home_score += 1
        else:
            self.match_state.away_score += 1

    def _score_text(self) -> str:
        return (f"{display_name(self.home)} {self.match_state.home_score}-"
                f"{self.match_state.away_score} {display_name(self.away)}")

    def _build_result(self) -> MatchResult:
        home_poss, away_poss = possession_split(
            self.stats.home.attacks, self.stats.away.attacks,
            self.home_profile, self.away_profile,
        )
        return MatchResult(
            home=self.home,
            away=self.away,
            home_goals=self.match_state.home_score,
            away_goals=self.match_state.away_score,
            home_profile=self.home_profile,
            away_profile=self.away_profile,
            stats=self.stats,
            home_possession=home_poss,
            away_possession=away_poss,
        )


def simulate_match(home: str, away: str, rng: Rng) -> Tuple[MatchResult, List[SimFrame]]:
    """Simulate one match between two named sides on the given stream."""
    return MatchEngine(home, away, rng).simulate_match()


def match_stats_lines(result: MatchResult) -> List[str]:
    """Eight human-readable stat lines for the stats panel."""
    home_tactic = tactic_by_key(result.home_profile.tactic)
    away_tactic = tactic_by_key(result.away_profile.tactic)
    home, away = result.stats.home, result.stats.away

    return [
        f"Tactics: {display_name(result.home)} {home_tactic.label} | "
        f"{display_name(result.away)} {away_tactic.label}",
        f"Shots (On Target): {home.shots} ({home.shots_on_target}) vs "
        f"{away.shots} ({away.shots_on_target})",
        f"xG: {home.xg:.2f} vs {away.xg:.2f}",
        f"Corners: {home.corners} vs {away.corners}",
        f"Fouls (Yellows): {home.fouls} ({home.yellows}) vs {away.fouls} ({away.yellows})",
        f"Offsides: {home.offsides} vs {away.offsides}",
        f"Saves: {home.saves} vs {away.saves}",
        f"Possession: {result.home_possession}% vs {result.away_possession}%",
    ]

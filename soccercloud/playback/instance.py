"""
Playback state machine for one simulation instance.

An instance computes its whole simulation once on start() and then reveals
it frame by frame through tick(). Frame application is a pure reducer over
an immutable Projection, so rendering code never touches engine state.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..config import MAX_LOG_LINES
from ..engine.rng import Rng
from ..engine.tournament import PreparedSimulation, SimulationType, outcome_summary, run_simulation
from ..errors import StateError
from ..logger.csv_export import simulation_to_csv_bytes
from ..logger.frame_logger import SimFrame

_log = logging.getLogger("soccercloud.instance")

WAITING_SCOREBOARD = "Waiting for kickoff..."
COMPLETED_LOG_LINE = "Simulation completed."


@dataclass(frozen=True)
class Pending:
    label = "pending"


@dataclass(frozen=True)
class Running:
    frame_index: int
    total_frames: int
    label = "running"


@dataclass(frozen=True)
class Completed:
    label = "completed"


SimStatus = Union[Pending, Running, Completed]


@dataclass(frozen=True)
class Projection:
    """What a front end shows for an instance at one point of playback."""
    scoreboard: str = WAITING_SCOREBOARD
    logs: Tuple[str, ...] = ()
    stats_lines: Tuple[str, ...] = ()
    competition_lines: Tuple[str, ...] = ()
    history_lines: Tuple[str, ...] = ()

    def with_logs(self, lines: Iterable[str], max_lines: int = MAX_LOG_LINES) -> 'Projection':
        """Append log lines, dropping the oldest beyond max_lines."""
        lines = tuple(lines)
        if not lines:
            return self
        logs = self.logs + lines
        if len(logs) > max_lines:
            logs = logs[-max_lines:]
        return replace(self, logs=logs)


def apply_frame(projection: Projection, frame: SimFrame, max_lines: int = MAX_LOG_LINES) -> Projection:
    """
    Apply one frame to a projection.

    The scoreboard is overwritten, log lines appended (bounded), stats and
    competition panels replaced only when the frame carries them, and
    history lines appended.
    """
    updated = replace(
        projection,
        scoreboard=frame.scoreboard,
        stats_lines=projection.stats_lines if frame.stats_lines is None else frame.stats_lines,
        competition_lines=(projection.competition_lines if frame.competition_lines is None
                           else frame.competition_lines),
        history_lines=projection.history_lines + frame.history_append,
    )
    return updated.with_logs(frame.logs, max_lines)


def replay(frames: Sequence[SimFrame], projection: Optional[Projection] = None) -> Projection:
    """Fold a frame sequence into a projection."""
    projection = projection or Projection()
    for frame in frames:
        projection = apply_frame(projection, frame)
    return projection


class SimulationInstance:
    """
    One user-visible simulation session behind a playback cursor.

    States: Pending -> Running(frame_index, total_frames) -> Completed.
    Completed is terminal; further ticks do nothing.
    """

    def __init__(self, instance_id: int, sim_type: SimulationType, teams: Sequence[str], seed: int):
        self.id = instance_id
        self.sim_type = sim_type
        self.teams: List[str] = list(teams)
        self.seed = seed
        self.status: SimStatus = Pending()
        self.projection = Projection()
        self._prepared: Optional[PreparedSimulation] = None

    @property
    def scoreboard(self) -> str:
        return self.projection.scoreboard

    @property
    def logs(self) -> List[str]:
        return list(self.projection.logs)

    @property
    def stats_lines(self) -> List[str]:
        return list(self.projection.stats_lines)

    @property
    def competition_lines(self) -> List[str]:
        return list(self.projection.competition_lines)

    @property
    def history_lines(self) -> List[str]:
        return list(self.projection.history_lines)

    @property
    def prepared(self) -> Optional[PreparedSimulation]:
        return self._prepared

    @property
    def is_running(self) -> bool:
        return isinstance(self.status, Running)

    @property
    def is_completed(self) -> bool:
        return isinstance(self.status, Completed)

    def start(self) -> None:
        """
        Run the whole simulation and move to Running at frame 0.

        No-op unless Pending. This is the expensive step; it never suspends.
        """
        if not isinstance(self.status, Pending):
            return

        prepared = run_simulation(self.sim_type, self.teams, Rng(self.seed))
        self._prepared = prepared
        self.projection = replace(self.projection, stats_lines=(), competition_lines=(), history_lines=())
        self.status = Running(frame_index=0, total_frames=len(prepared.frames))
        self._push_log(f"Instance sim-{self.id} started (seed={self.seed})")
        _log.info("sim-%d started: %s %s, %d frames", self.id, self.sim_type.value,
                  self.teams, len(prepared.frames))

    def tick(self, frames_to_advance: int = 1) -> None:
        """Reveal up to frames_to_advance frames; complete when exhausted."""
        if self._prepared is None or not isinstance(self.status, Running):
            return

        frames = self._prepared.frames
        frame_index = self.status.frame_index
        total_frames = self.status.total_frames
        projection = self.projection

        for _ in range(frames_to_advance):
            if frame_index >= len(frames):
                break
            projection = apply_frame(projection, frames[frame_index])
            frame_index += 1

        self.projection = projection
        if frame_index >= total_frames:
            self._complete()
        else:
            self.status = Running(frame_index=frame_index, total_frames=total_frames)

    def _complete(self) -> None:
        self.status = Completed()
        self._push_log(COMPLETED_LOG_LINE)
        _log.info("sim-%d completed: %s", self.id, self.outcome_summary())

    def _push_log(self, line: str) -> None:
        self.projection = self.projection.with_logs([line])

    def clone_as(self, new_id: int, new_seed: int) -> 'SimulationInstance':
        """Fresh Pending instance with the same format and teams."""
        return SimulationInstance(new_id, self.sim_type, self.teams, new_seed)

    def progress_text(self) -> str:
        if isinstance(self.status, Running):
            return f"Running {self.status.frame_index}/{self.status.total_frames}"
        if isinstance(self.status, Completed):
            return "Completed"
        return "Ready to start"

    def outcome_summary(self) -> str:
        if self._prepared is None:
            return "No result yet"
        return outcome_summary(self._prepared.outcome)

    def title(self) -> str:
        if self.sim_type is SimulationType.SINGLE and len(self.teams) == 2:
            return f"Match: {self.teams[0]} vs {self.teams[1]}"
        return self.sim_type.label

    def export_filename(self) -> str:
        return f"sim-{self.id}-{self.sim_type.value}.csv"

    def export_csv(self) -> bytes:
        """
        CSV bytes of the prepared simulation.

        Raises:
            StateError: If start() has not run yet
        """
        if self._prepared is None:
            raise StateError("Simulation has not run yet")
        return simulation_to_csv_bytes(self._prepared)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.sim_type.value,
            "status": self.status.label,
            "seed": self.seed,
            "teams": list(self.teams),
            "title": self.title(),
            "progress": self.progress_text(),
            "scoreboard": self.scoreboard,
            "outcome": self.outcome_summary(),
        }

    def detail(self) -> Dict[str, Any]:
        detail = self.summary()
        detail.update(
            logs=self.logs,
            stats_lines=self.stats_lines,
            competition_lines=self.competition_lines,
            history_lines=self.history_lines,
        )
        return detail

"""
Frame logging for match and tournament simulation.

A simulation is recorded as an ordered list of immutable frames. Each frame
is one playback step: the scoreboard to show, narrative lines to append, and
optional replacements for the stats and competition panels.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class SimFrame:
    """
    Single playback unit produced by the engine.

    Frames never change after they are logged; playback only reads them.
    """
    scoreboard: str
    logs: Tuple[str, ...] = ()
    stats_lines: Optional[Tuple[str, ...]] = None
    competition_lines: Optional[Tuple[str, ...]] = None
    history_append: Tuple[str, ...] = ()


def _as_tuple(lines: Optional[Iterable[str]]) -> Optional[Tuple[str, ...]]:
    if lines is None:
        return None
    return tuple(lines)


@dataclass
class FrameLogger:
    """
    Collects frames for one simulation run.

    The match engine logs one frame per minute; orchestrators add the
    announcement, table and bracket frames around them.
    """
    frames: List[SimFrame] = field(default_factory=list)

    def log_frame(self,
                  scoreboard: str,
                  logs: Iterable[str] = (),
                  stats_lines: Optional[Iterable[str]] = None,
                  competition_lines: Optional[Iterable[str]] = None,
                  history_append: Iterable[str] = ()) -> SimFrame:
        """
        Append a frame and return it.

        Args:
            scoreboard: Scoreboard text that replaces the current one
            logs: Narrative lines appended to the log panel
            stats_lines: Replacement stats panel, or None to keep the current one
            competition_lines: Replacement table/bracket panel, or None
            history_append: Lines appended to the permanent history

        Returns:
            SimFrame: The frame that was logged
        """
        frame = SimFrame(
            scoreboard=scoreboard,
            logs=tuple(logs),
            stats_lines=_as_tuple(stats_lines),
            competition_lines=_as_tuple(competition_lines),
            history_append=tuple(history_append),
        )
        self.frames.append(frame)
        return frame

    def extend(self, frames: Iterable[SimFrame]) -> None:
        """Append frames recorded by another logger (e.g. a nested match)."""
        self.frames.extend(frames)

    def __len__(self) -> int:
        return len(self.frames)

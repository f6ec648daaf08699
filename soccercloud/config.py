"""
Configuration settings for SoccerCloud simulations.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Session limits
MAX_INSTANCES = 100
MAX_LOG_LINES = 1000

# Playback cadence
TICK_INTERVAL_SECONDS = 0.06  # background ticker in the shared service
LOOP_INTERVAL_SECONDS = 0.016  # single-consumer loop
INSTANT_FRAMES = 200  # enough to finish a single match in one tick
LOCK_TIMEOUT_SECONDS = 5.0  # a held lock longer than this means a wedged session


class Speed(Enum):
    """Playback speed: how many frames one tick reveals."""
    X1 = "1x"
    X2 = "2x"
    X4 = "4x"
    INSTANT = "instant"

    @property
    def frames_per_tick(self) -> int:
        return {
            Speed.X1: 1,
            Speed.X2: 2,
            Speed.X4: 4,
            Speed.INSTANT: INSTANT_FRAMES,
        }[self]

    @property
    def label(self) -> str:
        return "Instant" if self is Speed.INSTANT else self.value

    @classmethod
    def parse(cls, value: str) -> 'Speed':
        """Accept '1x', '2', 'instant', ... case-insensitively."""
        text = value.strip().lower()
        if text in ("0", "max"):
            return cls.INSTANT
        if text.isdigit():
            text += "x"
        for speed in cls:
            if speed.value == text:
                return speed
        raise ValueError(f"Unknown speed: {value}")


@dataclass
class ServiceConfig:
    """
    Settings for a simulation session.

    base_seed of None means the session picks a time-based seed.
    """
    base_seed: Optional[int] = None
    speed: Speed = Speed.X1
    max_instances: int = MAX_INSTANCES
    tick_interval: float = TICK_INTERVAL_SECONDS
    lock_timeout: float = LOCK_TIMEOUT_SECONDS

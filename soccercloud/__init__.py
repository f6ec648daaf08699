"""
SoccerCloud Simulation Package

Deterministic, replayable football match and tournament simulation.
"""

__version__ = "1.0.0"
__author__ = "SoccerCloud Team"

from .engine.match import MatchEngine
from .engine.tournament import SimulationType, run_simulation
from .playback.service import SimulationService

__all__ = ["MatchEngine", "SimulationType", "run_simulation", "SimulationService"]

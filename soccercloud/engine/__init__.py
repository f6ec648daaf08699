"""
Football simulation engine components.

This module contains the core simulation engine including:
- Deterministic random stream and seed derivation
- Team catalog and tactical profiles
- Expected goals draw for shots
- Minute-by-minute match engine
- League and knockout orchestration
"""

from .rng import Rng, derive_seed
from .team import Tactic, TeamProfile, TeamStats, TEAMS, display_name
from .xg import ExpectedGoalsModel
from .match import MatchEngine, MatchResult, simulate_match
from .tournament import PreparedSimulation, SimulationType, penalties, run_simulation

__all__ = ['Rng', 'derive_seed', 'Tactic', 'TeamProfile', 'TeamStats', 'TEAMS', 'display_name',
           'ExpectedGoalsModel', 'MatchEngine', 'MatchResult', 'simulate_match',
           'PreparedSimulation', 'SimulationType', 'penalties', 'run_simulation']

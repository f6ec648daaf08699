"""
Playback of precomputed simulations.

- SimulationInstance: Pending/Running/Completed cursor over a frame sequence
- apply_frame: pure reducer from a frame to a display projection
- SimulationService: lock-guarded session with a background ticker
"""

from .instance import Completed, Pending, Projection, Running, SimulationInstance, apply_frame
from .selection import TeamSlot, resolve_named, resolve_slots
from .service import SimulationService

__all__ = ['Completed', 'Pending', 'Projection', 'Running', 'SimulationInstance', 'apply_frame',
           'TeamSlot', 'resolve_named', 'resolve_slots', 'SimulationService']

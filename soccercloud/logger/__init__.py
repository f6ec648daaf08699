"""
Frame logging for match simulation.
Records playback frames; csv_export projects finished simulations to CSV.
"""

from .frame_logger import FrameLogger, SimFrame

__all__ = ['FrameLogger', 'SimFrame']

"""
Expected Goals (xG) calculation for football simulation.

Shot quality is drawn from a finish-style range and then shaped by the
attacking side's finishing and the defending side's block.
"""

from .rng import Rng
from .team import Tactic


class ExpectedGoalsModel:
    """
    Draw-based xG model.

    Fast breaks produce better chances (0.20-0.45) than open play
    (0.05-0.27). The result is not clamped: extreme tactic combinations can
    push xG above 1.0, which just means the chance is very likely to go in.
    """

    def __init__(self):
        """Initialize shot-quality ranges."""
        self.fast_break_base = 0.20
        self.fast_break_spread = 0.25
        self.open_play_base = 0.05
        self.open_play_spread = 0.22

    def expected_goal(self,
                      rng: Rng,
                      fast_break: bool,
                      attacker: Tactic,
                      defender: Tactic) -> float:
        """
        Calculate expected goal probability for a shot.

        Consumes exactly one float from the stream.

        Args:
            rng: Match random stream
            fast_break: Whether the shot comes from a fast break
            attacker: Tactic of the shooting side
            defender: Tactic of the defending side

        Returns:
            float: xG value
        """
        if fast_break:
            xg = self.fast_break_base + rng.next_f64() * self.fast_break_spread
        else:
            xg = self.open_play_base + rng.next_f64() * self.open_play_spread
        xg *= attacker.goal_mult
        xg /= defender.block_mult
        return xg

    @staticmethod
    def finish_label(fast_break: bool) -> str:
        """Narrative finish style for a goal."""
        return "cut-back finish" if fast_break else "drilled low"

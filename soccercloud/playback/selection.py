"""
Participant selection shared by every front end.

Manual picks are validated against the team catalog; CPU slots are filled
by drawing without replacement from what is left, using the instance seed.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..engine.rng import Rng
from ..engine.team import TEAMS, is_known_team
from ..engine.tournament import SimulationType
from ..errors import ValidationError


@dataclass
class TeamSlot:
    """One participant slot: CPU-filled, or a manual pick by catalog index."""
    is_cpu: bool = True
    team_idx: int = 0


def default_slots(sim_type: SimulationType) -> List[TeamSlot]:
    """All-CPU slots for a mode, manual indices pre-set to the first teams."""
    return [TeamSlot(is_cpu=True, team_idx=i % len(TEAMS)) for i in range(sim_type.required_teams)]


def _manual_team(slot: TeamSlot) -> str:
    if not 0 <= slot.team_idx < len(TEAMS):
        raise ValidationError("Manual team selection is out of range")
    return TEAMS[slot.team_idx]


def resolve_slots(slots: Sequence[TeamSlot], seed: int) -> List[str]:
    """
    Turn slots into team names.

    Args:
        slots: Participant slots in fixture order
        seed: Instance seed driving the CPU draws

    Returns:
        List of team names, one per slot

    Raises:
        ValidationError: Out-of-range or duplicate manual pick, or not enough
            teams left for the CPU slots
    """
    seen = set()
    cpu_count = 0
    for slot in slots:
        if slot.is_cpu:
            cpu_count += 1
            continue
        team = _manual_team(slot)
        if team in seen:
            raise ValidationError(f"Duplicate manual team: {team}")
        seen.add(team)

    remaining = [team for team in TEAMS if team not in seen]
    if len(remaining) < cpu_count:
        raise ValidationError("Not enough teams left for CPU auto-fill")

    rng = Rng(seed)
    output = []
    for slot in slots:
        if slot.is_cpu:
            output.append(remaining.pop(rng.range(len(remaining))))
        else:
            output.append(_manual_team(slot))
    return output


def resolve_named(sim_type: SimulationType,
                  teams: Optional[Sequence[str]],
                  auto_fill: bool,
                  seed: int) -> List[str]:
    """
    Validate named teams and optionally auto-fill the rest.

    Named teams keep their order; CPU picks are appended after them.

    Raises:
        ValidationError: Unknown or duplicate team, too many teams, too few
            teams without auto-fill, or an exhausted pool
    """
    required = sim_type.required_teams
    selected = list(teams or [])

    if len(selected) > required:
        raise ValidationError(f"mode {sim_type.value} accepts at most {required} teams")

    seen = set()
    for team in selected:
        if not is_known_team(team):
            raise ValidationError(f"Unknown team: {team}")
        if team in seen:
            raise ValidationError(f"Duplicate team: {team}")
        seen.add(team)

    if not auto_fill and len(selected) != required:
        raise ValidationError(
            f"mode {sim_type.value} requires exactly {required} teams when auto_fill=false"
        )

    if auto_fill:
        pool = [team for team in TEAMS if team not in seen]
        rng = Rng(seed)
        while len(selected) < required:
            if not pool:
                raise ValidationError("Not enough teams available for auto-fill")
            selected.append(pool.pop(rng.range(len(pool))))

    return selected


def resolve_quick_single(home: Optional[str], away: Optional[str], seed: int) -> List[str]:
    """Resolve an optional home/away pair, CPU-filling whichever is missing."""
    slots = [TeamSlot(is_cpu=home is None, team_idx=0), TeamSlot(is_cpu=away is None, team_idx=1)]
    for slot, team, side in ((slots[0], home, "home"), (slots[1], away, "away")):
        if team is None:
            continue
        if not is_known_team(team):
            raise ValidationError(f"Unknown {side} team: {team}")
        slot.team_idx = TEAMS.index(team)
    return resolve_slots(slots, seed)

"""
Team catalog, tactical profiles and per-match team statistics.

The catalog is a static, read-only lookup: team names in a fixed order,
a flag per team, and a formation/tactic profile per team.
"""

from typing import Dict, List, Tuple
from dataclasses import dataclass


@dataclass(frozen=True)
class Tactic:
    """
    Named bundle of multipliers shaping a team's event probabilities.

    - attack_bias: weight in the per-minute possession coin
    - goal_mult: finishing quality applied to shot xG
    - fast_break: probability an attack is a fast break
    - foul_mult / press_mult: how often the opponent is forced into fouls
    - block_mult: defensive block dividing the opponent's xG
    """
    key: str
    label: str
    attack_bias: float
    goal_mult: float
    fast_break: float
    foul_mult: float
    block_mult: float
    press_mult: float


@dataclass(frozen=True)
class TeamProfile:
    """Formation label and tactic key for one team."""
    formation: str = "4-4-2"
    tactic: str = "counter"


TACTICS: Tuple[Tactic, ...] = (
    Tactic("counter", "Counter", 1.10, 1.08, 0.25, 1.00, 1.00, 0.95),
    Tactic("possession", "Possession", 1.00, 0.95, 0.10, 0.90, 1.00, 0.90),
    Tactic("high_press", "High Press", 1.15, 1.00, 0.20, 1.20, 0.95, 1.20),
    Tactic("low_block", "Low Block", 0.92, 0.92, 0.12, 0.95, 1.15, 0.85),
)

_TACTICS_BY_KEY: Dict[str, Tactic] = {t.key: t for t in TACTICS}

TEAMS: Tuple[str, ...] = (
    # J-League
    "Kashima Antlers", "Urawa Red Diamonds", "Gamba Osaka", "Cerezo Osaka",
    "Kawasaki Frontale", "Yokohama F. Marinos", "Nagoya Grampus", "Shimizu S-Pulse",
    "Sanfrecce Hiroshima", "Consadole Sapporo", "Ventforet Kofu", "Tokyo Verdy",
    "JEF United Chiba",
    # European clubs
    "Arsenal", "FC Barcelona", "Real Madrid", "Manchester City", "Manchester United",
    "Liverpool", "Bayern Munich", "Borussia Dortmund", "Paris Saint-Germain",
    "Juventus", "Inter", "AC Milan", "Ajax", "Benfica", "Porto", "Celtic",
    # Europe
    "England", "France", "Spain", "Germany", "Italy", "Portugal", "Netherlands",
    "Belgium", "Croatia", "Denmark", "Switzerland", "Austria", "Sweden", "Norway",
    "Poland", "Serbia", "Turkey", "Ukraine", "Czech Republic", "Scotland",
    # South America
    "Argentina", "Brazil", "Uruguay", "Colombia", "Chile", "Peru", "Ecuador",
    "Paraguay", "Bolivia", "Venezuela",
    # North & Central America
    "United States", "Mexico", "Canada", "Costa Rica", "Panama", "Jamaica", "Honduras",
    # Asia
    "Japan", "South Korea", "Australia", "Iran", "Saudi Arabia", "Qatar", "Iraq",
    "United Arab Emirates", "PRC China",
    # Africa
    "Morocco", "Senegal", "Nigeria", "Egypt", "Algeria", "Tunisia", "Ghana",
    "Cameroon", "Ivory Coast", "South Africa",
)

DEFAULT_FLAG = "🏳️"

_FLAG_GROUPS: Dict[str, List[str]] = {
    "🇯🇵": ["Kashima Antlers", "Urawa Red Diamonds", "Gamba Osaka", "Cerezo Osaka",
           "Kawasaki Frontale", "Yokohama F. Marinos", "Nagoya Grampus", "Shimizu S-Pulse",
           "Sanfrecce Hiroshima", "Consadole Sapporo", "Ventforet Kofu", "Tokyo Verdy",
           "JEF United Chiba", "Japan"],
    "🇬🇧": ["Arsenal", "Manchester City", "Manchester United", "Liverpool", "Celtic",
           "England", "Scotland"],
    "🇪🇸": ["FC Barcelona", "Real Madrid", "Spain"],
    "🇩🇪": ["Bayern Munich", "Borussia Dortmund", "Germany"],
    "🇫🇷": ["Paris Saint-Germain", "France"],
    "🇮🇹": ["Juventus", "Inter", "AC Milan", "Italy"],
    "🇳🇱": ["Ajax", "Netherlands"],
    "🇵🇹": ["Benfica", "Porto", "Portugal"],
    "🇧🇪": ["Belgium"], "🇭🇷": ["Croatia"], "🇩🇰": ["Denmark"], "🇨🇭": ["Switzerland"],
    "🇦🇹": ["Austria"], "🇸🇪": ["Sweden"], "🇳🇴": ["Norway"], "🇵🇱": ["Poland"],
    "🇷🇸": ["Serbia"], "🇹🇷": ["Turkey"], "🇺🇦": ["Ukraine"], "🇨🇿": ["Czech Republic"],
    "🇦🇷": ["Argentina"], "🇧🇷": ["Brazil"], "🇺🇾": ["Uruguay"], "🇨🇴": ["Colombia"],
    "🇨🇱": ["Chile"], "🇵🇪": ["Peru"], "🇪🇨": ["Ecuador"], "🇵🇾": ["Paraguay"],
    "🇧🇴": ["Bolivia"], "🇻🇪": ["Venezuela"], "🇺🇸": ["United States"], "🇲🇽": ["Mexico"],
    "🇨🇦": ["Canada"], "🇨🇷": ["Costa Rica"], "🇵🇦": ["Panama"], "🇯🇲": ["Jamaica"],
    "🇭🇳": ["Honduras"], "🇰🇷": ["South Korea"], "🇦🇺": ["Australia"], "🇮🇷": ["Iran"],
    "🇸🇦": ["Saudi Arabia"], "🇶🇦": ["Qatar"], "🇮🇶": ["Iraq"],
    "🇦🇪": ["United Arab Emirates"], "🇨🇳": ["PRC China"], "🇲🇦": ["Morocco"],
    "🇸🇳": ["Senegal"], "🇳🇬": ["Nigeria"], "🇪🇬": ["Egypt"], "🇩🇿": ["Algeria"],
    "🇹🇳": ["Tunisia"], "🇬🇭": ["Ghana"], "🇨🇲": ["Cameroon"], "🇨🇮": ["Ivory Coast"],
    "🇿🇦": ["South Africa"],
}

TEAM_FLAGS: Dict[str, str] = {
    team: flag for flag, teams in _FLAG_GROUPS.items() for team in teams
}

_KNOWN_TEAMS = frozenset(TEAMS)

_CLUB_PROFILES: Dict[str, TeamProfile] = {
    "Arsenal": TeamProfile("4-3-3", "possession"),
    "FC Barcelona": TeamProfile("4-3-3", "possession"),
    "Real Madrid": TeamProfile("4-3-3", "counter"),
    "Manchester City": TeamProfile("4-3-3", "possession"),
    "Manchester United": TeamProfile("4-2-3-1", "high_press"),
    "Liverpool": TeamProfile("4-3-3", "high_press"),
    "Bayern Munich": TeamProfile("4-2-3-1", "high_press"),
    "Borussia Dortmund": TeamProfile("4-2-3-1", "high_press"),
    "Paris Saint-Germain": TeamProfile("4-3-3", "possession"),
    "Juventus": TeamProfile("3-5-2", "low_block"),
    "Inter": TeamProfile("3-5-2", "low_block"),
    "AC Milan": TeamProfile("4-2-3-1", "possession"),
    "Ajax": TeamProfile("4-3-3", "possession"),
    "Benfica": TeamProfile("4-2-3-1", "possession"),
    "Porto": TeamProfile("4-4-2", "counter"),
    "Celtic": TeamProfile("4-3-3", "possession"),
    "Kawasaki Frontale": TeamProfile("4-3-3", "possession"),
    "Yokohama F. Marinos": TeamProfile("4-3-3", "high_press"),
    "Kashima Antlers": TeamProfile("4-4-2", "counter"),
    "Urawa Red Diamonds": TeamProfile("4-2-3-1", "possession"),
    "Gamba Osaka": TeamProfile("4-4-2", "counter"),
    "Cerezo Osaka": TeamProfile("4-4-2", "counter"),
    "Nagoya Grampus": TeamProfile("4-2-3-1", "low_block"),
    "Sanfrecce Hiroshima": TeamProfile("3-5-2", "possession"),
    "Consadole Sapporo": TeamProfile("3-5-2", "high_press"),
    "Shimizu S-Pulse": TeamProfile("4-4-2", "counter"),
    "Ventforet Kofu": TeamProfile("4-4-2", "counter"),
    "Tokyo Verdy": TeamProfile("4-3-3", "possession"),
    "JEF United Chiba": TeamProfile("4-3-3", "counter"),
}

# National sides share a handful of archetypes
_NATIONAL_ARCHETYPES: Dict[TeamProfile, List[str]] = {
    TeamProfile("4-3-3", "possession"): [
        "Spain", "Netherlands", "Portugal", "Japan", "PRC China",
    ],
    TeamProfile("4-2-3-1", "high_press"): [
        "England", "Germany", "France", "Brazil", "Argentina", "Belgium",
        "United States", "South Korea", "Morocco", "Nigeria",
    ],
    TeamProfile("4-4-2", "counter"): [
        "Italy", "Croatia", "Denmark", "Switzerland", "Uruguay", "Mexico", "Canada",
        "Iran", "Saudi Arabia", "Senegal", "Algeria", "Tunisia",
    ],
    TeamProfile("4-2-3-1", "counter"): [
        "Austria", "Sweden", "Norway", "Poland", "Serbia", "Turkey", "Ukraine",
        "Czech Republic", "Scotland", "Colombia", "Chile", "Peru", "Ecuador",
        "Paraguay", "Bolivia", "Venezuela", "Costa Rica", "Panama", "Jamaica",
        "Honduras", "Australia", "Qatar", "Iraq", "United Arab Emirates", "Egypt",
        "Ghana", "Cameroon", "Ivory Coast", "South Africa",
    ],
}

TEAM_PROFILES: Dict[str, TeamProfile] = dict(_CLUB_PROFILES)
for _profile, _teams in _NATIONAL_ARCHETYPES.items():
    for _team in _teams:
        TEAM_PROFILES[_team] = _profile


def tactic_by_key(key: str) -> Tactic:
    """Look up a tactic; unknown keys fall back to Counter."""
    return _TACTICS_BY_KEY.get(key, TACTICS[0])


def profile_for(team: str) -> TeamProfile:
    """Look up a team's profile; unknown teams play a 4-4-2 counter."""
    return TEAM_PROFILES.get(team, TeamProfile())


def team_flag(team: str) -> str:
    return TEAM_FLAGS.get(team, DEFAULT_FLAG)


def display_name(team: str) -> str:
    """Team name prefixed with its flag, as shown in logs and scoreboards."""
    return f"{team_flag(team)} {team}"


def is_known_team(team: str) -> bool:
    return team in _KNOWN_TEAMS


@dataclass
class TeamStats:
    """
    Accumulating counters for one side in one match.

    Mutated only while the match is being simulated.
    """
    shots: int = 0
    shots_on_target: int = 0
    xg: float = 0.0
    corners: int = 0
    fouls: int = 0
    yellows: int = 0
    offsides: int = 0
    saves: int = 0
    attacks: int = 0

    def update_stats(self, event_type: str) -> None:
        """Increment the counter for an event."""
        if event_type == "attack":
            self.attacks += 1
        elif event_type == "shot":
            self.shots += 1
        elif event_type == "shot_on_target":
            self.shots_on_target += 1
        elif event_type == "corner":
            self.corners += 1
        elif event_type == "offside":
            self.offsides += 1
        elif event_type == "foul":
            self.fouls += 1
        elif event_type == "yellow_card":
            self.yellows += 1
        elif event_type == "save":
            self.saves += 1
        else:
            raise ValueError(f"Unknown event type: {event_type}")

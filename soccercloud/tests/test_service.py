"""
Test the shared simulation session and participant selection.

Validates creation rules, capacity, lookups, seeding, export and the
background ticker.
"""

import time

import pytest

from soccercloud.config import MAX_INSTANCES, ServiceConfig, Speed
from soccercloud.engine.rng import derive_seed
from soccercloud.engine.team import TEAMS
from soccercloud.engine.tournament import SimulationType
from soccercloud.errors import CapacityError, NotFoundError, StateError, ValidationError
from soccercloud.playback.selection import (
    TeamSlot,
    default_slots,
    resolve_named,
    resolve_quick_single,
    resolve_slots,
)
from soccercloud.playback.service import SimulationService


@pytest.fixture
def service():
    return SimulationService(ServiceConfig(base_seed=42))


def test_create_assigns_sequential_ids(service):
    """Test that ids start at 0 and increase."""
    assert service.create("single") == 0
    assert service.create("league4") == 1
    assert len(service) == 2


def test_instance_seeds_derive_from_base(service):
    """Test that each instance seed is derived from the base seed and its id."""
    preview = service.next_seed_preview()
    instance_id = service.create("knockout4")
    assert service.get(instance_id)["seed"] == preview == derive_seed(42, 1)
    second = service.create("single")
    assert service.get(second)["seed"] == derive_seed(42, 2)


def test_auto_fill_completes_teams(service):
    """Test that missing participants are CPU-filled without duplicates."""
    instance_id = service.create("league4", ["Arsenal"])
    teams = service.get(instance_id)["teams"]
    assert teams[0] == "Arsenal"
    assert len(set(teams)) == 4
    assert all(team in TEAMS for team in teams)


@pytest.mark.parametrize("mode, teams, auto_fill, message", [
    ("cup8", None, True, "Unsupported mode: cup8"),
    ("single", ["Atlantis"], True, "Unknown team: Atlantis"),
    ("single", ["Arsenal", "Arsenal"], True, "Duplicate team: Arsenal"),
    ("single", ["Arsenal", "Ajax", "Celtic"], True, "accepts at most 2 teams"),
    ("league4", ["Arsenal", "Ajax"], False, "requires exactly 4 teams when auto_fill=false"),
])
def test_create_validation(service, mode, teams, auto_fill, message):
    """Test that bad create requests are rejected with a clear message."""
    with pytest.raises(ValidationError, match=message):
        service.create(mode, teams, auto_fill=auto_fill)
    assert len(service) == 0


def test_capacity_limit(service):
    """Test that the session refuses more than the instance limit."""
    for _ in range(MAX_INSTANCES):
        service.create("single")
    with pytest.raises(CapacityError, match=f"Instance limit reached \\({MAX_INSTANCES}\\)"):
        service.create("single")
    with pytest.raises(CapacityError):
        service.clone(0)


def test_unknown_id(service):
    """Test lookups of ids that do not exist."""
    with pytest.raises(NotFoundError) as excinfo:
        service.get(99)
    assert excinfo.value.instance_id == 99
    assert str(excinfo.value) == "simulation 99 not found"
    with pytest.raises(NotFoundError):
        service.start(99)
    with pytest.raises(NotFoundError):
        service.export(99)


def test_delete(service):
    """Test that a deleted instance is gone and ids are not reused."""
    first = service.create("single")
    service.delete(first)
    with pytest.raises(NotFoundError):
        service.get(first)
    assert service.create("single") == 1


def test_export_before_start(service):
    """Test that exporting a pending instance is a state error."""
    instance_id = service.create("single")
    with pytest.raises(StateError):
        service.export(instance_id)


def test_export_after_start(service):
    """Test export naming and CSV header."""
    instance_id = service.create("single", ["Arsenal", "Real Madrid"])
    service.start(instance_id)
    filename, data = service.export(instance_id)
    assert filename == "sim-0-single.csv"
    assert data.startswith(b"Category,Home Team,Away Team\n")


def test_clone_gets_fresh_seed(service):
    """Test that a clone keeps mode and teams under a new seed."""
    original = service.create("knockout4")
    service.start(original)
    clone = service.clone(original)
    original_detail, clone_detail = service.get(original), service.get(clone)
    assert clone_detail["teams"] == original_detail["teams"]
    assert clone_detail["mode"] == "knockout4"
    assert clone_detail["seed"] != original_detail["seed"]
    assert clone_detail["status"] == "pending"


def test_tick_uses_session_speed(service):
    """Test that one instant tick finishes a single match."""
    instance_id = service.create("single")
    service.start(instance_id)
    service.set_speed(Speed.INSTANT)
    service.tick()
    assert service.get(instance_id)["status"] == "completed"
    assert service.all_completed()


def test_tick_skips_pending(service):
    """Test that ticking leaves unstarted instances alone."""
    instance_id = service.create("single")
    service.tick(50)
    assert service.get(instance_id)["status"] == "pending"


def test_same_base_seed_same_session():
    """Test that two sessions with the same base seed replay identically."""
    results = []
    for _ in range(2):
        svc = SimulationService(ServiceConfig(base_seed=2024))
        for mode in ("single", "league4", "knockout4"):
            svc.start(svc.create(mode))
        svc.tick(1000)
        results.append([(s["teams"], s["outcome"]) for s in svc.summaries()])
    assert results[0] == results[1]


def test_background_ticker_completes_instances():
    """Test that the ticker thread drives playback to completion."""
    config = ServiceConfig(base_seed=3, speed=Speed.INSTANT, tick_interval=0.005)
    with SimulationService(config) as svc:
        svc.start(svc.create("league4"))
        deadline = time.monotonic() + 5.0
        while not svc.all_completed() and time.monotonic() < deadline:
            time.sleep(0.01)
        assert svc.all_completed()


def test_resolve_slots_mixed():
    """Test that CPU slots never pick a manually chosen team."""
    slots = [TeamSlot(is_cpu=False, team_idx=0), TeamSlot(), TeamSlot(), TeamSlot()]
    teams = resolve_slots(slots, seed=77)
    assert teams[0] == TEAMS[0]
    assert len(set(teams)) == 4
    assert teams == resolve_slots(slots, seed=77)


def test_resolve_slots_errors():
    """Test manual slot validation."""
    with pytest.raises(ValidationError, match="out of range"):
        resolve_slots([TeamSlot(is_cpu=False, team_idx=len(TEAMS))], seed=1)
    with pytest.raises(ValidationError, match="Duplicate manual team"):
        resolve_slots([TeamSlot(is_cpu=False, team_idx=3), TeamSlot(is_cpu=False, team_idx=3)], seed=1)


def test_resolve_slots_pool_exhausted():
    """Test that CPU slots fail when the catalog runs out."""
    with pytest.raises(ValidationError, match="Not enough teams left"):
        resolve_slots([TeamSlot() for _ in range(len(TEAMS) + 1)], seed=1)


def test_default_slots():
    """Test that default slots are all CPU and sized to the format."""
    slots = default_slots(SimulationType.KNOCKOUT4)
    assert len(slots) == 4
    assert all(slot.is_cpu for slot in slots)


def test_resolve_named_keeps_order():
    """Test that named teams keep their positions."""
    teams = resolve_named(SimulationType.KNOCKOUT4, ["Japan", "Spain"], True, seed=5)
    assert teams[:2] == ["Japan", "Spain"]
    assert len(set(teams)) == 4


def test_resolve_quick_single():
    """Test home/away resolution for quick matches."""
    assert resolve_quick_single("Arsenal", "Ajax", seed=1) == ["Arsenal", "Ajax"]
    home, away = resolve_quick_single("Arsenal", None, seed=1)
    assert home == "Arsenal" and away != "Arsenal"
    with pytest.raises(ValidationError, match="Unknown home team: Atlantis"):
        resolve_quick_single("Atlantis", None, seed=1)
    with pytest.raises(ValidationError, match="Unknown away team: Atlantis"):
        resolve_quick_single(None, "Atlantis", seed=1)


@pytest.mark.parametrize("text, expected", [
    ("1x", Speed.X1), ("2", Speed.X2), ("4X", Speed.X4),
    ("instant", Speed.INSTANT), ("max", Speed.INSTANT), ("0", Speed.INSTANT),
])
def test_speed_parse(text, expected):
    """Test accepted speed spellings."""
    assert Speed.parse(text) is expected


def test_speed_parse_rejects_unknown():
    """Test that unsupported speeds are refused."""
    with pytest.raises(ValueError):
        Speed.parse("3x")


def test_create_from_slots(service):
    """Test slot-based creation with a full set of slots."""
    slots = [TeamSlot(is_cpu=False, team_idx=TEAMS.index("Japan")), TeamSlot(), TeamSlot(), TeamSlot()]
    instance_id = service.create_from_slots(SimulationType.KNOCKOUT4, slots)
    teams = service.get(instance_id)["teams"]
    assert teams[0] == "Japan"
    assert len(set(teams)) == 4


def test_create_from_slots_wrong_count(service):
    """Test that a slot list of the wrong size is refused at creation."""
    with pytest.raises(ValidationError, match="requires exactly 4 teams, got 3"):
        service.create_from_slots(SimulationType.LEAGUE4, [TeamSlot() for _ in range(3)])
    assert len(service) == 0


def test_generated_seed_leaves_config_untouched():
    """Test that a time-based base seed is not written back into a shared config."""
    config = ServiceConfig()
    first = SimulationService(config)
    assert config.base_seed is None
    second = SimulationService(config)
    assert config.base_seed is None
    assert isinstance(first.base_seed, int)
    assert isinstance(second.base_seed, int)

"""
Simulation session shared between a background ticker and request handlers.

All instance state lives behind one lock. Every public operation holds it
for its whole duration and releases it on every exit path, including errors.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..config import ServiceConfig, Speed
from ..engine.rng import Rng, derive_seed
from ..engine.tournament import SimulationType
from ..errors import CapacityError, InternalError, NotFoundError, ValidationError
from .instance import SimulationInstance
from .selection import TeamSlot, resolve_named, resolve_slots

_log = logging.getLogger("soccercloud.service")


class SimulationService:
    """
    Owns a session: base seed, playback speed, id counter and instances.

    Instance seeds are derived from the base seed and the instance id, so a
    session replays identically from the same base seed.
    """

    def __init__(self, config: Optional[ServiceConfig] = None):
        self.config = config or ServiceConfig()
        self.base_seed: int = (self.config.base_seed if self.config.base_seed is not None
                               else Rng.from_time().next_u64())
        self.speed: Speed = self.config.speed
        self._next_id = 0
        self._instances: List[SimulationInstance] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._ticker: Optional[threading.Thread] = None

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.config.lock_timeout):
            _log.error("Could not acquire session lock within %.1fs", self.config.lock_timeout)
            raise InternalError("state lock unavailable")
        try:
            yield
        finally:
            self._lock.release()

    def _find(self, instance_id: int) -> SimulationInstance:
        for inst in self._instances:
            if inst.id == instance_id:
                return inst
        raise NotFoundError(instance_id)

    def _check_capacity(self) -> None:
        if len(self._instances) >= self.config.max_instances:
            raise CapacityError(f"Instance limit reached ({self.config.max_instances})")

    def _next_seed(self) -> int:
        return derive_seed(self.base_seed, self._next_id + 1)

    def _add(self, sim_type: SimulationType, teams: Sequence[str], seed: int) -> SimulationInstance:
        inst = SimulationInstance(self._next_id, sim_type, teams, seed)
        self._instances.append(inst)
        self._next_id += 1
        return inst

    def next_seed_preview(self) -> int:
        """Seed the next created instance will get."""
        with self._locked():
            return self._next_seed()

    def create(self,
               mode: str,
               teams: Optional[Sequence[str]] = None,
               auto_fill: bool = True) -> int:
        """
        Create a Pending instance from named teams.

        Returns:
            int: New instance id

        Raises:
            ValidationError: Bad mode or participants
            CapacityError: Session already full
        """
        sim_type = SimulationType.parse(mode)
        with self._locked():
            self._check_capacity()
            seed = self._next_seed()
            resolved = resolve_named(sim_type, teams, auto_fill, seed)
            inst = self._add(sim_type, resolved, seed)
        _log.info("Created sim-%d (%s) seed=%d", inst.id, sim_type.value, seed)
        return inst.id

    def create_from_slots(self, sim_type: SimulationType, slots: Sequence[TeamSlot]) -> int:
        """Create an instance from manual/CPU slots (interactive front ends)."""
        if len(slots) != sim_type.required_teams:
            raise ValidationError(
                f"mode {sim_type.value} requires exactly {sim_type.required_teams} teams, got {len(slots)}"
            )
        with self._locked():
            self._check_capacity()
            seed = self._next_seed()
            resolved = resolve_slots(slots, seed)
            inst = self._add(sim_type, resolved, seed)
        _log.info("Created sim-%d (%s) seed=%d", inst.id, sim_type.value, seed)
        return inst.id

    def start(self, instance_id: int) -> Dict[str, Any]:
        """Compute the simulation and begin playback. Runs under the lock."""
        with self._locked():
            inst = self._find(instance_id)
            inst.start()
            return inst.summary()

    def clone(self, instance_id: int) -> int:
        """New Pending instance with the same mode and teams and a fresh seed."""
        with self._locked():
            existing = self._find(instance_id)
            self._check_capacity()
            clone = existing.clone_as(self._next_id, self._next_seed())
            self._instances.append(clone)
            self._next_id += 1
        _log.info("Cloned sim-%d -> sim-%d", instance_id, clone.id)
        return clone.id

    def delete(self, instance_id: int) -> None:
        with self._locked():
            inst = self._find(instance_id)
            self._instances.remove(inst)
        _log.info("Deleted sim-%d", instance_id)

    def tick(self, frames: Optional[int] = None) -> None:
        """Advance every running instance by the session speed (or `frames`)."""
        with self._locked():
            count = self.speed.frames_per_tick if frames is None else frames
            for inst in self._instances:
                if inst.is_running:
                    inst.tick(count)

    def set_speed(self, speed: Speed) -> None:
        with self._locked():
            self.speed = speed
        _log.info("Speed set to %s", speed.label)

    def summaries(self) -> List[Dict[str, Any]]:
        with self._locked():
            return [inst.summary() for inst in sorted(self._instances, key=lambda s: s.id)]

    def get(self, instance_id: int) -> Dict[str, Any]:
        with self._locked():
            return self._find(instance_id).detail()

    def export(self, instance_id: int) -> Tuple[str, bytes]:
        """
        CSV export of an instance.

        Returns:
            Tuple of (suggested filename, CSV bytes)

        Raises:
            NotFoundError: Unknown id
            StateError: Instance not started yet
        """
        with self._locked():
            inst = self._find(instance_id)
            data = inst.export_csv()
            filename = inst.export_filename()
        _log.info("Exported sim-%d (%d bytes)", instance_id, len(data))
        return filename, data

    def __len__(self) -> int:
        with self._locked():
            return len(self._instances)

    def all_completed(self) -> bool:
        with self._locked():
            return all(inst.is_completed for inst in self._instances)

    # Background ticker

    def start_ticker(self) -> None:
        """Tick running instances every config.tick_interval seconds."""
        if self._ticker is not None and self._ticker.is_alive():
            return
        self._stop.clear()
        self._ticker = threading.Thread(target=self._run_ticker, name="soccercloud-ticker", daemon=True)
        self._ticker.start()
        _log.debug("Ticker started (interval=%.3fs)", self.config.tick_interval)

    def stop_ticker(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._ticker is not None:
            self._ticker.join(timeout)
            self._ticker = None

    def _run_ticker(self) -> None:
        while not self._stop.wait(self.config.tick_interval):
            try:
                self.tick()
            except InternalError:
                _log.exception("Ticker stopping: session state unavailable")
                return

    def __enter__(self) -> 'SimulationService':
        self.start_ticker()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop_ticker()

"""
ProtectionEngine - spawn protection decisions.

The engine grants each new participant a fixed amount of PvP immunity,
counts it down once per tick, pauses the countdown inside protected zones,
and arbitrates damage and interaction events against protected participants.

Every entry point takes the engine lock, so a host that dispatches events
on several threads cannot interleave a zone transition with a tick.

Example:
    store = ProtectionStore(cfg.storage.snapshot_path)
    engine = ProtectionEngine(host, store, cfg, zone_oracle=regions)
    engine.enable(ThreadScheduler())

    # host adapter wiring
    engine.on_join(participant)
    engine.on_damage(event)
    ...
    engine.disable()
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config.schema import CampfireConfig, ProtectionConfig
from ..host.base import (
    DamageEvent,
    DamageKind,
    Host,
    InteractEvent,
    Material,
    MoveEvent,
    Participant,
    Scheduler,
    ZoneOracle,
)
from ..store.store import ProtectionStore
from . import messages

logger = logging.getLogger(__name__)


# Tick cadence in seconds
TICK_INTERVAL_SECONDS = 1

# Items a protected participant may not use and that may not be used near one
RESTRICTED_ITEMS = frozenset({
    Material.FLINT_AND_STEEL,
    Material.LAVA_BUCKET,
    Material.TNT,
})

# Containers a protected participant may not open
RESTRICTED_CONTAINERS = frozenset({
    Material.CHEST,
    Material.ENDER_CHEST,
})


@dataclass
class TickSummary:
    """What one tick did."""
    timestamp: int = 0
    started: int = 0
    accrued: int = 0
    paused: int = 0
    expired: int = 0
    saved: bool = False

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'started': self.started,
            'accrued': self.accrued,
            'paused': self.paused,
            'expired': self.expired,
            'saved': self.saved,
        }


class ProtectionEngine:
    """Per-participant protection state machine and event arbitration."""

    def __init__(
        self,
        host: Host,
        store: ProtectionStore,
        config: Optional[CampfireConfig] = None,
        zone_oracle: Optional[ZoneOracle] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.host = host
        self.store = store
        self.config = config or CampfireConfig()
        self.zone_oracle = zone_oracle
        self._clock = clock
        self._lock = threading.RLock()

        self._scheduler: Optional[Scheduler] = None
        self._task_id: Optional[int] = None
        # Set by disable(); a tick already queued behind the lock must not run
        self._stopped = False

    @property
    def settings(self) -> ProtectionConfig:
        return self.config.protection

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def now(self) -> int:
        return int(self._clock())

    # === LIFECYCLE ===

    @property
    def enabled(self) -> bool:
        return self._task_id is not None

    def enable(self, scheduler: Scheduler):
        """Load the snapshot and start ticking."""
        with self._lock:
            if self.enabled:
                return
            self.store.load_snapshot()
            self._stopped = False
            self._scheduler = scheduler
            self._task_id = scheduler.schedule_repeating(self.tick, TICK_INTERVAL_SECONDS)
            logger.info(
                f"Campfire enabled: {self.settings.duration_seconds}s protection, "
                f"buffer {self.settings.buffer_distance}, "
                f"zones {'on' if self.zones_active else 'off'}"
            )

    def disable(self):
        """
        Stop ticking and save the snapshot. Safe to call twice.

        The task is cancelled outside the lock, so a tick queued behind the
        lock can return (as a no-op). The save here is always the last one.
        """
        with self._lock:
            if not self.enabled:
                return
            scheduler, task_id = self._scheduler, self._task_id
            self._task_id = None
            self._scheduler = None
            self._stopped = True

        scheduler.cancel(task_id)

        with self._lock:
            self.store.save_snapshot()
        logger.info("Campfire disabled")

    def attach_zone_oracle(self, oracle: ZoneOracle):
        """Region plugin became available."""
        with self._lock:
            self.zone_oracle = oracle
            logger.info(f"Zone oracle attached: {type(oracle).__name__}")

    def detach_zone_oracle(self):
        """Region plugin went away."""
        with self._lock:
            if self.zone_oracle is not None:
                logger.info(f"Zone oracle detached: {type(self.zone_oracle).__name__}")
            self.zone_oracle = None

    @property
    def zones_active(self) -> bool:
        return self.config.zones.enabled and self.zone_oracle is not None

    # === QUERIES ===

    def is_protected(self, participant: Participant) -> bool:
        """True if the participant is tracked and their protection is active."""
        if participant.privileged:
            return False
        record = self.store.get(participant.id)
        return record is not None and record.active

    def remaining_seconds(self, participant_id: str) -> Optional[int]:
        """Seconds of protection left, 0 once inactive, None if untracked."""
        record = self.store.get(participant_id)
        if record is None:
            return None
        if not record.active:
            return 0
        return record.remaining(self.settings.duration_seconds)

    # === PERIODIC TICK ===

    def tick(self) -> TickSummary:
        """
        Advance protection time for every connected participant.

        Participants seen for the first time start a new episode and skip
        accounting this cycle. Participants in a protected zone keep their
        timestamp fresh but accrue nothing. The snapshot is saved at the end.
        Once the engine has been disabled a tick does nothing.
        """
        with self._lock:
            now = self.now()
            summary = TickSummary(timestamp=now)
            if self._stopped:
                return summary
            duration = self.settings.duration_seconds

            for participant in self.host.online_participants():
                if participant.privileged or not participant.alive:
                    continue

                if participant.id not in self.store:
                    self.store.get_or_create(participant.id, now)
                    self._notify_started(participant)
                    summary.started += 1
                    continue

                record = self.store.get(participant.id)
                if not record.active:
                    continue

                if record.in_protected_zone:
                    record.touch(now)
                    summary.paused += 1
                    continue

                record.accrue(now)
                summary.accrued += 1

                remaining = record.remaining(duration)
                if remaining <= 0:
                    record.active = False
                    summary.expired += 1
                    self.host.broadcast(messages.expired_broadcast(participant.name))
                    self.host.send_message(participant, messages.VULNERABLE)
                    logger.info(f"Protection expired for {participant.id}")
                elif remaining % 60 == 0:
                    self.host.send_message(participant, messages.expires_in(remaining // 60))

            summary.saved = self.store.save_snapshot()
            return summary

    # === EVENTS ===

    def on_join(self, participant: Participant):
        """Start protection for new participants; never count offline time."""
        with self._lock:
            if participant.privileged:
                return
            now = self.now()
            if participant.id not in self.store:
                self.store.get_or_create(participant.id, now)
                self._notify_started(participant)
            self.store.get(participant.id).touch(now)

    def on_death(self, participant: Participant):
        """Give protection back after a death, when configured to."""
        with self._lock:
            if not self.settings.reset_on_death or participant.privileged:
                return
            if participant.id in self.store:
                self.store.reset(participant.id, self.now())
            self.store.save_snapshot()
            self.host.send_message(participant, messages.DIED_RESET)

    def on_move(self, event: MoveEvent):
        """Pause or resume the timer as the participant crosses zone borders."""
        with self._lock:
            if not self.zones_active or event.cancelled:
                return

            participant = event.participant
            if participant.privileged:
                return
            record = self.store.get(participant.id)
            if record is None or not record.active:
                return

            try:
                in_zone = self.zone_oracle.is_protected(participant.position)
            except Exception as e:
                logger.exception(f"Zone query failed for {participant.id}: {e}")
                return
            if in_zone == record.in_protected_zone:
                return

            record.in_protected_zone = in_zone
            if in_zone:
                self.host.send_message(participant, messages.ENTERING_ZONE)
                self.host.send_message(participant, messages.TIMER_PAUSED)
            else:
                self.host.send_message(participant, messages.LEAVING_ZONE)
                self.host.send_message(participant, messages.TIMER_RESUMED)

    def on_damage(self, event: DamageEvent) -> bool:
        """
        Suppress PvP damage involving a protected participant.

        Returns:
            True if the event was suppressed
        """
        with self._lock:
            victim = event.victim
            if victim.privileged:
                return False

            source = event.source
            if source.kind == DamageKind.EXPLOSIVE:
                event.cancel()
                logger.debug(f"Suppressed explosive damage to {victim.id}")
                return True

            if source.kind not in (DamageKind.DIRECT, DamageKind.PROJECTILE):
                return False
            attacker = source.attacker
            if attacker is None or attacker.privileged:
                return False

            attacker_protected = self._is_active(attacker.id)
            victim_protected = self._is_active(victim.id)
            if not (attacker_protected or victim_protected):
                return False

            if attacker_protected:
                self.host.send_message(attacker, messages.ATTACKER_PROTECTED)
            else:
                self.host.send_message(attacker, messages.VICTIM_PROTECTED)
            event.cancel()
            logger.debug(f"Suppressed {source.kind.value} damage {attacker.id} -> {victim.id}")
            return True

    def on_interact(self, event: InteractEvent) -> bool:
        """
        Block griefing items and containers.

        Protected actors may not use restricted items or open restricted
        containers at all. Unprotected actors may not use restricted items on
        a block within buffer_distance of a protected participant.

        Returns:
            True if the event was blocked
        """
        with self._lock:
            actor = event.actor
            if actor.privileged:
                return False

            if self._is_active(actor.id):
                return self._check_protected_actor(event)

            if event.block is None or event.item not in RESTRICTED_ITEMS:
                return False

            target = event.block.position
            for other in self.host.online_participants():
                if other.id == actor.id or other.privileged:
                    continue
                if other.position.world != target.world:
                    continue
                if not self._is_active(other.id):
                    continue

                if target.distance(other.position) <= self.settings.buffer_distance:
                    self.host.send_message(actor, messages.NEARBY_PROTECTED)
                    event.cancel()
                    logger.debug(f"Blocked {event.item.value} by {actor.id} near {other.id}")
                    return True

            return False

    # === HELPERS ===

    def _check_protected_actor(self, event: InteractEvent) -> bool:
        actor = event.actor

        if event.item in RESTRICTED_ITEMS:
            text = messages.ITEM_BLOCKED[event.item]
        elif event.block is not None and event.block.material in RESTRICTED_CONTAINERS:
            text = messages.CANNOT_OPEN_CHESTS
        else:
            return False

        self.host.send_message(actor, text)
        self.host.send_message(actor, messages.TERMINATE_HINT)
        event.cancel()
        return True

    def _is_active(self, participant_id: str) -> bool:
        record = self.store.get(participant_id)
        return record is not None and record.active

    def _notify_started(self, participant: Participant):
        self.host.send_message(participant, messages.STARTING)
        self.host.send_message(participant, messages.INFO_HINT)
        logger.info(f"Protection started for {participant.id}")

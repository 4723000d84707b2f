"""
Interfaces between the protection engine and the hosting game server.

The host adapter translates the server's native objects into these types.
Damage sources arrive already classified as a DamageSource, so the engine
never has to inspect host object types.

Host, ZoneOracle and Scheduler are the abstract collaborators the engine
consumes; campfire.host.memory provides in-process implementations.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, List, Optional


@dataclass(frozen=True)
class Position:
    """A point in a named world."""
    world: str
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance(self, other: 'Position') -> float:
        """
        Euclidean distance to another position.

        Raises:
            ValueError: If the positions are in different worlds
        """
        if self.world != other.world:
            raise ValueError(f"Cannot measure between worlds {self.world!r} and {other.world!r}")
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )


class Material(str, Enum):
    """Item and block types the engine cares about."""
    AIR = "air"
    FLINT_AND_STEEL = "flint_and_steel"
    LAVA_BUCKET = "lava_bucket"
    TNT = "tnt"
    CHEST = "chest"
    ENDER_CHEST = "ender_chest"
    OTHER = "other"


@dataclass(frozen=True)
class Block:
    """A block a participant interacted with."""
    material: Material
    position: Position


@dataclass
class Participant:
    """
    A connected participant as reported by the host.

    Attributes:
        id: Identity key, stable across sessions
        name: Display name
        privileged: Administrators are never tracked or restricted
        alive: False while dead
        position: Current world position
        held_item: Item in hand
    """
    id: str
    name: str = ''
    privileged: bool = False
    alive: bool = True
    position: Position = field(default_factory=lambda: Position('world'))
    held_item: Material = Material.AIR

    def __post_init__(self):
        if not self.name:
            self.name = self.id


class DamageKind(Enum):
    """Classification of a damage source."""
    DIRECT = 'direct'
    PROJECTILE = 'projectile'
    EXPLOSIVE = 'explosive'
    OTHER = 'other'


@dataclass(frozen=True)
class DamageSource:
    """
    Tagged damage source.

    attacker is the participant responsible: the striker for DIRECT, the
    shooter for PROJECTILE, None when no participant is responsible.
    """
    kind: DamageKind
    attacker: Optional[Participant] = None

    @classmethod
    def direct(cls, attacker: Optional[Participant] = None) -> 'DamageSource':
        return cls(DamageKind.DIRECT, attacker)

    @classmethod
    def projectile(cls, shooter: Optional[Participant] = None) -> 'DamageSource':
        return cls(DamageKind.PROJECTILE, shooter)

    @classmethod
    def explosive(cls) -> 'DamageSource':
        return cls(DamageKind.EXPLOSIVE)

    @classmethod
    def other(cls) -> 'DamageSource':
        return cls(DamageKind.OTHER)


@dataclass
class _Cancellable:
    cancelled: bool = field(default=False, init=False)

    def cancel(self):
        """Suppress the event's game effect."""
        self.cancelled = True


@dataclass
class DamageEvent(_Cancellable):
    """A participant took damage from an entity."""
    victim: Participant = None
    source: DamageSource = field(default_factory=DamageSource.other)


@dataclass
class InteractEvent(_Cancellable):
    """A participant used their held item, optionally on a block."""
    actor: Participant = None
    item: Material = Material.AIR
    block: Optional[Block] = None


@dataclass
class MoveEvent(_Cancellable):
    """A participant's position changed."""
    participant: Participant = None


@dataclass
class CommandSender:
    """
    Issuer of a command.

    participant is None for the server console. Privileged participants hold
    every permission.
    """
    name: str
    participant: Optional[Participant] = None
    permissions: FrozenSet[str] = frozenset()

    @classmethod
    def console(cls) -> 'CommandSender':
        return cls(name='CONSOLE', permissions=frozenset({'*'}))

    @classmethod
    def of(cls, participant: Participant, permissions=()) -> 'CommandSender':
        return cls(
            name=participant.name,
            participant=participant,
            permissions=frozenset(permissions),
        )

    def has_permission(self, node: str) -> bool:
        if self.participant is not None and self.participant.privileged:
            return True
        return '*' in self.permissions or node in self.permissions


@dataclass(frozen=True)
class ZoneFlags:
    """Region flags applicable at a position."""
    pvp_allowed: bool = True
    invincible: bool = False

    @property
    def protected(self) -> bool:
        """True inside a no-PvP or invincible region."""
        return not self.pvp_allowed or self.invincible


class Host(ABC):
    """
    The hosting game server, as seen by the engine.

    Implementations must dispatch events, commands and scheduled callbacks
    without overlapping, or rely on the engine's own lock.
    """

    @abstractmethod
    def online_participants(self) -> List[Participant]:
        """All connected participants."""
        pass

    @abstractmethod
    def find_participant(self, name: str) -> Optional[Participant]:
        """Resolve a connected participant by name. None if not found."""
        pass

    @abstractmethod
    def send_message(self, participant: Participant, text: str) -> None:
        """Deliver a private notice."""
        pass

    @abstractmethod
    def broadcast(self, text: str) -> None:
        """Deliver a notice to every participant."""
        pass


class ZoneOracle(ABC):
    """Region-protection lookup (e.g. a region plugin)."""

    @abstractmethod
    def flags_at(self, position: Position) -> ZoneFlags:
        """Flags that apply at a position."""
        pass

    def is_protected(self, position: Position) -> bool:
        return self.flags_at(position).protected


class Scheduler(ABC):
    """Recurring-callback provider."""

    @abstractmethod
    def schedule_repeating(self, callback: Callable[[], None], interval_seconds: float) -> int:
        """
        Run callback every interval_seconds until cancelled.

        Returns:
            Task id for cancel()
        """
        pass

    @abstractmethod
    def cancel(self, task_id: int) -> None:
        """Stop a scheduled task. Unknown ids are ignored."""
        pass

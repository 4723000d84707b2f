"""
In-process host and zone oracle.

InMemoryHost keeps participants in a dict and records every message it is
asked to deliver, so tests and the `simulate` command can inspect them.
RegionZoneOracle answers flag queries from a list of axis-aligned boxes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .base import Host, Participant, Position, ZoneFlags, ZoneOracle


@dataclass
class DeliveredMessage:
    """A message the host was asked to deliver. recipient is None for broadcasts."""
    recipient: Optional[str]
    text: str


class InMemoryHost(Host):
    """
    Host backed by a dict of connected participants.

    Usage:
        host = InMemoryHost()
        steve = host.connect(Participant("Steve"))
        ...
        host.messages_for("Steve")
    """

    def __init__(self):
        self._participants: Dict[str, Participant] = {}
        self.messages: List[DeliveredMessage] = []

    def connect(self, participant: Participant) -> Participant:
        self._participants[participant.id] = participant
        return participant

    def disconnect(self, participant_id: str) -> Optional[Participant]:
        return self._participants.pop(participant_id, None)

    def online_participants(self) -> List[Participant]:
        return list(self._participants.values())

    def find_participant(self, name: str) -> Optional[Participant]:
        """
        Resolve by exact name (case-insensitive), then by unique name prefix.
        """
        wanted = name.lower()
        for p in self._participants.values():
            if p.name.lower() == wanted:
                return p

        matches = [p for p in self._participants.values() if p.name.lower().startswith(wanted)]
        if len(matches) == 1:
            return matches[0]
        return None

    def send_message(self, participant: Participant, text: str) -> None:
        self.messages.append(DeliveredMessage(participant.id, text))

    def broadcast(self, text: str) -> None:
        self.messages.append(DeliveredMessage(None, text))

    def messages_for(self, participant_id: str) -> List[str]:
        return [m.text for m in self.messages if m.recipient == participant_id]

    def broadcasts(self) -> List[str]:
        return [m.text for m in self.messages if m.recipient is None]

    def clear_messages(self):
        self.messages = []


@dataclass
class Region:
    """Axis-aligned box with region flags. Bounds are inclusive."""
    name: str
    world: str
    min_corner: Tuple[float, float, float]
    max_corner: Tuple[float, float, float]
    flags: ZoneFlags = field(default_factory=lambda: ZoneFlags(pvp_allowed=False))

    def contains(self, position: Position) -> bool:
        if position.world != self.world:
            return False
        point = (position.x, position.y, position.z)
        return all(
            lo <= v <= hi
            for v, lo, hi in zip(point, self.min_corner, self.max_corner)
        )


class RegionZoneOracle(ZoneOracle):
    """
    Zone oracle over a list of regions.

    Overlapping regions combine: PvP is allowed only if every region allows
    it, and any invincible region makes the position invincible.
    """

    def __init__(self, regions: Optional[List[Region]] = None):
        self.regions: List[Region] = list(regions or [])

    def add(self, region: Region) -> Region:
        self.regions.append(region)
        return region

    def flags_at(self, position: Position) -> ZoneFlags:
        pvp_allowed = True
        invincible = False
        for region in self.regions:
            if region.contains(position):
                pvp_allowed = pvp_allowed and region.flags.pvp_allowed
                invincible = invincible or region.flags.invincible
        return ZoneFlags(pvp_allowed=pvp_allowed, invincible=invincible)

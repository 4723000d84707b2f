"""
/campfire command handling.

Sub-commands:
    (none), status      Usage help
    terminate           Arm early termination of your own protection
    confirm             Terminate your protection after 'terminate'
    timeleft [player]   Minutes of protection left
    reset <player>      Give a player a fresh protection episode (admin)

Replies to the issuer are returned in a CommandResult for the host adapter
to deliver. Notices to other participants go through the host directly.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..core.errors import CampfireError, ErrorCode
from ..host.base import CommandSender, Participant
from . import messages
from .engine import ProtectionEngine


PERMISSION_RESET = 'campfire.reset'


@dataclass
class CommandResult:
    """Outcome of one command."""
    lines: List[str] = field(default_factory=list)
    error: Optional[CampfireError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def fail(cls, code: ErrorCode, lines, **context) -> 'CommandResult':
        if isinstance(lines, str):
            lines = [lines]
        return cls(lines=list(lines), error=CampfireError(code=code, context=context or None))


class CommandHandler:
    """Dispatch /campfire sub-commands against an engine."""

    def __init__(self, engine: ProtectionEngine):
        self.engine = engine

    def dispatch(self, sender: CommandSender, args: Sequence[str]) -> CommandResult:
        if not args:
            return self.usage()

        action = args[0].lower()
        rest = list(args[1:])

        with self.engine.lock:
            if action == 'terminate':
                return self.terminate(sender)
            if action == 'confirm':
                return self.confirm(sender)
            if action == 'timeleft':
                return self.timeleft(sender, rest[0] if rest else None)
            if action == 'reset':
                return self.reset(sender, rest[0] if rest else None)

        return self.usage()

    def usage(self) -> CommandResult:
        return CommandResult(lines=list(messages.USAGE))

    def terminate(self, sender: CommandSender) -> CommandResult:
        """Arm termination. Does not deactivate on its own."""
        if sender.participant is None:
            return CommandResult.fail(ErrorCode.E1004_NOT_A_PARTICIPANT, messages.PLAYERS_ONLY)

        record = self.engine.store.get(sender.participant.id)
        if record is None or not record.request_termination():
            return CommandResult.fail(
                ErrorCode.E1003_INVALID_STATE, messages.ALREADY_EXPIRED,
                participant=sender.participant.id,
            )

        return CommandResult(lines=list(messages.TERMINATE_WARNING))

    def confirm(self, sender: CommandSender) -> CommandResult:
        """Deactivate protection, only after terminate."""
        participant = sender.participant
        if participant is None:
            return CommandResult.fail(ErrorCode.E1004_NOT_A_PARTICIPANT, messages.PLAYERS_ONLY)

        record = self.engine.store.get(participant.id)
        if record is None or not record.active:
            return CommandResult.fail(
                ErrorCode.E1003_INVALID_STATE, messages.ALREADY_EXPIRED,
                participant=participant.id,
            )
        if not record.confirmed_termination:
            return CommandResult.fail(
                ErrorCode.E1003_INVALID_STATE, messages.TERMINATE_FIRST,
                participant=participant.id,
            )

        record.active = False
        self.engine.host.broadcast(messages.terminated_broadcast(participant.name))
        return CommandResult(lines=[messages.NOW_VULNERABLE])

    def timeleft(self, sender: CommandSender, target_name: Optional[str] = None) -> CommandResult:
        """Report minutes left, truncated toward zero."""
        if target_name is not None:
            target = self.engine.host.find_participant(target_name)
            if target is None:
                return CommandResult.fail(
                    ErrorCode.E1001_NOT_FOUND, messages.NOT_FOUND, target=target_name,
                )
        elif sender.participant is not None:
            target = sender.participant
        else:
            return CommandResult.fail(ErrorCode.E1005_USAGE, messages.NEED_TARGET)

        record = self.engine.store.get(target.id)
        if record is None:
            return CommandResult.fail(
                ErrorCode.E1001_NOT_FOUND, messages.no_record(target.name), target=target.id,
            )
        if not record.active:
            return CommandResult(lines=[messages.protection_expired(target.name)])

        remaining = record.remaining(self.engine.settings.duration_seconds)
        minutes = int(remaining / 60)
        return CommandResult(lines=[messages.time_left(target.name, minutes)])

    def reset(self, sender: CommandSender, target_name: Optional[str] = None) -> CommandResult:
        """Start a fresh protection episode for another participant."""
        if not sender.has_permission(PERMISSION_RESET):
            return CommandResult.fail(
                ErrorCode.E1002_PERMISSION_DENIED, messages.NO_PERMISSION, issuer=sender.name,
            )
        if target_name is None:
            return CommandResult.fail(ErrorCode.E1005_USAGE, messages.NEED_TARGET)

        target: Optional[Participant] = self.engine.host.find_participant(target_name)
        if target is None:
            return CommandResult.fail(
                ErrorCode.E1001_NOT_FOUND, messages.NOT_FOUND, target=target_name,
            )
        if target.privileged:
            return CommandResult.fail(
                ErrorCode.E1003_INVALID_STATE, messages.TARGET_EXEMPT, target=target.id,
            )

        self.engine.store.reset(target.id, self.engine.now())
        self.engine.host.send_message(target, messages.RESET_NOTICE)
        return CommandResult(lines=[messages.RESET_DONE])

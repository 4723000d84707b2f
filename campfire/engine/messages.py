"""User-visible message text."""

from ..host.base import Material

PREFIX = "[PvP Protection] "

STARTING = PREFIX + "Starting protection!"
INFO_HINT = "Type '/campfire' for info on PvP Protection"

VULNERABLE = PREFIX + "You are vulnerable!"
NOW_VULNERABLE = PREFIX + "You are now vulnerable!"

ENTERING_ZONE = PREFIX + "Entering protected zone."
TIMER_PAUSED = "Protection timer paused!"
LEAVING_ZONE = PREFIX + "Leaving protected zone."
TIMER_RESUMED = "Protection timer resumed!"

ATTACKER_PROTECTED = PREFIX + "You are under protection! No PvP!"
VICTIM_PROTECTED = PREFIX + "This player is under protection! No PvP!"

NEARBY_PROTECTED = PREFIX + "Player is protected!"
TERMINATE_HINT = "Use '/campfire terminate' to end your protection early!"
CANNOT_OPEN_CHESTS = PREFIX + "You cannot open or break chests!"

ITEM_BLOCKED = {
    Material.FLINT_AND_STEEL: PREFIX + "You cannot use flint and steel!",
    Material.LAVA_BUCKET: PREFIX + "You cannot use lava buckets!",
    Material.TNT: PREFIX + "You cannot use TNT!",
}

DIED_RESET = PREFIX + "You have died! Resetting Protection!"

USAGE = [
    PREFIX + "Usage: ",
    "/campfire terminate ",
    "Removes your protection early",
    "/campfire confirm ",
    "Confirms early termination",
    "/campfire timeleft [player] ",
    "Gives the duration left for a player's protection",
]

TERMINATE_WARNING = [
    PREFIX + "You will be vulnerable to PvP if you",
    "terminate your protection! If you understand the risk, ",
    "type '/campfire confirm' to terminate...",
]
TERMINATE_FIRST = PREFIX + "Use /campfire terminate first!"
ALREADY_EXPIRED = "Your protection has already expired!"
PLAYERS_ONLY = "Only in-game players can use that command!"
NO_PERMISSION = "You don't have permission to do that!"
NEED_TARGET = "You must specify a target!"
NOT_FOUND = "Player not found!"
TARGET_EXEMPT = "That player is exempt from protection!"
RESET_DONE = "Player's protection reset!"
RESET_NOTICE = PREFIX + "Your protection has been reset!"


def plural(count: int, word: str) -> str:
    """'1 minute', '2 minutes', '0 minutes'."""
    return f"{count} {word}{'' if count == 1 else 's'}"


def expires_in(minutes: int) -> str:
    return PREFIX + f"Expires in {plural(minutes, 'minute')}!"


def expired_broadcast(name: str) -> str:
    return PREFIX + f"Protection for {name} Expired!"


def terminated_broadcast(name: str) -> str:
    return PREFIX + f"{name} Terminated their protection!"


def time_left(name: str, minutes: int) -> str:
    return f"{name}: {plural(minutes, 'minute')} of protection left!"


def protection_expired(name: str) -> str:
    return f"{name}: protection expired!"


def no_record(name: str) -> str:
    return f"{name}: no protection record!"

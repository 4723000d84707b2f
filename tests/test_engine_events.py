"""
Tests for event arbitration: zones, damage, interactions, join and death.

CRITICAL TESTS:
1. test_repeated_moves_idempotent - No duplicate zone notices
2. test_protected_attacker_blocked - Protected attackers can't deal PvP damage
3. test_buffer_distance_boundary - 3 blocks blocked, 6 blocks allowed
"""

import pytest

from campfire.engine import messages
from campfire.host import (
    Block,
    DamageEvent,
    DamageSource,
    InteractEvent,
    Material,
    MoveEvent,
    Participant,
    Position,
    Region,
    ZoneFlags,
    ZoneOracle,
)

from conftest import INSIDE, OUTSIDE, expire


def move(engine, participant, position):
    participant.position = position
    event = MoveEvent(participant)
    engine.on_move(event)
    return event


class TestZoneTransitions:
    """Test pausing and resuming on zone borders."""

    def test_enter_zone_pauses(self, engine, host, newcomer):
        engine.on_join(newcomer)
        host.clear_messages()

        move(engine, newcomer, INSIDE)

        assert engine.store.get(newcomer.id).in_protected_zone is True
        assert host.messages_for(newcomer.id) == [messages.ENTERING_ZONE, messages.TIMER_PAUSED]

    def test_leave_zone_resumes(self, engine, host, newcomer):
        engine.on_join(newcomer)
        move(engine, newcomer, INSIDE)
        host.clear_messages()

        move(engine, newcomer, OUTSIDE)

        assert engine.store.get(newcomer.id).in_protected_zone is False
        assert host.messages_for(newcomer.id) == [messages.LEAVING_ZONE, messages.TIMER_RESUMED]

    def test_repeated_moves_idempotent(self, engine, host, newcomer):
        """
        CRITICAL TEST: Moving within the same zone state changes nothing.
        """
        engine.on_join(newcomer)
        move(engine, newcomer, INSIDE)
        host.clear_messages()

        for x in range(-5, 5):
            move(engine, newcomer, Position("world", x, 64, 0))

        assert host.messages_for(newcomer.id) == []
        assert engine.store.get(newcomer.id).in_protected_zone is True

    def test_invincible_region_counts(self, engine, newcomer, zones):
        zones.add(Region("arena", "world", (200, 0, 200), (210, 100, 210),
                         ZoneFlags(pvp_allowed=True, invincible=True)))
        engine.on_join(newcomer)

        move(engine, newcomer, Position("world", 205, 64, 205))

        assert engine.store.get(newcomer.id).in_protected_zone is True

    def test_other_world_not_in_zone(self, engine, newcomer):
        engine.on_join(newcomer)
        move(engine, newcomer, Position("nether", 0, 64, 0))
        assert engine.store.get(newcomer.id).in_protected_zone is False

    def test_ignored_without_oracle(self, engine, newcomer):
        engine.detach_zone_oracle()
        engine.on_join(newcomer)

        move(engine, newcomer, INSIDE)

        assert engine.store.get(newcomer.id).in_protected_zone is False

    def test_ignored_when_disabled_in_config(self, engine, newcomer):
        engine.config.zones.enabled = False
        engine.on_join(newcomer)

        move(engine, newcomer, INSIDE)

        assert engine.store.get(newcomer.id).in_protected_zone is False

    def test_reattached_oracle_used(self, engine, newcomer, zones):
        engine.detach_zone_oracle()
        engine.attach_zone_oracle(zones)
        engine.on_join(newcomer)

        move(engine, newcomer, INSIDE)

        assert engine.store.get(newcomer.id).in_protected_zone is True

    def test_failing_oracle_leaves_state(self, engine, host, newcomer):
        """A zone query that raises never reaches the host's move handler."""
        class BrokenOracle(ZoneOracle):
            def flags_at(self, position):
                raise RuntimeError("region plugin unavailable")

        engine.on_join(newcomer)
        host.clear_messages()
        engine.attach_zone_oracle(BrokenOracle())

        move(engine, newcomer, INSIDE)

        assert engine.store.get(newcomer.id).in_protected_zone is False
        assert host.messages == []

    def test_skips_untracked_expired_and_cancelled(self, engine, host, newcomer, veteran):
        expire(engine, veteran)

        move(engine, newcomer, INSIDE)          # no record
        move(engine, veteran, INSIDE)           # inactive
        cancelled = MoveEvent(veteran)
        cancelled.cancel()
        engine.on_move(cancelled)

        assert newcomer.id not in engine.store
        assert engine.store.get(veteran.id).in_protected_zone is False
        assert host.messages == []


class TestDamage:
    """Test PvP damage arbitration."""

    def test_protected_attacker_blocked(self, engine, host, newcomer, veteran):
        """
        CRITICAL TEST: A protected attacker can't hurt an unprotected victim.
        """
        engine.on_join(newcomer)
        expire(engine, veteran)
        event = DamageEvent(veteran, DamageSource.direct(newcomer))

        assert engine.on_damage(event) is True
        assert event.cancelled is True
        assert host.messages_for(newcomer.id)[-1] == messages.ATTACKER_PROTECTED

    def test_protected_victim_blocked(self, engine, host, newcomer, veteran):
        engine.on_join(newcomer)
        expire(engine, veteran)
        event = DamageEvent(newcomer, DamageSource.direct(veteran))

        assert engine.on_damage(event) is True
        assert host.messages_for(veteran.id) == [messages.VICTIM_PROTECTED]

    def test_attacker_message_wins_when_both_protected(self, engine, host, newcomer, veteran):
        engine.on_join(newcomer)
        engine.on_join(veteran)
        host.clear_messages()

        engine.on_damage(DamageEvent(newcomer, DamageSource.direct(veteran)))

        assert host.messages_for(veteran.id) == [messages.ATTACKER_PROTECTED]

    def test_untracked_attacker_and_victim(self, engine, newcomer, veteran):
        """Missing records mean no protection either way."""
        event = DamageEvent(newcomer, DamageSource.direct(veteran))

        assert engine.on_damage(event) is False
        assert event.cancelled is False

    def test_both_unprotected_allowed(self, engine, newcomer, veteran):
        expire(engine, newcomer)
        expire(engine, veteran)
        event = DamageEvent(newcomer, DamageSource.direct(veteran))

        assert engine.on_damage(event) is False

    def test_projectile_from_participant(self, engine, host, newcomer, veteran):
        engine.on_join(newcomer)
        expire(engine, veteran)
        event = DamageEvent(newcomer, DamageSource.projectile(veteran))

        assert engine.on_damage(event) is True
        assert host.messages_for(veteran.id) == [messages.VICTIM_PROTECTED]

    def test_projectile_without_shooter_ignored(self, engine, newcomer):
        engine.on_join(newcomer)
        event = DamageEvent(newcomer, DamageSource.projectile(None))

        assert engine.on_damage(event) is False

    def test_explosive_always_suppressed(self, engine, newcomer):
        """Unattended explosives never hurt anyone, tracked or not."""
        expire(engine, newcomer)
        event = DamageEvent(newcomer, DamageSource.explosive())

        assert engine.on_damage(event) is True
        assert event.cancelled is True

    def test_other_sources_ignored(self, engine, newcomer):
        engine.on_join(newcomer)
        event = DamageEvent(newcomer, DamageSource.other())

        assert engine.on_damage(event) is False

    def test_admin_victim_not_arbitrated(self, engine, admin):
        event = DamageEvent(admin, DamageSource.explosive())
        assert engine.on_damage(event) is False

    def test_admin_attacker_not_restricted(self, engine, host, admin, newcomer):
        engine.on_join(newcomer)
        event = DamageEvent(newcomer, DamageSource.direct(admin))

        assert engine.on_damage(event) is False
        assert host.messages_for(admin.id) == []


def interact(actor, item, block_material=Material.OTHER, at=None):
    block = None
    if at is not None:
        block = Block(block_material, at)
    return InteractEvent(actor, item, block)


class TestProtectedActorInteractions:
    """Test what protected participants may not do."""

    @pytest.mark.parametrize("item", [Material.FLINT_AND_STEEL, Material.LAVA_BUCKET, Material.TNT])
    def test_restricted_item_blocked(self, engine, host, newcomer, item):
        engine.on_join(newcomer)
        host.clear_messages()
        event = interact(newcomer, item)

        assert engine.on_interact(event) is True
        assert host.messages_for(newcomer.id) == [messages.ITEM_BLOCKED[item], messages.TERMINATE_HINT]

    @pytest.mark.parametrize("container", [Material.CHEST, Material.ENDER_CHEST])
    def test_container_blocked(self, engine, host, newcomer, container):
        engine.on_join(newcomer)
        host.clear_messages()
        event = interact(newcomer, Material.AIR, container, at=OUTSIDE)

        assert engine.on_interact(event) is True
        assert host.messages_for(newcomer.id)[0] == messages.CANNOT_OPEN_CHESTS

    def test_harmless_interaction_allowed(self, engine, newcomer):
        engine.on_join(newcomer)
        event = interact(newcomer, Material.OTHER, Material.OTHER, at=OUTSIDE)

        assert engine.on_interact(event) is False

    def test_expired_actor_may_open_chests(self, engine, newcomer):
        expire(engine, newcomer)
        event = interact(newcomer, Material.AIR, Material.CHEST, at=OUTSIDE)

        assert engine.on_interact(event) is False

    def test_admin_bypasses(self, engine, admin):
        event = interact(admin, Material.TNT, at=OUTSIDE)
        assert engine.on_interact(event) is False


class TestBufferZone:
    """Test griefing near protected participants."""

    @pytest.mark.parametrize(
        ("distance", "blocked"),
        [
            (3, True),
            (5, True),     # boundary is inclusive
            (6, False),
        ],
    )
    def test_buffer_distance_boundary(self, engine, host, newcomer, veteran, distance, blocked):
        """
        CRITICAL TEST: dist <= buffer blocks, beyond it is allowed.
        """
        engine.on_join(newcomer)
        expire(engine, veteran)
        target = Position("world", OUTSIDE.x + distance, OUTSIDE.y, OUTSIDE.z)
        event = interact(veteran, Material.FLINT_AND_STEEL, at=target)

        assert engine.on_interact(event) is blocked
        assert event.cancelled is blocked
        if blocked:
            assert host.messages_for(veteran.id) == [messages.NEARBY_PROTECTED]

    def test_untracked_actor_checked_as_unprotected(self, engine, host, newcomer):
        engine.on_join(newcomer)
        stranger = host.connect(Participant("Stranger", position=OUTSIDE))

        event = interact(stranger, Material.LAVA_BUCKET, at=OUTSIDE)

        assert engine.on_interact(event) is True

    def test_requires_target_block(self, engine, newcomer, veteran):
        engine.on_join(newcomer)
        expire(engine, veteran)

        assert engine.on_interact(interact(veteran, Material.TNT)) is False

    def test_harmless_item_near_protected(self, engine, newcomer, veteran):
        engine.on_join(newcomer)
        expire(engine, veteran)

        assert engine.on_interact(interact(veteran, Material.OTHER, at=OUTSIDE)) is False

    def test_other_world_ignored(self, engine, newcomer, veteran):
        engine.on_join(newcomer)
        expire(engine, veteran)
        target = Position("nether", OUTSIDE.x, OUTSIDE.y, OUTSIDE.z)

        assert engine.on_interact(interact(veteran, Material.TNT, at=target)) is False

    def test_expired_and_admins_not_shielded(self, engine, host, newcomer, veteran, admin):
        expire(engine, newcomer)
        expire(engine, veteran)

        event = interact(veteran, Material.TNT, at=OUTSIDE)

        assert engine.on_interact(event) is False


class TestJoinAndDeath:
    """Test join and death lifecycle."""

    def test_join_creates_and_notifies(self, engine, host, newcomer):
        engine.on_join(newcomer)

        assert engine.store.get(newcomer.id).active is True
        assert host.messages_for(newcomer.id) == [messages.STARTING, messages.INFO_HINT]

    def test_rejoin_does_not_count_offline_time(self, engine, host, newcomer, scheduler):
        engine.on_join(newcomer)
        engine.tick()
        host.disconnect(newcomer.id)
        scheduler.advance(3600)

        host.connect(newcomer)
        engine.on_join(newcomer)
        scheduler.advance(2)
        engine.tick()

        assert engine.store.get(newcomer.id).elapsed_seconds == 2

    def test_rejoin_no_second_notice(self, engine, host, newcomer):
        engine.on_join(newcomer)
        engine.on_join(newcomer)

        assert host.messages_for(newcomer.id).count(messages.STARTING) == 1

    def test_admin_join_ignored(self, engine, admin):
        engine.on_join(admin)
        assert admin.id not in engine.store

    def test_death_resets(self, engine, host, newcomer, snapshot_path):
        expire(engine, newcomer)
        engine.store.get(newcomer.id).elapsed_seconds = 1200

        engine.on_death(newcomer)

        record = engine.store.get(newcomer.id)
        assert record.active is True
        assert record.elapsed_seconds == 0
        assert host.messages_for(newcomer.id) == [messages.DIED_RESET]
        assert snapshot_path.exists()

    def test_death_reset_disabled(self, engine, host, newcomer):
        engine.config.protection.reset_on_death = False
        expire(engine, newcomer)

        engine.on_death(newcomer)

        assert engine.store.get(newcomer.id).active is False
        assert host.messages == []

    def test_admin_death_ignored(self, engine, host, admin):
        engine.on_death(admin)

        assert admin.id not in engine.store
        assert host.messages == []

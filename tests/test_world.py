import dataclasses
import os
import random

import pytest

os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from skyward.config import (
    GROUND_HEIGHT,
    HP_MAX,
    MAX_REACHABLE_GAP,
    PLATFORM_HEIGHT,
    START_PLATFORM_LIFT,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from skyward.entities import Platform, PlatformType
from skyward.world import GameEvent, InputState, World


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def quiet_world(*extra: Platform) -> World:
    """A world holding only the ground, the start platform and any extra platforms."""
    world = World(seed=42, clock=FakeClock())
    world.generator.target_count = 0
    world.platforms = [world.ground, world.start_platform, *extra]
    world.coins = []
    return world


def test_start_places_ball_on_start_platform() -> None:
    world = World(seed=1, clock=FakeClock())
    start = world.start_platform
    assert start.y == WINDOW_HEIGHT - GROUND_HEIGHT - START_PLATFORM_LIFT
    assert world.ball.x == WINDOW_WIDTH / 2
    assert world.ball.y == start.y - world.ball.radius
    assert world.ball.hp == HP_MAX
    assert world.session.score == 0
    assert not world.game_over


def test_ball_rests_on_start_platform() -> None:
    world = quiet_world()
    y = world.ball.y
    for _ in range(10):
        world.tick(InputState(), now_ms=0.0)
    assert world.ball.y == y
    assert world.ball.can_jump


def test_same_seed_same_level() -> None:
    a = World(seed=99, clock=FakeClock())
    b = World(seed=99, clock=FakeClock())
    assert [(p.x, p.y, p.type) for p in a.platforms] == [(p.x, p.y, p.type) for p in b.platforms]


def test_jump_from_platform() -> None:
    world = quiet_world()
    world.tick(InputState(), now_ms=0.0)
    events = world.tick(InputState(jump_pressed=True), now_ms=16.0)
    assert GameEvent.JUMPED in events
    assert world.ball.dy < 0
    assert not world.ball.can_jump


def test_no_jump_in_midair() -> None:
    world = quiet_world()
    world.ball.y = 200
    events = world.tick(InputState(jump_pressed=True), now_ms=0.0)
    assert GameEvent.JUMPED not in events


def test_spike_hit_at_half_hp_ends_game_same_tick() -> None:
    spikes = Platform(150, 300, 100, 10, PlatformType.SPIKES)
    world = quiet_world(spikes)
    world.platforms.remove(world.start_platform)
    world.ball.x, world.ball.y = 200, 285
    world.ball.hp = 0.5
    world.tick(InputState(), now_ms=0.0)
    assert world.ball.hp == 0.0
    assert world.game_over

    # nothing moves after game over
    y = world.ball.y
    assert world.tick(InputState(move_left=True), now_ms=16.0) == []
    assert world.ball.y == y


def test_fragile_breaks_after_three_landings_then_fades() -> None:
    world = quiet_world()
    start = world.start_platform
    fragile = Platform(start.x, start.y, start.width, start.height, PlatformType.FRAGILE)
    world.platforms = [world.ground, fragile]
    for _ in range(2):
        world.tick(InputState(), now_ms=0.0)
    assert not fragile.broken
    world.tick(InputState(), now_ms=0.0)
    assert fragile.broken
    first = fragile.opacity
    assert first < 1.0
    world.tick(InputState(), now_ms=0.0)
    assert fragile.opacity < first


def test_click_breaks_only_fragile() -> None:
    fragile = Platform(50, 200, 80, 10, PlatformType.FRAGILE)
    world = quiet_world(fragile)
    assert world.break_platform_at(90, 205)
    assert fragile.broken
    start = world.start_platform
    assert not world.break_platform_at(start.x + 10, start.y + 5)
    assert not world.break_platform_at(0, 0)


def test_power_up_activation_and_expiry() -> None:
    world = quiet_world()
    events = world.tick(InputState(activate_power_up=True), now_ms=0.0)
    assert GameEvent.POWER_UP_ACTIVATED in events
    assert world.skills.jump_power.active
    events = world.tick(InputState(activate_power_up=True), now_ms=100.0)
    assert GameEvent.POWER_UP_ACTIVATED not in events

    world.tick(InputState(), now_ms=7001.0)
    assert not world.skills.jump_power.active


def test_hp_regenerates_on_clock() -> None:
    world = quiet_world()
    world.ball.hp = 2.0
    world.tick(InputState(), now_ms=4999.0)
    assert world.ball.hp == 2.0
    world.tick(InputState(), now_ms=5000.0)
    assert world.ball.hp == pytest.approx(2.2)


def test_camera_scroll_adds_height_points() -> None:
    world = quiet_world()
    ground_y = world.ground.y
    world.ball.y = 100
    world.ball.dy = 0.0
    world.tick(InputState(), now_ms=0.0)
    assert world.session.max_height > 0
    assert world.ground.y > ground_y
    assert world.session.score == 1
    assert world.session.height_points == 1


def test_offscreen_platforms_recycled() -> None:
    low = Platform(50, WINDOW_HEIGHT + 100, 80, 10)
    world = quiet_world(low)
    world.tick(InputState(), now_ms=0.0)
    assert low not in world.platforms


def test_replenish_keeps_target_count() -> None:
    world = World(seed=5, clock=FakeClock())
    world.tick(InputState(), now_ms=0.0)
    assert len(world.platforms) >= world.generator.target_count


def test_falling_off_world_without_floor() -> None:
    world = quiet_world()
    world.platforms.remove(world.ground)
    world.ball.x, world.ball.y = 30, WINDOW_HEIGHT + 30
    world.tick(InputState(), now_ms=0.0)
    assert world.game_over


def test_rescue_charge_saves_a_fall() -> None:
    world = quiet_world()
    world.platforms.remove(world.ground)
    world.ball.x, world.ball.y = 30, WINDOW_HEIGHT + 30
    world.ball.has_rescue = True
    world.tick(InputState(), now_ms=0.0)
    assert not world.game_over
    assert not world.ball.has_rescue
    assert world.ball.y < WINDOW_HEIGHT


def test_restart_resets_session() -> None:
    world = quiet_world()
    world.ball.hp = 0.5
    world.ball.x, world.ball.y = 10, 10
    world.session.score = 500
    world.session.game_over = True
    world.start_game(now_ms=0.0)
    assert world.ball.hp == HP_MAX
    assert world.session.score == 0
    assert not world.game_over
    start = world.start_platform
    assert (world.ball.x, world.ball.y) == (start.x + start.width / 2, start.y - world.ball.radius)
    assert all(v == 0.0 for v in world.generator.cooldowns.values())


def test_random_play_keeps_invariants() -> None:
    rng = random.Random(2024)
    world = World(seed=2024, clock=FakeClock())
    now = 0.0
    last_score = 0
    for _ in range(1500):
        inputs = InputState(
            move_left=rng.random() < 0.3,
            move_right=rng.random() < 0.3,
            jump_pressed=rng.random() < 0.2,
            activate_power_up=rng.random() < 0.01,
        )
        now += 1000.0 / 60
        world.tick(inputs, now_ms=now)
        assert 0.0 <= world.ball.hp <= HP_MAX
        assert -20.0 <= world.ball.dy <= 20.0
        assert world.session.score >= last_score
        last_score = world.session.score
        if world.game_over:
            break


def test_snapshot_is_read_only() -> None:
    world = World(seed=3, clock=FakeClock())
    snap = world.snapshot()
    assert snap.score == 0
    assert snap.hp == HP_MAX
    assert len(snap.platforms) == len(world.platforms)
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.score = 10  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.ball.x = 0  # type: ignore[misc]


def test_hardest_spawn_gap_is_reachable_with_one_jump() -> None:
    world = quiet_world()
    world.skills.gravity_resistance.last_activated = 0.0
    start = world.start_platform
    spawned = world.generator.spawn_above(world.platforms, world.coins, score=5000)
    assert start.y - spawned.y <= MAX_REACHABLE_GAP

    target = Platform(start.x, spawned.y, start.width, PLATFORM_HEIGHT)
    world.platforms[-1] = target
    world.tick(InputState(), now_ms=0.0)
    assert GameEvent.JUMPED in world.tick(InputState(jump_pressed=True), now_ms=0.0)

    landed = False
    for _ in range(80):
        world.tick(InputState(), now_ms=0.0)
        if world.ball.can_jump and world.ball.y == target.y - world.ball.radius:
            landed = True
            break
    assert landed


@pytest.mark.parametrize("distance", [5, 8, 12, 14])
def test_gravity_platform_slows_fall_just_above_center(distance: float) -> None:
    well = Platform(150, 295, 100, 10, PlatformType.GRAVITY)
    world = quiet_world(well)
    cx, cy = well.center
    world.ball.x, world.ball.y = cx, cy - distance
    world.ball.dy = 1.0
    world.tick(InputState(), now_ms=0.0)
    assert world.ball.dy < 1.0


def test_jump_held_alone_does_not_jump() -> None:
    held = quiet_world()
    idle = quiet_world()
    for world in (held, idle):
        world.tick(InputState(), now_ms=0.0)
    events = held.tick(InputState(jump_held=True), now_ms=16.0)
    idle.tick(InputState(), now_ms=16.0)
    assert GameEvent.JUMPED not in events
    assert (held.ball.y, held.ball.dy) == (idle.ball.y, idle.ball.dy)


def test_physics_rng_differs_from_level_rng_and_restarts() -> None:
    world = World(seed=42, clock=FakeClock())
    first = world.rng.random()
    assert first != random.Random(world.seed).random()
    world.rng.random()
    world.start_game(now_ms=0.0)
    assert world.rng.random() == first

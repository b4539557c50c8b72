"""Simulation context: owns the ball, platforms, coins, timers and session counters."""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable

from . import physics
from .config import (
    CAMERA_LERP,
    HEIGHT_UNITS_PER_POINT,
    HP_MAX,
    HP_REGEN_AMOUNT,
    OFFSCREEN_MARGIN,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from .entities import Ball, Coin, CoinType, GameEvent, Platform, PlatformType
from .generator import PlatformGenerator
from .skills import Skills

logger = logging.getLogger(__name__)

__all__ = ["GameEvent", "InputState", "Session", "Snapshot", "World"]

# Keeps the physics stream apart from the level generator's stream for one seed.
_PHYSICS_SEED_SALT = 0x5EED


@dataclass
class InputState:
    """Per-tick player intents. ``jump_pressed`` and ``activate_power_up`` are edges.

    ``jump_held`` is level state kept for front-ends; the simulation never reads it.
    """

    move_left: bool = False
    move_right: bool = False
    jump_held: bool = False
    jump_pressed: bool = False
    activate_power_up: bool = False


@dataclass
class Session:
    score: int = 0
    max_height: float = 0.0
    game_over: bool = False
    camera_offset: float = 0.0
    height_points: int = 0


@dataclass(frozen=True)
class BallView:
    x: float
    y: float
    radius: float
    hp: float
    is_floating: bool
    poisoned: bool
    invulnerable: bool
    bounce_effect_timer: int
    slip_effect_timer: int
    has_rescue: bool


@dataclass(frozen=True)
class PlatformView:
    x: float
    y: float
    width: float
    height: float
    type: PlatformType
    soap: bool
    opacity: float
    broken: bool
    collected: bool


@dataclass(frozen=True)
class CoinView:
    x: float
    y: float
    radius: float
    type: CoinType


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the world handed to the renderer."""

    ball: BallView
    platforms: tuple[PlatformView, ...]
    coins: tuple[CoinView, ...]
    score: int
    hp: float
    max_height: float
    game_over: bool
    speed_boost: bool
    gravity_resistance: bool
    jump_power_active: bool
    jump_power_cooldown_ms: float


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class World:
    """Single owner of all simulation state; advanced one tick at a time."""

    def __init__(
        self,
        seed: int | None = None,
        *,
        width: float = WINDOW_WIDTH,
        height: float = WINDOW_HEIGHT,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self.width = width
        self.height = height
        self.clock = clock
        self.generator = PlatformGenerator(seed, width=width, height=height)
        self.rng = random.Random(self.generator.seed ^ _PHYSICS_SEED_SALT)
        self.skills = Skills()
        self.session = Session()
        self.ball = Ball(width / 2.0, height / 2.0)
        self.platforms: list[Platform] = []
        self.coins: list[Coin] = []
        self.ground: Platform | None = None
        self.start_platform: Platform | None = None
        self.events: list[GameEvent] = []
        self.braked = False
        self.start_game()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start_game(self, now_ms: float | None = None, seed: int | None = None) -> None:
        """(Re)initialize every piece of session state and build a fresh layout."""
        now_ms = self.clock() if now_ms is None else now_ms
        self.generator.reset(seed)
        self.rng.seed(self.generator.seed ^ _PHYSICS_SEED_SALT)
        self.platforms, self.coins, self.start_platform = self.generator.initial_layout()
        self.ground = self.platforms[0]

        start = self.start_platform
        self.ball.reset(start.x + start.width / 2.0, start.y - self.ball.radius)
        self.session = Session()
        self.skills.reset(now_ms)
        self.events = []
        self.braked = False
        logger.info("Game started (seed=%s, %d platforms)", self.generator.seed, len(self.platforms))

    @property
    def seed(self) -> int:
        return self.generator.seed

    @property
    def game_over(self) -> bool:
        return self.session.game_over

    def end_game(self, reason: str) -> None:
        if self.session.game_over:
            return
        self.session.game_over = True
        logger.info(
            "Game over (%s): score=%d height=%.0f",
            reason,
            self.session.score,
            self.session.max_height,
        )

    def emit(self, event: GameEvent) -> None:
        self.events.append(event)

    def break_platform_at(self, x: float, y: float) -> bool:
        """Break any fragile platform under the point (the click interaction)."""
        broke = False
        for p in self.platforms:
            if p.type is PlatformType.FRAGILE and p.contains_point(x, y):
                broke = p.break_temporarily() or broke
        return broke

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    def tick(self, inputs: InputState | None = None, now_ms: float | None = None) -> list[GameEvent]:
        """Advance the simulation by one frame and return the events it produced.

        Every clock-driven timer in this tick reads the same ``now_ms``.
        """
        if self.session.game_over:
            return []
        inputs = inputs or InputState()
        now_ms = self.clock() if now_ms is None else now_ms
        ball = self.ball
        skills = self.skills
        self.events = []
        self.braked = False

        if inputs.activate_power_up and skills.jump_power.activate(now_ms):
            self.emit(GameEvent.POWER_UP_ACTIVATED)

        # 1. passive skills
        skills.update_passive(now_ms)
        boosted = skills.speed_boost.active

        # 2. horizontal input
        physics.apply_horizontal_input(ball, inputs.move_left, inputs.move_right, boosted)

        # 3. wind: proximity float and the timed wind field
        floating = physics.apply_float_proximity(ball, self.platforms)
        in_wind = physics.apply_wind_field(ball, now_ms, self.width, self.height)
        ball.is_floating = floating or in_wind

        # 4-5. gravity wells, gravity
        influence = physics.gravity_influence(ball, self.platforms, skills.gravity_resistance.active, now_ms)
        physics.apply_gravity(ball, influence)
        ball.x += ball.dx
        ball.y += ball.dy

        # 6. walls and floor
        ball.can_jump = False
        physics.resolve_bounds(ball, self.width, self.height, floor=self.ground in self.platforms)

        # 7. platforms, status effects, pickups, death
        physics.resolve_platform_collisions(self)
        physics.tick_poison(ball)
        if not self.braked:
            physics.recover_brake(ball)
        self.session.score += physics.collect_coins(ball, self.coins)
        if self._check_death():
            return list(self.events)

        # 8. recycle and replenish platforms
        self.platforms = [p for p in self.platforms if p.y <= self.height + OFFSCREEN_MARGIN]
        self.generator.replenish(self.platforms, self.coins, self.session.score)

        # 9. camera
        self._scroll_camera()

        # 10. platform updates, coin cleanup, power-up expiry
        for p in self.platforms:
            p.update(self.width)
        self.coins = [c for c in self.coins if not c.collected and c.y <= self.height + OFFSCREEN_MARGIN]
        skills.jump_power.expire(now_ms)

        # 11. jump
        if inputs.jump_pressed and ball.can_jump and not ball.is_floating:
            physics.perform_jump(
                ball,
                influence.nearest_distance,
                skills.jump_power.active,
                inputs.move_left,
                inputs.move_right,
                boosted,
            )
            self.emit(GameEvent.JUMPED)

        if skills.regen.due(now_ms) and ball.hp < HP_MAX:
            ball.heal(HP_REGEN_AMOUNT)
        physics.decay_effect_timers(ball)
        return list(self.events)

    def _check_death(self) -> bool:
        ball = self.ball
        if ball.hp <= 0:
            self.end_game("out of hit points")
            return True
        if ball.y - ball.radius > self.height:
            if ball.has_rescue:
                ball.has_rescue = False
                ball.y = self.height - 100
                ball.dy = 0.0
                logger.info("Rescue charge used")
                return False
            self.end_game("fell off the world")
            return True
        return False

    def _scroll_camera(self) -> None:
        threshold = self.height / 2.0
        if self.ball.y >= threshold:
            return
        offset = (threshold - self.ball.y) * CAMERA_LERP
        for p in self.platforms:
            p.y += offset
        for c in self.coins:
            c.y += offset
        self.ball.y += offset
        self.session.camera_offset += offset
        self.session.max_height += offset

        points = math.floor(self.session.max_height / HEIGHT_UNITS_PER_POINT)
        if points > self.session.height_points:
            self.session.score += points - self.session.height_points
            self.session.height_points = points

    # ------------------------------------------------------------------
    # Render contract
    # ------------------------------------------------------------------
    def snapshot(self, now_ms: float | None = None) -> Snapshot:
        now_ms = self.clock() if now_ms is None else now_ms
        b = self.ball
        return Snapshot(
            ball=BallView(
                b.x,
                b.y,
                b.radius,
                b.hp,
                b.is_floating,
                b.poisoned,
                b.invulnerable_timer > 0,
                b.bounce_effect_timer,
                b.slip_effect_timer,
                b.has_rescue,
            ),
            platforms=tuple(
                PlatformView(p.x, p.y, p.width, p.height, p.type, p.soap, p.opacity, p.broken, p.collected)
                for p in self.platforms
            ),
            coins=tuple(CoinView(c.x, c.y, c.radius, c.type) for c in self.coins if not c.collected),
            score=self.session.score,
            hp=b.hp,
            max_height=self.session.max_height,
            game_over=self.session.game_over,
            speed_boost=self.skills.speed_boost.active,
            gravity_resistance=self.skills.gravity_resistance.active,
            jump_power_active=self.skills.jump_power.active,
            jump_power_cooldown_ms=self.skills.jump_power.cooldown_remaining(now_ms),
        )

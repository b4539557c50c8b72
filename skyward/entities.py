"""Game entities: the ball, coins, and the platform catalog.

Platforms carry a closed ``PlatformType`` and the small amount of runtime state
their type needs (fragile breakage, moving sweep, oscillation phases). The
per-type collision responses live in :mod:`skyward.physics`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .config import (
    BALL_RADIUS,
    FRAGILE_BREAK_TICKS,
    FRAGILE_CONTACT_DECAY,
    FRAGILE_FADE_PER_TICK,
    FRAGILE_WARNING_TICKS,
    GRASSSPIKES_DAMAGE,
    HP_MAX,
    HP_MIN,
    MOVING_PLATFORM_SPEED,
    SPIKES_DAMAGE,
    WINDOW_WIDTH,
)
from .utils import clamp, point_in_rect


class PlatformType(str, Enum):
    STATIC = "static"
    BOUNCY = "bouncy"
    FRAGILE = "fragile"
    MOVING = "moving"
    SLIP = "slip"
    ICE = "ice"
    GRAVITY = "gravity"
    WINDBLAST = "windblast"
    SPIKES = "spikes"
    GRASSSPIKES = "grassspikes"


@dataclass(frozen=True)
class PlatformTraits:
    """Catalog metadata consulted by the generator.

    ``recent_cap`` is how many of this type may appear among the most recent
    platforms before its spawn weight is suppressed; ``None`` means no fixed
    cap (spikes use a difficulty-dependent one).
    """

    hazard: bool = False
    cooldown: float = 7.0
    recent_cap: int | None = None
    damage: float = 0.0


CATALOG: dict[PlatformType, PlatformTraits] = {
    PlatformType.STATIC: PlatformTraits(cooldown=0.0),
    PlatformType.BOUNCY: PlatformTraits(recent_cap=3),
    PlatformType.FRAGILE: PlatformTraits(recent_cap=3),
    PlatformType.MOVING: PlatformTraits(recent_cap=3),
    PlatformType.SLIP: PlatformTraits(recent_cap=2),
    PlatformType.ICE: PlatformTraits(recent_cap=2),
    PlatformType.GRAVITY: PlatformTraits(recent_cap=2),
    PlatformType.WINDBLAST: PlatformTraits(recent_cap=2),
    PlatformType.SPIKES: PlatformTraits(hazard=True, cooldown=10.0, damage=SPIKES_DAMAGE),
    PlatformType.GRASSSPIKES: PlatformTraits(hazard=True, cooldown=12.0, recent_cap=1, damage=GRASSSPIKES_DAMAGE),
}


def is_hazard(ptype: PlatformType) -> bool:
    return CATALOG[PlatformType(ptype)].hazard


class Platform:
    """A rectangular surface whose type is fixed at construction."""

    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        type: PlatformType | str = PlatformType.STATIC,
        *,
        soap: bool = False,
    ) -> None:
        self.x = float(x)
        self.y = float(y)
        self.width = float(width)
        self.height = float(height)
        self._type = PlatformType(type)
        self.soap = soap and self._type is PlatformType.SLIP

        # Fragile
        self.broken = False
        self.opacity = 1.0
        self.break_timer = 0
        self.warning_timer = 0

        # Moving
        self.direction = 1
        self.speed = MOVING_PLATFORM_SPEED

        # Oscillation phases (bouncy / slip / ice)
        self.pulse = 0.0
        self.slip_pulse = 0.0

        # Windblast one-shot trigger
        self.collected = False

    @property
    def type(self) -> PlatformType:
        return self._type

    @property
    def traits(self) -> PlatformTraits:
        return CATALOG[self._type]

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    @property
    def rect(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height

    @property
    def solid(self) -> bool:
        """Broken platforms stay solid until they have fully faded out."""
        return not (self.broken and self.opacity <= 0.0)

    def contains_point(self, px: float, py: float) -> bool:
        return point_in_rect(px, py, self.x, self.y, self.width, self.height)

    def break_temporarily(self) -> bool:
        """Start the broken phase of a fragile platform. Returns True if it broke."""
        if self._type is not PlatformType.FRAGILE or self.broken:
            return False
        self.broken = True
        self.break_timer = FRAGILE_BREAK_TICKS
        self.opacity = 1.0
        return True

    def register_contact(self) -> bool:
        """Advance the fragile warning countdown for one contact.

        The first contact arms the warning timer; each later one burns part of
        it, and the platform breaks when it runs out. Returns True on the
        contact that breaks the platform.
        """
        if self._type is not PlatformType.FRAGILE or self.broken:
            return False
        if self.warning_timer <= 0:
            self.warning_timer = FRAGILE_WARNING_TICKS
            return False
        self.warning_timer = max(0, self.warning_timer - FRAGILE_CONTACT_DECAY)
        if self.warning_timer == 0:
            return self.break_temporarily()
        return False

    def update(self, canvas_width: float = WINDOW_WIDTH) -> None:
        if self._type is PlatformType.MOVING and not self.broken:
            self.x += self.speed * self.direction
            if self.x < 0 or self.x + self.width > canvas_width:
                self.direction *= -1

        if self.broken:
            self.opacity = max(0.0, self.opacity - FRAGILE_FADE_PER_TICK)
            self.break_timer -= 1
            if self.break_timer <= 0:
                self.broken = False
                self.opacity = 1.0
                self.break_timer = 0

        if self._type is PlatformType.BOUNCY:
            self.pulse += 0.05
        elif self._type in (PlatformType.SLIP, PlatformType.ICE):
            self.slip_pulse += 0.1
            if self._type is PlatformType.SLIP and not self.soap:
                self.x += math.sin(self.slip_pulse) * 0.3

    def __repr__(self) -> str:
        kind = "soap" if self.soap else self._type.value
        return f"Platform({kind}, x={self.x:.1f}, y={self.y:.1f}, w={self.width:.1f})"


class CoinType(str, Enum):
    NORMAL = "normal"
    GOLD = "gold"
    STAR = "star"


# (value, radius)
COIN_PROPERTIES: dict[CoinType, tuple[int, float]] = {
    CoinType.NORMAL: (10, 7.0),
    CoinType.GOLD: (50, 10.0),
    CoinType.STAR: (100, 12.0),
}


class Coin:
    def __init__(self, x: float, y: float, type: CoinType | str = CoinType.NORMAL) -> None:
        self.x = float(x)
        self.y = float(y)
        self.type = CoinType(type)
        self.value, self.radius = COIN_PROPERTIES[self.type]
        self.collected = False

    def __repr__(self) -> str:
        return f"Coin({self.type.value}, x={self.x:.1f}, y={self.y:.1f})"


class Ball:
    """The player. Every transient effect is an explicit field, reset by ``reset``."""

    def __init__(self, x: float, y: float) -> None:
        self.radius = float(BALL_RADIUS)
        self.reset(x, y)

    def reset(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)
        self.dx = 0.0
        self.dy = 0.0
        self.hp = HP_MAX
        self.can_jump = False

        self.invulnerable_timer = 0
        self.poisoned = False
        self.poison_timer = 0

        self.is_floating = False
        self.wind_active = False
        self.wind_duration = 0

        self.bounce_effect_timer = 0
        self.slip_effect_timer = 0
        self.soap_effect_timer = 0

        # Landing brake: slow_timer counts down while original_dx is the
        # horizontal speed captured when the brake was armed.
        self.slow_timer = 0
        self.original_dx: float | None = None

        self.coin_combo_count = 0
        self.coin_combo_timer = 0

        self.has_rescue = False

    @property
    def alive(self) -> bool:
        return self.hp > HP_MIN

    def damage(self, amount: float) -> None:
        self.hp = clamp(self.hp - amount, HP_MIN, HP_MAX)

    def heal(self, amount: float) -> None:
        self.hp = clamp(self.hp + amount, HP_MIN, HP_MAX)

    def poison(self, ticks: int) -> None:
        self.poisoned = True
        self.poison_timer = max(self.poison_timer, ticks)

    def clear_brake(self) -> None:
        self.slow_timer = 0
        self.original_dx = None


class GameEvent(str, Enum):
    """Discrete notifications for the presentation layer (sound, effects)."""

    LANDED_ON_BOUNCY = "landed-on-bouncy"
    JUMPED = "jumped"
    POWER_UP_ACTIVATED = "power-up-activated"

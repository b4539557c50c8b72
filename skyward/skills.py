"""Wall-clock timed effects.

Every timer here is driven by the single timestamp handed to ``World.tick``
(milliseconds from a monotonic clock), so no effect keeps its own schedule.
"""

from __future__ import annotations

from .config import (
    GRAVITY_RESISTANCE_COOLDOWN_MS,
    GRAVITY_RESISTANCE_DURATION_MS,
    HP_REGEN_INTERVAL_MS,
    JUMP_POWER_COOLDOWN_MS,
    JUMP_POWER_DURATION_MS,
    SPEED_BOOST_COOLDOWN_MS,
    SPEED_BOOST_DURATION_MS,
)


class CycleSkill:
    """A passive skill that alternates between an active window and a cooldown.

    The skill switches itself on once a full cycle (duration + cooldown) has
    elapsed since its last activation, and off once the duration has elapsed.
    """

    def __init__(self, name: str, duration_ms: float, cooldown_ms: float) -> None:
        self.name = name
        self.duration_ms = duration_ms
        self.cooldown_ms = cooldown_ms
        self.reset(0.0)

    def reset(self, now_ms: float) -> None:
        self.active = False
        # Backdate so the first update of a fresh session activates the skill.
        self.last_activated = now_ms - (self.duration_ms + self.cooldown_ms)

    def update(self, now_ms: float) -> bool:
        """Advance the cycle. Returns True if the active state changed."""
        elapsed = now_ms - self.last_activated
        if not self.active:
            if elapsed >= self.duration_ms + self.cooldown_ms:
                self.active = True
                self.last_activated = now_ms
                return True
        elif elapsed >= self.duration_ms:
            self.active = False
            return True
        return False


class JumpPowerUp:
    """Player-triggered jump boost with a cooldown measured from its last use."""

    def __init__(
        self,
        duration_ms: float = JUMP_POWER_DURATION_MS,
        cooldown_ms: float = JUMP_POWER_COOLDOWN_MS,
    ) -> None:
        self.duration_ms = duration_ms
        self.cooldown_ms = cooldown_ms
        self.reset(0.0)

    def reset(self, now_ms: float) -> None:
        self.active = False
        self.last_used = now_ms - self.cooldown_ms

    def ready(self, now_ms: float) -> bool:
        return not self.active and now_ms - self.last_used >= self.cooldown_ms

    def activate(self, now_ms: float) -> bool:
        if not self.ready(now_ms):
            return False
        self.active = True
        self.last_used = now_ms
        return True

    def consume(self) -> None:
        self.active = False

    def expire(self, now_ms: float) -> bool:
        if self.active and now_ms - self.last_used > self.duration_ms:
            self.active = False
            return True
        return False

    def cooldown_remaining(self, now_ms: float) -> float:
        """Milliseconds until the power-up can be used again (0 when ready or active)."""
        if self.active:
            return 0.0
        return max(0.0, self.cooldown_ms - (now_ms - self.last_used))


class RegenTimer:
    """Fires once per interval of elapsed clock time."""

    def __init__(self, interval_ms: float = HP_REGEN_INTERVAL_MS) -> None:
        self.interval_ms = interval_ms
        self.reset(0.0)

    def reset(self, now_ms: float) -> None:
        self.last_fired = now_ms

    def due(self, now_ms: float) -> bool:
        if now_ms - self.last_fired >= self.interval_ms:
            self.last_fired = now_ms
            return True
        return False


class Skills:
    """All clock-driven timers of a session, reset and advanced together."""

    def __init__(self) -> None:
        self.speed_boost = CycleSkill("speed_boost", SPEED_BOOST_DURATION_MS, SPEED_BOOST_COOLDOWN_MS)
        self.gravity_resistance = CycleSkill(
            "gravity_resistance", GRAVITY_RESISTANCE_DURATION_MS, GRAVITY_RESISTANCE_COOLDOWN_MS
        )
        self.jump_power = JumpPowerUp()
        self.regen = RegenTimer()

    def reset(self, now_ms: float) -> None:
        self.speed_boost.reset(now_ms)
        self.gravity_resistance.reset(now_ms)
        self.jump_power.reset(now_ms)
        self.regen.reset(now_ms)

    def update_passive(self, now_ms: float) -> None:
        self.speed_boost.update(now_ms)
        self.gravity_resistance.update(now_ms)

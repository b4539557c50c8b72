"""Ball kinematics and ball/platform collision responses.

Each step of the tick lives in its own function so ``World.tick`` reads as the
ordered list of steps. Landing responses are looked up per platform type in
``LANDING_HANDLERS``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from .config import (
    ACCELERATION,
    ANTI_GRAVITY_RADIUS,
    BALL_MAX_SPEED,
    BOOSTED_DECELERATION_FACTOR,
    BOUNCE_EFFECT_TICKS,
    BOUNCY_FORCE_FACTOR,
    BOUNCY_POWER_BONUS,
    BRAKE_RECOVERY,
    BRAKE_TICKS,
    COIN_COMBO_TICKS,
    DECELERATION_FACTOR,
    FLOAT_ACTIVATION_RADIUS,
    FLOAT_UPWARD_FORCE,
    GRAVITY,
    GRAVITY_CAPTURE_DAMPING,
    GRAVITY_CAPTURE_EASING,
    GRAVITY_FIELD_BELOW_CUTOFF,
    GRAVITY_FIELD_CAPTURE_RADIUS,
    GRAVITY_FIELD_INNER_RADIUS,
    GRAVITY_FIELD_MAX_SPEED,
    GRAVITY_FIELD_RADIUS,
    GRAVITY_FIELD_STRENGTH,
    GRAVITY_RESISTANCE_FACTOR,
    GRAVITY_WELL_RADIUS,
    ICE_ACCELERATION,
    ICE_KICK_SPEED,
    ICE_MAX_SPEED,
    ICE_SLIP_TICKS,
    INVULNERABLE_TICKS,
    JUMP_AIR_CONTROL,
    JUMP_FORCE_BASE,
    JUMP_GRAVITY_BONUS,
    JUMP_IMPULSE,
    JUMP_POWER_MULTIPLIER,
    LANDING_TOLERANCE,
    MAX_VERTICAL_SPEED,
    POISON_INTERVAL,
    POISON_TICKS,
    SLIP_MAX_FACTOR,
    SLIP_MIN_FACTOR,
    SOAP_SPEEDUP,
    SPEED_BOOST_MULTIPLIER,
    STOP_THRESHOLD,
    VELOCITY_SMOOTH_FACTOR,
    WALL_BOUNCE,
    WIND_CEILING_FRACTION,
    WIND_DRAG,
    WIND_DURATION_TICKS,
    WIND_FIELD_FRACTION,
    WIND_HORIZONTAL_FORCE,
    WIND_KICK,
    WIND_LIFT,
    WIND_MAX_HORIZONTAL_SPEED,
    WIND_MAX_PUSH_SPEED,
    WIND_MAX_UPWARD_SPEED,
    WIND_TURBULENCE,
)
from .entities import Ball, Coin, CoinType, GameEvent, Platform, PlatformType
from .utils import circle_rect_collision, clamp, distance, lerp

if TYPE_CHECKING:
    from .world import World


# ----------------------------------------------------------------------
# Kinematics
# ----------------------------------------------------------------------
def max_horizontal_speed(boosted: bool) -> float:
    return BALL_MAX_SPEED * (SPEED_BOOST_MULTIPLIER if boosted else 1.0)


def apply_horizontal_input(ball: Ball, move_left: bool, move_right: bool, boosted: bool) -> None:
    """Accelerate toward the held direction or decay toward rest, then cap and damp."""
    multiplier = SPEED_BOOST_MULTIPLIER if boosted else 1.0
    acceleration = ACCELERATION * multiplier
    if move_left:
        ball.dx -= acceleration
    elif move_right:
        ball.dx += acceleration
    else:
        ball.dx *= BOOSTED_DECELERATION_FACTOR if boosted else DECELERATION_FACTOR
        if abs(ball.dx) < STOP_THRESHOLD:
            ball.dx = 0.0
    cap = max_horizontal_speed(boosted)
    ball.dx = clamp(ball.dx, -cap, cap)
    ball.dx *= VELOCITY_SMOOTH_FACTOR


def apply_float_proximity(ball: Ball, platforms: Sequence[Platform]) -> bool:
    """Float the ball if it is near any windblast platform. Returns True when floating."""
    for p in platforms:
        if p.type is not PlatformType.WINDBLAST:
            continue
        cx, cy = p.center
        if distance(ball.x, ball.y, cx, cy) < FLOAT_ACTIVATION_RADIUS + ball.radius:
            ball.dy += FLOAT_UPWARD_FORCE
            return True
    return False


def start_wind(ball: Ball) -> None:
    ball.wind_active = True
    ball.wind_duration = WIND_DURATION_TICKS


def apply_wind_field(ball: Ball, now_ms: float, width: float, height: float) -> bool:
    """Advance the timed wind effect by one tick.

    While active and inside the central band of the canvas the ball is pushed
    toward the center, lifted, jostled and dragged. Returns True if the ball
    was inside the wind field this tick.
    """
    if not ball.wind_active:
        return False
    ball.wind_duration -= 1

    field_width = width * WIND_FIELD_FRACTION
    edge = (width - field_width) / 2.0
    in_field = edge < ball.x < width - edge
    if in_field:
        gust = 0.8 + 0.4 * math.sin(now_ms / 300.0)
        ratio = clamp((ball.x - width / 2.0) / (field_width / 2.0), -1.0, 1.0)

        push = -ratio * WIND_HORIZONTAL_FORCE * gust
        if push > 0 and ball.dx < WIND_MAX_PUSH_SPEED:
            ball.dx = min(ball.dx + push, WIND_MAX_PUSH_SPEED)
        elif push < 0 and ball.dx > -WIND_MAX_PUSH_SPEED:
            ball.dx = max(ball.dx + push, -WIND_MAX_PUSH_SPEED)

        ceiling = height * WIND_CEILING_FRACTION
        if ball.y > ceiling:
            lift = WIND_LIFT * (1.0 - abs(ratio)) * gust
            slow = (ball.y - ceiling) / (height - ceiling)
            ball.dy -= lift * (1.0 - min(slow, 1.0))

        t = now_ms / 100.0
        ball.dx += math.sin(t + ball.y) * 0.5 * WIND_TURBULENCE
        ball.dy += math.cos(t + ball.x) * 0.5 * WIND_TURBULENCE

        ball.dx *= WIND_DRAG
        ball.dy *= WIND_DRAG

    ball.dy = max(ball.dy, WIND_MAX_UPWARD_SPEED)
    ball.dx = clamp(ball.dx, -WIND_MAX_HORIZONTAL_SPEED, WIND_MAX_HORIZONTAL_SPEED)

    if ball.wind_duration <= 0:
        ball.wind_active = False
        ball.wind_duration = 0
    return in_field


@dataclass
class GravityInfluence:
    force: float
    direction: int
    nearest_distance: float


def gravity_influence(
    ball: Ball, platforms: Sequence[Platform], resisting: bool, now_ms: float
) -> GravityInfluence:
    """Work out this tick's gravity from the nearest gravity platform in reach.

    Close to a gravity platform's center gravity reverses and weakens; further
    out it is only weakened and the ball gets a slight sideways curve.
    """
    force = GRAVITY * GRAVITY_RESISTANCE_FACTOR if resisting else GRAVITY
    direction = 1
    nearest = math.inf
    for p in platforms:
        if p.type is not PlatformType.GRAVITY:
            continue
        cx, cy = p.center
        dx = cx - ball.x
        dy = cy - ball.y
        dist = math.hypot(dx, dy)
        if dist >= GRAVITY_WELL_RADIUS or dist >= nearest:
            continue
        nearest = dist
        if dist < ANTI_GRAVITY_RADIUS:
            direction = -1
            force = max(0.0, force * (1 - dist / ANTI_GRAVITY_RADIUS))
        else:
            direction = 1
            ratio = (GRAVITY_WELL_RADIUS - dist) / GRAVITY_WELL_RADIUS
            force *= 1 - ratio * ratio * 0.8
            angle = math.atan2(dy, dx)
            curve = math.sin(now_ms / 200.0 + dist) * 0.1
            ball.dx += curve * math.cos(angle)
    return GravityInfluence(force, direction, nearest)


def apply_gravity(ball: Ball, influence: GravityInfluence) -> None:
    if not ball.is_floating:
        ball.dy += influence.force * influence.direction
    ball.dy = clamp(ball.dy, -MAX_VERTICAL_SPEED, MAX_VERTICAL_SPEED)


def resolve_bounds(ball: Ball, width: float, height: float, floor: bool = True) -> None:
    """Keep the ball between the side walls and, while the floor exists, above it."""
    if ball.x - ball.radius < 0:
        ball.x = ball.radius
        ball.dx = -ball.dx * WALL_BOUNCE
    elif ball.x + ball.radius > width:
        ball.x = width - ball.radius
        ball.dx = -ball.dx * WALL_BOUNCE

    if floor and ball.y + ball.radius > height:
        ball.y = height - ball.radius
        ball.dy = 0.0
        ball.can_jump = True


def jump_power(nearest_gravity_distance: float) -> float:
    """Jump multiplier: 1 away from gravity platforms, growing toward their center."""
    if nearest_gravity_distance >= GRAVITY_WELL_RADIUS:
        return 1.0
    t = 1 - nearest_gravity_distance / GRAVITY_WELL_RADIUS
    return clamp(1.0 + JUMP_GRAVITY_BONUS * t * t, 1.0, 1.0 + JUMP_GRAVITY_BONUS)


def perform_jump(
    ball: Ball, nearest_gravity_distance: float, powered: bool, move_left: bool, move_right: bool, boosted: bool
) -> None:
    force = JUMP_IMPULSE * jump_power(nearest_gravity_distance)
    if powered:
        force *= JUMP_POWER_MULTIPLIER
    ball.dy = clamp(force, -MAX_VERTICAL_SPEED, MAX_VERTICAL_SPEED)
    if move_left:
        ball.dx = -abs(max_horizontal_speed(boosted) * JUMP_AIR_CONTROL)
    elif move_right:
        ball.dx = abs(max_horizontal_speed(boosted) * JUMP_AIR_CONTROL)
    ball.can_jump = False


# ----------------------------------------------------------------------
# Platform collisions
# ----------------------------------------------------------------------
def is_landing(ball: Ball, p: Platform) -> bool:
    """True if the descending ball crosses the platform's top edge this tick."""
    if ball.dy < 0:
        return False
    in_x_range = ball.x + ball.radius > p.x and ball.x - ball.radius < p.x + p.width
    bottom = ball.y + ball.radius
    return in_x_range and bottom <= p.y + LANDING_TOLERANCE and bottom + ball.dy >= p.y


def gravity_well_force(dx: float, dy: float, dist: float) -> tuple[float, float]:
    """Push applied by a gravity platform's field.

    (dx, dy) points from the ball to the platform center and dist is its
    length. The push attracts toward the center with a quadratic falloff;
    inside the inner radius the vertical part reverses as the ball nears the
    center and the horizontal part weakens.
    """
    if dist <= 0 or dist >= GRAVITY_FIELD_RADIUS:
        return 0.0, 0.0
    falloff = 1 - (dist / GRAVITY_FIELD_RADIUS) ** 2
    nx = dx / dist
    ny = dy / dist
    push_x = nx * GRAVITY_FIELD_STRENGTH * falloff
    push_y = ny * GRAVITY_FIELD_STRENGTH * falloff
    if dist < GRAVITY_FIELD_INNER_RADIUS:
        reverse = (GRAVITY_FIELD_INNER_RADIUS - dist) / GRAVITY_FIELD_INNER_RADIUS
        push_y *= 1 - 2 * reverse
        push_x *= 1 - reverse * 0.7
    return push_x, push_y


def apply_gravity_field(ball: Ball, p: Platform) -> None:
    cx, cy = p.center
    if ball.y >= cy + GRAVITY_FIELD_BELOW_CUTOFF:
        return
    dx = cx - ball.x
    dy = cy - ball.y
    dist = math.hypot(dx, dy)
    if dist <= 0 or dist >= GRAVITY_FIELD_RADIUS:
        return

    push_x, push_y = gravity_well_force(dx, dy, dist)
    ball.dx += push_x
    ball.dy += push_y

    speed = math.hypot(ball.dx, ball.dy)
    if speed > GRAVITY_FIELD_MAX_SPEED:
        ball.dx = ball.dx / speed * GRAVITY_FIELD_MAX_SPEED
        ball.dy = ball.dy / speed * GRAVITY_FIELD_MAX_SPEED

    if dist < GRAVITY_FIELD_CAPTURE_RADIUS:
        ball.x += dx * GRAVITY_CAPTURE_EASING
        ball.y += dy * GRAVITY_CAPTURE_EASING
        ball.dx *= GRAVITY_CAPTURE_DAMPING
        ball.dy *= GRAVITY_CAPTURE_DAMPING


def hit_hazard(ball: Ball, p: Platform) -> bool:
    """Spike contact: damage outside the invulnerability window, then rest on top.

    Returns True if the ball touched the hazard.
    """
    if not circle_rect_collision(ball.x, ball.y, ball.radius, p.x, p.y, p.width, p.height):
        return False
    if ball.invulnerable_timer <= 0:
        ball.damage(p.traits.damage)
        ball.invulnerable_timer = INVULNERABLE_TICKS
        if p.type is PlatformType.GRASSSPIKES:
            ball.poison(POISON_TICKS)
    if ball.dy >= 0:
        ball.y = p.y - ball.radius
        if p.type is PlatformType.GRASSSPIKES:
            ball.dy = -abs(JUMP_FORCE_BASE * 1.1)
            ball.can_jump = True
        else:
            ball.dy = 0.0
    return True


def land_braking(world: World, ball: Ball, p: Platform) -> None:
    """Rest on the platform and ramp horizontal speed linearly down to zero."""
    ball.dy = 0.0
    if ball.slow_timer <= 0 or ball.original_dx is None:
        ball.slow_timer = BRAKE_TICKS
        ball.original_dx = ball.dx
    progress = (BRAKE_TICKS - ball.slow_timer) / BRAKE_TICKS
    ball.dx = ball.original_dx * (1 - progress)
    ball.slow_timer -= 1
    if ball.slow_timer <= 0:
        ball.dx = 0.0
        ball.clear_brake()
    world.braked = True


def land_fragile(world: World, ball: Ball, p: Platform) -> None:
    land_braking(world, ball, p)
    p.register_contact()


def land_bouncy(world: World, ball: Ball, p: Platform) -> None:
    force = JUMP_FORCE_BASE * BOUNCY_FORCE_FACTOR
    if world.skills.jump_power.active:
        force += JUMP_FORCE_BASE * BOUNCY_POWER_BONUS
        world.skills.jump_power.consume()
    ball.dy = -abs(force)
    ball.bounce_effect_timer = BOUNCE_EFFECT_TICKS
    world.emit(GameEvent.LANDED_ON_BOUNCY)


def land_slip(world: World, ball: Ball, p: Platform) -> None:
    if p.soap:
        ball.dx *= SOAP_SPEEDUP
        ball.dy = -abs(JUMP_FORCE_BASE * 1.1)
        ball.soap_effect_timer = max(ball.soap_effect_timer, 10)
        ball.slip_effect_timer = max(ball.slip_effect_timer, 15)
        return
    slipperiness = world.rng.uniform(SLIP_MIN_FACTOR, SLIP_MAX_FACTOR)
    ball.dx *= slipperiness
    ball.dy = 0.0
    ball.slip_effect_timer = 15 if slipperiness > 0.97 else 10


def land_ice(world: World, ball: Ball, p: Platform) -> None:
    ball.dy = 0.0
    if ball.dx == 0:
        ball.dx = -ICE_KICK_SPEED if world.rng.random() < 0.5 else ICE_KICK_SPEED
    else:
        ball.dx = clamp(ball.dx * ICE_ACCELERATION, -ICE_MAX_SPEED, ICE_MAX_SPEED)
    if ball.slip_effect_timer <= 0:
        ball.slip_effect_timer = ICE_SLIP_TICKS
    ball.clear_brake()


def land_windblast(world: World, ball: Ball, p: Platform) -> None:
    if p.collected:
        land_braking(world, ball, p)
        return
    start_wind(ball)
    p.collected = True
    ball.dy = WIND_KICK


LandingHandler = Callable[["World", Ball, Platform], None]

LANDING_HANDLERS: dict[PlatformType, LandingHandler] = {
    PlatformType.STATIC: land_braking,
    PlatformType.MOVING: land_braking,
    PlatformType.FRAGILE: land_fragile,
    PlatformType.BOUNCY: land_bouncy,
    PlatformType.SLIP: land_slip,
    PlatformType.ICE: land_ice,
    PlatformType.WINDBLAST: land_windblast,
}


def resolve_platform_collisions(world: World) -> bool:
    """One pass over the live platforms. Returns True if a hazard was touched.

    Gravity platforms and hazards never stop the scan; the first landing on
    any other platform does.
    """
    ball = world.ball
    hit = False
    if ball.invulnerable_timer > 0:
        ball.invulnerable_timer -= 1

    for p in world.platforms:
        if not p.solid:
            continue

        if p.type is PlatformType.GRAVITY:
            if is_landing(ball, p):
                ball.y = p.y - ball.radius
                ball.dy = 0.0
                ball.can_jump = True
            else:
                apply_gravity_field(ball, p)
            continue

        if p.traits.hazard:
            hit = hit_hazard(ball, p) or hit
            continue

        if is_landing(ball, p):
            ball.y = p.y - ball.radius
            ball.dy = 0.0
            LANDING_HANDLERS[p.type](world, ball, p)
            ball.can_jump = True
            break
    return hit


# ----------------------------------------------------------------------
# Status effects and pickups
# ----------------------------------------------------------------------
def tick_poison(ball: Ball) -> None:
    """Damage over time, scaled by remaining hp, applied every POISON_INTERVAL ticks."""
    if not ball.poisoned:
        return
    if ball.poison_timer > 0:
        ball.poison_timer -= 1
        if ball.poison_timer % POISON_INTERVAL == 0:
            ball.damage(0.01 + 0.015 * (ball.hp / 3))
    if ball.poison_timer <= 0:
        ball.poisoned = False
        ball.poison_timer = 0


def recover_brake(ball: Ball) -> None:
    """Blend horizontal speed back toward its pre-landing value once off the platform."""
    if ball.slow_timer <= 0 or ball.original_dx is None:
        return
    ball.slow_timer -= 1
    ball.dx = lerp(ball.dx, ball.original_dx, BRAKE_RECOVERY)
    if ball.slow_timer <= 0:
        ball.dx = ball.original_dx
        ball.clear_brake()


def collect_coins(ball: Ball, coins: Sequence[Coin]) -> int:
    """Pick up touching coins with the combo multiplier. Returns points earned."""
    earned = 0
    for c in coins:
        if c.collected:
            continue
        if distance(ball.x, ball.y, c.x, c.y) < ball.radius + c.radius:
            c.collected = True
            ball.coin_combo_count += 1
            ball.coin_combo_timer = COIN_COMBO_TICKS
            earned += c.value * ball.coin_combo_count
            if c.type is CoinType.STAR:
                ball.has_rescue = True

    if ball.coin_combo_timer > 0:
        ball.coin_combo_timer -= 1
    else:
        ball.coin_combo_count = 0
    return earned


def decay_effect_timers(ball: Ball) -> None:
    if ball.bounce_effect_timer > 0:
        ball.bounce_effect_timer -= 1
    if ball.slip_effect_timer > 0:
        ball.slip_effect_timer -= 1
    if ball.soap_effect_timer > 0:
        ball.soap_effect_timer -= 1

"""Procedural platform and coin generation.

The generator produces the opening spiral layout and, during play, spawns one
platform at a time above the frontier (the most recently placed, highest
platform). Type selection is a weighted draw whose weights are shaped by the
current difficulty, per-type cooldowns and the types of recent platforms.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Sequence

from .config import (
    COOLDOWN_DECAY,
    GRASS_SPACING,
    GROUND_HEIGHT,
    INITIAL_MAX_GAP,
    INITIAL_MIN_GAP,
    INITIAL_PLATFORM_COUNT,
    INITIAL_TOP_MARGIN,
    MAX_REACHABLE_GAP,
    MAX_REACHABLE_OFFSET,
    PLACEMENT_PADDING,
    PLATFORM_HEIGHT,
    RECENT_WINDOW,
    REPEAT_WINDOW,
    SPAWN_BASE_GAP,
    SPAWN_MAX_GAP,
    SPIRAL_BASE_RADIUS,
    SPIRAL_RADIUS_STEP,
    START_PLATFORM_HEIGHT,
    START_PLATFORM_LIFT,
    START_PLATFORM_WIDTH,
    SUPPRESSED_WEIGHT,
    TARGET_PLATFORM_COUNT,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from .entities import CATALOG, Coin, CoinType, Platform, PlatformType, is_hazard
from .utils import clamp, rects_overlap

logger = logging.getLogger(__name__)

# Order matters: cumulative sampling walks the table in this order.
SPAWN_ORDER: tuple[PlatformType, ...] = (
    PlatformType.SPIKES,
    PlatformType.GRASSSPIKES,
    PlatformType.FRAGILE,
    PlatformType.BOUNCY,
    PlatformType.MOVING,
    PlatformType.SLIP,
    PlatformType.ICE,
    PlatformType.GRAVITY,
    PlatformType.WINDBLAST,
    PlatformType.STATIC,
)

# Cumulative thresholds for the opening layout: (upper bound, type, soap, min step index).
_UPPER_TABLE = (
    (0.12, PlatformType.BOUNCY, False, 0),
    (0.22, PlatformType.MOVING, False, 0),
    (0.30, PlatformType.FRAGILE, False, 0),
    (0.40, PlatformType.ICE, False, 0),
    (0.48, PlatformType.SLIP, True, 0),
    (0.55, PlatformType.SLIP, False, 0),
    (0.62, PlatformType.GRAVITY, False, 0),
    (0.70, PlatformType.WINDBLAST, False, 0),
)
_LOWER_TABLE = (
    (0.10, PlatformType.BOUNCY, False, 0),
    (0.18, PlatformType.MOVING, False, 0),
    (0.26, PlatformType.FRAGILE, False, 0),
    (0.34, PlatformType.ICE, False, 0),
    (0.42, PlatformType.SLIP, True, 0),
    (0.50, PlatformType.SLIP, False, 0),
    (0.58, PlatformType.GRAVITY, False, 0),
    (0.65, PlatformType.WINDBLAST, False, 0),
    (0.68, PlatformType.SPIKES, False, 2),
    (0.75, PlatformType.GRASSSPIKES, False, 2),
)


def difficulty_for_score(score: float) -> float:
    """Saturating difficulty curve in [0, 1]."""
    return min(1.0, math.pow(max(0.0, score) / 1000.0, 1.3))


def raw_spawn_weights(difficulty: float) -> dict[PlatformType, float]:
    d = difficulty
    spike_chance = 0.08 + math.sin(d * math.pi / 2.0) * 0.17
    return {
        PlatformType.SPIKES: spike_chance * (1 - d * 0.3),
        PlatformType.GRASSSPIKES: (0.05 + d * 0.08) * (1 - d * 0.2),
        PlatformType.FRAGILE: 0.13 + d * 0.1,
        PlatformType.BOUNCY: 0.13 + d * 0.1,
        PlatformType.MOVING: 0.13 + d * 0.1,
        PlatformType.SLIP: 0.1 + d * 0.05,
        PlatformType.ICE: 0.08 + d * 0.04,
        PlatformType.GRAVITY: 0.07 + d * 0.05,
        PlatformType.WINDBLAST: 0.09 + d * 0.04,
        PlatformType.STATIC: max(0.1, 0.4 - d * 0.3),
    }


class PlatformGenerator:
    """Owns the random source and per-type cooldowns of one level."""

    def __init__(
        self,
        seed: int | None = None,
        *,
        width: float = WINDOW_WIDTH,
        height: float = WINDOW_HEIGHT,
        target_count: int = TARGET_PLATFORM_COUNT,
    ) -> None:
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.width = width
        self.height = height
        self.target_count = target_count
        self.rng = random.Random(seed)
        self.cooldowns: dict[PlatformType, float] = {}
        self.reset()

    def reset(self, seed: int | None = None) -> None:
        """Restart the random stream (same seed unless one is given) and clear cooldowns."""
        if seed is not None:
            self.seed = seed
        self.rng.seed(self.seed)
        self.cooldowns = {t: 0.0 for t in PlatformType if t is not PlatformType.STATIC}

    # ------------------------------------------------------------------
    # Opening layout
    # ------------------------------------------------------------------
    def initial_layout(self) -> tuple[list[Platform], list[Coin], Platform]:
        """Build the spiral opening layout.

        Returns (platforms, coins, start_platform). Candidates overlapping an
        earlier placement are dropped without retry, so fewer than
        ``INITIAL_PLATFORM_COUNT`` spiral platforms may be produced.
        """
        rng = self.rng
        platforms: list[Platform] = []
        coins: list[Coin] = []

        ground = Platform(0, self.height - GROUND_HEIGHT, self.width, GROUND_HEIGHT, PlatformType.SPIKES)
        platforms.append(ground)

        start_x = (self.width - START_PLATFORM_WIDTH) / 2.0
        start_y = self.height - GROUND_HEIGHT - START_PLATFORM_LIFT
        start = Platform(start_x, start_y, START_PLATFORM_WIDTH, START_PLATFORM_HEIGHT, PlatformType.STATIC)
        platforms.append(start)

        used_rects = [start.rect]
        last_y = start_y
        center_x = self.width / 2.0
        skipped = 0

        for i in range(INITIAL_PLATFORM_COUNT):
            last_y -= min(INITIAL_MIN_GAP + rng.randrange(INITIAL_MAX_GAP - INITIAL_MIN_GAP), MAX_REACHABLE_GAP)
            if last_y < INITIAL_TOP_MARGIN:
                break

            width = 80 + rng.randrange(60)
            radius = SPIRAL_BASE_RADIUS + i * SPIRAL_RADIUS_STEP
            angle = i * (0.4 + rng.random() * 0.2)
            x = center_x + math.cos(angle) * radius - width / 2.0
            x = clamp(x, 0, self.width - width)

            candidate = (x, last_y, float(width), float(PLATFORM_HEIGHT))
            if any(rects_overlap(r, candidate, PLACEMENT_PADDING) for r in used_rects):
                skipped += 1
                continue

            ptype, soap = self._layout_type(last_y, i)
            platform = Platform(x, last_y, width, PLATFORM_HEIGHT, ptype, soap=soap)
            platforms.append(platform)
            used_rects.append(candidate)

            if not is_hazard(ptype):
                coins.extend(self._layout_coins(platform))

        logger.debug(
            "Initial layout: %d platforms, %d coins, %d candidates skipped (seed=%s)",
            len(platforms),
            len(coins),
            skipped,
            self.seed,
        )
        return platforms, coins, start

    def _layout_type(self, y: float, index: int) -> tuple[PlatformType, bool]:
        roll = self.rng.random()
        table = _UPPER_TABLE if y < self.height / 2.0 else _LOWER_TABLE
        for bound, ptype, soap, min_index in table:
            if roll < bound and index >= min_index:
                return ptype, soap
        return PlatformType.STATIC, False

    def _layout_coins(self, platform: Platform) -> list[Coin]:
        rng = self.rng
        coins: list[Coin] = []
        coin_chance = min(0.5, platform.width / 140.0)
        count = 2 if rng.random() < coin_chance else 1
        for c in range(count):
            coin_x = platform.x + 20 + (c * (platform.width - 40)) / max(1, count - 1)
            coin_y = platform.y - 15
            coin_type = CoinType.GOLD if rng.random() < 0.12 else CoinType.NORMAL
            coins.append(Coin(math.floor(coin_x), math.floor(coin_y), coin_type))

        # Bonus star on rare high platforms
        if platform.y < self.height / 3.0 and rng.random() < 0.1:
            coins.append(Coin(platform.x + platform.width / 2.0, platform.y - 25, CoinType.STAR))
        return coins

    # ------------------------------------------------------------------
    # Incremental spawning
    # ------------------------------------------------------------------
    def decay_cooldowns(self) -> None:
        for ptype in self.cooldowns:
            self.cooldowns[ptype] = max(0.0, self.cooldowns[ptype] - COOLDOWN_DECAY)

    def spawn_weights(self, recent: Sequence[Platform], difficulty: float) -> dict[PlatformType, float]:
        """Normalized spawn probabilities after cooldown and recency suppression."""
        weights = raw_spawn_weights(difficulty)
        counts: dict[PlatformType, int] = {}
        for p in recent[-RECENT_WINDOW:]:
            counts[p.type] = counts.get(p.type, 0) + 1
        max_spikes = 2 + math.floor(difficulty * 3)

        for ptype in weights:
            cap = max_spikes if ptype is PlatformType.SPIKES else CATALOG[ptype].recent_cap
            over_cap = cap is not None and counts.get(ptype, 0) >= cap
            if over_cap or self.cooldowns.get(ptype, 0.0) > 0:
                weights[ptype] *= SUPPRESSED_WEIGHT

        total = sum(weights.values())
        if total <= 0:
            return {ptype: (1.0 if ptype is PlatformType.STATIC else 0.0) for ptype in weights}
        return {ptype: w / total for ptype, w in weights.items()}

    def choose_type(self, platforms: Sequence[Platform], difficulty: float) -> PlatformType:
        """Draw the next platform type and apply the safety overrides.

        Decays cooldowns, samples, applies the no-repeat and
        static-above-hazard rules, then sets the chosen type's cooldown.
        """
        self.decay_cooldowns()
        probabilities = self.spawn_weights(platforms, difficulty)
        frontier = platforms[-1] if platforms else None
        last_grass = next((p for p in reversed(platforms) if p.type is PlatformType.GRASSSPIKES), None)
        grass_too_close = (
            frontier is not None and last_grass is not None and abs(frontier.y - last_grass.y) < GRASS_SPACING
        )

        chosen = PlatformType.STATIC
        roll = self.rng.random()
        acc = 0.0
        for ptype in SPAWN_ORDER:
            if ptype is PlatformType.GRASSSPIKES and grass_too_close:
                continue
            acc += probabilities[ptype]
            if roll < acc:
                chosen = ptype
                break

        spiky = {PlatformType.SPIKES, PlatformType.GRASSSPIKES}
        last_types = {p.type for p in platforms[-REPEAT_WINDOW:]}
        if chosen in spiky and last_types & spiky:
            chosen = PlatformType.STATIC
        if frontier is not None and is_hazard(frontier.type):
            chosen = PlatformType.STATIC

        if chosen is not PlatformType.STATIC:
            self.cooldowns[chosen] = CATALOG[chosen].cooldown
        return chosen

    def spawn_above(self, platforms: list[Platform], coins: list[Coin], score: float) -> Platform:
        """Append one platform (and its coins) above the frontier and return it."""
        rng = self.rng
        difficulty = difficulty_for_score(score)
        ptype = self.choose_type(platforms, difficulty)

        frontier = platforms[-1] if platforms else None
        frontier_y = frontier.y if frontier is not None else float(self.height)
        gap = SPAWN_BASE_GAP + difficulty * (SPAWN_MAX_GAP - SPAWN_BASE_GAP)
        y = frontier_y - min(gap, MAX_REACHABLE_GAP)

        min_width = 50 + (1 - difficulty) * 30
        max_width = 90 + (1 - difficulty) * 50
        width = min_width + rng.random() * max(0.0, max_width - min_width)
        lo, hi = self.reachable_span(frontier, width)
        x = lo + rng.random() * (hi - lo)

        platform = Platform(x, y, width, PLATFORM_HEIGHT, ptype)
        platforms.append(platform)

        if not is_hazard(ptype):
            count = 3 if rng.random() < 0.2 else 1
            for i in range(count):
                base_x = x + (width / (count + 1)) * (i + 1)
                jitter = (rng.random() - 0.5) * 15
                coin_type = CoinType.GOLD if rng.random() < 0.1 else CoinType.NORMAL
                coins.append(Coin(base_x + jitter, y - 15, coin_type))

        logger.debug("Spawned %r at difficulty %.2f", platform, difficulty)
        return platform

    def reachable_span(self, frontier: Platform | None, width: float) -> tuple[float, float]:
        """Range of left edges for a new platform of ``width`` a jump off ``frontier`` can reach."""
        full = (0.0, max(0.0, self.width - width))
        if frontier is None:
            return full
        lo = max(full[0], frontier.x - MAX_REACHABLE_OFFSET - width)
        hi = min(full[1], frontier.x + frontier.width + MAX_REACHABLE_OFFSET)
        if lo > hi:
            return full
        return lo, hi

    def replenish(self, platforms: list[Platform], coins: list[Coin], score: float) -> int:
        """Top the live platform list up to the target count. Returns how many were spawned."""
        spawned = 0
        while len(platforms) < self.target_count:
            self.spawn_above(platforms, coins, score)
            spawned += 1
        return spawned

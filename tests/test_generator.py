import os
import random

os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from skyward.config import (
    GROUND_HEIGHT,
    MAX_REACHABLE_GAP,
    MAX_REACHABLE_OFFSET,
    START_PLATFORM_LIFT,
    TARGET_PLATFORM_COUNT,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from skyward.entities import CATALOG, Platform, PlatformType, is_hazard
from skyward.generator import (
    PlatformGenerator,
    difficulty_for_score,
    raw_spawn_weights,
)
from skyward.utils import rects_overlap


def test_difficulty_curve_saturates() -> None:
    assert difficulty_for_score(0) == 0.0
    assert 0.0 < difficulty_for_score(500) < 1.0
    assert difficulty_for_score(1000) == 1.0
    assert difficulty_for_score(50000) == 1.0


def test_raw_weights_shift_with_difficulty() -> None:
    easy = raw_spawn_weights(0.0)
    hard = raw_spawn_weights(1.0)
    assert easy[PlatformType.STATIC] > hard[PlatformType.STATIC]
    assert hard[PlatformType.STATIC] >= 0.1
    assert hard[PlatformType.BOUNCY] > easy[PlatformType.BOUNCY]


def test_initial_layout_structure() -> None:
    gen = PlatformGenerator(seed=7)
    platforms, coins, start = gen.initial_layout()
    ground = platforms[0]
    assert ground.type is PlatformType.SPIKES
    assert ground.y == WINDOW_HEIGHT - GROUND_HEIGHT
    assert ground.width == WINDOW_WIDTH
    assert platforms[1] is start
    assert start.type is PlatformType.STATIC
    assert start.y == WINDOW_HEIGHT - GROUND_HEIGHT - START_PLATFORM_LIFT

    spiral = platforms[2:]
    assert spiral
    for i, a in enumerate(spiral):
        assert 0 <= a.x <= WINDOW_WIDTH - a.width
        for b in spiral[i + 1:]:
            assert not rects_overlap(a.rect, b.rect)
    # each spiral platform sits above the previous one
    ys = [p.y for p in spiral]
    assert ys == sorted(ys, reverse=True)
    assert coins


def test_initial_layout_is_deterministic_per_seed() -> None:
    a, _, _ = PlatformGenerator(seed=11).initial_layout()
    b, _, _ = PlatformGenerator(seed=11).initial_layout()
    assert [(p.x, p.y, p.type) for p in a] == [(p.x, p.y, p.type) for p in b]


def test_hazards_get_no_coins() -> None:
    gen = PlatformGenerator(seed=3)
    platforms: list[Platform] = [Platform(100, 300, 80, 10, PlatformType.STATIC)]
    coins = []
    for _ in range(200):
        before = len(coins)
        p = gen.spawn_above(platforms, coins, score=2000)
        if is_hazard(p.type):
            assert len(coins) == before


def test_spawn_always_above_frontier() -> None:
    gen = PlatformGenerator(seed=5)
    platforms: list[Platform] = []
    coins = []
    first = gen.spawn_above(platforms, coins, score=0)
    assert first.y < WINDOW_HEIGHT
    for _ in range(50):
        frontier = platforms[-1].y
        p = gen.spawn_above(platforms, coins, score=300)
        assert p.y < frontier
        assert 0 <= p.x <= WINDOW_WIDTH - p.width


def test_no_spike_after_recent_spike() -> None:
    gen = PlatformGenerator(seed=9)
    for _ in range(300):
        # spike is two back, so only the repeat rule can keep hazards out
        platforms = [
            Platform(0, 400, 80, 10, PlatformType.SPIKES),
            Platform(0, 300, 80, 10, PlatformType.STATIC),
            Platform(0, 200, 80, 10, PlatformType.BOUNCY),
        ]
        chosen = gen.choose_type(platforms, difficulty=1.0)
        assert chosen not in (PlatformType.SPIKES, PlatformType.GRASSSPIKES)

    for _ in range(300):
        platforms = [
            Platform(0, 400, 80, 10, PlatformType.STATIC),
            Platform(0, 300, 80, 10, PlatformType.MOVING),
            Platform(0, 200, 80, 10, PlatformType.SPIKES),
        ]
        chosen = gen.choose_type(platforms, difficulty=1.0)
        assert chosen not in (PlatformType.SPIKES, PlatformType.GRASSSPIKES)


def test_static_above_hazard_frontier() -> None:
    gen = PlatformGenerator(seed=21)
    for _ in range(100):
        platforms = [
            Platform(0, 300, 80, 10, PlatformType.STATIC),
            Platform(0, 200, 80, 10, PlatformType.GRASSSPIKES),
        ]
        assert gen.choose_type(platforms, difficulty=0.5) is PlatformType.STATIC


def test_cooldown_set_and_decays() -> None:
    gen = PlatformGenerator(seed=1)
    random.seed(1)
    chosen = PlatformType.STATIC
    platforms = [Platform(0, 300, 80, 10, PlatformType.STATIC)]
    while chosen is PlatformType.STATIC:
        chosen = gen.choose_type(platforms, difficulty=0.3)
    assert gen.cooldowns[chosen] == CATALOG[chosen].cooldown
    gen.decay_cooldowns()
    assert gen.cooldowns[chosen] == CATALOG[chosen].cooldown - 0.5
    assert PlatformType.STATIC not in gen.cooldowns


def test_spawn_weights_normalized_and_suppressed() -> None:
    gen = PlatformGenerator(seed=2)
    recent = [Platform(0, 500 - 50 * i, 80, 10, PlatformType.ICE) for i in range(3)]
    weights = gen.spawn_weights(recent, 0.0)
    assert abs(sum(weights.values()) - 1.0) < 1e-9

    gen.cooldowns[PlatformType.BOUNCY] = 5.0
    suppressed = gen.spawn_weights(recent, 0.0)
    baseline = PlatformGenerator(seed=2).spawn_weights(recent, 0.0)
    assert suppressed[PlatformType.BOUNCY] < baseline[PlatformType.BOUNCY]
    # three ice platforms exceed the cap of two
    fresh = PlatformGenerator(seed=2).spawn_weights([], 0.0)
    assert baseline[PlatformType.ICE] < fresh[PlatformType.ICE]


def test_grassspikes_spacing() -> None:
    gen = PlatformGenerator(seed=4)
    for _ in range(200):
        platforms = [
            Platform(0, 300, 80, 10, PlatformType.GRASSSPIKES),
            Platform(0, 200, 80, 10, PlatformType.STATIC),
            Platform(0, 100, 80, 10, PlatformType.STATIC),
            Platform(0, 50, 80, 10, PlatformType.MOVING),
        ]
        assert gen.choose_type(platforms, difficulty=1.0) is not PlatformType.GRASSSPIKES


def test_replenish_is_idempotent_at_target() -> None:
    gen = PlatformGenerator(seed=12)
    platforms, coins, _ = gen.initial_layout()
    gen.replenish(platforms, coins, score=0)
    assert len(platforms) >= TARGET_PLATFORM_COUNT
    snapshot = [(p.x, p.y) for p in platforms]
    assert gen.replenish(platforms, coins, score=0) == 0
    assert [(p.x, p.y) for p in platforms] == snapshot


def test_reset_restarts_random_stream() -> None:
    gen = PlatformGenerator(seed=33)
    first, _, _ = gen.initial_layout()
    gen.reset()
    second, _, _ = gen.initial_layout()
    assert [(p.x, p.y) for p in first] == [(p.x, p.y) for p in second]


def test_spawn_gap_and_offset_stay_within_jump_reach() -> None:
    gen = PlatformGenerator(seed=21)
    platforms = [Platform(10, 500, 60, 10)]
    coins = []
    for _ in range(60):
        frontier = platforms[-1]
        p = gen.spawn_above(platforms, coins, score=5000)
        assert frontier.y - p.y <= MAX_REACHABLE_GAP
        assert p.x + p.width >= frontier.x - MAX_REACHABLE_OFFSET
        assert p.x <= frontier.x + frontier.width + MAX_REACHABLE_OFFSET
        assert 0 <= p.x <= WINDOW_WIDTH - p.width


def test_reachable_span_without_frontier_covers_screen() -> None:
    gen = PlatformGenerator(seed=3)
    assert gen.reachable_span(None, 100) == (0.0, WINDOW_WIDTH - 100)
    lo, hi = gen.reachable_span(Platform(300, 200, 100, 10), 80)
    assert lo == 300 - MAX_REACHABLE_OFFSET - 80
    assert hi == WINDOW_WIDTH - 80


def test_initial_layout_gaps_within_jump_reach() -> None:
    for seed in range(10):
        platforms, _, start = PlatformGenerator(seed=seed).initial_layout()
        first = platforms[2]
        assert 0 < start.y - first.y <= MAX_REACHABLE_GAP

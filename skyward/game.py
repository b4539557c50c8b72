"""Window, input mapping and rendering for Skyward.

The simulation lives in :class:`skyward.world.World`; this module only turns
key state into :class:`InputState`, ticks the world once per frame and draws
the snapshot it hands back.
"""

from __future__ import annotations

import argparse
import logging
import math
import random
import time

import numpy as np
import pygame

from .config import (
    COL_BALL,
    COL_BALL_RIM,
    COL_BG,
    COL_COIN,
    COL_COIN_GOLD,
    COL_COIN_STAR,
    COL_HUD,
    DEFAULT_SEED,
    FPS,
    HP_MAX,
    PLATFORM_COLORS,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from .entities import CoinType, PlatformType
from .utils import procedural_noise_surface, scale_color, starfield
from .world import InputState, PlatformView, Snapshot, World

logger = logging.getLogger(__name__)

LEFT_KEYS = (pygame.K_LEFT, pygame.K_a)
RIGHT_KEYS = (pygame.K_RIGHT, pygame.K_d)
JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP, pygame.K_w)
POWER_KEYS = (pygame.K_LSHIFT, pygame.K_RSHIFT)

COIN_COLORS = {
    CoinType.NORMAL: COL_COIN,
    CoinType.GOLD: COL_COIN_GOLD,
    CoinType.STAR: COL_COIN_STAR,
}


class Game:
    """Top-level controller: owns the window and clock, feeds input to the world, draws it."""

    def __init__(self, seed: int | None = DEFAULT_SEED) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT), pygame.DOUBLEBUF)
        pygame.display.set_caption("Skyward")
        self.clock = pygame.time.Clock()
        self.font_big = pygame.font.SysFont(None, 56)
        self.font_small = pygame.font.SysFont(None, 24)

        self.world = World(seed, clock=self.now_ms)
        self.inputs = InputState()
        self.best = 0
        self.running = True

        self.fog = self._generate_fog_surface()
        self.stars = starfield(WINDOW_WIDTH, WINDOW_HEIGHT, 80, np.random.default_rng(self.world.seed))

    @staticmethod
    def now_ms() -> float:
        return time.monotonic() * 1000.0

    def _generate_fog_surface(self) -> pygame.Surface:
        """Soft layered haze, built as an array and blitted once per frame."""

        def haze(X: np.ndarray, Y: np.ndarray) -> np.ndarray:
            v = np.sin(X * 9.0 + np.sin(Y * 5.0)) * 0.5
            v += np.sin(Y * 13.0 + np.sin(X * 4.0 + 1.3)) * 0.3
            v = np.abs(v)
            # Denser toward the bottom of the screen
            return np.clip(v * 0.25 + Y * 0.15, 0.0, 1.0)

        pixels = procedural_noise_surface(WINDOW_WIDTH, WINDOW_HEIGHT, haze)
        surf = pygame.surfarray.make_surface(pixels)
        surf.set_colorkey((0, 0, 0))
        surf.set_alpha(40)
        return surf

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------
    def reset(self, seed: int | None = None) -> None:
        self.best = max(self.best, self.world.session.score)
        self.world.start_game(seed=seed)
        self.inputs = InputState()

    def new_level(self) -> None:
        self.reset(seed=random.randrange(0, 2**32 - 1))

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def handle_input(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in JUMP_KEYS:
                self.inputs.jump_pressed = True
            elif event.key in POWER_KEYS:
                self.inputs.activate_power_up = True
            elif event.key == pygame.K_r:
                self.reset()
            elif event.key == pygame.K_n:
                self.new_level()
            elif event.key == pygame.K_ESCAPE:
                pygame.event.post(pygame.event.Event(pygame.QUIT))
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            x, y = event.pos
            if self.world.break_platform_at(x, y):
                logger.debug("Fragile platform broken by click at (%d, %d)", x, y)

    def read_held_keys(self) -> None:
        pressed = pygame.key.get_pressed()
        self.inputs.move_left = any(pressed[k] for k in LEFT_KEYS)
        self.inputs.move_right = any(pressed[k] for k in RIGHT_KEYS)
        self.inputs.jump_held = any(pressed[k] for k in JUMP_KEYS)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def update(self, now_ms: float | None = None) -> None:
        was_over = self.world.game_over
        events = self.world.tick(self.inputs, now_ms)
        for event in events:
            logger.debug("Event: %s", event.value)
        if self.world.game_over and not was_over:
            self.best = max(self.best, self.world.session.score)
        # Edge-triggered intents last a single tick
        self.inputs.jump_pressed = False
        self.inputs.activate_power_up = False

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def draw_background(self, surf: pygame.Surface, snap: Snapshot) -> None:
        surf.fill(COL_BG)
        # Stars drift slowly with the climb
        drift = snap.max_height * 0.2
        for x, y, radius, alpha in self.stars:
            sy = (y + drift) % WINDOW_HEIGHT
            shade = int(255 * alpha)
            pygame.draw.circle(surf, (shade, shade, shade), (int(x), int(sy)), max(1, int(radius)))
        surf.blit(self.fog, (0, 0))

    def draw_platform(self, surf: pygame.Surface, p: PlatformView) -> None:
        if p.opacity <= 0:
            return
        color = PLATFORM_COLORS[p.type.value]
        if p.soap:
            color = scale_color(color, 1.15)
        if p.type is PlatformType.WINDBLAST and p.collected:
            color = scale_color(color, 0.6)
        color = scale_color(color, p.opacity)
        rect = pygame.Rect(int(p.x), int(p.y), max(1, int(p.width)), max(1, int(p.height)))

        if p.type in (PlatformType.SPIKES, PlatformType.GRASSSPIKES):
            pygame.draw.rect(surf, scale_color(color, 0.7), rect)
            tooth = 10
            for tx in range(rect.left, rect.right - tooth + 1, tooth):
                points = [(tx, rect.top), (tx + tooth // 2, rect.top - 8), (tx + tooth, rect.top)]
                pygame.draw.polygon(surf, color, points)
            return

        pygame.draw.rect(surf, color, rect, border_radius=3)
        if p.type is PlatformType.GRAVITY:
            cx, cy = rect.center
            pygame.draw.circle(surf, scale_color(color, 0.6), (cx, cy), 30, 1)
        elif p.type is PlatformType.FRAGILE and p.broken:
            pygame.draw.line(surf, COL_BG, rect.midtop, rect.midbottom, 2)

    def draw_ball(self, surf: pygame.Surface, snap: Snapshot) -> None:
        b = snap.ball
        color = COL_BALL
        if b.poisoned:
            color = (120, 170, 60)
        if b.invulnerable and int(time.monotonic() * 10) % 2 == 0:
            color = scale_color(color, 1.4)
        radius = b.radius
        if b.bounce_effect_timer > 0:
            radius *= 1.0 + 0.03 * b.bounce_effect_timer
        center = (int(b.x), int(b.y))
        pygame.draw.circle(surf, color, center, int(radius))
        pygame.draw.circle(surf, COL_BALL_RIM, center, int(radius), 2)
        if b.is_floating:
            pygame.draw.circle(surf, (200, 230, 255), center, int(radius) + 5, 1)
        if b.has_rescue:
            pygame.draw.circle(surf, COL_COIN_STAR, center, int(radius) + 9, 1)

    def draw_hud(self, surf: pygame.Surface, snap: Snapshot) -> None:
        score = self.font_small.render(f"Score: {snap.score}", True, COL_HUD)
        height = self.font_small.render(f"Height: {math.floor(snap.max_height / 10)} ft", True, COL_HUD)
        surf.blit(score, (10, 10))
        surf.blit(height, (10, 32))

        # HP bar
        bar = pygame.Rect(WINDOW_WIDTH - 110, 12, 100, 10)
        pygame.draw.rect(surf, (60, 60, 60), bar)
        fill = bar.copy()
        fill.width = int(bar.width * snap.hp / HP_MAX)
        pygame.draw.rect(surf, (220, 60, 60), fill)

        status = []
        if snap.speed_boost:
            status.append("SPEED")
        if snap.gravity_resistance:
            status.append("LIGHT")
        if snap.jump_power_active:
            status.append("JUMP+")
        elif snap.jump_power_cooldown_ms > 0:
            status.append(f"jump {snap.jump_power_cooldown_ms / 1000:.1f}s")
        if status:
            text = self.font_small.render("  ".join(status), True, COL_HUD)
            surf.blit(text, (WINDOW_WIDTH - text.get_width() - 10, 28))

    def draw(self) -> None:
        snap = self.world.snapshot()
        surf = self.screen
        self.draw_background(surf, snap)
        for p in snap.platforms:
            self.draw_platform(surf, p)
        for c in snap.coins:
            pygame.draw.circle(surf, COIN_COLORS[c.type], (int(c.x), int(c.y)), int(c.radius))
        self.draw_ball(surf, snap)
        self.draw_hud(surf, snap)

        if snap.game_over:
            shade = pygame.Surface((WINDOW_WIDTH, WINDOW_HEIGHT), pygame.SRCALPHA)
            shade.fill((0, 0, 0, 150))
            surf.blit(shade, (0, 0))
            title = self.font_big.render("Game Over", True, (250, 230, 230))
            retry = self.font_small.render("R to retry, N for a new level", True, (210, 210, 220))
            best = self.font_small.render(f"Best: {max(self.best, snap.score)}", True, (200, 200, 210))
            surf.blit(title, title.get_rect(center=(WINDOW_WIDTH // 2, WINDOW_HEIGHT // 2 - 40)))
            surf.blit(retry, retry.get_rect(center=(WINDOW_WIDTH // 2, WINDOW_HEIGHT // 2 + 10)))
            surf.blit(best, best.get_rect(center=(WINDOW_WIDTH // 2, WINDOW_HEIGHT // 2 + 40)))

        pygame.display.flip()

    def run(self) -> None:
        while self.running:
            self.clock.tick(FPS)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    break
                self.handle_input(event)
            if not self.running:
                break
            self.read_held_keys()
            self.update()
            self.draw()
        pygame.quit()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="skyward", description="Climb the procedurally generated sky.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="level seed (random if omitted)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    Game(seed=args.seed).run()

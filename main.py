#!/usr/bin/env python3
"""
2D Side-scrolling Truck over Procedurally Generated Terrain (Pygame + Pymunk)

Features
- Ground generated once per seed: rolling hills, cliffs and fissures.
- Smoothed outline drawn to a world-sized surface, camera follows the truck.
- Concave ground polygon decomposed into a kinematic pymunk body.
- Deterministic world via a visible seed.

Dependencies
- Python 3.8+
- pygame (pip install pygame)
- pymunk (pip install pymunk)

Controls
- Left/Right: spin the wheels
- Space: bounce (re-armed when a wheel touches the ground)
- R: new terrain with a new seed
- F1: show/hide the raw terrain polygon
- Esc: quit
"""
import logging
import random
import sys
from typing import Optional, Tuple

import pygame
import pymunk

from terrain import TerrainConfig, TerrainController
from terrain_render import render_terrain
from terrain_physics import PIXELS_PER_UNIT, TERRAIN_COLLISION_TYPE, TerrainBodyError
from vehicle import WHEEL_COLLISION_TYPE, Vehicle

LOGGER = logging.getLogger(__name__)

# ----------------------------- Config ---------------------------------
WIDTH, HEIGHT = 800, 500
FPS = 60
WORLD_W = WIDTH * 10

GRAVITY = 600.0             # px/s^2
BOUNCE_VELOCITY = 850.0     # px/s
DIST_BELOW_TRUCK = 24
WHEEL_OFFSETS = ((55, DIST_BELOW_TRUCK), (-52, DIST_BELOW_TRUCK))

SKY_COLOR_TOP = (220, 225, 235)
SKY_COLOR_BOTTOM = (238, 238, 238)
HUD_COLOR = (15, 15, 20)


def lerp(a, b, t):
    return a + (b - a) * t


# ----------------------------- Game -----------------------------------
class Game:
    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = random.randint(1, 1_000_000_000)
        self.seed = seed
        pygame.init()
        pygame.display.set_caption("Terrain Truck")
        self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("consolas", 16)

        self.show_debug = False
        self.reset_world(self.seed)

    def reset_world(self, seed: int):
        self.seed = seed
        self.space = pymunk.Space()
        self.space.gravity = (0, GRAVITY / PIXELS_PER_UNIT)

        self.truck = Vehicle(self.space, WIDTH * 0.25, HEIGHT * 0.4)
        for offset in WHEEL_OFFSETS:
            self.truck.add_wheel(offset)
        self.allow_bounce = True

        self.build_terrain()

        handler = self.space.add_collision_handler(WHEEL_COLLISION_TYPE, TERRAIN_COLLISION_TYPE)
        handler.begin = self._on_wheel_contact

        self.cam_x, self.cam_y = self.truck.position
        LOGGER.info("world ready, seed=%s", self.seed)

    def build_terrain(self):
        config = TerrainConfig(debug=self.show_debug)
        while True:
            self.terrain = TerrainController(WORLD_W, 50, WORLD_W - 50, 100, HEIGHT - 50,
                                             config=config, rng=self.seed)
            try:
                self.ground = self.terrain.add_to_world(self.space)
                break
            except TerrainBodyError as e:
                LOGGER.warning("seed %s rejected: %s", self.seed, e)
                self.seed = random.randint(1, 1_000_000_000)
        self.redraw_outline()

    def redraw_outline(self):
        self.outline = render_terrain(self.terrain.vertices, WORLD_W, HEIGHT + 1,
                                      debug=self.show_debug)

    def _on_wheel_contact(self, arbiter, space, data) -> bool:
        self.allow_bounce = True
        return True

    # --------------------------- Update --------------------------------
    def update(self, dt: float) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                if event.key == pygame.K_F1:
                    self.show_debug = not self.show_debug
                    self.redraw_outline()
                if event.key == pygame.K_r:
                    self.reset_world(random.randint(1, 1_000_000_000))
                if event.key == pygame.K_SPACE and self.allow_bounce:
                    self.truck.jump(BOUNCE_VELOCITY)
                    self.allow_bounce = False

        self.truck.update(pygame.key.get_pressed())
        self.space.step(dt)

        # camera follow
        tx, ty = self.truck.position
        self.cam_x = lerp(self.cam_x, tx, 0.12)
        self.cam_y = lerp(self.cam_y, ty, 0.08)
        return True

    # --------------------------- Render --------------------------------
    def _world_to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(x - self.cam_x + WIDTH // 2), int(y - self.cam_y + HEIGHT // 2)

    def draw_background(self):
        # vertical gradient sky
        top = pygame.Color(*SKY_COLOR_TOP)
        bottom = pygame.Color(*SKY_COLOR_BOTTOM)
        for y in range(HEIGHT):
            c = top.lerp(bottom, y / (HEIGHT - 1))
            pygame.draw.line(self.screen, c, (0, y), (WIDTH, y))

    def draw_ground(self):
        self.screen.blit(self.outline, self._world_to_screen(0, 0))

    def draw_hud(self):
        x, _ = self.truck.position
        hud = f"Seed: {self.terrain.rng.seed}   X: {int(x)}   Bounce: {'ready' if self.allow_bounce else '-'}"
        self.screen.blit(self.font.render(hud, True, HUD_COLOR), (10, 10))
        if self.show_debug:
            txt = f"vertices={len(self.terrain.vertices)} shapes={len(self.ground.shapes)}"
            self.screen.blit(self.font.render(txt, True, HUD_COLOR), (10, 30))

    def render(self):
        self.draw_background()
        self.draw_ground()
        self.truck.draw(self.screen, self._world_to_screen)
        self.draw_hud()

    def run(self):
        running = True
        while running:
            dt = self.clock.tick(FPS) / 1000.0
            running = self.update(min(dt, 1.0 / 20.0))
            self.render()
            pygame.display.flip()
        pygame.quit()


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    seed = None
    if len(sys.argv) >= 2:
        try:
            seed = int(sys.argv[1])
        except ValueError:
            LOGGER.warning("ignoring non-integer seed %r", sys.argv[1])
    Game(seed).run()


if __name__ == "__main__":
    main()

"""Wheeled vehicle used to drive over the generated terrain."""
import logging
from typing import List, Tuple

import pygame
import pymunk

from terrain_physics import PIXELS_PER_UNIT, to_pixels

LOGGER = logging.getLogger(__name__)

# ----------------------------- Config ---------------------------------
FRAME_W, FRAME_H = 130, 40      # px
FRAME_MASS = 4.0
WHEEL_RADIUS = 18               # px
WHEEL_MASS = 1.0
WHEEL_FRICTION = 3.0
MAX_WHEEL_FORCE = 1000.0
ROTATION_SPEED = 12.0           # rad/s
WHEEL_COLLISION_TYPE = 2

FRAME_COLOR = (70, 110, 170)
WHEEL_COLOR = (30, 30, 35)
SPOKE_COLOR = (200, 200, 210)


class Vehicle:
    """
    Frame body with wheels pinned to it and driven by motors.

    Positions and offsets are given in pixels; everything inside the
    pymunk space is in physics units.
    """

    def __init__(self, space: pymunk.Space, x: float, y: float):
        self.space = space
        w = FRAME_W / PIXELS_PER_UNIT
        h = FRAME_H / PIXELS_PER_UNIT
        self.frame = pymunk.Body(FRAME_MASS, pymunk.moment_for_box(FRAME_MASS, (w, h)))
        self.frame.position = (x / PIXELS_PER_UNIT, y / PIXELS_PER_UNIT)
        self.frame_shape = pymunk.Poly.create_box(self.frame, (w, h))
        self.frame_shape.friction = 0.5
        self.frame_shape.filter = pymunk.ShapeFilter(group=1)
        space.add(self.frame, self.frame_shape)

        self.wheels: List[pymunk.Body] = []
        self.motors: List[pymunk.SimpleMotor] = []

    def add_wheel(self, offset: Tuple[float, float]) -> pymunk.Body:
        """Pin a wheel to the frame at an offset (px) so it spins about that point."""
        r = WHEEL_RADIUS / PIXELS_PER_UNIT
        ox, oy = offset[0] / PIXELS_PER_UNIT, offset[1] / PIXELS_PER_UNIT
        wheel = pymunk.Body(WHEEL_MASS, pymunk.moment_for_circle(WHEEL_MASS, 0, r))
        wheel.position = self.frame.local_to_world((ox, oy))
        shape = pymunk.Circle(wheel, r)
        shape.friction = WHEEL_FRICTION
        shape.collision_type = WHEEL_COLLISION_TYPE
        shape.filter = pymunk.ShapeFilter(group=1)

        pivot = pymunk.PivotJoint(self.frame, wheel, (ox, oy), (0, 0))
        motor = pymunk.SimpleMotor(self.frame, wheel, 0.0)
        motor.max_force = MAX_WHEEL_FORCE
        self.space.add(wheel, shape, pivot, motor)

        self.wheels.append(wheel)
        self.motors.append(motor)
        return wheel

    def update(self, keys):
        if keys[pygame.K_LEFT]:
            rate = -ROTATION_SPEED
        elif keys[pygame.K_RIGHT]:
            rate = ROTATION_SPEED
        else:
            rate = 0.0
        for motor in self.motors:
            motor.rate = rate

    def jump(self, speed: float):
        vx, _ = self.frame.velocity
        self.frame.velocity = (vx, -speed / PIXELS_PER_UNIT)

    @property
    def position(self) -> Tuple[float, float]:
        return to_pixels(self.frame.position)

    def draw(self, screen: pygame.Surface, to_screen):
        pts = [to_screen(*to_pixels(self.frame.local_to_world(v)))
               for v in self.frame_shape.get_vertices()]
        pygame.draw.polygon(screen, FRAME_COLOR, pts)
        for wheel in self.wheels:
            cx, cy = to_screen(*to_pixels(wheel.position))
            pygame.draw.circle(screen, WHEEL_COLOR, (cx, cy), WHEEL_RADIUS)
            rim = to_screen(*to_pixels(wheel.local_to_world((WHEEL_RADIUS / PIXELS_PER_UNIT * 0.8, 0))))
            pygame.draw.line(screen, SPOKE_COLOR, (cx, cy), rim, 2)

"""
Procedural ground for a side-scrolling vehicle world.

Features
- Stochastic height walk with rolling hills, cliffs and fissures.
- Fixed container frame that closes the walk into one concave polygon.
- Seedable random stream per terrain instance.

The assembled vertex loop is handed to two consumers:
- terrain_render: smoothed outline on a pygame Surface (pixel units)
- terrain_physics: pymunk body built from the concave polygon (physics units)
"""
import logging
import math
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

import terrain_physics
import terrain_render

LOGGER = logging.getLogger(__name__)

Point = Tuple[float, float]

# ----------------------------- Config ---------------------------------
STEP_SIZE = 32              # px between walk vertices

# Walk
LOW_CHANGE = 0.0            # fraction of the height range, per step
HIGH_CHANGE = 0.08
MID_BAND = 0.5              # probabilistic turn only past the middle of the range
SWITCH_CHOICES = 4          # 1 in 4 chance to consider a turn
FEATURE_CHOICES = 9         # 1 in 9 for a cliff, 1 in 9 for a fissure
FEATURE_COOLDOWN = 5        # steps between features

# Features
DROP_RATIO = 0.4            # depth of the lip vertex before a feature
CLIFF_LIP = (0.02, 0.01)    # near-baseline vertices planted after a cliff
FISSURE_WIDTH = 5           # strides spent at the bottom of a fissure
REBOUND_OFFSET = 10         # px the feature lips stick out horizontally

# Container
SIDE_WIDTH = 50
LOWER_JUT = 10
UPPER_JUT = 20


def _round(v: float) -> int:
    # half up, not half even
    return int(math.floor(v + 0.5))


# ----------------------------- Random Range ---------------------------
class RandomRange:
    """Inclusive integer draws from a stream owned by one terrain."""

    def __init__(self, seed=None):
        if isinstance(seed, random.Random):
            self.seed = None
            self.rng = seed
        else:
            self.seed = seed
            self.rng = random.Random(seed)

    def randint(self, lo: float, hi: float) -> int:
        lo = math.ceil(lo)
        hi = math.floor(hi)
        if lo > hi:
            raise ValueError(f"empty range [{lo}, {hi}]")
        return self.rng.randint(lo, hi)


# ----------------------------- Bounds ---------------------------------
@dataclass(frozen=True)
class Bounds:
    left: float
    right: float
    top: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


def normalize_bounds(x1: float, x2: float, y1: float, y2: float) -> Bounds:
    """Order two x and two y values into left <= right, top <= bottom."""
    left, right = (x1, x2) if x1 < x2 else (x2, x1)
    top, bottom = (y1, y2) if y1 < y2 else (y2, y1)
    return Bounds(left, right, top, bottom)


# ----------------------------- Container ------------------------------
def build_container(world_width: float, top: float, bottom: float) -> List[Point]:
    """
    Frame polygon around the bottom of the world.

    Points run clockwise on screen, starting at the right lower lip and
    ending at the left lower lip. The walk is appended after the last point,
    so the loop goes frame -> terrain left to right -> back to the first point.
    """
    w = world_width
    return [
        (w - LOWER_JUT, bottom),
        (w - UPPER_JUT, top),
        (w + SIDE_WIDTH, top),
        (w + SIDE_WIDTH, bottom + SIDE_WIDTH),
        (-SIDE_WIDTH, bottom + SIDE_WIDTH),
        (-SIDE_WIDTH, top),
        (UPPER_JUT, top),
        (LOWER_JUT, bottom),
    ]


# ----------------------------- Height Walk ----------------------------
@dataclass(frozen=True)
class WalkState:
    height: float
    trend: int          # +1 rising, -1 falling
    cooldown: int       # steps since the last fissure
    x: float


@dataclass(frozen=True)
class WalkRange:
    y_min: float        # baseline
    y_max: float        # ceiling

    @property
    def dif(self) -> float:
        return abs(self.y_max - self.y_min)


@dataclass(frozen=True)
class StepResult:
    points: Tuple[Point, ...]
    state: WalkState
    strides: int        # extra strides consumed by a feature


def _change_range(dif: float) -> Tuple[int, int]:
    return _round(dif * LOW_CHANGE), _round(dif * HIGH_CHANGE)


def _cliff(state: WalkState, walk: WalkRange) -> StepResult:
    dif = walk.dif
    x = state.x
    points = (
        (x - REBOUND_OFFSET, state.height - dif * DROP_RATIO),
        (x, walk.y_min + dif * CLIFF_LIP[0]),
        (x + STEP_SIZE, walk.y_min + dif * CLIFF_LIP[1]),
        (x + 2 * STEP_SIZE, walk.y_min),
    )
    LOGGER.debug("cliff at x=%s", x)
    return StepResult(points, replace(state, height=walk.y_min, trend=1), 2)


def _fissure(state: WalkState, walk: WalkRange, rng: RandomRange) -> StepResult:
    dif = walk.dif
    x = state.x
    lip = state.height - dif * DROP_RATIO
    points = [(x - REBOUND_OFFSET, lip)]
    for _ in range(FISSURE_WIDTH):
        points.append((x, walk.y_min + rng.randint(*_change_range(dif))))
        x += STEP_SIZE
    settle = state.height - dif * HIGH_CHANGE
    points.append((x, walk.y_min))
    points.append((x + REBOUND_OFFSET, lip))
    points.append((x, settle))
    LOGGER.debug("fissure at x=%s", state.x)
    new_state = replace(state, height=settle, trend=-1, cooldown=0)
    return StepResult(tuple(points), new_state, FISSURE_WIDTH)


def _turn(state: WalkState, trend: int, change: int) -> StepResult:
    height = state.height + trend * change
    return StepResult(((state.x, height),), replace(state, height=height, trend=trend), 0)


def _turn_down(state: WalkState, change: int) -> StepResult:
    return _turn(state, -1, change)


def _turn_up(state: WalkState, change: int) -> StepResult:
    return _turn(state, 1, change)


def _continue(state: WalkState, change: int) -> StepResult:
    return _turn(state, state.trend, change)


def step_walk(state: WalkState, rng: RandomRange, walk: WalkRange,
              cliffs: bool = True, fissures: bool = True) -> StepResult:
    """
    Advance the walk by one stride (more when a feature is emitted).

    Draws, in order: the height change, the turn roll, and for a high turn
    the feature roll. The returned state has x moved past everything emitted.
    """
    dif = walk.dif
    change = rng.randint(*_change_range(dif))
    inc = state.trend * change
    switch = rng.randint(0, SWITCH_CHOICES - 1)
    state = replace(state, cooldown=state.cooldown + 1)
    target = state.height + inc

    if target > walk.y_max or (switch == 0 and target > walk.y_min + dif * MID_BAND):
        feature = rng.randint(0, FEATURE_CHOICES - 1)
        ready = state.cooldown > FEATURE_COOLDOWN
        if feature == 0 and ready and cliffs:
            result = _cliff(state, walk)
        elif feature == 1 and ready and fissures:
            result = _fissure(state, walk, rng)
        else:
            result = _turn_down(state, change)
    elif target < walk.y_min or (switch == 0 and target < walk.y_max - dif * MID_BAND):
        result = _turn_up(state, change)
    else:
        result = _continue(state, change)

    x = result.state.x + (1 + result.strides) * STEP_SIZE
    return replace(result, state=replace(result.state, x=x))


def generate_terrain(x_min: float, x_max: float, y_min: float, y_max: float,
                     rng: RandomRange, cliffs: bool = True,
                     fissures: bool = True) -> List[Point]:
    """Walk from x_min towards x_max; y_min is the ground baseline."""
    walk = WalkRange(y_min, y_max)
    state = WalkState(height=y_min, trend=1, cooldown=0, x=x_min)
    points: List[Point] = []
    while state.x <= x_max - STEP_SIZE:
        result = step_walk(state, rng, walk, cliffs, fissures)
        points.extend(result.points)
        state = result.state
    if not points:
        LOGGER.warning("no terrain between x=%s and x=%s (stride %s)", x_min, x_max, STEP_SIZE)
    else:
        LOGGER.debug("generated %d terrain vertices", len(points))
    return points


def overshoot_points(points: Sequence[Point], y_min: float, y_max: float) -> List[Point]:
    """Vertices outside [y_min, y_max]; only feature lips are allowed there."""
    return [p for p in points if not y_min <= p[1] <= y_max]


def flip_terrain(points: Sequence[Point], y_min: float, y_max: float) -> List[Point]:
    """Mirror y inside [y_min, y_max] so the baseline ends up at the bottom of the screen."""
    return [(x, y_max - (y - y_min)) for x, y in points]


# ----------------------------- Assembly -------------------------------
def assemble_loop(world_width: float, bounds: Bounds, rng: RandomRange,
                  cliffs: bool = True, fissures: bool = True) -> List[Point]:
    """Container followed by the flipped walk, as one closed loop."""
    container = build_container(world_width, bounds.top, bounds.bottom)
    walk = generate_terrain(bounds.left, bounds.right, bounds.top, bounds.bottom,
                            rng, cliffs, fissures)
    return container + flip_terrain(walk, bounds.top, bounds.bottom)


@dataclass(frozen=True)
class TerrainConfig:
    cliffs: bool = True
    fissures: bool = True
    debug: bool = False     # show the raw polygon instead of the spline


class TerrainController:
    """
    Generates terrain at the bottom of the world within given bounds.

    The loop is built once here and never changes; draw_outline and
    add_to_world can be called any number of times.
    """

    def __init__(self, world_width: float, x1: float, x2: float, y1: float, y2: float,
                 config: Optional[TerrainConfig] = None, rng=None):
        self.world_width = world_width
        self.bounds = normalize_bounds(x1, x2, y1, y2)
        self.config = config or TerrainConfig()
        self.rng = rng if isinstance(rng, RandomRange) else RandomRange(rng)
        self.vertices: Tuple[Point, ...] = tuple(assemble_loop(
            world_width, self.bounds, self.rng, self.config.cliffs, self.config.fissures))

    @property
    def debug(self) -> bool:
        return self.config.debug

    def draw_outline(self, world_height: Optional[int] = None):
        """Render the loop onto a transparent surface sized to the world."""
        if world_height is None:
            world_height = int(self.bounds.bottom + SIDE_WIDTH) + 1
        return terrain_render.render_terrain(self.vertices, int(self.world_width),
                                             world_height, debug=self.debug)

    def add_to_world(self, space, **kwargs):
        """Build the kinematic ground body and add it to a pymunk space."""
        return terrain_physics.add_to_space(space, self.vertices, **kwargs)

"""Concave terrain loop -> pymunk collision body."""
import logging
from typing import List, Optional, Sequence, Tuple

import pymunk
import pymunk.autogeometry

LOGGER = logging.getLogger(__name__)

Point = Tuple[float, float]

# ----------------------------- Config ---------------------------------
PIXELS_PER_UNIT = 20.0
DECOMPOSITION_TOLERANCE = 0.01      # units of allowed concavity per piece
GROUND_FRICTION = 1.0
GROUND_ELASTICITY = 0.3
TERRAIN_COLLISION_TYPE = 1


class TerrainBodyError(RuntimeError):
    """The loop cannot be turned into a collision body."""


def to_physics_units(points: Sequence[Point], scale: float = 1.0 / PIXELS_PER_UNIT) -> List[Point]:
    return [(x * scale, y * scale) for x, y in points]


def to_pixels(point, scale: float = PIXELS_PER_UNIT) -> Point:
    return point[0] * scale, point[1] * scale


def signed_area(points: Sequence[Point]) -> float:
    """Shoelace area, positive for counter-clockwise in y-up axes."""
    total = 0.0
    n = len(points)
    for i in range(n):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total * 0.5


def _orient(a: Point, b: Point, c: Point) -> float:
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def _on_segment(a: Point, b: Point, p: Point) -> bool:
    return (min(a[0], b[0]) <= p[0] <= max(a[0], b[0])
            and min(a[1], b[1]) <= p[1] <= max(a[1], b[1]))


def segments_intersect(a: Point, b: Point, c: Point, d: Point) -> bool:
    """True when segment ab touches or crosses segment cd."""
    o1 = _orient(a, b, c)
    o2 = _orient(a, b, d)
    o3 = _orient(c, d, a)
    o4 = _orient(c, d, b)
    if o1 * o2 < 0 and o3 * o4 < 0:
        return True
    if o1 == 0 and _on_segment(a, b, c):
        return True
    if o2 == 0 and _on_segment(a, b, d):
        return True
    if o3 == 0 and _on_segment(c, d, a):
        return True
    if o4 == 0 and _on_segment(c, d, b):
        return True
    return False


def find_self_intersection(points: Sequence[Point]) -> Optional[Tuple[int, int]]:
    """
    First pair of non-adjacent edges of the closed loop that meet.

    Edge i runs from points[i] to points[i + 1] (wrapping). None when the
    loop is a simple polygon.
    """
    n = len(points)
    if n < 4:
        return None
    for i in range(n):
        a, b = points[i], points[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            if segments_intersect(a, b, points[j], points[(j + 1) % n]):
                return i, j
    return None


def _prepare(points: Sequence[Point], check_simple: bool) -> List[Point]:
    pts = [(float(x), float(y)) for x, y in points]
    if len(pts) > 1 and pts[0] == pts[-1]:
        pts.pop()
    if len(pts) < 3:
        raise TerrainBodyError(f"need at least 3 vertices, got {len(pts)}")
    if check_simple:
        hit = find_self_intersection(pts)
        if hit is not None:
            i, j = hit
            raise TerrainBodyError(
                f"terrain loop intersects itself: edge {i} {pts[i]} crosses edge {j} {pts[j]}")
    area = signed_area(pts)
    if area == 0:
        raise TerrainBodyError("terrain loop has zero area")
    if area < 0:
        pts.reverse()
    pts.append(pts[0])
    return pts


def decompose(points: Sequence[Point], tolerance: float = DECOMPOSITION_TOLERANCE,
              check_simple: bool = True) -> List[List[Point]]:
    """Split a concave loop into convex pieces."""
    polyline = _prepare(points, check_simple)
    try:
        pieces = pymunk.autogeometry.convex_decomposition(polyline, tolerance)
    except Exception as e:
        raise TerrainBodyError(f"convex decomposition failed: {e}") from e
    if not pieces:
        raise TerrainBodyError("convex decomposition produced no pieces")
    out = []
    for piece in pieces:
        verts = [(v[0], v[1]) for v in piece]
        if len(verts) > 1 and verts[0] == verts[-1]:
            verts.pop()
        out.append(verts)
    LOGGER.debug("decomposed %d vertices into %d convex pieces", len(polyline) - 1, len(out))
    return out


def build_body(points: Sequence[Point], scale: float = 1.0 / PIXELS_PER_UNIT,
               body_type: int = pymunk.Body.KINEMATIC,
               tolerance: float = DECOMPOSITION_TOLERANCE,
               friction: float = GROUND_FRICTION,
               elasticity: float = GROUND_ELASTICITY,
               collision_type: int = TERRAIN_COLLISION_TYPE,
               check_simple: bool = True) -> Tuple[pymunk.Body, List[pymunk.Poly]]:
    """
    Ground body made of one convex Poly per decomposed piece.

    Points come in pixels and are scaled into physics units first.
    Raises TerrainBodyError instead of building a body from a bad loop.
    """
    if body_type == pymunk.Body.DYNAMIC:
        raise TerrainBodyError("terrain body must be static or kinematic")
    pieces = decompose(to_physics_units(points, scale), tolerance, check_simple)
    body = pymunk.Body(body_type=body_type)
    shapes = []
    for verts in pieces:
        shape = pymunk.Poly(body, verts)
        shape.friction = friction
        shape.elasticity = elasticity
        shape.collision_type = collision_type
        shapes.append(shape)
    return body, shapes


def add_to_space(space: pymunk.Space, points: Sequence[Point], **kwargs) -> pymunk.Body:
    body, shapes = build_body(points, **kwargs)
    space.add(body, *shapes)
    LOGGER.debug("terrain body added with %d shapes", len(shapes))
    return body

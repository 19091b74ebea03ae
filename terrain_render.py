"""Smoothed terrain outline drawn with pygame."""
import logging
from typing import List, Sequence, Tuple

import pygame

LOGGER = logging.getLogger(__name__)

Point = Tuple[float, float]

# ----------------------------- Config ---------------------------------
TENSION = 0.5
SEGMENTS = 16               # interpolated points per edge
LINE_WIDTH = 5
OUTLINE_COLOR = (0, 0, 0)
DEBUG_COLOR = (200, 60, 60)
DEBUG_VERTEX_R = 3


def _pairs(points) -> List[Point]:
    # accepts [(x, y), ...] or a flat [x0, y0, x1, y1, ...]
    points = list(points)
    if points and not isinstance(points[0], (tuple, list, pygame.Vector2)):
        return [(points[i], points[i + 1]) for i in range(0, len(points) - 1, 2)]
    return [(p[0], p[1]) for p in points]


def _basis(segments: int) -> List[Tuple[float, float, float, float]]:
    # Hermite weights for each sample along an edge
    out = []
    for i in range(segments):
        t = i / segments
        t2 = t * t
        t3 = t2 * t
        out.append((2 * t3 - 3 * t2 + 1, 3 * t2 - 2 * t3, t3 - 2 * t2 + t, t3 - t2))
    return out


def curve_points(points, tension: float = TENSION, segments: int = SEGMENTS,
                 closed: bool = True) -> List[Point]:
    """
    Cardinal spline through every vertex.

    The curve starts at the first vertex. A closed curve wraps around and
    ends back on the first vertex; an open one ends on the last vertex.
    """
    pts = _pairs(points)
    n = len(pts)
    if n < 3:
        return list(pts)

    weights = _basis(segments)
    edges = n if closed else n - 1
    out: List[Point] = []
    for i in range(edges):
        p1 = pts[i]
        p2 = pts[(i + 1) % n]
        if closed:
            p0 = pts[i - 1]
            p3 = pts[(i + 2) % n]
        else:
            p0 = pts[max(i - 1, 0)]
            p3 = pts[min(i + 2, n - 1)]
        t1x = (p2[0] - p0[0]) * tension
        t1y = (p2[1] - p0[1]) * tension
        t2x = (p3[0] - p1[0]) * tension
        t2y = (p3[1] - p1[1]) * tension
        for c1, c2, c3, c4 in weights:
            out.append((c1 * p1[0] + c2 * p2[0] + c3 * t1x + c4 * t2x,
                        c1 * p1[1] + c2 * p2[1] + c3 * t1y + c4 * t2y))
    out.append(pts[0] if closed else pts[-1])
    return out


def draw_outline(surface: pygame.Surface, loop: Sequence[Point],
                 color=OUTLINE_COLOR, width: int = LINE_WIDTH) -> List[Point]:
    """Stroke the smoothed loop; returns the drawn path."""
    path = curve_points(loop)
    if len(path) >= 2:
        pygame.draw.lines(surface, color, False, path, width)
    return path


def draw_debug(surface: pygame.Surface, loop: Sequence[Point], color=DEBUG_COLOR):
    """Raw polygon edges with a dot on every vertex."""
    pts = _pairs(loop)
    if len(pts) >= 2:
        pygame.draw.lines(surface, color, True, pts, 1)
    for x, y in pts:
        pygame.draw.circle(surface, color, (int(x), int(y)), DEBUG_VERTEX_R)


def render_terrain(loop: Sequence[Point], width: int, height: int,
                   debug: bool = False) -> pygame.Surface:
    """Transparent world-sized surface holding the terrain outline."""
    surf = pygame.Surface((width, height), pygame.SRCALPHA)
    if debug:
        draw_debug(surf, loop)
    else:
        path = draw_outline(surf, loop)
        LOGGER.debug("outline of %d points through %d vertices", len(path), len(loop))
    return surf

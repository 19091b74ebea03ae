"""Tests for turning the terrain loop into a pymunk body."""
from __future__ import annotations

import pymunk
import pytest

from terrain import TerrainConfig, TerrainController
from terrain_physics import (
    PIXELS_PER_UNIT,
    TERRAIN_COLLISION_TYPE,
    TerrainBodyError,
    add_to_space,
    build_body,
    decompose,
    find_self_intersection,
    segments_intersect,
    signed_area,
    to_physics_units,
)

# concave "U" in pixels
U_SHAPE = [(0, 0), (40, 0), (40, 80), (80, 80), (80, 0), (120, 0), (120, 120), (0, 120)]
BOWTIE = [(0, 0), (100, 100), (100, 0), (0, 100)]


def _all_vertices(shapes):
    return [v for shape in shapes for v in shape.get_vertices()]


def test_to_physics_units_scales_points() -> None:
    assert to_physics_units([(20, 40), (-10, 0)]) == [(1.0, 2.0), (-0.5, 0.0)]
    assert to_physics_units([(3, 4)], scale=2) == [(6, 8)]


def test_signed_area_follows_winding() -> None:
    square = [(0, 0), (10, 0), (10, 10), (0, 10)]
    assert signed_area(square) == 100
    assert signed_area(list(reversed(square))) == -100


def test_segments_intersect_cases() -> None:
    assert segments_intersect((0, 0), (10, 10), (0, 10), (10, 0))
    assert segments_intersect((0, 0), (10, 0), (5, 0), (5, 5))
    assert not segments_intersect((0, 0), (10, 0), (0, 1), (10, 1))


def test_find_self_intersection() -> None:
    assert find_self_intersection(U_SHAPE) is None
    assert find_self_intersection(BOWTIE) == (0, 2)


def test_decompose_concave_polygon_into_convex_pieces() -> None:
    pieces = decompose(U_SHAPE, tolerance=0.0)
    assert len(pieces) >= 2
    for piece in pieces:
        assert len(piece) >= 3
        for x, y in piece:
            assert 0 <= x <= 120 and 0 <= y <= 120


def test_decompose_accepts_either_winding() -> None:
    assert decompose(list(reversed(U_SHAPE)), tolerance=0.0)


def test_decompose_accepts_explicitly_closed_loop() -> None:
    assert decompose(U_SHAPE + [U_SHAPE[0]], tolerance=0.0)


def test_decompose_rejects_self_intersection() -> None:
    with pytest.raises(TerrainBodyError, match="intersects itself"):
        decompose(BOWTIE)


def test_decompose_rejects_degenerate_loops() -> None:
    with pytest.raises(TerrainBodyError):
        decompose([(0, 0), (1, 1)])
    with pytest.raises(TerrainBodyError, match="zero area"):
        decompose([(0, 0), (1, 0), (2, 0)])


def test_build_body_is_kinematic_and_scaled() -> None:
    body, shapes = build_body(U_SHAPE)
    assert body.body_type == pymunk.Body.KINEMATIC
    verts = _all_vertices(shapes)
    assert min(v.x for v in verts) == pytest.approx(0)
    assert max(v.x for v in verts) == pytest.approx(120 / PIXELS_PER_UNIT)
    assert max(v.y for v in verts) == pytest.approx(120 / PIXELS_PER_UNIT)
    for shape in shapes:
        assert shape.collision_type == TERRAIN_COLLISION_TYPE
        assert shape.body is body


def test_build_body_static_allowed_dynamic_rejected() -> None:
    body, _ = build_body(U_SHAPE, body_type=pymunk.Body.STATIC)
    assert body.body_type == pymunk.Body.STATIC
    with pytest.raises(TerrainBodyError):
        build_body(U_SHAPE, body_type=pymunk.Body.DYNAMIC)


def test_add_to_space_registers_body_and_shapes() -> None:
    space = pymunk.Space()
    body = add_to_space(space, U_SHAPE)
    assert body in space.bodies
    assert len(space.shapes) == len(body.shapes) >= 2


def test_controller_add_to_world() -> None:
    space = pymunk.Space()
    ctrl = TerrainController(800, 50, 750, 100, 450,
                             config=TerrainConfig(cliffs=False, fissures=False), rng=6)
    body = ctrl.add_to_world(space)
    assert body.body_type == pymunk.Body.KINEMATIC
    verts = _all_vertices(body.shapes)
    assert min(v.x for v in verts) == pytest.approx(-50 / PIXELS_PER_UNIT)
    assert max(v.x for v in verts) == pytest.approx(850 / PIXELS_PER_UNIT)
    assert max(v.y for v in verts) == pytest.approx(500 / PIXELS_PER_UNIT)
    assert min(v.y for v in verts) == pytest.approx(100 / PIXELS_PER_UNIT)


def test_controller_degenerate_terrain_still_builds_frame() -> None:
    space = pymunk.Space()
    ctrl = TerrainController(800, 50, 60, 100, 450, rng=1)
    body = ctrl.add_to_world(space)
    assert len(body.shapes) >= 2


def test_ball_comes_to_rest_on_terrain() -> None:
    space = pymunk.Space()
    space.gravity = (0, 30)
    ctrl = TerrainController(800, 50, 750, 100, 450,
                             config=TerrainConfig(cliffs=False, fissures=False), rng=2)
    ctrl.add_to_world(space)
    ball = pymunk.Body(1, pymunk.moment_for_circle(1, 0, 0.5))
    ball.position = (20.0, 0.0)
    space.add(ball, pymunk.Circle(ball, 0.5))
    for _ in range(600):
        space.step(1 / 60)
    # held above the frame floor at y = 25 units
    assert ball.position.y < 500 / PIXELS_PER_UNIT


def test_crossing_loop_named_before_its_area_is_checked() -> None:
    # the bowtie's two lobes cancel out to zero signed area
    assert signed_area(BOWTIE) == 0
    with pytest.raises(TerrainBodyError, match="intersects itself"):
        build_body(BOWTIE)
    with pytest.raises(TerrainBodyError, match="zero area"):
        decompose(BOWTIE, check_simple=False)


def _has_feature(vertices) -> bool:
    walk = vertices[8:]
    return any(walk[i][0] < walk[i - 1][0] for i in range(1, len(walk)))


def test_featureful_terrain_builds_or_fails_fast() -> None:
    built = []
    for seed in range(1, 41):
        ctrl = TerrainController(8000, 50, 7950, 100, 450, rng=seed)
        space = pymunk.Space()
        if seed == 23:
            with pytest.raises(TerrainBodyError, match="intersects itself"):
                ctrl.add_to_world(space)
            assert not space.shapes
            continue
        body = ctrl.add_to_world(space)
        assert body.body_type == pymunk.Body.KINEMATIC
        assert len(space.shapes) == len(body.shapes) >= 2
        built.append(ctrl)
    # cliffs and fissures went through decomposition, not just rolling hills
    assert any(_has_feature(ctrl.vertices) for ctrl in built)


@pytest.mark.parametrize("seed", [11, 14, 21])
def test_fissure_past_right_lip_is_rejected(seed) -> None:
    ctrl = TerrainController(800, 50, 750, 100, 450, rng=seed)
    with pytest.raises(TerrainBodyError, match="intersects itself"):
        ctrl.add_to_world(pymunk.Space())


def test_small_featureful_worlds_outside_rejected_seeds_build() -> None:
    for seed in range(1, 41):
        if seed in (11, 14, 21):
            continue
        ctrl = TerrainController(800, 50, 750, 100, 450, rng=seed)
        body = ctrl.add_to_world(pymunk.Space())
        assert body.shapes

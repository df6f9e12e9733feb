"""
Reference Solid and Cap Tests
=============================

Primitive builders satisfy the solid contract, and cap detection finds the
pyramids, cupolae and rotundae a reader would point at.

Run: python -m pytest tests/core/test_solids.py -v
"""

import numpy as np
import pytest

from crf_math.builders import (
    build_tetrahedron,
    build_cube,
    build_octahedron,
    build_dodecahedron,
    build_icosahedron,
    build_cuboctahedron,
    build_icosidodecahedron,
    build_rhombicuboctahedron,
    build_rhombicosidodecahedron,
    build_prism,
    build_antiprism,
    build_pyramid,
    build_cupola,
    build_pentagonal_rotunda,
    build_sphenocorona,
)
from crf_math.polyhedra import Cap, alignment_of
from crf_math.spec import (
    validate_solid,
    PRECISION,
    CAP_PYRAMID,
    CAP_CUPOLA,
    CAP_ROTUNDA,
    GYRO,
    PARA,
    META,
)


PRIMITIVES = {
    "tetrahedron": (build_tetrahedron, {3: 4}),
    "cube": (build_cube, {4: 6}),
    "octahedron": (build_octahedron, {3: 8}),
    "dodecahedron": (build_dodecahedron, {5: 12}),
    "icosahedron": (build_icosahedron, {3: 20}),
    "cuboctahedron": (build_cuboctahedron, {3: 8, 4: 6}),
    "icosidodecahedron": (build_icosidodecahedron, {3: 20, 5: 12}),
    "rhombicuboctahedron": (build_rhombicuboctahedron, {3: 8, 4: 18}),
    "rhombicosidodecahedron": (build_rhombicosidodecahedron, {3: 20, 4: 30, 5: 12}),
    "pentagonal prism": (lambda: build_prism(5), {4: 5, 5: 2}),
    "octagonal antiprism": (lambda: build_antiprism(8), {3: 16, 8: 2}),
    "square pyramid": (lambda: build_pyramid(4), {3: 4, 4: 1}),
    "pentagonal cupola": (lambda: build_cupola(5), {3: 5, 4: 5, 5: 1, 10: 1}),
    "pentagonal rotunda": (build_pentagonal_rotunda, {3: 10, 5: 6, 10: 1}),
    "sphenocorona": (build_sphenocorona, {3: 12, 4: 2}),
}


# =============================================================================
# TEST A: Builders
# =============================================================================

@pytest.mark.parametrize("name", sorted(PRIMITIVES))
def test_primitive_face_counts(name):
    """A1: Each primitive has the expected face histogram."""
    builder, counts = PRIMITIVES[name]
    assert builder().face_counts() == counts


@pytest.mark.parametrize("name", sorted(PRIMITIVES))
def test_primitive_contract(name):
    """A2: Each primitive is a closed, planar, regular-faced solid."""
    builder, _ = PRIMITIVES[name]
    is_valid, errors = validate_solid(builder(), strict=False)
    assert is_valid, f"{name}: {errors}"


@pytest.mark.parametrize("name", sorted(PRIMITIVES))
def test_primitive_unit_edge(name):
    """A3: Every edge of every primitive has length 1."""
    builder, _ = PRIMITIVES[name]
    lengths = [edge.length() for edge in builder().edges]
    assert max(lengths) - 1 < PRECISION
    assert 1 - min(lengths) < PRECISION


@pytest.mark.parametrize("name", sorted(PRIMITIVES))
def test_primitive_euler(name):
    """A4: V - E + F = 2 for every primitive."""
    poly = PRIMITIVES[name][0]()
    assert poly.num_vertices() - poly.num_edges() + poly.num_faces() == 2


def test_primitive_convexity():
    """A5: No dihedral angle reaches π."""
    for name, (builder, _) in PRIMITIVES.items():
        angles = [edge.dihedral_angle() for edge in builder().edges]
        assert max(angles) < np.pi - PRECISION, name


# =============================================================================
# TEST B: Solid contract
# =============================================================================

def test_contract_open_surface():
    """B1: A cube with a missing face is not closed."""
    cube = build_cube()
    is_valid, errors = validate_solid(cube.without_faces([0]), strict=False)
    assert not is_valid
    assert any("no twin" in e for e in errors)


def test_contract_strict_raises():
    """B2: strict=True raises with the collected errors."""
    cube = build_cube()
    with pytest.raises(ValueError, match="Solid contract violation"):
        validate_solid(cube.without_faces([0]))


def test_contract_irregular_faces():
    """B3: A stretched cube has rectangles, which are not regular."""
    cube = build_cube()
    box = cube.with_vertices(cube.vertex_data * np.array([1.0, 1.0, 2.0]))
    is_valid, errors = validate_solid(box, strict=False)
    assert not is_valid
    assert any("not regular" in e for e in errors)


def test_contract_duplicate_face():
    """B4: The same face listed twice is rejected."""
    tet = build_tetrahedron()
    doubled = tet.add_faces([tet.face_data[0]])
    is_valid, errors = validate_solid(doubled, strict=False)
    assert not is_valid
    assert any("Duplicate faces" in e for e in errors)


def test_contract_index_out_of_bounds():
    """B5: Face indices must refer to existing vertices."""
    tet = build_tetrahedron()
    broken = tet.with_faces(list(tet.face_data[:-1]) + [(0, 1, 9)])
    with pytest.raises(ValueError, match="out of bounds"):
        validate_solid(broken)


# =============================================================================
# TEST C: Cap detection
# =============================================================================

def test_caps_tetrahedron():
    """C1: Every tetrahedron vertex is a triangular pyramid cap."""
    caps = Cap.get_all(build_tetrahedron())
    assert len(caps) == 4
    assert all(c.type == CAP_PYRAMID and c.boundary().num_sides == 3 for c in caps)


def test_caps_octahedron():
    """C2: Six square pyramid caps."""
    caps = Cap.get_all(build_octahedron())
    assert len(caps) == 6
    assert all(c.boundary().num_sides == 4 for c in caps)


def test_caps_icosahedron():
    """C3: Twelve pentagonal pyramid caps."""
    caps = Cap.get_all(build_icosahedron())
    assert len(caps) == 12
    assert all(c.type == CAP_PYRAMID and c.boundary().num_sides == 5 for c in caps)


def test_caps_none_on_cube():
    """C4: A cube has nothing to remove."""
    assert Cap.get_all(build_cube()) == []


def test_caps_square_pyramid():
    """C5: Only the apex of a square pyramid is a cap."""
    pyramid = build_pyramid(4)
    caps = Cap.get_all(pyramid)
    assert len(caps) == 1
    cap = caps[0]
    assert len(cap.faces()) == 4
    assert sorted(cap.boundary().value) == sorted(pyramid.face_with_num_sides(4).value)


def test_caps_cupola():
    """C6: A cupola is one cupola cap bounded by its large base."""
    cupola = build_cupola(4)
    caps = Cap.get_all(cupola)
    assert len(caps) == 1
    cap = caps[0]
    assert cap.type == CAP_CUPOLA
    assert cap.boundary().num_sides == 8
    assert cap.top.num_sides == 4
    assert cap.inner_vertices() == sorted(cap.top.value)
    assert len(cap.faces()) == 9


def test_caps_rotunda():
    """C7: The pentagonal rotunda has one rotunda cap with ten inner vertices."""
    caps = Cap.get_all(build_pentagonal_rotunda())
    assert len(caps) == 1
    cap = caps[0]
    assert cap.type == CAP_ROTUNDA
    assert len(cap.inner_vertices()) == 10
    assert cap.boundary().num_sides == 10
    assert len(cap.faces()) == 16


def test_cap_normal_points_to_cap():
    """C8: The cap normal points from the boundary towards the top."""
    for cap in Cap.get_all(build_icosahedron()):
        direction = cap.top_point() - cap.boundary().centroid()
        assert np.dot(cap.normal(), direction) > 0


def test_cuboctahedron_caps_are_gyro():
    """C9: Cuboctahedron is the triangular gyrobicupola: 8 gyro cupola caps."""
    caps = Cap.get_all(build_cuboctahedron())
    assert len(caps) == 8
    assert all(c.type == CAP_CUPOLA for c in caps)
    assert {c.alignment() for c in caps} == {GYRO}


def test_rhombicuboctahedron_caps():
    """C10: The six axial squares of the rhombicuboctahedron top square cupolae."""
    caps = Cap.get_all(build_rhombicuboctahedron())
    assert len(caps) == 6
    assert all(c.type == CAP_CUPOLA and c.boundary().num_sides == 8 for c in caps)


def test_rhombicosidodecahedron_caps():
    """C11: Twelve pentagonal cupola caps, none of them gyrated."""
    caps = Cap.get_all(build_rhombicosidodecahedron())
    assert len(caps) == 12
    assert all(c.boundary().num_sides == 10 for c in caps)
    assert {c.alignment() for c in caps} == {GYRO}


def test_cap_find():
    """C12: A hit on a pyramid face finds the cap with the nearest top."""
    ico = build_icosahedron()
    apex = ico.vertex_data[0]
    point = apex * 1.01
    cap = Cap.find(ico, point)
    assert cap is not None
    assert cap.top == 0


def test_cap_find_none():
    """C13: A hit on a solid without caps finds nothing."""
    cube = build_cube()
    assert Cap.find(cube, cube.faces[0].centroid()) is None


def test_alignment_of():
    """C14: para for opposite directions, meta otherwise, None unless two."""
    assert alignment_of([[0, 0, 1], [0, 0, -1]]) == PARA
    assert alignment_of([[0, 0, 1], [0, 1, 0]]) == META
    assert alignment_of([[0, 0, 1]]) is None
    assert alignment_of([]) is None

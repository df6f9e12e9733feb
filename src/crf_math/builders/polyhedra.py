"""
Reference Polyhedra Construction
================================

Primitive CRF solids built from vertex coordinates. Everything else in the
catalog is derived from these by operations.

POLYHEDRA INCLUDED:
    - Platonic: tetrahedron, cube, octahedron, dodecahedron, icosahedron
    - Archimedean: cuboctahedron, icosidodecahedron,
      rhombicuboctahedron, rhombicosidodecahedron
    - Prisms and antiprisms (n-gonal base)
    - Pyramids (n = 3..5), cupolae (n = 3..5), pentagonal rotunda
    - Sphenocorona

CONSTRUCTION:
    Coordinates → scipy ConvexHull → coplanar hull triangles merged into
    faces → each face ordered CCW seen from outside. All solids are scaled
    to unit edge length.
"""

import numpy as np
from typing import List

from scipy.spatial import ConvexHull
from scipy.spatial.distance import pdist

from ..polyhedra.polyhedron import Polyhedron
from ..spec.constants import HULL_TOL, PHI, SQRT2


# ═══════════════════════════════════════════════════════════════
# HULL → POLYHEDRON
# ═══════════════════════════════════════════════════════════════

def _order_face_vertices(vertices: np.ndarray,
                         face_idx: List[int],
                         normal: np.ndarray) -> List[int]:
    """
    Order face vertices counter-clockwise when viewed from normal direction.

    Internal helper function.
    """
    coords = vertices[face_idx]
    centroid = coords.mean(axis=0)
    normal = normal / np.linalg.norm(normal)

    # Build local coordinate frame
    if abs(normal[0]) < 0.9:
        u = np.cross(normal, [1, 0, 0])
    else:
        u = np.cross(normal, [0, 1, 0])
    u = u / np.linalg.norm(u)
    v = np.cross(normal, u)

    # Compute angles and sort
    angles = []
    for p in coords:
        dp = p - centroid
        angles.append(np.arctan2(np.dot(dp, v), np.dot(dp, u)))

    order = np.argsort(angles)
    return [face_idx[o] for o in order]


def _unit_edge(points) -> np.ndarray:
    """Scale a point cloud so that its shortest pairwise distance is 1."""
    pts = np.asarray(points, dtype=float)
    return pts / pdist(pts).min()


def polyhedron_from_points(points) -> Polyhedron:
    """
    Convex polyhedron with the given points as vertices.

    Hull facets lying in one plane are merged into a single face. Every input
    point must be a hull vertex.

    Raises:
        ValueError: if some point is interior or on an edge / face
    """
    vertices = _unit_edge(points)
    hull = ConvexHull(vertices)
    if len(hull.vertices) != len(vertices):
        raise ValueError(
            f"All points must be hull vertices: got {len(vertices)} points, "
            f"{len(hull.vertices)} on the hull"
        )

    planes = []
    for eq in hull.equations:
        if not any(np.allclose(eq, p, atol=HULL_TOL) for p in planes):
            planes.append(eq)

    faces = []
    for eq in planes:
        normal, offset = eq[:3], eq[3]
        face_idx = [i for i, p in enumerate(vertices)
                    if abs(np.dot(normal, p) + offset) < HULL_TOL]
        faces.append(_order_face_vertices(vertices, face_idx, normal))

    return Polyhedron(vertices, faces)


def _check_counts(poly: Polyhedron, name: str, n_V: int, n_F: int) -> Polyhedron:
    if poly.num_vertices() != n_V or poly.num_faces() != n_F:
        raise ValueError(
            f"{name}: expected V={n_V}, F={n_F}, "
            f"got V={poly.num_vertices()}, F={poly.num_faces()}"
        )
    return poly


def _cyclic(x, y, z) -> List[tuple]:
    return [(x, y, z), (z, x, y), (y, z, x)]


def _signs(point) -> List[tuple]:
    """All sign flips of the nonzero coordinates."""
    result = {()}
    for c in point:
        options = (c, -c) if c != 0 else (0.0,)
        result = {r + (o,) for r in result for o in options}
    return sorted(result)


def _even_perms(*points) -> List[tuple]:
    result = []
    for p in points:
        for q in _cyclic(*p):
            result.extend(_signs(q))
    return result


# ═══════════════════════════════════════════════════════════════
# PLATONIC AND ARCHIMEDEAN SOLIDS
# ═══════════════════════════════════════════════════════════════

def build_tetrahedron() -> Polyhedron:
    """Regular tetrahedron. V=4, F=4 (triangles)."""
    points = [(1, 1, 1), (1, -1, -1), (-1, 1, -1), (-1, -1, 1)]
    return _check_counts(polyhedron_from_points(points), "tetrahedron", 4, 4)


def build_cube() -> Polyhedron:
    """Cube. V=8, F=6 (squares)."""
    points = _signs((1, 1, 1))
    return _check_counts(polyhedron_from_points(points), "cube", 8, 6)


def build_octahedron() -> Polyhedron:
    """Octahedron. V=6, F=8 (triangles)."""
    points = _even_perms((1, 0, 0))
    return _check_counts(polyhedron_from_points(points), "octahedron", 6, 8)


def build_dodecahedron() -> Polyhedron:
    """Dodecahedron. V=20, F=12 (pentagons)."""
    points = _signs((1, 1, 1)) + _even_perms((0, 1 / PHI, PHI))
    return _check_counts(polyhedron_from_points(points), "dodecahedron", 20, 12)


def build_icosahedron() -> Polyhedron:
    """Icosahedron. V=12, F=20 (triangles)."""
    points = _even_perms((0, 1, PHI))
    return _check_counts(polyhedron_from_points(points), "icosahedron", 12, 20)


def build_cuboctahedron() -> Polyhedron:
    """Cuboctahedron. V=12, F=14 (8 triangles, 6 squares)."""
    points = _even_perms((1, 1, 0))
    return _check_counts(polyhedron_from_points(points), "cuboctahedron", 12, 14)


def build_icosidodecahedron() -> Polyhedron:
    """Icosidodecahedron. V=30, F=32 (20 triangles, 12 pentagons)."""
    points = _even_perms((0, 0, PHI), (0.5, PHI / 2, PHI ** 2 / 2))
    return _check_counts(polyhedron_from_points(points), "icosidodecahedron", 30, 32)


def build_rhombicuboctahedron() -> Polyhedron:
    """Rhombicuboctahedron. V=24, F=26 (8 triangles, 18 squares)."""
    points = _even_perms((1, 1, 1 + SQRT2))
    return _check_counts(polyhedron_from_points(points), "rhombicuboctahedron", 24, 26)


def build_rhombicosidodecahedron() -> Polyhedron:
    """Rhombicosidodecahedron. V=60, F=62 (20 triangles, 30 squares, 12 pentagons)."""
    points = _even_perms(
        (1, 1, PHI ** 3),
        (PHI ** 2, PHI, 2 * PHI),
        (2 + PHI, 0, PHI ** 2),
    )
    return _check_counts(polyhedron_from_points(points), "rhombicosidodecahedron", 60, 62)


# ═══════════════════════════════════════════════════════════════
# PRISMATIC SOLIDS AND CAPS
# ═══════════════════════════════════════════════════════════════

def _ring(n: int, radius: float, z: float, phase: float = 0.0) -> List[tuple]:
    angles = phase + 2 * np.pi * np.arange(n) / n
    return [(radius * np.cos(a), radius * np.sin(a), z) for a in angles]


def _circumradius(n: int) -> float:
    """Circumradius of a regular n-gon with unit side."""
    return 1 / (2 * np.sin(np.pi / n))


def build_prism(n: int) -> Polyhedron:
    """n-gonal prism with unit edges. V=2n, F=n+2."""
    if n < 3:
        raise ValueError(f"Prism needs n >= 3, got {n}")
    R = _circumradius(n)
    points = _ring(n, R, 0.5) + _ring(n, R, -0.5)
    return _check_counts(polyhedron_from_points(points), f"{n}-prism", 2 * n, n + 2)


def build_antiprism(n: int) -> Polyhedron:
    """n-gonal antiprism with unit edges. V=2n, F=2n+2."""
    if n < 3:
        raise ValueError(f"Antiprism needs n >= 3, got {n}")
    R = _circumradius(n)
    h = np.sqrt(1 - 2 * R ** 2 * (1 - np.cos(np.pi / n)))
    points = _ring(n, R, h / 2) + _ring(n, R, -h / 2, phase=np.pi / n)
    return _check_counts(polyhedron_from_points(points), f"{n}-antiprism", 2 * n, 2 * n + 2)


def build_pyramid(n: int) -> Polyhedron:
    """n-gonal pyramid with unit edges (n = 3..5). V=n+1, F=n+1."""
    if n not in (3, 4, 5):
        raise ValueError(f"Pyramid needs n in 3..5, got {n}")
    R = _circumradius(n)
    h = np.sqrt(1 - R ** 2)
    points = _ring(n, R, 0.0) + [(0.0, 0.0, h)]
    return _check_counts(polyhedron_from_points(points), f"{n}-pyramid", n + 1, n + 1)


def build_cupola(n: int) -> Polyhedron:
    """
    n-gonal cupola with unit edges (n = 3..5).

    Top n-gon at angles 2πk/n, bottom 2n-gon at (2j+1)π/2n so that each top
    edge is parallel to a bottom edge. V=3n, F=2n+2.
    """
    if n not in (3, 4, 5):
        raise ValueError(f"Cupola needs n in 3..5, got {n}")
    r = _circumradius(n)
    R = _circumradius(2 * n)
    top_apothem = r * np.cos(np.pi / n)
    bottom_apothem = R * np.cos(np.pi / (2 * n))
    h = np.sqrt(1 - (bottom_apothem - top_apothem) ** 2)
    points = _ring(n, r, h) + _ring(2 * n, R, 0.0, phase=np.pi / (2 * n))
    return _check_counts(polyhedron_from_points(points), f"{n}-cupola", 3 * n, 2 * n + 2)


def build_pentagonal_rotunda() -> Polyhedron:
    """Half of the icosidodecahedron cut through a decagon. V=20, F=17."""
    ico = build_icosidodecahedron()
    axis = np.array([0, PHI, 1]) / np.linalg.norm([0, PHI, 1])
    scale = ico.edge_length()
    keep = [p for p in ico.vertex_data if np.dot(p, axis) > -HULL_TOL * scale]
    return _check_counts(polyhedron_from_points(keep), "pentagonal rotunda", 20, 17)


def build_sphenocorona() -> Polyhedron:
    """
    Sphenocorona (Johnson solid J86). V=10, F=14 (12 triangles, 2 squares).

    k is the root near 0.85273 of 60x⁴ − 48x³ − 100x² + 56x + 23.
    """
    roots = np.roots([60, -48, -100, 56, 23])
    k = float(next(r.real for r in roots if abs(r.imag) < 1e-9 and 0.8 < r.real < 0.9))
    s = np.sqrt(1 - k ** 2)
    base = [
        (0, 1, 2 * s),
        (2 * k, 1, 0),
        (0, 1 + np.sqrt(3 - 4 * k ** 2) / s, (1 - 2 * k ** 2) / s),
        (1, 0, -np.sqrt(2 + 4 * k - 4 * k ** 2)),
    ]
    # reflections in the xz and yz planes; points on a mirror collapse in the set
    points = sorted({(sx * x, sy * y, z)
                     for (x, y, z) in base
                     for sx in (1, -1) for sy in (1, -1)})
    return _check_counts(polyhedron_from_points(points), "sphenocorona", 10, 14)

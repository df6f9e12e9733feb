"""
Vector Primitives
=================

Small numpy helpers for 3D points and directions.

Groups:
  1. Basic vector math — vec, normalize, distance, angle_between, is_inverse
  2. Dihedral angles — dihedral_angle
  3. Alignment transforms — orthonormal_transform, with_origin

All functions are pure. Degenerate input (zero-length vectors) is a caller
precondition; it raises ValueError instead of silently producing NaN.
"""

import numpy as np
from typing import Callable

from ..spec.constants import PRECISION, EPS_ZERO


# ═══════════════════════════════════════════════════════════════
# 1. BASIC VECTOR MATH
# ═══════════════════════════════════════════════════════════════

def vec(p) -> np.ndarray:
    """Coerce a point-like value to a float array of shape (3,)."""
    return np.asarray(p, dtype=float).reshape(3)


def norm(v) -> float:
    return float(np.linalg.norm(v))


def normalize(v) -> np.ndarray:
    v = vec(v)
    length = norm(v)
    if length < EPS_ZERO:
        raise ValueError(f"Cannot normalize a zero-length vector: {v}")
    return v / length


def distance(a, b) -> float:
    return norm(vec(a) - vec(b))


def midpoint(a, b) -> np.ndarray:
    return (vec(a) + vec(b)) / 2


def angle_between(a, b) -> float:
    """Unsigned angle between two vectors, in [0, π]."""
    cos = np.dot(normalize(a), normalize(b))
    return float(np.arccos(np.clip(cos, -1.0, 1.0)))


def equals_with_tolerance(a, b, tol: float = PRECISION) -> bool:
    return norm(vec(a) - vec(b)) < tol


def is_inverse(a, b) -> bool:
    """True if the two directions point exactly opposite each other."""
    return equals_with_tolerance(-normalize(a), normalize(b))


def project_orthogonal(v, direction) -> np.ndarray:
    """Component of v orthogonal to the (unit) direction."""
    d = normalize(direction)
    v = vec(v)
    return v - np.dot(v, d) * d


# ═══════════════════════════════════════════════════════════════
# 2. DIHEDRAL ANGLES
# ═══════════════════════════════════════════════════════════════

def dihedral_angle(edge_start, edge_end, centroid1, centroid2) -> float:
    """
    Interior angle between two faces sharing an edge.

    The vectors from the edge midpoint to each face centroid are projected
    onto the plane orthogonal to the edge; the angle between the projections
    is the dihedral angle.

    Args:
        edge_start, edge_end: endpoints of the shared edge
        centroid1, centroid2: centroids of the two faces

    Returns:
        angle in [0, π]
    """
    direction = vec(edge_end) - vec(edge_start)
    mid = midpoint(edge_start, edge_end)
    p1 = project_orthogonal(vec(centroid1) - mid, direction)
    p2 = project_orthogonal(vec(centroid2) - mid, direction)
    return angle_between(p1, p2)


# ═══════════════════════════════════════════════════════════════
# 3. ALIGNMENT TRANSFORMS
# ═══════════════════════════════════════════════════════════════

def _basis(radius, normal) -> np.ndarray:
    """Orthonormal basis (columns) from a radius and a normal vector."""
    u = normalize(radius)
    n = normalize(normal)
    if abs(np.dot(u, n)) > PRECISION:
        raise ValueError("Radius and normal must be orthogonal")
    return np.column_stack([u, n, np.cross(u, n)])


def orthonormal_transform(radius1, normal1, radius2, normal2) -> np.ndarray:
    """
    Rotation matrix taking the basis (radius1, normal1) onto (radius2, normal2).

    Both pairs must be orthogonal. The third axis of each basis is
    radius × normal, so the result is a proper rotation.

    Returns:
        (3, 3) rotation matrix R with R @ radius1 = radius2, R @ normal1 = normal2
    """
    source = _basis(radius1, normal1)
    target = _basis(radius2, normal2)
    return target @ source.T


def with_origin(origin, transform: Callable[[np.ndarray], np.ndarray]) -> Callable:
    """Wrap a linear map so that it acts about `origin` instead of (0, 0, 0)."""
    o = vec(origin)

    def apply(p):
        return transform(vec(p) - o) + o

    return apply

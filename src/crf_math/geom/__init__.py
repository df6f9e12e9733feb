"""Geometry primitives - vectors, dihedral angles, alignment transforms."""

from .vectors import (
    vec,
    norm,
    normalize,
    distance,
    midpoint,
    angle_between,
    equals_with_tolerance,
    is_inverse,
    project_orthogonal,
    dihedral_angle,
    orthonormal_transform,
    with_origin,
)

"""Builders for the primitive reference solids."""

from .polyhedra import (
    polyhedron_from_points,
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

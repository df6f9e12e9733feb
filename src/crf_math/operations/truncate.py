"""
Truncate / Rectify
==================

Cut every vertex of a regular solid.

    truncate: each n-gon becomes a regular 2n-gon, each vertex a new face
    rectify:  cut through edge midpoints; the old faces shrink to their medial
              polygons and the new vertex faces meet them at the midpoints

ALGORITHM (per vertex v of the source solid):
    1. Faces around v in cyclic order: F_0 .. F_{m-1}
    2. One new point per face, on the edge from v to the next vertex of F_k
    3. In F_k, v is replaced by the pair (new_{k+1}, new_k)
    4. The new points form the face cut off at v

Vertices are processed one at a time, each step building a new Polyhedron.
Coincident points (rectify) are merged at the end.
"""

import logging
import numpy as np
from typing import Dict

from ..catalog.specs import Spec, Classical, TRUNCATE, RECTIFY
from ..polyhedra.polyhedron import Polyhedron
from .operation import Operation, AnimationData
from .utils import deduplicate_vertices, remove_extraneous_vertices

logger = logging.getLogger(__name__)


def _cut_point(p1: np.ndarray, p2: np.ndarray, n: int, rectify: bool) -> np.ndarray:
    """Where the cut through an n-gon crosses the edge p1 → p2."""
    if rectify:
        return p1 + (p2 - p1) / 2
    side = np.linalg.norm(p2 - p1)
    apothem = np.cos(np.pi / n) * side / (2 * np.sin(np.pi / n))
    n2 = 2 * n
    new_side = 2 * np.sin(np.pi / n2) * apothem / np.cos(np.pi / n2)
    return p1 + (p2 - p1) * ((side - new_side) / 2 / side)


def truncate_vertex(current: Polyhedron, source: Polyhedron, v: int,
                    mock: bool = False, rectify: bool = False) -> Polyhedron:
    """Cut one vertex `v` of `source` out of `current` (same face indexing)."""
    touching = source.directed_adjacent_faces(v)
    m = len(touching)
    p1 = source.vertex_data[v]

    new_points = []
    for face in touching:
        if mock:
            new_points.append(p1)
            continue
        p2 = source.vertex_data[face.next_vertex(v)]
        new_points.append(_cut_point(p1, p2, face.num_sides, rectify))

    offset = current.num_vertices()
    position = {face.index: k for k, face in enumerate(touching)}

    faces = []
    for f_idx, face in enumerate(current.face_data):
        k = position.get(f_idx)
        if k is None:
            faces.append(face)
            continue
        i = face.index(v)
        faces.append(face[:i] + (offset + (k + 1) % m, offset + k) + face[i + 1:])
    faces.append(tuple(range(offset, offset + m)))

    return Polyhedron(np.vstack([current.vertex_data, new_points]), faces)


def _cut_all(polyhedron: Polyhedron, mock: bool = False,
             rectify: bool = False) -> Polyhedron:
    result = polyhedron
    for v in range(polyhedron.num_vertices()):
        result = truncate_vertex(result, polyhedron, v, mock=mock, rectify=rectify)
    return remove_extraneous_vertices(result)


def do_truncate(polyhedron: Polyhedron, mock: bool = False,
                rectify: bool = False) -> Polyhedron:
    cut = _cut_all(polyhedron, mock=mock, rectify=rectify)
    return cut if mock else deduplicate_vertices(cut)


class _TruncateBase(Operation):
    """Shared eligibility: regular (Platonic) solids only."""

    rectify = False

    def can_apply_to(self, spec: Spec) -> bool:
        return isinstance(spec, Classical) and spec.is_regular()

    def do_apply(self, spec: Spec, geom: Polyhedron, options: Dict):
        # mock and real cuts share vertex order until the real one is merged
        mock = _cut_all(geom, mock=True)
        cut = _cut_all(geom, rectify=self.rectify)
        return deduplicate_vertices(cut), AnimationData(start=mock, end_vertices=cut.vertex_data)


class Truncate(_TruncateBase):
    name = "truncate"

    def get_result(self, spec: Spec, options: Dict) -> Spec:
        return Classical(spec.family, TRUNCATE, spec.facet)


class Rectify(_TruncateBase):
    name = "rectify"
    rectify = True

    def get_result(self, spec: Spec, options: Dict) -> Spec:
        return Classical(spec.family, RECTIFY)


truncate = Truncate()
rectify = Rectify()

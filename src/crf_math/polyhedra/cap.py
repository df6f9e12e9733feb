"""
Cap Detection
=============

A cap is a pyramid, cupola or rotunda-shaped cluster of faces attached to the
rest of a solid. Caps are never stored; they are found by walking adjacency.

DETECTION:
    pyramid  — apex vertex surrounded by 3, 4 or 5 triangles
    cupola   — top 3/4/5-gon; around each top vertex: square, triangle, square
    rotunda  — top pentagon; around each top vertex: triangle, pentagon, triangle

A candidate is accepted only if
    - its boundary is one closed ring of the expected size (n, 2n, 10),
    - the boundary ring is planar,
    - some face of the solid lies outside the cap.
"""

import numpy as np
from functools import cached_property
from typing import FrozenSet, List, Optional

from ..geom.vectors import is_inverse, vec
from ..spec.constants import (
    PRECISION, CAP_PYRAMID, CAP_CUPOLA, CAP_ROTUNDA, ORTHO, GYRO, PARA, META,
)
from .polyhedron import Polyhedron, Face


# Face sizes seen around a top vertex, after the top face itself
_CUPOLA_RING = [4, 3, 4]
_ROTUNDA_RING = [3, 5, 3]


class Boundary:
    """Closed ring of vertex indices at the base of a cap, wound like a face."""

    def __init__(self, polyhedron: Polyhedron, ring):
        self.polyhedron = polyhedron
        self.value = tuple(ring)

    @property
    def num_sides(self) -> int:
        return len(self.value)

    def vectors(self) -> np.ndarray:
        return self.polyhedron.vertex_data[list(self.value)]

    def centroid(self) -> np.ndarray:
        return self.vectors().mean(axis=0)

    def normal(self) -> np.ndarray:
        """Unit normal pointing away from the rest of the solid, toward the cap."""
        return Face.normal(self)

    def is_planar(self) -> bool:
        pts = self.vectors()
        offsets = (pts - self.centroid()) @ self.normal()
        return bool(np.max(np.abs(offsets)) < PRECISION)


class Cap:
    """A pyramid/cupola/rotunda cluster identified by its inner vertices."""

    def __init__(self, polyhedron: Polyhedron, type: str, top, inner):
        self.polyhedron = polyhedron
        self.type = type
        self.top = top                          # apex vertex index, or top Face
        self._inner: FrozenSet[int] = frozenset(inner)

    # ─── structure ──────────────────────────────────────────────

    def inner_vertices(self) -> List[int]:
        return sorted(self._inner)

    @cached_property
    def _faces(self) -> List[Face]:
        indices = set()
        for v in self._inner:
            indices.update(f.index for f in self.polyhedron.adjacent_faces(v))
        return [self.polyhedron.faces[i] for i in sorted(indices)]

    def faces(self) -> List[Face]:
        return list(self._faces)

    @cached_property
    def _ring(self) -> Optional[tuple]:
        """Boundary edges of the cap faces, chained into one cycle (or None)."""
        face_ids = {f.index for f in self._faces}
        successor = {}
        for face in self._faces:
            for edge in face.edges:
                twin = edge.twin_face()
                if twin is None or twin.index not in face_ids:
                    if edge.v1 in successor:
                        return None
                    successor[edge.v1] = edge.v2
        if not successor:
            return None
        start = next(iter(successor))
        ring = [start]
        while True:
            nxt = successor.get(ring[-1])
            if nxt is None:
                return None
            if nxt == start:
                break
            if nxt in ring:
                return None
            ring.append(nxt)
        if len(ring) != len(successor):
            return None
        return tuple(ring)

    def boundary(self) -> Boundary:
        return Boundary(self.polyhedron, self._ring)

    def normal(self) -> np.ndarray:
        return self.boundary().normal()

    def top_point(self) -> np.ndarray:
        if isinstance(self.top, Face):
            return self.top.centroid()
        return self.polyhedron.vertex_data[self.top]

    def contains_face(self, face: Face) -> bool:
        return any(f == face for f in self._faces)

    def alignment(self) -> str:
        """
        "ortho" if the faces on both sides of the boundary line up, else "gyro".

        Lined up means triangles meet triangles, or squares meet squares when
        pentagons border the cap (rhombicosidodecahedral caps).
        """
        face_ids = {f.index for f in self._faces}
        pairs = []
        for face in self._faces:
            for edge in face.edges:
                twin = edge.twin_face()
                if twin is not None and twin.index not in face_ids:
                    pairs.append((face.num_sides, twin.num_sides))
        key = 4 if any(outside == 5 for _, outside in pairs) else 3
        if all((inside == key) == (outside == key) for inside, outside in pairs):
            return ORTHO
        return GYRO

    def _expected_boundary(self) -> int:
        if self.type == CAP_PYRAMID:
            return len(self._faces)
        if self.type == CAP_CUPOLA:
            return 2 * self.top.num_sides
        return 10

    def is_valid(self) -> bool:
        ring = self._ring
        if ring is None or len(ring) != self._expected_boundary():
            return False
        if self._inner.intersection(ring):
            return False
        if self.polyhedron.num_faces() - len(self._faces) < 1:
            return False
        return self.boundary().is_planar()

    # ─── identity ───────────────────────────────────────────────

    def __eq__(self, other):
        return (isinstance(other, Cap) and other.polyhedron is self.polyhedron
                and other.type == self.type and other._inner == self._inner)

    def __hash__(self):
        return hash((id(self.polyhedron), self.type, self._inner))

    def __repr__(self):
        return f"Cap({self.type}, inner={self.inner_vertices()})"

    # ─── detection ──────────────────────────────────────────────

    @staticmethod
    def get_all(polyhedron: Polyhedron) -> List["Cap"]:
        """All caps of the solid: pyramids, then cupolae, then rotundae."""
        caps = []
        for v in polyhedron.referenced_vertices():
            faces = polyhedron.adjacent_faces(v)
            if 3 <= len(faces) <= 5 and all(f.num_sides == 3 for f in faces):
                caps.append(Cap(polyhedron, CAP_PYRAMID, v, [v]))

        for face in polyhedron.faces:
            n = face.num_sides
            if n in (3, 4, 5) and _ring_matches(polyhedron, face, _CUPOLA_RING):
                caps.append(Cap(polyhedron, CAP_CUPOLA, face, face.value))

        for face in polyhedron.faces_with_num_sides(5):
            if _ring_matches(polyhedron, face, _ROTUNDA_RING):
                inner = set(face.value)
                for adjacent in face.adjacent_faces():
                    inner.update(adjacent.value)
                caps.append(Cap(polyhedron, CAP_ROTUNDA, face, inner))

        return [cap for cap in caps if cap.is_valid()]

    @staticmethod
    def find(polyhedron: Polyhedron, point) -> Optional["Cap"]:
        """The cap under a hit point: caps containing the hit face, nearest top first."""
        face = polyhedron.hit_face(point)
        candidates = [cap for cap in Cap.get_all(polyhedron) if cap.contains_face(face)]
        if not candidates:
            return None
        p = vec(point)
        return min(candidates, key=lambda cap: np.linalg.norm(cap.top_point() - p))


def _ring_matches(polyhedron: Polyhedron, top: Face, pattern) -> bool:
    """Around every vertex of `top`, the faces after `top` have the given sizes."""
    for v in top.value:
        ring = polyhedron.directed_adjacent_faces(v)
        if len(ring) != len(pattern) + 1 or top not in ring:
            return False
        k = ring.index(top)
        sizes = [f.num_sides for f in ring[k + 1:] + ring[:k]]
        if sizes != pattern:
            return False
    return True


def alignment_of(normals) -> Optional[str]:
    """para/meta for exactly two feature directions, None otherwise."""
    normals = list(normals)
    if len(normals) != 2:
        return None
    return PARA if is_inverse(normals[0], normals[1]) else META

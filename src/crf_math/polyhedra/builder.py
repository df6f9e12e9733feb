"""
Solid Builder
=============

Single-use accumulator of table-level edits on a snapshot of a Polyhedron.

    new = (SolidBuilder(old)
           .add_polyhedron(piece)
           .without_faces([base])
           .build())

Every edit returns the builder for chaining; build() freezes the tables into
a new Polyhedron. The source polyhedron is never touched.

Removing faces does not remove vertices: orphans are left in place until a
deduplication / extraneous-vertex pass (operations.utils).
"""

import numpy as np
from typing import Callable, Iterable, List

from .polyhedron import Polyhedron, Vertex, Face


def normalize_vertex(v) -> np.ndarray:
    """Point, array or Vertex → float array of shape (3,)."""
    if isinstance(v, Vertex):
        return np.array(v.vec, dtype=float)
    arr = np.asarray(v, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"Invalid vertex: {v!r}")
    return arr


def normalize_face(face) -> tuple:
    """Face view, or a sequence of indices / Vertex views → index tuple."""
    if isinstance(face, Face):
        return face.value
    return tuple(v.index if isinstance(v, Vertex) else int(v) for v in face)


class SolidBuilder:
    """Accumulates declarative edits and produces a new Polyhedron."""

    def __init__(self, polyhedron: Polyhedron):
        self.polyhedron = polyhedron
        self._vertices: List[np.ndarray] = [np.array(v) for v in polyhedron.vertex_data]
        self._faces: List[tuple] = list(polyhedron.face_data)

    def build(self) -> Polyhedron:
        return Polyhedron(np.array(self._vertices).reshape(-1, 3), self._faces)

    def with_vertices(self, vertices: Iterable) -> "SolidBuilder":
        self._vertices = [normalize_vertex(v) for v in vertices]
        return self

    def with_faces(self, faces: Iterable) -> "SolidBuilder":
        self._faces = [normalize_face(f) for f in faces]
        return self

    def add_vertices(self, vertices: Iterable) -> "SolidBuilder":
        self._vertices.extend(normalize_vertex(v) for v in vertices)
        return self

    def add_faces(self, faces: Iterable) -> "SolidBuilder":
        self._faces.extend(normalize_face(f) for f in faces)
        return self

    def map_vertices(self, fn: Callable[[Vertex], object]) -> "SolidBuilder":
        """Replace each vertex of the *source* solid by fn(vertex)."""
        return self.with_vertices(fn(v) for v in self.polyhedron.vertices)

    def map_faces(self, fn: Callable[[Face], object]) -> "SolidBuilder":
        """Replace each face of the *source* solid by fn(face)."""
        return self.with_faces(fn(f) for f in self.polyhedron.faces)

    def without_faces(self, faces: Iterable) -> "SolidBuilder":
        removed = {f.index if isinstance(f, Face) else int(f) for f in faces}
        self._faces = [f for i, f in enumerate(self._faces) if i not in removed]
        return self

    def add_polyhedron(self, other: Polyhedron) -> "SolidBuilder":
        """Append another solid, offsetting its faces by the current vertex count."""
        offset = len(self._vertices)
        self.add_vertices(other.vertex_data)
        return self.add_faces(tuple(i + offset for i in face) for face in other.face_data)

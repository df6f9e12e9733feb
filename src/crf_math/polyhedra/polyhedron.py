"""
Polyhedron Data Model
=====================

Immutable mesh of a vertex table and a face table.

    Polyhedron.vertex_data : (N, 3) read-only float array
    Polyhedron.face_data   : tuple of vertex-index tuples, CCW seen from outside

Vertex, Face and Edge are lightweight views addressed by index inside ONE
snapshot. Two views are equal only if they come from the same Polyhedron
object and point at the same index (or vertex pair for edges).

Every edit returns a NEW Polyhedron (see builder.py); nothing here mutates.
"""

import numpy as np
from collections import Counter, defaultdict
from functools import cached_property
from typing import Dict, List, Optional, Sequence, Tuple

from ..geom.vectors import vec, normalize, distance, dihedral_angle, midpoint


class Vertex:
    """A vertex of a polyhedron, referenced by index."""

    __slots__ = ("polyhedron", "index")

    def __init__(self, polyhedron: "Polyhedron", index: int):
        self.polyhedron = polyhedron
        self.index = index

    @property
    def vec(self) -> np.ndarray:
        return self.polyhedron.vertex_data[self.index]

    def adjacent_faces(self) -> List["Face"]:
        return self.polyhedron.adjacent_faces(self.index)

    def __eq__(self, other):
        return (isinstance(other, Vertex) and other.polyhedron is self.polyhedron
                and other.index == self.index)

    def __hash__(self):
        return hash((id(self.polyhedron), self.index))

    def __repr__(self):
        return f"Vertex({self.index})"


class Edge:
    """A directed edge (v1 → v2) as it appears in `face`."""

    __slots__ = ("polyhedron", "v1", "v2")

    def __init__(self, polyhedron: "Polyhedron", v1: int, v2: int):
        self.polyhedron = polyhedron
        self.v1 = v1
        self.v2 = v2

    @property
    def value(self) -> Tuple[int, int]:
        return (self.v1, self.v2)

    @property
    def vertices(self) -> List[Vertex]:
        return [Vertex(self.polyhedron, self.v1), Vertex(self.polyhedron, self.v2)]

    @property
    def face(self) -> Optional["Face"]:
        return self.polyhedron.face_for_edge(self.v1, self.v2)

    def twin(self) -> "Edge":
        return Edge(self.polyhedron, self.v2, self.v1)

    def twin_face(self) -> Optional["Face"]:
        return self.polyhedron.face_for_edge(self.v2, self.v1)

    def adjacent_faces(self) -> List["Face"]:
        return [self.face, self.twin_face()]

    def midpoint(self) -> np.ndarray:
        data = self.polyhedron.vertex_data
        return midpoint(data[self.v1], data[self.v2])

    def length(self) -> float:
        data = self.polyhedron.vertex_data
        return distance(data[self.v1], data[self.v2])

    def dihedral_angle(self) -> float:
        """Interior angle between `face` and `twin_face()` along this edge."""
        data = self.polyhedron.vertex_data
        return dihedral_angle(data[self.v1], data[self.v2],
                              self.face.centroid(), self.twin_face().centroid())

    def __eq__(self, other):
        return (isinstance(other, Edge) and other.polyhedron is self.polyhedron
                and {self.v1, self.v2} == {other.v1, other.v2})

    def __hash__(self):
        return hash((id(self.polyhedron), frozenset((self.v1, self.v2))))

    def __repr__(self):
        return f"Edge({self.v1}, {self.v2})"


class Face:
    """A face of a polyhedron, referenced by index."""

    __slots__ = ("polyhedron", "index")

    def __init__(self, polyhedron: "Polyhedron", index: int):
        self.polyhedron = polyhedron
        self.index = index

    @property
    def value(self) -> Tuple[int, ...]:
        return self.polyhedron.face_data[self.index]

    @property
    def num_sides(self) -> int:
        return len(self.value)

    @property
    def vertices(self) -> List[Vertex]:
        return [Vertex(self.polyhedron, i) for i in self.value]

    def vectors(self) -> np.ndarray:
        return self.polyhedron.vertex_data[list(self.value)]

    @property
    def edges(self) -> List[Edge]:
        """Directed edges in winding order: edges[i] = (v_i, v_{i+1})."""
        f = self.value
        n = len(f)
        return [Edge(self.polyhedron, f[i], f[(i + 1) % n]) for i in range(n)]

    def next_vertex(self, v: int) -> int:
        f = self.value
        return f[(f.index(v) + 1) % len(f)]

    def prev_vertex(self, v: int) -> int:
        f = self.value
        return f[(f.index(v) - 1) % len(f)]

    def centroid(self) -> np.ndarray:
        return self.vectors().mean(axis=0)

    def normal(self) -> np.ndarray:
        """Outward unit normal (Newell's method)."""
        pts = self.vectors()
        nxt = np.roll(pts, -1, axis=0)
        n = np.array([
            np.sum((pts[:, 1] - nxt[:, 1]) * (pts[:, 2] + nxt[:, 2])),
            np.sum((pts[:, 2] - nxt[:, 2]) * (pts[:, 0] + nxt[:, 0])),
            np.sum((pts[:, 0] - nxt[:, 0]) * (pts[:, 1] + nxt[:, 1])),
        ])
        return normalize(n)

    def side_length(self) -> float:
        pts = self.vectors()
        return distance(pts[0], pts[1])

    def adjacent_faces(self) -> List["Face"]:
        """Faces across each edge; adjacent_faces()[i] is across edges[i]."""
        return [edge.twin_face() for edge in self.edges]

    def distance_to(self, point) -> float:
        """Distance from a point to the plane of this face."""
        return abs(float(np.dot(vec(point) - self.centroid(), self.normal())))

    def __eq__(self, other):
        return (isinstance(other, Face) and other.polyhedron is self.polyhedron
                and other.index == self.index)

    def __hash__(self):
        return hash((id(self.polyhedron), self.index))

    def __repr__(self):
        return f"Face({self.index}, {list(self.value)})"


class Polyhedron:
    """
    Immutable vertex/face tables plus derived views.

    Args:
        vertices: sequence of 3D points
        faces: sequence of vertex-index cycles, CCW when seen from outside
    """

    def __init__(self, vertices, faces: Sequence[Sequence[int]]):
        data = np.array(vertices, dtype=float).reshape(-1, 3)
        data.setflags(write=False)
        self.vertex_data = data
        self.face_data = tuple(tuple(int(i) for i in face) for face in faces)

    # ─── tables ─────────────────────────────────────────────────

    def num_vertices(self) -> int:
        return len(self.vertex_data)

    def num_faces(self) -> int:
        return len(self.face_data)

    def num_edges(self) -> int:
        return len(self.edges)

    @cached_property
    def vertices(self) -> List[Vertex]:
        return [Vertex(self, i) for i in range(self.num_vertices())]

    @cached_property
    def faces(self) -> List[Face]:
        return [Face(self, i) for i in range(self.num_faces())]

    @cached_property
    def _edge_to_face(self) -> Dict[Tuple[int, int], int]:
        mapping = {}
        for f_idx, face in enumerate(self.face_data):
            n = len(face)
            for k in range(n):
                mapping.setdefault((face[k], face[(k + 1) % n]), f_idx)
        return mapping

    @cached_property
    def _vertex_to_faces(self) -> Dict[int, List[int]]:
        mapping = defaultdict(list)
        for f_idx, face in enumerate(self.face_data):
            for v in face:
                mapping[v].append(f_idx)
        return dict(mapping)

    @cached_property
    def edges(self) -> List[Edge]:
        """One directed edge per undirected edge, in face order."""
        seen = set()
        result = []
        for face in self.face_data:
            n = len(face)
            for k in range(n):
                a, b = face[k], face[(k + 1) % n]
                if (b, a) in seen or (a, b) in seen:
                    continue
                seen.add((a, b))
                result.append(Edge(self, a, b))
        return result

    # ─── queries ────────────────────────────────────────────────

    def face_for_edge(self, v1: int, v2: int) -> Optional[Face]:
        f_idx = self._edge_to_face.get((v1, v2))
        return None if f_idx is None else self.faces[f_idx]

    def faces_with_num_sides(self, n: int) -> List[Face]:
        return [face for face in self.faces if face.num_sides == n]

    def face_with_num_sides(self, n: int) -> Face:
        for face in self.faces:
            if face.num_sides == n:
                return face
        raise ValueError(f"No face with {n} sides")

    def face_counts(self) -> Counter:
        """Histogram of side counts, e.g. Counter({3: 8, 8: 6})."""
        return Counter(len(face) for face in self.face_data)

    def adjacent_faces(self, vertex) -> List[Face]:
        """
        All faces containing the vertex, in face-index order.

        Given a Face, the faces across its edges (Face.adjacent_faces).
        """
        if isinstance(vertex, Face):
            return vertex.adjacent_faces()
        v = vertex.index if isinstance(vertex, Vertex) else int(vertex)
        return [self.faces[i] for i in self._vertex_to_faces.get(v, [])]

    def directed_adjacent_faces(self, vertex) -> List[Face]:
        """
        Faces around a vertex in cyclic order.

        Each next face shares the previous face's incoming edge: the vertex
        before `v` in face A is the vertex after `v` in face B.
        """
        v = vertex.index if isinstance(vertex, Vertex) else int(vertex)
        touching = self.adjacent_faces(v)
        if not touching:
            return []
        result = [touching[0]]
        while len(result) < len(touching):
            prev = result[-1].prev_vertex(v)
            following = next((f for f in touching if f.next_vertex(v) == prev), None)
            if following is None or following in result:
                break
            result.append(following)
        return result

    def hit_face(self, point) -> Face:
        """Face whose plane lies closest to the point (interactive picking)."""
        return min(self.faces, key=lambda face: face.distance_to(point))

    def edge_length(self) -> float:
        return self.edges[0].length()

    def referenced_vertices(self) -> List[int]:
        return sorted(self._vertex_to_faces)

    def centroid(self) -> np.ndarray:
        return self.vertex_data[self.referenced_vertices()].mean(axis=0)

    # ─── derived solids ─────────────────────────────────────────

    def builder(self):
        from .builder import SolidBuilder
        return SolidBuilder(self)

    def with_changes(self, changes) -> "Polyhedron":
        """Apply `changes(builder) -> builder` and build the result."""
        return changes(self.builder()).build()

    def with_vertices(self, vertices) -> "Polyhedron":
        return self.builder().with_vertices(vertices).build()

    def with_faces(self, faces) -> "Polyhedron":
        return self.builder().with_faces(faces).build()

    def add_vertices(self, vertices) -> "Polyhedron":
        return self.builder().add_vertices(vertices).build()

    def add_faces(self, faces) -> "Polyhedron":
        return self.builder().add_faces(faces).build()

    def without_faces(self, faces) -> "Polyhedron":
        return self.builder().without_faces(faces).build()

    def add_polyhedron(self, other: "Polyhedron") -> "Polyhedron":
        return self.builder().add_polyhedron(other).build()

    def __repr__(self):
        counts = dict(sorted(self.face_counts().items()))
        return f"Polyhedron(V={self.num_vertices()}, F={self.num_faces()}, faces={counts})"

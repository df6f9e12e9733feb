"""
Mesh Repair
===========

Clean-up passes run after cut/paste style edits:

    deduplicate_vertices       — merge coincident vertices, repair faces
    remove_extraneous_vertices — drop vertices no face references
    opposite_face              — walk across a lateral square of a prism
"""

import logging

from scipy.spatial import cKDTree

from ..polyhedra.polyhedron import Polyhedron, Edge, Face
from ..spec.constants import PRECISION

logger = logging.getLogger(__name__)


def _uniq(seq):
    seen = set()
    result = []
    for item in seq:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def remove_extraneous_vertices(polyhedron: Polyhedron) -> Polyhedron:
    """Drop unreferenced vertices and re-index faces; relative order is kept."""
    used = polyhedron.referenced_vertices()
    if len(used) == polyhedron.num_vertices():
        return polyhedron
    new_index = {old: new for new, old in enumerate(used)}
    return Polyhedron(
        polyhedron.vertex_data[used],
        [[new_index[v] for v in face] for face in polyhedron.face_data],
    )


def deduplicate_vertices(polyhedron: Polyhedron) -> Polyhedron:
    """
    Merge vertices closer than PRECISION.

    Every vertex maps to the earliest index within tolerance. Faces keep their
    winding; repeated indices inside a face collapse and faces left with fewer
    than 3 vertices are dropped. Unreferenced vertices are removed at the end.
    """
    data = polyhedron.vertex_data
    if len(data) == 0:
        return polyhedron

    tree = cKDTree(data)
    canonical = list(range(len(data)))
    for i, j in sorted(tree.query_pairs(PRECISION)):
        # pairs come as i < j; chain to the earliest representative
        root = canonical[i]
        if root < canonical[j]:
            canonical[j] = root

    faces = []
    dropped = 0
    for face in polyhedron.face_data:
        merged = _uniq(canonical[v] for v in face)
        if len(merged) >= 3:
            faces.append(merged)
        else:
            dropped += 1
    if dropped:
        logger.debug("deduplicate_vertices: dropped %d degenerate faces", dropped)

    return remove_extraneous_vertices(Polyhedron(data, faces))


def opposite_face(edge: Edge) -> Face:
    """
    Face on the far side of the lateral square beyond `edge`.

    For an edge of a prism base, this is the other base. The square across the
    edge is entered through the twin edge; the edge two steps further round the
    square leads out to the result.
    """
    square = edge.twin_face()
    if square is None or square.num_sides != 4:
        raise ValueError(f"Edge {edge.value} is not bordered by a square")
    twin = edge.twin()
    k = square.value.index(twin.v1)
    far = square.edges[(k + 2) % 4]
    return far.twin_face()

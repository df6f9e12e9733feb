"""Immutable polyhedron model, builder and cap detection."""

from .polyhedron import Polyhedron, Vertex, Face, Edge
from .builder import SolidBuilder
from .cap import Cap, Boundary, alignment_of

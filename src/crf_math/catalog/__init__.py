"""Classification catalog: specs, names and reference geometry."""

from .specs import (
    Spec, Classical, Prismatic, Capstone, Composite, Elementary,
    PRISM, ANTIPRISM, REGULAR, TRUNCATE, RECTIFY, CANTELLATE, FACE, VERTEX,
)
from .catalog import lookup, specs_for, names, geometry_of, spec_of, signature

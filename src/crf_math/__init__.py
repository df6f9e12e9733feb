"""
crf_math
========

Editing core for convex regular-faced (CRF) polyhedra.

Modules:
    geom        - vector helpers, dihedral angles, alignment transforms
    polyhedra   - immutable Polyhedron, SolidBuilder, cap detection
    builders    - primitive reference solids from coordinates
    catalog     - specs, names and reference geometry
    operations  - augment, diminish, truncate, rectify
    spec        - constants and the solid contract

Requirements:
    Python >= 3.9
    numpy >= 1.20
    scipy >= 1.11
"""

import logging
import sys

# Python version check
if sys.version_info < (3, 9):
    raise ImportError(f"crf_math requires Python >= 3.9, got {sys.version}")

# scipy version check
import scipy
_scipy_version = tuple(int(p) for p in scipy.__version__.split('.')[:2] if p.isdigit())
if _scipy_version < (1, 11):
    raise ImportError(f"crf_math requires scipy >= 1.11, got {scipy.__version__}")

# numpy version check
import numpy as np
_numpy_version = tuple(int(p) for p in np.__version__.split('.')[:2] if p.isdigit())
if _numpy_version < (1, 20):
    raise ImportError(f"crf_math requires numpy >= 1.20, got {np.__version__}")

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

from .polyhedra import Polyhedron, SolidBuilder, Cap
from .catalog import lookup, specs_for, names, geometry_of, spec_of
from .operations import augment, diminish, truncate, rectify, OperationResult, UnhandledSpecError
from .logging_config import setup_logging

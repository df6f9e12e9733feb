"""Constants and the solid contract."""

from .constants import *
from .structures import canonical_face, validate_solid

"""
Solid Specs
===========

Structural classification of a named CRF solid, as a closed set of frozen
dataclasses:

    Classical(family, operation, facet)                 Platonic / Archimedean
    Prismatic(base, type)                               prisms and antiprisms
    Capstone(base, type, count, elongation, gyrate)     pyramids, cupolae, rotundae
    Composite(source, augmented, diminished, gyrate, align)
    Elementary(name)                                    everything else

Specs are values: never mutated, only replaced via with_data(). Fields that
have no meaning for a particular combination (gyrate on a pyramid, para/meta
on a singly augmented solid) are cleared on construction, so two specs that
describe the same solid compare equal.
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..spec.constants import (
    POLYGON_PREFIXES, ORTHO, GYRO, PARA, META,
    CAP_PYRAMID, CAP_CUPOLA, CAP_ROTUNDA, CAP_CUPOLAROTUNDA,
)

PRISM = "prism"
ANTIPRISM = "antiprism"

REGULAR = "regular"
TRUNCATE = "truncate"
RECTIFY = "rectify"
CANTELLATE = "cantellate"

FACE = "face"
VERTEX = "vertex"


class Spec:
    """Common interface of all spec variants."""

    def canonical_name(self) -> str:
        raise NotImplementedError

    def with_data(self, **changes) -> "Spec":
        return replace(self, **changes)

    def __str__(self):
        return self.canonical_name()


# ═══════════════════════════════════════════════════════════════
# CLASSICAL
# ═══════════════════════════════════════════════════════════════

_CLASSICAL_NAMES = {
    (3, REGULAR, None): "tetrahedron",
    (3, TRUNCATE, None): "truncated tetrahedron",
    (3, RECTIFY, None): "octahedron",
    (3, CANTELLATE, None): "cuboctahedron",
    (4, REGULAR, FACE): "cube",
    (4, REGULAR, VERTEX): "octahedron",
    (4, TRUNCATE, FACE): "truncated cube",
    (4, TRUNCATE, VERTEX): "truncated octahedron",
    (4, RECTIFY, None): "cuboctahedron",
    (4, CANTELLATE, None): "rhombicuboctahedron",
    (5, REGULAR, FACE): "dodecahedron",
    (5, REGULAR, VERTEX): "icosahedron",
    (5, TRUNCATE, FACE): "truncated dodecahedron",
    (5, TRUNCATE, VERTEX): "truncated icosahedron",
    (5, RECTIFY, None): "icosidodecahedron",
    (5, CANTELLATE, None): "rhombicosidodecahedron",
}


@dataclass(frozen=True)
class Classical(Spec):
    """Platonic or Archimedean solid of the tetrahedral/octahedral/icosahedral family."""

    family: int
    operation: str = REGULAR
    facet: Optional[str] = None

    def __post_init__(self):
        # tetrahedral solids are self-dual; rectified/cantellated have no facet
        if self.family == 3 or self.operation in (RECTIFY, CANTELLATE):
            object.__setattr__(self, "facet", None)

    def canonical_name(self) -> str:
        return _CLASSICAL_NAMES[(self.family, self.operation, self.facet)]

    def is_regular(self) -> bool:
        return self.operation == REGULAR

    def is_icosahedral(self) -> bool:
        return self.family == 5


# ═══════════════════════════════════════════════════════════════
# PRISMATIC
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Prismatic(Spec):
    base: int
    type: str = PRISM

    def canonical_name(self) -> str:
        if (self.base, self.type) == (4, PRISM):
            return "cube"
        if (self.base, self.type) == (3, ANTIPRISM):
            return "octahedron"
        return f"{POLYGON_PREFIXES[self.base]} {self.type}"

    def is_prism(self) -> bool:
        return self.type == PRISM

    def is_antiprism(self) -> bool:
        return self.type == ANTIPRISM


# ═══════════════════════════════════════════════════════════════
# CAPSTONE
# ═══════════════════════════════════════════════════════════════

_CAPSTONE_SPECIAL_NAMES = {
    (3, CAP_PYRAMID, 1, None, None): "tetrahedron",
    (2, CAP_CUPOLA, 1, None, None): "triangular prism",
    (2, CAP_CUPOLA, 2, None, GYRO): "gyrobifastigium",
    (4, CAP_PYRAMID, 2, None, None): "octahedron",
    (5, CAP_PYRAMID, 2, ANTIPRISM, None): "icosahedron",
    (3, CAP_CUPOLA, 2, None, GYRO): "cuboctahedron",
    (5, CAP_ROTUNDA, 2, None, GYRO): "icosidodecahedron",
    (4, CAP_CUPOLA, 2, PRISM, ORTHO): "rhombicuboctahedron",
}

_ELONGATION_PREFIXES = {None: "", PRISM: "elongated ", ANTIPRISM: "gyroelongated "}


@dataclass(frozen=True)
class Capstone(Spec):
    """One or two caps, optionally separated by a prism or antiprism."""

    base: int
    type: str = CAP_PYRAMID
    count: int = 1
    elongation: Optional[str] = None
    gyrate: Optional[str] = None

    def __post_init__(self):
        if self.count == 1 or self.type == CAP_PYRAMID or self.elongation == ANTIPRISM:
            object.__setattr__(self, "gyrate", None)

    def canonical_name(self) -> str:
        key = (self.base, self.type, self.count, self.elongation, self.gyrate)
        if key in _CAPSTONE_SPECIAL_NAMES:
            return _CAPSTONE_SPECIAL_NAMES[key]

        prefix = _ELONGATION_PREFIXES[self.elongation] + POLYGON_PREFIXES[self.base]
        if self.count == 1:
            return f"{prefix} {self.type}"
        if self.type == CAP_PYRAMID:
            return f"{prefix} bipyramid"
        noun = CAP_CUPOLAROTUNDA if self.type == CAP_CUPOLAROTUNDA else f"bi{self.type}"
        return f"{prefix} {self.gyrate or ''}{noun}"

    def is_mono(self) -> bool:
        return self.count == 1

    def is_elongated(self) -> bool:
        return self.elongation is not None

    def is_gyroelongated(self) -> bool:
        return self.elongation == ANTIPRISM

    def is_pyramid(self) -> bool:
        return self.type == CAP_PYRAMID

    def is_digonal(self) -> bool:
        return self.base == 2

    def is_pentagonal(self) -> bool:
        return self.base == 5


# ═══════════════════════════════════════════════════════════════
# COMPOSITE
# ═══════════════════════════════════════════════════════════════

_COUNT_PREFIXES = {1: "", 2: "bi", 3: "tri"}


@dataclass(frozen=True)
class Composite(Spec):
    """A source solid with caps added, removed or rotated."""

    source: Spec
    augmented: int = 0
    diminished: int = 0
    gyrate: int = 0
    align: Optional[str] = None

    def __post_init__(self):
        if not self.has_alignment():
            object.__setattr__(self, "align", None)

    def _source_name(self) -> str:
        return self.source.canonical_name()

    def has_alignment(self) -> bool:
        """True when two modified positions can be opposite (para) or not (meta)."""
        name = self._source_name()
        if name == "icosahedron":
            return self.diminished == 2 and self.augmented == 0
        if name == "rhombicosidodecahedron":
            return self.gyrate + self.diminished == 2
        if self.augmented != 2:
            return False
        if isinstance(self.source, Prismatic):
            return self.source.base == 6
        return isinstance(self.source, Classical) and self.source.is_icosahedral()

    def is_para(self) -> bool:
        return self.align == PARA

    def is_meta(self) -> bool:
        return self.align == META

    def canonical_name(self) -> str:
        name = self._source_name()
        align = self.align or ""
        if name == "icosahedron":
            return _diminished_icosahedron_name(self.augmented, self.diminished, align)
        if name == "rhombicosidodecahedron":
            words = []
            if self.gyrate:
                words.append(f"{_COUNT_PREFIXES[self.gyrate]}gyrate")
            if self.diminished:
                words.append(f"{_COUNT_PREFIXES[self.diminished]}diminished")
            if not words:
                return name
            words[0] = align + words[0]
            return " ".join(words + [name])
        if self.augmented == 0:
            return name
        return f"{align}{_COUNT_PREFIXES[self.augmented]}augmented {name}"


def _diminished_icosahedron_name(augmented: int, diminished: int, align: str) -> str:
    if diminished == 0:
        return "icosahedron"
    if diminished == 1:
        return "gyroelongated pentagonal pyramid"
    if diminished == 2:
        return "pentagonal antiprism" if align == PARA else f"{align}bidiminished icosahedron"
    if augmented:
        return "augmented tridiminished icosahedron"
    return "tridiminished icosahedron"


# ═══════════════════════════════════════════════════════════════
# ELEMENTARY
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Elementary(Spec):
    name: str

    def canonical_name(self) -> str:
        return self.name

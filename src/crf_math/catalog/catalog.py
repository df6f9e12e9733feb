"""
Solid Catalog
=============

Name ↔ spec ↔ geometry for the reference set of CRF solids.

    lookup(name)          primary spec of a name (KeyError if unknown)
    specs_for(name)       every spec sharing the name, primary first
    names()               all catalog names
    geometry_of(spec)     reference Polyhedron (cached)
    spec_of(polyhedron)   classify a solid by its face-pair signature

GEOMETRY:
    Primitive solids come from coordinate builders. Truncated solids are the
    truncation of their regular source. Everything else is found by
    searching augment/diminish options starting from a simpler solid, so the
    catalog always agrees with what the operations actually produce.

SIGNATURE:
    For every pair of faces: (sides_i, sides_j, centroid distance / edge).
    Two solids match if the sorted signatures agree within PRECISION.
"""

import logging
import numpy as np
from collections import OrderedDict
from typing import Dict, List, Optional, Union

from scipy.spatial.distance import pdist

from .. import builders
from ..polyhedra.polyhedron import Polyhedron
from ..spec.constants import (
    PRECISION, POLYGON_PREFIXES, PRISM_BASES,
    ORTHO, GYRO, PARA, META,
    CAP_PYRAMID, CAP_CUPOLA, CAP_ROTUNDA, CAP_CUPOLAROTUNDA,
)
from .specs import (
    Spec, Classical, Prismatic, Capstone, Composite, Elementary,
    PRISM, ANTIPRISM, REGULAR, TRUNCATE, RECTIFY, CANTELLATE, FACE, VERTEX,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# 1. REGISTRY
# ═══════════════════════════════════════════════════════════════

def _classical_specs() -> List[Spec]:
    specs = [Classical(3, REGULAR), Classical(3, TRUNCATE)]
    for family in (4, 5):
        specs += [
            Classical(family, REGULAR, FACE),
            Classical(family, REGULAR, VERTEX),
            Classical(family, TRUNCATE, FACE),
            Classical(family, TRUNCATE, VERTEX),
            Classical(family, RECTIFY),
            Classical(family, CANTELLATE),
        ]
    return specs


def _prismatic_specs() -> List[Spec]:
    return [Prismatic(n, t) for n in PRISM_BASES for t in (PRISM, ANTIPRISM)]


def _capstone_specs() -> List[Spec]:
    specs = []
    for base in (3, 4, 5):
        for elongation in (None, PRISM, ANTIPRISM):
            if base == 3 and elongation == ANTIPRISM:
                continue
            for count in (1, 2):
                specs.append(Capstone(base, CAP_PYRAMID, count, elongation))

    specs.append(Capstone(2, CAP_CUPOLA, 1))
    specs.append(Capstone(2, CAP_CUPOLA, 2, None, GYRO))
    for base, types in ((3, [CAP_CUPOLA]), (4, [CAP_CUPOLA]),
                        (5, [CAP_CUPOLA, CAP_ROTUNDA, CAP_CUPOLAROTUNDA])):
        for type in types:
            for elongation in (None, PRISM, ANTIPRISM):
                if type != CAP_CUPOLAROTUNDA:
                    specs.append(Capstone(base, type, 1, elongation))
                gyrates = [None] if elongation == ANTIPRISM else [ORTHO, GYRO]
                for gyrate in gyrates:
                    specs.append(Capstone(base, type, 2, elongation, gyrate))
    return specs


def _composite_specs() -> List[Spec]:
    specs = []

    def augmented(source, max_count, aligned=False):
        for count in range(max_count + 1):
            if aligned and count == 2:
                specs.append(Composite(source, augmented=2, align=PARA))
                specs.append(Composite(source, augmented=2, align=META))
            else:
                specs.append(Composite(source, augmented=count))

    augmented(Prismatic(3), 3)
    augmented(Prismatic(5), 2)
    augmented(Prismatic(6), 3, aligned=True)
    augmented(Classical(5, REGULAR, FACE), 3, aligned=True)
    augmented(Classical(3, TRUNCATE), 1)
    augmented(Classical(4, TRUNCATE, FACE), 2)
    augmented(Classical(5, TRUNCATE, FACE), 3, aligned=True)

    ico = Classical(5, REGULAR, VERTEX)
    specs += [
        Composite(ico),
        Composite(ico, diminished=1),
        Composite(ico, diminished=2, align=PARA),
        Composite(ico, diminished=2, align=META),
        Composite(ico, diminished=3),
        Composite(ico, augmented=1, diminished=3),
    ]

    rid = Classical(5, CANTELLATE)
    for gyrate in range(4):
        for diminished in range(4 - gyrate):
            if gyrate + diminished == 2:
                specs.append(Composite(rid, 0, diminished, gyrate, PARA))
                specs.append(Composite(rid, 0, diminished, gyrate, META))
            else:
                specs.append(Composite(rid, 0, diminished, gyrate))
    return specs


def _elementary_specs() -> List[Spec]:
    return [Elementary("sphenocorona"), Elementary("augmented sphenocorona")]


def _build_registry() -> "OrderedDict[str, List[Spec]]":
    registry: "OrderedDict[str, List[Spec]]" = OrderedDict()
    all_specs = (_classical_specs() + _prismatic_specs() + _capstone_specs()
                 + _composite_specs() + _elementary_specs()
                 # tetrahedral forms of the octahedron and cuboctahedron come last
                 + [Classical(3, RECTIFY), Classical(3, CANTELLATE)])
    for spec in all_specs:
        registry.setdefault(spec.canonical_name(), []).append(spec)
    return registry


_REGISTRY = _build_registry()


def names() -> List[str]:
    return list(_REGISTRY)


def specs_for(name: str) -> List[Spec]:
    return list(_REGISTRY.get(name, []))


def lookup(name: str) -> Spec:
    """Primary spec of a solid name."""
    if name not in _REGISTRY:
        raise KeyError(f"Unknown solid: {name!r}")
    return _REGISTRY[name][0]


# ═══════════════════════════════════════════════════════════════
# 2. GEOMETRY
# ═══════════════════════════════════════════════════════════════

def _primitive_builders() -> Dict[str, object]:
    table = {
        "tetrahedron": builders.build_tetrahedron,
        "cube": builders.build_cube,
        "octahedron": builders.build_octahedron,
        "dodecahedron": builders.build_dodecahedron,
        "icosahedron": builders.build_icosahedron,
        "cuboctahedron": builders.build_cuboctahedron,
        "icosidodecahedron": builders.build_icosidodecahedron,
        "rhombicuboctahedron": builders.build_rhombicuboctahedron,
        "rhombicosidodecahedron": builders.build_rhombicosidodecahedron,
        "pentagonal rotunda": builders.build_pentagonal_rotunda,
        "sphenocorona": builders.build_sphenocorona,
    }
    for n in PRISM_BASES:
        prefix = POLYGON_PREFIXES[n]
        table.setdefault(f"{prefix} prism", lambda n=n: builders.build_prism(n))
        table.setdefault(f"{prefix} antiprism", lambda n=n: builders.build_antiprism(n))
    for n in (4, 5):
        table[f"{POLYGON_PREFIXES[n]} pyramid"] = lambda n=n: builders.build_pyramid(n)
    for n in (3, 4, 5):
        table[f"{POLYGON_PREFIXES[n]} cupola"] = lambda n=n: builders.build_cupola(n)
    return table


_BUILDERS = _primitive_builders()
_GEOMETRY_CACHE: Dict[str, Polyhedron] = {}


def _start_specs(target: Spec) -> List[Spec]:
    """Simpler solids from which `target` is reached by augment / diminish."""
    if isinstance(target, Capstone):
        if target.count == 2:
            type = CAP_CUPOLA if target.type == CAP_CUPOLAROTUNDA else target.type
            return [target.with_data(count=1, gyrate=None, type=type)]
        if target.elongation:
            n = target.base if target.is_pyramid() else 2 * target.base
            return [Prismatic(n, target.elongation)]
        return []
    if isinstance(target, Composite):
        return [target.source]
    if isinstance(target, Elementary) and target.name == "augmented sphenocorona":
        return [Elementary("sphenocorona")]
    return []


def _within_bounds(target: Spec, name: str) -> bool:
    """Can the solid called `name` lie on a path towards `target`?"""
    if not isinstance(target, Composite):
        return False
    for spec in specs_for(name):
        if isinstance(spec, Composite) and spec.source == target.source:
            return (spec.augmented <= target.augmented
                    and spec.gyrate <= target.gyrate
                    and spec.diminished <= target.diminished + target.gyrate)
    return False


def _search(target: Spec, start: Spec) -> Optional[Polyhedron]:
    from ..operations import augment, diminish

    goal = target.canonical_name()
    seen = {start.canonical_name()}
    stack = [(start, geometry_of(start))]
    while stack:
        spec, geom = stack.pop()
        for op in (augment, diminish):
            if not op._candidate_specs(spec):
                continue
            for options in op.all_option_combos(spec, geom):
                result = op.apply(spec, geom, options)
                name = result.spec.canonical_name()
                if name == goal:
                    return result.result
                if name not in seen and _within_bounds(target, name):
                    seen.add(name)
                    stack.append((result.spec, result.result))
    return None


def _derive(name: str) -> Polyhedron:
    if name in _BUILDERS:
        try:
            return _BUILDERS[name]()
        except ValueError as exc:
            raise LookupError(f"Cannot build geometry for {name!r}: {exc}") from exc

    for spec in specs_for(name):
        if isinstance(spec, Classical) and spec.operation == TRUNCATE:
            from ..operations import truncate
            source = Classical(spec.family, REGULAR, spec.facet)
            return truncate.apply(source, geometry_of(source)).result

    for spec in specs_for(name):
        for start in _start_specs(spec):
            geom = _search(spec, start)
            if geom is not None:
                logger.debug("derived %s from %s", name, start.canonical_name())
                return geom

    raise LookupError(f"Cannot derive geometry for {name!r}")


def geometry_of(spec_or_name: Union[Spec, str]) -> Polyhedron:
    """Reference geometry of a catalog solid, unit edge length."""
    name = spec_or_name if isinstance(spec_or_name, str) else spec_or_name.canonical_name()
    if name not in _GEOMETRY_CACHE:
        if name not in _REGISTRY:
            raise KeyError(f"Unknown solid: {name!r}")
        _GEOMETRY_CACHE[name] = _derive(name)
    return _GEOMETRY_CACHE[name]


# ═══════════════════════════════════════════════════════════════
# 3. CLASSIFICATION
# ═══════════════════════════════════════════════════════════════

def signature(polyhedron: Polyhedron):
    """
    Face-pair signature of a solid.

    Returns:
        (face_counts, pair_types, distances) with pair_types a tuple of
        (sides_i, sides_j) sorted together with the scaled distances.
    """
    faces = polyhedron.faces
    centroids = np.array([f.centroid() for f in faces])
    dists = pdist(centroids) / polyhedron.edge_length()
    sides = [f.num_sides for f in faces]
    pairs = []
    k = 0
    for i in range(len(faces)):
        for j in range(i + 1, len(faces)):
            a, b = sorted((sides[i], sides[j]))
            pairs.append((a, b, dists[k]))
            k += 1
    pairs.sort()
    counts = tuple(sorted(polyhedron.face_counts().items()))
    return counts, tuple((a, b) for a, b, _ in pairs), np.array([d for _, _, d in pairs])


def _signatures_match(sig1, sig2) -> bool:
    return (sig1[0] == sig2[0] and sig1[1] == sig2[1]
            and bool(np.all(np.abs(sig1[2] - sig2[2]) < PRECISION)))


_SIGNATURES: Dict[str, Optional[tuple]] = {}


def spec_of(polyhedron: Polyhedron) -> Optional[Spec]:
    """Primary spec of the catalog solid congruent to `polyhedron`, or None."""
    sig = signature(polyhedron)
    for name in names():
        if name not in _SIGNATURES:
            try:
                _SIGNATURES[name] = signature(geometry_of(name))
            except LookupError as exc:
                logger.warning("spec_of: skipping %s (%s)", name, exc)
                _SIGNATURES[name] = None
        reference = _SIGNATURES[name]
        if reference is None:
            continue
        if reference[0] == sig[0] and _signatures_match(reference, sig):
            return lookup(name)
    return None

"""
Augment
=======

Attach a pyramid, cupola or rotunda to a face.

STEPS:
    1. Augmentee from the `using` option (Y3..Y5, U2..U5, R5), or the default
       for the face size: ≤ 5 sides → pyramid, otherwise cupola.
    2. Convexity guard: for every base edge, base dihedral + augmentee
       dihedral < π − PRECISION, for at least one rotational offset.
    3. Alignment (ortho / gyro) picks the offset via the rule table in
       is_aligned().
    4. Rigid transform of the underside onto the base, scaled to its side.
    5. Merge, drop base and underside, deduplicate coincident vertices.

SPEC TRANSITIONS:
    Prismatic            → elongated / gyroelongated capstone
    Capstone (mono)      → bi-capstone (cupolarotunda if types differ)
    Composite            → augmented + 1, or refills a diminished position
    sphenocorona         → augmented sphenocorona
"""

import logging
import numpy as np
from typing import Dict, List, Optional

from ..catalog import geometry_of
from ..catalog.specs import (
    Spec, Classical, Prismatic, Capstone, Composite, Elementary,
)
from ..geom.vectors import normalize, orthonormal_transform, with_origin, is_inverse
from ..polyhedra.cap import Cap, alignment_of
from ..polyhedra.polyhedron import Polyhedron, Face
from ..spec.constants import (
    PRECISION, ORTHO, GYRO, PARA, META, SELECTED, SELECTABLE,
    CAP_PYRAMID, CAP_CUPOLA, CAP_ROTUNDA, CAP_CUPOLAROTUNDA,
)
from .operation import Operation, AnimationData, UnhandledSpecError
from .utils import deduplicate_vertices, opposite_face

logger = logging.getLogger(__name__)


AUGMENTEES = {
    CAP_PYRAMID: {
        3: "tetrahedron",
        4: "square pyramid",
        5: "pentagonal pyramid",
    },
    CAP_CUPOLA: {
        2: "triangular prism",
        3: "triangular cupola",
        4: "square cupola",
        5: "pentagonal cupola",
    },
    CAP_ROTUNDA: {
        5: "pentagonal rotunda",
    },
}

USING_TYPES = {"Y": CAP_PYRAMID, "U": CAP_CUPOLA, "R": CAP_ROTUNDA}

DEFAULT_USING = {3: "Y3", 4: "Y4", 5: "Y5", 6: "U3", 8: "U4", 10: "U5"}

GYRATE_OPTS = [ORTHO, GYRO]


# ═══════════════════════════════════════════════════════════════
# 1. AUGMENTEES AND USING CODES
# ═══════════════════════════════════════════════════════════════

def is_using_code(using) -> bool:
    """Y/U/R followed by a base size."""
    return (isinstance(using, str) and len(using) > 1
            and using[0] in USING_TYPES and using[1:].isdigit())


def get_using_data(using: str):
    """"U3" → ("cupola", 3)."""
    if not is_using_code(using):
        raise ValueError(f"Unknown using code: {using!r}")
    return USING_TYPES[using[0]], int(using[1:])


def using_num_sides(using: str) -> int:
    type, base = get_using_data(using)
    return base if type == CAP_PYRAMID else 2 * base


def get_using_opt(num_sides: int, using: Optional[str] = None) -> Optional[str]:
    """The given `using` if it fits a face of this size, else the default."""
    if is_using_code(using) and using_num_sides(using) == num_sides:
        return using
    return DEFAULT_USING.get(num_sides)


def get_augmentee(type: str, num_sides: int) -> Optional[Polyhedron]:
    if type == CAP_PYRAMID:
        index = num_sides
    elif num_sides % 2 == 0:
        index = num_sides // 2
    else:
        return None
    name = AUGMENTEES[type].get(index)
    return geometry_of(name) if name else None


def _possible_augmentees(num_sides: int) -> List[Polyhedron]:
    found = (get_augmentee(t, num_sides) for t in (CAP_PYRAMID, CAP_CUPOLA, CAP_ROTUNDA))
    return [a for a in found if a is not None]


# ═══════════════════════════════════════════════════════════════
# 2. CONVEXITY GUARD
# ═══════════════════════════════════════════════════════════════

def can_augment_with(base: Face, augmentee: Optional[Polyhedron], offset: int) -> bool:
    """Would attaching `augmentee` at this offset keep the solid convex?"""
    if augmentee is None:
        return False
    n = base.num_sides
    underside = augmentee.face_with_num_sides(n)
    underside_edges = underside.edges

    for i, edge in enumerate(base.edges):
        base_angle = edge.dihedral_angle()
        augmentee_angle = underside_edges[(i - 1 + offset) % n].dihedral_angle()
        if base_angle + augmentee_angle >= np.pi - PRECISION:
            return False
    return True


def can_augment_with_type(base: Face, using: str) -> bool:
    if not is_using_code(using):
        return False
    type, _ = get_using_data(using)
    augmentee = get_augmentee(type, base.num_sides)
    return any(can_augment_with(base, augmentee, offset) for offset in (0, 1))


def can_augment(base: Face) -> bool:
    for augmentee in _possible_augmentees(base.num_sides):
        if any(can_augment_with(base, augmentee, offset) for offset in (0, 1)):
            return True
    return False


# ═══════════════════════════════════════════════════════════════
# 3. ALIGNMENT
# ═══════════════════════════════════════════════════════════════

def get_base_type(base: Face) -> str:
    sizes = {f.num_sides for f in base.adjacent_faces()}
    if sizes == {3, 4}:
        return "cupola"
    if sizes == {4}:
        return "prism"
    if sizes == {3}:
        return "pyramidOrAntiprism"
    if sizes == {3, 5}:
        return "rotunda"
    if sizes == {4, 5}:
        return "rhombicosidodecahedron"
    return "truncated"


def _is_cupola_rotunda(type1: str, type2: str) -> bool:
    return {type1, type2} == {CAP_CUPOLA, CAP_ROTUNDA}


def is_aligned(polyhedron: Polyhedron, base: Face, underside: Face,
               gyrate: Optional[str], augment_type: str) -> bool:
    """
    Whether the underside's first vertex goes on the base's first vertex.

    "ortho" means the faces next to the base and the faces next to the
    underside line up: triangles against triangles (squares against squares
    on the rhombicosidodecahedron). A truncated base is always gyro.
    """
    if augment_type == CAP_PYRAMID:
        return True
    base_type = get_base_type(base)
    if base_type == "pyramidOrAntiprism":
        return True

    caps = Cap.get_all(polyhedron)
    if base_type == "prism" and not caps:
        return True

    if base_type != "truncated" and not gyrate:
        raise ValueError(f"Must define 'gyrate' for augmenting {base_type}")

    adj_face = opposite_face(base.edges[0]) if base_type == "prism" else base.adjacent_faces()[0]
    aligned_face = underside.adjacent_faces()[-1]

    if base_type == "rhombicosidodecahedron":
        is_ortho = (adj_face.num_sides != 4) == (aligned_face.num_sides != 4)
        return is_ortho == (gyrate == ORTHO)

    is_ortho = (adj_face.num_sides != 3) == (aligned_face.num_sides != 3)

    if base_type == "truncated":
        return not is_ortho

    # ortho/gyro is decided by the tops, so a cupola against a rotunda flips
    if caps and _is_cupola_rotunda(caps[0].type, augment_type):
        return is_ortho != (gyrate == ORTHO)

    return is_ortho == (gyrate == ORTHO)


def _is_fastigium(augment_type: str, num_sides: int) -> bool:
    return augment_type == CAP_CUPOLA and num_sides == 4


# ═══════════════════════════════════════════════════════════════
# 4. GEOMETRY
# ═══════════════════════════════════════════════════════════════

def do_augment(polyhedron: Polyhedron, base: Face, augment_type: str,
               gyrate: Optional[str] = None):
    """Attach an augmentee of the given type to `base`. Returns (result, animation)."""
    n = base.num_sides
    augmentee = get_augmentee(augment_type, n)
    if augmentee is None:
        raise ValueError(f"No {augment_type} fits a face with {n} sides")
    underside = augmentee.face_with_num_sides(n)

    underside_radius = normalize(underside.vertices[0].vec - underside.centroid())
    base_is_aligned = is_aligned(
        polyhedron, base, underside,
        GYRO if _is_fastigium(augment_type, n) else gyrate,
        augment_type,
    )
    offset = 0 if base_is_aligned else 1
    base_radius = normalize(base.vertices[offset].vec - base.centroid())

    matrix = orthonormal_transform(
        underside_radius, -underside.normal(),
        base_radius, base.normal(),
    )
    transform = with_origin(base.centroid(), lambda u: matrix @ u)

    # Scale and position the augmentee so that it lines up with the base
    scale = base.side_length() / augmentee.edge_length()
    aligned = (augmentee.vertex_data - underside.centroid()) * scale + base.centroid()
    rotated = [transform(v) for v in aligned]

    new_augmentee = augmentee.with_changes(
        lambda s: s.with_vertices(rotated).without_faces([underside])
    )
    augmentee_initial = augmentee.with_vertices([base.centroid()] * augmentee.num_vertices())

    end_result = polyhedron.add_polyhedron(new_augmentee)
    animation = AnimationData(
        start=polyhedron.add_polyhedron(augmentee_initial),
        end_vertices=end_result.vertex_data,
    )
    return deduplicate_vertices(end_result.without_faces([base])), animation


# ═══════════════════════════════════════════════════════════════
# 5. SPEC TABLES
# ═══════════════════════════════════════════════════════════════

def _has_rotunda(spec: Spec) -> bool:
    if isinstance(spec, Prismatic):
        return spec.base == 10
    if isinstance(spec, Capstone):
        return spec.is_mono() and not spec.is_pyramid() and spec.is_pentagonal()
    return False


def get_using_opts(spec: Spec) -> Optional[List[str]]:
    # Triangular prism or fastigium
    if spec.canonical_name() == "triangular prism":
        return ["Y4", "U2"]
    if _has_rotunda(spec):
        return ["U5", "R5"]
    return None


def has_gyrate_opts(spec: Spec) -> bool:
    if isinstance(spec, Capstone):
        # Gyroelongated capstones are always gyro
        if spec.is_gyroelongated():
            return False
        return not spec.is_digonal() and not spec.is_pyramid()
    if isinstance(spec, Composite):
        return spec.source.canonical_name() == "rhombicosidodecahedron"
    return False


def _augment_face_sizes(spec: Spec) -> Optional[set]:
    """Face sizes that are augment positions of the spec (None: any face)."""
    if isinstance(spec, Capstone):
        return {spec.base if spec.is_pyramid() else 2 * spec.base}
    if isinstance(spec, Composite):
        source = spec.source
        name = source.canonical_name()
        if isinstance(source, Prismatic):
            return {4}
        if name == "icosahedron":
            return {3, 5}
        if name == "rhombicosidodecahedron":
            return {10}
        return {max(geometry_of(source).face_counts())}
    if isinstance(spec, Elementary):
        return {4}
    return None


def _has_augment_alignment(spec: Composite) -> bool:
    if spec.augmented != 1:
        return False
    # Only hexagonal prism has augment alignment
    if isinstance(spec.source, Prismatic):
        return spec.source.base == 6
    return isinstance(spec.source, Classical) and spec.source.is_icosahedral()


def _augment_alignment(geom: Polyhedron, face: Face) -> str:
    caps = Cap.get_all(geom)
    if len(caps) != 1:
        raise UnhandledSpecError(f"Expected a single cap, found {len(caps)}")
    return PARA if is_inverse(caps[0].boundary().normal(), face.normal()) else META


def _rid_features(geom: Polyhedron, face: Face, gyrate: Optional[str]) -> List[np.ndarray]:
    """Directions of the modified cupola positions after augmenting `face`."""
    normals = [f.normal() for f in geom.faces_with_num_sides(10) if f != face]
    normals += [cap.normal() for cap in Cap.get_all(geom) if cap.alignment() == ORTHO]
    if gyrate == ORTHO:
        normals.append(face.normal())
    return normals


class Augment(Operation):
    name = "augment"
    hit_option = "face"

    def can_apply_to(self, spec: Spec) -> bool:
        if isinstance(spec, Prismatic):
            if spec.is_antiprism() and spec.base == 3:
                return False
            return spec.base > 2
        if isinstance(spec, Capstone):
            return spec.is_mono()
        if isinstance(spec, Composite):
            source = spec.source
            name = source.canonical_name()
            if name == "rhombicosidodecahedron":
                return spec.diminished > 0
            if name == "icosahedron":
                return spec.diminished > 0 and spec.augmented == 0
            if isinstance(source, Prismatic):
                return spec.augmented < (3 if source.base % 3 == 0 else 2) and not spec.is_para()
            if isinstance(source, Classical):
                return spec.augmented < source.family - 2 and not spec.is_para()
        if isinstance(spec, Elementary):
            return spec.canonical_name() == "sphenocorona"
        return False

    def is_preferred_spec(self, spec: Spec, options: Dict) -> bool:
        face = options.get("face")
        if face is None:
            return True
        using = get_using_opt(face.num_sides, options.get("using"))
        if using is None:
            return True
        type, base = get_using_data(using)
        if base == 4 and type == CAP_PYRAMID:
            if isinstance(spec, Prismatic) and spec.is_prism():
                return False
        # for the fastigium, depend on what the using option is
        if spec.canonical_name() == "triangular prism":
            if type == CAP_CUPOLA:
                return isinstance(spec, Capstone)
            return isinstance(spec, Prismatic) if base == 3 else isinstance(spec, Composite)
        return True

    def get_result(self, spec: Spec, options: Dict) -> Spec:
        face: Face = options["face"]
        geom = face.polyhedron
        gyrate = options.get("gyrate")
        type, base = get_using_data(get_using_opt(face.num_sides, options.get("using")))

        if isinstance(spec, Prismatic):
            return Capstone(base=base, type=type, count=1, elongation=spec.type)

        if isinstance(spec, Capstone):
            return spec.with_data(
                count=2,
                gyrate=GYRO if base == 2 else gyrate,
                type=type if type == spec.type else CAP_CUPOLAROTUNDA,
            )

        if isinstance(spec, Composite):
            name = spec.source.canonical_name()
            if name == "rhombicosidodecahedron":
                align = alignment_of(_rid_features(geom, face, gyrate))
                if gyrate == ORTHO:
                    return spec.with_data(gyrate=spec.gyrate + 1,
                                          diminished=spec.diminished - 1, align=align)
                return spec.with_data(diminished=spec.diminished - 1, align=align)
            if name == "icosahedron":
                if base == 3:
                    return spec.with_data(augmented=1)
                others = [f.normal() for f in geom.faces_with_num_sides(5) if f != face]
                return spec.with_data(diminished=spec.diminished - 1,
                                      align=alignment_of(others))
            return spec.with_data(
                augmented=spec.augmented + 1,
                align=_augment_alignment(geom, face) if _has_augment_alignment(spec) else None,
            )

        if isinstance(spec, Elementary):
            return Elementary("augmented sphenocorona")

        raise UnhandledSpecError(f"No augment result for {spec!r}")

    def do_apply(self, spec: Spec, geom: Polyhedron, options: Dict):
        face = options.get("face")
        if face is None:
            raise ValueError("augment requires a 'face' option")
        using = get_using_opt(face.num_sides, options.get("using"))
        if using is None:
            raise ValueError(f"Cannot augment a face with {face.num_sides} sides")
        augment_type, _ = get_using_data(using)
        return do_augment(geom, face, augment_type, options.get("gyrate"))

    # ─── options ────────────────────────────────────────────────

    def has_options(self, spec: Spec) -> bool:
        return True

    def _face_opts(self, spec: Spec, geom: Polyhedron) -> List[Face]:
        sizes = _augment_face_sizes(spec)
        return [face for face in geom.faces
                if (sizes is None or face.num_sides in sizes) and can_augment(face)]

    def _option_combos(self, spec: Spec, geom: Polyhedron):
        gyrate_opts = GYRATE_OPTS if has_gyrate_opts(spec) else [None]
        using_opts = get_using_opts(spec) or [None]

        for face in self._face_opts(spec, geom):
            for gyrate in gyrate_opts:
                for using in using_opts:
                    if not using or can_augment_with_type(face, using):
                        yield {"face": face, "gyrate": gyrate, "using": using}

    def all_options(self, spec: Spec, geom: Polyhedron, option_name: str) -> List:
        if option_name == "gyrate":
            return list(GYRATE_OPTS) if has_gyrate_opts(spec) else []
        if option_name == "using":
            return get_using_opts(spec) or []
        if option_name == "face":
            return self._face_opts(spec, geom)
        return []

    def default_options(self, spec: Spec) -> Dict:
        using_opts = get_using_opts(spec) or []
        options = {}
        if has_gyrate_opts(spec):
            options["gyrate"] = GYRO
        if len(using_opts) > 1:
            options["using"] = using_opts[0]
        return options

    def get_hit_option(self, spec: Spec, geom: Polyhedron, point, options: Dict) -> Dict:
        if options is None:
            return {}
        face = geom.hit_face(point)
        using = options.get("using")
        if not using:
            return {"face": face} if can_augment(face) else {}
        if not can_augment_with_type(face, using):
            return {}
        return {"face": face}

    def face_selection_states(self, spec: Spec, geom: Polyhedron, options: Dict):
        selected = options.get("face")
        using = options.get("using")
        states = []
        for f in geom.faces:
            if selected is not None and f == selected:
                states.append(SELECTED)
            elif not using and can_augment(f):
                states.append(SELECTABLE)
            elif using and can_augment_with_type(f, using):
                states.append(SELECTABLE)
            else:
                states.append(None)
        return states


augment = Augment()

"""
Diminish
========

Remove a cap: every face of the cap goes, its inner vertices go, and the
boundary ring closes the hole as a single new face.

SPEC TRANSITIONS:
    bi-capstone                 → mono capstone (the other cap type remains)
    elongated mono capstone     → prism / antiprism
    augmented composite         → augmented - 1
    icosahedron composite       → diminished + 1
    rhombicosidodecahedron      → diminished + 1 (a gyrated cap: gyrate - 1)
    augmented sphenocorona      → sphenocorona
"""

import logging
import numpy as np
from typing import Dict, List, Optional

from ..catalog import specs_for
from ..catalog.specs import Spec, Prismatic, Capstone, Composite, Elementary
from ..geom.vectors import is_inverse
from ..polyhedra.cap import Cap, alignment_of
from ..polyhedra.polyhedron import Polyhedron
from ..spec.constants import (
    ORTHO, SELECTED, SELECTABLE,
    CAP_PYRAMID, CAP_CUPOLA, CAP_ROTUNDA, CAP_CUPOLAROTUNDA,
)
from .operation import Operation, AnimationData, UnhandledSpecError
from .utils import remove_extraneous_vertices

logger = logging.getLogger(__name__)


def do_diminish(polyhedron: Polyhedron, cap: Cap):
    """Replace the cap by its boundary face. Returns (result, animation)."""
    boundary = cap.boundary()
    result = remove_extraneous_vertices(polyhedron.with_changes(
        lambda s: s.without_faces(cap.faces()).add_faces([boundary.value])
    ))

    end_vertices = np.array(polyhedron.vertex_data)
    end_vertices[cap.inner_vertices()] = boundary.centroid()
    return result, AnimationData(start=polyhedron, end_vertices=end_vertices)


def _cap_types(spec: Capstone) -> set:
    if spec.type == CAP_CUPOLAROTUNDA:
        return {CAP_CUPOLA, CAP_ROTUNDA}
    return {spec.type}


def _boundary_size(spec: Capstone) -> int:
    return spec.base if spec.is_pyramid() else 2 * spec.base


def _is_main_cap(spec: Capstone, cap: Cap) -> bool:
    """Is `cap` one of the caps the capstone is named after?"""
    size = _boundary_size(spec)
    if cap.type not in _cap_types(spec) or cap.boundary().num_sides != size:
        return False
    # the cap sits on the axis: opposite the free base face or the other cap
    normal = cap.normal()
    if spec.count == 2:
        opposite = [c.normal() for c in Cap.get_all(cap.polyhedron)
                    if c != cap and c.type in _cap_types(spec)
                    and c.boundary().num_sides == size]
    else:
        face_ids = {f.index for f in cap.faces()}
        opposite = [f.normal() for f in cap.polyhedron.faces_with_num_sides(size)
                    if f.index not in face_ids]
    return any(is_inverse(n, normal) for n in opposite)


def _remaining_normals(caps: List[Cap], removed: Cap) -> List[np.ndarray]:
    return [c.normal() for c in caps if c != removed]


class Diminish(Operation):
    name = "diminish"
    hit_option = "cap"

    def can_apply_to(self, spec: Spec) -> bool:
        if isinstance(spec, Capstone):
            return spec.count == 2 or spec.is_elongated()
        if isinstance(spec, Composite):
            name = spec.source.canonical_name()
            if name == "icosahedron":
                if spec.diminished == 2 and spec.is_para():
                    return False
                return spec.augmented > 0 or spec.diminished < 3
            if name == "rhombicosidodecahedron":
                g, d = spec.gyrate, spec.diminished
                return g + d < 3 or (g > 0 and d < 3)
            return spec.augmented > 0
        if isinstance(spec, Elementary):
            return spec.canonical_name() == "augmented sphenocorona"
        return False

    def is_preferred_spec(self, spec: Spec, options: Dict) -> bool:
        cap = options.get("cap")
        if cap is None or not isinstance(spec, Capstone):
            return True
        return _is_main_cap(spec, cap)

    def get_result(self, spec: Spec, options: Dict) -> Spec:
        cap: Cap = options["cap"]
        geom = cap.polyhedron

        if isinstance(spec, Capstone):
            if spec.count == 2:
                type = spec.type
                if type == CAP_CUPOLAROTUNDA:
                    type = CAP_ROTUNDA if cap.type == CAP_CUPOLA else CAP_CUPOLA
                return spec.with_data(count=1, type=type, gyrate=None)
            if spec.is_elongated():
                return Prismatic(_boundary_size(spec), spec.elongation)

        if isinstance(spec, Composite):
            name = spec.source.canonical_name()
            if name == "icosahedron":
                if cap.boundary().num_sides == 3 and spec.augmented > 0:
                    return spec.with_data(augmented=spec.augmented - 1)
                normals = [f.normal() for f in geom.faces_with_num_sides(5)]
                normals.append(cap.normal())
                return spec.with_data(diminished=spec.diminished + 1,
                                      align=alignment_of(normals))
            if name == "rhombicosidodecahedron":
                normals = [f.normal() for f in geom.faces_with_num_sides(10)]
                normals.append(cap.normal())
                normals += [c.normal() for c in Cap.get_all(geom)
                            if c != cap and c.alignment() == ORTHO]
                align = alignment_of(normals)
                if cap.alignment() == ORTHO:
                    return spec.with_data(gyrate=spec.gyrate - 1,
                                          diminished=spec.diminished + 1, align=align)
                return spec.with_data(diminished=spec.diminished + 1, align=align)
            if spec.augmented > 0:
                caps = self._cap_opts(spec, geom)
                return spec.with_data(augmented=spec.augmented - 1,
                                      align=alignment_of(_remaining_normals(caps, cap)))

        if isinstance(spec, Elementary) and spec.name == "augmented sphenocorona":
            return Elementary("sphenocorona")

        raise UnhandledSpecError(f"No diminish result for {spec!r}")

    def do_apply(self, spec: Spec, geom: Polyhedron, options: Dict):
        cap = options.get("cap")
        if cap is None:
            raise ValueError("diminish requires a 'cap' option")
        return do_diminish(geom, cap)

    # ─── options ────────────────────────────────────────────────

    def has_options(self, spec: Spec) -> bool:
        return True

    def _cap_opts(self, spec: Spec, geom: Polyhedron) -> List[Cap]:
        """Caps that are diminish positions of the spec."""
        caps = Cap.get_all(geom)
        if isinstance(spec, Capstone):
            result = [c for c in caps if _is_main_cap(spec, c)]
            # caps off the axis belong to another reading of the same solid
            for other in specs_for(spec.canonical_name()):
                if not isinstance(other, Capstone) and self.can_apply_to(other):
                    result += [c for c in self._cap_opts(other, geom) if c not in result]
            return result
        if isinstance(spec, Composite):
            name = spec.source.canonical_name()
            if name == "icosahedron":
                sizes = set()
                if spec.diminished < 3:
                    sizes.add(5)
                if spec.augmented > 0:
                    sizes.add(3)
                return [c for c in caps
                        if c.type == CAP_PYRAMID and c.boundary().num_sides in sizes]
            if name == "rhombicosidodecahedron":
                cupolae = [c for c in caps if c.type == CAP_CUPOLA]
                if spec.gyrate + spec.diminished >= 3:
                    return [c for c in cupolae if c.alignment() == ORTHO]
                return cupolae
            if isinstance(spec.source, Prismatic):
                return [c for c in caps if c.boundary().num_sides == 4]
            size = max(f.num_sides for f in geom.faces)
            return [c for c in caps if c.boundary().num_sides == size]
        if isinstance(spec, Elementary):
            return [c for c in caps if c.boundary().num_sides == 4]
        return caps

    def _option_combos(self, spec: Spec, geom: Polyhedron):
        for cap in self._cap_opts(spec, geom):
            yield {"cap": cap}

    def all_options(self, spec: Spec, geom: Polyhedron, option_name: str) -> List:
        if option_name == "cap":
            return self._cap_opts(spec, geom)
        return []

    def get_hit_option(self, spec: Spec, geom: Polyhedron, point, options: Dict) -> Dict:
        if options is None:
            return {}
        cap = Cap.find(geom, point)
        if cap is None or cap not in self._cap_opts(spec, geom):
            return {}
        return {"cap": cap}

    def face_selection_states(self, spec: Spec, geom: Polyhedron, options: Dict):
        selected: Optional[Cap] = options.get("cap")
        selected_faces = set(selected.faces()) if selected is not None else set()
        selectable = set()
        for cap in self._cap_opts(spec, geom):
            selectable.update(cap.faces())
        states = []
        for f in geom.faces:
            if f in selected_faces:
                states.append(SELECTED)
            elif f in selectable:
                states.append(SELECTABLE)
            else:
                states.append(None)
        return states


diminish = Diminish()

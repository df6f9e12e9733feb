"""
Operation Framework
===================

An operation is a stateless transform from one CRF solid to another.

    result = augment.apply(spec, geom, {"face": face, "using": "U3"})
    result.result      → new Polyhedron
    result.spec        → spec of the new solid
    result.animation   → AnimationData(start, end_vertices) for playback

Subclasses fill in the capability set:

    can_apply_to(spec)                   eligibility from classification alone
    get_result(spec, options)            spec transition table
    do_apply(spec, geom, options)        geometry: (polyhedron, animation)
    _option_combos(spec, geom)           generator behind all_option_combos
    ... plus optional hooks for options, hit testing and face selection.

Options are plain dicts. Invalid interactive input yields {} / None, never an
exception. A transition the result table does not cover raises
UnhandledSpecError.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..catalog import specs_for
from ..catalog.specs import Spec
from ..polyhedra.polyhedron import Polyhedron

logger = logging.getLogger(__name__)


class UnhandledSpecError(RuntimeError):
    """The result table has no entry for this spec/option combination."""


@dataclass
class AnimationData:
    """Start solid plus the vertex positions to interpolate towards."""

    start: Polyhedron
    end_vertices: np.ndarray


@dataclass
class OperationResult:
    result: Polyhedron
    spec: Spec
    animation: Optional[AnimationData] = None


class OptionCombos:
    """
    Re-iterable view over option combinations.

    Every iter() re-enumerates from the geometry, so the combinations can be
    walked any number of times.
    """

    def __init__(self, factory: Callable[[], Iterable[Dict]]):
        self._factory = factory

    def __iter__(self) -> Iterator[Dict]:
        return iter(self._factory())


class Operation:
    """Base class of all operations."""

    name: str = ""
    hit_option: Optional[str] = None

    # ─── eligibility and result ─────────────────────────────────

    def can_apply_to(self, spec: Spec) -> bool:
        raise NotImplementedError

    def get_result(self, spec: Spec, options: Dict) -> Spec:
        raise NotImplementedError

    def do_apply(self, spec: Spec, geom: Polyhedron,
                 options: Dict) -> Tuple[Polyhedron, Optional[AnimationData]]:
        raise NotImplementedError

    def is_preferred_spec(self, spec: Spec, options: Dict) -> bool:
        return True

    # ─── options ────────────────────────────────────────────────

    def has_options(self, spec: Spec) -> bool:
        return False

    def _option_combos(self, spec: Spec, geom: Polyhedron) -> Iterable[Dict]:
        yield {}

    def all_option_combos(self, spec: Spec, geom: Polyhedron) -> OptionCombos:
        return OptionCombos(lambda: self._option_combos(spec, geom))

    def all_options(self, spec: Spec, geom: Polyhedron, option_name: str) -> List:
        return []

    def default_options(self, spec: Spec) -> Dict:
        return {}

    def get_hit_option(self, spec: Spec, geom: Polyhedron, point, options: Dict) -> Dict:
        return {}

    def face_selection_states(self, spec: Spec, geom: Polyhedron,
                              options: Dict) -> List[Optional[str]]:
        return [None] * geom.num_faces()

    # ─── public entry point ─────────────────────────────────────

    def _candidate_specs(self, spec: Spec) -> List[Spec]:
        candidates = [s for s in specs_for(spec.canonical_name()) if self.can_apply_to(s)]
        if not candidates and self.can_apply_to(spec):
            candidates = [spec]
        return candidates

    def apply(self, spec: Spec, geom: Polyhedron, options: Optional[Dict] = None) -> OperationResult:
        """
        Apply the operation to a solid.

        Args:
            spec: classification of `geom`
            geom: the solid
            options: operation options; missing keys take default values

        Returns:
            OperationResult with the new solid, its spec and animation data

        Raises:
            ValueError: if the operation does not apply to the solid
            UnhandledSpecError: if the result cannot be classified
        """
        merged = dict(self.default_options(spec))
        merged.update({k: v for k, v in (options or {}).items() if v is not None})

        candidates = self._candidate_specs(spec)
        if not candidates:
            raise ValueError(f"{self.name} cannot be applied to {spec.canonical_name()}")
        chosen = next((s for s in candidates if self.is_preferred_spec(s, merged)),
                      candidates[0])

        result, animation = self.do_apply(chosen, geom, merged)
        new_spec = self.get_result(chosen, merged)
        logger.debug("%s: %s → %s (%r)", self.name, chosen.canonical_name(),
                     new_spec.canonical_name(), result)
        return OperationResult(result, new_spec, animation)

"""Operations that take one CRF solid to another."""

from .operation import (
    Operation,
    OperationResult,
    AnimationData,
    OptionCombos,
    UnhandledSpecError,
)
from .utils import deduplicate_vertices, remove_extraneous_vertices, opposite_face
from .augment import augment
from .diminish import diminish
from .truncate import truncate, rectify

OPERATIONS = {op.name: op for op in (augment, diminish, truncate, rectify)}

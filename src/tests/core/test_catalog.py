"""
Catalog Tests
=============

Spec naming, normalization of irrelevant fields, the name registry, derived
reference geometry and classification by signature.

Run: python -m pytest tests/core/test_catalog.py -v
"""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from crf_math.catalog import (
    Classical,
    Prismatic,
    Capstone,
    Composite,
    Elementary,
    PRISM,
    ANTIPRISM,
    REGULAR,
    TRUNCATE,
    RECTIFY,
    CANTELLATE,
    FACE,
    VERTEX,
    lookup,
    specs_for,
    names,
    geometry_of,
    spec_of,
    signature,
)
import crf_math.catalog.catalog as catalog_module
from crf_math.spec import (
    validate_solid,
    ORTHO,
    GYRO,
    PARA,
    META,
    CAP_PYRAMID,
    CAP_CUPOLA,
    CAP_ROTUNDA,
    CAP_CUPOLAROTUNDA,
)


ICO = Classical(5, REGULAR, VERTEX)
RID = Classical(5, CANTELLATE)


# =============================================================================
# TEST A: Spec names
# =============================================================================

@pytest.mark.parametrize("spec,name", [
    (Classical(3), "tetrahedron"),
    (Classical(3, RECTIFY), "octahedron"),
    (Classical(3, CANTELLATE), "cuboctahedron"),
    (Classical(4, TRUNCATE, VERTEX), "truncated octahedron"),
    (Classical(5, TRUNCATE, FACE), "truncated dodecahedron"),
    (Prismatic(4), "cube"),
    (Prismatic(3, ANTIPRISM), "octahedron"),
    (Prismatic(8, ANTIPRISM), "octagonal antiprism"),
    (Capstone(3), "tetrahedron"),
    (Capstone(5, CAP_PYRAMID, 1, ANTIPRISM), "gyroelongated pentagonal pyramid"),
    (Capstone(4, CAP_PYRAMID, 2, PRISM), "elongated square bipyramid"),
    (Capstone(2, CAP_CUPOLA, 1), "triangular prism"),
    (Capstone(2, CAP_CUPOLA, 2, None, GYRO), "gyrobifastigium"),
    (Capstone(3, CAP_CUPOLA, 2, None, ORTHO), "triangular orthobicupola"),
    (Capstone(4, CAP_CUPOLA, 2, PRISM, GYRO), "elongated square gyrobicupola"),
    (Capstone(4, CAP_CUPOLA, 2, PRISM, ORTHO), "rhombicuboctahedron"),
    (Capstone(5, CAP_ROTUNDA, 2, None, ORTHO), "pentagonal orthobirotunda"),
    (Capstone(5, CAP_CUPOLAROTUNDA, 2, PRISM, GYRO), "elongated pentagonal gyrocupolarotunda"),
    (Capstone(5, CAP_CUPOLAROTUNDA, 2, ANTIPRISM), "gyroelongated pentagonal cupolarotunda"),
    (Composite(Prismatic(3), 2), "biaugmented triangular prism"),
    (Composite(Prismatic(6), 2, align=PARA), "parabiaugmented hexagonal prism"),
    (Composite(Classical(5, REGULAR, FACE), 3), "triaugmented dodecahedron"),
    (Composite(Classical(4, TRUNCATE, FACE), 1), "augmented truncated cube"),
    (Composite(ICO, diminished=2, align=PARA), "pentagonal antiprism"),
    (Composite(ICO, diminished=2, align=META), "metabidiminished icosahedron"),
    (Composite(ICO, augmented=1, diminished=3), "augmented tridiminished icosahedron"),
    (Composite(RID, gyrate=1, diminished=1, align=PARA), "paragyrate diminished rhombicosidodecahedron"),
    (Composite(RID, gyrate=2, diminished=1), "bigyrate diminished rhombicosidodecahedron"),
    (Composite(RID, diminished=3), "tridiminished rhombicosidodecahedron"),
    (Elementary("sphenocorona"), "sphenocorona"),
])
def test_canonical_names(spec, name):
    """A1: Spec → canonical name."""
    assert spec.canonical_name() == name
    assert str(spec) == name


# =============================================================================
# TEST B: Irrelevant fields are cleared
# =============================================================================

def test_classical_facet_cleared():
    """B1: Tetrahedral and rectified solids have no facet."""
    assert Classical(3, TRUNCATE, FACE) == Classical(3, TRUNCATE)
    assert Classical(4, RECTIFY, VERTEX).facet is None


def test_capstone_gyrate_cleared():
    """B2: gyrate only matters for two cups on a prism or nothing."""
    assert Capstone(4, CAP_CUPOLA, 1, None, ORTHO).gyrate is None
    assert Capstone(4, CAP_PYRAMID, 2, None, GYRO).gyrate is None
    assert Capstone(4, CAP_CUPOLA, 2, ANTIPRISM, GYRO).gyrate is None
    assert Capstone(4, CAP_CUPOLA, 2, PRISM, GYRO).gyrate == GYRO


def test_composite_align_cleared():
    """B3: para/meta only where two modified positions can be opposite."""
    assert Composite(Prismatic(3), 1, align=PARA) == Composite(Prismatic(3), 1)
    assert Composite(Prismatic(6), 3, align=META).align is None
    assert Composite(Prismatic(6), 2, align=META).is_meta()
    assert Composite(RID, gyrate=1, diminished=1, align=PARA).is_para()
    assert Composite(ICO, diminished=1, align=PARA).align is None


def test_with_data_returns_new_spec():
    """B4: Specs are values: with_data never mutates."""
    spec = Capstone(3, CAP_CUPOLA, 1)
    other = spec.with_data(count=2, gyrate=ORTHO)
    assert spec.count == 1
    assert other.count == 2 and other.gyrate == ORTHO
    with pytest.raises(FrozenInstanceError):
        spec.count = 3


# =============================================================================
# TEST C: Registry
# =============================================================================

def test_lookup_primary_spec():
    """C1: The first registered spec of a name is the primary one."""
    assert lookup("cube") == Classical(4, REGULAR, FACE)
    assert lookup("octahedron") == Classical(4, REGULAR, VERTEX)
    assert lookup("triangular prism") == Prismatic(3)
    assert lookup("gyrobifastigium") == Capstone(2, CAP_CUPOLA, 2, None, GYRO)


def test_lookup_unknown():
    """C2: Unknown names raise KeyError."""
    with pytest.raises(KeyError, match="Unknown solid"):
        lookup("great stellated dodecahedron")
    assert specs_for("great stellated dodecahedron") == []


def test_specs_for_shared_names():
    """C3: One solid can be read several ways."""
    cube = specs_for("cube")
    assert Classical(4, REGULAR, FACE) in cube
    assert Prismatic(4) in cube

    octahedron = specs_for("octahedron")
    assert Prismatic(3, ANTIPRISM) in octahedron
    assert Capstone(4, CAP_PYRAMID, 2) in octahedron
    assert octahedron[-1] == Classical(3, RECTIFY)

    prism = specs_for("triangular prism")
    assert prism == [Prismatic(3), Capstone(2, CAP_CUPOLA, 1), Composite(Prismatic(3))]


def test_names_cover_reference_set():
    """C4: A sample of names across every spec kind."""
    all_names = set(names())
    for name in ("tetrahedron", "truncated icosahedron", "decagonal antiprism",
                 "elongated pentagonal orthocupolarotunda", "gyroelongated square bicupola",
                 "triaugmented hexagonal prism", "parabiaugmented dodecahedron",
                 "augmented tridiminished icosahedron",
                 "parabigyrate rhombicosidodecahedron", "trigyrate rhombicosidodecahedron",
                 "augmented sphenocorona"):
        assert name in all_names, name
    assert len(all_names) == len(names())


def test_every_name_has_primary_spec():
    """C5: Every registered name round-trips through its primary spec."""
    for name in names():
        assert lookup(name).canonical_name() == name


# =============================================================================
# TEST D: Reference geometry
# =============================================================================

@pytest.mark.parametrize("name,counts", [
    ("triangular bipyramid", {3: 6}),
    ("elongated triangular pyramid", {3: 4, 4: 3}),
    ("gyroelongated square pyramid", {3: 12, 4: 1}),
    ("gyrobifastigium", {3: 4, 4: 4}),
    ("triangular orthobicupola", {3: 8, 4: 6}),
    ("truncated tetrahedron", {3: 4, 6: 4}),
    ("augmented triangular prism", {3: 6, 4: 2}),
    ("metabiaugmented hexagonal prism", {3: 8, 4: 4, 6: 2}),
    ("augmented sphenocorona", {3: 16, 4: 1}),
])
def test_derived_geometry(name, counts):
    """D1: Derived solids have the expected faces and satisfy the contract."""
    poly = geometry_of(name)
    assert poly.face_counts() == counts
    is_valid, errors = validate_solid(poly, strict=False)
    assert is_valid, f"{name}: {errors}"


def test_geometry_cached():
    """D2: Reference geometry is built once."""
    assert geometry_of("cube") is geometry_of(lookup("cube"))


def test_geometry_unknown():
    """D3: No geometry for names outside the catalog."""
    with pytest.raises(KeyError):
        geometry_of("snub cube")


def test_geometry_unit_edge():
    """D4: Derived geometry keeps unit edges."""
    poly = geometry_of("elongated square bipyramid")
    lengths = np.array([edge.length() for edge in poly.edges])
    assert np.allclose(lengths, 1.0, atol=1e-6)


# =============================================================================
# TEST E: Classification
# =============================================================================

@pytest.mark.parametrize("name", [
    "tetrahedron", "cube", "octahedron", "truncated cube",
    "icosidodecahedron", "pentagonal prism", "square antiprism",
])
def test_spec_of_reference(name):
    """E1: Classifying reference geometry gives its own name back."""
    spec = spec_of(geometry_of(name))
    assert spec is not None
    assert spec.canonical_name() == name


def test_spec_of_scale_and_position_invariant():
    """E2: Moving and scaling a solid does not change its classification."""
    cube = geometry_of("cube")
    moved = cube.with_vertices(cube.vertex_data * 3.5 + np.array([1.0, -2.0, 0.5]))
    assert spec_of(moved) == lookup("cube")


@pytest.mark.parametrize("name", names())
def test_spec_of_every_reference_solid(name):
    """E3: Every catalog solid derives, satisfies the contract and classifies as itself."""
    poly = geometry_of(name)
    is_valid, errors = validate_solid(poly, strict=False)
    assert is_valid, f"{name}: {errors}"

    spec = spec_of(poly)
    assert spec is not None, name
    assert spec.canonical_name() == name
    assert spec_of(geometry_of(spec)) == spec


def test_signature_distinguishes_ortho_gyro():
    """E4: Same faces, different arrangement → different signatures."""
    ortho = signature(geometry_of("triangular orthobicupola"))
    gyro = signature(geometry_of("cuboctahedron"))
    assert ortho[0] == gyro[0]
    assert ortho[1] == gyro[1]
    assert not np.allclose(ortho[2], gyro[2], atol=1e-3)


def test_spec_of_skips_unbuildable_solid(monkeypatch):
    """E5: A reference solid whose builder fails is skipped, not fatal."""
    target = geometry_of("augmented sphenocorona")

    def broken():
        raise ValueError("sphenocorona: expected V=10, F=14, got V=9, F=13")

    cache = {k: v for k, v in catalog_module._GEOMETRY_CACHE.items() if k != "sphenocorona"}
    monkeypatch.setattr(catalog_module, "_GEOMETRY_CACHE", cache)
    monkeypatch.setattr(catalog_module, "_SIGNATURES", {})
    monkeypatch.setitem(catalog_module._BUILDERS, "sphenocorona", broken)

    with pytest.raises(LookupError, match="sphenocorona"):
        geometry_of("sphenocorona")
    assert spec_of(target) == lookup("augmented sphenocorona")

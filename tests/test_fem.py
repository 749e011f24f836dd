"""
TEST: Fixed-End Moment Library
==============================

PURPOSE:
--------
Check every load formula against the closed-form textbook values, and
check that the numerical paths (partial UDL by segments, partial VDL by
Gauss quadrature) land on the exact answers they approximate.

Convention reminder: downward loads give femStart < 0 and femEnd > 0.
"""

import numpy as np
import pytest

from beamframe.fem import (
    fem_breakdown,
    load_effects_left_of,
    moment_fem,
    point_load_fem,
    resultant,
    simple_support_reactions,
    span_fem,
    udl_fem,
    vdl_fem,
)
from beamframe.model import MomentLoad, PointLoad, UniformLoad, VaryingLoad


# Exact FEM of a UDL w over the left half of a span L
def _half_span_udl(w, L):
    return -11.0 * w * L * L / 192.0, 5.0 * w * L * L / 192.0


def test_point_load_at_midspan():
    """
    WHAT IS THIS TEST?
    ==================
    P = 100 kN at the middle of L = 10 m:
        femStart = -Pab²/L² = -125,   femEnd = +Pa²b/L² = +125  (= ∓PL/8)
    """
    fem_start, fem_end = point_load_fem(100.0, 10.0, 5.0)
    assert np.isclose(fem_start, -125.0)
    assert np.isclose(fem_end, 125.0)


def test_point_load_off_center():
    # a = 2, b = 8: -100·2·64/100 = -128,  +100·4·8/100 = +32
    fem_start, fem_end = point_load_fem(100.0, 10.0, 2.0)
    assert np.isclose(fem_start, -128.0)
    assert np.isclose(fem_end, 32.0)


def test_full_span_udl():
    fem_start, fem_end = udl_fem(10.0, 6.0)
    assert np.isclose(fem_start, -30.0)
    assert np.isclose(fem_end, 30.0)


def test_udl_covering_most_of_the_span_uses_full_span_formula():
    # 5.8 / 6.0 ≥ 95%
    fem_start, fem_end = udl_fem(10.0, 6.0, 0.0, 5.8)
    assert np.isclose(fem_start, -30.0)
    assert np.isclose(fem_end, 30.0)


def test_partial_udl_segments_approach_exact_result():
    """
    WHAT IS THIS TEST?
    ==================
    UDL over the left half of the span. The 20-segment midpoint rule is
    an approximation; it should be within a fraction of a percent of
        femStart = -11wL²/192,   femEnd = +5wL²/192
    """
    w, L = 10.0, 6.0
    exact_start, exact_end = _half_span_udl(w, L)

    fem_start, fem_end = udl_fem(w, L, 0.0, 3.0)

    assert fem_start == pytest.approx(exact_start, rel=2e-3)
    assert fem_end == pytest.approx(exact_end, rel=2e-3)


def test_full_span_triangle_rising():
    # 0 → 12 kN/m over 5 m: -wL²/20 = -15,  +wL²/30 = +10
    fem_start, fem_end = vdl_fem(0.0, 12.0, 5.0)
    assert np.isclose(fem_start, -15.0)
    assert np.isclose(fem_end, 10.0)


def test_full_span_triangle_falling():
    fem_start, fem_end = vdl_fem(12.0, 0.0, 5.0)
    assert np.isclose(fem_start, -10.0)
    assert np.isclose(fem_end, 15.0)


@pytest.mark.parametrize("L", [3.0, 5.0, 8.0])
def test_constant_vdl_matches_udl(L):
    w = 7.5
    np.testing.assert_allclose(vdl_fem(w, w, L), udl_fem(w, L), atol=1e-2)


def test_trapezoid_is_rectangle_plus_triangle():
    L = 6.0
    rect = np.array(udl_fem(4.0, L))
    tri = np.array(vdl_fem(0.0, 6.0, L))
    np.testing.assert_allclose(vdl_fem(4.0, 10.0, L), rect + tri, atol=1e-9)


def test_partial_vdl_quadrature_is_exact_for_constant_load():
    """
    The Gauss rule integrates the polynomial kernels exactly, so a
    constant "varying" load over half the span reproduces the closed form.
    """
    w, L = 10.0, 6.0
    exact_start, exact_end = _half_span_udl(w, L)

    fem_start, fem_end = vdl_fem(w, w, L, 0.0, 3.0)

    assert np.isclose(fem_start, exact_start, atol=1e-9)
    assert np.isclose(fem_end, exact_end, atol=1e-9)


def test_zero_length_region_contributes_nothing():
    assert udl_fem(10.0, 6.0, 2.0, 2.0) == (0.0, 0.0)
    assert vdl_fem(5.0, 10.0, 6.0, 2.0, 2.0) == (0.0, 0.0)


def test_applied_moment_at_midspan():
    # M = 100 at a = 5 of L = 10:  M·b(L-3a)/L² = -25,  M·a(3a-L)/L² = +25
    fem_start, fem_end = moment_fem(100.0, 10.0, 5.0)
    assert np.isclose(fem_start, -25.0)
    assert np.isclose(fem_end, 25.0)


def test_applied_moment_at_quarter_span():
    fem_start, fem_end = moment_fem(100.0, 10.0, 2.5)
    assert np.isclose(fem_start, 18.75)
    assert np.isclose(fem_end, -6.25)


def test_applied_moment_sign_reverses_with_direction():
    pos = moment_fem(100.0, 10.0, 5.0)
    neg = moment_fem(-100.0, 10.0, 5.0)
    np.testing.assert_allclose(neg, [-pos[0], -pos[1]])


def test_span_fem_sums_loads():
    L = 6.0
    loads = [
        PointLoad("P1", "S1", 20.0, 3.0),
        UniformLoad("W1", "S1", 10.0),
    ]
    fem_start, fem_end = span_fem(L, loads)
    # -PL/8 - wL²/12 = -15 - 30
    assert np.isclose(fem_start, -45.0)
    assert np.isclose(fem_end, 45.0)


def test_breakdown_describes_each_load():
    terms = fem_breakdown(5.0, [
        PointLoad("P1", "S1", 10.0, 2.5),
        VaryingLoad("V1", "S1", 0.0, 6.0),
        MomentLoad("M1", "S1", 4.0, 1.0),
    ])
    assert [t.load_id for t in terms] == ["P1", "V1", "M1"]
    assert [t.load_type for t in terms] == ["Point Load", "Triangular Load", "Applied Moment"]
    assert all(t.formula for t in terms)


# ---------------------------------------------------------------------------
# Simply-supported statics
# ---------------------------------------------------------------------------

def test_trapezoid_resultant_position():
    # Triangle 0 → w over 6 m: force 3w, centroid at 2/3 of the length
    force, x = resultant(VaryingLoad("V", "S", 0.0, 10.0), 6.0)
    assert np.isclose(force, 30.0)
    assert np.isclose(x, 4.0)


def test_simple_reactions_sum_to_load():
    L = 8.0
    for load in [
        PointLoad("P", "S", 12.0, 2.0),
        UniformLoad("U", "S", 5.0, 1.0, 6.0),
        VaryingLoad("V", "S", 2.0, 9.0, 0.5, 7.5),
    ]:
        r_start, r_end = simple_support_reactions(load, L)
        assert np.isclose(r_start + r_end, resultant(load, L)[0])


def test_couple_reactions_form_opposing_pair():
    r_start, r_end = simple_support_reactions(MomentLoad("M", "S", 12.0, 1.0), 4.0)
    assert np.isclose(r_start, 3.0)
    assert np.isclose(r_end, -3.0)


def test_load_effects_beyond_the_load_are_the_whole_load():
    load = UniformLoad("U", "S", 10.0, 1.0, 3.0)
    dv, dm = load_effects_left_of(load, 5.0, 6.0)
    assert np.isclose(dv, 20.0)
    assert np.isclose(dm, 20.0 * (5.0 - 2.0))

    assert load_effects_left_of(load, 0.5, 6.0) == (0.0, 0.0)

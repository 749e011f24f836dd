"""
TEST: Continuous Beam (Slope-Deflection)
========================================

PURPOSE:
--------
Validate ContinuousBeamSolver against hand calculations:

1. Simply-supported span, midpoint load: reactions P/2, M_max = PL/4
2. Fixed-fixed span, UDL: end moments ∓wL²/12, no unknowns at all
3. Two equal spans, UDL on one: M_B = wL²/16 (three-moment equation)
4. Middle support settlement Δ: chord rotation only, no fixed node
5. Propped cantilever, prop settles: M_A = 3EIΔ/L²
6. Stability pre-check and input validation

Units: m, kN, kN·m throughout.
"""

import numpy as np
import pytest

from beamframe import (
    BeamNode,
    ContinuousBeam,
    ContinuousBeamSolver,
    InputError,
    Rigidity,
    Span,
    SupportType,
    UnstableStructure,
    solve_continuous_beam,
)
from beamframe.model import MomentLoad, PointLoad, UniformLoad, VaryingLoad

EI = 50000.0


def _two_span_beam(loads=(), settlement_b=0.0):
    nodes = [
        BeamNode("A", 0.0, SupportType.PINNED),
        BeamNode("B", 5.0, SupportType.PINNED, settlement=settlement_b),
        BeamNode("C", 10.0, SupportType.ROLLER),
    ]
    spans = [
        Span("S1", "A", "B", rigidity=Rigidity.direct(EI)),
        Span("S2", "B", "C", rigidity=Rigidity.direct(EI)),
    ]
    return ContinuousBeam(nodes, spans, loads)


def test_simply_supported_midpoint_load():
    """
    WHAT IS THIS TEST?
    ==================
    P = 10 kN at the middle of a 4 m simple span.

    Expected:
        R_A = R_B = P/2 = 5 kN
        M_max = PL/4 = 10 kN·m at x = 2 m
        end moments 0 (both ends pinned)
        θ_A = PL²/(16EI) = 2e-4 rad
    """
    P, L = 10.0, 4.0
    beam = ContinuousBeam(
        nodes=[BeamNode("A", 0.0, SupportType.PINNED), BeamNode("B", L, SupportType.ROLLER)],
        spans=[Span("S1", "A", "B", rigidity=Rigidity.direct(EI))],
        loads=[PointLoad("P1", "S1", P, L / 2)],
    )

    result = ContinuousBeamSolver(beam).solve()

    em = result.span_moments("S1")
    assert np.isclose(em.fem_start, -P * L / 8)
    assert np.isclose(em.m_start, 0.0, atol=1e-9)
    assert np.isclose(em.m_end, 0.0, atol=1e-9)

    assert np.isclose(result.reaction("A").vertical, P / 2)
    assert np.isclose(result.reaction("B").vertical, P / 2)
    assert result.reaction("A").moment is None

    assert np.isclose(result.max_moment.value, P * L / 4)
    assert np.isclose(result.max_moment.position, L / 2)
    assert np.isclose(abs(result.max_shear.value), P / 2)

    assert np.isclose(abs(result.rotation("A")), P * L ** 2 / (16 * EI))
    assert np.isclose(result.rotation("A"), -result.rotation("B"))
    print("✓ Simple span: R = P/2, M_max = PL/4")


def test_fixed_fixed_udl_has_no_unknowns():
    w, L = 10.0, 6.0
    beam = ContinuousBeam(
        nodes=[BeamNode("A", 0.0, SupportType.FIXED), BeamNode("B", L, SupportType.FIXED)],
        spans=[Span("S1", "A", "B")],
        loads=[UniformLoad("W1", "S1", w)],
    )

    result = solve_continuous_beam(beam)

    em = result.span_moments("S1")
    assert np.isclose(em.m_start, -w * L ** 2 / 12)
    assert np.isclose(em.m_end, w * L ** 2 / 12)
    assert result.rotation("A") == 0.0 and result.rotation("B") == 0.0

    for node_id in ("A", "B"):
        assert np.isclose(result.reaction(node_id).vertical, w * L / 2)
    assert np.isclose(result.reaction("A").moment, -w * L ** 2 / 12)
    assert np.isclose(result.reaction("B").moment, w * L ** 2 / 12)

    solve = result.calculation_log.section("5. Solve for Joint Rotations")
    assert "All rotations are known" in solve.steps[0].description


def test_interior_fixed_support_moment_sums_both_spans():
    """
    Pinned A ── 5 m ── fixed B ── 5 m ── roller C, UDL 10 on AB, 4 on BC.

    B is fixed, so each span is a propped cantilever:
        M_BA = +w₁L²/8 = +31.25,   M_BC = -w₂L²/8 = -12.5
    The support moment is reported in the end-moment convention:
        M_B = M_BA + M_BC = 18.75 kN·m
    """
    L = 5.0
    beam = ContinuousBeam(
        nodes=[
            BeamNode("A", 0.0, SupportType.PINNED),
            BeamNode("B", L, SupportType.FIXED),
            BeamNode("C", 2 * L, SupportType.ROLLER),
        ],
        spans=[
            Span("S1", "A", "B", rigidity=Rigidity.direct(EI)),
            Span("S2", "B", "C", rigidity=Rigidity.direct(EI)),
        ],
        loads=[UniformLoad("W1", "S1", 10.0), UniformLoad("W2", "S2", 4.0)],
    )

    result = ContinuousBeamSolver(beam).solve()

    assert np.isclose(result.span_moments("S1").m_end, 31.25)
    assert np.isclose(result.span_moments("S2").m_start, -12.5)
    assert np.isclose(result.reaction("B").moment, 18.75)
    assert result.reaction("A").moment is None


def test_two_span_beam_with_one_span_loaded():
    """
    WHAT IS THIS TEST?
    ==================
    Two equal 5 m spans (pinned, pinned, roller), UDL 10 kN/m on span 1.

    Three-moment equation: M_B = wL²/16 = 15.625 kN·m (hogging)
        R_A = wL/2 - M_B/L       = 21.875
        R_B = wL/2 + 2·M_B/L     = 31.25
        R_C = -M_B/L             = -3.125   (C is held down)
    """
    beam = _two_span_beam([UniformLoad("W1", "S1", 10.0)])

    result = ContinuousBeamSolver(beam).solve()

    assert np.isclose(result.span_moments("S1").m_start, 0.0, atol=1e-9)
    assert np.isclose(result.span_moments("S1").m_end, 15.625)
    assert np.isclose(result.span_moments("S2").m_start, -15.625)
    assert np.isclose(result.span_moments("S2").m_end, 0.0, atol=1e-9)

    assert np.isclose(result.reaction("A").vertical, 21.875)
    assert np.isclose(result.reaction("B").vertical, 31.25)
    assert np.isclose(result.reaction("C").vertical, -3.125)
    assert np.isclose(result.total_reaction, 50.0)

    # Diagram sample at x = 5 m sits on the support: hogging moment
    at_b = next(p for p in result.moment if np.isclose(p.x, 5.0))
    assert np.isclose(at_b.value, -15.625)


def test_diagrams_are_sampled_over_the_whole_beam():
    beam = _two_span_beam([UniformLoad("W1", "S1", 10.0)])
    result = ContinuousBeamSolver(beam).solve()

    for series in (result.shear, result.moment, result.deflection):
        assert len(series) == 101
        assert np.isclose(series[0].x, 0.0)
        assert np.isclose(series[-1].x, 10.0)
        assert all(np.isfinite(p.value) for p in series)

    # Free end of the loaded span carries the full left reaction as shear
    assert np.isclose(result.shear[0].value, 21.875)
    # Pinned ends carry no moment
    assert np.isclose(result.moment[0].value, 0.0, atol=1e-9)
    assert np.isclose(result.moment[-1].value, 0.0, atol=1e-9)


def test_middle_support_settlement():
    """
    Δ = 10 mm at B, no loads, all joints free to rotate.

    No node is fixed, so the 6kψ term never enters the load vector:
        F = 0  →  θ_A = θ_B = θ_C = 0
    Back-substitution still carries the chord rotation ψ = ±Δ/L = ±0.002:
        M_AB = M_BA = -6kψ = -120 kN·m,   M_BC = M_CB = +120 kN·m
    Reactions remain self-equilibrating: B pulled down, A and C up.
    """
    beam = _two_span_beam(settlement_b=0.01)

    result = ContinuousBeamSolver(beam).solve()

    for node_id in ("A", "B", "C"):
        assert np.isclose(result.rotation(node_id), 0.0, atol=1e-12)

    s1, s2 = result.span_moments("S1"), result.span_moments("S2")
    assert np.isclose(s1.m_start, -120.0)
    assert np.isclose(s1.m_end, -120.0)
    assert np.isclose(s2.m_start, 120.0)
    assert np.isclose(s2.m_end, 120.0)

    assert np.isclose(result.reaction("A").vertical, 48.0)
    assert np.isclose(result.reaction("B").vertical, -96.0)
    assert np.isclose(result.reaction("C").vertical, 48.0)
    assert np.isclose(result.total_reaction, 0.0, atol=1e-9)

    setup = result.calculation_log.section("1. Problem Setup")
    assert any(s.description == "Support Settlements" for s in setup.steps)


def test_propped_cantilever_prop_settlement():
    """
    Fixed A, roller B settles Δ = 10 mm, L = 5 m, no loads.

    B's opposite node is fixed, so its equation picks up 6kψ:
        4k·θ_B = 6kψ  →  θ_B = 1.5ψ = 0.003 rad
        M_BA = 0,   M_AB = -3EIΔ/L² = -60 kN·m
    """
    L, delta = 5.0, 0.01
    beam = ContinuousBeam(
        nodes=[
            BeamNode("A", 0.0, SupportType.FIXED),
            BeamNode("B", L, SupportType.ROLLER, settlement=delta),
        ],
        spans=[Span("S1", "A", "B", rigidity=Rigidity.direct(EI))],
        loads=[],
    )

    result = ContinuousBeamSolver(beam).solve()

    assert np.isclose(result.rotation("B"), 1.5 * delta / L)
    em = result.span_moments("S1")
    assert np.isclose(em.m_end, 0.0, atol=1e-9)
    assert np.isclose(em.m_start, -3 * EI * delta / L**2)
    assert np.isclose(result.reaction("A").moment, em.m_start)
    assert np.isclose(result.reaction("A").vertical, 12.0)
    assert np.isclose(result.reaction("B").vertical, -12.0)


def test_applied_couple_gives_opposing_reactions():
    beam = ContinuousBeam(
        nodes=[BeamNode("A", 0.0, SupportType.PINNED), BeamNode("B", 4.0, SupportType.ROLLER)],
        spans=[Span("S1", "A", "B")],
        loads=[MomentLoad("M1", "S1", 8.0, 2.0)],
    )

    result = ContinuousBeamSolver(beam).solve()

    assert np.isclose(result.reaction("A").vertical, 2.0)
    assert np.isclose(result.reaction("B").vertical, -2.0)
    assert np.isclose(result.total_reaction, 0.0, atol=1e-12)


def test_mixed_loads_reactions_balance_applied_load():
    loads = [
        PointLoad("P1", "S1", 20.0, 1.5),
        UniformLoad("W1", "S2", 6.0, 1.0, 4.0),
        VaryingLoad("V1", "S2", 0.0, 8.0),
    ]
    beam = _two_span_beam(loads)

    result = ContinuousBeamSolver(beam).solve()

    applied = 20.0 + 6.0 * 3.0 + 0.5 * 8.0 * 5.0
    assert np.isclose(result.total_reaction, applied)


def test_relative_stiffness_uses_default_ei():
    # A stiffer right span draws more moment over B than the left span sees
    beam = ContinuousBeam(
        nodes=[
            BeamNode("A", 0.0, SupportType.FIXED),
            BeamNode("B", 4.0, SupportType.PINNED),
            BeamNode("C", 8.0, SupportType.FIXED),
        ],
        spans=[
            Span("S1", "A", "B", rigidity=Rigidity.relative(1.0)),
            Span("S2", "B", "C", rigidity=Rigidity.relative(2.0)),
        ],
        loads=[UniformLoad("W1", "S1", 12.0)],
    )
    assert beam.span_ei(beam.spans[1]) == 2 * beam.span_ei(beam.spans[0])

    result = ContinuousBeamSolver(beam).solve()

    # Joint B balances: M_BA + M_BC = 0
    m_ba = result.span_moments("S1").m_end
    m_bc = result.span_moments("S2").m_start
    assert np.isclose(m_ba + m_bc, 0.0, atol=1e-9)
    assert result.reaction("A").moment is not None


def test_calculation_log_sections():
    result = ContinuousBeamSolver(_two_span_beam([UniformLoad("W1", "S1", 10.0)])).solve()

    assert result.calculation_log.titles == [
        "1. Problem Setup",
        "2. Fixed End Moments",
        "3. Slope-Deflection Equations",
        "4. Joint Equilibrium Equations",
        "5. Solve for Joint Rotations",
        "6. Final Member End Moments",
        "7. Support Reactions",
    ]
    last = result.calculation_log.section("7. Support Reactions").steps[-1]
    assert last.description == "Total vertical reaction (verification)"
    assert last.result == "50.00"


def test_result_document_is_plain_data():
    result = ContinuousBeamSolver(_two_span_beam([UniformLoad("W1", "S1", 10.0)])).solve()
    doc = result.to_dict()
    assert {"rotations", "reactions", "shear", "moment", "calculation_log"} <= set(doc)
    assert isinstance(doc["moment"][0]["value"], float)


# ---------------------------------------------------------------------------
# Stability and validation
# ---------------------------------------------------------------------------

def test_one_restraint_is_unstable():
    beam = ContinuousBeam(
        nodes=[BeamNode("A", 0.0, SupportType.PINNED), BeamNode("B", 4.0, SupportType.FREE)],
        spans=[Span("S1", "A", "B")],
    )
    with pytest.raises(UnstableStructure, match="at least 2"):
        ContinuousBeamSolver(beam).solve()


def test_single_node_is_unstable():
    beam = ContinuousBeam(nodes=[BeamNode("A", 0.0, SupportType.FIXED)], spans=[])
    with pytest.raises(UnstableStructure):
        ContinuousBeamSolver(beam).solve()


def test_span_must_match_node_spacing():
    with pytest.raises(InputError, match="does not match"):
        ContinuousBeam(
            nodes=[BeamNode("A", 0.0), BeamNode("B", 4.0)],
            spans=[Span("S1", "A", "B", length=5.0)],
        )


def test_load_outside_span_is_rejected():
    with pytest.raises(InputError, match="outside"):
        ContinuousBeam(
            nodes=[BeamNode("A", 0.0), BeamNode("B", 4.0)],
            spans=[Span("S1", "A", "B")],
            loads=[PointLoad("P1", "S1", 10.0, 4.5)],
        )


def test_unknown_span_reference_is_rejected():
    with pytest.raises(InputError, match="unknown span"):
        ContinuousBeam(
            nodes=[BeamNode("A", 0.0), BeamNode("B", 4.0)],
            spans=[Span("S1", "A", "B")],
            loads=[UniformLoad("W1", "S9", 10.0)],
        )


def test_non_positive_ei_is_rejected():
    with pytest.raises(InputError, match="positive EI"):
        ContinuousBeam(
            nodes=[BeamNode("A", 0.0), BeamNode("B", 4.0)],
            spans=[Span("S1", "A", "B", rigidity=Rigidity.direct(0.0))],
        )

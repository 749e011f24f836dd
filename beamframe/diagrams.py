# beamframe/diagrams.py
"""
INTERNAL FORCE DIAGRAMS
=======================

Both solvers sample shear and moment by walking along a span or member
and subtracting the loads met so far from the start-end actions:

    V(x) = V_start - Σ (load force left of x)
    M(x) = M_start + V_start·x - Σ (load moment about x, left of x)

Sign convention for diagrams: sagging moment positive, shear positive
when the part left of the cut is pushed up, tension positive.

Beam deflection is a visualization estimate only. It scales the local
moment by a parabola over the whole beam,

    δ(x) = -M(x)·p·T² / (8·EI) · 1000    [mm],   p = ξ(1 - ξ),  ξ = x/T

with T the total beam length. It is not an integral of curvature.
"""

from typing import Dict, List, Sequence, Tuple

import numpy as np

from .config import CONFIG, SolverConfig
from .fem import load_effects_left_of, simple_support_reactions
from .model import ContinuousBeam, SpanLoad
from .results import DiagramPoint, MemberDiagram


def estimate_deflection(x: float, ei: float, moment: float, total_length: float) -> float:
    """Parabolic deflection estimate in mm (see module docstring)."""
    normalized = x / total_length
    parabola = normalized * (1.0 - normalized)
    return -(moment * parabola * total_length ** 2) / (8.0 * ei) * 1000.0


def start_shear(length: float, loads: Sequence[SpanLoad], m_start: float, m_end: float) -> float:
    """
    Shear just right of the span start (= the span's share of the left reaction).

    m_start and m_end are end moments, clockwise positive on the member.
    """
    r0 = sum(simple_support_reactions(load, length)[0] for load in loads)
    return r0 - (m_start + m_end) / length


def section_forces(
    x: float,
    length: float,
    loads: Sequence[SpanLoad],
    v_start: float,
    m_start_sagging: float,
) -> Tuple[float, float]:
    """(V, M) at distance x from the start of a span/member."""
    V = v_start
    M = m_start_sagging + v_start * x
    for load in loads:
        dv, dm = load_effects_left_of(load, x, length)
        V -= dv
        M -= dm
    return V, M


def beam_diagrams(
    beam: ContinuousBeam,
    end_moments: Dict[str, Tuple[float, float]],
    config: SolverConfig = CONFIG,
) -> Tuple[Tuple[DiagramPoint, ...], Tuple[DiagramPoint, ...], Tuple[DiagramPoint, ...]]:
    """
    Shear, moment and deflection samples along a continuous beam.

    A sample lying exactly on an interior support belongs to the span on
    its left.
    """
    nodes = {n.id: n for n in beam.nodes}
    spans = beam.spans
    x0 = beam.nodes[0].position
    total = beam.total_length
    n = config.beam_diagram_points

    span_data = []
    for span in spans:
        loads = beam.loads_on(span.id)
        m_start, m_end = end_moments[span.id]
        span_data.append((
            span,
            nodes[span.start].position,
            loads,
            start_shear(span.length, loads, m_start, m_end),
            m_start,
            beam.span_ei(span),
        ))

    shear: List[DiagramPoint] = []
    moment: List[DiagramPoint] = []
    deflection: List[DiagramPoint] = []

    k = 0
    for x in np.linspace(x0, x0 + total, n):
        x = float(x)
        while k < len(spans) - 1 and x > nodes[spans[k].end].position:
            k += 1
        span, origin, loads, v_start, m_start, ei = span_data[k]
        local = min(max(x - origin, 0.0), span.length)

        V, M = section_forces(local, span.length, loads, v_start, m_start)
        shear.append(DiagramPoint(x, V))
        moment.append(DiagramPoint(x, M))
        deflection.append(DiagramPoint(x, estimate_deflection(x - x0, ei, M, total)))

    return tuple(shear), tuple(moment), tuple(deflection)


def member_diagram(
    member_id: str,
    member_type: str,
    length: float,
    loads: Sequence[SpanLoad],
    end_forces: np.ndarray,
    n_points: int = CONFIG.member_diagram_points,
) -> MemberDiagram:
    """
    Axial, shear and moment samples along one frame member.

    Parameters:
    -----------
    loads : span loads in member-local metres (positive toward local -y)
    end_forces : local end actions [N_i, V_i, M_i, N_j, V_j, M_j],
        moments counter-clockwise positive
    """
    N = -float(end_forces[0])  # tension positive
    v_start = float(end_forces[1])
    m_start = -float(end_forces[2])

    axial, shear, moment = [], [], []
    for x in np.linspace(0.0, length, n_points):
        x = float(x)
        V, M = section_forces(x, length, loads, v_start, m_start)
        axial.append(DiagramPoint(x, N))
        shear.append(DiagramPoint(x, V))
        moment.append(DiagramPoint(x, M))

    return MemberDiagram(member_id, member_type, length,
                         tuple(axial), tuple(shear), tuple(moment))

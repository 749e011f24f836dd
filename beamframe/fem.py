# beamframe/fem.py
"""
FIXED-END MOMENTS: Load Formulas for a Prismatic Span
=====================================================

PURPOSE:
--------
For a span of length L clamped at both ends, each load produces a pair
of end moments (femStart, femEnd). They are the right-hand side of the
slope-deflection equations and, converted to forces, of the frame
stiffness equations.

CONVENTION:
-----------
    Loads positive DOWNWARD, FEM positive CLOCKWISE (moment on the member).
    A downward load therefore gives femStart < 0 and femEnd > 0.
    Applied couples are positive COUNTER-CLOCKWISE.

FORMULAS:
---------
    Point P at a (b = L - a):
        femStart = -P·a·b²/L²          femEnd = +P·a²·b/L²

    UDL w over the full span:
        femStart = -wL²/12             femEnd = +wL²/12
    Partial UDL: the loaded length is cut into 20 segments, each treated as
    a point load w·dx at its midpoint. A load covering ≥ 95% of the span
    uses the full-span result.

    VDL w1 → w2 over the full span = rectangle min(w1, w2) + triangle |w2 - w1|:
        triangle rising  (0 → w):   femStart = -wL²/20,  femEnd = +wL²/30
        triangle falling (w → 0):   femStart = -wL²/30,  femEnd = +wL²/20
    Partial VDL: 10-point Gauss–Legendre quadrature of
        w(x) = w1 + (w2 - w1)(x - a)/(b - a)
    against the kernels -x(L-x)²/L² and +x²(L-x)/L².

    Couple M at a:
        femStart = M·b·(L - 3a)/L²     femEnd = M·a·(3a - L)/L²

A load region of zero length contributes (0, 0).
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .config import CONFIG, SolverConfig
from .model import MomentLoad, PointLoad, SpanLoad, UniformLoad, VaryingLoad

ZERO_LENGTH = 1e-10

# Gauss–Legendre nodes/weights on [-1, 1]
_GAUSS_CACHE = {}


def _gauss(n: int) -> Tuple[np.ndarray, np.ndarray]:
    if n not in _GAUSS_CACHE:
        _GAUSS_CACHE[n] = np.polynomial.legendre.leggauss(n)
    return _GAUSS_CACHE[n]


@dataclass(frozen=True)
class FEMTerm:
    """Contribution of one load to a span's fixed-end moments."""
    load_id: str
    load_type: str
    fem_start: float
    fem_end: float
    description: str
    formula: str


def point_load_fem(P: float, L: float, a: float) -> Tuple[float, float]:
    b = L - a
    L2 = L * L
    return -(P * a * b * b) / L2, (P * a * a * b) / L2


def full_span_udl_fem(w: float, L: float) -> Tuple[float, float]:
    L2 = L * L
    return -(w * L2) / 12.0, (w * L2) / 12.0


def udl_fem(
    w: float,
    L: float,
    start: float = 0.0,
    end: Optional[float] = None,
    segments: int = CONFIG.partial_udl_segments,
    full_span_ratio: float = CONFIG.full_span_ratio,
) -> Tuple[float, float]:
    """FEM of a uniform load from `start` to `end` (end=None: to L)."""
    a, b = start, L if end is None else end
    length = b - a
    if abs(length) < ZERO_LENGTH:
        return 0.0, 0.0

    if abs(a) < ZERO_LENGTH and abs(b - L) < ZERO_LENGTH:
        return full_span_udl_fem(w, L)
    if length >= L * full_span_ratio:
        return full_span_udl_fem(w, L)

    # Midpoint rule: each segment is a point load w·dx
    dx = length / segments
    fem_start = fem_end = 0.0
    for i in range(segments):
        xi = a + (i + 0.5) * dx
        s, e = point_load_fem(w * dx, L, xi)
        fem_start += s
        fem_end += e
    return fem_start, fem_end


def vdl_fem(
    w1: float,
    w2: float,
    L: float,
    start: float = 0.0,
    end: Optional[float] = None,
    gauss_points: int = CONFIG.gauss_points,
) -> Tuple[float, float]:
    """FEM of a linearly varying load w1 at `start` to w2 at `end`."""
    a, b = start, L if end is None else end
    length = b - a
    if abs(length) < ZERO_LENGTH:
        return 0.0, 0.0

    L2 = L * L
    if abs(a) < ZERO_LENGTH and abs(b - L) < ZERO_LENGTH:
        w_rect = min(w1, w2)
        w_tri = max(w1, w2) - w_rect
        fem_start, fem_end = full_span_udl_fem(w_rect, L)
        if w_tri > 0:
            if w2 > w1:
                fem_start += -(w_tri * L2) / 20.0
                fem_end += (w_tri * L2) / 30.0
            else:
                fem_start += -(w_tri * L2) / 30.0
                fem_end += (w_tri * L2) / 20.0
        return fem_start, fem_end

    t, weights = _gauss(gauss_points)
    half = length / 2.0
    x = (a + b) / 2.0 + half * t
    w_x = w1 + (w2 - w1) * (x - a) / length
    dP = w_x * half * weights
    fem_start = float(np.sum(-(dP * x * (L - x) ** 2) / L2))
    fem_end = float(np.sum((dP * x * x * (L - x)) / L2))
    return fem_start, fem_end


def moment_fem(M: float, L: float, a: float) -> Tuple[float, float]:
    b = L - a
    L2 = L * L
    return (M * b * (L - 3.0 * a)) / L2, (M * a * (3.0 * a - L)) / L2


def load_fem(load: SpanLoad, L: float, config: SolverConfig = CONFIG) -> Tuple[float, float]:
    """(femStart, femEnd) of a single span load."""
    if isinstance(load, PointLoad):
        return point_load_fem(load.magnitude, L, load.position)
    if isinstance(load, UniformLoad):
        start, end = load.bounds(L)
        return udl_fem(load.magnitude, L, start, end,
                       config.partial_udl_segments, config.full_span_ratio)
    if isinstance(load, VaryingLoad):
        start, end = load.bounds(L)
        return vdl_fem(load.start_magnitude, load.end_magnitude, L, start, end,
                       config.gauss_points)
    if isinstance(load, MomentLoad):
        return moment_fem(load.magnitude, L, load.position)
    raise TypeError(f"Unknown span load type {type(load).__name__}")


def span_fem(L: float, loads: Iterable[SpanLoad], config: SolverConfig = CONFIG) -> Tuple[float, float]:
    """Total (femStart, femEnd) of all loads on a span."""
    fem_start = fem_end = 0.0
    for load in loads:
        s, e = load_fem(load, L, config)
        fem_start += s
        fem_end += e
    return fem_start, fem_end


def describe_load(load: SpanLoad, L: float) -> Tuple[str, str, str]:
    """(load type label, description, formula) for the calculation log."""
    if isinstance(load, PointLoad):
        return (
            "Point Load",
            f"Point load P = {load.magnitude:g} kN at {load.position:g} m",
            r"FEM_{AB} = -\frac{Pab^2}{L^2}, \quad FEM_{BA} = \frac{Pa^2b}{L^2}",
        )
    if isinstance(load, UniformLoad):
        start, end = load.bounds(L)
        full = abs(start) < ZERO_LENGTH and abs(end - L) < ZERO_LENGTH
        return (
            "UDL",
            f"UDL w = {load.magnitude:g} kN/m from {start:g} to {end:g} m",
            r"FEM_{AB} = -\frac{wL^2}{12}, \quad FEM_{BA} = \frac{wL^2}{12}"
            if full else r"FEM = \int \text{(partial UDL integration)}",
        )
    if isinstance(load, VaryingLoad):
        w1, w2 = load.start_magnitude, load.end_magnitude
        if w1 == 0:
            return (
                "Triangular Load",
                f"Triangular load (0 to {w2:g} kN/m)",
                r"FEM_{AB} = -\frac{wL^2}{20}, \quad FEM_{BA} = \frac{wL^2}{30}",
            )
        if w2 == 0:
            return (
                "Triangular Load",
                f"Triangular load ({w1:g} to 0 kN/m)",
                r"FEM_{AB} = -\frac{wL^2}{30}, \quad FEM_{BA} = \frac{wL^2}{20}",
            )
        return (
            "Trapezoidal Load",
            f"Trapezoidal load ({w1:g} to {w2:g} kN/m)",
            r"FEM = FEM_{rect} + FEM_{tri}",
        )
    if isinstance(load, MomentLoad):
        return (
            "Applied Moment",
            f"Applied moment M = {load.magnitude:g} kN·m at {load.position:g} m",
            r"FEM_{AB} = \frac{Mb(L-3a)}{L^2}, \quad FEM_{BA} = \frac{Ma(3a-L)}{L^2}",
        )
    raise TypeError(f"Unknown span load type {type(load).__name__}")


def fem_breakdown(L: float, loads: Iterable[SpanLoad], config: SolverConfig = CONFIG) -> List[FEMTerm]:
    terms = []
    for load in loads:
        fem_start, fem_end = load_fem(load, L, config)
        label, description, formula = describe_load(load, L)
        terms.append(FEMTerm(load.id, label, fem_start, fem_end, description, formula))
    return terms


# ---------------------------------------------------------------------------
# Statics of the simply-supported span (shared by reactions and diagrams)
# ---------------------------------------------------------------------------

def resultant(load: SpanLoad, L: float) -> Tuple[float, float]:
    """
    (total force, position of its line of action) of a span load.

    Couples have zero resultant force; their position is returned as-is.
    """
    if isinstance(load, PointLoad):
        return load.magnitude, load.position
    if isinstance(load, UniformLoad):
        a, b = load.bounds(L)
        return load.magnitude * (b - a), (a + b) / 2.0
    if isinstance(load, VaryingLoad):
        a, b = load.bounds(L)
        return _trapezoid(load.start_magnitude, load.end_magnitude, a, b - a)
    if isinstance(load, MomentLoad):
        return 0.0, load.position
    raise TypeError(f"Unknown span load type {type(load).__name__}")


def _trapezoid(w1: float, w2: float, a: float, length: float) -> Tuple[float, float]:
    """Area and centroid (absolute) of a trapezoid w1→w2 starting at a."""
    area = (w1 + w2) / 2.0 * length
    if abs(w1 + w2) < ZERO_LENGTH:
        return area, a + length / 2.0
    return area, a + length * (w1 + 2.0 * w2) / (3.0 * (w1 + w2))


def simple_support_reactions(load: SpanLoad, L: float) -> Tuple[float, float]:
    """Upward (R_start, R_end) of a simply-supported span under one load."""
    if isinstance(load, MomentLoad):
        return load.magnitude / L, -load.magnitude / L
    force, x = resultant(load, L)
    return force * (L - x) / L, force * x / L


def load_effects_left_of(load: SpanLoad, x: float, L: float) -> Tuple[float, float]:
    """
    (shear drop, moment drop) at section x caused by the part of a load
    lying left of x.

    Walking along a span, V(x) = V_start - Σ shear drops and
    M(x) = M_start + V_start·x - Σ moment drops (sagging positive).
    """
    if isinstance(load, PointLoad):
        if x >= load.position:
            return load.magnitude, load.magnitude * (x - load.position)
        return 0.0, 0.0
    if isinstance(load, UniformLoad):
        a, b = load.bounds(L)
        if x <= a:
            return 0.0, 0.0
        covered = min(x, b) - a
        force = load.magnitude * covered
        return force, force * (x - (a + covered / 2.0))
    if isinstance(load, VaryingLoad):
        a, b = load.bounds(L)
        if x <= a or b - a < ZERO_LENGTH:
            return 0.0, 0.0
        covered = min(x, b) - a
        w1, w2 = load.start_magnitude, load.end_magnitude
        w_cut = w1 + (w2 - w1) * covered / (b - a)
        force, centroid = _trapezoid(w1, w_cut, a, covered)
        return force, force * (x - centroid)
    if isinstance(load, MomentLoad):
        if x >= load.position:
            return 0.0, load.magnitude
        return 0.0, 0.0
    raise TypeError(f"Unknown span load type {type(load).__name__}")

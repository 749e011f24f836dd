# beamframe/config.py
"""
Solver configuration and defaults.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SolverConfig:
    """Numeric settings shared by the beam and frame solvers."""

    # Section defaults
    default_ei: float = 50000.0  # kN·m², shared EI for the multiplier mode
    default_e: float = 200.0
    default_e_unit: str = "GPa"
    default_i: float = 1e-4
    default_i_unit: str = "m4"
    default_a: float = 0.01
    default_a_unit: str = "m2"

    # EA ≈ ratio · EI when no separate E·A is available
    ea_to_ei_ratio: float = 1000.0

    # Linear solver
    pivot_tolerance: float = 1e-12     # absolute
    mechanism_tolerance: float = 1e-12  # relative to max|K|, frame pre-check

    # Diagram sampling
    beam_diagram_points: int = 101
    member_diagram_points: int = 21

    # Fixed-end moment integration
    partial_udl_segments: int = 20
    full_span_ratio: float = 0.95  # a UDL covering ≥ 95% of L uses the closed form
    gauss_points: int = 10

    # Frame storey detection (m)
    level_tolerance: float = 1e-6


# Global config instance
CONFIG = SolverConfig()

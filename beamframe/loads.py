# loads.py - Member loads as local fixed-end force vectors

import numpy as np

from .config import CONFIG, SolverConfig
from .fem import simple_support_reactions, span_fem
from .model import Frame, FrameMember, SpanLoad


def member_span_loads(frame: Frame, member: FrameMember) -> list[SpanLoad]:
    """Member loads of `member` re-expressed in local metres."""
    L = frame.member_length(member)
    return [load.to_span_load(L) for load in frame.member_loads(member.id)]


def fixed_end_forces(L: float, loads: list[SpanLoad], config: SolverConfig = CONFIG) -> np.ndarray:
    """
    Fixed-end force vector of a clamped member in LOCAL coordinates.

    These are the support actions ON the member, in the stiffness-method
    convention (forces along local axes, moments counter-clockwise):

        f = [0, V_i, M_i, 0, V_j, M_j]

    Loads act toward local -y. The FEM library works clockwise-positive,
    so its end moments flip sign here, and the end shears pick up the
    couple needed for moment equilibrium of the member:

        M_i = -femStart            M_j = -femEnd
        V_i = R0_i - (femStart + femEnd)/L
        V_j = R0_j + (femStart + femEnd)/L

    with R0 the simply-supported reactions.

    Parameters:
    -----------
    L : float
        Member length (m)
    loads : list of span loads
        Positions in metres from the member start

    Returns:
    --------
    np.ndarray
        Shape (6,)

    Examples:
    --------
    >>> fixed_end_forces(6.0, [UniformLoad("w", "m1", 10.0)])
    array([ 0., 30., 30.,  0., 30., -30.])
    """
    fem_start, fem_end = span_fem(L, loads, config)
    r0_start = r0_end = 0.0
    for load in loads:
        r_start, r_end = simple_support_reactions(load, L)
        r0_start += r_start
        r0_end += r_end

    couple = (fem_start + fem_end) / L
    return np.array([
        0.0,
        r0_start - couple,
        -fem_start,
        0.0,
        r0_end + couple,
        -fem_end,
    ], dtype=float)

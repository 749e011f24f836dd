# beamframe/kernel/assemble.py
"""
ASSEMBLY: Scatter-Add into Global Matrices
==========================================

Element-level matrices and vectors are added into the global system at
the positions given by a DOF map. A None entry in the map is a
restrained component: its row and column are simply skipped.

Repeated indices inside one map are legal (e.g. a beam whose two ends
share a storey sway DOF); their contributions add up.

USAGE:
------
    contributions = [(dof_map, ke) for each element]
    K = assemble_global_K(ndof, contributions)
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

DofMap = Sequence[Optional[int]]


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[DofMap, np.ndarray]]
) -> np.ndarray:
    """
    Assemble the global stiffness matrix.

    Parameters:
    -----------
    ndof : int
        Number of unknowns
    contributions : list of (dof_map, ke)
        ke is square with len(dof_map) rows, expressed in global axes

    Returns:
    --------
    np.ndarray
        K, shape (ndof, ndof)
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        n = len(dof_map)
        assert ke.shape == (n, n), \
            f"Element ke shape {ke.shape} doesn't match dof_map length {n}"

        for a in range(n):
            ia = dof_map[a]
            if ia is None:
                continue
            for b in range(n):
                ib = dof_map[b]
                if ib is None:
                    continue
                K[ia, ib] += ke[a, b]

    return K


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[DofMap, np.ndarray]]
) -> np.ndarray:
    """Same scatter-add as assemble_global_K, for load vectors."""
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        n = len(dof_map)
        assert fe.shape == (n,), \
            f"Element fe shape {fe.shape} doesn't match dof_map length {n}"

        for a in range(n):
            ia = dof_map[a]
            if ia is not None:
                F[ia] += fe[a]

    return F


def gather(d: np.ndarray, dof_map: DofMap, prescribed: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Pull element displacements out of the global solution.

    Restrained components take their prescribed value (support settlement)
    or zero.
    """
    out = np.zeros(len(dof_map), dtype=float)
    for a, ia in enumerate(dof_map):
        if ia is not None:
            out[a] = d[ia]
        elif prescribed is not None:
            out[a] = prescribed[a]
    return out

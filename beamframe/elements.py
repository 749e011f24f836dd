# Frame member stiffness + transformation + moment releases

from typing import Optional, Sequence, Tuple

import numpy as np

from .model import Frame, FrameMember

# Local DOF order: [axial_i, shear_i, moment_i, axial_j, shear_j, moment_j]
ROT_START = 2
ROT_END = 5


def element_geometry(frame: Frame, member: FrameMember) -> Tuple[float, float, float]:
    L, c, s = frame.member_geometry(member)
    if L <= 0.0:
        raise ValueError(f"Member {member.id} has zero length.")
    return L, c, s


def frame2d_local_stiffness(EI: float, EA: float, L: float) -> np.ndarray:
    """
    Local stiffness matrix in member local coords (x along member).
    DOF order: [uix, uiy, rzi, ujx, ujy, rzj]
    """
    EA_L = EA / L
    L2 = L * L
    L3 = L2 * L

    k = np.array([
        [ EA_L,      0.0,        0.0,    -EA_L,      0.0,        0.0],
        [  0.0,  12*EI/L3,   6*EI/L2,      0.0, -12*EI/L3,   6*EI/L2],
        [  0.0,   6*EI/L2,    4*EI/L,      0.0,  -6*EI/L2,    2*EI/L],
        [-EA_L,      0.0,        0.0,     EA_L,      0.0,        0.0],
        [  0.0, -12*EI/L3,  -6*EI/L2,      0.0,  12*EI/L3,  -6*EI/L2],
        [  0.0,   6*EI/L2,    2*EI/L,      0.0,  -6*EI/L2,    4*EI/L],
    ], dtype=float)
    return k


def released_dofs(member: FrameMember) -> list[int]:
    released = []
    if member.release_start:
        released.append(ROT_START)
    if member.release_end:
        released.append(ROT_END)
    return released


def condense(
    k: np.ndarray,
    f: Optional[np.ndarray],
    released: Sequence[int],
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Statically condense released local DOFs out of k (and f).

        k_c = k - k[:, r] k_rr⁻¹ k[r, :]
        f_c = f - k[:, r] k_rr⁻¹ f[r]

    Rows/columns of the released DOFs come out as zero, so the member
    transmits no moment there. One release gives the 3EI propped member;
    both releases leave a pure axial (truss) member.
    """
    if not released:
        return k, f
    r = list(released)
    k_rr_inv = np.linalg.inv(k[np.ix_(r, r)])
    k_c = k - k[:, r] @ k_rr_inv @ k[r, :]
    k_c[r, :] = 0.0
    k_c[:, r] = 0.0
    f_c = None
    if f is not None:
        f_c = f - k[:, r] @ k_rr_inv @ f[r]
        f_c[r] = 0.0
    return k_c, f_c


def frame2d_transform(c: float, s: float) -> np.ndarray:
    """
    6x6 transform from global DOFs to local DOFs.
    """
    T = np.array([
        [ c,  s, 0,  0, 0, 0],
        [-s,  c, 0,  0, 0, 0],
        [ 0,  0, 1,  0, 0, 0],
        [ 0,  0, 0,  c, s, 0],
        [ 0,  0, 0, -s, c, 0],
        [ 0,  0, 0,  0, 0, 1],
    ], dtype=float)
    return T


def frame2d_global_stiffness(k_local: np.ndarray, T: np.ndarray) -> np.ndarray:
    return T.T @ k_local @ T

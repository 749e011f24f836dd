# beamframe/kernel/solve.py
"""
LINEAR SOLVER: Gaussian Elimination with Partial Pivoting
=========================================================

PURPOSE:
--------
Every analysis in this package ends in the same place: a dense, square
system K·x = F sized by the number of unknowns (tens, rarely hundreds).
This module solves it, and refuses to solve it when the structure behind
K cannot carry load.

FAILURE MODE:
-------------
A pivot that drops below tolerance after row exchange means the matrix is
singular (or numerically so). Structurally that is a mechanism: a missing
support, a chain of hinges, an unbraced storey. SingularMatrix is raised
and carries the column where elimination broke down. Callers let it
propagate.

TOLERANCE:
----------
solve_linear_system uses the absolute test

    |pivot| < pivot_tol        (1e-12)

so a well-conditioned matrix is solved whatever the spread of its
entries (a diagonal [1e13, 1] is fine).

Frame stiffness matrices mix EA/L terms of order 1e7 with bending terms
several decades smaller. Round-off left in a mechanism's zero pivot
scales with the largest entry and can sit above 1e-12. check_mechanism
is the separate pre-check for that case:

    |pivot| < rel_tol · max|A_ij|
"""

import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

PIVOT_TOLERANCE = 1e-12


class SingularMatrix(RuntimeError):
    """Raised when elimination meets a (near) zero pivot."""

    def __init__(self, message: str, column: int = -1):
        super().__init__(message)
        self.column = column


def _as_system(A, b) -> tuple[np.ndarray, np.ndarray]:
    A = np.array(A, dtype=float)
    b = np.array(b, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"A must be square, got shape {A.shape}")
    if b.ndim != 1 or b.shape[0] != A.shape[0]:
        raise ValueError(
            f"b must have length {A.shape[0]}, got shape {b.shape}"
        )
    return A, b


def _eliminate(A: np.ndarray, b: np.ndarray, threshold: float) -> np.ndarray:
    n = A.shape[0]

    # Augmented matrix [A | b]
    aug = np.column_stack([A, b])

    # Forward elimination
    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(aug[col:, col])))
        if pivot_row != col:
            aug[[col, pivot_row]] = aug[[pivot_row, col]]

        pivot = aug[col, col]
        if abs(pivot) < threshold:
            logger.debug("Zero pivot %.3e at column %d of %d", pivot, col, n)
            raise SingularMatrix(
                f"Matrix is singular or nearly singular (pivot {pivot:.3e} "
                f"at column {col}). The structure may be unstable.",
                column=col,
            )

        factors = aug[col + 1:, col] / pivot
        aug[col + 1:, col:] -= np.outer(factors, aug[col, col:])

    # Back substitution
    x = np.zeros(n, dtype=float)
    for row in range(n - 1, -1, -1):
        x[row] = (aug[row, n] - aug[row, row + 1:n] @ x[row + 1:]) / aug[row, row]

    return x


def solve_linear_system(
    A: np.ndarray | Sequence[Sequence[float]],
    b: np.ndarray | Sequence[float],
    pivot_tol: float = PIVOT_TOLERANCE,
) -> np.ndarray:
    """
    Solve A·x = b by Gaussian elimination with partial pivoting.

    The inputs are copied; the caller's arrays are never modified.

    Parameters:
    -----------
    A : (n, n) array-like
        Coefficient matrix (square)
    b : (n,) array-like
        Right-hand side
    pivot_tol : float
        Absolute pivot tolerance

    Returns:
    --------
    np.ndarray
        Solution vector x, shape (n,)

    Raises:
    -------
    SingularMatrix
        If |pivot| < pivot_tol after row exchange
    ValueError
        If the shapes of A and b are inconsistent
    """
    A, b = _as_system(A, b)
    if A.shape[0] == 0:
        return np.zeros(0, dtype=float)
    return _eliminate(A, b, pivot_tol)


def check_mechanism(
    A: np.ndarray | Sequence[Sequence[float]],
    rel_tol: float = PIVOT_TOLERANCE,
) -> None:
    """
    Raise SingularMatrix if A is singular relative to its largest entry.

    Runs the same elimination as solve_linear_system with the threshold
    rel_tol · max|A_ij|. Used by the frame solver before the solve proper.
    """
    A, b = _as_system(A, np.zeros(len(A), dtype=float))
    if A.shape[0] == 0:
        return
    _eliminate(A, b, rel_tol * float(np.max(np.abs(A))))


# ---------------------------------------------------------------------------
# Diagnostics. Not used on the solve path.
# ---------------------------------------------------------------------------

def determinant(A) -> float:
    """Determinant of a square matrix."""
    A = np.asarray(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"A must be square, got shape {A.shape}")
    if A.shape[0] == 0:
        return 1.0
    return float(np.linalg.det(A))


def invert_matrix(A, tol: float = PIVOT_TOLERANCE) -> np.ndarray:
    """Inverse of a square matrix; SingularMatrix if |det| < tol."""
    det = determinant(A)
    if abs(det) < tol:
        raise SingularMatrix(f"Matrix is singular (det={det:.3e}), cannot invert")
    return np.linalg.inv(np.asarray(A, dtype=float))


def is_symmetric(A, tol: float = 1e-10) -> bool:
    A = np.asarray(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        return False
    return bool(np.allclose(A, A.T, rtol=0.0, atol=tol))


def condition_estimate(A) -> float:
    """
    Cheap conditioning indicator: ratio of largest to smallest |diagonal|.

    Returns inf when a diagonal entry is zero.
    """
    diag = np.abs(np.diag(np.asarray(A, dtype=float)))
    if diag.size == 0:
        return 1.0
    smallest = diag.min()
    if smallest == 0.0:
        return float("inf")
    return float(diag.max() / smallest)

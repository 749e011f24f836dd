# beamframe/errors.py
"""Exceptions raised by model construction and the solvers."""

from .kernel.solve import SingularMatrix


class InputError(ValueError):
    """Malformed model: bad reference, non-positive length/EI, load out of range."""
    pass


class UnstableStructure(RuntimeError):
    """Not enough supports to carry load."""
    pass


__all__ = ['InputError', 'UnstableStructure', 'SingularMatrix']

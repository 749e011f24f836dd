# beamframe/kernel - Structure-agnostic linear algebra and DOF plumbing
"""
KERNEL
======

Everything here is independent of beams or frames:

- DOF bookkeeping (node component → equation index, None = restrained)
- Scatter-add assembly of element contributions
- Gaussian elimination with partial pivoting and singularity detection

The solvers in beamframe.beam and beamframe.frame build on these pieces.
"""

from .dof import DOFManager, NodeDOFs
from .assemble import assemble_global_K, assemble_global_F, gather
from .solve import check_mechanism, solve_linear_system, SingularMatrix

__all__ = [
    'DOFManager', 'NodeDOFs',
    'assemble_global_K', 'assemble_global_F', 'gather',
    'check_mechanism', 'solve_linear_system', 'SingularMatrix',
]

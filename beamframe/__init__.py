# beamframe - Continuous beam and planar frame analysis
"""
BEAMFRAME: Linear-Elastic Analysis of Continuous Beams and Rigid Frames
=======================================================================

This package provides:
- Continuous beam analysis (slope-deflection method)
- Planar frame analysis (direct stiffness, sway / non-sway)
- Fixed-end moment library for point, uniform, varying and moment loads
- Shear / moment / deflection diagrams and a step-by-step calculation log

ARCHITECTURE:
-------------
    kernel/         DOF table, scatter-add assembly, Gaussian elimination
    config.py       Solver defaults (SolverConfig / CONFIG)
    errors.py       InputError, UnstableStructure (+ SingularMatrix)
    section.py      EI / EA from direct, multiplier or E & I input
    model.py        Frozen domain model: nodes, spans, members, loads
    fem.py          Fixed-end moments and simply-supported statics
    loads.py        Member loads as local fixed-end force vectors
    elements.py     Member stiffness, transformation, moment releases
    assembly.py     Frame DOF numbering and global K / F
    post.py         Frame end forces, reactions, drift
    diagrams.py     Internal force diagrams
    beam.py         ContinuousBeamSolver
    frame.py        FrameAnalysisSolver
    calc_log.py     Calculation log structures
    results.py      Result dataclasses
    document.py     Pydantic input documents
    builders.py     Grid / portal / gable / inclined-column frames
"""

from .config import CONFIG, SolverConfig
from .errors import InputError, SingularMatrix, UnstableStructure
from .section import EIMode, Rigidity, SectionDefaults
from .model import (
    BeamNode,
    ContinuousBeam,
    Frame,
    FrameMember,
    FrameNode,
    JointLoad,
    MemberMomentLoad,
    MemberPointLoad,
    MemberType,
    MemberUniformLoad,
    MemberVaryingLoad,
    MomentLoad,
    PointLoad,
    RollerDirection,
    Settlement,
    Span,
    SupportType,
    UniformLoad,
    VaryingLoad,
)
from .beam import ContinuousBeamSolver, solve_continuous_beam
from .frame import FrameAnalysisSolver, solve_frame
from .document import parse_beam_document, parse_frame_document

__version__ = "0.1.0"

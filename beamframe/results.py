# beamframe/results.py
"""
Solver results.

Everything a solve() returns is a frozen dataclass; to_dict() gives the
plain output document (lists, dicts, floats, None).
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from .calc_log import CalculationLog


@dataclass(frozen=True)
class DiagramPoint:
    x: float      # m (beam: absolute position; member: distance from start)
    value: float


@dataclass(frozen=True)
class MaxValue:
    """Signed value with the largest magnitude, and where it occurs."""
    value: float
    position: float


def max_abs(points: Tuple[DiagramPoint, ...]) -> MaxValue:
    best = MaxValue(0.0, 0.0)
    for p in points:
        if abs(p.value) > abs(best.value):
            best = MaxValue(p.value, p.x)
    return best


# ---------------------------------------------------------------------------
# Continuous beam
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeRotation:
    node_id: str
    rotation: float  # rad


@dataclass(frozen=True)
class SpanEndMoments:
    """Slope-deflection end moments, clockwise positive on the member."""
    span_id: str
    fem_start: float
    fem_end: float
    m_start: float
    m_end: float


@dataclass(frozen=True)
class BeamReaction:
    """
    Support reaction.

    The moment of a fixed support is reported in the end-moment convention
    of SpanEndMoments (clockwise positive on the member), not negated into
    the support. At an end support it equals the adjacent span's end
    moment there (m_start at a span start, m_end at a span end). At an
    interior fixed support it is the sum of both adjacent span end moments.
    """
    node_id: str
    position: float
    vertical: float                 # kN, upward positive
    moment: Optional[float] = None  # kN·m, fixed supports only


@dataclass(frozen=True)
class BeamResult:
    rotations: Tuple[NodeRotation, ...]
    end_moments: Tuple[SpanEndMoments, ...]
    reactions: Tuple[BeamReaction, ...]
    shear: Tuple[DiagramPoint, ...]
    moment: Tuple[DiagramPoint, ...]
    deflection: Tuple[DiagramPoint, ...]  # mm, visualization estimate
    max_shear: MaxValue
    max_moment: MaxValue
    max_deflection: MaxValue
    calculation_log: CalculationLog

    def rotation(self, node_id: str) -> float:
        for r in self.rotations:
            if r.node_id == node_id:
                return r.rotation
        raise KeyError(node_id)

    def reaction(self, node_id: str) -> BeamReaction:
        for r in self.reactions:
            if r.node_id == node_id:
                return r
        raise KeyError(node_id)

    def span_moments(self, span_id: str) -> SpanEndMoments:
        for m in self.end_moments:
            if m.span_id == span_id:
                return m
        raise KeyError(span_id)

    @property
    def total_reaction(self) -> float:
        return sum(r.vertical for r in self.reactions)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Frame
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeDisplacement:
    node_id: str
    dx: float        # m, right positive
    dy: float        # m, up positive
    rotation: float  # rad, counter-clockwise positive


@dataclass(frozen=True)
class MemberEndForces:
    """
    Local end actions on the member (axial along start→end, shear along
    local +y, moments counter-clockwise), including fixed-end forces.
    """
    member_id: str
    axial_start: float
    shear_start: float
    moment_start: float
    axial_end: float
    shear_end: float
    moment_end: float


@dataclass(frozen=True)
class FrameReaction:
    """Support reaction; components the support does not restrain are None."""
    node_id: str
    fx: Optional[float]
    fy: Optional[float]
    moment: Optional[float]


@dataclass(frozen=True)
class BracingForce:
    """Horizontal force the bracing supplies to a joint of a non-sway frame."""
    node_id: str
    fx: float


@dataclass(frozen=True)
class MemberDiagram:
    """Internal forces along a member: tension and sagging positive."""
    member_id: str
    member_type: str
    length: float
    axial: Tuple[DiagramPoint, ...]
    shear: Tuple[DiagramPoint, ...]
    moment: Tuple[DiagramPoint, ...]


@dataclass(frozen=True)
class MemberMax:
    member_id: str
    value: float
    position: float  # normalized 0..1 along the member


@dataclass(frozen=True)
class StoryDrift:
    story_index: int  # upper storey of the pair
    drift: float      # Δ(avg dx) / storey height


@dataclass(frozen=True)
class FrameResult:
    displacements: Tuple[NodeDisplacement, ...]
    member_forces: Tuple[MemberEndForces, ...]
    reactions: Tuple[FrameReaction, ...]
    bracing_forces: Tuple[BracingForce, ...]
    diagrams: Tuple[MemberDiagram, ...]
    max_moment: Optional[MemberMax]
    max_shear: Optional[MemberMax]
    max_axial: Optional[MemberMax]
    max_drift: Optional[StoryDrift]
    sway_displacement: Optional[float]
    calculation_log: CalculationLog

    def displacement(self, node_id: str) -> NodeDisplacement:
        for d in self.displacements:
            if d.node_id == node_id:
                return d
        raise KeyError(node_id)

    def member(self, member_id: str) -> MemberEndForces:
        for f in self.member_forces:
            if f.member_id == member_id:
                return f
        raise KeyError(member_id)

    def diagram(self, member_id: str) -> MemberDiagram:
        for d in self.diagrams:
            if d.member_id == member_id:
                return d
        raise KeyError(member_id)

    def reaction(self, node_id: str) -> FrameReaction:
        for r in self.reactions:
            if r.node_id == node_id:
                return r
        raise KeyError(node_id)

    def total_reaction(self) -> Tuple[float, float]:
        """(Σfx, Σfy) over supports and bracing."""
        fx = sum(r.fx or 0.0 for r in self.reactions) + sum(b.fx for b in self.bracing_forces)
        fy = sum(r.fy or 0.0 for r in self.reactions)
        return fx, fy

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

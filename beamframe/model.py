# beamframe/model.py
"""
DOMAIN MODEL: Beams, Frames and Their Loads
===========================================

All model objects are frozen dataclasses. A model is checked once, when
it is constructed; anything inconsistent (dangling id, non-positive
length or EI, load outside its member) raises InputError right there, so
the solvers only ever see well-formed input.

UNITS:
------
    length m, force kN, distributed load kN/m, moment kN·m, angle rad

SIGN CONVENTIONS:
-----------------
    Beam span loads      point/UDL/VDL magnitude positive DOWNWARD
    Applied moments      positive COUNTER-CLOCKWISE
    Beam settlement      positive DOWNWARD (m)

    Joint loads          fx positive right, fy positive up, moment CCW
    Member loads         perpendicular to the member, positive toward
                         local -y (downward on a beam drawn left→right)
    Member positions     normalized 0..1 from the start node
    Frame settlement     dx right, dy DOWN, rotation CLOCKWISE

Loads are a closed set of variants; code that dispatches on them uses an
isinstance chain ending in a TypeError for anything unexpected.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .errors import InputError
from .section import Rigidity, SectionDefaults

POSITION_TOL = 1e-9


class SupportType(str, Enum):
    FIXED = "fixed"
    PINNED = "pinned"
    ROLLER = "roller"
    FREE = "free"

    @property
    def restraint_count(self) -> int:
        """Restraint count used by the beam stability pre-check."""
        return {"fixed": 2, "pinned": 1, "roller": 1, "free": 0}[self.value]


class RollerDirection(str, Enum):
    HORIZONTAL = "horizontal"  # rolls along x: dy restrained
    VERTICAL = "vertical"      # rolls along y: dx restrained


class MemberType(str, Enum):
    BEAM = "beam"
    COLUMN = "column"


def _finite(value: float, what: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InputError(f"{what} must be a number, got {value!r}") from None
    if not math.isfinite(value):
        raise InputError(f"{what} must be finite, got {value}")
    return value


def _check_range(value: float, low: float, high: float, what: str) -> None:
    if value < low - POSITION_TOL or value > high + POSITION_TOL:
        raise InputError(f"{what} = {value:g} outside [{low:g}, {high:g}]")


def _unique_ids(items, kind: str) -> None:
    seen = set()
    for item in items:
        if item.id in seen:
            raise InputError(f"Duplicate {kind} id '{item.id}'")
        seen.add(item.id)


# ---------------------------------------------------------------------------
# Span loads (beam spans, positions in metres from the span start)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PointLoad:
    id: str
    span_id: str
    magnitude: float
    position: float


@dataclass(frozen=True)
class UniformLoad:
    """UDL from `start` to `end` (end=None: to the end of the span)."""
    id: str
    span_id: str
    magnitude: float
    start: float = 0.0
    end: Optional[float] = None

    def bounds(self, length: float) -> Tuple[float, float]:
        return self.start, length if self.end is None else self.end


@dataclass(frozen=True)
class VaryingLoad:
    """Linearly varying load, start_magnitude at `start` to end_magnitude at `end`."""
    id: str
    span_id: str
    start_magnitude: float
    end_magnitude: float
    start: float = 0.0
    end: Optional[float] = None

    def bounds(self, length: float) -> Tuple[float, float]:
        return self.start, length if self.end is None else self.end


@dataclass(frozen=True)
class MomentLoad:
    """Concentrated couple, counter-clockwise positive."""
    id: str
    span_id: str
    magnitude: float
    position: float


SpanLoad = Union[PointLoad, UniformLoad, VaryingLoad, MomentLoad]


def _validate_span_load(load: SpanLoad, length: float) -> None:
    where = f"load '{load.id}'"
    if isinstance(load, (PointLoad, MomentLoad)):
        _finite(load.magnitude, f"{where} magnitude")
        _check_range(_finite(load.position, f"{where} position"), 0.0, length, f"{where} position")
    elif isinstance(load, (UniformLoad, VaryingLoad)):
        if isinstance(load, UniformLoad):
            _finite(load.magnitude, f"{where} magnitude")
        else:
            _finite(load.start_magnitude, f"{where} start magnitude")
            _finite(load.end_magnitude, f"{where} end magnitude")
        start, end = load.bounds(length)
        _check_range(_finite(start, f"{where} start"), 0.0, length, f"{where} start")
        _check_range(_finite(end, f"{where} end"), 0.0, length, f"{where} end")
        if not start < end:
            raise InputError(f"{where}: start ({start:g}) must be before end ({end:g})")
    else:
        raise TypeError(f"Unknown span load type {type(load).__name__}")


# ---------------------------------------------------------------------------
# Continuous beam
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BeamNode:
    id: str
    position: float
    support: SupportType = SupportType.PINNED
    settlement: float = 0.0


@dataclass(frozen=True)
class Span:
    """Span between two beam nodes. length=None: taken from the node positions."""
    id: str
    start: str
    end: str
    length: Optional[float] = None
    rigidity: Rigidity = field(default_factory=Rigidity)


@dataclass(frozen=True)
class ContinuousBeam:
    """
    A beam on supports, spans connecting consecutive nodes left to right.

    On construction nodes are sorted by position, span lengths are filled
    in and every reference is checked.
    """
    nodes: Sequence[BeamNode]
    spans: Sequence[Span]
    loads: Sequence[SpanLoad] = ()
    defaults: SectionDefaults = field(default_factory=SectionDefaults)

    def __post_init__(self):
        nodes = tuple(sorted(self.nodes, key=lambda n: n.position))
        object.__setattr__(self, "nodes", nodes)
        object.__setattr__(self, "loads", tuple(self.loads))
        _unique_ids(nodes, "node")
        _unique_ids(self.spans, "span")
        _unique_ids(self.loads, "load")

        by_id = {n.id: n for n in nodes}
        for node in nodes:
            _finite(node.position, f"node '{node.id}' position")
            if _finite(node.settlement, f"node '{node.id}' settlement") != 0.0 \
                    and node.support == SupportType.FREE:
                raise InputError(f"Free node '{node.id}' cannot have a settlement")

        spans = []
        for span in self.spans:
            if span.start not in by_id or span.end not in by_id:
                raise InputError(
                    f"Span '{span.id}' references unknown node "
                    f"('{span.start}', '{span.end}')"
                )
            a, b = by_id[span.start].position, by_id[span.end].position
            spacing = b - a
            if spacing <= 0.0:
                raise InputError(
                    f"Span '{span.id}' must run left to right "
                    f"('{span.start}' at {a:g} m, '{span.end}' at {b:g} m)"
                )
            length = spacing if span.length is None else _finite(span.length, f"span '{span.id}' length")
            if length <= 0.0:
                raise InputError(f"Span '{span.id}' length must be positive, got {length:g}")
            if abs(length - spacing) > 1e-6 * max(1.0, spacing):
                raise InputError(
                    f"Span '{span.id}' length {length:g} m does not match node spacing {spacing:g} m"
                )
            if span.rigidity.effective_ei(self.defaults) <= 0.0:
                raise InputError(f"Span '{span.id}' must have positive EI")
            spans.append(replace(span, length=length))

        # Spans must chain the sorted nodes without gaps
        if spans and len(spans) != len(nodes) - 1:
            raise InputError(
                f"{len(nodes)} nodes need {len(nodes) - 1} spans, got {len(spans)}"
            )
        spans.sort(key=lambda s: by_id[s.start].position)
        node_index = {n.id: i for i, n in enumerate(nodes)}
        for span in spans:
            i, j = node_index[span.start], node_index[span.end]
            if j != i + 1:
                raise InputError(f"Span '{span.id}' must connect adjacent nodes")
        for left, right in zip(spans, spans[1:]):
            if left.end != right.start:
                raise InputError(
                    f"Spans '{left.id}' and '{right.id}' leave a gap between nodes"
                )
        object.__setattr__(self, "spans", tuple(spans))

        span_by_id = {s.id: s for s in spans}
        for load in self.loads:
            if load.span_id not in span_by_id:
                raise InputError(f"Load '{load.id}' references unknown span '{load.span_id}'")
            _validate_span_load(load, span_by_id[load.span_id].length)

    def node(self, node_id: str) -> BeamNode:
        for n in self.nodes:
            if n.id == node_id:
                return n
        raise KeyError(node_id)

    def span_ei(self, span: Span) -> float:
        return span.rigidity.effective_ei(self.defaults)

    def loads_on(self, span_id: str) -> List[SpanLoad]:
        return [load for load in self.loads if load.span_id == span_id]

    @property
    def total_length(self) -> float:
        return self.nodes[-1].position - self.nodes[0].position if self.nodes else 0.0


# ---------------------------------------------------------------------------
# Frame loads (member positions normalized 0..1)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JointLoad:
    id: str
    node_id: str
    fx: float = 0.0
    fy: float = 0.0
    moment: float = 0.0


@dataclass(frozen=True)
class MemberPointLoad:
    id: str
    member_id: str
    magnitude: float
    position: float

    def to_span_load(self, length: float) -> PointLoad:
        return PointLoad(self.id, self.member_id, self.magnitude, self.position * length)


@dataclass(frozen=True)
class MemberUniformLoad:
    id: str
    member_id: str
    magnitude: float
    start: float = 0.0
    end: float = 1.0

    def to_span_load(self, length: float) -> UniformLoad:
        return UniformLoad(self.id, self.member_id, self.magnitude,
                           self.start * length, self.end * length)


@dataclass(frozen=True)
class MemberVaryingLoad:
    id: str
    member_id: str
    start_magnitude: float
    end_magnitude: float
    start: float = 0.0
    end: float = 1.0

    def to_span_load(self, length: float) -> VaryingLoad:
        return VaryingLoad(self.id, self.member_id, self.start_magnitude, self.end_magnitude,
                           self.start * length, self.end * length)


@dataclass(frozen=True)
class MemberMomentLoad:
    id: str
    member_id: str
    magnitude: float
    position: float

    def to_span_load(self, length: float) -> MomentLoad:
        return MomentLoad(self.id, self.member_id, self.magnitude, self.position * length)


MemberLoad = Union[MemberPointLoad, MemberUniformLoad, MemberVaryingLoad, MemberMomentLoad]
FrameLoad = Union[JointLoad, MemberPointLoad, MemberUniformLoad, MemberVaryingLoad, MemberMomentLoad]


# ---------------------------------------------------------------------------
# Frame
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settlement:
    dx: float = 0.0        # m, positive right
    dy: float = 0.0        # m, positive down
    rotation: float = 0.0  # rad, positive clockwise

    @property
    def is_zero(self) -> bool:
        return self.dx == 0.0 and self.dy == 0.0 and self.rotation == 0.0


@dataclass(frozen=True)
class FrameNode:
    id: str
    x: float
    y: float
    support: SupportType = SupportType.FREE
    roller_direction: RollerDirection = RollerDirection.HORIZONTAL
    settlement: Optional[Settlement] = None
    story_index: Optional[int] = None
    bay_index: Optional[int] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class FrameMember:
    id: str
    start: str
    end: str
    member_type: MemberType = MemberType.BEAM
    rigidity: Rigidity = field(default_factory=Rigidity)
    release_start: bool = False
    release_end: bool = False


@dataclass(frozen=True)
class Frame:
    """
    A planar rigid frame.

    is_sway=True lets joints translate laterally, with all free joints of
    a storey sharing one horizontal DOF. is_sway=False treats the frame as
    braced: free joints are held horizontally.
    """
    nodes: Sequence[FrameNode]
    members: Sequence[FrameMember]
    loads: Sequence[FrameLoad] = ()
    is_sway: bool = False
    defaults: SectionDefaults = field(default_factory=SectionDefaults)
    story_heights: Optional[Sequence[float]] = None

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "members", tuple(self.members))
        object.__setattr__(self, "loads", tuple(self.loads))
        if self.story_heights is not None:
            object.__setattr__(self, "story_heights", tuple(self.story_heights))
            for h in self.story_heights:
                if _finite(h, "story height") <= 0.0:
                    raise InputError(f"Story heights must be positive, got {h:g}")
        _unique_ids(self.nodes, "node")
        _unique_ids(self.members, "member")
        _unique_ids(self.loads, "load")

        by_id = self.node_map()
        for node in self.nodes:
            _finite(node.x, f"node '{node.id}' x")
            _finite(node.y, f"node '{node.id}' y")
            if node.story_index is not None and node.story_index < 0:
                raise InputError(f"Node '{node.id}' story index must be >= 0")
            if node.settlement is not None and not node.settlement.is_zero \
                    and node.support == SupportType.FREE:
                raise InputError(f"Free node '{node.id}' cannot have a settlement")

        connected = set()
        for member in self.members:
            if member.start not in by_id or member.end not in by_id:
                raise InputError(
                    f"Member '{member.id}' references unknown node "
                    f"('{member.start}', '{member.end}')"
                )
            if self.member_length(member) <= 0.0:
                raise InputError(f"Member '{member.id}' must have positive length")
            if member.rigidity.effective_ei(self.defaults) <= 0.0:
                raise InputError(f"Member '{member.id}' must have positive EI")
            connected.update((member.start, member.end))

        for node in self.nodes:
            if node.id not in connected:
                raise InputError(f"Node '{node.id}' is not connected to any member")

        members = self.member_map()
        for load in self.loads:
            where = f"load '{load.id}'"
            if isinstance(load, JointLoad):
                if load.node_id not in by_id:
                    raise InputError(f"{where} references unknown node '{load.node_id}'")
                _finite(load.fx, f"{where} fx")
                _finite(load.fy, f"{where} fy")
                _finite(load.moment, f"{where} moment")
            elif isinstance(load, (MemberPointLoad, MemberUniformLoad,
                                   MemberVaryingLoad, MemberMomentLoad)):
                if load.member_id not in members:
                    raise InputError(f"{where} references unknown member '{load.member_id}'")
                if isinstance(load, (MemberUniformLoad, MemberVaryingLoad)):
                    _check_range(_finite(load.start, f"{where} start"), 0.0, 1.0, f"{where} start")
                    _check_range(_finite(load.end, f"{where} end"), 0.0, 1.0, f"{where} end")
                _validate_span_load(
                    load.to_span_load(self.member_length(members[load.member_id])),
                    self.member_length(members[load.member_id]),
                )
            else:
                raise TypeError(f"Unknown frame load type {type(load).__name__}")

    def node_map(self) -> Dict[str, FrameNode]:
        return {n.id: n for n in self.nodes}

    def member_map(self) -> Dict[str, FrameMember]:
        return {m.id: m for m in self.members}

    def member_geometry(self, member: FrameMember) -> Tuple[float, float, float]:
        """(L, cos, sin) of the member chord."""
        nodes = self.node_map()
        ni, nj = nodes[member.start], nodes[member.end]
        dx, dy = nj.x - ni.x, nj.y - ni.y
        L = math.hypot(dx, dy)
        if L == 0.0:
            return 0.0, 1.0, 0.0
        return L, dx / L, dy / L

    def member_length(self, member: FrameMember) -> float:
        return self.member_geometry(member)[0]

    def member_ei(self, member: FrameMember) -> float:
        return member.rigidity.effective_ei(self.defaults)

    def member_ea(self, member: FrameMember, ratio: float) -> float:
        return member.rigidity.effective_ea(self.defaults, ratio)

    def joint_loads(self) -> List[JointLoad]:
        return [load for load in self.loads if isinstance(load, JointLoad)]

    def member_loads(self, member_id: Optional[str] = None) -> List[MemberLoad]:
        return [
            load for load in self.loads
            if not isinstance(load, JointLoad)
            and (member_id is None or load.member_id == member_id)
        ]

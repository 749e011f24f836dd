# beamframe/document.py
"""
INPUT DOCUMENTS: JSON In, Domain Model Out
==========================================

The solvers are fed documents shaped like the stored/edited project
data (camelCase keys, loads tagged by "type"). Pydantic models check the
shape; to_model() builds the frozen domain model, which checks the
engineering rules (references, lengths, positions).

Both stages report problems as InputError.

    beam  = parse_beam_document(json_text_or_dict)
    frame = parse_frame_document(json_text_or_dict)
"""

import json
from typing import Annotated, Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import CONFIG, SolverConfig
from .errors import InputError
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
from .section import EIMode, Rigidity, SectionDefaults


class _Doc(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RigidityDoc(_Doc):
    """Flexural rigidity input shared by spans and members."""
    ei_mode: Literal["direct", "multiplier", "separate"] = Field("multiplier", alias="eiMode")
    ei: Optional[float] = Field(None, description="Direct EI (kN·m²)")
    i_multiplier: float = Field(1.0, alias="iMultiplier", description="Multiplier on the default EI")
    E: Optional[float] = Field(None, description="Modulus of elasticity")
    I: Optional[float] = Field(None, description="Second moment of area")
    A: Optional[float] = Field(None, description="Cross-section area")
    e_unit: Optional[str] = Field(None, alias="EUnit")
    i_unit: Optional[str] = Field(None, alias="IUnit")
    a_unit: Optional[str] = Field(None, alias="AUnit")

    def rigidity(self) -> Rigidity:
        return Rigidity(
            mode=EIMode(self.ei_mode),
            ei=self.ei,
            multiplier=self.i_multiplier,
            E=self.E, e_unit=self.e_unit,
            I=self.I, i_unit=self.i_unit,
            A=self.A, a_unit=self.a_unit,
        )


class DefaultsDoc(_Doc):
    default_ei: Optional[float] = Field(None, alias="defaultEI")
    default_e: Optional[float] = Field(None, alias="defaultE")
    default_e_unit: Optional[str] = Field(None, alias="defaultEUnit")
    default_i: Optional[float] = Field(None, alias="defaultI")
    default_i_unit: Optional[str] = Field(None, alias="defaultIUnit")
    default_a: Optional[float] = Field(None, alias="defaultA")
    default_a_unit: Optional[str] = Field(None, alias="defaultAUnit")

    def section_defaults(self, config: SolverConfig) -> SectionDefaults:
        base = SectionDefaults.from_config(config, self.default_ei)

        def pick(value, fallback):
            return fallback if value is None else value

        return SectionDefaults(
            ei=base.ei,
            e=pick(self.default_e, base.e), e_unit=pick(self.default_e_unit, base.e_unit),
            i=pick(self.default_i, base.i), i_unit=pick(self.default_i_unit, base.i_unit),
            a=pick(self.default_a, base.a), a_unit=pick(self.default_a_unit, base.a_unit),
        )


# =============================================================================
# Continuous beam
# =============================================================================

class BeamNodeDoc(_Doc):
    id: str
    position: float = Field(..., description="Distance from the left end (m)")
    support_type: Literal["fixed", "pinned", "roller", "free"] = Field("pinned", alias="supportType")
    settlement: float = Field(0.0, description="Vertical settlement (m, positive down)")


class SpanDoc(RigidityDoc):
    id: str
    node_start_id: str = Field(..., alias="nodeStartId")
    node_end_id: str = Field(..., alias="nodeEndId")
    length: Optional[float] = Field(None, description="Span length (m)")


class PointLoadDoc(_Doc):
    type: Literal["point"]
    id: str
    span_id: str = Field(..., alias="spanId")
    magnitude: float
    position: float


class UDLDoc(_Doc):
    type: Literal["udl"]
    id: str
    span_id: str = Field(..., alias="spanId")
    magnitude: float
    start_position: float = Field(0.0, alias="startPosition")
    end_position: Optional[float] = Field(None, alias="endPosition")


class VDLDoc(_Doc):
    type: Literal["vdl"]
    id: str
    span_id: str = Field(..., alias="spanId")
    w1: float
    w2: float
    start_position: float = Field(0.0, alias="startPosition")
    end_position: Optional[float] = Field(None, alias="endPosition")


class MomentDoc(_Doc):
    type: Literal["moment"]
    id: str
    span_id: str = Field(..., alias="spanId")
    magnitude: float = Field(..., description="kN·m, counter-clockwise positive")
    position: float


BeamLoadDoc = Annotated[
    Union[PointLoadDoc, UDLDoc, VDLDoc, MomentDoc],
    Field(discriminator="type"),
]


class BeamDocument(DefaultsDoc):
    """Continuous beam input document."""
    nodes: List[BeamNodeDoc]
    spans: List[SpanDoc]
    loads: List[BeamLoadDoc] = Field(default_factory=list)

    def to_model(self, config: SolverConfig = CONFIG) -> ContinuousBeam:
        loads = []
        for load in self.loads:
            if isinstance(load, PointLoadDoc):
                loads.append(PointLoad(load.id, load.span_id, load.magnitude, load.position))
            elif isinstance(load, UDLDoc):
                loads.append(UniformLoad(load.id, load.span_id, load.magnitude,
                                         load.start_position, load.end_position))
            elif isinstance(load, VDLDoc):
                loads.append(VaryingLoad(load.id, load.span_id, load.w1, load.w2,
                                         load.start_position, load.end_position))
            elif isinstance(load, MomentDoc):
                loads.append(MomentLoad(load.id, load.span_id, load.magnitude, load.position))
            else:
                raise TypeError(f"Unknown beam load document {type(load).__name__}")

        return ContinuousBeam(
            nodes=[
                BeamNode(n.id, n.position, SupportType(n.support_type), n.settlement)
                for n in self.nodes
            ],
            spans=[
                Span(s.id, s.node_start_id, s.node_end_id, s.length, s.rigidity())
                for s in self.spans
            ],
            loads=loads,
            defaults=self.section_defaults(config),
        )


# =============================================================================
# Frame
# =============================================================================

class SettlementDoc(_Doc):
    dx: float = 0.0
    dy: float = 0.0
    rotation: float = 0.0


class FrameNodeDoc(_Doc):
    id: str
    x: float
    y: float
    support: Optional[Literal["fixed", "pinned", "roller", "free"]] = None
    roller_direction: Literal["horizontal", "vertical"] = Field("horizontal", alias="rollerDirection")
    settlement: Optional[SettlementDoc] = None
    story_index: Optional[int] = Field(None, alias="storyIndex")
    bay_index: Optional[int] = Field(None, alias="bayIndex")
    label: Optional[str] = None


class FrameMemberDoc(RigidityDoc):
    id: str
    node_start_id: str = Field(..., alias="nodeStartId")
    node_end_id: str = Field(..., alias="nodeEndId")
    member_type: Literal["beam", "column"] = Field("beam", alias="memberType")
    release_start: bool = Field(False, alias="releaseStart")
    release_end: bool = Field(False, alias="releaseEnd")


class JointLoadDoc(_Doc):
    type: Literal["joint"]
    id: str
    node_id: str = Field(..., alias="nodeId")
    fx: float = 0.0
    fy: float = 0.0
    moment: float = 0.0


class MemberPointLoadDoc(_Doc):
    type: Literal["member-point"]
    id: str
    member_id: str = Field(..., alias="memberId")
    magnitude: float
    position: float = Field(..., description="Normalized 0..1 from the start node")


class MemberUDLDoc(_Doc):
    type: Literal["member-udl"]
    id: str
    member_id: str = Field(..., alias="memberId")
    magnitude: float
    start_position: float = Field(0.0, alias="startPosition")
    end_position: float = Field(1.0, alias="endPosition")


class MemberVDLDoc(_Doc):
    type: Literal["member-vdl"]
    id: str
    member_id: str = Field(..., alias="memberId")
    w1: float
    w2: float
    start_position: float = Field(0.0, alias="startPosition")
    end_position: float = Field(1.0, alias="endPosition")


class MemberMomentDoc(_Doc):
    type: Literal["member-moment"]
    id: str
    member_id: str = Field(..., alias="memberId")
    magnitude: float
    position: float


FrameLoadDoc = Annotated[
    Union[JointLoadDoc, MemberPointLoadDoc, MemberUDLDoc, MemberVDLDoc, MemberMomentDoc],
    Field(discriminator="type"),
]


class FrameDocument(DefaultsDoc):
    """Frame input document."""
    nodes: List[FrameNodeDoc]
    members: List[FrameMemberDoc]
    loads: List[FrameLoadDoc] = Field(default_factory=list)
    is_sway: bool = Field(False, alias="isSway")
    story_heights: Optional[List[float]] = Field(None, alias="storyHeights")

    def to_model(self, config: SolverConfig = CONFIG) -> Frame:
        loads = []
        for load in self.loads:
            if isinstance(load, JointLoadDoc):
                loads.append(JointLoad(load.id, load.node_id, load.fx, load.fy, load.moment))
            elif isinstance(load, MemberPointLoadDoc):
                loads.append(MemberPointLoad(load.id, load.member_id, load.magnitude, load.position))
            elif isinstance(load, MemberUDLDoc):
                loads.append(MemberUniformLoad(load.id, load.member_id, load.magnitude,
                                               load.start_position, load.end_position))
            elif isinstance(load, MemberVDLDoc):
                loads.append(MemberVaryingLoad(load.id, load.member_id, load.w1, load.w2,
                                               load.start_position, load.end_position))
            elif isinstance(load, MemberMomentDoc):
                loads.append(MemberMomentLoad(load.id, load.member_id, load.magnitude, load.position))
            else:
                raise TypeError(f"Unknown frame load document {type(load).__name__}")

        nodes = []
        for n in self.nodes:
            settlement = None
            if n.settlement is not None:
                settlement = Settlement(n.settlement.dx, n.settlement.dy, n.settlement.rotation)
            nodes.append(FrameNode(
                id=n.id, x=n.x, y=n.y,
                support=SupportType(n.support or "free"),
                roller_direction=RollerDirection(n.roller_direction),
                settlement=settlement,
                story_index=n.story_index,
                bay_index=n.bay_index,
                label=n.label,
            ))

        members = [
            FrameMember(
                id=m.id, start=m.node_start_id, end=m.node_end_id,
                member_type=MemberType(m.member_type),
                rigidity=m.rigidity(),
                release_start=m.release_start,
                release_end=m.release_end,
            )
            for m in self.members
        ]

        return Frame(
            nodes=nodes,
            members=members,
            loads=loads,
            is_sway=self.is_sway,
            defaults=self.section_defaults(config),
            story_heights=self.story_heights,
        )


# =============================================================================
# Entry points
# =============================================================================

def _validate(model_cls, data: Union[str, bytes, Mapping[str, Any]]):
    try:
        if isinstance(data, (str, bytes)):
            return model_cls.model_validate_json(data)
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise InputError(f"Invalid {model_cls.__name__}: {exc}") from exc


def parse_beam_document(data, config: SolverConfig = CONFIG) -> ContinuousBeam:
    """Validate a beam document (dict or JSON text) and build the model."""
    return _validate(BeamDocument, data).to_model(config)


def parse_frame_document(data, config: SolverConfig = CONFIG) -> Frame:
    """Validate a frame document (dict or JSON text) and build the model."""
    return _validate(FrameDocument, data).to_model(config)


def dump_result(result) -> str:
    """Output document as JSON text."""
    return json.dumps(result.to_dict())

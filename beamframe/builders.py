# beamframe/builders.py
"""
FRAME BUILDERS: Common Frame Geometries from a Few Parameters
=============================================================

Each builder returns a ready-to-solve Frame (add loads through `loads=`
or dataclasses.replace). Node and member ids follow a fixed scheme so
loads can be written against them:

    grid_frame            nodes N{story}-{bay}, columns C{story}-{bay},
                          beams B{story}-{bay}
    portal_frame          N1/N2 bases, N3/N4 eaves, N5 ridge;
                          C1/C2 columns, R1/R2 rafters
    gable_frame_with_tie  portal_frame + tie T1 between the eaves
    inclined_column_frame N1/N2 bases, N3/N4 tops; C1/C2 columns, B1 beam

    N3 ─────── N4          N5                  N3 ── N4
    │           │        ╱    ╲               ╱      ╲
    │           │      N3      N4            ╱        ╲
    N1         N2      │        │          N1          N2
                       N1      N2
"""

from dataclasses import replace
from typing import Dict, List, Sequence

from .errors import InputError
from .model import (
    Frame,
    FrameLoad,
    FrameMember,
    FrameNode,
    MemberType,
    SupportType,
)
from .section import Rigidity, SectionDefaults


def _positive(value: float, name: str) -> None:
    if value <= 0:
        raise InputError(f"{name} must be positive, got {value}")


def grid_frame(
    bays: int,
    stories: int,
    bay_width: float,
    story_height: float,
    base_support: SupportType = SupportType.FIXED,
    loads: Sequence[FrameLoad] = (),
    is_sway: bool = False,
    defaults: SectionDefaults = SectionDefaults(),
) -> Frame:
    """
    Regular multi-bay, multi-storey rectangular frame.

    Parameters:
    -----------
    bays, stories : int
        Number of bays (≥1) and storeys (≥1)
    bay_width, story_height : float
        Grid spacing (m)
    base_support : SupportType
        Support given to every ground-level node
    """
    if bays < 1 or stories < 1:
        raise InputError(f"bays and stories must be >= 1, got {bays} and {stories}")
    _positive(bay_width, "bay_width")
    _positive(story_height, "story_height")

    nodes = [
        FrameNode(
            id=f"N{story}-{bay}",
            x=bay * bay_width,
            y=story * story_height,
            support=base_support if story == 0 else SupportType.FREE,
            story_index=story,
            bay_index=bay,
        )
        for story in range(stories + 1)
        for bay in range(bays + 1)
    ]

    members = [
        FrameMember(f"C{story}-{bay}", f"N{story}-{bay}", f"N{story + 1}-{bay}", MemberType.COLUMN)
        for story in range(stories)
        for bay in range(bays + 1)
    ]
    members += [
        FrameMember(f"B{story}-{bay}", f"N{story}-{bay}", f"N{story}-{bay + 1}", MemberType.BEAM)
        for story in range(1, stories + 1)
        for bay in range(bays)
    ]

    return Frame(nodes, members, loads, is_sway=is_sway, defaults=defaults,
                 story_heights=[story_height] * stories)


def portal_frame(
    span: float,
    eave_height: float,
    ridge_height: float,
    base_support: SupportType = SupportType.FIXED,
    loads: Sequence[FrameLoad] = (),
    is_sway: bool = False,
    defaults: SectionDefaults = SectionDefaults(),
) -> Frame:
    """Single-bay pitched portal: two columns and two rafters meeting at the ridge."""
    _positive(span, "span")
    _positive(eave_height, "eave_height")
    if ridge_height < eave_height:
        raise InputError(
            f"ridge_height ({ridge_height}) must not be below eave_height ({eave_height})"
        )

    nodes = [
        FrameNode("N1", 0.0, 0.0, base_support, label="Left Base"),
        FrameNode("N2", span, 0.0, base_support, label="Right Base"),
        FrameNode("N3", 0.0, eave_height, label="Left Eave"),
        FrameNode("N4", span, eave_height, label="Right Eave"),
        FrameNode("N5", span / 2.0, ridge_height, label="Ridge"),
    ]
    members = [
        FrameMember("C1", "N1", "N3", MemberType.COLUMN),
        FrameMember("C2", "N2", "N4", MemberType.COLUMN),
        FrameMember("R1", "N3", "N5", MemberType.BEAM),
        FrameMember("R2", "N5", "N4", MemberType.BEAM),
    ]
    return Frame(nodes, members, loads, is_sway=is_sway, defaults=defaults)


def gable_frame_with_tie(
    span: float,
    eave_height: float,
    ridge_height: float,
    base_support: SupportType = SupportType.PINNED,
    loads: Sequence[FrameLoad] = (),
    is_sway: bool = False,
    defaults: SectionDefaults = SectionDefaults(),
    tie_multiplier: float = 0.5,
) -> Frame:
    """portal_frame plus a lighter tie T1 joining the eaves."""
    frame = portal_frame(span, eave_height, ridge_height, base_support,
                         is_sway=is_sway, defaults=defaults)
    tie = FrameMember("T1", "N3", "N4", MemberType.BEAM, Rigidity.relative(tie_multiplier))
    return replace(frame, members=list(frame.members) + [tie], loads=loads)


def inclined_column_frame(
    top_width: float,
    bottom_width: float,
    height: float,
    base_support: SupportType = SupportType.FIXED,
    loads: Sequence[FrameLoad] = (),
    is_sway: bool = False,
    defaults: SectionDefaults = SectionDefaults(),
) -> Frame:
    """Single-bay frame whose columns lean in (or out) to a beam of top_width."""
    _positive(top_width, "top_width")
    _positive(bottom_width, "bottom_width")
    _positive(height, "height")

    offset = (bottom_width - top_width) / 2.0
    nodes = [
        FrameNode("N1", 0.0, 0.0, base_support, label="Left Base"),
        FrameNode("N2", bottom_width, 0.0, base_support, label="Right Base"),
        FrameNode("N3", offset, height, label="Left Top"),
        FrameNode("N4", offset + top_width, height, label="Right Top"),
    ]
    members = [
        FrameMember("C1", "N1", "N3", MemberType.COLUMN),
        FrameMember("C2", "N2", "N4", MemberType.COLUMN),
        FrameMember("B1", "N3", "N4", MemberType.BEAM),
    ]
    return Frame(nodes, members, loads, is_sway=is_sway, defaults=defaults)


def frame_bounds(frame: Frame) -> Dict[str, float]:
    """Bounding box: min/max x and y, width, height."""
    if not frame.nodes:
        return {"min_x": 0.0, "max_x": 0.0, "min_y": 0.0, "max_y": 0.0, "width": 0.0, "height": 0.0}
    xs: List[float] = [n.x for n in frame.nodes]
    ys: List[float] = [n.y for n in frame.nodes]
    return {
        "min_x": min(xs), "max_x": max(xs),
        "min_y": min(ys), "max_y": max(ys),
        "width": max(xs) - min(xs), "height": max(ys) - min(ys),
    }


def frame_centroid(frame: Frame) -> Dict[str, float]:
    """Mean node position."""
    n = len(frame.nodes)
    if n == 0:
        return {"x": 0.0, "y": 0.0}
    return {
        "x": sum(node.x for node in frame.nodes) / n,
        "y": sum(node.y for node in frame.nodes) / n,
    }

# member end forces, reactions, bracing forces, drift

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from .assembly import MemberData, prescribed_displacements, support_restraints
from .diagrams import member_diagram
from .kernel.assemble import gather
from .kernel.dof import DOFManager
from .model import Frame, SupportType
from .results import (
    BracingForce,
    FrameReaction,
    MemberDiagram,
    MemberEndForces,
    MemberMax,
    NodeDisplacement,
    StoryDrift,
)

logger = logging.getLogger(__name__)


def node_displacements(frame: Frame, dofs: DOFManager, d: np.ndarray) -> List[NodeDisplacement]:
    """Global displacements of every node (prescribed values where restrained)."""
    out = []
    for node in frame.nodes:
        values = gather(d, dofs[node.id].as_list(), prescribed_displacements(node))
        out.append(NodeDisplacement(node.id, float(values[0]), float(values[1]), float(values[2])))
    return out


def member_end_forces(md: MemberData, d: np.ndarray) -> np.ndarray:
    """
    Local end actions f = k_local·(T·d_e) + f_fixed.

    d_e holds the member's six global end displacements, with settlement
    values at restrained components.
    """
    d_local = md.T @ gather(d, md.dof_map, md.prescribed)
    return md.k_local @ d_local + md.f_fixed


def end_forces_record(md: MemberData, f: np.ndarray) -> MemberEndForces:
    return MemberEndForces(
        member_id=md.member.id,
        axial_start=float(f[0]), shear_start=float(f[1]), moment_start=float(f[2]),
        axial_end=float(f[3]), shear_end=float(f[4]), moment_end=float(f[5]),
    )


def joint_force_sums(
    frame: Frame,
    members: List[MemberData],
    local_forces: Dict[str, np.ndarray],
) -> Dict[str, np.ndarray]:
    """
    Per node: Σ (global end forces of connected members) - applied joint load.

    This is what the node's support (or bracing) has to supply.
    """
    sums = {n.id: np.zeros(3, dtype=float) for n in frame.nodes}
    for md in members:
        f_global = md.T.T @ local_forces[md.member.id]
        sums[md.member.start] += f_global[:3]
        sums[md.member.end] += f_global[3:]
    for load in frame.joint_loads():
        sums[load.node_id] -= np.array([load.fx, load.fy, load.moment])
    return sums


def support_reactions(frame: Frame, sums: Dict[str, np.ndarray]) -> List[FrameReaction]:
    """Reactions by restrained component; moment only at fixed supports."""
    out = []
    for node in frame.nodes:
        if node.support == SupportType.FREE:
            continue
        hold_x, hold_y, _ = support_restraints(node)
        fx, fy, mz = sums[node.id]
        out.append(FrameReaction(
            node_id=node.id,
            fx=float(fx) if hold_x else None,
            fy=float(fy) if hold_y else None,
            moment=float(mz) if node.support == SupportType.FIXED else None,
        ))
    return out


def bracing_forces(frame: Frame, dofs: DOFManager, sums: Dict[str, np.ndarray]) -> List[BracingForce]:
    """Horizontal restraint forces at braced (non-sway) free joints."""
    out = []
    if frame.is_sway:
        return out
    for node in frame.nodes:
        if node.support == SupportType.FREE and dofs[node.id].dx is None:
            out.append(BracingForce(node.id, float(sums[node.id][0])))
    return out


def frame_member_diagrams(
    members: List[MemberData],
    local_forces: Dict[str, np.ndarray],
    n_points: int,
) -> List[MemberDiagram]:
    return [
        member_diagram(
            md.member.id,
            md.member.member_type.value,
            md.L,
            md.span_loads,
            local_forces[md.member.id],
            n_points,
        )
        for md in members
    ]


def diagram_maxima(diagrams: List[MemberDiagram]) -> Tuple[Optional[MemberMax], ...]:
    """(max |moment|, max |shear|, max |axial|) over all members."""
    def best(attr: str) -> Optional[MemberMax]:
        found = None
        for dg in diagrams:
            for p in getattr(dg, attr):
                if found is None or abs(p.value) > abs(found.value):
                    found = MemberMax(dg.member_id, p.value, p.x / dg.length)
        return found

    return best("moment"), best("shear"), best("axial")


def max_story_drift(
    frame: Frame,
    levels: Dict[str, int],
    displacements: List[NodeDisplacement],
) -> Optional[StoryDrift]:
    """
    Largest inter-storey drift ratio.

    For consecutive storeys s and s+1: (mean dx at s+1 - mean dx at s) / h,
    with h from frame.story_heights when given, else the difference of the
    mean storey elevations.
    """
    nodes = frame.node_map()
    dx_by_story: Dict[int, List[float]] = {}
    y_by_story: Dict[int, List[float]] = {}
    for disp in displacements:
        story = levels[disp.node_id]
        dx_by_story.setdefault(story, []).append(disp.dx)
        y_by_story.setdefault(story, []).append(nodes[disp.node_id].y)

    stories = sorted(dx_by_story)
    worst = None
    for lower, upper in zip(stories, stories[1:]):
        if frame.story_heights is not None and lower < len(frame.story_heights):
            height = frame.story_heights[lower]
        else:
            height = float(np.mean(y_by_story[upper]) - np.mean(y_by_story[lower]))
        if height <= 0.0:
            logger.debug("Skipping drift between storeys %d and %d (height %.3g)", lower, upper, height)
            continue
        drift = abs(float(np.mean(dx_by_story[upper]) - np.mean(dx_by_story[lower]))) / height
        if worst is None or drift > worst.drift:
            worst = StoryDrift(upper, drift)
    return worst


def max_sway(displacements: List[NodeDisplacement]) -> float:
    return max((abs(d.dx) for d in displacements), default=0.0)

# Frame DOF numbering + global K/F assembly (uses kernel internally)

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import CONFIG, SolverConfig
from .elements import (
    condense,
    element_geometry,
    frame2d_global_stiffness,
    frame2d_local_stiffness,
    frame2d_transform,
    released_dofs,
)
from .errors import UnstableStructure
from .kernel.assemble import assemble_global_F, assemble_global_K
from .kernel.dof import DOFManager
from .loads import fixed_end_forces, member_span_loads
from .model import Frame, FrameMember, FrameNode, RollerDirection, SpanLoad, SupportType


def support_restraints(node: FrameNode) -> Tuple[bool, bool, bool]:
    """Which of (dx, dy, rotation) the support holds."""
    if node.support == SupportType.FIXED:
        return True, True, True
    if node.support == SupportType.PINNED:
        return True, True, False
    if node.support == SupportType.ROLLER:
        if node.roller_direction == RollerDirection.VERTICAL:
            return True, False, False
        return False, True, False
    return False, False, False


def prescribed_displacements(node: FrameNode) -> np.ndarray:
    """
    Global [dx, dy, rz] imposed by a support settlement.

    Settlement is given as dx right, dy down, rotation clockwise; the
    analysis works with dy up and rotation counter-clockwise.
    """
    out = np.zeros(3, dtype=float)
    if node.settlement is None:
        return out
    hold_x, hold_y, hold_r = support_restraints(node)
    if hold_x:
        out[0] = node.settlement.dx
    if hold_y:
        out[1] = -node.settlement.dy
    if hold_r:
        out[2] = -node.settlement.rotation
    return out


def story_levels(frame: Frame, tol: float = CONFIG.level_tolerance) -> Dict[str, int]:
    """
    Storey index of every node.

    An explicit story_index wins. Otherwise nodes are grouped by y
    (within tol) and numbered upward from 0.
    """
    levels: List[float] = []
    for y in sorted(n.y for n in frame.nodes):
        if not levels or y - levels[-1] > tol:
            levels.append(y)

    out = {}
    for node in frame.nodes:
        if node.story_index is not None:
            out[node.id] = node.story_index
        else:
            out[node.id] = next(i for i, y in enumerate(levels) if abs(node.y - y) <= tol)
    return out


def rigid_joints(frame: Frame) -> set:
    """Nodes where at least one member is rigidly connected."""
    rigid = set()
    for m in frame.members:
        if not m.release_start:
            rigid.add(m.start)
        if not m.release_end:
            rigid.add(m.end)
    return rigid


def assign_frame_dofs(frame: Frame, levels: Dict[str, int]) -> Tuple[DOFManager, Dict[int, int]]:
    """
    Number the unknowns of a frame.

        fixed    -                 pinned   rz
        roller   dx + rz (or dy + rz for a vertical roller)
        free     dx, dy, rz

    Sway frames: free joints above the base (story > 0) share one dx per
    storey, allocated when the first such joint is met. Non-sway frames:
    free joints are braced, dx is not an unknown.

    A node with every connected member released there has no rz.

    Returns (dofs, {story: shared dx index}).
    """
    dofs = DOFManager()
    sway: Dict[int, int] = {}
    rigid = rigid_joints(frame)

    for node in frame.nodes:
        hold_x, hold_y, hold_r = support_restraints(node)
        dx = dy = rz = None

        if node.support == SupportType.FREE:
            if frame.is_sway:
                story = levels[node.id]
                if story > 0:
                    if story not in sway:
                        sway[story] = dofs.new_dof()
                    dx = sway[story]
                else:
                    dx = dofs.new_dof()
        elif not hold_x:
            dx = dofs.new_dof()

        if not hold_y:
            dy = dofs.new_dof()
        if not hold_r and node.id in rigid:
            rz = dofs.new_dof()

        dofs.register(node.id, dx=dx, dy=dy, rz=rz)

    return dofs, sway


@dataclass(eq=False)
class MemberData:
    """Everything about one member that the solve needs, built once."""
    member: FrameMember
    L: float
    c: float
    s: float
    EI: float
    EA: float
    T: np.ndarray
    k_local: np.ndarray      # condensed for releases
    f_fixed: np.ndarray      # local fixed-end forces, condensed
    span_loads: List[SpanLoad]
    dof_map: List[Optional[int]]
    prescribed: np.ndarray   # global end displacements imposed by settlement
    k_global: np.ndarray = field(init=False)

    def __post_init__(self):
        self.k_global = frame2d_global_stiffness(self.k_local, self.T)

    @property
    def angle(self) -> float:
        return float(np.arctan2(self.s, self.c))


def build_member_data(
    frame: Frame,
    dofs: DOFManager,
    config: SolverConfig = CONFIG,
) -> List[MemberData]:
    nodes = frame.node_map()
    out = []
    for member in frame.members:
        L, c, s = element_geometry(frame, member)
        EI = frame.member_ei(member)
        EA = frame.member_ea(member, config.ea_to_ei_ratio)
        span_loads = member_span_loads(frame, member)
        k_local, f_fixed = condense(
            frame2d_local_stiffness(EI, EA, L),
            fixed_end_forces(L, span_loads, config),
            released_dofs(member),
        )
        prescribed = np.concatenate([
            prescribed_displacements(nodes[member.start]),
            prescribed_displacements(nodes[member.end]),
        ])
        out.append(MemberData(
            member=member, L=L, c=c, s=s, EI=EI, EA=EA,
            T=frame2d_transform(c, s),
            k_local=k_local,
            f_fixed=f_fixed,
            span_loads=span_loads,
            dof_map=dofs.element_dof_map(member.start, member.end),
            prescribed=prescribed,
        ))
    return out


def assemble_frame_K(ndof: int, members: List[MemberData]) -> np.ndarray:
    return assemble_global_K(ndof, [(md.dof_map, md.k_global) for md in members])


def assemble_frame_F(frame: Frame, dofs: DOFManager, members: List[MemberData]) -> np.ndarray:
    """
    Global load vector:

        joint loads at their mapped DOFs
      - Tᵀ·f_fixed                  (member loads, as equivalent joint loads)
      - K_e·d_prescribed            (support settlements)
    """
    contributions = []
    for md in members:
        fe = -(md.T.T @ md.f_fixed)
        if np.any(md.prescribed):
            fe = fe - md.k_global @ md.prescribed
        contributions.append((md.dof_map, fe))
    F = assemble_global_F(dofs.ndof, contributions)
    nodes = frame.node_map()

    for load in frame.joint_loads():
        entry = dofs[load.node_id]
        if entry.dx is not None:
            F[entry.dx] += load.fx
        if entry.dy is not None:
            F[entry.dy] += load.fy
        if entry.rz is not None:
            F[entry.rz] += load.moment
        elif load.moment != 0.0 and not support_restraints(nodes[load.node_id])[2]:
            # Every member is hinged here and nothing holds the rotation
            raise UnstableStructure(
                f"Joint load '{load.id}' applies a moment at node '{load.node_id}', "
                f"where all connected members are released and the support "
                f"does not restrain rotation"
            )
    return F

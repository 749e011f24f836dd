# beamframe/frame.py
"""
FRAME ANALYSIS SOLVER: Direct Stiffness Method for Planar Rigid Frames
======================================================================

PIPELINE:
---------
    1. Storey levels           explicit story_index, else grouped by y
    2. DOF numbering           per node (dx, dy, rz), None where restrained;
                               sway frames share one dx per storey
    3. Member data             k_local (6×6, releases condensed), T,
                               local fixed-end forces from the FEM library
    4. Assembly                K = Σ Tᵀ k T,   F = joint loads - Σ Tᵀ f_fixed
                                               - Σ K_e d_settlement
    5. Solve                   mechanism pre-check on K (pivot relative
                               to max|K|), then K d = F (Gaussian
                               elimination, absolute pivot test)
    6. Post-processing         displacements, member end forces
                               f = k·T·d_e + f_fixed, reactions, bracing
                               forces, 21-point diagrams, maxima, drift

A non-sway frame is treated as braced: free joints cannot translate
horizontally and the bracing force at each is reported.

An under-supported frame surfaces as SingularMatrix from the elimination;
a frame without any support is rejected up front with UnstableStructure.

USAGE:
------
    frame = portal_frame(span=6.0, height=4.0, loads=[...], is_sway=True)
    result = FrameAnalysisSolver(frame).solve()
    result.displacement("C").dx
"""

import logging
import math
from typing import Dict, List

import numpy as np

from .assembly import (
    MemberData,
    assemble_frame_F,
    assemble_frame_K,
    assign_frame_dofs,
    build_member_data,
    story_levels,
)
from .calc_log import CalculationLog, LogBuilder, fmt, sci
from .config import CONFIG, SolverConfig
from .errors import UnstableStructure
from .fem import span_fem
from .kernel.dof import DOFManager
from .kernel.solve import check_mechanism, solve_linear_system
from .model import Frame, SupportType
from .post import (
    bracing_forces,
    diagram_maxima,
    end_forces_record,
    frame_member_diagrams,
    joint_force_sums,
    max_story_drift,
    max_sway,
    member_end_forces,
    node_displacements,
    support_reactions,
)
from .results import BracingForce, FrameReaction, FrameResult, MemberEndForces, NodeDisplacement

logger = logging.getLogger(__name__)

ANGLE_TOL_DEG = 0.1


def _is_inclined(md: MemberData) -> bool:
    deg = math.degrees(md.angle)
    return all(abs(deg - ref) > ANGLE_TOL_DEG for ref in (0.0, 90.0, -90.0, 180.0, -180.0))


def _orientation(md: MemberData) -> str:
    deg = math.degrees(md.angle)
    if abs(deg) < ANGLE_TOL_DEG or abs(abs(deg) - 180.0) < ANGLE_TOL_DEG:
        return "horizontal"
    if abs(abs(deg) - 90.0) < ANGLE_TOL_DEG:
        return "vertical"
    return f"{deg:.1f}°"


class FrameAnalysisSolver:
    """
    Solves one planar frame.

    Like ContinuousBeamSolver, an instance holds only its frame and config;
    all working arrays live inside solve().
    """

    def __init__(self, frame: Frame, config: SolverConfig = CONFIG):
        self.frame = frame
        self.config = config

    def _check_supports(self) -> None:
        frame = self.frame
        if not frame.nodes or not frame.members:
            raise UnstableStructure("A frame needs at least one member")
        if all(n.support == SupportType.FREE for n in frame.nodes):
            logger.debug("Frame rejected: %d nodes, none supported", len(frame.nodes))
            raise UnstableStructure("Frame has no supports")

    def solve(self) -> FrameResult:
        frame = self.frame
        config = self.config
        self._check_supports()

        levels = story_levels(frame, config.level_tolerance)
        dofs, sway_dofs = assign_frame_dofs(frame, levels)
        logger.debug(
            "Solving frame: %d nodes, %d members, %d loads, %d DOFs (%d sway), sway=%s",
            len(frame.nodes), len(frame.members), len(frame.loads),
            dofs.ndof, len(sway_dofs), frame.is_sway,
        )

        members = build_member_data(frame, dofs, config)
        K = assemble_frame_K(dofs.ndof, members)
        F = assemble_frame_F(frame, dofs, members)

        if dofs.ndof > 0:
            check_mechanism(K, config.mechanism_tolerance)
            d = solve_linear_system(K, F, config.pivot_tolerance)
        else:
            d = np.zeros(0, dtype=float)
        logger.debug("Solved displacement vector: %s", d)

        displacements = node_displacements(frame, dofs, d)
        local_forces = {md.member.id: member_end_forces(md, d) for md in members}
        member_forces = [end_forces_record(md, local_forces[md.member.id]) for md in members]

        sums = joint_force_sums(frame, members, local_forces)
        reactions = support_reactions(frame, sums)
        bracing = bracing_forces(frame, dofs, sums)

        diagrams = frame_member_diagrams(members, local_forces, config.member_diagram_points)
        max_moment, max_shear, max_axial = diagram_maxima(diagrams)

        log = self._calculation_log(
            levels, dofs, sway_dofs, members, displacements, member_forces, reactions, bracing
        )

        return FrameResult(
            displacements=tuple(displacements),
            member_forces=tuple(member_forces),
            reactions=tuple(reactions),
            bracing_forces=tuple(bracing),
            diagrams=tuple(diagrams),
            max_moment=max_moment,
            max_shear=max_shear,
            max_axial=max_axial,
            max_drift=max_story_drift(frame, levels, displacements),
            sway_displacement=max_sway(displacements) if frame.is_sway else None,
            calculation_log=log,
        )

    # -- narration -------------------------------------------------------------

    def _calculation_log(
        self,
        levels: Dict[str, int],
        dofs: DOFManager,
        sway_dofs: Dict[int, int],
        members: List[MemberData],
        displacements: List[NodeDisplacement],
        member_forces: List[MemberEndForces],
        reactions: List[FrameReaction],
        bracing: List[BracingForce],
    ) -> CalculationLog:
        frame = self.frame
        log = LogBuilder()

        log.section("1. Frame Configuration", "Define the frame geometry and properties")
        log.step("Frame type", result="Sway frame (lateral displacement allowed)"
                 if frame.is_sway else "Non-sway (braced) frame")
        bays = {n.bay_index for n in frame.nodes if n.bay_index is not None}
        stories = max(levels.values(), default=0)
        log.step("Geometry", result=(f"{max(bays) if bays else '?'} bay(s), "
                                     f"{stories} story(ies), {len(frame.nodes)} nodes, "
                                     f"{len(frame.members)} members"))
        sway_note = f" ({len(sway_dofs)} sway DOFs)" if sway_dofs else ""
        log.step("Total DOFs", result=f"{dofs.ndof} unknowns{sway_note}")
        details = [
            f"{md.member.id} ({md.member.member_type.value}, {_orientation(md)}, "
            f"{md.member.rigidity.describe(frame.defaults)})"
            for md in members
        ]
        more = f" ... ({len(details)} total)" if len(details) > 5 else ""
        log.step("Members", result="; ".join(details[:5]) + more)

        inclined = [md for md in members if _is_inclined(md)]
        if inclined:
            log.section("1a. Inclined Members",
                        "Members with inclination requiring coordinate transformation")
            for md in inclined:
                log.step(
                    f"Member {md.member.id}",
                    formula=rf"\cos\theta = {md.c:.4f}, \sin\theta = {md.s:.4f}",
                    result=f"L = {md.L:.2f} m, θ = {math.degrees(md.angle):.1f}°",
                )

        loaded = [md for md in members if md.span_loads]
        if loaded:
            log.section("2. Fixed End Moments", "Calculate FEMs for member loads")
            for md in loaded:
                fem_start, fem_end = span_fem(md.L, md.span_loads, self.config)
                log.step(
                    f"Member {md.member.id}",
                    result=f"FEM_start = {fmt(fem_start)}, FEM_end = {fmt(fem_end)} kN·m",
                    highlight=True,
                )

        log.section("3. Stiffness Equations", "Build global stiffness matrix and solve")
        log.step("Global stiffness matrix assembled", formula=r"[K]\{D\} = \{F\}")
        log.step("System size", result=f"{dofs.ndof} × {dofs.ndof} matrix")
        released = [md.member.id for md in members if md.member.release_start or md.member.release_end]
        if released:
            log.step("Moment releases condensed", result=", ".join(released))

        log.section("4. Joint Displacements", "Solved displacements at each node")
        moved = [nd for nd in displacements
                 if abs(nd.dx) > 1e-8 or abs(nd.dy) > 1e-8 or abs(nd.rotation) > 1e-8]
        for nd in moved:
            log.step(
                f"Node {nd.node_id}",
                result=f"dx = {nd.dx * 1000:.4f} mm, dy = {nd.dy * 1000:.4f} mm, "
                       f"θ = {sci(nd.rotation)} rad",
                highlight=True,
            )
        if not moved:
            log.step("All joints restrained", result="0")

        log.section("5. Member End Forces", "Calculate forces from displacements")
        for mf in member_forces:
            log.step(
                f"Member {mf.member_id}",
                result=f"M_start = {fmt(mf.moment_start)}, M_end = {fmt(mf.moment_end)} kN·m | "
                       f"V_start = {fmt(mf.shear_start)}, V_end = {fmt(mf.shear_end)} kN | "
                       f"N_start = {fmt(mf.axial_start)} kN",
                highlight=True,
            )

        log.section("6. Support Reactions", "Calculate reactions at supports")
        for r in reactions:
            parts = []
            if r.fx is not None:
                parts.append(f"Fx = {fmt(r.fx)} kN")
            if r.fy is not None:
                parts.append(f"Fy = {fmt(r.fy)} kN")
            if r.moment is not None:
                parts.append(f"M = {fmt(r.moment)} kN·m")
            log.step(f"Support {r.node_id}", result=", ".join(parts), highlight=True)
        for b in bracing:
            log.step(f"Bracing at {b.node_id}", result=f"Fx = {fmt(b.fx)} kN")
        log.step("Total reaction (verification)", result=(
            f"ΣFx = {fmt(sum(r.fx or 0.0 for r in reactions) + sum(b.fx for b in bracing))} kN, "
            f"ΣFy = {fmt(sum(r.fy or 0.0 for r in reactions))} kN"))

        return log.build()


def solve_frame(frame: Frame, config: SolverConfig = CONFIG) -> FrameResult:
    """Convenience wrapper: FrameAnalysisSolver(frame, config).solve()."""
    return FrameAnalysisSolver(frame, config).solve()

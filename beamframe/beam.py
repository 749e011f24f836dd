# beamframe/beam.py
"""
CONTINUOUS BEAM SOLVER: Slope-Deflection Method
===============================================

THE METHOD:
-----------
Every span end moment is written in terms of the unknown joint rotations:

    M_ij = FEM_ij + (2EI/L)(2θ_i + θ_j - 3ψ)        ψ = (Δ_j - Δ_i)/L

Moment equilibrium at each joint that is free to rotate (every node that
is not a fixed support) gives one equation:

    Σ M_ij = 0   →   Σ k(4θ_i + 2θ_j) = Σ (-FEM_ij + 6kψ),   k = EI/L

The 6kψ settlement term enters the equation of an end only when the
node at the other end of the span is fixed. Between two rotating joints
the chord rotation is carried by back-substitution alone.

The resulting system [K]{θ} = {F} is solved by Gaussian elimination, the
rotations are substituted back into every span, and reactions follow
from vertical equilibrium of each span:

    R_start = R0_start - (M_start + M_end)/L
    R_end   = R0_end   + (M_start + M_end)/L

with R0 the simply-supported reactions of the span loads.

Settlements Δ are downward positive. Free nodes keep a rotation unknown
but no translation, so a cantilever tip is analysed as if propped.

USAGE:
------
    beam = ContinuousBeam(nodes=[...], spans=[...], loads=[...])
    result = ContinuousBeamSolver(beam).solve()
    result.reaction("B").vertical
"""

import logging
from typing import Dict, List, Tuple

import numpy as np

from .calc_log import CalculationLog, LogBuilder, fmt, sci
from .config import CONFIG, SolverConfig
from .diagrams import beam_diagrams
from .errors import UnstableStructure
from .fem import FEMTerm, fem_breakdown, simple_support_reactions
from .kernel.assemble import assemble_global_F, assemble_global_K
from .kernel.dof import DOFManager
from .kernel.solve import solve_linear_system
from .model import ContinuousBeam, Span, SupportType
from .results import (
    BeamReaction,
    BeamResult,
    NodeRotation,
    SpanEndMoments,
    max_abs,
)

logger = logging.getLogger(__name__)


class ContinuousBeamSolver:
    """
    Solves one continuous beam.

    The solver keeps a reference to its (immutable) beam and config only;
    every matrix is local to solve(), so one instance may be reused, but
    concurrent analyses should each construct their own.
    """

    def __init__(self, beam: ContinuousBeam, config: SolverConfig = CONFIG):
        self.beam = beam
        self.config = config

    # -- checks ------------------------------------------------------------

    def _check_stability(self) -> None:
        beam = self.beam
        if len(beam.nodes) < 2:
            raise UnstableStructure("A continuous beam needs at least 2 nodes")
        if len(beam.spans) < 1:
            raise UnstableStructure("A continuous beam needs at least 1 span")
        restraints = sum(n.support.restraint_count for n in beam.nodes)
        if restraints < 2:
            logger.debug("Beam rejected: %d support restraint(s)", restraints)
            raise UnstableStructure(
                f"Structure is unstable: {restraints} support restraint(s), at least 2 required"
            )

    # -- pieces --------------------------------------------------------------

    def _chord_rotation(self, span: Span) -> float:
        start = self.beam.node(span.start)
        end = self.beam.node(span.end)
        return (end.settlement - start.settlement) / span.length

    def _assign_dofs(self) -> DOFManager:
        dofs = DOFManager()
        for node in self.beam.nodes:
            if node.support == SupportType.FIXED:
                dofs.register(node.id)
            else:
                dofs.register(node.id, rz=dofs.new_dof())
        return dofs

    def _solve_rotations(
        self,
        dofs: DOFManager,
        fem: Dict[str, Tuple[float, float]],
    ) -> np.ndarray:
        if dofs.ndof == 0:
            return np.zeros(0, dtype=float)

        k_contrib, f_contrib = [], []
        for span in self.beam.spans:
            k = self.beam.span_ei(span) / span.length
            psi = self._chord_rotation(span)
            fem_start, fem_end = fem[span.id]
            dof_map = [dofs[span.start].rz, dofs[span.end].rz]
            # Chord term only against a fixed (rotation-free) opposite end
            chord_start = 6.0 * k * psi if dof_map[1] is None else 0.0
            chord_end = 6.0 * k * psi if dof_map[0] is None else 0.0
            k_contrib.append((dof_map, k * np.array([[4.0, 2.0], [2.0, 4.0]])))
            f_contrib.append((dof_map, np.array([
                -fem_start + chord_start,
                -fem_end + chord_end,
            ])))

        K = assemble_global_K(dofs.ndof, k_contrib)
        F = assemble_global_F(dofs.ndof, f_contrib)
        return solve_linear_system(K, F, self.config.pivot_tolerance)

    def _end_moments(
        self,
        rotation: Dict[str, float],
        fem: Dict[str, Tuple[float, float]],
    ) -> List[SpanEndMoments]:
        out = []
        for span in self.beam.spans:
            two_k = 2.0 * self.beam.span_ei(span) / span.length
            psi = self._chord_rotation(span)
            th_i, th_j = rotation[span.start], rotation[span.end]
            fem_start, fem_end = fem[span.id]
            out.append(SpanEndMoments(
                span_id=span.id,
                fem_start=fem_start,
                fem_end=fem_end,
                m_start=fem_start + two_k * (2.0 * th_i + th_j - 3.0 * psi),
                m_end=fem_end + two_k * (2.0 * th_j + th_i - 3.0 * psi),
            ))
        return out

    def _reactions(self, end_moments: Dict[str, SpanEndMoments]) -> List[BeamReaction]:
        reactions = []
        for node in self.beam.nodes:
            if node.support == SupportType.FREE:
                continue
            vertical = 0.0
            moment = 0.0
            for span in self.beam.spans:
                if node.id not in (span.start, span.end):
                    continue
                em = end_moments[span.id]
                couple = (em.m_start + em.m_end) / span.length
                r0 = [simple_support_reactions(load, span.length)
                      for load in self.beam.loads_on(span.id)]
                if span.start == node.id:
                    vertical += sum(r[0] for r in r0) - couple
                    moment += em.m_start
                else:
                    vertical += sum(r[1] for r in r0) + couple
                    moment += em.m_end
            reactions.append(BeamReaction(
                node_id=node.id,
                position=node.position,
                vertical=vertical,
                moment=moment if node.support == SupportType.FIXED else None,
            ))
        return reactions

    # -- main entry ------------------------------------------------------------

    def solve(self) -> BeamResult:
        beam = self.beam
        self._check_stability()
        logger.debug(
            "Solving continuous beam: %d nodes, %d spans, %d loads",
            len(beam.nodes), len(beam.spans), len(beam.loads),
        )

        breakdown: Dict[str, List[FEMTerm]] = {}
        fem: Dict[str, Tuple[float, float]] = {}
        for span in beam.spans:
            terms = fem_breakdown(span.length, beam.loads_on(span.id), self.config)
            breakdown[span.id] = terms
            fem[span.id] = (sum(t.fem_start for t in terms), sum(t.fem_end for t in terms))

        dofs = self._assign_dofs()
        theta = self._solve_rotations(dofs, fem)
        rotation = {
            entry.node_id: (0.0 if entry.rz is None else float(theta[entry.rz]))
            for entry in dofs
        }
        logger.debug("Joint rotations: %s", rotation)

        end_moments = self._end_moments(rotation, fem)
        by_span = {em.span_id: em for em in end_moments}
        reactions = self._reactions(by_span)

        shear, moment, deflection = beam_diagrams(
            beam, {sid: (em.m_start, em.m_end) for sid, em in by_span.items()}, self.config
        )

        log = self._calculation_log(breakdown, fem, dofs, rotation, end_moments, reactions)

        return BeamResult(
            rotations=tuple(NodeRotation(n.id, rotation[n.id]) for n in beam.nodes),
            end_moments=tuple(end_moments),
            reactions=tuple(reactions),
            shear=shear,
            moment=moment,
            deflection=deflection,
            max_shear=max_abs(shear),
            max_moment=max_abs(moment),
            max_deflection=max_abs(deflection),
            calculation_log=log,
        )

    # -- narration -------------------------------------------------------------

    def _calculation_log(
        self,
        breakdown: Dict[str, List[FEMTerm]],
        fem: Dict[str, Tuple[float, float]],
        dofs: DOFManager,
        rotation: Dict[str, float],
        end_moments: List[SpanEndMoments],
        reactions: List[BeamReaction],
    ) -> CalculationLog:
        beam = self.beam
        log = LogBuilder()

        log.section("1. Problem Setup", "Define the beam configuration and properties")
        log.step("Beam Configuration", result=f"{len(beam.spans)}-span continuous beam")
        log.step("Span Lengths", result=", ".join(
            f"L{i + 1} = {s.length:g} m" for i, s in enumerate(beam.spans)))
        log.step("Support Conditions", result=", ".join(
            f"{n.id}: {n.support.value}" for n in beam.nodes))
        log.step("Flexural Rigidity", result=", ".join(
            f"Span {i + 1}: {s.rigidity.describe(beam.defaults)}"
            for i, s in enumerate(beam.spans)))
        settled = [n for n in beam.nodes if n.settlement != 0.0]
        if settled:
            log.step("Support Settlements", result=", ".join(
                f"{n.id}: Δ = {n.settlement * 1000:g} mm" for n in settled))

        log.section("2. Fixed End Moments",
                    "Calculate fixed end moments for each span due to applied loads")
        for span in beam.spans:
            for term in breakdown[span.id]:
                log.step(
                    term.description,
                    formula=term.formula,
                    result=f"FEM_{{start}} = {fmt(term.fem_start)} kN·m, "
                           f"FEM_{{end}} = {fmt(term.fem_end)} kN·m",
                    unit="kN·m",
                )
            fem_start, fem_end = fem[span.id]
            log.step(
                f"Total FEM for {span.id}",
                result=f"FEM_{{{span.id},start}} = {fmt(fem_start)}, "
                       f"FEM_{{{span.id},end}} = {fmt(fem_end)}",
                unit="kN·m",
                highlight=True,
            )

        log.section("3. Slope-Deflection Equations",
                    "Express end moments in terms of unknown rotations")
        log.step("General slope-deflection equation",
                 formula=r"M_{ij} = FEM_{ij} + \frac{2EI}{L}(2\theta_i + \theta_j - 3\psi)")
        for span in beam.spans:
            ei = f"{beam.span_ei(span):.0f}"
            psi = self._chord_rotation(span)
            chord = rf" - 3({sci(psi)})" if psi != 0.0 else ""
            a, b = span.start, span.end
            log.step(
                f"End moment M_{{{a}{b}}}",
                formula=rf"M_{{{a}{b}}} = FEM_{{{a}{b}}} + \frac{{2({ei})}}{{{span.length:g}}}"
                        rf"(2\theta_{{{a}}} + \theta_{{{b}}}{chord})",
            )
            log.step(
                f"End moment M_{{{b}{a}}}",
                formula=rf"M_{{{b}{a}}} = FEM_{{{b}{a}}} + \frac{{2({ei})}}{{{span.length:g}}}"
                        rf"(2\theta_{{{b}}} + \theta_{{{a}}}{chord})",
            )

        log.section("4. Joint Equilibrium Equations",
                    "Apply moment equilibrium at each joint with unknown rotation")
        dof_nodes = [n for n in beam.nodes if dofs[n.id].rz is not None]
        for node in dof_nodes:
            terms = []
            for span in beam.spans:
                if span.start == node.id:
                    terms.append(f"M_{{{node.id}{span.end}}}")
                elif span.end == node.id:
                    terms.append(f"M_{{{node.id}{span.start}}}")
            log.step(f"Equilibrium at joint {node.id}",
                     formula=rf"\sum M_{{{node.id}}} = 0 \Rightarrow {' + '.join(terms)} = 0")
        if not dof_nodes:
            log.step("No joint is free to rotate", result="No equilibrium equations")

        log.section("5. Solve for Joint Rotations", "Solve the system of equilibrium equations")
        if not dof_nodes:
            log.step("All rotations are known (fixed supports)", result="θ = 0 for all joints")
        else:
            log.step("System of equations in matrix form", formula=r"[K]\{\theta\} = \{F\}")
            log.step("Solve using Gaussian elimination",
                     result=f"{dofs.ndof} unknown rotation(s)")
            for node in dof_nodes:
                log.step(f"Rotation at {node.id}", result=sci(rotation[node.id]),
                         unit="rad", highlight=True)

        log.section("6. Final Member End Moments",
                    "Substitute rotations back into slope-deflection equations")
        for em in end_moments:
            span = next(s for s in beam.spans if s.id == em.span_id)
            log.step(f"M_{{{span.start}{span.end}}}", result=fmt(em.m_start),
                     unit="kN·m", highlight=True)
            log.step(f"M_{{{span.end}{span.start}}}", result=fmt(em.m_end),
                     unit="kN·m", highlight=True)

        log.section("7. Support Reactions", "Calculate reactions using equilibrium")
        for r in reactions:
            log.step(f"Vertical reaction at {r.node_id}", result=fmt(r.vertical),
                     unit="kN", highlight=True)
            if r.moment is not None:
                log.step(f"Moment reaction at {r.node_id}", result=fmt(r.moment),
                         unit="kN·m", highlight=True)
        log.step("Total vertical reaction (verification)",
                 result=fmt(sum(r.vertical for r in reactions)), unit="kN")

        return log.build()


def solve_continuous_beam(beam: ContinuousBeam, config: SolverConfig = CONFIG) -> BeamResult:
    """Convenience wrapper: ContinuousBeamSolver(beam, config).solve()."""
    return ContinuousBeamSolver(beam, config).solve()

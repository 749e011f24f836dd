# beamframe/kernel/dof.py
"""
DOF MANAGER: Per-Node Degree of Freedom Table
=============================================

PURPOSE:
--------
Maps (node, component) to a global equation index. Unlike a uniform
"3 DOF per node" numbering, supports remove components from the system
entirely, so every node carries a fixed-size record of three OPTIONAL
indices:

    NodeDOFs(node_id, dx, dy, rz)     None = restrained (not an unknown)

    Continuous beam:  rz only (dx, dy always None)
    Planar frame:     any subset of dx, dy, rz

Two nodes may point at the SAME index. Sway frames use this to tie all
free joints of a storey to one horizontal unknown.

A DOFManager is built fresh for every solve call and thrown away with it.

USAGE:
------
    dofs = DOFManager()
    a = dofs.register("A", dx=dofs.new_dof(), dy=dofs.new_dof(), rz=dofs.new_dof())
    b = dofs.register("B", rz=dofs.new_dof())

    dofs.ndof                         # 4
    dofs.element_dof_map("A", "B")    # [0, 1, 2, None, None, 3]
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional


@dataclass
class NodeDOFs:
    """Global equation indices of one node (None = restrained)."""
    node_id: str
    dx: Optional[int] = None
    dy: Optional[int] = None
    rz: Optional[int] = None

    def as_list(self) -> List[Optional[int]]:
        return [self.dx, self.dy, self.rz]

    @property
    def is_restrained(self) -> bool:
        return self.dx is None and self.dy is None and self.rz is None


class DOFManager:
    """
    Hands out equation indices and records which node owns which.

    Indices are allocated in call order by new_dof(), so the numbering is
    deterministic for a given scan order of nodes.
    """

    def __init__(self):
        self._ndof = 0
        self._nodes: Dict[str, NodeDOFs] = {}

    @property
    def ndof(self) -> int:
        """Total number of unknowns (size of K)."""
        return self._ndof

    def new_dof(self) -> int:
        index = self._ndof
        self._ndof += 1
        return index

    def register(
        self,
        node_id: str,
        dx: Optional[int] = None,
        dy: Optional[int] = None,
        rz: Optional[int] = None,
    ) -> NodeDOFs:
        """Record the indices of a node. Each node is registered once."""
        if node_id in self._nodes:
            raise ValueError(f"DOFs for node '{node_id}' already registered")
        entry = NodeDOFs(node_id, dx, dy, rz)
        self._nodes[node_id] = entry
        return entry

    def __getitem__(self, node_id: str) -> NodeDOFs:
        return self._nodes[node_id]

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[NodeDOFs]:
        return iter(self._nodes.values())

    def element_dof_map(self, ni: str, nj: str) -> List[Optional[int]]:
        """
        DOF map of a two-node frame element: [dx_i, dy_i, rz_i, dx_j, dy_j, rz_j].

        Restrained components come back as None; assembly skips them.
        """
        return self._nodes[ni].as_list() + self._nodes[nj].as_list()

    def owner_of(self, index: int) -> List[str]:
        """Node ids that share a given equation index."""
        return [n.node_id for n in self._nodes.values() if index in n.as_list()]

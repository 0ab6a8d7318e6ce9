# streamfem/solver.py
"""
SOLVER: Model Collections and the Solve Cycle
=============================================

The Solver owns the four ordered model collections and drives one solve
cycle against a LinearSystemBackend:

    solver = Solver()
    solver.read(stream)          # nodes, materials, elements, loads
    solver.generate_gfn()        # NGFN
    solver.assemble_k()          # NMFC, augmented K
    solver.assemble_f(dim=0)     # F for one spatial dimension
    solver.decompose_k()
    solver.solve()
    solver.update_displacements()

The phases must run in this order and never concurrently on one Solver.
Collection order matters: it fixes the DOF numbering.
"""

import logging
from typing import Dict, Iterable, List, TextIO

import numpy as np

from .config import CONFIG, SolverConfig
from .errors import FormatError
from .kernel.assemble import assemble_forces, assemble_stiffness
from .kernel.dof import NodeMembership, assign_global_dofs
from .kernel.solve import LinearSystemBackend, make_backend
from .model import Category, LoadKind
from .registry import DEFAULT_REGISTRY, ClassRegistry
from .stream import ObjectReader
from .tokens import write_terminator

logger = logging.getLogger(__name__)

# Classification and Write order
SECTIONS = (
    (Category.NODE, "nodes"),
    (Category.MATERIAL, "materials"),
    (Category.ELEMENT, "elements"),
    (Category.LOAD, "loads"),
)


class Solver:
    """
    Attributes:
    -----------
    nodes, materials, elements, loads : list
        Model collections in read order
    ngfn : int
        Number of global freedom numbers (set by generate_gfn)
    nmfc : int
        Number of multi-freedom constraints (set by assemble_k)
    backend : LinearSystemBackend
        Linear system written by the assemblers
    """

    def __init__(
        self,
        backend: LinearSystemBackend = None,
        registry: ClassRegistry = None,
        config: SolverConfig = None,
    ):
        self.config = config or CONFIG
        self.registry = registry or DEFAULT_REGISTRY
        if backend is None:
            kwargs = {"cond_limit": self.config.cond_limit} if self.config.backend == "dense" else {}
            backend = make_backend(self.config.backend, **kwargs)
        self.backend = backend

        self.nodes: List = []
        self.materials: List = []
        self.elements: List = []
        self.loads: List = []
        self.ngfn = 0
        self.nmfc = 0
        self.membership = NodeMembership([], [])

    def _collections(self) -> Dict[Category, list]:
        return {
            Category.NODE: self.nodes,
            Category.MATERIAL: self.materials,
            Category.ELEMENT: self.elements,
            Category.LOAD: self.loads,
        }

    # ------------------------------------------------------------------
    # Read / Write
    # ------------------------------------------------------------------

    def read(self, stream: TextIO) -> None:
        """
        Replace the model with the objects read from ``stream``.

        Objects read before an error stay in the collections.
        """
        for collection in self._collections().values():
            collection.clear()

        reader = ObjectReader(self.registry, self.nodes, self.materials, self.elements, self.config)
        collections = self._collections()
        while True:
            obj = reader.read_next(stream)
            if obj is None:
                break
            target = collections.get(getattr(obj, "category", None))
            if target is None:
                raise FormatError(f"{type(obj).__name__} is not a node, material, element or load")
            target.append(obj)

        logger.info(
            "Read %d nodes, %d materials, %d elements, %d loads",
            len(self.nodes), len(self.materials), len(self.elements), len(self.loads),
        )

    def write(self, stream: TextIO) -> None:
        """Write the model in a form read() accepts: nodes, materials, elements, loads."""
        collections = self._collections()
        for category, title in SECTIONS:
            for obj in collections[category]:
                obj.write(stream)
            write_terminator(stream, title)

    # ------------------------------------------------------------------
    # Numbering and assembly
    # ------------------------------------------------------------------

    def generate_gfn(self) -> int:
        """Assign global freedom numbers to all element DOFs; returns NGFN."""
        self.ngfn, self.membership = assign_global_dofs(self.nodes, self.elements)
        logger.info("NGFN = %d", self.ngfn)
        return self.ngfn

    def node_elements(self, node) -> List:
        """Elements touching ``node`` as of the last generate_gfn()."""
        n_idx = self.membership.node_index(node)
        return [self.elements[i] for i in self.membership.elements_at(n_idx)]

    def constraints(self) -> List:
        return [l for l in self.loads if getattr(l, "kind", None) is LoadKind.CONSTRAINT]

    def assemble_k(self) -> None:
        """Assemble the master stiffness matrix, augmented with one row/column per MFC."""
        self.nmfc = assemble_stiffness(self.backend, self.elements, self.loads, self.ngfn)

    def assemble_f(self, dim: int = 0) -> None:
        """Assemble the master force vector for spatial dimension ``dim``."""
        assemble_forces(self.backend, self.elements, self.loads, self.ngfn, dim)

    # ------------------------------------------------------------------
    # Solve
    # ------------------------------------------------------------------

    def decompose_k(self) -> None:
        """Let the backend factorize K ahead of solve(); a no-op for backends that don't."""
        if self.ngfn <= 0:
            return
        self.backend.factorize()

    def solve(self) -> None:
        self.backend.initialize_solution()
        self.backend.solve()
        logger.info("Solved system of order %d", self.backend.order)

    def update_displacements(self) -> None:
        """
        Copy the solution back into the model.

        Each node gets one displacement per DOF at that point (the widest
        element touching it decides the count). Each constraint gets its
        Lagrange multiplier from slot NGFN + index.
        """
        if self.ngfn <= 0:
            return
        for node in self.nodes:
            node.displacements = np.zeros(0)
        for element in self.elements:
            for pt in range(element.n_points):
                node = element.point(pt)
                if len(node.displacements) < element.dofs_per_point:
                    grown = np.zeros(element.dofs_per_point)
                    grown[:len(node.displacements)] = node.displacements
                    node.displacements = grown
                for d in range(element.dofs_per_point):
                    node.displacements[d] = self.backend.get_solution(element.gfn_at_point(pt, d))
        for c in self.constraints():
            c.multiplier = self.backend.get_solution(self.ngfn + c.index)

    def solution(self) -> np.ndarray:
        """Solved values of the physical DOFs (multipliers excluded)."""
        if self.ngfn <= 0:
            return np.zeros(0)
        return self.backend.solution()[:self.ngfn]

    def run(self, dims: Iterable[int] = (0,)) -> List[np.ndarray]:
        """
        Full cycle: number, assemble K once, then assemble F and solve for
        each dimension. Returns one solution vector (length NGFN) per dimension.
        """
        self.generate_gfn()
        self.assemble_k()
        self.decompose_k()
        results = []
        for dim in dims:
            self.assemble_f(dim)
            if self.ngfn <= 0:
                results.append(np.zeros(0))
                continue
            self.solve()
            self.update_displacements()
            results.append(self.solution())
        return results

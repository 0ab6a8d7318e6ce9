# streamfem/kernel/assemble.py
"""
ASSEMBLY: Global Stiffness Matrix and Force Vector with MFC Augmentation
========================================================================

PURPOSE:
--------
This module scatters element contributions into a LinearSystemBackend
and adds one Lagrange multiplier per multi-freedom constraint (MFC):

    [ K   C^T ] [ u ]   [ F ]
    [ C   0   ] [ λ ] = [ g ]

K is NGFN × NGFN, each constraint adds one row and one column, so the
system order is NGFN + NMFC.

ACCUMULATE vs OVERWRITE:
------------------------
- Element stiffness and element/nodal forces are ADDED: several elements
  contribute to the same shared DOF.
- Constraint coefficients and right-hand sides are SET: each multiplier
  slot belongs to exactly one constraint.

Zero stiffness entries are skipped so sparse backends stay sparse. Every
GFN is checked against [0, NGFN) before it touches the backend.
"""

import logging
from typing import Callable, Dict, List, Sequence

from ..errors import ConsistencyError
from ..model import LoadKind

logger = logging.getLogger(__name__)


def _checked(gfn: int, ngfn: int, where: str) -> int:
    if not 0 <= gfn < ngfn:
        raise ConsistencyError(f"Illegal GFN {gfn} in {where} (NGFN={ngfn})")
    return gfn


def collect_constraints(loads: Sequence) -> List:
    """
    Find the constraint loads and number them 0, 1, ... in load order.

    The index is stored on each constraint (``load.index``); it is only
    valid until the next call.
    """
    constraints = []
    for load in loads:
        if getattr(load, "kind", None) is LoadKind.CONSTRAINT:
            load.index = len(constraints)
            constraints.append(load)
    return constraints


def assemble_stiffness(backend, elements: Sequence, loads: Sequence, ngfn: int) -> int:
    """
    Assemble the augmented master stiffness matrix into ``backend``.

    Parameters:
    -----------
    backend : LinearSystemBackend
        Receives set_system_order(NGFN + NMFC), initialize_matrix() and the
        matrix entries
    elements : Sequence[Element]
        Elements with GFNs assigned by assign_global_dofs
    loads : Sequence[Load]
        Load collection; the constraint loads in it are collected first
    ngfn : int
        Number of global DOFs

    Returns:
    --------
    int
        NMFC, the number of constraints (0 when ngfn <= 0: nothing is done)

    Raises:
    -------
    ConsistencyError
        If an element or constraint term maps to a GFN outside [0, NGFN)
    """
    if ngfn <= 0:
        return 0

    constraints = collect_constraints(loads)
    nmfc = len(constraints)

    backend.set_system_order(ngfn + nmfc)
    backend.initialize_matrix()

    for element in elements:
        ke = element.ke()
        n = element.n_dofs
        if ke.shape != (n, n):
            raise ConsistencyError(
                f"{element.label()} stiffness shape {ke.shape} doesn't match its {n} DOFs"
            )
        where = f"stiffness of {element.label()}"
        dof_map = [_checked(element.gfn(j), ngfn, where) for j in range(n)]

        for a in range(n):
            ia = dof_map[a]
            for b in range(n):
                if ke[a, b] != 0.0:
                    backend.add_matrix_value(ia, dof_map[b], ke[a, b])

    # Lagrange multipliers: rows/columns NGFN.. of the augmented matrix
    for c in constraints:
        row = ngfn + c.index
        for term in c.lhs:
            gfn = _checked(term.element.gfn(term.dof), ngfn, f"constraint {c.label()}")
            backend.set_matrix_value(gfn, row, term.value)
            backend.set_matrix_value(row, gfn, term.value)

    logger.info("Assembled K: %d DOFs + %d constraints", ngfn, nmfc)
    return nmfc


def _nodal(backend, load, dim, ngfn, elements):
    element = load.element
    dpp = element.dofs_per_point
    if len(load.values) % dpp != 0:
        raise ConsistencyError(
            f"{load.label()}: force vector of size {len(load.values)} "
            f"doesn't fit {dpp} DOFs per point of {element.label()}"
        )
    if len(load.values) < (dim + 1) * dpp:
        raise ConsistencyError(f"{load.label()}: no force values for dimension {dim}")
    for dof in range(dpp):
        gfn = _checked(element.gfn_at_point(load.point, dof), ngfn, f"load {load.label()}")
        backend.add_vector_value(gfn, load.values[dof + dpp * dim])


def _element(backend, load, dim, ngfn, elements):
    targets = load.elements if load.elements else elements
    for element in targets:
        fe = element.fe(load)
        n = element.n_dofs
        if len(fe) < (dim + 1) * n:
            raise ConsistencyError(
                f"{load.label()}: {element.label()} gave {len(fe)} force values, "
                f"dimension {dim} needs {(dim + 1) * n}"
            )
        for j in range(n):
            gfn = _checked(element.gfn(j), ngfn, f"load {load.label()} on {element.label()}")
            backend.add_vector_value(gfn, fe[j + dim * n])


def _constraint(backend, load, dim, ngfn, elements):
    if dim >= len(load.rhs):
        raise ConsistencyError(f"{load.label()}: no right-hand side for dimension {dim}")
    backend.set_vector_value(ngfn + load.index, load.rhs[dim])


_FORCE_HANDLERS: Dict[LoadKind, Callable] = {
    LoadKind.NODAL: _nodal,
    LoadKind.ELEMENT: _element,
    LoadKind.CONSTRAINT: _constraint,
}


def assemble_forces(backend, elements: Sequence, loads: Sequence, ngfn: int, dim: int = 0) -> None:
    """
    Assemble the master force vector for one spatial dimension.

    Loads that carry several dimensions store them one slice after the
    other; ``dim`` selects the slice. Constraint right-hand sides go into
    the multiplier slots NGFN + index, so assemble_stiffness must have run
    first in the same cycle. Loads of an unknown kind are skipped.
    """
    if ngfn <= 0:
        return

    backend.initialize_vector()

    for load in loads:
        load.set_solution(backend)
        handler = _FORCE_HANDLERS.get(getattr(load, "kind", None))
        if handler is None:
            logger.debug("Skipping %s: no force contribution", load.label())
            continue
        handler(backend, load, dim, ngfn, elements)

    logger.info("Assembled F for dimension %d", dim)

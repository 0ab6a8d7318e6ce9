# streamfem/kernel/dof.py
"""
DOF ASSIGNMENT: Global Freedom Numbers for Shared Degrees of Freedom
====================================================================

PURPOSE:
--------
Every element owns one global freedom number (GFN) per local DOF. Two
elements that meet at a node must end up with the SAME numbers for the
DOFs at that node, otherwise they would not be connected in the
assembled system:

    Bar A: nodes (0, 1)  → GFNs [0, 1 | 2, 3]
    Bar B: nodes (1, 2)  → GFNs [2, 3 | 4, 5]     (node 1 shared)

ALGORITHM:
----------
1. Rebuild node → element membership (index based, no back-pointers).
2. Clear the GFNs of every element.
3. Walk the elements in collection order. For each point, look at the
   other elements touching the same node: any that were already numbered
   lend their GFN to the matching DOF slot. Slots still empty get a fresh
   number from the counter.
4. NGFN = highest number + 1 (= the counter value after the pass).

The numbering only depends on the collection order, so repeating the
pass on an unchanged model gives the same numbers.
"""

import logging
from typing import Dict, List, Sequence

from ..errors import ConsistencyError
from ..model import INVALID_DOF

logger = logging.getLogger(__name__)


class DOFCounter:
    """Hands out consecutive GFNs, starting at 0. Owned by one numbering pass."""

    def __init__(self, start: int = 0):
        self.value = start

    def next(self) -> int:
        gfn = self.value
        self.value += 1
        return gfn


class NodeMembership:
    """
    Index-based node ↔ element adjacency.

    ``elements_at(i)`` lists the positions (in the element collection) of
    the elements touching node ``i`` (position in the node collection), in
    element order. Rebuilt from scratch by every numbering pass.
    """

    def __init__(self, nodes: Sequence, elements: Sequence):
        self._node_index: Dict[int, int] = {id(n): i for i, n in enumerate(nodes)}
        self._elements: List[List[int]] = [[] for _ in nodes]
        self._points: List[List[int]] = []

        for e_idx, element in enumerate(elements):
            indices = []
            for pt in range(element.n_points):
                n_idx = self.node_index(element.point(pt), element)
                if e_idx not in self._elements[n_idx]:
                    self._elements[n_idx].append(e_idx)
                indices.append(n_idx)
            self._points.append(indices)

    def node_index(self, node, element=None) -> int:
        try:
            return self._node_index[id(node)]
        except KeyError:
            owner = f"{element.label()} references " if element is not None else ""
            raise ConsistencyError(
                f"{owner}{node.label()}, which is not in the node collection"
            ) from None

    def elements_at(self, node_idx: int) -> List[int]:
        return self._elements[node_idx]

    def nodes_of(self, element_idx: int) -> List[int]:
        return self._points[element_idx]


def _link_element(e_idx: int, elements: Sequence, membership: NodeMembership, counter: DOFCounter) -> None:
    element = elements[e_idx]
    dpp = element.dofs_per_point

    for pt, n_idx in enumerate(membership.nodes_of(e_idx)):
        # Borrow numbers already given at this node, including by an
        # earlier point of this same element
        for other_idx in membership.elements_at(n_idx):
            other = elements[other_idx]
            for other_pt, other_n_idx in enumerate(membership.nodes_of(other_idx)):
                if other_n_idx != n_idx:
                    continue
                for d in range(min(dpp, other.dofs_per_point)):
                    if element.gfn_at_point(pt, d) != INVALID_DOF:
                        continue
                    shared = other.gfn_at_point(other_pt, d)
                    if shared != INVALID_DOF:
                        element.set_gfn(pt * dpp + d, shared)

        # Anything left is a new DOF
        for d in range(dpp):
            if element.gfn_at_point(pt, d) == INVALID_DOF:
                element.set_gfn(pt * dpp + d, counter.next())


def assign_global_dofs(nodes: Sequence, elements: Sequence) -> tuple[int, NodeMembership]:
    """
    Number every DOF in the model.

    Parameters:
    -----------
    nodes : Sequence[Node]
        Node collection; every element point must be one of these
    elements : Sequence[Element]
        Element collection, numbered in this order

    Returns:
    --------
    (ngfn, membership)
        ngfn: total number of global DOFs (0 for a model without elements)
        membership: the node ↔ element adjacency built for this pass

    Raises:
    -------
    ConsistencyError
        If an element references a node outside the node collection
    """
    membership = NodeMembership(nodes, elements)

    for element in elements:
        element.clear_dofs()

    counter = DOFCounter()
    for e_idx in range(len(elements)):
        _link_element(e_idx, elements, membership, counter)

    ngfn = counter.value
    logger.debug("Assigned %d global DOFs to %d elements", ngfn, len(elements))
    return ngfn, membership

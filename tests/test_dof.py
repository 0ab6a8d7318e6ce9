"""
Test global DOF numbering.

Connected elements must share the numbers at their common nodes, and the
numbering must depend on nothing but the collection order.
"""

import itertools

import pytest

from conftest import Spring, make_solver
from streamfem import Bar2D, Beam2D, ConsistencyError, MaterialLinearElasticity, NodeXY
from streamfem.kernel import DOFCounter, assign_global_dofs


def gfns(element):
    return [element.gfn(j) for j in range(element.n_dofs)]


def test_counter_starts_at_zero():
    counter = DOFCounter()
    assert [counter.next() for _ in range(3)] == [0, 1, 2]
    assert counter.value == 3


def test_spring_chain_shares_middle_node(spring_chain):
    nodes, materials, elements = spring_chain
    ngfn, _ = assign_global_dofs(nodes, elements)

    assert ngfn == 3
    assert gfns(elements[0]) == [0, 1]
    assert gfns(elements[1]) == [1, 2]


def test_bar_chain_numbering(bar_chain):
    nodes, materials, elements = bar_chain
    ngfn, _ = assign_global_dofs(nodes, elements)

    assert ngfn == 6
    assert gfns(elements[0]) == [0, 1, 2, 3]
    assert gfns(elements[1]) == [2, 3, 4, 5]


@pytest.mark.parametrize("beam_first", [True, False])
def test_mixed_elements_share_common_dofs(beam_first):
    """
    A beam (ux, uy, rz) and a bar (ux, uy) at the same node share ux and
    uy; the rotation stays the beam's own.
    """
    mat = MaterialLinearElasticity(gn=0)
    n0, n1, n2 = NodeXY(gn=0), NodeXY(gn=1, x=1.0), NodeXY(gn=2, x=2.0)
    beam = Beam2D(gn=0, nodes=[n0, n1], material=mat)
    bar = Bar2D(gn=1, nodes=[n1, n2], material=mat)
    elements = [beam, bar] if beam_first else [bar, beam]

    ngfn, _ = assign_global_dofs([n0, n1, n2], elements)

    assert ngfn == 8
    assert bar.gfn_at_point(0, 0) == beam.gfn_at_point(1, 0)
    assert bar.gfn_at_point(0, 1) == beam.gfn_at_point(1, 1)
    used = set(gfns(beam)) | set(gfns(bar))
    assert used == set(range(8))


def test_numbering_is_repeatable(bar_chain):
    nodes, materials, elements = bar_chain
    first = assign_global_dofs(nodes, elements)[0], [gfns(e) for e in elements]

    # Scramble the numbers, then number again
    elements[0].set_gfn(0, 99)
    second = assign_global_dofs(nodes, elements)[0], [gfns(e) for e in elements]

    assert first == second


def test_no_elements_gives_zero_dofs():
    ngfn, membership = assign_global_dofs([NodeXY(gn=0)], [])
    assert ngfn == 0
    assert membership.elements_at(0) == []


def test_grid_numbering_is_consistent():
    """
    On a 3 x 3 grid of bars every node gets exactly two numbers, shared
    by all its elements, and the numbers 0..NGFN-1 are all used.
    """
    mat = MaterialLinearElasticity(gn=0)
    grid = {(i, j): NodeXY(gn=3 * i + j, x=float(i), y=float(j)) for i in range(3) for j in range(3)}
    nodes = list(grid.values())
    elements = []
    for (i, j), node in grid.items():
        for di, dj in ((1, 0), (0, 1), (1, 1)):
            other = grid.get((i + di, j + dj))
            if other is not None:
                elements.append(Bar2D(gn=len(elements), nodes=[node, other], material=mat))

    ngfn, _ = assign_global_dofs(nodes, elements)

    assert ngfn == 2 * len(nodes)
    per_node = {}
    for element in elements:
        for pt, node in enumerate(element.nodes):
            numbers = (element.gfn_at_point(pt, 0), element.gfn_at_point(pt, 1))
            assert per_node.setdefault(node.gn, numbers) == numbers
    assert sorted(itertools.chain.from_iterable(per_node.values())) == list(range(ngfn))


def test_foreign_node_is_consistency_error(bar_chain):
    nodes, materials, elements = bar_chain
    stray = NodeXY(gn=42, x=5.0)
    elements.append(Bar2D(gn=2, nodes=[nodes[2], stray], material=materials[0]))

    with pytest.raises(ConsistencyError, match="not in the node collection"):
        assign_global_dofs(nodes, elements)


def test_node_elements(bar_chain):
    solver = make_solver(*bar_chain)
    solver.generate_gfn()

    assert solver.node_elements(solver.nodes[0]) == [solver.elements[0]]
    assert solver.node_elements(solver.nodes[1]) == solver.elements
    assert solver.node_elements(solver.nodes[2]) == [solver.elements[1]]


def test_repeated_node_in_one_element_gets_one_number():
    """A spring whose two points are the same node has a single physical DOF."""
    mat = MaterialLinearElasticity(gn=0)
    n = NodeXY(gn=0)
    spring = Spring(gn=0, nodes=[n, n], material=mat)

    ngfn, membership = assign_global_dofs([n], [spring])

    assert ngfn == 1
    assert gfns(spring) == [0, 0]
    assert membership.elements_at(0) == [0]


def test_repeated_node_shares_with_neighbours(spring_chain):
    nodes, materials, elements = spring_chain
    loop = Spring(gn=2, nodes=[nodes[1], nodes[1]], material=materials[0])
    ngfn, _ = assign_global_dofs(nodes, elements + [loop])

    assert ngfn == 3
    assert gfns(loop) == [1, 1]

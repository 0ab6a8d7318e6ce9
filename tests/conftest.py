"""
Shared fixtures for streamfem tests.

This module provides small models, built in code or as stream text.
"""
from typing import ClassVar

import numpy as np
import pytest

from streamfem import Element, MaterialLinearElasticity, NodeXY, Solver
from streamfem.elements import Bar2D


class Spring(Element):
    """1 DOF per point, Ke = k [[1, -1], [-1, 1]]. Test-only element."""
    dofs_per_point: ClassVar[int] = 1
    k = 3.0

    def ke(self):
        return self.k * np.array([[1.0, -1.0], [-1.0, 1.0]])


def make_solver(nodes, materials, elements, loads=(), backend=None) -> Solver:
    solver = Solver(backend=backend)
    solver.nodes.extend(nodes)
    solver.materials.extend(materials)
    solver.elements.extend(elements)
    solver.loads.extend(loads)
    return solver


@pytest.fixture
def spring_chain():
    """Two springs in series: node0 -- e0 -- node1 -- e1 -- node2 (3 GFNs)."""
    mat = MaterialLinearElasticity(gn=0)
    nodes = [NodeXY(gn=i, x=float(i)) for i in range(3)]
    elements = [Spring(gn=i, nodes=[nodes[i], nodes[i + 1]], material=mat) for i in range(2)]
    return nodes, [mat], elements


@pytest.fixture
def bar_chain():
    """Two horizontal Bar2D of unit length, A = 2: node0 -- node1 -- node2 (6 GFNs)."""
    mat = MaterialLinearElasticity(gn=0, E=100.0, A=2.0)
    nodes = [NodeXY(gn=i, x=float(i), y=0.0) for i in range(3)]
    elements = [Bar2D(gn=i, nodes=[nodes[i], nodes[i + 1]], material=mat) for i in range(2)]
    return nodes, [mat], elements


CANTILEVER = """
% Cantilever: two Beam2D elements, clamped at node 0, tip load at node 2
<NodeXY>
    0       % Global object number
    0.0 0.0
<NodeXY>
    1
    1.5 0.0
<NodeXY>
    2
    3.0 0.0
<END>  % End of nodes

<MaterialLinearElasticity>
    0
    E : 210e9
    A : 0.01
    I : 8e-6
    END:
<END>

<Beam2D>
    0
    0 1     % node GNs
    0       % material GN
<Beam2D>
    1
    1 2
    0
<END>

<LoadBCMFC>  % ux(node 0) = 0
    0
    1
    0 0 1.0
    1 0.0
<LoadBCMFC>  % uy(node 0) = 0
    1
    1
    0 1 1.0
    1 0.0
<LoadBCMFC>  % rz(node 0) = 0
    2
    1
    0 2 1.0
    1 0.0
<LoadNode>
    3
    1       % element GN
    1       % point number within the element
    3 0.0 -1000.0 0.0
<END>
"""

TRUSS = """
% Three-bar plane truss on a pin (node 0) and a roller (node 1)
<NodeXY> 0  0.0 0.0
<NodeXY> 1  4.0 0.0
<NodeXY> 2  2.0 2.0
<END>
<MaterialLinearElasticity> 0  E : 200e9  A : 0.001  END:
<END>
<Bar2D> 0  0 2  0
<Bar2D> 1  1 2  0
<Bar2D> 2  0 1  0
<END>
<LoadBCMFC> 0  1  0 0 1.0  2 0.0 0.0
<LoadBCMFC> 1  1  0 1 1.0  2 0.0 0.0
<LoadBCMFC> 2  1  1 1 1.0  2 0.0 0.0
<LoadNode>  3  0 1  4 5000.0 0.0 0.0 -10000.0
<END>
"""


@pytest.fixture
def cantilever_text():
    return CANTILEVER


@pytest.fixture
def truss_text():
    return TRUSS

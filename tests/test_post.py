"""
Test the result tables built from a solved model.
"""

import io

import numpy as np
import pytest

from streamfem import ConsistencyError, Solver
from streamfem.post import constraint_table, dof_table, solution_table


@pytest.fixture
def solved_cantilever(cantilever_text):
    solver = Solver()
    solver.read(io.StringIO(cantilever_text))
    solver.run()
    return solver


def test_dof_table_lists_every_element_dof(solved_cantilever):
    df = dof_table(solved_cantilever)

    assert len(df) == 12
    assert list(df.columns) == ['element', 'kind', 'local_dof', 'node', 'dof', 'gfn']
    assert set(df['kind']) == {'Beam2D'}

    # Node 1 is shared: both elements report the same numbers
    shared = df[df['node'] == 1]
    assert len(shared) == 6
    assert shared.groupby('dof')['gfn'].nunique().eq(1).all()


def test_solution_table_one_row_per_gfn(solved_cantilever):
    df = solution_table(solved_cantilever)

    assert list(df['gfn']) == list(range(9))
    tip = df[(df['node'] == 2) & (df['dof'] == 1)]['value'].iloc[0]
    np.testing.assert_allclose(tip, solved_cantilever.nodes[2].displacements[1])


def test_constraint_table(solved_cantilever):
    df = constraint_table(solved_cantilever)

    assert list(df['constraint']) == [0, 1, 2]
    assert list(df['index']) == [0, 1, 2]
    assert (df['terms'] == 1).all()
    assert (df['rhs'] == 0.0).all()
    assert df['multiplier'].iloc[1] == pytest.approx(-1000.0)


def test_solution_table_needs_a_solve(cantilever_text):
    solver = Solver()
    solver.read(io.StringIO(cantilever_text))
    solver.generate_gfn()

    with pytest.raises(ConsistencyError):
        solution_table(solver)

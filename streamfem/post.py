# DOF map, solution and constraint tables

import numpy as np
import pandas as pd


def dof_table(solver) -> pd.DataFrame:
    """
    One row per element DOF: which node it sits on and which GFN it got.

    Shared DOFs show up once per element that touches them, all with the
    same ``gfn``.
    """
    rows = []
    for element in solver.elements:
        for pt in range(element.n_points):
            for d in range(element.dofs_per_point):
                rows.append({
                    'element': element.gn,
                    'kind': element.token_name(),
                    'local_dof': pt * element.dofs_per_point + d,
                    'node': element.point(pt).gn,
                    'dof': d,
                    'gfn': element.gfn_at_point(pt, d),
                })
    return pd.DataFrame(rows, columns=['element', 'kind', 'local_dof', 'node', 'dof', 'gfn'])


def solution_table(solver) -> pd.DataFrame:
    """
    Solved value of every global DOF, one row per (node, dof).

    Requires a solve(); values are read from the backend, not from the
    nodes, so update_displacements() is not needed.
    """
    df = dof_table(solver)
    df = df.drop_duplicates(subset=['node', 'dof']).sort_values('gfn')
    df = df[['node', 'dof', 'gfn']].reset_index(drop=True)
    df['value'] = [solver.backend.get_solution(int(g)) for g in df['gfn']]
    return df


def constraint_table(solver) -> pd.DataFrame:
    """Constraints with their multiplier slot, first right-hand side and Lagrange multiplier."""
    rows = []
    for c in solver.constraints():
        rows.append({
            'constraint': c.gn,
            'index': c.index,
            'terms': len(c.lhs),
            'rhs': float(c.rhs[0]) if len(c.rhs) else np.nan,
            'multiplier': c.multiplier,
        })
    return pd.DataFrame(rows, columns=['constraint', 'index', 'terms', 'rhs', 'multiplier'])

"""
Smoke tests for the plots: they build, show the right things and save.
"""

import io

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from streamfem import Solver
from streamfem.viz import plot_model, plot_sparsity


def solved(text):
    solver = Solver()
    solver.read(io.StringIO(text))
    solver.run()
    return solver


def test_sparsity_plot_marks_constraint_block(cantilever_text, tmp_path):
    solver = solved(cantilever_text)
    outpath = tmp_path / "plots" / "sparsity.png"

    fig = plot_sparsity(solver, str(outpath))

    assert outpath.exists()
    ax = fig.axes[0]
    assert "NMFC=3" in ax.get_title()
    # One horizontal and one vertical divider
    dividers = [line for line in ax.lines if line.get_linestyle() == "--"]
    assert len(dividers) == 2
    plt.close(fig)


def test_model_plot_draws_each_element_twice(truss_text):
    solver = solved(truss_text)

    fig = plot_model(solver, scale=100.0)

    ax = fig.axes[0]
    # Undeformed + deformed per element, plus the node markers
    assert len(ax.lines) == 2 * len(solver.elements) + 1
    plt.close(fig)

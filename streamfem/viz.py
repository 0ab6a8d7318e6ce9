"""
VISUALIZATION: SPARSITY PATTERN AND DEFORMED SHAPE
==================================================

PURPOSE:
--------
Two plots that answer the usual questions after a solve:

1. **Sparsity**: Which entries of the augmented matrix are filled? The
   element block should be banded by the DOF numbering, the constraint
   rows/columns sit in the last NMFC rows and columns.

2. **Deformed shape**: Does the structure move the way the loads say it
   should? Displacements are scaled up for visibility.

Both functions return the matplotlib Figure and save it when ``outpath``
is given.
"""

import os
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

COLORS = {
    'structure_primary': '#2C3E50',      # Dark blue-gray (undeformed)
    'structure_secondary': '#E74C3C',    # Coral red (deformed)
    'structure_accent': '#3498DB',       # Sky blue (matrix entries)
    'constraint': '#9B59B6',             # Purple (multiplier block)
    'grid': '#E0E0E0',                   # Light gray
    'text': '#2C3E50',
}


def _save(fig, outpath: Optional[str]) -> None:
    if outpath:
        directory = os.path.dirname(outpath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(outpath, dpi=150, bbox_inches='tight')


def plot_sparsity(solver, outpath: Optional[str] = None, title: str = "Augmented stiffness matrix"):
    """
    Spy plot of the assembled matrix, with the constraint block delimited.

    Parameters:
    -----------
    solver : Solver
        After assemble_k()
    outpath : str, optional
        Where to save the figure (.png, .pdf, .svg)
    """
    K = solver.backend.matrix()
    fig, ax = plt.subplots(figsize=(6, 6))
    if K.size:
        ax.spy(K, markersize=max(1.0, 200.0 / max(K.shape[0], 1)), color=COLORS['structure_accent'])
    if solver.nmfc > 0:
        edge = solver.ngfn - 0.5
        ax.axhline(edge, color=COLORS['constraint'], linewidth=1.0, linestyle='--')
        ax.axvline(edge, color=COLORS['constraint'], linewidth=1.0, linestyle='--')
    ax.set_title(f"{title}\nNGFN={solver.ngfn}, NMFC={solver.nmfc}", color=COLORS['text'])
    _save(fig, outpath)
    return fig


def plot_model(solver, scale: float = 50.0, outpath: Optional[str] = None, title: str = "Deformed shape"):
    """
    Undeformed and deformed line elements in the x-y plane.

    Uses node.displacements, so update_displacements() must have run.
    Only the first two displacement components (ux, uy) are drawn;
    rotations are ignored and elements are drawn as straight lines.
    """
    fig, ax = plt.subplots(figsize=(8, 6))

    for element in solver.elements:
        xy = np.array([element.point(pt).coords[:2] for pt in range(element.n_points)])
        ax.plot(xy[:, 0], xy[:, 1], '-', color=COLORS['structure_primary'], linewidth=1.5, alpha=0.6)

        moved = []
        for pt in range(element.n_points):
            node = element.point(pt)
            u = np.zeros(2)
            n = min(2, len(node.displacements))
            u[:n] = node.displacements[:n]
            moved.append(node.coords[:2] + scale * u)
        moved = np.array(moved)
        ax.plot(moved[:, 0], moved[:, 1], '-', color=COLORS['structure_secondary'], linewidth=2.0)

    if solver.nodes:
        pts = np.array([n.coords[:2] for n in solver.nodes])
        ax.plot(pts[:, 0], pts[:, 1], 'o', color=COLORS['structure_primary'], markersize=4)

    ax.set_aspect('equal', adjustable='datalim')
    ax.grid(True, color=COLORS['grid'])
    ax.set_title(f"{title} (×{scale:g})", color=COLORS['text'])
    _save(fig, outpath)
    return fig

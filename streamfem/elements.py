# Bar2D / Beam2D / Bar3D element stiffness + geometry

from typing import ClassVar, Tuple

import numpy as np

from .errors import ConsistencyError
from .model import Element
from .registry import register


class LineElement(Element):
    """Two-node element with a straight axis from point 0 to point 1."""

    def geometry(self) -> Tuple[float, np.ndarray]:
        """Return (L, direction cosines) of the element axis."""
        ni, nj = self.nodes
        delta = nj.coords - ni.coords
        L = float(np.linalg.norm(delta))
        if L <= 0.0:
            raise ConsistencyError(
                f"{self.label()} has zero length (nodes {ni.gn} and {nj.gn} coincide)."
            )
        return L, delta / L

    def length(self) -> float:
        return self.geometry()[0]

    def volume(self) -> float:
        return self.material.A * self.length()


def bar_global_stiffness(E: float, A: float, L: float, cosines: np.ndarray) -> np.ndarray:
    """
    Axial bar stiffness in global directions for any number of space dimensions.

        ke = (EA/L) × [ B  -B ]
                      [-B   B ]

    where B is the outer product of the direction cosines.
    """
    B = np.outer(cosines, cosines)
    return (E * A / L) * np.block([[B, -B], [-B, B]])


@register
class Bar2D(LineElement):
    """Plane truss bar: 2 nodes, DOFs (ux, uy) per node."""
    dofs_per_point: ClassVar[int] = 2

    def ke(self):
        L, cosines = self.geometry()
        if cosines.shape != (2,):
            raise ConsistencyError(f"{self.label()} needs NodeXY points.")
        return bar_global_stiffness(self.material.E, self.material.A, L, cosines)


@register
class Bar3D(LineElement):
    """Space truss bar: 2 nodes, DOFs (ux, uy, uz) per node."""
    dofs_per_point: ClassVar[int] = 3

    def ke(self):
        L, cosines = self.geometry()
        if cosines.shape != (3,):
            raise ConsistencyError(f"{self.label()} needs NodeXYZ points.")
        return bar_global_stiffness(self.material.E, self.material.A, L, cosines)


def frame2d_local_stiffness(E: float, A: float, I: float, L: float) -> np.ndarray:
    """
    Local stiffness matrix in element local coords (x along member).
    DOF order: [uix, uiy, rzi, ujx, ujy, rzj]
    """
    EA_L = E * A / L
    EI = E * I
    L2 = L * L
    L3 = L2 * L

    k = np.array([
        [ EA_L,      0.0,        0.0,    -EA_L,      0.0,        0.0],
        [  0.0,  12*EI/L3,   6*EI/L2,      0.0, -12*EI/L3,   6*EI/L2],
        [  0.0,   6*EI/L2,    4*EI/L,      0.0,  -6*EI/L2,    2*EI/L],
        [-EA_L,      0.0,        0.0,     EA_L,      0.0,        0.0],
        [  0.0, -12*EI/L3,  -6*EI/L2,      0.0,  12*EI/L3,  -6*EI/L2],
        [  0.0,   6*EI/L2,    2*EI/L,      0.0,  -6*EI/L2,    4*EI/L],
    ], dtype=float)
    return k


def frame2d_transform(c: float, s: float) -> np.ndarray:
    """
    6x6 transform from global DOFs to local DOFs.
    """
    T = np.array([
        [ c,  s, 0,  0, 0, 0],
        [-s,  c, 0,  0, 0, 0],
        [ 0,  0, 1,  0, 0, 0],
        [ 0,  0, 0,  c, s, 0],
        [ 0,  0, 0, -s, c, 0],
        [ 0,  0, 0,  0, 0, 1],
    ], dtype=float)
    return T


@register
class Beam2D(LineElement):
    """
    2D frame element (Euler–Bernoulli): 2 nodes, 3 DOF per node: (ux, uy, rz)
    """
    dofs_per_point: ClassVar[int] = 3

    def transform(self) -> np.ndarray:
        _, cosines = self.geometry()
        return frame2d_transform(cosines[0], cosines[1])

    def ke(self):
        L, cosines = self.geometry()
        m = self.material
        k_local = frame2d_local_stiffness(m.E, m.A, m.I, L)
        T = frame2d_transform(cosines[0], cosines[1])
        return T.T @ k_local @ T

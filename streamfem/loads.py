# loads.py - Nodal loads, element loads and multi-freedom constraints

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional

import numpy as np

from .errors import ConsistencyError, FormatError
from .model import Element, Load, LoadKind, find_by_gn
from .registry import register
from .tokens import format_float, format_vector, read_float, read_int, read_vector, write_field


def _as_vector(values) -> np.ndarray:
    return np.atleast_1d(np.asarray(values, dtype=float))


# =============================================================================
# NODAL LOADS
# =============================================================================

@register
@dataclass(eq=False)
class LoadNode(Load):
    """
    Concentrated load at one point of an element.

    ``values`` holds one force per DOF at the point, for each dimension in
    turn: [d0_dof0, d0_dof1, ..., d1_dof0, ...]. Its length must be a
    multiple of the element's DOFs per point.
    """
    kind: ClassVar[LoadKind] = LoadKind.NODAL

    element: Optional[Element] = None
    point: int = 0
    values: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self):
        super().__post_init__()
        self.values = _as_vector(self.values)

    def read(self, stream, context=None):
        super().read(stream, context)
        self.element = find_by_gn(context.elements, read_int(stream), "element")
        self.point = read_int(stream)
        if not 0 <= self.point < self.element.n_points:
            raise FormatError(
                f"{self.label()}: point {self.point} does not exist on {self.element.label()}"
            )
        self.values = read_vector(stream)

    def write(self, stream):
        super().write(stream)
        write_field(stream, str(self.element.gn), "Element GN")
        write_field(stream, str(self.point), "Point number within the element")
        write_field(stream, format_vector(self.values), "Force vector (first number is size)")


# =============================================================================
# ELEMENT LOADS
# =============================================================================

@dataclass(eq=False)
class ElementLoad(Load):
    """
    Load applied through the elements' equivalent nodal forces.

    An empty ``elements`` list means the load acts on every element in
    the model.
    """
    kind: ClassVar[LoadKind] = LoadKind.ELEMENT

    elements: List[Element] = field(default_factory=list)

    def fe(self, element: Element) -> np.ndarray:
        raise NotImplementedError

    def read(self, stream, context=None):
        super().read(stream, context)
        n = read_int(stream)
        # -1 (or 0) applies the load to all elements
        self.elements = [
            find_by_gn(context.elements, read_int(stream), "element") for _ in range(max(n, 0))
        ]

    def write(self, stream):
        super().write(stream)
        if self.elements:
            gns = " ".join(str(e.gn) for e in self.elements)
            write_field(stream, f"{len(self.elements)} {gns}", "Number of elements, element GNs")
        else:
            write_field(stream, "-1", "Applies to all elements")


@register
@dataclass(eq=False)
class LoadGravConst(ElementLoad):
    """
    Constant body force (force per unit volume in each global direction),
    lumped half to each end of a line element.
    """
    force: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self):
        super().__post_init__()
        self.force = _as_vector(self.force)

    def fe(self, element):
        f = np.zeros(element.n_dofs, dtype=float)
        share = element.volume() / element.n_points
        n = min(element.dofs_per_point, len(self.force))
        for pt in range(element.n_points):
            base = pt * element.dofs_per_point
            f[base:base + n] = share * self.force[:n]
        return f

    def read(self, stream, context=None):
        super().read(stream, context)
        self.force = read_vector(stream)

    def write(self, stream):
        super().write(stream)
        write_field(stream, format_vector(self.force), "Body force vector")


def frame2d_equiv_nodal_load_udl(L: float, w: float) -> np.ndarray:
    """
    Equivalent nodal load vector for a uniform distributed load (UDL)
    in LOCAL element coordinates.

    A uniform load w over length L is split equally between the two end
    nodes (wL/2 each) together with the fixed-end moments ±wL²/12.

    Parameters:
    -----------
    L : float
        Element length, must be positive
    w : float
        Load per unit length in local +y direction
        (w < 0 is downward for a horizontal element)

    Returns:
    --------
    np.ndarray
        Shape (6,): [Fx_i, Fy_i, Mz_i, Fx_j, Fy_j, Mz_j]
    """
    force_per_node = w * L / 2.0
    moment_magnitude = w * L * L / 12.0

    return np.array([
        0.0,
        force_per_node,
        moment_magnitude,
        0.0,
        force_per_node,
        -moment_magnitude,
    ], dtype=float)


@register
@dataclass(eq=False)
class LoadUDL(ElementLoad):
    """Uniform distributed load ``w`` on beam elements (local +y, force per length)."""
    w: float = 0.0

    def fe(self, element):
        if element.dofs_per_point != 3 or not hasattr(element, "transform"):
            raise ConsistencyError(f"{self.label()} can only act on beam elements, not {element.label()}")
        f_local = frame2d_equiv_nodal_load_udl(element.length(), self.w)
        # Local → global: f_global = T^T × f_local
        return element.transform().T @ f_local

    def read(self, stream, context=None):
        super().read(stream, context)
        self.w = read_float(stream)

    def write(self, stream):
        super().write(stream)
        write_field(stream, format_float(self.w), "Load per unit length")


# =============================================================================
# MULTI-FREEDOM CONSTRAINTS
# =============================================================================

@dataclass(eq=False)
class MFCTerm:
    """One term ``value × u(element, dof)`` of a constraint's left-hand side."""
    element: Element
    dof: int
    value: float


@register
@dataclass(eq=False)
class LoadBCMFC(Load):
    """
    Linear multi-freedom constraint:

        Σ value_i × u(element_i, dof_i) = rhs[dim]

    enforced with one Lagrange multiplier. ``index`` is the constraint's
    position among all constraints of the current assembly; ``multiplier``
    holds the solved Lagrange multiplier (the constraint force).
    """
    kind: ClassVar[LoadKind] = LoadKind.CONSTRAINT

    lhs: List[MFCTerm] = field(default_factory=list)
    rhs: np.ndarray = field(default_factory=lambda: np.zeros(1))

    def __post_init__(self):
        super().__post_init__()
        self.rhs = _as_vector(self.rhs)
        self.index = -1
        self.multiplier = float("nan")

    @classmethod
    def fixed(cls, element: Element, dof: int, value: float = 0.0, gn: int = -1) -> "LoadBCMFC":
        """Support condition u(element, dof) = value as a single-term constraint."""
        return cls(gn=gn, lhs=[MFCTerm(element, dof, 1.0)], rhs=[value])

    def read(self, stream, context=None):
        super().read(stream, context)
        n_terms = read_int(stream)
        if n_terms < 0:
            raise FormatError(f"{self.label()}: negative number of terms")
        self.lhs = []
        for _ in range(n_terms):
            element = find_by_gn(context.elements, read_int(stream), "element")
            dof = read_int(stream)
            if not 0 <= dof < element.n_dofs:
                raise FormatError(f"{self.label()}: DOF {dof} does not exist on {element.label()}")
            self.lhs.append(MFCTerm(element, dof, read_float(stream)))
        self.rhs = read_vector(stream)

    def write(self, stream):
        super().write(stream)
        write_field(stream, str(len(self.lhs)), "Number of DOFs in this MFC")
        for term in self.lhs:
            write_field(
                stream,
                f"{term.element.gn} {term.dof} {format_float(term.value)}",
                "Element GN, DOF# in element, weight",
            )
        write_field(stream, format_vector(self.rhs), "rhs of MFC (size, values)")

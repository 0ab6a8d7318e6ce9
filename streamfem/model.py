# streamfem/model.py
"""
MODEL OBJECTS: Nodes, Materials, Elements, Loads
================================================

Every object that can appear in a model stream derives from ModelObject
and carries a ``category`` tag. The four categories are closed: the
reader, the loader and the assemblers dispatch on the tag instead of
testing classes one after another.

Concrete element kinds live in elements.py, concrete loads in loads.py.
Nodes and the linear elastic material are simple enough to live here.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Sequence, TextIO

import numpy as np

from .errors import FormatError
from .registry import register
from .tokens import (
    expect, format_float, read_float, read_int, read_word, write_field, write_token,
)

INVALID_DOF = -1


class Category(Enum):
    NODE = "node"
    MATERIAL = "material"
    ELEMENT = "element"
    LOAD = "load"


class LoadKind(Enum):
    NODAL = "nodal"
    ELEMENT = "element"
    CONSTRAINT = "constraint"


@dataclass
class ElementReadContext:
    """What an element needs to resolve its node and material references."""
    nodes: Sequence
    materials: Sequence


@dataclass
class LoadReadContext:
    """What a load needs to resolve its node and element references."""
    nodes: Sequence
    elements: Sequence


def find_by_gn(collection: Sequence, gn: int, what: str):
    """Return the object with global number ``gn``; FormatError if it was never read."""
    for obj in collection:
        if obj.gn == gn:
            return obj
    raise FormatError(f"Reference to unknown {what} with global number {gn}")


class ModelObject:
    """
    Base for everything the class registry can create.

    Subclasses must be constructible with no arguments: the reader creates
    a blank instance and then lets it consume its own payload.
    """
    category: ClassVar[Optional[Category]] = None
    class_name: ClassVar[Optional[str]] = None

    gn: int

    @classmethod
    def token_name(cls) -> str:
        return cls.class_name or cls.__name__

    def read(self, stream: TextIO, context=None) -> None:
        self.gn = read_int(stream)

    def write(self, stream: TextIO) -> None:
        write_token(stream, self.token_name())
        write_field(stream, str(self.gn), "Global object number")

    def label(self) -> str:
        return f"{self.token_name()} #{self.gn}"


# =============================================================================
# NODES
# =============================================================================

@dataclass(eq=False)
class Node(ModelObject):
    """
    A point in space. Coordinates only; DOFs are owned by the elements.

    ``displacements`` is filled by Solver.update_displacements, one value
    per DOF at this point (in the DOF order of the elements that touch it).
    """
    category: ClassVar[Category] = Category.NODE
    n_coords: ClassVar[int] = 0

    gn: int = -1

    def __post_init__(self):
        self.displacements = np.zeros(0)

    @property
    def coords(self) -> np.ndarray:
        raise NotImplementedError

    def read(self, stream, context=None):
        super().read(stream, context)
        self._set_coords([read_float(stream) for _ in range(self.n_coords)])

    def write(self, stream):
        super().write(stream)
        write_field(stream, " ".join(format_float(c) for c in self.coords), "Nodal coordinates")

    def _set_coords(self, values):
        raise NotImplementedError


@register
@dataclass(eq=False)
class NodeXY(Node):
    n_coords: ClassVar[int] = 2

    x: float = 0.0
    y: float = 0.0

    @property
    def coords(self):
        return np.array([self.x, self.y], dtype=float)

    def _set_coords(self, values):
        self.x, self.y = values


@register
@dataclass(eq=False)
class NodeXYZ(Node):
    n_coords: ClassVar[int] = 3

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def coords(self):
        return np.array([self.x, self.y, self.z], dtype=float)

    def _set_coords(self, values):
        self.x, self.y, self.z = values


# =============================================================================
# MATERIALS
# =============================================================================

class Material(ModelObject):
    category: ClassVar[Category] = Category.MATERIAL


@register
@dataclass(eq=False)
class MaterialLinearElasticity(Material):
    """
    Linear elastic material and section properties.

    Stream payload is keyed, any order, closed by ``END:``::

        <MaterialLinearElasticity>
            0           % global number
            E  : 210e9
            A  : 0.01
            I  : 8e-6
            END:
    """
    gn: int = -1
    E: float = 1.0     # Young's modulus
    A: float = 1.0     # cross-section area
    I: float = 1.0     # second moment of area
    nu: float = 0.3    # Poisson's ratio
    rho: float = 1.0   # density

    KEYS: ClassVar[tuple] = ("E", "A", "I", "nu", "rho")

    def read(self, stream, context=None):
        super().read(stream, context)
        while True:
            key = read_word(stream)
            if key == "END:":
                break
            if key not in self.KEYS:
                raise FormatError(f"{self.label()}: unknown material property {key!r}")
            expect(stream, ":")
            setattr(self, key, read_float(stream))

    def write(self, stream):
        super().write(stream)
        for key in self.KEYS:
            write_field(stream, f"{key} : {format_float(getattr(self, key))}")
        write_field(stream, "END:")


# =============================================================================
# ELEMENTS
# =============================================================================

@dataclass(eq=False)
class Element(ModelObject):
    """
    Base for all elements.

    An element owns one global freedom number (GFN) per local DOF. Local
    DOFs are ordered point by point: local = point * dofs_per_point + dof.
    The numbers are cleared and re-linked on every DOF-assignment pass.
    """
    category: ClassVar[Category] = Category.ELEMENT
    dofs_per_point: ClassVar[int] = 0
    n_points_required: ClassVar[int] = 2

    gn: int = -1
    nodes: List[Node] = field(default_factory=list)
    material: Optional[Material] = None

    def __post_init__(self):
        self.clear_dofs()

    @property
    def n_points(self) -> int:
        return len(self.nodes)

    @property
    def n_dofs(self) -> int:
        return self.n_points * self.dofs_per_point

    def point(self, pt: int) -> Node:
        return self.nodes[pt]

    def clear_dofs(self) -> None:
        self._dofs = [INVALID_DOF] * self.n_dofs

    def gfn(self, local_dof: int) -> int:
        return self._dofs[local_dof]

    def gfn_at_point(self, pt: int, dof: int) -> int:
        return self._dofs[pt * self.dofs_per_point + dof]

    def set_gfn(self, local_dof: int, value: int) -> None:
        self._dofs[local_dof] = value

    def ke(self) -> np.ndarray:
        """Element stiffness matrix in global directions, shape (n_dofs, n_dofs)."""
        raise NotImplementedError

    def fe(self, load) -> np.ndarray:
        """Equivalent nodal forces of an element load, one n_dofs slice per dimension."""
        return load.fe(self)

    def read(self, stream, context=None):
        super().read(stream, context)
        self.nodes = [
            find_by_gn(context.nodes, read_int(stream), "node")
            for _ in range(self.n_points_required)
        ]
        self.material = find_by_gn(context.materials, read_int(stream), "material")
        self.clear_dofs()

    def write(self, stream):
        super().write(stream)
        for i, node in enumerate(self.nodes):
            write_field(stream, str(node.gn), f"NodeIDs[{i}]")
        write_field(stream, str(self.material.gn), "MaterialGN")


# =============================================================================
# LOADS
# =============================================================================

@dataclass(eq=False)
class Load(ModelObject):
    """
    Base for all loads. ``kind`` selects how the force assembler treats it;
    a load without a kind is ignored during force assembly.
    """
    category: ClassVar[Category] = Category.LOAD
    kind: ClassVar[Optional[LoadKind]] = None

    gn: int = -1

    def __post_init__(self):
        self.solution = None

    def set_solution(self, backend) -> None:
        """Keep a handle on the linear system so the load can read the solution later."""
        self.solution = backend

# streamfem - Stream-defined finite element models: numbering, assembly, solve
"""
STREAMFEM: Finite Element Model Assembler and Solve Driver
==========================================================

This package provides:
- A text stream format for models (nodes, materials, elements, loads)
- Global DOF numbering with DOFs shared between connected elements
- Assembly of K and F into a pluggable linear system backend
- Multi-freedom constraints enforced with Lagrange multipliers

ARCHITECTURE:
-------------
    kernel/         Numbering, assembly and linear system backends
    model.py        Model object kinds (Node, Material, Element, Load)
    elements.py     Bar2D, Beam2D, Bar3D
    loads.py        LoadNode, LoadGravConst, LoadUDL, LoadBCMFC
    registry.py     Class registry used by the stream reader
    stream.py       Stream object reader
    solver.py       Solver: collections + solve cycle
    post.py         Result tables (pandas)
    viz.py          Sparsity and deformed shape plots
    cli.py          Command line entry point
"""

from .errors import ConsistencyError, FEMError, FormatError
from .registry import DEFAULT_REGISTRY, ClassRegistry, register
from .model import (
    Category, Element, ElementReadContext, Load, LoadKind, LoadReadContext, Material,
    MaterialLinearElasticity, ModelObject, Node, NodeXY, NodeXYZ,
)
# Importing these modules registers their kinds in DEFAULT_REGISTRY
from .elements import Bar2D, Bar3D, Beam2D
from .loads import LoadBCMFC, LoadGravConst, LoadNode, LoadUDL, MFCTerm
from .kernel import DenseLinearSystem, MechanismError, SparseLinearSystem, make_backend
from .stream import ObjectReader
from .solver import Solver

__version__ = "0.1.0"

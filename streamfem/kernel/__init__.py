# streamfem/kernel - Numbering, assembly and linear system core
"""
KERNEL: NUMBERING, ASSEMBLY AND SOLVE
=====================================

This package contains the parts of the solver that do not care which
element, material or load kinds exist. They only need:
- Elements that report their points, DOFs per point, GFNs and Ke/Fe
- Loads tagged with a LoadKind
- A LinearSystemBackend to write the augmented system into

The ELEMENT and LOAD implementations (Bar2D, Beam2D, LoadUDL, ...) live
one level up; the kernel plumbing is shared by all of them.
"""

from .dof import DOFCounter, NodeMembership, assign_global_dofs
from .assemble import assemble_forces, assemble_stiffness, collect_constraints
from .solve import (
    DenseLinearSystem, LinearSystemBackend, MechanismError, SparseLinearSystem, make_backend,
)

__all__ = [
    'DOFCounter', 'NodeMembership', 'assign_global_dofs',
    'assemble_forces', 'assemble_stiffness', 'collect_constraints',
    'DenseLinearSystem', 'LinearSystemBackend', 'MechanismError', 'SparseLinearSystem',
    'make_backend',
]

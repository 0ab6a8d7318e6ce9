# streamfem/errors.py
"""Exception types raised while reading, numbering and assembling a model."""


class FEMError(Exception):
    """Base class for all streamfem errors."""
    pass


class FormatError(FEMError):
    """
    Raised when the model stream is malformed.

    Covers unknown class tokens, missing token markers, bad payload values
    and cross-references to global numbers that were never read.
    """
    pass


class ConsistencyError(FEMError):
    """
    Raised when the assembled system would be inconsistent with the model.

    A global freedom number outside [0, NGFN), or a load whose value array
    does not fit the DOF layout of its target. Always fatal.
    """
    pass

# streamfem/kernel/solve.py
"""Linear system backends: matrix/vector storage and the direct solve of K·u = F."""

import logging
from abc import ABC, abstractmethod

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import splu, spsolve

from ..errors import ConsistencyError

logger = logging.getLogger(__name__)


class MechanismError(RuntimeError):
    """Raised when structure is unstable or ill-conditioned."""
    pass


class LinearSystemBackend(ABC):
    """
    Storage and solution of one linear system of a given order.

    The assembler only talks to this interface. ``add_*`` accumulates into
    an entry, ``set_*`` overwrites it. Indices are checked against the
    system order.
    """

    def __init__(self):
        self.order = 0
        self._solution = None

    def set_system_order(self, n: int) -> None:
        self.order = int(n)

    def _check(self, *indices) -> None:
        for i in indices:
            if not 0 <= i < self.order:
                raise ConsistencyError(f"Index {i} outside linear system of order {self.order}")

    @abstractmethod
    def initialize_matrix(self) -> None: ...

    @abstractmethod
    def initialize_vector(self) -> None: ...

    def initialize_solution(self) -> None:
        self._solution = np.zeros(self.order, dtype=float)

    @abstractmethod
    def add_matrix_value(self, row: int, col: int, value: float) -> None: ...

    @abstractmethod
    def set_matrix_value(self, row: int, col: int, value: float) -> None: ...

    @abstractmethod
    def get_matrix_value(self, row: int, col: int) -> float: ...

    @abstractmethod
    def add_vector_value(self, i: int, value: float) -> None: ...

    @abstractmethod
    def set_vector_value(self, i: int, value: float) -> None: ...

    @abstractmethod
    def get_vector_value(self, i: int) -> float: ...

    @abstractmethod
    def matrix(self) -> np.ndarray:
        """Dense copy of the matrix (for inspection and plotting)."""

    @abstractmethod
    def vector(self) -> np.ndarray:
        """Copy of the right-hand side vector."""

    def factorize(self) -> None:
        """Optional factorization step; the default keeps nothing."""
        pass

    @abstractmethod
    def solve(self) -> None: ...

    def get_solution(self, i: int) -> float:
        if self._solution is None or len(self._solution) != self.order:
            raise ConsistencyError("No solution available: call solve() first")
        self._check(i)
        return float(self._solution[i])

    def solution(self) -> np.ndarray:
        if self._solution is None:
            raise ConsistencyError("No solution available: call solve() first")
        return self._solution.copy()


def equilibrate(K: np.ndarray) -> np.ndarray:
    """
    Symmetrically scaled copy D·K·D used for the conditioning check.

    Rows with a diagonal entry get 1/sqrt(|K_ii|). Rows without one (the
    Lagrange multiplier rows) are scaled so their largest entry becomes 1
    after the first scaling. Without this, a stiffness of k next to a unit
    constraint coefficient gives cond ~ k² even for a well-posed model.
    """
    diag = np.abs(np.diag(K))
    s = np.ones(len(K), dtype=float)
    has_diag = diag > 0.0
    s[has_diag] = 1.0 / np.sqrt(diag[has_diag])
    for i in np.flatnonzero(~has_diag):
        row_max = np.max(np.abs(K[i, has_diag]) * s[has_diag]) if has_diag.any() else 0.0
        if row_max > 0.0:
            s[i] = 1.0 / row_max
    return K * s[:, None] * s[None, :]


class DenseLinearSystem(LinearSystemBackend):
    """
    numpy storage, solved with np.linalg.solve.

    The condition number of the equilibrated matrix is checked first: a
    constrained model that still has a mechanism (or a redundant
    constraint) gives a singular augmented matrix.
    """

    def __init__(self, cond_limit: float = 1e12):
        super().__init__()
        self.cond_limit = cond_limit
        self.K = np.zeros((0, 0), dtype=float)
        self.F = np.zeros(0, dtype=float)

    def initialize_matrix(self):
        self.K = np.zeros((self.order, self.order), dtype=float)

    def initialize_vector(self):
        self.F = np.zeros(self.order, dtype=float)

    def add_matrix_value(self, row, col, value):
        self._check(row, col)
        self.K[row, col] += value

    def set_matrix_value(self, row, col, value):
        self._check(row, col)
        self.K[row, col] = value

    def get_matrix_value(self, row, col):
        self._check(row, col)
        return float(self.K[row, col])

    def add_vector_value(self, i, value):
        self._check(i)
        self.F[i] += value

    def set_vector_value(self, i, value):
        self._check(i)
        self.F[i] = value

    def get_vector_value(self, i):
        self._check(i)
        return float(self.F[i])

    def matrix(self):
        return self.K.copy()

    def vector(self):
        return self.F.copy()

    def solve(self):
        if self.order == 0:
            self._solution = np.zeros(0, dtype=float)
            return
        cond = np.linalg.cond(equilibrate(self.K))
        if not np.isfinite(cond) or cond > self.cond_limit:
            raise MechanismError(
                f"Unstable system (cond={cond:.2e}). Check supports. Need cond < {self.cond_limit:.0e}."
            )
        try:
            self._solution = np.linalg.solve(self.K, self.F)
        except np.linalg.LinAlgError as exc:
            raise MechanismError(f"Singular system: {exc}. Check supports.") from exc
        logger.debug("Dense solve of order %d done (cond=%.2e)", self.order, cond)


class SparseLinearSystem(LinearSystemBackend):
    """
    scipy.sparse storage. Entries are only allocated when written, so the
    assembler's zero-skipping keeps the matrix sparse. Solved by sparse LU.
    """

    def __init__(self):
        super().__init__()
        self.K = sp.lil_matrix((0, 0), dtype=float)
        self.F = np.zeros(0, dtype=float)
        self._lu = None

    def initialize_matrix(self):
        self.K = sp.lil_matrix((self.order, self.order), dtype=float)
        self._lu = None

    def initialize_vector(self):
        self.F = np.zeros(self.order, dtype=float)

    def add_matrix_value(self, row, col, value):
        self._check(row, col)
        self.K[row, col] = self.K[row, col] + value
        self._lu = None

    def set_matrix_value(self, row, col, value):
        self._check(row, col)
        self.K[row, col] = value
        self._lu = None

    def get_matrix_value(self, row, col):
        self._check(row, col)
        return float(self.K[row, col])

    def add_vector_value(self, i, value):
        self._check(i)
        self.F[i] += value

    def set_vector_value(self, i, value):
        self._check(i)
        self.F[i] = value

    def get_vector_value(self, i):
        self._check(i)
        return float(self.F[i])

    def nnz(self) -> int:
        return self.K.nnz

    def matrix(self):
        return self.K.toarray()

    def vector(self):
        return self.F.copy()

    def factorize(self):
        if self.order == 0:
            return
        try:
            self._lu = splu(self.K.tocsc())
        except RuntimeError as exc:
            raise MechanismError(f"Singular system: {exc}. Check supports.") from exc
        logger.debug("Sparse LU of order %d, %d nonzeros", self.order, self.K.nnz)

    def solve(self):
        if self.order == 0:
            self._solution = np.zeros(0, dtype=float)
            return
        if self._lu is not None:
            u = self._lu.solve(self.F)
        else:
            try:
                u = spsolve(self.K.tocsr(), self.F)
            except RuntimeError as exc:
                raise MechanismError(f"Singular system: {exc}. Check supports.") from exc
        u = np.atleast_1d(np.asarray(u, dtype=float))
        if not np.all(np.isfinite(u)):
            raise MechanismError("Singular system: solution is not finite. Check supports.")
        self._solution = u


BACKENDS = {
    "dense": DenseLinearSystem,
    "sparse": SparseLinearSystem,
}


def make_backend(name: str = "dense", **kwargs) -> LinearSystemBackend:
    """Create a backend by name ('dense' or 'sparse')."""
    try:
        cls = BACKENDS[name]
    except KeyError:
        raise ValueError(f"Unknown linear system backend {name!r}; choose from {sorted(BACKENDS)}") from None
    return cls(**kwargs)

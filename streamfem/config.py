# streamfem/config.py
"""
Solver configuration and defaults.

The stream grammar itself (markers, float format) is fixed and lives in
tokens.py; this only holds what a caller may tune per Solver.
"""

from dataclasses import dataclass
import logging


@dataclass
class SolverConfig:
    """Global solver configuration."""

    # Stream reading
    max_token_length: int = 256

    # Linear system
    backend: str = "dense"          # 'dense' or 'sparse'
    cond_limit: float = 1e12        # MechanismError above this condition number

    # Logging (default level of the command line)
    log_level: int = logging.WARNING


# Global config instance
CONFIG = SolverConfig()

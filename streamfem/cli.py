"""
Command line entry point: read a model stream, solve it, report results.

EXAMPLE USAGE:
--------------
    python -m streamfem demos/models/cantilever.fem
    python -m streamfem truss.fem --dims 0 1 --backend sparse --csv out/u.csv
"""

import argparse
import logging
import os
import sys

from .config import CONFIG, SolverConfig
from .errors import FEMError
from .kernel.solve import MechanismError
from .logging_config import setup_logging
from .post import constraint_table, solution_table
from .solver import Solver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='streamfem',
        description='Assemble and solve a finite element model stream',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m streamfem demos/models/cantilever.fem
  python -m streamfem truss.fem --dims 0 1 --backend sparse --csv out/u.csv
        """
    )
    parser.add_argument('model', help='Model stream file')
    parser.add_argument(
        '--dims', type=int, nargs='+', default=[0],
        help='Spatial dimensions to solve for, one system each (default: 0)'
    )
    parser.add_argument(
        '--backend', choices=['dense', 'sparse'], default=CONFIG.backend,
        help=f'Linear system backend (default: {CONFIG.backend})'
    )
    parser.add_argument('--csv', help='Write the solution table of the last dimension to this CSV file')
    parser.add_argument('--write', help='Re-serialize the model to this file after reading')
    parser.add_argument(
        '--log-level', default=logging.getLevelName(CONFIG.log_level),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help=f'Logging level (default: {logging.getLevelName(CONFIG.log_level)})'
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    config = SolverConfig(backend=args.backend)
    solver = Solver(config=config)

    try:
        with open(args.model, 'r', encoding='utf-8') as f:
            solver.read(f)

        if args.write:
            with open(args.write, 'w', encoding='utf-8') as f:
                solver.write(f)

        solver.generate_gfn()
        solver.assemble_k()
        solver.decompose_k()
        print(f"NGFN = {solver.ngfn}, NMFC = {solver.nmfc}")

        df = None
        for dim in args.dims:
            solver.assemble_f(dim)
            if solver.ngfn <= 0:
                print("Model has no elements; nothing to solve.")
                return 0
            solver.solve()
            solver.update_displacements()
            df = solution_table(solver)
            print(f"\nDimension {dim}")
            print(df.to_string(index=False))
            constraints = constraint_table(solver)
            if len(constraints):
                print(constraints.to_string(index=False))
    except (FEMError, MechanismError) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.csv and df is not None:
        directory = os.path.dirname(args.csv)
        if directory:
            os.makedirs(directory, exist_ok=True)
        df.to_csv(args.csv, index=False)
        print(f"\nSaved: {args.csv}")

    return 0

"""
Smoke tests for the command line entry point.
"""

import logging

import pandas as pd

from conftest import CANTILEVER, TRUSS
from streamfem.cli import build_parser, main
from streamfem.config import CONFIG


def write_model(tmp_path, text, name="model.fem"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_parser_defaults():
    args = build_parser().parse_args(["model.fem"])
    assert args.dims == [0]
    assert args.backend == "dense"
    assert args.csv is None
    assert args.log_level == logging.getLevelName(CONFIG.log_level) == "WARNING"


def test_solve_cantilever(tmp_path, capsys):
    model = write_model(tmp_path, CANTILEVER)
    csv_path = tmp_path / "out" / "u.csv"

    assert main([model, "--csv", str(csv_path)]) == 0

    out = capsys.readouterr().out
    assert "NGFN = 9, NMFC = 3" in out
    df = pd.read_csv(csv_path)
    assert len(df) == 9
    assert list(df.columns) == ["node", "dof", "gfn", "value"]


def test_solve_truss_both_dimensions_sparse(tmp_path, capsys):
    model = write_model(tmp_path, TRUSS)

    assert main([model, "--dims", "0", "1", "--backend", "sparse"]) == 0

    out = capsys.readouterr().out
    assert "Dimension 0" in out
    assert "Dimension 1" in out


def test_write_model_back(tmp_path):
    model = write_model(tmp_path, TRUSS)
    copy = tmp_path / "copy.fem"

    assert main([model, "--write", str(copy)]) == 0
    # The copy solves the same way
    assert main([str(copy)]) == 0


def test_bad_stream_returns_error(tmp_path, capsys):
    model = write_model(tmp_path, "<NodeXY> 0 0 0\n<Bogus> 1")

    assert main([model]) == 1
    assert "Bogus" in capsys.readouterr().err


def test_mechanism_returns_error(tmp_path, capsys):
    unsupported = TRUSS.split("<LoadBCMFC>")[0] + "<END>\n"
    model = write_model(tmp_path, unsupported)

    assert main([model]) == 1
    assert "Error" in capsys.readouterr().err


def test_empty_model(tmp_path, capsys):
    model = write_model(tmp_path, "<NodeXY> 0 0 0\n<END>\n")

    assert main([model]) == 0
    assert "nothing to solve" in capsys.readouterr().out

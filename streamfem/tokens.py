# streamfem/tokens.py
"""
Low-level helpers for the model stream grammar.

Model objects use these to read and write their own payloads. Whitespace
is free-form and a comment runs from the comment marker to the end of the
line, so a payload may be annotated freely:

    <NodeXY>
        3        % global number
        1.5 0.0  % x y
"""

from typing import Iterable, TextIO

import numpy as np

from .errors import FormatError

# Grammar markers. Fixed: every stream this package writes or reads uses them.
TOKEN_OPEN = "<"
TOKEN_CLOSE = ">"
COMMENT = "%"
TERMINATOR = "END"
FLOAT_FORMAT = "{:.17g}"  # round-trips every float exactly


def skip_whitespace(stream: TextIO) -> None:
    """Advance past whitespace and comments, leaving the next significant character unread."""
    while True:
        pos = stream.tell()
        ch = stream.read(1)
        if ch == "":
            return
        if ch.isspace():
            continue
        if ch == COMMENT:
            stream.readline()
            continue
        stream.seek(pos)
        return


def read_word(stream: TextIO) -> str:
    """
    Read one whitespace-delimited payload word.

    Raises FormatError at end of stream or when the next significant
    character opens a new token.
    """
    skip_whitespace(stream)
    chars = []
    while True:
        pos = stream.tell()
        ch = stream.read(1)
        if ch == "":
            break
        if ch.isspace() or ch == COMMENT or ch == TOKEN_OPEN:
            stream.seek(pos)
            break
        chars.append(ch)
    if not chars:
        raise FormatError("Unexpected end of object data in model stream")
    return "".join(chars)


def read_int(stream: TextIO) -> int:
    word = read_word(stream)
    try:
        return int(word)
    except ValueError as exc:
        raise FormatError(f"Expected an integer, got {word!r}") from exc


def read_float(stream: TextIO) -> float:
    word = read_word(stream)
    try:
        return float(word)
    except ValueError as exc:
        raise FormatError(f"Expected a number, got {word!r}") from exc


def read_vector(stream: TextIO) -> np.ndarray:
    """Read a size-prefixed vector: ``n v1 ... vn``."""
    n = read_int(stream)
    if n < 0:
        raise FormatError(f"Negative vector size {n}")
    return np.array([read_float(stream) for _ in range(n)], dtype=float)


def expect(stream: TextIO, literal: str) -> None:
    word = read_word(stream)
    if word != literal:
        raise FormatError(f"Expected {literal!r}, got {word!r}")


def format_float(value: float) -> str:
    return FLOAT_FORMAT.format(float(value))


def format_vector(values: Iterable[float]) -> str:
    values = list(values)
    return " ".join([str(len(values))] + [format_float(v) for v in values])


def write_token(stream: TextIO, name: str) -> None:
    stream.write(f"{TOKEN_OPEN}{name}{TOKEN_CLOSE}\n")


def write_field(stream: TextIO, text: str, note: str = None) -> None:
    """Write one indented payload line, optionally annotated with a comment."""
    if note:
        stream.write(f"\t{text}\t{COMMENT} {note}\n")
    else:
        stream.write(f"\t{text}\n")


def write_terminator(stream: TextIO, title: str) -> None:
    """Close a section of the stream with a terminator token."""
    stream.write(f"\n{TOKEN_OPEN}{TERMINATOR}{TOKEN_CLOSE}  {COMMENT} End of {title}\n\n")

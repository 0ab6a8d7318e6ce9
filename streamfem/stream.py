# streamfem/stream.py
"""
STREAM OBJECT READER
====================

Turns a text stream into model objects, one token at a time:

    % comments and whitespace are skipped
    <NodeXY>                 ← token: class name between the markers
        0   0.0 0.0          ← payload, read by the NodeXY object itself
    <END>                    ← terminator, ignored

The class name is resolved through a ClassRegistry. Before the new
object reads its payload it is handed a context chosen by its category:
elements get the node and material collections, loads get the node and
element collections, everything else gets nothing.

On an unknown or malformed token the stream is put back at the '<' of
that token and FormatError is raised. If the payload read fails, the
half-read object is dropped and the error propagates as-is.
"""

import logging
from typing import Optional, Sequence, TextIO

from .config import CONFIG, SolverConfig
from .errors import FormatError
from .model import Category, ElementReadContext, LoadReadContext, ModelObject
from .registry import ClassRegistry
from .tokens import TERMINATOR, TOKEN_CLOSE, TOKEN_OPEN, skip_whitespace

logger = logging.getLogger(__name__)


class ObjectReader:
    """Reads model objects from a stream, resolving cross-references in the given collections."""

    def __init__(
        self,
        registry: ClassRegistry,
        nodes: Sequence,
        materials: Sequence,
        elements: Sequence,
        config: SolverConfig = None,
    ):
        self.registry = registry
        self.nodes = nodes
        self.materials = materials
        self.elements = elements
        self.config = config or CONFIG

    def _fail(self, stream: TextIO, position, message: str):
        stream.seek(position)
        raise FormatError(message)

    def _read_token(self, stream: TextIO, start) -> str:
        chars = []
        while True:
            ch = stream.read(1)
            if ch == "":
                self._fail(stream, start, "Unterminated token at end of model stream")
            if ch == TOKEN_CLOSE:
                break
            chars.append(ch)
            if len(chars) > self.config.max_token_length:
                self._fail(stream, start, f"Token longer than {self.config.max_token_length} characters")
        name = "".join(chars).strip()
        if not name:
            self._fail(stream, start, "Empty token in model stream")
        return name

    def context_for(self, obj: ModelObject):
        category = getattr(obj, "category", None)
        if category is Category.ELEMENT:
            return ElementReadContext(nodes=self.nodes, materials=self.materials)
        if category is Category.LOAD:
            return LoadReadContext(nodes=self.nodes, elements=self.elements)
        return None

    def read_next(self, stream: TextIO) -> Optional[ModelObject]:
        """
        Read the next object from ``stream``.

        Returns None at end of stream. Terminator tokens are consumed and
        skipped.

        Raises:
        -------
        FormatError
            Missing '<', unterminated token, or a class name the registry
            doesn't know. The stream is left just before the token.
        """
        while True:
            skip_whitespace(stream)
            start = stream.tell()
            ch = stream.read(1)
            if ch == "":
                return None
            if ch != TOKEN_OPEN:
                self._fail(
                    stream, start,
                    f"Expected '{TOKEN_OPEN}' at start of object, got {ch!r}",
                )

            name = self._read_token(stream, start)
            if name == TERMINATOR:
                continue

            type_id = self.registry.resolve(name)
            if type_id is None:
                self._fail(stream, start, f"Unknown class {name!r} in model stream")

            obj = self.registry.create(type_id)
            try:
                obj.read(stream, self.context_for(obj))
            except Exception:
                logger.debug("Discarding partially read %s", name)
                raise
            return obj

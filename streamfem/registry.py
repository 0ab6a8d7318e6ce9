# streamfem/registry.py
"""
CLASS REGISTRY: Token Name -> Model Object Constructor
======================================================

The stream reader never imports concrete model classes. It asks a
registry to turn the class name found in a token into a type id, and the
type id into a blank instance:

    type_id = registry.resolve("Beam2D")    # None if unknown
    obj = registry.create(type_id)          # Beam2D()

The default registry is filled when elements.py and loads.py are
imported (see streamfem/__init__.py). Further kinds can be registered at
runtime, into the default registry or into a private one:

    @register
    class MyElement(Element):
        ...
"""

import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class ClassRegistry:
    """Table of model object constructors indexed by name and by type id."""

    def __init__(self):
        self._ids: Dict[str, int] = {}
        self._constructors: List[Callable] = []

    def register(self, cls, name: str = None):
        """Register ``cls`` under ``name`` (default: its token name). Returns ``cls``."""
        name = name or cls.token_name()
        if name in self._ids:
            self._constructors[self._ids[name]] = cls
            logger.debug("Re-registered %s", name)
        else:
            self._ids[name] = len(self._constructors)
            self._constructors.append(cls)
        return cls

    def resolve(self, name: str) -> Optional[int]:
        return self._ids.get(name)

    def create(self, type_id: int):
        return self._constructors[type_id]()

    def names(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)


DEFAULT_REGISTRY = ClassRegistry()


def register(cls):
    """Class decorator: add ``cls`` to the default registry."""
    return DEFAULT_REGISTRY.register(cls)

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Value classification and deferred values.

Every value written into a PermStore falls into one ValueKind:

- LEAF: primitives (str, int, float, bool, None) and any other scalar
  object, stored as-is
- SEQUENCE: list or tuple, stored as plain data
- STRUCTURED: a Mapping, never stored directly; writing one creates a
  child store (auto-vivification)
- STORE: a PermStore, stored by reference
- DEFERRED: a Lazy, stored as a capability and invoked on read
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Any, Callable

logger = logging.getLogger(__name__)

_PRIMITIVES = (str, int, float, bool)


class ValueKind(enum.Enum):
    """Tag of the variant held by a StoreSlot."""

    LEAF = 'leaf'
    SEQUENCE = 'sequence'
    STRUCTURED = 'structured'
    STORE = 'store'
    DEFERRED = 'deferred'


class Lazy:
    """A deferred value: a zero-argument factory invoked on demand.

    Each resolve() calls the factory again, so a lazy property may yield
    a fresh object on every read. With cache=True the first result is
    kept and returned from then on.

    Example:
        >>> class ParentStore(PermStore):
        ...     child = Restricted('r', lazy(lambda: ChildStore()))
        >>> ParentStore().read('child:child:child')
    """

    __slots__ = ('factory', 'cache', '_cached', '_resolved')

    def __init__(self, factory: Callable[[], Any], cache: bool = False) -> None:
        if not callable(factory):
            raise TypeError(f"Lazy factory must be callable, not {type(factory).__name__}")
        self.factory = factory
        self.cache = cache
        self._cached: Any = None
        self._resolved = False

    def resolve(self) -> Any:
        """Invoke the factory (or return the cached result)."""
        if self.cache and self._resolved:
            return self._cached
        value = self.factory()
        logger.debug("resolved %r -> %s", self, type(value).__name__)
        if self.cache:
            self._cached = value
            self._resolved = True
        return value

    def __call__(self) -> Any:
        return self.resolve()

    def reset(self) -> None:
        """Drop the cached result, if any."""
        self._cached = None
        self._resolved = False

    def __repr__(self) -> str:
        name = getattr(self.factory, '__qualname__', type(self.factory).__name__)
        return f"Lazy({name}{', cache=True' if self.cache else ''})"


def lazy(factory: Callable[[], Any], cache: bool = False) -> Lazy:
    """Wrap factory in a Lazy."""
    return Lazy(factory, cache=cache)


def is_primitive(value: Any) -> bool:
    """True for str, int, float, bool and None."""
    return value is None or isinstance(value, _PRIMITIVES)


def is_store(value: Any) -> bool:
    """True if value is a PermStore."""
    from .store import PermStore
    return isinstance(value, PermStore)


def is_deferred(value: Any) -> bool:
    """True if value is a Lazy.

    Bare callables (functions, lambdas, classes) are not deferred: a store
    keeps them as plain values and never invokes them.
    """
    return isinstance(value, Lazy)


def is_structured(value: Any) -> bool:
    """True for mappings, the values that become child stores on write."""
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    """True for list and tuple (strings are primitives, not sequences)."""
    return isinstance(value, (list, tuple))


def classify(value: Any) -> ValueKind:
    """Return the ValueKind of value."""
    if is_store(value):
        return ValueKind.STORE
    if is_deferred(value):
        return ValueKind.DEFERRED
    if is_structured(value):
        return ValueKind.STRUCTURED
    if is_sequence(value):
        return ValueKind.SEQUENCE
    return ValueKind.LEAF

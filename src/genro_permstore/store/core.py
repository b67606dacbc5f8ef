# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PermStore - A permission-gated hierarchical key-value container.

This module provides the PermStore class, the core container of the
genro-permstore library. A PermStore holds named properties in insertion
order; each property has its own read/write permission, declared on the
class, overridden on the instance, or taken from the store's
default_policy.

Key Features:
    - **Path access**: Colon-delimited paths ('user:profile:name')
    - **Auto-vivification**: Writing a dict (or through a missing path)
      creates nested stores
    - **Permission gating**: Every path segment entering a store is
      checked against that store's permissions
    - **Lazy values**: Lazy properties are resolved when a path crosses them

Path Protocol:
    - read() checks the first segment's read permission before anything
      else, then hands the rest of the path to the nested store, the
      lazily produced value, or plain data (dicts and lists, no checks)
    - write() delegates to an existing nested store without checking the
      first segment, otherwise checks write permission and assigns

Example:
    Basic usage::

        store = PermStore()
        store.write('profile:name', 'Ada')
        print(store.read('profile:name'))  # 'Ada'

    With declared permissions::

        class UserStore(PermStore):
            name = Restricted('r', 'John Doe')

        user = UserStore()
        user.read('name')            # 'John Doe'
        user.write('name', 'Bob')    # raises WriteNotAllowed
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Iterator

from ..exceptions import ReadNotAllowed, WriteNotAllowed
from ..node import StoreSlot
from ..permissions import Permission, Restricted, check_permission, registry
from ..values import ValueKind, classify

logger = logging.getLogger(__name__)


class PermStore:
    """A hierarchical, permission-gated key-value container.

    PermStore provides:
    - read(path) / store[path]: Get values, resolving nested stores and lazies
    - write(path, value) / store[path] = value: Set values with autocreate
    - write_entries(mapping): Write each top-level item of a mapping
    - entries(): Snapshot of readable own properties
    - allowed_to_read(label) / allowed_to_write(label): Permission checks

    Class attributes:
        default_policy: Fallback permission for properties without
            explicit metadata ('rw' unless overridden).
        delimiter: Path separator (':').
        child_factory: Store class used for auto-vivified children. None
            means PermStore.

    Example:
        >>> store = PermStore()
        >>> store.write_entries({'a': 'x', 'b': {'c': 'y'}})
        >>> store.read('b:c')
        'y'
    """

    default_policy: Permission = 'rw'
    delimiter: str = ':'
    child_factory: type[PermStore] | None = None

    # label -> initial value, merged along the MRO by __init_subclass__
    _declared_values: dict[str, Any] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Collect Restricted declarations from the class body."""
        super().__init_subclass__(**kwargs)

        declared: dict[str, Any] = {}
        for base in reversed(cls.__mro__[1:]):
            declared.update(base.__dict__.get('_declared_values', {}))

        for name, attr in list(cls.__dict__.items()):
            if not isinstance(attr, Restricted):
                continue
            if attr.permission is not None:
                registry.declare(cls, name, attr.permission)
            if attr.has_value:
                declared[name] = attr.value
            delattr(cls, name)

        if 'default_policy' in cls.__dict__:
            check_permission(cls.default_policy)

        cls._declared_values = declared

    def __init__(
        self,
        source: Mapping[str, Any] | None = None,
        default_policy: Permission | None = None,
    ) -> None:
        """Initialize a PermStore.

        Args:
            source: Optional mapping loaded with write_entries() after the
                class-declared values, so it is subject to permissions.
            default_policy: Overrides the class default_policy for this
                instance.

        Example:
            >>> PermStore({'a': 1, 'b': {'c': 2}})
            >>> PermStore(default_policy='r')
        """
        self._nodes: dict[str, StoreSlot] = {}
        if default_policy is not None:
            self.default_policy = check_permission(default_policy)

        for label, value in self._declared_values.items():
            if classify(value) is ValueKind.SEQUENCE:
                value = copy.deepcopy(value)
            self._assign(label, value)

        if source is not None:
            self.write_entries(source)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._nodes)})"

    def __len__(self) -> int:
        """Return the number of own properties."""
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        """Iterate over own property labels in insertion order."""
        return iter(list(self._nodes))

    def __contains__(self, label: str) -> bool:
        """Check if label is an own property (no path traversal)."""
        return label in self._nodes

    def __getitem__(self, path: str) -> Any:
        """Same as read(path)."""
        return self.read(path)

    def __setitem__(self, path: str, value: Any) -> None:
        """Same as write(path, value)."""
        self.write(path, value)

    # ==================== Permissions ====================

    def permission(self, label: str) -> Permission:
        """Return the effective permission of label on this store."""
        declared = registry.lookup(self, label)
        return declared if declared is not None else self.default_policy

    def allowed_to_read(self, label: str) -> bool:
        """True if label may be read on this store."""
        return 'r' in self.permission(label)

    def allowed_to_write(self, label: str) -> bool:
        """True if label may be written on this store."""
        return 'w' in self.permission(label)

    # ==================== Path Utilities ====================

    def _split_path(self, path: str) -> tuple[str, str]:
        """Split path into (first_segment, rest_of_path)."""
        label, _, rest = path.partition(self.delimiter)
        return label, rest

    def _new_child(self) -> PermStore:
        """Create an empty store for auto-vivification."""
        factory = self.child_factory or PermStore
        return factory()

    def _assign(self, label: str, value: Any) -> StoreSlot:
        """Store value under label by classification, without permission checks.

        Mappings become a new child store populated with write_entries();
        everything else is stored as-is, replacing any previous value.
        """
        if classify(value) is ValueKind.STRUCTURED:
            child = self._new_child()
            child.write_entries(value)
            logger.debug(
                "auto-vivified %s under %s.%s",
                type(child).__name__, type(self).__name__, label,
            )
            value = child
        slot = StoreSlot(label, value, parent=self)
        self._nodes[label] = slot
        return slot

    def _chain(self, rest: str, value: Any) -> dict[str, Any]:
        """Build nested dicts for the segments of rest, innermost holding value."""
        for label in reversed(rest.split(self.delimiter)):
            value = {label: value}
        return value

    # ==================== Core API ====================

    def read(self, path: str) -> Any:
        """Get the value at path.

        An empty path returns the store itself. The first segment must be
        readable here, even if absent; the rest of the path is resolved by
        the nested store, lazy result or plain data found under it.

        Args:
            path: Delimited path (e.g. 'user:profile:name').

        Returns:
            The value, or None if any segment does not exist.

        Raises:
            ReadNotAllowed: If a store on the path denies read access.

        Example:
            >>> store.read('profile:name')
            >>> store.read('credentials:username')  # through a lazy
        """
        if not path:
            return self

        label, rest = self._split_path(path)
        if not self.allowed_to_read(label):
            logger.debug("read denied: %s.%s", type(self).__name__, label)
            raise ReadNotAllowed(label, type(self).__name__)

        slot = self._nodes.get(label)
        if slot is None:
            return None
        return _resolve(slot.value, rest, self.delimiter)

    def write(self, path: str, value: Any) -> Any:
        """Set value at path, creating nested stores as needed.

        If the first segment already holds a store, the write is delegated
        to it with the rest of the path (possibly empty, which merges a
        mapping into it) and only its permissions apply. Otherwise the
        first segment must be writable here.

        A path continuing through a lazy property replaces the lazy with
        new stores, unless the lazy caches (cache=True): then the write
        goes into the store it produced.

        Args:
            path: Delimited path. An empty path merges a mapping into
                this store.
            value: Primitive, list, dict (becomes a store), PermStore or
                Lazy. Bare callables are stored as plain values and never
                invoked; wrap them with lazy() to make them deferred.

        Returns:
            The written value, for chaining.

        Raises:
            WriteNotAllowed: If a store on the path denies write access.
            TypeError: If path is empty and value is not a mapping.

        Example:
            >>> store.write('level1:level2:level3', 'value')
            'value'
        """
        if not path:
            self.write_entries(value)
            return value

        label, rest = self._split_path(path)
        slot = self._nodes.get(label)

        if slot is not None and slot.is_store:
            return slot.value.write(rest, value)

        if not self.allowed_to_write(label):
            logger.debug("write denied: %s.%s", type(self).__name__, label)
            raise WriteNotAllowed(label, type(self).__name__)

        if not rest:
            self._assign(label, value)
            return value

        # only a caching lazy hands out a store that outlives this call
        if slot is not None and slot.is_deferred and slot.value.cache:
            produced = slot.value.resolve()
            if classify(produced) is ValueKind.STORE:
                return produced.write(rest, value)

        self._assign(label, self._chain(rest, value))
        return value

    def write_entries(self, entries: Mapping[str, Any]) -> None:
        """Write each item of entries with write(key, value), in order.

        Nested mappings become nested stores.

        Raises:
            TypeError: If entries is not a mapping.
        """
        if not isinstance(entries, Mapping):
            raise TypeError(
                f"entries must be a mapping, not {type(entries).__name__}"
            )
        for label, value in entries.items():
            self.write(label, value)

    def entries(self) -> dict[str, Any]:
        """Return {label: value} for every readable own property.

        Values are returned as stored: nested stores and lazies by
        reference.
        """
        return {
            label: slot.value
            for label, slot in self._nodes.items()
            if self.allowed_to_read(label)
        }

    def set_property(self, label: str, value: Any) -> Any:
        """Assign an own property, bypassing write permission.

        Meant for store subclasses populating their own properties, e.g.
        an admin store embedding a user store under a read-only label.

        Returns:
            The assigned value.
        """
        self._assign(label, value)
        return value

    # ==================== Iteration ====================

    def keys(self) -> list[str]:
        """Return own property labels in insertion order."""
        return list(self._nodes)

    def slots(self) -> list[StoreSlot]:
        """Return own property slots in insertion order."""
        return list(self._nodes.values())

    def get_slot(self, label: str) -> StoreSlot | None:
        """Return the slot for label, or None."""
        return self._nodes.get(label)

    def walk(self) -> Iterator[tuple[str, Any]]:
        """Yield (path, value) for readable properties, depth first.

        Descends into nested stores (each store once, so aliased cycles
        are cut) but never invokes lazies.

        Example:
            >>> for path, value in store.walk():
            ...     print(path, value)
        """
        return self._walk('', set())

    def _walk(self, prefix: str, seen: set[int]) -> Iterator[tuple[str, Any]]:
        seen.add(id(self))
        for label, slot in list(self._nodes.items()):
            if not self.allowed_to_read(label):
                continue
            path = f"{prefix}{self.delimiter}{label}" if prefix else label
            yield path, slot.value
            if slot.is_store and id(slot.value) not in seen:
                yield from slot.value._walk(path, seen)

    # ==================== Conversion ====================

    def as_dict(self) -> dict[str, Any]:
        """Convert readable properties to a plain dict (recursive).

        Nested stores become dicts filtered by their own permissions;
        lazy properties are left out.

        Raises:
            ValueError: If a store contains itself through aliases.
        """
        return self._as_dict(frozenset())

    def _as_dict(self, ancestors: frozenset[int]) -> dict[str, Any]:
        if id(self) in ancestors:
            raise ValueError(f"Cyclic reference to {type(self).__name__}")
        ancestors = ancestors | {id(self)}
        result: dict[str, Any] = {}
        for label, slot in self._nodes.items():
            if not self.allowed_to_read(label) or slot.is_deferred:
                continue
            result[label] = slot.value._as_dict(ancestors) if slot.is_store else slot.value
        return result


def _member(container: Any, label: str) -> Any:
    """Plain-data member access: mapping key or list index, else None."""
    if isinstance(container, Mapping):
        return container.get(label)
    if isinstance(container, (list, tuple)) and label.lstrip('-').isdigit():
        index = int(label)
        if -len(container) <= index < len(container):
            return container[index]
    return None


def _resolve(value: Any, rest: str, delimiter: str) -> Any:
    """Resolve the remaining path against a value found in a store."""
    while True:
        kind = classify(value)
        if kind is ValueKind.STORE:
            return value.read(rest)
        if kind is ValueKind.DEFERRED:
            value = value.resolve()
            continue
        if not rest:
            return value
        if kind is ValueKind.STRUCTURED or kind is ValueKind.SEQUENCE:
            label, _, rest = rest.partition(delimiter)
            value = _member(value, label)
            if value is None:
                return None
            continue
        return None

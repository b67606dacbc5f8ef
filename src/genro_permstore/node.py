# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PermStore property slot."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .values import ValueKind, classify

if TYPE_CHECKING:
    from .store import PermStore


class StoreSlot:
    """A named property of a PermStore.

    Each slot has:
    - label: The property name within its store
    - value: The stored value (never a Mapping: mappings become stores)
    - kind: The ValueKind of value, computed on assignment
    - parent: Reference to the owning PermStore

    Example:
        >>> slot = StoreSlot('name', 'Ada')
        >>> slot.kind
        <ValueKind.LEAF: 'leaf'>
    """

    __slots__ = ('label', 'value', 'kind', 'parent')

    def __init__(
        self,
        label: str,
        value: Any = None,
        parent: PermStore | None = None,
    ) -> None:
        kind = classify(value)
        if kind is ValueKind.STRUCTURED:
            raise TypeError(
                f"StoreSlot '{label}' cannot hold a mapping; write it through a store"
            )
        self.label = label
        self.value = value
        self.kind = kind
        self.parent = parent

    def __repr__(self) -> str:
        value_repr = (
            f"{type(self.value).__name__}({len(self.value)})"
            if self.kind is ValueKind.STORE
            else repr(self.value)
        )
        return f"StoreSlot({self.label!r}, value={value_repr})"

    @property
    def is_store(self) -> bool:
        """True if this slot holds a nested PermStore."""
        return self.kind is ValueKind.STORE

    @property
    def is_deferred(self) -> bool:
        """True if this slot holds a Lazy."""
        return self.kind is ValueKind.DEFERRED

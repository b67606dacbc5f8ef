# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-PermStore - Permission-gated hierarchical key-value stores.

A lightweight, zero-dependency library providing a tree of stores whose
properties carry their own read/write permissions, addressed with
colon-delimited paths.
"""

__version__ = "0.1.0"

from .exceptions import (
    AccessDeniedError,
    PermStoreError,
    ReadNotAllowed,
    WriteNotAllowed,
)
from .node import StoreSlot
from .permissions import (
    DEFAULT,
    MISSING,
    PERMISSIONS,
    Permission,
    PermissionRegistry,
    Restricted,
    registry,
    restrict,
)
from .store import PermStore
from .values import (
    Lazy,
    ValueKind,
    classify,
    is_deferred,
    is_primitive,
    is_sequence,
    is_store,
    is_structured,
    lazy,
)

__all__ = [
    # Core classes
    "PermStore",
    "StoreSlot",
    # Permissions
    "Permission",
    "PERMISSIONS",
    "PermissionRegistry",
    "Restricted",
    "registry",
    "restrict",
    "MISSING",
    "DEFAULT",
    # Values
    "Lazy",
    "lazy",
    "ValueKind",
    "classify",
    "is_primitive",
    "is_store",
    "is_deferred",
    "is_structured",
    "is_sequence",
    # Exceptions
    "PermStoreError",
    "AccessDeniedError",
    "ReadNotAllowed",
    "WriteNotAllowed",
]

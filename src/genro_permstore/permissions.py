# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Permission metadata for PermStore properties.

Permissions are plain strings: 'r', 'w', 'rw' or 'none'. They can be
attached to a property in three ways:

1. In the class body, with a Restricted marker:

    >>> class UserStore(PermStore):
    ...     name = Restricted('r', 'John Doe')

2. On a class after its definition, with restrict():

    >>> restrict('rw')(UserStore, 'nickname')

3. On a single live instance, with restrict():

    >>> restrict('r')(user_store, 'name')

Lookup order is instance override, then class declarations walking the
MRO from the most-derived class, then the store's default_policy.
Declaring DEFAULT (on a subclass or an instance) stops that walk and
sends the property back to default_policy.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Callable, Literal

if TYPE_CHECKING:
    from .store import PermStore

logger = logging.getLogger(__name__)

Permission = Literal['r', 'w', 'rw', 'none']

PERMISSIONS: frozenset[str] = frozenset(('r', 'w', 'rw', 'none'))


def check_permission(permission: Any) -> Permission:
    """Return permission unchanged if valid.

    Raises:
        ValueError: If permission is not one of 'r', 'w', 'rw', 'none'.
    """
    if permission not in PERMISSIONS:
        raise ValueError(
            f"Invalid permission: {permission!r} "
            f"(expected one of {', '.join(sorted(PERMISSIONS))})"
        )
    return permission


class _Missing:
    """Sentinel type for 'no declared value'."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class _Default:
    """Sentinel type for "fall back to default_policy"."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'DEFAULT'


DEFAULT: Any = _Default()


class Restricted:
    """Class-body declaration of a store property.

    Collected by PermStore.__init_subclass__: the permission (if any) is
    registered for the class, the value (if any) becomes the initial
    value of the property on every new instance.

    Args:
        permission: Permission for the property. None declares nothing,
            so a permission inherited from a base class still applies.
            DEFAULT records that this class uses default_policy for the
            property, hiding any base class declaration.
        value: Initial value. Omit to declare the property without a
            value (absent until written). Mutable lists are copied for
            each instance. Bare callables are stored as plain values;
            wrap them with lazy() to have them invoked on read.

    Example:
        >>> class AdminStore(PermStore):
        ...     default_policy = 'none'
        ...     user = Restricted('r')
        ...     credentials = Restricted('r', lazy(make_credentials))
    """

    __slots__ = ('permission', 'value')

    def __init__(self, permission: Permission | None = None, value: Any = MISSING) -> None:
        if permission is not None and permission is not DEFAULT:
            check_permission(permission)
        self.permission = permission
        self.value = value

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING

    def __repr__(self) -> str:
        return f"Restricted({self.permission!r}, {self.value!r})"


def _registered(permission: Any) -> Permission | None:
    """Map DEFAULT to the None entry the registry stores for it."""
    if permission is DEFAULT:
        return None
    return check_permission(permission)


class PermissionRegistry:
    """Maps (store class or store instance, property name) to a Permission.

    Class declarations are kept for the life of the registry. Instance
    overrides live in a weak-keyed table and disappear with the store.
    An entry may be DEFAULT: lookup stops there and returns None, so the
    store's default_policy applies.
    """

    def __init__(self) -> None:
        self._by_type: dict[type, dict[str, Permission | None]] = {}
        self._by_instance: weakref.WeakKeyDictionary[Any, dict[str, Permission | None]] = (
            weakref.WeakKeyDictionary()
        )

    def declare(self, store_type: type, label: str, permission: Permission) -> None:
        """Declare the permission of label for store_type and its subclasses."""
        self._by_type.setdefault(store_type, {})[label] = _registered(permission)
        logger.debug("declared %s.%s = %r", store_type.__name__, label, permission)

    def declare_on_instance(self, store: PermStore, label: str, permission: Permission) -> None:
        """Override the permission of label on one store instance only."""
        self._by_instance.setdefault(store, {})[label] = _registered(permission)
        logger.debug(
            "instance override %s@%x.%s = %r",
            type(store).__name__, id(store), label, permission,
        )

    def lookup(self, store: PermStore, label: str) -> Permission | None:
        """Return the explicit permission of label on store, or None.

        None means no metadata exists (or the nearest one is DEFAULT) and
        the store's default_policy applies.
        """
        overrides = self._by_instance.get(store)
        if overrides and label in overrides:
            return overrides[label]
        for klass in type(store).__mro__:
            declared = self._by_type.get(klass)
            if declared and label in declared:
                return declared[label]
        return None

    def declared(self, store_type: type) -> dict[str, Permission]:
        """Return all class-level permissions visible on store_type.

        Subclass declarations win over base class ones; labels reset to
        DEFAULT are left out.
        """
        result: dict[str, Permission | None] = {}
        for klass in reversed(store_type.__mro__):
            result.update(self._by_type.get(klass, {}))
        return {label: perm for label, perm in result.items() if perm is not None}


registry = PermissionRegistry()


def restrict(permission: Permission) -> Callable[[Any, str], None]:
    """Return a function attaching permission to a property.

    The returned callable takes (target, label). A class target gets a
    class-level declaration inherited by subclasses; an instance target
    gets an override for that instance only, effective immediately.
    Pass DEFAULT to send the property back to default_policy.

    Example:
        >>> restrict('r')(store, 'prop')
        >>> store.allowed_to_write('prop')
        False
    """
    _registered(permission)

    def apply(target: Any, label: str) -> None:
        if isinstance(target, type):
            registry.declare(target, label, permission)
        else:
            registry.declare_on_instance(target, label, permission)

    return apply

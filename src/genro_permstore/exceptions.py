# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PermStore exceptions."""

from __future__ import annotations


class PermStoreError(Exception):
    """Base exception for PermStore errors."""

    pass


class AccessDeniedError(PermStoreError):
    """Raised when a permission check fails on a store property.

    Attributes:
        label: The property name whose permission denied the access.
        store: Class name of the store that performed the check.
    """

    action = 'access'

    def __init__(self, label: str, store: str | None = None) -> None:
        self.label = label
        self.store = store
        where = f" on {store}" if store else ""
        super().__init__(f"{self.action} not allowed for '{label}'{where}")


class ReadNotAllowed(AccessDeniedError):
    """Raised when read() meets a property without read permission."""

    action = 'read'


class WriteNotAllowed(AccessDeniedError):
    """Raised when write() meets a property without write permission."""

    action = 'write'

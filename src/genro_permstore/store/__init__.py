# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PermStore package - Permission-gated hierarchical container.

The package is organized into:
- core: PermStore class with the read/write path protocol, permission
  checks, iteration and conversion

Example:
    >>> from genro_permstore import PermStore
    >>> store = PermStore()
    >>> store.write('config:name', 'MyApp')
    'MyApp'
    >>> store['config:name']
    'MyApp'
"""

from .core import PermStore

__all__ = ["PermStore"]

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeStore package - Sparse hierarchical index.

This package provides the TreeStore class, a flat key -> node index over a
hierarchy whose levels are materialized on demand.

The package is organized into:
- core: Main TreeStore class with materialization, lookup and walking
- node: CheckTreeNode, the per-key record held by the index
- loading: Functions normalizing dict payloads into Item and chains

Example:
    >>> from genro_checktree import TreeStore, Item, UNKNOWN
    >>> store = TreeStore([Item('A', children=UNKNOWN)])
    >>> store.is_resolved('A')
    False
"""

from .core import TreeStore
from .node import CheckTreeNode

__all__ = ["TreeStore", "CheckTreeNode"]

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-CheckTree - Lazy hierarchical selection index.

A lightweight, zero-dependency library keeping the checked state of a
large tree consistent while most of the tree is still being fetched on
demand from an external data source.
"""

__version__ = "0.1.0"

from .codec import SelectionCodec
from .exceptions import (
    CheckTreeError,
    FetchFailure,
    MalformedResponse,
    SelectionPendingError,
    UnknownKeyError,
)
from .node import UNKNOWN, Item, SelectionChain
from .planner import BatchRequest, PrefetchPlanner
from .selection import SelectionEngine
from .store import CheckTreeNode, TreeStore
from .tree import CheckboxTree, initialize

__all__ = [
    # Payload types
    "UNKNOWN",
    "Item",
    "SelectionChain",
    # Core classes
    "TreeStore",
    "CheckTreeNode",
    "PrefetchPlanner",
    "BatchRequest",
    "SelectionEngine",
    "SelectionCodec",
    # Caller API
    "CheckboxTree",
    "initialize",
    # Exceptions
    "CheckTreeError",
    "UnknownKeyError",
    "FetchFailure",
    "MalformedResponse",
    "SelectionPendingError",
]

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""CheckTree node class."""

from __future__ import annotations

from ..node import UNKNOWN, Item


class CheckTreeNode:
    """A node in a TreeStore index.

    Each node has:
    - item: The Item payload it wraps
    - parent_key: Key of the enclosing node, or None for roots
    - child_index: Mapping child key -> position, None until materialized
    - checked: Selection flag

    Links to other nodes are keys resolved through the owning TreeStore,
    never direct references.

    Example:
        >>> node = CheckTreeNode(Item('b1', 'B one'), parent_key='b')
        >>> node.key
        'b1'
        >>> node.is_leaf
        True
    """

    __slots__ = ('item', 'parent_key', 'child_index', 'checked')

    def __init__(
        self,
        item: Item,
        parent_key: str | None = None,
        checked: bool = False,
    ) -> None:
        """Initialize a CheckTreeNode.

        Args:
            item: The wrapped Item.
            parent_key: Key of the parent node, None for roots.
            checked: Initial selection flag.
        """
        self.item = item
        self.parent_key = parent_key
        self.child_index: dict[str, int] | None = None
        self.checked = checked

    def __repr__(self) -> str:
        if self.is_unknown:
            state = 'unknown'
        elif self.child_index is None:
            state = 'leaf'
        else:
            state = f"{len(self.child_index)} children"
        mark = 'x' if self.checked else ' '
        return f"CheckTreeNode([{mark}] {self.key!r}, {state})"

    @property
    def key(self) -> str:
        return self.item.key

    @property
    def is_unknown(self) -> bool:
        """True if the children have not been fetched yet."""
        return self.item.children is UNKNOWN

    @property
    def is_resolved(self) -> bool:
        """True if the children are known (a list, possibly empty, or a leaf)."""
        return self.item.children is not UNKNOWN

    @property
    def is_leaf(self) -> bool:
        """True if the node has no children and cannot get any by fetching."""
        return self.item.children is None

    @property
    def is_populated(self) -> bool:
        """True if the node has a non-empty materialized child list."""
        return bool(self.child_index)

    @property
    def child_keys(self) -> list[str]:
        """Keys of the materialized children in order (empty if none)."""
        if self.child_index is None:
            return []
        return list(self.child_index)

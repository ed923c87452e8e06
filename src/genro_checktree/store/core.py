# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeStore - A sparse, partially materialized hierarchy.

This module provides the TreeStore class, the single source of truth for
a hierarchy whose levels are fetched on demand. All nodes live in one flat
key -> node index, so every lookup is O(1) whatever the depth of the node.

Key Features:
    - **Flat index**: One dict for the whole tree, keys are globally unique
    - **Partial materialization**: Children may be UNKNOWN until fetched
    - **Idempotent merge**: A populated level is never overwritten, so
      duplicate or late fetch responses are harmless
    - **Deep merge**: Nested children in a response are registered in one pass

Example:
    Basic usage::

        store = TreeStore([
            Item('A', children=UNKNOWN),
            Item('B', children=[Item('B1'), Item('B2')]),
        ])
        store.is_resolved('A')        # False
        store.ancestor_chain('B2')    # ['B']

        store.materialize('A', [Item('A1')])
        store.is_resolved('A')        # True
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

from ..exceptions import UnknownKeyError
from ..node import Item
from .loading import load_items
from .node import CheckTreeNode


class TreeStore:
    """A flat key -> node index with partial materialization.

    TreeStore provides:
    - materialize(parent_key, items): Attach a fetched level
    - lookup(key) / store[key]: Get nodes
    - ancestor_chain(key): Keys from the root down to the parent
    - is_resolved(key): Whether the children of a key are known

    Example:
        >>> store = TreeStore([Item('A', children=[Item('A1')])])
        >>> store.ancestor_chain('A1')
        ['A']
        >>> store.lookup('missing') is None
        True
    """

    __slots__ = ('_nodes', '_roots', '_materialized')

    def __init__(self, items: Iterable[Item | dict] | None = None) -> None:
        """Initialize a TreeStore.

        Args:
            items: Optional root items (Item instances or dict payloads).
                When given, they are materialized as the root level.
        """
        self._nodes: dict[str, CheckTreeNode] = {}
        self._roots: list[str] = []
        self._materialized = False

        if items is not None:
            self.materialize(None, items)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"TreeStore(roots={self._roots}, nodes={len(self._nodes)})"

    def __len__(self) -> int:
        """Return the number of known nodes at any level."""
        return len(self._nodes)

    def __iter__(self) -> Iterator[CheckTreeNode]:
        """Iterate over all known nodes in registration order."""
        return iter(list(self._nodes.values()))

    def __contains__(self, key: str) -> bool:
        return key in self._nodes

    def __getitem__(self, key: str) -> CheckTreeNode:
        """Get the node for key.

        Raises:
            UnknownKeyError: If key was never seen.
        """
        try:
            return self._nodes[key]
        except KeyError:
            raise UnknownKeyError(key) from None

    @property
    def is_materialized(self) -> bool:
        """True once a root level has been installed."""
        return self._materialized

    # ==================== Materialization ====================

    def materialize(
        self,
        parent_key: str | None,
        items: Iterable[Item | dict],
    ) -> None:
        """Attach a level of items to the tree.

        Args:
            parent_key: Key of the node owning the level, or None to
                replace the root level.
            items: The children, in order. Nested children lists are
                registered recursively in the same call.

        Raises:
            UnknownKeyError: If parent_key is not in the store.

        A level that already holds children is left untouched: the first
        response to populate it wins.
        """
        items = load_items(items)

        if parent_key is None:
            roots: list[str] = []
            for item in items:
                if item.key not in roots:
                    roots.append(item.key)
                node = self._register(item, None)
                if node is not None:
                    self._install(node, item.children)
            self._roots = roots
            self._materialized = True
            return

        parent = self[parent_key]
        if parent.is_populated:
            return
        self._install(parent, items)

    def _install(self, parent: CheckTreeNode, items: list[Item]) -> None:
        """Set items as the children of parent and register the subtree.

        Levels are processed from an explicit stack, so a deep subtree
        does not hit the recursion limit.
        """
        stack = [(parent, items)]
        while stack:
            parent, items = stack.pop()
            parent.item.children = items
            parent.child_index = {}
            expand: list[tuple[CheckTreeNode, list[Item]]] = []
            for position, item in enumerate(items):
                parent.child_index.setdefault(item.key, position)
                node = self._register(item, parent.key)
                if node is not None:
                    expand.append((node, item.children))
            stack.extend(reversed(expand))

    def _register(self, item: Item, parent_key: str | None) -> CheckTreeNode | None:
        """Create or update the node for item.

        Returns:
            The node when item brings children that must be installed,
            None otherwise.
        """
        node = self._nodes.get(item.key)
        if node is None:
            node = CheckTreeNode(item, parent_key)
            self._nodes[item.key] = node
            return node if isinstance(item.children, list) else None

        node.parent_key = parent_key
        node.item.title = item.title
        node.item.description = item.description
        if isinstance(item.children, list):
            if not node.is_populated:
                return node
        elif item.children is None and node.is_unknown:
            node.item.children = None
        return None

    # ==================== Lookup ====================

    def lookup(self, key: str) -> CheckTreeNode | None:
        """Return the node for key, or None if it is not known yet."""
        return self._nodes.get(key)

    def is_resolved(self, key: str) -> bool:
        """True if key is known and its children are not UNKNOWN."""
        node = self._nodes.get(key)
        return node is not None and node.is_resolved

    def ancestor_chain(self, key: str) -> list[str]:
        """Return the keys of the ancestors of key, root first.

        Raises:
            UnknownKeyError: If key was never seen.
        """
        chain: list[str] = []
        parent_key = self[key].parent_key
        while parent_key is not None and parent_key not in chain:
            chain.append(parent_key)
            parent = self._nodes.get(parent_key)
            parent_key = parent.parent_key if parent is not None else None
        chain.reverse()
        return chain

    # ==================== Navigation ====================

    def roots(self) -> list[CheckTreeNode]:
        """Return the root nodes in order."""
        return [self._nodes[key] for key in self._roots]

    def root_keys(self) -> list[str]:
        return list(self._roots)

    def children(self, key: str) -> list[CheckTreeNode]:
        """Return the materialized children of key (empty if unresolved)."""
        return [self._nodes[child] for child in self[key].child_keys]

    def descendants(self, key: str) -> Iterator[CheckTreeNode]:
        """Yield every materialized descendant of key, depth first."""
        stack = list(reversed(self[key].child_keys))
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.child_keys))

    def walk(
        self,
        callback: Callable[[CheckTreeNode], Any] | None = None,
    ) -> Iterator[tuple[tuple[str, ...], CheckTreeNode]] | None:
        """Walk the materialized tree depth first from the roots.

        Args:
            callback: Optional function to call on each node.
                      If provided, walk returns None.

        Yields:
            Tuples of (ancestor keys, node) if no callback provided.

        Example:
            >>> for chain, node in store.walk():
            ...     print(chain, node.key)

            >>> store.walk(lambda n: print(n.key))
        """
        def _walk_gen() -> Iterator[tuple[tuple[str, ...], CheckTreeNode]]:
            stack: list[tuple[tuple[str, ...], str]] = [
                ((), key) for key in reversed(self._roots)
            ]
            while stack:
                chain, key = stack.pop()
                node = self._nodes[key]
                yield chain, node
                if node.child_index:
                    child_chain = chain + (key,)
                    stack.extend(
                        (child_chain, child) for child in reversed(node.child_keys)
                    )

        if callback is not None:
            for _chain, node in _walk_gen():
                callback(node)
            return None

        return _walk_gen()

    # ==================== Conversion ====================

    def as_dict(self) -> dict[str, Any]:
        """Convert the materialized tree to a nested dict snapshot.

        Each key maps to a dict with title, description, checked and
        children ('?' for UNKNOWN, None for a leaf, nested dict otherwise).
        """
        result: dict[str, Any] = {}
        stack: list[tuple[dict[str, Any], str]] = [
            (result, key) for key in reversed(self._roots)
        ]
        while stack:
            target, key = stack.pop()
            node = self._nodes[key]
            if node.is_unknown:
                children: Any = '?'
            elif node.child_index is None:
                children = None
            else:
                children = {}
                stack.extend((children, child) for child in reversed(node.child_keys))
            target[key] = {
                'title': node.item.title,
                'description': node.item.description,
                'checked': node.checked,
                'children': children,
            }
        return result

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""SelectionEngine - Check state propagation over a TreeStore.

Each node stores a plain checked flag. Toggling a node keeps its ancestors
and descendants consistent:

    - checking a node checks every materialized descendant, then checks
      each ancestor whose materialized children are now all checked,
      stopping at the first one that is not
    - unchecking a node unchecks every ancestor; descendants keep their
      state unless cascade_down_on_uncheck is set

Subtrees that have not been fetched cannot be checked; when they are
materialized later under a checked node, check_descendants() brings them
in line.
"""

from __future__ import annotations

from .store import CheckTreeNode, TreeStore


class SelectionEngine:
    """Tri-state selection logic applied on toggle events.

    Args:
        store: The TreeStore whose checked flags are managed.
        cascade_down_on_uncheck: If True, unchecking a node also unchecks
            its materialized descendants. Default False: only ancestors
            are cleared.

    Example:
        >>> engine = SelectionEngine(store)
        >>> engine.toggle('B1', True)
        {'B1'}
        >>> engine.toggle('B2', True)
        {'B2', 'B'}
    """

    def __init__(self, store: TreeStore, cascade_down_on_uncheck: bool = False) -> None:
        self.store = store
        self.cascade_down_on_uncheck = cascade_down_on_uncheck

    def _set(self, node: CheckTreeNode, checked: bool, affected: set[str]) -> None:
        if node.checked != checked:
            node.checked = checked
            affected.add(node.key)

    def toggle(self, key: str, checked: bool) -> set[str]:
        """Set the checked flag of key and propagate it.

        Args:
            key: The node to toggle.
            checked: The new state.

        Returns:
            The keys whose checked flag actually changed.

        Raises:
            UnknownKeyError: If key is not in the store.
        """
        node = self.store[key]
        affected: set[str] = set()
        self._set(node, checked, affected)

        if checked:
            self._cascade_down(node, True, affected)
            self._propagate_up(node, affected)
        else:
            if self.cascade_down_on_uncheck:
                self._cascade_down(node, False, affected)
            for parent_key in self.store.ancestor_chain(key):
                self._set(self.store[parent_key], False, affected)
        return affected

    def check_descendants(self, key: str) -> set[str]:
        """Check the materialized descendants of key if key is checked.

        Returns:
            The keys whose checked flag changed.
        """
        node = self.store[key]
        affected: set[str] = set()
        if node.checked:
            self._cascade_down(node, True, affected)
        return affected

    def _cascade_down(self, node: CheckTreeNode, checked: bool, affected: set[str]) -> None:
        for descendant in self.store.descendants(node.key):
            self._set(descendant, checked, affected)

    def _propagate_up(self, node: CheckTreeNode, affected: set[str]) -> None:
        # Roots have no parent: there is no node above the forest to check.
        while node.parent_key is not None:
            parent = self.store.lookup(node.parent_key)
            if parent is None:
                break
            siblings = self.store.children(parent.key)
            if not all(sibling.checked for sibling in siblings):
                break
            self._set(parent, True, affected)
            node = parent

    def select_all(self) -> set[str]:
        """Check every node present in the store."""
        return self._set_all(True)

    def unselect_all(self) -> set[str]:
        """Uncheck every node present in the store."""
        return self._set_all(False)

    def _set_all(self, checked: bool) -> set[str]:
        affected: set[str] = set()
        for node in self.store:
            self._set(node, checked, affected)
        return affected

    def state(self, key: str) -> bool | None:
        """Return the tri-state of key for renderers.

        Returns:
            True if the node and all its materialized descendants are
            checked, False if none of them is, None if mixed.
        """
        node = self.store[key]
        states = {node.checked}
        for descendant in self.store.descendants(key):
            states.add(descendant.checked)
            if len(states) > 1:
                return None
        return node.checked

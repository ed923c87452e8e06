# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""CheckboxTree - Caller-facing handle over a lazily fetched selection tree.

The handle wires a TreeStore, a PrefetchPlanner, a SelectionEngine and a
SelectionCodec to two data source callables:

    fetch_children(item, parents) -> list of items
        Children of item (item is None for the root level). parents is
        the ancestor chain of item, root first.

    fetch_batch(request) -> list of {'key': ..., 'subtree': [...]}
        For each key of a BatchRequest, a subtree deep enough to resolve
        the selections that needed it.

Both may be plain functions or coroutine functions. Fetches are the only
suspension points; everything else runs synchronously.

Example:
    Basic usage::

        tree = await initialize(
            fetch_children=provider.children,
            fetch_batch=provider.batch,
            selected=[{'value': '110', 'parents': ['1', '11']}],
        )
        tree.toggle('111', True)
        tree.get_selection()
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Iterable

from .codec import SelectionCodec
from .exceptions import MalformedResponse, SelectionPendingError
from .node import Item, SelectionChain
from .planner import BatchRequest, PrefetchPlanner
from .selection import SelectionEngine
from .store import CheckTreeNode, TreeStore
from .store.loading import load_batch_entry

logger = logging.getLogger(__name__)

SelectCallback = Callable[[str | None, bool | None], Any]


async def _resolve(result: Any) -> Any:
    """Await result if the data source returned an awaitable."""
    if inspect.isawaitable(result):
        return await result
    return result


def _no_children(item: Item | None, parents: list[str]) -> list[Item]:
    return []


def _no_batch(request: BatchRequest) -> list[Any]:
    return []


class CheckboxTree:
    """A selection tree whose levels are fetched on demand.

    Args:
        root_items: Optional root level. If None, it is requested with
            fetch_children(None, []) on initialize().
        fetch_children: Data source for the children of one item.
        fetch_batch: Data source for a BatchRequest.
        selected: Initial target selection as chains or chain payloads.
        on_select: Called as on_select(key, checked) after a toggle, and
            as on_select(None, None) after bulk changes and once a target
            selection is resolved.
        on_render: Called when a render deferred by request_render() can
            proceed.
        cascade_down_on_uncheck: Unchecking also unchecks descendants.
        lookahead: Plan every unresolved link of a chain at once (default)
            instead of only the first one.
    """

    def __init__(
        self,
        root_items: Iterable[Item | dict] | None = None,
        fetch_children: Callable[..., Any] | None = None,
        fetch_batch: Callable[..., Any] | None = None,
        selected: Iterable[Any] | None = None,
        on_select: SelectCallback | None = None,
        on_render: Callable[[], Any] | None = None,
        cascade_down_on_uncheck: bool = False,
        lookahead: bool = True,
    ) -> None:
        self.store = TreeStore()
        self.engine = SelectionEngine(self.store, cascade_down_on_uncheck)
        self.planner = PrefetchPlanner(self.store, lookahead)
        self.codec = SelectionCodec(self.engine, selected)
        self.on_select = on_select
        self.on_render = on_render
        self.busy = False
        self.pending_render = False
        self._root_items = root_items
        self._fetch_children = fetch_children or _no_children
        self._fetch_batch = fetch_batch or _no_batch

    def __repr__(self) -> str:
        return f"CheckboxTree({self.store!r}, busy={self.busy})"

    @property
    def malformed(self) -> list[MalformedResponse]:
        """Warnings collected for malformed responses and selections."""
        return self.codec.malformed

    # ==================== Loading ====================

    async def initialize(self) -> CheckboxTree:
        """Materialize the root level and resolve the initial selection."""
        items = self._root_items
        if items is None:
            items = await _resolve(self._fetch_children(None, []))
        self.store.materialize(None, items)
        logger.debug("Root level materialized: %s", self.store.root_keys())
        await self.set_target_selection(self.codec.targets)
        return self

    async def set_target_selection(self, chains: Iterable[Any]) -> BatchRequest:
        """Replace the target selection and fetch what it needs.

        Targets already in the store are checked at once; the others are
        checked after the batch fetch completes.

        Returns:
            The BatchRequest that was fetched (empty if none was needed).

        Raises:
            SelectionPendingError: If a selection fetch is already running.
                The current targets and checked flags are left unchanged.
        """
        self._ensure_idle()
        deferred = self.codec.apply(chains)
        logger.debug("Target selection set, %d chains deferred", len(deferred))
        return await self.load_selection()

    async def load_selection(self) -> BatchRequest:
        """Plan and run the batch fetch for the pending target selection.

        Raises:
            SelectionPendingError: If a selection fetch is already running.
            Any exception raised by fetch_batch, unchanged. The store is
            left as it was before the call and a deferred render is
            dropped: on_render only runs after a successful fetch.
        """
        self._ensure_idle()

        request = self.planner.plan(self.codec.pending)
        if not request:
            self._notify(None, None)
            return request

        logger.debug("Fetching selection batch %s", request)
        self.busy = True
        try:
            response = await _resolve(self._fetch_batch(request))
            entries = [load_batch_entry(entry) for entry in response]
        except BaseException:
            self.pending_render = False
            raise
        finally:
            self.busy = False

        self._materialize_batch(request, entries)
        still_pending = self.codec.reapply()
        if still_pending:
            logger.debug(
                "%d selections unresolved after batch: %s",
                len(still_pending), [chain.key for chain in still_pending],
            )

        if self.pending_render:
            self.pending_render = False
            if self.on_render is not None:
                self.on_render()
        self._notify(None, None)
        return request

    def _ensure_idle(self) -> None:
        if self.busy:
            raise SelectionPendingError("a selection fetch is already in progress")

    def _materialize_batch(
        self,
        request: BatchRequest,
        entries: list[tuple[str, list[Item]]],
    ) -> None:
        """Attach batch entries in rank order, skipping malformed ones."""
        order = {key: position for position, key in enumerate(request.keys())}
        for key, subtree in sorted(entries, key=lambda e: order.get(e[0], len(order))):
            if key not in order:
                self._warn(f"batch response contains unrequested key {key!r}")
            elif key not in self.store:
                self._warn(f"batch response key {key!r} is not attached to the tree")
            else:
                self.store.materialize(key, subtree)

    async def expand(self, key: str) -> list[CheckTreeNode]:
        """Fetch the children of key if unknown and return them.

        Children of a checked node are checked as they are materialized.

        Raises:
            UnknownKeyError: If key is not in the store.
        """
        node = self.store[key]
        if node.is_unknown:
            parents = self.store.ancestor_chain(key)
            items = await _resolve(self._fetch_children(node.item, parents))
            self.store.materialize(key, items)
            self.engine.check_descendants(key)
            if self.codec.pending:
                self.codec.reapply()
        return self.store.children(key)

    def request_render(self) -> bool:
        """Return True if the tree can be rendered now.

        While a selection fetch is running the render is recorded as
        pending and on_render is called when the fetch completes.
        """
        if self.busy:
            self.pending_render = True
            return False
        return True

    # ==================== Selection ====================

    def toggle(self, key: str, checked: bool) -> set[str]:
        """Check or uncheck key, returning the keys whose state changed."""
        affected = self.engine.toggle(key, checked)
        self._notify(key, checked)
        return affected

    def get_selection(self) -> list[SelectionChain]:
        """Return the current selection as chains."""
        return self.codec.extract()

    def select_all(self) -> set[str]:
        affected = self.engine.select_all()
        self._notify(None, None)
        return affected

    def unselect_all(self) -> set[str]:
        """Uncheck every node and drop the pending target selection."""
        affected = self.engine.unselect_all()
        self.codec.clear()
        self._notify(None, None)
        return affected

    def state(self, key: str) -> bool | None:
        """Tri-state of key: True, False or None when partially checked."""
        return self.engine.state(key)

    # ==================== Helpers ====================

    def _notify(self, key: str | None, checked: bool | None) -> None:
        if self.on_select is not None:
            self.on_select(key, checked)

    def _warn(self, message: str) -> None:
        warning = MalformedResponse(message)
        logger.warning("%s", warning)
        self.malformed.append(warning)


async def initialize(
    root_items: Iterable[Item | dict] | None = None,
    fetch_children: Callable[..., Any] | None = None,
    fetch_batch: Callable[..., Any] | None = None,
    selected: Iterable[Any] | None = None,
    **options: Any,
) -> CheckboxTree:
    """Create a CheckboxTree, load its root level and initial selection.

    Args:
        root_items: Optional root level; fetched when None.
        fetch_children: Data source for the children of one item.
        fetch_batch: Data source for a BatchRequest.
        selected: Initial target selection.
        **options: Further CheckboxTree keyword arguments.

    Returns:
        The initialized CheckboxTree.
    """
    tree = CheckboxTree(
        root_items,
        fetch_children,
        fetch_batch,
        selected=selected,
        **options,
    )
    return await tree.initialize()

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Prefetch planning for target selections.

Given the selection chains a caller wants checked, the planner works out
which ancestors are still unresolved in the TreeStore and groups them into
one batched request. Keys are bucketed by their offset inside the chain
(rank), not by tree depth: chains that broke at the same offset share a
bucket, and buckets are fetched in rank order so every key can be attached
to a parent materialized by an earlier bucket.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from .node import SelectionChain
from .store import TreeStore
from .store.loading import load_chain


class BatchRequest:
    """An ordered sequence of rank buckets, each a sorted list of keys.

    An empty request is falsy: callers must not fetch it.

    Example:
        >>> request = BatchRequest([['A', 'B'], ['A1']])
        >>> request.keys()
        ['A', 'B', 'A1']
        >>> bool(BatchRequest())
        False
    """

    __slots__ = ('buckets',)

    def __init__(self, buckets: Iterable[Iterable[str]] | None = None) -> None:
        self.buckets: list[list[str]] = [list(b) for b in buckets or ()]

    def __repr__(self) -> str:
        return f"BatchRequest({self.buckets!r})"

    def __len__(self) -> int:
        return len(self.buckets)

    def __bool__(self) -> bool:
        return any(self.buckets)

    def __iter__(self) -> Iterator[list[str]]:
        return iter(self.buckets)

    def __getitem__(self, rank: int) -> list[str]:
        return self.buckets[rank]

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, BatchRequest):
            return self.buckets == other.buckets
        if isinstance(other, list):
            return self.buckets == other
        return NotImplemented

    def keys(self) -> list[str]:
        """Return every requested key once, in rank order."""
        result: list[str] = []
        for bucket in self.buckets:
            for key in bucket:
                if key not in result:
                    result.append(key)
        return result


class PrefetchPlanner:
    """Compute the smallest batched fetch that resolves a set of chains.

    Args:
        store: The TreeStore to check resolution against.
        lookahead: If True (default), every unresolved key from the first
            broken link to the end of a chain is requested, relying on the
            data source to return deep enough subtrees. If False, only the
            first broken link of each chain is requested and deeper links
            are left to a later planning pass.
    """

    def __init__(self, store: TreeStore, lookahead: bool = True) -> None:
        self.store = store
        self.lookahead = lookahead

    def first_broken_link(self, parents: tuple[str, ...] | list[str]) -> int | None:
        """Return the index of the first unresolved parent, None if all resolved."""
        for index, key in enumerate(parents):
            if not self.store.is_resolved(key):
                return index
        return None

    def plan(self, targets: Iterable[SelectionChain | tuple | dict]) -> BatchRequest:
        """Build the batch request needed to resolve targets.

        Args:
            targets: Selection chains (or their tuple/dict payloads).

        Returns:
            A BatchRequest; empty when every chain is already resolvable.
        """
        buckets: list[set[str]] = []
        for target in targets:
            parents = load_chain(target).parents
            start = self.first_broken_link(parents)
            if start is None:
                continue
            stop = len(parents) if self.lookahead else start + 1
            while len(buckets) < stop:
                buckets.append(set())
            for rank in range(start, stop):
                key = parents[rank]
                if not self.store.is_resolved(key):
                    buckets[rank].add(key)

        while buckets and not buckets[-1]:
            buckets.pop()
        return BatchRequest(sorted(bucket) for bucket in buckets)

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""SelectionCodec - Conversion between checked flags and selection chains."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .exceptions import MalformedResponse
from .node import SelectionChain
from .selection import SelectionEngine
from .store import TreeStore
from .store.loading import load_chains

logger = logging.getLogger(__name__)


class SelectionCodec:
    """Apply and extract selections in their portable chain form.

    Chains whose key is not in the store yet are kept as pending and
    re-applied with reapply() once the missing levels are fetched.

    Args:
        engine: The SelectionEngine used to check nodes, so that the
            usual propagation runs for applied targets.
        targets: Optional initial targets, echoed by extract() until the
            tree is materialized.
    """

    def __init__(
        self,
        engine: SelectionEngine,
        targets: Iterable[SelectionChain | tuple | dict[str, Any]] | None = None,
    ) -> None:
        self.engine = engine
        self.targets: list[SelectionChain] = load_chains(targets or [])
        self.pending: list[SelectionChain] = []
        self.malformed: list[MalformedResponse] = []

    @property
    def store(self) -> TreeStore:
        return self.engine.store

    def apply(self, targets: Iterable[SelectionChain | tuple | dict[str, Any]]) -> list[SelectionChain]:
        """Check every target whose key is known, defer the others.

        Args:
            targets: Selection chains (or their tuple/dict payloads).

        Returns:
            The chains deferred until their key is materialized.
        """
        self.targets = load_chains(targets)
        self.pending = self._apply(self.targets)
        return list(self.pending)

    def reapply(self) -> list[SelectionChain]:
        """Apply the pending chains again, returning those still deferred."""
        self.pending = self._apply(self.pending)
        return list(self.pending)

    def _apply(self, chains: list[SelectionChain]) -> list[SelectionChain]:
        deferred: list[SelectionChain] = []
        for chain in chains:
            if chain.key not in self.store:
                deferred.append(chain)
                continue
            known = tuple(self.store.ancestor_chain(chain.key))
            if known != chain.parents:
                warning = MalformedResponse(
                    f"selection {chain.key!r} declares parents {list(chain.parents)}"
                    f" but the tree has {list(known)}"
                )
                logger.warning("%s", warning)
                self.malformed.append(warning)
            self.engine.toggle(chain.key, True)
        return deferred

    def extract(self) -> list[SelectionChain]:
        """Return every checked node with its ancestor chain, in tree order.

        A checked branch does not hide its checked children: each one is
        reported with its own chain. If the tree was never materialized,
        the last applied targets are returned unchanged.
        """
        if not self.store.is_materialized:
            return list(self.targets)
        return [
            SelectionChain(node.key, chain)
            for chain, node in self.store.walk()
            if node.checked
        ]

    def clear(self) -> None:
        """Forget the applied targets and the pending chains."""
        self.targets = []
        self.pending = []

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Loading functions for data source payloads.

Data sources may answer with Item instances or with plain dicts in the
jQuery checkbox-tree wire form:

    {'value': '1', 'title': 'One', 'desc': '...', 'children': '?'}

These functions normalize both forms into Item, SelectionChain and
(key, subtree) batch entries.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..node import UNKNOWN, Item, SelectionChain


def _key_of(source: dict[str, Any]) -> str:
    """Return the key of a dict payload, accepting 'key' or 'value'."""
    if 'key' in source:
        return source['key']
    if 'value' in source:
        return source['value']
    raise TypeError(f"payload has no 'key' or 'value': {source!r}")


def _load_level(source: Item | dict[str, Any]) -> Item:
    """Convert one payload to an Item, leaving its children list unconverted."""
    if isinstance(source, Item):
        if isinstance(source.children, list):
            source.children = list(source.children)
        return source
    if not isinstance(source, dict):
        raise TypeError(
            f"item must be Item or dict, not {type(source).__name__}"
        )

    children = source.get('children')
    if isinstance(children, list):
        children = list(children)
    elif children == '?' or children is UNKNOWN:
        children = UNKNOWN
    elif children is not None:
        raise TypeError(
            f"children must be '?', None or list, not {type(children).__name__}"
        )

    return Item(
        _key_of(source),
        title=source.get('title'),
        description=source.get('description', source.get('desc')),
        children=children,
    )


def load_item(source: Item | dict[str, Any]) -> Item:
    """Convert a dict payload to an Item, nested children included.

    Args:
        source: An Item (returned as is, children coerced) or a dict.

    Returns:
        The corresponding Item.

    Raises:
        TypeError: If source is neither an Item nor a dict, or if
            children is not '?', None or a list.
    """
    return load_items([source])[0]


def load_items(source: Iterable[Item | dict[str, Any]]) -> list[Item]:
    """Convert a sequence of payloads to a list of Item.

    Nested levels are converted with an explicit stack, so the depth of
    a subtree is not bound by the interpreter recursion limit.
    """
    result = [_load_level(item) for item in source]
    stack = list(result)
    while stack:
        item = stack.pop()
        if isinstance(item.children, list):
            item.children = [_load_level(child) for child in item.children]
            stack.extend(item.children)
    return result


def _load_parents(parents: Any) -> tuple[str, ...]:
    """Convert a parents payload to a tuple of keys."""
    if isinstance(parents, str):
        raise TypeError(f"parents must be a sequence of keys, not str {parents!r}")
    return tuple(parents or ())


def load_chain(source: SelectionChain | tuple | dict[str, Any]) -> SelectionChain:
    """Convert a selection payload to a SelectionChain.

    Accepts a SelectionChain, a (key, parents) tuple, or a dict with
    'key' (or 'value') and optional 'parents'.
    """
    if isinstance(source, SelectionChain):
        return SelectionChain(source.key, _load_parents(source.parents))
    if isinstance(source, tuple):
        if len(source) != 2:
            raise TypeError(f"chain tuple must be (key, parents), got {source!r}")
        key, parents = source
        return SelectionChain(key, _load_parents(parents))
    if isinstance(source, dict):
        return SelectionChain(_key_of(source), _load_parents(source.get('parents')))
    raise TypeError(
        f"chain must be SelectionChain, tuple or dict, not {type(source).__name__}"
    )


def load_chains(source: Iterable[Any]) -> list[SelectionChain]:
    """Convert selection payloads to SelectionChain, dropping duplicates."""
    result: list[SelectionChain] = []
    seen: set[SelectionChain] = set()
    for entry in source:
        chain = load_chain(entry)
        if chain not in seen:
            seen.add(chain)
            result.append(chain)
    return result


def load_batch_entry(source: tuple | dict[str, Any]) -> tuple[str, list[Item]]:
    """Convert a batch response entry to a (key, subtree) tuple.

    Accepts a dict with 'key' (or 'value') and 'subtree', or a
    (key, subtree) tuple.
    """
    if isinstance(source, dict):
        key = _key_of(source)
        subtree = source.get('subtree') or []
    elif isinstance(source, tuple) and len(source) == 2:
        key, subtree = source
    else:
        raise TypeError(
            f"batch entry must be dict or (key, subtree) tuple, got {source!r}"
        )
    return key, load_items(subtree)

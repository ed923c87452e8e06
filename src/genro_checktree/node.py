# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Payload types exchanged with data sources and callers."""

from __future__ import annotations

from typing import Any, NamedTuple


class _Unknown:
    """Sentinel type for children that have not been fetched yet."""

    __slots__ = ()
    _instance: _Unknown | None = None

    def __new__(cls) -> _Unknown:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'UNKNOWN'

    def __reduce__(self) -> str:
        return 'UNKNOWN'


UNKNOWN = _Unknown()


class Item:
    """An element of the hierarchy as provided by a data source.

    Each item has:
    - key: Globally unique identifier
    - title: Optional display title
    - description: Optional longer text
    - children: UNKNOWN (not fetched yet), None (leaf) or a list of Item

    Example:
        >>> item = Item('1', 'One', children=UNKNOWN)
        >>> item.is_unknown
        True
        >>> Item('2', 'Two', 'the second').label
        'Two - the second'
    """

    __slots__ = ('key', 'title', 'description', 'children')

    def __init__(
        self,
        key: str,
        title: str | None = None,
        description: str | None = None,
        children: list[Item] | _Unknown | None = None,
    ) -> None:
        """Initialize an Item.

        Args:
            key: The item's globally unique key.
            title: Optional display title.
            description: Optional description.
            children: UNKNOWN, None for a leaf, or the list of child items.
        """
        self.key = key
        self.title = title
        self.description = description
        self.children = children

    def __repr__(self) -> str:
        if isinstance(self.children, list):
            children_repr = f"[{len(self.children)}]"
        else:
            children_repr = repr(self.children)
        return f"Item({self.key!r}, children={children_repr})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        stack = [(self, other)]
        while stack:
            left, right = stack.pop()
            if (left.key, left.title, left.description) != (
                right.key, right.title, right.description
            ):
                return False
            if isinstance(left.children, list) and isinstance(right.children, list):
                if len(left.children) != len(right.children):
                    return False
                for pair in zip(left.children, right.children):
                    if isinstance(pair[0], Item) and isinstance(pair[1], Item):
                        stack.append(pair)
                    elif pair[0] != pair[1]:
                        return False
            elif left.children is not right.children and left.children != right.children:
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_unknown(self) -> bool:
        """True if the children have not been fetched yet."""
        return self.children is UNKNOWN

    @property
    def label(self) -> str:
        """Display text: title (or key) followed by the description."""
        text = self.title or self.key
        if self.description:
            text = f"{text} - {self.description}"
        return text

    def as_dict(self) -> dict[str, Any]:
        """Convert to the plain dict form accepted by load_item."""
        def _convert(item: Item) -> dict[str, Any]:
            result: dict[str, Any] = {'key': item.key}
            if item.title is not None:
                result['title'] = item.title
            if item.description is not None:
                result['description'] = item.description
            if item.children is UNKNOWN:
                result['children'] = '?'
            return result

        root = _convert(self)
        stack = [(root, self)]
        while stack:
            result, item = stack.pop()
            if isinstance(item.children, list):
                result['children'] = []
                for child in item.children:
                    converted = _convert(child)
                    result['children'].append(converted)
                    stack.append((converted, child))
        return root


class SelectionChain(NamedTuple):
    """A selected key together with its ancestors, root first.

    Example:
        >>> SelectionChain('110', ('1', '11')).as_dict()
        {'key': '110', 'parents': ['1', '11']}
    """

    key: str
    parents: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {'key': self.key, 'parents': list(self.parents)}

"""Snapshot engine — independent, immutable copies of plain data trees.

A snapshot is `freeze(clone(value))`. clone() builds a fresh tree of
FrozenDict / FrozenList nodes that share no container with the input;
freeze() then locks every node in place. Both node types subclass the
builtins, so snapshots compare equal to ordinary dicts and lists.

Subscribers receive snapshots by reference and run inline with the mutator,
so a snapshot must be both unaliased (clone) and tamper-proof (freeze).
"""

from __future__ import annotations

import enum
from collections.abc import Mapping, MutableSequence
from typing import Any


class ValueKind(enum.Enum):
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    TUPLE = "tuple"
    MAPPING = "mapping"


def kind_of(value: object) -> ValueKind:
    """Classify a stored value. Strings and bytes are scalars.

    Tuples are read-only containers: they cannot be changed, but the
    containers inside them can.
    """
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, MutableSequence):
        return ValueKind.SEQUENCE
    if isinstance(value, tuple):
        return ValueKind.TUPLE
    return ValueKind.SCALAR


def _frozen_error(node: object) -> TypeError:
    return TypeError(f"{type(node).__name__} is frozen and cannot be modified")


class FrozenDict(dict):
    """A dict that can be locked in place by freeze().

    Until frozen it behaves exactly like a dict. Once frozen, every
    mutating method raises TypeError.
    """

    __slots__ = ("_frozen",)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check(self) -> None:
        if self._frozen:
            raise _frozen_error(self)

    def __setattr__(self, name, value) -> None:
        if getattr(self, "_frozen", False):
            raise _frozen_error(self)
        super().__setattr__(name, value)

    def __setitem__(self, key, value) -> None:
        self._check()
        super().__setitem__(key, value)

    def __delitem__(self, key) -> None:
        self._check()
        super().__delitem__(key)

    def __ior__(self, other):
        self._check()
        return super().__ior__(other)

    def update(self, *args, **kwargs) -> None:
        self._check()
        super().update(*args, **kwargs)

    def setdefault(self, key, default=None):
        self._check()
        return super().setdefault(key, default)

    def pop(self, key, *args):
        self._check()
        return super().pop(key, *args)

    def popitem(self):
        self._check()
        return super().popitem()

    def clear(self) -> None:
        self._check()
        super().clear()

    # Copies are independent and writable again.
    def __copy__(self) -> FrozenDict:
        return clone(self)

    def __deepcopy__(self, memo) -> FrozenDict:
        return clone(self)


class FrozenList(list):
    """A list that can be locked in place by freeze()."""

    __slots__ = ("_frozen",)

    def __init__(self, *args) -> None:
        super().__init__(*args)
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check(self) -> None:
        if self._frozen:
            raise _frozen_error(self)

    def __setattr__(self, name, value) -> None:
        if getattr(self, "_frozen", False):
            raise _frozen_error(self)
        super().__setattr__(name, value)

    def __setitem__(self, index, value) -> None:
        self._check()
        super().__setitem__(index, value)

    def __delitem__(self, index) -> None:
        self._check()
        super().__delitem__(index)

    def __iadd__(self, other):
        self._check()
        return super().__iadd__(other)

    def __imul__(self, n):
        self._check()
        return super().__imul__(n)

    def append(self, item) -> None:
        self._check()
        super().append(item)

    def extend(self, items) -> None:
        self._check()
        super().extend(items)

    def insert(self, index, item) -> None:
        self._check()
        super().insert(index, item)

    def pop(self, index=-1):
        self._check()
        return super().pop(index)

    def remove(self, item) -> None:
        self._check()
        super().remove(item)

    def clear(self) -> None:
        self._check()
        super().clear()

    def sort(self, *, key=None, reverse=False) -> None:
        self._check()
        super().sort(key=key, reverse=reverse)

    def reverse(self) -> None:
        self._check()
        super().reverse()

    def __copy__(self) -> FrozenList:
        return clone(self)

    def __deepcopy__(self, memo) -> FrozenList:
        return clone(self)


def clone(value: Any) -> Any:
    """Return a structurally identical copy sharing no container with value.

    Mappings become unfrozen FrozenDicts (insertion order kept), mutable
    sequences become unfrozen FrozenLists, tuples are rebuilt from cloned
    elements. Other values are returned as-is.
    """
    kind = kind_of(value)
    if kind is ValueKind.MAPPING:
        return FrozenDict((key, clone(item)) for key, item in value.items())
    if kind is ValueKind.SEQUENCE:
        return FrozenList(clone(item) for item in value)
    if kind is ValueKind.TUPLE:
        return tuple(clone(item) for item in value)
    return value


def freeze(value: Any) -> Any:
    """Deep-freeze value and return it.

    FrozenDict / FrozenList nodes are locked in place, children first, and
    the same reference is returned. Builtin dicts and lists cannot be locked,
    so they are rebuilt as frozen nodes and the rebuilt node is returned.
    """
    if isinstance(value, (FrozenDict, FrozenList)) and value.frozen:
        return value
    kind = kind_of(value)
    if kind is ValueKind.MAPPING:
        node = value if isinstance(value, FrozenDict) else FrozenDict(value)
        for key, item in list(node.items()):
            frozen_item = freeze(item)
            if frozen_item is not item:
                dict.__setitem__(node, key, frozen_item)
        node._frozen = True
        return node
    if kind is ValueKind.SEQUENCE:
        node = value if isinstance(value, FrozenList) else FrozenList(value)
        for index, item in enumerate(node):
            frozen_item = freeze(item)
            if frozen_item is not item:
                list.__setitem__(node, index, frozen_item)
        node._frozen = True
        return node
    if kind is ValueKind.TUPLE:
        items = tuple(freeze(item) for item in value)
        if all(new is old for new, old in zip(items, value)):
            return value
        return items
    return value


def snapshot(value: Any) -> Any:
    """Independent, deeply frozen copy of value."""
    return freeze(clone(value))


def to_plain(value: Any) -> Any:
    """Deep copy built from builtin dicts and lists only."""
    kind = kind_of(value)
    if kind is ValueKind.MAPPING:
        return {key: to_plain(item) for key, item in value.items()}
    if kind is ValueKind.SEQUENCE:
        return [to_plain(item) for item in value]
    if kind is ValueKind.TUPLE:
        return tuple(to_plain(item) for item in value)
    return value

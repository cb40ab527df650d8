"""StateView — the capability-checked handle onto a named state's data.

A view holds its owning NamedState, a path of keys/indexes from the state
root, and the writer identity it was opened with. Every access resolves the
path against the current root, so views keep working after the root is
replaced wholesale.

Reads of container values return a new view one level deeper; scalars are
returned raw. Tuples are wrapped too, so the containers inside them stay
behind the writer check. Every mutation (item/attribute assignment,
deletion, and the usual list/dict mutators) requires a writer identity and runs the state's
snapshot -> apply -> snapshot -> notify cycle over the *entire* root.

Attribute access is sugar for item access on mapping views, but only for
names the view class does not itself define: `view.items` is the method,
`view["items"]` is the data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Iterator

from snapstate.errors import StructuralOperationError, WriteNotPermitted
from snapstate.snapshot import ValueKind, kind_of, snapshot, to_plain

if TYPE_CHECKING:
    from snapstate.registry import NamedState


def detach(value: Any) -> Any:
    """Replace every StateView inside value with a plain copy of its data.

    Containers holding no view are returned unchanged, so ordinary
    assignment keeps reference semantics. Views never end up stored in a
    state, where they would alias live data from inside a snapshot.
    """
    if isinstance(value, StateView):
        return value.to_plain()
    kind = kind_of(value)
    if kind is ValueKind.MAPPING:
        items = {key: detach(item) for key, item in value.items()}
        if all(items[key] is item for key, item in value.items()):
            return value
        return items
    if kind is ValueKind.SEQUENCE or kind is ValueKind.TUPLE:
        items = [detach(item) for item in value]
        if all(new is old for new, old in zip(items, value)):
            return value
        return items if kind is ValueKind.SEQUENCE else tuple(items)
    return value


def _has_member(target: Any, key: Any) -> bool:
    if kind_of(target) is ValueKind.MAPPING:
        return key in target
    if isinstance(key, slice):
        return True
    return isinstance(key, int) and -len(target) <= key < len(target)


class StateView:
    """Read/write facade over one node of a named state."""

    __slots__ = ("_state", "_path", "_writer")

    def __init__(self, state: NamedState, writer: str | None = None, path: tuple = ()) -> None:
        object.__setattr__(self, "_state", state)
        object.__setattr__(self, "_path", tuple(path))
        object.__setattr__(self, "_writer", writer)

    # --- Plumbing ---

    @property
    def writer(self) -> str | None:
        return self._writer

    @property
    def path(self) -> tuple:
        return self._path

    def _target(self) -> Any:
        node = self._state.root
        for key in self._path:
            node = node[key]
        return node

    def _child(self, key: Any, value: Any) -> Any:
        if kind_of(value) is ValueKind.SCALAR:
            return value
        return StateView(self._state, self._writer, self._path + (key,))

    def _mutate(self, apply: Callable[[Any], Any]) -> Any:
        if not self._writer:
            raise WriteNotPermitted(self._state.name)
        return self._state.mutate(self._writer, lambda: apply(self._target()))

    def _call(self, method: str, *args, **kwargs) -> Any:
        return self._mutate(lambda target: getattr(target, method)(*args, **kwargs))

    # --- Read operations ---

    def __getitem__(self, key: Any) -> Any:
        target = self._target()
        if isinstance(key, slice):
            return to_plain(target[key])
        value = target[key]
        if isinstance(key, int) and key < 0 and kind_of(target) is not ValueKind.MAPPING:
            key += len(target)
        return self._child(key, value)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        target = self._target()
        if kind_of(target) is ValueKind.MAPPING and name in target:
            return self._child(name, target[name])
        raise AttributeError(f"state {self._state.name!r} has no field {name!r}")

    def get(self, key: Any, default: Any = None) -> Any:
        target = self._target()
        if not _has_member(target, key):
            return default
        return self[key]

    def keys(self):
        return list(self._target())

    def values(self) -> list:
        return [self._child(key, value) for key, value in self._target().items()]

    def items(self) -> list:
        return [(key, self._child(key, value)) for key, value in self._target().items()]

    def index(self, value: Any, *args) -> int:
        return self._target().index(detach(value), *args)

    def count(self, value: Any) -> int:
        return self._target().count(detach(value))

    def __len__(self) -> int:
        return len(self._target())

    def __iter__(self) -> Iterator:
        target = self._target()
        if kind_of(target) is ValueKind.MAPPING:
            return iter(list(target))
        return iter([self._child(index, value) for index, value in enumerate(target)])

    def __contains__(self, item: Any) -> bool:
        return detach(item) in self._target()

    def __bool__(self) -> bool:
        return bool(self._target())

    def __eq__(self, other: object) -> bool:
        return to_plain(self._target()) == to_plain(detach(other))

    __hash__ = None  # type: ignore[assignment]

    def snapshot(self) -> Any:
        """Frozen, independent copy of this node."""
        return snapshot(self._target())

    def to_plain(self) -> Any:
        """Detached copy of this node as builtin dicts and lists."""
        return to_plain(self._target())

    # --- Write operations (writer required, notify) ---

    def __setitem__(self, key: Any, value: Any) -> None:
        value = detach(value)
        self._mutate(lambda target: target.__setitem__(key, value))

    def __delitem__(self, key: Any) -> None:
        def _delete(target):
            if _has_member(target, key):
                del target[key]

        self._mutate(_delete)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            raise StructuralOperationError(
                f"Cannot assign {name!r} on a state view; use view[{name!r}] = ..."
            )
        if kind_of(self._target()) is not ValueKind.MAPPING:
            raise AttributeError(f"cannot set attribute {name!r} on a sequence view")
        self[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            raise StructuralOperationError(f"Cannot delete {name!r} on a state view")
        if kind_of(self._target()) is not ValueKind.MAPPING:
            raise AttributeError(f"cannot delete attribute {name!r} on a sequence view")
        del self[name]

    def append(self, item: Any) -> None:
        self._call("append", detach(item))

    def extend(self, items) -> None:
        self._call("extend", [detach(item) for item in items])

    def insert(self, index: int, item: Any) -> None:
        self._call("insert", index, detach(item))

    def remove(self, item: Any) -> None:
        self._call("remove", detach(item))

    def sort(self, *, key=None, reverse: bool = False) -> None:
        self._call("sort", key=key, reverse=reverse)

    def reverse(self) -> None:
        self._call("reverse")

    def pop(self, *args) -> Any:
        """Remove and return a member. The removed value is detached plain data."""
        return to_plain(self._call("pop", *args))

    def popitem(self) -> tuple:
        key, value = self._call("popitem")
        return key, to_plain(value)

    def update(self, other=(), **kwargs) -> None:
        values = {key: detach(value) for key, value in dict(other, **kwargs).items()}
        self._call("update", values)

    def setdefault(self, key: Any, default: Any = None) -> Any:
        target = self._target()
        if key not in target:
            default = detach(default)
            self._mutate(lambda t: t.setdefault(key, default))
        return self[key]

    def clear(self) -> None:
        self._call("clear")

    # --- Structural guards ---

    def __call__(self, *args, **kwargs):
        raise StructuralOperationError("A state view is not callable")

    def __copy__(self):
        raise StructuralOperationError("State views cannot be copied; use snapshot() or to_plain()")

    def __deepcopy__(self, memo):
        raise StructuralOperationError("State views cannot be copied; use snapshot() or to_plain()")

    def __reduce_ex__(self, protocol):
        raise StructuralOperationError("State views cannot be pickled; use to_plain()")

    def __repr__(self) -> str:
        path = "".join(f"[{key!r}]" for key in self._path)
        return f"StateView({self._state.name!r}{path}, {self.to_plain()!r})"

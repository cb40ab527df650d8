"""snapstate: named reactive state with frozen before/after snapshots."""

from importlib.metadata import version as _version

__version__ = _version("snapstate")

from snapstate.errors import (
    StateError,
    InvalidName,
    WriteNotPermitted,
    InvalidSubscription,
    UnknownState,
    InvalidArgument,
    StructuralOperationError,
)
from snapstate.snapshot import FrozenDict, FrozenList, ValueKind, clone, freeze, snapshot
from snapstate.subscriptions import SubscriptionRegistry
from snapstate.view import StateView
from snapstate.registry import NamedState, StateRegistry, REPLACE_WRITER, REPLACE_ONE_WRITER
from snapstate.manager import StateManager

__all__ = [
    "StateManager",
    "StateRegistry",
    "NamedState",
    "StateView",
    "SubscriptionRegistry",
    "FrozenDict",
    "FrozenList",
    "ValueKind",
    "clone",
    "freeze",
    "snapshot",
    "REPLACE_WRITER",
    "REPLACE_ONE_WRITER",
    "StateError",
    "InvalidName",
    "WriteNotPermitted",
    "InvalidSubscription",
    "UnknownState",
    "InvalidArgument",
    "StructuralOperationError",
]

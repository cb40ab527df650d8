"""Errors raised by snapstate.

Every error derives from StateError and from the builtin it most resembles,
so callers can catch either `StateError` or e.g. `PermissionError`.
"""

from __future__ import annotations


class StateError(Exception):
    """Base class for all snapstate errors."""


class InvalidName(StateError, TypeError):
    """A state name was not a string."""

    def __init__(self, name: object) -> None:
        super().__init__(
            f"Invalid argument: state name must be a str, got {type(name).__name__}"
        )
        self.name = name


class WriteNotPermitted(StateError, PermissionError):
    """A mutation was attempted through a view opened without a writer."""

    def __init__(self, state_name: str) -> None:
        super().__init__(
            f"Operation not allowed on state {state_name!r}. Open it with "
            f"get_state({state_name!r}, writer) to get write access."
        )
        self.state_name = state_name


class InvalidSubscription(StateError, TypeError):
    """subscribe() got something that cannot be called as (prev, next, writer)."""


class UnknownState(StateError, LookupError):
    """An operation referenced a state name that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"State not found for name: {name!r}")
        self.name = name


class InvalidArgument(StateError, ValueError):
    """A replace payload was missing or malformed."""


class StructuralOperationError(StateError, TypeError):
    """A view was used as something other than a data-access facade."""

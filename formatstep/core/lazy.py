"""LazyBuilder — memoizes the single value produced by a deferred build function."""

from __future__ import annotations

import logging
import threading
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

K = TypeVar("K")
T = TypeVar("T")


class Unbuilt:
    """State marker: nothing has been built (or the last build was reset)."""

    _instance: "Unbuilt | None" = None

    def __new__(cls) -> "Unbuilt":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNBUILT"


UNBUILT = Unbuilt()


@dataclass(frozen=True)
class Built(Generic[T]):
    """State marker carrying the memoized value."""

    value: T


BuildState = Union[Unbuilt, Built[T]]


class LazyBuilder(Generic[K, T]):
    """Holds a build function and the one instance it produced.

    ``get_or_build`` builds on the first call and returns the memoized value
    afterwards, ignoring the key argument.  A failing build leaves the state
    ``UNBUILT`` and propagates the exception unchanged, so the next call
    simply builds again.

    Args:
        build: Function turning a key into the value to memoize.
        thread_safe: Serialize the first-call path so concurrent callers
            build exactly once.
    """

    def __init__(self, build: Callable[[K], T], *, thread_safe: bool = True):
        if not callable(build):
            raise ConfigurationError(f"build must be callable, got {type(build).__name__}")
        self._build = build
        self._state: BuildState = UNBUILT
        self._lock = threading.RLock() if thread_safe else nullcontext()

    @property
    def is_built(self) -> bool:
        return isinstance(self._state, Built)

    def peek(self) -> BuildState:
        """Current state without building."""
        return self._state

    def get_or_build(self, key: K) -> T:
        state = self._state
        if isinstance(state, Built):
            return state.value

        with self._lock:
            # Another thread may have finished building while we waited.
            state = self._state
            if isinstance(state, Built):
                return state.value
            value = self._build(key)
            self._state = Built(value)
            logger.debug("Built %s", type(value).__name__)
            return value

    def reset(self) -> BuildState:
        """Return to ``UNBUILT``; returns the state that was replaced."""
        with self._lock:
            previous, self._state = self._state, UNBUILT
        return previous

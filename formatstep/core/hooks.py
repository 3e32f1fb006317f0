"""Instrumentation spans for format-step observability.

Typed event dataclasses, the ``StepHooks`` container, and the span
implementations a step wraps around key calculation, formatter
construction, application and release.  ``_fire_hook`` catches hook errors
so observability failures never change what a step returns or raises.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Iterator, Optional, Protocol, Union, runtime_checkable

from ..schemas.base import SpanStats

logger = logging.getLogger(__name__)

PHASE_CALCULATE_KEY = "calculateKey"
PHASE_CREATE_FORMATTER = "createFormatter"
PHASE_OPEN_FORMATTER = "openFormatter"
PHASE_APPLY = "apply"
PHASE_CLOSE_FORMATTER = "closeFormatter"


# ---------------------------------------------------------------------------
# Event dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SpanStartEvent:
    """Fired when a span opens."""

    step_name: str
    phase: str


@dataclass(frozen=True)
class SpanEvent:
    """Fired exactly once when a span closes (including on error)."""

    step_name: str
    phase: str
    elapsed_seconds: float
    error: BaseException | None = None


# ---------------------------------------------------------------------------
# StepHooks container
# ---------------------------------------------------------------------------


@dataclass
class StepHooks:
    """User-facing hook container — pass to a step's ``hooks=`` argument.

    Both fields are optional callables.  Hook errors are caught and logged;
    they never reach the step's caller.
    """

    on_span_start: Optional[Callable[[SpanStartEvent], Any]] = None
    on_span_end: Optional[Callable[[SpanEvent], Any]] = None


def _fire_hook(hook: Optional[Callable], event: Any) -> None:
    """Call *hook* with *event*.  Silently catches errors."""
    if hook is None:
        return
    try:
        hook(event)
    except Exception:
        logger.warning("Hook %s raised an exception", hook, exc_info=True)


# ---------------------------------------------------------------------------
# Span implementations
# ---------------------------------------------------------------------------


@runtime_checkable
class InstrumentationSpan(Protocol):
    """Anything that can open a named timing span around a block of code."""

    def span(self, name: str, phase: str) -> ContextManager[None]: ...


class NullInstrumentation:
    """Span implementation that records nothing."""

    def span(self, name: str, phase: str) -> ContextManager[None]:
        return nullcontext()


class HookInstrumentation:
    """Times each span and reports it through a ``StepHooks`` container."""

    def __init__(self, hooks: StepHooks, clock: Callable[[], float] = time.perf_counter):
        self.hooks = hooks
        self._clock = clock

    @contextmanager
    def span(self, name: str, phase: str) -> Iterator[None]:
        _fire_hook(self.hooks.on_span_start, SpanStartEvent(step_name=name, phase=phase))
        start = self._clock()
        error: BaseException | None = None
        try:
            yield
        except BaseException as exc:
            error = exc
            raise
        finally:
            event = SpanEvent(
                step_name=name,
                phase=phase,
                elapsed_seconds=self._clock() - start,
                error=error,
            )
            _fire_hook(self.hooks.on_span_end, event)


NULL_INSTRUMENTATION = NullInstrumentation()

HooksLike = Union[StepHooks, InstrumentationSpan, None]


def as_instrumentation(hooks: HooksLike) -> InstrumentationSpan:
    """Normalize the ``hooks=`` argument accepted by steps."""
    if hooks is None:
        return NULL_INSTRUMENTATION
    if isinstance(hooks, StepHooks):
        return HookInstrumentation(hooks)
    if isinstance(hooks, InstrumentationSpan):
        return hooks
    raise TypeError(
        f"hooks must be StepHooks, an InstrumentationSpan or None (got {type(hooks).__name__})"
    )


# ---------------------------------------------------------------------------
# Profiler sink
# ---------------------------------------------------------------------------


class SpanProfiler:
    """Aggregates (name, phase, duration) triples into per-phase ``SpanStats``.

    One profiler can be shared by many steps::

        profiler = SpanProfiler()
        step = create_lazy("trim", supplier, builder, hooks=profiler.hooks())
        ...
        print(profiler.summary())
    """

    def __init__(self) -> None:
        self._stats: dict[tuple[str, str], SpanStats] = {}
        self._lock = threading.Lock()

    def record(self, name: str, phase: str, duration: float, error: bool = False) -> None:
        with self._lock:
            stats = self._stats.get((name, phase))
            if stats is None:
                stats = SpanStats(name=name, phase=phase)
                self._stats[(name, phase)] = stats
            stats.count += 1
            stats.total_seconds += duration
            stats.max_seconds = max(stats.max_seconds, duration)
            if error:
                stats.errors += 1

    def on_span_end(self, event: SpanEvent) -> None:
        self.record(event.step_name, event.phase, event.elapsed_seconds, error=event.error is not None)

    def hooks(self) -> StepHooks:
        return StepHooks(on_span_end=self.on_span_end)

    def get(self, name: str, phase: str) -> SpanStats | None:
        with self._lock:
            return self._stats.get((name, phase))

    def stats(self) -> list[SpanStats]:
        """Snapshot of all collected stats, ordered by total time (slowest first)."""
        with self._lock:
            snapshot = [s.model_copy() for s in self._stats.values()]
        return sorted(snapshot, key=lambda s: s.total_seconds, reverse=True)

    def summary(self) -> str:
        lines = [f"{'step':<30} {'phase':<16} {'count':>6} {'total(s)':>10} {'max(s)':>10} {'errors':>6}"]
        for s in self.stats():
            lines.append(
                f"{s.name:<30} {s.phase:<16} {s.count:>6} "
                f"{s.total_seconds:>10.4f} {s.max_seconds:>10.4f} {s.errors:>6}"
            )
        return "\n".join(lines)

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()

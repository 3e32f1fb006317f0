"""ReleasableFormatStep — lazily opened formatter that holds a resource."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..core.config import StepConfig
from ..core.exceptions import ResourceReleaseError, TransformerConstructionError
from ..core.hooks import PHASE_CLOSE_FORMATTER, PHASE_OPEN_FORMATTER, HooksLike
from ..core.identity import StepIdentity
from ..core.lazy import Built
from .base import BaseFormatStep, ensure_formatter, release_method

logger = logging.getLogger(__name__)


class ReleasableFormatStep(BaseFormatStep):
    """Format step whose formatter owns a resource (process, socket, JVM...).

    The formatter is opened on the first ``apply()`` and kept until
    ``release()``, which closes it and returns the step to its unbuilt state;
    a later ``apply()`` opens a fresh formatter.  The builder must return an
    object with ``apply(text)`` (or ``__call__``) and ``release()`` (or
    ``close()``).

    Use the step as a context manager, or ``release_all``, so that release
    happens on every exit path::

        with create_releasable("ktlint", supplier, open_ktlint) as step:
            out = step.apply(text)

    Args:
        name: Non-empty step name.
        key_supplier: Zero-argument function returning the step's key.
        builder: Function turning the key into a releasable formatter.
        config: Optional ``StepConfig``.
        hooks: ``StepHooks`` or an ``InstrumentationSpan`` for timing.
    """

    _build_phase = PHASE_OPEN_FORMATTER

    def __init__(
        self,
        name: str,
        key_supplier: Callable[[], Any],
        builder: Callable[[Any], Any],
        *,
        config: Optional[StepConfig] = None,
        hooks: HooksLike = None,
    ):
        super().__init__(name, config=config, hooks=hooks)
        self._builder_fn = self._require_callable(builder, "builder")
        self._identity = StepIdentity(
            self.name,
            key_supplier,
            instrumentation=self._instrumentation,
            thread_safe=self.config.thread_safe,
        )

    def _make_formatter(self, key: Any) -> Any:
        return self._builder_fn(key)

    def _accept_formatter(self, formatter: Any) -> Any:
        close = release_method(formatter)
        if close is None:
            raise TransformerConstructionError(
                f"Builder returned {type(formatter).__name__}, which has no release() or close()",
                step_name=self.name,
            )
        try:
            return ensure_formatter(formatter, self.name)
        except TransformerConstructionError:
            # Never memoized, so this is the only chance to free it.
            try:
                close()
            except Exception:
                logger.warning(
                    "Releasing rejected formatter of step %s failed", self.name, exc_info=True
                )
            raise

    def _discard_formatter(self) -> None:
        try:
            self.release()
        except ResourceReleaseError:
            logger.warning(
                "Releasing formatter of step %s after apply failure also failed",
                self.name,
                exc_info=True,
            )

    def release(self) -> None:
        """Close the built formatter, if any.  No-op when nothing is built.

        The step is unbuilt before the formatter's own release runs, so a
        failing release never leaves a stale handle behind.

        Raises:
            ResourceReleaseError: If the formatter's release operation fails.
        """
        state = self._formatter.reset()
        if not isinstance(state, Built):
            return
        close = release_method(state.value)
        with self._instrumentation.span(self.name, PHASE_CLOSE_FORMATTER):
            try:
                close()
            except Exception as exc:
                raise ResourceReleaseError(
                    f"Failed to release formatter: {exc}", step_name=self.name
                ) from exc
        logger.debug("Released formatter of step %s", self.name)

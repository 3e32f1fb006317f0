"""StandardFormatStep — lazily built formatter with no resources to release."""

from __future__ import annotations

from typing import Any, Callable, Optional

from ..core.config import StepConfig
from ..core.hooks import HooksLike
from ..core.identity import StepIdentity
from .base import BaseFormatStep


class StandardFormatStep(BaseFormatStep):
    """Format step whose key and formatter are both computed on first use.

    The key supplier runs on the first ``identity()`` (or first ``apply()``);
    the builder runs once per step on the first ``apply()`` and the formatter
    is reused for every later call.  ``release()`` does nothing.

    Args:
        name: Non-empty step name.
        key_supplier: Zero-argument function returning the step's key.
        builder: Function turning the key into a formatter (an object with
            ``apply(text)`` or a plain ``str -> str`` callable).
        config: Optional ``StepConfig``.
        hooks: ``StepHooks`` or an ``InstrumentationSpan`` for timing.
    """

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

    def release(self) -> None:
        pass

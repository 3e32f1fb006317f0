"""VolatileFormatStep — a step that is never up-to-date."""

from __future__ import annotations

import uuid
from typing import Any, Callable, Optional

from ..core.config import StepConfig
from ..core.exceptions import IdentityComputationError
from ..core.hooks import HooksLike
from ..core.identity import StepIdentity
from .base import BaseFormatStep


def random_key() -> str:
    """128 random bits as hex."""
    return uuid.uuid4().hex


class VolatileFormatStep(BaseFormatStep):
    """Format step that equals itself but no other step.

    For formatters whose behaviour has no stable fingerprint (wall-clock
    dependent, non-deterministic, ...).  The key is drawn from
    ``random_source`` once, in ``__init__``, so any cache comparing steps by
    ``cache_key()`` always treats this one as stale.

    Args:
        name: Non-empty step name.
        formatter_supplier: Zero-argument function returning the formatter.
        random_source: Zero-argument function returning a fresh random key
            (default: ``uuid4().hex``).
        config: Optional ``StepConfig``.
        hooks: ``StepHooks`` or an ``InstrumentationSpan`` for timing.
    """

    def __init__(
        self,
        name: str,
        formatter_supplier: Callable[[], Any],
        *,
        random_source: Optional[Callable[[], Any]] = None,
        config: Optional[StepConfig] = None,
        hooks: HooksLike = None,
    ):
        super().__init__(name, config=config, hooks=hooks)
        self._formatter_supplier = self._require_callable(formatter_supplier, "formatter supplier")
        random_source = self._require_callable(random_source or random_key, "random source")
        try:
            key = random_source()
        except Exception as exc:
            raise IdentityComputationError(
                f"Random source failed: {exc}", step_name=self.name
            ) from exc
        self._identity = StepIdentity.of_value(
            self.name,
            key,
            instrumentation=self._instrumentation,
            thread_safe=self.config.thread_safe,
        )

    def _make_formatter(self, _key: Any) -> Any:
        return self._formatter_supplier()

    def release(self) -> None:
        pass

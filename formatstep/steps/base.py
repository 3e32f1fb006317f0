"""FormatStep protocol, formatter protocols and the shared step base."""

from __future__ import annotations

import abc
import logging
import os
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

from ..core.config import DEFAULT_CONFIG, StepConfig
from ..core.exceptions import (
    ConfigurationError,
    TransformApplicationError,
    TransformerConstructionError,
)
from ..core.hooks import (
    PHASE_APPLY,
    PHASE_CREATE_FORMATTER,
    HooksLike,
    InstrumentationSpan,
    as_instrumentation,
)
from ..core.identity import StepIdentity
from ..core.lazy import LazyBuilder
from ..schemas.base import StepKey

logger = logging.getLogger(__name__)

FilePath = Union[str, os.PathLike, None]


# ---------------------------------------------------------------------------
# Formatter protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class FormatterFunc(Protocol):
    """A pure text-to-text transformation.

    Plain callables ``str -> str`` work as well; see ``invoke_formatter``.
    """

    def apply(self, text: str) -> str: ...


@runtime_checkable
class ReleasableFormatterFunc(Protocol):
    """A formatter that owns a resource and must be released."""

    def apply(self, text: str) -> str: ...

    def release(self) -> None: ...


def invoke_formatter(formatter: Any, text: str) -> Any:
    apply = getattr(formatter, "apply", None)
    if callable(apply):
        return apply(text)
    return formatter(text)


def ensure_formatter(formatter: Any, step_name: str) -> Any:
    """Reject builder results that cannot format text."""
    if callable(getattr(formatter, "apply", None)) or callable(formatter):
        return formatter
    raise TransformerConstructionError(
        f"Builder returned {type(formatter).__name__}, which is neither callable nor has apply()",
        step_name=step_name,
    )


def release_method(formatter: Any) -> Callable[[], Any] | None:
    """``release()`` if present, else ``close()``, else ``None``."""
    for attr in ("release", "close"):
        method = getattr(formatter, attr, None)
        if callable(method):
            return method
    return None


# ---------------------------------------------------------------------------
# Step protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class FormatStep(Protocol):
    """Protocol all format steps satisfy.

    Implementations can be plain classes — no inheritance required.
    Cache equivalence is equality of ``cache_key()``.
    """

    name: str

    def identity(self) -> Any: ...

    def fingerprint(self) -> str: ...

    def cache_key(self) -> StepKey: ...

    def apply(self, text: str, file: FilePath = None) -> str: ...

    def release(self) -> None: ...


def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"Step name must be a non-empty string (got {name!r})")
    return name.strip()


class BaseFormatStep(abc.ABC):
    """Identity, lazy formatter, equality and scoped release shared by the variants.

    Subclasses set ``_identity`` after calling ``__init__`` and implement
    ``_make_formatter`` (call the user's builder) and ``release``.  The
    formatter is built through a ``LazyBuilder`` on the first ``apply()``
    inside a ``_build_phase`` span and reused until it is discarded.
    """

    _identity: StepIdentity[Any]
    _build_phase: str = PHASE_CREATE_FORMATTER

    def __init__(
        self,
        name: str,
        *,
        config: Optional[StepConfig] = None,
        hooks: HooksLike = None,
    ):
        self.name = validate_name(name)
        if config is not None and not isinstance(config, StepConfig):
            raise ConfigurationError(
                f"config must be a StepConfig, got {type(config).__name__}", step_name=self.name
            )
        self.config = config or DEFAULT_CONFIG
        try:
            self._instrumentation: InstrumentationSpan = as_instrumentation(hooks)
        except TypeError as exc:
            raise ConfigurationError(str(exc), step_name=self.name) from exc
        self._formatter: LazyBuilder[Any, Any] = LazyBuilder(
            self._create_formatter, thread_safe=self.config.thread_safe
        )

    def _require_callable(self, value: Any, what: str) -> Any:
        if not callable(value):
            raise ConfigurationError(
                f"{what} must be callable, got {type(value).__name__}", step_name=self.name
            )
        return value

    # -- identity -----------------------------------------------------------

    def identity(self) -> Any:
        return self._identity.identity()

    def fingerprint(self) -> str:
        return self._identity.fingerprint()

    def cache_key(self) -> StepKey:
        return StepKey(name=self.name, fingerprint=self.fingerprint())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormatStep):
            return NotImplemented
        return self.cache_key() == other.cache_key()

    def __hash__(self) -> int:
        return hash(self.cache_key())

    # -- formatter ----------------------------------------------------------

    @abc.abstractmethod
    def _make_formatter(self, key: Any) -> Any:
        """Run the user-supplied builder for *key*."""

    def _accept_formatter(self, formatter: Any) -> Any:
        return ensure_formatter(formatter, self.name)

    def _create_formatter(self, key: Any) -> Any:
        with self._instrumentation.span(self.name, self._build_phase):
            try:
                formatter = self._make_formatter(key)
            except Exception as exc:
                raise TransformerConstructionError(
                    f"Failed to build formatter: {exc}", step_name=self.name
                ) from exc
            formatter = self._accept_formatter(formatter)
        logger.debug("Built formatter of step %s", self.name)
        return formatter

    def _discard_formatter(self) -> None:
        self._formatter.reset()
        logger.debug("Discarded formatter of step %s after apply failure", self.name)

    @property
    def is_built(self) -> bool:
        return self._formatter.is_built

    # -- application --------------------------------------------------------

    def _run(self, formatter: Any, text: str, file: FilePath) -> str:
        with self._instrumentation.span(self.name, PHASE_APPLY):
            try:
                result = invoke_formatter(formatter, text)
            except Exception as exc:
                raise TransformApplicationError(
                    f"Formatter failed: {exc}", step_name=self.name, file=file
                ) from exc
            if self.config.validate_output and not isinstance(result, str):
                raise TransformApplicationError(
                    f"Formatter returned {type(result).__name__}, expected str",
                    step_name=self.name,
                    file=file,
                )
        return result

    def apply(self, text: str, file: FilePath = None) -> str:
        """Format *text*, building the formatter on first use.

        ``file`` only labels errors; it is never read.  An application
        failure keeps the formatter for the next call unless
        ``StepConfig.rebuild_on_apply_error`` is set.
        """
        formatter = self._formatter.get_or_build(self._identity.identity())
        try:
            return self._run(formatter, text, file)
        except TransformApplicationError:
            if self.config.rebuild_on_apply_error:
                self._discard_formatter()
            raise

    @abc.abstractmethod
    def release(self) -> None:
        """Free whatever the built formatter holds."""

    # -- scoped release -----------------------------------------------------

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

"""StepIdentity — computes and caches the serializable key of a step.

Keys are fingerprinted through a canonical JSON encoding so that equality
never depends on object identity, memory addresses or other process-local
state.  Only plain data is encodable: scalars, bytes, sequences, string-keyed
mappings, sets, enums, dataclasses and pydantic models.
"""

from __future__ import annotations

import dataclasses
import enum
import hashlib
import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel

from .exceptions import ConfigurationError, IdentityComputationError
from .hooks import NULL_INSTRUMENTATION, PHASE_CALCULATE_KEY, InstrumentationSpan
from .lazy import LazyBuilder

Key = TypeVar("Key")


# ---------------------------------------------------------------------------
# Key encoding
# ---------------------------------------------------------------------------


def _type_name(obj: Any) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def _dumps(encoded: Any) -> str:
    return json.dumps(encoded, sort_keys=True, separators=(",", ":"))


def encode_key(value: Any) -> Any:
    """Convert *value* into a JSON-compatible structure.

    Every non-scalar is wrapped in a single-entry object tagged with its kind
    (``__list__``, ``__tuple__``, ``__dict__``, ...), so values of different
    shapes, and user mappings that happen to use a tag as a key, never
    share an encoding.

    Raises:
        TypeError: If *value* (or anything nested in it) has no stable encoding.
    """
    if isinstance(value, enum.Enum):
        return {"__enum__": [_type_name(value), encode_key(value.value)]}
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return {"__bytes__": bytes(value).hex()}
    if isinstance(value, BaseModel):
        return {"__model__": [_type_name(value), encode_key(value.model_dump(mode="json"))]}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: encode_key(getattr(value, f.name)) for f in dataclasses.fields(value)}
        return {"__dataclass__": [_type_name(value), fields]}
    if isinstance(value, list):
        return {"__list__": [encode_key(item) for item in value]}
    if isinstance(value, tuple):
        return {"__tuple__": [encode_key(item) for item in value]}
    if isinstance(value, (set, frozenset)):
        encoded = [encode_key(item) for item in value]
        return {"__set__": sorted(encoded, key=_dumps)}
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"key mappings must use str keys, got {type(k).__name__}")
            out[k] = encode_key(v)
        return {"__dict__": out}
    raise TypeError(f"{type(value).__name__} has no stable key encoding")


def canonical_json(obj: Any) -> str:
    """Deterministic JSON: sorted keys, compact separators."""
    return _dumps(encode_key(obj))


def compute_fingerprint(key: Any) -> str:
    """SHA-256 hex digest of the canonical JSON of *key*."""
    return hashlib.sha256(canonical_json(key).encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# StepIdentity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolvedKey(Generic[Key]):
    key: Key
    fingerprint: str


class StepIdentity(Generic[Key]):
    """Lazily computed, cached key of a format step.

    The supplier runs at most once successfully per instance; its result and
    fingerprint are cached for the instance's lifetime.  A failing supplier
    (or a key with no stable encoding) raises ``IdentityComputationError``
    and leaves nothing cached, so the next call retries.

    Args:
        name: Step name, used for spans and error messages.
        supplier: Zero-argument function returning the key.
        instrumentation: Span implementation wrapped around the supplier call.
        thread_safe: Serialize the first-call path.
    """

    def __init__(
        self,
        name: str,
        supplier: Callable[[], Key],
        *,
        instrumentation: InstrumentationSpan = NULL_INSTRUMENTATION,
        thread_safe: bool = True,
    ):
        if not callable(supplier):
            raise ConfigurationError(
                f"key supplier must be callable, got {type(supplier).__name__}", step_name=name
            )
        self.name = name
        self._supplier = supplier
        self._instrumentation = instrumentation
        self._resolved: LazyBuilder[None, ResolvedKey[Key]] = LazyBuilder(
            self._resolve, thread_safe=thread_safe
        )

    @classmethod
    def of_value(cls, name: str, key: Key, **kwargs: Any) -> "StepIdentity[Key]":
        """Identity whose key is already known; resolved immediately."""
        identity = cls(name, lambda: key, **kwargs)
        identity.identity()
        return identity

    def _resolve(self, _: None) -> ResolvedKey[Key]:
        with self._instrumentation.span(self.name, PHASE_CALCULATE_KEY):
            try:
                key = self._supplier()
            except IdentityComputationError:
                raise
            except Exception as exc:
                raise IdentityComputationError(
                    f"Failed to calculate key: {exc}", step_name=self.name
                ) from exc
            try:
                fingerprint = compute_fingerprint(key)
            except (TypeError, ValueError, RecursionError) as exc:
                raise IdentityComputationError(
                    f"Key is not serializable: {exc}", step_name=self.name
                ) from exc
        return ResolvedKey(key=key, fingerprint=fingerprint)

    @property
    def is_resolved(self) -> bool:
        return self._resolved.is_built

    def identity(self) -> Key:
        return self._resolved.get_or_build(None).key

    def fingerprint(self) -> str:
        return self._resolved.get_or_build(None).fingerprint

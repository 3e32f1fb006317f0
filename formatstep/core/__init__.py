"""
Core building blocks for format steps.
"""

from .config import DEFAULT_CONFIG, StepConfig
from .exceptions import (
    ConfigurationError,
    FormatStepError,
    IdentityComputationError,
    ResourceReleaseError,
    TransformApplicationError,
    TransformerConstructionError,
)
from .hooks import (
    HookInstrumentation,
    InstrumentationSpan,
    NullInstrumentation,
    SpanEvent,
    SpanProfiler,
    SpanStartEvent,
    StepHooks,
)
from .identity import StepIdentity, canonical_json, compute_fingerprint
from .lazy import UNBUILT, Built, LazyBuilder

__all__ = [
    'DEFAULT_CONFIG',
    'StepConfig',
    'ConfigurationError',
    'FormatStepError',
    'IdentityComputationError',
    'ResourceReleaseError',
    'TransformApplicationError',
    'TransformerConstructionError',
    'HookInstrumentation',
    'InstrumentationSpan',
    'NullInstrumentation',
    'SpanEvent',
    'SpanProfiler',
    'SpanStartEvent',
    'StepHooks',
    'StepIdentity',
    'canonical_json',
    'compute_fingerprint',
    'UNBUILT',
    'Built',
    'LazyBuilder',
]

"""
formatstep - cacheable text format steps

Building blocks for incremental build pipelines: a step pairs a name and a
serializable key (used to decide whether cached output is still valid)
with a lazily built formatter that transforms file contents.
"""

from .core import (
    ConfigurationError,
    FormatStepError,
    IdentityComputationError,
    ResourceReleaseError,
    SpanProfiler,
    StepConfig,
    StepHooks,
    TransformApplicationError,
    TransformerConstructionError,
)
from .schemas import StepKey
from .steps import (
    FormatStep,
    ReleasableFormatStep,
    StandardFormatStep,
    VolatileFormatStep,
    create,
    create_lazy,
    create_releasable,
    never_up_to_date,
    never_up_to_date_lazy,
    release_all,
)

__version__ = "0.1.0"

__all__ = [
    'FormatStep',
    'StandardFormatStep',
    'ReleasableFormatStep',
    'VolatileFormatStep',
    'StepKey',
    'StepConfig',
    'StepHooks',
    'SpanProfiler',
    'create',
    'create_lazy',
    'create_releasable',
    'never_up_to_date',
    'never_up_to_date_lazy',
    'release_all',
    'FormatStepError',
    'ConfigurationError',
    'IdentityComputationError',
    'TransformerConstructionError',
    'TransformApplicationError',
    'ResourceReleaseError',
]

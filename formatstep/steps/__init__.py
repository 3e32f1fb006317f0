"""Format step variants and their constructors."""

from .base import BaseFormatStep, FormatStep, FormatterFunc, ReleasableFormatterFunc
from .factory import (
    create,
    create_lazy,
    create_releasable,
    never_up_to_date,
    never_up_to_date_lazy,
    release_all,
)
from .releasable import ReleasableFormatStep
from .standard import StandardFormatStep
from .volatile import VolatileFormatStep

__all__ = [
    "BaseFormatStep",
    "FormatStep",
    "FormatterFunc",
    "ReleasableFormatterFunc",
    "ReleasableFormatStep",
    "StandardFormatStep",
    "VolatileFormatStep",
    "create",
    "create_lazy",
    "create_releasable",
    "never_up_to_date",
    "never_up_to_date_lazy",
    "release_all",
]

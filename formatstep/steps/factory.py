"""Constructors for the format step variants, and ``release_all``."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from ..core.exceptions import ResourceReleaseError
from .base import FormatStep
from .releasable import ReleasableFormatStep
from .standard import StandardFormatStep
from .volatile import VolatileFormatStep

logger = logging.getLogger(__name__)


def create(name: str, state: Any, builder: Callable[[Any], Any], **kwargs: Any) -> StandardFormatStep:
    """Step from an already-computed key; the formatter is still built lazily."""
    return StandardFormatStep(name, lambda: state, builder, **kwargs)


def create_lazy(
    name: str,
    state_supplier: Callable[[], Any],
    builder: Callable[[Any], Any],
    **kwargs: Any,
) -> StandardFormatStep:
    """Step whose key and formatter are both computed on first use."""
    return StandardFormatStep(name, state_supplier, builder, **kwargs)


def create_releasable(
    name: str,
    state_supplier: Callable[[], Any],
    builder: Callable[[Any], Any],
    **kwargs: Any,
) -> ReleasableFormatStep:
    """Step whose formatter holds a resource; call ``release()`` when done."""
    return ReleasableFormatStep(name, state_supplier, builder, **kwargs)


def never_up_to_date(name: str, formatter: Any, **kwargs: Any) -> VolatileFormatStep:
    """Step that is never cache-equivalent to another, wrapping a ready formatter."""
    return VolatileFormatStep(name, lambda: formatter, **kwargs)


def never_up_to_date_lazy(
    name: str,
    formatter_supplier: Callable[[], Any],
    **kwargs: Any,
) -> VolatileFormatStep:
    """Like ``never_up_to_date`` but the formatter is created on first use."""
    return VolatileFormatStep(name, formatter_supplier, **kwargs)


def release_all(steps: Iterable[FormatStep]) -> None:
    """Release every step, even when some releases fail.

    Raises:
        ResourceReleaseError: After all steps were attempted, if any failed.
            ``errors`` holds every failure in step order.
    """
    errors: list[BaseException] = []
    count = 0
    for step in steps:
        count += 1
        try:
            step.release()
        except Exception as exc:
            logger.warning("Release of step %s failed", getattr(step, "name", step), exc_info=True)
            errors.append(exc)

    if errors:
        raise ResourceReleaseError(
            f"{len(errors)} of {count} steps failed to release", errors=errors
        ) from errors[0]

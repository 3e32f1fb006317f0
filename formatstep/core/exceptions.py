"""
Custom exceptions for the formatstep package.

Provides specific exception types for each failure mode of a format step
with helpful error messages and context.
"""

from __future__ import annotations

import os
from typing import Any


class FormatStepError(Exception):
    """Base exception for all format-step errors.

    Attributes:
        message: Human-readable error description.
        step_name: Step that triggered the error (``None`` if unknown).
        file: File being formatted, for labelling only (``None`` if not given).
    """

    def __init__(
        self,
        message: str,
        step_name: str | None = None,
        file: str | os.PathLike | None = None,
    ):
        self.message = message
        self.step_name = step_name
        self.file = file

        # Build descriptive error message
        error_parts = [message]
        if step_name is not None:
            error_parts.append(f"Step: {step_name}")
        if file is not None:
            error_parts.append(f"File: {os.fspath(file)}")

        super().__init__(" | ".join(error_parts))


class ConfigurationError(FormatStepError):
    """Raised when a step or its configuration is invalid.

    Common causes:
        - Empty or non-string step name.
        - A key supplier, builder or random source that is not callable.
        - Invalid ``StepConfig`` values.
    """

    pass


class IdentityComputationError(FormatStepError):
    """Raised when a step's key supplier fails or returns an unencodable key.

    The key cache stays empty, so the next ``identity()`` call retries.
    """

    pass


class TransformerConstructionError(FormatStepError):
    """Raised when building a step's formatter fails.

    Nothing is memoized; the next ``apply()`` call builds again.
    """

    pass


class TransformApplicationError(FormatStepError):
    """Raised when a built formatter fails while processing text."""

    pass


class ResourceReleaseError(FormatStepError):
    """Raised when releasing a built formatter fails.

    The step is already back in its unbuilt state when this is raised.

    Attributes:
        errors: Additional release failures collected by ``release_all``.
    """

    def __init__(self, message: str, errors: list[BaseException] | None = None, **kwargs: Any):
        self.errors = list(errors or [])
        super().__init__(message, **kwargs)

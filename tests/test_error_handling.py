"""Tests for the exception hierarchy and error propagation."""

from __future__ import annotations

from pathlib import Path

import pytest

from formatstep.core.exceptions import (
    ConfigurationError,
    FormatStepError,
    IdentityComputationError,
    ResourceReleaseError,
    TransformApplicationError,
    TransformerConstructionError,
)


class TestFormatStepError:
    def test_message_only(self):
        err = FormatStepError("boom")
        assert str(err) == "boom"
        assert err.step_name is None
        assert err.file is None

    def test_message_parts(self):
        err = FormatStepError("boom", step_name="trim", file=Path("src/a.txt"))
        assert str(err) == "boom | Step: trim | File: src/a.txt"

    @pytest.mark.parametrize(
        "cls",
        [
            ConfigurationError,
            IdentityComputationError,
            TransformerConstructionError,
            TransformApplicationError,
            ResourceReleaseError,
        ],
    )
    def test_subclasses(self, cls):
        err = cls("boom", step_name="trim")
        assert isinstance(err, FormatStepError)
        assert err.step_name == "trim"

    def test_release_error_collects_errors(self):
        inner = [OSError("a"), OSError("b")]
        err = ResourceReleaseError("2 failed", errors=inner)
        assert err.errors == inner
        assert ResourceReleaseError("x").errors == []

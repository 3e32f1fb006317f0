"""Shared fixtures for format step tests."""

from __future__ import annotations

import pytest

from .helpers import CountingBuilder, ResourceFactory


@pytest.fixture
def counting_builder():
    return CountingBuilder()


@pytest.fixture
def resource_factory():
    return ResourceFactory()

"""Pydantic schemas for formatstep."""

from .base import SpanStats, StepKey

__all__ = [
    "SpanStats",
    "StepKey",
]

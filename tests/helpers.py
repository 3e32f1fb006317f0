"""Formatters and builders shared by the format step tests."""

from __future__ import annotations


def strip_trailing_whitespace(text: str) -> str:
    return "\n".join(line.rstrip(" \t") for line in text.split("\n"))


class CountingBuilder:
    """Builder that counts constructions and optionally fails the first N."""

    def __init__(self, fail_times: int = 0):
        self.calls = 0
        self.keys: list = []
        self.fail_times = fail_times

    def __call__(self, key):
        self.calls += 1
        self.keys.append(key)
        if self.calls <= self.fail_times:
            raise RuntimeError(f"build failure #{self.calls}")
        return strip_trailing_whitespace


class CountingResource:
    """Releasable formatter that records how often it was applied and released."""

    def __init__(self, fail_release: bool = False):
        self.applied = 0
        self.released = 0
        self.fail_release = fail_release

    def apply(self, text: str) -> str:
        if self.released:
            raise RuntimeError("formatter used after release")
        self.applied += 1
        return text.upper()

    def release(self) -> None:
        self.released += 1
        if self.fail_release:
            raise OSError("daemon did not exit")


class ResourceFactory:
    def __init__(self, fail_release: bool = False):
        self.built: list[CountingResource] = []
        self.fail_release = fail_release

    def __call__(self, key):
        resource = CountingResource(fail_release=self.fail_release)
        self.built.append(resource)
        return resource

    @property
    def releases(self) -> int:
        return sum(r.released for r in self.built)

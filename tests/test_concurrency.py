"""Concurrent first-use of a shared step builds the key and formatter once."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from formatstep.core.config import StepConfig
from formatstep.steps.releasable import ReleasableFormatStep
from formatstep.steps.standard import StandardFormatStep

from .helpers import ResourceFactory, strip_trailing_whitespace

WORKERS = 8


class _SlowCounter:
    def __init__(self, result):
        self.calls = 0
        self.result = result
        self._lock = threading.Lock()

    def __call__(self, *args):
        with self._lock:
            self.calls += 1
        time.sleep(0.01)
        return self.result


def _hammer(step, texts):
    barrier = threading.Barrier(len(texts))

    def work(text):
        barrier.wait()
        return step.apply(text)

    with ThreadPoolExecutor(max_workers=len(texts)) as pool:
        return list(pool.map(work, texts))


class TestConcurrentFirstUse:
    def test_single_key_and_formatter(self):
        supplier = _SlowCounter("cfg-v1")
        builder = _SlowCounter(strip_trailing_whitespace)
        step = StandardFormatStep("trim", supplier, builder)

        results = _hammer(step, [f"line{i} \n" for i in range(WORKERS)])

        assert results == [f"line{i}\n" for i in range(WORKERS)]
        assert supplier.calls == 1
        assert builder.calls == 1

    def test_no_duplicated_resource(self):
        factory = ResourceFactory()
        slow_factory = _SlowCounter(None)

        def open_resource(key):
            slow_factory(key)
            return factory(key)

        step = ReleasableFormatStep("daemon", lambda: 1, open_resource)

        _hammer(step, ["a"] * WORKERS)
        step.release()

        assert len(factory.built) == 1
        assert factory.releases == 1

    def test_thread_unsafe_mode_for_single_owner(self):
        builder = _SlowCounter(str.upper)
        step = StandardFormatStep("upper", lambda: 1, builder, config=StepConfig(thread_safe=False))

        assert [step.apply(t) for t in ("a", "b")] == ["A", "B"]
        assert builder.calls == 1

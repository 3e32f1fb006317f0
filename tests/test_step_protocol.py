"""Tests for the FormatStep protocol, StepKey and cache equivalence."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from formatstep.core.identity import compute_fingerprint
from formatstep.schemas.base import StepKey
from formatstep.steps.base import BaseFormatStep, FormatStep, FormatterFunc, ReleasableFormatterFunc
from formatstep.steps.releasable import ReleasableFormatStep
from formatstep.steps.standard import StandardFormatStep
from formatstep.steps.volatile import VolatileFormatStep

from .helpers import CountingResource, strip_trailing_whitespace


def _standard(name="trim", key="cfg-v1") -> StandardFormatStep:
    return StandardFormatStep(name, lambda: key, lambda k: strip_trailing_whitespace)


# -- StepKey -------------------------------------------------------------


class TestStepKey:
    def test_frozen(self):
        key = StepKey(name="trim", fingerprint="abc")
        with pytest.raises(ValidationError):
            key.name = "other"

    def test_json_roundtrip_equal(self):
        key = _standard().cache_key()
        restored = StepKey.model_validate_json(key.model_dump_json())
        assert restored == key
        assert hash(restored) == hash(key)

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            StepKey(name="trim", fingerprint="abc", address=123)

    def test_fingerprint_content(self):
        assert _standard(key={"width": 2}).cache_key() == StepKey(
            name="trim", fingerprint=compute_fingerprint({"width": 2})
        )


# -- Cache equivalence ---------------------------------------------------


class TestCacheEquivalence:
    def test_equal_name_and_key(self):
        a, b = _standard(), _standard()
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_key(self):
        assert _standard(key="cfg-v1") != _standard(key="cfg-v2")

    def test_different_name(self):
        assert _standard(name="trim") != _standard(name="trimAgain")

    def test_variant_does_not_participate(self):
        releasable = ReleasableFormatStep("trim", lambda: "cfg-v1", lambda k: CountingResource())
        assert releasable == _standard()

    def test_formatter_state_does_not_participate(self):
        built, fresh = _standard(), _standard()
        built.apply("a ")
        assert built == fresh

    def test_structurally_equal_keys(self):
        a = _standard(key={"indent": [2, 4], "tabs": False})
        b = _standard(key={"tabs": False, "indent": [2, 4]})
        assert a == b

    def test_tuple_and_list_keys_not_equivalent(self):
        assert _standard(key=("x", 1)) != _standard(key=["x", 1])

    def test_bytes_key_not_equivalent_to_lookalike_mapping(self):
        assert _standard(key=b"ab") != _standard(key={"__bytes__": "6162"})

    def test_equality_resolves_key_once(self):
        supplier = MagicMock(return_value="cfg-v1")
        step = StandardFormatStep("trim", supplier, lambda k: str.strip)
        for _ in range(3):
            assert step == _standard()
        supplier.assert_called_once()

    def test_not_equal_to_other_types(self):
        assert _standard() != "trim"
        assert _standard() != StepKey(name="trim", fingerprint=compute_fingerprint("cfg-v1"))

    def test_volatile_never_equal_to_standard(self):
        assert VolatileFormatStep("trim", lambda: str.strip) != _standard()


# -- Protocol ------------------------------------------------------------


class _DuckStep:
    """Minimal class that satisfies the FormatStep protocol via duck typing."""

    name = "duck"

    def identity(self):
        return "cfg-v1"

    def fingerprint(self):
        return compute_fingerprint("cfg-v1")

    def cache_key(self):
        return StepKey(name="trim", fingerprint=self.fingerprint())

    def apply(self, text, file=None):
        return text

    def release(self):
        pass


class TestFormatStepProtocol:
    def test_variants_satisfy_protocol(self):
        assert isinstance(_standard(), FormatStep)
        assert isinstance(VolatileFormatStep("v", lambda: str.strip), FormatStep)
        assert isinstance(ReleasableFormatStep("r", lambda: 1, lambda k: CountingResource()), FormatStep)

    def test_duck_typed_step(self):
        assert isinstance(_DuckStep(), FormatStep)
        assert _standard() == _DuckStep()

    def test_non_step_rejected(self):
        assert not isinstance("not a step", FormatStep)
        assert not isinstance(42, FormatStep)

    def test_formatter_protocols(self):
        assert isinstance(CountingResource(), FormatterFunc)
        assert isinstance(CountingResource(), ReleasableFormatterFunc)
        assert not isinstance(str.strip, ReleasableFormatterFunc)

    def test_repr(self):
        assert repr(_standard()) == "StandardFormatStep(name='trim')"


class TestBaseFormatStep:
    def test_cannot_instantiate_base(self):
        with pytest.raises(TypeError):
            BaseFormatStep("trim")

    def test_subclass_must_define_release(self):
        class NoRelease(BaseFormatStep):
            def _make_formatter(self, key):
                return str.strip

        with pytest.raises(TypeError):
            NoRelease("trim")

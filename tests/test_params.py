"""Tests for perch.routing.params — typed placeholder converters."""

import re

import pytest

from perch.errors import ConfigurationError
from perch.routing.params import CONVERTERS, converter_pattern


class TestConverters:
    @pytest.mark.parametrize(
        ("param_type", "accepts", "rejects"),
        [
            ("str", "hello", "a/b"),
            ("int", "42", "4.2"),
            ("float", "4.2", "abc"),
            ("path", "a/b/c", ""),
        ],
    )
    def test_patterns(self, param_type: str, accepts: str, rejects: str) -> None:
        pattern = re.compile(converter_pattern(param_type))
        assert pattern.fullmatch(accepts)
        assert not pattern.fullmatch(rejects)

    def test_unknown(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            converter_pattern("uuid")
        assert "uuid" in str(exc_info.value)
        for known in CONVERTERS:
            assert known in str(exc_info.value)

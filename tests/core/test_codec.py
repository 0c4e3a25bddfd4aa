"""
Tests for the JSON codec.
"""

import json
from dataclasses import dataclass
from pathlib import Path

import pytest

from apigate.core.codec import JsonCodec, get_default_codec
from apigate.core.errors import ConversionError


@dataclass
class Point:
    x: int
    y: int


class TestEncode:
    def test_none_is_null(self):
        assert JsonCodec().encode(None) == b"null"

    def test_scalars_and_containers(self):
        codec = JsonCodec()
        assert json.loads(codec.encode(5)) == 5
        assert json.loads(codec.encode({"a": [1, "b"]})) == {"a": [1, "b"]}

    def test_dataclass_and_path(self):
        codec = JsonCodec()
        assert json.loads(codec.encode(Point(1, 2))) == {"x": 1, "y": 2}
        assert json.loads(codec.encode(Path("/tmp/x"))) == "/tmp/x"


class TestDecodeArray:
    def test_strings(self):
        assert JsonCodec().decode_array('["a", "b"]') == ["a", "b"]

    def test_scalars_become_text(self):
        assert JsonCodec().decode_array("[1, true, 2.5]") == ["1", "true", "2.5"]

    def test_empty(self):
        assert JsonCodec().decode_array("[]") == []

    @pytest.mark.parametrize("text", ["not json", '{"a": 1}', '"a"', "[null]", "[[1]]", '[{"a": 1}]'])
    def test_rejects(self, text):
        with pytest.raises(ConversionError):
            JsonCodec().decode_array(text)


def test_default_codec_is_shared():
    assert get_default_codec() is get_default_codec()

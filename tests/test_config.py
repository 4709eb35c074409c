"""Tests for CodecConfig."""
import pytest

from postgis_codec.codec.cursor import ByteOrder
from postgis_codec.config import DEFAULT_CONFIG, CodecConfig
from postgis_codec.errors import EncodeError


def test_defaults():
    assert DEFAULT_CONFIG == CodecConfig()
    assert DEFAULT_CONFIG.byte_order is ByteOrder.LITTLE
    assert DEFAULT_CONFIG.twkb_precision == 0
    assert not DEFAULT_CONFIG.twkb_bbox and not DEFAULT_CONFIG.twkb_size


def test_from_mapping_coerces_values():
    config = CodecConfig.from_mapping({
        "byte_order": "big",
        "twkb_precision": "3",
        "twkb_bbox": 1,
    })
    assert config == CodecConfig(ByteOrder.BIG, 3, True, False)


@pytest.mark.parametrize("value", [0, ByteOrder.BIG, "BIG"])
def test_byte_order_forms(value):
    assert CodecConfig.from_mapping({"byte_order": value}).byte_order is ByteOrder.BIG


def test_unknown_setting():
    with pytest.raises(EncodeError):
        CodecConfig.from_mapping({"precision": 2})


@pytest.mark.parametrize("value", ["middle", 2])
def test_unknown_byte_order(value):
    with pytest.raises(EncodeError):
        CodecConfig.from_mapping({"byte_order": value})


def test_is_frozen():
    with pytest.raises(AttributeError):
        DEFAULT_CONFIG.twkb_precision = 5

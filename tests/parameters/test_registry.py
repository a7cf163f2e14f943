"""Tests for the static parameter registry."""

import pytest

from imgparams.parameters import PARAMETER_REGISTRY, SIZE_CODES, lookup_definition
from imgparams.schemas import OverlayDescriptor

pytestmark = pytest.mark.unit


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        PARAMETER_REGISTRY["width"] = None
    with pytest.raises(TypeError):
        SIZE_CODES["s"] = 1


def test_size_code_table():
    assert SIZE_CODES["xxu"] == 40
    assert SIZE_CODES["s"] == 600
    assert SIZE_CODES["xxg"] == 4000
    assert len(SIZE_CODES) == 16


@pytest.mark.parametrize("name", ["size_code", "derivative", "condition", "imwidth", "imheight"])
def test_internal_names(name):
    assert PARAMETER_REGISTRY[name].internal is True


def test_canonical_names_are_not_internal():
    assert not PARAMETER_REGISTRY["width"].internal
    assert not PARAMETER_REGISTRY["overlays"].internal


def test_lookup_aliases_only_when_allowed():
    assert lookup_definition("w") is None
    assert lookup_definition("w", allow_alias=True).name == "width"
    assert lookup_definition("f", allow_alias=True).name == "size_code"
    assert lookup_definition("nonsense", allow_alias=True) is None


def test_dialect_restrictions():
    assert PARAMETER_REGISTRY["derivative"].accepted_by("path")
    assert not PARAMETER_REGISTRY["derivative"].accepted_by("standard")
    assert not PARAMETER_REGISTRY["imwidth"].accepted_by("standard")
    assert PARAMETER_REGISTRY["width"].accepted_by("compact")
    assert PARAMETER_REGISTRY["size_code"].accepted_by("compact")
    assert PARAMETER_REGISTRY["size_code"].accepted_by("path")
    assert not PARAMETER_REGISTRY["size_code"].accepted_by("standard")


class TestValidation:
    """Test is_valid across parameter kinds."""

    def test_width_accepts_auto_and_positive_numbers(self):
        width = PARAMETER_REGISTRY["width"]
        assert width.is_valid("auto")
        assert width.is_valid(800)
        assert not width.is_valid(0)
        assert not width.is_valid("wide")
        assert not width.is_valid(True)

    def test_quality_range(self):
        quality = PARAMETER_REGISTRY["quality"]
        assert quality.is_valid(1)
        assert quality.is_valid(100)
        assert not quality.is_valid(101)
        assert quality.default_value == 85

    def test_rotate_allowed_values(self):
        rotate = PARAMETER_REGISTRY["rotate"]
        assert rotate.is_valid(90)
        assert not rotate.is_valid(45)

    def test_background_formats(self):
        background = PARAMETER_REGISTRY["background"]
        assert background.is_valid("#ff00aa")
        assert background.is_valid("transparent")
        assert not background.is_valid("red")

    def test_focal_bounds(self):
        focal = PARAMETER_REGISTRY["focal"]
        assert focal.is_valid("0.5,0.25")
        assert not focal.is_valid("1.5,0.5")
        assert not focal.is_valid("center")

    def test_trim_shape(self):
        trim = PARAMETER_REGISTRY["trim"]
        assert trim.is_valid("10;110;60;10")
        assert not trim.is_valid("10;110")

    @pytest.mark.parametrize("name, default", [("strip", False), ("allowExpansion", False)])
    def test_delivery_flags(self, name, default):
        flag = PARAMETER_REGISTRY[name]
        assert flag.is_valid(True)
        assert not flag.is_valid("yes")
        assert flag.default_value is default

    @pytest.mark.parametrize("name, value", [("compression", "fast"), ("onerror", "redirect")])
    def test_single_value_enums(self, name, value):
        definition = PARAMETER_REGISTRY[name]
        assert definition.is_valid(value)
        assert not definition.is_valid("slow")
        assert definition.default_value is None


class TestFormatting:
    """Test wire formatters."""

    def test_integral_floats_become_ints(self):
        assert PARAMETER_REGISTRY["width"].format(800.0) == 800
        assert PARAMETER_REGISTRY["quality"].format(80.0) == 80

    @pytest.mark.parametrize("raw, expected", [(800.7, 801), (800.5, 801), (800.2, 800), (0.3, 1)])
    def test_dimensions_rounded_to_whole_pixels(self, raw, expected):
        assert PARAMETER_REGISTRY["width"].format(raw) == expected
        assert PARAMETER_REGISTRY["height"].format(raw) == expected

    def test_auto_is_passed_through(self):
        assert PARAMETER_REGISTRY["quality"].format("auto") == "auto"

    def test_aspect_uses_colon(self):
        assert PARAMETER_REGISTRY["aspect"].format("16-9") == "16:9"

    def test_overlays_become_mappings(self):
        descriptors = [OverlayDescriptor(url="https://x/a.png", top=5.0)]
        assert PARAMETER_REGISTRY["overlays"].format(descriptors) == [
            {"url": "https://x/a.png", "top": 5}
        ]

import pytest

from models.colors import (
    DominantColor,
    RGBColor,
    get_color_name,
    hex_to_rgb,
    rgb_to_hex,
    rgb_to_hsl,
)


class TestRgbToHsl:
    """Shared HSL conversion."""

    @pytest.mark.unit
    @pytest.mark.parametrize("rgb,expected_hue", [
        ((255, 0, 0), 0.0),
        ((0, 255, 0), 120.0),
        ((0, 0, 255), 240.0),
        ((0, 255, 255), 180.0),
        ((255, 0, 255), 300.0),
    ])
    def test_primary_hues(self, rgb, expected_hue):
        assert rgb_to_hsl(*rgb).h == pytest.approx(expected_hue)

    @pytest.mark.unit
    def test_pure_red_saturation_and_lightness(self):
        hsl = rgb_to_hsl(255, 0, 0)
        assert hsl.s == pytest.approx(100.0)
        assert hsl.l == pytest.approx(50.0)

    @pytest.mark.unit
    def test_gray_has_no_saturation(self):
        hsl = rgb_to_hsl(128, 128, 128)
        assert hsl.h == 0
        assert hsl.s == 0
        assert hsl.l == pytest.approx(50.196, abs=0.01)

    @pytest.mark.unit
    def test_hue_stays_below_360(self):
        # red with a trace of blue wraps to just under 360
        assert 0 <= rgb_to_hsl(255, 0, 1).h < 360


class TestColorNames:
    """Display naming by lightness, saturation and hue band."""

    @pytest.mark.unit
    @pytest.mark.parametrize("rgb,name", [
        ((255, 255, 255), "White"),
        ((0, 0, 0), "Black"),
        ((128, 128, 128), "Light Gray"),
        ((100, 100, 100), "Dark Gray"),
        ((224, 0, 0), "Red"),
        ((255, 128, 0), "Orange"),
        ((255, 255, 0), "Yellow"),
        ((0, 224, 0), "Green"),
        ((0, 255, 255), "Cyan"),
        ((0, 0, 255), "Blue"),
        ((128, 0, 255), "Purple"),
        ((255, 0, 255), "Magenta"),
        ((255, 0, 100), "Pink"),
    ])
    def test_named_colors(self, rgb, name):
        assert get_color_name(*rgb) == name

    @pytest.mark.unit
    def test_dominant_color_exposes_name_and_hex(self):
        color = DominantColor(r=224, g=0, b=0, percentage=75)
        assert color.name == "Red"
        assert color.hex == "#e00000"
        assert color.to_dict() == {"r": 224, "g": 0, "b": 0, "percentage": 75}
        assert color.to_dict(include_display=True)["name"] == "Red"

    @pytest.mark.unit
    def test_dominant_color_from_dict(self):
        color = DominantColor.from_dict({"r": "32", "g": 64, "b": 96, "percentage": 40})
        assert color == DominantColor(r=32, g=64, b=96, percentage=40)


class TestHexConversion:

    @pytest.mark.unit
    def test_rgb_to_hex_pads_channels(self):
        assert rgb_to_hex(0, 10, 255) == "#000aff"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["#E00000", "e00000", " #e00000 "])
    def test_hex_to_rgb(self, value):
        assert hex_to_rgb(value) == RGBColor(224, 0, 0)

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["", "#fff", "#gg0000", "e000000"])
    def test_hex_to_rgb_rejects_malformed(self, value):
        assert hex_to_rgb(value) is None

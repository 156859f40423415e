"""
Color value types and conversions shared by naming and classification.

HSL is only ever computed through ``rgb_to_hsl`` so display names and the
harmony/contrast thresholds always agree on the same numbers.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

_HEX_PATTERN = re.compile(r'^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$', re.IGNORECASE)

# (upper bound exclusive, name); bands cover [0, 360)
HUE_BANDS = (
    (15, "Red"),
    (45, "Orange"),
    (65, "Yellow"),
    (150, "Green"),
    (190, "Cyan"),
    (260, "Blue"),
    (290, "Purple"),
    (330, "Magenta"),
    (360, "Pink"),
)


@dataclass(frozen=True)
class HSLColor:
    """Hue in [0, 360), saturation and lightness in [0, 100]."""
    h: float
    s: float
    l: float


@dataclass(frozen=True)
class RGBColor:
    """8-bit RGB color without alpha."""
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.r, self.g, self.b)

    @property
    def hsl(self) -> HSLColor:
        return rgb_to_hsl(self.r, self.g, self.b)

    @property
    def name(self) -> str:
        return get_color_name(self.r, self.g, self.b)

    def to_dict(self) -> Dict[str, Any]:
        return {"r": self.r, "g": self.g, "b": self.b}


@dataclass(frozen=True)
class DominantColor(RGBColor):
    """An RGB bucket plus its share (0-100) of the retained buckets."""
    percentage: int

    def to_dict(self, include_display: bool = False) -> Dict[str, Any]:
        data = {"r": self.r, "g": self.g, "b": self.b, "percentage": self.percentage}
        if include_display:
            data["hex"] = self.hex
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DominantColor':
        return cls(
            r=int(data["r"]),
            g=int(data["g"]),
            b=int(data["b"]),
            percentage=int(data.get("percentage", 0)),
        )


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#{:02x}{:02x}{:02x}".format(r, g, b)


def hex_to_rgb(value: str) -> Optional[RGBColor]:
    """
    Parse ``#rrggbb`` (the leading ``#`` is optional).

    Returns:
        The color, or None when the value is not a 6-digit hex color
    """
    match = _HEX_PATTERN.match(value.strip()) if value else None
    if not match:
        return None
    return RGBColor(*(int(part, 16) for part in match.groups()))


def rgb_to_hsl(r: int, g: int, b: int) -> HSLColor:
    """
    Convert 8-bit RGB to HSL.

    Args:
        r, g, b: channel values 0-255

    Returns:
        HSLColor with h in degrees [0, 360), s and l as percentages
    """
    r, g, b = r / 255.0, g / 255.0, b / 255.0

    max_c = max(r, g, b)
    min_c = min(r, g, b)
    h = s = 0.0
    l = (max_c + min_c) / 2

    if max_c != min_c:
        d = max_c - min_c
        s = d / (2 - max_c - min_c) if l > 0.5 else d / (max_c + min_c)

        if max_c == r:
            h = ((g - b) / d + (6 if g < b else 0)) / 6
        elif max_c == g:
            h = ((b - r) / d + 2) / 6
        else:
            h = ((r - g) / d + 4) / 6

    return HSLColor(h=h * 360, s=s * 100, l=l * 100)


def get_color_name(r: int, g: int, b: int) -> str:
    """
    Human-readable color name for display.

    Lightness extremes win first, then low saturation maps to a gray, then the
    hue band decides.
    """
    hsl = rgb_to_hsl(r, g, b)

    if hsl.l > 90:
        return "White"
    if hsl.l < 10:
        return "Black"
    if hsl.s < 10:
        return "Light Gray" if hsl.l > 50 else "Dark Gray"

    for upper, name in HUE_BANDS:
        if hsl.h < upper:
            return name
    return "Pink"

"""
Color analysis pipeline stages: dominant color quantization, harmony
classification and contrast estimation.

All functions here are pure; they never touch disk or shared state.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Sequence, Union

import numpy as np

from models.colors import DominantColor, RGBColor, rgb_to_hsl

# Quantizer settings
SAMPLE_STRIDE = 4          # analyze every 4th pixel
BUCKET_SIZE = 32           # 256 levels -> 8 per channel
MAX_COLORS = 5
NEAR_WHITE_THRESHOLD = 240
NEAR_BLACK_THRESHOLD = 15


class HarmonyCategory(Enum):
    """How the dominant hues relate to each other"""
    MONOCHROMATIC = "monochromatic"
    ANALOGOUS = "analogous"
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"
    MIXED = "mixed"


class ContrastLevel(Enum):
    """Coarse lightness spread among dominant colors"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Decoded RGBA image data.

    Fields:
        width: image width, px
        height: image height, px
        data: uint8 array holding width * height * 4 channel values
    """
    width: int
    height: int
    data: np.ndarray

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


PixelInput = Union[PixelBuffer, np.ndarray, bytes, bytearray, Sequence[int]]


def _as_rgba_rows(pixels: PixelInput) -> np.ndarray:
    """Return an (N, 4) view of the RGBA samples."""
    data: Any = pixels.data if isinstance(pixels, PixelBuffer) else pixels
    if isinstance(data, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(bytes(data), dtype=np.uint8)
    else:
        flat = np.asarray(data).reshape(-1)

    if flat.size % 4 != 0:
        raise ValueError(f"RGBA buffer length must be a multiple of 4, got {flat.size}")
    return flat.reshape(-1, 4)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def analyze_image_colors(pixels: PixelInput) -> List[DominantColor]:
    """
    Reduce an RGBA pixel buffer to its dominant colors.

    Every 4th pixel is sampled and bucketed to 32-wide channel levels.
    Near-white and near-black buckets are dropped as background, the rest
    are counted.

    Args:
        pixels: PixelBuffer or raw RGBA data (flat or (h, w, 4))

    Returns:
        Up to 5 dominant colors, most frequent first. Percentages are relative
        to the retained buckets only. Empty when every sample was filtered.
    """
    rgba = _as_rgba_rows(pixels)
    rgb = rgba[::SAMPLE_STRIDE, :3].astype(np.int32)

    buckets = (rgb // BUCKET_SIZE) * BUCKET_SIZE

    # background filter runs on bucketed values
    near_white = np.all(buckets > NEAR_WHITE_THRESHOLD, axis=1)
    near_black = np.all(buckets < NEAR_BLACK_THRESHOLD, axis=1)
    buckets = buckets[~(near_white | near_black)]
    if buckets.shape[0] == 0:
        return []

    keys = (buckets[:, 0] << 16) | (buckets[:, 1] << 8) | buckets[:, 2]

    unique_keys, first_seen, counts = np.unique(keys, return_index=True, return_counts=True)
    # count descending, ties in order of first appearance
    order = np.lexsort((first_seen, -counts))[:MAX_COLORS]

    top_counts = [int(counts[i]) for i in order]
    total = sum(top_counts)

    colors = []
    for i, count in zip(order, top_counts):
        key = int(unique_keys[i])
        colors.append(DominantColor(
            r=(key >> 16) & 0xFF,
            g=(key >> 8) & 0xFF,
            b=key & 0xFF,
            percentage=_round_half_up(count / total * 100),
        ))
    return colors


def _hue_distance(a: float, b: float) -> float:
    diff = abs(a - b)
    return min(diff, 360 - diff)


def classify_harmony(colors: Sequence[RGBColor]) -> HarmonyCategory:
    """
    Classify the color scheme from hue differences of consecutive colors.

    Only adjacent pairs in list order are compared, not every combination.
    """
    if len(colors) < 2:
        return HarmonyCategory.MONOCHROMATIC

    hues = [rgb_to_hsl(c.r, c.g, c.b).h for c in colors]
    diffs = [_hue_distance(a, b) for a, b in zip(hues, hues[1:])]
    avg_diff = sum(diffs) / len(diffs)

    if avg_diff < 30:
        return HarmonyCategory.ANALOGOUS
    if 150 < avg_diff < 210:
        return HarmonyCategory.COMPLEMENTARY
    if 100 < avg_diff < 140:
        return HarmonyCategory.TRIADIC
    return HarmonyCategory.MIXED


def estimate_contrast(colors: Sequence[RGBColor]) -> ContrastLevel:
    """Bucket the lightness spread (max L - min L) of the colors."""
    if len(colors) < 2:
        return ContrastLevel.LOW

    lightness = [rgb_to_hsl(c.r, c.g, c.b).l for c in colors]
    contrast_ratio = max(lightness) - min(lightness)

    if contrast_ratio > 60:
        return ContrastLevel.HIGH
    if contrast_ratio > 30:
        return ContrastLevel.MEDIUM
    return ContrastLevel.LOW

"""
End-to-end color pipeline: quantize -> classify harmony / estimate contrast -> assess.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from models.color_analysis import (
    ContrastLevel,
    HarmonyCategory,
    PixelInput,
    analyze_image_colors,
    classify_harmony,
    estimate_contrast,
)
from models.colors import DominantColor
from models.style_assessment import StyleAssessment, generate_assessment


@dataclass(frozen=True)
class OutfitAnalysis:
    """Everything one pipeline run produces"""
    colors: Tuple[DominantColor, ...]
    harmony: HarmonyCategory
    contrast: ContrastLevel
    assessment: StyleAssessment

    @property
    def score(self) -> int:
        return self.assessment.score

    @property
    def suggestions(self) -> str:
        return self.assessment.suggestions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dominant_colors": [c.to_dict(include_display=True) for c in self.colors],
            "color_harmony": self.harmony.value,
            "contrast": self.contrast.value,
            "suggestions": self.assessment.suggestions,
            "score": self.assessment.score,
        }


def run_pipeline(pixels: PixelInput) -> OutfitAnalysis:
    colors = analyze_image_colors(pixels)
    harmony = classify_harmony(colors)
    contrast = estimate_contrast(colors)
    return OutfitAnalysis(
        colors=tuple(colors),
        harmony=harmony,
        contrast=contrast,
        assessment=generate_assessment(colors, harmony, contrast),
    )

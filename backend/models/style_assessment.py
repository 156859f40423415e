"""
Style suggestions and outfit score derived from harmony, contrast and the
dominant colors.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from models.color_analysis import ContrastLevel, HarmonyCategory
from models.colors import RGBColor, get_color_name

BASE_SCORE = 5
MIN_SCORE = 1
MAX_SCORE = 10
MAX_DISTINCT_COLORS = 3

HARMONY_REMARKS = {
    HarmonyCategory.COMPLEMENTARY: "Your outfit has bold, complementary colors that create visual impact.",
    HarmonyCategory.ANALOGOUS: "Your color scheme is harmonious and pleasing to the eye.",
    HarmonyCategory.MONOCHROMATIC: "Your monochromatic palette creates a sophisticated, elegant look.",
}

CONTRAST_REMARKS = {
    ContrastLevel.HIGH: ("The high contrast makes a strong statement. "
                         "Consider adding a neutral piece to balance it out."),
    ContrastLevel.LOW: "Add a pop of contrasting color with accessories to create more visual interest.",
}

TOO_MANY_COLORS_REMARK = "Try limiting to 3 main colors for a more cohesive look."

HARMONY_BONUS = {
    HarmonyCategory.COMPLEMENTARY: 2,
    HarmonyCategory.ANALOGOUS: 2,
    HarmonyCategory.TRIADIC: 1,
}

CONTRAST_BONUS = {
    ContrastLevel.MEDIUM: 2,
    ContrastLevel.HIGH: 1,
}


@dataclass(frozen=True)
class StyleAssessment:
    """Suggestion text and 1-10 score for one outfit"""
    suggestions: str
    score: int
    harmony: HarmonyCategory
    contrast: ContrastLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestions": self.suggestions,
            "score": self.score,
            "color_harmony": self.harmony.value,
            "contrast": self.contrast.value,
        }


def generate_style_suggestions(colors: Sequence[RGBColor],
                               harmony: HarmonyCategory,
                               contrast: ContrastLevel) -> str:
    """
    Build the suggestion text.

    Sentences are appended in a fixed order: harmony remark, contrast remark,
    then the color-count remark. Triadic/mixed harmony and medium contrast
    have no remark.
    """
    suggestions: List[str] = []

    if harmony in HARMONY_REMARKS:
        suggestions.append(HARMONY_REMARKS[harmony])

    if contrast in CONTRAST_REMARKS:
        suggestions.append(CONTRAST_REMARKS[contrast])

    distinct_names = {get_color_name(c.r, c.g, c.b) for c in colors}
    if len(distinct_names) > MAX_DISTINCT_COLORS:
        suggestions.append(TOO_MANY_COLORS_REMARK)

    return " ".join(suggestions)


def calculate_score(harmony: HarmonyCategory,
                    contrast: ContrastLevel,
                    colors: Sequence[RGBColor]) -> int:
    score = BASE_SCORE
    score += HARMONY_BONUS.get(harmony, 0)
    score += CONTRAST_BONUS.get(contrast, 0)
    if 2 <= len(colors) <= 4:
        score += 1
    return min(MAX_SCORE, max(MIN_SCORE, score))


def generate_assessment(colors: Sequence[RGBColor],
                        harmony: HarmonyCategory,
                        contrast: ContrastLevel) -> StyleAssessment:
    return StyleAssessment(
        suggestions=generate_style_suggestions(colors, harmony, contrast),
        score=calculate_score(harmony, contrast, colors),
        harmony=harmony,
        contrast=contrast,
    )

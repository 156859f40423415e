import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import config
from models.colors import get_color_name, hex_to_rgb

DEFAULT_STYLE_TIPS = [
    {
        "id": "color-60-30-10",
        "category": "Color Theory",
        "title": "The 60-30-10 rule",
        "description": "Balance an outfit by giving one color most of the space.",
        "tips": [
            {"tip": "Use your main color for about 60% of the outfit, usually the largest pieces."},
            {"tip": "A secondary color covers about 30%, such as trousers or a jacket."},
            {"tip": "Save the last 10% for an accent: shoes, a bag or a scarf."}
        ]
    },
    {
        "id": "color-wheel",
        "category": "Color Theory",
        "title": "Working with the color wheel",
        "description": "Colors that sit in known positions on the wheel combine predictably.",
        "tips": [
            {"tip": "Neighboring hues (analogous) look calm and cohesive."},
            {"tip": "Opposite hues (complementary) create energy; let one of them dominate."},
            {"tip": "Three evenly spaced hues (triadic) work best with one muted partner."}
        ]
    },
    {
        "id": "contrast-balance",
        "category": "Contrast",
        "title": "Light and dark balance",
        "description": "Lightness contrast draws the eye as much as hue does.",
        "tips": [
            {"tip": "High contrast (black with white) reads sharp and formal."},
            {"tip": "Medium contrast is the easiest to wear every day."},
            {"tip": "Low contrast outfits benefit from texture or a contrasting accessory."}
        ]
    },
    {
        "id": "neutrals",
        "category": "Essentials",
        "title": "Neutrals as a base",
        "description": "Neutral pieces make bolder colors easier to combine.",
        "tips": [
            {"tip": "Navy, gray, beige, white and black pair with almost anything."},
            {"tip": "Add one statement color to a neutral outfit rather than several."}
        ]
    },
    {
        "id": "accessories",
        "category": "Accessories",
        "title": "Accessorizing with color",
        "description": "Small pieces are the cheapest way to adjust a color scheme.",
        "tips": [
            {"tip": "Repeat a color from your outfit in one accessory to tie it together."},
            {"tip": "Metallic tones count as neutrals; match gold or silver to your skin undertone."}
        ]
    }
]

DEFAULT_COLOR_PALETTES = [
    {
        "id": "classic-neutrals",
        "name": "Classic Neutrals",
        "description": "Timeless base colors for any wardrobe.",
        "example_colors": [
            {"name": "Office", "colors": ["#1f2a44", "#f5f5f5", "#8c8c8c"]},
            {"name": "Weekend", "colors": ["#d8c3a5", "#ffffff", "#3e3e3e"]}
        ],
        "works_well_with": ["Blue", "Red", "Green"]
    },
    {
        "id": "earth-tones",
        "name": "Earth Tones",
        "description": "Warm, natural colors inspired by the outdoors.",
        "example_colors": [
            {"name": "Autumn", "colors": ["#8b5a2b", "#c19a6b", "#556b2f"]},
            {"name": "Desert", "colors": ["#c2b280", "#a0522d", "#f4e1c1"]}
        ],
        "works_well_with": ["Orange", "Yellow", "Light Gray"]
    },
    {
        "id": "jewel-tones",
        "name": "Jewel Tones",
        "description": "Rich, saturated colors for evening and statement looks.",
        "example_colors": [
            {"name": "Evening", "colors": ["#0f52ba", "#50c878", "#9b111e"]},
            {"name": "Regal", "colors": ["#4b0082", "#e0115f", "#ffd700"]}
        ],
        "works_well_with": ["Black", "Dark Gray", "White"]
    },
    {
        "id": "pastels",
        "name": "Pastels",
        "description": "Soft, light colors that read fresh and relaxed.",
        "example_colors": [
            {"name": "Spring", "colors": ["#f7cac9", "#92a8d1", "#b5ead7"]},
            {"name": "Sorbet", "colors": ["#ffdac1", "#e2f0cb", "#c7ceea"]}
        ],
        "works_well_with": ["White", "Light Gray", "Blue"]
    }
]


class StyleTipsHandler:
    """
    Read-only style knowledge base: tips grouped by category and color palettes
    """

    def __init__(self, knowledge_file: Optional[Union[str, Path]] = None):
        self.logger = logging.getLogger(__name__)
        self.knowledge_file = Path(knowledge_file) if knowledge_file else config.DATA_DIR / "style_knowledge.json"

        data = self._load_knowledge()
        self.style_tips: List[Dict[str, Any]] = data.get("style_tips", DEFAULT_STYLE_TIPS)
        self.color_palettes: List[Dict[str, Any]] = data.get("color_palettes", DEFAULT_COLOR_PALETTES)

        self.logger.info("Style knowledge base loaded: %d tips, %d palettes",
                         len(self.style_tips), len(self.color_palettes))

    def _load_knowledge(self) -> dict:
        """Custom knowledge file if present, otherwise the built-in defaults"""
        if not self.knowledge_file.exists():
            return {}
        try:
            with open(self.knowledge_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            self.logger.warning("Ignoring malformed knowledge file %s: %s", self.knowledge_file, e)
            return {}

    def get_style_tips(self) -> Dict[str, List[Dict[str, Any]]]:
        """Tips grouped by category, categories in alphabetical order"""
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for tip in sorted(self.style_tips, key=lambda t: t.get("category", "")):
            grouped.setdefault(tip.get("category", "General"), []).append(tip)
        return grouped

    @staticmethod
    def describe_color(hex_value: str) -> Optional[Dict[str, Any]]:
        rgb = hex_to_rgb(hex_value)
        if rgb is None:
            return None
        hsl = rgb.hsl
        return {
            "hex": rgb.hex,
            "r": rgb.r,
            "g": rgb.g,
            "b": rgb.b,
            "name": get_color_name(rgb.r, rgb.g, rgb.b),
            "hsl": {"h": round(hsl.h, 1), "s": round(hsl.s, 1), "l": round(hsl.l, 1)}
        }

    def get_color_palettes(self) -> List[Dict[str, Any]]:
        """
        Palettes with each example color expanded to RGB + display name.
        Malformed hex values are skipped.
        """
        palettes = []
        for palette in self.color_palettes:
            examples = []
            for example in palette.get("example_colors", []):
                colors = [c for c in (self.describe_color(h) for h in example.get("colors", [])) if c]
                examples.append({"name": example.get("name", ""), "colors": colors})
            palettes.append({**palette, "example_colors": examples})
        return palettes

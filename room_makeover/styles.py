"""미리 정의된 인테리어 스타일 옵션"""
from typing import List

from .models.schemas import StyleOption

STYLE_OPTIONS: List[StyleOption] = [
    StyleOption(
        id="modern",
        name="Modern",
        description="Clean lines, neutral colors and functional furniture with a refined, current feel."
    ),
    StyleOption(
        id="scandinavian",
        name="Scandinavian",
        description="Bright and natural Nordic look built on whites, light woods and cozy textiles."
    ),
    StyleOption(
        id="minimalist",
        name="Minimalist",
        description="Only the essentials, generous empty space and simple geometry."
    ),
    StyleOption(
        id="industrial",
        name="Industrial",
        description="Urban loft character with exposed brick, concrete and metal finishes."
    ),
    StyleOption(
        id="bohemian",
        name="Bohemian",
        description="Layered patterns, plants, rattan and warm eclectic color."
    ),
    StyleOption(
        id="mid-century-modern",
        name="Mid-Century Modern",
        description="Organic curves, tapered legs, walnut tones and retro accents."
    ),
    StyleOption(
        id="coastal",
        name="Coastal",
        description="Airy blues and sandy neutrals with linen, driftwood and light."
    ),
    StyleOption(
        id="farmhouse",
        name="Farmhouse",
        description="Rustic wood, shiplap, vintage pieces and a warm lived-in feel."
    ),
]

STYLE_NAMES: List[str] = [style.name for style in STYLE_OPTIONS]

# 새 세션의 기본 스타일
DEFAULT_STYLE = STYLE_NAMES[0]

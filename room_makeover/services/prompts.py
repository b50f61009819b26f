"""Gemini / Imagen 프롬프트 템플릿과 응답 스키마"""
from typing import Optional

from google.genai import types

from ..models.schemas import ColorPalette, DesignPlan, RoomDimensions


def _palette_schema(primary_description: str, accent_description: str) -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "primary": types.Schema(type=types.Type.STRING, description=primary_description),
            "accent": types.Schema(type=types.Type.STRING, description=accent_description),
        },
        required=["primary", "accent"],
    )


DESIGN_PLAN_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "analysis": types.Schema(
            type=types.Type.STRING,
            description=(
                "A brief analysis of the current room's layout, lighting, and existing decor. "
                "If room dimensions were provided, mention how they influence the design."
            ),
        ),
        "wall_color": _palette_schema(
            "The primary wall color suggestion (e.g., 'Soft Off-White').",
            "An accent wall color suggestion (e.g., 'Charcoal Gray').",
        ),
        "lighting": types.Schema(
            type=types.Type.STRING,
            description="Suggestions for lighting fixtures (e.g., 'A large, arched floor lamp and recessed ceiling lights').",
        ),
        "flooring": types.Schema(
            type=types.Type.STRING,
            description="Recommendations for flooring (e.g., 'Light oak hardwood floors or a large, neutral-toned area rug').",
        ),
        "furniture_suggestions": types.Schema(
            type=types.Type.ARRAY,
            description="A list of 3-5 key furniture and decor items, appropriately scaled for the room size if provided.",
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "name": types.Schema(type=types.Type.STRING, description="The name of the item (e.g., 'Plush Sectional Sofa')."),
                    "description": types.Schema(type=types.Type.STRING, description="The item's style, material, and color."),
                    "placement": types.Schema(type=types.Type.STRING, description="Where to place this item in the room."),
                    "estimated_price": types.Schema(type=types.Type.NUMBER, description="An estimated price for this item in USD."),
                },
                required=["name", "description", "placement", "estimated_price"],
            ),
        ),
        "estimated_cost": types.Schema(
            type=types.Type.OBJECT,
            description="An estimated budget range for the entire makeover in USD.",
            properties={
                "min": types.Schema(type=types.Type.NUMBER, description="The minimum estimated cost in USD."),
                "max": types.Schema(type=types.Type.NUMBER, description="The maximum estimated cost in USD."),
                "currency": types.Schema(type=types.Type.STRING, description="The currency, e.g., 'USD'."),
            },
            required=["min", "max", "currency"],
        ),
        "alternative_palettes": types.Schema(
            type=types.Type.ARRAY,
            description="Exactly 3 alternative color palettes that also fit the style.",
            items=_palette_schema("The alternative primary wall color.", "The alternative accent wall color."),
        ),
    },
    required=[
        "analysis",
        "wall_color",
        "lighting",
        "flooring",
        "furniture_suggestions",
        "estimated_cost",
        "alternative_palettes",
    ],
)

MORE_PALETTES_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    description="A list of exactly 3 new and distinct color palettes. Each palette must have a primary and an accent color.",
    items=_palette_schema("The new primary wall color.", "The new accent wall color."),
)


def build_dimension_text(dimensions: Optional[RoomDimensions]) -> str:
    """너비/길이가 모두 있을 때만 크기 안내 문구 생성"""
    if dimensions is None or not dimensions.is_complete:
        return ""
    unit = dimensions.unit_name
    return (
        f"The user has specified the room is approximately {dimensions.width} {unit} wide "
        f"by {dimensions.length} {unit} long. Please ensure your furniture suggestions and layout "
        f"advice are appropriately scaled for a room of this size and explicitly mention these "
        f"dimensions ({dimensions.width} x {dimensions.length} {unit}) in your analysis."
    )


def build_design_plan_prompt(style: str, dimensions: Optional[RoomDimensions] = None) -> str:
    dimension_text = build_dimension_text(dimensions)
    scale_hint = ", keeping the provided dimensions in mind" if dimension_text else ""
    scale_items = ", ensuring they are scaled correctly for the room" if dimension_text else ""

    return f"""You are a world-class AI interior designer. Analyze the provided room image and generate a complete design makeover plan in a friendly and inspiring tone. The user wants a "{style}" style.
{dimension_text}
Your tasks are:
1. Briefly analyze the current room's strengths and weaknesses.
2. Suggest a full makeover based on the selected style{scale_hint}.
3. Output specific ideas for a primary wall color palette, flooring, and lighting.
4. Recommend 3-5 key furniture or decor items with detailed descriptions and placement advice{scale_items}.
5. Provide a realistic, estimated total budget range (min and max) for the complete makeover. Also, include an estimated price for each recommended furniture item. All monetary values should be in USD.
6. Also provide exactly 3 alternative color palettes (primary and accent) that would offer a different mood while still fitting the requested style.

Provide the output in JSON format according to the provided schema. Ensure the descriptions are vivid and helpful."""


def build_render_prompt(plan: DesignPlan, style: str, palette: Optional[ColorPalette] = None) -> str:
    """팔레트 오버라이드가 있으면 플랜의 벽 컬러보다 우선"""
    colors = palette or plan.wall_color
    furniture_list = ", ".join(item.name for item in plan.furniture_suggestions)

    return f"""A photorealistic, high-quality interior design photograph of a room redesigned in the {style} style, based on an analysis of a previous photo.
- The primary wall color is {colors.primary} with an accent wall in {colors.accent}.
- The flooring is {plan.flooring}.
- Key furniture includes: {furniture_list}. These items should be scaled appropriately for the room's context.
- The lighting style is: {plan.lighting}.
- The overall atmosphere should be bright, inviting, and professionally designed. The image should be taken from a natural human eye-level perspective, as if someone is standing in the room. Do not include any text, logos, or watermarks."""


def build_more_palettes_prompt(plan: DesignPlan, style: str) -> str:
    existing = "\n".join(
        f"- {palette.primary} & {palette.accent}"
        for palette in [plan.wall_color, *plan.alternative_palettes]
    )

    return f"""You are an AI color consultant for an interior design app. Based on the following design analysis for a "{style}" themed room, please generate exactly 3 new and distinct color palettes.

**Design Analysis:** {plan.analysis}

**Important:** The user has already seen the following palettes, so please provide completely different options that suggest different moods (e.g., one calming, one energetic, one sophisticated):
{existing}

Return the output as a JSON array of objects, where each object has a 'primary' and 'accent' property, according to the provided schema."""

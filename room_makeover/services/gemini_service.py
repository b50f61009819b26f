import asyncio
import json
from typing import Any, List, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..exceptions import ServiceError, ValidationError
from ..models.schemas import ColorPalette, DesignPlan, RoomDimensions
from ..utils.logger import logger
from .prompts import (
    DESIGN_PLAN_SCHEMA,
    MORE_PALETTES_SCHEMA,
    build_design_plan_prompt,
    build_more_palettes_prompt,
    build_render_prompt,
)

# 응답에 반드시 있어야 하는 최상위 필드
REQUIRED_PLAN_FIELDS = ("furniture_suggestions", "estimated_cost", "alternative_palettes")


def _load_json(text: Optional[str]) -> Any:
    """JSON 응답 파싱 (마크다운 코드 블록 처리)"""
    if not text or not text.strip():
        raise ValueError("The AI returned an empty response.")

    response_text = text.strip()
    if response_text.startswith("```json"):
        response_text = response_text[7:]
    if response_text.startswith("```"):
        response_text = response_text[3:]
    if response_text.endswith("```"):
        response_text = response_text[:-3]

    return json.loads(response_text.strip())


def decode_design_plan(payload: Any) -> DesignPlan:
    """파싱된 JSON을 DesignPlan으로 변환. 필드 누락/오류는 ValidationError"""
    if not isinstance(payload, dict):
        raise ServiceError(
            f"Failed to get a valid design plan from the AI: expected a JSON object, got {type(payload).__name__}"
        )

    missing = [field for field in REQUIRED_PLAN_FIELDS if payload.get(field) is None]
    if missing:
        raise ValidationError(
            f"AI response is missing required fields: {', '.join(missing)}"
        )

    try:
        plan = DesignPlan.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"AI response failed validation: {e}") from e

    cost = plan.estimated_cost
    if cost.min > cost.max:
        logger.warning(f"Estimated cost range is inverted: min={cost.min} max={cost.max}")
    if not 3 <= len(plan.furniture_suggestions) <= 5:
        logger.warning(f"Expected 3-5 furniture suggestions, got {len(plan.furniture_suggestions)}")
    if len(plan.alternative_palettes) != 3:
        logger.warning(f"Expected 3 alternative palettes, got {len(plan.alternative_palettes)}")

    return plan


def decode_palettes(payload: Any, limit: int = 3) -> List[ColorPalette]:
    """팔레트 배열 변환. 스키마 위반은 ServiceError"""
    if not isinstance(payload, list):
        raise ServiceError(
            f"Failed to get new palettes from the AI: expected a JSON array, got {type(payload).__name__}"
        )
    try:
        palettes = [ColorPalette.model_validate(item) for item in payload]
    except PydanticValidationError as e:
        raise ServiceError(f"Failed to get new palettes from the AI: {e}") from e

    if len(palettes) > limit:
        logger.warning(f"AI returned {len(palettes)} palettes, keeping the first {limit}")
    return palettes[:limit]


class GeminiService:
    """Google Gemini / Imagen API 서비스"""

    def __init__(self, client: Optional[genai.Client] = None):
        if client is None:
            # 설정에서 API 키 로드
            if not settings.gemini_api_key:
                raise ValueError("GEMINI_API_KEY가 설정되지 않았습니다.")
            client = genai.Client(api_key=settings.gemini_api_key)

        self.client = client
        logger.info("GeminiService initialized")

    async def generate_design_plan(
        self,
        image_bytes: bytes,
        mime_type: str,
        style: str,
        dimensions: Optional[RoomDimensions] = None
    ) -> DesignPlan:
        """방 사진 + 스타일로 디자인 플랜 생성 (JSON mode)"""
        prompt = build_design_plan_prompt(style, dimensions)
        try:
            logger.info(
                f"Generating {style} design plan"
                + (f" for {dimensions.width}x{dimensions.length}{dimensions.unit}" if dimensions and dimensions.is_complete else "")
            )

            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=settings.gemini_plan_model,
                contents=[
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                    prompt,
                ],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=DESIGN_PLAN_SCHEMA,
                    temperature=settings.plan_temperature,
                ),
            )
            payload = _load_json(response.text)

        except Exception as e:
            logger.error(f"Design plan generation failed: {str(e)}", exc_info=True)
            raise ServiceError(f"Failed to get a valid design plan from the AI: {str(e)}") from e

        plan = decode_design_plan(payload)
        logger.info(
            f"Design plan generated for {style}: "
            f"{len(plan.furniture_suggestions)} items, {len(plan.alternative_palettes)} palettes"
        )
        return plan

    async def generate_redesigned_image(
        self,
        plan: DesignPlan,
        style: str,
        palette: Optional[ColorPalette] = None
    ) -> bytes:
        """디자인 플랜 기반 리디자인 이미지 생성 (Imagen). JPEG 원본 바이트 반환"""
        prompt = build_render_prompt(plan, style, palette)
        try:
            colors = palette or plan.wall_color
            logger.info(f"Rendering {style} room ({colors.primary} / {colors.accent})")

            response = await asyncio.to_thread(
                self.client.models.generate_images,
                model=settings.gemini_image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/jpeg",
                    aspect_ratio=settings.image_aspect_ratio,
                ),
            )

            if not response.generated_images:
                raise ServiceError("The AI did not return any images.")

            image_bytes = response.generated_images[0].image.image_bytes
            if not image_bytes:
                raise ServiceError("The AI returned an empty image.")

        except ServiceError as e:
            logger.error(f"{style} rendering failed: {str(e)}")
            raise
        except Exception as e:
            logger.error(f"{style} rendering failed: {type(e).__name__}: {str(e)}", exc_info=True)
            raise ServiceError(f"Failed to generate a redesigned image from the AI: {str(e)}") from e

        logger.info(f"{style} rendering succeeded ({len(image_bytes)} bytes)")
        return image_bytes

    async def generate_more_palettes(self, plan: DesignPlan, style: str) -> List[ColorPalette]:
        """기존에 보여준 팔레트와 다른 새 팔레트 3개 요청"""
        prompt = build_more_palettes_prompt(plan, style)
        try:
            logger.info(
                f"Requesting more palettes for {style} "
                f"({len(plan.alternative_palettes) + 1} already shown)"
            )

            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=settings.gemini_plan_model,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=MORE_PALETTES_SCHEMA,
                    temperature=settings.palette_temperature,
                ),
            )
            payload = _load_json(response.text)

        except Exception as e:
            logger.error(f"Palette generation failed: {str(e)}", exc_info=True)
            raise ServiceError(f"Failed to get new palettes from the AI: {str(e)}") from e

        palettes = decode_palettes(payload)
        logger.info(f"Received {len(palettes)} palettes for {style}")
        return palettes


# 싱글톤 인스턴스
_gemini_service = None

def get_gemini_service() -> GeminiService:
    """GeminiService 인스턴스 가져오기"""
    global _gemini_service
    if _gemini_service is None:
        _gemini_service = GeminiService()
    return _gemini_service

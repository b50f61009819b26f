from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal


class StyleOption(BaseModel):
    """인테리어 스타일 옵션"""
    id: str
    name: str
    description: str


class RoomDimensions(BaseModel):
    """방 크기 (선택 입력). 빈 문자열은 '미입력'을 의미"""
    width: str = ""
    length: str = ""
    unit: Literal["ft", "m"] = "ft"

    @field_validator("width", "length", mode="before")
    @classmethod
    def _positive_number_or_blank(cls, value):
        if value is None:
            return ""
        text = str(value).strip()
        if not text:
            return ""
        try:
            number = float(text)
        except ValueError:
            raise ValueError(f"'{text}' is not a number")
        if number <= 0:
            raise ValueError("room dimensions must be positive")
        return text

    @property
    def is_complete(self) -> bool:
        return bool(self.width and self.length)

    @property
    def unit_name(self) -> str:
        return "feet" if self.unit == "ft" else "meters"


class ColorPalette(BaseModel):
    """벽 컬러 팔레트 (메인 + 포인트)"""
    primary: str
    accent: str


class FurnitureSuggestion(BaseModel):
    """추천 가구/소품. 가격 0은 '가격 미정'"""
    name: str
    description: str
    placement: str
    estimated_price: float = Field(ge=0)


class CostRange(BaseModel):
    """전체 예산 범위"""
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    currency: str = "USD"


class DesignPlan(BaseModel):
    """AI 디자인 플랜"""
    analysis: str
    wall_color: ColorPalette
    lighting: str
    flooring: str
    furniture_suggestions: List[FurnitureSuggestion]
    estimated_cost: CostRange
    alternative_palettes: List[ColorPalette]


class SessionState(BaseModel):
    """세션 상태 (컨트롤러 전용, 직접 수정 금지)"""
    uploaded_image: Optional[bytes] = None
    image_mime_type: Optional[str] = None
    image_preview: Optional[str] = None
    style: str
    dimensions: RoomDimensions = Field(default_factory=RoomDimensions)
    plan: Optional[DesignPlan] = None
    generated_image: Optional[str] = None
    error: Optional[str] = None
    is_generating: bool = False
    is_regenerating: bool = False
    is_fetching_palettes: bool = False

    @property
    def is_busy(self) -> bool:
        return self.is_generating or self.is_regenerating or self.is_fetching_palettes


class SessionView(BaseModel):
    """프레젠테이션 레이어에 노출되는 읽기 전용 세션 뷰"""
    session_id: str
    style: str
    dimensions: RoomDimensions
    has_image: bool
    image_preview: Optional[str] = None
    plan: Optional[DesignPlan] = None
    generated_image: Optional[str] = None
    error: Optional[str] = None
    is_generating: bool = False
    is_regenerating: bool = False
    is_fetching_palettes: bool = False


class StyleSelection(BaseModel):
    """스타일 선택 요청"""
    style: str


class DimensionsRequest(BaseModel):
    """방 크기 입력 요청 (검증은 세션에서 수행)"""
    width: str = ""
    length: str = ""
    unit: str = "ft"

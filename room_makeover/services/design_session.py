"""세션 상태 컨트롤러

사용자 인텐트(업로드, 스타일 선택, 생성, 팔레트 변경, 팔레트 추가, 리셋)를 받아
GeminiService 호출 순서를 관리하고 결과를 세션 상태에 반영한다.
상태 변경은 모두 이 모듈의 인텐트 메서드를 거친다.
"""
import time
import uuid
from collections import OrderedDict
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..exceptions import DesignAssistantError, OperationInProgressError, ValidationError
from ..models.schemas import ColorPalette, RoomDimensions, SessionState, SessionView
from ..styles import DEFAULT_STYLE, STYLE_NAMES
from ..utils.images import inspect_image, to_data_uri
from ..utils.logger import logger
from .gemini_service import GeminiService, get_gemini_service

# 사용자 메시지
MISSING_INPUT_MESSAGE = "Please upload an image and select a style."
IMAGE_READ_MESSAGE = "Failed to read the image file."
INVALID_STYLE_MESSAGE = "Please choose one of the available styles."
INVALID_DIMENSIONS_MESSAGE = "Room dimensions must be positive numbers in feet or meters."
PARTIAL_FAILURE_MESSAGE = (
    "I've created the design plan, but couldn't visualize the room. "
    "You can still see the ideas below!"
)
FULL_FAILURE_MESSAGE = "Sorry, I couldn't generate ideas. The AI might be busy. Please try again later."
RECOLOR_FAILURE_MESSAGE = "Sorry, I couldn't update the design with the new colors."
PALETTES_FAILURE_MESSAGE = "Sorry, couldn't fetch more color ideas right now. Please try again in a bit."
UNEXPECTED_FAILURE_MESSAGE = "Something unexpected went wrong. Please try again."


def merge_palettes(existing: Iterable[ColorPalette], new: Iterable[ColorPalette]) -> List[ColorPalette]:
    """기존 목록 뒤에 새 팔레트를 추가. 구조적으로 같은 팔레트는 제외"""
    merged = list(existing)
    for palette in new:
        if palette not in merged:
            merged.append(palette)
    return merged


def initial_state() -> SessionState:
    return SessionState(style=DEFAULT_STYLE)


class DesignSession:
    """단일 사용자 세션"""

    def __init__(self, session_id: str, service: Optional[GeminiService] = None):
        self.session_id = session_id
        self._service = service
        self.state = initial_state()
        # reset/generate 때마다 증가. 완료 핸들러는 시작 시점 값과 같을 때만 결과 반영
        self._epoch = 0

    @property
    def service(self) -> GeminiService:
        return self._service or get_gemini_service()

    def _is_current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def _validation_error(self, message: str) -> ValidationError:
        self.state.error = message
        return ValidationError(message)

    def view(self) -> SessionView:
        state = self.state
        return SessionView(
            session_id=self.session_id,
            style=state.style,
            dimensions=state.dimensions,
            has_image=state.uploaded_image is not None,
            image_preview=state.image_preview,
            plan=state.plan,
            generated_image=state.generated_image,
            error=state.error,
            is_generating=state.is_generating,
            is_regenerating=state.is_regenerating,
            is_fetching_palettes=state.is_fetching_palettes,
        )

    # 입력 인텐트

    def upload_image(self, content: bytes) -> None:
        if self.state.is_busy:
            raise OperationInProgressError("upload_image")
        try:
            mime_type, size = inspect_image(content)
        except ValueError as e:
            logger.warning(f"[{self.session_id}] Rejected upload: {e}")
            raise self._validation_error(IMAGE_READ_MESSAGE) from e

        state = self.state
        state.uploaded_image = bytes(content)
        state.image_mime_type = mime_type
        state.image_preview = to_data_uri(content, mime_type)
        state.error = None
        logger.info(f"[{self.session_id}] Image uploaded: {mime_type} {size[0]}x{size[1]} ({len(content)} bytes)")

    def reject_upload(self, message: str) -> None:
        """전송 단계에서 거부된 업로드 (확장자, 크기)"""
        logger.warning(f"[{self.session_id}] Upload rejected: {message}")
        self.state.error = message

    def select_style(self, style: str) -> None:
        if style not in STYLE_NAMES:
            logger.warning(f"[{self.session_id}] Unknown style: {style}")
            raise self._validation_error(INVALID_STYLE_MESSAGE)
        self.state.style = style

    def set_dimensions(self, width: str = "", length: str = "", unit: str = "ft") -> None:
        try:
            dimensions = RoomDimensions(width=width, length=length, unit=unit)
        except PydanticValidationError as e:
            logger.warning(f"[{self.session_id}] Invalid dimensions: {e.errors()}")
            raise self._validation_error(INVALID_DIMENSIONS_MESSAGE) from e
        self.state.dimensions = dimensions

    # 생성 인텐트

    async def generate(self) -> None:
        """디자인 플랜 → 리디자인 이미지 순차 생성"""
        state = self.state
        if state.uploaded_image is None or not state.style:
            raise self._validation_error(MISSING_INPUT_MESSAGE)
        if state.is_busy:
            raise OperationInProgressError("generate")

        self._epoch += 1
        epoch = self._epoch

        state.plan = None
        state.generated_image = None
        state.error = None
        state.is_generating = True

        style = state.style
        plan = None
        try:
            plan = await self.service.generate_design_plan(
                state.uploaded_image,
                state.image_mime_type or "image/jpeg",
                style,
                state.dimensions,
            )
            if not self._is_current(epoch):
                logger.info(f"[{self.session_id}] Discarding stale design plan")
                return
            state.plan = plan

            image_bytes = await self.service.generate_redesigned_image(plan, style)
            if not self._is_current(epoch):
                logger.info(f"[{self.session_id}] Discarding stale rendering")
                return
            state.generated_image = to_data_uri(image_bytes)

        except DesignAssistantError as e:
            logger.warning(f"[{self.session_id}] Generation failed: {e}")
            if self._is_current(epoch):
                state.error = PARTIAL_FAILURE_MESSAGE if plan is not None else FULL_FAILURE_MESSAGE
        except Exception as e:
            logger.error(f"[{self.session_id}] Unexpected generation error: {e}", exc_info=True)
            if self._is_current(epoch):
                state.error = UNEXPECTED_FAILURE_MESSAGE
        finally:
            if self._is_current(epoch):
                state.is_generating = False

    async def change_palette(self, palette: ColorPalette) -> None:
        """팔레트 교체 후 이미지 재생성. 이전 이미지는 즉시 제거"""
        state = self.state
        if state.plan is None:
            return
        if state.is_busy:
            raise OperationInProgressError("change_palette")

        epoch = self._epoch
        palette = palette.model_copy()

        state.generated_image = None
        state.error = None
        state.plan.wall_color = palette
        state.is_regenerating = True

        try:
            image_bytes = await self.service.generate_redesigned_image(state.plan, state.style, palette)
            if self._is_current(epoch):
                state.generated_image = to_data_uri(image_bytes)
        except DesignAssistantError as e:
            logger.warning(f"[{self.session_id}] Recolor failed: {e}")
            if self._is_current(epoch):
                state.error = RECOLOR_FAILURE_MESSAGE
        except Exception as e:
            logger.error(f"[{self.session_id}] Unexpected recolor error: {e}", exc_info=True)
            if self._is_current(epoch):
                state.error = UNEXPECTED_FAILURE_MESSAGE
        finally:
            if self._is_current(epoch):
                state.is_regenerating = False

    async def request_more_palettes(self) -> None:
        state = self.state
        if state.plan is None:
            return
        if state.is_busy:
            raise OperationInProgressError("request_more_palettes")

        epoch = self._epoch
        state.error = None
        state.is_fetching_palettes = True

        try:
            new_palettes = await self.service.generate_more_palettes(state.plan, state.style)
            if self._is_current(epoch):
                before = len(state.plan.alternative_palettes)
                state.plan.alternative_palettes = merge_palettes(state.plan.alternative_palettes, new_palettes)
                logger.info(
                    f"[{self.session_id}] Added {len(state.plan.alternative_palettes) - before} "
                    f"of {len(new_palettes)} palettes"
                )
        except DesignAssistantError as e:
            logger.warning(f"[{self.session_id}] Palette fetch failed: {e}")
            if self._is_current(epoch):
                state.error = PALETTES_FAILURE_MESSAGE
        except Exception as e:
            logger.error(f"[{self.session_id}] Unexpected palette error: {e}", exc_info=True)
            if self._is_current(epoch):
                state.error = UNEXPECTED_FAILURE_MESSAGE
        finally:
            if self._is_current(epoch):
                state.is_fetching_palettes = False

    def reset(self) -> None:
        """진행 중인 요청과 무관하게 초기 상태로. 진행 중 요청 결과는 버려짐"""
        self._epoch += 1
        self.state = initial_state()
        logger.info(f"[{self.session_id}] Session reset")


class SessionStore:
    """메모리 세션 저장소

    최근 사용 순서(LRU)로 보관하고, 유휴 시간이 TTL을 넘거나
    개수가 max_sessions를 넘으면 오래된 세션부터 제거한다.
    제거된 세션의 진행 중 요청 결과는 버려진다.
    """

    def __init__(
        self,
        max_sessions: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_sessions = max_sessions if max_sessions is not None else settings.max_sessions
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.session_ttl_minutes * 60
        self._clock = clock
        self._sessions: "OrderedDict[str, DesignSession]" = OrderedDict()
        self._last_seen = {}

    def _touch(self, session_id: str) -> None:
        self._sessions.move_to_end(session_id)
        self._last_seen[session_id] = self._clock()

    def _drop(self, session_id: str, reason: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        logger.info(f"Session evicted ({reason}): {session_id}")

    def _evict(self) -> None:
        deadline = self._clock() - self.ttl_seconds
        for session_id in [sid for sid, seen in self._last_seen.items() if seen < deadline]:
            self._drop(session_id, "idle")
        while len(self._sessions) > self.max_sessions:
            oldest = next(iter(self._sessions))
            self._drop(oldest, "capacity")

    def create(self) -> DesignSession:
        session = DesignSession(uuid.uuid4().hex)
        self._sessions[session.session_id] = session
        self._touch(session.session_id)
        self._evict()
        logger.info(f"Session created: {session.session_id}")
        return session

    def find(self, session_id: Optional[str]) -> Optional[DesignSession]:
        """살아 있는 세션이면 사용 시각을 갱신해서 반환, 없으면 None"""
        self._evict()
        if not session_id or session_id not in self._sessions:
            return None
        self._touch(session_id)
        return self._sessions[session_id]

    def get(self, session_id: str) -> DesignSession:
        """없는 세션이면 KeyError"""
        session = self.find(session_id)
        if session is None:
            raise KeyError(session_id)
        return session

    def get_or_create(self, session_id: Optional[str]) -> DesignSession:
        return self.find(session_id) or self.create()

    def clear(self) -> None:
        self._sessions.clear()
        self._last_seen.clear()

    def __len__(self) -> int:
        return len(self._sessions)


# 싱글톤 인스턴스
_session_store = None

def get_session_store() -> SessionStore:
    """SessionStore 인스턴스 가져오기"""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store

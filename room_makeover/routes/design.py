from fastapi import APIRouter, UploadFile, File, HTTPException
import os
from typing import List

from ..models.schemas import (
    ColorPalette,
    DimensionsRequest,
    SessionView,
    StyleOption,
    StyleSelection,
)
from ..exceptions import OperationInProgressError, ValidationError
from ..services.design_session import DesignSession, get_session_store
from ..styles import STYLE_OPTIONS
from ..config import settings
from ..utils.logger import logger

router = APIRouter(prefix="/api", tags=["design"])


async def read_upload(file: UploadFile) -> bytes:
    """업로드 파일 읽기 (확장자 + 크기 제한 검증)"""
    file_ext = os.path.splitext(file.filename or "")[1].lower()
    if file_ext not in settings.allowed_extensions:
        logger.warning(f"Invalid file extension: {file_ext}")
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type. Allowed types: {', '.join(settings.allowed_extensions)}"
        )

    # 파일 크기 제한 (청크로 읽으면서 검증)
    max_size = settings.max_upload_size_mb * 1024 * 1024
    content = bytearray()
    chunk_size = 1024 * 1024  # 1MB chunks

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        content.extend(chunk)
        if len(content) > max_size:
            logger.warning(f"File too large: {len(content)} bytes")
            raise HTTPException(
                status_code=413,
                detail=f"File is too large. The maximum size is {settings.max_upload_size_mb}MB."
            )

    return bytes(content)


def _get_session(session_id: str) -> DesignSession:
    try:
        return get_session_store().get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found.")


def _to_http_error(e: Exception, action: str) -> HTTPException:
    """도메인 예외 → HTTP 상태 코드"""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, OperationInProgressError):
        return HTTPException(status_code=409, detail=str(e))
    logger.error(f"{action} failed: {str(e)}", exc_info=True)
    return HTTPException(status_code=500, detail=f"{action} failed: {str(e)}")


@router.get("/styles", response_model=List[StyleOption])
async def get_styles():
    """사용 가능한 인테리어 스타일 목록 반환"""
    return STYLE_OPTIONS


@router.post("/sessions", response_model=SessionView, status_code=201)
async def create_session():
    """새 디자인 세션 생성"""
    return get_session_store().create().view()


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: str):
    """세션 상태 조회"""
    return _get_session(session_id).view()


@router.post("/sessions/{session_id}/image", response_model=SessionView)
async def upload_image(session_id: str, file: UploadFile = File(...)):
    """방 사진 업로드"""
    session = _get_session(session_id)
    try:
        logger.info(f"[{session_id}] Upload requested: {file.filename}")
        content = await read_upload(file)
        session.upload_image(content)
        return session.view()

    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "Upload")


@router.put("/sessions/{session_id}/style", response_model=SessionView)
async def select_style(session_id: str, request: StyleSelection):
    """스타일 선택"""
    session = _get_session(session_id)
    try:
        session.select_style(request.style)
        return session.view()
    except Exception as e:
        raise _to_http_error(e, "Style selection")


@router.put("/sessions/{session_id}/dimensions", response_model=SessionView)
async def set_dimensions(session_id: str, request: DimensionsRequest):
    """방 크기 입력 (선택)"""
    session = _get_session(session_id)
    try:
        session.set_dimensions(request.width, request.length, request.unit)
        return session.view()
    except Exception as e:
        raise _to_http_error(e, "Setting dimensions")


@router.post("/sessions/{session_id}/generate", response_model=SessionView)
async def generate_design(session_id: str):
    """디자인 플랜 + 리디자인 이미지 생성

    AI 실패는 세션 error 필드로 전달되고 200으로 응답한다.
    """
    session = _get_session(session_id)
    try:
        await session.generate()
        return session.view()
    except Exception as e:
        raise _to_http_error(e, "Design generation")


@router.post("/sessions/{session_id}/palette", response_model=SessionView)
async def change_palette(session_id: str, palette: ColorPalette):
    """컬러 팔레트 교체 후 이미지 재생성"""
    session = _get_session(session_id)
    try:
        await session.change_palette(palette)
        return session.view()
    except Exception as e:
        raise _to_http_error(e, "Palette change")


@router.post("/sessions/{session_id}/palettes", response_model=SessionView)
async def request_more_palettes(session_id: str):
    """새 대안 팔레트 요청"""
    session = _get_session(session_id)
    try:
        await session.request_more_palettes()
        return session.view()
    except Exception as e:
        raise _to_http_error(e, "Palette suggestion")


@router.post("/sessions/{session_id}/reset", response_model=SessionView)
async def reset_session(session_id: str):
    """새 프로젝트 시작"""
    session = _get_session(session_id)
    session.reset()
    return session.view()

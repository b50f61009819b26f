"""HTML 페이지 (서버 렌더링)

폼 요청마다 세션 인텐트를 호출하고 홈으로 리다이렉트한다.
검증/AI 오류는 세션 error 필드에 담겨 다음 렌더링에 표시된다.
"""
from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from typing import Optional

from ..config import settings
from ..exceptions import OperationInProgressError, ValidationError
from ..models.schemas import ColorPalette
from ..services.design_session import DesignSession, get_session_store
from ..styles import STYLE_OPTIONS
from ..utils.logger import logger
from .design import read_upload

BASE_DIR = Path(__file__).resolve().parent.parent.parent
TEMPLATES_DIR = BASE_DIR / "templates"

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def format_money(value: float) -> str:
    return f"{value:,.0f}"


templates.env.filters["money"] = format_money


def _current_session(request: Request) -> DesignSession:
    """인텐트용 세션. 쿠키가 없거나 만료됐으면 새로 만든다"""
    session_id = request.cookies.get(settings.session_cookie_name)
    return get_session_store().get_or_create(session_id)


def _existing_session(request: Request) -> Optional[DesignSession]:
    return get_session_store().find(request.cookies.get(settings.session_cookie_name))


def _back_home(session: DesignSession) -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(settings.session_cookie_name, session.session_id, httponly=True, samesite="lax")
    return response


@router.get("/")
async def home(request: Request):
    """홈페이지. 페이지 조회만으로는 세션을 저장하지 않는다"""
    session = _existing_session(request)
    # 저장되지 않는 빈 세션으로 초기 화면만 그린다
    view = session.view() if session is not None else DesignSession("").view()
    response = templates.TemplateResponse(
        request,
        "index.html",
        {
            "state": view,
            "styles": STYLE_OPTIONS,
        },
    )
    if session is not None:
        response.set_cookie(settings.session_cookie_name, session.session_id, httponly=True, samesite="lax")
    return response


@router.post("/generate")
async def generate(
    request: Request,
    style: str = Form(...),
    width: str = Form(""),
    length: str = Form(""),
    unit: str = Form("ft"),
    file: Optional[UploadFile] = File(None),
):
    """업로드 → 스타일 → 크기 → 생성을 순서대로 처리"""
    session = _current_session(request)
    try:
        # 진행 중이면 입력도 바꾸지 않는다
        if session.state.is_busy:
            raise OperationInProgressError("generate")
        if file is not None and file.filename:
            session.upload_image(await read_upload(file))
        session.select_style(style)
        session.set_dimensions(width, length, unit)
        await session.generate()
    except HTTPException as e:
        session.reject_upload(str(e.detail))
    except (ValidationError, OperationInProgressError) as e:
        logger.info(f"[{session.session_id}] Generate rejected: {e}")
    return _back_home(session)


@router.post("/palette")
async def change_palette(request: Request, primary: str = Form(...), accent: str = Form(...)):
    session = _current_session(request)
    try:
        await session.change_palette(ColorPalette(primary=primary, accent=accent))
    except OperationInProgressError as e:
        logger.info(f"[{session.session_id}] Palette change rejected: {e}")
    return _back_home(session)


@router.post("/palettes")
async def request_more_palettes(request: Request):
    session = _current_session(request)
    try:
        await session.request_more_palettes()
    except OperationInProgressError as e:
        logger.info(f"[{session.session_id}] Palette request rejected: {e}")
    return _back_home(session)


@router.post("/reset")
async def reset(request: Request):
    """새 프로젝트 시작"""
    session = _existing_session(request)
    if session is None:
        return RedirectResponse(url="/", status_code=303)
    session.reset()
    return _back_home(session)

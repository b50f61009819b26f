"""애플리케이션 설정"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """환경변수 기반 설정"""

    # API Keys
    gemini_api_key: str

    # Application
    app_name: str = "AI Interior Design Assistant"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # File Upload
    max_upload_size_mb: int = 10
    allowed_extensions: List[str] = [".jpg", ".jpeg", ".png", ".webp"]

    # Gemini / Imagen API
    gemini_plan_model: str = "gemini-2.5-flash"  # 디자인 플랜, 팔레트 (JSON mode)
    gemini_image_model: str = "imagen-3.0-generate-002"  # 리디자인 렌더링
    plan_temperature: float = 0.7
    palette_temperature: float = 0.8
    image_aspect_ratio: str = "16:9"

    # Session
    session_cookie_name: str = "design_session"
    max_sessions: int = 200  # 초과 시 가장 오래 사용하지 않은 세션부터 제거
    session_ttl_minutes: int = 60

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()

"""이미지 유틸리티"""
import base64
from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

# Pillow 포맷명 → MIME 타입
_FORMAT_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}


def inspect_image(content: bytes) -> Tuple[str, Tuple[int, int]]:
    """업로드된 바이트가 지원되는 이미지인지 확인하고 (mime_type, size) 반환"""
    if not content:
        raise ValueError("empty image data")
    try:
        with Image.open(BytesIO(content)) as image:
            image.verify()
            image_format = image.format
            size = image.size
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError(f"not a readable image: {e}") from e

    mime_type = _FORMAT_MIME_TYPES.get(image_format or "")
    if mime_type is None:
        raise ValueError(f"unsupported image format: {image_format}")
    return mime_type, size


def to_data_uri(image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    """브라우저 표시용 data URI"""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"

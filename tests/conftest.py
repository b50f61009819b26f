"""
Pytest configuration and fixtures for the design assistant tests.
"""
import io
import os

# Settings()는 import 시점에 API 키를 요구한다
os.environ.setdefault("GEMINI_API_KEY", "test-key")

import pytest
from unittest.mock import AsyncMock, MagicMock
from PIL import Image

from room_makeover.models.schemas import ColorPalette, DesignPlan
from room_makeover.services.design_session import DesignSession, get_session_store


def _image_bytes(fmt: str) -> bytes:
    img = Image.new("RGB", (100, 100), color="beige")
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def sample_jpeg_bytes():
    """Raw JPEG bytes for upload tests."""
    return _image_bytes("JPEG")


@pytest.fixture
def sample_png_bytes():
    return _image_bytes("PNG")


@pytest.fixture
def plan_payload():
    """A design plan as the model returns it (parsed JSON)."""
    return {
        "analysis": "A bright room with good natural light but a cluttered layout.",
        "wall_color": {"primary": "Soft Off-White", "accent": "Charcoal Gray"},
        "lighting": "An arched floor lamp and recessed ceiling lights",
        "flooring": "Light oak hardwood floors",
        "furniture_suggestions": [
            {
                "name": "Plush Sectional Sofa",
                "description": "Gray performance fabric with low arms",
                "placement": "Against the longest wall",
                "estimated_price": 1800,
            },
            {
                "name": "Round Oak Coffee Table",
                "description": "Solid oak with a matte finish",
                "placement": "Centered in front of the sofa",
                "estimated_price": 450,
            },
            {
                "name": "Wool Area Rug",
                "description": "Neutral hand-woven wool",
                "placement": "Under the seating area",
                "estimated_price": 0,
            },
        ],
        "estimated_cost": {"min": 3000, "max": 5500, "currency": "USD"},
        "alternative_palettes": [
            {"primary": "Sage Green", "accent": "Terracotta"},
            {"primary": "Warm Beige", "accent": "Navy Blue"},
            {"primary": "Pale Blush", "accent": "Deep Olive"},
        ],
    }


@pytest.fixture
def sample_plan(plan_payload):
    return DesignPlan.model_validate(plan_payload)


@pytest.fixture
def rendered_image_bytes():
    return b"\xff\xd8\xff\xe0fake-jpeg-bytes"


@pytest.fixture
def mock_service(sample_plan, rendered_image_bytes):
    """GeminiService 경계 목(mock)."""
    service = MagicMock()
    service.generate_design_plan = AsyncMock(side_effect=lambda *a, **kw: sample_plan.model_copy(deep=True))
    service.generate_redesigned_image = AsyncMock(return_value=rendered_image_bytes)
    service.generate_more_palettes = AsyncMock(return_value=[
        ColorPalette(primary="Sky Blue", accent="Sunflower Yellow"),
        ColorPalette(primary="Ivory", accent="Emerald"),
        ColorPalette(primary="Dove Gray", accent="Burnt Orange"),
    ])
    return service


@pytest.fixture
def session(mock_service):
    return DesignSession("test-session", service=mock_service)


@pytest.fixture
def uploaded_session(session, sample_jpeg_bytes):
    session.upload_image(sample_jpeg_bytes)
    return session


@pytest.fixture(autouse=True)
def clear_session_store():
    store = get_session_store()
    store.clear()
    yield
    store.clear()

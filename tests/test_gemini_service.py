"""
Tests for GeminiService at the google-genai client boundary.

The genai.Client is replaced with a MagicMock so no request leaves the process;
we assert on the arguments the SDK receives and on how responses are decoded.
"""
import json
from unittest.mock import MagicMock

import pytest
from google.genai import types

from room_makeover.exceptions import ServiceError, ValidationError
from room_makeover.models.schemas import ColorPalette, RoomDimensions
from room_makeover.services.gemini_service import (
    GeminiService,
    decode_design_plan,
    decode_palettes,
)
from room_makeover.services.prompts import DESIGN_PLAN_SCHEMA, MORE_PALETTES_SCHEMA


@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def service(mock_client):
    return GeminiService(client=mock_client)


def _text_response(payload):
    response = MagicMock()
    response.text = payload if isinstance(payload, str) else json.dumps(payload)
    return response


def _images_response(*images):
    response = MagicMock()
    generated = []
    for data in images:
        item = MagicMock()
        item.image.image_bytes = data
        generated.append(item)
    response.generated_images = generated
    return response


class TestGenerateDesignPlan:

    @pytest.mark.asyncio
    async def test_returns_plan_and_sends_image_with_schema(self, service, mock_client, plan_payload, sample_jpeg_bytes):
        mock_client.models.generate_content.return_value = _text_response(plan_payload)

        plan = await service.generate_design_plan(sample_jpeg_bytes, "image/jpeg", "Modern")

        assert plan.wall_color == ColorPalette(primary="Soft Off-White", accent="Charcoal Gray")
        assert len(plan.furniture_suggestions) == 3
        assert len(plan.alternative_palettes) == 3

        kwargs = mock_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        image_part, prompt = kwargs["contents"]
        assert isinstance(image_part, types.Part)
        assert image_part.inline_data.data == sample_jpeg_bytes
        assert image_part.inline_data.mime_type == "image/jpeg"
        assert '"Modern" style' in prompt
        assert kwargs["config"].response_mime_type == "application/json"
        assert kwargs["config"].response_schema == DESIGN_PLAN_SCHEMA
        assert kwargs["config"].temperature == 0.7

    @pytest.mark.asyncio
    async def test_dimensions_reach_prompt(self, service, mock_client, plan_payload, sample_jpeg_bytes):
        mock_client.models.generate_content.return_value = _text_response(plan_payload)

        await service.generate_design_plan(
            sample_jpeg_bytes, "image/jpeg", "Modern", RoomDimensions(width="12", length="15")
        )

        prompt = mock_client.models.generate_content.call_args.kwargs["contents"][1]
        assert "12 feet wide by 15 feet long" in prompt

    @pytest.mark.asyncio
    async def test_strips_markdown_fence(self, service, mock_client, plan_payload, sample_jpeg_bytes):
        mock_client.models.generate_content.return_value = _text_response(
            "```json\n" + json.dumps(plan_payload) + "\n```"
        )
        plan = await service.generate_design_plan(sample_jpeg_bytes, "image/jpeg", "Modern")
        assert plan.lighting == plan_payload["lighting"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["furniture_suggestions", "estimated_cost", "alternative_palettes"])
    async def test_missing_required_field_is_validation_error(self, service, mock_client, plan_payload, sample_jpeg_bytes, field):
        del plan_payload[field]
        mock_client.models.generate_content.return_value = _text_response(plan_payload)

        with pytest.raises(ValidationError, match=field):
            await service.generate_design_plan(sample_jpeg_bytes, "image/jpeg", "Modern")

    @pytest.mark.asyncio
    async def test_remote_failure_is_service_error(self, service, mock_client, sample_jpeg_bytes):
        mock_client.models.generate_content.side_effect = RuntimeError("503 UNAVAILABLE")

        with pytest.raises(ServiceError, match="503 UNAVAILABLE"):
            await service.generate_design_plan(sample_jpeg_bytes, "image/jpeg", "Modern")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["not json at all", "", None])
    async def test_unparseable_response_is_service_error(self, service, mock_client, sample_jpeg_bytes, text):
        response = MagicMock()
        response.text = text
        mock_client.models.generate_content.return_value = response

        with pytest.raises(ServiceError):
            await service.generate_design_plan(sample_jpeg_bytes, "image/jpeg", "Modern")


class TestDecodeDesignPlan:

    def test_non_object_is_service_error(self):
        with pytest.raises(ServiceError):
            decode_design_plan(["not", "a", "plan"])

    def test_negative_price_is_validation_error(self, plan_payload):
        plan_payload["furniture_suggestions"][0]["estimated_price"] = -10
        with pytest.raises(ValidationError):
            decode_design_plan(plan_payload)

    def test_missing_nested_field_is_validation_error(self, plan_payload):
        del plan_payload["wall_color"]["accent"]
        with pytest.raises(ValidationError):
            decode_design_plan(plan_payload)

    def test_inverted_cost_range_is_accepted(self, plan_payload):
        plan_payload["estimated_cost"] = {"min": 9000, "max": 2000, "currency": "USD"}
        plan = decode_design_plan(plan_payload)
        assert plan.estimated_cost.min == 9000

    def test_empty_lists_are_accepted(self, plan_payload):
        plan_payload["alternative_palettes"] = []
        plan_payload["furniture_suggestions"] = []
        plan = decode_design_plan(plan_payload)
        assert plan.alternative_palettes == []
        assert plan.furniture_suggestions == []

    def test_null_list_is_validation_error(self, plan_payload):
        plan_payload["alternative_palettes"] = None
        with pytest.raises(ValidationError, match="alternative_palettes"):
            decode_design_plan(plan_payload)


class TestGenerateRedesignedImage:

    @pytest.mark.asyncio
    async def test_returns_image_bytes(self, service, mock_client, sample_plan):
        mock_client.models.generate_images.return_value = _images_response(b"jpeg-bytes")

        result = await service.generate_redesigned_image(sample_plan, "Modern")

        assert result == b"jpeg-bytes"
        kwargs = mock_client.models.generate_images.call_args.kwargs
        assert kwargs["model"] == "imagen-3.0-generate-002"
        assert "Soft Off-White" in kwargs["prompt"]
        config = kwargs["config"]
        assert config.number_of_images == 1
        assert config.output_mime_type == "image/jpeg"
        assert config.aspect_ratio == "16:9"

    @pytest.mark.asyncio
    async def test_override_palette_in_prompt(self, service, mock_client, sample_plan):
        mock_client.models.generate_images.return_value = _images_response(b"jpeg-bytes")

        await service.generate_redesigned_image(
            sample_plan, "Modern", ColorPalette(primary="Sage Green", accent="Terracotta")
        )

        prompt = mock_client.models.generate_images.call_args.kwargs["prompt"]
        assert "Sage Green" in prompt and "Terracotta" in prompt

    @pytest.mark.asyncio
    async def test_zero_images_is_service_error(self, service, mock_client, sample_plan):
        mock_client.models.generate_images.return_value = _images_response()

        with pytest.raises(ServiceError, match="did not return any images"):
            await service.generate_redesigned_image(sample_plan, "Modern")

    @pytest.mark.asyncio
    async def test_remote_failure_is_service_error(self, service, mock_client, sample_plan):
        mock_client.models.generate_images.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(ServiceError, match="quota exceeded"):
            await service.generate_redesigned_image(sample_plan, "Modern")


class TestGenerateMorePalettes:

    @pytest.mark.asyncio
    async def test_returns_palettes(self, service, mock_client, sample_plan):
        mock_client.models.generate_content.return_value = _text_response([
            {"primary": "Sky Blue", "accent": "Sunflower Yellow"},
            {"primary": "Ivory", "accent": "Emerald"},
            {"primary": "Dove Gray", "accent": "Burnt Orange"},
        ])

        palettes = await service.generate_more_palettes(sample_plan, "Modern")

        assert palettes[0] == ColorPalette(primary="Sky Blue", accent="Sunflower Yellow")
        assert len(palettes) == 3
        kwargs = mock_client.models.generate_content.call_args.kwargs
        assert kwargs["config"].response_schema == MORE_PALETTES_SCHEMA
        assert kwargs["config"].temperature == 0.8
        assert "Soft Off-White & Charcoal Gray" in kwargs["contents"][0]

    @pytest.mark.asyncio
    async def test_schema_violation_is_service_error(self, service, mock_client, sample_plan):
        mock_client.models.generate_content.return_value = _text_response([{"primary": "Sky Blue"}])

        with pytest.raises(ServiceError):
            await service.generate_more_palettes(sample_plan, "Modern")

    @pytest.mark.asyncio
    async def test_remote_failure_is_service_error(self, service, mock_client, sample_plan):
        mock_client.models.generate_content.side_effect = RuntimeError("boom")

        with pytest.raises(ServiceError, match="boom"):
            await service.generate_more_palettes(sample_plan, "Modern")


class TestDecodePalettes:

    def test_keeps_at_most_three(self):
        payload = [{"primary": f"Color {i}", "accent": "White"} for i in range(5)]
        assert [p.primary for p in decode_palettes(payload)] == ["Color 0", "Color 1", "Color 2"]

    def test_object_instead_of_array_is_service_error(self):
        with pytest.raises(ServiceError):
            decode_palettes({"primary": "Sky Blue", "accent": "Gold"})

"""Integration tests: edit service -> orchestrator -> real providers over a mocked network."""

import json

import pytest

from models.image_generation import Hotspot
from services.edit_service import PhotoEditService
from services.errors import FallbackExhausted
from services.image_generation_service import FallbackOrchestrator
from services.providers.openrouter import OpenRouterProvider
from services.providers.replicate import ReplicateProvider
from utils.config import EnvCredentials

SUBMIT_URL = "https://api.replicate.com/v1/models/google/nano-banana/predictions"
POLL_URL = "https://api.replicate.com/v1/predictions/abc"
CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"
FALLBACK_IMAGE = "data:image/png;base64,ZmFsbGJhY2s="


def _build(remote, credentials, recording_sleep, replicate_settings, openrouter_settings):
    client = remote.client()
    primary = ReplicateProvider(
        credentials=credentials, settings=replicate_settings, client=client, sleep=recording_sleep
    )
    fallback = OpenRouterProvider(credentials=credentials, settings=openrouter_settings, client=client)
    return FallbackOrchestrator(primary, fallback)


@pytest.fixture
def build(remote, recording_sleep, replicate_settings, openrouter_settings):
    def _factory(credentials):
        return _build(remote, credentials, recording_sleep, replicate_settings, openrouter_settings)

    return _factory


class TestGenerationFlow:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_polling_success_never_touches_fallback(self, build, credentials, remote, png_bytes):
        remote.add("POST", SUBMIT_URL, {"json": {"status": "processing", "urls": {"get": POLL_URL}}})
        remote.add(
            "GET",
            POLL_URL,
            {"json": {"status": "processing"}},
            {"json": {"status": "succeeded", "output": "https://cdn.x/out.jpg"}},
        )
        remote.add(
            "GET", "https://cdn.x/out.jpg", {"content": b"jpeg", "headers": {"content-type": "image/jpeg"}}
        )
        service = PhotoEditService(build(credentials))

        result = await service.generate_edited_image(png_bytes, "removeBlemish", Hotspot(0, 0))

        assert result.provider == "Replicate"
        assert result.image.data == "data:image/jpeg;base64,anBlZw=="
        assert remote.count("POST", SUBMIT_URL) == 1
        assert remote.count("GET", POLL_URL) == 2
        assert remote.count("GET", "https://cdn.x/out.jpg") == 1
        assert remote.count("POST", CHAT_URL) == 0

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_poll_exhaustion_falls_back(self, build, credentials, remote, recording_sleep, png_bytes):
        remote.add("POST", SUBMIT_URL, {"json": {"status": "processing", "urls": {"get": POLL_URL}}})
        remote.add("GET", POLL_URL, {"json": {"status": "processing"}})
        remote.add(
            "POST",
            CHAT_URL,
            {"json": {"choices": [{"message": {"content": FALLBACK_IMAGE}, "finish_reason": "stop"}]}},
        )
        service = PhotoEditService(build(credentials))

        result = await service.generate_filtered_image(png_bytes, "noir")

        assert result.provider == "OpenRouter"
        assert result.image.data == FALLBACK_IMAGE
        assert remote.count("GET", POLL_URL) == 60
        assert len(recording_sleep.calls) == 60
        chat_body = json.loads(remote.requests[-1].content)
        assert chat_body["messages"][0]["content"][1]["image_url"]["url"].startswith(
            "data:image/png;base64,"
        )

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_missing_primary_token_goes_straight_to_fallback(self, build, remote, png_bytes):
        remote.add(
            "POST",
            CHAT_URL,
            {"json": {"choices": [{"message": {"content": FALLBACK_IMAGE}}]}},
        )
        orchestrator = build(EnvCredentials({"OPENROUTER_API_KEY": "sk-or-test"}))

        result = await PhotoEditService(orchestrator).generate_adjusted_image(png_bytes, "warmer")

        assert result.provider == "OpenRouter"
        assert remote.count("POST", SUBMIT_URL) == 0

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_both_providers_fail(self, build, credentials, remote, png_bytes):
        remote.add("POST", SUBMIT_URL, {"json": {"status": "failed", "error": "model crashed"}})
        remote.add(
            "POST",
            CHAT_URL,
            {"json": {"choices": [{"message": {"content": "Sorry, I can only reply with text."}}]}},
        )
        service = PhotoEditService(build(credentials))

        with pytest.raises(FallbackExhausted) as exc_info:
            await service.generate_edited_image(png_bytes, "add a hat", Hotspot(5, 5))

        message = str(exc_info.value)
        assert "Replicate" in message and "model crashed" in message
        assert "OpenRouter" in message
        assert "Response for edit does not contain valid image data" in message
        assert "Sorry, I can only reply with text." in message

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_no_credentials_anywhere(self, build, no_credentials, remote, png_bytes):
        service = PhotoEditService(build(no_credentials))

        with pytest.raises(FallbackExhausted) as exc_info:
            await service.generate_filtered_image(png_bytes, "noir")

        assert "REPLICATE_API_TOKEN" in str(exc_info.value)
        assert "OPENROUTER_API_KEY" in str(exc_info.value)
        assert remote.count() == 0

"""API tests for the photo editing routes (FastAPI via httpx ASGITransport)."""

import base64

import pytest
from httpx import ASGITransport, AsyncClient

from api.dependencies import get_edit_service, get_orchestrator
from api.server import create_app
from models.image_generation import GenerationRequest, ImagePayload
from services.edit_service import PhotoEditService
from services.image_generation_service import FallbackOrchestrator
from services.providers.base import ImageProvider

RESULT_IMAGE = ImagePayload("data:image/jpeg;base64,cmVzdWx0")


class ScriptedProvider(ImageProvider):
    def __init__(self, name, result=None, error=None):
        self._name = name
        self.result = result
        self.error = error
        self.requests: list[GenerationRequest] = []

    @property
    def name(self) -> str:
        return self._name

    async def generate(self, request: GenerationRequest) -> ImagePayload:
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


def _app_with(primary, fallback):
    app = create_app()
    orchestrator = FallbackOrchestrator(primary, fallback)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_edit_service] = lambda: PhotoEditService(orchestrator)
    return app


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def data_url(png_bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode()


class TestImageRoutes:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_edit_returns_generated_image(self, data_url):
        primary = ScriptedProvider("Replicate", result=RESULT_IMAGE)
        app = _app_with(primary, ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            response = await client.post(
                "/api/image/edit", json={"image": data_url, "prompt": "remove mole", "x": 3, "y": 4}
            )

        assert response.status_code == 200
        body = response.json()
        assert body["image"] == RESULT_IMAGE.data
        assert body["provider"] == "Replicate"
        assert body["context"] == "edit"
        assert "(x: 3, y: 4)" in primary.requests[0].prompt

    @pytest.mark.integration
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path,context", [("/api/image/filter", "filter"), ("/api/image/adjust", "adjustment")])
    async def test_filter_and_adjust_contexts(self, data_url, path, context):
        primary = ScriptedProvider("Replicate", result=RESULT_IMAGE)
        app = _app_with(primary, ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            response = await client.post(path, json={"image": data_url, "prompt": "moody"})

        assert response.status_code == 200
        assert response.json()["context"] == context

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_fallback_result_does_not_leak_primary_error(self, data_url):
        app = _app_with(
            ScriptedProvider("Replicate", error=RuntimeError("secret-primary-detail")),
            ScriptedProvider("OpenRouter", result=RESULT_IMAGE),
        )

        async with _client(app) as client:
            response = await client.post("/api/image/filter", json={"image": data_url, "prompt": "noir"})

        assert response.status_code == 200
        assert response.json()["provider"] == "OpenRouter"
        assert "secret-primary-detail" not in response.text

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_exhausted_maps_to_502(self, data_url):
        app = _app_with(
            ScriptedProvider("Replicate", error=RuntimeError("primary down")),
            ScriptedProvider("OpenRouter", error=RuntimeError("fallback down")),
        )

        async with _client(app) as client:
            response = await client.post("/api/image/adjust", json={"image": data_url, "prompt": "x"})

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert "primary down" in detail and "fallback down" in detail

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_invalid_image_is_400(self):
        app = _app_with(ScriptedProvider("Replicate", result=RESULT_IMAGE), ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            response = await client.post(
                "/api/image/filter", json={"image": "https://example.com/a.png", "prompt": "x"}
            )

        assert response.status_code == 400
        assert "Invalid image" in response.json()["detail"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_blank_prompt_is_400(self, data_url):
        app = _app_with(ScriptedProvider("Replicate", result=RESULT_IMAGE), ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            response = await client.post("/api/image/filter", json={"image": data_url, "prompt": "  "})

        assert response.status_code == 400

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_user_prompt_is_forwarded_untouched(self, data_url):
        primary = ScriptedProvider("Replicate", result=RESULT_IMAGE)
        app = _app_with(primary, ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            response = await client.post(
                "/api/image/filter", json={"image": data_url, "prompt": "  film grain \n"}
            )

        assert response.status_code == 200
        assert 'Filter Request: "  film grain \n"' in primary.requests[0].prompt

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_chat_with_references(self, data_url):
        primary = ScriptedProvider("Replicate", result=RESULT_IMAGE)
        app = _app_with(primary, ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            response = await client.post(
                "/api/image/chat",
                json={"prompt": "a dog in this style", "reference_images": [data_url, data_url]},
            )

        assert response.status_code == 200
        assert response.json()["context"] == "chat"
        assert len(primary.requests[0].images) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_chat_with_too_many_references_is_400(self, data_url):
        app = _app_with(ScriptedProvider("Replicate", result=RESULT_IMAGE), ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            response = await client.post(
                "/api/image/chat", json={"prompt": "p", "reference_images": [data_url] * 4}
            )

        assert response.status_code == 400

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_status_and_health(self):
        app = _app_with(ScriptedProvider("Replicate"), ScriptedProvider("OpenRouter"))

        async with _client(app) as client:
            status = await client.get("/api/image/status")
            health = await client.get("/api/health")

        assert status.json() == {
            "primary": {"name": "Replicate", "configured": True},
            "fallback": {"name": "OpenRouter", "configured": True},
        }
        assert health.json() == {"status": "healthy"}

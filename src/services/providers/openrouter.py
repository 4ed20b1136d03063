"""OpenRouter provider - single-shot chat completion returning an image."""

import logging
import time
from typing import Optional, Sequence

import httpx

from models.image_generation import GenerationRequest, ImagePayload
from services.errors import ConfigError, ProviderError
from services.image_codec import ImageCodec
from services.providers.base import ImageProvider
from services.response_normalizer import normalize_chat_response
from utils.config import OPENROUTER_KEY_VARS, CredentialProvider, EnvCredentials, OpenRouterSettings

logger = logging.getLogger(__name__)


class OpenRouterProvider(ImageProvider):
    """Fallback provider: OpenRouter chat completions with an image-capable model."""

    def __init__(
        self,
        credentials: Optional[CredentialProvider] = None,
        settings: Optional[OpenRouterSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        codec: Optional[ImageCodec] = None,
        timeout: float = 120.0,
    ):
        self.credentials = credentials or EnvCredentials()
        self.settings = settings or OpenRouterSettings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.codec = codec or ImageCodec(self.client)

    @property
    def name(self) -> str:
        return "OpenRouter"

    def is_configured(self) -> bool:
        """Check if an OpenRouter API key (or the legacy alias) is configured."""
        return bool(self.credentials.get(*OPENROUTER_KEY_VARS))

    def _require_key(self) -> str:
        api_key = self.credentials.get(*OPENROUTER_KEY_VARS)
        if not api_key:
            raise ConfigError("OPENROUTER_API_KEY or API_KEY environment variable is required")
        return api_key

    async def generate(self, request: GenerationRequest) -> ImagePayload:
        return await self.complete(request.prompt, request.images, request.context)

    async def complete(
        self, prompt: str, images: Sequence[ImagePayload] = (), context: str = "edit"
    ) -> ImagePayload:
        """Send one chat turn (prompt + images) and return the generated image.

        Args:
            prompt: Fully built prompt text
            images: Input images; remote references are embedded first
            context: Context label used in error messages and logs

        Returns:
            The image returned by the model, as an embedded payload

        Raises:
            ConfigError: If no API key is configured (no request is sent)
            ProviderError: On HTTP failure or an invalid response body
        """
        api_key = self._require_key()

        url = f"{self.settings.api_base}/chat/completions"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": self.settings.referer,
            "X-Title": self.settings.title,
            "Content-Type": "application/json",
        }

        logger.info(f"Sending {context} request to OpenRouter ({self.settings.model})")

        start_time = time.time()

        try:
            content: list[dict] = [{"type": "text", "text": prompt}]
            for image in images:
                embedded = await self.codec.materialize(image)
                content.append({"type": "image_url", "image_url": {"url": embedded.data}})

            payload = {
                "model": self.settings.model,
                "messages": [{"role": "user", "content": content}],
            }

            response = await self.client.post(url, headers=headers, json=payload)
            if not response.is_success:
                raise ProviderError(
                    f"OpenRouter API request failed: {response.status_code} "
                    f"{response.reason_phrase} - {response.text}",
                    provider=self.name,
                    status_code=response.status_code,
                    body=response.text,
                )

            result = normalize_chat_response(response.json(), context, provider=self.name)

            generation_time_ms = int((time.time() - start_time) * 1000)
            logger.info(f"OpenRouter returned {context} image in {generation_time_ms}ms")
            return result

        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(
                f"OpenRouter image generation failed for {context}: {e}", provider=self.name
            ) from e

    async def close(self) -> None:
        """Close the codec, then the HTTP client if this provider created it."""
        await self.codec.close()
        if self._owns_client:
            await self.client.aclose()

"""Image Generation Service - Replicate first, OpenRouter as fallback."""

import logging
import time
from enum import Enum
from typing import Optional

from models.image_generation import GenerationRequest, GenerationResult, ImagePayload
from services.errors import FallbackExhausted
from services.providers.base import ImageProvider
from services.providers.openrouter import OpenRouterProvider
from services.providers.replicate import ReplicateProvider
from utils.config import (
    CredentialProvider,
    EnvCredentials,
    OpenRouterSettings,
    ReplicateSettings,
    load_config,
)
from utils.logging import current_generation_context

logger = logging.getLogger(__name__)


class OrchestrationState(str, Enum):
    """States of a single orchestrated generation."""

    TRYING_PRIMARY = "trying_primary"
    TRYING_FALLBACK = "trying_fallback"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class FallbackOrchestrator:
    """Turns a generation request into exactly one image or one aggregated failure.

    The primary provider is always tried first. The fallback provider runs only
    after the primary fails, never speculatively or in parallel. Neither
    provider is retried here; polling is the primary client's own concern.
    """

    def __init__(self, primary: ImageProvider, fallback: ImageProvider):
        self.primary = primary
        self.fallback = fallback

    async def generate(self, prompt: str, image: ImagePayload, context: str) -> ImagePayload:
        """Generate an image from a prompt and one input image.

        Args:
            prompt: Fully built prompt text (opaque here)
            image: Input image, embedded or remote
            context: Diagnostic label (edit, filter, adjustment, chat)

        Returns:
            The winning image as an embedded payload

        Raises:
            FallbackExhausted: If both providers fail
        """
        request = GenerationRequest(prompt=prompt, images=(image,), context=context)
        result = await self.generate_request(request)
        return result.image

    async def generate_request(self, request: GenerationRequest) -> GenerationResult:
        """Run the primary -> fallback state machine for a request."""
        token = current_generation_context.set(request.context)
        start_time = time.time()
        try:
            state = OrchestrationState.TRYING_PRIMARY
            logger.info(f"[{request.context}] {state.value}: {self.primary.name}")
            try:
                image = await self.primary.generate(request)
                return self._succeed(request, self.primary, image, start_time)
            except Exception as e:
                primary_error = str(e) or type(e).__name__
                logger.warning(
                    f"[{request.context}] {self.primary.name} failed, "
                    f"falling back to {self.fallback.name}: {primary_error}"
                )

            state = OrchestrationState.TRYING_FALLBACK
            logger.info(f"[{request.context}] {state.value}: {self.fallback.name}")
            try:
                image = await self.fallback.generate(request)
                return self._succeed(
                    request, self.fallback, image, start_time, primary_error=primary_error
                )
            except Exception as e:
                fallback_error = str(e) or type(e).__name__

            state = OrchestrationState.EXHAUSTED
            logger.error(
                f"[{request.context}] {state.value}: {self.primary.name}: {primary_error}; "
                f"{self.fallback.name}: {fallback_error}"
            )
            raise FallbackExhausted(
                self.primary.name, primary_error, self.fallback.name, fallback_error
            )
        finally:
            current_generation_context.reset(token)

    def _succeed(
        self,
        request: GenerationRequest,
        provider: ImageProvider,
        image: ImagePayload,
        start_time: float,
        primary_error: Optional[str] = None,
    ) -> GenerationResult:
        generation_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"[{request.context}] {OrchestrationState.SUCCESS.value}: "
            f"{provider.name} in {generation_time_ms}ms"
        )
        return GenerationResult(
            image=image,
            provider=provider.name,
            context=request.context,
            generation_time_ms=generation_time_ms,
            primary_error=primary_error,
        )

    def health(self) -> dict:
        """Report which providers have credentials configured."""
        return {
            "primary": {
                "name": self.primary.name,
                "configured": self.primary.is_configured(),
            },
            "fallback": {
                "name": self.fallback.name,
                "configured": self.fallback.is_configured(),
            },
        }

    async def close(self) -> None:
        """Close both providers."""
        await self.primary.close()
        await self.fallback.close()

    async def __aenter__(self) -> "FallbackOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def build_default_orchestrator(
    config: Optional[dict] = None,
    credentials: Optional[CredentialProvider] = None,
) -> FallbackOrchestrator:
    """Wire the Replicate -> OpenRouter orchestrator from configuration."""
    config = config or load_config()
    credentials = credentials or EnvCredentials()
    timeout = config.get("http_timeout", 120.0)

    primary = ReplicateProvider(
        credentials=credentials,
        settings=ReplicateSettings.from_config(config),
        timeout=timeout,
    )
    fallback = OpenRouterProvider(
        credentials=credentials,
        settings=OpenRouterSettings.from_config(config),
        timeout=timeout,
    )
    return FallbackOrchestrator(primary, fallback)

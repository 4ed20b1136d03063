"""Base abstraction for image generation providers."""

from abc import ABC, abstractmethod

from models.image_generation import GenerationRequest, ImagePayload


class ImageProvider(ABC):
    """Abstract base class for generation providers (Replicate, OpenRouter, ...)."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name used in logs and aggregated error messages."""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> ImagePayload:
        """Generate an image for the request.

        Args:
            request: Prompt, input images and diagnostic context label

        Returns:
            The resulting image as an embedded payload

        Raises:
            ConfigError: If the provider credential is missing
            ProviderError: For any remote, protocol or transport failure
        """

    def is_configured(self) -> bool:
        """Check if this provider has its credential configured.

        Default implementation returns True (no config required).
        """
        return True

    async def close(self) -> None:
        """Release any resources held by the provider."""

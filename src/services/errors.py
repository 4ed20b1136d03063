"""Error taxonomy for image generation."""

from typing import Optional


class ImageGenerationServiceError(Exception):
    """Error from image generation service."""

    pass


class ConfigError(ImageGenerationServiceError):
    """Required configuration (usually a credential) is missing."""

    pass


class CodecError(ImageGenerationServiceError):
    """Local image encode/decode failure."""

    pass


class FetchError(ImageGenerationServiceError):
    """Dereferencing a remote image reference returned a non-2xx response."""

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Failed to fetch image: {status_code} {reason}".rstrip())


class ProviderError(ImageGenerationServiceError):
    """A provider rejected the request, returned a malformed body, or timed out."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class FallbackExhausted(ImageGenerationServiceError):
    """Both the primary and the fallback provider failed."""

    def __init__(
        self,
        primary_name: str,
        primary_error: str,
        fallback_name: str,
        fallback_error: str,
    ):
        self.primary_name = primary_name
        self.primary_error = primary_error
        self.fallback_name = fallback_name
        self.fallback_error = fallback_error
        super().__init__(
            f"All image providers failed. "
            f"{primary_name} (primary): {primary_error}; "
            f"{fallback_name} (fallback): {fallback_error}"
        )

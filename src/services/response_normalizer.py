"""Validation of chat-completion bodies returned by the fallback provider."""

import logging
from typing import Any, Optional

from models.image_generation import IMAGE_DATA_URL_PREFIX, ImagePayload
from services.errors import ProviderError

logger = logging.getLogger(__name__)

CONTENT_PREVIEW_CHARS = 100


def _message_image_url(message: dict) -> Optional[str]:
    """Image returned out-of-band in ``message.images`` (OpenRouter image output)."""
    images = message.get("images")
    if not isinstance(images, list) or not images:
        return None
    first = images[0]
    if isinstance(first, dict):
        image_url = first.get("image_url")
        if isinstance(image_url, dict):
            return image_url.get("url")
        if isinstance(image_url, str):
            return image_url
    return None


def _fail(message: str, body: Any, provider: Optional[str]) -> ProviderError:
    logger.error(f"{message} (response: {str(body)[:500]})")
    return ProviderError(message, provider=provider)


def normalize_chat_response(
    body: Any, context: str, provider: Optional[str] = "OpenRouter"
) -> ImagePayload:
    """Validate a parsed chat-completion body and extract the generated image.

    Checks run in a fixed order so a provider-reported error is never hidden
    behind a generic shape failure.

    Args:
        body: Decoded JSON response
        context: Context label of the request (edit, filter, ...)
        provider: Provider name attached to raised errors

    Returns:
        The content as an embedded ImagePayload, verbatim

    Raises:
        ProviderError: If the body carries an error or no valid image data
    """
    if not isinstance(body, dict):
        raise _fail(f"Malformed response for {context}: expected a JSON object", body, provider)

    error = body.get("error")
    if error:
        detail = error.get("message", str(error)) if isinstance(error, dict) else str(error)
        raise _fail(f"OpenRouter API error for {context}: {detail}", body, provider)

    choices = body.get("choices")
    choice = choices[0] if isinstance(choices, list) and choices else None
    if not isinstance(choice, dict) or not choice:
        raise _fail(f"No response choices returned for {context}", body, provider)

    message = choice.get("message")
    if not isinstance(message, dict):
        message = {}
    content = message.get("content")
    if not content:
        content = _message_image_url(message)
    if not content:
        raise _fail(f"No content in response for {context}", body, provider)

    if not isinstance(content, str) or not content.startswith(IMAGE_DATA_URL_PREFIX):
        preview = str(content)[:CONTENT_PREVIEW_CHARS]
        raise _fail(
            f"Response for {context} does not contain valid image data. Content: {preview}...",
            body,
            provider,
        )

    logger.info(f"Received image data for {context}")
    return ImagePayload(content)

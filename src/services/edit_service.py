"""Photo edit service - builds editing prompts and hands them to the orchestrator."""

import logging
from typing import Optional, Sequence

from models.image_generation import (
    EditContext,
    GenerationRequest,
    GenerationResult,
    Hotspot,
)
from services.image_codec import encode_bytes
from services.image_generation_service import FallbackOrchestrator
from services.prompts import (
    PROMPT_VERSIONS,
    build_adjustment_prompt,
    build_edit_prompt,
    build_filter_prompt,
)

logger = logging.getLogger(__name__)

# Chat mode accepts at most this many reference images
MAX_REFERENCE_IMAGES = 3


class PhotoEditService:
    """Entry points for the editor: localized edit, filter, adjustment and chat."""

    def __init__(self, orchestrator: FallbackOrchestrator):
        self.orchestrator = orchestrator

    async def generate_edited_image(
        self,
        image: bytes,
        user_prompt: str,
        hotspot: Hotspot,
        mime_hint: Optional[str] = None,
    ) -> GenerationResult:
        """Perform a localized edit around a hotspot.

        Args:
            image: Original image bytes
            user_prompt: Free-text description of the desired edit
            hotspot: Pixel coordinates to focus the edit on
            mime_hint: MIME type of the image, sniffed when omitted

        Returns:
            GenerationResult whose image is an embedded data URL
        """
        logger.info(f"Starting generative edit at: ({hotspot.x}, {hotspot.y})")
        payload = encode_bytes(image, mime_hint)
        prompt = build_edit_prompt(user_prompt, hotspot.x, hotspot.y)
        return await self._run(prompt, payload, EditContext.EDIT)

    async def generate_filtered_image(
        self, image: bytes, filter_prompt: str, mime_hint: Optional[str] = None
    ) -> GenerationResult:
        """Apply a stylistic filter to the whole image."""
        logger.info(f"Starting filter generation: {filter_prompt}")
        payload = encode_bytes(image, mime_hint)
        prompt = build_filter_prompt(filter_prompt)
        return await self._run(prompt, payload, EditContext.FILTER)

    async def generate_adjusted_image(
        self, image: bytes, adjustment_prompt: str, mime_hint: Optional[str] = None
    ) -> GenerationResult:
        """Apply a photorealistic global adjustment."""
        logger.info(f"Starting global adjustment generation: {adjustment_prompt}")
        payload = encode_bytes(image, mime_hint)
        prompt = build_adjustment_prompt(adjustment_prompt)
        return await self._run(prompt, payload, EditContext.ADJUSTMENT)

    async def generate_from_chat(
        self, prompt: str, reference_images: Sequence[bytes] = ()
    ) -> GenerationResult:
        """Free-form generation from a chat message and optional reference images.

        The prompt is forwarded verbatim.

        Raises:
            ValueError: If the prompt is blank or too many reference images are given
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt is required")
        if len(reference_images) > MAX_REFERENCE_IMAGES:
            raise ValueError(
                f"At most {MAX_REFERENCE_IMAGES} reference images are supported, "
                f"got {len(reference_images)}"
            )

        images = tuple(encode_bytes(image) for image in reference_images)
        logger.info(f"Starting chat generation with {len(images)} reference image(s)")
        request = GenerationRequest(
            prompt=prompt.strip(), images=images, context=EditContext.CHAT.value
        )
        return await self.orchestrator.generate_request(request)

    async def _run(self, prompt, payload, context: EditContext) -> GenerationResult:
        logger.debug(f"Using {context.value} prompt {PROMPT_VERSIONS[context.value]}")
        request = GenerationRequest(prompt=prompt, images=(payload,), context=context.value)
        return await self.orchestrator.generate_request(request)

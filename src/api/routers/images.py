"""Photo editing routes for the Pixshop API (edit, filter, adjust, chat)."""

import logging

from api.dependencies import get_edit_service, get_orchestrator
from api.schemas import (
    ChatGenerateRequestBody,
    GeneratedImageResponse,
    ImageAdjustRequestBody,
    ImageEditRequestBody,
    ImageFilterRequestBody,
    ImageStatusResponse,
)
from fastapi import APIRouter, Depends, HTTPException
from models.image_generation import GenerationResult, Hotspot, ImagePayload
from services.edit_service import PhotoEditService
from services.errors import CodecError, FallbackExhausted
from services.image_codec import decode_data_url
from services.image_generation_service import FallbackOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Image Editing"])


def _decode_image(data_url: str, field: str = "image") -> tuple[str, bytes]:
    """Decode a request data URL, mapping codec failures to 400."""
    try:
        return decode_data_url(ImagePayload(data_url))
    except CodecError as e:
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {e}")


def _require_prompt(prompt: str) -> str:
    if not prompt or not prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")
    return prompt


def _exhausted(e: FallbackExhausted) -> HTTPException:
    logger.error(f"Image generation failed: {e}")
    return HTTPException(status_code=502, detail=str(e))


@router.get("/api/image/status", response_model=ImageStatusResponse, summary="Image provider status", description="Check which generation providers have credentials configured.")
async def get_image_status(
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
) -> dict:
    """Combined status for both providers."""
    return orchestrator.health()


@router.post("/api/image/edit", response_model=GeneratedImageResponse, summary="Localized edit", description="Edit the area around (x, y) according to the prompt.", responses={400: {"description": "Invalid parameters"}, 502: {"description": "All providers failed"}})
async def edit_image(
    request: ImageEditRequestBody,
    service: PhotoEditService = Depends(get_edit_service),
) -> dict:
    """Localized edit endpoint."""
    prompt = _require_prompt(request.prompt)
    mime_type, raw = _decode_image(request.image)
    try:
        result: GenerationResult = await service.generate_edited_image(
            raw, prompt, Hotspot(request.x, request.y), mime_hint=mime_type
        )
    except FallbackExhausted as e:
        raise _exhausted(e)
    return result.to_dict()


@router.post("/api/image/filter", response_model=GeneratedImageResponse, summary="Apply filter", description="Apply a stylistic filter to the whole image.", responses={400: {"description": "Invalid parameters"}, 502: {"description": "All providers failed"}})
async def filter_image(
    request: ImageFilterRequestBody,
    service: PhotoEditService = Depends(get_edit_service),
) -> dict:
    """Filter endpoint."""
    prompt = _require_prompt(request.prompt)
    mime_type, raw = _decode_image(request.image)
    try:
        result = await service.generate_filtered_image(raw, prompt, mime_hint=mime_type)
    except FallbackExhausted as e:
        raise _exhausted(e)
    return result.to_dict()


@router.post("/api/image/adjust", response_model=GeneratedImageResponse, summary="Global adjustment", description="Apply a photorealistic adjustment to the whole image.", responses={400: {"description": "Invalid parameters"}, 502: {"description": "All providers failed"}})
async def adjust_image(
    request: ImageAdjustRequestBody,
    service: PhotoEditService = Depends(get_edit_service),
) -> dict:
    """Global adjustment endpoint."""
    prompt = _require_prompt(request.prompt)
    mime_type, raw = _decode_image(request.image)
    try:
        result = await service.generate_adjusted_image(raw, prompt, mime_hint=mime_type)
    except FallbackExhausted as e:
        raise _exhausted(e)
    return result.to_dict()


@router.post("/api/image/chat", response_model=GeneratedImageResponse, summary="Chat generation", description="Generate an image from a chat message and up to 3 reference images.", responses={400: {"description": "Invalid parameters"}, 502: {"description": "All providers failed"}})
async def chat_generate(
    request: ChatGenerateRequestBody,
    service: PhotoEditService = Depends(get_edit_service),
) -> dict:
    """Chat generation endpoint."""
    references = [
        _decode_image(data_url, field=f"reference_images[{i}]")[1]
        for i, data_url in enumerate(request.reference_images)
    ]
    try:
        result = await service.generate_from_chat(request.prompt, references)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FallbackExhausted as e:
        raise _exhausted(e)
    return result.to_dict()

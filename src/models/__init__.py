# Data models for pixshop
from .image_generation import (
    EditContext,
    GenerationRequest,
    GenerationResult,
    Hotspot,
    ImagePayload,
    JobState,
    JobStatus,
)

__all__ = [
    "EditContext",
    "GenerationRequest",
    "GenerationResult",
    "Hotspot",
    "ImagePayload",
    "JobState",
    "JobStatus",
]

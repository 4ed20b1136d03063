"""Models for AI photo editing (Replicate primary, OpenRouter fallback)."""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

DATA_URL_PREFIX = "data:"
IMAGE_DATA_URL_PREFIX = "data:image/"


class EditContext(str, Enum):
    """Editing operations that issue generation requests (diagnostic label)."""

    EDIT = "edit"
    FILTER = "filter"
    ADJUSTMENT = "adjustment"
    CHAT = "chat"


class JobStatus(str, Enum):
    """Status of a prediction job on the polling provider."""

    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


@dataclass(frozen=True)
class ImagePayload:
    """An image either embedded inline (data URL) or referenced remotely (URL)."""

    data: str

    @classmethod
    def embedded(cls, mime_type: str, raw: bytes) -> "ImagePayload":
        """Build the ``data:<mime>;base64,<bytes>`` form."""
        encoded = base64.b64encode(raw).decode("ascii")
        return cls(f"data:{mime_type};base64,{encoded}")

    @classmethod
    def remote(cls, url: str) -> "ImagePayload":
        return cls(url)

    @property
    def is_embedded(self) -> bool:
        return self.data.startswith(DATA_URL_PREFIX)

    @property
    def mime_type(self) -> Optional[str]:
        """MIME type declared in the data URL header, None for remote payloads."""
        if not self.is_embedded:
            return None
        header = self.data[len(DATA_URL_PREFIX):].split(",", 1)[0]
        mime = header.split(";", 1)[0]
        return mime or None

    def preview(self, limit: int = 100) -> str:
        return self.data[:limit]


@dataclass(frozen=True)
class Hotspot:
    """Focal pixel coordinates for a localized edit."""

    x: int
    y: int


@dataclass(frozen=True)
class GenerationRequest:
    """A single prompt + image(s) request handed to the orchestrator."""

    prompt: str
    images: tuple[ImagePayload, ...] = ()
    context: str = EditContext.EDIT.value

    @property
    def image(self) -> Optional[ImagePayload]:
        """The primary input image, if any."""
        return self.images[0] if self.images else None


@dataclass
class JobState:
    """Snapshot of a prediction job as reported by the polling provider."""

    status: str
    output: Any = None
    error: Optional[str] = None
    poll_url: Optional[str] = None
    job_id: Optional[str] = None

    @classmethod
    def from_response(cls, body: dict) -> "JobState":
        """Parse a prediction response body (submit or poll)."""
        urls = body.get("urls") or {}
        error = body.get("error")
        return cls(
            status=str(body.get("status") or ""),
            output=body.get("output"),
            error=str(error) if error else None,
            poll_url=urls.get("get") if isinstance(urls, dict) else None,
            job_id=body.get("id"),
        )

    def output_url(self) -> Optional[str]:
        """Return the output reference: a string, or the first list element."""
        output = self.output
        if isinstance(output, str) and output:
            return output
        if isinstance(output, list) and output:
            first = output[0]
            if isinstance(first, str) and first:
                return first
        return None


@dataclass
class GenerationResult:
    """Result of an orchestrated generation, with provenance for logging."""

    image: ImagePayload
    provider: str
    context: str
    generation_time_ms: int
    # Kept for logs only, never returned to callers of the HTTP surface
    primary_error: Optional[str] = field(default=None, repr=False)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "image": self.image.data,
            "provider": self.provider,
            "context": self.context,
            "generation_time_ms": self.generation_time_ms,
        }

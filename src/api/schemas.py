"""Pydantic request/response models for the Pixshop API."""

from pydantic import BaseModel, Field

# =============================================================================
# Response Models
# =============================================================================


class RootResponse(BaseModel):
    """Root endpoint response."""

    message: str
    version: str

    model_config = {"json_schema_extra": {"examples": [{"message": "Pixshop API", "version": "1.0.0"}]}}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "healthy"}]}}


class ProviderStatusResponse(BaseModel):
    """Configuration status of one provider."""

    name: str
    configured: bool


class ImageStatusResponse(BaseModel):
    """Configuration status of the primary and fallback providers."""

    primary: ProviderStatusResponse
    fallback: ProviderStatusResponse


class GeneratedImageResponse(BaseModel):
    """A generated image and where it came from."""

    image: str = Field(description="Embedded data URL (data:<mime>;base64,...)")
    provider: str
    context: str
    generation_time_ms: int

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "image": "data:image/jpeg;base64,/9j/4AAQ...",
                    "provider": "Replicate",
                    "context": "edit",
                    "generation_time_ms": 8421,
                }
            ]
        }
    }


# =============================================================================
# Request Models
# =============================================================================


class ImageEditRequestBody(BaseModel):
    """Request body for a localized edit."""

    image: str  # base64 data URL
    prompt: str
    x: int = Field(ge=0)
    y: int = Field(ge=0)


class ImageFilterRequestBody(BaseModel):
    """Request body for applying a filter."""

    image: str  # base64 data URL
    prompt: str


class ImageAdjustRequestBody(BaseModel):
    """Request body for a global adjustment."""

    image: str  # base64 data URL
    prompt: str


class ChatGenerateRequestBody(BaseModel):
    """Request body for free-form chat generation."""

    prompt: str
    reference_images: list[str] = Field(default_factory=list)  # base64 data URLs

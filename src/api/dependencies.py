"""Service singletons and dependency injection for the Pixshop API."""

from services.edit_service import PhotoEditService
from services.image_generation_service import FallbackOrchestrator, build_default_orchestrator
from utils.config import load_config

# Service singletons
_orchestrator: FallbackOrchestrator | None = None
_edit_service: PhotoEditService | None = None


def get_orchestrator() -> FallbackOrchestrator:
    """Get or create the generation orchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_default_orchestrator(load_config())
    return _orchestrator


def get_edit_service() -> PhotoEditService:
    """Get or create the photo edit service instance."""
    global _edit_service
    if _edit_service is None:
        _edit_service = PhotoEditService(get_orchestrator())
    return _edit_service


async def shutdown_services() -> None:
    """Close HTTP clients held by the singletons."""
    global _orchestrator, _edit_service
    if _orchestrator is not None:
        await _orchestrator.close()
    _orchestrator = None
    _edit_service = None

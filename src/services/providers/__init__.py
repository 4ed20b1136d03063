"""Image generation providers."""

from services.providers.base import ImageProvider
from services.providers.openrouter import OpenRouterProvider
from services.providers.replicate import ReplicateProvider

__all__ = ["ImageProvider", "OpenRouterProvider", "ReplicateProvider"]

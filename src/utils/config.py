"""Configuration loading and validation for pixshop."""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from rich.logging import RichHandler

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")

# Credential variable names per provider (first present wins)
REPLICATE_TOKEN_VARS = ("REPLICATE_API_TOKEN",)
OPENROUTER_KEY_VARS = ("OPENROUTER_API_KEY", "API_KEY")  # API_KEY is the legacy alias


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_number(name: str, default, cast, invalid: list[str]):
    """Parse a numeric variable, recording a problem and keeping the default on bad input."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        invalid.append(f"{name} must be a number, got {raw!r}")
        return default


def load_config() -> dict:
    """Load configuration from environment variables."""
    invalid: list[str] = []
    config = {
        # Primary provider (Replicate predictions API)
        "replicate_api_base": os.getenv("REPLICATE_API_BASE", "https://api.replicate.com"),
        "replicate_model": os.getenv("REPLICATE_MODEL", "google/nano-banana"),
        # Optional local proxy base that replaces the API base in poll URLs
        "replicate_poll_base": os.getenv("REPLICATE_POLL_BASE"),
        "replicate_poll_interval": _env_number("REPLICATE_POLL_INTERVAL", 1.0, float, invalid),
        "replicate_max_poll_attempts": _env_number("REPLICATE_MAX_POLL_ATTEMPTS", 60, int, invalid),
        # Fallback provider (OpenRouter chat completions)
        "openrouter_api_base": os.getenv(
            "OPENROUTER_API_BASE", "https://openrouter.ai/api/v1"
        ),
        "openrouter_model": os.getenv(
            "OPENROUTER_MODEL", "google/gemini-2.5-flash-image-preview:free"
        ),
        "openrouter_referer": os.getenv("OPENROUTER_REFERER", "https://pixshop.app"),
        "openrouter_title": os.getenv("OPENROUTER_TITLE", "Pixshop - AI Photo Editor"),
        # HTTP
        "http_timeout": _env_number("HTTP_TIMEOUT", 120.0, float, invalid),
        # Logging
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": _env_bool("LOG_JSON"),
        # Unparseable values, reported by validate_config
        "invalid_settings": invalid,
    }

    return config


def validate_config(config: dict, credentials: Optional["CredentialProvider"] = None) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = list(config.get("invalid_settings", []))
    credentials = credentials or EnvCredentials()

    # At least one provider must be usable, otherwise every request fails
    has_primary = bool(credentials.get(*REPLICATE_TOKEN_VARS))
    has_fallback = bool(credentials.get(*OPENROUTER_KEY_VARS))
    if not (has_primary or has_fallback):
        errors.append(
            "At least one provider credential required: REPLICATE_API_TOKEN "
            "or OPENROUTER_API_KEY (API_KEY)"
        )

    if config.get("replicate_poll_interval", 1.0) <= 0:
        errors.append("REPLICATE_POLL_INTERVAL must be positive")

    if config.get("replicate_max_poll_attempts", 60) < 1:
        errors.append("REPLICATE_MAX_POLL_ATTEMPTS must be at least 1")

    if config.get("http_timeout", 120.0) <= 0:
        errors.append("HTTP_TIMEOUT must be positive")

    return errors


class CredentialProvider(ABC):
    """Read-only lookup of provider credentials."""

    @abstractmethod
    def get(self, *names: str) -> Optional[str]:
        """Return the first non-empty value among ``names``, or None."""


class EnvCredentials(CredentialProvider):
    """Credentials read from the process environment (or an injected mapping)."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ

    def get(self, *names: str) -> Optional[str]:
        environ = os.environ if self._environ is None else self._environ
        for name in names:
            value = environ.get(name)
            if value:
                return value
        return None


@dataclass(frozen=True)
class ReplicateSettings:
    """Settings for the polling (primary) provider."""

    api_base: str = "https://api.replicate.com"
    model: str = "google/nano-banana"
    poll_base: Optional[str] = None
    poll_interval: float = 1.0
    max_poll_attempts: int = 60

    @classmethod
    def from_config(cls, config: dict) -> "ReplicateSettings":
        return cls(
            api_base=config["replicate_api_base"].rstrip("/"),
            model=config["replicate_model"],
            poll_base=(config.get("replicate_poll_base") or None),
            poll_interval=config["replicate_poll_interval"],
            max_poll_attempts=config["replicate_max_poll_attempts"],
        )


@dataclass(frozen=True)
class OpenRouterSettings:
    """Settings for the chat-completion (fallback) provider."""

    api_base: str = "https://openrouter.ai/api/v1"
    model: str = "google/gemini-2.5-flash-image-preview:free"
    referer: str = "https://pixshop.app"
    title: str = "Pixshop - AI Photo Editor"

    @classmethod
    def from_config(cls, config: dict) -> "OpenRouterSettings":
        return cls(
            api_base=config["openrouter_api_base"].rstrip("/"),
            model=config["openrouter_model"],
            referer=config["openrouter_referer"],
            title=config["openrouter_title"],
        )


def setup_console_logging(log_level: str = "INFO") -> None:
    """Set up plain Rich console logging (used by the CLI)."""
    logging.root.handlers.clear()

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,  # Disable markup to avoid conflicts
    )

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        handlers=[rich_handler],
        format="%(message)s",
    )

    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

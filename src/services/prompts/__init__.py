"""Prompts module - centralized prompt templates for the photo editor.

Re-exports all prompt constants and builders for easy importing:
    from services.prompts import build_edit_prompt, PROMPT_VERSIONS
"""

from services.prompts.editing import (
    ADJUSTMENT_PROMPT,
    EDIT_PROMPT,
    FILTER_PROMPT,
    SKIN_TONE_POLICY,
    build_adjustment_prompt,
    build_edit_prompt,
    build_filter_prompt,
)

# Prompt version identifiers, logged with each generation for traceability
# IMPORTANT: Increment these when prompt text changes
PROMPT_VERSIONS = {
    "edit": "v1",
    "filter": "v1",
    "adjustment": "v1",
}

__all__ = [
    "PROMPT_VERSIONS",
    "SKIN_TONE_POLICY",
    "EDIT_PROMPT",
    "FILTER_PROMPT",
    "ADJUSTMENT_PROMPT",
    "build_edit_prompt",
    "build_filter_prompt",
    "build_adjustment_prompt",
]

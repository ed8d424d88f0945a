"""Configuration management with Pydantic models."""

from .settings import DEFAULT_PROMPT, EditorSettings

__all__ = ["EditorSettings", "DEFAULT_PROMPT"]

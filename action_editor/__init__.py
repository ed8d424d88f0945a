"""Presentation-neutral editor for scheduled task actions."""

from .actions import ActionKind, ActionRecord, AvailableActions
from .editor import ActionEditDialog, EditorState
from .errors import ActionEditorError, ConfigurationError, EditorStateError

__version__ = "0.1.0"

__all__ = [
    "ActionEditDialog",
    "ActionEditorError",
    "ActionKind",
    "ActionRecord",
    "AvailableActions",
    "ConfigurationError",
    "EditorState",
    "EditorStateError",
]

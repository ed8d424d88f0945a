"""Exceptions raised by the action editor."""


class ActionEditorError(Exception):
    """Base class for action editor errors."""


class ConfigurationError(ActionEditorError, ValueError):
    """The caller configured the editor into an unusable state."""


class EditorStateError(ActionEditorError, RuntimeError):
    """An operation is not valid in the editor's current state."""

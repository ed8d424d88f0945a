"""Action kind filtering, selection and the editing dialog."""

from .dialog import ActionEditDialog, EditorState
from .filtering import check_engine_compatibility, compute_legal_kinds
from .labels import LabelProvider, ResourceLabels
from .selection import resolve_selection

__all__ = [
    "ActionEditDialog",
    "EditorState",
    "LabelProvider",
    "ResourceLabels",
    "check_engine_compatibility",
    "compute_legal_kinds",
    "resolve_selection",
]

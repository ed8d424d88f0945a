"""Action records and the handlers that edit them."""

from .base import (
    ActionHandler,
    ActionKind,
    ActionRecord,
    ActionResult,
    ActionStatus,
    AvailableActions,
    ComHandlerAction,
    EmailAction,
    ExecAction,
    ShowMessageAction,
)
from .registry import HandlerRegistry, register_handler

__all__ = [
    "ActionHandler",
    "ActionKind",
    "ActionRecord",
    "ActionResult",
    "ActionStatus",
    "AvailableActions",
    "ComHandlerAction",
    "EmailAction",
    "ExecAction",
    "HandlerRegistry",
    "ShowMessageAction",
    "register_handler",
]

"""Built-in handler for actions that show a message."""

from typing import Callable, Dict, Optional

import structlog

from ...config import EditorSettings
from ..base import ActionHandler, ActionKind, ActionResult, ActionStatus, ShowMessageAction
from ..registry import register_handler

logger = structlog.get_logger(__name__)


def log_message(title: str, body: str) -> None:
    """Default display: write the message to the log."""
    logger.info("Showing message", title=title, body=body)


@register_handler(ActionKind.SHOW_MESSAGE, "show_message", "Display a message")
class ShowMessageActionHandler(ActionHandler):
    """Handler for actions that display a message to the user.

    Test runs hand the message to ``display``, which the presentation layer
    may replace with a real message box.
    """

    kind = ActionKind.SHOW_MESSAGE
    key_fields = ("message_body",)

    def __init__(
        self,
        name: str,
        description: str,
        settings: Optional[EditorSettings] = None,
        display: Callable[[str, str], None] = log_message,
    ) -> None:
        super().__init__(name, description, settings)
        self.display = display

    def _check_fields(self, record: ShowMessageAction) -> Dict[str, str]:
        if not record.message_body.strip():
            return {"message_body": "A message must be specified."}
        return {}

    def _run(self, record: ShowMessageAction) -> ActionResult:
        self.display(record.title or "", record.message_body)
        return ActionResult(
            status=ActionStatus.SUCCESS,
            message="Message displayed",
            details={"title": record.title},
            execution_time_seconds=0,
        )

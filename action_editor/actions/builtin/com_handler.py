"""Built-in handler for COM handler actions."""

import uuid
from typing import Any, Dict

from ..base import ActionHandler, ActionKind, ActionResult, ActionStatus, ComHandlerAction
from ..registry import register_handler


def _parse_class_id(value: str) -> uuid.UUID:
    return uuid.UUID(value.strip().strip("{}"))


@register_handler(ActionKind.COM_HANDLER, "com_handler", "Fire a custom handler")
class ComHandlerActionHandler(ActionHandler):
    """Handler for actions that fire a registered COM handler."""

    kind = ActionKind.COM_HANDLER
    key_fields = ("class_id",)

    def _check_fields(self, record: ComHandlerAction) -> Dict[str, str]:
        try:
            _parse_class_id(record.class_id)
        except ValueError:
            return {"class_id": "The class identifier must be a GUID."}
        return {}

    def _run(self, record: ComHandlerAction) -> ActionResult:
        return ActionResult(
            status=ActionStatus.SKIPPED,
            message="COM handlers can only be activated by the Task Scheduler service",
            details={"class_id": record.class_id},
            execution_time_seconds=0,
        )

    def _normalize(self, record: ComHandlerAction) -> Dict[str, Any]:
        changes = super()._normalize(record)
        try:
            changes["class_id"] = "{%s}" % str(_parse_class_id(record.class_id)).upper()
        except ValueError:
            pass
        return changes

"""Built-in handler for actions that start a program."""

import os
import shlex
import subprocess
from typing import Dict, List

import structlog

from ..base import ActionHandler, ActionKind, ActionResult, ActionStatus, ExecAction
from ..registry import register_handler

logger = structlog.get_logger(__name__)

INVALID_PATH_CHARS = frozenset('<>|"\0')


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


@register_handler(ActionKind.EXECUTE, "exec", "Start a program")
class ExecActionHandler(ActionHandler):
    """Handler for actions that start a program, script or document."""

    kind = ActionKind.EXECUTE
    key_fields = ("path",)

    def _check_fields(self, record: ExecAction) -> Dict[str, str]:
        errors = {}

        path = _unquote(record.path)
        if not path:
            errors["path"] = "A program or script must be specified."
        elif INVALID_PATH_CHARS.intersection(path):
            errors["path"] = "The program path contains invalid characters."

        if record.working_directory and INVALID_PATH_CHARS.intersection(
            _unquote(record.working_directory)
        ):
            errors["working_directory"] = "The start folder contains invalid characters."

        return errors

    def _run(self, record: ExecAction) -> ActionResult:
        command: List[str] = [_unquote(record.path)]
        if record.arguments:
            command.extend(shlex.split(record.arguments, posix=os.name != "nt"))
        cwd = _unquote(record.working_directory) if record.working_directory else None

        logger.info("Starting program", command=command, working_directory=cwd)

        try:
            # Fire and forget: the program outlives the editor in its own session
            process = subprocess.Popen(command, cwd=cwd, start_new_session=True)
        except OSError as e:
            logger.error("Failed to start program", command=command, error=str(e))
            return ActionResult(
                status=ActionStatus.FAILED,
                message=f"Failed to start program: {e}",
                details={"command": command, "error": str(e)},
                execution_time_seconds=0,
            )

        return ActionResult(
            status=ActionStatus.SUCCESS,
            message=f"Started process {process.pid}",
            details={"command": command, "pid": process.pid},
            execution_time_seconds=0,  # Will be set by ActionHandler.run
        )

"""Base classes for action records and action handlers."""

import time
from abc import ABC, abstractmethod
from dataclasses import Field, dataclass, field, fields, replace
from enum import Enum, IntFlag
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

import structlog

from ..config import EditorSettings
from ..errors import EditorStateError

logger = structlog.get_logger(__name__)


class ActionKind(Enum):
    """Kinds of action a scheduled task can perform, in display order."""

    EXECUTE = 0
    COM_HANDLER = 5
    SEND_EMAIL = 6
    SHOW_MESSAGE = 7

    @property
    def flag(self) -> "AvailableActions":
        """The availability flag that admits this kind."""
        return AvailableActions[self.name]


class AvailableActions(IntFlag):
    """Set of action kinds a caller allows the editor to offer."""

    EXECUTE = 0x1
    COM_HANDLER = 0x2
    SEND_EMAIL = 0x4
    SHOW_MESSAGE = 0x8
    ALL_ACTIONS = 0xF


class ActionStatus(Enum):
    """Status of a test run."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ActionResult:
    """Result of a test run."""

    status: ActionStatus
    message: str
    details: Dict[str, Any]
    execution_time_seconds: float


@dataclass
class ActionRecord:
    """Domain object edited by the dialog."""

    kind: ClassVar[ActionKind]

    id: Optional[str] = None

    @staticmethod
    def create(kind: ActionKind, id: Optional[str] = None) -> "ActionRecord":
        """Create a default-valued record for a kind.

        Args:
            kind: Kind of action to create
            id: Optional action identifier

        Returns:
            A new record with default field values

        Raises:
            ValueError: If the kind has no record type
        """
        try:
            record_type = _RECORD_TYPES[kind]
        except KeyError:
            raise ValueError(f"Unknown action kind: {kind!r}") from None
        return record_type(id=id)


@dataclass
class ExecAction(ActionRecord):
    """Starts a program, script or document."""

    kind: ClassVar[ActionKind] = ActionKind.EXECUTE

    path: str = ""
    arguments: Optional[str] = None
    working_directory: Optional[str] = None


@dataclass
class ComHandlerAction(ActionRecord):
    """Fires a registered COM handler."""

    kind: ClassVar[ActionKind] = ActionKind.COM_HANDLER

    class_id: str = ""
    data: Optional[str] = None


@dataclass
class EmailAction(ActionRecord):
    """Sends an e-mail message."""

    kind: ClassVar[ActionKind] = ActionKind.SEND_EMAIL

    sender: str = ""
    to: str = ""
    cc: Optional[str] = None
    bcc: Optional[str] = None
    reply_to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    server: str = ""
    attachments: List[str] = field(default_factory=list)


@dataclass
class ShowMessageAction(ActionRecord):
    """Shows a message box to the logged on user."""

    kind: ClassVar[ActionKind] = ActionKind.SHOW_MESSAGE

    title: Optional[str] = None
    message_body: str = ""


_RECORD_TYPES: Dict[ActionKind, Type[ActionRecord]] = {
    ActionKind.EXECUTE: ExecAction,
    ActionKind.COM_HANDLER: ComHandlerAction,
    ActionKind.SEND_EMAIL: EmailAction,
    ActionKind.SHOW_MESSAGE: ShowMessageAction,
}


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def _type_error(f: Field, value: Any) -> Optional[str]:
    """Describe why a value does not fit a record field, or None if it does."""
    if f.default_factory is list:
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return None
        return "must be a list of text values"
    if f.default is None:
        if value is None or isinstance(value, str):
            return None
        return "must be text or empty"
    if isinstance(value, str):
        return None
    return "must be text"


class ActionHandler(ABC):
    """Base class for the per-kind action editors.

    A handler is constructed once per dialog and bound to at most one
    record at a time. Field edits are applied to the bound record in place.
    """

    kind: ClassVar[ActionKind]
    key_fields: ClassVar[Tuple[str, ...]] = ()

    def __init__(
        self, name: str, description: str, settings: Optional[EditorSettings] = None
    ) -> None:
        """Initialize action handler.

        Args:
            name: Unique name for this handler
            description: Human-readable description
            settings: Editor settings, read from the environment if omitted
        """
        self.name = name
        self.description = description
        self.settings = settings or EditorSettings()
        self._record: Optional[ActionRecord] = None
        self._errors: Dict[str, str] = {}

        logger.debug("Initialized action handler", handler=name, kind=self.kind.name)

    @property
    def record(self) -> Optional[ActionRecord]:
        """The currently bound record, if any."""
        return self._record

    @property
    def errors(self) -> Dict[str, str]:
        """Field errors found by the last call to validate_fields."""
        return dict(self._errors)

    @property
    def can_validate(self) -> bool:
        """Whether every key field has a value."""
        if self._record is None:
            return False
        return all(_has_text(getattr(self._record, name)) for name in self.key_fields)

    def bind(self, record: Optional[ActionRecord]) -> None:
        """Bind a record to this handler, or clear the binding.

        Args:
            record: Record to edit, or None to unbind

        Raises:
            TypeError: If the record is of another kind
        """
        if record is not None and record.kind is not self.kind:
            raise TypeError(
                f"{self.name} edits {self.kind.name} actions, not {record.kind.name}"
            )
        self._record = record
        self._errors = {}

    def set_field(self, name: str, value: Any) -> None:
        """Apply a field edit to the bound record.

        Args:
            name: Field name on the record
            value: New value

        Raises:
            EditorStateError: If no record is bound
            KeyError: If the record has no such editable field
            TypeError: If the value does not fit the field
        """
        record = self._require_record()
        record_fields = {f.name: f for f in fields(record) if f.name != "id"}
        if name not in record_fields:
            raise KeyError(f"{self.kind.name} actions have no field '{name}'")

        problem = _type_error(record_fields[name], value)
        if problem:
            raise TypeError(f"{self.kind.name} field '{name}' {problem}, got {value!r}")
        setattr(record, name, value)

    def validate_fields(self) -> bool:
        """Validate the bound record.

        Returns:
            True if the record may be committed
        """
        record = self._require_record()
        # Records built outside set_field may hold values of the wrong type
        self._errors = {
            f.name: f"The value {problem}."
            for f in fields(record)
            for problem in [_type_error(f, getattr(record, f.name))]
            if problem
        }
        if not self._errors:
            self._errors = self._check_fields(record)

        if self._errors:
            logger.info(
                "Action failed validation",
                handler=self.name,
                fields=sorted(self._errors),
            )
            return False
        return True

    def run(self) -> ActionResult:
        """Run the configured action once, outside the edit.

        Returns:
            Result of the test run
        """
        record = self._require_record()
        start_time = time.time()

        try:
            result = self._run(record)
        except Exception as e:
            logger.error(
                "Action test run failed",
                handler=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            result = ActionResult(
                status=ActionStatus.FAILED,
                message=f"Action '{self.name}' failed: {str(e)}",
                details={"error": str(e), "error_type": type(e).__name__},
                execution_time_seconds=0,
            )

        result.execution_time_seconds = time.time() - start_time
        logger.info(
            "Action test run completed",
            handler=self.name,
            status=result.status.value,
            execution_time=result.execution_time_seconds,
        )
        return result

    def extract_record(self) -> ActionRecord:
        """Return the edited record with normalized field values."""
        record = self._require_record()
        return replace(record, **self._normalize(record))

    @abstractmethod
    def _check_fields(self, record: Any) -> Dict[str, str]:
        """Return an error message per invalid field."""

    @abstractmethod
    def _run(self, record: Any) -> ActionResult:
        """Perform the test run."""

    def _normalize(self, record: ActionRecord) -> Dict[str, Any]:
        """Strip text fields and turn blank optional fields into None."""
        changes: Dict[str, Any] = {}
        for f in fields(record):
            value = getattr(record, f.name)
            if not isinstance(value, str):
                continue
            value = value.strip()
            if not value and f.default is None:
                value = None
            changes[f.name] = value
        return changes

    def _require_record(self) -> ActionRecord:
        if self._record is None:
            raise EditorStateError(f"No action is bound to {self.name}")
        return self._record

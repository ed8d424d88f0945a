"""Coordinator behind the task action editing dialog."""

import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import structlog

from ..actions.base import (
    ActionHandler,
    ActionKind,
    ActionRecord,
    ActionResult,
    AvailableActions,
    ExecAction,
)
from ..actions.registry import HandlerRegistry
from ..config import DEFAULT_PROMPT, EditorSettings
from ..errors import EditorStateError
from .filtering import check_engine_compatibility, compute_legal_kinds
from .labels import LabelProvider, ResourceLabels
from .selection import resolve_selection

logger = structlog.get_logger(__name__)


class EditorState(Enum):
    """Commit protocol state of an editing session."""

    EDITING = "editing"
    VALIDATING = "validating"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class ActionEditDialog:
    """Edits a single task action through the handler for its kind.

    The dialog offers the action kinds left after filtering by the caller's
    available actions, the scheduler version and the scheduling engine. The
    selected kind decides which handler is active; the active handler is the
    only one bound to a record. A session ends with ``commit`` or ``cancel``.
    """

    def __init__(
        self,
        action: Optional[ActionRecord] = None,
        *,
        available_actions: AvailableActions = AvailableActions.ALL_ACTIONS,
        support_v1_only: bool = False,
        use_unified_scheduling_engine: bool = False,
        allow_run: bool = False,
        prompt: str = DEFAULT_PROMPT,
        handlers: Optional[HandlerRegistry] = None,
        labels: Optional[LabelProvider] = None,
        settings: Optional[EditorSettings] = None,
    ) -> None:
        """Initialize the dialog.

        Args:
            action: Action to edit; a new program action if omitted
            available_actions: Kinds the caller allows
            support_v1_only: Offer only version 1.0 actions
            use_unified_scheduling_engine: Offer only Unified Scheduling Engine actions
            allow_run: Expose test runs of the configured action
            prompt: Prompt text for the presentation layer
            handlers: Handler registry; the built-in handlers if omitted
            labels: Label provider for the kind choices
            settings: Settings passed to the built-in handlers

        Raises:
            ConfigurationError: If the constraints leave no selectable kind
        """
        available_actions = AvailableActions(available_actions)
        check_engine_compatibility(support_v1_only, use_unified_scheduling_engine)
        legal = compute_legal_kinds(
            ActionKind, support_v1_only, use_unified_scheduling_engine, available_actions
        )

        self._available_actions = available_actions
        self._support_v1_only = support_v1_only
        self._use_unified_scheduling_engine = use_unified_scheduling_engine
        self._legal: Tuple[ActionKind, ...] = legal
        self.allow_run = allow_run
        self.prompt = prompt

        self._handlers = handlers or HandlerRegistry.create(settings)
        self._labels: LabelProvider = labels or ResourceLabels()
        self._state = EditorState.EDITING
        self._selected: Optional[ActionKind] = None
        self._drafts: Dict[ActionKind, ActionRecord] = {}
        self._action_id: Optional[str] = None
        self._can_commit = False

        self._assign(action if action is not None else ExecAction())

        logger.info(
            "Opened action editor",
            legal_kinds=[kind.name for kind in legal],
            selected=self._selected.name if self._selected else None,
        )

    @classmethod
    def from_settings(
        cls,
        settings: EditorSettings,
        action: Optional[ActionRecord] = None,
        **overrides: Any,
    ) -> "ActionEditDialog":
        """Create a dialog configured from settings.

        Args:
            settings: Editor settings
            action: Action to edit
            **overrides: Constructor arguments taking precedence over settings

        Returns:
            A new dialog
        """
        options: Dict[str, Any] = {
            "available_actions": AvailableActions(settings.available_actions),
            "support_v1_only": settings.support_v1_only,
            "use_unified_scheduling_engine": settings.use_unified_scheduling_engine,
            "allow_run": settings.allow_run,
            "prompt": settings.prompt,
            "settings": settings,
        }
        options.update(overrides)
        return cls(action, **options)

    @property
    def action(self) -> Optional[ActionRecord]:
        """The record being edited, None once the dialog is closed."""
        if self._selected is None:
            return None
        return self._drafts.get(self._selected)

    @action.setter
    def action(self, value: Optional[ActionRecord]) -> None:
        self._require_editing()
        self._assign(value if value is not None else ExecAction())

    @property
    def action_id(self) -> Optional[str]:
        return self._action_id

    @action_id.setter
    def action_id(self, value: Optional[str]) -> None:
        self._require_editing()
        self._action_id = value or None

    @property
    def available_actions(self) -> AvailableActions:
        return self._available_actions

    @available_actions.setter
    def available_actions(self, value: AvailableActions) -> None:
        value = AvailableActions(value)
        if value == self._available_actions:
            return
        self._reconfigure(available_actions=value)

    @property
    def support_v1_only(self) -> bool:
        return self._support_v1_only

    @support_v1_only.setter
    def support_v1_only(self, value: bool) -> None:
        if value == self._support_v1_only:
            return
        self._reconfigure(support_v1_only=value)

    @property
    def use_unified_scheduling_engine(self) -> bool:
        return self._use_unified_scheduling_engine

    @use_unified_scheduling_engine.setter
    def use_unified_scheduling_engine(self, value: bool) -> None:
        if value == self._use_unified_scheduling_engine:
            return
        self._reconfigure(use_unified_scheduling_engine=value)

    @property
    def legal_kinds(self) -> Tuple[ActionKind, ...]:
        return self._legal

    @property
    def selected_kind(self) -> Optional[ActionKind]:
        return self._selected

    @property
    def active_handler(self) -> Optional[ActionHandler]:
        return self._handlers.active

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def can_commit(self) -> bool:
        """Whether the commit action should be enabled."""
        return self._state is EditorState.EDITING and self._can_commit

    @property
    def can_run(self) -> bool:
        """Whether the test run action should be enabled."""
        return self.allow_run and self.can_commit

    @property
    def errors(self) -> Dict[str, str]:
        """Field errors reported by the active handler."""
        handler = self._handlers.active
        return handler.errors if handler else {}

    def kind_choices(self) -> List[Tuple[ActionKind, str]]:
        """The selectable kinds with their display labels, in order."""
        return [(kind, self._labels.label(kind)) for kind in self._legal]

    def select(self, kind: ActionKind) -> ActionHandler:
        """Select an action kind, as when the user changes the kind choice.

        Raises:
            ValueError: If the kind is not currently selectable
        """
        self._require_editing()
        if kind not in self._legal:
            raise ValueError(f"{kind!r} actions are not available in this editor")

        kind = resolve_selection(kind, self._legal)
        if kind is not self._selected:
            self._activate(kind)
        return self._handlers.active

    def edit_field(self, name: str, value: Any) -> None:
        """Apply a field edit through the active handler."""
        self._require_editing()
        self._handlers.active.set_field(name, value)
        self._determine_if_can_validate()

    def run_action(self) -> ActionResult:
        """Test run the configured action without committing it.

        Raises:
            EditorStateError: If test runs are not allowed or the action is
                not complete
        """
        self._require_editing()
        if not self.allow_run:
            raise EditorStateError("Test runs are not allowed by this editor")
        if not self._can_commit:
            raise EditorStateError("The action is not complete enough to run")
        return self._handlers.active.run()

    def commit(self) -> Optional[ActionRecord]:
        """Validate the edits and close the dialog if they are valid.

        Returns:
            The finalized record, or None if validation failed and the
            dialog is still editing
        """
        self._require_editing()
        handler = self._handlers.active

        self._state = EditorState.VALIDATING
        try:
            valid = handler.validate_fields()
            record = handler.extract_record() if valid else None
        except Exception:
            if self._state is EditorState.VALIDATING:
                self._state = EditorState.EDITING
            raise

        if self._state is not EditorState.VALIDATING:
            # Cancelled while validating
            return None
        if record is None:
            self._state = EditorState.EDITING
            logger.info(
                "Commit refused",
                handler=handler.name,
                fields=sorted(handler.errors),
            )
            return None

        record.id = self._action_id
        self._close(EditorState.COMMITTED)

        logger.info("Committed action", kind=record.kind.name, id=record.id)
        return record

    def cancel(self) -> None:
        """Discard all edits and close the dialog."""
        if self._state not in (EditorState.EDITING, EditorState.VALIDATING):
            raise EditorStateError(f"The action editor is {self._state.value}")
        self._close(EditorState.CANCELLED)
        logger.info("Cancelled action editor")

    def _assign(self, record: ActionRecord) -> None:
        # The caller's record is never edited in place
        record = copy.deepcopy(record)
        self._drafts = {record.kind: record}
        self._action_id = record.id
        self._activate(resolve_selection(record.kind, self._legal))

    def _reconfigure(self, **changes: Any) -> None:
        self._require_editing()

        available_actions = changes.get("available_actions", self._available_actions)
        support_v1_only = changes.get("support_v1_only", self._support_v1_only)
        use_unified_scheduling_engine = changes.get(
            "use_unified_scheduling_engine", self._use_unified_scheduling_engine
        )

        check_engine_compatibility(support_v1_only, use_unified_scheduling_engine)
        legal = compute_legal_kinds(
            ActionKind, support_v1_only, use_unified_scheduling_engine, available_actions
        )

        self._available_actions = available_actions
        self._support_v1_only = support_v1_only
        self._use_unified_scheduling_engine = use_unified_scheduling_engine
        self._legal = legal

        kind = resolve_selection(self._selected, legal)
        logger.debug(
            "Recomputed selectable action kinds",
            legal_kinds=[k.name for k in legal],
            previous=self._selected.name if self._selected else None,
            selected=kind.name,
        )
        if kind is not self._selected:
            self._activate(kind)

    def _activate(self, kind: ActionKind) -> None:
        record = self._drafts.get(kind)
        if record is None:
            record = ActionRecord.create(kind, id=self._action_id)
            self._drafts[kind] = record

        self._selected = kind
        self._handlers.activate(kind, record)
        self._determine_if_can_validate()

    def _determine_if_can_validate(self) -> None:
        self._can_commit = self._handlers.active.can_validate

    def _close(self, state: EditorState) -> None:
        self._handlers.deactivate()
        self._drafts = {}
        self._can_commit = False
        self._state = state

    def _require_editing(self) -> None:
        if self._state is not EditorState.EDITING:
            raise EditorStateError(f"The action editor is {self._state.value}")

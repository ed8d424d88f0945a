"""Unit tests for ActionEditDialog."""

from unittest.mock import patch

import pytest

from action_editor.actions import (
    ActionKind,
    AvailableActions,
    ComHandlerAction,
    EmailAction,
    ExecAction,
    ShowMessageAction,
)
from action_editor.config import DEFAULT_PROMPT, EditorSettings
from action_editor.editor import ActionEditDialog, EditorState, ResourceLabels
from action_editor.errors import ConfigurationError, EditorStateError


@pytest.fixture
def dialog(handler_registry):
    """Provide a dialog editing a new program action."""
    return ActionEditDialog(handlers=handler_registry, allow_run=True)


class TestConstruction:
    """Test opening the dialog."""

    def test_defaults(self, handler_registry):
        """Test a dialog opened without an action."""
        dialog = ActionEditDialog(handlers=handler_registry)

        assert dialog.state is EditorState.EDITING
        assert dialog.selected_kind is ActionKind.EXECUTE
        assert isinstance(dialog.action, ExecAction)
        assert dialog.legal_kinds == tuple(ActionKind)
        assert dialog.prompt == DEFAULT_PROMPT
        assert dialog.allow_run is False
        assert dialog.can_commit is False

    def test_opens_on_action_kind(self, handler_registry, message_action):
        """Test that the record's kind is selected and bound."""
        dialog = ActionEditDialog(message_action, handlers=handler_registry)

        assert dialog.selected_kind is ActionKind.SHOW_MESSAGE
        assert dialog.active_handler is handler_registry.get(ActionKind.SHOW_MESSAGE)
        assert dialog.active_handler.record == message_action
        assert dialog.active_handler.record is not message_action
        assert dialog.can_commit is True

    def test_action_id_loaded(self, handler_registry, exec_action):
        """Test that the action id is taken from the record."""
        dialog = ActionEditDialog(exec_action, handlers=handler_registry)
        assert dialog.action_id == "backup"

    def test_illegal_action_kind_falls_back(self, handler_registry, email_action):
        """Test that an action of an excluded kind opens on the first legal kind."""
        dialog = ActionEditDialog(
            email_action, handlers=handler_registry, use_unified_scheduling_engine=True
        )

        assert dialog.selected_kind is ActionKind.EXECUTE
        assert isinstance(dialog.action, ExecAction)

    def test_empty_legal_set(self, handler_registry):
        """Test that no selectable kind aborts construction."""
        with pytest.raises(ConfigurationError):
            ActionEditDialog(
                handlers=handler_registry,
                support_v1_only=True,
                available_actions=AvailableActions.COM_HANDLER,
            )

        assert handler_registry.active is None

    def test_engine_version_conflict(self, handler_registry):
        """Test that the unified engine with v1 only aborts construction."""
        with pytest.raises(ConfigurationError):
            ActionEditDialog(
                handlers=handler_registry,
                support_v1_only=True,
                use_unified_scheduling_engine=True,
            )

    def test_from_settings(self, editor_settings):
        """Test building a dialog from settings."""
        editor_settings.available_actions = 0x3
        editor_settings.prompt = "Choose"

        dialog = ActionEditDialog.from_settings(editor_settings, prompt="Override")

        assert dialog.legal_kinds == (ActionKind.EXECUTE, ActionKind.COM_HANDLER)
        assert dialog.allow_run is True
        assert dialog.prompt == "Override"
        assert dialog.active_handler.settings is editor_settings

    def test_kind_choices(self, handler_registry):
        """Test the labelled choices for the kind selector."""
        dialog = ActionEditDialog(
            handlers=handler_registry,
            labels=ResourceLabels({"ActionTypeExecute": "Run"}),
            use_unified_scheduling_engine=True,
        )

        assert dialog.kind_choices() == [
            (ActionKind.EXECUTE, "Run"),
            (ActionKind.COM_HANDLER, "ComHandler"),
        ]


class TestSelection:
    """Test kind selection and constraint changes."""

    def test_select_switches_handler(self, dialog, handler_registry):
        """Test that selecting a kind activates its handler only."""
        handler = dialog.select(ActionKind.SEND_EMAIL)

        assert handler is handler_registry.get(ActionKind.SEND_EMAIL)
        assert isinstance(handler.record, EmailAction)
        assert handler_registry.get(ActionKind.EXECUTE).record is None

    def test_select_illegal_kind(self, handler_registry):
        """Test that an excluded kind cannot be selected."""
        dialog = ActionEditDialog(handlers=handler_registry, support_v1_only=True)

        with pytest.raises(ValueError):
            dialog.select(ActionKind.COM_HANDLER)
        assert dialog.selected_kind is ActionKind.EXECUTE

    def test_select_not_a_kind(self, dialog):
        """Test that a value which is not an action kind is refused."""
        with pytest.raises(ValueError, match="'bogus'"):
            dialog.select("bogus")
        assert dialog.selected_kind is ActionKind.EXECUTE

    def test_drafts_survive_switching(self, dialog):
        """Test that edits are kept when switching kinds back and forth."""
        dialog.edit_field("path", "/bin/true")
        dialog.select(ActionKind.SHOW_MESSAGE)
        dialog.edit_field("message_body", "Hello")

        dialog.select(ActionKind.EXECUTE)
        assert dialog.action.path == "/bin/true"

        dialog.select(ActionKind.SHOW_MESSAGE)
        assert dialog.action.message_body == "Hello"

    def test_stable_when_still_legal(self, handler_registry, com_action):
        """Test that a constraint change keeps a still legal selection."""
        dialog = ActionEditDialog(com_action, handlers=handler_registry)

        dialog.use_unified_scheduling_engine = True

        assert dialog.selected_kind is ActionKind.COM_HANDLER
        assert dialog.active_handler.record == com_action

    def test_fallback_when_excluded(self, handler_registry, message_action):
        """Test that an excluded selection falls back to the first legal kind."""
        dialog = ActionEditDialog(message_action, handlers=handler_registry)

        dialog.available_actions = AvailableActions.COM_HANDLER | AvailableActions.SEND_EMAIL

        assert dialog.legal_kinds == (ActionKind.COM_HANDLER, ActionKind.SEND_EMAIL)
        assert dialog.selected_kind is ActionKind.COM_HANDLER
        assert isinstance(dialog.action, ComHandlerAction)
        assert handler_registry.get(ActionKind.SHOW_MESSAGE).record is None

    def test_v1_only_setter(self, dialog):
        """Test that switching to v1 only leaves program actions."""
        dialog.select(ActionKind.SEND_EMAIL)

        dialog.support_v1_only = True

        assert dialog.legal_kinds == (ActionKind.EXECUTE,)
        assert dialog.selected_kind is ActionKind.EXECUTE

    def test_failed_reconfigure_changes_nothing(self, dialog):
        """Test that a rejected constraint change leaves the dialog as it was."""
        dialog.select(ActionKind.SHOW_MESSAGE)

        with pytest.raises(ConfigurationError):
            dialog.available_actions = 0

        assert dialog.available_actions == AvailableActions.ALL_ACTIONS
        assert dialog.selected_kind is ActionKind.SHOW_MESSAGE
        assert dialog.legal_kinds == tuple(ActionKind)

    def test_engine_after_v1_only(self, handler_registry):
        """Test enabling the unified engine on a v1 only dialog."""
        dialog = ActionEditDialog(handlers=handler_registry, support_v1_only=True)

        with pytest.raises(ConfigurationError):
            dialog.use_unified_scheduling_engine = True
        assert dialog.use_unified_scheduling_engine is False

    def test_v1_only_after_engine(self, handler_registry):
        """Test enabling v1 only on a unified engine dialog."""
        dialog = ActionEditDialog(
            handlers=handler_registry, use_unified_scheduling_engine=True
        )

        with pytest.raises(ConfigurationError):
            dialog.support_v1_only = True
        assert dialog.support_v1_only is False

    def test_assign_action(self, dialog, com_action):
        """Test assigning a new action while editing."""
        dialog.action = com_action

        assert dialog.selected_kind is ActionKind.COM_HANDLER
        assert dialog.action == com_action


class TestCommitProtocol:
    """Test commit, cancel and test runs."""

    def test_can_commit_follows_edits(self, dialog):
        """Test that commit eligibility is recomputed on every edit."""
        assert dialog.can_commit is False

        dialog.edit_field("path", "/bin/true")
        assert dialog.can_commit is True
        assert dialog.can_run is True

        dialog.edit_field("path", "")
        assert dialog.can_commit is False
        assert dialog.can_run is False

    def test_failed_validation_stays_editing(self, dialog):
        """Test that invalid input refuses the commit without extracting."""
        handler = dialog.active_handler
        dialog.edit_field("path", "bad|path")

        with patch.object(handler, "extract_record") as extract:
            assert dialog.commit() is None

        extract.assert_not_called()
        assert dialog.state is EditorState.EDITING
        assert "path" in dialog.errors
        assert dialog.action.path == "bad|path"

    def test_retry_after_failed_validation(self, dialog):
        """Test that the user can correct input and commit again."""
        dialog.edit_field("path", "bad|path")
        assert dialog.commit() is None

        dialog.edit_field("path", "/bin/good")
        record = dialog.commit()

        assert record == ExecAction(path="/bin/good")
        assert dialog.state is EditorState.COMMITTED

    def test_commit_applies_action_id(self, dialog):
        """Test that the edited action id ends up on the record."""
        dialog.edit_field("path", "/bin/true")
        dialog.action_id = "nightly"

        record = dialog.commit()

        assert record.id == "nightly"

    def test_empty_action_id_is_none(self, handler_registry, exec_action):
        """Test that clearing the action id removes it."""
        dialog = ActionEditDialog(exec_action, handlers=handler_registry)
        dialog.action_id = ""

        assert dialog.commit().id is None

    def test_commit_releases_record(self, dialog, handler_registry):
        """Test that a closed dialog keeps no record."""
        dialog.edit_field("path", "/bin/true")
        dialog.commit()

        assert dialog.action is None
        assert dialog.active_handler is None
        assert all(handler_registry.get(k).record is None for k in ActionKind)
        assert dialog.can_commit is False

    def test_round_trip(self, handler_registry, exec_action, email_action, message_action):
        """Test that committing without edits returns an equal record."""
        for original in (exec_action, email_action, message_action):
            dialog = ActionEditDialog(original, handlers=handler_registry)

            record = dialog.commit()

            assert record == original

    def test_round_trip_normalizes_class_id(self, handler_registry):
        """Test that only the class id changes when committing a COM action."""
        original = ComHandlerAction(
            id="com", class_id="0b2c4a5e-8f3d-4e1a-9c7b-6d5e4f3a2b1c", data="payload"
        )
        dialog = ActionEditDialog(original, handlers=handler_registry)

        record = dialog.commit()

        assert record.class_id == "{0B2C4A5E-8F3D-4E1A-9C7B-6D5E4F3A2B1C}"
        assert record.id == "com"
        assert record.data == "payload"
        assert original.class_id == "0b2c4a5e-8f3d-4e1a-9c7b-6d5e4f3a2b1c"

    def test_incomplete_action_not_extracted(self, dialog):
        """Test that a commit with empty key fields is refused before extraction."""
        handler = dialog.active_handler
        assert handler.can_validate is False

        with patch.object(handler, "extract_record") as extract:
            assert dialog.commit() is None

        extract.assert_not_called()
        assert dialog.state is EditorState.EDITING

    def test_wrong_type_refuses_commit(self, handler_registry):
        """Test that a record holding a wrong type is reported, not raised."""
        dialog = ActionEditDialog(ExecAction(path=None), handlers=handler_registry)

        assert dialog.commit() is None

        assert dialog.state is EditorState.EDITING
        assert "path" in dialog.errors
        dialog.cancel()
        assert dialog.state is EditorState.CANCELLED

    def test_handler_error_restores_editing(self, dialog):
        """Test that an exception during commit leaves the dialog usable."""
        dialog.edit_field("path", "/bin/true")

        with patch.object(
            dialog.active_handler, "extract_record", side_effect=RuntimeError("boom")
        ):
            with pytest.raises(RuntimeError):
                dialog.commit()

        assert dialog.state is EditorState.EDITING
        assert dialog.can_commit is True
        dialog.cancel()
        assert dialog.state is EditorState.CANCELLED

    def test_cancel_while_validating(self, dialog):
        """Test that cancel is accepted during validation."""
        dialog.edit_field("path", "/bin/true")
        handler = dialog.active_handler

        def cancel_during_validation():
            dialog.cancel()
            return False

        with patch.object(handler, "validate_fields", side_effect=cancel_during_validation):
            assert dialog.commit() is None

        assert dialog.state is EditorState.CANCELLED

    def test_cancel(self, dialog):
        """Test that cancelling discards edits."""
        dialog.edit_field("path", "/bin/true")

        assert dialog.cancel() is None
        assert dialog.state is EditorState.CANCELLED
        assert dialog.action is None

    def test_closed_dialog_rejects_operations(self, dialog):
        """Test that a closed dialog cannot be edited again."""
        dialog.cancel()

        with pytest.raises(EditorStateError):
            dialog.commit()
        with pytest.raises(EditorStateError):
            dialog.edit_field("path", "x")
        with pytest.raises(EditorStateError):
            dialog.select(ActionKind.EXECUTE)
        with pytest.raises(EditorStateError):
            dialog.cancel()
        with pytest.raises(EditorStateError):
            dialog.support_v1_only = True

    def test_run_action(self, dialog):
        """Test a test run through the active handler."""
        dialog.select(ActionKind.SHOW_MESSAGE)
        dialog.edit_field("message_body", "Hello")

        with patch.object(dialog.active_handler, "display") as display:
            result = dialog.run_action()

        display.assert_called_once_with("", "Hello")
        assert result.status.value == "success"
        assert dialog.state is EditorState.EDITING

    def test_run_not_allowed(self, handler_registry, message_action):
        """Test that test runs require allow_run."""
        dialog = ActionEditDialog(message_action, handlers=handler_registry)

        with pytest.raises(EditorStateError):
            dialog.run_action()

    def test_run_incomplete_action(self, dialog):
        """Test that an incomplete action cannot be test run."""
        with pytest.raises(EditorStateError):
            dialog.run_action()


class TestDefaultHandlers:
    """Test a dialog building its own handlers."""

    def test_builds_registry_from_settings(self):
        """Test that the built-in handlers receive the settings."""
        settings = EditorSettings(smtp_port=587)

        dialog = ActionEditDialog(ShowMessageAction(message_body="x"), settings=settings)

        assert dialog.active_handler.name == "show_message"
        assert dialog.active_handler.settings.smtp_port == 587

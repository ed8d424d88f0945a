"""Pytest configuration and fixtures for action editor tests."""

import pytest

from action_editor.actions import (
    ComHandlerAction,
    EmailAction,
    ExecAction,
    HandlerRegistry,
    ShowMessageAction,
)
from action_editor.config import EditorSettings


@pytest.fixture
def editor_settings():
    """Provide test editor settings."""
    return EditorSettings(
        log_level="DEBUG",
        log_format="plain",
        allow_run=True,
        smtp_port=2525,
        smtp_timeout=5,
    )


@pytest.fixture
def handler_registry(editor_settings):
    """Provide a registry holding the built-in handlers."""
    return HandlerRegistry.create(editor_settings)


@pytest.fixture
def exec_action():
    """Provide a complete program action."""
    return ExecAction(
        id="backup",
        path="/usr/bin/backup",
        arguments="--quick --target /srv",
        working_directory="/srv",
    )


@pytest.fixture
def com_action():
    """Provide a complete COM handler action."""
    return ComHandlerAction(
        class_id="{0B2C4A5E-8F3D-4E1A-9C7B-6D5E4F3A2B1C}",
        data="payload",
    )


@pytest.fixture
def email_action():
    """Provide a complete e-mail action."""
    return EmailAction(
        sender="scheduler@example.com",
        to="ops@example.com; admin@example.com",
        subject="Nightly backup",
        body="The backup finished.",
        server="smtp.example.com",
    )


@pytest.fixture
def message_action():
    """Provide a complete show message action."""
    return ShowMessageAction(title="Reminder", message_body="Stand up!")

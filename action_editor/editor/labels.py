"""Display labels for action kinds."""

from typing import Mapping, Optional, Protocol

from ..actions.base import ActionKind

RESOURCES = {
    "ActionTypeExecute": "Start a program",
    "ActionTypeComHandler": "Custom handler",
    "ActionTypeSendEmail": "Send an e-mail (deprecated)",
    "ActionTypeShowMessage": "Display a message (deprecated)",
}

_RESOURCE_NAMES = {
    ActionKind.EXECUTE: "Execute",
    ActionKind.COM_HANDLER: "ComHandler",
    ActionKind.SEND_EMAIL: "SendEmail",
    ActionKind.SHOW_MESSAGE: "ShowMessage",
}


class LabelProvider(Protocol):
    """Turns an action kind into display text."""

    def label(self, kind: ActionKind) -> str:
        ...


class ResourceLabels:
    """Label lookup in a resource table keyed ``ActionType<Name>``."""

    def __init__(self, resources: Optional[Mapping[str, str]] = None) -> None:
        self.resources = dict(RESOURCES if resources is None else resources)

    def label(self, kind: ActionKind) -> str:
        key = "ActionType" + _RESOURCE_NAMES[kind]
        return self.resources.get(key, _RESOURCE_NAMES[kind])

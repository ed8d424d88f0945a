"""Action handler registry and decorator."""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import structlog

from ..config import EditorSettings
from ..errors import ConfigurationError
from .base import ActionHandler, ActionKind, ActionRecord


logger = structlog.get_logger(__name__)


# Handler classes registered by kind, filled in by importing .builtin
_handler_types: Dict[ActionKind, Tuple[Type[ActionHandler], str, str]] = {}


class HandlerRegistry:
    """Fixed mapping from every action kind to one handler instance.

    Only one handler is active at a time. Activating a kind unbinds the
    previously active handler before the new one is bound.
    """

    def __init__(self, handlers: Mapping[ActionKind, ActionHandler]) -> None:
        """Initialize the registry.

        Args:
            handlers: One handler per action kind

        Raises:
            ConfigurationError: If a kind has no handler or a handler is
                registered under the wrong kind
        """
        missing = [kind.name for kind in ActionKind if kind not in handlers]
        if missing:
            raise ConfigurationError(f"No action handler for: {', '.join(missing)}")

        for kind, handler in handlers.items():
            if handler.kind is not kind:
                raise ConfigurationError(
                    f"Handler '{handler.name}' edits {handler.kind.name}, "
                    f"not {kind.name}"
                )

        self._handlers: Dict[ActionKind, ActionHandler] = dict(handlers)
        self._active: Optional[ActionHandler] = None

        logger.info("Initialized HandlerRegistry", handlers=len(self._handlers))

    @classmethod
    def create(cls, settings: Optional[EditorSettings] = None) -> "HandlerRegistry":
        """Build a registry holding one instance of each registered handler.

        Args:
            settings: Settings passed to every handler

        Returns:
            A new registry with no active handler
        """
        # Import built-in handlers to register them
        from . import builtin  # noqa: F401

        settings = settings or EditorSettings()
        handlers = {
            kind: handler_type(name, description, settings)
            for kind, (handler_type, name, description) in _handler_types.items()
        }
        return cls(handlers)

    @property
    def active(self) -> Optional[ActionHandler]:
        """The handler currently bound to a record."""
        return self._active

    def get(self, kind: ActionKind) -> ActionHandler:
        """Get the handler for a kind.

        Raises:
            KeyError: If the kind is not an ActionKind
        """
        return self._handlers[kind]

    def activate(self, kind: ActionKind, record: ActionRecord) -> ActionHandler:
        """Make the handler for a kind the active one and bind it to a record.

        Args:
            kind: Kind to activate
            record: Record the handler edits, of the same kind

        Returns:
            The newly active handler
        """
        handler = self._handlers[kind]

        self.deactivate()
        handler.bind(record)
        self._active = handler

        logger.debug(
            "Activated action handler",
            handler=handler.name,
            kind=kind.name,
            can_validate=handler.can_validate,
        )
        return handler

    def deactivate(self) -> None:
        """Unbind the active handler, if any."""
        if self._active is None:
            return
        self._active.bind(None)
        logger.debug("Deactivated action handler", handler=self._active.name)
        self._active = None

    def list_handlers(self) -> List[Dict[str, str]]:
        """List all handlers in kind order.

        Returns:
            List of handler info dictionaries
        """
        return [
            {
                "kind": kind.name,
                "name": self._handlers[kind].name,
                "description": self._handlers[kind].description,
            }
            for kind in ActionKind
        ]

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "registered_handlers": len(self._handlers),
            "active_handler": self._active.name if self._active else None,
        }


def register_handler(kind: ActionKind, name: str, description: str = "") -> Any:
    """Decorator to register an action handler class for a kind.

    Args:
        kind: Kind of action the handler edits
        name: Name of the handler
        description: Optional description

    Returns:
        Decorator function
    """
    def decorator(cls: Type[ActionHandler]) -> Type[ActionHandler]:
        if cls.kind is not kind:
            raise ConfigurationError(
                f"{cls.__name__} edits {cls.kind.name}, cannot register for {kind.name}"
            )
        if kind in _handler_types:
            logger.warning(
                "Overriding existing action handler",
                kind=kind.name,
                handler=name,
            )

        _handler_types[kind] = (cls, name, description or f"Action handler for {name}")
        return cls

    return decorator

"""Selection of the current action kind."""

from typing import Optional, Sequence

from ..actions.base import ActionKind


def resolve_selection(
    previous: Optional[ActionKind], legal: Sequence[ActionKind]
) -> ActionKind:
    """Keep the previous kind if it is still legal, else use the first legal kind.

    Args:
        previous: The kind selected before, if any
        legal: Non-empty sequence of selectable kinds

    Returns:
        The kind to select
    """
    if previous is not None and previous in legal:
        return previous
    return legal[0]

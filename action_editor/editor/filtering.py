"""Filtering of the action kinds an editor may offer."""

from typing import Iterable, Tuple

import structlog

from ..actions.base import ActionKind, AvailableActions
from ..errors import ConfigurationError

logger = structlog.get_logger(__name__)


def check_engine_compatibility(
    support_v1_only: bool, use_unified_scheduling_engine: bool
) -> None:
    """Reject the unified engine combined with the version 1.0 feature set.

    Raises:
        ConfigurationError: If both options are set
    """
    if support_v1_only and use_unified_scheduling_engine:
        raise ConfigurationError(
            "Version 1.0 of the Task Scheduler cannot use the Unified Scheduling Engine"
        )


def is_excluded(
    kind: ActionKind,
    support_v1_only: bool,
    use_unified_scheduling_engine: bool,
    available_actions: AvailableActions,
) -> bool:
    """Check whether a kind is ruled out by the given constraints.

    Raises:
        ValueError: If the kind is not a known ActionKind
    """
    if kind is ActionKind.EXECUTE:
        restricted = False
    elif kind is ActionKind.COM_HANDLER:
        restricted = support_v1_only
    elif kind is ActionKind.SEND_EMAIL or kind is ActionKind.SHOW_MESSAGE:
        restricted = support_v1_only or use_unified_scheduling_engine
    else:
        raise ValueError(f"Unknown action kind: {kind!r}")

    return restricted or not (available_actions & kind.flag)


def compute_legal_kinds(
    kinds: Iterable[ActionKind],
    support_v1_only: bool,
    use_unified_scheduling_engine: bool,
    available_actions: AvailableActions,
) -> Tuple[ActionKind, ...]:
    """Compute the kinds that may be selected, keeping the input order.

    Args:
        kinds: Candidate kinds in display order
        support_v1_only: Only the version 1.0 feature set is supported
        use_unified_scheduling_engine: The Unified Scheduling Engine is in use
        available_actions: Kinds the caller allows

    Returns:
        The selectable kinds

    Raises:
        ConfigurationError: If no kind is selectable
    """
    legal = tuple(
        kind
        for kind in kinds
        if not is_excluded(
            kind, support_v1_only, use_unified_scheduling_engine, available_actions
        )
    )

    if not legal:
        logger.error(
            "No action kinds selectable",
            support_v1_only=support_v1_only,
            use_unified_scheduling_engine=use_unified_scheduling_engine,
            available_actions=int(available_actions),
        )
        raise ConfigurationError("no action kinds selectable under current constraints")

    return legal

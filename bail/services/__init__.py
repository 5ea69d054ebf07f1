"""Machine à états du cycle de vie du bail."""

from .context_builder import ContextBuilder, TransitionContext
from .executor import TransitionErrorCode, TransitionExecutor, TransitionResult
from .store import BailStore, DjangoBailStore
from .transitions import (
    TRANSITION_TABLE,
    GuardSeverity,
    TransitionName,
    get_available_transitions,
)


def create_lease_state_machine(store: BailStore | None = None) -> TransitionExecutor:
    """Exécuteur branché sur l'ORM Django, sauf store explicite"""
    return TransitionExecutor(store or DjangoBailStore())


__all__ = [
    "BailStore",
    "ContextBuilder",
    "DjangoBailStore",
    "GuardSeverity",
    "TRANSITION_TABLE",
    "TransitionContext",
    "TransitionErrorCode",
    "TransitionExecutor",
    "TransitionName",
    "TransitionResult",
    "create_lease_state_machine",
    "get_available_transitions",
]

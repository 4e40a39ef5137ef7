from typing import Dict, FrozenSet

from ledgerbooks.exceptions import InvalidStatusTransitionError


def ensure_transition(document: str, transitions: Dict[str, FrozenSet[str]], current: str, requested: str) -> None:
    if requested not in transitions.get(current, frozenset()):
        raise InvalidStatusTransitionError(document, current, requested)

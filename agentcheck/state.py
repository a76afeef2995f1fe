"""Operational state reported to the load balancer.

The store holds exactly one value from a closed vocabulary. It is owned by
the ``AgentCheck`` instance and handed to both channel handlers.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Union


NOT_SET = "NOT SET"


class OperationalState(str, Enum):
    READY = "READY"
    DRAIN = "DRAIN"
    MAINT = "MAINT"
    DOWN = "DOWN"
    FAILED = "FAILED"
    STOPPED = "STOPPED"
    UP = "UP"

    @classmethod
    def names(cls) -> list[str]:
        return [member.value for member in cls]


_ALLOWED = {member.value: member for member in OperationalState}


class StateStore:
    """Mutable operational state shared between handler threads.

    ``set`` and ``get`` take the same lock, so a reader never sees a value
    that is being replaced and concurrent writers are last-writer-wins.
    """

    def __init__(self, initial: Union[OperationalState, str] = OperationalState.UP) -> None:
        self._lock = threading.Lock()
        self._state = OperationalState(initial)

    def set(self, candidate: str) -> str:
        """Apply ``candidate`` (case-insensitive) and return the protocol reply."""

        state = _ALLOWED.get(candidate.upper())
        if state is None:
            return NOT_SET
        with self._lock:
            self._state = state
        return f"{state.value} OK"

    def get(self) -> str:
        with self._lock:
            return self._state.value

"""Per-kind tracking of in-flight text service requests."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum


class AiMode(str, Enum):
    GENERATE = "generate"
    REWRITE = "rewrite"
    SUGGEST = "suggest"
    GRAMMAR = "grammar"


@dataclass(frozen=True)
class RequestTicket:
    """Identifies one request: its kind, its order, and the text it was made against."""

    mode: AiMode
    sequence: int
    text: str


class ActivityTracker:
    """Tracks in-flight requests independently for each AiMode.

    Sequence numbers are monotonic across all modes. A finished request is
    current only if no newer request of the same mode was started after it.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: dict[AiMode, int] = {}
        self._in_flight: dict[AiMode, set[int]] = {mode: set() for mode in AiMode}

    def start(self, mode: AiMode, text: str = "") -> RequestTicket:
        ticket = RequestTicket(mode=mode, sequence=next(self._counter), text=text)
        self._latest[mode] = ticket.sequence
        self._in_flight[mode].add(ticket.sequence)
        return ticket

    def finish(self, ticket: RequestTicket) -> bool:
        """Mark ``ticket`` done; return True if it is still the newest of its mode."""
        self._in_flight[ticket.mode].discard(ticket.sequence)
        return self._latest.get(ticket.mode) == ticket.sequence

    def is_active(self, mode: AiMode) -> bool:
        return bool(self._in_flight[mode])

    @property
    def active_modes(self) -> frozenset[AiMode]:
        return frozenset(mode for mode, pending in self._in_flight.items() if pending)

    @property
    def busy(self) -> bool:
        return any(self._in_flight.values())

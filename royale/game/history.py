"""Round history recorder for tracking every round played at a table."""

from dataclasses import dataclass, field, asdict
from typing import Any

from royale.game.events import EventType, GameEvent


@dataclass
class SeatRecord:
    """One seat's part in a settled round."""

    seat: int
    name: str
    cards: list[str] = field(default_factory=list)
    total: int = 0
    bet: int = 0
    result: str = ""
    delta: int = 0
    chips: int = 0


@dataclass
class RoundRecord:
    """Complete record of a single settled round."""

    round_number: int
    timestamp: str = ""
    dealer_cards: list[str] = field(default_factory=list)
    dealer_total: int = 0
    pooled: bool = False
    pot_before: int = 0
    pot_after: int = 0
    seats: list[SeatRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_event(cls, event: GameEvent) -> "RoundRecord":
        """Build a record from a ROUND_ENDED event."""
        data = dict(event.data)
        seats = [SeatRecord(**seat) for seat in data.pop("seats", [])]
        return cls(
            timestamp=event.timestamp.isoformat(),
            seats=seats,
            **{k: v for k, v in data.items() if k in cls.__dataclass_fields__},
        )


class RoundHistory:
    """
    In-memory history of settled rounds.

    Attach it to a table with ``table.subscribe(history.record, EventType.ROUND_ENDED)``
    or use :meth:`attach`.
    """

    def __init__(self, max_rounds: int = 500) -> None:
        self._rounds: list[RoundRecord] = []
        self._max_rounds = max_rounds

    def attach(self, table) -> "RoundHistory":
        """Start recording the rounds of a table."""
        table.subscribe(self.record, EventType.ROUND_ENDED)
        return self

    def record(self, event: GameEvent) -> None:
        """Store the round carried by a ROUND_ENDED event."""
        if event.event_type != EventType.ROUND_ENDED:
            return
        self._rounds.append(RoundRecord.from_event(event))
        if len(self._rounds) > self._max_rounds:
            self._rounds = self._rounds[-self._max_rounds:]

    @property
    def rounds(self) -> list[RoundRecord]:
        """Return the recorded rounds, oldest first."""
        return self._rounds.copy()

    @property
    def last(self) -> RoundRecord | None:
        """Return the most recent round."""
        return self._rounds[-1] if self._rounds else None

    def results_for_seat(self, seat: int) -> list[str]:
        """Return a seat's results, oldest first."""
        return [s.result for r in self._rounds for s in r.seats if s.seat == seat]

    def net_for_seat(self, seat: int) -> int:
        """Return a seat's total chip delta over the recorded rounds."""
        return sum(s.delta for r in self._rounds for s in r.seats if s.seat == seat)

    def clear(self) -> None:
        """Forget all recorded rounds."""
        self._rounds.clear()

    def __len__(self) -> int:
        return len(self._rounds)

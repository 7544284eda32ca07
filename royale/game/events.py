"""Table events - the engine's log of everything that happens at the table."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of table events."""

    # Table flow events
    TABLE_OPENED = auto()
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()
    NEXT_ROUND = auto()

    # Betting events
    BET_CHANGED = auto()
    BETS_COLLECTED = auto()

    # Card events
    CARD_DEALT = auto()
    DECK_REPLACED = auto()

    # Player action events
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_BUSTS = auto()
    PLAYER_BLACKJACK = auto()
    TURN_STARTED = auto()

    # Dealer events
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()

    # Outcome events
    PLAYER_WINS = auto()
    PLAYER_LOSES = auto()
    PUSH = auto()
    POT_CARRIED_OVER = auto()

    # Error events
    INVALID_ACTION = auto()
    INVALID_BET = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable table event.

    Events are the primary communication mechanism between the engine
    and the presentation layer.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Event emitter with a bounded history.

    Allows subscribing to specific event types or all events.
    """

    def __init__(self, max_history: int | None = None) -> None:
        """
        Initialize the event emitter.

        Args:
            max_history: Keep at most this many events (unbounded if None)
        """
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._event_history: list[GameEvent] = []
        self._max_history = max_history

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """Record an event and call its subscribers, catch-all handlers last."""
        self._event_history.append(event)
        if self._max_history is not None and len(self._event_history) > self._max_history:
            del self._event_history[: len(self._event_history) - self._max_history]

        for handler in list(self._handlers.get(event.event_type, [])):
            handler(event)

        for handler in list(self._handlers.get(None, [])):
            handler(event)

    def emit_new(
        self,
        event_type: EventType,
        **data: Any,
    ) -> GameEvent:
        """
        Create and emit a new event.

        Args:
            event_type: Type of event
            **data: Event data

        Returns:
            The created event
        """
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        """Return the recorded events of one type, oldest first."""
        return [e for e in self._event_history if e.event_type == event_type]

    @property
    def max_history(self) -> int | None:
        """Return the history cap, or None when unbounded."""
        return self._max_history

    @property
    def history(self) -> list[GameEvent]:
        """Return the event history."""
        return self._event_history.copy()

    def clear_history(self) -> None:
        """Clear the event history."""
        self._event_history.clear()

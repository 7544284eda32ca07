"""Table engine, settlement and state management."""

from royale.game.events import GameEvent, EventEmitter, EventType
from royale.game.state import GameState, PlayerStatus, RoundResult
from royale.game.seats import Dealer, Player, next_active_index
from royale.game.settlement import Settlement, classify_result, settle_round
from royale.game.engine import ActionResult, BlackjackTable, start_table
from royale.game.history import RoundHistory, RoundRecord
from royale.game.snapshot import TableSnapshot

__all__ = [
    "GameEvent",
    "EventEmitter",
    "EventType",
    "GameState",
    "PlayerStatus",
    "RoundResult",
    "Dealer",
    "Player",
    "next_active_index",
    "Settlement",
    "classify_result",
    "settle_round",
    "ActionResult",
    "BlackjackTable",
    "start_table",
    "RoundHistory",
    "RoundRecord",
    "TableSnapshot",
]

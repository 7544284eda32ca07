"""Seat and dealer state for a table."""

from dataclasses import dataclass, field
from typing import Sequence

from royale.hand import Hand
from royale.game.state import PlayerStatus, RoundResult


@dataclass
class Player:
    """A seat at the table. Chips persist across rounds; the rest is per round."""

    id: int
    name: str
    chips: int
    bet: int = 0
    hand: Hand = field(default_factory=Hand)
    status: PlayerStatus = PlayerStatus.IDLE
    result: RoundResult = RoundResult.NONE
    round_start_chips: int | None = None

    @property
    def total(self) -> int:
        """Return the current hand total."""
        return self.hand.value

    @property
    def delta(self) -> int:
        """Chips won or lost this round, measured from the pre-debit balance."""
        if self.round_start_chips is None:
            return 0
        return self.chips - self.round_start_chips

    def reset_for_round(self) -> None:
        """Clear per-round fields, keeping the chip balance."""
        self.bet = 0
        self.hand.clear()
        self.status = PlayerStatus.IDLE
        self.result = RoundResult.NONE
        self.round_start_chips = None


@dataclass
class Dealer:
    """The dealer's hand. The hidden flag masks the first card for display only."""

    hand: Hand = field(default_factory=Hand)
    hidden: bool = True

    @property
    def total(self) -> int:
        """Return the dealer total, hidden card included."""
        return self.hand.value

    def reset(self) -> None:
        """Empty the hand and hide the hole card again."""
        self.hand.clear()
        self.hidden = True


def build_players(count: int, starting_chips: int) -> list[Player]:
    """Create ``count`` seats named Player 1..N."""
    return [
        Player(id=index + 1, name=f"Player {index + 1}", chips=starting_chips)
        for index in range(count)
    ]


def next_active_index(players: Sequence[Player], from_index: int) -> int:
    """
    Find the next seat that still has to act.

    Args:
        players: Seats in turn order
        from_index: Scan strictly after this index (-1 to start from the first seat)

    Returns:
        Index of the next active seat, or -1 if none remains
    """
    for index in range(from_index + 1, len(players)):
        if players[index].status == PlayerStatus.ACTIVE:
            return index
    return -1

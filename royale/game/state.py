"""Table phase, seat status and round result enumerations."""

from enum import Enum, auto


class GameState(Enum):
    """
    Table state machine states.

    Flow: BETTING → DEALING → PLAYER_TURNS → DEALER_TURN → SETTLING → ROUND_END
    """

    # Collecting bets for the next round
    BETTING = auto()

    # Cards being dealt
    DEALING = auto()

    # Seats act in order
    PLAYER_TURNS = auto()

    # Dealer reveals and draws
    DEALER_TURN = auto()

    # Paying out bets
    SETTLING = auto()

    # Round settled, waiting for the next round
    ROUND_END = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class PlayerStatus(Enum):
    """Per-round status of a seat."""

    IDLE = "idle"
    ACTIVE = "active"
    STAND = "stand"
    BUST = "bust"
    BLACKJACK = "blackjack"

    @property
    def is_terminal(self) -> bool:
        """Check if the seat has nothing left to do this round."""
        return self in (PlayerStatus.STAND, PlayerStatus.BUST, PlayerStatus.BLACKJACK)


class RoundResult(Enum):
    """Settled outcome of a seat. NONE until settlement."""

    NONE = ""
    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"

    @property
    def is_winner(self) -> bool:
        """Check if the result takes a share of the payout."""
        return self in (RoundResult.WIN, RoundResult.BLACKJACK)


# Valid state transitions
VALID_TRANSITIONS: dict[GameState, list[GameState]] = {
    GameState.BETTING: [GameState.DEALING],
    GameState.DEALING: [GameState.PLAYER_TURNS, GameState.DEALER_TURN],  # DEALER_TURN if nobody can act
    GameState.PLAYER_TURNS: [GameState.DEALER_TURN],
    GameState.DEALER_TURN: [GameState.SETTLING],
    GameState.SETTLING: [GameState.ROUND_END],
    GameState.ROUND_END: [GameState.BETTING],
}


def is_valid_transition(from_state: GameState, to_state: GameState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])

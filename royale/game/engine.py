"""Blackjack table engine with state machine."""

from dataclasses import dataclass
from random import Random
from typing import Callable

from transitions import Machine

from config import TableConfig, config as app_config
from royale.cards import Card, Deck
from royale.hand import Hand
from royale.game.events import EventEmitter, EventType, GameEvent
from royale.game.seats import Dealer, Player, build_players, next_active_index
from royale.game.settlement import Settlement, settle_round
from royale.game.snapshot import TableSnapshot, build_snapshot
from royale.game.state import GameState, PlayerStatus, RoundResult


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a caller action. Falsy when the action was rejected."""

    accepted: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.accepted


_OUTCOME_EVENTS = {
    RoundResult.WIN: EventType.PLAYER_WINS,
    RoundResult.BLACKJACK: EventType.PLAYER_WINS,
    RoundResult.LOSE: EventType.PLAYER_LOSES,
    RoundResult.PUSH: EventType.PUSH,
}


class BlackjackTable:
    """
    Blackjack table engine using a state machine.

    Owns the deck, the dealer and up to four seats for the lifetime of the
    table. Chips persist across rounds; hands, bets, statuses and results
    are reset between rounds. Communication happens through events and
    return values only.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_deal", "source": "betting", "dest": "dealing"},
        {"trigger": "open_turns", "source": "dealing", "dest": "player_turns"},
        {"trigger": "skip_turns", "source": "dealing", "dest": "dealer_turn"},
        {"trigger": "close_turns", "source": "player_turns", "dest": "dealer_turn"},
        {"trigger": "settle", "source": "dealer_turn", "dest": "settling"},
        {"trigger": "finish_round", "source": "settling", "dest": "round_end"},
        {"trigger": "reset_round", "source": "round_end", "dest": "betting"},
    ]

    def __init__(
        self,
        seat_count: int,
        starting_chips: int | None = None,
        config: TableConfig | None = None,
        rng: Random | None = None,
        deck: Deck | None = None,
    ) -> None:
        """
        Open a new table.

        Args:
            seat_count: Number of seats (1 to config.max_seats)
            starting_chips: Chips per seat (uses config default if not provided)
            config: Table rules (uses the global configuration if not provided)
            rng: Random number generator for reproducible shuffles
            deck: Pre-arranged deck, mainly for tests. It is replaced by
                the table below config.reshuffle_threshold like any other
        """
        self.config = config or app_config.table

        if not 1 <= seat_count <= self.config.max_seats:
            raise ValueError(f"Seat count must be between 1 and {self.config.max_seats}")

        if starting_chips is None:
            starting_chips = self.config.starting_chips
        if starting_chips < 0:
            raise ValueError("Starting chips cannot be negative")

        if deck is None:
            deck = Deck(rng=rng, reshuffle_threshold=self.config.reshuffle_threshold)
        self.deck = deck

        self.players: list[Player] = build_players(seat_count, starting_chips)
        self.dealer = Dealer()
        self.pot = 0
        self.round_number = 1
        self.current_index = -1
        self.last_settlement: Settlement | None = None
        self.events = EventEmitter(max_history=self.config.event_history_limit)

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="betting",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

        self.events.emit_new(
            EventType.TABLE_OPENED,
            seats=seat_count,
            starting_chips=starting_chips,
            pooled=self.is_pooled,
        )

    @property
    def state(self) -> GameState:
        """Get current table state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore

    @property
    def is_pooled(self) -> bool:
        """Check if bets go into a shared pot (multiplayer with pooling on)."""
        return self.config.pooled and len(self.players) > 1

    @property
    def current_player(self) -> Player | None:
        """Get the seat whose turn it is."""
        if self.state != GameState.PLAYER_TURNS or self.current_index < 0:
            return None
        return self.players[self.current_index]

    @property
    def deck_remaining(self) -> int:
        """Return the number of cards left in the deck."""
        return self.deck.cards_remaining

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    def snapshot(self) -> TableSnapshot:
        """Return a read-only view of the table for rendering."""
        return build_snapshot(self)

    # Betting

    def set_bet(self, seat_index: int, amount: int) -> ActionResult:
        """Set a seat's bet for the coming round."""
        if amount < 0:
            raise ValueError("Bet amount cannot be negative")
        return self._change_bet(seat_index, lambda player: amount)

    def add_chip(self, seat_index: int, amount: int) -> ActionResult:
        """Add a chip to a seat's bet, capped at the seat's balance."""
        if amount <= 0:
            raise ValueError("Chip amount must be positive")
        return self._change_bet(seat_index, lambda player: min(player.chips, player.bet + amount))

    def clear_bet(self, seat_index: int) -> ActionResult:
        """Take a seat's bet back to zero."""
        return self._change_bet(seat_index, lambda player: 0)

    def all_in(self, seat_index: int) -> ActionResult:
        """Bet a seat's whole balance."""
        return self._change_bet(seat_index, lambda player: player.chips)

    def _change_bet(self, seat_index: int, new_bet: Callable[[Player], int]) -> ActionResult:
        """Apply a bet change to one seat, only while betting."""
        player = self._seat(seat_index)
        if self.state != GameState.BETTING:
            return self._reject("Cannot change bets in current state", seat=player.id)

        player.bet = new_bet(player)
        self.events.emit_new(EventType.BET_CHANGED, seat=player.id, bet=player.bet)
        return ActionResult(True)

    def _seat(self, seat_index: int) -> Player:
        if not 0 <= seat_index < len(self.players):
            raise IndexError(f"No seat at index {seat_index}")
        return self.players[seat_index]

    def _bet_error(self) -> str | None:
        """Return why the current bets cannot be dealt, or None if they can."""
        for player in self.players:
            if player.bet <= 0:
                return f"{player.name} must bet more than 0"
            if player.bet > player.chips:
                return f"{player.name} cannot bet {player.bet} with {player.chips} chips"
        return None

    @property
    def can_deal(self) -> bool:
        """Check if dealing is allowed."""
        return self.state == GameState.BETTING and self._bet_error() is None

    # Dealing

    def deal(self) -> ActionResult:
        """
        Collect bets and deal the opening cards.

        Rejected without touching any state unless every seat bets more
        than zero and no more than its balance.
        """
        if self.state != GameState.BETTING:
            return self._reject("Cannot deal in current state")

        error = self._bet_error()
        if error is not None:
            return self._reject(error, EventType.INVALID_BET)

        self.begin_deal()

        collected = 0
        for player in self.players:
            player.round_start_chips = player.chips
            player.chips -= player.bet
            player.hand.clear()
            player.status = PlayerStatus.ACTIVE
            player.result = RoundResult.NONE
            collected += player.bet

        if self.is_pooled:
            self.pot += collected
        self.events.emit_new(EventType.BETS_COLLECTED, total=collected, pot=self.pot)

        if self.deck.cards_remaining < self.config.reshuffle_threshold:
            self.deck.replace()
            self.events.emit_new(EventType.DECK_REPLACED, cards=self.deck.cards_remaining)

        self.dealer.reset()
        self.last_settlement = None

        # Deal: every seat, dealer (face down), every seat, dealer
        for _ in range(2):
            for player in self.players:
                self._deal_card(player.hand, player.id)
            self._deal_card(self.dealer.hand, "dealer", face_up=bool(self.dealer.hand.cards))

        for player in self.players:
            if player.hand.is_blackjack:
                player.status = PlayerStatus.BLACKJACK
                self.events.emit_new(EventType.PLAYER_BLACKJACK, seat=player.id)

        self.events.emit_new(EventType.ROUND_STARTED, round_number=self.round_number)

        self.current_index = next_active_index(self.players, -1)
        if self.current_index == -1:
            # Nobody can act, straight to the dealer
            self.skip_turns()
            self._play_dealer()
        else:
            self.open_turns()
            self.events.emit_new(EventType.TURN_STARTED, seat=self.players[self.current_index].id)

        return ActionResult(True)

    def _deal_card(self, hand: Hand, seat: int | str, face_up: bool = True) -> Card:
        """Deal a card to a hand."""
        card = self.deck.draw()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            seat=seat,
            hand_value=hand.value if face_up else None,
        )
        return card

    # Player turns

    def hit(self) -> ActionResult:
        """The acting seat takes another card."""
        player = self.current_player
        if player is None:
            return self._reject("Cannot hit in current state")

        self._deal_card(player.hand, player.id)
        total = player.total
        self.events.emit_new(EventType.PLAYER_HIT, seat=player.id, hand_value=total)

        if total > 21:
            player.status = PlayerStatus.BUST
            self.events.emit_new(EventType.PLAYER_BUSTS, seat=player.id, hand_value=total)
            return self._advance_turn()

        if total == 21:
            player.status = PlayerStatus.STAND
            self.events.emit_new(EventType.PLAYER_STAND, seat=player.id, hand_value=total, auto=True)
            return self._advance_turn()

        return ActionResult(True)

    def stand(self) -> ActionResult:
        """The acting seat keeps its hand."""
        player = self.current_player
        if player is None:
            return self._reject("Cannot stand in current state")

        player.status = PlayerStatus.STAND
        self.events.emit_new(EventType.PLAYER_STAND, seat=player.id, hand_value=player.total, auto=False)
        return self._advance_turn()

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self.current_player is not None

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self.current_player is not None

    def _advance_turn(self) -> ActionResult:
        """Pass the turn to the next active seat, or to the dealer."""
        self.current_index = next_active_index(self.players, self.current_index)

        if self.current_index == -1:
            self.close_turns()
            self._play_dealer()
        else:
            self.events.emit_new(EventType.TURN_STARTED, seat=self.players[self.current_index].id)

        return ActionResult(True)

    # Dealer and settlement

    def _play_dealer(self) -> None:
        """Reveal the hole card and draw to the standing total, then settle."""
        self.dealer.hidden = False
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(self.dealer.hand.cards[0]),
            hand_value=self.dealer.total,
        )

        while self.dealer.total < self.config.dealer_stands_on:
            self._deal_card(self.dealer.hand, "dealer")
            self.events.emit_new(EventType.DEALER_HITS, hand_value=self.dealer.total)

        if self.dealer.hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer.total)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer.total)

        self.settle()
        self._resolve_round()

    def _resolve_round(self) -> None:
        """Apply the round's settlement to the seats and the pot."""
        settlement = settle_round(
            self.players,
            self.dealer.hand,
            pot=self.pot,
            pooled=self.is_pooled,
            blackjack_payout=self.config.blackjack_payout,
        )

        for seat in settlement.seats:
            player = self.players[seat.seat_index]
            player.result = seat.result
            player.chips += seat.credit
            self.events.emit_new(
                _OUTCOME_EVENTS[seat.result],
                seat=player.id,
                result=seat.result.value,
                credit=seat.credit,
                delta=player.delta,
            )

        self.pot = settlement.pot_after
        if settlement.pot_carried_over:
            self.events.emit_new(EventType.POT_CARRIED_OVER, amount=self.pot)

        self.last_settlement = settlement
        self.current_index = -1
        self.finish_round()

        self.events.emit_new(
            EventType.ROUND_ENDED,
            round_number=self.round_number,
            dealer_cards=[str(c) for c in self.dealer.hand],
            dealer_total=self.dealer.total,
            pooled=settlement.pooled,
            pot_before=settlement.pot_before,
            pot_after=settlement.pot_after,
            seats=[
                {
                    "seat": p.id,
                    "name": p.name,
                    "cards": [str(c) for c in p.hand],
                    "total": p.total,
                    "bet": p.bet,
                    "result": p.result.value,
                    "delta": p.delta,
                    "chips": p.chips,
                }
                for p in self.players
            ],
        )

    # Next round

    def next_round(self) -> ActionResult:
        """Clear the finished round and go back to betting."""
        if self.state != GameState.ROUND_END:
            return self._reject("Cannot start next round in current state")

        for player in self.players:
            player.reset_for_round()
        self.dealer.reset()
        self.current_index = -1
        self.round_number += 1

        self.reset_round()
        self.events.emit_new(EventType.NEXT_ROUND, round_number=self.round_number)
        return ActionResult(True)

    @property
    def can_next_round(self) -> bool:
        """Check if the next round can start."""
        return self.state == GameState.ROUND_END

    def _reject(
        self,
        message: str,
        event_type: EventType = EventType.INVALID_ACTION,
        **data,
    ) -> ActionResult:
        """Report a rejected action without changing any state."""
        self.events.emit_new(event_type, message=message, state=self.state.name, **data)
        return ActionResult(False, message)


def start_table(
    seat_count: int,
    starting_chips: int | None = None,
    *,
    config: TableConfig | None = None,
    rng: Random | None = None,
    deck: Deck | None = None,
) -> BlackjackTable:
    """Open a table in the betting phase."""
    return BlackjackTable(
        seat_count,
        starting_chips=starting_chips,
        config=config,
        rng=rng,
        deck=deck,
    )

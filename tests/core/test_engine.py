"""Tests for the table engine state machine."""

import pytest
from random import Random

from hypothesis import given, settings, strategies as st

from config import TableConfig
from royale.cards import Deck, create_deck
from royale.game import (
    BlackjackTable,
    EventType,
    GameState,
    PlayerStatus,
    RoundResult,
    start_table,
)


def place_bets(table, *amounts):
    for seat, amount in enumerate(amounts):
        table.set_bet(seat, amount)


def play_basic(table):
    """Hit below 12, otherwise stand, until every seat has acted."""
    while table.current_player is not None:
        if table.current_player.total < 12:
            table.hit()
        else:
            table.stand()


class TestStartTable:
    """Tests for opening a table."""

    def test_initial_state(self, table_config):
        """Test a fresh table is waiting for bets."""
        table = start_table(3, 500, config=table_config, rng=Random(1))
        assert table.state == GameState.BETTING
        assert table.round_number == 1
        assert table.pot == 0
        assert table.deck_remaining == 52
        assert [p.name for p in table.players] == ["Player 1", "Player 2", "Player 3"]
        assert all(p.chips == 500 for p in table.players)
        assert all(p.status == PlayerStatus.IDLE for p in table.players)
        assert table.dealer.hidden

    def test_default_chips_from_config(self, table_config):
        """Test that starting chips default to the config."""
        table = start_table(1, config=table_config)
        assert table.players[0].chips == table_config.starting_chips

    @pytest.mark.parametrize("seats", [0, 5])
    def test_invalid_seat_count(self, table_config, seats):
        """Test that only one to four seats are allowed."""
        with pytest.raises(ValueError):
            start_table(seats, config=table_config)

    def test_negative_chips(self, table_config):
        """Test that a negative balance is rejected."""
        with pytest.raises(ValueError):
            start_table(2, -1, config=table_config)

    def test_pooling_needs_multiple_seats(self, table_config, independent_config):
        """Test when the shared pot is used."""
        assert not start_table(1, config=table_config).is_pooled
        assert start_table(2, config=table_config).is_pooled
        assert not start_table(2, config=independent_config).is_pooled


class TestBetting:
    """Tests for bet adjustments."""

    def test_add_chip_caps_at_balance(self, table):
        """Test that chips stack up to the seat's balance."""
        for _ in range(3):
            table.add_chip(0, 500)
        assert table.players[0].bet == 1000

    def test_clear_and_all_in(self, table):
        """Test clearing and going all in."""
        table.add_chip(1, 25)
        table.clear_bet(1)
        assert table.players[1].bet == 0

        table.all_in(1)
        assert table.players[1].bet == 1000
        assert table.players[0].bet == 0

    def test_bet_change_emits_event(self, table):
        """Test that bet changes are logged."""
        table.set_bet(0, 50)
        event = table.events.of_type(EventType.BET_CHANGED)[-1]
        assert event.data == {"seat": 1, "bet": 50}

    def test_negative_amount_raises(self, table):
        """Test that negative amounts are programming errors."""
        with pytest.raises(ValueError):
            table.set_bet(0, -10)
        with pytest.raises(ValueError):
            table.add_chip(0, 0)

    def test_unknown_seat_raises(self, table):
        """Test that seat indexes are checked."""
        with pytest.raises(IndexError):
            table.set_bet(2, 100)

    def test_bets_locked_after_deal(self, table):
        """Test that bets cannot change outside betting."""
        place_bets(table, 100, 100)
        table.deal()

        result = table.set_bet(0, 300)
        assert not result
        assert table.players[0].bet == 100
        assert table.events.history[-1].event_type == EventType.INVALID_ACTION


class TestDeal:
    """Tests for the betting to dealing transition."""

    @pytest.mark.parametrize("bets", [(100, 0), (100, 1001)])
    def test_invalid_bets_leave_state_untouched(self, table, bets):
        """Test that a rejected deal mutates nothing."""
        place_bets(table, *bets)
        before = table.snapshot()
        deck_before = list(table.deck)

        result = table.deal()

        assert not result
        assert "Player 2" in result.reason
        assert table.snapshot() == before
        assert list(table.deck) == deck_before
        assert table.state == GameState.BETTING
        assert table.events.history[-1].event_type == EventType.INVALID_BET

    def test_deal_order_and_debit(self, make_table):
        """Test round-robin dealing and the bet debit."""
        table = make_table(2, "10S", "10D", "10C", "8H", "9C", "8D")
        place_bets(table, 100, 200)

        assert table.deal()

        a, b = table.players
        assert [str(c) for c in a.hand] == ["10♠", "8♥"]
        assert [str(c) for c in b.hand] == ["10♦", "9♣"]
        assert [str(c) for c in table.dealer.hand] == ["10♣", "8♦"]
        assert (a.chips, b.chips) == (900, 800)
        assert table.pot == 300
        assert table.state == GameState.PLAYER_TURNS
        assert table.current_index == 0
        assert table.dealer.hidden

    def test_hole_card_not_logged(self, make_table):
        """Test that the dealer's face-down card is masked in events."""
        table = make_table(1, "10S", "10C", "8H", "8D")
        place_bets(table, 100)
        table.deal()

        dealt = [e.data for e in table.events.of_type(EventType.CARD_DEALT) if e.data["seat"] == "dealer"]
        assert dealt[0]["card"] == "??"
        assert dealt[1]["card"] == "8♦"

    def test_deck_replaced_below_threshold(self, table_config):
        """Test that a short deck is swapped for a fresh one before dealing."""
        deck = Deck(rng=Random(3), cards=create_deck()[:14])
        table = BlackjackTable(1, 1000, config=table_config, deck=deck)
        place_bets(table, 100)

        table.deal()

        assert table.events.of_type(EventType.DECK_REPLACED)
        assert 30 < table.deck_remaining <= 48

    def test_config_threshold_applies_to_injected_deck(self):
        """Test that the table's replacement threshold overrides the deck's own."""
        config = TableConfig(starting_chips=1000, reshuffle_threshold=30)
        deck = Deck(rng=Random(3), cards=create_deck()[:25])
        table = BlackjackTable(1, config=config, deck=deck)
        place_bets(table, 100)

        table.deal()

        assert table.events.of_type(EventType.DECK_REPLACED)
        assert table.deck_remaining > 25

    def test_can_deal(self, table):
        """Test that can_deal follows bet validity and the phase."""
        assert not table.can_deal

        place_bets(table, 100, 0)
        assert not table.can_deal

        place_bets(table, 100, 1001)
        assert not table.can_deal

        place_bets(table, 100, 1000)
        assert table.can_deal

        table.deal()
        assert not table.can_deal

    def test_all_naturals_skip_to_dealer(self, make_table):
        """Test that the dealer plays at once when nobody can act."""
        table = make_table(2, "AS", "AH", "10C", "KS", "KH", "7C")
        place_bets(table, 100, 100)

        table.deal()

        assert table.state == GameState.ROUND_END
        assert not table.dealer.hidden
        assert [p.result for p in table.players] == [RoundResult.BLACKJACK] * 2
        assert [p.chips for p in table.players] == [1000, 1000]
        assert table.pot == 0


class TestPlayerTurns:
    """Tests for hit and stand."""

    def test_hit_below_21_keeps_turn(self, make_table):
        """Test that the same seat keeps acting after a safe hit."""
        table = make_table(1, "5S", "10C", "6H", "7C", "2D")
        place_bets(table, 100)
        table.deal()

        assert table.hit()
        assert table.players[0].total == 13
        assert table.players[0].status == PlayerStatus.ACTIVE
        assert table.current_index == 0
        assert table.state == GameState.PLAYER_TURNS

    def test_hit_to_21_auto_stands(self, make_table):
        """Test that reaching 21 ends the turn."""
        table = make_table(1, "5S", "10C", "6H", "7C", "KD")
        place_bets(table, 100)
        table.deal()

        table.hit()

        player = table.players[0]
        assert player.status == PlayerStatus.STAND
        assert player.result == RoundResult.WIN
        assert player.chips == 1100
        assert table.state == GameState.ROUND_END
        assert table.events.of_type(EventType.PLAYER_STAND)[-1].data["auto"] is True

    def test_bust_skips_terminal_seats(self, make_table):
        """Test that the pointer passes over a seat that already has blackjack."""
        table = make_table(3, "10S", "AS", "9S", "10C", "6H", "KH", "7H", "7C", "KD")
        place_bets(table, 100, 100, 100)
        table.deal()

        assert table.players[1].status == PlayerStatus.BLACKJACK
        assert table.current_index == 0

        table.hit()
        assert table.players[0].status == PlayerStatus.BUST
        assert table.current_index == 2
        assert table.current_player is table.players[2]

        table.stand()
        assert table.state == GameState.ROUND_END
        assert [p.result for p in table.players] == [
            RoundResult.LOSE,
            RoundResult.BLACKJACK,
            RoundResult.LOSE,
        ]
        assert [p.chips for p in table.players] == [900, 1200, 900]
        assert table.pot == 0

    def test_dealer_draws_to_17(self, make_table):
        """Test that the dealer hits below 17 and stands on 17 or more."""
        table = make_table(1, "10S", "5C", "8H", "2D", "3C", "4H", "9S")
        place_bets(table, 100)
        table.deal()
        table.stand()

        assert [str(c) for c in table.dealer.hand] == ["5♣", "2♦", "3♣", "4♥", "9♠"]
        assert table.dealer.total == 23
        assert table.players[0].result == RoundResult.WIN
        assert table.events.of_type(EventType.DEALER_BUSTS)

    @pytest.mark.parametrize("action", ["hit", "stand"])
    def test_actions_rejected_outside_turns(self, table, action):
        """Test that hit and stand are no-ops while betting."""
        before = table.snapshot()

        result = getattr(table, action)()

        assert not result
        assert table.snapshot() == before
        assert table.events.history[-1].event_type == EventType.INVALID_ACTION
        assert not table.can_hit
        assert not table.can_stand


class TestSettlement:
    """Tests for settlement through the engine."""

    def test_single_seat_blackjack_pays_3_to_2(self, make_table):
        """Test bet 100 blackjack returns 250 for a +150 round."""
        table = make_table(1, "AS", "9C", "KH", "7D", "5D")
        place_bets(table, 100)
        table.deal()

        player = table.players[0]
        assert table.state == GameState.ROUND_END
        assert table.dealer.total == 21
        assert player.result == RoundResult.BLACKJACK
        assert player.chips == 1150
        assert player.delta == 150
        assert table.last_settlement.for_seat(0).credit == 250

    def test_pooled_push_and_winner(self, make_table):
        """Test A pushes and B takes the rest of a 300 pot."""
        table = make_table(2, "10S", "10D", "10C", "8H", "9C", "8D")
        place_bets(table, 100, 200)
        table.deal()
        table.stand()
        table.stand()

        a, b = table.players
        assert (a.result, b.result) == (RoundResult.PUSH, RoundResult.WIN)
        assert a.chips == 1000
        assert b.chips == 1000
        assert (a.delta, b.delta) == (0, 0)
        assert table.pot == 0

    def test_independent_multiplayer(self, make_table, independent_config):
        """Test that pooling can be turned off for several seats."""
        table = make_table(2, "10S", "10D", "10C", "9H", "6C", "8D", config=independent_config)
        place_bets(table, 100, 100)
        table.deal()
        table.stand()
        table.stand()

        assert [p.chips for p in table.players] == [1100, 900]
        assert table.pot == 0

    def test_pot_carries_over_without_winners(self, make_table):
        """Test that an unclaimed pot stays through next_round and grows."""
        table = make_table(2, "10S", "10D", "10C", "6H", "5C", "9D")
        place_bets(table, 100, 100)
        table.deal()
        table.stand()
        table.stand()

        assert [p.result for p in table.players] == [RoundResult.LOSE] * 2
        assert table.pot == 200
        assert table.events.of_type(EventType.POT_CARRIED_OVER)[-1].data == {"amount": 200}

        table.next_round()
        assert table.pot == 200

        place_bets(table, 100, 100)
        table.deal()
        assert table.pot == 400

    def test_round_ended_event(self, make_table):
        """Test the round summary carried by ROUND_ENDED."""
        table = make_table(1, "AS", "9C", "KH", "7D", "5D")
        place_bets(table, 100)
        table.deal()

        data = table.events.of_type(EventType.ROUND_ENDED)[-1].data
        assert data["round_number"] == 1
        assert data["dealer_total"] == 21
        assert data["seats"][0]["result"] == "blackjack"
        assert data["seats"][0]["delta"] == 150

    @settings(max_examples=25, deadline=None)
    @given(st.integers(min_value=0, max_value=10_000))
    def test_pooled_chips_are_conserved(self, seed):
        """Test that chips plus pot never change in pooled mode."""
        config = TableConfig(starting_chips=1000, pooled=True)
        table = BlackjackTable(2, config=config, rng=Random(seed))
        assert table.is_pooled

        for _ in range(5):
            place_bets(table, 100, 100)
            assert table.deal()
            play_basic(table)
            assert table.state == GameState.ROUND_END
            assert sum(p.chips for p in table.players) + table.pot == 2000
            table.next_round()

    @settings(max_examples=25, deadline=None)
    @given(st.integers(min_value=0, max_value=10_000))
    def test_independent_chips_balance_against_house(self, seed):
        """Test that seat chips plus the house result never change without pooling."""
        config = TableConfig(starting_chips=1000, pooled=False)
        table = BlackjackTable(2, config=config, rng=Random(seed))
        assert not table.is_pooled

        house = 0
        for _ in range(5):
            place_bets(table, 100, 100)
            assert table.deal()
            play_basic(table)
            house += sum(s.bet - s.credit for s in table.last_settlement.seats)
            assert table.pot == 0
            assert sum(p.chips for p in table.players) + house == 2000
            table.next_round()


class TestNextRound:
    """Tests for resetting between rounds."""

    def test_reset_keeps_chips(self, make_table):
        """Test that per-round fields clear and chips stay."""
        table = make_table(1, "AS", "9C", "KH", "7D", "5D")
        place_bets(table, 100)
        table.deal()

        assert table.next_round()

        player = table.players[0]
        assert player.bet == 0
        assert len(player.hand) == 0
        assert player.status == PlayerStatus.IDLE
        assert player.result == RoundResult.NONE
        assert player.chips == 1150
        assert table.round_number == 2
        assert len(table.dealer.hand) == 0
        assert table.dealer.hidden
        assert table.state == GameState.BETTING

    def test_next_round_only_after_settlement(self, table):
        """Test that next_round is rejected while betting."""
        result = table.next_round()
        assert not result
        assert table.round_number == 1
        assert not table.can_next_round

    def test_deal_rejected_during_turns(self, make_table):
        """Test that a second deal is ignored mid-round."""
        table = make_table(1, "10S", "10C", "6H", "7C")
        place_bets(table, 100)
        table.deal()

        assert not table.deal()
        assert table.players[0].chips == 900


class TestReproducibility:
    """Tests for seeded play."""

    def test_same_seed_same_round(self, table_config):
        """Test that two tables with the same seed deal identically."""
        tables = [BlackjackTable(2, 1000, config=table_config, rng=Random(7)) for _ in range(2)]
        for table in tables:
            place_bets(table, 50, 75)
            table.deal()

        assert tables[0].snapshot() == tables[1].snapshot()


class TestEventLog:
    """Tests for the table's event history."""

    def test_history_is_capped(self):
        """Test that long sessions keep only the most recent events."""
        config = TableConfig(starting_chips=1000, pooled=True, event_history_limit=50)
        table = BlackjackTable(2, config=config, rng=Random(11))

        for _ in range(30):
            place_bets(table, 10, 10)
            table.deal()
            while table.current_player is not None:
                table.stand()
            table.next_round()

        history = table.events.history
        assert len(history) <= 50
        assert history[-1].event_type == EventType.NEXT_ROUND
        assert history[-1].data["round_number"] == 31
        assert table.events.of_type(EventType.ROUND_ENDED)[-1].data["round_number"] == 30

    def test_default_limit_from_config(self, table):
        """Test that the table uses the configured history limit."""
        assert table.events.max_history == 1000

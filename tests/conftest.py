"""Pytest fixtures for blackjack table tests."""

import pytest
from decimal import Decimal
from random import Random

from config import TableConfig
from royale.cards import Card, Deck, Rank, Suit
from royale.hand import Hand
from royale.game import BlackjackTable


def _make_hand(*cards: str) -> Hand:
    """Build a hand from card strings like 'AS', '10H'."""
    return Hand([Card.from_string(c) for c in cards])


def _stacked_deck(*draws: str, filler: int = 20) -> Deck:
    """
    Build a deck that deals ``draws`` in the given order.

    Filler cards sit under the scripted ones so the deck stays above the
    replacement threshold.
    """
    bottom = [Card(Rank.TWO, Suit.CLUBS)] * filler
    top = [Card.from_string(c) for c in reversed(draws)]
    return Deck(cards=bottom + top)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    return Deck(rng=rng)


@pytest.fixture
def table_config():
    """Table rules independent of the environment."""
    return TableConfig(
        starting_chips=1000,
        max_seats=4,
        reshuffle_threshold=15,
        dealer_stands_on=17,
        blackjack_payout=Decimal("1.5"),
        chip_denominations=(10, 25, 50, 100, 250, 500),
        pooled=True,
        event_history_limit=1000,
    )


@pytest.fixture
def independent_config(table_config):
    """Table rules with pot pooling turned off."""
    return TableConfig(
        starting_chips=table_config.starting_chips,
        pooled=False,
    )


@pytest.fixture
def make_table(table_config):
    """Factory for a table dealing a scripted card order."""

    def _make(seat_count, *draws, config=None, starting_chips=1000):
        return BlackjackTable(
            seat_count,
            starting_chips=starting_chips,
            config=config or table_config,
            deck=_stacked_deck(*draws),
        )

    return _make


@pytest.fixture
def table(table_config, rng):
    """A two-seat table with a shuffled deck."""
    return BlackjackTable(2, starting_chips=1000, config=table_config, rng=rng)


@pytest.fixture
def empty_hand():
    """An empty hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return _make_hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return _make_hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return _make_hand("10S", "6H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return _make_hand("10S", "6H", "KC")


@pytest.fixture
def hand_of():
    """Factory for hands built from card strings."""
    return _make_hand


@pytest.fixture
def deck_of():
    """Factory for decks dealing a scripted card order."""
    return _stacked_deck

"""Card and Deck classes - immutable card representations."""

from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterable, Iterator, Sequence


class Suit(Enum):
    """Card suits, in deck-building order."""

    SPADES = auto()
    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.SPADES: "♠",
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, in deck-building order (Ace low)."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the nominal point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        return min(self.value, 10)

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE


_RANK_LOOKUP = {str(rank): rank for rank in Rank} | {"T": Rank.TEN}

_SUIT_LOOKUP = {
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card. Suit is cosmetic; rank drives the value."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the nominal blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like 'A♠', '10H', 'Kc'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str, suit_str = s[:-1], s[-1]
        if rank_str not in _RANK_LOOKUP:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_LOOKUP:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_LOOKUP[rank_str], _SUIT_LOOKUP[suit_str])


def create_deck() -> list[Card]:
    """Build the 52 cards of a standard deck in a fixed order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def shuffle(cards: Sequence[Card], rng: Random | None = None) -> list[Card]:
    """
    Return a uniformly random permutation of the cards.

    The input sequence is left untouched.
    """
    shuffled = list(cards)
    (rng or Random()).shuffle(shuffled)
    return shuffled


def draw_card(cards: Sequence[Card]) -> tuple[Card, list[Card]]:
    """
    Take the top (last) card of a sequence.

    Returns:
        The drawn card and the remaining cards

    Raises:
        IndexError: If the sequence is empty
    """
    if not cards:
        raise IndexError("Cannot draw from empty deck")
    remaining = list(cards)
    card = remaining.pop()
    return card, remaining


class Deck:
    """A single 52-card deck, drawn from the top like a stack."""

    def __init__(
        self,
        rng: Random | None = None,
        cards: Iterable[Card] | None = None,
        reshuffle_threshold: int = 15,
    ) -> None:
        """
        Initialize a deck.

        Args:
            rng: Random number generator for shuffling
            cards: Explicit card order (last card is drawn first);
                a freshly shuffled deck is used when omitted
            reshuffle_threshold: Low-water mark below which the deck is replaced
        """
        if reshuffle_threshold < 0:
            raise ValueError("Reshuffle threshold cannot be negative")

        self._rng = rng or Random()
        self._reshuffle_threshold = reshuffle_threshold
        self._cards: list[Card] = []
        if cards is None:
            self.replace()
        else:
            self._cards = list(cards)

    def replace(self) -> None:
        """Discard the remaining cards and substitute a freshly shuffled deck."""
        self._cards = shuffle(create_deck(), self._rng)

    def draw(self) -> Card:
        """Draw a card from the top of the deck."""
        card, self._cards = draw_card(self._cards)
        return card

    @property
    def needs_replacement(self) -> bool:
        """Check if the deck has fallen below the low-water mark."""
        return len(self._cards) < self._reshuffle_threshold

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

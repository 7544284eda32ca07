"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from royale.cards import Card


def calculate_hand(cards: Iterable[Card]) -> int:
    """
    Calculate the best blackjack total.

    Aces count 11 and drop to 1, one at a time, while the total is over 21.
    """
    total = 0
    aces = 0

    for card in cards:
        total += card.value
        if card.is_ace:
            aces += 1

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total


def is_blackjack(cards: Iterable[Card]) -> bool:
    """Check for a natural blackjack (21 with exactly two cards)."""
    cards = list(cards)
    return len(cards) == 2 and calculate_hand(cards) == 21


@dataclass
class Hand:
    """A blackjack hand held by a seat or the dealer."""

    cards: list[Card] = field(default_factory=list)

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def clear(self) -> None:
        """Remove all cards from the hand."""
        self.cards.clear()

    @property
    def value(self) -> int:
        """Return the best total for the hand."""
        return calculate_hand(self.cards)

    @property
    def is_soft(self) -> bool:
        """
        Check if the hand is soft (has an ace still counted as 11).
        """
        hard_total = sum(1 if card.is_ace else card.value for card in self.cards)
        return any(card.is_ace for card in self.cards) and hard_total + 10 <= 21

    @property
    def is_blackjack(self) -> bool:
        """Check if the hand is a natural blackjack."""
        return is_blackjack(self.cards)

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > 21

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        if self.is_blackjack:
            return f"{cards_str} (BLACKJACK)"
        if self.is_busted:
            return f"{cards_str} (BUST)"
        if self.is_soft:
            return f"{cards_str} (soft {self.value})"
        return f"{cards_str} ({self.value})"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value})"

"""Blackjack table engine - 100% UI-agnostic."""

from royale.cards import Card, Deck, Rank, Suit, create_deck, draw_card, shuffle
from royale.hand import Hand, calculate_hand, is_blackjack

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "create_deck",
    "draw_card",
    "shuffle",
    "Hand",
    "calculate_hand",
    "is_blackjack",
]

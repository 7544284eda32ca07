"""Read-only table snapshots for the presentation layer."""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from royale.cards import Card

if TYPE_CHECKING:
    from royale.game.engine import BlackjackTable


class CardView(BaseModel):
    """Card representation."""

    model_config = ConfigDict(frozen=True)

    rank: str
    suit: str
    value: int
    label: str


class DealerView(BaseModel):
    """Dealer hand, hole card masked while hidden."""

    model_config = ConfigDict(frozen=True)

    cards: list[CardView | None]
    hidden: bool
    total: int | None


class SeatView(BaseModel):
    """One seat at the table."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    chips: int = Field(..., ge=0)
    bet: int = Field(..., ge=0)
    cards: list[CardView]
    total: int | None
    status: str
    result: str
    delta: int
    is_acting: bool


class TableSnapshot(BaseModel):
    """Everything the presentation layer renders."""

    model_config = ConfigDict(frozen=True)

    state: str
    round_number: int
    pooled: bool
    pot: int
    deck_remaining: int
    current_index: int
    chip_denominations: list[int]
    dealer: DealerView
    seats: list[SeatView]


def card_view(card: Card) -> CardView:
    """Convert a card to its view."""
    return CardView(
        rank=str(card.rank),
        suit=str(card.suit),
        value=card.value,
        label=str(card),
    )


def build_snapshot(table: "BlackjackTable") -> TableSnapshot:
    """Capture the current state of a table."""
    dealer = table.dealer
    dealer_cards = [
        None if dealer.hidden and index == 0 else card_view(card)
        for index, card in enumerate(dealer.hand)
    ]
    acting = table.current_player

    seats = [
        SeatView(
            id=player.id,
            name=player.name,
            chips=player.chips,
            bet=player.bet,
            cards=[card_view(card) for card in player.hand],
            total=player.total if len(player.hand) else None,
            status=player.status.value,
            result=player.result.value,
            delta=player.delta,
            is_acting=player is acting,
        )
        for player in table.players
    ]

    return TableSnapshot(
        state=table.state.name.lower(),
        round_number=table.round_number,
        pooled=table.is_pooled,
        pot=table.pot,
        deck_remaining=table.deck_remaining,
        current_index=table.current_index,
        chip_denominations=list(table.config.chip_denominations),
        dealer=DealerView(
            cards=dealer_cards,
            hidden=dealer.hidden,
            total=None if dealer.hidden or not len(dealer.hand) else dealer.total,
        ),
        seats=seats,
    )

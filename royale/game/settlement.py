"""Round settlement: result classification and chip payouts."""

import math
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Sequence

from royale.hand import Hand
from royale.game.seats import Player
from royale.game.state import PlayerStatus, RoundResult


@dataclass(frozen=True)
class SeatSettlement:
    """Settled outcome for one seat."""

    seat_index: int
    result: RoundResult
    bet: int
    credit: int  # Chips returned to the seat, stake included


@dataclass(frozen=True)
class Settlement:
    """Outcome of settling a whole round."""

    seats: tuple[SeatSettlement, ...]
    pooled: bool
    pot_before: int
    pot_after: int

    @property
    def pot_carried_over(self) -> bool:
        """Check if an undistributed pot stays on the table."""
        return self.pooled and self.pot_after > 0

    def for_seat(self, seat_index: int) -> SeatSettlement:
        """Return the settlement of one seat."""
        for seat in self.seats:
            if seat.seat_index == seat_index:
                return seat
        raise KeyError(seat_index)


def classify_result(
    status: PlayerStatus,
    player_hand: Hand,
    dealer_hand: Hand,
) -> RoundResult:
    """
    Classify a seat's result against the dealer's final hand.

    Precedence: player bust, double natural, dealer natural,
    player natural, dealer bust, then plain totals.
    """
    if status == PlayerStatus.BUST or player_hand.is_busted:
        return RoundResult.LOSE

    player_bj = player_hand.is_blackjack
    dealer_bj = dealer_hand.is_blackjack

    if player_bj and dealer_bj:
        return RoundResult.PUSH
    if dealer_bj:
        return RoundResult.LOSE
    if player_bj:
        return RoundResult.BLACKJACK
    if dealer_hand.is_busted:
        return RoundResult.WIN

    player_value = player_hand.value
    dealer_value = dealer_hand.value
    if player_value > dealer_value:
        return RoundResult.WIN
    if player_value < dealer_value:
        return RoundResult.LOSE
    return RoundResult.PUSH


def payout_multiplier(result: RoundResult, blackjack_payout: Decimal | float = Decimal("1.5")) -> Fraction:
    """Return the independent-mode credit per chip staked, stake included."""
    if result == RoundResult.BLACKJACK:
        return 1 + Fraction(str(blackjack_payout))
    return {
        RoundResult.WIN: Fraction(2),
        RoundResult.PUSH: Fraction(1),
    }.get(result, Fraction(0))


def independent_credit(bet: int, result: RoundResult, blackjack_payout: Decimal | float = Decimal("1.5")) -> int:
    """Credit for a seat paid by the house. Half chips are floored."""
    return math.floor(bet * payout_multiplier(result, blackjack_payout))


def split_pot(amount: int, weights: Sequence[Fraction]) -> list[int]:
    """
    Divide whole chips proportionally to weights (largest-remainder method).

    Every chip of ``amount`` is handed out: each share is floored, then the
    leftover chips go one at a time to the largest fractional parts, ties
    broken by position.
    """
    total_weight = sum(weights, Fraction(0))
    if total_weight <= 0:
        raise ValueError("Cannot split a pot without positive weights")

    exact = [Fraction(amount) * w / total_weight for w in weights]
    shares = [math.floor(x) for x in exact]
    leftover = amount - sum(shares)

    by_remainder = sorted(range(len(exact)), key=lambda i: (-(exact[i] - shares[i]), i))
    for i in by_remainder[:leftover]:
        shares[i] += 1

    return shares


def settle_round(
    players: Sequence[Player],
    dealer_hand: Hand,
    pot: int = 0,
    pooled: bool = False,
    blackjack_payout: Decimal | float = Decimal("1.5"),
) -> Settlement:
    """
    Settle every seat against the dealer's final hand.

    Args:
        players: Seats in turn order, with final hands and statuses
        dealer_hand: Dealer's final hand
        pot: Shared pot holding this round's bets (pooled mode only)
        pooled: Distribute the pot among winners instead of paying from the house
        blackjack_payout: Blackjack payout ratio (1.5 for 3:2); also the
            blackjack weight in pooled mode

    Returns:
        Settlement with a credit per seat and the pot left on the table
    """
    results = [classify_result(p.status, p.hand, dealer_hand) for p in players]

    if not pooled:
        seats = tuple(
            SeatSettlement(i, result, p.bet, independent_credit(p.bet, result, blackjack_payout))
            for i, (p, result) in enumerate(zip(players, results))
        )
        return Settlement(seats=seats, pooled=False, pot_before=pot, pot_after=pot)

    credits = [0] * len(players)
    remaining = pot

    # Pushes are refunded first and leave the distributable pool
    for i, (p, result) in enumerate(zip(players, results)):
        if result == RoundResult.PUSH:
            remaining -= p.bet
            credits[i] += p.bet

    ratio = Fraction(str(blackjack_payout))
    winners = [i for i, result in enumerate(results) if result.is_winner]
    weights = [
        players[i].bet * (ratio if results[i] == RoundResult.BLACKJACK else 1)
        for i in winners
    ]

    if sum(weights) > 0:
        for i, share in zip(winners, split_pot(remaining, weights)):
            credits[i] += share
        pot_after = 0
    else:
        pot_after = remaining

    seats = tuple(
        SeatSettlement(i, result, p.bet, credits[i])
        for i, (p, result) in enumerate(zip(players, results))
    )
    return Settlement(seats=seats, pooled=True, pot_before=pot, pot_after=pot_after)

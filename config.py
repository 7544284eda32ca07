"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field
from decimal import Decimal


def _parse_bool(name: str, default: str) -> bool:
    """Parse a boolean environment variable."""
    return os.getenv(name, default).lower() == "true"


def _parse_denominations() -> tuple[int, ...]:
    """Parse TABLE_CHIP_DENOMINATIONS environment variable."""
    raw = os.getenv("TABLE_CHIP_DENOMINATIONS", "10,25,50,100,250,500")
    return tuple(int(d.strip()) for d in raw.split(",") if d.strip())


@dataclass(frozen=True)
class TableConfig:
    """Default table configuration."""

    starting_chips: int = field(
        default_factory=lambda: int(os.getenv("TABLE_STARTING_CHIPS", "1000"))
    )
    max_seats: int = 4
    reshuffle_threshold: int = 15  # Replace the deck below this many cards
    dealer_stands_on: int = 17
    blackjack_payout: Decimal = Decimal("1.5")
    chip_denominations: tuple[int, ...] = field(default_factory=_parse_denominations)
    pooled: bool = field(default_factory=lambda: _parse_bool("TABLE_POOLED", "true"))
    event_history_limit: int = field(
        default_factory=lambda: int(os.getenv("TABLE_EVENT_HISTORY", "1000"))
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    table: TableConfig = field(default_factory=TableConfig)


# Global configuration instance
config = AppConfig()

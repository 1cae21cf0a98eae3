"""
Trade offers between two players.

Side A is the proposer (``from_idx``), side B the receiver (``to_idx``).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable

from monopoly_uk.cards import DeckType

if TYPE_CHECKING:
    from monopoly_uk.state import TurnPhase


class MortgageTransferChoice(Enum):
    """What the receiver of a mortgaged deed does with the mortgage."""

    KEEP_MORTGAGED = "keep_mortgaged"
    PAY_OFF_NOW = "pay_off_now"


def mortgage_fee(mortgage_value: int, percent: int = 10) -> int:
    """Interest on a mortgage, rounded up to a whole unit."""
    return (mortgage_value * percent + 99) // 100


@dataclass(frozen=True)
class TradeOffer:
    """
    Items exchanged in a trade.

    Raises ValueError for a self-trade or negative amounts.
    """

    from_idx: int
    to_idx: int
    tiles_a_to_b: FrozenSet[int] = frozenset()
    tiles_b_to_a: FrozenSet[int] = frozenset()
    cash_a_to_b: int = 0
    cash_b_to_a: int = 0
    gojf_a_to_b: Dict[DeckType, int] = field(default_factory=dict)
    gojf_b_to_a: Dict[DeckType, int] = field(default_factory=dict)
    choices_to_b: Dict[int, MortgageTransferChoice] = field(default_factory=dict)
    choices_to_a: Dict[int, MortgageTransferChoice] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.from_idx == self.to_idx:
            raise ValueError("a player cannot trade with themselves")
        if self.cash_a_to_b < 0 or self.cash_b_to_a < 0:
            raise ValueError("trade cash must be non-negative")
        for counts in (self.gojf_a_to_b, self.gojf_b_to_a):
            if any(count < 0 for count in counts.values()):
                raise ValueError("card counts must be non-negative")
        object.__setattr__(self, "tiles_a_to_b", frozenset(self.tiles_a_to_b))
        object.__setattr__(self, "tiles_b_to_a", frozenset(self.tiles_b_to_a))
        object.__setattr__(self, "gojf_a_to_b", dict(self.gojf_a_to_b))
        object.__setattr__(self, "gojf_b_to_a", dict(self.gojf_b_to_a))
        object.__setattr__(self, "choices_to_b", dict(self.choices_to_b))
        object.__setattr__(self, "choices_to_a", dict(self.choices_to_a))

    @classmethod
    def cash_for_tiles(
        cls,
        from_idx: int,
        to_idx: int,
        tiles: Iterable[int],
        cash: int,
    ) -> "TradeOffer":
        """Offer ``cash`` from the proposer for the receiver's ``tiles``."""
        return cls(from_idx, to_idx, tiles_b_to_a=frozenset(tiles), cash_a_to_b=cash)

    def choice_for_tile_going_to_b(self, tile: int) -> MortgageTransferChoice:
        return self.choices_to_b.get(tile, MortgageTransferChoice.KEEP_MORTGAGED)

    def choice_for_tile_going_to_a(self, tile: int) -> MortgageTransferChoice:
        return self.choices_to_a.get(tile, MortgageTransferChoice.KEEP_MORTGAGED)

    def gojf_total_a_to_b(self) -> int:
        return sum(self.gojf_a_to_b.values())

    def gojf_total_b_to_a(self) -> int:
        return sum(self.gojf_b_to_a.values())

    def exchanges_anything(self) -> bool:
        return bool(
            self.tiles_a_to_b
            or self.tiles_b_to_a
            or self.cash_a_to_b
            or self.cash_b_to_a
            or self.gojf_total_a_to_b()
            or self.gojf_total_b_to_a()
        )

    def flips_participants_of(self, other: "TradeOffer") -> bool:
        return self.from_idx == other.to_idx and self.to_idx == other.from_idx

    def describe(self) -> str:
        def side(tiles, cash, gojf) -> str:
            items = []
            if cash:
                items.append(f"£{cash}")
            if tiles:
                items.append("tiles " + ",".join(str(t) for t in sorted(tiles)))
            cards = sum(gojf.values())
            if cards:
                items.append(f"{cards} GOJF")
            return " + ".join(items) if items else "nothing"

        return (
            f"P{self.from_idx + 1} gives {side(self.tiles_a_to_b, self.cash_a_to_b, self.gojf_a_to_b)}"
            f" for {side(self.tiles_b_to_a, self.cash_b_to_a, self.gojf_b_to_a)}"
            f" from P{self.to_idx + 1}"
        )


@dataclass
class PendingTrade:
    """An offer awaiting a response, plus where control returns afterwards."""

    offer: TradeOffer
    return_player_index: int
    phase_before_trade: "TurnPhase"

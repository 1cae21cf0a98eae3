"""
Actions issued by players and the results the engine returns.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from monopoly_uk.exceptions import MonopolyError


class ActionType(Enum):
    """All action types a player can issue."""

    ROLL_DICE = "roll_dice"
    BUY_PROPERTY = "buy_property"
    START_AUCTION = "start_auction"
    AUCTION_BID = "auction_bid"
    AUCTION_PASS = "auction_pass"
    BUILD_HOUSE = "build_house"
    BUILD_HOTEL = "build_hotel"
    SELL_HOUSE = "sell_house"
    SELL_HOTEL = "sell_hotel"
    MORTGAGE = "mortgage"
    UNMORTGAGE = "unmortgage"
    USE_GET_OUT_OF_JAIL_FREE = "use_get_out_of_jail_free"
    END_TURN = "end_turn"
    PROPOSE_TRADE = "propose_trade"
    COUNTER_TRADE = "counter_trade"
    ACCEPT_TRADE = "accept_trade"
    REJECT_TRADE = "reject_trade"
    CANCEL_TRADE = "cancel_trade"


@dataclass(frozen=True)
class Action:
    """
    A player action.

    ``tile_index`` is used by property actions, ``amount`` by bids and
    ``payload`` carries a ``TradeOffer`` for propose/counter.
    """

    type: ActionType
    tile_index: Optional[int] = None
    amount: Optional[int] = None
    payload: Any = None

    @classmethod
    def on_tile(cls, action_type: ActionType, tile_index: int) -> "Action":
        return cls(action_type, tile_index=tile_index)

    @classmethod
    def bid(cls, amount: int) -> "Action":
        return cls(ActionType.AUCTION_BID, amount=amount)

    @classmethod
    def with_payload(cls, action_type: ActionType, payload: Any) -> "Action":
        return cls(action_type, payload=payload)

    def __repr__(self) -> str:
        parts = [self.type.name]
        if self.tile_index is not None:
            parts.append(f"tile={self.tile_index}")
        if self.amount is not None:
            parts.append(f"amount={self.amount}")
        if self.payload is not None:
            parts.append("payload")
        return f"Action({', '.join(parts)})"


@dataclass
class ActionResult:
    """Outcome of an action: success flag plus human-readable events."""

    ok: bool
    events: List[str] = field(default_factory=list)
    error: Optional[MonopolyError] = None

    @classmethod
    def success(cls, *events: str) -> "ActionResult":
        return cls(True, list(events))

    @classmethod
    def failure(cls, error: MonopolyError) -> "ActionResult":
        return cls(False, [str(error)], error)

    @property
    def reason(self) -> Optional[str]:
        return None if self.ok else (self.events[0] if self.events else None)

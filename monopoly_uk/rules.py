"""
Legal-action enumeration for drivers and agents.
"""

from typing import TYPE_CHECKING, Callable, List

from monopoly_uk.actions import Action, ActionType
from monopoly_uk.exceptions import MonopolyError
from monopoly_uk.state import GameStatus, TurnPhase

if TYPE_CHECKING:
    from monopoly_uk.engine import GameEngine

# Property actions probed per owned tile, with the check that must pass
_TILE_ACTIONS = (
    (ActionType.BUILD_HOUSE, "check_build_house", (TurnPhase.MANAGEMENT, TurnPhase.TURN_END)),
    (ActionType.BUILD_HOTEL, "check_build_hotel", (TurnPhase.MANAGEMENT, TurnPhase.TURN_END)),
    (ActionType.SELL_HOUSE, "check_sell_house", None),
    (ActionType.SELL_HOTEL, "check_sell_hotel", None),
    (ActionType.MORTGAGE, "check_mortgage", None),
    (ActionType.UNMORTGAGE, "check_unmortgage", None),
)


def _passes(check: Callable, *args) -> bool:
    try:
        check(*args)
    except MonopolyError:
        return False
    return True


def legal_actions(engine: "GameEngine") -> List[Action]:
    """
    Get the actions the engine would accept from the current actor.

    Does not mutate state. Call ``start_turn_if_needed`` first; a turn that
    has not started yet has no legal actions. Bids are listed once at the
    minimum raise, and trade proposals and counters are left out because
    their payload is up to the caller.
    """
    s = engine.state
    if s.status is GameStatus.FINISHED or s.phase is TurnPhase.START_TURN:
        return []

    actions: List[Action] = []
    player_index = s.current_player_index
    player = s.current_player

    if s.phase is TurnPhase.IN_JAIL_DECISION:
        actions.append(Action(ActionType.ROLL_DICE))
        if player.gojf_cards:
            actions.append(Action(ActionType.USE_GET_OUT_OF_JAIL_FREE))
        return actions

    if s.phase in (TurnPhase.MUST_ROLL, TurnPhase.CAN_ROLL_AGAIN):
        return [Action(ActionType.ROLL_DICE)]

    if s.phase is TurnPhase.LANDED_DECISION:
        if player.cash >= engine.purchase_price(s.landed_tile_index):
            actions.append(Action(ActionType.BUY_PROPERTY, tile_index=s.landed_tile_index))
        actions.append(Action(ActionType.START_AUCTION, tile_index=s.landed_tile_index))
        return actions

    if s.phase is TurnPhase.AUCTION_ACTIVE:
        auction = s.auction
        minimum = auction.high_bid + 1
        if s.players[auction.current_bidder].cash >= minimum:
            actions.append(Action.bid(minimum))
        actions.append(Action(ActionType.AUCTION_PASS))
        return actions

    if s.phase is TurnPhase.TRADE_RESPONSE:
        if _passes(engine.validate_trade, s.pending_trade.offer):
            actions.append(Action(ActionType.ACCEPT_TRADE))
        actions.append(Action(ActionType.REJECT_TRADE))
        # Cancelling is done on behalf of the proposer
        actions.append(Action(ActionType.CANCEL_TRADE, payload=s.pending_trade.offer.from_idx))
        return actions

    # MANAGEMENT, TURN_END and MUST_RESOLVE_DEBT
    for tile in s.owned_indices(player_index):
        for action_type, check_name, phases in _TILE_ACTIONS:
            if phases is not None and s.phase not in phases:
                continue
            if _passes(getattr(engine, check_name), player_index, tile):
                actions.append(Action.on_tile(action_type, tile))

    if player.cash >= 0 or not engine.can_raise_cash(player_index):
        actions.append(Action(ActionType.END_TURN))
    return actions

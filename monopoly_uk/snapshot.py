"""
Public snapshot serialization of the game.

Produces a sanitized, UI-friendly view of the current game without
exposing hidden information (e.g., deck order).
"""

from typing import Any, Dict, List, Union

from monopoly_uk.cards import DeckType
from monopoly_uk.deeds import StreetDeed
from monopoly_uk.state import GameState


def serialize_snapshot(game: Union[GameState, Any]) -> Dict[str, Any]:
    """Serialize game state into a plain dict.

    Accepts a ``GameState`` or anything with a ``state`` attribute
    (such as ``GameEngine``). The snapshot includes:
    - phase, status, current player and winner
    - players with public info (cash, position, jail, cards, properties)
    - bank supply counts
    - active auction and pending trade (if any)
    - deck sizes only
    """
    state: GameState = game if isinstance(game, GameState) else game.state

    players: List[Dict[str, Any]] = []
    for index, pstate in enumerate(state.players):
        props: List[Dict[str, Any]] = []
        for tile in state.owned_indices(index):
            ps = state.properties[tile]
            entry: Dict[str, Any] = {
                "tile_index": tile,
                "name": state.board.name_of(tile),
                "buildings": ps.buildings,
                "has_hotel": ps.has_hotel,
                "mortgaged": ps.mortgaged,
            }
            deed = state.deeds[tile]
            if isinstance(deed, StreetDeed):
                entry["colour_group"] = deed.group.value
            props.append(entry)

        players.append(
            {
                "index": index,
                "name": pstate.name,
                "cash": pstate.cash,
                "position": pstate.position,
                "in_jail": pstate.in_jail,
                "jail_turns_remaining": pstate.jail_turns_remaining,
                "gojf_cards": {
                    "chance": pstate.count_gojf(DeckType.CHANCE),
                    "community_chest": pstate.count_gojf(DeckType.COMMUNITY_CHEST),
                },
                "bankrupt": pstate.bankrupt,
                "properties": props,
            }
        )

    auction = None
    if state.auction is not None:
        a = state.auction
        auction = {
            "tile_index": a.tile_index,
            "high_bid": a.high_bid,
            "high_bidder": a.high_bidder,
            "current_bidder": a.current_bidder,
            "active": [i for i, flag in enumerate(a.active_flags) if flag],
        }

    trade = None
    if state.pending_trade is not None:
        offer = state.pending_trade.offer
        trade = {
            "from": offer.from_idx,
            "to": offer.to_idx,
            "summary": offer.describe(),
            "return_player": state.pending_trade.return_player_index,
        }

    return {
        "phase": state.phase.name,
        "status": state.status.name,
        "current_player": state.current_player_index,
        "winner": state.winner_index,
        "doubles_this_turn": state.doubles_this_turn,
        "last_roll_total": state.last_roll_total,
        "landed_tile": state.landed_tile_index,
        "players": players,
        "bank": {
            "houses_remaining": state.bank.houses_remaining,
            "hotels_remaining": state.bank.hotels_remaining,
        },
        "auction": auction,
        "pending_trade": trade,
        "decks": {
            "chance": len(state.chance_deck),
            "community_chest": len(state.community_deck),
        },
    }

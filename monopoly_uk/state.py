"""
Game state: everything the engine mutates.
"""

from enum import Enum
from typing import Dict, List, Optional

from monopoly_uk.auction import Auction
from monopoly_uk.bank import Bank
from monopoly_uk.board import Board
from monopoly_uk.cards import CardDeck, DeckType
from monopoly_uk.deeds import ColourGroup, Deed, street_groups
from monopoly_uk.player import PlayerState, PropertyState
from monopoly_uk.trade import PendingTrade, TradeOffer


class TurnPhase(Enum):
    """Phases of a player's turn."""

    START_TURN = "start_turn"
    IN_JAIL_DECISION = "in_jail_decision"
    MUST_ROLL = "must_roll"
    CAN_ROLL_AGAIN = "can_roll_again"
    LANDED_DECISION = "landed_decision"
    AUCTION_ACTIVE = "auction_active"
    MANAGEMENT = "management"
    MUST_RESOLVE_DEBT = "must_resolve_debt"
    TRADE_RESPONSE = "trade_response"
    TURN_END = "turn_end"


class GameStatus(Enum):
    RUNNING = "running"
    FINISHED = "finished"


class GameState:
    """
    Aggregates board, players, property registry, decks and bank supply.

    Only the engine mutates a GameState; other code should treat it as
    read-only.
    """

    def __init__(
        self,
        board: Board,
        deeds: Dict[int, Deed],
        players: List[PlayerState],
        chance_deck: CardDeck,
        community_deck: CardDeck,
        bank: Bank,
    ):
        self.board = board
        self.deeds = deeds
        self.players = players
        self.chance_deck = chance_deck
        self.community_deck = community_deck
        self.bank = bank

        self.properties: Dict[int, PropertyState] = {index: PropertyState() for index in deeds}
        self.colour_groups: Dict[ColourGroup, List[int]] = street_groups(deeds)

        self.current_player_index = 0
        self.phase = TurnPhase.START_TURN
        self.doubles_this_turn = 0
        self.rolled_doubles = False
        self.last_roll_total = 0
        self.landed_tile_index: Optional[int] = None

        self.auction: Optional[Auction] = None
        self.pending_trade: Optional[PendingTrade] = None

        self.status = GameStatus.RUNNING
        self.winner_index: Optional[int] = None

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_index]

    def property_state(self, tile_index: int) -> Optional[PropertyState]:
        return self.properties.get(tile_index)

    def deck_for(self, deck_type: DeckType) -> CardDeck:
        return self.chance_deck if deck_type is DeckType.CHANCE else self.community_deck

    def owned_indices(self, player_index: int) -> List[int]:
        return sorted(i for i, ps in self.properties.items() if ps.owner_index == player_index)

    def active_player_indices(self) -> List[int]:
        return [i for i, p in enumerate(self.players) if not p.bankrupt]

    def is_valid_player(self, player_index: int) -> bool:
        return 0 <= player_index < len(self.players)

    def advance_turn_skipping_bankrupt(self) -> None:
        n = len(self.players)
        for step in range(1, n + 1):
            candidate = (self.current_player_index + step) % n
            if not self.players[candidate].bankrupt:
                self.current_player_index = candidate
                break
        self.doubles_this_turn = 0
        self.rolled_doubles = False
        self.last_roll_total = 0
        self.landed_tile_index = None
        self.phase = TurnPhase.START_TURN

    # Auction

    def start_auction(self, tile_index: int, starting_bidder: int) -> Auction:
        flags = [not p.bankrupt for p in self.players]
        self.auction = Auction(tile_index, starting_bidder, flags)
        self.phase = TurnPhase.AUCTION_ACTIVE
        return self.auction

    def end_auction(self) -> None:
        self.auction = None

    # Trades

    def begin_trade_response(self, offer: TradeOffer) -> None:
        """Record a new proposal and hand control to its receiver."""
        self.pending_trade = PendingTrade(offer, self.current_player_index, self.phase)
        self.current_player_index = offer.to_idx
        self.phase = TurnPhase.TRADE_RESPONSE

    def switch_trade_responder(self, offer: TradeOffer) -> None:
        """Replace the pending offer with a counter; the turn owner is kept."""
        self.pending_trade.offer = offer
        self.current_player_index = offer.to_idx

    def end_trade_response(self) -> None:
        pending = self.pending_trade
        self.pending_trade = None
        if pending is not None:
            self.current_player_index = pending.return_player_index
            self.phase = pending.phase_before_trade

    # End of game

    def set_winner(self, player_index: int) -> None:
        self.status = GameStatus.FINISHED
        self.winner_index = player_index

    def houses_on_board(self) -> int:
        return sum(ps.buildings for ps in self.properties.values() if ps.buildings < 5)

    def hotels_on_board(self) -> int:
        return sum(1 for ps in self.properties.values() if ps.buildings == 5)

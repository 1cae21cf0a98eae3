"""
Rules engine: validates player actions against the turn phase and
mutates game state.

Every handler validates first and raises a ``MonopolyError`` subclass when
the action is illegal; only after all checks pass does it touch state.
``GameEngine.apply`` turns those errors into failed results, so a rejected
action never changes the game.
"""

import logging
import math
import random
from typing import Callable, Dict, List, Optional, Sequence, Union

from monopoly_uk.actions import Action, ActionResult, ActionType
from monopoly_uk.bank import Bank
from monopoly_uk.board import BOARD_SIZE, JAIL_INDEX, Board, TileType, nearest_forward, standard_board
from monopoly_uk.cards import Card, CardDeck, DeckType, chance_cards, community_chest_cards
from monopoly_uk.config import GameConfig, get_engine_settings
from monopoly_uk.deeds import (
    Deed,
    RailroadDeed,
    StreetDeed,
    UtilityDeed,
    railroad_indices,
    uk_classic_deeds,
    utility_indices,
)
from monopoly_uk.dice import Dice
from monopoly_uk.exceptions import (
    ArgumentViolation,
    EconomicViolation,
    FatalState,
    MonopolyError,
    OwnershipViolation,
    PhaseViolation,
    RuleViolation,
)
from monopoly_uk.player import Player, PlayerState, PropertyState
from monopoly_uk.state import GameState, GameStatus, TurnPhase
from monopoly_uk.trade import MortgageTransferChoice, TradeOffer, mortgage_fee

logger = logging.getLogger(__name__)

# Auction valuation heuristic
LANDING_PROBABILITY = 1.0 / 40.0
BID_HORIZON_TURNS = 20
BID_SAFETY_RESERVE = 200
SET_COMPLETION_BONUS = 1.35
AVERAGE_ROLL = 7

MANAGEMENT_PHASES = (TurnPhase.MANAGEMENT, TurnPhase.TURN_END)
DEBT_PHASES = (TurnPhase.MANAGEMENT, TurnPhase.TURN_END, TurnPhase.MUST_RESOLVE_DEBT)
ROLL_PHASES = (TurnPhase.MUST_ROLL, TurnPhase.CAN_ROLL_AGAIN, TurnPhase.IN_JAIL_DECISION)


class GameEngine:
    """
    Phase-driven action dispatcher.

    The driver calls ``start_turn_if_needed`` and then ``apply`` repeatedly.
    During an auction the acting player is the current bidder; during a
    trade response it is the player the offer is addressed to.
    """

    def __init__(self, state: GameState, config: GameConfig, dice: Dice):
        self.state = state
        self.config = config
        self.dice = dice
        self.last_drawn_card: Optional[Card] = None
        self._handlers: Dict[ActionType, Callable[[Action], List[str]]] = {
            ActionType.ROLL_DICE: self._handle_roll,
            ActionType.BUY_PROPERTY: self._handle_buy,
            ActionType.START_AUCTION: self._handle_start_auction,
            ActionType.AUCTION_BID: self._handle_bid,
            ActionType.AUCTION_PASS: self._handle_pass,
            ActionType.BUILD_HOUSE: self._handle_build_house,
            ActionType.BUILD_HOTEL: self._handle_build_hotel,
            ActionType.SELL_HOUSE: self._handle_sell_house,
            ActionType.SELL_HOTEL: self._handle_sell_hotel,
            ActionType.MORTGAGE: self._handle_mortgage,
            ActionType.UNMORTGAGE: self._handle_unmortgage,
            ActionType.USE_GET_OUT_OF_JAIL_FREE: self._handle_use_gojf,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.PROPOSE_TRADE: self._handle_propose_trade,
            ActionType.COUNTER_TRADE: self._handle_counter_trade,
            ActionType.ACCEPT_TRADE: self._handle_accept_trade,
            ActionType.REJECT_TRADE: self._handle_reject_trade,
            ActionType.CANCEL_TRADE: self._handle_cancel_trade,
        }

    @property
    def deeds(self) -> Dict[int, Deed]:
        return self.state.deeds

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start_turn_if_needed(self) -> ActionResult:
        """
        Enter the current player's turn if it has not started yet.

        Bankrupt seats are skipped. A jailed player starts in
        IN_JAIL_DECISION, everyone else in MUST_ROLL.
        """
        s = self.state
        if s.status is GameStatus.FINISHED:
            return ActionResult.failure(FatalState("Game is finished."))
        if s.phase is not TurnPhase.START_TURN:
            return ActionResult.success()

        if s.current_player.bankrupt:
            s.advance_turn_skipping_bankrupt()

        s.doubles_this_turn = 0
        s.rolled_doubles = False
        player = s.current_player
        if player.in_jail:
            s.phase = TurnPhase.IN_JAIL_DECISION
            event = f"{player.name} starts turn in jail ({player.jail_turns_remaining} attempts left)."
        else:
            s.phase = TurnPhase.MUST_ROLL
            event = f"{player.name} starts turn on {s.board.tile_at(player.position)}."
        logger.info("%s", event)
        return ActionResult.success(event)

    def apply(self, action: Optional[Action]) -> ActionResult:
        """Validate and apply one action. Never raises for illegal actions."""
        if action is None:
            return ActionResult.failure(ArgumentViolation("No action given."))
        if self.state.status is GameStatus.FINISHED:
            return ActionResult.failure(FatalState("Game is finished."))

        started = self.start_turn_if_needed()
        handler = self._handlers.get(action.type)
        if handler is None:
            return ActionResult.failure(ArgumentViolation(f"Unknown action {action.type!r}."))

        try:
            events = handler(action)
        except MonopolyError as exc:
            logger.debug("Rejected %r in %s: %s %s", action, self.state.phase.name, exc.kind, exc)
            return ActionResult.failure(exc)

        logger.debug("Applied %r -> %s", action, self.state.phase.name)
        return ActionResult(True, started.events + events)

    def estimate_max_bid(self, bidder_idx: int, tile_idx: int) -> int:
        """
        Rough auction ceiling for a bidder.

        Expected rent over a short horizon from every opponent landing with
        probability 1/40 per turn, capped by cash kept above a safety reserve.
        """
        s = self.state
        deed = self.deeds.get(tile_idx)
        if deed is None or not s.is_valid_player(bidder_idx):
            return 0
        bidder = s.players[bidder_idx]
        opponents = sum(1 for i, p in enumerate(s.players) if i != bidder_idx and not p.bankrupt)

        expected_rent = 0.0
        if isinstance(deed, StreetDeed):
            group = s.colour_groups[deed.group]
            completes_set = all(
                i == tile_idx or s.properties[i].owner_index == bidder_idx for i in group
            )
            has_set = all(s.properties[i].owner_index == bidder_idx for i in group)
            rent_level = 1 if (has_set or completes_set) else 0
            expected_rent = deed.rents[rent_level]
            if completes_set:
                expected_rent *= SET_COMPLETION_BONUS
        elif isinstance(deed, RailroadDeed):
            owned = self._count_owned(bidder_idx, railroad_indices(self.deeds))
            expected_rent = deed.rent_for(min(4, owned + 1))
        elif isinstance(deed, UtilityDeed):
            owned = self._count_owned(bidder_idx, utility_indices(self.deeds))
            expected_rent = AVERAGE_ROLL * deed.multiplier(min(2, owned + 1))

        ev = opponents * BID_HORIZON_TURNS * LANDING_PROBABILITY * expected_rent
        cap_by_cash = max(0, bidder.cash - BID_SAFETY_RESERVE)
        return max(0, min(cap_by_cash, math.floor(ev)))

    # Deed economics

    def purchase_price(self, tile_index: int) -> int:
        deed = self.deeds.get(tile_index)
        return deed.price if deed is not None else 0

    def mortgage_value(self, tile_index: int) -> int:
        deed = self.deeds.get(tile_index)
        return deed.mortgage_value if deed is not None else 0

    def unmortgage_cost(self, tile_index: int) -> int:
        value = self.mortgage_value(tile_index)
        return value + mortgage_fee(value, self.config.mortgage_fee_percent)

    def compute_rent(self, tile_index: int) -> int:
        """
        Rent owed by a visitor, using the last dice total for utilities.

        Unowned or mortgaged deeds charge nothing.
        """
        deed = self.deeds.get(tile_index)
        ps = self.state.property_state(tile_index)
        if deed is None or ps is None or not ps.is_owned or ps.mortgaged:
            return 0

        owner = ps.owner_index
        if isinstance(deed, StreetDeed):
            rent = deed.rent_for(ps.buildings)
            if (
                self.config.double_rent_on_unimproved_sets
                and ps.buildings == 0
                and self._owns_unmortgaged_group(owner, deed)
            ):
                rent *= 2
            return rent
        if isinstance(deed, RailroadDeed):
            return deed.rent_for(self._count_owned(owner, railroad_indices(self.deeds)))
        if isinstance(deed, UtilityDeed):
            owned = self._count_owned(owner, utility_indices(self.deeds))
            return deed.multiplier(owned) * self.state.last_roll_total
        return 0

    # ------------------------------------------------------------------
    # Card-helper API, called from card effects
    # ------------------------------------------------------------------

    def move_current_player_relative(self, delta: int, collect_go_if_pass: bool) -> List[str]:
        player = self.state.current_player
        start = player.position
        destination = (start + delta) % BOARD_SIZE
        events = []
        if delta > 0 and start + delta >= BOARD_SIZE and collect_go_if_pass:
            events.extend(self._pay_go_salary(player))
        events.extend(self._place(player, destination, "moves"))
        events.extend(self._resolve_landing())
        return events

    def advance_to_absolute(self, destination: int, collect_go_if_pass: bool) -> List[str]:
        player = self.state.current_player
        events = []
        if destination < player.position and collect_go_if_pass:
            events.extend(self._pay_go_salary(player))
        events.extend(self._place(player, destination, "advances"))
        events.extend(self._resolve_landing())
        return events

    def go_to_jail_no_salary(self) -> List[str]:
        return self._send_to_jail(self.state.current_player)

    def award_get_out_of_jail_free(self) -> List[str]:
        card = self.last_drawn_card
        if card is None or not card.is_get_out_of_jail_free:
            return []
        player = self.state.current_player
        self.state.deck_for(card.deck_type).remove(card)
        player.add_gojf(card)
        return [f"{player.name} keeps the Get Out of Jail Free card."]

    def pay_bank(self, amount: int) -> List[str]:
        player = self.state.current_player
        player.subtract_cash(amount)
        return [f"{player.name} pays £{amount} to the bank (cash £{player.cash})."]

    def receive_bank(self, amount: int) -> List[str]:
        player = self.state.current_player
        player.add_cash(amount)
        return [f"{player.name} receives £{amount} from the bank (cash £{player.cash})."]

    def pay_each_other_player(self, amount: int) -> List[str]:
        s = self.state
        payer = s.current_player
        events = []
        for index, other in enumerate(s.players):
            if index == s.current_player_index or other.bankrupt:
                continue
            payer.subtract_cash(amount)
            other.add_cash(amount)
            events.append(f"{payer.name} pays £{amount} to {other.name}.")
        return events

    def collect_from_each_other_player(self, amount: int) -> List[str]:
        """Collect from every opponent; nobody pays more than the cash they hold."""
        s = self.state
        collector = s.current_player
        events = []
        for index, other in enumerate(s.players):
            if index == s.current_player_index or other.bankrupt:
                continue
            transfer = min(amount, max(other.cash, 0))
            other.subtract_cash(transfer)
            collector.add_cash(transfer)
            events.append(f"{collector.name} collects £{transfer} from {other.name}.")
        return events

    def pay_per_building(self, per_house: int, per_hotel: int) -> List[str]:
        s = self.state
        houses = hotels = 0
        for index in s.owned_indices(s.current_player_index):
            ps = s.properties[index]
            if ps.has_hotel:
                hotels += 1
            else:
                houses += ps.buildings
        total = houses * per_house + hotels * per_hotel
        player = s.current_player
        player.subtract_cash(total)
        return [f"{player.name} pays £{total} for {houses} houses and {hotels} hotels."]

    def advance_to_nearest_station_double_rent(self) -> List[str]:
        return self._advance_to_nearest(railroad_indices(self.deeds), self._double_railroad_rent)

    def advance_to_nearest_utility_special_rent(self) -> List[str]:
        return self._advance_to_nearest(utility_indices(self.deeds), self._utility_card_rent)

    def gamble_then_maybe_jail(self, threshold: int, win_amount: int, lose_amount: int) -> List[str]:
        player = self.state.current_player
        roll = self.dice.roll()
        events = [f"{player.name} throws {roll}."]
        if roll.total >= threshold:
            events.extend(self.receive_bank(win_amount))
            return events
        events.extend(self.pay_bank(lose_amount))
        events.extend(self._send_to_jail(player))
        return events

    # ------------------------------------------------------------------
    # Movement and landing
    # ------------------------------------------------------------------

    def _pay_go_salary(self, player: PlayerState) -> List[str]:
        player.add_cash(self.config.go_salary)
        return [f"{player.name} passes GO and collects £{self.config.go_salary}."]

    def _place(self, player: PlayerState, destination: int, verb: str) -> List[str]:
        player.position = destination
        self.state.landed_tile_index = destination
        return [f"{player.name} {verb} to {self.state.board.tile_at(destination)}."]

    def _move_by(self, steps: int) -> List[str]:
        player = self.state.current_player
        start = player.position
        events = []
        if start + steps >= BOARD_SIZE:
            events.extend(self._pay_go_salary(player))
        events.extend(self._place(player, (start + steps) % BOARD_SIZE, "moves"))
        return events

    def _send_to_jail(self, player: PlayerState) -> List[str]:
        s = self.state
        player.send_to_jail(JAIL_INDEX, self.config.jail_max_turns)
        s.landed_tile_index = JAIL_INDEX
        s.rolled_doubles = False
        s.phase = TurnPhase.TURN_END
        return [f"{player.name} goes to jail."]

    def _resolve_landing(self) -> List[str]:
        """Apply the effect of the tile the current player stands on."""
        s = self.state
        player = s.current_player
        tile = s.board.tile_at(player.position)
        s.landed_tile_index = tile.index

        if tile.tile_type is TileType.CHANCE:
            return self._draw_card(DeckType.CHANCE)
        if tile.tile_type is TileType.COMMUNITY_CHEST:
            return self._draw_card(DeckType.COMMUNITY_CHEST)
        if tile.tile_type is TileType.GO_TO_JAIL and self.config.enforce_go_to_jail_tile:
            return self._send_to_jail(player)
        if tile.tile_type is TileType.TAX and self.config.charge_tax_tiles:
            s.phase = TurnPhase.MANAGEMENT
            player.subtract_cash(tile.amount)
            return [f"{player.name} pays £{tile.amount} {tile.name} (cash £{player.cash})."]

        deed = self.deeds.get(tile.index)
        if deed is None:
            s.phase = TurnPhase.MANAGEMENT
            return []

        ps = s.properties[tile.index]
        if not ps.is_owned:
            s.phase = TurnPhase.LANDED_DECISION
            return [f"{tile.name} is unowned (£{deed.price}): BUY_PROPERTY or START_AUCTION."]
        if ps.owner_index == s.current_player_index or ps.mortgaged:
            s.phase = TurnPhase.MANAGEMENT
            return []

        s.phase = TurnPhase.MANAGEMENT
        return self._pay_rent(ps.owner_index, self.compute_rent(tile.index))

    def _pay_rent(self, owner_index: int, rent: int) -> List[str]:
        s = self.state
        payer = s.current_player
        owner = s.players[owner_index]
        payer.subtract_cash(rent)
        owner.add_cash(rent)
        if payer.cash < 0:
            s.phase = TurnPhase.MUST_RESOLVE_DEBT
        return [f"{payer.name} pays £{rent} rent to {owner.name}."]

    def _draw_card(self, deck_type: DeckType) -> List[str]:
        s = self.state
        s.phase = TurnPhase.MANAGEMENT
        try:
            card = s.deck_for(deck_type).draw_top()
        except LookupError:
            return [f"{deck_type.label}: no cards left to draw."]
        self.last_drawn_card = card
        events = [f"{deck_type.label}: {card.text}"]
        events.extend(card.effect(self))
        return events

    def _advance_to_nearest(
        self,
        candidates: Sequence[int],
        pay: Callable[[int, int], List[str]],
    ) -> List[str]:
        s = self.state
        player = s.current_player
        destination = nearest_forward(player.position, candidates)
        if destination is None:
            return []
        events = []
        if destination < player.position:
            events.extend(self._pay_go_salary(player))
        events.extend(self._place(player, destination, "advances"))

        ps = s.properties[destination]
        if ps.is_owned and ps.owner_index != s.current_player_index and not ps.mortgaged:
            s.phase = TurnPhase.MANAGEMENT
            events.extend(pay(destination, ps.owner_index))
            return events
        events.extend(self._resolve_landing())
        return events

    def _double_railroad_rent(self, tile_index: int, owner_index: int) -> List[str]:
        return self._pay_rent(owner_index, 2 * self.compute_rent(tile_index))

    def _utility_card_rent(self, tile_index: int, owner_index: int) -> List[str]:
        roll = self.dice.roll()
        self.state.last_roll_total = roll.total
        events = [f"{self.state.current_player.name} throws {roll} for the utility."]
        events.extend(self._pay_rent(owner_index, 10 * roll.total))
        return events

    def _settle_phase(self, resting: TurnPhase) -> None:
        """
        Choose where the turn continues once nothing is left to decide.

        Open decisions (purchase, auction, trade) are left alone and debt
        wins over ``resting``.
        """
        s = self.state
        if s.status is GameStatus.FINISHED:
            return
        if s.phase in (TurnPhase.LANDED_DECISION, TurnPhase.AUCTION_ACTIVE, TurnPhase.TRADE_RESPONSE):
            return
        if s.current_player.cash < 0:
            s.phase = TurnPhase.MUST_RESOLVE_DEBT
            return
        if s.phase in (TurnPhase.MANAGEMENT, TurnPhase.MUST_RESOLVE_DEBT):
            s.phase = resting

    # ------------------------------------------------------------------
    # Dice and jail
    # ------------------------------------------------------------------

    def _handle_roll(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("roll", *ROLL_PHASES)
        if s.phase is TurnPhase.IN_JAIL_DECISION:
            return self._roll_in_jail()

        player = s.current_player
        roll = self.dice.roll()
        s.last_roll_total = roll.total
        events = [f"{player.name} rolls {roll}."]

        if roll.is_double:
            s.doubles_this_turn += 1
            if s.doubles_this_turn >= 3:
                events.append("Third double in a row.")
                events.extend(self._send_to_jail(player))
                return events
        s.rolled_doubles = roll.is_double

        events.extend(self._move_by(roll.total))
        events.extend(self._resolve_landing())
        # Doubles only earn another roll from a plain landing with no debt
        self._settle_phase(TurnPhase.CAN_ROLL_AGAIN if s.rolled_doubles else TurnPhase.TURN_END)
        if s.phase is not TurnPhase.CAN_ROLL_AGAIN:
            s.rolled_doubles = False
        return events

    def _roll_in_jail(self) -> List[str]:
        s = self.state
        player = s.current_player
        roll = self.dice.roll()
        s.last_roll_total = roll.total
        s.rolled_doubles = False
        events = [f"{player.name} rolls {roll} in jail."]

        if roll.is_double:
            player.release_from_jail()
            events.append(f"{player.name} rolled doubles and leaves jail.")
            events.extend(self._move_by(roll.total))
            events.extend(self._resolve_landing())
            self._settle_phase(TurnPhase.TURN_END)
            return events

        player.decrement_jail_turn()
        if player.jail_turns_remaining > 0:
            s.phase = TurnPhase.TURN_END
            events.append(f"{player.name} stays in jail ({player.jail_turns_remaining} attempts left).")
            return events

        player.subtract_cash(self.config.jail_fine)
        player.release_from_jail()
        events.append(f"{player.name} pays the £{self.config.jail_fine} fine and leaves jail.")
        roll = self.dice.roll()
        s.last_roll_total = roll.total
        events.append(f"{player.name} rolls {roll}.")
        events.extend(self._move_by(roll.total))
        events.extend(self._resolve_landing())
        self._settle_phase(TurnPhase.TURN_END)
        return events

    def _handle_use_gojf(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("use a Get Out of Jail Free card", TurnPhase.IN_JAIL_DECISION)
        player = s.current_player
        if not player.gojf_cards:
            raise RuleViolation(f"{player.name} holds no Get Out of Jail Free card.")
        card = player.use_gojf()
        s.deck_for(card.deck_type).return_to_bottom(card)
        player.release_from_jail()
        s.phase = TurnPhase.MUST_ROLL
        return [f"{player.name} uses a Get Out of Jail Free card and leaves jail."]

    # ------------------------------------------------------------------
    # Purchase and auction
    # ------------------------------------------------------------------

    def _landed_deed_tile(self, action: Action) -> int:
        s = self.state
        tile = s.landed_tile_index
        if action.tile_index is not None and action.tile_index != tile:
            raise ArgumentViolation(f"Only the landed tile {tile} can be bought or auctioned.")
        if tile is None or tile not in self.deeds:
            raise RuleViolation("The landed tile is not a property.")
        if s.properties[tile].is_owned:
            raise OwnershipViolation(f"{s.board.name_of(tile)} is already owned.")
        return tile

    def _handle_buy(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("buy", TurnPhase.LANDED_DECISION)
        tile = self._landed_deed_tile(action)
        player = s.current_player
        price = self.deeds[tile].price
        if player.cash < price:
            raise EconomicViolation(f"{player.name} cannot afford £{price}; start an auction instead.")

        player.subtract_cash(price)
        s.properties[tile].owner_index = s.current_player_index
        s.phase = TurnPhase.MANAGEMENT
        self._settle_phase(TurnPhase.MANAGEMENT)
        return [f"{player.name} buys {s.board.name_of(tile)} for £{price} (cash £{player.cash})."]

    def _handle_start_auction(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("start an auction", TurnPhase.LANDED_DECISION)
        tile = self._landed_deed_tile(action)
        auction = s.start_auction(tile, s.current_player_index)
        bidder = s.players[auction.current_bidder]
        return [f"Auction opened for {s.board.name_of(tile)}. {bidder.name} to bid."]

    def _handle_bid(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("bid", TurnPhase.AUCTION_ACTIVE)
        auction = s.auction
        if action.amount is None:
            raise ArgumentViolation("AUCTION_BID requires an amount.")
        bidder_index = auction.current_bidder
        bidder = s.players[bidder_index]
        if action.amount <= auction.high_bid:
            raise EconomicViolation(f"Bid must exceed the current high bid of £{auction.high_bid}.")
        if action.amount > bidder.cash:
            raise EconomicViolation(f"{bidder.name} cannot bid £{action.amount} with £{bidder.cash}.")

        auction.place_bid(bidder_index, action.amount)
        events = [f"{bidder.name} bids £{action.amount}."]
        if auction.is_settled():
            events.extend(self._finalize_auction())
            return events
        auction.advance_to_next_active_bidder()
        events.append(f"{s.players[auction.current_bidder].name} to bid.")
        return events

    def _handle_pass(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("pass", TurnPhase.AUCTION_ACTIVE)
        auction = s.auction
        bidder = s.players[auction.current_bidder]
        auction.mark_passed(auction.current_bidder)
        events = [f"{bidder.name} passes."]

        if auction.high_bidder is not None and auction.active_count() <= 1:
            events.extend(self._finalize_auction())
            return events
        if auction.active_count() == 0:
            events.append(f"No bids: {s.board.name_of(auction.tile_index)} stays with the bank.")
            s.end_auction()
            s.phase = TurnPhase.MANAGEMENT
            self._settle_phase(TurnPhase.MANAGEMENT)
            return events
        auction.advance_to_next_active_bidder()
        events.append(f"{s.players[auction.current_bidder].name} to bid.")
        return events

    def _finalize_auction(self) -> List[str]:
        s = self.state
        auction = s.auction
        winner = s.players[auction.high_bidder]
        winner.subtract_cash(auction.high_bid)
        s.properties[auction.tile_index].owner_index = auction.high_bidder
        events = [
            f"{winner.name} wins {s.board.name_of(auction.tile_index)} for £{auction.high_bid}."
        ]
        s.end_auction()
        s.phase = TurnPhase.MANAGEMENT
        # Bids are capped at cash, so only a relaxed bid rule can leave the winner in debt
        if winner is s.current_player and winner.cash < 0:
            s.phase = TurnPhase.MUST_RESOLVE_DEBT
        self._settle_phase(TurnPhase.MANAGEMENT)
        return events

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def check_build_house(self, player_index: int, tile: int) -> StreetDeed:
        s = self.state
        deed = self._require_street(tile)
        ps = self._require_owner(player_index, tile)
        name = s.board.name_of(tile)
        if ps.mortgaged:
            raise RuleViolation(f"{name} is mortgaged.")
        if ps.has_hotel:
            raise RuleViolation(f"{name} already has a hotel.")
        if ps.buildings >= 4:
            raise RuleViolation(f"{name} has 4 houses; build a hotel instead.")
        self._require_buildable_group(player_index, deed)
        group = s.colour_groups[deed.group]
        if ps.buildings + 1 - min(s.properties[i].buildings for i in group) > 1:
            raise RuleViolation(f"Even-building rule: build elsewhere in the group before {name}.")
        if not s.bank.can_take_houses(1):
            raise RuleViolation("The bank has no houses left.")
        if s.players[player_index].cash < deed.house_cost:
            raise EconomicViolation(f"A house costs £{deed.house_cost}.")
        return deed

    def check_build_hotel(self, player_index: int, tile: int) -> StreetDeed:
        s = self.state
        deed = self._require_street(tile)
        ps = self._require_owner(player_index, tile)
        name = s.board.name_of(tile)
        if ps.mortgaged:
            raise RuleViolation(f"{name} is mortgaged.")
        if ps.has_hotel:
            raise RuleViolation(f"{name} already has a hotel.")
        if ps.buildings != 4:
            raise RuleViolation(f"{name} needs 4 houses before a hotel.")
        self._require_buildable_group(player_index, deed)
        if any(s.properties[i].buildings < 4 for i in s.colour_groups[deed.group]):
            raise RuleViolation("Every street in the group needs 4 houses before a hotel.")
        if not s.bank.can_take_hotel():
            raise RuleViolation("The bank has no hotels left.")
        if s.players[player_index].cash < deed.house_cost:
            raise EconomicViolation(f"A hotel costs £{deed.house_cost}.")
        return deed

    def check_sell_house(self, player_index: int, tile: int) -> StreetDeed:
        s = self.state
        deed = self._require_street(tile)
        ps = self._require_owner(player_index, tile)
        name = s.board.name_of(tile)
        if ps.has_hotel:
            raise RuleViolation(f"{name} has a hotel; sell the hotel first.")
        if ps.buildings == 0:
            raise RuleViolation(f"{name} has no houses to sell.")
        group = s.colour_groups[deed.group]
        if max(s.properties[i].buildings for i in group) - (ps.buildings - 1) > 1:
            raise RuleViolation(f"Even-building rule: sell elsewhere in the group before {name}.")
        return deed

    def check_sell_hotel(self, player_index: int, tile: int) -> StreetDeed:
        s = self.state
        deed = self._require_street(tile)
        ps = self._require_owner(player_index, tile)
        if not ps.has_hotel:
            raise RuleViolation(f"{s.board.name_of(tile)} has no hotel.")
        if not s.bank.can_take_houses(4):
            raise RuleViolation("The bank needs 4 houses to break the hotel down.")
        others = [s.properties[i].buildings for i in s.colour_groups[deed.group] if i != tile]
        if any(abs(4 - b) > 1 for b in others):
            raise RuleViolation("Even-building rule: cannot sell this hotel yet.")
        return deed

    def _handle_build_house(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("build", *MANAGEMENT_PHASES)
        tile = self._require_tile(action)
        deed = self.check_build_house(s.current_player_index, tile)
        player = s.current_player
        ps = s.properties[tile]
        ps.buildings += 1
        s.bank.take_houses(1)
        player.subtract_cash(deed.house_cost)
        return [
            f"{player.name} builds a house on {s.board.name_of(tile)} "
            f"({ps.buildings} houses, cash £{player.cash})."
        ]

    def _handle_build_hotel(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("build", *MANAGEMENT_PHASES)
        tile = self._require_tile(action)
        deed = self.check_build_hotel(s.current_player_index, tile)
        player = s.current_player
        s.properties[tile].buildings = 5
        s.bank.take_hotel()
        s.bank.return_houses(4)
        player.subtract_cash(deed.house_cost)
        return [f"{player.name} builds a hotel on {s.board.name_of(tile)} (cash £{player.cash})."]

    def _handle_sell_house(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("sell", *DEBT_PHASES)
        tile = self._require_tile(action)
        deed = self.check_sell_house(s.current_player_index, tile)
        player = s.current_player
        ps = s.properties[tile]
        ps.buildings -= 1
        s.bank.return_houses(1)
        player.add_cash(deed.house_cost // 2)
        events = [
            f"{player.name} sells a house on {s.board.name_of(tile)} for £{deed.house_cost // 2} "
            f"(cash £{player.cash})."
        ]
        events.extend(self._after_cash_raised())
        return events

    def _handle_sell_hotel(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("sell", *DEBT_PHASES)
        tile = self._require_tile(action)
        deed = self.check_sell_hotel(s.current_player_index, tile)
        player = s.current_player
        s.properties[tile].buildings = 4
        s.bank.return_hotel()
        s.bank.take_houses(4)
        player.add_cash(deed.house_cost // 2)
        events = [
            f"{player.name} sells the hotel on {s.board.name_of(tile)} for £{deed.house_cost // 2} "
            f"(cash £{player.cash})."
        ]
        events.extend(self._after_cash_raised())
        return events

    # ------------------------------------------------------------------
    # Mortgages and debt
    # ------------------------------------------------------------------

    def check_mortgage(self, player_index: int, tile: int) -> Deed:
        s = self.state
        deed = self._require_deed(tile)
        ps = self._require_owner(player_index, tile)
        if ps.mortgaged:
            raise RuleViolation(f"{s.board.name_of(tile)} is already mortgaged.")
        if ps.buildings > 0:
            raise RuleViolation(f"Sell the buildings on {s.board.name_of(tile)} before mortgaging.")
        return deed

    def _handle_mortgage(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("mortgage", *DEBT_PHASES)
        tile = self._require_tile(action)
        deed = self.check_mortgage(s.current_player_index, tile)
        player = s.current_player
        s.properties[tile].mortgaged = True
        player.add_cash(deed.mortgage_value)
        events = [
            f"{player.name} mortgages {s.board.name_of(tile)} for £{deed.mortgage_value} "
            f"(cash £{player.cash})."
        ]
        events.extend(self._after_cash_raised())
        return events

    def check_unmortgage(self, player_index: int, tile: int) -> int:
        """Validate an unmortgage and return its cost."""
        s = self.state
        self._require_deed(tile)
        ps = self._require_owner(player_index, tile)
        player = s.players[player_index]
        if not ps.mortgaged:
            raise RuleViolation(f"{s.board.name_of(tile)} is not mortgaged.")
        cost = self.unmortgage_cost(tile)
        if player.cash - cost < 0:
            raise EconomicViolation(f"Unmortgaging costs £{cost}; {player.name} has £{player.cash}.")
        return cost

    def _handle_unmortgage(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("unmortgage", *DEBT_PHASES)
        tile = self._require_tile(action)
        cost = self.check_unmortgage(s.current_player_index, tile)
        player = s.current_player
        s.properties[tile].mortgaged = False
        player.subtract_cash(cost)
        return [f"{player.name} unmortgages {s.board.name_of(tile)} for £{cost} (cash £{player.cash})."]

    def _after_cash_raised(self) -> List[str]:
        s = self.state
        if s.phase is not TurnPhase.MUST_RESOLVE_DEBT:
            return []
        player = s.current_player
        if player.cash >= 0:
            self._settle_phase(TurnPhase.TURN_END)
            return [f"{player.name} has cleared the debt."]
        if not self.can_raise_cash(s.current_player_index):
            return self.declare_bankruptcy(s.current_player_index)
        return [f"{player.name} still owes £{-player.cash}."]

    def can_raise_cash(self, player_index: int) -> bool:
        """True while the player has any mortgage or building sale left."""
        checks = (self.check_mortgage, self.check_sell_house, self.check_sell_hotel)
        for tile in self.state.owned_indices(player_index):
            for check in checks:
                try:
                    check(player_index, tile)
                except MonopolyError:
                    continue
                return True
        return False

    def declare_bankruptcy(self, player_index: int) -> List[str]:
        """Return every asset to the bank and remove the player from play."""
        s = self.state
        player = s.players[player_index]
        for tile in s.owned_indices(player_index):
            ps = s.properties[tile]
            if ps.has_hotel:
                s.bank.return_hotel()
            elif ps.buildings > 0:
                s.bank.return_houses(ps.buildings)
            ps.reset()
        for card in player.gojf_cards:
            s.deck_for(card.deck_type).return_to_bottom(card)
        player.gojf_cards = []
        player.cash = 0
        player.in_jail = False
        player.jail_turns_remaining = 0
        player.bankrupt = True
        events = [f"{player.name} is bankrupt; all property returns to the bank."]
        logger.info("Player %s bankrupt", player.name)

        survivors = s.active_player_indices()
        if len(survivors) == 1:
            s.set_winner(survivors[0])
            s.phase = TurnPhase.TURN_END
            events.append(f"{s.players[survivors[0]].name} wins the game.")
            logger.info("Game finished; winner %s", s.players[survivors[0]].name)
        elif player_index == s.current_player_index:
            s.advance_turn_skipping_bankrupt()
            events.append(f"{s.current_player.name} is up.")
        return events

    # ------------------------------------------------------------------
    # End of turn
    # ------------------------------------------------------------------

    def _handle_end_turn(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("end the turn", *DEBT_PHASES)
        player = s.current_player
        if player.cash < 0:
            if self.can_raise_cash(s.current_player_index):
                raise EconomicViolation(
                    f"{player.name} owes £{-player.cash}; mortgage or sell before ending the turn."
                )
            return self.declare_bankruptcy(s.current_player_index)

        events = [f"{player.name} ends the turn."]
        s.advance_turn_skipping_bankrupt()
        events.append(f"{s.current_player.name} is up.")
        logger.info("Turn passes to %s", s.current_player.name)
        return events

    # ------------------------------------------------------------------
    # Trades
    # ------------------------------------------------------------------

    def validate_trade(self, offer: TradeOffer) -> None:
        """Raise a ``MonopolyError`` if ``offer`` cannot be executed right now."""
        s = self.state
        if not s.is_valid_player(offer.from_idx):
            raise ArgumentViolation("Invalid proposer index.")
        if not s.is_valid_player(offer.to_idx):
            raise ArgumentViolation("Invalid receiver index.")
        a = s.players[offer.from_idx]
        b = s.players[offer.to_idx]
        if a.bankrupt or b.bankrupt:
            raise RuleViolation("Bankrupt players cannot trade.")

        for tile in offer.tiles_a_to_b:
            self._check_transferable(offer.from_idx, tile)
        for tile in offer.tiles_b_to_a:
            self._check_transferable(offer.to_idx, tile)

        for deck_type, count in offer.gojf_a_to_b.items():
            if count > a.count_gojf(deck_type):
                raise OwnershipViolation(f"{a.name} lacks {deck_type.label} Get Out of Jail Free cards.")
        for deck_type, count in offer.gojf_b_to_a.items():
            if count > b.count_gojf(deck_type):
                raise OwnershipViolation(f"{b.name} lacks {deck_type.label} Get Out of Jail Free cards.")

        if offer.cash_a_to_b > 0 and offer.cash_a_to_b > a.cash:
            raise EconomicViolation(f"{a.name} cannot afford the cash offered.")
        if offer.cash_b_to_a > 0 and offer.cash_b_to_a > b.cash:
            raise EconomicViolation(f"{b.name} cannot afford the cash offered.")

        cost_to_b = self._transfer_costs(offer.tiles_a_to_b, offer.choice_for_tile_going_to_b)
        cost_to_a = self._transfer_costs(offer.tiles_b_to_a, offer.choice_for_tile_going_to_a)
        if a.cash - offer.cash_a_to_b + offer.cash_b_to_a - cost_to_a < 0:
            raise EconomicViolation(f"Trade would leave {a.name} with negative cash.")
        if b.cash - offer.cash_b_to_a + offer.cash_a_to_b - cost_to_b < 0:
            raise EconomicViolation(f"Trade would leave {b.name} with negative cash.")

        if not offer.exchanges_anything():
            raise ArgumentViolation("Trade must exchange something.")

    def _check_transferable(self, owner_index: int, tile: int) -> None:
        if tile not in self.deeds:
            raise ArgumentViolation(f"Tile {tile} is not a tradable deed.")
        ps = self.state.properties[tile]
        if ps.owner_index != owner_index:
            raise OwnershipViolation(f"Tile {tile} is not owned by the offering player.")
        if ps.buildings > 0:
            raise RuleViolation(f"Tile {tile} has buildings; sell them before trading.")

    def _transfer_costs(
        self,
        tiles: Sequence[int],
        choice_for: Callable[[int], MortgageTransferChoice],
    ) -> int:
        total = 0
        for tile in tiles:
            if not self.state.properties[tile].mortgaged:
                continue
            value = self.mortgage_value(tile)
            total += mortgage_fee(value, self.config.mortgage_fee_percent)
            if choice_for(tile) is MortgageTransferChoice.PAY_OFF_NOW:
                total += value
        return total

    def _execute_trade(self, offer: TradeOffer) -> List[str]:
        s = self.state
        a = s.players[offer.from_idx]
        b = s.players[offer.to_idx]
        events = [f"Trade accepted: {offer.describe()}."]

        a.subtract_cash(offer.cash_a_to_b)
        b.add_cash(offer.cash_a_to_b)
        b.subtract_cash(offer.cash_b_to_a)
        a.add_cash(offer.cash_b_to_a)

        for tile in sorted(offer.tiles_a_to_b):
            events.extend(self._transfer_tile(tile, offer.to_idx, offer.choice_for_tile_going_to_b(tile)))
        for tile in sorted(offer.tiles_b_to_a):
            events.extend(self._transfer_tile(tile, offer.from_idx, offer.choice_for_tile_going_to_a(tile)))

        for giver, taker, counts in ((a, b, offer.gojf_a_to_b), (b, a, offer.gojf_b_to_a)):
            for deck_type, count in counts.items():
                for _ in range(count):
                    taker.add_gojf(giver.remove_gojf(deck_type))
        return events

    def _transfer_tile(self, tile: int, receiver_index: int, choice: MortgageTransferChoice) -> List[str]:
        s = self.state
        receiver = s.players[receiver_index]
        ps = s.properties[tile]
        ps.owner_index = receiver_index
        name = s.board.name_of(tile)
        if not ps.mortgaged:
            return [f"{name} passes to {receiver.name}."]

        value = self.mortgage_value(tile)
        fee = mortgage_fee(value, self.config.mortgage_fee_percent)
        receiver.subtract_cash(fee)
        if choice is MortgageTransferChoice.PAY_OFF_NOW:
            receiver.subtract_cash(value)
            ps.mortgaged = False
            return [f"{name} passes to {receiver.name}, who pays £{fee + value} to lift the mortgage."]
        return [f"{name} passes to {receiver.name} still mortgaged; £{fee} interest paid."]

    def _require_offer(self, action: Action) -> TradeOffer:
        if not isinstance(action.payload, TradeOffer):
            raise ArgumentViolation(f"{action.type.name} requires a TradeOffer payload.")
        return action.payload

    def _handle_propose_trade(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("propose a trade", *DEBT_PHASES)
        offer = self._require_offer(action)
        if offer.from_idx != s.current_player_index:
            raise ArgumentViolation("Only the current player may propose a trade.")
        self.validate_trade(offer)

        s.begin_trade_response(offer)
        return [
            f"{s.players[offer.from_idx].name} proposes a trade to {s.players[offer.to_idx].name}.",
            offer.describe(),
        ]

    def _handle_counter_trade(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("counter a trade", TurnPhase.TRADE_RESPONSE)
        offer = self._require_offer(action)
        previous = s.pending_trade.offer
        if not offer.flips_participants_of(previous):
            raise RuleViolation("A counter-offer must go from the receiver back to the proposer.")
        self.validate_trade(offer)

        s.switch_trade_responder(offer)
        return [f"{s.players[offer.from_idx].name} counters.", offer.describe()]

    def _handle_accept_trade(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("accept a trade", TurnPhase.TRADE_RESPONSE)
        offer = s.pending_trade.offer
        self.validate_trade(offer)

        events = self._execute_trade(offer)
        s.end_trade_response()
        if s.phase is TurnPhase.MUST_RESOLVE_DEBT:
            events.extend(self._after_cash_raised())
        return events

    def _handle_reject_trade(self, action: Action) -> List[str]:
        s = self.state
        self._require_phase("reject a trade", TurnPhase.TRADE_RESPONSE)
        responder = s.current_player
        s.end_trade_response()
        return [f"{responder.name} rejects the trade."]

    def _handle_cancel_trade(self, action: Action) -> List[str]:
        """
        Withdraw the pending offer on behalf of its proposer.

        An integer payload names the acting player and must be the proposer.
        """
        s = self.state
        self._require_phase("cancel a trade", TurnPhase.TRADE_RESPONSE)
        proposer = s.pending_trade.offer.from_idx
        if isinstance(action.payload, int) and action.payload != proposer:
            raise OwnershipViolation("Only the proposer may cancel the trade.")
        s.end_trade_response()
        return [f"{s.players[proposer].name} withdraws the trade."]

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _require_phase(self, what: str, *phases: TurnPhase) -> None:
        if self.state.phase not in phases:
            raise PhaseViolation(f"Cannot {what} during {self.state.phase.name}.")

    def _require_tile(self, action: Action) -> int:
        if action.tile_index is None:
            raise ArgumentViolation(f"{action.type.name} requires a tile index.")
        if not 0 <= action.tile_index < BOARD_SIZE:
            raise ArgumentViolation(f"Tile index {action.tile_index} is off the board.")
        return action.tile_index

    def _require_deed(self, tile: int) -> Deed:
        deed = self.deeds.get(tile)
        if deed is None:
            raise RuleViolation(f"{self.state.board.name_of(tile)} is not a property.")
        return deed

    def _require_street(self, tile: int) -> StreetDeed:
        deed = self._require_deed(tile)
        if not isinstance(deed, StreetDeed):
            raise RuleViolation(f"{self.state.board.name_of(tile)} is not a street.")
        return deed

    def _require_owner(self, player_index: int, tile: int) -> PropertyState:
        ps = self.state.properties[tile]
        if ps.owner_index != player_index:
            raise OwnershipViolation(
                f"{self.state.players[player_index].name} does not own {self.state.board.name_of(tile)}."
            )
        return ps

    def _require_buildable_group(self, player_index: int, deed: StreetDeed) -> None:
        group = self.state.colour_groups[deed.group]
        if any(self.state.properties[i].owner_index != player_index for i in group):
            raise OwnershipViolation(f"Building needs the whole {deed.group.value} group.")
        if any(self.state.properties[i].mortgaged for i in group):
            raise RuleViolation(f"Unmortgage the {deed.group.value} group before building.")

    def _owns_unmortgaged_group(self, player_index: int, deed: StreetDeed) -> bool:
        group = self.state.colour_groups[deed.group]
        return all(
            self.state.properties[i].owner_index == player_index and not self.state.properties[i].mortgaged
            for i in group
        )

    def _count_owned(self, player_index: int, indices: Sequence[int]) -> int:
        return sum(1 for i in indices if self.state.properties[i].owner_index == player_index)


def create_game(
    config: Optional[GameConfig],
    players: Sequence[Union[Player, str]],
    dice: Optional[Dice] = None,
    chance_deck: Optional[CardDeck] = None,
    community_deck: Optional[CardDeck] = None,
    board: Optional[Board] = None,
    deeds: Optional[Dict[int, Deed]] = None,
) -> GameEngine:
    """
    Create a new game with the given players.

    Without a config the defaults come from ``EngineSettings``. Dice and
    deck shuffles are seeded from ``config.seed`` unless supplied.
    """
    if config is None:
        config = get_engine_settings().to_game_config()
    names = [p.name if isinstance(p, Player) else p for p in players]
    if len(names) < 2:
        raise ValueError("A game needs at least two players.")
    if any(not name for name in names) or len(set(names)) != len(names):
        raise ValueError("Player names must be non-empty and unique.")

    seed_rng = random.Random(config.seed)
    if dice is None:
        dice = Dice(random.Random(seed_rng.getrandbits(32)))
    deck_rng = random.Random(seed_rng.getrandbits(32))
    if chance_deck is None:
        chance_deck = CardDeck(chance_cards(), deck_rng)
    if community_deck is None:
        community_deck = CardDeck(community_chest_cards(), deck_rng)

    state = GameState(
        board=board if board is not None else standard_board(),
        deeds=deeds if deeds is not None else uk_classic_deeds(),
        players=[PlayerState(i, name, config.starting_cash) for i, name in enumerate(names)],
        chance_deck=chance_deck,
        community_deck=community_deck,
        bank=Bank(config.house_limit, config.hotel_limit),
    )
    logger.info("New game with %d players: %s", len(names), ", ".join(names))
    return GameEngine(state, config, dice)

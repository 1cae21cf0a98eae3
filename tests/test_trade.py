"""
Tests for trades between players.
"""

import pytest
from monopoly_uk import (
    Action,
    ActionType,
    ArgumentViolation,
    DeckType,
    EconomicViolation,
    MortgageTransferChoice,
    OwnershipViolation,
    PhaseViolation,
    RuleViolation,
    TradeOffer,
    TurnPhase,
)

ACCEPT = Action(ActionType.ACCEPT_TRADE)
REJECT = Action(ActionType.REJECT_TRADE)
CANCEL = Action(ActionType.CANCEL_TRADE)


def propose(game, offer):
    return game.apply(Action.with_payload(ActionType.PROPOSE_TRADE, offer))


def counter(game, offer):
    return game.apply(Action.with_payload(ActionType.COUNTER_TRADE, offer))


@pytest.fixture
def trading(managing, give):
    """Alice owns Old Kent Road, Bob owns Whitechapel Road; Alice is managing."""
    give(managing, 0, 1)
    give(managing, 1, 3)
    return managing


def test_propose_hands_control_to_receiver(trading):
    result = propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    assert result.ok
    assert trading.state.phase == TurnPhase.TRADE_RESPONSE
    assert trading.state.current_player_index == 1
    assert trading.state.pending_trade.return_player_index == 0


def test_accept_executes_and_returns_control(trading):
    propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    result = trading.apply(ACCEPT)

    state = trading.state
    assert result.ok
    assert state.properties[3].owner_index == 0
    assert state.players[0].cash == 1400
    assert state.players[1].cash == 1600
    assert state.phase == TurnPhase.TURN_END
    assert state.current_player_index == 0
    assert state.pending_trade is None


def test_swap_tiles_both_ways(trading):
    offer = TradeOffer(0, 1, tiles_a_to_b={1}, tiles_b_to_a={3}, cash_a_to_b=10)
    propose(trading, offer)
    trading.apply(ACCEPT)

    assert trading.state.properties[1].owner_index == 1
    assert trading.state.properties[3].owner_index == 0


def test_mortgaged_tile_keeps_mortgage_and_charges_fee(trading):
    """Rule: the new owner of a mortgaged property pays 10% interest at once."""
    trading.state.properties[3].mortgaged = True
    propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    trading.apply(ACCEPT)

    assert trading.state.properties[3].mortgaged
    assert trading.state.players[0].cash == 1500 - 100 - 3


def test_mortgaged_tile_paid_off_now(trading):
    trading.state.properties[3].mortgaged = True
    offer = TradeOffer(
        0,
        1,
        tiles_b_to_a={3},
        cash_a_to_b=100,
        choices_to_a={3: MortgageTransferChoice.PAY_OFF_NOW},
    )
    propose(trading, offer)

    trading.apply(ACCEPT)

    assert not trading.state.properties[3].mortgaged
    assert trading.state.players[0].cash == 1500 - 100 - 3 - 30


def test_reject_discards_offer(trading):
    propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    result = trading.apply(REJECT)

    assert result.ok
    assert trading.state.properties[3].owner_index == 1
    assert trading.state.phase == TurnPhase.TURN_END
    assert trading.state.current_player_index == 0


def test_counter_offer_flips_roles(trading):
    propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    result = counter(trading, TradeOffer(1, 0, tiles_a_to_b={3}, cash_b_to_a=200))

    assert result.ok
    assert trading.state.current_player_index == 0
    assert trading.state.phase == TurnPhase.TRADE_RESPONSE
    assert trading.state.pending_trade.return_player_index == 0

    trading.apply(ACCEPT)
    assert trading.state.properties[3].owner_index == 0
    assert trading.state.players[0].cash == 1300
    assert trading.state.phase == TurnPhase.TURN_END
    assert trading.state.current_player_index == 0


def test_counter_must_flip_roles(trading):
    propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    result = counter(trading, TradeOffer.cash_for_tiles(0, 1, [3], 150))

    assert not result.ok
    assert isinstance(result.error, RuleViolation)
    assert trading.state.pending_trade.offer.cash_a_to_b == 100


def test_cancel_by_proposer(trading):
    propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    result = trading.apply(CANCEL)

    assert result.ok
    assert trading.state.pending_trade is None
    assert trading.state.current_player_index == 0


def test_cancel_by_receiver_rejected(trading):
    propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    result = trading.apply(Action(ActionType.CANCEL_TRADE, payload=1))

    assert not result.ok
    assert isinstance(result.error, OwnershipViolation)


def test_trade_gojf_card(trading):
    deck = trading.state.chance_deck
    card = next(c for c in deck.all_cards if c.is_get_out_of_jail_free)
    deck.remove(card)
    trading.state.players[0].add_gojf(card)
    propose(trading, TradeOffer(0, 1, gojf_a_to_b={DeckType.CHANCE: 1}, cash_b_to_a=40))

    trading.apply(ACCEPT)

    assert trading.state.players[1].gojf_cards == [card]
    assert trading.state.players[0].cash == 1540


def test_missing_gojf_card_rejected(trading):
    result = propose(trading, TradeOffer(0, 1, gojf_a_to_b={DeckType.COMMUNITY_CHEST: 1}))

    assert not result.ok
    assert isinstance(result.error, OwnershipViolation)


def test_tile_with_buildings_not_tradable(trading):
    trading.state.properties[3].buildings = 1

    result = propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    assert not result.ok
    assert isinstance(result.error, RuleViolation)


def test_tile_not_owned_by_offerer(trading):
    result = propose(trading, TradeOffer.cash_for_tiles(0, 1, [39], 100))

    assert not result.ok
    assert isinstance(result.error, OwnershipViolation)


def test_empty_trade_rejected(trading):
    result = propose(trading, TradeOffer(0, 1))

    assert not result.ok
    assert isinstance(result.error, ArgumentViolation)


def test_unaffordable_cash_rejected(trading):
    result = propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 5000))

    assert not result.ok
    assert isinstance(result.error, EconomicViolation)


def test_mortgage_fee_cannot_push_cash_negative(trading):
    trading.state.properties[3].mortgaged = True
    trading.state.players[0].cash = 100

    result = propose(trading, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    assert not result.ok
    assert isinstance(result.error, EconomicViolation)


def test_only_current_player_proposes(trading):
    result = propose(trading, TradeOffer.cash_for_tiles(1, 0, [1], 100))

    assert not result.ok
    assert isinstance(result.error, ArgumentViolation)


def test_no_trading_before_rolling(basic_game, give):
    give(basic_game, 1, 3)

    result = propose(basic_game, TradeOffer.cash_for_tiles(0, 1, [3], 100))

    assert not result.ok
    assert isinstance(result.error, PhaseViolation)


def test_propose_requires_offer_payload(trading):
    result = trading.apply(Action(ActionType.PROPOSE_TRADE))

    assert not result.ok
    assert isinstance(result.error, ArgumentViolation)


def test_trade_clears_debt(trading, give):
    give(trading, 0, 39)
    trading.state.players[0].cash = -50
    trading.state.phase = TurnPhase.MUST_RESOLVE_DEBT
    assert propose(trading, TradeOffer(0, 1, tiles_a_to_b={39}, cash_b_to_a=300)).ok

    result = trading.apply(ACCEPT)

    assert result.ok
    assert trading.state.players[0].cash == 250
    assert trading.state.phase == TurnPhase.TURN_END


def test_debtor_cannot_offer_cash_it_lacks(trading, give):
    give(trading, 0, 39)
    trading.state.players[0].cash = -50
    trading.state.phase = TurnPhase.MUST_RESOLVE_DEBT

    result = propose(trading, TradeOffer(0, 1, tiles_a_to_b={39}, cash_a_to_b=10, cash_b_to_a=300))

    assert not result.ok
    assert isinstance(result.error, EconomicViolation)

def test_offer_construction_checks():
    with pytest.raises(ValueError):
        TradeOffer(0, 0, cash_a_to_b=10)
    with pytest.raises(ValueError):
        TradeOffer(0, 1, cash_a_to_b=-10)

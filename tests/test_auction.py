"""
Tests for auctions.
Rule: 'If you do not wish to buy the property, the Bank sells it through an auction.'
"""

from monopoly_uk import Action, ActionType, EconomicViolation, PhaseViolation, TurnPhase

ROLL = Action(ActionType.ROLL_DICE)
PASS = Action(ActionType.AUCTION_PASS)


def open_auction(game, dice, roll=(1, 2)):
    dice.push(roll)
    game.apply(ROLL)
    assert game.apply(Action(ActionType.START_AUCTION)).ok
    return game.state.auction


def test_auction_needs_landed_decision(basic_game):
    result = basic_game.apply(Action(ActionType.START_AUCTION))

    assert not result.ok
    assert isinstance(result.error, PhaseViolation)


def test_auction_starts_with_current_player(basic_game, dice):
    auction = open_auction(basic_game, dice)

    assert basic_game.state.phase == TurnPhase.AUCTION_ACTIVE
    assert auction.tile_index == 3
    assert auction.current_bidder == 0
    assert auction.high_bid == 0
    assert auction.high_bidder is None


def test_everyone_passes_no_sale(basic_game, dice):
    open_auction(basic_game, dice)

    basic_game.apply(PASS)
    result = basic_game.apply(PASS)

    assert result.ok
    assert basic_game.state.properties[3].owner_index is None
    assert basic_game.state.auction is None
    assert basic_game.state.phase == TurnPhase.MANAGEMENT


def test_bid_must_exceed_high_bid(basic_game, dice):
    open_auction(basic_game, dice)
    basic_game.apply(Action.bid(10))

    result = basic_game.apply(Action.bid(10))

    assert not result.ok
    assert isinstance(result.error, EconomicViolation)
    assert basic_game.state.auction.current_bidder == 1


def test_bid_cannot_exceed_cash(basic_game, dice):
    open_auction(basic_game, dice)

    result = basic_game.apply(Action.bid(1501))

    assert not result.ok
    assert basic_game.state.auction.high_bid == 0


def test_bid_requires_amount(basic_game, dice):
    open_auction(basic_game, dice)

    result = basic_game.apply(Action(ActionType.AUCTION_BID))

    assert not result.ok


def test_single_bid_then_pass_wins(basic_game, dice):
    open_auction(basic_game, dice)

    basic_game.apply(PASS)
    assert basic_game.state.auction.current_bidder == 1
    basic_game.apply(Action.bid(1))

    assert basic_game.state.properties[3].owner_index == 1
    assert basic_game.state.players[1].cash == 1499


def test_three_player_auction_skips_passed_bidders(three_player_game, dice):
    auction = open_auction(three_player_game, dice)

    three_player_game.apply(Action.bid(10))
    three_player_game.apply(PASS)
    assert auction.current_bidder == 2
    three_player_game.apply(Action.bid(30))
    assert auction.current_bidder == 0
    three_player_game.apply(Action.bid(40))
    assert auction.current_bidder == 2
    three_player_game.apply(PASS)

    assert three_player_game.state.properties[3].owner_index == 0
    assert three_player_game.state.players[0].cash == 1460


def test_auction_after_doubles_ends_rolling(basic_game, dice):
    open_auction(basic_game, dice, roll=(3, 3))
    basic_game.apply(PASS)
    basic_game.apply(PASS)

    assert basic_game.state.phase == TurnPhase.MANAGEMENT
    assert basic_game.state.auction is None


def test_estimate_max_bid_station(basic_game):
    """One opponent, first station: 20 turns x 1/40 x £25 = 12.5, floored."""
    assert basic_game.estimate_max_bid(0, 5) == 12


def test_estimate_max_bid_completing_set(basic_game, give):
    give(basic_game, 0, 37)

    # 20 x 1/40 x 200 x 1.35
    assert basic_game.estimate_max_bid(0, 39) == 135


def test_estimate_max_bid_capped_by_reserve(basic_game):
    basic_game.state.players[0].cash = 205

    assert basic_game.estimate_max_bid(0, 28) == 5


def test_estimate_max_bid_non_deed(basic_game):
    assert basic_game.estimate_max_bid(0, 0) == 0

"""
Tests for mortgages, debt resolution and bankruptcy.
"""

from monopoly_uk import (
    Action,
    ActionType,
    EconomicViolation,
    GameStatus,
    OwnershipViolation,
    RuleViolation,
    TurnPhase,
)

END = Action(ActionType.END_TURN)


def mortgage(game, tile):
    return game.apply(Action.on_tile(ActionType.MORTGAGE, tile))


def unmortgage(game, tile):
    return game.apply(Action.on_tile(ActionType.UNMORTGAGE, tile))


def in_debt(game, cash):
    game.state.players[game.state.current_player_index].cash = cash
    game.state.phase = TurnPhase.MUST_RESOLVE_DEBT


def test_mortgage_property(managing, give):
    """
    Rule: 'collect from the Bank your mortgage to the value of the amount
    shown on the back of the card.'
    """
    give(managing, 0, 1)

    result = mortgage(managing, 1)

    assert result.ok
    assert managing.state.properties[1].mortgaged
    assert managing.state.players[0].cash == 1530


def test_cannot_mortgage_with_buildings(managing, give):
    """Rule: 'If mortgaging a Site, first sell any buildings to the Bank.'"""
    give(managing, 0, 1, 3)
    managing.state.properties[1].buildings = 1

    result = mortgage(managing, 1)

    assert not result.ok
    assert isinstance(result.error, RuleViolation)


def test_cannot_mortgage_twice_or_others_property(managing, give):
    give(managing, 0, 1)
    give(managing, 1, 3)
    mortgage(managing, 1)

    assert not mortgage(managing, 1).ok
    result = mortgage(managing, 3)
    assert isinstance(result.error, OwnershipViolation)


def test_mortgage_round_trip_costs_ten_percent(managing, give):
    """Rule: 'pay this amount plus 10% interest' (rounded up)."""
    give(managing, 0, 1)

    mortgage(managing, 1)
    result = unmortgage(managing, 1)

    assert result.ok
    assert not managing.state.properties[1].mortgaged
    assert managing.state.properties[1].owner_index == 0
    assert managing.state.players[0].cash == 1500 - 3


def test_unmortgage_fee_rounds_up(managing, give):
    give(managing, 0, 37)
    managing.state.properties[37].mortgaged = True

    assert managing.unmortgage_cost(37) == 175 + 18
    unmortgage(managing, 37)

    assert managing.state.players[0].cash == 1500 - 193


def test_unmortgage_without_cash_changes_nothing(managing, give):
    give(managing, 0, 39)
    managing.state.properties[39].mortgaged = True
    managing.state.players[0].cash = 100

    result = unmortgage(managing, 39)

    assert not result.ok
    assert isinstance(result.error, EconomicViolation)
    assert managing.state.phase == TurnPhase.TURN_END
    assert managing.state.properties[39].mortgaged


def test_end_turn_rejected_while_assets_remain(managing, give):
    give(managing, 0, 1)
    in_debt(managing, -20)

    result = managing.apply(END)

    assert not result.ok
    assert isinstance(result.error, EconomicViolation)
    assert managing.state.current_player_index == 0


def test_mortgage_clears_debt(managing, give):
    give(managing, 0, 1)
    in_debt(managing, -20)

    result = mortgage(managing, 1)

    assert result.ok
    assert managing.state.players[0].cash == 10
    assert managing.state.phase == TurnPhase.TURN_END


def test_debt_after_doubles_ends_the_turn(basic_game, dice, give):
    """Rent debt from a doubles roll uses up the extra roll once it is paid."""
    give(basic_game, 0, 1)
    give(basic_game, 1, 6)
    basic_game.state.players[0].cash = 3
    dice.push((3, 3))

    assert basic_game.apply(Action(ActionType.ROLL_DICE)).ok
    assert basic_game.state.phase == TurnPhase.MUST_RESOLVE_DEBT
    assert basic_game.state.players[0].cash == -3

    result = mortgage(basic_game, 1)

    assert result.ok
    assert basic_game.state.players[0].cash == 27
    assert basic_game.state.phase == TurnPhase.TURN_END

def test_partial_mortgage_keeps_debt(managing, give):
    give(managing, 0, 1, 5)
    in_debt(managing, -100)

    mortgage(managing, 1)

    assert managing.state.phase == TurnPhase.MUST_RESOLVE_DEBT
    assert managing.state.players[0].cash == -70


def test_unmortgage_not_allowed_in_debt(managing, give):
    give(managing, 0, 1)
    managing.state.properties[1].mortgaged = True
    in_debt(managing, -5)

    assert not unmortgage(managing, 1).ok


def test_last_mortgage_short_of_debt_bankrupts(three_player_game, dice, give):
    game = three_player_game
    dice.push((4, 6))
    game.apply(Action(ActionType.ROLL_DICE))
    give(game, 0, 1)
    in_debt(game, -100)

    result = mortgage(game, 1)

    assert result.ok
    alice = game.state.players[0]
    assert alice.bankrupt
    assert alice.cash == 0
    assert game.state.properties[1].owner_index is None
    assert not game.state.properties[1].mortgaged
    assert game.state.current_player_index == 1
    assert game.state.phase == TurnPhase.START_TURN
    assert game.state.status == GameStatus.RUNNING


def test_end_turn_with_nothing_to_sell_bankrupts_and_ends_game(managing):
    in_debt(managing, -50)

    result = managing.apply(END)

    assert result.ok
    assert managing.state.players[0].bankrupt
    assert managing.state.status == GameStatus.FINISHED
    assert managing.state.winner_index == 1
    assert not managing.apply(Action(ActionType.ROLL_DICE)).ok


def test_bankruptcy_returns_buildings_and_cards(managing, give):
    give(managing, 0, 1, 3, 6, 8, 9)
    state = managing.state
    state.properties[1].buildings = 5
    state.properties[3].buildings = 4
    state.properties[6].buildings = 2
    state.properties[8].buildings = 2
    state.properties[9].buildings = 1
    state.bank.houses_remaining = 32 - 9
    state.bank.hotels_remaining = 11
    card = state.chance_deck.draw_top()
    state.chance_deck.remove(card)
    state.players[0].add_gojf(card)

    events = managing.declare_bankruptcy(0)

    assert "Alice is bankrupt; all property returns to the bank." in events
    assert state.bank.houses_remaining == 32
    assert state.bank.hotels_remaining == 12
    assert all(ps.owner_index is None and ps.buildings == 0 for ps in state.properties.values())
    assert state.players[0].gojf_cards == []
    assert len(state.chance_deck) == 16

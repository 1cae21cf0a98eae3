"""Shared test fixtures for the rules engine tests."""

from typing import List, Optional, Sequence, Tuple

import pytest
from monopoly_uk import (
    Action,
    ActionType,
    CardDeck,
    GameConfig,
    Player,
    TurnPhase,
    chance_cards,
    community_chest_cards,
    create_game,
)
from monopoly_uk.dice import Dice, Roll

NAMES = ["Alice", "Bob", "Charlie", "Diana"]


class ScriptedDice(Dice):
    """Dice that replay a fixed list of rolls."""

    def __init__(self, rolls: Optional[List[Tuple[int, int]]] = None):
        super().__init__()
        self.rolls = list(rolls or [])

    def push(self, *rolls: Tuple[int, int]) -> None:
        self.rolls.extend(rolls)

    def roll(self) -> Roll:
        assert self.rolls, "test ran out of scripted rolls"
        die1, die2 = self.rolls.pop(0)
        return Roll(die1, die2)


def stacked_deck(cards, *texts: str) -> CardDeck:
    """Unshuffled deck holding the cards whose text starts with ``texts``, in that order."""
    chosen = [card for text in texts for card in cards if card.text.startswith(text)]
    assert len(chosen) >= len(texts), f"no card matches {texts}"
    return CardDeck(chosen, shuffle=False)


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def dice():
    """Scripted dice; tests push the rolls they need."""
    return ScriptedDice()


@pytest.fixture
def make_game(game_config, dice):
    """
    Factory for games with scripted dice.

    Decks default to the standard cards in printed order (no shuffle).
    ``chance`` / ``community`` take card-text prefixes to stack a deck.
    """

    def _make(
        players: int = 2,
        chance: Sequence[str] = (),
        community: Sequence[str] = (),
        config: Optional[GameConfig] = None,
    ):
        chance_deck = (
            stacked_deck(chance_cards(), *chance) if chance else CardDeck(chance_cards(), shuffle=False)
        )
        community_deck = (
            stacked_deck(community_chest_cards(), *community)
            if community
            else CardDeck(community_chest_cards(), shuffle=False)
        )
        return create_game(
            config or game_config,
            [Player(i, NAMES[i]) for i in range(players)],
            dice=dice,
            chance_deck=chance_deck,
            community_deck=community_deck,
        )

    return _make


@pytest.fixture
def basic_game(make_game):
    """Two-player game (Alice, Bob) with scripted dice."""
    return make_game()


@pytest.fixture
def three_player_game(make_game):
    """Three-player game (Alice, Bob, Charlie) with scripted dice."""
    return make_game(players=3)


@pytest.fixture
def give():
    """Hand tiles straight to a player."""

    def _give(game, player_index: int, *tiles: int) -> None:
        for tile in tiles:
            game.state.properties[tile].owner_index = player_index

    return _give


@pytest.fixture
def managing(basic_game, dice):
    """Alice's turn after a quiet roll from GO onto Jail (just visiting)."""
    dice.push((4, 6))
    result = basic_game.apply(Action(ActionType.ROLL_DICE))
    assert result.ok, result.events
    assert basic_game.state.phase == TurnPhase.TURN_END
    return basic_game

"""
Player state and per-tile property state.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from monopoly_uk.cards import Card, DeckType


class PlayerState:
    """Represents the complete state of a player in the game."""

    def __init__(self, player_id: int, name: str, starting_cash: int):
        self.player_id = player_id
        self.name = name
        self.cash = starting_cash
        self.position = 0
        self.in_jail = False
        self.jail_turns_remaining = 0
        self.gojf_cards: List["Card"] = []
        self.bankrupt = False

    def add_cash(self, amount: int) -> None:
        self.cash += amount

    def subtract_cash(self, amount: int) -> None:
        self.cash -= amount

    def send_to_jail(self, jail_index: int, turns: int) -> None:
        self.position = jail_index
        self.in_jail = True
        self.jail_turns_remaining = turns

    def release_from_jail(self) -> None:
        self.in_jail = False
        self.jail_turns_remaining = 0

    def decrement_jail_turn(self) -> None:
        if self.jail_turns_remaining > 0:
            self.jail_turns_remaining -= 1

    def add_gojf(self, card: "Card") -> None:
        self.gojf_cards.append(card)

    def use_gojf(self) -> Optional["Card"]:
        """Give up the oldest held card, or None if there is none."""
        if not self.gojf_cards:
            return None
        return self.gojf_cards.pop(0)

    def count_gojf(self, deck_type: "DeckType") -> int:
        return sum(1 for card in self.gojf_cards if card.deck_type == deck_type)

    def remove_gojf(self, deck_type: "DeckType") -> Optional["Card"]:
        for position, card in enumerate(self.gojf_cards):
            if card.deck_type == deck_type:
                return self.gojf_cards.pop(position)
        return None

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.name}', "
            f"cash={self.cash}, position={self.position}, bankrupt={self.bankrupt})"
        )


@dataclass
class PropertyState:
    """
    Tracks ownership state of a deeded tile.

    buildings runs 0..5; 5 represents a hotel.
    """

    owner_index: Optional[int] = None
    mortgaged: bool = False
    buildings: int = 0

    @property
    def has_hotel(self) -> bool:
        return self.buildings == 5

    @property
    def is_owned(self) -> bool:
        return self.owner_index is not None

    def reset(self) -> None:
        self.owner_index = None
        self.mortgaged = False
        self.buildings = 0


class Player:
    """
    Seat description passed to ``create_game``.
    The index of the seat in the list is the player index used by the engine.
    """

    def __init__(self, player_id: int, name: str):
        self.player_id = player_id
        self.name = name

    def __repr__(self) -> str:
        return f"Player(id={self.player_id}, name='{self.name}')"

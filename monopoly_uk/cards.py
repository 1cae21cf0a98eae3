"""
Chance and Community Chest cards.

A card carries a callable effect. When drawn, the engine passes itself to
the effect, which uses the engine's card-helper methods and returns the
events it produced.
"""

import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Deque, List, Optional

if TYPE_CHECKING:
    from monopoly_uk.engine import GameEngine

CardEffect = Callable[["GameEngine"], List[str]]


class DeckType(Enum):
    """The two card decks."""

    CHANCE = "chance"
    COMMUNITY_CHEST = "community_chest"

    @property
    def label(self) -> str:
        return "CHANCE" if self is DeckType.CHANCE else "COMMUNITY CHEST"


@dataclass(eq=False)
class Card:
    """
    A physical card. Equality is identity, so duplicate texts stay distinct.
    """

    deck_type: DeckType
    text: str
    effect: CardEffect = field(repr=False)
    is_get_out_of_jail_free: bool = False

    def __repr__(self) -> str:
        return f"Card('{self.text}')"


class CardDeck:
    """
    Draw-from-top, put-on-bottom deck.

    Drawing moves the card to the bottom straight away. A get-out-of-jail-free
    card kept by a player is then pulled out with ``remove`` and later put
    back with ``return_to_bottom``.
    """

    def __init__(
        self,
        cards: List[Card],
        rng: Optional[random.Random] = None,
        shuffle: bool = True,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.shuffle_enabled = shuffle
        self.all_cards: List[Card] = list(cards)
        self.queue: Deque[Card] = deque()
        self.reshuffle()

    def reshuffle(self) -> None:
        cards = list(self.all_cards)
        if self.shuffle_enabled:
            self.rng.shuffle(cards)
        self.queue = deque(cards)

    def draw_top(self) -> Card:
        if not self.queue:
            self.reshuffle()
        if not self.queue:
            raise LookupError("deck has no cards in circulation")
        card = self.queue.popleft()
        self.queue.append(card)
        return card

    def remove(self, card: Card) -> None:
        """Take a card out of circulation while a player holds it."""
        self.all_cards = [c for c in self.all_cards if c is not card]
        self.queue = deque(c for c in self.queue if c is not card)

    def return_to_bottom(self, card: Card) -> None:
        if not any(c is card for c in self.all_cards):
            self.all_cards.append(card)
        self.queue = deque(c for c in self.queue if c is not card)
        self.queue.append(card)

    def __len__(self) -> int:
        return len(self.queue)


def _advance(dest: int, collect_go: bool = True) -> CardEffect:
    return lambda engine: engine.advance_to_absolute(dest, collect_go)


def _receive(amount: int) -> CardEffect:
    return lambda engine: engine.receive_bank(amount)


def _pay(amount: int) -> CardEffect:
    return lambda engine: engine.pay_bank(amount)


def _go_to_jail(engine: "GameEngine") -> List[str]:
    return engine.go_to_jail_no_salary()


def _keep_gojf(engine: "GameEngine") -> List[str]:
    return engine.award_get_out_of_jail_free()


def chance_cards() -> List[Card]:
    """The 16 standard Chance cards."""
    c = DeckType.CHANCE
    return [
        Card(c, "Go back three spaces", lambda e: e.move_current_player_relative(-3, True)),
        Card(c, "Go to Jail. Do not pass GO, do not collect £200", _go_to_jail),
        Card(c, "Get out of jail free. This card may be kept until needed", _keep_gojf, True),
        Card(
            c,
            "Advance to the nearest station. If owned, pay the owner twice the rental",
            lambda e: e.advance_to_nearest_station_double_rent(),
        ),
        Card(
            c,
            "Make general repairs on all your property: £25 per house, £100 per hotel",
            lambda e: e.pay_per_building(25, 100),
        ),
        Card(c, "Advance to Mayfair", _advance(39)),
        Card(c, "Take a trip to King's Cross Station. If you pass GO collect £200", _advance(5)),
        Card(c, "Advance to Park Lane. If you pass GO collect £200", _advance(37)),
        Card(c, "Advance to Bond Street. If you pass GO collect £200", _advance(34)),
        Card(c, "Speeding fine £15", _pay(15)),
        Card(c, "Advance to GO", _advance(0)),
        Card(c, "Your building loan matures. Collect £200", _receive(200)),
        Card(
            c,
            "You have been elected chairman of the board. Pay each player £50",
            lambda e: e.pay_each_other_player(50),
        ),
        Card(
            c,
            "Advance to the nearest utility. If owned, throw dice and pay ten times the amount thrown",
            lambda e: e.advance_to_nearest_utility_special_rent(),
        ),
        Card(c, "Bank pays you a dividend of £150", _receive(150)),
        Card(c, "You have won a crossword competition. Collect £20", _receive(20)),
    ]


def community_chest_cards() -> List[Card]:
    """The 16 standard Community Chest cards."""
    cc = DeckType.COMMUNITY_CHEST
    return [
        Card(cc, "Receive £25 consultancy fee", _receive(25)),
        Card(cc, "Get out of jail free. This card may be kept until needed", _keep_gojf, True),
        Card(
            cc,
            "It is your birthday. Collect £10 from every player",
            lambda e: e.collect_from_each_other_player(10),
        ),
        Card(cc, "Pay hospital fees of £120", _pay(120)),
        Card(cc, "Go to Jail. Do not pass GO, do not collect £200", _go_to_jail),
        Card(cc, "Doctor's fee. Pay £50", _pay(50)),
        Card(cc, "Advance to GO", _advance(0)),
        Card(
            cc,
            "You are assessed for street repairs: £40 per house, £115 per hotel",
            lambda e: e.pay_per_building(40, 115),
        ),
        Card(cc, "Life insurance matures. Collect £100", _receive(100)),
        Card(cc, "Income tax refund. Collect £20", _receive(20)),
        Card(cc, "You have won second prize in a beauty contest. Collect £10", _receive(10)),
        Card(cc, "From sale of stock you get £50", _receive(50)),
        Card(cc, "Bank error in your favour. Collect £200", _receive(200)),
        Card(cc, "Pay school fees of £50", _pay(50)),
        Card(
            cc,
            "Throw the dice. On 7 or more collect £100, otherwise pay £150 and go to Jail",
            lambda e: e.gamble_then_maybe_jail(7, 100, 150),
        ),
        Card(cc, "Holiday fund matures. Receive £50", _receive(50)),
    ]

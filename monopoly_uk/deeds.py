"""
Deed registry: immutable economics for every buyable tile.

A deed is one of three variants. Rent and pricing dispatch on the
variant with ``isinstance`` checks in the engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Union


class ColourGroup(Enum):
    """Street colour groups."""

    BROWN = "brown"
    LIGHT_BLUE = "light_blue"
    PINK = "pink"
    ORANGE = "orange"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    DARK_BLUE = "dark_blue"


@dataclass(frozen=True)
class StreetDeed:
    """
    A colour-group street.

    rents = (site, 1 house, 2 houses, 3 houses, 4 houses, hotel)
    """

    index: int
    group: ColourGroup
    price: int
    mortgage_value: int
    house_cost: int
    rents: Tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.rents) != 6:
            raise ValueError(f"street {self.index} needs 6 rents, got {len(self.rents)}")

    def rent_for(self, buildings: int) -> int:
        return self.rents[max(0, min(buildings, 5))]


@dataclass(frozen=True)
class RailroadDeed:
    """A station. Rent depends on how many stations the owner holds."""

    index: int
    price: int
    mortgage_value: int
    rent_by_count: Tuple[int, ...] = (25, 50, 100, 200)

    def __post_init__(self) -> None:
        if len(self.rent_by_count) != 4:
            raise ValueError(f"station {self.index} needs 4 rents")

    def rent_for(self, owned: int) -> int:
        return self.rent_by_count[max(1, min(owned, 4)) - 1]


@dataclass(frozen=True)
class UtilityDeed:
    """A utility. Rent is a multiple of the dice total."""

    index: int
    price: int
    mortgage_value: int
    mult_if_one: int = 4
    mult_if_two: int = 10

    def multiplier(self, owned: int) -> int:
        return self.mult_if_two if owned >= 2 else self.mult_if_one


Deed = Union[StreetDeed, RailroadDeed, UtilityDeed]


def _street(index, group, price, mortgage, house_cost, *rents) -> StreetDeed:
    return StreetDeed(index, group, price, mortgage, house_cost, tuple(rents))


def uk_classic_deeds() -> Dict[int, Deed]:
    """Return the standard UK deed table keyed by tile index."""
    deeds: List[Deed] = [
        _street(1, ColourGroup.BROWN, 60, 30, 50, 2, 10, 30, 90, 160, 250),
        _street(3, ColourGroup.BROWN, 60, 30, 50, 4, 20, 60, 180, 320, 450),
        _street(6, ColourGroup.LIGHT_BLUE, 100, 50, 50, 6, 30, 90, 270, 400, 550),
        _street(8, ColourGroup.LIGHT_BLUE, 100, 50, 50, 6, 30, 90, 270, 400, 550),
        _street(9, ColourGroup.LIGHT_BLUE, 120, 60, 50, 8, 40, 100, 300, 450, 600),
        _street(11, ColourGroup.PINK, 140, 70, 100, 10, 50, 150, 450, 625, 750),
        _street(13, ColourGroup.PINK, 140, 70, 100, 10, 50, 150, 450, 625, 750),
        _street(14, ColourGroup.PINK, 160, 80, 100, 12, 60, 180, 500, 700, 900),
        _street(16, ColourGroup.ORANGE, 180, 90, 100, 14, 70, 200, 550, 750, 950),
        _street(18, ColourGroup.ORANGE, 180, 90, 100, 14, 70, 200, 550, 750, 950),
        _street(19, ColourGroup.ORANGE, 200, 100, 100, 16, 80, 220, 600, 800, 1000),
        _street(21, ColourGroup.RED, 220, 110, 150, 18, 90, 250, 700, 875, 1050),
        _street(23, ColourGroup.RED, 220, 110, 150, 18, 90, 250, 700, 875, 1050),
        _street(24, ColourGroup.RED, 240, 120, 150, 20, 100, 300, 750, 925, 1100),
        _street(26, ColourGroup.YELLOW, 260, 130, 150, 22, 110, 330, 800, 975, 1150),
        _street(27, ColourGroup.YELLOW, 260, 130, 150, 22, 110, 330, 800, 975, 1150),
        _street(29, ColourGroup.YELLOW, 280, 140, 150, 24, 120, 360, 850, 1025, 1200),
        _street(31, ColourGroup.GREEN, 300, 150, 200, 26, 130, 390, 900, 1100, 1275),
        _street(32, ColourGroup.GREEN, 300, 150, 200, 26, 130, 390, 900, 1100, 1275),
        _street(34, ColourGroup.GREEN, 320, 160, 200, 28, 150, 450, 1000, 1200, 1400),
        _street(37, ColourGroup.DARK_BLUE, 350, 175, 200, 35, 175, 500, 1100, 1300, 1500),
        _street(39, ColourGroup.DARK_BLUE, 400, 200, 200, 50, 200, 600, 1400, 1700, 2000),
    ]
    deeds.extend(RailroadDeed(i, 200, 100) for i in (5, 15, 25, 35))
    deeds.extend(UtilityDeed(i, 150, 75) for i in (12, 28))
    return {deed.index: deed for deed in deeds}


def street_groups(deeds: Dict[int, Deed]) -> Dict[ColourGroup, List[int]]:
    """Map each colour group to its street indices in board order."""
    groups: Dict[ColourGroup, List[int]] = {}
    for index in sorted(deeds):
        deed = deeds[index]
        if isinstance(deed, StreetDeed):
            groups.setdefault(deed.group, []).append(index)
    return groups


def railroad_indices(deeds: Dict[int, Deed]) -> List[int]:
    return sorted(i for i, d in deeds.items() if isinstance(d, RailroadDeed))


def utility_indices(deeds: Dict[int, Deed]) -> List[int]:
    return sorted(i for i, d in deeds.items() if isinstance(d, UtilityDeed))

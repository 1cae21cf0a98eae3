"""
The 40-tile board with UK names.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

BOARD_SIZE = 40
JAIL_INDEX = 10


class TileType(Enum):
    """Types of board tiles."""

    GO = "go"
    PROPERTY = "property"
    RAILROAD = "railroad"
    UTILITY = "utility"
    TAX = "tax"
    CHANCE = "chance"
    COMMUNITY_CHEST = "community_chest"
    JAIL = "jail"
    FREE_PARKING = "free_parking"
    GO_TO_JAIL = "go_to_jail"
    OTHER = "other"


@dataclass(frozen=True)
class Tile:
    """A single board tile. ``amount`` is only used by tax tiles."""

    index: int
    name: str
    tile_type: TileType
    amount: int = 0

    def __str__(self) -> str:
        return f"{self.name} ({self.index})"


class Board:
    """The game board: exactly 40 tiles indexed 0..39."""

    def __init__(self, tiles: List[Tile]):
        if len(tiles) != BOARD_SIZE:
            raise ValueError(f"board needs {BOARD_SIZE} tiles, got {len(tiles)}")
        for position, tile in enumerate(tiles):
            if tile.index != position:
                raise ValueError(f"tile {tile.name} has index {tile.index}, expected {position}")
        self.tiles = list(tiles)

    def __len__(self) -> int:
        return len(self.tiles)

    def tile_at(self, position: int) -> Tile:
        return self.tiles[position % BOARD_SIZE]

    def indices_of(self, tile_type: TileType) -> List[int]:
        return [t.index for t in self.tiles if t.tile_type == tile_type]

    def name_of(self, position: int) -> str:
        return self.tile_at(position).name


def nearest_forward(start: int, candidates: Iterable[int]) -> Optional[int]:
    """
    Find the closest candidate strictly ahead of ``start``.

    Distance is (target - start) mod 40, with 0 counted as a full lap.
    """
    best = None
    best_distance = BOARD_SIZE + 1
    for candidate in candidates:
        distance = (candidate - start) % BOARD_SIZE
        if distance == 0:
            distance = BOARD_SIZE
        if distance < best_distance:
            best = candidate
            best_distance = distance
    return best


def standard_board() -> Board:
    """Create the standard UK board."""
    P, R, U = TileType.PROPERTY, TileType.RAILROAD, TileType.UTILITY
    CC, CH = TileType.COMMUNITY_CHEST, TileType.CHANCE
    layout = [
        # Bottom row (0-10)
        ("GO", TileType.GO, 0),
        ("Old Kent Road", P, 0),
        ("Community Chest", CC, 0),
        ("Whitechapel Road", P, 0),
        ("Income Tax", TileType.TAX, 200),
        ("King's Cross Station", R, 0),
        ("The Angel Islington", P, 0),
        ("Chance", CH, 0),
        ("Euston Road", P, 0),
        ("Pentonville Road", P, 0),
        ("Jail", TileType.JAIL, 0),
        # Left side (11-20)
        ("Pall Mall", P, 0),
        ("Electric Company", U, 0),
        ("Whitehall", P, 0),
        ("Northumberland Avenue", P, 0),
        ("Marylebone Station", R, 0),
        ("Bow Street", P, 0),
        ("Community Chest", CC, 0),
        ("Marlborough Street", P, 0),
        ("Vine Street", P, 0),
        ("Free Parking", TileType.FREE_PARKING, 0),
        # Top row (21-30)
        ("Strand", P, 0),
        ("Chance", CH, 0),
        ("Fleet Street", P, 0),
        ("Trafalgar Square", P, 0),
        ("Fenchurch St Station", R, 0),
        ("Leicester Square", P, 0),
        ("Coventry Street", P, 0),
        ("Water Works", U, 0),
        ("Piccadilly", P, 0),
        ("Go To Jail", TileType.GO_TO_JAIL, 0),
        # Right side (31-39)
        ("Regent Street", P, 0),
        ("Oxford Street", P, 0),
        ("Community Chest", CC, 0),
        ("Bond Street", P, 0),
        ("Liverpool Street Station", R, 0),
        ("Chance", CH, 0),
        ("Park Lane", P, 0),
        ("Super Tax", TileType.TAX, 100),
        ("Mayfair", P, 0),
    ]
    return Board([Tile(i, name, kind, amount) for i, (name, kind, amount) in enumerate(layout)])

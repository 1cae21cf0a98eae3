"""
Auction sub-state for an unowned property.
"""

from typing import List, Optional


class Auction:
    """
    An open auction for one tile.

    Players bid in seat order. Passing drops a bidder out for good; the
    auction ends when one active bidder holds the high bid or everyone
    has passed.
    """

    def __init__(self, tile_index: int, starting_bidder: int, active_flags: List[bool]):
        self.tile_index = tile_index
        self.active_flags = list(active_flags)
        self.high_bid = 0
        self.high_bidder: Optional[int] = None
        self.current_bidder = starting_bidder

    def active_count(self) -> int:
        return sum(1 for flag in self.active_flags if flag)

    def place_bid(self, player_index: int, amount: int) -> None:
        self.high_bid = amount
        self.high_bidder = player_index

    def mark_passed(self, player_index: int) -> None:
        self.active_flags[player_index] = False

    def advance_to_next_active_bidder(self) -> int:
        """Move ``current_bidder`` to the next active seat; -1 when nobody is left."""
        n = len(self.active_flags)
        for step in range(1, n + 1):
            candidate = (self.current_bidder + step) % n
            if self.active_flags[candidate]:
                self.current_bidder = candidate
                return candidate
        self.current_bidder = -1
        return -1

    def is_settled(self) -> bool:
        return self.active_count() <= 1 and self.high_bidder is not None

    def __repr__(self) -> str:
        return (
            f"Auction(tile={self.tile_index}, high_bid={self.high_bid}, "
            f"high_bidder={self.high_bidder}, current={self.current_bidder})"
        )

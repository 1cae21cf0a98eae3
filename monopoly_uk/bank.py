"""
Bank building supply.
"""


class Bank:
    """
    Tracks the houses and hotels not yet on the board.

    The bank has unlimited money; only buildings are scarce.
    """

    def __init__(self, house_limit: int = 32, hotel_limit: int = 12):
        self.house_limit = house_limit
        self.hotel_limit = hotel_limit
        self.houses_remaining = house_limit
        self.hotels_remaining = hotel_limit

    def can_take_houses(self, count: int = 1) -> bool:
        return self.houses_remaining >= count

    def take_houses(self, count: int = 1) -> None:
        if count > self.houses_remaining:
            raise ValueError(f"bank has {self.houses_remaining} houses, {count} requested")
        self.houses_remaining -= count

    def return_houses(self, count: int = 1) -> None:
        self.houses_remaining = min(self.house_limit, self.houses_remaining + count)

    def can_take_hotel(self) -> bool:
        return self.hotels_remaining > 0

    def take_hotel(self) -> None:
        if self.hotels_remaining <= 0:
            raise ValueError("bank has no hotels left")
        self.hotels_remaining -= 1

    def return_hotel(self) -> None:
        self.hotels_remaining = min(self.hotel_limit, self.hotels_remaining + 1)

    def __repr__(self) -> str:
        return f"Bank(houses={self.houses_remaining}, hotels={self.hotels_remaining})"

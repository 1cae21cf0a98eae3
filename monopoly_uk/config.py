"""
Game configuration settings.

``GameConfig`` is the plain value object handed to the engine.
``EngineSettings`` reads defaults for it from the environment
(prefix ``MONOPOLY_``) or a local ``.env`` file.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass
class GameConfig:
    """Configuration for a game."""

    starting_cash: int = 1500
    go_salary: int = 200
    jail_fine: int = 50
    jail_max_turns: int = 3

    house_limit: int = 32
    hotel_limit: int = 12

    # Unmortgage interest and trade transfer fee, rounded up
    mortgage_fee_percent: int = 10

    double_rent_on_unimproved_sets: bool = False

    # Classic corner rules, off unless asked for
    charge_tax_tiles: bool = False
    enforce_go_to_jail_tile: bool = False

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.starting_cash < 0:
            raise ValueError("starting_cash must be non-negative")
        if self.jail_max_turns < 1:
            raise ValueError("jail_max_turns must be at least 1")
        if self.house_limit < 0 or self.hotel_limit < 0:
            raise ValueError("building limits must be non-negative")


class EngineSettings(BaseSettings):
    """
    Environment-driven defaults for new games.

    Environment variables (prefix: MONOPOLY_):
        MONOPOLY_STARTING_CASH   - Cash each player starts with (default: 1500)
        MONOPOLY_GO_SALARY       - Salary for passing or landing on GO (default: 200)
        MONOPOLY_JAIL_FINE       - Fine paid to leave jail (default: 50)
        MONOPOLY_JAIL_MAX_TURNS  - Rolls allowed in jail before the fine is forced (default: 3)
        MONOPOLY_HOUSE_LIMIT     - Houses in the bank supply (default: 32)
        MONOPOLY_HOTEL_LIMIT     - Hotels in the bank supply (default: 12)
        MONOPOLY_CHARGE_TAX_TILES        - Charge tax tiles on landing (default: false)
        MONOPOLY_ENFORCE_GO_TO_JAIL_TILE - Go To Jail tile jails the player (default: false)
        MONOPOLY_SEED            - Seed for dice and deck shuffles (default: unset)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MONOPOLY_",
    )

    starting_cash: int = Field(default=1500, ge=0, description="Starting cash per player.")
    go_salary: int = Field(default=200, ge=0, description="GO salary.")
    jail_fine: int = Field(default=50, ge=0, description="Fine to leave jail.")
    jail_max_turns: int = Field(
        default=3,
        ge=1,
        description="Failed doubles attempts before the fine is forced.",
    )
    house_limit: int = Field(default=32, ge=0, description="Houses in the bank.")
    hotel_limit: int = Field(default=12, ge=0, description="Hotels in the bank.")
    mortgage_fee_percent: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Interest charged on unmortgage and mortgaged-deed transfers.",
    )
    double_rent_on_unimproved_sets: bool = Field(
        default=False,
        description="Double site rent when the owner holds the whole colour group.",
    )
    charge_tax_tiles: bool = Field(default=False, description="Charge Income Tax and Super Tax on landing.")
    enforce_go_to_jail_tile: bool = Field(
        default=False,
        description="Landing on Go To Jail sends the player to jail.",
    )
    seed: Optional[int] = Field(default=None, description="Seed for reproducible games.")

    @model_validator(mode="after")
    def check_supply(self) -> "EngineSettings":
        if self.hotel_limit > 0 and self.house_limit < 4:
            raise ValueError("a hotel supply needs at least 4 houses to build through")
        return self

    def to_game_config(self) -> GameConfig:
        return GameConfig(
            starting_cash=self.starting_cash,
            go_salary=self.go_salary,
            jail_fine=self.jail_fine,
            jail_max_turns=self.jail_max_turns,
            house_limit=self.house_limit,
            hotel_limit=self.hotel_limit,
            mortgage_fee_percent=self.mortgage_fee_percent,
            double_rent_on_unimproved_sets=self.double_rent_on_unimproved_sets,
            charge_tax_tiles=self.charge_tax_tiles,
            enforce_go_to_jail_tile=self.enforce_go_to_jail_tile,
            seed=self.seed,
        )


@lru_cache
def get_engine_settings() -> EngineSettings:
    """Return cached engine settings instance."""
    return EngineSettings()

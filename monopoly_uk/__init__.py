"""
UK Property Trading Rules Engine

A deterministic, phase-driven implementation of the classic 40-tile
property-trading game with UK economics.
"""

from .actions import Action, ActionResult, ActionType
from .board import Board, Tile, TileType, standard_board
from .cards import Card, CardDeck, DeckType, chance_cards, community_chest_cards
from .config import EngineSettings, GameConfig, get_engine_settings
from .deeds import ColourGroup, RailroadDeed, StreetDeed, UtilityDeed, uk_classic_deeds
from .dice import Dice, Roll
from .engine import GameEngine, create_game
from .exceptions import (
    ArgumentViolation,
    EconomicViolation,
    FatalState,
    MonopolyError,
    OwnershipViolation,
    PhaseViolation,
    RuleViolation,
)
from .player import Player, PlayerState, PropertyState
from .rules import legal_actions
from .snapshot import serialize_snapshot
from .state import GameState, GameStatus, TurnPhase
from .trade import MortgageTransferChoice, TradeOffer

__all__ = [
    "Action",
    "ActionResult",
    "ActionType",
    "Board",
    "Tile",
    "TileType",
    "standard_board",
    "Card",
    "CardDeck",
    "DeckType",
    "chance_cards",
    "community_chest_cards",
    "EngineSettings",
    "GameConfig",
    "get_engine_settings",
    "ColourGroup",
    "RailroadDeed",
    "StreetDeed",
    "UtilityDeed",
    "uk_classic_deeds",
    "Dice",
    "Roll",
    "GameEngine",
    "create_game",
    "ArgumentViolation",
    "EconomicViolation",
    "FatalState",
    "MonopolyError",
    "OwnershipViolation",
    "PhaseViolation",
    "RuleViolation",
    "Player",
    "PlayerState",
    "PropertyState",
    "legal_actions",
    "serialize_snapshot",
    "GameState",
    "GameStatus",
    "TurnPhase",
    "MortgageTransferChoice",
    "TradeOffer",
]

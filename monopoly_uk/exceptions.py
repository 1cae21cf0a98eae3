"""
Typed rule errors for the rules engine.

Handlers raise these while validating an action, before touching state.
``GameEngine.apply`` converts them into failed ``ActionResult`` objects,
so drivers never see them propagate.
"""


class MonopolyError(Exception):
    """Base exception for all game-related errors."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class PhaseViolation(MonopolyError):
    """Action is not permitted in the current phase."""


class OwnershipViolation(MonopolyError):
    """Player does not own the referenced tile, or owns it inappropriately."""


class EconomicViolation(MonopolyError):
    """Insufficient cash, bid too low, or the action would leave cash negative."""


class RuleViolation(MonopolyError):
    """Even-building, mortgage constraints or bank supply exhaustion."""


class ArgumentViolation(MonopolyError):
    """Missing tile index, null action or an invalid player index."""


class FatalState(MonopolyError):
    """The game is finished; no further actions are accepted."""

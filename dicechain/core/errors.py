"""
Exception types raised by the roll resolution engine.

Every exception carries an ErrorCode so callers (the CLI, a chat bridge) can
branch on a stable value instead of parsing messages.
"""

from .result import ErrorCode


class DiceChainError(Exception):
    """Base class for all engine errors."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidDie(DiceChainError, ValueError):
    """Raised when a die token is not a rung on the dice chain."""
    code = ErrorCode.INVALID_DIE


class DiceNotationError(DiceChainError, ValueError):
    """Raised when a roll formula is invalid."""
    code = ErrorCode.INVALID_FORMULA


class UnknownCheckType(DiceChainError):
    """Raised when a request is not one of the known check kinds."""
    code = ErrorCode.UNKNOWN_CHECK_TYPE


class InvalidOption(DiceChainError, ValueError):
    """Raised when a request carries an option its kind does not accept."""
    code = ErrorCode.INVALID_OPTION


class UnknownAbility(DiceChainError, KeyError):
    code = ErrorCode.UNKNOWN_ABILITY


class UnknownSave(DiceChainError, KeyError):
    code = ErrorCode.UNKNOWN_SAVE


class UnknownSkill(DiceChainError, KeyError):
    """Raised when a skill id has no matching SkillDefinition."""
    code = ErrorCode.UNKNOWN_SKILL


class UnknownWeapon(DiceChainError, KeyError):
    """Raised when a weapon slot is empty or not a valid slot id."""
    code = ErrorCode.UNKNOWN_WEAPON


class MissingTable(DiceChainError, KeyError):
    """Raised when no crit/fumble table is registered for a key."""
    code = ErrorCode.MISSING_TABLE

    def __init__(self, key: str):
        super().__init__(f"No crit/fumble table registered for '{key}'")
        self.key = key


__all__ = [
    'DiceChainError',
    'InvalidDie',
    'DiceNotationError',
    'UnknownCheckType',
    'InvalidOption',
    'UnknownAbility',
    'UnknownSave',
    'UnknownSkill',
    'UnknownWeapon',
    'MissingTable',
]

"""
Result object for recoverable lookups throughout dicechain.

Operations that have a sane fallback (crit/fumble table lookups) return a
Result instead of raising, so a caller can keep whatever it already rolled.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ErrorCode(Enum):
    """Stable codes shared by failed Results and DiceChainError subclasses."""

    # Dice
    INVALID_DIE = "invalid_die"
    INVALID_FORMULA = "invalid_formula"

    # Requests
    UNKNOWN_CHECK_TYPE = "unknown_check_type"
    INVALID_OPTION = "invalid_option"

    # Character data
    UNKNOWN_ABILITY = "unknown_ability"
    UNKNOWN_SAVE = "unknown_save"
    UNKNOWN_SKILL = "unknown_skill"
    UNKNOWN_WEAPON = "unknown_weapon"

    # Tables
    MISSING_TABLE = "missing_table"

    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


@dataclass
class Result:
    """
    Outcome of a lookup that may come back empty-handed.

    Attributes:
        success: True when the lookup found what it was asked for
        data: The found value (a table, a table entry, ...)
        error: Message describing the failure
        error_code: ErrorCode value for the failure

    Examples:
        >>> found = registry.lookup('III', 14)
        >>> if found:
        ...     print(found.data.text)

        >>> missing = Result.fail("No table 'IX'", ErrorCode.MISSING_TABLE)
        >>> missing.error_code
        'missing_table'
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @staticmethod
    def ok(data: Any = None) -> 'Result':
        return Result(success=True, data=data)

    @staticmethod
    def fail(error: str, code: Optional[Union[str, ErrorCode]] = None) -> 'Result':
        """
        Failed result.

        Args:
            error: Message for logs and users
            code: ErrorCode member or its string value
        """
        if isinstance(code, ErrorCode):
            code = code.value
        return Result(success=False, error=error, error_code=code)

    def __bool__(self) -> bool:
        return self.success

"""
Roll formula parser.

Supports standard dice notation plus named bindings:
- 1d20 (single die)
- 1d14+@bonus with {"bonus": 3} → 1d14+3
- @die+@bonus with {"die": "1d20", "bonus": -2} → 1d20-2
- 1d20 + 1 (whitespace between terms is ignored)
- 1d8+1d3+2 (several dice groups)
- 3 (a constant-only formula, e.g. a flat attack bonus)
"""

import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Union

from dicechain.core.errors import DiceNotationError

BindingValue = Union[int, str]

MAX_DICE = 100
MAX_SIDES = 1000


@dataclass(frozen=True)
class DiceExpression:
    """One group of identical dice, e.g. 2d6."""
    count: int           # Number of dice
    sides: int           # Number of sides per die
    sign: int = 1        # -1 when the group is subtracted

    def __str__(self) -> str:
        prefix = '-' if self.sign < 0 else ''
        return f"{prefix}{self.count}d{self.sides}"


@dataclass(frozen=True)
class ParsedRoll:
    """Complete parsed roll formula."""
    dice_groups: List[DiceExpression]  # All dice groups, in formula order
    static_modifier: int               # Sum of all constant terms
    original_notation: str             # Formula as given, bindings unresolved
    resolved_notation: str             # Formula after binding substitution

    def __str__(self) -> str:
        return self.resolved_notation


class DiceParser:
    """Parser for roll formulas with @name bindings."""

    BINDING_PATTERN = re.compile(r'@([A-Za-z_][A-Za-z0-9_]*)')
    TERM_PATTERN = re.compile(r'([+-]?)([^+-]+)')
    DICE_PATTERN = re.compile(r'^(\d*)d(\d+)$', re.IGNORECASE)
    CONSTANT_PATTERN = re.compile(r'^\d+$')

    @classmethod
    def substitute(cls, formula: str, bindings: Optional[Mapping[str, BindingValue]] = None) -> str:
        """
        Replace @name tokens with their bound values.

        Integers become signed constants and strings (die terms such as
        "1d20") are inserted verbatim. Doubled signs produced by substitution
        ("+-1") are collapsed.

        Raises:
            DiceNotationError: If the formula references an unbound name
        """
        bindings = bindings or {}

        def replace(match):
            name = match.group(1)
            if name not in bindings:
                raise DiceNotationError(f"Formula '{formula}' references unbound '@{name}'")
            value = bindings[name]
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise DiceNotationError(
                    f"Binding '@{name}' must be an integer or dice term, got {value!r}"
                )
            return str(value).strip()

        resolved = cls.BINDING_PATTERN.sub(replace, formula)
        resolved = resolved.replace(' ', '')
        while True:
            collapsed = (resolved.replace('+-', '-').replace('-+', '-')
                         .replace('--', '+').replace('++', '+'))
            if collapsed == resolved:
                break
            resolved = collapsed
        return resolved

    @classmethod
    def parse(cls, formula: str, bindings: Optional[Mapping[str, BindingValue]] = None) -> ParsedRoll:
        """
        Parse a roll formula into dice groups and a static modifier.

        Examples:
            "1d20" → ParsedRoll(dice_groups=[DiceExpression(1, 20)], static_modifier=0, ...)
            "1d20+@abilMod", {"abilMod": -1} → dice_groups=[1d20], static_modifier=-1
            "2d8+1d6+3" → dice_groups=[2d8, 1d6], static_modifier=3

        Args:
            formula: Roll formula
            bindings: Values for @name tokens

        Returns:
            ParsedRoll object

        Raises:
            DiceNotationError: If the formula is invalid
        """
        if not formula or not isinstance(formula, str):
            raise DiceNotationError("Formula must be a non-empty string")

        resolved = cls.substitute(formula.strip(), bindings).lower()
        if not resolved:
            raise DiceNotationError("Formula cannot be empty")

        dice_groups: List[DiceExpression] = []
        static_modifier = 0
        consumed = 0

        for match in cls.TERM_PATTERN.finditer(resolved):
            if match.start() != consumed:
                raise DiceNotationError(f"Unexpected character in formula '{formula}'")
            consumed = match.end()

            sign = -1 if match.group(1) == '-' else 1
            term = match.group(2)

            dice = cls.DICE_PATTERN.match(term)
            if dice:
                count = int(dice.group(1)) if dice.group(1) else 1
                sides = int(dice.group(2))
                if count < 1:
                    raise DiceNotationError(f"Dice count must be at least 1, got {count}")
                if count > MAX_DICE:
                    raise DiceNotationError(f"Dice count too large (max {MAX_DICE}), got {count}")
                if sides < 2:
                    raise DiceNotationError(f"Dice must have at least 2 sides, got {sides}")
                if sides > MAX_SIDES:
                    raise DiceNotationError(f"Dice sides too large (max {MAX_SIDES}), got {sides}")
                dice_groups.append(DiceExpression(count, sides, sign))
            elif cls.CONSTANT_PATTERN.match(term):
                static_modifier += sign * int(term)
            else:
                raise DiceNotationError(f"Invalid term '{term}' in formula '{formula}'")

        if consumed != len(resolved):
            raise DiceNotationError(f"Trailing characters in formula '{formula}'")

        return ParsedRoll(
            dice_groups=dice_groups,
            static_modifier=static_modifier,
            original_notation=formula.strip(),
            resolved_notation=resolved
        )

    @classmethod
    def validate(cls, formula: str, bindings: Optional[Mapping[str, BindingValue]] = None) -> bool:
        """
        Check if a formula is valid without rolling it.

        Returns:
            True if valid, False otherwise
        """
        try:
            cls.parse(formula, bindings)
            return True
        except DiceNotationError:
            return False

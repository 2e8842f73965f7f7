"""
Roll execution with critical and fumble detection.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

from .dice_parser import BindingValue, DiceExpression, DiceParser

logger = logging.getLogger(__name__)

# Natural result that counts as a critical unless a `critical` binding overrides it
DEFAULT_CRITICAL = 20
FUMBLE_THRESHOLD = 1


class RandomSource(Protocol):
    """Anything that can produce an inclusive random integer, e.g. random.Random."""

    def randint(self, a: int, b: int) -> int:
        ...


@dataclass(frozen=True)
class DiceGroupResult:
    """Result from rolling a group of dice."""
    expression: DiceExpression  # What was rolled
    rolls: Tuple[int, ...]      # Individual die results

    @property
    def faces(self) -> int:
        return self.expression.sides

    @property
    def total(self) -> int:
        return self.expression.sign * sum(self.rolls)

    def __str__(self) -> str:
        rolls_str = ','.join(str(r) for r in self.rolls)
        return f"{self.expression} → [{rolls_str}] = {self.total}"


@dataclass(frozen=True)
class RollResult:
    """Complete result of a dice roll. Never mutated after creation."""
    formula: str                             # Formula as requested (with @bindings)
    notation: str                            # Formula after substitution
    dice_results: Tuple[DiceGroupResult, ...]
    static_modifier: int
    total: int
    critical: bool = False                   # Single d20 at or above the threshold
    fumble: bool = False                     # Single d20 showing a natural 1
    bindings: Dict[str, Any] = field(default_factory=dict)

    @property
    def natural(self) -> Optional[int]:
        """Raw value of the single d20 in this roll, if there is exactly one."""
        d20_rolls = [r for dr in self.dice_results if dr.faces == 20 for r in dr.rolls]
        if len(d20_rolls) != 1:
            return None
        return d20_rolls[0]

    def get_breakdown(self) -> str:
        """Human-readable breakdown of the roll."""
        parts = []

        for dice_result in self.dice_results:
            rolls_str = ','.join(str(r) for r in dice_result.rolls)
            parts.append(f"{dice_result.expression}: [{rolls_str}] = {dice_result.total}")

        if self.static_modifier != 0:
            parts.append(f"modifier: {self.static_modifier:+d}")

        parts.append(f"Total: {self.total}")

        if self.critical:
            parts.append("CRITICAL!")
        elif self.fumble:
            parts.append("FUMBLE!")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'formula': self.formula,
            'notation': self.notation,
            'total': self.total,
            'breakdown': self.get_breakdown(),
            'critical': self.critical,
            'fumble': self.fumble,
            'dice_results': [
                {
                    'expression': str(dr.expression),
                    'faces': dr.faces,
                    'rolls': list(dr.rolls),
                    'total': dr.total
                }
                for dr in self.dice_results
            ],
            'static_modifier': self.static_modifier,
            'bindings': dict(self.bindings)
        }


def classify(dice_results, critical_threshold: int = DEFAULT_CRITICAL) -> Tuple[bool, bool]:
    """
    Classify a roll as critical and/or fumble from its raw dice.

    Only rolls containing exactly one d20 qualify; the check uses the die's
    natural value, never the modified total.

    Returns:
        (critical, fumble)
    """
    d20_rolls = [r for dr in dice_results if dr.faces == 20 for r in dr.rolls]
    if len(d20_rolls) != 1:
        return False, False
    natural = d20_rolls[0]
    return natural >= critical_threshold, natural <= FUMBLE_THRESHOLD


class DiceRoller:
    """
    Executes roll formulas against a random source.

    The random source defaults to a seedable random.Random; tests pass a
    scripted source to make every die deterministic.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[RandomSource] = None):
        """
        Initialize roller.

        Args:
            seed: Random seed for deterministic rolls (testing/replay)
            rng: Explicit random source, takes precedence over seed
        """
        self.rng = rng if rng is not None else random.Random(seed)
        self.seed = seed

    def resolve(
        self,
        formula: str,
        bindings: Optional[Mapping[str, BindingValue]] = None,
        random_source: Optional[RandomSource] = None
    ) -> RollResult:
        """
        Roll a formula.

        Args:
            formula: Roll formula (e.g. "1d20+@abilMod", "@die+@bonus", "1d8")
            bindings: Values for @name tokens; a `critical` entry sets the crit threshold
            random_source: Overrides this roller's random source for one roll

        Returns:
            RollResult with per-die results and critical/fumble flags

        Raises:
            DiceNotationError: If the formula is invalid
        """
        bindings = dict(bindings or {})
        source = random_source if random_source is not None else self.rng

        parsed = DiceParser.parse(formula, bindings)

        dice_results = []
        for dice_expr in parsed.dice_groups:
            rolls = tuple(source.randint(1, dice_expr.sides) for _ in range(dice_expr.count))
            dice_results.append(DiceGroupResult(expression=dice_expr, rolls=rolls))

        total = sum(dr.total for dr in dice_results) + parsed.static_modifier

        threshold = bindings.get('critical', DEFAULT_CRITICAL)
        critical, fumble = classify(dice_results, threshold)

        result = RollResult(
            formula=parsed.original_notation,
            notation=parsed.resolved_notation,
            dice_results=tuple(dice_results),
            static_modifier=parsed.static_modifier,
            total=total,
            critical=critical,
            fumble=fumble,
            bindings=bindings
        )
        logger.debug(f"Rolled {result.formula} ({result.notation}): {result.get_breakdown()}")
        return result

    def roll(self, notation: str) -> RollResult:
        """Roll plain notation with no bindings."""
        return self.resolve(notation)

    def set_seed(self, seed: int):
        """Change random seed (for testing/replay)."""
        self.seed = seed
        self.rng = random.Random(seed)


__all__ = [
    'RandomSource',
    'DiceGroupResult',
    'RollResult',
    'DiceRoller',
    'classify',
    'DEFAULT_CRITICAL',
]

"""
RNG Module - dice chain arithmetic, formula parsing and roll execution.

Usage:
    roller = DiceRoller(seed=42)
    result = roller.resolve('1d20+@abilMod', {'abilMod': -1, 'critical': 20})
    print(result.get_breakdown())  # "1d20: [13] = 13 | modifier: -1 | Total: 12"

    step(DieSize.D20, -1)  # d16
"""

from .dice_chain import DEFAULT_CHAIN, DiceChain, DieSize, compare, parse_die, step
from .dice_parser import DiceExpression, DiceParser, ParsedRoll
from .roller import DiceGroupResult, DiceRoller, RandomSource, RollResult, classify

__all__ = [
    'DEFAULT_CHAIN',
    'DiceChain',
    'DieSize',
    'compare',
    'parse_die',
    'step',
    'DiceExpression',
    'DiceParser',
    'ParsedRoll',
    'DiceGroupResult',
    'DiceRoller',
    'RandomSource',
    'RollResult',
    'classify',
]

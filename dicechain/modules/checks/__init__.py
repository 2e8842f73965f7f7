"""
Checks Module - check requests and the formulas they roll.
"""

from .formula_builder import BuiltFormula, FormulaBuilder, SpellDelegation
from .requests import (
    REQUEST_TYPES,
    AbilityCheck,
    AttackBonus,
    CheckRequest,
    Initiative,
    LuckDie,
    SavingThrow,
    SkillCheck,
    SpellCheck,
    WeaponAttack,
    request_from_dict,
    request_to_dict,
)

__all__ = [
    'BuiltFormula',
    'FormulaBuilder',
    'SpellDelegation',
    'REQUEST_TYPES',
    'AbilityCheck',
    'AttackBonus',
    'CheckRequest',
    'Initiative',
    'LuckDie',
    'SavingThrow',
    'SkillCheck',
    'SpellCheck',
    'WeaponAttack',
    'request_from_dict',
    'request_to_dict',
]

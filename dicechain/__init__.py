"""
dicechain - roll resolution for dice-chain tabletop rules.

Typical usage:
    from dicechain import RollEngine, Character, AbilityCheck

    engine = RollEngine()
    hero = Character.from_dict(data)
    outcome = engine.roll(hero, AbilityCheck('str'))
    print(outcome.label, outcome.roll.get_breakdown())
"""

from .core.models import Character
from .core.roll_engine import RollEngine
from .modules.checks.requests import (
    AbilityCheck,
    AttackBonus,
    Initiative,
    LuckDie,
    SavingThrow,
    SkillCheck,
    SpellCheck,
    WeaponAttack,
    request_from_dict,
)

__version__ = "0.1.0"

__all__ = [
    'Character',
    'RollEngine',
    'AbilityCheck',
    'AttackBonus',
    'Initiative',
    'LuckDie',
    'SavingThrow',
    'SkillCheck',
    'SpellCheck',
    'WeaponAttack',
    'request_from_dict',
]

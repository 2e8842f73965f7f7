"""
Shared fixtures.
"""

import pytest

from dicechain.core.models import (
    AbilityScore,
    Character,
    OwnedItem,
    SkillDefinition,
    WeaponDescriptor,
)
from dicechain.core.roll_engine import RollEngine
from dicechain.modules.magic.items import SpellItem
from dicechain.modules.rng.dice_chain import DieSize
from dicechain.modules.rng.roller import DiceRoller


class ScriptedRandom:
    """Random source that returns queued values in order."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def queue(self, *values):
        self.values.extend(values)

    def randint(self, a, b):
        if not self.values:
            raise AssertionError(f"Unexpected roll of 1d{b}")
        value = self.values.pop(0)
        assert a <= value <= b, f"Scripted {value} does not fit 1d{b}"
        self.calls.append(b)
        return value


@pytest.fixture
def scripted():
    return ScriptedRandom()


@pytest.fixture
def roller(scripted):
    return DiceRoller(rng=scripted)


@pytest.fixture
def character():
    """Test character: weak, clumsy, lucky, with a strong will."""
    hero = Character(
        name='test character',
        abilities={
            'str': AbilityScore(6),
            'agl': AbilityScore(8),
            'sta': AbilityScore(12),
            'per': AbilityScore(16),
            'int': AbilityScore(14),
            'lck': AbilityScore(18),
        },
        saves={'frt': -1, 'ref': 0, 'wil': 12},
        spell_check=3,
        skills={
            'customDieSkill': SkillDefinition('customDieSkill', 'Custom Die Skill', die=DieSize.D14),
            'customDieAndValueSkill': SkillDefinition(
                'customDieAndValueSkill', 'Custom Die And Value Skill', die=DieSize.D14, bonus=3
            ),
            'actionDieSkill': SkillDefinition('actionDieSkill', 'Action Die Skill', bonus=-4),
            'customDieSkillWithInt': SkillDefinition(
                'customDieSkillWithInt', 'Custom Die Skill With Int', die=DieSize.D14, ability='int'
            ),
            'customDieAndValueSkillWithPer': SkillDefinition(
                'customDieAndValueSkillWithPer', 'Custom Die And Value Skill With Per',
                die=DieSize.D14, bonus=3, ability='per'
            ),
            'actionDieSkillWithLck': SkillDefinition(
                'actionDieSkillWithLck', 'Action Die Skill With Lck', bonus=-4, ability='lck'
            ),
        },
        weapons={
            'm1': WeaponDescriptor('longsword', to_hit=1, damage='1d8+@str', crit_table='III'),
            'm2': WeaponDescriptor('dagger', to_hit=0, damage='1d4+@str', backstab=True,
                                   backstab_damage='1d10+@str'),
            'r1': WeaponDescriptor('shortbow', to_hit=0, damage='1d6+@str', ranged=True, crit_table='III'),
        },
    )
    hero.items = [
        SpellItem('The Gloaming', owner=hero),
        OwnedItem('Swordfish', 'weapon'),
    ]
    return hero


@pytest.fixture
def engine(roller):
    return RollEngine(roller=roller)

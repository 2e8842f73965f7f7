"""
Owned items relevant to spell checks.

A SpellItem owns its spell-specific check: the engine hands a matched spell
over to `roll_spell_check` together with its character snapshot, roller,
random source and label function. Any object with `name`, `type` and a
matching `roll_spell_check` can stand in for one.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol

from dicechain.core.config import RulesConfig
from dicechain.core.models import OwnedItem
from dicechain.core.outcomes import CheckOutcome
from dicechain.modules.rng.dice_chain import DieSize, parse_die
from dicechain.modules.rng.roller import DiceRoller, RandomSource

logger = logging.getLogger(__name__)

SPELL_TYPE = 'spell'


class SpellCheckCapable(Protocol):
    """Capability of an owned spell: resolve its own spell check."""

    name: str
    type: str

    def roll_spell_check(
        self,
        ability_id: str,
        caster: Any = None,
        roller: Optional[DiceRoller] = None,
        random_source: Optional[RandomSource] = None,
        ability_label: Optional[Callable[[str], str]] = None
    ) -> CheckOutcome:
        ...


@dataclass(eq=False)
class SpellItem:
    """
    A spell known by a character.

    Attributes:
        name: Spell name, matched exactly when a spell check names it
        ability: Governing ability for the check (int for wizards, per for clerics)
        level: Spell level (1-5)
        die: Die for this spell's checks; defaults to the owner's spell check die
        bonus: Adjustment on top of the owner's spell check bonus
        owner: The character who knows the spell
    """
    name: str
    ability: str = 'int'
    level: int = 1
    die: Optional[DieSize] = None
    bonus: int = 0
    owner: Any = field(default=None, repr=False)
    type: str = SPELL_TYPE

    def roll_spell_check(
        self,
        ability_id: Optional[str] = None,
        caster: Any = None,
        roller: Optional[DiceRoller] = None,
        random_source: Optional[RandomSource] = None,
        ability_label: Optional[Callable[[str], str]] = None
    ) -> CheckOutcome:
        """
        Roll this spell's check.

        Args:
            ability_id: Ability shown in the label; the spell's own by default
            caster: Character state to read, usually the engine's snapshot; the owner by default
            roller: Roller for the check; a fresh unseeded roller by default
            random_source: Overrides the roller's random source for this check
            ability_label: Turns an ability id into label text; default rules labels otherwise

        Raises:
            ValueError: If there is no caster and the spell has no owner
        """
        caster = caster if caster is not None else self.owner
        if caster is None:
            raise ValueError(f"Spell '{self.name}' has no owner to roll for")

        ability_id = ability_id or self.ability
        die = self.die or caster.spell_check_die
        bindings = {'die': die.term(), 'bonus': caster.spell_check_bonus + self.bonus}

        roller = roller or DiceRoller()
        roll = roller.resolve('@die+@bonus', bindings, random_source)

        ability_label = ability_label or RulesConfig().ability_label
        label = f"{self.name} ({ability_label(ability_id)})"
        logger.debug(f"{caster.name} casts {self.name}: {roll.total}")
        return CheckOutcome(label=label, roll=roll, speaker=caster.name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'name': self.name,
            'type': self.type,
            'ability': self.ability,
            'level': self.level,
        }
        if self.die:
            data['die'] = str(self.die)
        if self.bonus:
            data['bonus'] = self.bonus
        return data


def item_from_dict(data: Dict[str, Any], owner=None):
    """Build an owned item; spells become SpellItem, everything else OwnedItem."""
    if data['type'] == SPELL_TYPE:
        die = data.get('die')
        return SpellItem(
            name=data['name'],
            ability=data.get('ability', 'int'),
            level=data.get('level', 1),
            die=parse_die(die) if die else None,
            bonus=data.get('bonus', 0),
            owner=owner
        )
    return OwnedItem(name=data['name'], type=data['type'], ability=data.get('ability'))


__all__ = ['SpellItem', 'SpellCheckCapable', 'item_from_dict', 'SPELL_TYPE']

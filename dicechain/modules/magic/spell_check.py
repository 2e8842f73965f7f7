"""
Spell check resolution.

A spell check that names a spell is looked up among the character's owned
items. The user always gets a roll:
- no owned item of that name → warn, roll a generic spell check
- owned item that is not a spell → warn, roll a generic spell check
- owned spell → the spell item resolves its own check, on this resolver's
  roller and labels, reading the character passed in (the engine's snapshot)
"""

import logging
from typing import Callable, Optional

from dicechain.core.models import Character
from dicechain.core.outcomes import CheckOutcome
from dicechain.modules.checks.formula_builder import BuiltFormula, FormulaBuilder
from dicechain.modules.checks.requests import SpellCheck
from dicechain.modules.rng.roller import DiceRoller, RandomSource
from .items import SPELL_TYPE

logger = logging.getLogger(__name__)

NO_OWNED_ITEM_WARNING = 'SpellCheckNoOwnedItemWarning'
NON_SPELL_WARNING = 'SpellCheckNonSpellWarning'


class SpellCheckResolver:
    """
    Resolves spell checks directly or through an owned spell item.

    Args:
        builder: FormulaBuilder for generic spell checks
        roller: DiceRoller for generic spell checks
        warn: Called with each warning key as it is raised
    """

    def __init__(
        self,
        builder: FormulaBuilder,
        roller: DiceRoller,
        warn: Optional[Callable[[str], None]] = None
    ):
        self.builder = builder
        self.roller = roller
        self.warn = warn

    def resolve(
        self,
        character: Character,
        request: SpellCheck,
        random_source: Optional[RandomSource] = None
    ) -> CheckOutcome:
        built = self.builder.build(request, character)
        if isinstance(built, BuiltFormula):
            return self._roll(character, built, (), random_source)

        item = character.find_item(built.spell)
        if item is None:
            warning = NO_OWNED_ITEM_WARNING
            logger.warning(f"{character.name} does not own an item named '{built.spell}'")
        elif item.type != SPELL_TYPE:
            warning = NON_SPELL_WARNING
            logger.warning(f"'{built.spell}' owned by {character.name} is a {item.type}, not a spell")
        else:
            ability_id = getattr(item, 'ability', None) or character.spell_check_ability
            return item.roll_spell_check(
                ability_id,
                caster=character,
                roller=self.roller,
                random_source=random_source,
                ability_label=self.builder.ability_label
            )

        if self.warn:
            self.warn(warning)
        generic = self.builder.build_generic_spell_check(character, built.ability_id)
        return self._roll(character, generic, (warning,), random_source)

    def _roll(self, character, built: BuiltFormula, warnings, random_source) -> CheckOutcome:
        roll = self.roller.resolve(built.formula, built.bindings, random_source)
        return CheckOutcome(label=built.label, roll=roll, speaker=character.name, warnings=tuple(warnings))


__all__ = ['SpellCheckResolver', 'NO_OWNED_ITEM_WARNING', 'NON_SPELL_WARNING']

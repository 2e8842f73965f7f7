"""
Weapon attack resolution.

An attack runs in three stages:
1. To-hit roll (action die + weapon to-hit + attack bonus)
2. Damage roll, always made so one chat entry can show both
3. On a critical, a roll on the weapon's crit table; on a fumble, a roll on
   the fumble table (using the armour's fumble die when there is one)

A missing table never aborts the attack: the outcome keeps its to-hit and
damage rolls, the effect text stays empty and a warning key is recorded.
"""

import logging
from typing import Callable, List, Optional, Tuple

from dicechain.core.models import Character
from dicechain.core.outcomes import AttackOutcome
from dicechain.modules.checks.formula_builder import FormulaBuilder
from dicechain.modules.checks.requests import WeaponAttack
from dicechain.modules.rng.dice_chain import DieSize
from dicechain.modules.rng.roller import DiceRoller, RandomSource, RollResult
from .crit_tables import CritFumbleTable

logger = logging.getLogger(__name__)

MISSING_TABLE_WARNING = 'CritTableMissingWarning'


class AttackResolver:
    """
    Orchestrates the to-hit → damage → crit/fumble sequence.

    Args:
        rules: RulesConfig holding the crit/fumble tables
        builder: FormulaBuilder for to-hit and damage formulas
        roller: DiceRoller used for every roll
        warn: Called with each warning key as it is raised
    """

    def __init__(
        self,
        rules,
        builder: FormulaBuilder,
        roller: DiceRoller,
        warn: Optional[Callable[[str], None]] = None
    ):
        self.rules = rules
        self.builder = builder
        self.roller = roller
        self.warn = warn

    def resolve(
        self,
        character: Character,
        request: WeaponAttack,
        random_source: Optional[RandomSource] = None
    ) -> AttackOutcome:
        """
        Resolve a weapon attack.

        Raises:
            UnknownWeapon: If the slot holds no weapon
        """
        weapon = character.weapon(request.slot)

        # Build both formulas before rolling anything
        to_hit_formula = self.builder.build_to_hit(request, character)
        damage_formula = self.builder.build_damage(request, character)

        to_hit = self.roller.resolve(to_hit_formula.formula, to_hit_formula.bindings, random_source)
        damage = self.roller.resolve(damage_formula.formula, damage_formula.bindings, random_source)

        warnings: List[str] = []
        crit_roll = crit_text = None
        fumble_roll = fumble_text = None

        if to_hit.critical:
            crit_roll, crit_text = self._roll_on_table(
                weapon.crit_table, None, random_source, warnings
            )
            logger.info(f"{character.name} scores a critical with {weapon.name}: {crit_text}")
        elif to_hit.fumble:
            fumble_roll, fumble_text = self._roll_on_table(
                self.rules.fumble_table, character.fumble_die, random_source, warnings
            )
            logger.info(f"{character.name} fumbles with {weapon.name}: {fumble_text}")

        return AttackOutcome(
            label=to_hit_formula.label,
            roll=to_hit,
            speaker=character.name,
            warnings=tuple(warnings),
            damage=damage,
            damage_label=damage_formula.label,
            crit_roll=crit_roll,
            crit_text=crit_text,
            fumble_roll=fumble_roll,
            fumble_text=fumble_text
        )

    def _roll_on_table(
        self,
        key: str,
        die_override: Optional[DieSize],
        random_source: Optional[RandomSource],
        warnings: List[str]
    ) -> Tuple[Optional[RollResult], Optional[str]]:
        found = self.rules.tables.find(key)
        if not found:
            logger.warning(found.error)
            warnings.append(MISSING_TABLE_WARNING)
            if self.warn:
                self.warn(MISSING_TABLE_WARNING)
            return None, None

        table: CritFumbleTable = found.data
        die = die_override or table.die
        table_roll = self.roller.resolve(die.term(), random_source=random_source)

        entry = table.lookup(table_roll.total)
        if entry is None:
            logger.debug(f"No entry on table '{key}' for {table_roll.total}")
            return table_roll, None
        return table_roll, entry.text


__all__ = ['AttackResolver', 'MISSING_TABLE_WARNING']

"""
Formula builder: turns a check request plus a character snapshot into a
roll formula, its bindings and a display label.

    builder = FormulaBuilder(rules)
    built = builder.build(AbilityCheck('str'), character)
    built.formula   # '1d20+@abilMod'
    built.bindings  # {'abilMod': -1, 'critical': 20}
    built.label     # 'AbilityStr Check'
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from dicechain.core.errors import UnknownAbility, UnknownCheckType
from dicechain.core.models import Character
from dicechain.modules.rng.roller import DEFAULT_CRITICAL
from .requests import (
    AbilityCheck,
    AttackBonus,
    CheckRequest,
    Initiative,
    LuckDie,
    SavingThrow,
    SkillCheck,
    SpellCheck,
    WeaponAttack,
)

logger = logging.getLogger(__name__)

Localizer = Callable[[str], str]

# Only luck checks are rolled under the score unless a request says otherwise
ROLL_UNDER_ABILITIES = ('lck',)


def identity_localize(key: str) -> str:
    return key


@dataclass(frozen=True)
class BuiltFormula:
    """A formula ready for DiceRoller.resolve, plus its display label."""
    formula: str
    bindings: Dict[str, Any] = field(default_factory=dict)
    label: str = ''


@dataclass(frozen=True)
class SpellDelegation:
    """Signals that a spell check must be resolved through an owned spell item."""
    spell: str
    ability_id: Optional[str] = None


class FormulaBuilder:
    """
    Builds formulas for every check kind.

    Args:
        rules: RulesConfig supplying label keys
        localize: Turns a label key into display text (identity by default)
    """

    def __init__(self, rules, localize: Optional[Localizer] = None):
        self.rules = rules
        self.localize = localize or identity_localize
        self._handlers = {
            AbilityCheck: self._ability_check,
            SavingThrow: self._saving_throw,
            Initiative: self._initiative,
            SkillCheck: self._skill_check,
            LuckDie: self._luck_die,
            SpellCheck: self._spell_check,
            AttackBonus: self._attack_bonus,
            WeaponAttack: self.build_to_hit,
        }

    def build(self, request: CheckRequest, character: Character) -> Union[BuiltFormula, SpellDelegation]:
        """
        Build the formula for a request.

        Returns:
            BuiltFormula, or SpellDelegation for a spell check naming a spell

        Raises:
            UnknownCheckType: If the request is not a known check type
            UnknownSkill / UnknownAbility / UnknownSave / UnknownWeapon: For bad keys
        """
        handler = self._handlers.get(type(request))
        if handler is None:
            raise UnknownCheckType(f"Unknown check type: {type(request).__name__}")
        return handler(request, character)

    # --- Labels ---

    def ability_label(self, ability_id: str) -> str:
        if ability_id not in self.rules.abilities:
            raise UnknownAbility(f"Unknown ability '{ability_id}'")
        return self.localize(self.rules.ability_label(ability_id))

    # --- Check kinds ---

    def _ability_check(self, request: AbilityCheck, character: Character) -> BuiltFormula:
        ability = character.ability(request.ability_id)
        label = f"{self.ability_label(request.ability_id)} {self.localize('Check')}"

        roll_under = request.roll_under
        if roll_under is None:
            roll_under = request.ability_id in ROLL_UNDER_ABILITIES

        if roll_under:
            # Compared against the raw score by the caller
            return BuiltFormula(formula='1d20', label=label)

        return BuiltFormula(
            formula='1d20+@abilMod',
            bindings={'abilMod': ability.mod, 'critical': DEFAULT_CRITICAL},
            label=label
        )

    def _saving_throw(self, request: SavingThrow, character: Character) -> BuiltFormula:
        modifier = character.save(request.save_id)
        label = f"{self.localize(self.rules.save_label(request.save_id))} {self.localize('Save')}"
        return BuiltFormula(formula='1d20+@saveMod', bindings={'saveMod': modifier}, label=label)

    def _initiative(self, request: Initiative, character: Character) -> BuiltFormula:
        return BuiltFormula(
            formula='1d20+@init',
            bindings={'init': character.initiative},
            label=self.localize('Initiative')
        )

    def _skill_check(self, request: SkillCheck, character: Character) -> BuiltFormula:
        skill = character.skill(request.skill_id)
        die = character.action_die if skill.uses_action_die else skill.die

        label = self.localize(skill.label)
        if skill.ability:
            # Display only: the ability is already folded into the bonus
            label = f"{label} ({self.ability_label(skill.ability)})"

        if skill.bonus is None:
            return BuiltFormula(formula=die.term(), label=label)
        return BuiltFormula(formula=f"{die.term()}+@bonus", bindings={'bonus': skill.bonus}, label=label)

    def _luck_die(self, request: LuckDie, character: Character) -> BuiltFormula:
        return BuiltFormula(formula=character.luck_die.term(), label=self.localize('LuckDie'))

    def _spell_check(self, request: SpellCheck, character: Character) -> Union[BuiltFormula, SpellDelegation]:
        if request.spell:
            return SpellDelegation(spell=request.spell, ability_id=request.ability_id)
        return self.build_generic_spell_check(character, request.ability_id)

    def build_generic_spell_check(self, character: Character, ability_id: Optional[str] = None) -> BuiltFormula:
        """
        Spell check straight from character attributes.

        `ability_id` changes the label only; the bonus is always the
        character's own spell check bonus.
        """
        ability_id = ability_id or character.spell_check_ability
        label = f"{self.localize('SpellCheck')} ({self.ability_label(ability_id)})"
        return BuiltFormula(
            formula='@die+@bonus',
            bindings={'die': character.spell_check_die.term(), 'bonus': character.spell_check_bonus},
            label=label
        )

    def _attack_bonus(self, request: AttackBonus, character: Character) -> BuiltFormula:
        return BuiltFormula(
            formula='@ab',
            bindings={'ab': character.attack_bonus_term()},
            label=self.localize('AttackBonus')
        )

    # --- Weapon attacks ---

    def build_to_hit(self, request: WeaponAttack, character: Character) -> BuiltFormula:
        """
        To-hit roll: action die + weapon to-hit + attack bonus (+ backstab bonus).

        The attack bonus may be a die term (e.g. a deed die) rather than a number.
        """
        weapon = character.weapon(request.slot)
        formula = f"{character.action_die.term()}+@toHit+@ab"
        bindings: Dict[str, Any] = {
            'toHit': weapon.to_hit,
            'ab': character.attack_bonus_term(),
            'critical': weapon.crit_range,
        }
        if request.backstab:
            formula += '+@backstab'
            bindings['backstab'] = character.backstab_bonus

        label = f"{self.localize('AttackRoll')} ({weapon.name})"
        return BuiltFormula(formula=formula, bindings=bindings, label=label)

    def build_damage(self, request: WeaponAttack, character: Character) -> BuiltFormula:
        """
        Damage roll for a weapon. Damage formulas may reference @str, bound to
        the strength modifier for melee weapons and 0 for ranged ones.
        """
        weapon = character.weapon(request.slot)
        damage = weapon.damage
        if request.backstab and weapon.backstab and weapon.backstab_damage:
            damage = weapon.backstab_damage

        strength = 0 if weapon.ranged else character.ability_mod('str')
        return BuiltFormula(
            formula=damage,
            bindings={'str': strength},
            label=f"{self.localize('Damage')} ({weapon.name})"
        )


__all__ = ['FormulaBuilder', 'BuiltFormula', 'SpellDelegation', 'identity_localize', 'Localizer']

"""
Roll engine for dicechain.

The RollEngine is the entry point for resolving checks. It owns one rules
configuration, one roller and the resolvers built on them, and dispatches
each request to the resolver for its kind.

Every resolution reads a snapshot of the character taken at call start. The
only write back to the character is the action-die step after a luck-die
roll, made through the character's locked update path.
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

from dicechain.modules.checks.formula_builder import FormulaBuilder, Localizer
from dicechain.modules.checks.requests import (
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
)
from dicechain.modules.combat.attack import AttackResolver
from dicechain.modules.magic.spell_check import SpellCheckResolver
from dicechain.modules.rng.roller import DiceRoller, RandomSource
from .config import RulesConfig
from .errors import UnknownCheckType
from .models import Character
from .outcomes import AttackOutcome, CheckOutcome

logger = logging.getLogger(__name__)

Outcome = Union[CheckOutcome, AttackOutcome]


class RollEngine:
    """
    Resolves check requests for characters.

    Args:
        rules: Rules data (labels, crit/fumble tables, dice chain)
        roller: DiceRoller to use; a new one seeded with `seed` when omitted
        localize: Turns label keys into display text (identity by default)
        warn: Called with warning keys (e.g. to show a UI notification)
        seed: Seed for the default roller

    Example:
        engine = RollEngine(seed=7)
        outcome = engine.roll(hero, SavingThrow('wil'))
        print(outcome.label, outcome.roll.total)
    """

    def __init__(
        self,
        rules: Optional[RulesConfig] = None,
        roller: Optional[DiceRoller] = None,
        localize: Optional[Localizer] = None,
        warn: Optional[Callable[[str], None]] = None,
        seed: Optional[int] = None
    ):
        self.rules = rules or RulesConfig()
        self.roller = roller or DiceRoller(seed=seed)
        self.builder = FormulaBuilder(self.rules, localize)
        self.attacks = AttackResolver(self.rules, self.builder, self.roller, warn)
        self.spells = SpellCheckResolver(self.builder, self.roller, warn)
        self._handlers = {
            AbilityCheck: self._roll_built,
            SavingThrow: self._roll_built,
            Initiative: self._roll_built,
            SkillCheck: self._roll_built,
            AttackBonus: self._roll_built,
            LuckDie: self._roll_luck_die,
            SpellCheck: self._roll_spell_check,
            WeaponAttack: self._roll_weapon_attack,
        }

    def roll(
        self,
        character: Character,
        request: CheckRequest,
        random_source: Optional[RandomSource] = None
    ) -> Outcome:
        """
        Resolve one check.

        Args:
            character: Character making the check
            request: What to roll
            random_source: Overrides the roller's random source for this check

        Returns:
            CheckOutcome, or AttackOutcome for weapon attacks

        Raises:
            UnknownCheckType: If the request is not a known check type
            DiceChainError: For unknown abilities, saves, skills or weapon slots
        """
        handler = self._handlers.get(type(request))
        if handler is None:
            raise UnknownCheckType(f"Unknown check type: {type(request).__name__}")

        snapshot = character.snapshot()
        outcome = handler(character, snapshot, request, random_source)
        logger.debug(f"{character.name}: {outcome.label} → {outcome.roll.total}")
        return outcome

    def roll_dict(self, character: Character, data: Dict[str, Any],
                  random_source: Optional[RandomSource] = None) -> Outcome:
        """Resolve a request given as plain data (see request_from_dict)."""
        return self.roll(character, request_from_dict(data), random_source)

    # --- Convenience wrappers, one per check kind ---

    def roll_ability_check(self, character: Character, ability_id: str,
                           roll_under: Optional[bool] = None) -> CheckOutcome:
        return self.roll(character, AbilityCheck(ability_id, roll_under))

    def roll_saving_throw(self, character: Character, save_id: str) -> CheckOutcome:
        return self.roll(character, SavingThrow(save_id))

    def roll_initiative(self, character: Character) -> CheckOutcome:
        return self.roll(character, Initiative())

    def roll_skill_check(self, character: Character, skill_id: str) -> CheckOutcome:
        return self.roll(character, SkillCheck(skill_id))

    def roll_luck_die(self, character: Character, action_die_steps: int = 0) -> CheckOutcome:
        return self.roll(character, LuckDie(action_die_steps))

    def roll_spell_check(self, character: Character, ability_id: Optional[str] = None,
                         spell: Optional[str] = None) -> CheckOutcome:
        return self.roll(character, SpellCheck(ability_id, spell))

    def roll_attack_bonus(self, character: Character) -> CheckOutcome:
        return self.roll(character, AttackBonus())

    def roll_weapon_attack(self, character: Character, slot: str, backstab: bool = False) -> AttackOutcome:
        return self.roll(character, WeaponAttack(slot, backstab))

    # --- Handlers ---

    def _roll_built(self, character, snapshot, request, random_source) -> CheckOutcome:
        built = self.builder.build(request, snapshot)
        roll = self.roller.resolve(built.formula, built.bindings, random_source)
        return CheckOutcome(label=built.label, roll=roll, speaker=snapshot.name)

    def _roll_luck_die(self, character, snapshot, request: LuckDie, random_source) -> CheckOutcome:
        outcome = self._roll_built(character, snapshot, request, random_source)
        if request.action_die_steps:
            character.step_action_die(request.action_die_steps, self.rules.chain)
        return outcome

    def _roll_spell_check(self, character, snapshot, request, random_source) -> CheckOutcome:
        return self.spells.resolve(snapshot, request, random_source)

    def _roll_weapon_attack(self, character, snapshot, request, random_source) -> AttackOutcome:
        return self.attacks.resolve(snapshot, request, random_source)


__all__ = ['RollEngine', 'Outcome']

"""
Character data consumed by the roll resolution engine.

These models represent the snapshot the engine reads:
- AbilityScore: raw score with a table-derived modifier
- SkillDefinition: how a skill check is rolled
- WeaponDescriptor: an equipped weapon in one of the weapon slots
- OwnedItem: anything carried, looked up by name for spell checks
- Character: the full attribute snapshot plus its single-writer update path
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union

import jsonschema

from dicechain.modules.rng.dice_chain import DEFAULT_CHAIN, DiceChain, DieSize, parse_die
from .errors import UnknownAbility, UnknownSave, UnknownSkill, UnknownWeapon

logger = logging.getLogger(__name__)

ABILITY_IDS = ('str', 'agl', 'sta', 'per', 'int', 'lck')
SAVE_IDS = ('frt', 'ref', 'wil')
MELEE_SLOTS = ('m1', 'm2', 'm3')
RANGED_SLOTS = ('r1', 'r2')
WEAPON_SLOTS = MELEE_SLOTS + RANGED_SLOTS

# Published ability score → modifier table. Scores outside 3-18 saturate.
ABILITY_MODIFIERS = {
    3: -3,
    4: -2, 5: -2,
    6: -1, 7: -1, 8: -1,
    9: 0, 10: 0, 11: 0, 12: 0,
    13: 1, 14: 1, 15: 1,
    16: 2, 17: 2,
    18: 3,
}


def ability_modifier(score: int) -> int:
    """
    Look up the modifier for an ability score.

    Examples:
        ability_modifier(6) -> -1
        ability_modifier(12) -> 0
        ability_modifier(18) -> +3
    """
    score = max(3, min(score, 18))
    return ABILITY_MODIFIERS[score]


AttackBonusValue = Union[int, DieSize]


@dataclass
class AbilityScore:
    """An ability score. The modifier is always derived from the current value."""
    value: int

    @property
    def mod(self) -> int:
        return ability_modifier(self.value)


@dataclass(frozen=True)
class SkillDefinition:
    """
    How a skill check is rolled.

    A skill rolls its own die, its own die plus a flat bonus, or the current
    action die plus a flat bonus (die=None). `ability` only affects the label;
    any ability contribution is already part of `bonus`.
    """
    skill_id: str
    label: str
    die: Optional[DieSize] = None
    bonus: Optional[int] = None
    ability: Optional[str] = None

    @property
    def uses_action_die(self) -> bool:
        return self.die is None


@dataclass(frozen=True)
class WeaponDescriptor:
    """An equipped weapon."""
    name: str
    to_hit: int = 0
    damage: str = '1d4'
    ranged: bool = False
    crit_table: str = 'I'
    backstab: bool = False
    backstab_damage: Optional[str] = None
    crit_range: int = 20


@dataclass(frozen=True)
class OwnedItem:
    """An item owned by a character that is not a spell."""
    name: str
    type: str
    ability: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'name': self.name, 'type': self.type}
        if self.ability:
            data['ability'] = self.ability
        return data


CHARACTER_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "definitions": {
        "die": {"type": "string", "pattern": "^\\s*1?[dD]\\d+\\s*$"},
        "ability": {"type": "string", "enum": list(ABILITY_IDS)},
    },
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "abilities": {
            "type": "object",
            "additionalProperties": False,
            "properties": {a: {"type": "integer", "minimum": 1, "maximum": 30} for a in ABILITY_IDS},
            "required": list(ABILITY_IDS)
        },
        "saves": {
            "type": "object",
            "additionalProperties": False,
            "properties": {s: {"type": "integer"} for s in SAVE_IDS}
        },
        "initiative_bonus": {"type": "integer", "default": 0},
        "action_die": {"$ref": "#/definitions/die"},
        "luck_die": {"$ref": "#/definitions/die"},
        "spell_check_die": {"$ref": "#/definitions/die"},
        "spell_check": {"type": ["integer", "null"]},
        "spell_check_ability": {"$ref": "#/definitions/ability"},
        "attack_bonus": {
            "oneOf": [
                {"type": "integer"},
                {"$ref": "#/definitions/die"}
            ]
        },
        "backstab_bonus": {"type": "integer"},
        "fumble_die": {
            "oneOf": [
                {"type": "null"},
                {"$ref": "#/definitions/die"}
            ]
        },
        "skills": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "label": {"type": "string"},
                    "die": {
                        "oneOf": [
                            {"type": "null"},
                            {"$ref": "#/definitions/die"}
                        ]
                    },
                    "bonus": {"type": ["integer", "null"]},
                    "ability": {
                        "oneOf": [
                            {"type": "null"},
                            {"$ref": "#/definitions/ability"}
                        ]
                    }
                },
                "required": ["label"]
            }
        },
        "weapons": {
            "type": "object",
            "propertyNames": {"enum": list(WEAPON_SLOTS)},
            "additionalProperties": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string"},
                    "to_hit": {"type": "integer"},
                    "damage": {"type": "string"},
                    "ranged": {"type": "boolean"},
                    "crit_table": {"type": "string"},
                    "backstab": {"type": "boolean"},
                    "backstab_damage": {"type": ["string", "null"]},
                    "crit_range": {"type": "integer", "minimum": 2, "maximum": 20}
                },
                "required": ["name", "damage"]
            }
        },
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string"},
                    "type": {"type": "string"},
                    "ability": {"$ref": "#/definitions/ability"},
                    "level": {"type": "integer", "minimum": 1, "maximum": 5},
                    "die": {"$ref": "#/definitions/die"},
                    "bonus": {"type": "integer"}
                },
                "required": ["name", "type"]
            }
        }
    },
    "required": ["name", "abilities"]
}


@dataclass
class Character:
    """
    Attribute snapshot of one character.

    The engine never mutates a Character except through step_action_die and
    update_ability, which are serialized by a per-character lock. Resolvers
    work on snapshot() copies taken at the start of a roll.
    """
    name: str
    abilities: Dict[str, AbilityScore]
    saves: Dict[str, int] = field(default_factory=lambda: {s: 0 for s in SAVE_IDS})
    initiative_bonus: int = 0
    action_die: DieSize = DieSize.D20
    luck_die: DieSize = DieSize.D3
    spell_check_die: DieSize = DieSize.D20
    spell_check: Optional[int] = None
    spell_check_ability: str = 'int'
    attack_bonus: AttackBonusValue = 0
    backstab_bonus: int = 0
    fumble_die: Optional[DieSize] = None
    skills: Dict[str, SkillDefinition] = field(default_factory=dict)
    weapons: Dict[str, WeaponDescriptor] = field(default_factory=dict)
    items: List[Any] = field(default_factory=list)
    _lock: Any = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    # --- Lookups ---

    def ability(self, ability_id: str) -> AbilityScore:
        try:
            return self.abilities[ability_id]
        except KeyError:
            raise UnknownAbility(f"Unknown ability '{ability_id}'") from None

    def ability_mod(self, ability_id: str) -> int:
        return self.ability(ability_id).mod

    def save(self, save_id: str) -> int:
        try:
            return self.saves[save_id]
        except KeyError:
            raise UnknownSave(f"Unknown saving throw '{save_id}'") from None

    def skill(self, skill_id: str) -> SkillDefinition:
        try:
            return self.skills[skill_id]
        except KeyError:
            raise UnknownSkill(f"{self.name} has no skill '{skill_id}'") from None

    def weapon(self, slot: str) -> WeaponDescriptor:
        try:
            return self.weapons[slot]
        except KeyError:
            raise UnknownWeapon(f"{self.name} has no weapon in slot '{slot}'") from None

    @property
    def initiative(self) -> int:
        """Agility modifier adjusted by situational initiative bonuses."""
        return self.ability_mod('agl') + self.initiative_bonus

    @property
    def spell_check_bonus(self) -> int:
        """Spell check bonus; falls back to the casting ability's modifier."""
        if self.spell_check is not None:
            return self.spell_check
        return self.ability_mod(self.spell_check_ability)

    def attack_bonus_term(self) -> Union[int, str]:
        """Attack bonus as a formula binding: a flat number or a die term like '1d3'."""
        if isinstance(self.attack_bonus, DieSize):
            return self.attack_bonus.term()
        return self.attack_bonus

    def find_item(self, name: str):
        """Find an owned item by exact (case-sensitive) name."""
        return next((item for item in self.items if item.name == name), None)

    # --- Single-writer update path ---

    def step_action_die(self, count: int, chain: DiceChain = DEFAULT_CHAIN) -> DieSize:
        """Step the action die along the chain. Returns the new action die."""
        with self._lock:
            previous = self.action_die
            self.action_die = chain.step(self.action_die, count)
            logger.debug(f"{self.name}: action die {previous} → {self.action_die}")
            return self.action_die

    def update_ability(self, ability_id: str, value: int) -> AbilityScore:
        """Set a raw ability score; the modifier follows automatically."""
        with self._lock:
            self.ability(ability_id).value = value
            return self.abilities[ability_id]

    def snapshot(self) -> 'Character':
        """Independent copy of the current attribute state."""
        with self._lock:
            return replace(
                self,
                abilities={k: AbilityScore(v.value) for k, v in self.abilities.items()},
                saves=dict(self.saves),
                skills=dict(self.skills),
                weapons=dict(self.weapons),
                items=list(self.items)
            )

    # --- Serialization ---

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        """Return JSON Schema for character data."""
        return CHARACTER_SCHEMA

    @staticmethod
    def validate(data: Dict[str, Any]) -> bool:
        """
        Validate character data against the schema.

        Raises:
            jsonschema.ValidationError: If validation fails
        """
        jsonschema.validate(data, CHARACTER_SCHEMA)
        return True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Character':
        """
        Build a character from plain data (e.g. a JSON file).

        Raises:
            jsonschema.ValidationError: If data does not match the schema
            InvalidDie: If a die token is not on the dice chain
        """
        from dicechain.modules.magic.items import item_from_dict

        cls.validate(data)

        skills = {}
        for skill_id, skill in data.get('skills', {}).items():
            die = skill.get('die')
            skills[skill_id] = SkillDefinition(
                skill_id=skill_id,
                label=skill['label'],
                die=parse_die(die) if die else None,
                bonus=skill.get('bonus'),
                ability=skill.get('ability')
            )

        weapons = {
            slot: WeaponDescriptor(**weapon)
            for slot, weapon in data.get('weapons', {}).items()
        }

        attack_bonus = data.get('attack_bonus', 0)
        if isinstance(attack_bonus, str):
            attack_bonus = parse_die(attack_bonus)

        fumble_die = data.get('fumble_die')

        character = cls(
            name=data['name'],
            abilities={a: AbilityScore(v) for a, v in data['abilities'].items()},
            saves={s: data.get('saves', {}).get(s, 0) for s in SAVE_IDS},
            initiative_bonus=data.get('initiative_bonus', 0),
            action_die=parse_die(data.get('action_die', 'd20')),
            luck_die=parse_die(data.get('luck_die', 'd3')),
            spell_check_die=parse_die(data.get('spell_check_die', 'd20')),
            spell_check=data.get('spell_check'),
            spell_check_ability=data.get('spell_check_ability', 'int'),
            attack_bonus=attack_bonus,
            backstab_bonus=data.get('backstab_bonus', 0),
            fumble_die=parse_die(fumble_die) if fumble_die else None,
            skills=skills,
            weapons=weapons
        )
        character.items = [item_from_dict(item, owner=character) for item in data.get('items', [])]
        return character

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain data; the inverse of from_dict."""
        data: Dict[str, Any] = {
            'name': self.name,
            'abilities': {a: score.value for a, score in self.abilities.items()},
            'saves': dict(self.saves),
            'initiative_bonus': self.initiative_bonus,
            'action_die': str(self.action_die),
            'luck_die': str(self.luck_die),
            'spell_check_die': str(self.spell_check_die),
            'spell_check': self.spell_check,
            'spell_check_ability': self.spell_check_ability,
            'attack_bonus': (str(self.attack_bonus) if isinstance(self.attack_bonus, DieSize)
                             else self.attack_bonus),
            'backstab_bonus': self.backstab_bonus,
            'fumble_die': str(self.fumble_die) if self.fumble_die else None,
            'skills': {
                skill_id: {
                    'label': skill.label,
                    'die': str(skill.die) if skill.die else None,
                    'bonus': skill.bonus,
                    'ability': skill.ability
                }
                for skill_id, skill in self.skills.items()
            },
            'weapons': {
                slot: {
                    'name': w.name,
                    'to_hit': w.to_hit,
                    'damage': w.damage,
                    'ranged': w.ranged,
                    'crit_table': w.crit_table,
                    'backstab': w.backstab,
                    'backstab_damage': w.backstab_damage,
                    'crit_range': w.crit_range
                }
                for slot, w in self.weapons.items()
            },
            'items': [item.to_dict() for item in self.items if hasattr(item, 'to_dict')]
        }
        return data

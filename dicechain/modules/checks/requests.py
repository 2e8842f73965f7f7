"""
Check requests.

A closed set of request types, one per kind of check. Each carries only the
fields its kind needs; constructing one with an unknown field fails, both as
a dataclass (TypeError) and through request_from_dict (InvalidOption).
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Optional, Type, Union

import jsonschema

from dicechain.core.errors import InvalidOption, UnknownCheckType

_ABILITY = {"type": "string", "minLength": 1}


@dataclass(frozen=True)
class AbilityCheck:
    """
    d20 plus ability modifier, or a bare d20 roll-under check.

    roll_under=None uses the default (roll-under for luck only);
    True/False force either behaviour for any ability.
    """
    kind: ClassVar[str] = 'AbilityCheck'
    schema: ClassVar[Dict[str, Any]] = {
        "ability_id": _ABILITY,
        "roll_under": {"type": ["boolean", "null"]},
    }
    required: ClassVar[tuple] = ('ability_id',)

    ability_id: str
    roll_under: Optional[bool] = None


@dataclass(frozen=True)
class SavingThrow:
    kind: ClassVar[str] = 'SavingThrow'
    schema: ClassVar[Dict[str, Any]] = {"save_id": {"type": "string", "minLength": 1}}
    required: ClassVar[tuple] = ('save_id',)

    save_id: str


@dataclass(frozen=True)
class Initiative:
    kind: ClassVar[str] = 'Initiative'
    schema: ClassVar[Dict[str, Any]] = {}
    required: ClassVar[tuple] = ()


@dataclass(frozen=True)
class SkillCheck:
    kind: ClassVar[str] = 'SkillCheck'
    schema: ClassVar[Dict[str, Any]] = {"skill_id": {"type": "string", "minLength": 1}}
    required: ClassVar[tuple] = ('skill_id',)

    skill_id: str


@dataclass(frozen=True)
class LuckDie:
    """
    Roll the luck die. A non-zero action_die_steps moves the character's
    action die along the chain once the roll is made.
    """
    kind: ClassVar[str] = 'LuckDie'
    schema: ClassVar[Dict[str, Any]] = {"action_die_steps": {"type": "integer"}}
    required: ClassVar[tuple] = ()

    action_die_steps: int = 0


@dataclass(frozen=True)
class SpellCheck:
    """
    A spell check. With `spell` set, the check is delegated to the owned
    spell item of that name. `ability_id` only changes the label.
    """
    kind: ClassVar[str] = 'SpellCheck'
    schema: ClassVar[Dict[str, Any]] = {
        "ability_id": {"type": ["string", "null"]},
        "spell": {"type": ["string", "null"]},
    }
    required: ClassVar[tuple] = ()

    ability_id: Optional[str] = None
    spell: Optional[str] = None


@dataclass(frozen=True)
class AttackBonus:
    """Roll the character's attack bonus on its own (e.g. a deed die)."""
    kind: ClassVar[str] = 'AttackBonus'
    schema: ClassVar[Dict[str, Any]] = {}
    required: ClassVar[tuple] = ()


@dataclass(frozen=True)
class WeaponAttack:
    kind: ClassVar[str] = 'WeaponAttack'
    schema: ClassVar[Dict[str, Any]] = {
        "slot": {"type": "string", "minLength": 1},
        "backstab": {"type": "boolean"},
    }
    required: ClassVar[tuple] = ('slot',)

    slot: str
    backstab: bool = False


CheckRequest = Union[
    AbilityCheck,
    SavingThrow,
    Initiative,
    SkillCheck,
    LuckDie,
    SpellCheck,
    AttackBonus,
    WeaponAttack,
]

REQUEST_TYPES: Dict[str, Type] = {
    cls.kind: cls
    for cls in (AbilityCheck, SavingThrow, Initiative, SkillCheck,
                LuckDie, SpellCheck, AttackBonus, WeaponAttack)
}


def request_schema(kind: str) -> Dict[str, Any]:
    """JSON Schema for the dict form of a request kind."""
    try:
        cls = REQUEST_TYPES[kind]
    except KeyError:
        raise UnknownCheckType(
            f"Unknown check type '{kind}'. Must be one of: {', '.join(sorted(REQUEST_TYPES))}"
        ) from None
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {"kind": {"const": kind}, **cls.schema},
        "required": ["kind", *cls.required]
    }


def request_from_dict(data: Dict[str, Any]) -> CheckRequest:
    """
    Build a request from plain data, e.g. {"kind": "SkillCheck", "skill_id": "sneak"}.

    Raises:
        UnknownCheckType: If `kind` is missing or not a known check type
        InvalidOption: If the data has unknown keys or wrongly typed values
    """
    kind = data.get('kind') if isinstance(data, dict) else None
    if not isinstance(kind, str):
        raise UnknownCheckType(f"Request has no check type: {data!r}")

    schema = request_schema(kind)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise InvalidOption(f"Invalid {kind} request: {e.message}") from e

    cls = REQUEST_TYPES[kind]
    return cls(**{f.name: data[f.name] for f in fields(cls) if f.name in data})


def request_to_dict(request: CheckRequest) -> Dict[str, Any]:
    data: Dict[str, Any] = {'kind': request.kind}
    for f in fields(request):
        data[f.name] = getattr(request, f.name)
    return data


__all__ = [
    'AbilityCheck',
    'SavingThrow',
    'Initiative',
    'SkillCheck',
    'LuckDie',
    'SpellCheck',
    'AttackBonus',
    'WeaponAttack',
    'CheckRequest',
    'REQUEST_TYPES',
    'request_schema',
    'request_from_dict',
    'request_to_dict',
]

#!/usr/bin/env python3
"""
Command-line interface for dicechain.

Rolls checks for a character stored as JSON, plus a few dice utilities:

    dicechain ability hero.json str
    dicechain ability hero.json lck --roll-under
    dicechain attack hero.json m1 --backstab --tables crits.json
    dicechain spell hero.json --spell "Magic Missile"
    dicechain roll "1d20+@bonus" --bind bonus=3
    dicechain step d20 -2
"""

import argparse
import json
import sys
from typing import List, Optional

import jsonschema

from dicechain.core.config import RulesConfig, get_config
from dicechain.core.errors import DiceChainError
from dicechain.core.logging_config import setup_logging
from dicechain.core.models import Character
from dicechain.core.roll_engine import RollEngine
from dicechain.modules.checks.requests import (
    AbilityCheck,
    AttackBonus,
    Initiative,
    LuckDie,
    SavingThrow,
    SkillCheck,
    SpellCheck,
    WeaponAttack,
)
from dicechain.modules.combat.crit_tables import load_tables_from_file
from dicechain.modules.rng.dice_chain import DEFAULT_CHAIN
from dicechain.modules.rng.roller import DiceRoller


def _fail(message: str):
    print(f"✗ Error: {message}", file=sys.stderr)
    sys.exit(1)


def _load_character(path: str) -> Character:
    with open(path, 'r') as f:
        return Character.from_dict(json.load(f))


def _build_engine(args) -> RollEngine:
    config = get_config()
    rules = RulesConfig.from_config(config)
    if getattr(args, 'tables', None):
        load_tables_from_file(rules.tables, args.tables)
    seed = args.seed if args.seed is not None else config.seed
    return RollEngine(rules=rules, seed=seed)


def _print_outcome(outcome, as_json: bool):
    if as_json:
        print(json.dumps(outcome.to_dict(), indent=2))
        return

    print(f"{outcome.speaker}: {outcome.label}")
    print(f"  {outcome.roll.get_breakdown()}")

    damage = getattr(outcome, 'damage', None)
    if damage is not None:
        print(f"  {outcome.damage_label}: {damage.get_breakdown()}")
    if getattr(outcome, 'crit_roll', None) is not None:
        print(f"  Critical ({outcome.crit_roll.total}): {outcome.crit_text or '-'}")
    if getattr(outcome, 'fumble_roll', None) is not None:
        print(f"  Fumble ({outcome.fumble_roll.total}): {outcome.fumble_text or '-'}")
    for warning in outcome.warnings:
        print(f"  ⚠ {warning}")


def _request_for(args):
    """Map a check subcommand onto its request."""
    if args.command == 'ability':
        return AbilityCheck(args.ability_id, args.roll_under)
    if args.command == 'save':
        return SavingThrow(args.save_id)
    if args.command == 'init':
        return Initiative()
    if args.command == 'skill':
        return SkillCheck(args.skill_id)
    if args.command == 'luck':
        return LuckDie(args.steps)
    if args.command == 'spell':
        return SpellCheck(args.ability, args.spell)
    if args.command == 'attack-bonus':
        return AttackBonus()
    if args.command == 'attack':
        return WeaponAttack(args.slot, args.backstab)
    raise ValueError(f"Not a check command: {args.command}")


def cmd_check(args):
    """Roll a check for a character file."""
    try:
        character = _load_character(args.character)
        engine = _build_engine(args)
        outcome = engine.roll(character, _request_for(args))
        _print_outcome(outcome, args.json)

        if args.command == 'luck' and args.steps:
            print(f"  Action die is now {character.action_die}")
    except DiceChainError as e:
        _fail(e.message)
    except jsonschema.ValidationError as e:
        _fail(f"Invalid character file: {e.message}")
    except (OSError, json.JSONDecodeError) as e:
        _fail(str(e))


def cmd_roll(args):
    """Roll a bare formula."""
    bindings = {}
    for binding in args.bind or []:
        name, _, value = binding.partition('=')
        if not name or not value:
            _fail(f"Bindings look like name=value, got '{binding}'")
        try:
            bindings[name] = int(value)
        except ValueError:
            bindings[name] = value

    try:
        roller = DiceRoller(seed=args.seed if args.seed is not None else get_config().seed)
        result = roller.resolve(args.formula, bindings)
    except DiceChainError as e:
        _fail(e.message)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.get_breakdown())


def cmd_step(args):
    """Step a die along the dice chain."""
    try:
        die = DEFAULT_CHAIN.parse(args.die)
    except DiceChainError as e:
        _fail(e.message)
    print(DEFAULT_CHAIN.step(die, args.count))


def cmd_validate(args):
    """Validate a character file."""
    try:
        character = _load_character(args.character)
    except jsonschema.ValidationError as e:
        _fail(f"Invalid character file: {e.message}")
    except DiceChainError as e:
        _fail(e.message)
    except (OSError, json.JSONDecodeError) as e:
        _fail(str(e))

    print(f"✓ {character.name} is valid")
    print(f"  Abilities: " + ', '.join(
        f"{a} {s.value} ({s.mod:+d})" for a, s in character.abilities.items()
    ))
    print(f"  Action die: {character.action_die}  Luck die: {character.luck_die}")
    print(f"  Skills: {len(character.skills)}  Weapons: {', '.join(character.weapons) or '-'}")


def cmd_tables(args):
    """List crit/fumble tables from config and --tables."""
    rules = RulesConfig.from_config(get_config())
    if args.tables:
        if not load_tables_from_file(rules.tables, args.tables):
            _fail(f"No tables loaded from {args.tables}")

    if not len(rules.tables):
        print("No crit/fumble tables registered")
        return

    print(f"\n{len(rules.tables)} table(s):\n")
    for key in rules.tables.keys():
        table = rules.tables.get(key)
        marker = ' (fumble)' if key == rules.fumble_table else ''
        print(f"  {key}{marker}: {table.die}, {len(table.entries)} entries")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='dicechain - dice chain roll resolution'
    )
    parser.add_argument('--seed', type=int, default=None, help='Seed for deterministic rolls')
    parser.add_argument('--log-level', default=None, type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level (default from LOG_LEVEL)')
    parser.add_argument('--json', action='store_true', help='Print results as JSON')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    def check_parser(name, help_text):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('character', help='Path to character JSON file')
        sub.add_argument('--tables', help='JSON file of crit/fumble tables')
        sub.set_defaults(func=cmd_check)
        return sub

    # ========== check commands ==========
    parser_ability = check_parser('ability', 'Roll an ability check')
    parser_ability.add_argument('ability_id', help='Ability id (str, agl, sta, per, int, lck)')
    parser_ability.add_argument('--roll-under', dest='roll_under', action='store_true', default=None,
                                help='Roll a bare d20 to compare against the score')
    parser_ability.add_argument('--no-roll-under', dest='roll_under', action='store_false',
                                help='Roll d20 + modifier even for luck')

    parser_save = check_parser('save', 'Roll a saving throw')
    parser_save.add_argument('save_id', help='Save id (frt, ref, wil)')

    check_parser('init', 'Roll initiative')

    parser_skill = check_parser('skill', 'Roll a skill check')
    parser_skill.add_argument('skill_id', help='Skill id')

    parser_luck = check_parser('luck', 'Roll the luck die')
    parser_luck.add_argument('--steps', type=int, default=0,
                             help='Step the action die this many rungs afterwards')

    parser_spell = check_parser('spell', 'Roll a spell check')
    parser_spell.add_argument('--ability', help='Ability shown on the label (int or per)')
    parser_spell.add_argument('--spell', help='Name of an owned spell to cast')

    check_parser('attack-bonus', 'Roll the attack bonus (e.g. a deed die)')

    parser_attack = check_parser('attack', 'Roll a weapon attack')
    parser_attack.add_argument('slot', help='Weapon slot (m1, m2, m3, r1, r2)')
    parser_attack.add_argument('--backstab', action='store_true', help='Attack as a backstab')

    # ========== utility commands ==========
    parser_roll = subparsers.add_parser('roll', help='Roll a formula')
    parser_roll.add_argument('formula', help='Formula, e.g. "1d20+@bonus"')
    parser_roll.add_argument('--bind', action='append', help='Binding as name=value (repeatable)')
    parser_roll.set_defaults(func=cmd_roll)

    parser_step = subparsers.add_parser('step', help='Step a die along the dice chain')
    parser_step.add_argument('die', help='Die token, e.g. d20')
    parser_step.add_argument('count', type=int, help='Rungs to move (negative steps down)')
    parser_step.set_defaults(func=cmd_step)

    parser_validate = subparsers.add_parser('validate', help='Validate a character file')
    parser_validate.add_argument('character', help='Path to character JSON file')
    parser_validate.set_defaults(func=cmd_validate)

    parser_tables = subparsers.add_parser('tables', help='List crit/fumble tables')
    parser_tables.add_argument('--tables', help='JSON file of crit/fumble tables')
    parser_tables.set_defaults(func=cmd_tables)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    setup_logging(level=args.log_level or config.log_level, log_file=config.log_file,
                  use_colors=config.use_colors)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == '__main__':
    main()

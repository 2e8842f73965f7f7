"""
Unit tests for spell check resolution.
"""

import pytest

from dicechain.core.config import RulesConfig
from dicechain.core.outcomes import CheckOutcome
from dicechain.modules.checks.formula_builder import FormulaBuilder
from dicechain.modules.checks.requests import SpellCheck
from dicechain.modules.magic.items import SpellItem
from dicechain.modules.magic.spell_check import NO_OWNED_ITEM_WARNING, NON_SPELL_WARNING, SpellCheckResolver
from dicechain.modules.rng.dice_chain import DieSize
from dicechain.modules.rng.roller import DiceRoller


class RecordingSpell:
    """Owned spell that records how it was asked to roll."""

    type = 'spell'

    def __init__(self, name, ability='int'):
        self.name = name
        self.ability = ability
        self.calls = []
        self.context = None
        self.outcome = CheckOutcome(label=name, roll=DiceRoller(seed=3).roll('1d20'), speaker='test character')

    def roll_spell_check(self, ability_id, **context):
        self.calls.append(ability_id)
        self.context = context
        return self.outcome


@pytest.fixture
def warnings_seen():
    return []


@pytest.fixture
def resolver(roller, warnings_seen):
    return SpellCheckResolver(FormulaBuilder(RulesConfig()), roller, warn=warnings_seen.append)


class TestSpellCheckResolver:
    """Test the three spell lookup outcomes."""

    def test_generic_spell_check(self, resolver, scripted, character, warnings_seen):
        scripted.queue(12)
        outcome = resolver.resolve(character, SpellCheck())

        assert outcome.label == 'SpellCheck (AbilityInt)'
        assert outcome.roll.total == 15
        assert outcome.roll.bindings == {'die': '1d20', 'bonus': 3}
        assert outcome.warnings == ()
        assert warnings_seen == []

    def test_owned_spell_is_delegated(self, resolver, scripted, character, warnings_seen):
        spell = RecordingSpell('The Gloaming')
        character.items = [spell]

        outcome = resolver.resolve(character, SpellCheck(spell='The Gloaming'))

        assert outcome is spell.outcome
        assert spell.calls == ['int']
        assert outcome.warnings == ()
        assert warnings_seen == []
        assert scripted.calls == []

    def test_delegation_passes_roll_context(self, resolver, scripted, character):
        """The item gets the resolver's roller, labels and the character it was given."""
        spell = RecordingSpell('The Gloaming')
        character.items = [spell]
        snapshot = character.snapshot()

        resolver.resolve(snapshot, SpellCheck(spell='The Gloaming'), random_source=scripted)

        assert spell.context['caster'] is snapshot
        assert spell.context['roller'] is resolver.roller
        assert spell.context['random_source'] is scripted
        assert spell.context['ability_label']('int') == 'AbilityInt'

    def test_delegation_uses_item_ability(self, resolver, character):
        spell = RecordingSpell('Second Sight', ability='per')
        character.items = [spell]

        resolver.resolve(character, SpellCheck(spell='Second Sight'))

        assert spell.calls == ['per']

    def test_wrong_item_type(self, resolver, scripted, character, warnings_seen):
        """A non-spell item still gets a generic roll, with one warning."""
        scripted.queue(8)
        outcome = resolver.resolve(character, SpellCheck(spell='Swordfish'))

        assert outcome.label == 'SpellCheck (AbilityInt)'
        assert outcome.roll.total == 11
        assert outcome.warnings == (NON_SPELL_WARNING,)
        assert warnings_seen == [NON_SPELL_WARNING]

    def test_missing_item(self, resolver, scripted, character, warnings_seen):
        scripted.queue(8)
        outcome = resolver.resolve(character, SpellCheck(spell='Missing Spell'))

        assert outcome.roll.total == 11
        assert outcome.warnings == (NO_OWNED_ITEM_WARNING,)
        assert warnings_seen == [NO_OWNED_ITEM_WARNING]

    def test_missing_item_keeps_requested_ability(self, resolver, scripted, character):
        scripted.queue(8)
        outcome = resolver.resolve(character, SpellCheck(ability_id='per', spell='Missing Spell'))
        assert outcome.label == 'SpellCheck (AbilityPer)'

    def test_name_match_is_case_sensitive(self, resolver, scripted, character):
        scripted.queue(8)
        outcome = resolver.resolve(character, SpellCheck(spell='the gloaming'))
        assert outcome.warnings == (NO_OWNED_ITEM_WARNING,)

    def test_without_warn_callback(self, roller, scripted, character):
        resolver = SpellCheckResolver(FormulaBuilder(RulesConfig()), roller)
        scripted.queue(8)
        assert resolver.resolve(character, SpellCheck(spell='Swordfish')).warnings == (NON_SPELL_WARNING,)


class TestSpellItem:
    """Test spell items rolling their own checks."""

    def test_roll_spell_check(self, roller, scripted, character):
        spell = SpellItem('Magic Missile', bonus=1, owner=character)
        scripted.queue(10)

        outcome = spell.roll_spell_check('int', roller=roller)

        assert outcome.label == 'Magic Missile (AbilityInt)'
        assert outcome.roll.total == 14
        assert outcome.speaker == 'test character'

    def test_spell_die_overrides_character_die(self, roller, scripted, character):
        spell = SpellItem('Patron Bond', ability='per', die=DieSize.D16, owner=character)
        scripted.queue(16)

        outcome = spell.roll_spell_check(roller=roller)

        assert outcome.label == 'Patron Bond (AbilityPer)'
        assert outcome.roll.dice_results[0].faces == 16

    def test_random_source_override(self, scripted, character):
        spell = SpellItem('Magic Missile', owner=character)
        scripted.queue(7)

        outcome = spell.roll_spell_check(roller=DiceRoller(seed=5), random_source=scripted)

        assert outcome.roll.total == 10
        assert scripted.calls == [20]

    def test_ability_label_function(self, roller, scripted, character):
        spell = SpellItem('Magic Missile', owner=character)
        scripted.queue(7)

        outcome = spell.roll_spell_check(roller=roller, ability_label={'int': 'Intelligence'}.get)
        assert outcome.label == 'Magic Missile (Intelligence)'

    def test_caster_overrides_owner(self, roller, scripted, character):
        """The caster's values are read, not the live owner's."""
        spell = SpellItem('Magic Missile', owner=character)
        snapshot = character.snapshot()
        character.spell_check = 9
        scripted.queue(7)

        outcome = spell.roll_spell_check(caster=snapshot, roller=roller)
        assert outcome.roll.total == 10

    def test_unowned_spell(self):
        with pytest.raises(ValueError):
            SpellItem('Orphaned').roll_spell_check()

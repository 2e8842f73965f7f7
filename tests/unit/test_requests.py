"""
Unit tests for check requests.
"""

import pytest

from dicechain.core.errors import InvalidOption, UnknownCheckType
from dicechain.modules.checks.requests import (
    AbilityCheck,
    Initiative,
    LuckDie,
    SpellCheck,
    WeaponAttack,
    request_from_dict,
    request_to_dict,
)


class TestRequestFromDict:
    """Test building requests from plain data."""

    def test_builds_each_kind(self):
        assert request_from_dict({'kind': 'AbilityCheck', 'ability_id': 'lck', 'roll_under': True}) == \
            AbilityCheck('lck', True)
        assert request_from_dict({'kind': 'Initiative'}) == Initiative()
        assert request_from_dict({'kind': 'LuckDie', 'action_die_steps': -1}) == LuckDie(-1)
        assert request_from_dict({'kind': 'SpellCheck', 'spell': 'The Gloaming'}) == \
            SpellCheck(spell='The Gloaming')
        assert request_from_dict({'kind': 'WeaponAttack', 'slot': 'm1', 'backstab': True}) == \
            WeaponAttack('m1', True)

    def test_unknown_option_rejected(self):
        """Options a kind does not accept are rejected, not ignored."""
        with pytest.raises(InvalidOption):
            request_from_dict({'kind': 'AbilityCheck', 'ability_id': 'str', 'bogus': 1})

        with pytest.raises(InvalidOption):
            request_from_dict({'kind': 'SavingThrow', 'save_id': 'wil', 'roll_under': True})

    def test_wrong_type_rejected(self):
        with pytest.raises(InvalidOption):
            request_from_dict({'kind': 'WeaponAttack', 'slot': 'm1', 'backstab': 'yes'})

    def test_missing_key_rejected(self):
        with pytest.raises(InvalidOption):
            request_from_dict({'kind': 'SkillCheck'})

    def test_unknown_kind(self):
        with pytest.raises(UnknownCheckType):
            request_from_dict({'kind': 'Pray'})

        with pytest.raises(UnknownCheckType):
            request_from_dict({'ability_id': 'str'})

    def test_to_dict(self):
        request = WeaponAttack('r1')
        assert request_to_dict(request) == {'kind': 'WeaponAttack', 'slot': 'r1', 'backstab': False}
        assert request_from_dict(request_to_dict(request)) == request


class TestRequestTypes:
    """Test the request dataclasses themselves."""

    def test_unknown_field_rejected_at_construction(self):
        with pytest.raises(TypeError):
            AbilityCheck('str', bogus=1)

    def test_requests_are_immutable(self):
        request = LuckDie(1)
        with pytest.raises(AttributeError):
            request.action_die_steps = 2

"""
Integration tests for the command-line interface.
"""

import json
import os
import shutil
import tempfile

import pytest

import dicechain.core.config as config_module
from dicechain.cli.commands import main


CHARACTER = {
    'name': 'Wat the Ditch-Digger',
    'abilities': {'str': 6, 'agl': 8, 'sta': 12, 'per': 16, 'int': 14, 'lck': 18},
    'saves': {'frt': -1, 'ref': 0, 'wil': 12},
    'skills': {'dig': {'label': 'Dig', 'die': 'd14', 'bonus': 3}},
    'weapons': {'m1': {'name': 'shovel', 'damage': '1d6+@str', 'crit_table': 'I'}},
}


@pytest.fixture
def workdir(monkeypatch):
    """Temporary working directory with a fresh config."""
    path = tempfile.mkdtemp()
    monkeypatch.chdir(path)
    for name in ('LOG_LEVEL', 'LOG_FILE', 'DICECHAIN_TABLES', 'DICECHAIN_SEED', 'DICECHAIN_FUMBLE_TABLE'):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, '_config', None)
    yield path
    shutil.rmtree(path)


@pytest.fixture
def character_file(workdir):
    path = os.path.join(workdir, 'wat.json')
    with open(path, 'w') as f:
        json.dump(CHARACTER, f)
    return path


class TestCheckCommands:
    """Test rolling checks from a character file."""

    def test_ability(self, character_file, capsys):
        main(['--seed', '7', 'ability', character_file, 'str'])
        out = capsys.readouterr().out

        assert 'Wat the Ditch-Digger: AbilityStr Check' in out
        assert 'Total:' in out

    def test_ability_json(self, character_file, capsys):
        main(['--seed', '7', '--json', 'ability', character_file, 'str'])
        data = json.loads(capsys.readouterr().out)

        assert data['label'] == 'AbilityStr Check'
        assert data['roll']['notation'].startswith('1d20')
        assert data['roll']['bindings'] == {'abilMod': -1, 'critical': 20}

    def test_roll_under(self, character_file, capsys):
        main(['--json', 'ability', character_file, 'lck', '--no-roll-under'])
        assert json.loads(capsys.readouterr().out)['roll']['formula'] == '1d20+@abilMod'

        main(['--json', 'ability', character_file, 'str', '--roll-under'])
        assert json.loads(capsys.readouterr().out)['roll']['formula'] == '1d20'

    def test_skill(self, character_file, capsys):
        main(['--json', 'skill', character_file, 'dig'])
        data = json.loads(capsys.readouterr().out)
        assert data['label'] == 'Dig'
        assert 4 <= data['roll']['total'] <= 17

    def test_luck_steps(self, character_file, capsys):
        main(['luck', character_file, '--steps', '-1'])
        assert 'Action die is now d16' in capsys.readouterr().out

    def test_spell_warning(self, character_file, capsys):
        main(['spell', character_file, '--spell', 'Missing Spell'])
        assert 'SpellCheckNoOwnedItemWarning' in capsys.readouterr().out

    def test_attack_with_tables(self, character_file, workdir, capsys):
        tables = os.path.join(workdir, 'tables.json')
        with open(tables, 'w') as f:
            json.dump({'tables': [
                {'key': 'I', 'die': 'd4', 'entries': [{'low': 1, 'high': 4, 'text': 'Bonk.'}]},
                {'key': 'fumble', 'die': 'd4', 'entries': [{'low': 0, 'high': 4, 'text': 'Oops.'}]},
            ]}, f)

        main(['--seed', '3', '--json', 'attack', character_file, 'm1', '--tables', tables])
        data = json.loads(capsys.readouterr().out)

        assert data['label'] == 'AttackRoll (shovel)'
        assert data['damage_label'] == 'Damage (shovel)'
        assert data['warnings'] == []
        if data['roll']['critical']:
            assert data['crit_text'] == 'Bonk.'
        if data['roll']['fumble']:
            assert data['fumble_text'] == 'Oops.'

    def test_unknown_skill(self, character_file, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['skill', character_file, 'juggling'])
        assert exc.value.code == 1
        assert "✗ Error: Wat the Ditch-Digger has no skill 'juggling'" in capsys.readouterr().err

    def test_missing_character_file(self, workdir, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['init', os.path.join(workdir, 'nobody.json')])
        assert exc.value.code == 1
        assert '✗ Error' in capsys.readouterr().err


class TestUtilityCommands:
    """Test formula, step and validate commands."""

    def test_roll(self, workdir, capsys):
        main(['--json', 'roll', '1d20+@bonus', '--bind', 'bonus=3'])
        data = json.loads(capsys.readouterr().out)

        assert data['notation'] == '1d20+3'
        assert 4 <= data['total'] <= 23

    def test_roll_die_binding(self, workdir, capsys):
        main(['--json', 'roll', '@die+1', '--bind', 'die=1d4'])
        assert json.loads(capsys.readouterr().out)['notation'] == '1d4+1'

    def test_roll_unbound(self, workdir, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['roll', '1d20+@bonus'])
        assert exc.value.code == 1
        assert 'unbound' in capsys.readouterr().err

    def test_step(self, workdir, capsys):
        main(['step', 'd20', '-2'])
        assert capsys.readouterr().out.strip() == 'd14'

        main(['step', 'd24', '10'])
        assert capsys.readouterr().out.strip() == 'd30'

    def test_step_invalid_die(self, workdir, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['step', 'd9', '1'])
        assert exc.value.code == 1
        assert '✗ Error' in capsys.readouterr().err

    def test_validate(self, character_file, capsys):
        main(['validate', character_file])
        out = capsys.readouterr().out
        assert '✓ Wat the Ditch-Digger is valid' in out
        assert 'str 6 (-1)' in out

    def test_validate_invalid(self, workdir, capsys):
        path = os.path.join(workdir, 'bad.json')
        with open(path, 'w') as f:
            json.dump(dict(CHARACTER, charisma=10), f)

        with pytest.raises(SystemExit) as exc:
            main(['validate', path])
        assert exc.value.code == 1
        assert 'Invalid character file' in capsys.readouterr().err

    def test_tables(self, workdir, capsys):
        path = os.path.join(workdir, 'tables.json')
        with open(path, 'w') as f:
            json.dump({'tables': [
                {'key': 'fumble', 'die': 'd16', 'entries': [{'low': 0, 'high': 16, 'text': 'Oops.'}]},
            ]}, f)

        main(['tables', '--tables', path])
        assert 'fumble (fumble): d16, 1 entries' in capsys.readouterr().out

    def test_tables_none(self, workdir, capsys):
        main(['tables'])
        assert 'No crit/fumble tables registered' in capsys.readouterr().out

    def test_no_command(self, workdir):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1

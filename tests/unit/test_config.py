"""
Unit tests for configuration.
"""

import json
import os
import shutil
import tempfile

import pytest

from dicechain.core.config import Config, RulesConfig


@pytest.fixture
def temp_dir():
    path = tempfile.mkdtemp()
    yield path
    shutil.rmtree(path)


class TestConfig:
    """Test environment configuration."""

    def test_defaults(self, monkeypatch, temp_dir):
        for name in ('LOG_LEVEL', 'LOG_FILE', 'DICECHAIN_TABLES', 'DICECHAIN_SEED', 'DICECHAIN_FUMBLE_TABLE'):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(temp_dir)

        config = Config()
        assert config.log_level == 'INFO'
        assert config.tables_path is None
        assert config.seed is None
        assert config.fumble_table == 'fumble'
        assert config.validate()

    def test_environment(self, monkeypatch, temp_dir):
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv('LOG_LEVEL', 'debug')
        monkeypatch.setenv('DICECHAIN_SEED', '42')

        config = Config()
        assert config.log_level == 'DEBUG'
        assert config.seed == 42

    def test_env_file(self, monkeypatch, temp_dir):
        monkeypatch.delenv('DICECHAIN_FUMBLE_TABLE', raising=False)
        path = os.path.join(temp_dir, 'test.env')
        with open(path, 'w') as f:
            f.write('DICECHAIN_FUMBLE_TABLE=fumbles\n')

        try:
            config = Config(env_file=path)
            assert config.fumble_table == 'fumbles'
        finally:
            os.environ.pop('DICECHAIN_FUMBLE_TABLE', None)
        assert 'DICECHAIN_FUMBLE_TABLE' not in os.environ

    def test_invalid_log_level(self, monkeypatch, temp_dir):
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv('LOG_LEVEL', 'LOUD')
        assert not Config().validate()


class TestRulesConfig:
    """Test rules data built from configuration."""

    def test_labels(self):
        rules = RulesConfig()
        assert rules.ability_label('per') == 'AbilityPer'
        assert rules.save_label('frt') == 'SavesFortitude'

    def test_from_config_loads_tables(self, monkeypatch, temp_dir):
        path = os.path.join(temp_dir, 'tables.json')
        with open(path, 'w') as f:
            json.dump({'tables': [{'key': 'I', 'die': 'd4', 'entries': [
                {'low': 1, 'high': 4, 'text': 'Ouch.'}
            ]}]}, f)

        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv('DICECHAIN_TABLES', path)
        monkeypatch.delenv('DICECHAIN_FUMBLE_TABLE', raising=False)
        rules = RulesConfig.from_config(Config())

        assert rules.tables.keys() == ['I']
        assert rules.fumble_table == 'fumble'

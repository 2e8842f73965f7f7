"""
Configuration management for dicechain.

Two layers:
- Config: process settings from environment variables (and a .env file)
- RulesConfig: the rules data one RollEngine is built with (label keys,
  crit/fumble tables, the dice chain). It is passed explicitly, never global.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from dicechain.modules.combat.crit_tables import TableRegistry, load_tables_from_file
from dicechain.modules.rng.dice_chain import DEFAULT_CHAIN, DiceChain

logger = logging.getLogger(__name__)


# Localization keys for display labels. The engine only supplies keys; turning
# them into text is the caller's concern (see RollEngine's `localize`).
DEFAULT_ABILITY_LABELS: Dict[str, str] = {
    'str': 'AbilityStr',
    'agl': 'AbilityAgl',
    'sta': 'AbilitySta',
    'per': 'AbilityPer',
    'int': 'AbilityInt',
    'lck': 'AbilityLck',
}

DEFAULT_SAVE_LABELS: Dict[str, str] = {
    'frt': 'SavesFortitude',
    'ref': 'SavesReflex',
    'wil': 'SavesWill',
}

FUMBLE_TABLE_KEY = 'fumble'


class Config:
    """
    Process configuration loaded from environment variables.

    Supports .env files via python-dotenv.

    Example:
        config = Config()
        print(config.log_level)    # INFO
        print(config.tables_path)  # None unless DICECHAIN_TABLES is set
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file. If None, auto-discovers .env
                     in the working directory or skips if not found.
        """
        if env_file:
            load_dotenv(env_file)
            logger.info(f"Loaded configuration from {env_file}")
        else:
            env_path = Path.cwd() / '.env'
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded configuration from {env_path}")
            else:
                logger.debug("No .env file found, using environment variables and defaults")

        # === Logging ===
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_file = os.getenv('LOG_FILE', None)
        self.use_colors = os.getenv('LOG_COLORS', 'True').lower() in ('true', '1', 'yes')

        # === Rules data ===
        self.tables_path = os.getenv('DICECHAIN_TABLES', None)
        self.fumble_table = os.getenv('DICECHAIN_FUMBLE_TABLE', FUMBLE_TABLE_KEY)

        # === Dice ===
        seed = os.getenv('DICECHAIN_SEED', '')
        self.seed = int(seed) if seed.strip() else None

    def validate(self) -> bool:
        """
        Validate configuration and log problems.

        Returns:
            True if config is valid, False if critical values are wrong
        """
        valid = True

        if self.log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            logger.error(f"Invalid LOG_LEVEL: {self.log_level}")
            valid = False

        if self.tables_path and not Path(self.tables_path).exists():
            logger.warning(f"DICECHAIN_TABLES points to a missing file: {self.tables_path}")

        return valid

    def __repr__(self) -> str:
        return (
            f"Config("
            f"log_level={self.log_level}, "
            f"tables_path={self.tables_path}, "
            f"seed={self.seed})"
        )


# Global config instance (lazy-loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global config instance (singleton pattern).

    Only the CLI reads this; engines receive a RulesConfig explicitly.
    """
    global _config
    if _config is None:
        _config = Config()
        _config.validate()
    return _config


@dataclass
class RulesConfig:
    """
    Rules data a RollEngine resolves checks against.

    Attributes:
        abilities: Ability id → label key
        saves: Save id → label key
        tables: Registered crit/fumble tables
        fumble_table: Key of the table used for fumbles
        chain: The dice chain used for die stepping
    """
    abilities: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ABILITY_LABELS))
    saves: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SAVE_LABELS))
    tables: TableRegistry = field(default_factory=TableRegistry)
    fumble_table: str = FUMBLE_TABLE_KEY
    chain: DiceChain = DEFAULT_CHAIN

    def ability_label(self, ability_id: str) -> str:
        return self.abilities.get(ability_id, ability_id)

    def save_label(self, save_id: str) -> str:
        return self.saves.get(save_id, save_id)

    @classmethod
    def from_config(cls, config: Config) -> 'RulesConfig':
        """Build rules data from process config, loading tables if configured."""
        rules = cls(fumble_table=config.fumble_table)
        if config.tables_path:
            count = load_tables_from_file(rules.tables, config.tables_path)
            logger.info(f"Registered {count} crit/fumble tables from {config.tables_path}")
        return rules


__all__ = [
    'Config',
    'get_config',
    'RulesConfig',
    'DEFAULT_ABILITY_LABELS',
    'DEFAULT_SAVE_LABELS',
    'FUMBLE_TABLE_KEY',
]

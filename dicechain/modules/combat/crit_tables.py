"""
Critical hit and fumble tables.

Tables are data: each has a die to roll and an ordered list of result
ranges. They can be registered in code or loaded from JSON:

    {
      "tables": [
        {
          "key": "III",
          "die": "d16",
          "entries": [
            {"low": 1, "high": 2, "text": "Glancing blow. +1d6 damage."},
            {"low": 3, "high": 16, "text": "..."}
          ]
        }
      ]
    }
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import jsonschema

from dicechain.core.errors import InvalidDie, MissingTable
from dicechain.core.result import ErrorCode, Result
from dicechain.modules.rng.dice_chain import DieSize, parse_die

logger = logging.getLogger(__name__)


TABLE_FILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "tables": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "key": {"type": "string", "minLength": 1},
                    "die": {"type": "string"},
                    "entries": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "additionalProperties": False,
                            "properties": {
                                "low": {"type": "integer"},
                                "high": {"type": "integer"},
                                "text": {"type": "string"}
                            },
                            "required": ["low", "high", "text"]
                        }
                    }
                },
                "required": ["key", "die", "entries"]
            }
        }
    },
    "required": ["tables"]
}


@dataclass(frozen=True)
class TableEntry:
    """One row of a table, matching rolls in [low, high]."""
    low: int
    high: int
    text: str

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"Table entry range is inverted: {self.low}-{self.high}")

    def contains(self, roll: int) -> bool:
        return self.low <= roll <= self.high


@dataclass(frozen=True)
class CritFumbleTable:
    """A crit or fumble table keyed by identifier (e.g. 'III', 'fumble')."""
    key: str
    die: DieSize
    entries: Tuple[TableEntry, ...]

    def lookup(self, roll: int) -> Optional[TableEntry]:
        """First entry whose range contains the roll, or None."""
        for entry in self.entries:
            if entry.contains(roll):
                return entry
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CritFumbleTable':
        return cls(
            key=data['key'],
            die=parse_die(data['die']),
            entries=tuple(TableEntry(e['low'], e['high'], e['text']) for e in data['entries'])
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'die': str(self.die),
            'entries': [{'low': e.low, 'high': e.high, 'text': e.text} for e in self.entries]
        }


class TableRegistry:
    """Crit/fumble tables available to one engine."""

    def __init__(self, tables: Iterable[CritFumbleTable] = ()):
        self._tables: Dict[str, CritFumbleTable] = {}
        for table in tables:
            self.register(table)

    def register(self, table: CritFumbleTable) -> None:
        if table.key in self._tables:
            logger.info(f"Replacing crit/fumble table '{table.key}'")
        self._tables[table.key] = table

    def get(self, key: str) -> CritFumbleTable:
        """
        Raises:
            MissingTable: If no table is registered for key
        """
        try:
            return self._tables[key]
        except KeyError:
            raise MissingTable(key) from None

    def find(self, key: str) -> Result:
        """Result wrapping the table for key, failing with MISSING_TABLE."""
        table = self._tables.get(key)
        if table is None:
            return Result.fail(f"No crit/fumble table registered for '{key}'", ErrorCode.MISSING_TABLE)
        return Result.ok(table)

    def lookup(self, key: str, roll: int) -> Result:
        """
        Look up effect text for a roll on a table.

        Returns:
            Result.ok(TableEntry or None when no range matches), or
            Result.fail with MISSING_TABLE when the table is not registered
        """
        found = self.find(key)
        if not found:
            return found
        return Result.ok(found.data.lookup(roll))

    def keys(self) -> List[str]:
        return sorted(self._tables)

    def __contains__(self, key: str) -> bool:
        return key in self._tables

    def __len__(self) -> int:
        return len(self._tables)


def load_tables_from_file(registry: TableRegistry, file_path: str) -> int:
    """
    Load crit/fumble tables from a JSON file into a registry.

    Args:
        registry: Registry to add tables to
        file_path: Path to JSON file (see module docstring for the format)

    Returns:
        Number of tables loaded
    """
    path = Path(file_path)
    if not path.exists():
        logger.warning(f"Table file not found: {file_path}")
        return 0

    try:
        with open(path, 'r') as f:
            data = json.load(f)
        jsonschema.validate(data, TABLE_FILE_SCHEMA)
        tables = [CritFumbleTable.from_dict(t) for t in data['tables']]
    except (OSError, json.JSONDecodeError, jsonschema.ValidationError, InvalidDie, ValueError) as e:
        logger.error(f"Error loading tables from {file_path}: {e}")
        return 0

    for table in tables:
        registry.register(table)

    logger.info(f"Loaded {len(tables)} tables from {file_path}")
    return len(tables)


def export_tables_to_file(registry: TableRegistry, file_path: str) -> bool:
    """
    Export all registered tables to a JSON file.

    Returns:
        True if export succeeded, False otherwise
    """
    data = {'tables': [registry.get(key).to_dict() for key in registry.keys()]}
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        logger.error(f"Error exporting tables to {file_path}: {e}")
        return False

    logger.info(f"Exported {len(data['tables'])} tables to {file_path}")
    return True

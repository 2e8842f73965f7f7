"""
Combat Module - weapon attacks and crit/fumble tables.
"""

from .attack import MISSING_TABLE_WARNING, AttackResolver
from .crit_tables import (
    CritFumbleTable,
    TableEntry,
    TableRegistry,
    export_tables_to_file,
    load_tables_from_file,
)

__all__ = [
    'AttackResolver',
    'MISSING_TABLE_WARNING',
    'CritFumbleTable',
    'TableEntry',
    'TableRegistry',
    'export_tables_to_file',
    'load_tables_from_file',
]

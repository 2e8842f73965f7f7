"""
Magic Module - spell checks and spell items.
"""

from .items import SPELL_TYPE, SpellCheckCapable, SpellItem, item_from_dict
from .spell_check import NO_OWNED_ITEM_WARNING, NON_SPELL_WARNING, SpellCheckResolver

__all__ = [
    'SPELL_TYPE',
    'SpellCheckCapable',
    'SpellItem',
    'item_from_dict',
    'NO_OWNED_ITEM_WARNING',
    'NON_SPELL_WARNING',
    'SpellCheckResolver',
]

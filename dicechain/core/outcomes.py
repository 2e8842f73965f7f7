"""
Outcome objects handed to the presentation layer.

The engine fills these in; rendering them (chat cards, sheets) is the
caller's job.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from dicechain.modules.rng.roller import RollResult


@dataclass(frozen=True)
class CheckOutcome:
    """
    Result of a single check.

    Attributes:
        label: Display flavor built from localization keys (e.g. 'AbilityStr Check')
        roll: The roll that was made
        speaker: Name of the character who rolled
        warnings: Warning keys raised while resolving (e.g. 'SpellCheckNonSpellWarning')
    """
    label: str
    roll: RollResult
    speaker: str
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'speaker': self.speaker,
            'roll': self.roll.to_dict(),
            'warnings': list(self.warnings)
        }


@dataclass(frozen=True)
class AttackOutcome(CheckOutcome):
    """
    Result of a weapon attack: to-hit (in `roll`), damage, and any
    critical or fumble table result.
    """
    damage: Optional[RollResult] = None
    damage_label: str = ''
    crit_roll: Optional[RollResult] = None
    crit_text: Optional[str] = None
    fumble_roll: Optional[RollResult] = None
    fumble_text: Optional[str] = None

    @property
    def critical(self) -> bool:
        return self.roll.critical

    @property
    def fumble(self) -> bool:
        return self.roll.fumble

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'damage_label': self.damage_label,
            'damage': self.damage.to_dict() if self.damage else None,
            'crit_roll': self.crit_roll.to_dict() if self.crit_roll else None,
            'crit_text': self.crit_text,
            'fumble_roll': self.fumble_roll.to_dict() if self.fumble_roll else None,
            'fumble_text': self.fumble_text
        })
        return data


__all__ = ['CheckOutcome', 'AttackOutcome']

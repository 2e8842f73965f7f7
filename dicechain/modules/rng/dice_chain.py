"""
The dice chain: the ordered progression of die sizes.

    d3 → d4 → d5 → d6 → d7 → d8 → d10 → d12 → d14 → d16 → d20 → d24 → d30

Stepping a die "up the chain" by one moves it to the next larger rung
(d20 → d24), stepping "down" moves it to the next smaller rung
(d20 → d16). Steps saturate at either end of the chain.
"""

import re
from enum import IntEnum
from typing import Iterable, Iterator, Tuple

from dicechain.core.errors import InvalidDie


class DieSize(IntEnum):
    """A rung on the dice chain. The value is the number of faces."""

    D3 = 3
    D4 = 4
    D5 = 5
    D6 = 6
    D7 = 7
    D8 = 8
    D10 = 10
    D12 = 12
    D14 = 14
    D16 = 16
    D20 = 20
    D24 = 24
    D30 = 30

    @property
    def faces(self) -> int:
        return int(self.value)

    def term(self, count: int = 1) -> str:
        """Formula term for this die, e.g. DieSize.D14.term() == '1d14'."""
        return f"{count}d{self.value}"

    def __str__(self) -> str:
        return f"d{self.value}"

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


# Accepts "d20", "1d20", " D20 "
_TOKEN_PATTERN = re.compile(r'^(?:1)?d(\d+)$', re.IGNORECASE)


class DiceChain:
    """
    Immutable ordered sequence of die sizes.

    The default chain holds every DieSize; a custom chain may hold any
    strictly increasing subset of them.
    """

    def __init__(self, dice: Iterable[DieSize] = tuple(DieSize)):
        rungs = tuple(DieSize(d) for d in dice)
        if not rungs:
            raise ValueError("A dice chain needs at least one die")
        for lower, upper in zip(rungs, rungs[1:]):
            if lower >= upper:
                raise ValueError(
                    f"Dice chain must be strictly increasing, got {lower} before {upper}"
                )
        self._rungs: Tuple[DieSize, ...] = rungs

    @property
    def rungs(self) -> Tuple[DieSize, ...]:
        return self._rungs

    @property
    def smallest(self) -> DieSize:
        return self._rungs[0]

    @property
    def largest(self) -> DieSize:
        return self._rungs[-1]

    def __iter__(self) -> Iterator[DieSize]:
        return iter(self._rungs)

    def __len__(self) -> int:
        return len(self._rungs)

    def __contains__(self, die) -> bool:
        return die in self._rungs

    def __repr__(self) -> str:
        return f"DiceChain({', '.join(str(d) for d in self._rungs)})"

    def index(self, die: DieSize) -> int:
        """Position of a die on this chain."""
        try:
            return self._rungs.index(die)
        except ValueError:
            raise InvalidDie(f"{die} is not on the dice chain {self!r}") from None

    def step(self, die: DieSize, count: int) -> DieSize:
        """
        Move a die `count` rungs up (positive) or down (negative) the chain.

        The result is clamped to the first/last rung, so stepping past either
        end saturates rather than failing.

        Examples:
            step(DieSize.D20, 1) → d24
            step(DieSize.D20, -2) → d14
            step(DieSize.D30, 5) → d30
        """
        position = self.index(die) + count
        position = max(0, min(position, len(self._rungs) - 1))
        return self._rungs[position]

    def parse(self, token: str) -> DieSize:
        """
        Parse a die token ("d20" or "1d20") into a rung of this chain.

        Raises:
            InvalidDie: If the token is malformed or names a die not on the chain
        """
        if not isinstance(token, str):
            raise InvalidDie(f"Die token must be a string, got {token!r}")

        match = _TOKEN_PATTERN.match(token.strip())
        if not match:
            raise InvalidDie(f"Invalid die token '{token}'")

        faces = int(match.group(1))
        for die in self._rungs:
            if die.faces == faces:
                return die
        raise InvalidDie(f"d{faces} is not on the dice chain")

    @staticmethod
    def compare(a: DieSize, b: DieSize) -> int:
        """Three-way comparison: -1 if a < b, 0 if equal, 1 if a > b."""
        return (a > b) - (a < b)


DEFAULT_CHAIN = DiceChain()


def step(die: DieSize, count: int) -> DieSize:
    return DEFAULT_CHAIN.step(die, count)


def parse_die(token: str) -> DieSize:
    return DEFAULT_CHAIN.parse(token)


def compare(a: DieSize, b: DieSize) -> int:
    return DiceChain.compare(a, b)

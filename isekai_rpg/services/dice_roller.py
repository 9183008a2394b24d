import re
from typing import Iterable, List, Protocol

from ..exceptions import NotationError
from ..models.dice import DiceSpec, DieResult, RollResult
from ..utils.logger import logger

_DIGITS = re.compile(r"[0-9]+")
_MODIFIER = re.compile(r"([+-])([0-9]+)")
# Digits allowed in any one number of a notation
MAX_NUMBER_DIGITS = 9

DICE_PRESETS = {
    "attack": {"notation": "1d20", "description": "Attack roll"},
    "skill": {"notation": "1d20", "description": "Skill check"},
    "damage_light": {"notation": "1d6", "description": "Light weapon damage"},
    "damage_heavy": {"notation": "2d6", "description": "Heavy weapon damage"},
    "fireball": {"notation": "8d6", "description": "Fireball"},
    "healing": {"notation": "2d4+2", "description": "Healing potion"},
    "initiative": {"notation": "1d20", "description": "Initiative"},
    "percentile": {"notation": "1d100", "description": "Percentile"},
}


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


class FixedSequenceSource:
    """Replays a fixed list of draws, for reproducible rolls."""

    def __init__(self, values: Iterable[int]):
        self._values: List[int] = list(values)
        self._position = 0

    def randint(self, a: int, b: int) -> int:
        if self._position >= len(self._values):
            raise ValueError("Fixed sequence exhausted")
        value = self._values[self._position]
        if not a <= value <= b:
            raise ValueError(f"Fixed value {value} outside [{a}, {b}]")
        self._position += 1
        return value


def _number(digits: str, label: str) -> int:
    if len(digits) > MAX_NUMBER_DIGITS:
        raise NotationError(
            f"Invalid dice notation: {label} has more than {MAX_NUMBER_DIGITS} digits"
        )
    return int(digits)


def parse(text: str) -> DiceSpec:
    """Parse dice notation like '2d6+3', 'd20', '1D4-1'."""
    notation = text.strip()
    count_str, separator, rest = notation.lower().partition("d")
    if not separator:
        raise NotationError(f"Invalid dice notation: {text!r} (missing 'd')")

    if count_str:
        if not _DIGITS.fullmatch(count_str) or _number(count_str, "count") < 1:
            raise NotationError(
                f"Invalid dice notation: {text!r} (count must be a positive integer)"
            )
        count = int(count_str)
    else:
        count = 1

    size_match = _DIGITS.match(rest)
    if not size_match:
        raise NotationError(f"Invalid dice notation: {text!r} (missing die size)")
    size = _number(size_match.group(), "die size")
    if size < 2:
        raise NotationError(f"Invalid dice notation: {text!r} (die size must be at least 2)")

    modifier = 0
    tail = rest[size_match.end():]
    if tail:
        modifier_match = _MODIFIER.fullmatch(tail)
        if not modifier_match:
            raise NotationError(f"Invalid dice notation: {text!r} (malformed modifier {tail!r})")
        sign, digits = modifier_match.groups()
        value = _number(digits, "modifier")
        modifier = value if sign == "+" else -value

    return DiceSpec(count=count, size=size, modifier=modifier)


def format_notation(spec: DiceSpec) -> str:
    return spec.notation


def compose(count: int, sides: int, modifier: int = 0) -> str:
    """Build notation from the dice screen's count/sides/modifier inputs."""
    return format_notation(DiceSpec(count=count, size=sides, modifier=modifier))


def evaluate(spec: DiceSpec, source: RandomSource, description: str = "") -> RollResult:
    dice = [DieResult(sides=spec.size, value=source.randint(1, spec.size)) for _ in range(spec.count)]
    total = sum(d.value for d in dice) + spec.modifier
    result = RollResult(spec=spec, dice=dice, total=total, description=description)
    logger.debug(result.summary())
    return result


def roll(notation: str, source: RandomSource, description: str = "") -> RollResult:
    return evaluate(parse(notation), source, description)

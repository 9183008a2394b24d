from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from ..exceptions import NotationError

CRITICAL_RATIO = 0.9
GOOD_RATIO = 0.7
NORMAL_RATIO = 0.3


def classify(value: int, maximum: int) -> str:
    """Band a result by how close it came to the highest possible value."""
    ratio = value / maximum
    if ratio >= CRITICAL_RATIO:
        return "critical"
    if ratio >= GOOD_RATIO:
        return "good"
    if ratio >= NORMAL_RATIO:
        return "normal"
    return "poor"


@dataclass(frozen=True)
class DiceSpec:
    count: int = 1
    size: int = 20
    modifier: int = 0

    def __post_init__(self):
        if self.count < 1:
            raise NotationError(f"Dice count must be a positive integer, got {self.count}")
        if self.size < 2:
            raise NotationError(f"Die size must be at least 2, got {self.size}")

    @property
    def notation(self) -> str:
        """Canonical text form: 2d6+3, 1d20, 3d6-1."""
        text = f"{self.count}d{self.size}"
        if self.modifier > 0:
            text += f"+{self.modifier}"
        elif self.modifier < 0:
            text += str(self.modifier)
        return text

    @property
    def max_possible(self) -> int:
        return self.count * self.size


@dataclass(frozen=True)
class DieResult:
    sides: int
    value: int

    @property
    def rating(self) -> str:
        return classify(self.value, self.sides)


@dataclass
class RollResult:
    spec: DiceSpec
    dice: List[DieResult]
    total: int
    description: str = ""

    @property
    def modifier(self) -> int:
        return self.spec.modifier

    @property
    def values(self) -> List[int]:
        return [d.value for d in self.dice]

    @property
    def max_possible(self) -> int:
        return self.spec.max_possible

    @property
    def rating(self) -> str:
        return classify(self.total, self.max_possible)

    @property
    def notation(self) -> str:
        return self.spec.notation

    def summary(self) -> str:
        text = f"Rolled {self.notation}: [{', '.join(str(v) for v in self.values)}]"
        if self.modifier > 0:
            text += f" + {self.modifier}"
        elif self.modifier < 0:
            text += f" - {abs(self.modifier)}"
        return text + f" = {self.total}"

    def to_dict(self) -> dict:
        return {
            "notation": self.notation,
            "description": self.description,
            "total": self.total,
            "modifier": self.modifier,
            "max_possible": self.max_possible,
            "rating": self.rating,
            "details": [
                {"value": d.value, "sides": d.sides, "rating": d.rating}
                for d in self.dice
            ],
        }


@dataclass
class HistoryEntry:
    id: int
    result: RollResult
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            **self.result.to_dict(),
        }

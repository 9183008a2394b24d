from typing import Dict, Optional

from ..exceptions import AllocationRejected
from ..models.catalog import RaceDefinition
from ..models.character import (
    ATTRIBUTES,
    BASE_SCORE,
    MAX_ATTRIBUTE_POINTS,
    POINT_BUDGET,
    AttributeSet,
)


def remaining(points: AttributeSet) -> int:
    return POINT_BUDGET - points.total()


def allocate(points: AttributeSet, attribute: str, delta: int) -> AttributeSet:
    """Return a copy of ``points`` with ``delta`` applied to one attribute.

    Decreases are allowed down to 0. Increases are refused once the attribute
    reaches MAX_ATTRIBUTE_POINTS or the spend would exceed POINT_BUDGET.
    """
    if attribute not in ATTRIBUTES:
        raise ValueError(f"Unknown attribute: {attribute}")

    new_value = getattr(points, attribute) + delta
    if new_value < 0 or new_value > MAX_ATTRIBUTE_POINTS:
        raise AllocationRejected(
            f"{attribute} must stay between 0 and {MAX_ATTRIBUTE_POINTS}, got {new_value}"
        )
    if delta > 0 and delta > remaining(points):
        raise AllocationRejected(
            f"Not enough points for {attribute} +{delta} ({remaining(points)} remaining)"
        )
    return points.model_copy(update={attribute: new_value})


def resolve(points: AttributeSet, race: Optional[RaceDefinition], attribute: str) -> int:
    """Final score: base + allocated points + racial bonus + racial penalty."""
    score = BASE_SCORE + getattr(points, attribute)
    if race is not None:
        score += race.bonuses.get(attribute, 0)
        score += race.penalties.get(attribute, 0)
    return score


def derived_attributes(points: AttributeSet, race: Optional[RaceDefinition]) -> Dict[str, int]:
    return {attribute: resolve(points, race, attribute) for attribute in ATTRIBUTES}

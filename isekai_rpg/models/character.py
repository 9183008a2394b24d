from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Literal, Optional, Set
from datetime import datetime, timezone
import uuid

ATTRIBUTES = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

AttributeName = Literal[
    "strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma"
]

POINT_BUDGET = 27
MAX_ATTRIBUTE_POINTS = 8
BASE_SCORE = 10


class AttributeSet(BaseModel):
    """Points allocated on top of the base score, not the final scores."""

    strength: int = Field(0, ge=0, le=MAX_ATTRIBUTE_POINTS)
    dexterity: int = Field(0, ge=0, le=MAX_ATTRIBUTE_POINTS)
    constitution: int = Field(0, ge=0, le=MAX_ATTRIBUTE_POINTS)
    intelligence: int = Field(0, ge=0, le=MAX_ATTRIBUTE_POINTS)
    wisdom: int = Field(0, ge=0, le=MAX_ATTRIBUTE_POINTS)
    charisma: int = Field(0, ge=0, le=MAX_ATTRIBUTE_POINTS)

    @model_validator(mode="after")
    def _within_budget(self) -> "AttributeSet":
        if self.total() > POINT_BUDGET:
            raise ValueError(f"Allocated {self.total()} points, budget is {POINT_BUDGET}")
        return self

    def total(self) -> int:
        return sum(getattr(self, name) for name in ATTRIBUTES)

    def as_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in ATTRIBUTES}


class BuildSession(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    race: Optional[str] = None
    character_class: Optional[str] = None
    background: str = ""
    attribute_points: AttributeSet = Field(default_factory=AttributeSet)
    advantages: Set[str] = Field(default_factory=set)
    disadvantages: Set[str] = Field(default_factory=set)
    submitted: bool = False


class CharacterSnapshot(BaseModel):
    name: str
    race: str
    character_class: str
    background: str = ""
    attribute_points: AttributeSet
    attributes: Dict[str, int]
    advantages: List[str] = Field(default_factory=list)
    disadvantages: List[str] = Field(default_factory=list)


class Character(CharacterSnapshot):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

from pydantic import BaseModel, Field, PrivateAttr
from typing import Dict, List, Optional

from ..exceptions import UnknownCatalogReference
from ..utils.logger import logger


class RacialTrait(BaseModel):
    name: str
    description: str = ""


class RaceDefinition(BaseModel):
    id: str = ""
    name: str
    description: str = ""
    bonuses: Dict[str, int] = Field(default_factory=dict)
    penalties: Dict[str, int] = Field(default_factory=dict)
    # Display only, never charged against the advantage ledger
    racial_advantages: List[RacialTrait] = Field(default_factory=list)
    racial_disadvantages: List[RacialTrait] = Field(default_factory=list)


class ClassDefinition(BaseModel):
    id: str = ""
    name: str
    description: str = ""
    primary_attribute: Optional[str] = None
    hit_die: Optional[int] = None


class Advantage(BaseModel):
    id: str
    name: str
    description: str = ""
    cost: int = Field(ge=0)


class Disadvantage(BaseModel):
    id: str
    name: str
    description: str = ""
    points: int = Field(ge=0)


class ReferenceCatalog(BaseModel):
    """Typed registry of races, classes, advantages and disadvantages.

    Every lookup by id goes through ``require``; ``lookup`` is the one place
    where an unknown id is downgraded to ``None`` so stale client selections
    (or a catalog that has not loaded yet) count for nothing instead of failing.
    Build validation still reports an unknown race or class once ``loaded`` is set.
    """

    loaded: bool = True
    races: Dict[str, RaceDefinition] = Field(default_factory=dict)
    classes: Dict[str, ClassDefinition] = Field(default_factory=dict)
    advantages: List[Advantage] = Field(default_factory=list)
    disadvantages: List[Disadvantage] = Field(default_factory=list)

    _index: Dict[str, dict] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        for race_id, race in self.races.items():
            if not race.id:
                race.id = race_id
        for class_id, class_def in self.classes.items():
            if not class_def.id:
                class_def.id = class_id
        self._index = {
            "race": self.races,
            "class": self.classes,
            "advantage": {a.id: a for a in self.advantages},
            "disadvantage": {d.id: d for d in self.disadvantages},
        }

    @classmethod
    def pending(cls) -> "ReferenceCatalog":
        """Placeholder used while reference data is still being fetched."""
        return cls(loaded=False)

    def require(self, kind: str, ref_id: str):
        entry = self._index[kind].get(ref_id)
        if entry is None:
            raise UnknownCatalogReference(kind, ref_id)
        return entry

    def lookup(self, kind: str, ref_id: Optional[str]):
        if not ref_id:
            return None
        try:
            return self.require(kind, ref_id)
        except UnknownCatalogReference as e:
            logger.debug(f"Ignoring catalog reference ({'loaded' if self.loaded else 'loading'}): {e}")
            return None

    def race(self, race_id: Optional[str]) -> Optional[RaceDefinition]:
        return self.lookup("race", race_id)

    def character_class(self, class_id: Optional[str]) -> Optional[ClassDefinition]:
        return self.lookup("class", class_id)

    def advantage_cost(self, advantage_id: str) -> int:
        advantage = self.lookup("advantage", advantage_id)
        return advantage.cost if advantage else 0

    def disadvantage_points(self, disadvantage_id: str) -> int:
        disadvantage = self.lookup("disadvantage", disadvantage_id)
        return disadvantage.points if disadvantage else 0

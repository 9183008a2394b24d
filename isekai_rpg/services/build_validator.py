"""
Build legality for a character-creation session.

Nothing here is cached on the session: the verdict, the point balance and the
derived scores are recomputed from the session and the catalog on every call,
so a mutation can never leave a stale "valid" flag behind.
"""
from enum import Enum
from typing import Dict, List, Tuple

from pydantic import BaseModel

from ..exceptions import BuildInvalid, SessionLocked
from ..models.catalog import ReferenceCatalog
from ..models.character import (
    ATTRIBUTES,
    MAX_ATTRIBUTE_POINTS,
    POINT_BUDGET,
    AttributeSet,
    BuildSession,
    CharacterSnapshot,
)
from ..utils.logger import logger
from . import character_builder, point_buy, trait_ledger


class BuildState(str, Enum):
    DRAFT = "draft"
    VALID = "valid"
    SUBMITTED = "submitted"


class Violation(str, Enum):
    ATTRIBUTE_OUT_OF_RANGE = "attribute_out_of_range"
    OVER_BUDGET = "over_budget"
    UNALLOCATED_POINTS = "unallocated_points"
    NEGATIVE_BALANCE = "negative_balance"
    MISSING_NAME = "missing_name"
    MISSING_RACE = "missing_race"
    UNKNOWN_RACE = "unknown_race"
    MISSING_CLASS = "missing_class"
    UNKNOWN_CLASS = "unknown_class"


class BuildReport(BaseModel):
    state: BuildState
    remaining_points: int
    balance: int
    violations: List[Violation]
    attributes: Dict[str, int]


def allocation_violations(points: Dict[str, int]) -> List[Violation]:
    found = []
    if any(name not in ATTRIBUTES or not 0 <= value <= MAX_ATTRIBUTE_POINTS
           for name, value in points.items()):
        found.append(Violation.ATTRIBUTE_OUT_OF_RANGE)
    spent = sum(points.values())
    if spent > POINT_BUDGET:
        found.append(Violation.OVER_BUDGET)
    elif spent < POINT_BUDGET:
        found.append(Violation.UNALLOCATED_POINTS)
    return found


def _selection_violations(session: BuildSession, catalog: ReferenceCatalog) -> List[Violation]:
    found = []
    if not trait_ledger.is_balanced(session, catalog):
        found.append(Violation.NEGATIVE_BALANCE)
    if not session.name.strip():
        found.append(Violation.MISSING_NAME)
    # Ids are only checked against a loaded catalog
    if not session.race:
        found.append(Violation.MISSING_RACE)
    elif catalog.loaded and catalog.race(session.race) is None:
        found.append(Violation.UNKNOWN_RACE)
    if not session.character_class:
        found.append(Violation.MISSING_CLASS)
    elif catalog.loaded and catalog.character_class(session.character_class) is None:
        found.append(Violation.UNKNOWN_CLASS)
    return found


def violations(session: BuildSession, catalog: ReferenceCatalog) -> List[Violation]:
    return (
        allocation_violations(session.attribute_points.as_dict())
        + _selection_violations(session, catalog)
    )


def build_state(session: BuildSession, catalog: ReferenceCatalog) -> BuildState:
    if session.submitted:
        return BuildState.SUBMITTED
    return BuildState.DRAFT if violations(session, catalog) else BuildState.VALID


def derived_attributes(session: BuildSession, catalog: ReferenceCatalog) -> Dict[str, int]:
    return point_buy.derived_attributes(session.attribute_points, catalog.race(session.race))


def evaluate(session: BuildSession, catalog: ReferenceCatalog) -> BuildReport:
    found = violations(session, catalog)
    return BuildReport(
        state=build_state(session, catalog),
        remaining_points=point_buy.remaining(session.attribute_points),
        balance=trait_ledger.balance(session, catalog),
        violations=found,
        attributes=derived_attributes(session, catalog),
    )


def submit(session: BuildSession, catalog: ReferenceCatalog) -> Tuple[BuildSession, CharacterSnapshot]:
    """Freeze a valid session and produce the snapshot handed to storage."""
    if session.submitted:
        raise SessionLocked(f"Build session {session.id} was already submitted")
    found = violations(session, catalog)
    if found:
        logger.warning(f"Rejected build {session.id}: {', '.join(v.value for v in found)}")
        raise BuildInvalid([v.value for v in found])

    snapshot = CharacterSnapshot(
        name=session.name.strip(),
        race=session.race,
        character_class=session.character_class,
        background=session.background,
        attribute_points=session.attribute_points,
        attributes=derived_attributes(session, catalog),
        advantages=sorted(session.advantages),
        disadvantages=sorted(session.disadvantages),
    )
    logger.info(f"Build {session.id} submitted as {snapshot.name} ({snapshot.race} {snapshot.character_class})")
    return session.model_copy(update={"submitted": True}), snapshot


def submit_request(fields: dict, catalog: ReferenceCatalog) -> Tuple[BuildSession, CharacterSnapshot]:
    """Submit the raw build-submission shape.

    ``fields["attribute_points"]`` is a plain mapping, so an out-of-range or
    over-budget allocation is reported together with every other violation.
    """
    points = fields["attribute_points"]
    found = allocation_violations(points)
    if Violation.ATTRIBUTE_OUT_OF_RANGE in found or Violation.OVER_BUDGET in found:
        draft = character_builder.from_submission(**{**fields, "attribute_points": AttributeSet()})
        found += _selection_violations(draft, catalog)
        logger.warning(f"Rejected build {draft.id}: {', '.join(v.value for v in found)}")
        raise BuildInvalid([v.value for v in found])

    session = character_builder.from_submission(**{**fields, "attribute_points": AttributeSet(**points)})
    return submit(session, catalog)

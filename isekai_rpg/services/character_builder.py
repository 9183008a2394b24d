from typing import Optional, Tuple

from ..exceptions import AllocationRejected, SessionLocked
from ..models.character import AttributeSet, BuildSession
from . import point_buy


def new_session() -> BuildSession:
    return BuildSession()


def ensure_editable(session: BuildSession):
    if session.submitted:
        raise SessionLocked(f"Build session {session.id} was already submitted")


def adjust_attribute(session: BuildSession, attribute: str, delta: int) -> Tuple[BuildSession, bool]:
    """Apply an attribute delta. A rejected change leaves the session as it was.

    Returns the resulting session and whether the change was rejected.
    """
    ensure_editable(session)
    try:
        points = point_buy.allocate(session.attribute_points, attribute, delta)
    except AllocationRejected:
        return session, True
    return session.model_copy(update={"attribute_points": points}), False


def select_race(session: BuildSession, race_id: Optional[str]) -> BuildSession:
    ensure_editable(session)
    return session.model_copy(update={"race": race_id or None})


def select_class(session: BuildSession, class_id: Optional[str]) -> BuildSession:
    ensure_editable(session)
    return session.model_copy(update={"character_class": class_id or None})


def rename(session: BuildSession, name: str) -> BuildSession:
    ensure_editable(session)
    return session.model_copy(update={"name": name})


def set_background(session: BuildSession, background: str) -> BuildSession:
    ensure_editable(session)
    return session.model_copy(update={"background": background})


def from_submission(
    name: str,
    race: Optional[str],
    character_class: Optional[str],
    background: str,
    attribute_points: AttributeSet,
    advantages,
    disadvantages,
) -> BuildSession:
    return BuildSession(
        name=name,
        race=race or None,
        character_class=character_class or None,
        background=background,
        attribute_points=attribute_points,
        advantages=set(advantages),
        disadvantages=set(disadvantages),
    )

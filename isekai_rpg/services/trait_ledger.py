from ..models.catalog import ReferenceCatalog
from ..models.character import BuildSession
from .character_builder import ensure_editable


def toggle_advantage(session: BuildSession, advantage_id: str) -> BuildSession:
    ensure_editable(session)
    return session.model_copy(update={"advantages": session.advantages ^ {advantage_id}})


def toggle_disadvantage(session: BuildSession, disadvantage_id: str) -> BuildSession:
    ensure_editable(session)
    return session.model_copy(update={"disadvantages": session.disadvantages ^ {disadvantage_id}})


def advantage_cost(session: BuildSession, catalog: ReferenceCatalog) -> int:
    return sum(catalog.advantage_cost(a) for a in session.advantages)


def disadvantage_points(session: BuildSession, catalog: ReferenceCatalog) -> int:
    return sum(catalog.disadvantage_points(d) for d in session.disadvantages)


def balance(session: BuildSession, catalog: ReferenceCatalog) -> int:
    """Points granted by disadvantages minus points spent on advantages."""
    return disadvantage_points(session, catalog) - advantage_cost(session, catalog)


def is_balanced(session: BuildSession, catalog: ReferenceCatalog) -> bool:
    return balance(session, catalog) >= 0

from typing import List


class RulesError(Exception):
    """Base class for character-build and dice rule errors."""


class AllocationRejected(RulesError):
    """An attribute change would break the per-attribute bounds or the point budget."""


class BuildInvalid(RulesError):
    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__(f"Build is not valid: {', '.join(self.violations)}")


class NotationError(RulesError, ValueError):
    """Malformed dice notation."""


class UnknownCatalogReference(RulesError, LookupError):
    def __init__(self, kind: str, ref_id: str):
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(f"Unknown {kind}: {ref_id}")


class SessionLocked(RulesError):
    """The build session was already submitted and can no longer change."""

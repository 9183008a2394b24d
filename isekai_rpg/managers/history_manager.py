from collections import OrderedDict
from typing import Optional

from ..config import settings
from ..services.roll_history import RollHistoryBuffer
from ..utils.logger import logger

# One history buffer per roller (a player, a game session, a dice screen),
# least recently used first
_histories: "OrderedDict[str, RollHistoryBuffer]" = OrderedDict()


def get_history(roller_id: str) -> RollHistoryBuffer:
    """Return the roller's buffer, creating it and evicting the stalest if full."""
    history = _histories.get(roller_id)
    if history is not None:
        _histories.move_to_end(roller_id)
        return history

    history = _histories[roller_id] = RollHistoryBuffer()
    while len(_histories) > settings.HISTORY_MAX_ROLLERS:
        evicted, _ = _histories.popitem(last=False)
        logger.debug(f"Roll history evicted for {evicted}")
    return history


def find_history(roller_id: str) -> Optional[RollHistoryBuffer]:
    history = _histories.get(roller_id)
    if history is not None:
        _histories.move_to_end(roller_id)
    return history


def clear_history(roller_id: str):
    if _histories.pop(roller_id, None) is not None:
        logger.info(f"Roll history cleared for {roller_id}")


def roller_count() -> int:
    return len(_histories)

import random
from functools import lru_cache

from ..config import settings
from ..models.catalog import ReferenceCatalog
from ..services.dice_roller import RandomSource
from ..services.reference_data import load_catalog


@lru_cache(maxsize=1)
def _loaded_catalog() -> ReferenceCatalog:
    return load_catalog(settings.REFERENCE_DATA_PATH or None)


def get_catalog() -> ReferenceCatalog:
    return _loaded_catalog()


_seeded_source = random.Random(settings.DICE_SEED) if settings.DICE_SEED else None


def get_random_source() -> RandomSource:
    if _seeded_source is not None:
        return _seeded_source
    return random.SystemRandom()

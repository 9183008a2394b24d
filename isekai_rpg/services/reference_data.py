import json
from typing import Optional

from pydantic import ValidationError

from ..models.catalog import ReferenceCatalog
from ..utils.logger import logger


DEFAULT_REFERENCE_DATA = {
    "races": {
        "human": {
            "name": "Human",
            "description": "Adaptable and ambitious, found in every corner of the realm.",
            "bonuses": {"strength": 1, "dexterity": 1, "constitution": 1,
                        "intelligence": 1, "wisdom": 1, "charisma": 1},
            "racial_advantages": [
                {"name": "Versatile", "description": "Learns any trade quickly."},
            ],
        },
        "elf": {
            "name": "Elf",
            "description": "Graceful forest folk with keen senses and long memories.",
            "bonuses": {"dexterity": 2},
            "penalties": {"constitution": -1},
            "racial_advantages": [
                {"name": "Darkvision", "description": "Sees in dim light as if it were bright."},
                {"name": "Trance", "description": "Needs only four hours of meditation."},
            ],
            "racial_disadvantages": [
                {"name": "Iron Aversion", "description": "Uneasy around cold iron."},
            ],
        },
        "dwarf": {
            "name": "Dwarf",
            "description": "Stout mountain smiths, hardy and stubborn.",
            "bonuses": {"constitution": 2, "strength": 1},
            "penalties": {"charisma": -1},
            "racial_advantages": [
                {"name": "Stonecunning", "description": "Reads the history of worked stone."},
            ],
            "racial_disadvantages": [
                {"name": "Slow Stride", "description": "Moves more slowly than taller folk."},
            ],
        },
        "halfling": {
            "name": "Halfling",
            "description": "Small, cheerful wanderers blessed with uncanny luck.",
            "bonuses": {"dexterity": 2, "charisma": 1},
            "penalties": {"strength": -2},
            "racial_advantages": [
                {"name": "Lucky", "description": "Shrugs off the worst of misfortune."},
            ],
        },
        "orc": {
            "name": "Orc",
            "description": "Fierce tribes of the steppes, strong and relentless.",
            "bonuses": {"strength": 2, "constitution": 1},
            "penalties": {"intelligence": -2},
            "racial_advantages": [
                {"name": "Relentless", "description": "Keeps fighting after a mortal blow."},
            ],
            "racial_disadvantages": [
                {"name": "Distrusted", "description": "Townsfolk are wary of orcs."},
            ],
        },
        "tiefling": {
            "name": "Tiefling",
            "description": "Bearers of an infernal bloodline, marked by horns and tails.",
            "bonuses": {"charisma": 2, "intelligence": 1},
            "racial_advantages": [
                {"name": "Hellish Resistance", "description": "Resists fire."},
            ],
            "racial_disadvantages": [
                {"name": "Ominous Heritage", "description": "Feared by the superstitious."},
            ],
        },
    },
    "classes": {
        "warrior": {"name": "Warrior", "description": "Master of arms and armour.",
                    "primary_attribute": "strength", "hit_die": 10},
        "mage": {"name": "Mage", "description": "Scholar of the arcane arts.",
                 "primary_attribute": "intelligence", "hit_die": 6},
        "rogue": {"name": "Rogue", "description": "Stealthy specialist and opportunist.",
                  "primary_attribute": "dexterity", "hit_die": 8},
        "cleric": {"name": "Cleric", "description": "Divine agent who heals and smites.",
                   "primary_attribute": "wisdom", "hit_die": 8},
        "ranger": {"name": "Ranger", "description": "Hunter and tracker of the wilds.",
                   "primary_attribute": "dexterity", "hit_die": 10},
        "bard": {"name": "Bard", "description": "Performer whose words carry magic.",
                 "primary_attribute": "charisma", "hit_die": 8},
    },
    "advantages": [
        {"id": "ambidextrous", "name": "Ambidextrous", "description": "Uses either hand equally well.", "cost": 1},
        {"id": "keen_senses", "name": "Keen Senses", "description": "Notices what others miss.", "cost": 1},
        {"id": "fast_learner", "name": "Fast Learner", "description": "Gains experience faster.", "cost": 2},
        {"id": "iron_will", "name": "Iron Will", "description": "Resists fear and charm.", "cost": 2},
        {"id": "mana_affinity", "name": "Mana Affinity", "description": "Casts spells with less effort.", "cost": 3},
        {"id": "otherworldly_blessing", "name": "Otherworldly Blessing",
         "description": "A patron from the other world watches over you.", "cost": 4},
    ],
    "disadvantages": [
        {"id": "bad_luck", "name": "Bad Luck", "description": "Fate frowns on you at the worst times.", "points": 1},
        {"id": "phobia", "name": "Phobia", "description": "An irrational fear of something common.", "points": 1},
        {"id": "code_of_honor", "name": "Code of Honor", "description": "Refuses to fight dishonourably.", "points": 2},
        {"id": "wanted", "name": "Wanted", "description": "A bounty hangs over your head.", "points": 2},
        {"id": "frail", "name": "Frail", "description": "Falls ill and tires easily.", "points": 3},
    ],
}


def default_catalog() -> ReferenceCatalog:
    return ReferenceCatalog.model_validate(DEFAULT_REFERENCE_DATA)


def load_catalog(path: Optional[str] = None) -> ReferenceCatalog:
    """Load reference data from a JSON file, or the built-in set when no path is given."""
    if not path:
        return default_catalog()
    try:
        with open(path, encoding="utf-8") as fh:
            catalog = ReferenceCatalog.model_validate(json.load(fh))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Could not load reference data from {path}, using defaults: {e}")
        return default_catalog()
    logger.info(
        f"Loaded reference data from {path}: {len(catalog.races)} races, "
        f"{len(catalog.classes)} classes, {len(catalog.advantages)} advantages, "
        f"{len(catalog.disadvantages)} disadvantages"
    )
    return catalog

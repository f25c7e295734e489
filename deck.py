"""
Attribute deck: the fixed value pools a player's card is drawn from.
"""
import enum
import random

from models import Player


class AttributeCategory(str, enum.Enum):
    PROFESSION = "profession"
    HEALTH = "health"
    BIOLOGY = "biology"
    HOBBY = "hobby"
    LUGGAGE = "luggage"
    PHOBIA = "phobia"
    CHARACTER = "character"
    ADDITIONAL_INFO = "additionalInfo"


_GENDERS = ("Male", "Female", "Non-binary")
_AGES = (18, 25, 34, 42, 51, 63, 72)

POOLS = {
    AttributeCategory.PROFESSION: (
        "Nuclear engineer", "Cook", "Doctor", "Farmer", "Programmer",
        "Builder", "Teacher", "Soldier", "Scientist", "Electrician",
        "Psychologist", "Mechanic", "Chemist", "Taxidermist", "Astrologer",
    ),
    AttributeCategory.HEALTH: (
        "Perfect health", "Chronic asthma", "Dust allergy", "Diabetes",
        "Excellent immunity", "Blind in one eye", "Hypertension", "Peanut allergy",
    ),
    AttributeCategory.BIOLOGY: tuple(
        f"{gender}, {age} years old" for gender in _GENDERS for age in _AGES
    ),
    AttributeCategory.HOBBY: (
        "Gardening", "Playing guitar", "Reading", "Stamp collecting",
        "Cooking", "Astronomy", "Chess", "Photography", "Cross-stitching", "Singing",
    ),
    AttributeCategory.LUGGAGE: (
        "First aid kit", "Tool set", "Sack of potatoes",
        "Vegetable seeds", "Portable generator", "Wilderness survival handbook",
        "Radio transmitter", "Tent", "Hand-crank flashlight", "30-day water supply",
    ),
    AttributeCategory.PHOBIA: (
        "Arachnophobia (fear of spiders)", "Claustrophobia", "Aquaphobia", "Aerophobia",
        "Agoraphobia", "Triskaidekaphobia (fear of the number 13)", "Zoophobia",
        "Hemophobia (fear of blood)",
    ),
    AttributeCategory.CHARACTER: (
        "Natural leader", "Panics easily", "Optimist", "Cynic",
        "Great negotiator", "Chronic grumbler", "Incredibly lucky",
        "Allergic to lies", "Vegan", "Snores like a tractor",
    ),
    AttributeCategory.ADDITIONAL_INFO: (
        "Knows sign language", "Former marathon runner", "Has a pilot's licence",
        "Speaks five languages", "Was once struck by lightning", "Can pick locks",
        "Trained in first aid", "Owes money to everyone present", "Sleepwalks",
        "Has a photographic memory",
    ),
}


def parse_category(value):
    """Return the category for a wire name, or None if unknown."""
    try:
        return AttributeCategory(value)
    except ValueError:
        return None


def draw(category, rng=None):
    rng = rng or random
    return rng.choice(POOLS[category])


def new_player(player_id, username, is_host=False, rng=None):
    """Deal a fresh card: one value per category, nothing revealed yet."""
    attributes = {category: draw(category, rng) for category in AttributeCategory}
    return Player(player_id, username, attributes, is_host=is_host)

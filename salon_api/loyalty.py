import enum
import math


class LoyaltyLevel(str, enum.Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    VIP = "VIP"


LOYALTY_LEVELS = {
    LoyaltyLevel.BRONZE: {"name": "Bronz", "min_visits": 0, "discount": 10},
    LoyaltyLevel.SILVER: {"name": "Gümüş", "min_visits": 10, "discount": 15},
    LoyaltyLevel.GOLD: {"name": "Altın", "min_visits": 20, "discount": 20},
    LoyaltyLevel.PLATINUM: {"name": "Platin", "min_visits": 30, "discount": 25},
    LoyaltyLevel.VIP: {"name": "VIP", "min_visits": 40, "discount": 30},
}

_ORDER = [
    LoyaltyLevel.BRONZE,
    LoyaltyLevel.SILVER,
    LoyaltyLevel.GOLD,
    LoyaltyLevel.PLATINUM,
    LoyaltyLevel.VIP,
]


def thresholds_for(salon) -> dict:
    """Returns the effective minimum visit count of each tier for a salon."""
    thresholds = {level: entry["min_visits"] for level, entry in LOYALTY_LEVELS.items()}
    if salon is None:
        return thresholds
    for level in _ORDER[1:]:
        override = getattr(salon, f"loyalty_{level.value.lower()}_min_visits", None)
        if override is not None:
            thresholds[level] = override
    return thresholds


def resolve_level(visits: int, thresholds: dict | None = None) -> LoyaltyLevel:
    """Highest tier whose threshold the visit count reaches; BRONZE otherwise."""
    limits = thresholds or thresholds_for(None)
    for level in reversed(_ORDER[1:]):
        if visits >= limits[level]:
            return level
    return LoyaltyLevel.BRONZE


def next_level(level: LoyaltyLevel) -> LoyaltyLevel | None:
    idx = _ORDER.index(LoyaltyLevel(level))
    return _ORDER[idx + 1] if idx + 1 < len(_ORDER) else None


def loyalty_discount(level: LoyaltyLevel, salon=None) -> int:
    level = LoyaltyLevel(level)
    override = getattr(salon, f"loyalty_{level.value.lower()}_discount", None)
    if override is not None:
        return override
    return LOYALTY_LEVELS[level]["discount"]


def level_info(level: LoyaltyLevel, salon=None) -> dict:
    """Display data for a tier, with visit bounds taken from the salon's thresholds."""
    level = LoyaltyLevel(level)
    thresholds = thresholds_for(salon)
    upcoming = next_level(level)
    max_visits = thresholds[upcoming] - 1 if upcoming else math.inf
    return {
        "level": level.value,
        "name": LOYALTY_LEVELS[level]["name"],
        "discount": loyalty_discount(level, salon),
        "minVisits": thresholds[level],
        "maxVisits": None if max_visits == math.inf else max_visits,
    }

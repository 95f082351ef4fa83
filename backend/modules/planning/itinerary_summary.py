"""
modules/planning/itinerary_summary.py
--------------------------------------
Presentation summary of one scored Itinerary (the ItineraryResult surfaced
by generate()). Deterministic: the same itinerary and variant always give
the same title, tagline, and badges.
"""

from __future__ import annotations

from schemas.itinerary import DayPreview, Itinerary, ItineraryResult, ItineraryStats
from schemas.trip import Pace, Preferences

_PERSONA_TITLES: dict[str, tuple[str, str]] = {
    "adventurer":     ("Adventure Awaits", "Thrill Seeker's Journey"),
    "foodie":         ("Culinary Explorer", "Taste of {city}"),
    "culture_seeker": ("Cultural Immersion", "Heritage Trail"),
    "relaxer":        ("Tranquil Escape", "Zen Journey"),
    "photographer":   ("Picture Perfect", "Golden Hour Tour"),
}

_VARIANT_TITLES: dict[str, str] = {
    "highlights": "{city} Discovery",
    "alternate":  "Another Side of {city}",
    "local":      "Local's {city}",
}

_PACE_TAGLINES: dict[Pace, str] = {
    Pace.packed:   "non-stop adventure",
    Pace.chill:    "relaxed exploration",
    Pace.balanced: "balanced discovery",
}

# (category, day title) checked in order; first present category wins
_DAY_TITLE_RULES: tuple[tuple[str, str], ...] = (
    ("beach", "Beach Day"),
    ("temple", "Cultural Discovery"),
    ("nature", "Nature Adventure"),
    ("restaurant", "Foodie Paradise"),
)
_FALLBACK_DAY_TITLES = ("Morning Exploration", "Day Adventures", "Evening Delights")

_MAX_BADGES = 3
_MAX_HIGHLIGHTS = 3


def format_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


def format_km(km: float) -> str:
    return f"{km:.1f} km"


def format_vnd_millions(amount: int) -> str:
    return f"{amount / 1_000_000:.1f}M VND"


def title_for(city: str, preferences: Preferences, variant: str) -> str:
    if variant == "local":
        return _VARIANT_TITLES["local"].format(city=city)
    persona = preferences.personas[0] if preferences.personas else None
    if persona in _PERSONA_TITLES:
        idx = 1 if variant == "alternate" else 0
        return _PERSONA_TITLES[persona][idx].format(city=city)
    return _VARIANT_TITLES.get(variant, "{city} Discovery").format(city=city)


def tagline_for(days: int, pace: Pace) -> str:
    return f"{format_days(days)} of {_PACE_TAGLINES[pace]}"


def day_title(categories: list[str], day_index: int) -> str:
    for category, title in _DAY_TITLE_RULES:
        if category in categories:
            return title
    return _FALLBACK_DAY_TITLES[day_index % len(_FALLBACK_DAY_TITLES)]


def badges_for(itinerary: Itinerary, preferences: Preferences) -> list[str]:
    badges: list[str] = []

    def _add(badge: str) -> None:
        if badge not in badges:
            badges.append(badge)

    locations = [it.location for it in itinerary.ordered_items()]
    if any(loc.is_verified for loc in locations):
        _add("local_favorite")
    if any(loc.is_hidden_gem for loc in locations):
        _add("hidden_gem")
    if any(loc.category == "nature" for loc in locations):
        _add("adventure")
    if any(loc.category == "restaurant" for loc in locations):
        _add("foodie")
    for persona in preferences.personas:
        _add(persona)
    return badges[:_MAX_BADGES]


def summarize(itinerary: Itinerary, variant: str) -> ItineraryResult:
    """Build the user-facing ItineraryResult for a scored itinerary."""
    prefs = itinerary.preferences
    ordered = itinerary.ordered_items()
    previews = []
    for day_number in range(1, itinerary.duration_days + 1):
        day_items = itinerary.items_for_day(day_number)
        previews.append(DayPreview(
            day=day_number,
            title=day_title([it.location.category for it in day_items], day_number - 1),
            locations=len(day_items),
        ))

    return ItineraryResult(
        id=itinerary.id,
        title=itinerary.title or title_for(itinerary.city, prefs, variant),
        tagline=tagline_for(itinerary.duration_days, prefs.pace),
        match_score=itinerary.match_score,
        highlights=[it.location.name for it in ordered[:_MAX_HIGHLIGHTS]],
        stats=ItineraryStats(
            duration=format_days(itinerary.duration_days),
            locations=len(ordered),
            walking_distance=format_km(itinerary.walking_distance_km),
            estimated_budget=format_vnd_millions(itinerary.estimated_budget),
        ),
        day_previews=previews,
        badges=badges_for(itinerary, prefs),
        variant=variant,
        itinerary=itinerary,
    )

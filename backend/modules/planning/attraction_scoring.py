"""
modules/planning/attraction_scoring.py
----------------------------------------
Per-location affinity: how well one catalog Location fits a traveller's
Preferences, in [0, 1].

  affinity = W_tags·SC_t + W_rating·SC_r + W_flags·SC_f

  SC_t (w=0.50): preference overlap
        |terms(loc) ∩ wanted| / |terms(loc)|  −  |terms(loc) ∩ disliked| / |terms(loc)|
        wanted = persona / interest / liked-vibe ids expanded through the
                 lookup tables below, plus the raw ids themselves
        no preferences at all → 0.5 (neutral)
  SC_r (w=0.30): rating quality, (rating − 1) / 4; missing → 0.5 (neutral)
  SC_f (w=0.20): flag bonus
        local signal present  → 0.5·verified + 0.5·hidden_gem
        otherwise             → 0.5·popular  + 0.5·verified

The local signal is either "local" among the wanted terms or an explicit
``local_bias`` (the local-biased generation variant).

Weights default to config.AFFINITY_W_*; results are rounded to 4 decimals so
the same inputs always produce the same ordering.
"""

from __future__ import annotations
from typing import Iterable

import config
from schemas.location import Location
from schemas.trip import Preferences


# Persona id → catalog tags (onboarding presets)
PERSONA_TAGS: dict[str, frozenset[str]] = {
    "adventurer":       frozenset({"adventure", "hiking", "nature", "views"}),
    "foodie":           frozenset({"food", "street_food", "seafood", "local"}),
    "culture_seeker":   frozenset({"culture", "history", "temple", "museum", "spiritual", "architecture"}),
    "relaxer":          frozenset({"beach", "relaxation", "peaceful", "spa"}),
    "photographer":     frozenset({"photography", "views", "sunrise", "instagram"}),
    "nightowl":         frozenset({"nightlife", "rooftop", "cocktails", "live_music"}),
    "wellness":         frozenset({"wellness", "spa", "peaceful", "yoga"}),
    "social_butterfly": frozenset({"nightlife", "local", "food", "bar"}),
}

# Interest id → catalog tags
INTEREST_TAGS: dict[str, frozenset[str]] = {
    "temples":      frozenset({"temple", "spiritual"}),
    "museums":      frozenset({"museum", "history", "art"}),
    "markets":      frozenset({"market", "local", "shopping"}),
    "street_food":  frozenset({"street_food", "food"}),
    "local_life":   frozenset({"local", "authentic"}),
    "beaches":      frozenset({"beach", "swimming"}),
    "nature":       frozenset({"nature", "hiking", "wildlife"}),
    "nightlife":    frozenset({"nightlife", "bar", "cocktails"}),
    "photography":  frozenset({"photography", "views", "instagram"}),
    "coffee":       frozenset({"coffee", "cafe"}),
    "history":      frozenset({"history", "museum", "culture"}),
    "adventure":    frozenset({"adventure", "hiking"}),
    "wellness":     frozenset({"spa", "wellness"}),
    "cooking":      frozenset({"cooking", "food"}),
}

_NEUTRAL = 0.5
_LOCAL_SIGNAL = "local"


def expand_terms(ids: Iterable[str], table: dict[str, frozenset[str]]) -> set[str]:
    """Raw ids plus whatever tags the lookup table maps them to."""
    out: set[str] = set()
    for raw in ids:
        key = str(raw).strip().lower()
        if not key:
            continue
        out.add(key)
        out |= table.get(key, frozenset())
    return out


def interest_terms(preferences: Preferences) -> set[str]:
    """Tags implied by the interest list alone (used by the pool's interest filter)."""
    return expand_terms(preferences.interests, INTEREST_TAGS)


class AffinityScorer:
    """
    Deterministic affinity scorer bound to one Preferences bundle.
    Pure: holds only the precomputed wanted / disliked term sets.
    """

    def __init__(
        self,
        preferences: Preferences,
        local_bias: bool = False,
        weights: tuple[float, float, float] | None = None,
    ) -> None:
        self.preferences = preferences
        self.local_bias = local_bias
        self.w_tags, self.w_rating, self.w_flags = weights or (
            config.AFFINITY_W_TAGS, config.AFFINITY_W_RATING, config.AFFINITY_W_FLAGS,
        )
        self.wanted: set[str] = (
            expand_terms(preferences.personas, PERSONA_TAGS)
            | expand_terms(preferences.interests, INTEREST_TAGS)
            | expand_terms(preferences.liked_vibes, {**PERSONA_TAGS, **INTEREST_TAGS})
        )
        self.disliked: set[str] = {v.strip().lower() for v in preferences.disliked_vibes if v.strip()}
        self.local_signal: bool = local_bias or _LOCAL_SIGNAL in self.wanted

    # ── Public ────────────────────────────────────────────────────────────────

    def score(self, location: Location) -> float:
        value = (
            self.w_tags * self._score_overlap(location)
            + self.w_rating * self._score_rating(location)
            + self.w_flags * self._score_flags(location)
        )
        return round(max(0.0, min(1.0, value)), 4)

    # ── Components ────────────────────────────────────────────────────────────

    def _score_overlap(self, location: Location) -> float:
        if not self.wanted and not self.disliked:
            return _NEUTRAL
        terms = location.terms
        if not terms:
            return 0.0
        liked = len(terms & self.wanted) / len(terms) if self.wanted else _NEUTRAL
        disliked = len(terms & self.disliked) / len(terms)
        return max(0.0, min(1.0, liked - disliked))

    @staticmethod
    def _score_rating(location: Location) -> float:
        """
        Ratings are in [1.0, 5.0]; maps to [0.0, 1.0] via (rating - 1) / 4.
        Returns 0.5 (neutral) when rating is missing or zero.
        """
        r = location.rating
        if not r or r <= 0.0:
            return _NEUTRAL
        return max(0.0, min(1.0, (r - 1.0) / 4.0))

    def _score_flags(self, location: Location) -> float:
        if self.local_signal:
            return 0.5 * location.is_verified + 0.5 * location.is_hidden_gem
        return 0.5 * location.is_popular + 0.5 * location.is_verified

from __future__ import annotations

import math
from collections.abc import Mapping

from devrep.core.models import ActivitySnapshot

# (points per unit, cap) for each snapshot counter
FOLLOWERS = (1.0, 100.0)
STARS = (0.1, 200.0)
REPOSITORIES = (2.0, 150.0)
ACCOUNT_AGE_YEARS = (10.0, 100.0)
RECENT_ACTIVITY = (2.0, 100.0)
FORKS = (0.5, 50.0)

MAX_REPUTATION_SCORE = 700


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _points(count: float, rule: tuple[float, float]) -> float:
    per_unit, cap = rule
    return min(max(count, 0) * per_unit, cap)


def reputation_breakdown(snapshot: ActivitySnapshot) -> dict[str, float]:
    """Return the capped contribution of each counter, before rounding."""
    return {
        "followers": _points(snapshot.followers, FOLLOWERS),
        "stars": _points(snapshot.total_stars, STARS),
        "repositories": _points(snapshot.total_repositories, REPOSITORIES),
        "account_age": _points(snapshot.account_age_days / 365, ACCOUNT_AGE_YEARS),
        "recent_activity": _points(snapshot.recent_activity_count, RECENT_ACTIVITY),
        "forks": _points(snapshot.total_forks, FORKS),
    }


def compute_reputation_score(snapshot: ActivitySnapshot) -> int:
    """Additive point budget over six independently capped counters.

    The total is not clamped to 0-100: the maximum attainable score is 700.
    Negative counters contribute nothing.
    """
    return round_half_up(sum(reputation_breakdown(snapshot).values()))


def top_languages(languages: Mapping[str, int], limit: int = 5) -> list[dict[str, object]]:
    if limit <= 0:
        return []
    # sorted() is stable, so equal byte counts keep insertion order
    ranked = sorted(languages.items(), key=lambda kv: kv[1], reverse=True)
    return [{"language": lang, "bytes": size} for lang, size in ranked[:limit]]

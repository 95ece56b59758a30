"""
Tier Classification and Ranking

Maps observation counts and trail scores to discrete tiers for presentation
(choropleth classes, trail styling) and orders regions/trails by activity.

Tiers use lower-bound breakpoints: count >= breakpoints[i] assigns tier i,
and the highest breakpoint met wins.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from biodensity.core.models import Region, Trail
from biodensity.utils.constants import TRAIL_SCORE_CUTOFFS
from biodensity.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


def classify(count: float, breakpoints: Sequence[float]) -> int:
    """
    Classify a count into a tier index.

    Args:
        count: Observation count (or any non-negative metric)
        breakpoints: Ascending lower bounds, one per tier

    Returns:
        Highest index i with count >= breakpoints[i]; 0 if none is met

    Breakpoints are not validated here. Out-of-order breakpoints give an
    unspecified but valid tier index; empty breakpoints and NaN give 0.

    Examples:
        >>> classify(42, [0, 1, 5, 15, 40, 100])
        4
        >>> classify(0, [0, 1, 5, 15, 40, 100])
        0
    """
    for i in range(len(breakpoints) - 1, -1, -1):
        try:
            if count >= breakpoints[i]:
                return i
        except TypeError:
            continue
    return 0


def validate_breakpoints(breakpoints: Sequence[float]) -> List[float]:
    """
    Check that breakpoints are non-empty, finite, non-negative and strictly ascending.

    Returns:
        Breakpoints as a list of floats

    Raises:
        ConfigurationError: If any rule is violated
    """
    if breakpoints is None or len(breakpoints) == 0:
        raise ConfigurationError("density_breakpoints must contain at least one value")
    try:
        values = [float(b) for b in breakpoints]
    except (TypeError, ValueError):
        raise ConfigurationError(f"density_breakpoints must be numeric, got {list(breakpoints)!r}")

    for value in values:
        if not math.isfinite(value) or value < 0:
            raise ConfigurationError(
                f"density_breakpoints must be finite and non-negative, got {value}"
            )
    for lower, upper in zip(values, values[1:]):
        if upper <= lower:
            raise ConfigurationError(
                f"density_breakpoints must be strictly ascending, got {values}"
            )
    return values


def tier_label(index: int, breakpoints: Sequence[float]) -> str:
    """
    Human-readable range for a tier.

    Integer breakpoints give inclusive integer ranges, e.g. [0, 1, 5] gives
    "0", "1-4" and "5+".
    """
    if not breakpoints or index < 0 or index >= len(breakpoints):
        return "unknown"

    lower = breakpoints[index]
    is_integral = all(float(b).is_integer() for b in breakpoints)
    fmt = (lambda v: str(int(v))) if is_integral else (lambda v: f"{v:g}")

    if index == len(breakpoints) - 1:
        return f"{fmt(lower)}+"
    upper = breakpoints[index + 1]
    if is_integral:
        last = int(upper) - 1
        return fmt(lower) if last <= lower else f"{fmt(lower)}-{last}"
    return f"{fmt(lower)}-<{fmt(upper)}"


def classify_trail_score(normalized_score: float) -> int:
    """
    Tier (0-4) of a normalized trail score.

    0 means no nearby observations; 4 means at least 75% of the busiest trail.
    """
    if normalized_score is None or math.isnan(normalized_score) or normalized_score <= 0:
        return 0
    for tier, cutoff in enumerate(TRAIL_SCORE_CUTOFFS, start=1):
        if normalized_score < cutoff:
            return tier
    return len(TRAIL_SCORE_CUTOFFS) + 1


def rank_regions_by_count(regions: Sequence[Region], limit: Optional[int] = None) -> List[Region]:
    """
    Regions with at least one observation, busiest first.

    Ties keep their input order (stable sort).
    """
    ranked = sorted(
        (r for r in regions if r.metrics.observation_count > 0),
        key=lambda r: r.metrics.observation_count,
        reverse=True,
    )
    return ranked if limit is None else ranked[:limit]


def rank_trails_by_nearby(trails: Sequence[Trail], limit: Optional[int] = None) -> List[Trail]:
    """Trails with at least one nearby observation, busiest first; stable on ties."""
    ranked = sorted(
        (t for t in trails if t.metrics.nearby_count > 0),
        key=lambda t: t.metrics.nearby_count,
        reverse=True,
    )
    return ranked if limit is None else ranked[:limit]

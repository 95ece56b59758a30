"""
Analysis Pipeline

Runs one analysis request end to end: validate configuration, aggregate
observations by watershed, score trails, classify tiers and rank.

Configuration is validated before any metric is touched, so a rejected
request leaves the caller's regions and trails exactly as they were.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from biodensity.core.classify import (
    classify,
    classify_trail_score,
    rank_regions_by_count,
    rank_trails_by_nearby,
    tier_label,
    validate_breakpoints,
)
from biodensity.core.models import AnalysisInput, Region, Trail
from biodensity.core.trails import score, validate_buffer_distance
from biodensity.core.watershed import aggregate, region_area
from biodensity.utils.constants import (
    DEFAULT_BUFFER_DISTANCE_KM,
    DEFAULT_DENSITY_BREAKPOINTS,
    DEFAULT_TOP_N,
    DENSITY_DECIMALS,
)
from biodensity.utils.error_handling import ConfigurationError, InvalidGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters of an analysis run."""
    buffer_distance_km: float = DEFAULT_BUFFER_DISTANCE_KM
    density_breakpoints: Tuple[float, ...] = DEFAULT_DENSITY_BREAKPOINTS
    top_n: int = DEFAULT_TOP_N

    def validate(self) -> "AnalysisConfig":
        """Return a normalized copy or raise ConfigurationError."""
        buffer_km = validate_buffer_distance(self.buffer_distance_km)
        breakpoints = tuple(validate_breakpoints(self.density_breakpoints))
        if isinstance(self.top_n, bool) or not isinstance(self.top_n, int) or self.top_n < 1:
            raise ConfigurationError(f"top_n must be a positive integer, got {self.top_n!r}")
        return AnalysisConfig(buffer_km, breakpoints, self.top_n)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buffer_distance_km": self.buffer_distance_km,
            "density_breakpoints": list(self.density_breakpoints),
            "top_n": self.top_n,
        }


@dataclass(frozen=True)
class AnalysisSummary:
    """Headline numbers for a run."""
    observation_count: int
    assigned_observations: int
    unassigned_observations: int
    regions_with_observations: int
    trails_with_observations: int


@dataclass
class AnalysisResult:
    """Output of one run; regions and trails carry the fresh metrics."""
    config: AnalysisConfig
    regions: List[Region]
    trails: List[Trail]
    ranked_regions: List[Region]
    ranked_trails: List[Trail]
    summary: AnalysisSummary
    region_tiers: Dict[str, int] = field(default_factory=dict)
    trail_tiers: Dict[str, int] = field(default_factory=dict)


def run_analysis(
    analysis_input: AnalysisInput,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    """
    Run watershed aggregation and trail scoring for one observation set.

    Args:
        analysis_input: Observations plus the region and trail layers
        config: Analysis parameters (defaults when omitted)

    Returns:
        AnalysisResult with tiers, top-N rankings and a summary

    Raises:
        ConfigurationError: If the configuration is invalid (nothing is mutated)
    """
    config = (config or AnalysisConfig()).validate()
    observations = list(analysis_input.observations)
    regions = analysis_input.regions
    trails = analysis_input.trails

    logger.info(
        f"Running analysis: {len(observations)} observations, "
        f"{len(regions)} regions, {len(trails)} trails"
    )

    aggregate(regions, observations)
    score(trails, observations, config.buffer_distance_km)

    region_tiers = {
        r.region_id: classify(r.metrics.observation_count, config.density_breakpoints)
        for r in regions
    }
    trail_tiers = {t.trail_id: classify_trail_score(t.metrics.normalized_score) for t in trails}

    assigned = sum(r.metrics.observation_count for r in regions)
    summary = AnalysisSummary(
        observation_count=len(observations),
        assigned_observations=assigned,
        unassigned_observations=len(observations) - assigned,
        regions_with_observations=len(rank_regions_by_count(regions)),
        trails_with_observations=len(rank_trails_by_nearby(trails)),
    )
    logger.info(f"Analysis summary: {summary}")

    return AnalysisResult(
        config=config,
        regions=regions,
        trails=trails,
        ranked_regions=rank_regions_by_count(regions, limit=config.top_n),
        ranked_trails=rank_trails_by_nearby(trails, limit=config.top_n),
        summary=summary,
        region_tiers=region_tiers,
        trail_tiers=trail_tiers,
    )


def _safe_area(region: Region) -> float:
    try:
        return region_area(region)
    except InvalidGeometry:
        return 0.0


def regions_frame(result: AnalysisResult) -> pd.DataFrame:
    """
    One row per region in input order, with rank among the top-N (else NA).

    Density is rounded for presentation; the metrics keep full precision.
    """
    ranks = {r.region_id: i + 1 for i, r in enumerate(result.ranked_regions)}
    breakpoints = result.config.density_breakpoints
    rows = []
    for region in result.regions:
        tier = result.region_tiers.get(region.region_id, 0)
        rows.append({
            "region_id": region.region_id,
            "name": region.name,
            "observation_count": region.metrics.observation_count,
            "area_km2": round(_safe_area(region), DENSITY_DECIMALS),
            "density": round(region.metrics.density, DENSITY_DECIMALS),
            "tier": tier,
            "tier_label": tier_label(tier, breakpoints),
            "rank": ranks.get(region.region_id),
        })
    df = pd.DataFrame(rows, columns=[
        "region_id", "name", "observation_count", "area_km2",
        "density", "tier", "tier_label", "rank",
    ])
    df["rank"] = df["rank"].astype("Int64")
    return df


def trails_frame(result: AnalysisResult) -> pd.DataFrame:
    """One row per trail in input order, with rank among the top-N (else NA)."""
    ranks = {t.trail_id: i + 1 for i, t in enumerate(result.ranked_trails)}
    rows = [
        {
            "trail_id": trail.trail_id,
            "name": trail.name,
            "nearby_count": trail.metrics.nearby_count,
            "normalized_score": trail.metrics.normalized_score,
            "tier": result.trail_tiers.get(trail.trail_id, 0),
            "rank": ranks.get(trail.trail_id),
        }
        for trail in result.trails
    ]
    df = pd.DataFrame(rows, columns=[
        "trail_id", "name", "nearby_count", "normalized_score", "tier", "rank",
    ])
    df["rank"] = df["rank"].astype("Int64")
    return df

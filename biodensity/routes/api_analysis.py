"""
API Routes for Observation Analysis

POST /api/analysis runs watershed aggregation and trail scoring over the
supplied GeoJSON layers. GET /api/config returns the effective defaults.
Each request decodes its own Region/Trail objects, so concurrent requests
never share metrics.
"""

import logging
from dataclasses import replace

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from biodensity.api.models.analysis import (
    AnalysisRequest,
    AnalysisResponse,
    ErrorResponse,
    RegionRow,
    SummaryModel,
    TrailRow,
)
from biodensity.config.loader import load_analysis_config
from biodensity.core.classify import tier_label
from biodensity.core.models import AnalysisInput
from biodensity.core.pipeline import AnalysisConfig, AnalysisResult, run_analysis
from biodensity.io.geojson import observations_from_geojson, regions_from_geojson, trails_from_geojson
from biodensity.utils.constants import DENSITY_DECIMALS
from biodensity.utils.error_handling import ConfigurationError

router = APIRouter()
logger = logging.getLogger(__name__)


def _error(code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content=ErrorResponse(code=code, error=message).model_dump(),
    )


def _request_config(config: AnalysisConfig, request: AnalysisRequest) -> AnalysisConfig:
    """Rulebook defaults overridden by any parameters present in the request."""
    overrides = {}
    if request.buffer_distance_km is not None:
        overrides["buffer_distance_km"] = request.buffer_distance_km
    if request.density_breakpoints is not None:
        overrides["density_breakpoints"] = tuple(request.density_breakpoints)
    if request.top_n is not None:
        overrides["top_n"] = request.top_n
    return replace(config, **overrides)


def _response(result: AnalysisResult) -> AnalysisResponse:
    breakpoints = result.config.density_breakpoints
    regions = []
    for region in result.regions:
        tier = result.region_tiers.get(region.region_id, 0)
        regions.append(RegionRow(
            region_id=region.region_id,
            name=str(region.name),
            observation_count=region.metrics.observation_count,
            density=round(region.metrics.density, DENSITY_DECIMALS),
            tier=tier,
            tier_label=tier_label(tier, breakpoints),
        ))
    trails = [
        TrailRow(
            trail_id=trail.trail_id,
            name=str(trail.name),
            nearby_count=trail.metrics.nearby_count,
            normalized_score=trail.metrics.normalized_score,
            tier=result.trail_tiers.get(trail.trail_id, 0),
        )
        for trail in result.trails
    ]
    return AnalysisResponse(
        config=result.config.to_dict(),
        summary=SummaryModel(**vars(result.summary)),
        regions=regions,
        trails=trails,
        top_regions=[r.region_id for r in result.ranked_regions],
        top_trails=[t.trail_id for t in result.ranked_trails],
    )


@router.post(
    "/api/analysis",
    response_model=AnalysisResponse,
    status_code=status.HTTP_200_OK,
    summary="Aggregate observations by watershed and score trails",
)
def analyze(request: AnalysisRequest):
    """
    Run one analysis over the supplied layers.

    Returns:
        AnalysisResponse, or ErrorResponse with 400 for invalid request
        parameters or malformed GeoJSON and 500 for a broken server rulebook
        or unexpected failures
    """
    try:
        base_config = load_analysis_config()
    except ConfigurationError as e:
        logger.error(f"Invalid analysis configuration: {e.message}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

    try:
        config = _request_config(base_config, request).validate()
        analysis_input = AnalysisInput(
            observations=observations_from_geojson(request.observations.model_dump()),
            regions=regions_from_geojson(request.watersheds.model_dump()),
            trails=trails_from_geojson(request.trails.model_dump()),
        )
        result = run_analysis(analysis_input, config)
        return _response(result)
    except ConfigurationError as e:
        logger.warning(f"Rejected analysis request: {e.message}")
        return _error(e.code, e.message)
    except ValueError as e:
        logger.warning(f"Rejected analysis request: {e}")
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except Exception as e:
        logger.error(f"Unexpected error in analysis endpoint: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Internal processing error: {str(e)}")


@router.get("/api/config")
def get_config():
    """Effective default analysis configuration."""
    try:
        return JSONResponse(content=load_analysis_config().to_dict())
    except ConfigurationError as e:
        logger.error(f"Invalid analysis configuration: {e.message}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

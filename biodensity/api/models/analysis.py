"""
Pydantic Models for the Analysis API

Request and response models for POST /api/analysis.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FeatureCollection(BaseModel):
    """Loosely typed GeoJSON FeatureCollection; geometry is decoded by the GeoJSON adapter."""
    type: str = Field(default="FeatureCollection", description="GeoJSON object type")
    features: List[Dict[str, Any]] = Field(default_factory=list, description="GeoJSON features")

    model_config = {"extra": "allow"}


class AnalysisRequest(BaseModel):
    """
    Request model for POST /api/analysis.

    Attributes:
        watersheds: Polygon features (aggregation units)
        trails: LineString features to score
        observations: Point features for one species / time window
        buffer_distance_km: Trail buffer radius (rulebook default when omitted)
        density_breakpoints: Tier lower bounds (rulebook default when omitted)
        top_n: Length of ranked lists (rulebook default when omitted)
    """
    watersheds: FeatureCollection = Field(default_factory=FeatureCollection)
    trails: FeatureCollection = Field(default_factory=FeatureCollection)
    observations: FeatureCollection = Field(default_factory=FeatureCollection)
    buffer_distance_km: Optional[float] = Field(default=None, description="Trail buffer radius in km")
    density_breakpoints: Optional[List[float]] = Field(default=None, description="Ascending tier breakpoints")
    top_n: Optional[int] = Field(default=None, description="Number of ranked regions/trails")

    model_config = {
        "json_schema_extra": {
            "example": {
                "watersheds": {"type": "FeatureCollection", "features": []},
                "trails": {"type": "FeatureCollection", "features": []},
                "observations": {"type": "FeatureCollection", "features": []},
                "buffer_distance_km": 0.1,
                "density_breakpoints": [0, 1, 5, 15, 40, 100],
                "top_n": 5,
            }
        }
    }


class RegionRow(BaseModel):
    """Metrics for one watershed."""
    region_id: str
    name: str
    observation_count: int
    density: float = Field(..., description="Observations per km², rounded")
    tier: int
    tier_label: str


class TrailRow(BaseModel):
    """Metrics for one trail."""
    trail_id: str
    name: str
    nearby_count: int
    normalized_score: float
    tier: int


class SummaryModel(BaseModel):
    observation_count: int
    assigned_observations: int
    unassigned_observations: int
    regions_with_observations: int
    trails_with_observations: int


class AnalysisResponse(BaseModel):
    """Response model for POST /api/analysis."""
    status: str = Field(default="success")
    config: Dict[str, Any]
    summary: SummaryModel
    regions: List[RegionRow]
    trails: List[TrailRow]
    top_regions: List[str] = Field(..., description="Region ids, busiest first")
    top_trails: List[str] = Field(..., description="Trail ids, busiest first")


class ErrorResponse(BaseModel):
    """Error payload shared by the analysis endpoints."""
    status: str = Field(default="ERROR")
    code: int = Field(..., description="HTTP error code")
    error: str = Field(..., description="Error message")

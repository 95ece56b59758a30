"""
Data Models

Defines the geometry types (Polygon, Polyline), the observation point, and the
Region/Trail reference features whose metrics the engine recomputes on every
analysis run.

Coordinates are (longitude, latitude) tuples in decimal degrees, WGS84.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

Coordinate = Tuple[float, float]
Ring = Tuple[Coordinate, ...]


@dataclass(frozen=True)
class Polygon:
    """
    Polygon made of linear rings.

    The first ring is the outer boundary, any following rings are holes.
    Each ring is expected to be closed (first == last) with at least four
    coordinates; the geometry kernel reports violations as InvalidGeometry.
    """
    rings: Tuple[Ring, ...]

    @classmethod
    def from_rings(cls, *rings) -> "Polygon":
        return cls(tuple(tuple((float(x), float(y)) for x, y in ring) for ring in rings))

    @property
    def outer(self) -> Ring:
        return self.rings[0] if self.rings else ()

    @property
    def holes(self) -> Tuple[Ring, ...]:
        return self.rings[1:]


@dataclass(frozen=True)
class Polyline:
    """Open line through two or more vertices."""
    coordinates: Tuple[Coordinate, ...]

    @classmethod
    def from_coords(cls, coords) -> "Polyline":
        return cls(tuple((float(x), float(y)) for x, y in coords))


@dataclass(frozen=True)
class Observation:
    """
    A single species observation.

    Attributes:
        observation_id: Identifier from the source system
        coordinate: (lon, lat) location
        properties: Opaque attribute payload, carried through untouched
    """
    observation_id: str
    coordinate: Coordinate
    properties: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def lon(self) -> float:
        return self.coordinate[0]

    @property
    def lat(self) -> float:
        return self.coordinate[1]


@dataclass
class RegionMetrics:
    """Per-run metrics of a watershed; overwritten wholesale on every run."""
    observation_count: int = 0
    density: float = 0.0  # observations per km²


@dataclass
class TrailMetrics:
    """Per-run metrics of a trail; overwritten wholesale on every run."""
    nearby_count: int = 0
    normalized_score: float = 0.0  # 0..1, relative to the busiest trail


@dataclass
class Region:
    """
    Watershed (aggregation unit).

    A region usually has a single polygon part; multi-part watersheds keep
    every part and count as one region.
    """
    region_id: str
    parts: Tuple[Polygon, ...]
    name: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    metrics: RegionMetrics = field(default_factory=RegionMetrics)

    def __post_init__(self):
        if isinstance(self.parts, Polygon):
            self.parts = (self.parts,)
        else:
            self.parts = tuple(self.parts)
        if self.name is None:
            self.name = self.region_id

    def reset_metrics(self) -> None:
        self.metrics = RegionMetrics()


@dataclass
class Trail:
    """Trail (reference path) scored by nearby observations."""
    trail_id: str
    parts: Tuple[Polyline, ...]
    name: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    metrics: TrailMetrics = field(default_factory=TrailMetrics)

    def __post_init__(self):
        if isinstance(self.parts, Polyline):
            self.parts = (self.parts,)
        else:
            self.parts = tuple(self.parts)
        if self.name is None:
            self.name = self.trail_id

    def reset_metrics(self) -> None:
        self.metrics = TrailMetrics()


@dataclass
class AnalysisInput:
    """Everything one analysis run needs: the point set and both reference layers."""
    observations: List[Observation] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    trails: List[Trail] = field(default_factory=list)

"""
GeoJSON Input Adapter

Decodes GeoJSON Feature / FeatureCollection data into the engine's data
model using shapely:

- Polygon / MultiPolygon features -> Region
- LineString / MultiLineString features -> Trail
- Point / MultiPoint features -> Observation

Coordinates come out as (lon, lat). Input in another CRS is reprojected to
WGS84 with pyproj, either from an explicit source_crs or from a legacy
GeoJSON "crs" member. Features that cannot be decoded are skipped with a
warning.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import pyproj
from pyproj.exceptions import CRSError
from shapely.errors import ShapelyError
from shapely.geometry import LineString, MultiLineString, MultiPoint, MultiPolygon, Point
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry import shape
from shapely.ops import transform
from shapely.validation import explain_validity

from biodensity.core.models import Observation, Polygon, Polyline, Region, Trail
from biodensity.io.placeholders import placeholder_trails, placeholder_watersheds
from biodensity.utils.constants import TRAILS_FILE, WATERSHEDS_FILE

logger = logging.getLogger(__name__)

WGS84 = pyproj.CRS("EPSG:4326")

REGION_ID_FIELDS = ("huc8", "huc10", "id")
TRAIL_ID_FIELDS = ("id",)
OBSERVATION_ID_FIELDS = ("id",)


# ---------- feature plumbing ----------

def _iter_features(geojson: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    """Yield Feature dicts from a FeatureCollection, a Feature, or a bare geometry."""
    kind = geojson.get("type") if isinstance(geojson, dict) else None
    if kind == "FeatureCollection":
        for feature in geojson.get("features") or []:
            if isinstance(feature, dict):
                yield feature
            else:
                logger.warning(f"Skipping non-object feature: {feature!r}")
    elif kind == "Feature":
        yield geojson
    elif kind is not None and "coordinates" in geojson:
        yield {"type": "Feature", "properties": {}, "geometry": geojson}
    else:
        raise ValueError(f"Unsupported GeoJSON object type: {kind!r}")


def declared_crs(geojson: Dict[str, Any]) -> Optional[str]:
    """CRS name from a legacy GeoJSON 2008 "crs" member, if any."""
    crs = geojson.get("crs") if isinstance(geojson, dict) else None
    if isinstance(crs, dict):
        name = (crs.get("properties") or {}).get("name")
        if name:
            return str(name)
    return None


def _transformer(source_crs: Optional[str]) -> Optional[pyproj.Transformer]:
    if not source_crs:
        return None
    try:
        crs = pyproj.CRS.from_user_input(source_crs)
    except CRSError as e:
        raise ValueError(f"Unknown CRS {source_crs!r}: {e}")
    if crs.equals(WGS84, ignore_axis_order=True):
        return None
    logger.info(f"Reprojecting input from {crs.to_string()} to EPSG:4326")
    return pyproj.Transformer.from_crs(crs, WGS84, always_xy=True)


def _decode(feature: Dict[str, Any], transformer: Optional[pyproj.Transformer]):
    """Feature geometry as a shapely geometry in WGS84, or None if unusable."""
    geometry = feature.get("geometry")
    if not geometry:
        return None
    try:
        geom = shape(geometry)
    except (ShapelyError, ValueError, TypeError, KeyError, AttributeError, IndexError) as e:
        logger.warning(f"Skipping feature {feature.get('id')!r}: undecodable geometry ({e})")
        return None
    if geom.is_empty:
        logger.warning(f"Skipping feature {feature.get('id')!r}: empty geometry")
        return None
    if transformer is not None:
        geom = transform(transformer.transform, geom)
    return geom


def _feature_id(
    feature: Dict[str, Any],
    id_fields: Sequence[str],
    prefix: str,
    index: int,
) -> str:
    if feature.get("id") is not None:
        return str(feature["id"])
    properties = feature.get("properties") or {}
    for name in id_fields:
        if properties.get(name) is not None:
            return str(properties[name])
    return f"{prefix}_{index}"


def _xy(coords) -> Tuple[Tuple[float, float], ...]:
    return tuple((float(c[0]), float(c[1])) for c in coords)


def _to_polygon(geom: ShapelyPolygon) -> Polygon:
    rings = [_xy(geom.exterior.coords)] + [_xy(ring.coords) for ring in geom.interiors]
    return Polygon(tuple(rings))


# ---------- public decoders ----------

def regions_from_geojson(
    geojson: Dict[str, Any],
    id_fields: Sequence[str] = REGION_ID_FIELDS,
    name_field: str = "name",
    source_crs: Optional[str] = None,
) -> List[Region]:
    """
    Decode polygon features into Regions, preserving feature order.

    Args:
        geojson: FeatureCollection, Feature or bare geometry
        id_fields: Properties tried (in order) when the feature has no id
        name_field: Property holding the display name
        source_crs: CRS of the input when it is not WGS84

    Returns:
        List of Regions (MultiPolygon features become one multi-part Region)
    """
    transformer = _transformer(source_crs or declared_crs(geojson))
    regions: List[Region] = []
    for index, feature in enumerate(_iter_features(geojson)):
        geom = _decode(feature, transformer)
        if geom is None:
            continue
        if isinstance(geom, ShapelyPolygon):
            parts = [geom]
        elif isinstance(geom, MultiPolygon):
            parts = list(geom.geoms)
        else:
            logger.warning(f"Skipping non-polygon feature {index} ({geom.geom_type})")
            continue

        region_id = _feature_id(feature, id_fields, "region", index)
        if not geom.is_valid:
            logger.warning(f"Region {region_id} is not a valid polygon: {explain_validity(geom)}")

        properties = dict(feature.get("properties") or {})
        regions.append(Region(
            region_id=region_id,
            parts=tuple(_to_polygon(p) for p in parts),
            name=properties.get(name_field) or region_id,
            properties=properties,
        ))
    logger.info(f"Decoded {len(regions)} regions")
    return regions


def trails_from_geojson(
    geojson: Dict[str, Any],
    id_fields: Sequence[str] = TRAIL_ID_FIELDS,
    name_field: str = "name",
    source_crs: Optional[str] = None,
) -> List[Trail]:
    """Decode line features into Trails, preserving feature order."""
    transformer = _transformer(source_crs or declared_crs(geojson))
    trails: List[Trail] = []
    for index, feature in enumerate(_iter_features(geojson)):
        geom = _decode(feature, transformer)
        if geom is None:
            continue
        if isinstance(geom, LineString):
            parts = [geom]
        elif isinstance(geom, MultiLineString):
            parts = list(geom.geoms)
        else:
            logger.warning(f"Skipping non-line feature {index} ({geom.geom_type})")
            continue

        trail_id = _feature_id(feature, id_fields, "trail", index)
        properties = dict(feature.get("properties") or {})
        trails.append(Trail(
            trail_id=trail_id,
            parts=tuple(Polyline(_xy(p.coords)) for p in parts),
            name=properties.get(name_field) or trail_id,
            properties=properties,
        ))
    logger.info(f"Decoded {len(trails)} trails")
    return trails


def observations_from_geojson(
    geojson: Dict[str, Any],
    id_fields: Sequence[str] = OBSERVATION_ID_FIELDS,
    source_crs: Optional[str] = None,
) -> List[Observation]:
    """
    Decode point features into Observations.

    MultiPoint features yield one observation per member, with ids suffixed
    "-1", "-2", ... Feature properties are carried through as the payload.
    """
    transformer = _transformer(source_crs or declared_crs(geojson))
    observations: List[Observation] = []
    for index, feature in enumerate(_iter_features(geojson)):
        geom = _decode(feature, transformer)
        if geom is None:
            continue
        observation_id = _feature_id(feature, id_fields, "obs", index)
        properties = dict(feature.get("properties") or {})
        if isinstance(geom, Point):
            observations.append(Observation(observation_id, (geom.x, geom.y), properties))
        elif isinstance(geom, MultiPoint):
            for k, member in enumerate(geom.geoms, start=1):
                observations.append(
                    Observation(f"{observation_id}-{k}", (member.x, member.y), dict(properties))
                )
        else:
            logger.warning(f"Skipping non-point feature {index} ({geom.geom_type})")
    logger.info(f"Decoded {len(observations)} observations")
    return observations


# ---------- files ----------

def load_geojson(path) -> Dict[str, Any]:
    """Read a GeoJSON file."""
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def _load_layer(path: Path, decode, fallback, label: str) -> List[Any]:
    """Decode a layer file; unreadable or non-GeoJSON content gives the placeholder layer."""
    try:
        return decode(load_geojson(path))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load {label} from {path} ({e}); using placeholder data")
        return decode(fallback())


def load_base_layers(
    data_dir="data",
    watersheds_file: Optional[str] = None,
    trails_file: Optional[str] = None,
) -> Tuple[List[Region], List[Trail]]:
    """
    Load the watershed and trail layers, falling back to placeholders.

    Args:
        data_dir: Directory holding the layer files
        watersheds_file: Watershed GeoJSON path (default data_dir/watersheds-huc8.geojson)
        trails_file: Trail GeoJSON path (default data_dir/trails.geojson)

    Returns:
        (regions, trails)
    """
    data_path = Path(data_dir)
    ws_path = Path(watersheds_file) if watersheds_file else data_path / WATERSHEDS_FILE
    tr_path = Path(trails_file) if trails_file else data_path / TRAILS_FILE

    regions = _load_layer(ws_path, regions_from_geojson, placeholder_watersheds, "watersheds")
    trails = _load_layer(tr_path, trails_from_geojson, placeholder_trails, "trails")
    return regions, trails

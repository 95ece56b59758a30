"""
Observation record adapters.

Converts already-fetched iNaturalist and eBird API records into
Observations. No network access happens here; callers hand over the
decoded JSON records.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from biodensity.core.models import Observation

logger = logging.getLogger(__name__)

INATURALIST_SOURCE = "iNaturalist"
EBIRD_SOURCE = "eBird"


def _finite_pair(lon: Any, lat: Any) -> Optional[Tuple[float, float]]:
    try:
        x, y = float(lon), float(lat)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return x, y


def observations_from_inaturalist(results: Iterable[Dict[str, Any]]) -> List[Observation]:
    """
    Convert iNaturalist /v1/observations result records.

    Records without geojson coordinates are dropped.
    """
    observations: List[Observation] = []
    dropped = 0
    for record in results:
        geojson = record.get("geojson") or {}
        coords = geojson.get("coordinates") or []
        coordinate = _finite_pair(*coords[:2]) if len(coords) >= 2 else None
        if coordinate is None:
            dropped += 1
            continue

        taxon = record.get("taxon") or {}
        photos = record.get("photos") or []
        photo_url = (photos[0].get("url") or "").replace("square", "small") if photos else ""
        obs_id = record.get("id")
        observations.append(Observation(
            observation_id=str(obs_id),
            coordinate=coordinate,
            properties={
                "id": obs_id,
                "source": INATURALIST_SOURCE,
                "species": taxon.get("name") or "Unknown",
                "common_name": taxon.get("preferred_common_name") or "",
                "observed_on": record.get("observed_on") or "",
                "observer": (record.get("user") or {}).get("login") or "",
                "photo_url": photo_url,
                "uri": record.get("uri") or f"https://www.inaturalist.org/observations/{obs_id}",
                "quality_grade": record.get("quality_grade") or "",
            },
        ))
    if dropped:
        logger.info(f"Dropped {dropped} iNaturalist records without coordinates")
    return observations


def observations_from_ebird(records: Iterable[Dict[str, Any]]) -> List[Observation]:
    """Convert eBird recent-observation records (lng/lat fields)."""
    observations: List[Observation] = []
    dropped = 0
    for record in records:
        coordinate = _finite_pair(record.get("lng"), record.get("lat"))
        if coordinate is None:
            dropped += 1
            continue
        sub_id = record.get("subId")
        observations.append(Observation(
            observation_id=str(sub_id),
            coordinate=coordinate,
            properties={
                "id": sub_id,
                "source": EBIRD_SOURCE,
                "species": record.get("sciName") or "",
                "common_name": record.get("comName") or "",
                "observed_on": record.get("obsDt") or "",
                "observer": "",
                "location_name": record.get("locName") or "",
                "how_many": record.get("howMany") or 1,
                "uri": f"https://ebird.org/checklist/{sub_id}",
            },
        ))
    if dropped:
        logger.info(f"Dropped {dropped} eBird records without coordinates")
    return observations


def merge_observations(*sets: Iterable[Observation]) -> List[Observation]:
    """Concatenate observation sets, keeping source order."""
    merged: List[Observation] = []
    for observation_set in sets:
        merged.extend(observation_set)
    return merged

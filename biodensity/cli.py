"""
Command-line entry point.

Usage:
    biodensity --observations obs.geojson --output-dir reports
    biodensity --inaturalist inat_results.json --ebird ebird.json --buffer-km 0.2

Loads the watershed and trail layers (placeholders when the files are
missing), runs one analysis and writes watersheds.csv and trails.csv.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from biodensity.config.loader import load_analysis_config
from biodensity.core.models import AnalysisInput, Observation
from biodensity.core.pipeline import AnalysisResult, regions_frame, run_analysis, trails_frame
from biodensity.io.geojson import load_base_layers, load_geojson, observations_from_geojson
from biodensity.io.observations import (
    merge_observations,
    observations_from_ebird,
    observations_from_inaturalist,
)
from biodensity.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


def _read_records(path: str) -> list:
    """JSON records from a saved API response: a list, or an object with 'results'."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data.get("results") or []
    return data


def collect_observations(args: argparse.Namespace) -> List[Observation]:
    sets = []
    if args.observations:
        sets.append(observations_from_geojson(load_geojson(args.observations)))
    if args.inaturalist:
        sets.append(observations_from_inaturalist(_read_records(args.inaturalist)))
    if args.ebird:
        sets.append(observations_from_ebird(_read_records(args.ebird)))
    return merge_observations(*sets)


def write_outputs(result: AnalysisResult, output_dir: str) -> None:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    regions_frame(result).to_csv(out / "watersheds.csv", index=False)
    trails_frame(result).to_csv(out / "trails.csv", index=False)
    logger.info(f"Wrote watersheds.csv and trails.csv to {out}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Aggregate species observations by watershed and score trails"
    )
    parser.add_argument("--observations", help="Observation points (GeoJSON)")
    parser.add_argument("--inaturalist", help="Saved iNaturalist /v1/observations response (JSON)")
    parser.add_argument("--ebird", help="Saved eBird recent observations response (JSON)")
    parser.add_argument("--data-dir", default="data", help="Directory with base layers (default: data)")
    parser.add_argument("--watersheds", help="Watershed polygons (GeoJSON)")
    parser.add_argument("--trails", help="Trail lines (GeoJSON)")
    parser.add_argument("--buffer-km", type=float, help="Trail buffer distance in km")
    parser.add_argument("--top-n", type=int, help="Number of ranked watersheds/trails to log")
    parser.add_argument("--config", help="Analysis rulebook YAML")
    parser.add_argument("--output-dir", default="reports", help="Directory for CSV output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_analysis_config(args.config)
        if args.buffer_km is not None:
            config = replace(config, buffer_distance_km=args.buffer_km)
        if args.top_n is not None:
            config = replace(config, top_n=args.top_n)
        config = config.validate()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e.message}")
        return 2

    regions, trails = load_base_layers(args.data_dir, args.watersheds, args.trails)
    try:
        observations = collect_observations(args)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read observations: {e}")
        return 1

    result = run_analysis(AnalysisInput(observations, regions, trails), config)

    for rank, region in enumerate(result.ranked_regions, start=1):
        logger.info(
            f"#{rank} watershed {region.name}: {region.metrics.observation_count} obs, "
            f"{region.metrics.density:.2f} obs/km²"
        )
    for rank, trail in enumerate(result.ranked_trails, start=1):
        logger.info(
            f"#{rank} trail {trail.name}: {trail.metrics.nearby_count} nearby, "
            f"score {trail.metrics.normalized_score}"
        )

    write_outputs(result, args.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())

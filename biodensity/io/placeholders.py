"""
Placeholder base layers.

Simplified stand-in geometry for New Hampshire so an analysis can run when
the real watershed or trail files are not available.
"""

from typing import Any, Dict, List

from biodensity.utils.constants import NH_EAST, NH_NORTH, NH_SOUTH, NH_WEST

WATERSHED_NAMES = [
    "Upper Connecticut", "Androscoggin", "Saco",
    "Pemigewasset", "Merrimack", "Winnipesaukee",
    "Upper Merrimack", "Contoocook", "Souhegan",
    "Piscataquog", "Lower Merrimack", "Coastal",
]

PLACEHOLDER_TRAILS = [
    ("Appalachian Trail - NH Section", [
        (-72.10, 43.50), (-71.90, 43.80), (-71.70, 44.10),
        (-71.68, 44.27), (-71.30, 44.50), (-71.30, 44.90),
    ]),
    ("Franconia Ridge Trail", [(-71.65, 44.12), (-71.63, 44.16), (-71.60, 44.18)]),
    ("Presidential Range Trail", [(-71.35, 44.25), (-71.30, 44.28), (-71.28, 44.30), (-71.25, 44.27)]),
    ("Monadnock Trail", [(-72.11, 42.86), (-72.10, 42.87), (-72.09, 42.86)]),
    ("Wapack Trail", [(-71.90, 42.82), (-71.88, 42.90), (-71.86, 42.96)]),
    ("Cohos Trail", [(-71.40, 44.60), (-71.38, 44.80), (-71.30, 45.00), (-71.35, 45.20)]),
]


def placeholder_watersheds(rows: int = 4, cols: int = 3) -> Dict[str, Any]:
    """Grid of rectangular watersheds covering the state bounding box, south-west first."""
    d_lon = (NH_EAST - NH_WEST) / cols
    d_lat = (NH_NORTH - NH_SOUTH) / rows

    features: List[Dict[str, Any]] = []
    idx = 0
    for r in range(rows):
        for c in range(cols):
            west, south = NH_WEST + c * d_lon, NH_SOUTH + r * d_lat
            east, north = west + d_lon, south + d_lat
            features.append({
                "type": "Feature",
                "properties": {
                    "huc8": f"0108000{idx + 1}",
                    "name": WATERSHED_NAMES[idx] if idx < len(WATERSHED_NAMES) else f"Watershed {idx + 1}",
                },
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[
                        [west, south], [east, south], [east, north],
                        [west, north], [west, south],
                    ]],
                },
            })
            idx += 1
    return {"type": "FeatureCollection", "features": features}


def placeholder_trails() -> Dict[str, Any]:
    """A few representative trail lines."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"name": name, "id": f"trail_{i}"},
                "geometry": {"type": "LineString", "coordinates": [list(c) for c in coords]},
            }
            for i, (name, coords) in enumerate(PLACEHOLDER_TRAILS)
        ],
    }

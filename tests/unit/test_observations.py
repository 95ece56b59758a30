"""
Unit tests for the iNaturalist and eBird record adapters.
"""

from biodensity.io.observations import (
    merge_observations,
    observations_from_ebird,
    observations_from_inaturalist,
)

INAT_RECORD = {
    "id": 101,
    "geojson": {"type": "Point", "coordinates": [-71.3, 44.27]},
    "taxon": {"name": "Lynx canadensis", "preferred_common_name": "Canada Lynx"},
    "observed_on": "2024-06-01",
    "user": {"login": "hiker42"},
    "photos": [{"url": "https://static.inaturalist.org/photos/1/square.jpg"}],
    "uri": "https://www.inaturalist.org/observations/101",
    "quality_grade": "research",
}

EBIRD_RECORD = {
    "subId": "S12345",
    "lng": -71.5,
    "lat": 43.2,
    "sciName": "Catharus bicknelli",
    "comName": "Bicknell's Thrush",
    "obsDt": "2024-06-02 06:15",
    "locName": "Mt. Washington",
    "howMany": 3,
}


class TestINaturalist:
    """iNaturalist /v1/observations results."""

    def test_converts_record(self):
        observation = observations_from_inaturalist([INAT_RECORD])[0]
        assert observation.observation_id == "101"
        assert observation.coordinate == (-71.3, 44.27)
        assert observation.properties["source"] == "iNaturalist"
        assert observation.properties["species"] == "Lynx canadensis"
        assert observation.properties["common_name"] == "Canada Lynx"
        assert observation.properties["observer"] == "hiker42"
        assert observation.properties["photo_url"].endswith("/small.jpg")

    def test_defaults_for_sparse_record(self):
        record = {"id": 5, "geojson": {"coordinates": [-71.0, 43.0]}}
        props = observations_from_inaturalist([record])[0].properties
        assert props["species"] == "Unknown"
        assert props["photo_url"] == ""
        assert props["uri"] == "https://www.inaturalist.org/observations/5"

    def test_records_without_location_are_dropped(self):
        records = [
            {"id": 1},
            {"id": 2, "geojson": None},
            {"id": 3, "geojson": {"coordinates": [None, None]}},
            {"id": 4, "geojson": {"coordinates": ["nan", 43.0]}},
            INAT_RECORD,
        ]
        assert [o.observation_id for o in observations_from_inaturalist(records)] == ["101"]


class TestEBird:
    """eBird recent-observation records."""

    def test_converts_record(self):
        observation = observations_from_ebird([EBIRD_RECORD])[0]
        assert observation.observation_id == "S12345"
        assert observation.coordinate == (-71.5, 43.2)
        assert observation.properties["source"] == "eBird"
        assert observation.properties["how_many"] == 3
        assert observation.properties["uri"] == "https://ebird.org/checklist/S12345"

    def test_missing_count_defaults_to_one(self):
        record = dict(EBIRD_RECORD, howMany=None)
        assert observations_from_ebird([record])[0].properties["how_many"] == 1

    def test_records_without_location_are_dropped(self):
        assert observations_from_ebird([{"subId": "S1", "lat": 43.0}]) == []


def test_merge_keeps_order():
    merged = merge_observations(
        observations_from_inaturalist([INAT_RECORD]),
        observations_from_ebird([EBIRD_RECORD]),
    )
    assert [o.properties["source"] for o in merged] == ["iNaturalist", "eBird"]

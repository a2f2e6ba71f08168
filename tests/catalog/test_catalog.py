"""Tests for the trail catalog."""

import logging

import pytest

from trailcast.catalog import HOME_LOCATION, TRAILS_DATA, load_trails
from trailcast.scoring.tables import SoilCategory, is_known_soil_type

from conftest import make_trail


class TestTrailsData:
    """Tests for the built-in catalog."""

    def test_catalog_not_empty(self):
        assert len(TRAILS_DATA) == 18

    def test_ids_unique(self):
        ids = [t.id for t in TRAILS_DATA]
        assert len(ids) == len(set(ids))

    def test_all_soil_types_known(self):
        unknown = [t.id for t in TRAILS_DATA if not is_known_soil_type(t.soil_type)]
        assert unknown == []

    def test_coordinates_in_israel(self):
        for trail in TRAILS_DATA:
            assert 29.0 < trail.lat < 33.5, trail.id
            assert 34.0 < trail.lng < 36.0, trail.id

    def test_home_location(self):
        assert HOME_LOCATION.name == "Tel Mond"
        assert HOME_LOCATION.location.lat == pytest.approx(32.2569)


class TestTrail:
    """Tests for Trail properties."""

    def test_location(self):
        trail = make_trail(lat=31.5, lng=34.6)
        assert trail.location.lat == 31.5
        assert trail.location.lng == 34.6

    def test_soil_category(self):
        assert make_trail(soil_type="Heavy Clay").soil_category == SoilCategory.HEAVY_CLAY

    def test_unknown_soil_defaults_to_mixed(self):
        assert make_trail(soil_type="Moon Dust").soil_category == SoilCategory.MIXED

    def test_frozen(self):
        trail = make_trail()
        with pytest.raises(AttributeError):
            trail.name = "Other"


class TestLoadTrails:
    """Tests for load_trails validation."""

    def test_defaults_to_catalog(self):
        trails = load_trails()
        assert [t.id for t in trails] == [t.id for t in TRAILS_DATA]

    def test_returns_copy(self):
        trails = load_trails()
        trails.pop()
        assert len(TRAILS_DATA) == 18

    def test_duplicate_id_rejected(self):
        with pytest.raises(ValueError, match="Duplicate trail id"):
            load_trails([make_trail(id="a"), make_trail(id="a", lat=31.0)])

    def test_invalid_coordinates_rejected(self):
        with pytest.raises(ValueError, match="invalid coordinates"):
            load_trails([make_trail(lat=95.0)])

    def test_unknown_soil_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="trailcast.catalog.models"):
            trails = load_trails([make_trail(soil_type="Moon Dust")])
        assert len(trails) == 1
        assert "unknown soil type" in caplog.text

"""Tests for scoring lookup tables."""

import pytest

from trailcast.scoring import tables
from trailcast.scoring.tables import (
    MUD_CURVES,
    SOIL_TYPE_CATEGORIES,
    MudCurve,
    SoilCategory,
    slip_penalty_for,
    soil_category,
    validate_tables,
)


class TestTables:
    """Tests for table consistency."""

    def test_valid(self):
        assert validate_tables() == []

    def test_every_category_has_curve(self):
        assert set(MUD_CURVES) == set(SoilCategory)

    def test_every_mapped_type_has_curve(self):
        for soil_type, category in SOIL_TYPE_CATEGORIES.items():
            assert category in MUD_CURVES, soil_type

    def test_curves_non_increasing(self):
        for category, curve in MUD_CURVES.items():
            previous = 101
            for rain in [0, 0.5, 1, 2, 3, 5, 8, 10, 15, 20, 25, 30, 40, 60, 100]:
                score = curve.score(rain)
                assert score <= previous, (category, rain)
                previous = score

    def test_detects_bad_curve(self, monkeypatch):
        bad = dict(MUD_CURVES)
        bad[SoilCategory.LOAM] = MudCurve(steps=((5, 50), (2, 90)), tail=95, mud_factor=1.0)
        monkeypatch.setattr(tables, "MUD_CURVES", bad)

        issues = validate_tables()
        assert any("ascending" in i for i in issues)
        assert any("non-increasing" in i for i in issues)


class TestLookups:
    """Tests for soil and rock lookups."""

    @pytest.mark.parametrize("soil_type,expected", [
        ("Heavy Clay", SoilCategory.HEAVY_CLAY),
        ("Clay/Silt", SoilCategory.CLAY_SILT),
        ("Hamra", SoilCategory.CLAY),
        ("Limestone", SoilCategory.CHALK),
        ("Sand/Loess", SoilCategory.SAND),
        ("Unknown", SoilCategory.MIXED),
    ])
    def test_soil_category(self, soil_type, expected):
        assert soil_category(soil_type) == expected

    def test_slip_penalties(self):
        assert slip_penalty_for("Basalt") == 10
        assert slip_penalty_for("Limestone") == 8
        assert slip_penalty_for("Sandstone") == 0
        assert slip_penalty_for("Obsidian") == 0

    def test_heavy_clay_curve(self):
        curve = MUD_CURVES[SoilCategory.HEAVY_CLAY]
        assert curve.score(0) == 90
        assert curve.score(0.5) == 90
        assert curve.score(2) == 60
        assert curve.score(5) == 25
        assert curve.score(10) == 5
        assert curve.score(10.1) == 0

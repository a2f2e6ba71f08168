"""Tests for the command-line interface."""

from datetime import date, timedelta
from unittest.mock import patch

import pytest

from trailcast import cli
from trailcast.cache.store import CacheStore, MemoryBackend
from trailcast.errors import NetworkError
from trailcast.weather.normalizer import OpenMeteoNormalizer
from trailcast.weather.orchestrator import WeatherOrchestrator

from conftest import build_openmeteo_payload


class StubFetcher:
    name = "stub"

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error

    def fetch(self, location):
        if self.error is not None:
            raise self.error
        return self.payload


def stub_orchestrator(fetcher):
    def build(settings, backend=None):
        return WeatherOrchestrator(
            fetcher, OpenMeteoNormalizer(), CacheStore(MemoryBackend()), sleep=lambda s: None
        )
    return build


@pytest.fixture
def db_args(tmp_path):
    return ["--db", str(tmp_path / "cli.duckdb")]


class TestMain:
    """Tests for cli.main."""

    def test_status(self, db_args, capsys):
        assert cli.main(["--status", "-q"] + db_args) == 0
        out = capsys.readouterr().out
        assert "Trailcast Cache Status" in out
        assert "Cached payloads: 0" in out

    def test_ranked_output(self, db_args, capsys):
        payload = build_openmeteo_payload(start=date.today() - timedelta(days=4))
        with patch.object(cli, "build_orchestrator", stub_orchestrator(StubFetcher(payload))):
            assert cli.main(db_args) == 0

        out = capsys.readouterr().out
        assert "Trail conditions for" in out
        assert "Nahal Alexander" in out
        # Out of range
        assert "Sugar Trail" not in out

    def test_all_failed_exit_code(self, db_args, capsys):
        fetcher = StubFetcher(error=NetworkError("offline"))
        with patch.object(cli, "build_orchestrator", stub_orchestrator(fetcher)):
            assert cli.main(db_args) == 1
        assert "Could not load weather data" in capsys.readouterr().out

    def test_date_out_of_range(self, db_args):
        too_late = (date.today() + timedelta(days=10)).isoformat()
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--date", too_late] + db_args)
        assert exc_info.value.code == 2

    def test_invalid_date(self, db_args):
        with pytest.raises(SystemExit):
            cli.main(["--date", "someday"] + db_args)

    def test_tomorrow_without_key(self, db_args, monkeypatch):
        monkeypatch.delenv("TOMORROW_API_KEY", raising=False)
        monkeypatch.delenv("TRAILCAST_RELAY_URL", raising=False)
        assert cli.main(["--provider", "tomorrow", "-q"] + db_args) == 2

    def test_status_with_unusable_db_path(self, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        assert cli.main(["--status", "-q", "--db", str(blocker / "cache.duckdb")]) == 1

    def test_unusable_db_path_uses_memory_cache(self, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        payload = build_openmeteo_payload(start=date.today() - timedelta(days=4))
        with patch.object(cli, "build_orchestrator", stub_orchestrator(StubFetcher(payload))):
            assert cli.main(["--db", str(blocker / "cache.duckdb")]) == 0
        assert "Nahal Alexander" in capsys.readouterr().out

"""Tests for static configuration loading and the command-line interface."""

import pytest

from skilldex.bootstrap import create_hub, load_reference
from skilldex.cli import main
from skilldex.config import Settings
from skilldex.exceptions import ConfigurationError


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setenv("SKILLDEX_SKILLS_MODULE", "tests.conftest:sample_skills")
    monkeypatch.setenv("SKILLDEX_INDEX_BACKEND", "memory")


class TestLoadReference:
    def test_resolves_attribute(self):
        assert load_reference("skilldex.config:Settings") is Settings

    @pytest.mark.parametrize(
        "reference",
        ["no-colon", "skilldex.missing_module:X", "skilldex.config:Missing", ":X"],
    )
    def test_bad_references(self, reference):
        with pytest.raises(ConfigurationError):
            load_reference(reference)

    def test_create_hub(self):
        hub = create_hub(Settings(skills_module="tests.conftest:sample_skills"))
        assert hub.skills.has("weather")
        assert hub.routes.get("weather:forecast") is not None


class TestCli:
    def test_run(self, configured, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "weather:forecast", "--params", '{"city": "Oslo", "days": 1}'])

        assert exc_info.value.code == 0
        assert "Sunny in Oslo" in capsys.readouterr().out

    def test_run_failure(self, configured, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "weather:radar"])

        assert exc_info.value.code == 1
        assert "PERMISSION_DENIED" in capsys.readouterr().err

    def test_run_with_scopes(self, configured, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "weather:radar", "--scopes", "pro"])

        assert exc_info.value.code == 0
        assert "radar image" in capsys.readouterr().out

    def test_invalid_params(self, configured):
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "weather:forecast", "--params", "{not json"])
        assert exc_info.value.code == 2

    def test_ask(self, configured, capsys):
        with pytest.raises(SystemExit):
            main(["ask", "forecast"])
        assert "## weather" in capsys.readouterr().out

    def test_sources_without_pipelines(self, configured, capsys):
        with pytest.raises(SystemExit):
            main(["sources"])
        assert "No sources configured." in capsys.readouterr().out

    def test_refresh_unknown(self, configured, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["refresh", "nope"])
        assert exc_info.value.code == 1
        assert "Source not found: nope" in capsys.readouterr().out

    def test_bad_configuration(self, monkeypatch):
        monkeypatch.setenv("SKILLDEX_SKILLS_MODULE", "nowhere:skills")
        with pytest.raises(SystemExit) as exc_info:
            main(["sources"])
        assert exc_info.value.code == 2

"""
Tests for the command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from ngbuilder import __version__
from ngbuilder.main import cli

from conftest import write_project

CONFIG = """
    options:
      main_module: App
      validate_unwrapped: false
    targets:
      release:
        src: ["src/*.js"]
        dest: build/app.js
"""

SOURCES = {
    "src/app.js": "angular.module('App', ['Util']);\n",
    "src/util.js": "angular.module('Util', []);\nangular.module('Util').value('u', 1);\n",
}


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr("ngbuilder.main.setup_cli_logging", lambda **kwargs: "WARNING")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path):
    return write_project(tmp_path, CONFIG, SOURCES)


class TestCliBasics:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("build", "analyze", "config"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestBuildCommand:
    def test_build(self, runner, project, tmp_path):
        result = runner.invoke(cli, ["-c", str(project), "build"])
        assert result.exit_code == 0, result.output
        assert "✅ release" in result.output
        assert "2 modules" in result.output
        assert (tmp_path / "build" / "app.js").exists()

    def test_build_json(self, runner, project):
        result = runner.invoke(cli, ["-c", str(project), "build", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["targets"][0]["files"] == ["src/util.js", "src/app.js"]

    def test_debug_build_flag(self, runner, project, tmp_path):
        result = runner.invoke(cli, ["-c", str(project), "build", "--debug-build"])
        assert result.exit_code == 0
        assert "debug →" in result.output
        assert (tmp_path / "build" / "app.js").read_text().startswith("document.write")

    def test_warning_fails_without_force(self, runner, tmp_path):
        cfg = write_project(tmp_path, CONFIG, {
            **SOURCES,
            "src/extra.js": "angular.module('Extra', []);\nangular.module('Extra2', []);\nangular.module('Util').value('w', 4);\n",
        })
        result = runner.invoke(cli, ["-c", str(cfg), "build"])
        assert result.exit_code == 1
        assert "multiple modules" in result.output
        assert "--force" in result.output

        forced = runner.invoke(cli, ["-c", str(cfg), "build", "--force"])
        assert forced.exit_code == 0, forced.output
        assert "⚠️" in forced.output

    def test_unknown_target(self, runner, project):
        result = runner.invoke(cli, ["-c", str(project), "build", "nope"])
        assert result.exit_code == 1
        assert "Unknown target(s): nope" in result.output

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["-c", str(tmp_path / "none.yml"), "build"])
        assert result.exit_code == 1


class TestAnalyzeCommand:
    def test_analyze(self, runner, project, tmp_path):
        result = runner.invoke(cli, ["-c", str(project), "analyze", "release"])
        assert result.exit_code == 0, result.output
        assert "Load order:" in result.output
        assert "src/util.js" in result.output
        assert "ng  (external)" in result.output
        assert not (tmp_path / "build" / "app.js").exists()

    def test_analyze_json(self, runner, project):
        result = runner.invoke(cli, ["-c", str(project), "analyze", "release", "--json"])
        data = json.loads(result.output)
        names = [entry["name"] for entry in data["targets"][0]["registry"]]
        assert names == ["ng", "App", "Util"]


class TestConfigCommand:
    def test_valid(self, runner, project):
        result = runner.invoke(cli, ["-c", str(project), "config", "check"])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output
        assert "release" in result.output

    def test_invalid(self, runner, tmp_path):
        cfg = write_project(tmp_path, "targets:\n  app: {}\n", {})
        result = runner.invoke(cli, ["-c", str(cfg), "config", "check"])
        assert result.exit_code == 1
        assert "Configuration errors" in result.output

    def test_json(self, runner, project):
        result = runner.invoke(cli, ["-c", str(project), "config", "check", "--json"])
        data = json.loads(result.output)
        assert data["valid"] is True
        assert data["targets"] == ["release"]

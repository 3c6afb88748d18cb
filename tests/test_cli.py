"""Tests for the apprepo CLI."""

import json
import tempfile
from pathlib import Path

from click.testing import CliRunner

from apprepo.cli import main
from apprepo.registry.repo import AppRegistry


def _write_manifest(tmpdir: str, **overrides) -> str:
    data = {"name": "Notes", "base_url": "http://notes.example.com", "launch_path": "/"}
    data.update(overrides)
    path = Path(tmpdir) / "manifest.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_install_from_file_and_list():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        manifest = _write_manifest(tmpdir)

        result = runner.invoke(
            main, ["install", "http://store.com", "--manifest", manifest, "--yes", "-d", tmpdir]
        )
        assert result.exit_code == 0, result.output
        assert "Installed" in result.output

        result = runner.invoke(main, ["list", "-d", tmpdir])
        assert result.exit_code == 0
        assert "Notes" in result.output

        views = AppRegistry.open(tmpdir).list()
        assert [v.id for v in views] == ["http://notes.example.com/"]
        assert views[0].install_url == "http://store.com"


def test_install_declined_at_prompt():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        manifest = _write_manifest(tmpdir)

        result = runner.invoke(
            main, ["install", "http://store.com", "--manifest", manifest, "-d", tmpdir], input="n\n"
        )

        assert result.exit_code == 1
        assert "denied" in result.output
        assert AppRegistry.open(tmpdir).list() == []


def test_install_requires_manifest_or_url():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        result = runner.invoke(main, ["install", "http://store.com", "-d", tmpdir])

        assert result.exit_code == 1
        assert "missingManifest" in result.output


def test_install_invalid_manifest_file():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        manifest = _write_manifest(tmpdir, base_url="not-a-url")

        result = runner.invoke(
            main, ["install", "http://store.com", "--manifest", manifest, "--yes", "-d", tmpdir]
        )

        assert result.exit_code == 1
        assert "invalidManifest" in result.output


def test_remove():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        manifest = _write_manifest(tmpdir)
        runner.invoke(main, ["install", "http://store.com", "-m", manifest, "-y", "-d", tmpdir])

        result = runner.invoke(main, ["remove", "http://notes.example.com/", "-d", tmpdir])
        assert result.exit_code == 0
        assert AppRegistry.open(tmpdir).list() == []

        result = runner.invoke(main, ["remove", "http://notes.example.com/", "-d", tmpdir])
        assert result.exit_code == 1
        assert "noSuchApplication" in result.output


def test_origin_queries():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        manifest = _write_manifest(tmpdir)
        runner.invoke(main, ["install", "http://store.com", "-m", manifest, "-y", "-d", tmpdir])

        result = runner.invoke(main, ["installed", "http://notes.example.com", "-d", tmpdir])
        assert "Notes" in result.output

        result = runner.invoke(main, ["installed-by", "http://store.com", "-d", tmpdir])
        assert "Notes" in result.output

        result = runner.invoke(main, ["installed-by", "http://elsewhere.com", "-d", tmpdir])
        assert "Nothing installed" in result.output


def test_state_commands():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        result = runner.invoke(main, ["state", "set", "app-1", '{"level": 2}', "-d", tmpdir])
        assert result.exit_code == 0

        result = runner.invoke(main, ["state", "get", "app-1", "-d", tmpdir])
        assert json.loads(result.output) == {"level": 2}

        runner.invoke(main, ["state", "delete", "app-1", "-d", tmpdir])
        result = runner.invoke(main, ["state", "get", "app-1", "-d", tmpdir])
        assert "No state" in result.output

        result = runner.invoke(main, ["state", "set", "app-1", "{oops", "-d", tmpdir])
        assert result.exit_code == 1


def test_install_empty_manifest_file():
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "empty.yaml"
        path.write_text("")

        result = runner.invoke(
            main, ["install", "http://store.com", "--manifest", str(path), "--yes", "-d", tmpdir]
        )

        assert result.exit_code == 1
        assert "is empty" in result.output
        assert "missingManifest" not in result.output

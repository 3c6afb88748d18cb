"""Tests for the default manifest validator."""

import pytest

from apprepo.exceptions import InvalidManifestError
from apprepo.manifest import (
    expected_manifest_url,
    launch_url,
    manifest_issues,
    validate_manifest,
)


def _manifest(**overrides) -> dict:
    data = {
        "name": "Notes",
        "base_url": "http://notes.example.com",
        "launch_path": "/index.html",
        "description": "Take notes",
        "icons": {"96": "/icon-96.png"},
        "developer": {"name": "Example Inc.", "url": "http://example.com"},
    }
    data.update(overrides)
    return data


def test_valid_manifest():
    assert manifest_issues(_manifest()) == []
    assert validate_manifest(_manifest())["name"] == "Notes"


def test_unknown_properties_are_dropped():
    result = validate_manifest(_manifest(tracking_id="abc"))
    assert "tracking_id" not in result


def test_validation_is_idempotent():
    once = validate_manifest(_manifest(widget={"path": "/w", "width": "200"}))
    assert validate_manifest(once) == once


def test_validate_returns_a_copy():
    raw = _manifest()
    result = validate_manifest(raw)
    result["icons"]["96"] = "/changed.png"
    assert raw["icons"]["96"] == "/icon-96.png"


def test_missing_required_fields():
    issues = manifest_issues({"description": "nothing else"})
    assert any("name" in i for i in issues)
    assert any("base_url" in i for i in issues)


def test_not_an_object():
    with pytest.raises(InvalidManifestError) as exc_info:
        validate_manifest(["name", "base_url"])
    assert exc_info.value.code == "invalidManifest"
    assert exc_info.value.issues


def test_wrong_types():
    issues = manifest_issues(_manifest(name=42, icons={"96": 3}))
    assert any(".name" in i for i in issues)
    assert any(".icons.96" in i for i in issues)


def test_widget_dimensions_accept_int_or_string():
    assert manifest_issues(_manifest(widget={"width": 200, "height": "100"})) == []
    assert manifest_issues(_manifest(widget={"width": True}))


def test_base_url_must_be_absolute_http():
    assert manifest_issues(_manifest(base_url="/relative"))
    assert manifest_issues(_manifest(base_url="ftp://example.com"))


def test_launch_url():
    assert launch_url({"base_url": "http://a.com"}) == "http://a.com"
    assert launch_url({"base_url": "http://a.com", "launch_path": "/app"}) == "http://a.com/app"


def test_expected_manifest_url():
    assert expected_manifest_url({"base_url": "http://a.com/"}) == "http://a.com/manifest.webapp"
    assert (
        expected_manifest_url({"base_url": "http://a.com/", "manifest_name": "app.json"})
        == "http://a.com/app.json"
    )

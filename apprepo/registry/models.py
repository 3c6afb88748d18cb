"""Registry data models — installation records and the views built on them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Installation:
    """A single installation record, stored under the app's launch URL."""

    app: dict  # Validated manifest
    install_time: int  # UTC milliseconds
    install_url: str  # Origin that requested the install
    authorization_url: Optional[str] = None


@dataclass
class InstalledBy:
    """What an installing origin gets to see about its installs."""

    install_url: str
    install_time: int
    manifest: dict

    def to_dict(self) -> dict:
        return {
            "installURL": self.install_url,
            "installTime": self.install_time,
            "manifest": self.manifest,
        }


@dataclass
class ExternalView:
    """Dashboard-facing projection of an installation record."""

    id: str
    install_url: str
    install_time: int
    launch_url: str
    icons: Optional[dict[str, str]] = None
    name: Optional[str] = None
    description: Optional[str] = None
    developer: Optional[dict[str, Any]] = None
    widget_url: Optional[str] = None
    widget_width: Optional[int] = None
    widget_height: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize with the external field names, omitting absent fields."""
        result: dict[str, Any] = {
            "id": self.id,
            "installURL": self.install_url,
            "installTime": self.install_time,
            "launchURL": self.launch_url,
        }
        optional = {
            "icons": self.icons,
            "name": self.name,
            "description": self.description,
            "developer": self.developer,
            "widgetURL": self.widget_url,
            "widgetWidth": self.widget_width,
            "widgetHeight": self.widget_height,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass
class InstallArgs:
    """Arguments an origin passes when requesting an install."""

    manifest: Optional[dict] = None
    url: Optional[str] = None
    authorization_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "InstallArgs":
        return cls(
            manifest=data.get("manifest"),
            url=data.get("url"),
            authorization_url=data.get("authorization_url"),
        )


def installation_to_dict(install: Installation) -> dict:
    data = {
        "app": install.app,
        "installTime": install.install_time,
        "installURL": install.install_url,
    }
    if install.authorization_url:
        data["authorizationURL"] = install.authorization_url
    return data


def installation_from_dict(data: Any) -> Installation:
    """Rebuild a stored record.

    Raises ``ValueError`` when *data* is not a well-formed record.
    """
    if not isinstance(data, dict):
        raise ValueError(f"record is {type(data).__name__}, not an object")
    missing = [k for k in ("app", "installTime", "installURL") if k not in data]
    if missing:
        raise ValueError(f"record missing {', '.join(missing)}")
    return Installation(
        app=data["app"],
        install_time=data["installTime"],
        install_url=data["installURL"],
        authorization_url=data.get("authorizationURL"),
    )

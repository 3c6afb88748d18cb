"""Pydantic models for the application registry endpoints.

These mirror the apprepo.registry dataclasses and use the external
(camelCase) field names dashboards already understand.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExternalViewResponse(BaseModel):
    """Mirrors apprepo.registry.models.ExternalView."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    install_url: str = Field(alias="installURL")
    install_time: int = Field(alias="installTime")
    launch_url: str = Field(alias="launchURL")
    icons: Optional[dict[str, str]] = None
    name: Optional[str] = None
    description: Optional[str] = None
    developer: Optional[dict[str, Any]] = None
    widget_url: Optional[str] = Field(default=None, alias="widgetURL")
    widget_width: Optional[int] = Field(default=None, alias="widgetWidth")
    widget_height: Optional[int] = Field(default=None, alias="widgetHeight")


class InstalledByResponse(BaseModel):
    """Mirrors apprepo.registry.models.InstalledBy."""

    model_config = ConfigDict(populate_by_name=True)

    install_url: str = Field(alias="installURL")
    install_time: int = Field(alias="installTime")
    manifest: dict[str, Any]


class StateResponse(BaseModel):
    id: str
    state: Any = None


class StateRequest(BaseModel):
    state: Any = None

"""Registry — installation records for web applications.

The registry provides:
- Installation: a fetch → validate → prompt → persist protocol
- Provenance: who installed each application, and when
- Origin queries: what is installed at, or was installed by, an origin
- Dashboard views: a stable projection of each installation record
- State: an opaque per-application blob, stored apart from the record
"""

from apprepo.registry.models import ExternalView, Installation, InstalledBy
from apprepo.registry.repo import AppRegistry
from apprepo.registry.views import generate_external_view

__all__ = [
    "AppRegistry",
    "ExternalView",
    "Installation",
    "InstalledBy",
    "generate_external_view",
]

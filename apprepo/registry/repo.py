"""The installation registry.

Installed applications are stored in the ``"app"`` namespace, keyed by
launch URL; installing a second app with the same launch URL replaces the
first. Each value is a serialized record like this::

    {
        "app": {<validated manifest>},
        "installTime": <install timestamp, UTC milliseconds>,
        "installURL": <the origin that invoked install>,
        "authorizationURL": <optional>
    }

Per-application state blobs live in the separate ``"state"`` namespace and
are never touched by install or remove.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional

from apprepo.capabilities import (
    CompletionCallback,
    FetchFunc,
    PromptFunc,
    as_fetch_func,
    as_prompt_func,
)
from apprepo.exceptions import (
    InstallDeniedError,
    InvalidManifestError,
    ManifestParseError,
    MissingManifestError,
    NetworkError,
    NoSuchApplicationError,
    RegistryError,
)
from apprepo.manifest import (
    ManifestValidator,
    expected_manifest_url,
    launch_url,
    validate_manifest,
)
from apprepo.registry.models import (
    ExternalView,
    InstallArgs,
    Installation,
    InstalledBy,
    installation_from_dict,
    installation_to_dict,
)
from apprepo.registry.views import generate_external_view
from apprepo.storage import (
    APP_NAMESPACE,
    STATE_NAMESPACE,
    KeyValueStore,
    MemoryStorage,
    open_storage,
)
from apprepo.urls import application_matches_domain, url_matches_domain

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class _Once:
    """Wrap a callback so that only its first invocation goes through."""

    def __init__(self, func: Optional[Callable[[Any], None]], what: str) -> None:
        self._func = func
        self._what = what
        self._called = False

    def __call__(self, value: Any) -> None:
        if self._called:
            _logger.warning("Ignoring repeated %s (%r)", self._what, value)
            return
        self._called = True
        if self._func is not None:
            self._func(value)


class AppRegistry:
    """Registry of installed web applications.

    Args:
        app_store: store for installation records. Defaults to memory.
        state_store: store for per-application state. Defaults to memory.
        validator: turns a raw manifest into a trusted one or raises.
        clock: returns the current time in UTC milliseconds.
    """

    def __init__(
        self,
        app_store: Optional[KeyValueStore] = None,
        state_store: Optional[KeyValueStore] = None,
        *,
        validator: ManifestValidator = validate_manifest,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._apps = app_store if app_store is not None else MemoryStorage()
        self._state = state_store if state_store is not None else MemoryStorage()
        self._validate = validator
        self._clock = clock

    @classmethod
    def open(cls, data_dir: Optional[str] = None, **kwargs: Any) -> "AppRegistry":
        """Registry backed by JSON files under *data_dir* (or the default)."""
        return cls(
            open_storage(data_dir, APP_NAMESPACE),
            open_storage(data_dir, STATE_NAMESPACE),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def iterate_apps(self, callback: Callable[[str, Installation], None]) -> None:
        """Pass every valid installation record to *callback*.

        Records that no longer load or validate are skipped and purged once
        the walk is over. An exception raised by *callback* is logged and
        iteration carries on; the record it was handed stays in place.
        """
        to_remove: list[str] = []

        for key in self._apps.keys():
            try:
                install = installation_from_dict(self._apps.get(key))
                install.app = self._validate(install.app)
            except Exception as exc:
                _logger.warning("Invalid application record %r detected: %s", key, exc)
                to_remove.append(key)
                continue

            try:
                callback(key, install)
            except Exception:
                _logger.error("Error inside iterate_apps callback for %r", key, exc_info=True)

        for key in to_remove:
            self._apps.remove(key)
        if to_remove:
            _logger.info("Purged %d invalid application record(s)", len(to_remove))

    def get_installs_for_origin(self, origin: str) -> list[Installation]:
        """Installations whose application runs at *origin*."""
        result: list[Installation] = []

        def collect(key: str, install: Installation) -> None:
            if application_matches_domain(install.app, origin):
                result.append(install)

        self.iterate_apps(collect)
        return result

    def get_installs_by_origin(self, origin: str) -> list[Installation]:
        """Installations that *origin* requested."""
        result: list[Installation] = []

        def collect(key: str, install: Installation) -> None:
            if url_matches_domain(install.install_url, origin):
                result.append(install)

        self.iterate_apps(collect)
        return result

    # ------------------------------------------------------------------
    # Install protocol
    # ------------------------------------------------------------------

    def install(
        self,
        origin: str,
        args: InstallArgs | dict,
        prompt_fn: PromptFunc | Any,
        fetch_fn: FetchFunc | Any,
        callback: Optional[CompletionCallback] = None,
    ) -> None:
        """Ask the user to install an application on behalf of *origin*.

        *args* carries either ``manifest`` (a direct install) or ``url``
        (the manifest is fetched with *fetch_fn*), plus an optional
        ``authorization_url``. The user is asked through *prompt_fn*.
        Both capabilities may answer at any later time.

        *callback* is invoked exactly once: with ``True`` once the app is
        stored, or with ``{"error": [code, message]}`` otherwise.
        """
        if isinstance(args, dict):
            args = InstallArgs.from_dict(args)
        finish = _Once(callback, "install completion")

        def fail(error: RegistryError) -> None:
            _logger.debug("Install requested by %s failed: %s", origin, error.code)
            finish(error.to_dict())

        def ask(manifest: dict, is_external_server: bool) -> None:
            _logger.debug(
                "Prompting for %s (external server: %s)", manifest.get("name"), is_external_server
            )
            on_confirm = _Once(
                lambda allowed: self._finish_install(origin, args, manifest, allowed, finish),
                "install confirmation",
            )
            prompt = as_prompt_func(prompt_fn)
            prompt(origin, manifest, on_confirm, {"isExternalServer": is_external_server})

        if args.manifest not in (None, ""):
            # Direct manifests are always flagged as externally served.
            try:
                manifest = self._validate(args.manifest)
            except Exception as exc:
                fail(InvalidManifestError(f"couldn't validate your manifest: {exc}"))
                return
            ask(manifest, True)

        elif args.url:
            fetch = as_fetch_func(fetch_fn)
            manifest_url = args.url

            def on_fetched(body: Any) -> None:
                if not body:
                    fail(NetworkError("couldn't retrieve application manifest from network"))
                    return
                try:
                    raw = json.loads(body)
                except (TypeError, ValueError):
                    fail(ManifestParseError(f"couldn't parse manifest JSON from {manifest_url}"))
                    return
                try:
                    manifest = self._validate(raw)
                except Exception as exc:
                    fail(InvalidManifestError(f"couldn't validate your manifest: {exc}"))
                    return
                # Flag manifests that were not served from where they say
                # they live.
                ask(manifest, expected_manifest_url(manifest) != manifest_url)

            _logger.debug("Fetching manifest from %s", manifest_url)
            fetch(manifest_url, _Once(on_fetched, "manifest fetch result"))

        else:
            fail(MissingManifestError("install requires a url or manifest argument"))

    def _finish_install(
        self,
        origin: str,
        args: InstallArgs,
        manifest: dict,
        allowed: Any,
        finish: Callable[[Any], None],
    ) -> None:
        if allowed is not True:
            finish(InstallDeniedError("User denied installation request").to_dict())
            return

        key = launch_url(manifest)
        install = Installation(
            app=manifest,
            install_time=self._clock(),
            install_url=origin,
            authorization_url=args.authorization_url or None,
        )
        self._apps.put(key, installation_to_dict(install))
        _logger.info("Installed %s (requested by %s)", key, origin)
        finish(True)

    # ------------------------------------------------------------------
    # Origin queries
    # ------------------------------------------------------------------

    def get_installed(self, origin: str) -> list[dict]:
        """Manifests of the applications installed at *origin*."""
        return [install.app for install in self.get_installs_for_origin(origin)]

    def get_installed_by(self, origin: str) -> list[InstalledBy]:
        """Applications *origin* installed, with when and from where."""
        return [
            InstalledBy(
                install_url=install.install_url,
                install_time=install.install_time,
                manifest=install.app,
            )
            for install in self.get_installs_by_origin(origin)
        ]

    # ------------------------------------------------------------------
    # Dashboard management
    # ------------------------------------------------------------------

    def list(self) -> list[ExternalView]:
        """External views of every installed application."""
        installed: list[ExternalView] = []
        self.iterate_apps(lambda key, install: installed.append(generate_external_view(key, install)))
        return installed

    def remove(self, key: str) -> bool:
        if not self._apps.get(key):
            raise NoSuchApplicationError(f"no application exists with the id: {key}")
        self._apps.remove(key)
        _logger.info("Removed %s", key)
        return True

    # ------------------------------------------------------------------
    # Application state
    # ------------------------------------------------------------------

    def load_state(self, state_id: str) -> Any:
        return self._state.get(state_id)

    def save_state(self, state_id: str, state: Any) -> bool:
        """Store *state* for *state_id*; ``None`` clears it."""
        if state is None:
            self._state.remove(state_id)
        else:
            self._state.put(state_id, state)
        return True

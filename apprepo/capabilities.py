"""Capabilities the install protocol borrows from its host.

The registry neither talks to the network nor draws UI. Installing needs
both, so the caller hands over two capabilities:

- a *fetcher*, ``fetch(url, on_complete)``, which calls
  ``on_complete(body)`` exactly once with the manifest text, or with None
  when it could not be retrieved;
- a *prompt*, ``prompt(origin, manifest, on_confirm, options)``, which asks
  the user and calls ``on_confirm(allowed)`` exactly once.
  ``options["isExternalServer"]`` is True when the manifest did not come
  from its own declared location.

Either may be an object with the method or a plain callable, and either
may answer synchronously or much later.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Union

import httpx

_logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Union[bool, dict]], None]
FetchFunc = Callable[[str, Callable[[Optional[str]], None]], None]
PromptFunc = Callable[[str, dict, Callable[[bool], None], dict], None]


class ManifestFetcher(Protocol):
    def fetch(self, url: str, on_complete: Callable[[Optional[str]], None]) -> None: ...


class InstallPrompt(Protocol):
    def prompt(
        self,
        install_origin: str,
        manifest: dict,
        on_confirm: Callable[[bool], None],
        options: dict,
    ) -> None: ...


def as_fetch_func(fetcher: Any) -> FetchFunc:
    if hasattr(fetcher, "fetch"):
        return fetcher.fetch
    if callable(fetcher):
        return fetcher
    raise TypeError(f"{fetcher!r} is not a manifest fetcher")


def as_prompt_func(prompt: Any) -> PromptFunc:
    if hasattr(prompt, "prompt"):
        return prompt.prompt
    if callable(prompt):
        return prompt
    raise TypeError(f"{prompt!r} is not an install prompt")


class HttpManifestFetcher:
    """Fetch manifests over HTTP(S).

    Any transport failure, timeout or non-2xx response is reported as a
    missing body.
    """

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.Client] = None) -> None:
        self._timeout = timeout
        self._client = client

    def fetch(self, url: str, on_complete: Callable[[Optional[str]], None]) -> None:
        try:
            if self._client is not None:
                resp = self._client.get(url, timeout=self._timeout, follow_redirects=True)
            else:
                resp = httpx.get(url, timeout=self._timeout, follow_redirects=True)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            _logger.debug("Manifest fetch from %s failed: %s", url, exc)
            on_complete(None)
            return
        on_complete(resp.text)


class AutoPrompt:
    """Answer every install prompt the same way, without asking anyone."""

    def __init__(self, allow: bool = True) -> None:
        self.allow = allow
        self.prompts: list[tuple[str, dict, dict]] = []

    def prompt(
        self,
        install_origin: str,
        manifest: dict,
        on_confirm: Callable[[bool], None],
        options: dict,
    ) -> None:
        self.prompts.append((install_origin, manifest, options))
        on_confirm(self.allow)

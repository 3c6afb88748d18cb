"""Custom exception hierarchy for apprepo."""

from __future__ import annotations


class AppRepoError(Exception):
    """Base exception for all apprepo errors."""


class StorageError(AppRepoError):
    """A backing store could not be read or written."""


class RegistryError(AppRepoError):
    """A registry operation failed with a well-known error code.

    Errors cross the install protocol boundary as ``{"error": [code, message]}``
    dicts; :meth:`to_dict` produces that shape.
    """

    code = "registryError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": [self.code, self.message]}


class MissingManifestError(RegistryError):
    """Install was called with neither a manifest nor a manifest URL."""

    code = "missingManifest"


class InvalidManifestError(RegistryError):
    """A manifest failed validation."""

    code = "invalidManifest"

    def __init__(self, message: str, *, issues: list[str] | None = None) -> None:
        self.issues = issues or []
        super().__init__(message)


class NetworkError(RegistryError):
    """The fetch capability returned no manifest body."""

    code = "networkError"


class ManifestParseError(RegistryError):
    """A fetched manifest body was not valid JSON."""

    code = "manifestParseError"


class InstallDeniedError(RegistryError):
    """The user declined the install prompt.

    Not a system failure, but reported through the same channel.
    """

    code = "denied"


class NoSuchApplicationError(RegistryError):
    """No installation record exists for the given key."""

    code = "noSuchApplication"

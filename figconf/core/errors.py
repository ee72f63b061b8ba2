"""Domain errors raised by the configuration engine.

Every failure the engine detects itself derives from ``FigError`` so that
callers can tell domain failures apart from I/O failures. Cancellation is
``asyncio.CancelledError`` and is never wrapped in a ``FigError``.
"""

from __future__ import annotations

from collections.abc import Iterable


class FigError(Exception):
    """Base class for all configuration engine errors."""


class NotInitializedError(FigError):
    """Raised when the data directory has not been initialized."""

    def __init__(self) -> None:
        super().__init__("Your Fig data directory has not yet been initialized.")


class VersionNotFoundError(FigError):
    """Raised when a named version has no stored manifest."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(
            f"The version '{version}' could not be found, make sure it has been imported."
        )


class NoVersionSelectedError(FigError):
    """Raised when the version ledger has no entries."""

    def __init__(self) -> None:
        super().__init__("You have not yet selected a configuration version to use with Fig.")


class MissingFieldError(FigError):
    """Raised when a required manifest or healthcheck field is absent."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(
            f"You have not specified a value for the required '{field_name}' field."
        )


class WrongChecksumError(FigError):
    """Raised when content does not hash to the checksum it was recorded with."""

    def __init__(self, file_name: str, expected: str, actual: str) -> None:
        self.file_name = file_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"The file [{file_name}] was expected to have a hash of [{expected}] "
            f"but was found to have a hash of [{actual}]."
        )


class UnrecognizedKindError(FigError):
    """Raised when a ``kind`` does not match any registered implementation."""

    def __init__(self, family: str, kind: str, options: Iterable[str]) -> None:
        self.family = family
        self.kind = kind
        self.options = list(options)
        super().__init__(
            f"You have not yet specified a known {family} kind, got '{kind}' "
            f"but expected one of [{', '.join(self.options)}]."
        )


class ManifestInvalidError(FigError):
    """Raised for structural manifest violations (duplicates, unsafe paths)."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class ChecksumMismatchError(FigError):
    """Raised when source files disagree with the checksums in their manifest.

    ``mismatches`` holds ``(file_name, expected, actual)`` triples.
    """

    def __init__(self, mismatches: list[tuple[str, str, str]]) -> None:
        self.mismatches = mismatches
        super().__init__(
            "One or more files had checksums which did not match those present in the manifest."
        )

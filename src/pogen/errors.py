from __future__ import annotations

from typing import Any


class PogenError(Exception):
    """Base class for every error raised by pogen."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class ConfigurationError(PogenError):
    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "INVALID_CONFIGURATION", {"field": field})
        self.field = field


class LocatorSyntaxError(PogenError):
    def __init__(self, message: str, text: str | None = None) -> None:
        super().__init__(message, "INVALID_LOCATOR", {"text": text})
        self.text = text


class BatchIntegrityError(PogenError):
    """A resolved batch broke one of its invariants.

    This is a defect in the pipeline, not a recoverable runtime event.
    """

    def __init__(self, message: str, error_code: str = "BATCH_INTEGRITY", identifier: str | None = None) -> None:
        super().__init__(message, error_code, {"identifier": identifier})
        self.identifier = identifier


class DuplicateIdentifierError(BatchIntegrityError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"Duplicate identifier in resolved batch: {identifier}", "DUPLICATE_IDENTIFIER", identifier)


class MetadataError(PogenError):
    def __init__(self, message: str, error_code: str = "METADATA_ERROR", path: str | None = None) -> None:
        super().__init__(message, error_code, {"path": path})
        self.path = path


class MetadataNotFoundError(MetadataError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Metadata file not found: {path}", "METADATA_NOT_FOUND", path)


class MetadataParseError(MetadataError):
    """Raised for a snapshot that exists but cannot be read back.

    A corrupt snapshot must never be mistaken for an empty baseline.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, "METADATA_PARSE_FAILED", path)


class BrowserError(PogenError):
    def __init__(self, message: str, url: str | None = None, missing_browser: bool = False) -> None:
        super().__init__(message, "BROWSER_FAILED", {"url": url, "missing_browser": missing_browser})
        self.url = url
        self.missing_browser = missing_browser

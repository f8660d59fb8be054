"""
Exceptions — Error types raised by the seeding pipeline.

Hierarchy:
    SeedError
    ├── DatasetError            Catalog JSON is missing or malformed
    ├── AppwriteAPIError        Appwrite returned a non-2xx response
    ├── ResetFailure            A delete failed while clearing a collection/bucket
    ├── CatalogCreationFailure  A category/customization/menu item/link could not be created
    └── ImageIngestionFailure   Fetch or upload of one image failed (never leaves
                                the image worker; converted to the fallback reference)

Pipeline context:
    ResetFailure and CatalogCreationFailure abort CatalogLinker.seed() and
    propagate to the caller. ImageIngestionFailure is caught inside
    ImageIngestionWorker and only shows up in the printed output and the
    summary's degraded-image count.
"""

from typing import Optional


class SeedError(Exception):
    """Base class for all seeder errors."""


class DatasetError(SeedError):
    """The catalog dataset could not be loaded or is malformed."""


class AppwriteAPIError(SeedError):
    """An Appwrite REST call returned an error response.

    Attributes:
        status_code: HTTP status of the response.
        message: Appwrite's error message (or the raw body if not JSON).
        error_type: Appwrite's machine-readable error type, e.g.
            "document_not_found", if present.
    """

    def __init__(self, status_code: int, message: str, error_type: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.error_type = error_type
        detail = f" ({error_type})" if error_type else ""
        super().__init__(f"Appwrite API error {status_code}{detail}: {message}")


class ResetFailure(SeedError):
    """Clearing a collection or the bucket failed part-way.

    Deletes that already completed are not rolled back.
    """

    def __init__(self, target: str, cause: Exception):
        self.target = target
        self.cause = cause
        super().__init__(f"Failed to clear {target}: {cause}")


class CatalogCreationFailure(SeedError):
    """A catalog record could not be created."""

    def __init__(self, kind: str, name: str, cause: object):
        self.kind = kind
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to create {kind} '{name}': {cause}")


class ImageIngestionFailure(SeedError):
    """Fetching or uploading an image failed."""

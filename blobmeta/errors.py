# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   Typed exceptions shared by the classifier, the router, the
#   bulk importer and metadata store implementations.
#
# TAXONOMY:
# ---------
# - BlobMetaError          → base class for library errors
# - AddressFormatError     → a classifier accessor was called on a
#                            request target that violates its precondition
#                            (caller contract violation, never suppressed)
# - StoreOperationError    → raised by MetadataStore implementations;
#                            the router and importer propagate it unchanged
# - ImportCancelled        → cooperative abort of a bulk import. NOT a
#                            BlobMetaError: cancellation is a terminal
#                            outcome, not a failure.
#
# ==============================================

from typing import Optional


class BlobMetaError(Exception):
    """Base exception for all blobmeta errors."""


class AddressFormatError(BlobMetaError):
    """Raised when a request target cannot answer the requested accessor."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        self.url = url
        super().__init__(message)


class StoreOperationError(BlobMetaError):
    """Raised by metadata store implementations when a store call fails."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class ImportCancelled(Exception):
    """Raised inside the bulk importer when its cancellation signal is set."""

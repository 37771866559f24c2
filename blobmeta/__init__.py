# ==============================================
# blobmeta: Blob Storage Metadata Discovery
# ==============================================
#
# Package Structure:
#
# blobmeta/
# ├── analysis/         # Classify request targets, discovery policies
# ├── normalization/    # Normalize completed HTTP exchanges
# ├── storage/          # Route requests to store calls, paginated listing
# ├── persistence/      # MetadataStore contract and record types
# ├── config.py         # Configuration management
# ├── errors.py         # Exception taxonomy
# ├── bulk_importer.py  # Full account reconciliation
# └── tracker.py        # User-facing facade
#
# ==============================================

from blobmeta.analysis.classifier import AddressClassifier, classify_url
from blobmeta.analysis.decision import ClassificationResult, DiscoveryPolicy, RequestDescriptor
from blobmeta.bulk_importer import BulkImporter, ImportOutcome, ImportResult
from blobmeta.errors import AddressFormatError, BlobMetaError, ImportCancelled, StoreOperationError
from blobmeta.persistence.metadata_store import BlobRecord, ContainerRecord, MetadataStore
from blobmeta.storage.operation_router import OperationRouter, SizeHints
from blobmeta.tracker import DiscoveryTracker

__version__ = "0.1.0"

__all__ = [
    "AddressClassifier",
    "classify_url",
    "ClassificationResult",
    "DiscoveryPolicy",
    "RequestDescriptor",
    "BulkImporter",
    "ImportOutcome",
    "ImportResult",
    "AddressFormatError",
    "BlobMetaError",
    "ImportCancelled",
    "StoreOperationError",
    "BlobRecord",
    "ContainerRecord",
    "MetadataStore",
    "OperationRouter",
    "SizeHints",
    "DiscoveryTracker",
]

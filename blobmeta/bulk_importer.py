# ==============================================
# BulkImporter: Account Reconciliation
# ==============================================
#
# PURPOSE:
#   Walks a whole storage account (or one container) through a
#   PagingSource and replays the store upserts that live discovery
#   would have made, so an index can be seeded or repaired.
#
# HOW IT FLOWS:
#
#   list_containers_page(marker)  ──►  for each container:
#        │                               1. create_container_if_not_exists
#        │                               2. list_blobs_page(marker) ──► for each blob:
#        │                                      AddressClassifier(url) → put_blob
#        ▼
#   next_marker? repeat : done
#
# CLASS: BulkImporter
# -------------------
#
#   Constructor:
#   ------------
#   - __init__(store, source, account_name,
#              container_page_size=100, blob_page_size=2000,
#              endpoint_suffix=".blob.core.windows.net")
#
#   Public Methods:
#   ---------------
#   - import_all_containers(cancel=None) -> ImportResult
#   - import_container(name, cancel=None) -> ImportResult
#       `cancel` is any object with is_set() (threading.Event works).
#       It is checked before every page fetch and every item. A set
#       signal ends the walk with ImportOutcome.CANCELLED. Store and
#       paging errors propagate unchanged.
#
#   Internal Methods:
#   -----------------
#   - _walk_containers(cancel, counts)
#   - _walk_blobs(container, cancel, counts)
#   - _import_blob(container, item)  → raises AddressFormatError when the
#       blob URL names a different container than the listing
#   - _check_cancelled(cancel)  → raises ImportCancelled
#
# NOTES:
# ------
# - No checkpoint is kept. Re-running replays the whole walk. Every
#   store call made here is an idempotent upsert.
#
# ==============================================

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from blobmeta.analysis.classifier import BLOB_ENDPOINT_SUFFIX, AddressClassifier
from blobmeta.errors import AddressFormatError, ImportCancelled
from blobmeta.persistence.metadata_store import MetadataStore
from blobmeta.storage.paging import BlobListItem, PagingSource

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_PAGE_SIZE = 100
DEFAULT_BLOB_PAGE_SIZE = 2000


class CancellationSignal(Protocol):
    def is_set(self) -> bool:
        ...


class ImportOutcome(Enum):
    """How a bulk import ended. Faults surface as exceptions instead."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ImportResult:
    outcome: ImportOutcome
    containers: int = 0
    blobs: int = 0

    @property
    def completed(self) -> bool:
        return self.outcome is ImportOutcome.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "outcome": self.outcome.value,
            "containers": self.containers,
            "blobs": self.blobs,
        }


class _Counts:
    def __init__(self) -> None:
        self.containers = 0
        self.blobs = 0

    def result(self, outcome: ImportOutcome) -> ImportResult:
        return ImportResult(outcome=outcome, containers=self.containers, blobs=self.blobs)


class BulkImporter:
    """Reconciles the metadata store with a full listing of an account."""

    def __init__(
        self,
        store: MetadataStore,
        source: PagingSource,
        account_name: str,
        container_page_size: int = DEFAULT_CONTAINER_PAGE_SIZE,
        blob_page_size: int = DEFAULT_BLOB_PAGE_SIZE,
        endpoint_suffix: str = BLOB_ENDPOINT_SUFFIX,
    ):
        if container_page_size <= 0 or blob_page_size <= 0:
            raise ValueError("Page sizes must be positive")
        self.store = store
        self.source = source
        self.account_name = account_name
        self.container_page_size = container_page_size
        self.blob_page_size = blob_page_size
        self.endpoint_suffix = endpoint_suffix

    # ------------------------------------------
    # Public API
    # ------------------------------------------

    def import_all_containers(self, cancel: Optional[CancellationSignal] = None) -> ImportResult:
        """
        Import every container of the account and every blob inside it.

        Args:
            cancel: optional cancellation signal

        Returns:
            ImportResult with COMPLETED or CANCELLED and the counts so far
        """
        logger.info("Importing all containers of account %s", self.account_name)
        return self._run(lambda counts: self._walk_containers(cancel, counts))

    def import_container(self, name: str, cancel: Optional[CancellationSignal] = None) -> ImportResult:
        """
        Import a single container and every blob inside it.

        Args:
            name: container name as listed by the service
            cancel: optional cancellation signal

        Returns:
            ImportResult with COMPLETED or CANCELLED and the counts so far
        """
        return self._run(lambda counts: self._import_one(name, cancel, counts))

    # ------------------------------------------
    # Walk
    # ------------------------------------------

    def _run(self, walk: Callable[[_Counts], None]) -> ImportResult:
        counts = _Counts()
        try:
            walk(counts)
        except ImportCancelled:
            logger.info(
                "Import of account %s cancelled after %d containers, %d blobs",
                self.account_name, counts.containers, counts.blobs,
            )
            return counts.result(ImportOutcome.CANCELLED)
        logger.info(
            "Import of account %s finished: %d containers, %d blobs",
            self.account_name, counts.containers, counts.blobs,
        )
        return counts.result(ImportOutcome.COMPLETED)

    def _walk_containers(self, cancel: Optional[CancellationSignal], counts: _Counts) -> None:
        marker: Optional[str] = None
        while True:
            self._check_cancelled(cancel)
            page = self.source.list_containers_page(marker, self.container_page_size)
            logger.debug("Fetched container page with %d items", len(page.items))
            for item in page.items:
                self._check_cancelled(cancel)
                self._import_one(item.name, cancel, counts)
            if page.is_last:
                return
            marker = page.next_marker

    def _import_one(self, container: str, cancel: Optional[CancellationSignal], counts: _Counts) -> None:
        self._check_cancelled(cancel)
        logger.info("Importing container %s/%s", self.account_name, container)
        self.store.create_container_if_not_exists(self.account_name, container)
        counts.containers += 1
        self._walk_blobs(container, cancel, counts)

    def _walk_blobs(self, container: str, cancel: Optional[CancellationSignal], counts: _Counts) -> None:
        marker: Optional[str] = None
        while True:
            self._check_cancelled(cancel)
            page = self.source.list_blobs_page(container, marker, self.blob_page_size)
            logger.debug("Fetched blob page of %s with %d items", container, len(page.items))
            for item in page.items:
                self._check_cancelled(cancel)
                self._import_blob(container, item)
                counts.blobs += 1
            if page.is_last:
                return
            marker = page.next_marker

    def _import_blob(self, container: str, item: BlobListItem) -> None:
        address = AddressClassifier.from_url(item.url, endpoint_suffix=self.endpoint_suffix)
        # path-style endpoints put the account name where the container belongs
        if address.container_name() != container:
            raise AddressFormatError(
                f"Blob URL {item.url!r} does not address listed container {container!r}",
                url=item.url,
            )
        self.store.put_blob(self.account_name, container, address.blob_name(), item.size)

    @staticmethod
    def _check_cancelled(cancel: Optional[CancellationSignal]) -> None:
        if cancel is not None and cancel.is_set():
            raise ImportCancelled()

# ==============================================
# Paging Source
# ==============================================
#
# PURPOSE:
#   The contract the bulk importer uses to enumerate an account:
#   containers page by page, then blobs page by page, each page
#   carrying the continuation marker for the next one.
#
# PROTOCOL: PagingSource
# ----------------------
#   - list_containers_page(marker, page_size) -> Page[ContainerListItem]
#   - list_blobs_page(container, marker, page_size) -> Page[BlobListItem]
#       marker=None fetches the first page; a page whose next_marker is
#       None is the last one.
#
# DATA CLASSES:
# -------------
#   - Page              → items + next_marker
#   - ContainerListItem → name
#   - BlobListItem      → canonical url + optional size in bytes
#
# ==============================================

from dataclasses import dataclass, field
from typing import Generic, Optional, Protocol, Sequence, TypeVar, runtime_checkable

ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class ContainerListItem:
    name: str


@dataclass(frozen=True)
class BlobListItem:
    """A listed blob. `url` is its canonical address, fed to AddressClassifier."""
    url: str
    size: Optional[int] = None


@dataclass(frozen=True)
class Page(Generic[ItemT]):
    items: Sequence[ItemT] = field(default_factory=tuple)
    next_marker: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return not self.next_marker


@runtime_checkable
class PagingSource(Protocol):
    """Paginated listing of an account's containers and blobs."""

    def list_containers_page(self, marker: Optional[str], page_size: int) -> Page[ContainerListItem]:
        ...

    def list_blobs_page(self, container: str, marker: Optional[str], page_size: int) -> Page[BlobListItem]:
        ...

# ==============================================
# AzurePagingSource
# ==============================================
#
# PURPOSE:
#   PagingSource backed by the Azure Storage Blob SDK. Enumerates a
#   live account so the bulk importer can reconcile the index with it.
#
# CLASS: AzurePagingSource
# ------------------------
#   Stateful: holds a BlobServiceClient.
#
#   Constructor:
#   ------------
#   - __init__(client: BlobServiceClient)
#   - from_connection_string(conn_str, **client_kwargs)   (classmethod)
#   - from_account_url(account_url, credential=None, **client_kwargs)
#       client_kwargs are passed to BlobServiceClient, e.g.
#       raw_response_hook=tracker.azure_response_hook
#
#   Methods:
#   --------
#   - list_containers_page(marker, page_size) -> Page[ContainerListItem]
#   - list_blobs_page(container, marker, page_size) -> Page[BlobListItem]
#       Uses list_*(results_per_page=...).by_page(continuation_token=marker)
#       and reads exactly one page.
#
# ==============================================

from typing import Any, Iterator, Optional

from azure.storage.blob import BlobServiceClient

from blobmeta.storage.paging import BlobListItem, ContainerListItem, Page


def _first_page(pages: Any) -> list:
    page: Optional[Iterator[Any]] = next(pages, None)
    return list(page) if page is not None else []


class AzurePagingSource:
    def __init__(self, client: BlobServiceClient):
        self.client = client

    @classmethod
    def from_connection_string(cls, conn_str: str, **client_kwargs: Any) -> "AzurePagingSource":
        return cls(BlobServiceClient.from_connection_string(conn_str, **client_kwargs))

    @classmethod
    def from_account_url(
        cls, account_url: str, credential: Any = None, **client_kwargs: Any
    ) -> "AzurePagingSource":
        return cls(BlobServiceClient(account_url=account_url, credential=credential, **client_kwargs))

    @property
    def account_name(self) -> str:
        return self.client.account_name

    def list_containers_page(self, marker: Optional[str], page_size: int) -> Page[ContainerListItem]:
        """Fetch one page of containers starting at marker."""
        pages = self.client.list_containers(results_per_page=page_size).by_page(continuation_token=marker)
        containers = _first_page(pages)
        return Page(
            items=tuple(ContainerListItem(name=container.name) for container in containers),
            next_marker=pages.continuation_token or None,
        )

    def list_blobs_page(self, container: str, marker: Optional[str], page_size: int) -> Page[BlobListItem]:
        """Fetch one page of blobs (flat listing) in a container starting at marker."""
        container_client = self.client.get_container_client(container)
        pages = container_client.list_blobs(results_per_page=page_size).by_page(continuation_token=marker)
        blobs = _first_page(pages)
        return Page(
            items=tuple(
                BlobListItem(url=container_client.get_blob_client(blob.name).url, size=blob.size)
                for blob in blobs
            ),
            next_marker=pages.continuation_token or None,
        )

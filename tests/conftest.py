# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# This file contains shared fixtures for all tests.
#
# TEST DOUBLES:
# -------------
# - RecordingMetadataStore
#     In-memory MetadataStore. Keeps real container/blob state and
#     records every store operation, in call order, in `calls`.
#     `fail_on` makes named operations raise StoreOperationError.
#     `after_call` runs after each recorded call (used to trigger
#     cancellation mid-import).
#
# - FakePagingSource
#     In-memory PagingSource built from {container: [(blob, size)]}.
#     Serves real pages with string markers and records each fetch.
#
# FIXTURES:
# ---------
# - store, paging_source, make_exchange, make_requests_response,
#   make_pipeline_response
#
# ==============================================

from types import SimpleNamespace
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple
from urllib.parse import quote

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from blobmeta.config import reset_config
from blobmeta.errors import StoreOperationError
from blobmeta.normalization.exchange import CompletedExchange
from blobmeta.persistence.metadata_store import BlobRecord, ContainerRecord
from blobmeta.storage.paging import BlobListItem, ContainerListItem, Page

ACCOUNT = "myaccount"


# ==============================================
# Test Doubles
# ==============================================

class RecordingMetadataStore:
    """In-memory metadata store that records every operation."""

    def __init__(self) -> None:
        self.containers: Set[Tuple[str, str]] = set()
        self.blobs: Dict[Tuple[str, str, str], BlobRecord] = {}
        self.calls: List[Tuple[str, tuple]] = []
        self.fail_on: Set[str] = set()
        self.after_call: Optional[Callable[[str], None]] = None

    def _record(self, operation: str, *args) -> None:
        if operation in self.fail_on:
            raise StoreOperationError(operation, "injected failure")
        self.calls.append((operation, args))
        if self.after_call is not None:
            self.after_call(operation)

    @property
    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]

    def create_container(self, account: str, name: str) -> None:
        self._record("create_container", account, name)
        self._drop_blobs(account, name)
        self.containers.add((account, name))

    def create_container_if_not_exists(self, account: str, name: str) -> None:
        self._record("create_container_if_not_exists", account, name)
        self.containers.add((account, name))

    def delete_container(self, account: str, name: str) -> None:
        self._record("delete_container", account, name)
        self.containers.discard((account, name))
        self._drop_blobs(account, name)

    def container_exists(self, account: str, name: str) -> bool:
        return (account, name) in self.containers

    def list_containers(self, account: str) -> Sequence[ContainerRecord]:
        return [ContainerRecord(acc, name) for acc, name in sorted(self.containers) if acc == account]

    def list_blobs(self, account: str, container: str, with_meta: bool = False) -> Sequence[BlobRecord]:
        records = [
            record for key, record in sorted(self.blobs.items())
            if key[0] == account and key[1] == container
        ]
        if with_meta:
            return records
        return [BlobRecord(r.account, r.container, r.name) for r in records]

    def put_blob(self, account: str, container: str, name: str, size: Optional[int] = None) -> None:
        self._record("put_blob", account, container, name, size)
        self.blobs[(account, container, name)] = BlobRecord(account, container, name, size)

    def blob_exists(self, account: str, container: str, name: str) -> bool:
        return (account, container, name) in self.blobs

    def delete_blob(self, account: str, container: str, name: str) -> None:
        self._record("delete_blob", account, container, name)
        self.blobs.pop((account, container, name), None)

    def _drop_blobs(self, account: str, container: str) -> None:
        for key in [k for k in self.blobs if k[0] == account and k[1] == container]:
            del self.blobs[key]


class FakePagingSource:
    """In-memory account listing with real pagination."""

    def __init__(self, layout: Dict[str, List[Tuple[str, Optional[int]]]], account: str = ACCOUNT) -> None:
        self.layout = layout
        self.account = account
        self.fetches: List[Tuple[str, Optional[str], Optional[str], int]] = []

    def blob_url(self, container: str, name: str) -> str:
        return f"https://{self.account}.blob.core.windows.net/{container}/{quote(name)}"

    @staticmethod
    def _slice(items: list, marker: Optional[str], page_size: int) -> Tuple[list, Optional[str]]:
        start = int(marker) if marker else 0
        end = start + page_size
        return items[start:end], (str(end) if end < len(items) else None)

    def list_containers_page(self, marker: Optional[str], page_size: int) -> Page[ContainerListItem]:
        self.fetches.append(("containers", None, marker, page_size))
        names, next_marker = self._slice(list(self.layout), marker, page_size)
        return Page(items=tuple(ContainerListItem(name) for name in names), next_marker=next_marker)

    def list_blobs_page(self, container: str, marker: Optional[str], page_size: int) -> Page[BlobListItem]:
        self.fetches.append(("blobs", container, marker, page_size))
        blobs, next_marker = self._slice(self.layout[container], marker, page_size)
        return Page(
            items=tuple(BlobListItem(url=self.blob_url(container, name), size=size) for name, size in blobs),
            next_marker=next_marker,
        )


class CountdownSignal:
    """Cancellation signal that becomes set after `checks` calls to is_set()."""

    def __init__(self, checks: int) -> None:
        self.remaining = checks

    def is_set(self) -> bool:
        self.remaining -= 1
        return self.remaining < 0


# ==============================================
# Fixtures
# ==============================================

@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts without a cached configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store() -> RecordingMetadataStore:
    return RecordingMetadataStore()


@pytest.fixture
def paging_source() -> FakePagingSource:
    """Three containers (one empty, one root) with a handful of blobs."""
    return FakePagingSource({
        "photos": [("a.jpg", 10), ("b.jpg", 20), ("trips/2024/c.jpg", 30)],
        "empty": [],
        "$root": [("readme.txt", 5)],
    })


@pytest.fixture
def make_exchange():
    """Factory for CompletedExchange objects."""
    def _make(
        method: str,
        url: str,
        status_code: int = 200,
        headers: Optional[dict] = None,
        request_content_length: Optional[int] = None,
        response_content_length: Optional[int] = None,
        response_total_length: Optional[int] = None,
    ) -> CompletedExchange:
        return CompletedExchange(
            method=method,
            url=url,
            status_code=status_code,
            request_headers=headers or {},
            request_content_length=request_content_length,
            response_content_length=response_content_length,
            response_total_length=response_total_length,
        )
    return _make


@pytest.fixture
def make_requests_response():
    """Factory for completed requests.Response objects (no network)."""
    def _make(
        method: str,
        url: str,
        status_code: int = 200,
        headers: Optional[dict] = None,
        data: Optional[bytes] = None,
        response_headers: Optional[dict] = None,
    ) -> requests.Response:
        prepared = requests.Request(method, url, headers=headers or {}, data=data).prepare()
        response = requests.Response()
        response.status_code = status_code
        response.request = prepared
        response.url = url
        response.headers = CaseInsensitiveDict(response_headers or {})
        return response
    return _make


@pytest.fixture
def make_pipeline_response():
    """Factory for objects shaped like an azure.core PipelineResponse."""
    def _make(
        method: str,
        url: str,
        status_code: int = 200,
        headers: Optional[dict] = None,
        body: Optional[bytes] = None,
        response_headers: Optional[dict] = None,
    ) -> SimpleNamespace:
        return SimpleNamespace(
            http_request=SimpleNamespace(method=method, url=url, headers=headers or {}, body=body),
            http_response=SimpleNamespace(status_code=status_code, headers=response_headers or {}),
        )
    return _make

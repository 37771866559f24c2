# ==============================================
# OperationRouter
# ==============================================
#
# PURPOSE:
#   Takes one successfully completed Blob Service request (method +
#   classification) and decides which metadata store calls it implies,
#   under the active DiscoveryPolicy. Then makes those calls, in order.
#
# WHY THIS CLASS EXISTS:
#   The same request means different things under different policies:
#   a GET on a blob is ignored under ONLY_WRITES but upserts the blob
#   under ALL_REQUESTS. This class holds those rules in one place.
#
# CLASS: OperationRouter
# ----------------------
#   Stateless between calls. Holds references to the store and policy.
#
#   Constructor:
#   ------------
#   - __init__(store: MetadataStore, policy: DiscoveryPolicy)
#
#   Methods:
#   --------
#   - route(method, classification, hints=None) -> bool
#       Returns True if any store call was made.
#
#   - _route_container(...) -> bool
#       Rules, first match wins:
#         1. PUT, no comp        → create_container (replace), any policy
#         2. DELETE              → delete_container
#         3. policy discovers from reads AND request implies existence
#                                → create_container_if_not_exists
#         4. otherwise unhandled
#
#   - _route_blob(...) -> bool
#       Rules:
#         1. policy ensures containers (non-DELETE requests)
#                                → create_container_if_not_exists, handled
#         2. DELETE, no comp     → delete_blob, stop
#         3. PUT no comp, or PUT comp=blocklist
#                                → put_blob(size hint)
#         4. policy discovers from reads AND request implies existence
#                                → put_blob(size hint)
#       Put Block never implies the blob exists, under any policy.
#
# DATA CLASS: SizeHints
# ---------------------
#   - blob_length_header: int | None     (x-ms-blob-content-length)
#   - request_content_length: int | None
#   - response_content_length: int | None
#   - response_total_length: int | None  (Content-Range complete length)
#
# NOTES:
# ------
# - The router does not re-validate classifier preconditions and
#   never retries or swallows store errors.
#
# ==============================================

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from blobmeta.analysis.decision import ClassificationResult, DiscoveryPolicy
from blobmeta.normalization.exchange import CompletedExchange

if TYPE_CHECKING:
    from blobmeta.persistence.metadata_store import MetadataStore

logger = logging.getLogger(__name__)

GET = "GET"
PUT = "PUT"
DELETE = "DELETE"
HEAD = "HEAD"
BLOB_SIZE_HEADER = "x-ms-blob-content-length"


def _parse_size_header(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    size = int(value.strip())
    if size < 0:
        raise ValueError(f"{BLOB_SIZE_HEADER} cannot be negative: {value!r}")
    return size


@dataclass(frozen=True)
class SizeHints:
    """Every place a blob's size may be read from, for one exchange."""
    blob_length_header: Optional[int] = None
    request_content_length: Optional[int] = None
    response_content_length: Optional[int] = None
    response_total_length: Optional[int] = None

    @classmethod
    def from_exchange(cls, exchange: CompletedExchange) -> "SizeHints":
        """
        Collect size hints from a completed exchange.

        Raises:
            ValueError: if the blob length header is not a non-negative integer
        """
        return cls(
            blob_length_header=_parse_size_header(exchange.header(BLOB_SIZE_HEADER)),
            request_content_length=exchange.request_content_length,
            response_content_length=exchange.response_content_length,
            response_total_length=exchange.response_total_length,
        )


class OperationRouter:
    def __init__(self, store: "MetadataStore", policy: DiscoveryPolicy):
        self.store = store
        self.policy = policy

    def route(
        self,
        method: str,
        classification: ClassificationResult,
        hints: Optional[SizeHints] = None,
    ) -> bool:
        """
        Forward one completed request to the metadata store.

        Args:
            method: HTTP verb of the request
            classification: verdict from AddressClassifier.classify()
            hints: optional size hints for blob upserts

        Returns:
            True if handled and a store call was made, False otherwise
        """
        method = method.upper()
        if classification.is_blob:
            return self._route_blob(method, classification, hints)
        if classification.is_container:
            return self._route_container(method, classification)
        # Account level and service requests never touch the index
        return False

    # ------------------------------------------
    # Handlers for resource types
    # ------------------------------------------

    def _route_container(self, method: str, classification: ClassificationResult) -> bool:
        address = classification.address
        if method == PUT and address.is_comp_none:
            self.store.create_container(classification.account_name(), classification.container_name())
            return True
        if method == DELETE:
            self.store.delete_container(classification.account_name(), classification.container_name())
            return True
        if self.policy.discovers_from_reads and self.implies_existence(method, classification):
            self.store.create_container_if_not_exists(
                classification.account_name(), classification.container_name()
            )
            return True
        return False

    def _route_blob(
        self,
        method: str,
        classification: ClassificationResult,
        hints: Optional[SizeHints],
    ) -> bool:
        address = classification.address
        handled = False

        if self.policy.ensures_container and method != DELETE:
            self.store.create_container_if_not_exists(
                classification.account_name(), classification.container_name()
            )
            handled = True

        if method == DELETE and address.is_comp_none:
            self.store.delete_blob(
                classification.account_name(), classification.container_name(), classification.blob_name()
            )
            return True

        # TODO: Copy Blob (PUT with x-ms-copy-source) could seed size from the source blob
        is_put_blob = method == PUT and address.is_comp_none
        if is_put_blob or (method == PUT and address.is_block_list_op):
            self._put_blob(method, classification, hints)
            return True

        if self.policy.discovers_from_reads and self.implies_existence(method, classification):
            self._put_blob(method, classification, hints)
            return True

        return handled

    def _put_blob(self, method: str, classification: ClassificationResult, hints: Optional[SizeHints]) -> None:
        size = self.resolve_size(method, classification, hints)
        if size is not None:
            logger.debug("Found blob %s of size %d", classification.address.path, size)
        self.store.put_blob(
            classification.account_name(),
            classification.container_name(),
            classification.blob_name(),
            size,
        )

    # ------------------------------------------
    # Request facts
    # ------------------------------------------

    @staticmethod
    def implies_existence(method: str, classification: ClassificationResult) -> bool:
        """True unless the request deletes the resource or only stages a block."""
        if method == DELETE:
            return False
        # An uncommitted block does not make the blob exist
        if classification.is_blob and method == PUT and classification.address.is_block_blob_op:
            return False
        return True

    @staticmethod
    def resolve_size(
        method: str,
        classification: ClassificationResult,
        hints: Optional[SizeHints],
    ) -> Optional[int]:
        """
        Work out the blob size implied by a request, if any.

        Only Put Blob and Get Blob / Get Blob Properties carry a usable
        size; Put Block List and other sub-operations may be misleading.

        Returns:
            The size in bytes, or None when unknown (never 0 for unknown)
        """
        if hints is None:
            return None
        comp_none = classification.address.is_comp_none
        if method == PUT and comp_none:
            if hints.blob_length_header is not None:
                return hints.blob_length_header
            if hints.request_content_length is not None:
                return hints.request_content_length
        if method in (GET, HEAD) and comp_none:
            # a ranged read only returns part of the blob in Content-Length
            if hints.response_total_length is not None:
                return hints.response_total_length
            if hints.response_content_length is not None:
                return hints.response_content_length
        return None

# ==============================================
# AddressClassifier
# ==============================================
#
# PURPOSE:
#   Understands Blob Service request targets. Given the host, path and
#   query of a request, answers structural questions (is this a
#   container? a blob? which sub-operation?) and extracts identifiers
#   (account, container and blob names, block id).
#
# WHY THIS CLASS EXISTS:
#   The Blob REST addressing grammar has overlapping corner cases:
#     - PUT https://myaccount.blob.core.windows.net/myblob?comp=metadata
#         is a blob in the implicit $root container
#     - GET https://myaccount.blob.core.windows.net/?comp=list
#         is neither a container nor a blob (account level)
#     - /mycontainer/a/b/c is blob "a/b/c" in "mycontainer"
#     - myaccount-secondary.blob.core.windows.net is account "myaccount"
#   Both the live router and the bulk importer need the exact same
#   answers, so the rules live here once.
#
# CLASS: AddressClassifier
# ------------------------
#   Stateless. A pure view over one request target.
#
#   Constructor:
#   ------------
#   - __init__(host, path, query, endpoint_suffix=BLOB_ENDPOINT_SUFFIX)
#   - from_url(url) / from_descriptor(descriptor)   (classmethods)
#
#   Predicates (properties):
#   ------------------------
#   - is_container_ref, is_blob_ref, is_comp_none
#   - is_list_containers_op, is_container_list_blobs_op
#   - is_block_blob_op, is_page_blob_op, is_block_list_op
#
#   Accessors (raise AddressFormatError on precondition violation):
#   ---------------------------------------------------------------
#   - account_name(), container_name(), blob_name(), block_id()
#
#   - classify() -> ClassificationResult
#
# ==============================================

from typing import List, Mapping, Optional
from urllib.parse import unquote, urlsplit

from blobmeta.analysis.decision import (
    ClassificationResult,
    RequestDescriptor,
    ResourceKind,
    SubOperation,
    parse_query,
)
from blobmeta.errors import AddressFormatError

ROOT_CONTAINER = "$root"
BLOB_ENDPOINT_SUFFIX = ".blob.core.windows.net"
SECONDARY_ACCOUNT_SUFFIX = "-secondary"


class AddressClassifier:
    """Answers structural questions about one Blob Service request target."""

    def __init__(
        self,
        host: str,
        path: str,
        query: Optional[Mapping[str, str]] = None,
        endpoint_suffix: str = BLOB_ENDPOINT_SUFFIX,
    ):
        self.host = host.lower()
        self.path = path or "/"
        self.query = dict(query or {})
        self.endpoint_suffix = endpoint_suffix.lower()
        # Split like "/container/blob" -> ["", "container", "blob"]
        self._parts: List[str] = [unquote(part) for part in self.path.split("/")]

    @classmethod
    def from_url(cls, url: str, endpoint_suffix: str = BLOB_ENDPOINT_SUFFIX) -> "AddressClassifier":
        """Build a classifier from an absolute request URL."""
        parts = urlsplit(url)
        return cls(
            host=parts.hostname or "",
            path=parts.path,
            query=parse_query(parts.query),
            endpoint_suffix=endpoint_suffix,
        )

    @classmethod
    def from_descriptor(
        cls, descriptor: RequestDescriptor, endpoint_suffix: str = BLOB_ENDPOINT_SUFFIX
    ) -> "AddressClassifier":
        """Build a classifier from an already parsed RequestDescriptor."""
        return cls(
            host=descriptor.host,
            path=descriptor.path,
            query=descriptor.query,
            endpoint_suffix=endpoint_suffix,
        )

    def __repr__(self) -> str:
        return f"AddressClassifier(host={self.host!r}, path={self.path!r}, query={self.query!r})"

    # ------------------------------------------
    # Predicates
    # ------------------------------------------

    @property
    def comp(self) -> Optional[str]:
        return self.query.get("comp")

    @property
    def is_container_ref(self) -> bool:
        """True if the target identifies a container, not a blob."""
        return self.query.get("restype") == "container"

    @property
    def is_blob_ref(self) -> bool:
        """True if the target identifies a blob, not a container."""
        return not self.is_container_ref and len(self._parts) >= 2 and self._parts[1] != ""

    @property
    def is_comp_none(self) -> bool:
        return "comp" not in self.query

    @property
    def is_list_containers_op(self) -> bool:
        return not self.is_container_ref and not self.is_blob_ref and self.comp == "list"

    @property
    def is_container_list_blobs_op(self) -> bool:
        return self.is_container_ref and self.comp == "list"

    @property
    def is_block_blob_op(self) -> bool:
        return self.is_blob_ref and self.comp == "block" and "blockid" in self.query

    @property
    def is_page_blob_op(self) -> bool:
        return self.is_blob_ref and self.comp == "page"

    @property
    def is_block_list_op(self) -> bool:
        return self.is_blob_ref and self.comp == "blocklist"

    # ------------------------------------------
    # Accessors
    # ------------------------------------------

    def account_name(self) -> str:
        """
        Extract the storage account name from the host.

        Returns:
            "myaccount" for both myaccount.blob.core.windows.net and
            myaccount-secondary.blob.core.windows.net

        Raises:
            AddressFormatError: if the host is not a default blob endpoint
        """
        if not self.host.endswith(self.endpoint_suffix):
            raise AddressFormatError(
                f"Blob endpoint {self.host!r} is not a default endpoint "
                f"(*{self.endpoint_suffix}), cannot get account name",
                url=self._describe(),
            )
        name = self.host[: -len(self.endpoint_suffix)]
        if name.endswith(SECONDARY_ACCOUNT_SUFFIX):
            name = name[: -len(SECONDARY_ACCOUNT_SUFFIX)]
        return name

    def container_name(self) -> str:
        """
        Return the container the target lives in.

        Blob targets of the form /blobname live in the implicit $root
        container; everything else uses the first path segment. The
        account root has no container and yields an empty name.
        """
        if not self.is_container_ref and len(self._parts) == 2 and self._parts[1] != "":
            return ROOT_CONTAINER
        return self._parts[1]

    def blob_name(self) -> str:
        """
        Return the blob name, keeping embedded slashes.

        Raises:
            AddressFormatError: on container targets and non-blob targets
        """
        if self.is_container_ref:
            raise AddressFormatError(
                f"Cannot retrieve blob name on a container resource: {self._describe()}",
                url=self._describe(),
            )
        if not self.is_blob_ref or self._parts[1] == "":
            raise AddressFormatError(
                f"Cannot retrieve blob name on a non-blob resource: {self._describe()}",
                url=self._describe(),
            )
        if len(self._parts) == 2:
            # /myblob lives in $root, return as is
            return self._parts[1]
        return "/".join(self._parts[2:])

    def block_id(self) -> str:
        """
        Return the block id of a Put Block request.

        Raises:
            AddressFormatError: if the target is not a blob or not a block operation
        """
        if not self.is_blob_ref:
            raise AddressFormatError(
                f"Cannot retrieve block id on a non-blob resource: {self._describe()}",
                url=self._describe(),
            )
        if not self.is_block_blob_op:
            raise AddressFormatError(
                f"Cannot retrieve block id on a non-block operation: {self._describe()}",
                url=self._describe(),
            )
        return self.query["blockid"]

    def classify(self) -> ClassificationResult:
        """Produce the classification verdict for this target."""
        if self.is_container_ref:
            kind = ResourceKind.CONTAINER
        elif self.is_blob_ref:
            kind = ResourceKind.BLOB
        else:
            kind = ResourceKind.ACCOUNT
        return ClassificationResult(
            kind=kind,
            sub_operation=SubOperation.from_comp(self.comp),
            comp=self.comp,
            address=self,
        )

    def _describe(self) -> str:
        query = "&".join(f"{key}={value}" for key, value in self.query.items())
        return f"{self.host}{self.path}" + (f"?{query}" if query else "")


def classify_url(url: str, endpoint_suffix: str = BLOB_ENDPOINT_SUFFIX) -> ClassificationResult:
    """Shortcut: classify an absolute request URL."""
    return AddressClassifier.from_url(url, endpoint_suffix=endpoint_suffix).classify()

# ==============================================
# Decision (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that represent the INPUT and OUTPUT of request
#   classification, plus the discovery policy that controls how
#   aggressively classified requests are turned into store writes.
#
# WHY THIS FILE EXISTS:
#   Separating data classes from logic keeps the classifier clean.
#   These classes are also used by the storage layer (OperationRouter)
#   to know which metadata store calls a request implies.
#
# ENUMS:
# ------
# - DiscoveryPolicy(Enum): ONLY_WRITES, ALL_REQUESTS, ALL_REQUESTS_ENSURE_SCHEMA
#     Closed set of discovery policies. Behavior of each variant is
#     looked up in an explicit rules table (_POLICY_RULES), one row
#     per variant, so the routing rules can be audited in one place.
#
# - ResourceKind(Enum): ACCOUNT, CONTAINER, BLOB
#     What the request addresses.
#
# - SubOperation(Enum): NONE, LIST, BLOCK, BLOCKLIST, PAGE, ...
#     The `comp` sub-operation selected by the request.
#
# CLASSES:
# --------
# - PolicyRules (dataclass)       → one row of the policy table
# - RequestDescriptor (dataclass) → method + parsed request target
# - ClassificationResult (dataclass)
#     The classification verdict for one request target. Names are
#     derived on demand through the AddressClassifier so that
#     precondition violations still fail fast.
#
# ==============================================

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlsplit

if TYPE_CHECKING:
    from blobmeta.analysis.classifier import AddressClassifier


class DiscoveryPolicy(Enum):
    """
    Which Blob Service requests may be used to discover containers and blobs.

    - ONLY_WRITES: create/delete container, put/delete blob only.
    - ALL_REQUESTS: every successful request that implies a resource
      exists (GET/HEAD, metadata, lease, list blobs...) upserts it.
      Puts extra load on the store when the index is already complete.
    - ALL_REQUESTS_ENSURE_SCHEMA: like ALL_REQUESTS, and additionally
      makes sure the owning container record exists before blob upserts.
      Roughly doubles store load for blob requests.
    """
    ONLY_WRITES = "only_writes"
    ALL_REQUESTS = "all_requests"
    ALL_REQUESTS_ENSURE_SCHEMA = "all_requests_ensure_schema"

    @property
    def discovers_from_reads(self) -> bool:
        """True if non-mutating requests may upsert records."""
        return _POLICY_RULES[self].discovers_from_reads

    @property
    def ensures_container(self) -> bool:
        """True if blob requests must first ensure the container record."""
        return _POLICY_RULES[self].ensures_container

    @classmethod
    def parse(cls, text: str) -> "DiscoveryPolicy":
        """
        Parse a policy from its value or name, case-insensitive.

        Args:
            text: e.g. "all_requests" or "ALL_REQUESTS"

        Returns:
            The matching DiscoveryPolicy

        Raises:
            ValueError: if text names no policy
        """
        wanted = text.strip().lower()
        for policy in cls:
            if wanted in (policy.value, policy.name.lower()):
                return policy
        choices = ", ".join(policy.value for policy in cls)
        raise ValueError(f"Unknown discovery policy {text!r}. Expected one of: {choices}")


@dataclass(frozen=True)
class PolicyRules:
    """One row of the discovery policy decision table."""
    discovers_from_reads: bool
    ensures_container: bool


_POLICY_RULES: Dict[DiscoveryPolicy, PolicyRules] = {
    DiscoveryPolicy.ONLY_WRITES: PolicyRules(discovers_from_reads=False, ensures_container=False),
    DiscoveryPolicy.ALL_REQUESTS: PolicyRules(discovers_from_reads=True, ensures_container=False),
    DiscoveryPolicy.ALL_REQUESTS_ENSURE_SCHEMA: PolicyRules(discovers_from_reads=True, ensures_container=True),
}


class ResourceKind(Enum):
    """What a request target addresses."""
    ACCOUNT = "account"
    CONTAINER = "container"
    BLOB = "blob"


class SubOperation(Enum):
    """
    The `comp` sub-operation of a request.

    NONE means no `comp` parameter at all; OTHER is any `comp` value
    this library does not name.
    """
    NONE = "none"
    LIST = "list"
    BLOCK = "block"
    BLOCKLIST = "blocklist"
    PAGE = "page"
    PAGELIST = "pagelist"
    METADATA = "metadata"
    LEASE = "lease"
    PROPERTIES = "properties"
    ACL = "acl"
    SNAPSHOT = "snapshot"
    COPY = "copy"
    STATS = "stats"
    OTHER = "other"

    @classmethod
    def from_comp(cls, comp: Optional[str]) -> "SubOperation":
        if comp is None:
            return cls.NONE
        try:
            return cls(comp)
        except ValueError:
            return cls.OTHER


def parse_query(query: str) -> Dict[str, str]:
    """
    Parse a raw query string into a flat dict.

    Blank values are kept (`blockid=` is present). For repeated keys
    the first value wins.
    """
    params: Dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


@dataclass(frozen=True)
class RequestDescriptor:
    """A request method and its parsed target. Never persisted."""
    method: str
    host: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, method: str, url: str) -> "RequestDescriptor":
        """
        Build a descriptor from an HTTP method and an absolute URL.

        Args:
            method: HTTP verb, any case
            url: absolute request URL including query string

        Returns:
            A RequestDescriptor with an upper-cased method
        """
        parts = urlsplit(url)
        return cls(
            method=method.upper(),
            host=parts.hostname or "",
            path=parts.path or "/",
            query=parse_query(parts.query),
        )


@dataclass(frozen=True)
class ClassificationResult:
    """
    Classification verdict for one request target.

    Recomputed per request and discarded; carries no lifecycle.
    """
    kind: ResourceKind
    sub_operation: SubOperation
    comp: Optional[str]
    address: "AddressClassifier"

    @property
    def is_container(self) -> bool:
        return self.kind is ResourceKind.CONTAINER

    @property
    def is_blob(self) -> bool:
        return self.kind is ResourceKind.BLOB

    def account_name(self) -> str:
        return self.address.account_name()

    def container_name(self) -> str:
        return self.address.container_name()

    def blob_name(self) -> str:
        return self.address.blob_name()

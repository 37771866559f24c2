# ==============================================
# MetadataStore
# ==============================================
#
# PURPOSE:
#   The contract a metadata index must provide so discovered
#   containers and blobs can be recorded, plus the record types
#   that flow through it.
#
# WHY THIS FILE EXISTS:
#   Store implementations (Redis, SQL, document stores...) live
#   outside this package. The router and the bulk importer only talk
#   to this protocol, so any store that honors it can be plugged in.
#
# CONTRACT:
# ---------
#   CONTAINERS:
#   - create_container(account, name)
#       Save the container record. If it exists, delete it (and its
#       blobs) and create it anew.
#   - create_container_if_not_exists(account, name)
#       Create the record only when missing, otherwise no-op. Called
#       when a container is discovered from non-create requests.
#   - delete_container(account, name)
#       Delete the container record and every blob record it contains.
#       Must ignore absence.
#   - container_exists(account, name) -> bool
#   - list_containers(account) -> Sequence[ContainerRecord]
#
#   BLOBS:
#   - list_blobs(account, container, with_meta=False) -> Sequence[BlobRecord]
#       With with_meta=False implementations may leave size as None.
#   - put_blob(account, container, name, size=None)
#       Upsert the blob record. Must NOT insert or modify container
#       records. May be called repeatedly with the same arguments.
#   - blob_exists(account, container, name) -> bool
#   - delete_blob(account, container, name)
#       Must ignore absence.
#
#   ERRORS:
#   - Implementations should surface failures as StoreOperationError.
#     Callers in this package never retry or suppress them.
#
# ==============================================

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class ContainerRecord:
    """Saved metadata of a storage container."""
    account: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {"account": self.account, "name": self.name}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ContainerRecord":
        """Create from dictionary (deserialization)"""
        return ContainerRecord(account=data["account"], name=data["name"])


@dataclass(frozen=True)
class BlobRecord:
    """Saved metadata of a blob. Identity is (account, container, name)."""
    account: str
    container: str
    name: str
    size: Optional[int] = None  # None means unknown, never 0

    def __post_init__(self) -> None:
        if self.size is not None and self.size < 0:
            raise ValueError(f"Blob size cannot be negative: {self.size}")

    @property
    def key(self) -> tuple:
        return (self.account, self.container, self.name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "account": self.account,
            "container": self.container,
            "name": self.name,
            "size": self.size,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "BlobRecord":
        """Create from dictionary (deserialization)"""
        return BlobRecord(
            account=data["account"],
            container=data["container"],
            name=data["name"],
            size=data.get("size"),
        )


@runtime_checkable
class MetadataStore(Protocol):
    """Protocol every metadata index must implement."""

    def create_container(self, account: str, name: str) -> None:
        ...

    def create_container_if_not_exists(self, account: str, name: str) -> None:
        ...

    def delete_container(self, account: str, name: str) -> None:
        ...

    def container_exists(self, account: str, name: str) -> bool:
        ...

    def list_containers(self, account: str) -> Sequence[ContainerRecord]:
        ...

    def list_blobs(self, account: str, container: str, with_meta: bool = False) -> Sequence[BlobRecord]:
        ...

    def put_blob(self, account: str, container: str, name: str, size: Optional[int] = None) -> None:
        ...

    def blob_exists(self, account: str, container: str, name: str) -> bool:
        ...

    def delete_blob(self, account: str, container: str, name: str) -> None:
        ...

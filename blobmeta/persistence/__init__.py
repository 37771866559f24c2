# ==============================================
# PERSISTENCE
# ==============================================
#
# The metadata index contract. Implementations live outside
# this package.
#
# ==============================================

from .metadata_store import BlobRecord, ContainerRecord, MetadataStore

__all__ = ["BlobRecord", "ContainerRecord", "MetadataStore"]

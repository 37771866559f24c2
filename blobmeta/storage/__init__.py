# ==============================================
# STORAGE
# ==============================================
#
# Modules:
# --------
# - operation_router.py → turns one classified request into store calls
# - paging.py           → PagingSource contract for account listing
# - azure_source.py     → PagingSource on azure-storage-blob
#
# ==============================================

from .azure_source import AzurePagingSource
from .operation_router import OperationRouter, SizeHints
from .paging import BlobListItem, ContainerListItem, Page, PagingSource

__all__ = [
    "AzurePagingSource",
    "OperationRouter",
    "SizeHints",
    "BlobListItem",
    "ContainerListItem",
    "Page",
    "PagingSource",
]

# ==============================================
# DiscoveryTracker: User-facing Facade
# ==============================================
#
# PURPOSE:
#   The one class users interact with. Ties classification, routing
#   and bulk import together for one storage account.
#
# HOW IT CONNECTS THE PIECES:
#
#   requests.Session hook ─┐
#                          ├─► CompletedExchange ─► (2xx only)
#   azure raw_response_hook┘         │
#                                    ▼
#                  RequestDescriptor → AddressClassifier.classify()
#                                    │
#                                    ▼
#                  OperationRouter.route(method, classification, hints)
#                                    │
#                                    ▼
#                             MetadataStore
#
#   PagingSource ─► BulkImporter ─► MetadataStore     (import methods)
#
# CLASS: DiscoveryTracker
# -----------------------
#
#   Constructor:
#   ------------
#   - __init__(store, account_name, policy=ONLY_WRITES, source=None,
#              import_config=None, endpoint_suffix=".blob.core.windows.net")
#   - from_config(store, config=None)   (classmethod)
#
#   Live discovery:
#   ---------------
#   - handle_exchange(exchange) -> bool
#       Exception-transparent. Returns the router's "handled" verdict.
#   - observe_exchange(exchange) -> None
#       The interception boundary: never raises. Errors are logged
#       with traceback and dropped here only.
#   - requests_response_hook(response, *args, **kwargs) -> response
#   - azure_response_hook(pipeline_response) -> None
#   - attach(session) -> session
#
#   Data provider methods (read-through to the store):
#   --------------------------------------------------
#   - container_exists(name), list_containers()
#   - list_blobs(container, with_meta=False), blob_exists(container, name)
#
#   Import methods:
#   ---------------
#   - import_all_containers(cancel=None) -> ImportResult
#   - import_container(name, cancel=None) -> ImportResult
#
# ==============================================

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from blobmeta.analysis.classifier import BLOB_ENDPOINT_SUFFIX, AddressClassifier
from blobmeta.analysis.decision import DiscoveryPolicy, RequestDescriptor
from blobmeta.bulk_importer import BulkImporter, CancellationSignal, ImportResult
from blobmeta.config import AppConfig, ImportConfig, get_config
from blobmeta.errors import BlobMetaError
from blobmeta.normalization.exchange import CompletedExchange
from blobmeta.persistence.metadata_store import BlobRecord, ContainerRecord, MetadataStore
from blobmeta.storage.azure_source import AzurePagingSource
from blobmeta.storage.operation_router import OperationRouter, SizeHints
from blobmeta.storage.paging import PagingSource

if TYPE_CHECKING:
    import requests

logger = logging.getLogger(__name__)


class DiscoveryTracker:
    """
    Tracks Blob Service traffic of one account into a metadata store.
    """

    def __init__(
        self,
        store: MetadataStore,
        account_name: str,
        policy: DiscoveryPolicy = DiscoveryPolicy.ONLY_WRITES,
        source: Optional[PagingSource] = None,
        import_config: Optional[ImportConfig] = None,
        endpoint_suffix: str = BLOB_ENDPOINT_SUFFIX,
    ):
        """
        Args:
            store: metadata index to keep in sync
            account_name: storage account served by the data provider
                and import methods
            policy: which requests may discover resources
            source: paging source for imports; import methods raise without one
            import_config: page sizes for imports (defaults when None)
            endpoint_suffix: blob service host suffix, for non-public clouds
        """
        if store is None:
            raise ValueError("store is required")
        if not account_name:
            raise ValueError("account_name is required")
        self.store = store
        self.account_name = account_name
        self.policy = policy
        self.source = source
        self.endpoint_suffix = endpoint_suffix
        self.router = OperationRouter(store, policy)
        self._import_config = import_config or ImportConfig()

    @classmethod
    def from_config(cls, store: MetadataStore, config: Optional[AppConfig] = None) -> "DiscoveryTracker":
        """
        Build a tracker backed by Azure Storage from configuration.

        Args:
            store: metadata index to keep in sync
            config: application configuration. If None, loads from environment.

        Raises:
            BlobMetaError: if neither a connection string nor an account URL is set
        """
        config = config or get_config()
        azure = config.azure
        if not azure.is_configured:
            raise BlobMetaError(
                "Azure storage is not configured: set AZURE_STORAGE_CONNECTION_STRING "
                "or AZURE_STORAGE_ACCOUNT_URL"
            )
        if azure.connection_string:
            source = AzurePagingSource.from_connection_string(azure.connection_string)
        else:
            source = AzurePagingSource.from_account_url(azure.account_url)
        return cls(
            store=store,
            account_name=source.account_name,
            policy=config.discovery.policy,
            source=source,
            import_config=config.imports,
            endpoint_suffix=config.discovery.endpoint_suffix,
        )

    # ------------------------------------------
    # Live discovery
    # ------------------------------------------

    def handle_exchange(self, exchange: CompletedExchange) -> bool:
        """
        Route one completed exchange to the store.

        Only successful (2xx) exchanges are considered. Errors from the
        classifier, size hints or the store propagate.

        Returns:
            True if the exchange caused at least one store call
        """
        if not exchange.is_successful:
            return False
        descriptor = RequestDescriptor.parse(exchange.method, exchange.url)
        classification = AddressClassifier.from_descriptor(
            descriptor, endpoint_suffix=self.endpoint_suffix
        ).classify()
        hints = SizeHints.from_exchange(exchange)
        return self.router.route(descriptor.method, classification, hints)

    def observe_exchange(self, exchange: CompletedExchange) -> None:
        """Fire-and-forget variant of handle_exchange. Never raises."""
        self._observe(lambda: exchange)

    def requests_response_hook(self, response: "requests.Response", *args: Any, **kwargs: Any) -> "requests.Response":
        """`requests` response hook. Returns the response untouched."""
        self._observe(lambda: CompletedExchange.from_requests_response(response))
        return response

    def azure_response_hook(self, pipeline_response: Any) -> None:
        """Azure SDK `raw_response_hook`."""
        self._observe(lambda: CompletedExchange.from_pipeline_response(pipeline_response))

    def attach(self, session: "requests.Session") -> "requests.Session":
        """Register the response hook on a requests session and return it."""
        session.hooks["response"].append(self.requests_response_hook)
        return session

    def _observe(self, build: Callable[[], CompletedExchange]) -> None:
        try:
            exchange = build()
            handled = self.handle_exchange(exchange)
        except Exception:
            logger.exception("Failed to track blob service request")
            return
        logger.debug("%s %s handled=%s", exchange.method, exchange.url, handled)

    # ------------------------------------------
    # Data provider methods
    # ------------------------------------------

    def container_exists(self, name: str) -> bool:
        return self.store.container_exists(self.account_name, name)

    def list_containers(self) -> Sequence[ContainerRecord]:
        return self.store.list_containers(self.account_name)

    def list_blobs(self, container: str, with_meta: bool = False) -> Sequence[BlobRecord]:
        return self.store.list_blobs(self.account_name, container, with_meta)

    def blob_exists(self, container: str, name: str) -> bool:
        return self.store.blob_exists(self.account_name, container, name)

    # ------------------------------------------
    # Import methods
    # ------------------------------------------

    def import_all_containers(self, cancel: Optional[CancellationSignal] = None) -> ImportResult:
        return self._importer().import_all_containers(cancel)

    def import_container(self, name: str, cancel: Optional[CancellationSignal] = None) -> ImportResult:
        return self._importer().import_container(name, cancel)

    def _importer(self) -> BulkImporter:
        if self.source is None:
            raise BlobMetaError("No paging source configured, cannot import")
        return BulkImporter(
            store=self.store,
            source=self.source,
            account_name=self.account_name,
            container_page_size=self._import_config.container_page_size,
            blob_page_size=self._import_config.blob_page_size,
            endpoint_suffix=self.endpoint_suffix,
        )

# ==============================================
# Tests for Errors and Record Types
# ==============================================

import pytest

from blobmeta.errors import AddressFormatError, BlobMetaError, ImportCancelled, StoreOperationError
from blobmeta.persistence.metadata_store import BlobRecord, ContainerRecord, MetadataStore
from tests.conftest import RecordingMetadataStore


class TestErrorTaxonomy:

    def test_hierarchy(self):
        assert issubclass(AddressFormatError, BlobMetaError)
        assert issubclass(StoreOperationError, BlobMetaError)
        assert not issubclass(ImportCancelled, BlobMetaError)

    def test_store_error_message(self):
        error = StoreOperationError("put_blob", "connection reset")
        assert error.operation == "put_blob"
        assert str(error) == "put_blob failed: connection reset"

    def test_address_error_carries_url(self):
        error = AddressFormatError("bad target", url="host/path")
        assert error.url == "host/path"
        assert str(error) == "bad target"


class TestRecords:

    def test_blob_record_round_trip(self):
        record = BlobRecord("acct", "c", "dir/b", 12)
        assert BlobRecord.from_dict(record.to_dict()) == record
        assert record.key == ("acct", "c", "dir/b")

    def test_blob_record_without_size(self):
        record = BlobRecord.from_dict({"account": "acct", "container": "c", "name": "b"})
        assert record.size is None

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            BlobRecord("acct", "c", "b", -1)

    def test_container_record_round_trip(self):
        record = ContainerRecord("acct", "$root")
        assert ContainerRecord.from_dict(record.to_dict()) == record

    def test_recording_store_satisfies_protocol(self):
        assert isinstance(RecordingMetadataStore(), MetadataStore)

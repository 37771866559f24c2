# ==============================================
# Tests for Decision Data Classes
# ==============================================

import pytest

from blobmeta.analysis.decision import (
    DiscoveryPolicy,
    RequestDescriptor,
    SubOperation,
    parse_query,
)


class TestDiscoveryPolicy:
    """Decision table and parsing."""

    @pytest.mark.parametrize("policy, reads, ensures", [
        (DiscoveryPolicy.ONLY_WRITES, False, False),
        (DiscoveryPolicy.ALL_REQUESTS, True, False),
        (DiscoveryPolicy.ALL_REQUESTS_ENSURE_SCHEMA, True, True),
    ])
    def test_rules_table(self, policy, reads, ensures):
        assert policy.discovers_from_reads is reads
        assert policy.ensures_container is ensures

    def test_exactly_three_policies(self):
        assert len(list(DiscoveryPolicy)) == 3

    @pytest.mark.parametrize("text", ["all_requests", "ALL_REQUESTS", "  All_Requests "])
    def test_parse(self, text):
        assert DiscoveryPolicy.parse(text) is DiscoveryPolicy.ALL_REQUESTS

    def test_parse_unknown_lists_choices(self):
        with pytest.raises(ValueError) as excinfo:
            DiscoveryPolicy.parse("everything")
        assert "only_writes" in str(excinfo.value)


class TestRequestDescriptor:
    def test_parse_upper_cases_method(self):
        descriptor = RequestDescriptor.parse("put", "https://a.blob.core.windows.net/c/b?comp=block&blockid=x")
        assert descriptor.method == "PUT"
        assert descriptor.host == "a.blob.core.windows.net"
        assert descriptor.path == "/c/b"
        assert descriptor.query == {"comp": "block", "blockid": "x"}

    def test_missing_path_defaults_to_root(self):
        assert RequestDescriptor.parse("GET", "https://a.blob.core.windows.net").path == "/"


class TestParseQuery:
    def test_first_value_wins(self):
        assert parse_query("comp=list&comp=metadata") == {"comp": "list"}

    def test_blank_values_kept(self):
        assert parse_query("blockid=&comp=block") == {"blockid": "", "comp": "block"}

    def test_empty(self):
        assert parse_query("") == {}


class TestSubOperation:
    def test_unknown_comp_is_other(self):
        assert SubOperation.from_comp("tags") is SubOperation.OTHER

    def test_no_comp_is_none(self):
        assert SubOperation.from_comp(None) is SubOperation.NONE

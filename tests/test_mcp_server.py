"""Tests for the FastMCP tool wrappers, with the module client swapped for a fake."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

import cvent_soap.mcp.server as srv
from conftest import FakeTransport
from cvent_soap.data.cvent_api import CventClient, FieldSchema
from cvent_soap.data.schema_cache import SchemaCache
from cvent_soap.data.transport import SoapFault


def _call(tool, *args, **kwargs):
    """Call a decorated tool whether the decorator returned the function or a Tool."""
    fn = getattr(tool, "fn", tool)
    return fn(*args, **kwargs)


@pytest.fixture
def fake(monkeypatch) -> FakeTransport:
    transport = FakeTransport()
    monkeypatch.setattr(srv, "_client", CventClient(transport=transport))
    return transport


class TestTools:
    def test_list_object_types(self):
        assert "Registration" in _call(srv.list_object_types)

    def test_search_records(self, fake):
        fake.responses["Search"] = {"SearchResult": {"Id": ["E1", "E2"]}}
        result = _call(srv.search_records, "Event", [["EventCode", "=", "GALA"], ["EventStatus", "Active"]])
        assert "Found 2 record(s)" in result
        filters = fake.calls[0]["params"]["Search"]["CvSearchObject"]["Filter"]
        assert filters[1] == {"Field": "EventStatus", "Operator": "Equals", "Value": "Active"}

    def test_search_fault_returned_as_text(self, fake):
        fake.responses["Search"] = SoapFault("soap:Client", "INVALID_SEARCH_FILTER")
        assert _call(srv.search_records, "Event", []) == "Search failed: INVALID_SEARCH_FILTER"

    def test_search_malformed_filter(self, fake):
        result = _call(srv.search_records, "Event", [["a", "b", "c", "d"]])
        assert result.startswith("Search failed")
        assert fake.calls == []

    def test_retrieve_records(self, fake):
        fake.responses["Retrieve"] = {"RetrieveResult": {"CvObject": {"Id": "E1", "EventTitle": "Gala"}}}
        result = _call(srv.retrieve_records, "Event", ["E1"], ["EventTitle"])
        assert '"EventTitle": "Gala"' in result

    def test_describe_unknown_type(self, fake):
        result = _call(srv.describe_object_fields, "Widget")
        assert "Describe failed" in result
        assert "not a valid Cvent object" in result


class TestCachedFields:
    def test_reads_cache(self, tmp_path, monkeypatch):
        cache = SchemaCache(tmp_path)
        event = FieldSchema("Event", [{"Name": "Id"}])
        cache.store(event)
        cache.record_sync("https://c5.test", False, [event], {}, synced_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
        monkeypatch.setattr(srv, "CACHE", cache)
        result = _call(srv.get_cached_fields, "Event")
        assert "Event (1 fields)" in result
        assert "older than 24h" in result

    def test_not_cached(self, tmp_path, monkeypatch):
        monkeypatch.setattr(srv, "CACHE", SchemaCache(tmp_path))
        assert "not found in cache" in _call(srv.get_cached_fields, "Event")

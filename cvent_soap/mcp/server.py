"""
server.py — FastMCP server exposing Cvent query tools.

Thin wrappers only.  Every @mcp.tool is <= 10 lines.
All business logic lives in core/ and data/.
"""
from __future__ import annotations

import json

from fastmcp import FastMCP

from cvent_soap.core.errors import CventError
from cvent_soap.core.filters import Filter
from cvent_soap.core.objects import CvObjectType
from cvent_soap.data.schema_cache import SchemaCache
from cvent_soap.data.cvent_api import CventClient, connect
from cvent_soap.data.settings import cache_root, load_settings

CACHE = SchemaCache(cache_root())

# ── Session state ────────────────────────────────────────────────────────────

_client: CventClient | None = None


def _get_client() -> CventClient:
    """Log in on first use and keep the session for the server's lifetime."""
    global _client
    if _client is None:
        _client = connect(load_settings())
    return _client


mcp = FastMCP(
    name="Cvent Event Data",
    instructions=(
        "You have access to a Cvent account through its SOAP API. "
        "Use list_object_types to see which object types exist. "
        "ALWAYS call describe_object_fields (or get_cached_fields) before retrieving, "
        "field names are case-sensitive and custom fields vary per account. "
        "Use search_records to find ids, then retrieve_records to read fields."
    ),
)


@mcp.tool
def list_object_types() -> str:
    """List the Cvent object types that can be searched and retrieved."""
    return "\n".join(t.value for t in CvObjectType)


@mcp.tool
def describe_object_fields(object_type: str, include_custom: bool = True) -> str:
    """List field names of a Cvent object type from the live API."""
    try:
        names = _get_client().describe_object_fields(object_type, include_custom)
    except (CventError, RuntimeError) as e:
        return f"Describe failed: {_short(e)}"
    return f"{object_type} ({len(names)} fields):\n" + "\n".join(f"  {n}" for n in names)


@mcp.tool
def search_records(object_type: str, filters: list[list[str]], match_any: bool = False) -> str:
    """Find record ids. Each filter is [field, operator, value], e.g. ["EventCode", "=", "ABC"]."""
    try:
        predicates = [Filter(*f) for f in filters]
        ids = _get_client().search(object_type, predicates, "OrSearch" if match_any else "AndSearch")
    except (CventError, RuntimeError, TypeError) as e:
        return f"Search failed: {_short(e)}"
    return f"Found {len(ids)} record(s):\n" + "\n".join(f"  {i}" for i in ids)


@mcp.tool
def retrieve_records(object_type: str, ids: list[str], fields: list[str]) -> str:
    """Return the requested fields of records as JSON keyed by record id."""
    try:
        records = _get_client().retrieve(object_type, ids, fields)
    except (CventError, RuntimeError) as e:
        return f"Retrieve failed: {_short(e)}"
    return json.dumps(records, indent=2)


@mcp.tool
def get_cached_fields(object_type: str) -> str:
    """List field names of an object type from the local schema cache (no API call)."""
    schema = CACHE.find(object_type)
    if schema is None:
        return f"Object type '{object_type}' not found in cache."
    names = schema.names()
    stale = " (cache older than 24h)" if CACHE.is_stale() else ""
    return f"{schema.name} ({len(names)} fields){stale}:\n" + "\n".join(f"  {n}" for n in names)


# ── Helpers (not tools) ──────────────────────────────────────────────────────

def _short(error: Exception) -> str:
    """Vendor fault message when there is one, else the first line of the error."""
    message = getattr(error, "fault_message", "") or str(error)
    return message.splitlines()[0] if message else type(error).__name__


if __name__ == "__main__":
    mcp.run()

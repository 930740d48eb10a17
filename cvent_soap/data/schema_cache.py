"""
schema_cache.py — Offline store of Cvent DescribeCvObject results.

One ``<ObjectType>.json`` per described type plus a ``_sync.json`` record
of the last sync run: when it happened, against which server, the field
counts of every type it stored and the types that failed.  The sync script
writes it; the CLI and MCP server read it so field names can be looked up
without logging in.
"""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from cvent_soap.data.cvent_api import FieldSchema

SYNC_FILE = "_sync.json"
MAX_AGE = timedelta(hours=24)


class SchemaCache:
    """A directory of cached ``FieldSchema`` snapshots."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"SchemaCache({str(self.root)!r})"

    def object_types(self) -> list[str]:
        """Names of every cached object type, in file-name order."""
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob("*.json") if not p.name.startswith("_"))

    def find(self, object_type: str) -> FieldSchema | None:
        """Load *object_type*, matching its name case-insensitively."""
        wanted = object_type.lower()
        for name in self.object_types():
            if name.lower() == wanted:
                data = json.loads((self.root / f"{name}.json").read_text())
                return FieldSchema.from_dict(data)
        return None

    def store(self, schema: FieldSchema) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"{schema.name}.json"
        path.write_text(json.dumps(schema.as_dict(), indent=2, default=str))
        return path

    # ── Sync record ──────────────────────────────────────────────────────────

    def record_sync(
        self,
        endpoint: str,
        sandbox: bool,
        synced: list[FieldSchema],
        failed: dict[str, str],
        synced_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Write ``_sync.json`` for a finished run and return it.

        Args:
            endpoint: Server the schemas were described on.
            sandbox: Whether that was the sandbox account.
            synced: Schemas stored by this run.
            failed: Object type -> error text for types that could not be
                described.
        """
        record = {
            "synced_at": (synced_at or datetime.now(timezone.utc)).isoformat(),
            "endpoint": endpoint,
            "sandbox": sandbox,
            "objects": {
                s.name: {"fields": len(s.fields), "custom_fields": len(s.custom_fields)}
                for s in sorted(synced, key=lambda s: s.name.lower())
            },
            "failed": dict(failed),
        }
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / SYNC_FILE).write_text(json.dumps(record, indent=2))
        return record

    def last_sync(self) -> dict[str, Any] | None:
        path = self.root / SYNC_FILE
        if not path.exists():
            return None
        return json.loads(path.read_text())

    def age(self) -> timedelta | None:
        """Time since the last sync, or ``None`` if it is unknown."""
        record = self.last_sync() or {}
        try:
            synced_at = datetime.fromisoformat(record["synced_at"])
        except (KeyError, TypeError, ValueError):
            return None
        if synced_at.tzinfo is None:
            synced_at = synced_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) - synced_at

    def is_stale(self, max_age: timedelta = MAX_AGE) -> bool:
        age = self.age()
        return age is None or age > max_age

#!/usr/bin/env python3
"""
cvent_schema_sync.py — Sync Cvent object schemas to a local cache.

Logs in with the ``CVENT_*`` credentials (environment or .env), calls
DescribeCvObject for every known object type and writes one JSON file per
type, plus a _sync.json record of the run.

Usage:
    python scripts/cvent_schema_sync.py
    python scripts/cvent_schema_sync.py --objects Event --objects Registration
    python scripts/cvent_schema_sync.py --cache-dir ./schema-cache --sandbox
"""
from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import click

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cvent_soap.core.errors import CventError
from cvent_soap.core.objects import CvObjectType
from cvent_soap.data.cvent_api import connect
from cvent_soap.data.schema_cache import SchemaCache
from cvent_soap.data.settings import cache_root, load_settings


@click.command()
@click.option(
    "--cache-dir", default=None,
    help="Directory to write cached schema files. Defaults to $CVENT_SCHEMA_CACHE.",
)
@click.option(
    "--objects",
    multiple=True,
    help="Specific object types to sync. Omit to sync every known type.",
)
@click.option("--sandbox/--production", default=None,
              help="Override CVENT_SANDBOX.")
def sync(cache_dir: str | None, objects: tuple[str, ...], sandbox: bool | None) -> None:
    """Sync Cvent object schemas to a local JSON cache."""
    try:
        settings = load_settings()
    except RuntimeError as e:
        click.echo(f"ERROR: {e}", err=True)
        raise SystemExit(1)
    if sandbox is not None:
        settings = replace(settings, sandbox=sandbox)

    try:
        client = connect(settings)
    except CventError as e:
        click.echo(f"ERROR: {e}", err=True)
        raise SystemExit(1)

    cache = SchemaCache(cache_dir or cache_root())
    object_types = list(objects) or [t.value for t in CvObjectType]
    click.echo(f"Syncing {len(object_types)} object type(s) from {client.endpoint}...")

    synced = []
    failed: dict[str, str] = {}
    for i, name in enumerate(object_types, 1):
        try:
            click.echo(f"  [{i}/{len(object_types)}] {name}...", nl=False)
            schema = client.describe_object(name)
            cache.store(schema)
            synced.append(schema)
            click.echo(" OK")
        except CventError as e:
            failed[name] = getattr(e, "fault_message", "") or str(e)
            click.echo(f" FAILED ({type(e).__name__})")

    cache.record_sync(client.endpoint, settings.sandbox, synced, failed)

    click.echo(f"\nDone. Synced: {len(synced)}, Failed: {len(failed)}")
    if failed:
        click.echo("Failed objects:")
        for name, err in failed.items():
            click.echo(f"  {name}: {err}")


if __name__ == "__main__":
    sync()

#!/usr/bin/env python3
"""
cli.py — Click CLI for querying the Cvent SOAP API from a terminal.

Credentials come from CVENT_ACCOUNT_NUMBER / CVENT_USERNAME / CVENT_PASSWORD
(environment or .env).

Usage:
    python cli.py login
    python cli.py search Event --filter EventStartDate ">" "2026-01-01 00:00:00"
    python cli.py retrieve Event 7EE3FBC2-006F-4EBD-B4F2-16B4E7E719BE --field EventTitle
    python cli.py find Registration --filter EventId = <id> --field Email --field Answer
    python cli.py describe Registration --no-custom
    python cli.py objects
    python cli.py cached Registration
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace

import click

from cvent_soap.core.errors import CventError
from cvent_soap.core.filters import Filter
from cvent_soap.core.objects import CvObjectType
from cvent_soap.data.schema_cache import SchemaCache
from cvent_soap.data.cvent_api import CventClient, connect
from cvent_soap.data.settings import cache_root, load_settings


def _get_client(ctx: click.Context) -> CventClient:
    """Return the logged-in client, creating it on first use."""
    if ctx.obj.get("client") is None:
        settings = load_settings()
        if ctx.obj.get("sandbox") is not None:
            settings = replace(settings, sandbox=ctx.obj["sandbox"])
        ctx.obj["client"] = connect(settings)
    return ctx.obj["client"]


def _filters(raw: tuple[tuple[str, str, str], ...]) -> list[Filter]:
    return [Filter(field, op, value) for field, op, value in raw]


def _fail(message: str) -> None:
    click.echo(message, err=True)
    raise SystemExit(1)


@click.group()
@click.option("--sandbox/--production", default=None, help="Override CVENT_SANDBOX.")
@click.option("-v", "--verbose", is_flag=True, help="Log every API call.")
@click.pass_context
def cli(ctx: click.Context, sandbox: bool | None, verbose: bool) -> None:
    """Cvent SOAP API CLI."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("client", None)
    ctx.obj["sandbox"] = sandbox
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        # zeep logs whole envelopes at DEBUG, Login credentials included.
        logging.getLogger("zeep").setLevel(logging.INFO)


@cli.command()
@click.pass_context
def login(ctx: click.Context) -> None:
    """Check that the configured credentials can log in."""
    try:
        client = _get_client(ctx)
    except (CventError, RuntimeError) as e:
        _fail(str(e))
    click.echo(f"Logged in. Session endpoint: {client.endpoint}")


@cli.command()
@click.argument("object_type")
@click.option("--filter", "filters", type=(str, str, str), multiple=True,
              metavar="FIELD OP VALUE", help="Search predicate (repeatable).")
@click.option("--or", "use_or", is_flag=True, help="Match any filter instead of all.")
@click.pass_context
def search(ctx: click.Context, object_type: str, filters: tuple, use_or: bool) -> None:
    """Print the ids of records matching the filters."""
    try:
        ids = _get_client(ctx).search(
            object_type, _filters(filters), "OrSearch" if use_or else "AndSearch",
        )
    except (CventError, RuntimeError) as e:
        _fail(str(e))
    click.echo(f"Found {len(ids)} record(s):")
    for record_id in ids:
        click.echo(f"  {record_id}")


@cli.command()
@click.argument("object_type")
@click.argument("ids", nargs=-1, required=True)
@click.option("--field", "fields", multiple=True, help="Field to fetch (repeatable).")
@click.option("--answers-array", is_flag=True,
              help="Also return survey answers keyed by question.")
@click.pass_context
def retrieve(ctx: click.Context, object_type: str, ids: tuple[str, ...],
             fields: tuple[str, ...], answers_array: bool) -> None:
    """Print the requested fields of records as JSON."""
    try:
        records = _get_client(ctx).retrieve(
            object_type, list(ids), list(fields) or ["Id"], always_flat=not answers_array,
        )
    except (CventError, RuntimeError) as e:
        _fail(str(e))
    click.echo(json.dumps(records, indent=2))


@cli.command()
@click.argument("object_type")
@click.option("--filter", "filters", type=(str, str, str), multiple=True,
              metavar="FIELD OP VALUE", help="Search predicate (repeatable).")
@click.option("--field", "fields", multiple=True, help="Field to fetch (repeatable).")
@click.option("--or", "use_or", is_flag=True, help="Match any filter instead of all.")
@click.pass_context
def find(ctx: click.Context, object_type: str, filters: tuple,
         fields: tuple[str, ...], use_or: bool) -> None:
    """Search, then retrieve the requested fields of every match."""
    try:
        records = _get_client(ctx).search_and_retrieve(
            object_type,
            _filters(filters),
            list(fields) or ["Id"],
            "OrSearch" if use_or else "AndSearch",
        )
    except (CventError, RuntimeError) as e:
        _fail(str(e))
    click.echo(json.dumps(records, indent=2))


@cli.command()
@click.argument("object_type")
@click.option("--custom/--no-custom", default=True, help="Include custom fields.")
@click.pass_context
def describe(ctx: click.Context, object_type: str, custom: bool) -> None:
    """List the field names of an object type from the live API."""
    try:
        names = _get_client(ctx).describe_object_fields(object_type, include_custom=custom)
    except (CventError, RuntimeError) as e:
        _fail(str(e))
    click.echo(f"{object_type} ({len(names)} fields):")
    for name in names:
        click.echo(f"  {name}")


@cli.command()
def objects() -> None:
    """List the object types this client accepts."""
    for t in CvObjectType:
        click.echo(t.value)


@cli.command()
@click.argument("object_type")
@click.option("--cache-dir", default=None, help="Defaults to $CVENT_SCHEMA_CACHE.")
def cached(object_type: str, cache_dir: str | None) -> None:
    """List field names of an object type from the local schema cache."""
    schema = SchemaCache(cache_dir or cache_root()).find(object_type)
    if schema is None:
        _fail(f"Object type '{object_type}' not found in cache. Run scripts/cvent_schema_sync.py first.")
    names = schema.names()
    click.echo(f"{schema.name} ({len(names)} fields):")
    for name in names:
        click.echo(f"  {name}")


if __name__ == "__main__":
    cli()

"""Click commands over the unified accessor.

Read-only: list the kinds the cluster serves, fetch one object, list
objects, or force a discovery pass. Results go to stdout as JSON; accessor
errors go to stderr with exit status 1.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import click

from kubeguide.app import ComponentError, KubeGuideApp
from kubeguide.kube.errors import AccessorError
from kubeguide.kube.formatting import clean_object, descriptor_row, format_table
from kubeguide.models.resources import OutputShape, ResourceRef

_KIND_HEADERS = ("RESOURCE", "APIVERSION", "KIND", "SCOPE", "ORIGIN")


def _parse_ref(ctx: click.Context, param: click.Parameter, value: str) -> ResourceRef:
    try:
        return ResourceRef.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


def _run(ctx: click.Context, action: Callable[[KubeGuideApp], Awaitable[str]]) -> None:
    """Start the app, run *action*, print its output, always stop the app."""
    factory: Callable[[], KubeGuideApp] = ctx.obj.get("app_factory", KubeGuideApp)

    async def _main() -> str:
        app = factory()
        try:
            await app.start()
            return await action(app)
        finally:
            await app.stop()

    try:
        output = asyncio.run(_main())
    except (ComponentError, AccessorError) as exc:
        click.echo(f"error: {exc}", err=True)
        ctx.exit(1)
    else:
        click.echo(output)


def _dump(app: KubeGuideApp, result: Any, keep_managed_fields: bool) -> str:
    data = app.accessor.to_open_map(result)
    if not keep_managed_fields:
        data = clean_object(data)
    return json.dumps(data, indent=2, sort_keys=True, default=str)


_shape_option = click.option(
    "--shape",
    default=OutputShape.GENERIC.value,
    show_default=True,
    help="generic, typed, or a model class name such as V1ConfigMap.",
)
_namespace_option = click.option("-n", "--namespace", default="", help="Namespace (empty: cluster-wide).")
_managed_fields_option = click.option(
    "--keep-managed-fields",
    is_flag=True,
    default=False,
    help="Do not strip metadata.managedFields from the output.",
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Browse cluster resources, built-in and custom, through one accessor."""
    ctx.ensure_object(dict)


@cli.command()
@click.option("--custom", "custom_only", is_flag=True, default=False, help="Only custom resources.")
@click.pass_context
def kinds(ctx: click.Context, custom_only: bool) -> None:
    """List the resource kinds the cluster serves."""

    async def _action(app: KubeGuideApp) -> str:
        descriptors = await app.accessor.list_available(custom_only=custom_only)
        return format_table([descriptor_row(d) for d in descriptors], _KIND_HEADERS)

    _run(ctx, _action)


@cli.command()
@click.argument("ref", callback=_parse_ref)
@click.argument("name")
@_namespace_option
@_shape_option
@_managed_fields_option
@click.pass_context
def get(
    ctx: click.Context,
    ref: ResourceRef,
    name: str,
    namespace: str,
    shape: str,
    keep_managed_fields: bool,
) -> None:
    """Fetch one object, e.g. ``kubeguide get v1/pods web-0 -n default``."""

    async def _action(app: KubeGuideApp) -> str:
        result = await app.accessor.get(ref, name, namespace=namespace, shape=shape)
        return _dump(app, result, keep_managed_fields)

    _run(ctx, _action)


@cli.command(name="list")
@click.argument("ref", callback=_parse_ref)
@_namespace_option
@_shape_option
@_managed_fields_option
@click.pass_context
def list_objects(
    ctx: click.Context,
    ref: ResourceRef,
    namespace: str,
    shape: str,
    keep_managed_fields: bool,
) -> None:
    """List objects, e.g. ``kubeguide list example.io/v1/widgets -n team-a``."""

    async def _action(app: KubeGuideApp) -> str:
        result = await app.accessor.list(ref, namespace=namespace, shape=shape)
        return _dump(app, result, keep_managed_fields)

    _run(ctx, _action)


@cli.command()
@click.pass_context
def refresh(ctx: click.Context) -> None:
    """Force a discovery pass and report the registry size."""

    async def _action(app: KubeGuideApp) -> str:
        await app.accessor.registry.refresh()
        summary = app.accessor.registry.describe()
        return f"{summary['kinds']} kinds ({summary['custom']} custom)"

    _run(ctx, _action)

"""Main CLI entrypoint for cwc (cf-preview-cleaner)."""

import json
import logging
import sys
import time
from typing import List, NoReturn, Tuple

import click

from .. import __version__
from .. import output
from ..api import CloudflareAPIError, CloudflareClient, ErrorKind, ResourceKind, sanitize
from ..cleanup import NothingToDelete, delete_resources, require_deletable, select_all, select_ids
from ..config import ConfigError, load_credentials, load_settings
from ..prompts import choose_subset, confirm_deletion

READ_HINT = 'Make sure your API token has "Workers Scripts: Read" permission.'
EDIT_HINT = (
    'Make sure your API token has "Workers Scripts: Read" and '
    '"Workers Scripts: Edit" permissions.'
)


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, prog_name='cwc')
@click.pass_context
def main(ctx, verbose):
    """
    Safely delete Cloudflare Workers preview deployments and versions.

    Useful for cleaning up preview deployments after security vulnerabilities
    or when you need to remove old deployments.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


@main.group()
def versions():
    """Manage Worker versions (the snapshots preview URLs are bound to)."""


def _client(ctx) -> CloudflareClient:
    """Return the injected client or build one from the environment."""
    client = ctx.obj.get('client')
    if client is None:
        client = CloudflareClient(load_credentials())
        ctx.obj['client'] = client
        ctx.call_on_close(client.close)
    return client


def _fail(error: Exception, hint: str) -> NoReturn:
    """Report a setup failure and exit non-zero."""
    output.error(sanitize(str(error)))
    if isinstance(error, CloudflareAPIError) and error.kind is ErrorKind.PERMISSION_DENIED:
        output.info(hint)
    sys.exit(1)


def _run_list(ctx, kind: ResourceKind, script_name: str, output_json: bool) -> None:
    try:
        resources = _client(ctx).list_resources(kind, script_name)
    except (ConfigError, CloudflareAPIError) as e:
        _fail(e, READ_HINT)

    if not resources:
        output.warn(f'No {kind.plural} found for script "{script_name}".')
        return

    if output_json:
        click.echo(json.dumps([r.to_dict() for r in resources], indent=2))
        return

    click.echo(click.style(
        f'\n{kind.plural.capitalize()} for "{script_name}" ({len(resources)} total):',
        bold=True,
    ))
    output.print_resources(resources)

    deletable_count = len(resources) - 1
    if deletable_count > 0:
        command = 'cwc delete' if kind is ResourceKind.DEPLOYMENT else 'cwc versions delete'
        output.info(
            f'{deletable_count} {kind.noun}(s) can be deleted. '
            f'Use "{click.style(f"{command} {script_name}", fg="cyan")}" to remove them.'
        )
        if kind is ResourceKind.VERSION:
            output.info(click.style(
                'Deleting versions will permanently remove their preview URLs.', fg='yellow'
            ))
    else:
        output.info(f'Only the active {kind.noun} exists. Nothing to delete.')


def _select(resources: List, kind: ResourceKind, select_every: bool, ids: Tuple[str, ...]) -> List:
    if select_every:
        chosen = select_all(resources)
        output.info(f'Selected all {len(chosen)} deletable {kind.noun}(s).')
        return chosen
    if ids:
        return select_ids(resources, ids)
    return select_ids(resources, [r.id for r in choose_subset(resources, kind)])


def _print_report(report, kind: ResourceKind) -> None:
    if report.succeeded:
        output.success(f'Successfully deleted {len(report.succeeded)} {kind.noun}(s).')

    if report.failed:
        output.error(f'Failed to delete {len(report.failed)} {kind.noun}(s):')
        for failure in report.failed:
            click.echo(click.style(f'  - {output.short_id(failure.id)}: {failure.error}', fg='red'))

    output.newline()
    if report.ok:
        output.success(click.style(f'All selected {kind.plural} have been deleted.', fg='green'))
    else:
        output.warn(f'Completed with {len(report.failed)} error(s). Please retry failed deletions.')


def _run_delete(ctx, kind: ResourceKind, script_name: str, dry_run: bool, force: bool,
                select_every: bool, ids: Tuple[str, ...], output_json: bool = False) -> None:
    try:
        client = _client(ctx)
        resources = client.list_resources(kind, script_name)
    except (ConfigError, CloudflareAPIError) as e:
        _fail(e, EDIT_HINT)

    try:
        candidates = require_deletable(resources, kind.noun)
    except NothingToDelete as e:
        output.warn(e.reason)
        return

    output.info(
        f'Found {len(resources)} {kind.noun}(s), {len(candidates)} can be deleted.'
    )
    if kind is ResourceKind.VERSION:
        output.warn(click.style(
            'Deleting versions will permanently remove their preview URLs!', fg='yellow'
        ))
    output.newline()

    to_delete = _select(resources, kind, select_every, ids)
    if not to_delete:
        output.info(f'No {kind.plural} selected. Exiting.')
        return

    if dry_run:
        output.dry_run(f'The following {kind.plural} would be deleted:')
        output.newline()
        for resource in to_delete:
            click.echo(f'  - {output.describe(resource)}')
        output.newline()
        output.dry_run(f'Total: {len(to_delete)} {kind.noun}(s). No actual deletion performed.')
        return

    if not confirm_deletion(len(to_delete), kind, all_selected=select_every, force=force):
        output.info('Deletion cancelled.')
        return

    output.newline()

    def on_progress(completed: int, total: int, resource_id: str) -> None:
        click.echo(
            f'\rDeleting {kind.plural}... ({completed}/{total}) - {output.short_id(resource_id)}',
            nl=False,
        )

    report = delete_resources(
        client,
        kind,
        script_name,
        resources,
        [r.id for r in to_delete],
        settings=load_settings(),
        on_progress=None if output_json else on_progress,
        sleep=ctx.obj.get('sleep', time.sleep),
    )
    if output_json:
        click.echo(json.dumps(report.to_dict()))
    else:
        output.newline()
        _print_report(report, kind)
    if not report.ok:
        sys.exit(1)


def _delete_options(func):
    """Options shared by `delete` and `versions delete`."""
    func = click.option('--json', 'output_json', is_flag=True,
                        help='Print the deletion report as a single JSON line')(func)
    func = click.option('--id', 'ids', multiple=True,
                        help='Delete only this id (repeatable; skips interactive selection)')(func)
    func = click.option('--all', 'select_every', is_flag=True,
                        help='Delete all non-active entries')(func)
    func = click.option('-y', '--yes', is_flag=True,
                        help='Automatically answer yes to all prompts')(func)
    func = click.option('--force', is_flag=True, help='Skip confirmation prompt')(func)
    func = click.option('--dry-run', is_flag=True,
                        help='Show what would be deleted without actually deleting')(func)
    return func


@main.command('list')
@click.argument('script_name')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_context
def list_cmd(ctx, script_name, output_json):
    """List all deployments for a Worker script."""
    _run_list(ctx, ResourceKind.DEPLOYMENT, script_name, output_json)


@main.command('delete')
@click.argument('script_name')
@_delete_options
@click.pass_context
def delete_cmd(ctx, script_name, dry_run, force, yes, select_every, ids, output_json):
    """Select and delete preview deployments."""
    _run_delete(ctx, ResourceKind.DEPLOYMENT, script_name, dry_run, force or yes, select_every, ids,
                output_json)


@versions.command('list')
@click.argument('script_name')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.pass_context
def versions_list_cmd(ctx, script_name, output_json):
    """List all versions for a Worker script."""
    _run_list(ctx, ResourceKind.VERSION, script_name, output_json)


@versions.command('delete')
@click.argument('script_name')
@_delete_options
@click.pass_context
def versions_delete_cmd(ctx, script_name, dry_run, force, yes, select_every, ids, output_json):
    """Select and delete old versions and their preview URLs."""
    _run_delete(ctx, ResourceKind.VERSION, script_name, dry_run, force or yes, select_every, ids,
                output_json)


if __name__ == '__main__':
    main()

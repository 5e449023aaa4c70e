# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import click

from cdn2cia import orchestrator
from cdn2cia.constants import DEFAULT_TICKET_NAME, DEFAULT_TMD_NAME


# === BUILD ====================================================================


@click.command(
    'build',
    help='''
        Build a CIA archive from the TMD, the ticket and the contents found
        in SOURCE_DIR.

        The archive is written as NAME.cia in the output directory. If NAME
        is not provided, the title id read from the TMD is used.

        The archive is only put in place once fully written: a failed build
        leaves no partial archive behind.
    ''',
)
@click.argument(
    'source_dir',
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
)
@click.argument(
    'name',
    type=str,
    required=False,
)
@click.option(
    '-o', '--output-dir',
    type=click.Path(file_okay=False, dir_okay=True, writable=True),
    default='.',
    show_default=True,
    envvar='CDN2CIA_OUTPUT_DIR',
    help='Directory receiving the archive (created if missing).',
)
@click.option(
    '--tmd-name',
    type=str,
    default=DEFAULT_TMD_NAME,
    show_default=True,
    envvar='CDN2CIA_TMD_NAME',
    help='File name of the TMD in SOURCE_DIR.',
)
@click.option(
    '--ticket-name',
    type=str,
    default=DEFAULT_TICKET_NAME,
    show_default=True,
    envvar='CDN2CIA_TICKET_NAME',
    help='File name of the ticket in SOURCE_DIR.',
)
@click.option(
    '--verify/--no-verify',
    default=False,
    show_default=True,
    help='Check the TMD hash chain before building.',
)
@click.pass_context
def cli_build(
        ctx,
        source_dir: str,
        name: str | None,
        output_dir: str,
        tmd_name: str,
        ticket_name: str,
        verify: bool,
    ) -> None:
    """Builds a CIA archive from a directory of CDN files."""

    debug: bool = ctx.obj.get('debug', False) if ctx.obj else False

    path = orchestrator.build_archive(
        source_dir=source_dir,
        dest_dir=output_dir,
        dest_name=name,
        tmd_name=tmd_name,
        ticket_name=ticket_name,
        verify=verify,
        debug=debug,
    )
    print(path)

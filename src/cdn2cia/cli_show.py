# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import sys

import click
import yaml

from cdn2cia import orchestrator
from cdn2cia.constants import DEFAULT_TICKET_NAME, DEFAULT_TMD_NAME


# === SHOW =====================================================================

@click.command(
    'show',
    help='''
        Display the TMD and the ticket found in SOURCE_DIR.

        This includes the title ids, the signature types, and every content
        record of the TMD (id, index, type, size and hash).
    ''',
)
@click.argument(
    'source_dir',
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
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
def cli_show(source_dir: str, tmd_name: str, ticket_name: str) -> None:
    """Dumps the sources of an archive."""

    out = orchestrator.describe_sources(source_dir, tmd_name, ticket_name)
    if not out['title_ids_match']:
        print('Warning: TMD and ticket title ids differ', file=sys.stderr)
    print(f"{yaml.dump(out, indent=2, sort_keys=False)}")

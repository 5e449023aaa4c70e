#!/usr/bin/env python

# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import click

from cdn2cia.cli_build import cli_build
from cdn2cia.cli_inspect import cli_inspect
from cdn2cia.cli_self_test import cli_self_test
from cdn2cia.cli_show import cli_show


# === Main CLI =================================================================


@click.group(
    help='''
        Repackage a title downloaded from a content server into a CIA
        archive.

        The source directory holds the title metadata (TMD), the ticket
        (CETK) and one file per content, named after the content id in
        lowercase hex, for example:

        \b
          title/
            TMD
            CETK
            00000000
            00000001

        The CIA archive is laid out as a 0x2020-byte header followed by the
        certificate chain, the ticket, the TMD and the contents, each section
        but the contents aligned to 64 bytes.
    '''
)
@click.option(
    '--debug',
    is_flag=True,
    default=False,
    hidden=True,
    help='Print section offsets and sizes while writing archives'
)
@click.pass_context
def cli(ctx, debug: bool) -> None:
    """Command line tool for building CIA archives."""
    ctx.ensure_object(dict)  # Ensure ctx.obj is a dict
    ctx.obj['debug'] = debug  # Store --debug flag in context

cli.add_command(cli_build)
cli.add_command(cli_inspect)
cli.add_command(cli_self_test)
cli.add_command(cli_show)


if __name__ == "__main__":
    cli()

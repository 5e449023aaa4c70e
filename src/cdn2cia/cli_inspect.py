# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

import click
import yaml

from cdn2cia import orchestrator


# === INSPECT ==================================================================

@click.command(
    'inspect',
    help='''
        Display the header of a CIA archive.

        This includes the section sizes, the offsets derived from them, and
        the content indexes marked present in the content index bitmap.

        Useful for checking an archive before handing it to an installer.
    ''',
)
@click.argument(
    'archive',
    type=click.Path(exists=True, dir_okay=False),
)
def cli_inspect(archive: str) -> None:
    """Dumps the header of a CIA archive."""

    out = orchestrator.inspect_archive(archive)
    print(f"{yaml.dump(out, indent=2, sort_keys=False)}")

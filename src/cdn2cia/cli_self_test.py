#!/usr/bin/env python
# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Self-test command for cdn2cia.

Runs end-to-end builds on synthetic sources.
"""

import sys

import click

from cdn2cia.self_test import run_self_test


@click.command(name='self-test')
@click.option(
    '-n', '--count',
    type=int,
    default=12,
    show_default=True,
    help='Number of archives to build'
)
@click.option(
    '--seed',
    type=int,
    default=42,
    show_default=True,
    help='Seed of the pseudo-random source generator'
)
@click.pass_context
def cli_self_test(ctx, count: int, seed: int) -> None:
    """
    Run an end-to-end self-test on synthetic sources.

    Each build writes a pseudo-random TMD, ticket and set of contents to a
    temporary directory, builds an archive from them, and checks every
    section of the archive against its source. Every signature type is
    exercised.

    Example:
        cdn2cia self-test

        cdn2cia self-test -n 100 --seed 7
    """
    if count < 1:
        raise click.BadParameter('count must be at least 1')

    debug = ctx.obj.get('debug', False) if ctx.obj else False

    # Run self-test and exit with its status code
    exit_code = run_self_test(
        num_builds=count,
        seed=seed,
        debug=debug,
    )
    sys.exit(exit_code)

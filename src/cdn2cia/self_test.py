#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Self-test functionality for cdn2cia.

Builds archives from pseudo-random synthetic sources in a temporary
directory, then reads every archive back and checks it section by section.
"""

from __future__ import annotations

import random
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from cdn2cia import orchestrator
from cdn2cia.auxiliaries import ArchiveError, align
from cdn2cia.constants import (
    ARCHIVE_HEADER_SIZE,
    TICKET_CA_CERT_S,
    TICKET_CERT_S,
    TMD_CERT_S,
)
from cdn2cia.header import ArchiveHeader, build_content_index
from cdn2cia.signature import SignatureType
from cdn2cia.test_helpers import (
    SyntheticContent,
    make_ticket,
    make_tmd,
    random_contents,
    write_source_dir,
)


@dataclass
class SelfTestResult:
    passed: int = 0
    failures: list[str] = field(default_factory=list)


# === ARCHIVE CHECK ============================================================

def check_archive(
        archive: bytes,
        contents: list[SyntheticContent],
        signature_type: SignatureType,
        ticket_signature_type: SignatureType,
    ) -> list[str]:
    """Compare a built archive with the sources it was built from."""
    problems = []
    tmd = make_tmd(contents, signature_type)
    ticket = make_ticket(ticket_signature_type)

    header = ArchiveHeader.from_serialization(archive)
    if header.content_size != sum(content.size for content in contents):
        problems.append(f'content size is {header.content_size}')
    if header.content_index != build_content_index(
            content.index for content in contents):
        problems.append('content index bitmap differs')
    if header.tmd_offset + header.tmd_size > len(archive):
        problems.append('archive is shorter than its header says')
        return problems

    tmd_header_size = len(tmd) - TMD_CERT_S
    ticket_header_size = len(ticket) - TICKET_CERT_S - TICKET_CA_CERT_S
    expected_certs = ticket[ticket_header_size + TICKET_CERT_S:] \
        + ticket[ticket_header_size:ticket_header_size + TICKET_CERT_S] \
        + tmd[tmd_header_size:]
    start = align(ARCHIVE_HEADER_SIZE)
    if archive[start:start + header.cert_size] != expected_certs:
        problems.append('certificate chain differs')
    start = header.ticket_offset
    if archive[start:start + header.ticket_size] != ticket[:ticket_header_size]:
        problems.append('ticket differs')
    start = header.tmd_offset
    if archive[start:start + header.tmd_size] != tmd[:tmd_header_size]:
        problems.append('TMD differs')

    start = header.content_offset
    for content in contents:
        end = start + len(content.payload)
        if archive[start:end] != content.payload:
            problems.append(f'content {content.id_hex} differs')
        start = end
    if start != len(archive):
        problems.append(f'archive is {len(archive)} bytes, expected {start}')
    return problems


# === SELF TEST ================================================================

def run_self_test(
        num_builds: int = 12,
        seed: int = 42,
        debug: bool = False,
    ) -> int:
    """
    Run `num_builds` synthetic builds, return a process exit status.
    """
    rng = random.Random(seed)
    signature_types = list(SignatureType)
    result = SelfTestResult()

    print('=' * 70)
    print(f'cdn2cia self-test: {num_builds} builds, seed {seed}')
    print('=' * 70)

    with tempfile.TemporaryDirectory(prefix='cdn2cia-self-test-') as tmp:
        for build in range(num_builds):
            signature_type = signature_types[build % len(signature_types)]
            ticket_signature_type = rng.choice(signature_types)
            contents = random_contents(rng, rng.randint(1, 8))
            source_dir = Path(tmp) / f'source-{build}'
            write_source_dir(
                source_dir, contents, signature_type, ticket_signature_type)

            label = (f'build {build + 1:3d}: {len(contents)} contents,'
                     f' TMD {signature_type.name},'
                     f' ticket {ticket_signature_type.name}')
            try:
                path = orchestrator.build_archive(
                    source_dir, Path(tmp) / 'out', f'build-{build}',
                    verify=True, debug=debug)
                problems = check_archive(
                    path.read_bytes(), contents,
                    signature_type, ticket_signature_type)
            except ArchiveError as e:
                problems = [e.format_message()]

            if problems:
                result.failures.append(label)
                print(f'  ✗ {label}')
                for problem in problems:
                    print(f'      - {problem}')
            else:
                result.passed += 1
                print(f'  ✓ {label}')

    print()
    print(f'{result.passed} passed, {len(result.failures)} failed')
    if result.failures:
        print('Self-test FAILED', file=sys.stderr)
        return 1
    return 0

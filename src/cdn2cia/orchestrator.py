# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Orchestrator module for archive operations.

This module contains the business logic behind the CLI commands: reading the
source files, parsing them, and driving the header builder and the archive
writer. It provides a clean interface for both the CLI and testing.
"""

from __future__ import annotations

import sys
from pathlib import Path

from cdn2cia.archive import (
    archive_sections,
    resolve_content_paths,
    write_archive,
)
from cdn2cia.auxiliaries import IOFailureError, format_size
from cdn2cia.constants import (
    ARCHIVE_HEADER_SIZE,
    ARCHIVE_SUFFIX,
    DEFAULT_TICKET_NAME,
    DEFAULT_TMD_NAME,
)
from cdn2cia.crypto import Crypto
from cdn2cia.header import ArchiveHeader
from cdn2cia.ticket import Ticket
from cdn2cia.tmd import TitleMetadata


def find_source(source_dir: Path, name: str) -> Path:
    """
    Locate an input file, trying `name` and then its lowercase spelling.
    """
    for candidate in dict.fromkeys((name, name.lower())):
        path = source_dir / candidate
        if path.is_file():
            return path
    return source_dir / name


def read_source(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise IOFailureError('read', str(path), e.strerror or str(e)) from e


def load_sources(
    source_dir: Path,
    tmd_name: str = DEFAULT_TMD_NAME,
    ticket_name: str = DEFAULT_TICKET_NAME,
) -> tuple[TitleMetadata, Ticket]:
    """
    Read and parse the TMD and the ticket found in `source_dir`.

    Raises:
        IOFailureError: If either file cannot be read
        InvalidSignatureTypeError: If either file has an unknown signature
        TruncatedInputError: If either file is too short
    """
    tmd_path = find_source(source_dir, tmd_name)
    ticket_path = find_source(source_dir, ticket_name)
    tmd = TitleMetadata.from_serialization(
        read_source(tmd_path), source=str(tmd_path))
    ticket = Ticket.from_serialization(
        read_source(ticket_path), source=str(ticket_path))
    return tmd, ticket


def archive_path(dest_dir: Path, dest_name: str) -> Path:
    if not dest_name.lower().endswith(ARCHIVE_SUFFIX):
        dest_name += ARCHIVE_SUFFIX
    return dest_dir / dest_name


def build_archive(
    source_dir: str | Path,
    dest_dir: str | Path,
    dest_name: str | None = None,
    tmd_name: str = DEFAULT_TMD_NAME,
    ticket_name: str = DEFAULT_TICKET_NAME,
    verify: bool = False,
    debug: bool = False,
) -> Path:
    """
    Build an archive from the TMD, the ticket and the content files found in
    `source_dir`.

    Args:
        source_dir: Directory holding the TMD, the ticket and the contents
        dest_dir: Directory receiving the archive (created if missing)
        dest_name: Archive name, '.cia' is appended when missing;
            defaults to the title id
        tmd_name: File name of the TMD in source_dir
        ticket_name: File name of the ticket in source_dir
        verify: Whether to check the TMD hash chain first
        debug: Whether to print section offsets to stderr

    Returns:
        Path of the written archive

    Raises:
        ArchiveError: On the first failure; no archive is written then
    """
    source_dir = Path(source_dir)
    dest_dir = Path(dest_dir)

    print(f'Reading sources from {source_dir}...', file=sys.stderr)
    tmd, ticket = load_sources(source_dir, tmd_name, ticket_name)
    if tmd.title_id != ticket.title_id:
        print(
            f'Warning: TMD title id {tmd.title_id.hex()} differs from'
            f' ticket title id {ticket.title_id.hex()}', file=sys.stderr)

    if verify:
        print('Verifying TMD hashes...', file=sys.stderr)
        Crypto.verify_tmd(tmd, source=tmd_name)

    content_paths = resolve_content_paths(source_dir, tmd)
    header = ArchiveHeader.from_parts(tmd, ticket, source=tmd_name)

    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailureError(
            'create', str(dest_dir), e.strerror or str(e)) from e
    path = archive_path(dest_dir, dest_name or tmd.title_id.hex())

    print(
        f'Writing {path} ({len(tmd.contents)} contents,'
        f' {format_size(header.content_size)})', file=sys.stderr)
    sections = archive_sections(header, tmd, ticket, content_paths)
    write_archive(path, sections, debug=debug)
    return path


def read_header(path: str | Path) -> ArchiveHeader:
    path = Path(path)
    try:
        with open(path, 'rb') as f:
            raw = f.read(ARCHIVE_HEADER_SIZE)
    except OSError as e:
        raise IOFailureError('read', str(path), e.strerror or str(e)) from e
    return ArchiveHeader.from_serialization(raw, source=str(path))


def inspect_archive(path: str | Path) -> dict:
    """
    Describe an archive from its header.

    The returned dict holds the header fields, the section offsets derived
    from them, and the archive size on disk.
    """
    path = Path(path)
    header = read_header(path)
    out = {'archive': str(path)}
    out |= header.dict()
    out['file_size'] = path.stat().st_size
    return out


def describe_sources(
    source_dir: str | Path,
    tmd_name: str = DEFAULT_TMD_NAME,
    ticket_name: str = DEFAULT_TICKET_NAME,
) -> dict:
    tmd, ticket = load_sources(Path(source_dir), tmd_name, ticket_name)
    return {
        'tmd': tmd.dict(),
        'ticket': ticket.dict(),
        'title_ids_match': tmd.title_id == ticket.title_id,
    }

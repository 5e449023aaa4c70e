# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Archive assembly.

An archive is written as an ordered sequence of sections. Every section but
the content payloads is followed by zero padding up to the next 64-byte
boundary. Payloads are streamed from their files in fixed-size chunks.
"""

from __future__ import annotations

import os
import sys
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Iterable

from cdn2cia.auxiliaries import (
    IOFailureError,
    MissingContentFileError,
    padding,
)
from cdn2cia.constants import BUFFER_SIZE
from cdn2cia.header import ArchiveHeader
from cdn2cia.ticket import Ticket
from cdn2cia.tmd import ContentDescriptor, TitleMetadata


# === SECTIONS =================================================================

class Section(ABC):

    def __init__(self, name: str, padded: bool):
        self.name = name
        self.padded = padded

    @property
    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def write_to(self, out: BinaryIO) -> int:
        """Write the section body (without padding), return its length."""
        pass


class BytesSection(Section):

    def __init__(self, name: str, data: bytes, padded: bool = True):
        super().__init__(name, padded)
        self.data = data

    @property
    def size(self) -> int:
        return len(self.data)

    def write_to(self, out: BinaryIO) -> int:
        out.write(self.data)
        return len(self.data)


class FileSection(Section):

    def __init__(self, name: str, path: Path, padded: bool = False):
        super().__init__(name, padded)
        self.path = path

    @property
    def size(self) -> int:
        try:
            return self.path.stat().st_size
        except FileNotFoundError as e:
            raise MissingContentFileError(self.name, str(self.path)) from e
        except OSError as e:
            raise IOFailureError(
                'stat', str(self.path), e.strerror or str(e)) from e

    def read_error(self, e: OSError) -> IOFailureError:
        return IOFailureError('read', str(self.path), e.strerror or str(e))

    def write_to(self, out: BinaryIO) -> int:
        written = 0
        try:
            f = open(self.path, 'rb')
        except FileNotFoundError as e:
            raise MissingContentFileError(self.name, str(self.path)) from e
        except OSError as e:
            raise self.read_error(e) from e
        with f:
            while True:
                # Errors on `out` are left to the caller, which owns it
                try:
                    chunk = f.read(BUFFER_SIZE)
                except OSError as e:
                    raise self.read_error(e) from e
                if not chunk:
                    break
                out.write(chunk)
                written += len(chunk)
        return written


# === SECTION LAYOUT ===========================================================

def content_path(source_dir: Path, content: ContentDescriptor) -> Path:
    return source_dir / content.id_hex


def resolve_content_paths(
        source_dir: Path,
        tmd: TitleMetadata,
    ) -> list[Path]:
    """
    Locate the payload file of every content record, in record order.

    Raises MissingContentFileError for the first record with no payload.
    """
    paths = []
    for content in tmd.contents:
        path = content_path(source_dir, content)
        if not path.is_file():
            raise MissingContentFileError(content.id_hex, str(path))
        if path.stat().st_size != content.size:
            print(
                f'Warning: content {content.id_hex} is'
                f' {path.stat().st_size} bytes, TMD says {content.size}',
                file=sys.stderr)
        paths.append(path)
    return paths


def archive_sections(
        header: ArchiveHeader,
        tmd: TitleMetadata,
        ticket: Ticket,
        content_paths: Iterable[Path],
    ) -> list[Section]:
    sections: list[Section] = [
        BytesSection('header', header.serialize()),
        BytesSection('certs', ticket.ca_cert + ticket.cert + tmd.cert),
        BytesSection('ticket', ticket.header),
        BytesSection('tmd', tmd.header),
    ]
    for content, path in zip(tmd.contents, content_paths, strict=True):
        sections.append(FileSection(content.id_hex, path))
    return sections


# === ARCHIVE WRITER ===========================================================

def default_mode() -> int:
    """Mode of a newly created regular file under the current umask."""
    # The umask can only be read by setting it
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_sections(
        out: BinaryIO,
        sections: Iterable[Section],
        debug: bool = False,
    ) -> int:
    offset = 0
    for section in sections:
        length = section.write_to(out)
        if debug:
            print(
                f'[DEBUG] {section.name}: offset 0x{offset:x},'
                f' {length} bytes', file=sys.stderr)
        offset += length
        if section.padded:
            pad = padding(length)
            out.write(pad)
            offset += len(pad)
        if isinstance(section, FileSection):
            print('.', end='', file=sys.stderr, flush=True)
    return offset


def write_archive(
        path: Path,
        sections: Iterable[Section],
        debug: bool = False,
    ) -> int:
    """
    Write `sections` to `path`, return the archive size.

    The archive is written next to `path` under a temporary name and renamed
    over `path` only once every section has been written, so a failed build
    never leaves a partial archive behind.
    """
    path = Path(path)
    try:
        tmp = tempfile.NamedTemporaryFile(
            dir=path.parent,
            prefix=f'.{path.name}.',
            suffix='.part',
            delete=False,
        )
    except OSError as e:
        raise IOFailureError(
            'create', str(path), e.strerror or str(e)) from e

    tmp_path = Path(tmp.name)
    try:
        with tmp:
            size = write_sections(tmp, sections, debug)
        print('', file=sys.stderr)
        os.chmod(tmp_path, default_mode())
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise IOFailureError(
            'write', str(path), e.strerror or str(e)) from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return size

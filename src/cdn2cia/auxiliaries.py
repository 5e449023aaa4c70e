# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

import click

from cdn2cia.constants import ALIGNMENT


# === ERRORS ===================================================================

class ArchiveError(click.ClickException):
    """Base class for every failure of the archive pipeline."""
    pass


class InvalidSignatureTypeError(ArchiveError):

    def __init__(self, code: int, source: str = 'input'):
        self.code = code
        self.source = source
        super().__init__(
            f'{source}: unknown signature type 0x{code:08x}')


class TruncatedInputError(ArchiveError):

    def __init__(
            self,
            source: str,
            region: str,
            needed: int,
            available: int,
        ):
        self.source = source
        self.region = region
        self.needed = needed
        self.available = available
        super().__init__(
            f'{source} is truncated: {region} needs {needed} bytes,'
            f' only {available} available')


class MissingContentFileError(ArchiveError):

    def __init__(self, content_id: str, path: str):
        self.content_id = content_id
        self.path = path
        super().__init__(
            f'Content {content_id} is missing (looked for {path})')


class IOFailureError(ArchiveError):

    def __init__(self, action: str, path: str, reason: str):
        self.action = action
        self.path = path
        super().__init__(f'Cannot {action} {path}: {reason}')


class IntegrityError(ArchiveError):
    pass


# === BYTE READER ==============================================================

class ByteReader:
    """
    Bounds-checked view over an input buffer.

    Every read names the region it extracts, so that a short buffer is
    reported as a TruncatedInputError naming what is missing instead of
    silently yielding a short slice.
    """

    def __init__(self, data: bytes, source: str):
        self.data = bytes(data)
        self.source = source

    def __len__(self) -> int:
        return len(self.data)

    def take(self, offset: int, size: int, region: str) -> bytes:
        end = offset + size
        if offset < 0 or size < 0 or end > len(self.data):
            raise TruncatedInputError(
                self.source, region, end, len(self.data))
        return self.data[offset:end]

    def uint(
            self,
            offset: int,
            size: int,
            region: str,
            byteorder: str = 'big',
        ) -> int:
        return int.from_bytes(
            self.take(offset, size, region), byteorder=byteorder)


# === PADDING ==================================================================

def padding_size(length: int, alignment: int = ALIGNMENT) -> int:
    return (alignment - length % alignment) % alignment


def align(length: int, alignment: int = ALIGNMENT) -> int:
    return length + padding_size(length, alignment)


def padding(length: int, alignment: int = ALIGNMENT) -> bytes:
    return b'\x00' * padding_size(length, alignment)


# === FORMATTING ===============================================================

def format_size(size: int) -> str:
    for unit in ('B', 'KiB', 'MiB', 'GiB'):
        if size < 1024 or unit == 'GiB':
            break
        size /= 1024
    if unit == 'B':
        return f'{size} {unit}'
    return f'{size:.1f} {unit}'

# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from cdn2cia.auxiliaries import ArchiveError, ByteReader, align
from cdn2cia.constants import (
    ARCHIVE_HEADER_SIZE,
    ARCHIVE_META_SIZE,
    ARCHIVE_TYPE,
    ARCHIVE_VERSION,
    CONTENT_INDEX_BITMAP_S,
    HEADER_CERT_SIZE_O,
    HEADER_CERT_SIZE_S,
    HEADER_CONTENT_INDEX_O,
    HEADER_CONTENT_INDEX_S,
    HEADER_CONTENT_SIZE_O,
    HEADER_CONTENT_SIZE_S,
    HEADER_META_SIZE_O,
    HEADER_META_SIZE_S,
    HEADER_SIZE_O,
    HEADER_SIZE_S,
    HEADER_TICKET_SIZE_O,
    HEADER_TICKET_SIZE_S,
    HEADER_TMD_SIZE_O,
    HEADER_TMD_SIZE_S,
    HEADER_TYPE_O,
    HEADER_TYPE_S,
    HEADER_VERSION_O,
    HEADER_VERSION_S,
    MAX_CONTENT_INDEX,
)
from cdn2cia.ticket import Ticket
from cdn2cia.tmd import TitleMetadata


# === CONTENT INDEX BITMAP =====================================================

def build_content_index(indexes: Iterable[int]) -> bytes:
    """
    Build the content-index presence bitmap.

    Index `n` sets bit `7 - n % 8` of byte `n // 8`, so index 0 is the most
    significant bit of the first byte.
    """
    bitmap = bytearray(CONTENT_INDEX_BITMAP_S)
    for index in indexes:
        if not 0 <= index <= MAX_CONTENT_INDEX:
            raise ArchiveError(f'Content index {index} is out of range')
        bitmap[index >> 3] |= 0x80 >> (index & 7)
    return bytes(bitmap)


def content_indexes(bitmap: bytes) -> list[int]:
    return [
        position * 8 + bit
        for position, byte in enumerate(bitmap)
        if byte
        for bit in range(8)
        if byte & (0x80 >> bit)
    ]


# === ARCHIVE HEADER ===========================================================

@dataclass(frozen=True)
class ArchiveHeader:
    cert_size: int
    ticket_size: int
    tmd_size: int
    content_size: int
    content_index: bytes
    header_size: int = ARCHIVE_HEADER_SIZE
    type: int = ARCHIVE_TYPE
    version: int = ARCHIVE_VERSION
    meta_size: int = ARCHIVE_META_SIZE

    # --- ARCHIVE_HEADER FROM_PARTS --------------------------------------------

    @classmethod
    def from_parts(
            cls,
            tmd: TitleMetadata,
            ticket: Ticket,
            source: str = 'TMD',
        ) -> ArchiveHeader:
        content_size = sum(content.size for content in tmd.contents)
        if content_size >= 1 << (8 * HEADER_CONTENT_SIZE_S):
            raise ArchiveError(
                f'{source}: total content size {content_size} does not fit'
                f' in the {HEADER_CONTENT_SIZE_S}-byte header field')
        return cls(
            cert_size=len(ticket.ca_cert) + len(ticket.cert) + len(tmd.cert),
            ticket_size=len(ticket.header),
            tmd_size=len(tmd.header),
            content_size=content_size,
            content_index=build_content_index(
                content.index for content in tmd.contents),
        )

    # --- ARCHIVE_HEADER OFFSETS -----------------------------------------------

    @property
    def cert_offset(self) -> int:
        return align(self.header_size)

    @property
    def ticket_offset(self) -> int:
        return self.cert_offset + align(self.cert_size)

    @property
    def tmd_offset(self) -> int:
        return self.ticket_offset + align(self.ticket_size)

    @property
    def content_offset(self) -> int:
        return self.tmd_offset + align(self.tmd_size)

    @property
    def archive_size(self) -> int:
        return self.content_offset + self.content_size

    def has_content_index(self, index: int) -> bool:
        return bool(self.content_index[index >> 3] & (0x80 >> (index & 7)))

    def dict(self) -> dict:
        return {
            'header_size': self.header_size,
            'type': self.type,
            'version': self.version,
            'cert_size': self.cert_size,
            'ticket_size': self.ticket_size,
            'tmd_size': self.tmd_size,
            'meta_size': self.meta_size,
            'content_size': self.content_size,
            'content_indexes': content_indexes(self.content_index),
            'offsets': {
                'certs': self.cert_offset,
                'ticket': self.ticket_offset,
                'tmd': self.tmd_offset,
                'contents': self.content_offset,
                'end': self.archive_size,
            },
        }

    # --- ARCHIVE_HEADER SERIALIZE ---------------------------------------------

    def serialize(self) -> bytes:
        assert len(self.content_index) == HEADER_CONTENT_INDEX_S
        out = self.header_size.to_bytes(HEADER_SIZE_S, byteorder='little')
        out += self.type.to_bytes(HEADER_TYPE_S, byteorder='little')
        out += self.version.to_bytes(HEADER_VERSION_S, byteorder='little')
        out += self.cert_size.to_bytes(HEADER_CERT_SIZE_S, byteorder='little')
        out += self.ticket_size.to_bytes(
            HEADER_TICKET_SIZE_S, byteorder='little')
        out += self.tmd_size.to_bytes(HEADER_TMD_SIZE_S, byteorder='little')
        out += self.meta_size.to_bytes(HEADER_META_SIZE_S, byteorder='little')
        out += self.content_size.to_bytes(
            HEADER_CONTENT_SIZE_S, byteorder='little')
        out += self.content_index
        assert len(out) == ARCHIVE_HEADER_SIZE
        return out

    # --- ARCHIVE_HEADER FROM_SERIALIZATION ------------------------------------

    @classmethod
    def from_serialization(
            cls,
            serialization: bytes,
            source: str = 'archive',
        ) -> ArchiveHeader:
        reader = ByteReader(serialization, source)

        def field(offset: int, size: int, region: str) -> int:
            return reader.uint(offset, size, region, byteorder='little')

        header_size = field(HEADER_SIZE_O, HEADER_SIZE_S, 'header size')
        if header_size != ARCHIVE_HEADER_SIZE:
            raise ArchiveError(
                f'{source} has bad header size: 0x{header_size:x}')

        return cls(
            header_size=header_size,
            type=field(HEADER_TYPE_O, HEADER_TYPE_S, 'type'),
            version=field(HEADER_VERSION_O, HEADER_VERSION_S, 'version'),
            cert_size=field(
                HEADER_CERT_SIZE_O, HEADER_CERT_SIZE_S, 'certificate size'),
            ticket_size=field(
                HEADER_TICKET_SIZE_O, HEADER_TICKET_SIZE_S, 'ticket size'),
            tmd_size=field(HEADER_TMD_SIZE_O, HEADER_TMD_SIZE_S, 'TMD size'),
            meta_size=field(
                HEADER_META_SIZE_O, HEADER_META_SIZE_S, 'meta size'),
            content_size=field(
                HEADER_CONTENT_SIZE_O, HEADER_CONTENT_SIZE_S, 'content size'),
            content_index=reader.take(
                HEADER_CONTENT_INDEX_O, HEADER_CONTENT_INDEX_S,
                'content index'),
        )

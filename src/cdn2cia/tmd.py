# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

from dataclasses import dataclass

from cdn2cia.auxiliaries import ByteReader, format_size
from cdn2cia.constants import (
    CONTENT_HASH_O,
    CONTENT_HASH_S,
    CONTENT_ID_O,
    CONTENT_ID_S,
    CONTENT_INDEX_O,
    CONTENT_INDEX_S,
    CONTENT_RECORD_S,
    CONTENT_SIZE_O,
    CONTENT_SIZE_S,
    CONTENT_TYPE_O,
    CONTENT_TYPE_S,
    TMD_CERT_S,
    TMD_CONTENT_COUNT_O,
    TMD_CONTENT_COUNT_S,
    TMD_CONTENT_RECORDS_O,
    TMD_TITLE_ID_RO,
    TMD_TITLE_ID_S,
)
from cdn2cia.signature import SignatureType


# === CONTENT DESCRIPTOR =======================================================

@dataclass(frozen=True)
class ContentDescriptor:
    """One 0x30-byte content record of a TMD, kept as raw fields."""

    content_id: bytes
    content_index: bytes
    content_type: bytes
    content_size: bytes
    content_hash: bytes

    @property
    def id_hex(self) -> str:
        """Name of the payload file holding this content."""
        return self.content_id.hex()

    @property
    def index(self) -> int:
        return int.from_bytes(self.content_index, byteorder='big')

    @property
    def type(self) -> int:
        return int.from_bytes(self.content_type, byteorder='big')

    @property
    def size(self) -> int:
        return int.from_bytes(self.content_size, byteorder='big')

    @property
    def is_encrypted(self) -> bool:
        return bool(self.type & 0x0001)

    @property
    def is_optional(self) -> bool:
        return bool(self.type & 0x4000)

    def serialize(self) -> bytes:
        return (self.content_id
                + self.content_index
                + self.content_type
                + self.content_size
                + self.content_hash)

    def dict(self) -> dict:
        return {
            'content_id': self.id_hex,
            'content_index': self.index,
            'content_type': f'0x{self.type:04x}',
            'content_size': self.size,
            'content_size_human': format_size(self.size),
            'sha256': self.content_hash.hex(),
        }

    @classmethod
    def from_serialization(
            cls,
            reader: ByteReader,
            offset: int,
            position: int,
        ) -> ContentDescriptor:
        region = f'content record {position}'
        reader.take(offset, CONTENT_RECORD_S, region)
        return cls(
            content_id=reader.take(
                offset + CONTENT_ID_O, CONTENT_ID_S, region),
            content_index=reader.take(
                offset + CONTENT_INDEX_O, CONTENT_INDEX_S, region),
            content_type=reader.take(
                offset + CONTENT_TYPE_O, CONTENT_TYPE_S, region),
            content_size=reader.take(
                offset + CONTENT_SIZE_O, CONTENT_SIZE_S, region),
            content_hash=reader.take(
                offset + CONTENT_HASH_O, CONTENT_HASH_S, region),
        )


# === TITLE METADATA ===========================================================

@dataclass(frozen=True)
class TitleMetadata:
    signature_type: SignatureType
    title_id: bytes
    # TMD bytes from offset 0 through the end of the content records
    header: bytes
    contents: tuple[ContentDescriptor, ...]
    cert: bytes

    @property
    def cert_offset(self) -> int:
        return len(self.header)

    @property
    def content_size(self) -> int:
        return sum(content.size for content in self.contents)

    def dict(self) -> dict:
        return {
            'title_id': self.title_id.hex(),
            'signature_type': self.signature_type.name,
            'header_size': len(self.header),
            'cert_size': len(self.cert),
            'content_count': len(self.contents),
            'content_size': self.content_size,
            'contents': [content.dict() for content in self.contents],
        }

    @classmethod
    def from_serialization(
            cls,
            serialization: bytes,
            source: str = 'TMD',
        ) -> TitleMetadata:
        """
        Create a TitleMetadata from the raw bytes of a TMD file.

        The content count and the content records live at fixed offsets;
        only the title id moves with the size of the signature block.
        """
        reader = ByteReader(serialization, source)

        # --- SIGNATURE_TYPE

        signature_type = SignatureType.from_reader(reader)

        # --- CONTENT_COUNT

        content_count = reader.uint(
            TMD_CONTENT_COUNT_O, TMD_CONTENT_COUNT_S, 'content count')

        # --- CONTENT_RECORDS

        contents = []
        offset = TMD_CONTENT_RECORDS_O
        for position in range(content_count):
            contents.append(ContentDescriptor.from_serialization(
                reader, offset, position))
            offset += CONTENT_RECORD_S
        cert_offset = offset

        # --- TITLE_ID

        title_id = reader.take(
            signature_type.size + TMD_TITLE_ID_RO, TMD_TITLE_ID_S, 'title id')

        # --- CERT

        cert = reader.take(cert_offset, TMD_CERT_S, 'certificate')

        return cls(
            signature_type=signature_type,
            title_id=title_id,
            header=reader.take(0, cert_offset, 'header'),
            contents=tuple(contents),
            cert=cert,
        )

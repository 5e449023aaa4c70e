# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

from cryptography.hazmat.primitives import hashes

from cdn2cia.auxiliaries import ByteReader, IntegrityError
from cdn2cia.constants import (
    CONTENT_RECORD_S,
    INFO_RECORD_COMMAND_COUNT_O,
    INFO_RECORD_COMMAND_COUNT_S,
    INFO_RECORD_HASH_O,
    INFO_RECORD_HASH_S,
    INFO_RECORD_INDEX_OFFSET_O,
    INFO_RECORD_INDEX_OFFSET_S,
    TMD_CONTENT_RECORDS_O,
    TMD_INFO_RECORD_COUNT,
    TMD_INFO_RECORD_SIZE,
    TMD_INFO_RECORDS_HASH_O,
    TMD_INFO_RECORDS_HASH_S,
    TMD_INFO_RECORDS_O,
    TMD_INFO_RECORDS_S,
)
from cdn2cia.tmd import TitleMetadata


# === CRYPTO ===================================================================

class Crypto:

    # --- CRYPTO SHA256 --------------------------------------------------------

    @classmethod
    def sha256(cls, data: bytes) -> bytes:
        digest = hashes.Hash(hashes.SHA256())
        digest.update(data)
        return digest.finalize()


    # --- CRYPTO VERIFY_TMD ----------------------------------------------------

    @classmethod
    def verify_tmd(cls, tmd: TitleMetadata, source: str = 'TMD') -> None:
        '''
        Check the hash chain of a TMD.

        The TMD header holds the SHA-256 of the content info record table,
        and each info record holds the SHA-256 of the run of content records
        it covers. Raises IntegrityError on the first mismatch.
        '''
        reader = ByteReader(tmd.header, source)

        # --- INFO_RECORDS_HASH

        expected = reader.take(
            TMD_INFO_RECORDS_HASH_O, TMD_INFO_RECORDS_HASH_S,
            'info records hash')
        records = reader.take(
            TMD_INFO_RECORDS_O, TMD_INFO_RECORDS_S, 'info records')
        if cls.sha256(records) != expected:
            raise IntegrityError(
                f'{source}: content info records do not match their hash')

        # --- INFO_RECORDS

        content_count = len(tmd.contents)
        for position in range(TMD_INFO_RECORD_COUNT):
            offset = TMD_INFO_RECORDS_O + position * TMD_INFO_RECORD_SIZE
            command_count = reader.uint(
                offset + INFO_RECORD_COMMAND_COUNT_O,
                INFO_RECORD_COMMAND_COUNT_S,
                f'info record {position}')
            if command_count == 0:
                continue
            index_offset = reader.uint(
                offset + INFO_RECORD_INDEX_OFFSET_O,
                INFO_RECORD_INDEX_OFFSET_S,
                f'info record {position}')
            if index_offset + command_count > content_count:
                raise IntegrityError(
                    f'{source}: info record {position} covers content records'
                    f' {index_offset}..{index_offset + command_count - 1},'
                    f' only {content_count} present')
            covered = reader.take(
                TMD_CONTENT_RECORDS_O + index_offset * CONTENT_RECORD_S,
                command_count * CONTENT_RECORD_S,
                f'content records of info record {position}')
            expected = reader.take(
                offset + INFO_RECORD_HASH_O, INFO_RECORD_HASH_S,
                f'info record {position}')
            if cls.sha256(covered) != expected:
                raise IntegrityError(
                    f'{source}: content records'
                    f' {index_offset}..{index_offset + command_count - 1}'
                    f' do not match the hash of info record {position}')

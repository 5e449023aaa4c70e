#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

"""
Tests for TMD parsing, on synthetic TMDs built by cdn2cia.test_helpers.
"""

from __future__ import annotations

import pytest

from cdn2cia.auxiliaries import (
    IntegrityError,
    InvalidSignatureTypeError,
    TruncatedInputError,
)
from cdn2cia.crypto import Crypto
from cdn2cia.signature import SignatureType
from cdn2cia.test_helpers import (
    DEFAULT_TITLE_ID,
    TMD_CERT_FILL,
    SyntheticContent,
    make_tmd,
)
from cdn2cia.tmd import TitleMetadata


def sample_contents() -> list[SyntheticContent]:
    return [
        SyntheticContent(content_id=0x0000000a, index=0, payload=b'a' * 100),
        SyntheticContent(content_id=0x0000000b, index=1, payload=b'b' * 200),
        SyntheticContent(content_id=0x12345678, index=9, payload=b'c' * 16,
                         type=0x4001),
    ]


# === CONTENT RECORDS ==========================================================

def test_contents_are_decoded_in_order() -> None:
    """Every content record is decoded field by field, in TMD order."""
    contents = sample_contents()
    tmd = TitleMetadata.from_serialization(make_tmd(contents))

    assert len(tmd.contents) == len(contents)
    for parsed, expected in zip(tmd.contents, contents):
        assert parsed.id_hex == expected.id_hex
        assert parsed.index == expected.index
        assert parsed.type == expected.type
        assert parsed.size == len(expected.payload)
        assert parsed.content_hash == Crypto.sha256(expected.payload)
        assert parsed.serialize() == expected.record()

    assert [c.id_hex for c in tmd.contents] == [
        '0000000a', '0000000b', '12345678']
    assert tmd.contents[2].is_optional
    assert tmd.contents[2].is_encrypted
    assert tmd.content_size == 316


def test_content_records_are_read_at_fixed_offsets() -> None:
    """The records start at 0xB04 and are 0x30 bytes apart."""
    contents = sample_contents()
    raw = make_tmd(contents)
    tmd = TitleMetadata.from_serialization(raw)
    for position, content in enumerate(tmd.contents):
        start = 0xB04 + 0x30 * position
        assert raw[start:start + 4] == content.content_id
        assert raw[start + 8:start + 16] == content.content_size


def test_index_and_size_are_big_endian() -> None:
    contents = [SyntheticContent(
        content_id=1, index=0x0102, payload=b'', declared_size=0x0102030405)]
    tmd = TitleMetadata.from_serialization(make_tmd(contents))
    assert tmd.contents[0].content_index == b'\x01\x02'
    assert tmd.contents[0].index == 0x0102
    assert tmd.contents[0].content_size == bytes.fromhex('0000000102030405')
    assert tmd.contents[0].size == 0x0102030405


# === SIGNATURE DEPENDENT LAYOUT ===============================================

@pytest.mark.parametrize('signature_type', list(SignatureType))
def test_only_title_id_moves_with_signature(
        signature_type: SignatureType) -> None:
    """
    The title id follows the signature block; the content count and the
    content records do not move.
    """
    contents = sample_contents()
    title_id = bytes.fromhex('000400000ff3ff00')
    raw = make_tmd(contents, signature_type, title_id)
    tmd = TitleMetadata.from_serialization(raw)
    reference = TitleMetadata.from_serialization(make_tmd(contents))

    assert tmd.signature_type is signature_type
    assert tmd.title_id == title_id
    start = signature_type.size + 76
    assert raw[start:start + 8] == title_id
    assert tmd.contents == reference.contents
    assert tmd.cert_offset == 0xB04 + 3 * 0x30


def test_header_and_cert() -> None:
    contents = sample_contents()
    raw = make_tmd(contents)
    tmd = TitleMetadata.from_serialization(raw)

    assert tmd.title_id == DEFAULT_TITLE_ID
    assert tmd.header == raw[:0xB04 + 3 * 0x30]
    assert tmd.cert == bytes([TMD_CERT_FILL]) * 768
    assert len(tmd.header) + len(tmd.cert) == len(raw)


def test_tmd_without_contents() -> None:
    tmd = TitleMetadata.from_serialization(make_tmd([]))
    assert tmd.contents == ()
    assert len(tmd.header) == 0xB04
    assert len(tmd.cert) == 768


def test_trailing_bytes_are_ignored() -> None:
    raw = make_tmd(sample_contents())
    tmd = TitleMetadata.from_serialization(raw + b'\xff' * 100)
    assert tmd.cert == bytes([TMD_CERT_FILL]) * 768


# === ERRORS ===================================================================

def test_unknown_signature_type() -> None:
    raw = bytearray(make_tmd(sample_contents()))
    raw[0:4] = b'\x00\x01\x00\x09'
    with pytest.raises(InvalidSignatureTypeError):
        TitleMetadata.from_serialization(bytes(raw))


@pytest.mark.parametrize(
    'length, region',
    [
        (2, 'signature type'),
        (0x1E0, 'content count'),
        (0xB04 + 0x10, 'content record 0'),
        (0xB04 + 0x30 + 0x2F, 'content record 1'),
        (0xB04 + 3 * 0x30 + 767, 'certificate'),
    ],
)
def test_truncated_tmd_names_missing_region(length: int, region: str) -> None:
    raw = make_tmd(sample_contents())[:length]
    with pytest.raises(TruncatedInputError) as excinfo:
        TitleMetadata.from_serialization(raw, source='TMD')
    assert excinfo.value.region == region
    assert excinfo.value.available == length
    assert region in excinfo.value.format_message()


def test_count_larger_than_table() -> None:
    """A content count pointing past the buffer is a truncation."""
    raw = bytearray(make_tmd(sample_contents()))
    raw[0x1DE:0x1E2] = (1000).to_bytes(4, byteorder='big')
    with pytest.raises(TruncatedInputError) as excinfo:
        TitleMetadata.from_serialization(bytes(raw))
    assert excinfo.value.region.startswith('content record')


# === HASH CHAIN ===============================================================

def test_verify_accepts_consistent_tmd() -> None:
    tmd = TitleMetadata.from_serialization(make_tmd(sample_contents()))
    Crypto.verify_tmd(tmd)


def test_verify_detects_tampered_content_record() -> None:
    raw = bytearray(make_tmd(sample_contents()))
    raw[0xB04 + 0x30 + 8 + 7] ^= 0x01  # size of the second record
    tmd = TitleMetadata.from_serialization(bytes(raw))
    with pytest.raises(IntegrityError, match='info record 0'):
        Crypto.verify_tmd(tmd)


def test_verify_detects_tampered_info_records() -> None:
    raw = bytearray(make_tmd(sample_contents()))
    raw[0x204 + 0x24] = 0x01  # unused info record
    tmd = TitleMetadata.from_serialization(bytes(raw))
    with pytest.raises(IntegrityError, match='content info records'):
        Crypto.verify_tmd(tmd)


def test_verify_rejects_unhashed_tmd() -> None:
    raw = make_tmd(sample_contents(), with_hashes=False)
    tmd = TitleMetadata.from_serialization(raw)
    with pytest.raises(IntegrityError):
        Crypto.verify_tmd(tmd)

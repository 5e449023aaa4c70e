# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

from enum import Enum

from cdn2cia.auxiliaries import ByteReader, InvalidSignatureTypeError
from cdn2cia.constants import (
    ECDSA_SIGNATURE_SIZE,
    RSA_2048_SIGNATURE_SIZE,
    RSA_4096_SIGNATURE_SIZE,
    SIGNATURE_TYPE_O,
    SIGNATURE_TYPE_S,
)


# === SIGNATURE TYPE ===========================================================

class SignatureType(Enum):
    """
    Signature kinds that may prefix a TMD or a ticket.

    Each member carries its big-endian type code and the size in bytes of
    the whole signature block (type code, signature and padding).
    """

    RSA_4096_SHA1 = (0x00010000, RSA_4096_SIGNATURE_SIZE)
    RSA_2048_SHA1 = (0x00010001, RSA_2048_SIGNATURE_SIZE)
    ECDSA_SHA1 = (0x00010002, ECDSA_SIGNATURE_SIZE)
    RSA_4096_SHA256 = (0x00010003, RSA_4096_SIGNATURE_SIZE)
    RSA_2048_SHA256 = (0x00010004, RSA_2048_SIGNATURE_SIZE)
    ECDSA_SHA256 = (0x00010005, ECDSA_SIGNATURE_SIZE)

    def __init__(self, code: int, size: int):
        self.code = code
        self.size = size

    @classmethod
    def from_code(cls, code: int, source: str = 'input') -> SignatureType:
        for member in cls:
            if member.code == code:
                return member
        raise InvalidSignatureTypeError(code, source)

    @classmethod
    def from_reader(cls, reader: ByteReader) -> SignatureType:
        code = reader.uint(
            SIGNATURE_TYPE_O, SIGNATURE_TYPE_S, 'signature type')
        return cls.from_code(code, reader.source)


def signature_size(code: int) -> int:
    return SignatureType.from_code(code).size

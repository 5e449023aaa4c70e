# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

from dataclasses import dataclass

from cdn2cia.auxiliaries import ByteReader
from cdn2cia.constants import (
    TICKET_CA_CERT_S,
    TICKET_CERT_S,
    TICKET_HEADER_RS,
    TICKET_TITLE_ID_RO,
    TICKET_TITLE_ID_S,
)
from cdn2cia.signature import SignatureType


# === TICKET ===================================================================

@dataclass(frozen=True)
class Ticket:
    signature_type: SignatureType
    title_id: bytes
    header: bytes
    # Certificate of the ticket signer (XS), first after the header
    cert: bytes
    # Certificate of the CA, second after the header
    ca_cert: bytes

    def dict(self) -> dict:
        return {
            'title_id': self.title_id.hex(),
            'signature_type': self.signature_type.name,
            'header_size': len(self.header),
            'cert_size': len(self.cert),
            'ca_cert_size': len(self.ca_cert),
        }

    @classmethod
    def from_serialization(
            cls,
            serialization: bytes,
            source: str = 'CETK',
        ) -> Ticket:
        reader = ByteReader(serialization, source)

        signature_type = SignatureType.from_reader(reader)
        header_size = signature_type.size + TICKET_HEADER_RS

        header = reader.take(0, header_size, 'header')
        title_id = reader.take(
            signature_type.size + TICKET_TITLE_ID_RO, TICKET_TITLE_ID_S,
            'title id')
        cert = reader.take(header_size, TICKET_CERT_S, 'certificate')
        ca_cert = reader.take(
            header_size + TICKET_CERT_S, TICKET_CA_CERT_S, 'CA certificate')

        return cls(
            signature_type=signature_type,
            title_id=title_id,
            header=header,
            cert=cert,
            ca_cert=ca_cert,
        )

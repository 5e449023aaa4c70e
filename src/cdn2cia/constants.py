# SPDX-FileCopyrightText: 2025 Frederic Ruget <fred@atlant.is> (GitHub: @douzebis)
#
# SPDX-License-Identifier: MIT

DEFAULT_TMD_NAME = 'TMD'
DEFAULT_TICKET_NAME = 'CETK'
ARCHIVE_SUFFIX = '.cia'
ALIGNMENT = 64
# I/O chunk size used when streaming content payloads
BUFFER_SIZE = 0x10000


# === SIGNATURE ================================================================

SIGNATURE_TYPE_O = 0
SIGNATURE_TYPE_S = 4

# Signature block sizes include the type code and the trailing padding
RSA_4096_SIGNATURE_SIZE = 576
RSA_2048_SIGNATURE_SIZE = 320
ECDSA_SIGNATURE_SIZE = 128


# === TITLE METADATA (TMD) =====================================================

# Relative to the end of the signature block
TMD_TITLE_ID_RO = 76
TMD_TITLE_ID_S = 8

# Absolute, independent of the signature block size
TMD_CONTENT_COUNT_O = 0x1DE
# Read as one big-endian u32. Real TMDs hold a u16 count here followed by a
# u16 boot content index, a layout this reader does not follow.
TMD_CONTENT_COUNT_S = 4
TMD_INFO_RECORDS_HASH_O = 0x1E4
TMD_INFO_RECORDS_HASH_S = 32
TMD_INFO_RECORDS_O = 0x204
TMD_INFO_RECORD_COUNT = 64
TMD_INFO_RECORD_SIZE = 0x24
TMD_INFO_RECORDS_S = TMD_INFO_RECORD_COUNT * TMD_INFO_RECORD_SIZE
TMD_CONTENT_RECORDS_O = 0xB04
TMD_CERT_S = 768

# --- Content info record --------
#
# 0x00 -- index offset (u16 BE)
# 0x02 -- command count (u16 BE)
# 0x04 -- sha256 over `command count` content records
#
INFO_RECORD_INDEX_OFFSET_O = 0
INFO_RECORD_INDEX_OFFSET_S = 2
INFO_RECORD_COMMAND_COUNT_O = (INFO_RECORD_INDEX_OFFSET_O
                               + INFO_RECORD_INDEX_OFFSET_S)
INFO_RECORD_COMMAND_COUNT_S = 2
INFO_RECORD_HASH_O = INFO_RECORD_COMMAND_COUNT_O + INFO_RECORD_COMMAND_COUNT_S
INFO_RECORD_HASH_S = 32


# === CONTENT DESCRIPTOR =======================================================

CONTENT_ID_O = 0
CONTENT_ID_S = 4
CONTENT_INDEX_O = CONTENT_ID_O + CONTENT_ID_S
CONTENT_INDEX_S = 2
CONTENT_TYPE_O = CONTENT_INDEX_O + CONTENT_INDEX_S
CONTENT_TYPE_S = 2
CONTENT_SIZE_O = CONTENT_TYPE_O + CONTENT_TYPE_S
CONTENT_SIZE_S = 8
CONTENT_HASH_O = CONTENT_SIZE_O + CONTENT_SIZE_S
CONTENT_HASH_S = 32
CONTENT_RECORD_S = CONTENT_HASH_O + CONTENT_HASH_S
assert CONTENT_RECORD_S == 0x30


# === TICKET (CETK) ============================================================

# Relative to the end of the signature block
TICKET_TITLE_ID_RO = 156
TICKET_TITLE_ID_S = 8
TICKET_HEADER_RS = 528

TICKET_CERT_S = 768
TICKET_CA_CERT_S = 1024


# === ARCHIVE HEADER ===========================================================

ARCHIVE_HEADER_SIZE = 0x2020
ARCHIVE_TYPE = 0
ARCHIVE_VERSION = 0
ARCHIVE_META_SIZE = 0
CONTENT_INDEX_BITMAP_S = 8192
MAX_CONTENT_INDEX = CONTENT_INDEX_BITMAP_S * 8 - 1

HEADER_SIZE_O = 0
HEADER_SIZE_S = 4
HEADER_TYPE_O = HEADER_SIZE_O + HEADER_SIZE_S
HEADER_TYPE_S = 2
HEADER_VERSION_O = HEADER_TYPE_O + HEADER_TYPE_S
HEADER_VERSION_S = 2
HEADER_CERT_SIZE_O = HEADER_VERSION_O + HEADER_VERSION_S
HEADER_CERT_SIZE_S = 4
HEADER_TICKET_SIZE_O = HEADER_CERT_SIZE_O + HEADER_CERT_SIZE_S
HEADER_TICKET_SIZE_S = 4
HEADER_TMD_SIZE_O = HEADER_TICKET_SIZE_O + HEADER_TICKET_SIZE_S
HEADER_TMD_SIZE_S = 4
HEADER_META_SIZE_O = HEADER_TMD_SIZE_O + HEADER_TMD_SIZE_S
HEADER_META_SIZE_S = 4
HEADER_CONTENT_SIZE_O = HEADER_META_SIZE_O + HEADER_META_SIZE_S
HEADER_CONTENT_SIZE_S = 8
HEADER_CONTENT_INDEX_O = HEADER_CONTENT_SIZE_O + HEADER_CONTENT_SIZE_S
HEADER_CONTENT_INDEX_S = CONTENT_INDEX_BITMAP_S
assert HEADER_CONTENT_INDEX_O + HEADER_CONTENT_INDEX_S == ARCHIVE_HEADER_SIZE

# --- Archive layout -------------
#
# 0x0000 -- header (0x2020 bytes)
# 0x2020 -- padding to 0x2040
# 0x2040 -- certificate chain: CA (0x400), ticket signer (0x300),
#           TMD signer (0x300)
# ...... -- padding
# ...... -- ticket (signature + ticket body)
# ...... -- padding
# ...... -- TMD (signature + header + info records + content records)
# ...... -- padding
# ...... -- content payloads, back to back, in content record order
#
# --------------------------------

"""OTA metadata records kept in two alternating flash blocks."""

import struct
from dataclasses import astuple, dataclass, replace
from enum import IntEnum

META_A_ADDR = 0x000
META_B_ADDR = 0x080
META_SIZE = 128
META_MAGIC = 0x4F544131  # "OTA1"

_RECORD = struct.Struct("<9I")
_CRC = struct.Struct("<I")
BLOCK_SIZE = _RECORD.size + _CRC.size

_PRIME = 0x01000193
_MASK = 0xFFFFFFFF


class OtaState(IntEnum):
    IDLE = 0
    COMMIT_PENDING = 4
    BOOT_TEST = 5
    FAILED = 7


def checksum(data):
    """Return the 32-bit checksum used to protect a metadata record."""
    value = _MASK
    for byte in bytes(data):
        value = ((value ^ byte) * _PRIME) & _MASK
    return value


@dataclass
class OtaMetadata:
    magic: int = 0
    seq: int = 0
    active_slot: int = 0
    pending_slot: int = 0
    active_fw_version: int = 0
    pending_fw_version: int = 0
    min_allowed_version: int = 0
    ota_state: int = OtaState.IDLE
    boot_attempts: int = 0

    def pack(self):
        """Serialise the record as nine little-endian 32-bit words."""
        return _RECORD.pack(*(int(value) for value in astuple(self)))

    @classmethod
    def unpack(cls, raw):
        """Build a record from its packed form."""
        raw = bytes(raw)
        if len(raw) != _RECORD.size:
            raise ValueError(f"metadata record must be {_RECORD.size} bytes, got {len(raw)}")
        return cls(*_RECORD.unpack(raw))


class MetadataStore:
    """Reads and writes metadata in two flash blocks, newest sequence wins."""

    def __init__(self, flash):
        self.flash = flash

    def _read_block(self, addr):
        raw = self.flash.read(addr, BLOCK_SIZE)
        body, tail = raw[: _RECORD.size], raw[_RECORD.size :]
        meta = OtaMetadata.unpack(body)
        if meta.magic != META_MAGIC:
            return None
        (stored_crc,) = _CRC.unpack(tail)
        return meta if checksum(body) == stored_crc else None

    def load(self):
        """Return the newest valid record, or ``None`` if neither block is valid."""
        block_a = self._read_block(META_A_ADDR)
        block_b = self._read_block(META_B_ADDR)
        if block_a is None:
            return block_b
        if block_b is None or block_a.seq >= block_b.seq:
            return block_a
        return block_b

    def update(self, meta):
        """Store ``meta`` with the next sequence number and return what was written."""
        current = self.load()
        if current is None:
            seq, addr = 1, META_A_ADDR
        else:
            seq = (current.seq + 1) & _MASK
            addr = META_A_ADDR if current.seq & 1 else META_B_ADDR

        record = replace(meta, seq=seq, magic=META_MAGIC)
        body = record.pack()
        self.flash.erase(addr, META_SIZE)
        self.flash.write(addr, body + _CRC.pack(checksum(body)))
        return record
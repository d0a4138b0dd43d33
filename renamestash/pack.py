"""Pack index v2 lookup and packfile entry reading with delta resolution (read-only)."""

from __future__ import annotations

import struct
import zlib
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Tuple

from .constants import OBJ_BLOB, OBJ_COMMIT, OBJ_TAG, OBJ_TREE, SHA1_HEX_LEN
from .errors import IdxError, PackError

IDX_SIGNATURE = b"\xfftOc"
IDX_VERSION_V2 = 2
FANOUT_ENTRIES = 256 * 4
TRAILER_LEN = 20 + 20  # pack sha1 + idx sha1

PACK_SIGNATURE = b"PACK"
PACK_HEADER_LEN = 12  # PACK(4) + version(4) + num_objects(4)

OBJ_OFS_DELTA = 6
OBJ_REF_DELTA = 7

TYPE_NAMES = {
    1: OBJ_COMMIT,
    2: OBJ_TREE,
    3: OBJ_BLOB,
    4: OBJ_TAG,
}

# Loading a base by sha may need another pack; the store supplies this.
RawLoader = Callable[[str], bytes]


class PackIndex:
    """Pack index v2: sha -> pack offset."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        data = self.path.read_bytes()
        if len(data) < 8 + FANOUT_ENTRIES + TRAILER_LEN:
            raise IdxError(f"idx file too short: {self.path}")
        if data[:4] != IDX_SIGNATURE:
            raise IdxError(f"invalid idx signature: {self.path}")
        version = struct.unpack(">I", data[4:8])[0]
        if version != IDX_VERSION_V2:
            raise IdxError(f"unsupported idx version {version}: {self.path}")
        self._fanout = struct.unpack(">256I", data[8 : 8 + FANOUT_ENTRIES])
        n = self._fanout[255]
        names_start = 8 + FANOUT_ENTRIES
        offsets_start = names_start + n * 20 + n * 4  # skip names and crc32 table
        large_start = offsets_start + n * 4
        if len(data) < large_start + TRAILER_LEN:
            raise IdxError(f"idx truncated: {self.path}")
        self._names = data[names_start : names_start + n * 20]
        self._offsets = struct.unpack(f">{n}I", data[offsets_start:large_start])
        self._large = data[large_start : len(data) - TRAILER_LEN]
        self.count = n

    def _name_at(self, i: int) -> bytes:
        return self._names[i * 20 : i * 20 + 20]

    def lookup(self, sha1_hex: str) -> Optional[int]:
        """Return pack file offset for object, or None if not in this index."""
        if len(sha1_hex) != SHA1_HEX_LEN:
            return None
        sha_bin = bytes.fromhex(sha1_hex)
        first_byte = sha_bin[0]
        lo = self._fanout[first_byte - 1] if first_byte > 0 else 0
        hi = self._fanout[first_byte]
        while lo < hi:
            mid = (lo + hi) // 2
            name = self._name_at(mid)
            if name < sha_bin:
                lo = mid + 1
            elif name > sha_bin:
                hi = mid
            else:
                return self._offset_at(mid)
        return None

    def _offset_at(self, i: int) -> int:
        offset = self._offsets[i]
        if not offset & 0x80000000:
            return offset
        # MSB set: index into the 8-byte large offset table
        pos = (offset & 0x7FFFFFFF) * 8
        if pos + 8 > len(self._large):
            raise IdxError(f"idx large offset out of range: {self.path}")
        return struct.unpack(">Q", self._large[pos : pos + 8])[0]


def apply_delta(base: bytes, delta: bytes) -> bytes:
    """Apply git delta instructions to base content; return result content."""
    pos = 0

    def read_varint() -> int:
        nonlocal pos
        value = 0
        shift = 0
        while True:
            if pos >= len(delta):
                raise PackError("delta varint truncated")
            byte = delta[pos]
            pos += 1
            value |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                return value

    base_size = read_varint()
    result_size = read_varint()
    if base_size != len(base):
        raise PackError(f"delta base size mismatch: expected {base_size}, got {len(base)}")

    result = bytearray()
    while pos < len(delta):
        cmd = delta[pos]
        pos += 1
        if cmd & 0x80:
            # Copy from base: bits 0-3 select offset bytes, bits 4-6 size bytes
            offset = 0
            size = 0
            for i in range(4):
                if cmd & (1 << i):
                    offset |= delta[pos] << (8 * i)
                    pos += 1
            for i in range(3):
                if cmd & (1 << (4 + i)):
                    size |= delta[pos] << (8 * i)
                    pos += 1
            if size == 0:
                size = 0x10000
            if offset + size > len(base):
                raise PackError("delta copy out of range")
            result.extend(base[offset : offset + size])
        elif cmd:
            if pos + cmd > len(delta):
                raise PackError("delta insert truncated")
            result.extend(delta[pos : pos + cmd])
            pos += cmd
        else:
            raise PackError("delta opcode 0 is reserved")

    if len(result) != result_size:
        raise PackError(f"delta result size mismatch: expected {result_size}, got {len(result)}")
    return bytes(result)


class PackFile:
    """One .pack file paired with its .idx; reads single entries by offset."""

    def __init__(self, pack_path: Path, idx: PackIndex) -> None:
        self.path = Path(pack_path)
        self.idx = idx
        with open(self.path, "rb") as f:
            header = f.read(PACK_HEADER_LEN)
        if len(header) < PACK_HEADER_LEN or header[:4] != PACK_SIGNATURE:
            raise PackError(f"invalid pack signature: {self.path}")
        version = struct.unpack(">I", header[4:8])[0]
        if version not in (2, 3):
            raise PackError(f"unsupported pack version {version}: {self.path}")

    def contains(self, sha: str) -> bool:
        return self.idx.lookup(sha) is not None

    def read_raw(self, sha: str, load_base: RawLoader) -> Optional[bytes]:
        """Return raw object bytes (type size\\0content) or None if not in this pack."""
        offset = self.idx.lookup(sha)
        if offset is None:
            return None
        with open(self.path, "rb") as f:
            obj_type, content = self._read_at(f, offset, load_base)
        return f"{obj_type} {len(content)}\0".encode() + content

    def _read_at(self, f: BinaryIO, offset: int, load_base: RawLoader) -> Tuple[str, bytes]:
        """Resolve the entry at offset, following the delta chain to its base."""
        deltas: List[bytes] = []
        while True:
            type_num, data_offset, base_offset, base_sha = _read_entry_header(f, offset)
            data = _inflate(f, data_offset)
            if type_num in TYPE_NAMES:
                obj_type, content = TYPE_NAMES[type_num], data
                break
            deltas.append(data)
            if type_num == OBJ_OFS_DELTA:
                offset = base_offset  # type: ignore[assignment]
                continue
            if type_num == OBJ_REF_DELTA:
                base_raw = load_base(base_sha)  # type: ignore[arg-type]
                null = base_raw.find(b"\0")
                if null == -1:
                    raise PackError("invalid base object")
                obj_type = base_raw[:null].split(b" ", 1)[0].decode()
                content = base_raw[null + 1 :]
                break
            raise PackError(f"unsupported pack object type {type_num}")
        for delta in reversed(deltas):
            content = apply_delta(content, delta)
        return obj_type, content


def _read_entry_header(f: BinaryIO, offset: int) -> Tuple[int, int, Optional[int], Optional[str]]:
    """Return (type, data_offset, ofs_delta_base_offset, ref_delta_base_sha)."""
    f.seek(offset)
    buf = f.read(32)
    if not buf:
        raise PackError(f"entry header truncated at {offset}")
    byte = buf[0]
    type_num = (byte >> 4) & 0x07
    pos = 1
    while byte & 0x80:
        if pos >= len(buf):
            raise PackError("size encoding truncated")
        byte = buf[pos]
        pos += 1
    base_offset: Optional[int] = None
    base_sha: Optional[str] = None
    if type_num == OBJ_OFS_DELTA:
        # Big-endian base-128 with an implicit +1 per continuation byte
        byte = buf[pos]
        pos += 1
        distance = byte & 0x7F
        while byte & 0x80:
            if pos >= len(buf):
                raise PackError("ofs-delta offset truncated")
            byte = buf[pos]
            pos += 1
            distance = ((distance + 1) << 7) | (byte & 0x7F)
        base_offset = offset - distance
        if base_offset < PACK_HEADER_LEN:
            raise PackError(f"ofs-delta base out of range at {offset}")
    elif type_num == OBJ_REF_DELTA:
        if pos + 20 > len(buf):
            raise PackError("ref-delta base id truncated")
        base_sha = buf[pos : pos + 20].hex()
        pos += 20
    return type_num, offset + pos, base_offset, base_sha


def _inflate(f: BinaryIO, offset: int) -> bytes:
    """Decompress the zlib stream starting at offset."""
    f.seek(offset)
    decompressor = zlib.decompressobj()
    chunks: List[bytes] = []
    while not decompressor.eof:
        chunk = f.read(65536)
        if not chunk:
            raise PackError(f"zlib stream truncated at {offset}")
        chunks.append(decompressor.decompress(chunk))
    return b"".join(chunks)

"""Binary reader/writer pair for the project file.

All values are little-endian. Strings are a u32 byte length followed by
UTF-8 bytes; booleans are a single 0/1 byte.
"""
from __future__ import annotations

import struct
from typing import BinaryIO

from smos.core.errors import ProjectFormatError

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")

MAX_STRING_BYTES = 1 << 20


class ProjectWriter:
    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write_u8(self, value: int) -> None:
        self._stream.write(_U8.pack(value))

    def write_u16(self, value: int) -> None:
        self._stream.write(_U16.pack(value))

    def write_i32(self, value: int) -> None:
        self._stream.write(_I32.pack(value))

    def write_bool(self, value: bool) -> None:
        self.write_u8(1 if value else 0)

    def write_str(self, value: str) -> None:
        try:
            data = value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ProjectFormatError("String cannot be encoded as UTF-8") from exc
        if len(data) > MAX_STRING_BYTES:
            raise ProjectFormatError(f"String length {len(data)} exceeds limit")
        self._stream.write(_U32.pack(len(data)))
        self._stream.write(data)


class ProjectReader:
    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read_u8(self) -> int:
        return _U8.unpack(self._read_exact(_U8.size))[0]

    def read_u16(self) -> int:
        return _U16.unpack(self._read_exact(_U16.size))[0]

    def read_i32(self) -> int:
        return _I32.unpack(self._read_exact(_I32.size))[0]

    def read_bool(self) -> bool:
        raw = self.read_u8()
        if raw not in (0, 1):
            raise ProjectFormatError(f"Invalid boolean byte: {raw:#04x}")
        return raw == 1

    def read_str(self) -> str:
        length = _U32.unpack(self._read_exact(_U32.size))[0]
        if length > MAX_STRING_BYTES:
            raise ProjectFormatError(f"String length {length} exceeds limit")
        data = self._read_exact(length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProjectFormatError("String is not valid UTF-8") from exc

    def expect_end(self) -> None:
        if self._stream.read(1):
            raise ProjectFormatError("Unexpected trailing data after last field")

    def _read_exact(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) != size:
            raise ProjectFormatError(f"Unexpected end of stream: wanted {size} bytes, got {len(data)}")
        return data


__all__ = ["ProjectReader", "ProjectWriter", "MAX_STRING_BYTES"]

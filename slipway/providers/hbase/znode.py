"""Decoding of the HBase master znode.

HBase stores the active master as a protobuf ``Master`` message wrapped in a
small envelope::

    0xFF | meta length (4 bytes, big endian) | meta | "PBUF" | Master

``Master.master`` (field 1) is a ``ServerName`` whose fields 1 and 2 are the
host name and port. Old clusters store plain ``host,port,startcode`` text
instead, which is also accepted.
"""

from __future__ import annotations

from collections.abc import Iterator

from slipway.coordination import decode_text_address
from slipway.spec import HostAndPort

_META_MARKER = 0xFF
_PB_MAGIC = b"PBUF"


def decode_master_address(data: bytes) -> HostAndPort | None:
    payload = data
    if payload and payload[0] == _META_MARKER:
        if len(payload) < 5:
            return None
        meta_length = int.from_bytes(payload[1:5], "big")
        payload = payload[5 + meta_length :]
    if payload.startswith(_PB_MAGIC):
        try:
            return _decode_master(payload[len(_PB_MAGIC) :])
        except (ValueError, UnicodeDecodeError):
            return None
    return decode_text_address(payload)


def _decode_master(buf: bytes) -> HostAndPort | None:
    server = next((value for number, value in _fields(buf) if number == 1), None)
    if not isinstance(server, bytes):
        return None

    host: str | None = None
    port: int | None = None
    for number, value in _fields(server):
        match number, value:
            case 1, bytes():
                host = value.decode("utf-8")
            case 2, int():
                port = value
    if not host or port is None:
        return None
    return HostAndPort(host, port)


def _varint(buf: bytes, pos: int) -> tuple[int, int]:
    result = shift = 0
    while True:
        if pos >= len(buf):
            raise ValueError("truncated varint")
        byte = buf[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7


def _fields(buf: bytes) -> Iterator[tuple[int, int | bytes]]:
    pos = 0
    while pos < len(buf):
        key, pos = _varint(buf, pos)
        number, wire_type = key >> 3, key & 0x07
        match wire_type:
            case 0:
                value, pos = _varint(buf, pos)
                yield number, value
                continue
            case 1:
                size = 8
            case 2:
                size, pos = _varint(buf, pos)
            case 5:
                size = 4
            case _:
                raise ValueError(f"unsupported wire type {wire_type}")
        if pos + size > len(buf):
            raise ValueError("truncated field")
        yield number, buf[pos : pos + size]
        pos += size

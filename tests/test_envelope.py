# tests/test_envelope.py
"""
压缩信封测试: 读到 ".\r\n" 为止，解压后逐行读取。
"""

import gzip
import zlib

import pytest

from nntp_core.exceptions import DecompressionError, TransportError
from nntp_core.framing import (
    LineFramer,
    open_compressed_stream,
    read_compressed_envelope,
)

LINES = [
    "1\tFirst post\talice@example.com",
    "..leading dots stay",
    ".",
    "3\tUnicode 主题\tcarol@example.com",
]


class ChunkedSource:
    """按预设分块返回数据的字节源，用于模拟任意的网络读取边界。"""

    def __init__(self, chunks, error: Exception | None = None):
        self.chunks = list(chunks)
        self.error = error
        self.reads = 0

    def read1(self, size=-1):
        self.reads += 1
        if self.chunks:
            return self.chunks.pop(0)
        if self.error is not None:
            raise self.error
        return b""


def _wire(lines, compress=zlib.compress) -> tuple[bytes, bytes]:
    text = "".join(line + "\r\n" for line in lines).encode("utf-8")
    payload = compress(text)
    return payload, payload + b".\r\n"


def _split(data: bytes, size: int):
    return [data[i : i + size] for i in range(0, len(data), size)]


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 5, 16, 1024])
def test_round_trip(chunk_size):
    lines = [line for line in LINES if line != "."]
    _, wire = _wire(lines)
    stream = open_compressed_stream(ChunkedSource(_split(wire, chunk_size)))
    framer = LineFramer(stream, stuffed=False, eof_is_end=True)
    assert list(framer) == lines
    assert framer.done


def test_envelope_strips_terminator_split_across_reads():
    payload, _ = _wire(["hello"])
    source = ChunkedSource([payload + b".", b"\r", b"\n", b"never read"])
    envelope = read_compressed_envelope(source)
    assert envelope.read() == payload
    assert source.chunks == [b"never read"]


def test_envelope_is_rewound():
    payload, wire = _wire(["hello"])
    envelope = read_compressed_envelope(ChunkedSource([wire]))
    assert envelope.tell() == 0
    assert envelope.getvalue() == payload


def test_envelope_eof_before_terminator():
    payload, _ = _wire(["hello"])
    with pytest.raises(TransportError):
        read_compressed_envelope(ChunkedSource([payload]))


def test_envelope_read_error_is_transport_error():
    source = ChunkedSource([b"x\x9c"], error=ConnectionResetError("reset"))
    with pytest.raises(TransportError, match="reset"):
        read_compressed_envelope(source)


def test_envelope_transport_error_passes_through():
    source = ChunkedSource([], error=TransportError("接收超时"))
    with pytest.raises(TransportError, match="接收超时"):
        read_compressed_envelope(source)


def test_invalid_stream_fails_on_open():
    with pytest.raises(DecompressionError):
        open_compressed_stream(ChunkedSource([b"definitely not zlib.\r\n"]))


def test_truncated_stream_fails_while_reading():
    lines = [f"{i}\tsubject {i}" for i in range(200)]
    payload, _ = _wire(lines)
    # 去掉 4 字节的 Adler-32 校验尾
    wire = payload[:-4] + b".\r\n"
    stream = open_compressed_stream(ChunkedSource(_split(wire, 64)))
    framer = LineFramer(stream, stuffed=False, eof_is_end=True)
    with pytest.raises(DecompressionError):
        list(framer)


def test_gzip_header_is_accepted():
    lines = ["1\tgzip framed"]
    _, wire = _wire(lines, compress=gzip.compress)
    stream = open_compressed_stream(ChunkedSource([wire]))
    assert list(LineFramer(stream, stuffed=False, eof_is_end=True)) == lines


def test_compressed_lines_are_not_unstuffed_and_marker_line_ends():
    _, wire = _wire(LINES)
    stream = open_compressed_stream(ChunkedSource(_split(wire, 7)))
    framer = LineFramer(stream, stuffed=False, eof_is_end=True)
    assert list(framer) == LINES[:2]
    assert framer.done


def test_empty_payload():
    _, wire = _wire([])
    stream = open_compressed_stream(ChunkedSource([wire]))
    assert list(LineFramer(stream, stuffed=False, eof_is_end=True)) == []

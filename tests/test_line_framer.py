# tests/test_line_framer.py
"""
LineFramer 测试: 结束行、dot-stuffing、截断与误用。
"""

import io

import pytest

from nntp_core.exceptions import (
    ProtocolViolation,
    TransportError,
    UnexpectedEndOfResponse,
)
from nntp_core.framing import LineFramer


def _framer(data: bytes, **kwargs) -> LineFramer:
    return LineFramer(io.BytesIO(data), **kwargs)


class BrokenSource:
    def readline(self, size=-1):
        raise TimeoutError("timed out")


def test_reads_until_marker_line():
    framer = _framer(b"first\r\nsecond\r\n.\r\n")
    assert framer.read_line() == "first"
    assert framer.read_line() == "second"
    assert framer.read_line() is None
    assert framer.done


def test_iteration_yields_all_lines():
    assert list(_framer(b"a\r\nb\r\nc\r\n.\r\n")) == ["a", "b", "c"]


def test_read_after_end_is_protocol_violation():
    framer = _framer(b".\r\nleftover\r\n")
    assert framer.read_line() is None
    with pytest.raises(ProtocolViolation):
        framer.read_line()


def test_does_not_read_past_marker():
    source = io.BytesIO(b"a\r\n.\r\n224 next response\r\n")
    assert list(LineFramer(source)) == ["a"]
    assert source.read() == b"224 next response\r\n"


@pytest.mark.parametrize(
    "stuffed, expected",
    [
        (True, ".hidden"),
        (False, "..hidden"),
    ],
)
def test_double_marker(stuffed, expected):
    framer = _framer(b"..hidden\r\n.\r\n", stuffed=stuffed)
    assert framer.read_line() == expected


def test_stuffed_lone_escaped_marker():
    assert list(_framer(b"..\r\n.\r\n")) == ["."]


def test_single_leading_marker_is_kept():
    assert list(_framer(b".not-stuffed\r\n.\r\n")) == [".not-stuffed"]


def test_marker_with_trailing_space_is_data():
    assert list(_framer(b". \r\n.\r\n")) == [". "]


def test_empty_lines_are_data():
    assert list(_framer(b"\r\n\r\nbody\r\n.\r\n")) == ["", "", "body"]


def test_bare_lf_line_endings():
    assert list(_framer(b"a\nb\n.\n")) == ["a", "b"]


def test_eof_before_marker():
    framer = _framer(b"a\r\nb\r\n")
    assert framer.read_line() == "a"
    assert framer.read_line() == "b"
    with pytest.raises(UnexpectedEndOfResponse) as exc_info:
        framer.read_line()
    # 截断与误用是两种不同的错误
    assert not isinstance(exc_info.value, ProtocolViolation)
    assert framer.done


def test_eof_is_end_for_trusted_streams():
    framer = _framer(b"a\r\nb\r\n", stuffed=False, eof_is_end=True)
    assert list(framer) == ["a", "b"]
    assert framer.done


def test_partial_last_line_is_truncation():
    framer = _framer(b"complete\r\npartial")
    assert framer.read_line() == "complete"
    with pytest.raises(UnexpectedEndOfResponse, match="partial"):
        framer.read_line()
    assert framer.done


def test_partial_last_line_allowed_when_eof_is_end():
    framer = _framer(b"a\r\ntail", stuffed=False, eof_is_end=True)
    assert list(framer) == ["a", "tail"]


def test_read_error_becomes_transport_error():
    framer = LineFramer(BrokenSource())
    with pytest.raises(TransportError, match="timed out"):
        framer.read_line()


def test_drain_discards_remaining_lines():
    source = io.BytesIO(b"a\r\nb\r\nc\r\n.\r\n205 bye\r\n")
    framer = LineFramer(source)
    assert framer.read_line() == "a"
    assert framer.drain() == 2
    assert framer.done
    assert framer.drain() == 0
    assert source.read() == b"205 bye\r\n"


def test_decoding_uses_encoding():
    framer = _framer("Grüße\r\n.\r\n".encode("latin-1"), encoding="latin-1")
    assert framer.read_line() == "Grüße"


def test_undecodable_bytes_are_replaced():
    framer = _framer(b"caf\xe9\r\n.\r\n")
    assert framer.read_line() == "caf�"

# File: src/nntp_core/framing.py
"""
NNTP 核心库 - 分帧模块 (Framing)

把连接上的原始字节流切分为响应：

1. TerminatorWindow: 固定容量的滑动窗口，判断“最近写入的 K 个字节”是否等于结束标记。
2. read_compressed_envelope / open_compressed_stream: 读取压缩信封直到 ".\\r\\n"，
   再通过 zlib 解压为可逐行读取的文本流。
3. LineFramer: 逐行读取多行响应，处理单独一行 "." 的结束标记和 dot-stuffing。

压缩信封与文本行是两套不同的结束规则：前者是追加在二进制数据后的 3 字节后缀，
绝不把负载当作文本解释；后者按行判断，需要反转义。
"""

import io
import logging
import zlib
from collections.abc import Iterator
from typing import BinaryIO, Protocol

from .exceptions import (
    DecompressionError,
    NntpError,
    ProtocolViolation,
    TransportError,
    UnexpectedEndOfResponse,
)
from .protocols import constants

logger = logging.getLogger(__name__)

# 自动识别 zlib 头部或 gzip 头部
ZLIB_AUTO_WBITS = 32 + zlib.MAX_WBITS


class ChunkSource(Protocol):
    """按块读取的字节源。返回 b"" 表示 EOF，读失败时抛出 OSError 或 TransportError。"""

    def read1(self, size: int = -1, /) -> bytes: ...


class LineSource(Protocol):
    """按行读取的字节源。返回 b"" 表示 EOF，读失败时抛出 OSError 或 TransportError。"""

    def readline(self, size: int = -1, /) -> bytes: ...


class TerminatorWindow:
    """固定容量的环形缓冲区，保留最近写入的 capacity 个字节。

    无论结束标记是一次写入还是被拆成多次写入，判断结果都相同。
    容量在构造时确定，之后不再改变。
    """

    __slots__ = ("capacity", "_buffer", "_cursor", "_used")

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._buffer = bytearray(capacity)
        self._cursor = 0  # 下一个写入位置，窗口满时也是最旧字节的位置
        self._used = 0

    def __len__(self) -> int:
        return self._used

    def write(self, data: bytes) -> None:
        """追加字节，只保留最后 capacity 个。"""
        # 比窗口长的部分反正会被覆盖，只需要写入末尾 capacity 个字节
        for byte in data[-self.capacity :]:
            self._buffer[self._cursor] = byte
            self._cursor = (self._cursor + 1) % self.capacity
            if self._used < self.capacity:
                self._used += 1

    def contents(self) -> bytes:
        """按写入顺序返回窗口中保留的字节。"""
        if self._used < self.capacity:
            return bytes(self._buffer[: self._used])
        return bytes(self._buffer[self._cursor :] + self._buffer[: self._cursor])

    def matches(self, terminator: bytes) -> bool:
        """窗口内容是否与 terminator 完全相同 (内容与长度都要相同)。"""
        if len(terminator) != self._used or self._used != self.capacity:
            return False
        for i, expected in enumerate(terminator):
            if self._buffer[(self._cursor + i) % self.capacity] != expected:
                return False
        return True


def read_compressed_envelope(
    source: ChunkSource,
    terminator: bytes = constants.ENVELOPE_TERMINATOR,
    chunk_size: int = constants.READ_CHUNK_SIZE,
) -> io.BytesIO:
    """读取压缩信封，直到见到结束标记。

    每次读到的块都送入 TerminatorWindow 并追加到缓冲区；
    一旦窗口匹配，就从缓冲区末尾去掉结束标记并停止读取。

    Args:
        source: 字节源，必须提供 read1()。
        terminator: 结束标记，默认 ".\\r\\n"。
        chunk_size: 每次读取的最大字节数。

    Returns:
        io.BytesIO: 不含结束标记的压缩数据，已回到起始位置。

    Raises:
        TransportError: 读取失败，或在结束标记之前遇到 EOF。
    """
    window = TerminatorWindow(len(terminator))
    buffer = bytearray()

    while True:
        try:
            chunk = source.read1(chunk_size)
        except NntpError:
            raise
        except OSError as e:
            raise TransportError(f"读取压缩数据失败: {e}") from e

        if not chunk:
            raise TransportError(
                f"压缩数据在结束标记之前中断 (已读取 {len(buffer)} 字节)"
            )

        window.write(chunk)
        buffer += chunk
        if window.matches(terminator):
            # 结束标记可能跨越多个块，因此从整个缓冲区末尾截掉
            del buffer[-len(terminator) :]
            break

    logger.debug(f"压缩信封读取完成: {len(buffer)} 字节")
    return io.BytesIO(bytes(buffer))


class ZlibStreamReader(io.RawIOBase):
    """在可读二进制流之上做流式 zlib 解压的只读 Raw 流。

    通常再包一层 io.BufferedReader 以获得 readline()。
    """

    def __init__(
        self,
        raw: BinaryIO,
        chunk_size: int = constants.READ_CHUNK_SIZE,
        wbits: int = ZLIB_AUTO_WBITS,
    ) -> None:
        super().__init__()
        self._raw = raw
        self._chunk_size = chunk_size
        self._inflater = zlib.decompressobj(wbits)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        while not self._pending:
            if self._inflater.eof:
                return 0
            compressed = self._raw.read(self._chunk_size)
            if not compressed:
                raise DecompressionError("压缩流不完整 (缺少结束块或校验尾)")
            try:
                self._pending = self._inflater.decompress(compressed)
            except zlib.error as e:
                raise DecompressionError(f"解压失败: {e}") from e
            if self._inflater.eof and self._inflater.unused_data:
                logger.debug(
                    f"忽略压缩流之后的 {len(self._inflater.unused_data)} 字节多余数据"
                )

        size = min(len(b), len(self._pending))
        b[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self._raw.close()
        super().close()


def open_compressed_stream(
    source: ChunkSource,
    chunk_size: int = constants.READ_CHUNK_SIZE,
) -> io.BufferedReader:
    """读取压缩信封，并返回解压后的可逐行读取流。

    读取完成时即校验 zlib 头部，头部非法会立即失败；
    数据块损坏或缺少校验尾则在读到相应位置时失败。

    Raises:
        TransportError: 读取信封失败。
        DecompressionError: 数据不是合法的 zlib 流。
    """
    envelope = read_compressed_envelope(source, chunk_size=chunk_size)
    stream = io.BufferedReader(ZlibStreamReader(envelope, chunk_size=chunk_size))
    stream.peek(1)
    return stream


class LineFramer:
    """多行响应的逐行读取器。

    一行内容恰好是单个标记字符时表示响应结束，之后再读会抛出 ProtocolViolation。

    Args:
        source: 按行读取的字节源。
        stuffed: 是否去除 dot-stuffing。为 True 时，以两个标记字符开头的行去掉一个；
            压缩通道中的行不做转义，应传 False。
        eof_is_end: EOF 是否视为正常结束。压缩通道的解压流读完即响应结束，
            应传 True；明文连接上 EOF 表示响应被截断。
        encoding: 行文本的解码字符集。
        marker: 结束标记字符。
    """

    def __init__(
        self,
        source: LineSource,
        stuffed: bool = True,
        eof_is_end: bool = False,
        encoding: str = "utf-8",
        marker: str = constants.MARKER,
    ) -> None:
        self._source = source
        self.stuffed = stuffed
        self.eof_is_end = eof_is_end
        self.encoding = encoding
        self.marker = marker
        self._done = False

    @property
    def done(self) -> bool:
        """响应是否已经结束 (正常结束或被截断)。"""
        return self._done

    def read_line(self) -> str | None:
        """读取下一行逻辑行，响应结束时返回 None。

        Raises:
            ProtocolViolation: 响应已结束后继续读取。
            UnexpectedEndOfResponse: 在结束行之前遇到 EOF。
            TransportError: 底层读取失败。
        """
        if self._done:
            raise ProtocolViolation("多行响应已结束，不能继续读取")

        try:
            raw = self._source.readline()
        except NntpError:
            self._done = True
            raise
        except OSError as e:
            self._done = True
            raise TransportError(f"读取响应行失败: {e}") from e

        if not raw:
            self._done = True
            if self.eof_is_end:
                return None
            raise UnexpectedEndOfResponse("连接在多行响应结束之前关闭")

        line = raw.decode(self.encoding, errors="replace")
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        elif not self.eof_is_end:
            # 没有换行符说明这一行在 EOF 处被截断
            self._done = True
            raise UnexpectedEndOfResponse(f"响应行在结束之前被截断: {line!r}")

        if line == self.marker:
            self._done = True
            return None
        if self.stuffed and line.startswith(self.marker * 2):
            line = line[1:]
        return line

    def __iter__(self) -> Iterator[str]:
        while (line := self.read_line()) is not None:
            yield line

    def drain(self) -> int:
        """丢弃剩余的行直到响应结束，返回丢弃的行数。"""
        count = 0
        while not self._done and self.read_line() is not None:
            count += 1
        return count

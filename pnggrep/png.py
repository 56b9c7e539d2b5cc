from dataclasses import dataclass, field
from types import MappingProxyType
from typing import BinaryIO, Iterator, List, Optional
import io
import struct

from .errors import (
    HeaderLengthError,
    InvalidBitDepthError,
    InvalidColorTypeError,
    InvalidDimensionError,
    InvalidMethodError,
    MissingHeaderError,
    ShortReadError,
    SignatureError,
)
from .logger import trace


# 137 80 78 71 13 10 26 10
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

IHDR_TYPE = b"IHDR"
TEXT_TYPE = b"tEXt"
IHDR_LENGTH = 13

# 2 << 30 이하까지 허용 (PNG 명세상 상한은 2^31 - 1)
MAX_DIMENSION = 2 << 30

# 색상 타입별 허용 비트 깊이
COLOR_TYPE_DEPTHS = MappingProxyType({
    0: (1, 2, 4, 8, 16),
    2: (8, 16),
    3: (1, 2, 4, 8),
    4: (8, 16),
    6: (8, 16),
})

# 큰 length 값으로 한 번에 거대한 버퍼를 잡지 않도록 나눠서 읽음
_READ_BLOCK_SIZE = 64 * 1024


@dataclass(frozen=True)
class Chunk:
    """PNG 청크 (CRC32 체크섬 포함, 검증하지 않음)"""
    length: int
    type: bytes
    data: bytes
    checksum: bytes

    @property
    def type_name(self) -> str:
        return self.type.decode("latin-1")


@dataclass(frozen=True)
class ImageHeader:
    """IHDR 청크에서 읽은 헤더 정보"""
    width: int
    height: int
    bit_depth: int
    color_type: int
    compression: int
    filter_method: int
    interlace: int


@dataclass
class PngDimensions:
    """PNG 이미지의 크기 정보"""
    width: int
    height: int


@dataclass
class PNG:
    """검증이 끝난 PNG 이미지. 헤더 필드와 전체 청크 목록을 가집니다."""
    width: int
    height: int
    bit_depth: int
    color_type: int
    compression: int
    filter_method: int
    interlace: int
    chunks: List[Chunk] = field(default_factory=list)

    @classmethod
    def decode(cls, stream: BinaryIO) -> 'PNG':
        """스트림에서 PNG를 읽어 인스턴스를 생성합니다."""
        return decode(stream)

    @classmethod
    def from_buffer(cls, buffer: bytes) -> 'PNG':
        """버퍼로부터 PNG 인스턴스를 생성합니다."""
        return decode(io.BytesIO(buffer))

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    @property
    def header(self) -> ImageHeader:
        return ImageHeader(
            width=self.width,
            height=self.height,
            bit_depth=self.bit_depth,
            color_type=self.color_type,
            compression=self.compression,
            filter_method=self.filter_method,
            interlace=self.interlace,
        )

    def get_dimensions(self) -> PngDimensions:
        """PNG 이미지의 너비와 높이를 반환합니다."""
        return PngDimensions(width=self.width, height=self.height)

    def text_chunks(self) -> List[str]:
        """
        tEXt 청크의 내용을 파일 순서대로 반환합니다.

        UTF-8로 디코딩하며 잘못된 바이트는 U+FFFD로 바뀝니다.
        """
        return [c.data.decode("utf-8", errors="replace") for c in self.chunks if c.type == TEXT_TYPE]


def _read_full(stream: BinaryIO, size: int) -> bytes:
    """size 바이트를 읽거나 스트림 끝까지 읽습니다."""
    parts = []
    remaining = size
    while remaining > 0:
        part = stream.read(min(remaining, _READ_BLOCK_SIZE))
        if not part:
            break
        parts.append(part)
        remaining -= len(part)
    return b"".join(parts)


def _read_field(stream: BinaryIO, size: int, name: str) -> bytes:
    buf = _read_full(stream, size)
    if len(buf) != size:
        raise ShortReadError(name, size, len(buf))
    return buf


def read_chunk(stream: BinaryIO) -> Optional[Chunk]:
    """
    스트림에서 청크 하나를 읽습니다.

    청크 경계에서 스트림이 끝나면 None을 반환합니다.
    필드 중간에서 끝나면 ShortReadError가 발생합니다.
    """
    # Length, 4 bytes (big endian)
    buf = _read_full(stream, 4)
    if not buf:
        return None
    if len(buf) != 4:
        raise ShortReadError("length", 4, len(buf))
    length = struct.unpack('>I', buf)[0]

    # Type, 4 bytes
    chunk_type = _read_field(stream, 4, "type")

    # Data
    data = _read_field(stream, length, "data")

    # CRC32
    checksum = _read_field(stream, 4, "checksum")

    return Chunk(length=length, type=chunk_type, data=data, checksum=checksum)


def iter_chunks(stream: BinaryIO) -> Iterator[Chunk]:
    """스트림이 끝날 때까지 청크를 순서대로 반환합니다."""
    while True:
        chunk = read_chunk(stream)
        if chunk is None:
            return
        yield chunk


def parse_ihdr(chunk: Chunk) -> ImageHeader:
    """
    IHDR 청크를 검증하고 헤더 필드를 반환합니다.

    Width:              4 bytes (big endian)
    Height:             4 bytes (big endian)
    Bit depth:          1 byte
    Color type:         1 byte
    Compression method: 1 byte
    Filter method:      1 byte
    Interlace method:   1 byte

    검사는 위 순서대로 진행되며 처음 실패한 검사의 오류만 발생합니다.
    """
    if chunk.type != IHDR_TYPE:
        raise MissingHeaderError(chunk.type)
    if chunk.length != IHDR_LENGTH:
        raise HeaderLengthError(IHDR_LENGTH, chunk.length)

    data = chunk.data

    # 0은 유효하지 않은 값
    width = struct.unpack('>I', data[0:4])[0]
    if width == 0 or width > MAX_DIMENSION:
        raise InvalidDimensionError("width", width, MAX_DIMENSION)

    height = struct.unpack('>I', data[4:8])[0]
    if height == 0 or height > MAX_DIMENSION:
        raise InvalidDimensionError("height", height, MAX_DIMENSION)

    bit_depth = data[8]
    color_type = data[9]
    allowed = COLOR_TYPE_DEPTHS.get(color_type)
    if allowed is None:
        raise InvalidColorTypeError(color_type, tuple(COLOR_TYPE_DEPTHS))
    if bit_depth not in allowed:
        raise InvalidBitDepthError(color_type, bit_depth, allowed)

    compression = data[10]
    if compression != 0:
        raise InvalidMethodError("compression", compression, (0,))

    filter_method = data[11]
    if filter_method != 0:
        raise InvalidMethodError("filter", filter_method, (0,))

    # 0: 인터레이스 없음, 1: Adam7
    interlace = data[12]
    if interlace not in (0, 1):
        raise InvalidMethodError("interlace", interlace, (0, 1))

    return ImageHeader(
        width=width,
        height=height,
        bit_depth=bit_depth,
        color_type=color_type,
        compression=compression,
        filter_method=filter_method,
        interlace=interlace,
    )


def decode(stream: BinaryIO) -> PNG:
    """스트림 전체를 읽어 검증된 PNG를 반환합니다."""
    signature = _read_full(stream, len(PNG_SIGNATURE))
    if signature != PNG_SIGNATURE:
        raise SignatureError(signature, PNG_SIGNATURE)
    trace("PNG signature OK")

    chunks: List[Chunk] = []
    for chunk in iter_chunks(stream):
        trace(f"Read chunk {chunk.type_name} ({chunk.length} bytes)")
        chunks.append(chunk)

    if not chunks:
        raise MissingHeaderError()
    header = parse_ihdr(chunks[0])
    trace(f"IHDR: {header}")

    return PNG(
        width=header.width,
        height=header.height,
        bit_depth=header.bit_depth,
        color_type=header.color_type,
        compression=header.compression,
        filter_method=header.filter_method,
        interlace=header.interlace,
        chunks=chunks,
    )


def decode_file(path: str) -> PNG:
    """파일을 열어 PNG로 디코딩합니다."""
    with open(path, 'rb') as f:
        return decode(f)

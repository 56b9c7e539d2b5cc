from dataclasses import dataclass
from typing import Optional, Tuple


class PngError(Exception):
    """PNG 디코딩 중 발생하는 모든 오류의 기본 클래스"""
    pass


class PngFormatError(PngError, ValueError):
    """PNG 형식 검증 실패"""
    pass


@dataclass
class ShortReadError(PngError):
    """필드를 읽는 도중 스트림이 끝난 경우"""
    field: str
    expected: int
    actual: int

    def __str__(self) -> str:
        return f"short read in chunk {self.field} - expected {self.expected}, got {self.actual}"


@dataclass
class SignatureError(PngFormatError):
    received: bytes
    expected: bytes

    def __str__(self) -> str:
        return f"wrong PNG header. Got {self.received.hex()} - Expected {self.expected.hex()}"


@dataclass
class MissingHeaderError(PngFormatError):
    """첫 번째 청크가 IHDR이 아니거나 청크가 하나도 없는 경우"""
    found: Optional[bytes] = None

    def __str__(self) -> str:
        if self.found is None:
            return "missing IHDR chunk: image contains no chunks"
        return f"missing IHDR chunk: first chunk is {self.found!r}"


@dataclass
class HeaderLengthError(PngFormatError):
    expected: int
    actual: int

    def __str__(self) -> str:
        return f"invalid IHDR length: got {self.actual} - expected {self.expected}"


@dataclass
class InvalidDimensionError(PngFormatError):
    field: str
    value: int
    limit: int

    def __str__(self) -> str:
        return f"invalid {self.field} in IHDR expected 0 < {self.field} <= {self.limit}, got: {self.value}"


@dataclass
class InvalidColorTypeError(PngFormatError):
    value: int
    allowed: Tuple[int, ...]

    def __str__(self) -> str:
        return f"image with invalid color type - expected one of {list(self.allowed)}, got {self.value}"


@dataclass
class InvalidBitDepthError(PngFormatError):
    color_type: int
    value: int
    allowed: Tuple[int, ...]

    def __str__(self) -> str:
        return (
            f"image with color type {self.color_type} and wrong depth - "
            f"expected one of {list(self.allowed)}, got {self.value}"
        )


@dataclass
class InvalidMethodError(PngFormatError):
    """압축/필터/인터레이스 방식 값이 정의되지 않은 경우"""
    field: str
    value: int
    allowed: Tuple[int, ...]

    def __str__(self) -> str:
        choices = " or ".join(str(v) for v in self.allowed)
        return f"invalid {self.field} method - expected {choices} - got {self.value}"

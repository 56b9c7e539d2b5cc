__version__ = "0.1.0"

from .errors import (
    HeaderLengthError,
    InvalidBitDepthError,
    InvalidColorTypeError,
    InvalidDimensionError,
    InvalidMethodError,
    MissingHeaderError,
    PngError,
    PngFormatError,
    ShortReadError,
    SignatureError,
)
from .png import PNG, Chunk, ImageHeader, PngDimensions, decode, decode_file, read_chunk
from .grep import GrepResult, compile_pattern, grep_file, grep_png

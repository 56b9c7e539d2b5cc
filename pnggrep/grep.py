import re
from dataclasses import dataclass, field
from typing import BinaryIO, List, Pattern

from .logger import trace
from .png import decode


@dataclass
class GrepResult:
    filename: str
    found: bool
    matches: List[str] = field(default_factory=list)


def compile_pattern(pattern: str, ignore_case: bool = False) -> Pattern[str]:
    """정규식을 컴파일합니다. 잘못된 패턴이면 re.error가 발생합니다."""
    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(pattern, flags)


def grep_png(stream: BinaryIO, regex: Pattern[str]) -> List[str]:
    """정규식과 일치하는 tEXt 청크를 파일 순서대로 반환합니다."""
    png = decode(stream)
    return [text for text in png.text_chunks() if regex.search(text)]


def grep_file(filename: str, regex: Pattern[str]) -> GrepResult:
    """파일 하나를 검색합니다. 디코딩 오류는 그대로 전달됩니다."""
    with open(filename, 'rb') as f:
        matches = grep_png(f, regex)
    trace(f"{filename}: {len(matches)} matching text chunk(s)")
    return GrepResult(filename=filename, found=bool(matches), matches=matches)

import os
import sys
from datetime import datetime


def _debug_enabled() -> bool:
    return os.environ.get("PNGGREP_DEBUG", "0").lower() in ("1", "true")


def write_log(message: str, level: str = "INFO", echo: bool = True) -> None:
    """로그 메시지를 파일과 콘솔에 기록합니다."""
    log_file = os.environ.get('LOG_FILE')

    if log_file:
        timestamp = datetime.now().isoformat()
        log_message = f"[{timestamp}] {level} {message}"

        with open(log_file, 'a', encoding='utf-8') as f:
            f.write(log_message + "\n")

    # stderr로 출력
    if echo:
        print(message, file=sys.stderr)


def trace(message: str) -> None:
    """추적 로그를 기록합니다. PNGGREP_DEBUG가 설정된 경우에만 stderr에 출력합니다."""
    write_log(message, "TRACE", echo=_debug_enabled())


def error(message: str) -> None:
    """오류 로그를 기록합니다."""
    write_log(message, "ERROR")

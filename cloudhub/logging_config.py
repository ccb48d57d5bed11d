# cloudhub/logging_config.py
import logging
from pathlib import Path
from typing import Optional


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """
    루트 로거에 콘솔 핸들러(및 선택적으로 파일 핸들러)를 한 번만 설정합니다.

    Args:
        level: 로그 레벨 이름 (예: "DEBUG", "INFO"). 대소문자를 구분하지 않습니다.
        logfile: 로그를 함께 기록할 파일 경로. 비어 있으면 파일 핸들러를 붙이지 않습니다.
    """
    root = logging.getLogger()
    if root.handlers:
        # 테스트나 서버 재시작 시 핸들러가 중복으로 붙는 것을 막습니다.
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

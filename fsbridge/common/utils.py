import os
from pathlib import Path
from rich.console import Console
from loguru import logger

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "console",
    "logger",
    "configure_logging",
    "decode_path",
    "to_posix",
    "read_json_file",
    "write_json_file",
]

# Per-user directory for logs and the recent folders list
DEFAULT_CONFIG_DIR = Path(os.getenv("FSBRIDGE_HOME", Path.home() / ".fsbridge"))
console = Console()

log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS zz}</green> | <level>{level: <8}</level> | <yellow>Line {line: >4} ({file}):</yellow> <b>{message}</b>"


def configure_logging(log_dir: str | Path = DEFAULT_CONFIG_DIR) -> None:
    """Route loguru output to the debug/info log files under ``log_dir``.

    The default stderr sink is removed so that log lines do not interleave
    with the interactive prompt.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        log_path / "debug.log",
        level="DEBUG",
        format=log_format,
        colorize=False,
        backtrace=True,
        diagnose=True,
    )
    logger.add(
        log_path / "info.log",
        level="INFO",
        format=log_format,
        colorize=False,
        backtrace=True,
        diagnose=True,
    )


def decode_path(path: str | bytes) -> str:
    """Watchdog may hand out bytes paths; everything downstream wants str."""
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="replace")
    return path


def to_posix(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


def read_json_file(path: Path) -> str | None:
    """Read a JSON document as text.

    Returns:
        The stripped file content, or None when the file is missing or empty.
    """
    if not path.exists():
        return None
    content = path.read_text(encoding="utf-8").strip()
    return content or None


def write_json_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

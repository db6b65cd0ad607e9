import sys
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_LOG_FILE = "logs/bot.log"

_CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> <level>{level:<8}</level> | <level>{message}</level>"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}"

_DEFAULT_CONSUMERS: list[dict[str, Any]] = [{"type": "console"}, {"type": "file"}]


def log_file_path(config: dict[str, Any], data_dir: str) -> Path:
    """Relative paths land under the bot's data directory."""
    path = Path(config.get("path", DEFAULT_LOG_FILE)).expanduser()
    if not path.is_absolute():
        path = Path(data_dir).expanduser() / path
    return path


def _add_console(level: str, config: dict[str, Any], data_dir: str) -> str:
    # diagnose=False keeps access and pool tokens out of rendered tracebacks
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, diagnose=False)
    return f"console (stderr, {level})"


def _add_file(level: str, config: dict[str, Any], data_dir: str) -> str:
    path = log_file_path(config, data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(path),
        level=level,
        format=_FILE_FORMAT,
        rotation=config.get("rotation", "10 MB"),
        retention=config.get("retention", 3),
        diagnose=False,
    )
    return f"file ({path}, {level})"


_SINKS = {
    "console": _add_console,
    "file": _add_file,
}


def setup_logging(
    level: str = "INFO",
    consumers: list[dict[str, Any]] | None = None,
    *,
    data_dir: str = ".",
) -> list[str]:
    """Replace loguru's default sink with the configured consumers.

    Each consumer is a ``{"type": "console" | "file", ...}`` mapping with an
    optional per-sink ``level``; file consumers also take ``path``,
    ``rotation`` and ``retention``. Returns one description per sink for the
    startup banner.
    """
    logger.remove()

    descriptions: list[str] = []
    unknown: list[str] = []
    for config in consumers if consumers is not None else _DEFAULT_CONSUMERS:
        sink_type = config.get("type", "")
        add_sink = _SINKS.get(sink_type)
        if add_sink is None:
            unknown.append(repr(sink_type))
            continue
        sink_level = str(config.get("level", level)).upper()
        descriptions.append(add_sink(sink_level, config, data_dir))

    # Reported after registration so the warning reaches a real sink
    for sink_type in unknown:
        logger.warning(f"Unknown log consumer type: {sink_type}")
    return descriptions

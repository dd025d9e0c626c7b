"""vendorsync 日志

所有日志写 stderr，stdout 留给生成的替换源配置，便于直接重定向到 config.toml。
VENDORSYNC_LOG_JSON=1 时每条记录输出一行 JSON，供 CI 日志采集。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

TEXT_FORMAT = "%(levelname)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """单行 JSON: ts / level / logger / msg，带异常时附 exc"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def verbosity_to_level(verbose: int, quiet: bool) -> str:
    """-v / -q 换算为级别名，-q 优先"""
    if quiet:
        return "WARNING"
    return "DEBUG" if verbose > 0 else "INFO"


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """重新配置根日志器，重复调用不会叠加 handler"""
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)


def reset_logging() -> None:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

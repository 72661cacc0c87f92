"""
Logging — настройка логирования для хоста калькулятора

Модули пакета пишут в logging.getLogger(__name__) и ничего не настраивают.
Хост вызывает setup_logging один раз при старте.

Форматы:
- "json": одна JSON-строка на запись (timestamp, level, logger, message
  и дополнительные поля session_id / key / error_kind, если заданы)
- "text": человекочитаемый формат
"""

import json
import logging
from datetime import datetime, timezone
from typing import Final

EXTRA_FIELDS: Final[tuple[str, ...]] = ("session_id", "key", "error_kind")


class JSONFormatter(logging.Formatter):
    """Форматирование записей лога в JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """
    Настройка корневого логгера.

    Args:
        level: Имя уровня ("DEBUG", "INFO", ...); неизвестное имя → INFO
        fmt: "json" или "text"

    Returns:
        Добавленный handler
    """
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler

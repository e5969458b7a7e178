"""
Logging configuration for the console

Logs never go to the terminal: the terminal belongs to the status line and
operator prompts, so all records are written to a rotating file.
"""

import logging
import logging.handlers
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Record attributes set by MissionLogAdapter
CONTEXT_FIELDS = ('mode', 'mission_id')

# Libraries that log every telemetry frame at INFO/DEBUG
QUIET_LOGGERS = ('asyncio', 'mavsdk', 'grpc')

PLAIN_FORMAT = '%(asctime)s - %(levelname)s - %(threadName)s - %(name)s - %(message)s'

class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with thread and mission context"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value:
                entry[name] = value

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__ if exc_type else 'Unknown',
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(entry)

def _rotating_handler(log_path: Path, level: int, structured: bool) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    # 10MB per file, 5 backups
    handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding='utf-8'
    )
    handler.setLevel(level)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler

def setup_logging(log_level: str = "INFO", structured: bool = False, log_file: Optional[str] = None) -> Optional[Path]:
    """
    Route all logging to a rotating file

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL); unknown names mean INFO
        structured: Write JSON lines instead of plain text
        log_file: Log file path; None discards records

    Returns:
        Path of the log file, if one was configured
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    # Drop any console handler installed before us
    for handler in list(root.handlers):
        root.removeHandler(handler)

    log_path = Path(log_file) if log_file else None
    if log_path is not None:
        root.addHandler(_rotating_handler(log_path, level, structured))
    else:
        root.addHandler(logging.NullHandler())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging initialized at {logging.getLevelName(level)} level")
    return log_path

class MissionLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the control mode and tags records with the mission id"""

    def __init__(self, logger: logging.Logger, mode: str, mission_id: Optional[str] = None):
        super().__init__(logger, {'mode': mode, 'mission_id': mission_id})

    def process(self, msg, kwargs):
        context = {k: v for k, v in self.extra.items() if v}
        kwargs['extra'] = {**kwargs.get('extra', {}), **context}
        return f"[{self.extra['mode']}] {msg}", kwargs

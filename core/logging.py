"""
Centralized logging with rotating, compressed file handlers.

`get_logger(name)` returns a `StructuredLogger` that accepts keyword context:

    logger.info("Course created", course_id=course.id, owner_id=user.id)

In JSON mode the context becomes fields of the record; in text mode it is
appended to the message as `key=value` pairs.
"""
import atexit
import gzip
import logging
import logging.handlers
import os
import re
import shutil
import sys
import threading
from pathlib import Path
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from core.config import settings


class ComponentFilter(logging.Filter):
    """Ensure every record carries a `component` attribute."""

    def __init__(self, default_component: str = "app"):
        super().__init__()
        self.default_component = default_component

    def filter(self, record):
        if not hasattr(record, "component"):
            name = record.name
            if name in ("uvicorn", "uvicorn.access", "httpx", "access"):
                record.component = "http"
            elif name.startswith("sqlalchemy") or name == "database":
                record.component = "database"
            else:
                record.component = self.default_component
        return True


class SecurityFilter(logging.Filter):
    """Remove credentials from log records."""

    SENSITIVE_KEYS = {
        "password", "token", "secret", "key", "api_key",
        "authorization", "credential", "jwt", "bearer",
    }

    _LONG_KEY = re.compile(r"\b[A-Za-z0-9]{32,}\b")
    _BEARER = re.compile(r"Bearer\s+[A-Za-z0-9\-_=]+\.[A-Za-z0-9\-_=]+\.[A-Za-z0-9\-_=]+")
    _URL_PASSWORD = re.compile(r"://[^:/]+:[^@]+@")

    def filter(self, record):
        if isinstance(record.msg, str):
            record.msg = self._sanitize_message(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = self._sanitize_value(record.args)
            else:
                record.args = tuple(self._sanitize_value(arg) for arg in record.args)
        for attr in list(vars(record)):
            if any(sensitive in attr.lower() for sensitive in self.SENSITIVE_KEYS):
                setattr(record, attr, "[REDACTED]")
        return True

    def _sanitize_message(self, message: str) -> str:
        message = self._LONG_KEY.sub("[REDACTED]", message)
        message = self._BEARER.sub("Bearer [REDACTED]", message)
        message = self._URL_PASSWORD.sub("://[REDACTED]:[REDACTED]@", message)
        return message

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._sanitize_message(value)
        if isinstance(value, dict):
            return {
                k: "[REDACTED]" if any(s in str(k).lower() for s in self.SENSITIVE_KEYS) else v
                for k, v in value.items()
            }
        return value


class CompressedRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """Size based rotating handler that gzips the rotated file."""

    def __init__(self, *args, **kwargs):
        self.compress_logs = kwargs.pop("compress_logs", settings.log_compression)
        super().__init__(*args, **kwargs)

    def doRollover(self):
        super().doRollover()

        if not (self.compress_logs and self.backupCount > 0):
            return

        backup_file = f"{self.baseFilename}.1"
        if not os.path.exists(backup_file):
            return

        try:
            # Shift older archives up by one before writing the newest
            for i in range(self.backupCount - 1, 0, -1):
                older = f"{self.baseFilename}.{i}.gz"
                newer = f"{self.baseFilename}.{i + 1}.gz"
                if os.path.exists(older):
                    if os.path.exists(newer):
                        os.remove(newer)
                    os.rename(older, newer)
            with open(backup_file, "rb") as f_in:
                with gzip.open(f"{backup_file}.gz", "wb") as f_out:
                    shutil.copyfileobj(f_in, f_out)
            os.remove(backup_file)
        except OSError as e:
            # Keep the uncompressed backup
            print(f"Warning: Failed to compress log file {backup_file}: {e}", file=sys.stderr)


class StructuredLogger:
    """A logger wrapper that accepts structured keyword context."""

    def __init__(self, name: str, logger: logging.Logger):
        self.name = name
        self._logger = logger

    def _log(self, level: int, msg: str, *args, **kwargs):
        exc_info = kwargs.pop("exc_info", False)
        extra = dict(kwargs.pop("extra", {}))
        extra.setdefault("component", self.name)

        if kwargs:
            if settings.log_format == "json":
                extra.update(kwargs)
            else:
                context = ", ".join(f"{key}={value}" for key, value in kwargs.items())
                msg = f"{msg} [{context}]"

        self._logger.log(level, msg, *args, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self._log(logging.CRITICAL, msg, *args, **kwargs)


class CentralizedLogManager:
    """Singleton that owns the root handlers and per-component log files."""

    _instance = None
    _lock = threading.Lock()
    _initialized = False

    # component -> (log file setting, level, logger names)
    COMPONENTS = {
        "security": ("security_log_file", logging.INFO, ["security", "auth"]),
        "ai": ("ai_log_file", logging.INFO, ["ai_manager", "chatbot", "google_genai"]),
        "database": ("database_log_file", logging.WARNING, ["database", "sqlalchemy.engine"]),
        "access": ("access_log_file", logging.INFO, ["uvicorn.access", "access", "middleware"]),
    }

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return
            self._loggers: Dict[str, StructuredLogger] = {}
            self._handlers: Dict[str, logging.Handler] = {}
            self._log_directory = Path(settings.log_directory)
            if settings.enable_file_logging:
                self._log_directory.mkdir(parents=True, exist_ok=True)
            self._setup_root_logger()
            self._setup_component_loggers()
            CentralizedLogManager._initialized = True

    def _create_formatter(self, include_component: bool = True) -> logging.Formatter:
        if settings.log_format == "json":
            fmt = "%(asctime)s %(name)s %(levelname)s %(message)s"
            if include_component:
                fmt = "%(asctime)s %(name)s %(levelname)s %(component)s %(message)s"
            return jsonlogger.JsonFormatter(fmt=fmt, datefmt="%Y-%m-%dT%H:%M:%S")

        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        if include_component:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - [%(component)s] - %(message)s"
        return logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def _create_rotating_handler(self, log_file: str, level: int = logging.INFO) -> logging.Handler:
        handler = CompressedRotatingFileHandler(
            filename=str(self._log_directory / log_file),
            maxBytes=settings.log_file_max_size_mb * 1024 * 1024,
            backupCount=settings.log_file_backup_count,
            compress_logs=settings.log_compression,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.addFilter(ComponentFilter())
        handler.addFilter(SecurityFilter())
        handler.setFormatter(self._create_formatter(include_component=True))
        return handler

    def _create_console_handler(self) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
        handler.addFilter(ComponentFilter())
        handler.addFilter(SecurityFilter())
        handler.setFormatter(self._create_formatter(include_component=False))
        return handler

    def _setup_root_logger(self):
        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

        console_handler = self._create_console_handler()
        root_logger.addHandler(console_handler)
        self._handlers["console"] = console_handler

        if settings.enable_file_logging:
            app_handler = self._create_rotating_handler(settings.app_log_file)
            root_logger.addHandler(app_handler)
            self._handlers["app"] = app_handler

            error_handler = self._create_rotating_handler(settings.error_log_file, logging.ERROR)
            root_logger.addHandler(error_handler)
            self._handlers["error"] = error_handler

    def _setup_component_loggers(self):
        if not settings.enable_file_logging:
            return

        for component, (file_setting, level, logger_names) in self.COMPONENTS.items():
            if component == "database" and settings.enable_sql_logging:
                level = logging.INFO
            handler = self._create_rotating_handler(getattr(settings, file_setting), level)
            self._handlers[component] = handler

            for logger_name in logger_names:
                logger = logging.getLogger(logger_name)
                logger.addHandler(handler)
                logger.setLevel(level)

    def get_logger(self, name: str) -> StructuredLogger:
        if name not in self._loggers:
            self._loggers[name] = StructuredLogger(name, logging.getLogger(name))
        return self._loggers[name]

    def shutdown(self):
        """Close every handler this manager created."""
        for handler_name, handler in self._handlers.items():
            try:
                handler.close()
            except OSError as e:
                print(f"Error closing handler {handler_name}: {e}", file=sys.stderr)
        self._handlers.clear()
        self._loggers.clear()
        CentralizedLogManager._initialized = False
        CentralizedLogManager._instance = None


_log_manager = None


def setup_logging() -> CentralizedLogManager:
    """Setup centralized logging system."""
    global _log_manager
    if _log_manager is None:
        _log_manager = CentralizedLogManager()
    return _log_manager


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return setup_logging().get_logger(name)


def shutdown_logging():
    """Shutdown logging system gracefully."""
    global _log_manager
    if _log_manager is not None:
        _log_manager.shutdown()
        _log_manager = None


# Pre-configured logger instances for common components
app_logger = get_logger("app")
security_logger = get_logger("security")
database_logger = get_logger("database")

atexit.register(shutdown_logging)

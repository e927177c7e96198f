import dataclasses
import json
import logging
import logging.config
import time
from collections.abc import Mapping
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from logging import Logger
from pathlib import Path
from typing import Any, Optional, cast

from pydantic import BaseModel, Field, ValidationError

_DEFAULT_LEVEL = logging.INFO
_DEBUG_ENABLED = False
_DEBUG_MODULES: set[str] = set()
_CONFIGURED = False
_RUN_ID: str | None = None
_MODE: str | None = None

# ---------------------------------------------------------------------
# Canonical log categories
# ---------------------------------------------------------------------

CATEGORY_SUBSCRIPTION = "subscription_lifecycle"
CATEGORY_UNIVERSE = "universe_membership"
CATEGORY_HEARTBEAT = "health_heartbeat"


# ---------------------------------------------------------------------
# Profile schema
# ---------------------------------------------------------------------

class ConsoleHandlerConfig(BaseModel):
    enabled: bool = True
    level: str | None = None


class FileHandlerConfig(BaseModel):
    enabled: bool = False
    level: str | None = None
    path: str = "artifacts/logs/{mode}-{run_id}.jsonl"


class HandlersConfig(BaseModel):
    console: ConsoleHandlerConfig = Field(default_factory=ConsoleHandlerConfig)
    file: FileHandlerConfig = Field(default_factory=FileHandlerConfig)


class FormatConfig(BaseModel):
    json_lines: bool = Field(True, alias="json")


class DebugConfig(BaseModel):
    enabled: bool = False
    modules: list[str] = Field(default_factory=list)


class LoggingProfile(BaseModel):
    level: str = "INFO"
    handlers: HandlersConfig = Field(default_factory=HandlersConfig)
    format: FormatConfig = Field(default_factory=FormatConfig)
    debug: DebugConfig = Field(default_factory=DebugConfig)


def _merge_profile(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = _merge_profile(merged[k], v)
        else:
            merged[k] = v
    return merged


def _build_dict_config(profile: LoggingProfile, *, run_id: str | None, mode: str | None) -> dict[str, Any]:
    level_name = profile.level.upper()
    formatter_name = "json" if profile.format.json_lines else "standard"

    handlers: dict[str, Any] = {}
    root_handlers: list[str] = []

    console = profile.handlers.console
    if console.enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": (console.level or level_name).upper(),
            "formatter": formatter_name,
            "filters": ["context"],
            "stream": "ext://sys.stdout",
        }
        root_handlers.append("console")

    file_cfg = profile.handlers.file
    if file_cfg.enabled:
        path = Path(file_cfg.path.format(run_id=run_id or "run", mode=mode or "default"))
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": (file_cfg.level or level_name).upper(),
            "formatter": formatter_name,
            "filters": ["context"],
            "filename": str(path),
            "encoding": "utf-8",
        }
        root_handlers.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "context": {"()": "feed_engine.utils.logger.ContextFilter"},
        },
        "formatters": {
            "json": {"()": "feed_engine.utils.logger.JsonFormatter"},
            "standard": {
                "()": "feed_engine.utils.logger.UtcFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s %(context)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            },
        },
        "handlers": handlers,
        "root": {
            "level": level_name,
            "handlers": root_handlers,
        },
    }


def init_logging(
    config_path: str = "configs/logging.json",
    *,
    run_id: str | None = None,
    mode: str | None = None,
) -> None:
    """
    Configure process-wide logging from a profile file.

    The file holds `profiles` (name -> partial profile) and an optional
    `active_profile`. The selected profile is layered over `default`.
    """
    global _DEFAULT_LEVEL, _DEBUG_ENABLED, _DEBUG_MODULES, _CONFIGURED, _RUN_ID, _MODE

    path = Path(config_path)
    if not path.is_absolute():
        path = Path.cwd() / path
    with path.open("r", encoding="utf-8") as f:
        cfg = json.load(f)

    profiles = cfg.get("profiles", {})
    if not isinstance(profiles, dict):
        raise TypeError("logging.json 'profiles' must be a dict")

    profile_name = str(mode or cfg.get("active_profile") or "default")
    if profile_name not in profiles:
        raise KeyError(f"logging profile not found: {profile_name}")

    base_profile = profiles.get("default", {})
    if not isinstance(base_profile, dict):
        base_profile = {}

    try:
        profile = LoggingProfile.model_validate(_merge_profile(base_profile, profiles.get(profile_name, {})))
    except ValidationError as exc:
        raise ValueError(f"invalid logging profile {profile_name!r}: {exc}") from exc

    _DEFAULT_LEVEL = getattr(logging, profile.level.upper(), logging.INFO)
    _DEBUG_ENABLED = profile.debug.enabled
    _DEBUG_MODULES = {str(x) for x in profile.debug.modules}

    _RUN_ID = run_id
    _MODE = mode or profile_name

    logging.config.dictConfig(_build_dict_config(profile, run_id=run_id, mode=_MODE))

    _CONFIGURED = True
    get_logger.cache_clear()
    for logger in logging.root.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and logger.level != logging.NOTSET:
            logger.setLevel(logging.NOTSET)


class ContextFilter(logging.Filter):
    """
    Guarantees LogRecord has a `context` attribute and, once configured,
    stamps it with the run id and mode.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = getattr(record, "context", None)

        if not _CONFIGURED:
            if not hasattr(record, "context"):
                setattr(record, "context", None)
            return True

        if ctx is None:
            ctx = {}
            setattr(record, "context", ctx)
        elif not isinstance(ctx, dict):
            ctx = {"_context": safe_jsonable(ctx)}
            setattr(record, "context", ctx)

        if _RUN_ID is not None and "run_id" not in ctx:
            ctx["run_id"] = _RUN_ID
        if _MODE is not None and "mode" not in ctx:
            ctx["mode"] = _MODE

        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": dt.isoformat(timespec="milliseconds"),
            "ts_ms": int(record.created * 1000),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        context = cast(Optional[dict[str, Any]], getattr(record, "context", None))

        if isinstance(context, dict) and context:
            if "category" in context:
                payload["category"] = safe_jsonable(context["category"])
                context = dict(context)
                context.pop("category", None)
            payload["context"] = safe_jsonable(context)

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        try:
            return json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            fallback = {
                "ts": payload.get("ts"),
                "ts_ms": payload.get("ts_ms"),
                "level": payload.get("level"),
                "logger": payload.get("logger"),
                "event": payload.get("event"),
                "context": repr(payload.get("context")),
                "format_error": repr(exc),
            }
            return json.dumps(fallback, ensure_ascii=False)


class UtcFormatter(logging.Formatter):
    converter = time.gmtime


@lru_cache(None)
def get_logger(name: str = "feed_engine") -> Logger:
    logger = logging.getLogger(name)
    if not _CONFIGURED:
        logger.setLevel(logging.NOTSET)
    return logger


def safe_jsonable(x: Any) -> Any:
    if x is None or isinstance(x, (str, int, float, bool)):
        return x
    if isinstance(x, datetime):
        if x.tzinfo is None:
            return x.replace(tzinfo=timezone.utc).isoformat()
        return x.astimezone(timezone.utc).isoformat()
    if isinstance(x, Path):
        return str(x)
    if isinstance(x, Enum):
        value = safe_jsonable(getattr(x, "value", None))
        return value if value is not None else str(x)
    if dataclasses.is_dataclass(x) and not isinstance(x, type):
        # symbols and configs render through their own __str__
        if type(x).__str__ is not object.__str__:
            return str(x)
        try:
            return safe_jsonable(asdict(cast(Any, x)))
        except (TypeError, RecursionError):
            return repr(x)
    if dataclasses.is_dataclass(x) and isinstance(x, type):
        return f"{x.__module__}.{x.__qualname__}"
    if isinstance(x, Mapping):
        out: dict[str, Any] = {}
        for k, v in x.items():
            key = safe_jsonable(k)
            if not isinstance(key, str):
                key = repr(key)
            out[key] = safe_jsonable(v)
        return out
    if isinstance(x, (list, tuple, set, frozenset)):
        return [safe_jsonable(v) for v in x]
    return str(x)


def _sanitize_context(context: dict[str, Any]) -> dict[str, Any]:
    cleaned = safe_jsonable(context)
    if isinstance(cleaned, dict):
        return cleaned
    return {"_context": cleaned}


def _debug_module_matches(logger_name: str, module: str) -> bool:
    module = module.strip()
    if not module:
        return False
    if logger_name == module or logger_name.startswith(module + "."):
        return True
    return module in logger_name.split(".")


def log_debug(logger: Logger, msg: str, **context):
    if not _DEBUG_ENABLED:
        return
    if _DEBUG_MODULES:
        if not any(_debug_module_matches(logger.name, m) for m in _DEBUG_MODULES):
            return
    logger.debug(msg, extra={"context": _sanitize_context(context)})


def log_info(logger: Logger, msg: str, **context):
    logger.info(msg, extra={"context": _sanitize_context(context)})


def log_warn(logger: Logger, msg: str, **context):
    logger.warning(msg, extra={"context": _sanitize_context(context)})


def log_exception(logger: Logger, msg: str, **context):
    logger.exception(msg, extra={"context": _sanitize_context(context)})

# ---------------------------------------------------------------------
# Domain-specific logging helpers
# ---------------------------------------------------------------------

def log_subscription(logger: Logger, msg: str, **context):
    """
    Internal feed decisions.
    Expected context: symbol, action, resolution, requested_resolution
    """
    context["category"] = CATEGORY_SUBSCRIPTION
    logger.info(msg, extra={"context": _sanitize_context(context)})


def log_universe(logger: Logger, msg: str, **context):
    """
    Universe creation and membership changes.
    Expected context: universe, symbol, members
    """
    context["category"] = CATEGORY_UNIVERSE
    logger.info(msg, extra={"context": _sanitize_context(context)})


def log_heartbeat(logger: Logger, msg: str, **context):
    """
    System health / liveness logs.
    Expected context: component, subscriptions, internal_feeds
    """
    context["category"] = CATEGORY_HEARTBEAT
    logger.info(msg, extra={"context": _sanitize_context(context)})

# =============================================================================
# Structured Logging Setup (JSONL format)
# =============================================================================

import json
import os
import sys
import traceback
from contextvars import ContextVar
from pathlib import Path

import platformdirs
from loguru import logger

APP_NAME = "quickfuzz"
LOG_LEVEL_ENV = "QUICKFUZZ_LOG_LEVEL"

# Correlation ID for one dispatch
trace_id_var: ContextVar[str] = ContextVar('trace_id', default=None)


def json_sink(message):
    """JSONL sink - writes to stderr."""
    record = message.record
    log_entry = {
        "timestamp": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "level": record["level"].name.lower(),
        "component": record["function"],
        "operation": record["extra"].get("operation", "unknown"),
        "operation_status": record["extra"].get("status", None),
        "trace_id": record["extra"].get("trace_id") or trace_id_var.get(),
        "message": record["message"],
        "context": {k: v for k, v in record["extra"].items()
                   if k not in ("operation", "status", "trace_id", "metrics")},
        "metrics": record["extra"].get("metrics", {}),
        "error": None
    }

    if record["exception"]:
        exc_type, exc_value, exc_tb = record["exception"]
        tb_lines = []
        if exc_tb:
            tb_lines = traceback.format_tb(exc_tb)

        log_entry["error"] = {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value) if exc_value else "Unknown error",
            "traceback_lines": tb_lines
        }

    sys.stderr.write(json.dumps(log_entry, default=str) + "\n")


def setup_logger(console_level: str | None = None):
    """
    Configure Loguru for machine-readable JSONL output.

    The stderr sink shares the terminal with fzf and the editor, so it is
    only installed when a level is requested (argument or QUICKFUZZ_LOG_LEVEL).
    The rotating file sink is always installed.
    """
    logger.remove()

    console_level = console_level or os.environ.get(LOG_LEVEL_ENV)
    if console_level:
        logger.add(
            json_sink,
            level=console_level.upper()
        )

    # Linux: ~/.local/state/quickfuzz/log/
    # macOS: ~/Library/Logs/quickfuzz/
    try:
        log_dir = Path(platformdirs.user_log_dir(
            appname=APP_NAME,
            ensure_exists=True
        ))
    except OSError as e:
        logger.warning(
            "Log directory unavailable, file logging disabled",
            operation="setup_logger",
            status="degraded",
            error=str(e)
        )
        return logger

    logger.add(
        str(log_dir / "quickfuzz.jsonl"),
        format="{message}",
        serialize=True,
        rotation="10 MB",
        retention="7 days",
        compression="gz",
        level="DEBUG"
    )

    return logger

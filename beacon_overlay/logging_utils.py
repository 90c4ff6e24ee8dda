from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_ROOT = "BeaconOverlay"
LOG_DIR_ENV_VAR = "BEACON_OVERLAY_LOG_DIR"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_logs_dir(log_dir_name: str = "BeaconOverlay") -> Path:
    """
    Resolve the directory to store beacon overlay logs.

    Strategy:
    - Use BEACON_OVERLAY_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home)
    candidates.append(cache_home)
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_logging(
    *,
    debug: bool = False,
    log_dir: Optional[Path] = None,
    filename: str = "beacon-overlay.log",
    retention: int = 5,
) -> logging.Logger:
    """Attach a rotating file handler to the ``BeaconOverlay`` logger tree (idempotent)."""
    logger = logging.getLogger(LOGGER_ROOT)
    logger.setLevel(resolve_log_level(debug))
    target_dir = log_dir if log_dir is not None else resolve_logs_dir()
    target_path = (target_dir / filename).resolve()
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and Path(existing.baseFilename).resolve() == target_path:
            return logger
    handler = build_rotating_file_handler(
        target_dir,
        filename,
        retention=retention,
        formatter=logging.Formatter(LOG_FORMAT),
    )
    logger.addHandler(handler)
    return logger

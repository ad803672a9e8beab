# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_commit_gate

"""
Loguru setup shared by every module.

Hooks run inside the user's terminal, so stderr only shows warnings and
above unless told otherwise. The audit file sink is added once the git
directory is known.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FILE_NAME = "commit-gate.log"

_STDERR_FORMAT = "<level>{level: <8}</level> | <level>{message}</level>"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def _ensure_log_directory(log_dir: Path) -> None:
    if not log_dir.exists():
        log_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str = "WARNING", log_dir: Optional[Path] = None) -> None:
    """
    Resets loguru sinks.

    Args:
        level: Minimum level printed to stderr.
        log_dir: If given, a rotating DEBUG-level file sink is written there.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=_STDERR_FORMAT)

    if log_dir is not None:
        _ensure_log_directory(log_dir)
        logger.add(
            log_dir / LOG_FILE_NAME,
            level="DEBUG",
            format=_FILE_FORMAT,
            rotation="1 MB",
            retention=3,
        )


configure_logging()

__all__ = ["logger", "configure_logging"]

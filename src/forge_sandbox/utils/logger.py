# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

import os
import sys
from pathlib import Path

from loguru import logger

__all__ = ["logger", "set_stderr_level"]

STDERR_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> | {extra}"
)

# Remove default handler
logger.remove()

# Sink 1: Stdout/Stderr (Human-readable)
_stderr_sink_id = logger.add(
    sys.stderr,
    level=os.environ.get("FORGE_SANDBOX_LOG_LEVEL", "INFO"),
    format=STDERR_FORMAT,
)

# Ensure logs directory exists
log_path = Path("logs")
log_path.mkdir(parents=True, exist_ok=True)

# Sink 2: File (JSON, Rotation, Retention)
logger.add(
    log_path / "app.log",
    rotation="500 MB",
    retention="10 days",
    serialize=True,
    enqueue=True,
    level="INFO",
)


def set_stderr_level(level: str) -> None:
    """Replace the stderr sink with one at ``level``; the file sink is untouched."""
    global _stderr_sink_id
    logger.remove(_stderr_sink_id)
    _stderr_sink_id = logger.add(sys.stderr, level=level.upper(), format=STDERR_FORMAT)

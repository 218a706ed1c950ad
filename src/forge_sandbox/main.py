# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

import uvicorn

from forge_sandbox.api import create_app
from forge_sandbox.config import ForgeSandboxConfig
from forge_sandbox.utils.logger import set_stderr_level


def main() -> None:
    """Entry point for the HTTP server."""
    config = ForgeSandboxConfig()
    set_stderr_level(config.log_level)
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":  # pragma: no cover
    main()

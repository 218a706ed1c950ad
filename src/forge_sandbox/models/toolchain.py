# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

from pydantic import BaseModel


class ToolchainOutput(BaseModel):
    """Represents one completed forge invocation.

    Attributes:
        command: The argv that was executed.
        stdout: Standard output captured from the process.
        stderr: Standard error captured from the process.
        exit_code: The exit code of the process (0 for success).
        duration: Wall-clock duration of the invocation in seconds.
    """

    command: list[str]
    stdout: str
    stderr: str
    exit_code: int
    duration: float

# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

"""Exception hierarchy for forge-sandbox."""


class ForgeSandboxError(Exception):
    """Base class for all errors raised by forge-sandbox."""


class ValidationError(ForgeSandboxError):
    """A request is missing required fields. Mapped to HTTP 400."""


class ProvisionError(ForgeSandboxError):
    """The workspace could not be created from the template or written to."""


class ToolchainError(ForgeSandboxError):
    """The forge subprocess failed, wrote to stderr or could not be started."""

    def __init__(self, message: str, phase: str | None = None, exit_code: int | None = None):
        super().__init__(message)
        self.phase = phase
        self.exit_code = exit_code


class ToolchainTimeout(ToolchainError):
    """The forge subprocess exceeded its deadline and was killed."""


class ArtifactNotFound(ForgeSandboxError):
    """The expected build artifact is absent or incomplete after a build."""

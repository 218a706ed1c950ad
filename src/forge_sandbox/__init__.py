# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

"""
forge-sandbox
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import ForgeSandboxConfig
from .exceptions import (
    ArtifactNotFound,
    ForgeSandboxError,
    ProvisionError,
    ToolchainError,
    ToolchainTimeout,
    ValidationError,
)
from .models import DeployArtifact, TestRecord, TestSuiteResult, ToolchainOutput
from .service import ForgeSandbox, ForgeSandboxAsync
from .toolchain import ForgeRunner
from .workspace import Workspace, WorkspaceProvisioner

__all__ = [
    "ArtifactNotFound",
    "DeployArtifact",
    "ForgeRunner",
    "ForgeSandbox",
    "ForgeSandboxAsync",
    "ForgeSandboxConfig",
    "ForgeSandboxError",
    "ProvisionError",
    "TestRecord",
    "TestSuiteResult",
    "ToolchainError",
    "ToolchainOutput",
    "ToolchainTimeout",
    "ValidationError",
    "Workspace",
    "WorkspaceProvisioner",
]

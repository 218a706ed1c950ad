# src/forge_sandbox/models/__init__.py

"""
Data models for workspaces, toolchain runs and HTTP payloads.
"""

from .api import (
    CompileAndTestRequest,
    CompileAndTestResponse,
    CompileForDeployRequest,
    CompileForDeployResponse,
    ErrorResponse,
)
from .results import DeployArtifact, TestRecord, TestSuiteResult
from .toolchain import ToolchainOutput

__all__ = [
    "CompileAndTestRequest",
    "CompileAndTestResponse",
    "CompileForDeployRequest",
    "CompileForDeployResponse",
    "DeployArtifact",
    "ErrorResponse",
    "TestRecord",
    "TestSuiteResult",
    "ToolchainOutput",
]

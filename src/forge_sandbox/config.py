# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from forge_sandbox.remappings import DEFAULT_REMAPPINGS, parse_remapping, validate_order


class ForgeSandboxConfig(BaseSettings):
    """
    Configuration for the forge sandbox service.
    """

    # Workspace provisioning
    template_dir: Path = Path("template-workspace/v4-template")
    temp_root: Path = Path("workspaces")
    retention: Literal["retain", "delete"] = "retain"
    remappings: list[str] = [str(r) for r in DEFAULT_REMAPPINGS]

    # Toolchain
    forge_binary: str = "forge"
    build_timeout: float | None = 300.0
    test_timeout: float | None = 300.0
    # forge prints warnings to stderr even on success; strict mode fails on any of it
    strict_stderr: bool = True
    test_verbosity: str = "-vv"

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="FORGE_SANDBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("remappings")
    @classmethod
    def _check_remappings(cls, value: list[str]) -> list[str]:
        validate_order([parse_remapping(entry) for entry in value])
        return value

    @field_validator("build_timeout", "test_timeout")
    @classmethod
    def _check_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive or unset")
        return value

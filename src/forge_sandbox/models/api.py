# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .results import TestSuiteResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompileAndTestRequest(_CamelModel):
    """Body of ``POST /api/compile-and-test``.

    Fields are optional at the schema level so that a missing field is
    answered with ``400 {error}`` instead of FastAPI's 422.
    """

    code: str | None = None
    test_code: str | None = None


class CompileForDeployRequest(_CamelModel):
    """Body of ``POST /api/compile-for-deploy``."""

    code: str | None = None


class CompileAndTestResponse(_CamelModel):
    success: bool = True
    compile_out: str = Field(..., description="stdout of `forge build`.")
    test_out: str = Field(..., description="stdout of `forge test`.")
    results: list[TestSuiteResult] = Field(default_factory=list)


class CompileForDeployResponse(_CamelModel):
    success: bool = True
    contract_name: str
    abi: list[dict[str, Any]]
    bytecode: str = Field(..., description="Creation bytecode as a 0x-prefixed hex string.")
    compile_out: str


class ErrorResponse(_CamelModel):
    success: bool = False
    error: str
